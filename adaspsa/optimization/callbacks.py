# Copyright (c) Meta Platforms, Inc. and affiliates.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

import json
import time
import warnings
import datetime
import logging
from pathlib import Path
import numpy as np
import adaspsa.common.typing as tp
from adaspsa.common import errors
from adaspsa.functions.base import Iteration
from . import optimizer as optlib

global_logger = logging.getLogger(__name__)

# -------------------------------------------------------------------------------------


class IterationLogger:
    """Logger to register as "iteration" callback in an optimizer, for logging
    the progress regularly.

    Parameters
    ----------
    logger:
        given logger that callback will use to log
    log_level:
        log level that logger will write to
    log_interval_iterations: int
        max number of iterations before performing another log
    log_interval_seconds:
        max number of seconds before performing another log
    """

    def __init__(
        self,
        *,
        logger: logging.Logger = global_logger,
        log_level: int = logging.INFO,
        log_interval_iterations: int = 100,
        log_interval_seconds: float = 60.0,
    ) -> None:
        assert log_interval_iterations > 0
        assert log_interval_seconds > 0
        self._logger = logger
        self._log_level = log_level
        self._log_interval_iterations = int(log_interval_iterations)
        self._log_interval_seconds = log_interval_seconds
        self._next_iteration = 0
        self._next_time = time.time() + log_interval_seconds

    def __call__(self, optimizer: "optlib.Optimizer", iteration: Iteration) -> None:
        if time.time() >= self._next_time or iteration.iteration >= self._next_iteration:
            self._next_time = time.time() + self._log_interval_seconds
            self._next_iteration = iteration.iteration + self._log_interval_iterations
            self._logger.log(
                self._log_level,
                "After %s iterations (%s evaluations), best value is %s with learning rate %s",
                iteration.iteration + 1,
                optimizer.num_evaluations,
                optimizer.best_value,
                iteration.learning_rate,
            )


# -------------------------------------------------------------------------------------


class TrajectoryLogger:
    """Logs the point and run information into a file at each iteration,
    as one json dict per line.

    Parameters
    ----------
    filepath: str or pathlib.Path
        the path to dump data to
    append: bool
        whether to append the file (otherwise it replaces it)
    with_gradient: bool
        whether to also record the gradient estimate

    Example
    -------

    .. code-block:: python

        logger = TrajectoryLogger(filepath)
        optimizer.register_callback("iteration", logger)
        optimizer.optimize(func, point)
        list_of_dict_of_data = logger.load()

    Note
    ----
    Arrays are converted to lists
    """

    def __init__(self, filepath: tp.PathLike, append: bool = True, with_gradient: bool = False) -> None:
        self._session = datetime.datetime.now().strftime("%y-%m-%d %H:%M:%S")
        self._filepath = Path(filepath)
        self._with_gradient = with_gradient
        if self._filepath.exists() and not append:
            self._filepath.unlink()
        self._filepath.parent.mkdir(exist_ok=True, parents=True)

    def __call__(self, optimizer: "optlib.Optimizer", iteration: Iteration) -> None:
        data: tp.Dict[str, tp.Any] = {
            "#session": self._session,
            "#iteration": iteration.iteration,
            "#num-evaluations": optimizer.num_evaluations,
            "#num-recoveries": optimizer.num_recoveries,
            "#learning-rate": iteration.learning_rate,
            "#best-value": optimizer.best_value,
            "point": iteration.point.tolist(),
        }
        if self._with_gradient:
            data["gradient"] = iteration.gradient.tolist()
        try:  # avoid bugging as much as possible
            with self._filepath.open("a") as f:
                f.write(json.dumps(data) + "\n")
        except Exception as e:  # pylint: disable=broad-except
            warnings.warn(f"Failing to json data: {e}")

    def load(self) -> tp.List[tp.Dict[str, tp.Any]]:
        """Loads data from the log file"""
        data: tp.List[tp.Dict[str, tp.Any]] = []
        if self._filepath.exists():
            with self._filepath.open("r") as f:
                for line in f.readlines():
                    data.append(json.loads(line))
        return data

    def load_points(self) -> np.ndarray:
        """Trajectory of the points, as a 2d array (iterations x dimension)"""
        return np.array([d["point"] for d in self.load()], dtype=float)


# -------------------------------------------------------------------------------------

_Criterion = tp.Callable[["optlib.Optimizer", Iteration], bool]


class EarlyStopping:
    """Callback for stopping the main loop of the optimizer before all iterations
    are used. The point then goes through the usual finalization.

    Parameters
    ----------
    stopping_criterion: func(optimizer, iteration) -> bool
        function that takes the current optimizer and iteration record as input and
        returns True if the optimization must be stopped

    Example
    -------
    In the following code, the optimization stops after 100 iterations without improvement

    >>> optimizer.register_callback("iteration", EarlyStopping.no_improvement_stopper(100))
    >>> optimizer.optimize(func, point)
    """

    def __init__(self, stopping_criterion: _Criterion) -> None:
        self.stopping_criterion = stopping_criterion

    def __call__(self, optimizer: "optlib.Optimizer", iteration: Iteration) -> None:
        if self.stopping_criterion(optimizer, iteration):
            raise errors.EarlyStopping(f"Early stopping criterion is reached at iteration {iteration.iteration}")

    @classmethod
    def timer(cls, max_duration: float) -> "EarlyStopping":
        """Early stop when max_duration seconds has been reached (from the first iteration)"""
        return cls(_DurationCriterion(max_duration))

    @classmethod
    def no_improvement_stopper(cls, tolerance_window: int) -> "EarlyStopping":
        """Early stop when the best value did not improve during tolerance_window iterations"""
        return cls(_ValueImprovementToleranceCriterion(tolerance_window))


class _DurationCriterion:
    def __init__(self, max_duration: float) -> None:
        self._start = float("inf")
        self._max_duration = max_duration

    def __call__(self, optimizer: "optlib.Optimizer", iteration: Iteration) -> bool:
        if np.isinf(self._start):
            self._start = time.time()
        return time.time() > self._start + self._max_duration


class _ValueImprovementToleranceCriterion:
    def __init__(self, tolerance_window: int) -> None:
        self._tolerance_window: int = tolerance_window
        self._best_value: tp.Optional[float] = None
        self._tolerance_count: int = 0

    def __call__(self, optimizer: "optlib.Optimizer", iteration: Iteration) -> bool:
        best_value = optimizer.best_value
        if self._best_value is None:
            self._best_value = best_value
            return False
        if best_value <= self._best_value:
            self._tolerance_count += 1
        else:
            self._tolerance_count = 0
            self._best_value = best_value
        return self._tolerance_count > self._tolerance_window
