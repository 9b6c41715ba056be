# Copyright (c) Facebook, Inc. and its affiliates. All Rights Reserved.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

import time
import logging
import warnings
import numpy as np
import adaspsa.common.typing as tp
from adaspsa.common import errors
from adaspsa.functions.base import Target, Iteration, as_target
from . import spsa
from .options import Options
from .utils import ScratchPool

logger = logging.getLogger(__name__)
_IterationCallBack = tp.Callable[["Optimizer", Iteration], None]


class Optimizer:
    """Maximizes black-box functions of a vector of floats, updating the vector in place.

    The optimizer owns the buffers and the random state used by the runs, so that
    consecutive runs do not allocate anything new as long as the dimension is unchanged.
    An optimizer must not run several optimizations concurrently.

    Parameters
    ----------
    random_state: int, RandomState or None
        seed or random state for the perturbations. Setting a seed makes
        runs deterministic (as long as the function is deterministic too).

    Example
    -------
    .. code-block:: python

        optimizer = Optimizer(random_state=12)
        point = np.zeros(2)
        optimizer.optimize(lambda x: 1 - (x[0] + 1) ** 2 - (x[1] - 1) ** 2, point)
        # point is now close to [-1, 1]
    """

    def __init__(self, random_state: tp.Seed = None) -> None:
        self.random_state = (
            random_state if isinstance(random_state, np.random.RandomState) else np.random.RandomState(random_state)
        )
        self.pool = ScratchPool()
        self._callbacks: tp.Dict[str, tp.List[_IterationCallBack]] = {}
        self._run: tp.Optional[spsa.SPSARun] = None
        self.duration = 0.0

    def register_callback(self, name: str, callback: _IterationCallBack) -> None:
        """Add a callback method called at the end of each iteration, with the optimizer
        and the Iteration record as arguments (after the target own hook).
        This can be useful for custom logging, early stopping or learning rate schedules.

        Parameters
        ----------
        name: str
            name of the event to register the callback for (only :code:`iteration`)
        callback: callable
            a callable taking the optimizer and the Iteration record
        """
        if name != "iteration":
            raise errors.AdaSPSAValueError(f'Only "iteration" callbacks are supported (not {name})')
        self._callbacks.setdefault(name, []).append(callback)

    def remove_all_callbacks(self) -> None:
        """Removes all registered callables"""
        self._callbacks = {}

    # statistics of the current (or last) run

    @property
    def num_evaluations(self) -> int:
        """int: Number of calls to the target evaluation."""
        return 0 if self._run is None else self._run.num_evaluations

    @property
    def num_iterations(self) -> int:
        """int: Number of completed iterations of the main loop."""
        return 0 if self._run is None else self._run.num_iterations

    @property
    def num_recoveries(self) -> int:
        """int: Number of restarts from the best point."""
        return 0 if self._run is None else self._run.improvement_fails

    @property
    def best_value(self) -> float:
        """float: Best bias-corrected average value recorded."""
        return float("nan") if self._run is None else self._run.y_best

    @property
    def learning_rate(self) -> float:
        """float: Current learning rate."""
        return float("nan") if self._run is None else self._run.lr

    @property
    def stop_reason(self) -> str:
        """str: Why the last run stopped (completed, infeasible_start, non_finite_gradient
        or early_stopping), or an empty string while running.
        """
        return "" if self._run is None else self._run.stop_reason

    def _on_iteration(self, target: Target, iteration: Iteration) -> None:
        target.on_iteration(iteration)
        for callback in self._callbacks.get("iteration", []):
            callback(self, iteration)

    def optimize(
        self,
        target: tp.Union[Target, tp.EvaluationFunction],
        point: tp.ArrayLike,
        options: tp.Optional[Options] = None,
    ) -> tp.Any:
        """Maximizes the target, starting from the provided point.

        Parameters
        ----------
        target: Target or callable
            the function to maximize, returning NaN for infeasible points
        point: np.ndarray or list of floats
            the initial point, updated in place with the optimized point.
            It is filled with NaN if the function is undefined at the initial point.
        options: Options
            settings of the optimization (defaults to :code:`Options()`)

        Returns
        -------
        the optimized point: the provided point itself if it is a list or a writeable
        float array, or a new float array otherwise (tuples, read-only or integer arrays)

        Raises
        ------
        errors.OutOfBoundsError
            if the optimization gets stuck in a region where the function is undefined
        """
        options = Options() if options is None else options
        target = as_target(target)
        x = _as_work_array(point)
        if not x.size:
            raise errors.AdaSPSAValueError("No variable to optimize in this point.")
        if not np.all(np.isfinite(x)):
            warnings.warn(f"Initial point holds non-finite values: {x}", errors.BadPointWarning)
        self.pool.reset(x.size)
        run = spsa.SPSARun(
            target,
            x,
            self.pool,
            options,
            self.random_state,
            on_iteration=lambda iteration: self._on_iteration(target, iteration),
        )
        self._run = run
        start = time.time()
        try:
            run.run()
        finally:
            self.duration = time.time() - start
            if x is not point and _is_mutable(point):
                point[:] = x.tolist() if isinstance(point, list) else x  # type: ignore
        if run.stop_reason == spsa.INFEASIBLE_START:
            warnings.warn(
                f"Function {target!r} is undefined at the initial point, returning NaN", errors.InfeasibleStartWarning
            )
        logger.info(
            "Optimization %s after %s iterations (%s evaluations, %s recoveries, %.3fs): best value %s",
            run.stop_reason,
            run.num_iterations,
            run.num_evaluations,
            run.improvement_fails,
            self.duration,
            run.y_best,
        )
        return point if _is_mutable(point) else x

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(dimension={self.pool.size}, stop_reason={self.stop_reason!r})"


def _is_mutable(point: tp.Any) -> bool:
    """Whether the optimized values can be written back into the point without loss"""
    if isinstance(point, np.ndarray):
        return bool(point.flags.writeable) and np.issubdtype(point.dtype, np.floating)
    return hasattr(point, "__setitem__")


def _as_work_array(point: tp.ArrayLike) -> np.ndarray:
    """Returns the point itself if it can be updated in place by the optimizer, or a copy"""
    if isinstance(point, np.ndarray) and point.dtype == np.float64 and point.flags.writeable:
        x = point
    else:
        x = np.array(point, dtype=float)
    if x.ndim != 1:
        raise errors.AdaSPSAValueError(f"Point must be 1-dimensional (got shape {x.shape})")
    return x


def optimize(
    target: tp.Union[Target, tp.EvaluationFunction],
    point: tp.ArrayLike,
    options: tp.Optional[Options] = None,
    random_state: tp.Seed = None,
) -> tp.Any:
    """Maximizes the target starting from the point, using a new Optimizer.
    See :code:`Optimizer.optimize` for details.
    """
    return Optimizer(random_state=random_state).optimize(target, point, options)
