# Copyright (c) Meta Platforms, Inc. and affiliates.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

import time
import logging
from pathlib import Path
import numpy as np
import adaspsa as sp
import adaspsa.common.typing as tp
from adaspsa.functions import corefuncs
from . import callbacks


def test_iteration_logger(caplog: tp.Any) -> None:
    optimizer = sp.Optimizer(random_state=12)
    logger = logging.getLogger("adaspsa.test")
    optimizer.register_callback(
        "iteration", callbacks.IterationLogger(logger=logger, log_level=logging.INFO, log_interval_iterations=10)
    )
    with caplog.at_level(logging.INFO, logger="adaspsa.test"):
        optimizer.optimize(corefuncs.paraboloid, np.zeros(2), sp.Options(iterations=25))
    records = [r for r in caplog.records if r.name == "adaspsa.test"]
    assert len(records) == 3  # iterations 0, 10 and 20
    assert records[0].getMessage().startswith("After 1 iterations")


def test_trajectory_logger(tmp_path: Path) -> None:
    filepath = tmp_path / "logs" / "trajectory.json"
    logger = callbacks.TrajectoryLogger(filepath, with_gradient=True)
    optimizer = sp.Optimizer(random_state=12)
    optimizer.register_callback("iteration", logger)
    point = np.zeros(3)
    optimizer.optimize(corefuncs.paraboloid, point, sp.Options(iterations=5))
    data = logger.load()
    assert len(data) == 5
    assert [d["#iteration"] for d in data] == list(range(5))
    assert set(data[0]) == {
        "#session",
        "#iteration",
        "#num-evaluations",
        "#num-recoveries",
        "#learning-rate",
        "#best-value",
        "point",
        "gradient",
    }
    points = logger.load_points()
    assert points.shape == (5, 3)
    # points are recorded before finalization, which may keep the last one
    assert np.max(np.abs(points[-1] - point)) < 1
    # appending by default, replacing otherwise
    optimizer.optimize(corefuncs.paraboloid, np.zeros(3), sp.Options(iterations=2))
    assert len(logger.load()) == 7
    logger = callbacks.TrajectoryLogger(filepath, append=False)
    assert not logger.load()


def test_early_stopping() -> None:
    optimizer = sp.Optimizer(random_state=12)
    stopper = callbacks.EarlyStopping(lambda opt, it: it.iteration >= 9)
    optimizer.register_callback("iteration", stopper)
    point = np.zeros(2)
    optimizer.optimize(corefuncs.paraboloid, point)
    assert optimizer.num_iterations == 10
    assert optimizer.stop_reason == "early_stopping"
    assert not np.any(np.isnan(point))


def test_early_stopping_timer() -> None:
    optimizer = sp.Optimizer(random_state=12)
    optimizer.register_callback("iteration", callbacks.EarlyStopping.timer(0.05))
    start = time.time()
    optimizer.optimize(corefuncs.paraboloid, np.zeros(2), sp.Options(iterations=10 ** 7))
    assert optimizer.stop_reason == "early_stopping"
    assert time.time() - start < 30


class _ValueStub:
    def __init__(self) -> None:
        self.best_value = 0.0


def test_value_improvement_criterion() -> None:
    criterion = callbacks._ValueImprovementToleranceCriterion(2)
    optimizer: tp.Any = _ValueStub()
    record = sp.Iteration(0, np.zeros(2), np.zeros(2), 1.0)
    assert not criterion(optimizer, record)
    assert not criterion(optimizer, record)
    optimizer.best_value = 1.0
    assert not criterion(optimizer, record)
    assert not criterion(optimizer, record)
    assert not criterion(optimizer, record)
    assert criterion(optimizer, record)
