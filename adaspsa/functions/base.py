# Copyright (c) Facebook, Inc. and its affiliates. All Rights Reserved.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

import math
import numpy as np
import adaspsa.common.typing as tp
from adaspsa.common import errors

if tp.TYPE_CHECKING:  # pragma: no cover
    from . import wrappers


class Iteration:
    """Record handed to the iteration hooks once per iteration of the main loop.

    Parameters
    ----------
    iteration: int
        index of the iteration (starting at 0)
    point: np.ndarray
        current point (read-only view, do not copy it around without :code:`np.array(point)`,
        it keeps being updated by the optimizer)
    gradient: np.ndarray
        current smoothed gradient estimate (read-only view)
    learning_rate: float
        learning rate that will be used for the next iteration. It can be overridden by
        setting the attribute.
    """

    def __init__(self, iteration: int, point: np.ndarray, gradient: np.ndarray, learning_rate: float) -> None:
        self.iteration = iteration
        self.point = _readonly(point)
        self.gradient = _readonly(gradient)
        self._learning_rate = float(learning_rate)

    @property
    def learning_rate(self) -> float:
        return self._learning_rate

    @learning_rate.setter
    def learning_rate(self, value: float) -> None:
        value = float(value)
        if not (value > 0 and math.isfinite(value)):
            raise errors.AdaSPSAValueError(f"Learning rate must be strictly positive and finite (got {value})")
        self._learning_rate = value

    def __repr__(self) -> str:
        return f"Iteration(iteration={self.iteration}, learning_rate={self._learning_rate})"


def _readonly(array: np.ndarray) -> np.ndarray:
    view = array.view()
    view.flags.writeable = False
    return view


class Target:
    """Function to maximize.

    Subclasses must implement :code:`evaluate`, which returns :code:`float("nan")` for
    points which are out of bounds / infeasible. It can hold an internal state (eg. a random
    state for noisy functions) and is called several times per iteration.

    :code:`on_iteration` is called once after each iteration of the optimizer main loop,
    and does nothing by default.
    """

    def evaluate(self, point: np.ndarray) -> float:
        raise NotImplementedError(f"{self.__class__.__name__} must implement evaluate")

    def on_iteration(self, iteration: Iteration) -> None:
        pass

    def __call__(self, point: tp.ArrayLike) -> float:
        return self.evaluate(np.asarray(point, dtype=float))

    # pylint: disable=import-outside-toplevel
    def oversample(self, count: int) -> "wrappers.Oversample":
        """Evaluates the function count + 1 times and returns the average,
        for smoothing particularly noisy functions.
        """
        from .wrappers import Oversample

        return Oversample(self, count)

    def output_noise(self, amplitude: float, random_state: tp.Seed = None) -> "wrappers.OutputNoise":
        """Adds uniform noise to the output of the function"""
        from .wrappers import OutputNoise

        return OutputNoise(self, amplitude, random_state=random_state)

    def input_noise(self, amplitude: float, random_state: tp.Seed = None) -> "wrappers.InputNoise":
        """Blurs the input domain of the function so as to smooth out narrow basins"""
        from .wrappers import InputNoise

        return InputNoise(self, amplitude, random_state=random_state)


class FunctionTarget(Target):
    """Target wrapping a plain callable taking a 1d array and returning a float"""

    def __init__(self, function: tp.EvaluationFunction) -> None:
        assert callable(function)
        self.function = function

    def evaluate(self, point: np.ndarray) -> float:
        return float(self.function(point))

    def __repr__(self) -> str:
        name = getattr(self.function, "__name__", self.function.__class__.__name__)
        return f"FunctionTarget({name})"


def as_target(obj: tp.Union[Target, tp.EvaluationFunction]) -> Target:
    """Returns the target itself, or wraps a callable into a :code:`FunctionTarget`"""
    if isinstance(obj, Target):
        return obj
    if callable(obj):
        return FunctionTarget(obj)
    raise TypeError(f"Expected a Target or a callable, but got {obj!r} (type: {type(obj)})")
