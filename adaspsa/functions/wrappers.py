# Copyright (c) Facebook, Inc. and its affiliates. All Rights Reserved.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

import numpy as np
import adaspsa.common.typing as tp
from .base import Target, Iteration, as_target


def _random_state(seed: tp.Seed) -> np.random.RandomState:
    if isinstance(seed, np.random.RandomState):
        return seed
    return np.random.RandomState(seed)


class _Wrapper(Target):
    """Decorator owning an inner target, to which the iteration hook is forwarded"""

    def __init__(self, source: tp.Union[Target, tp.EvaluationFunction]) -> None:
        self.source = as_target(source)

    def on_iteration(self, iteration: Iteration) -> None:
        self.source.on_iteration(iteration)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.source!r})"


class Oversample(_Wrapper):
    """Calls the underlying function count + 1 times and returns the average of the outputs.
    Used for smoothing particularly noisy functions.

    Parameters
    ----------
    source: Target or callable
        the function to oversample
    count: int
        number of additional evaluations for each call
    """

    def __init__(self, source: tp.Union[Target, tp.EvaluationFunction], count: int) -> None:
        super().__init__(source)
        if count < 0:
            raise ValueError(f"count must be non-negative (got {count})")
        self.count = int(count)

    def evaluate(self, point: np.ndarray) -> float:
        num = self.count + 1
        total = 0.0
        for _ in range(num):
            total += self.source.evaluate(point)
        return total / num


class OutputNoise(_Wrapper):
    """Adds uniform noise in [-amplitude, amplitude) to the output of the function

    Parameters
    ----------
    source: Target or callable
        the function to make noisy
    amplitude: float
        amplitude of the noise
    random_state: int, RandomState or None
        seed or random state of the noise
    """

    def __init__(
        self,
        source: tp.Union[Target, tp.EvaluationFunction],
        amplitude: float,
        random_state: tp.Seed = None,
    ) -> None:
        super().__init__(source)
        self.amplitude = float(amplitude)
        self.random_state = _random_state(random_state)

    def evaluate(self, point: np.ndarray) -> float:
        return self.source.evaluate(point) + self.random_state.uniform(-self.amplitude, self.amplitude)


class InputNoise(_Wrapper):
    """Evaluates the function at point + delta and point - delta for a uniform random delta
    in [-amplitude, amplitude) and returns the average.

    Some functions have many local maxima, causing SPSA and similar methods to
    run into bad solutions. Blurring the input domain this way makes the optimizer explore
    neighboring inputs instead of getting stuck in a basin. If the noise is high enough
    and there is a general trend of the basins towards the best one, this converges
    to the locally best basin.

    Parameters
    ----------
    source: Target or callable
        the function to blur
    amplitude: float
        maximum absolute value of each coordinate of delta
    random_state: int, RandomState or None
        seed or random state of the noise
    """

    def __init__(
        self,
        source: tp.Union[Target, tp.EvaluationFunction],
        amplitude: float,
        random_state: tp.Seed = None,
    ) -> None:
        super().__init__(source)
        self.amplitude = float(amplitude)
        self.random_state = _random_state(random_state)
        self._buffer = np.zeros(0)

    def evaluate(self, point: np.ndarray) -> float:
        if self._buffer.shape != point.shape:
            self._buffer = np.zeros(point.shape)
        buffer = self._buffer
        buffer[...] = self.random_state.uniform(-1.0, 1.0, size=point.shape) * self.amplitude
        buffer += point
        up = self.source.evaluate(buffer)
        np.subtract(2.0 * point, buffer, out=buffer)
        down = self.source.evaluate(buffer)
        return (up + down) * 0.5
