# Copyright (c) Facebook, Inc. and its affiliates. All Rights Reserved.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

"""Classical test functions, adapted to maximization.
Functions registered with an "argmax" information provide the location of their maximum
as a function of the dimension.
"""

import numpy as np
import adaspsa.common.typing as tp
from adaspsa.common.decorators import Registry


registry: Registry[tp.Callable[[np.ndarray], float]] = Registry()


def _alternating_optimum(dimension: int) -> np.ndarray:
    """(-1, 1, -1, 1, ...)"""
    return np.where(np.arange(dimension) % 2, 1.0, -1.0)


@registry.register_with_info(argmax=_alternating_optimum, max_value=1.0)
def paraboloid(x: np.ndarray) -> float:
    """1 - (x0 + 1)^2 - (x1 - 1)^2 - (x2 + 1)^2 - ..."""
    return float(1.0 - np.sum((x - _alternating_optimum(x.size)) ** 2))


@registry.register_with_info(max_value=10.0)
def bounded_paraboloid(x: np.ndarray) -> float:
    """Paraboloid with maximum 20 at (5, 5, ...), only defined on the positive orthant
    and where the value does not exceed 10. The constrained maximum (10) is reached on the
    boundary of the feasible region.
    """
    if np.any(x < 0):
        return float("nan")
    value = float(20.0 - np.sum((x - 5.0) ** 2))
    if value > 10:
        return float("nan")
    return value


@registry.register_with_info(argmax=np.zeros, max_value=0.0)
def negative_sphere(x: np.ndarray) -> float:
    return -float(x.dot(x))


@registry.register_with_info(argmax=np.ones, max_value=0.0)
def negative_rosenbrock(x: np.ndarray) -> float:
    x_m_1 = x[:-1] - 1
    x_diff = x[:-1] ** 2 - x[1:]
    return -float(100 * x_diff.dot(x_diff) + x_m_1.dot(x_m_1))


@registry.register
def undefined(x: np.ndarray) -> float:  # pylint: disable=unused-argument
    """Infeasible everywhere"""
    return float("nan")
