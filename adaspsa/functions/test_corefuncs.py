# Copyright (c) Facebook, Inc. and its affiliates. All Rights Reserved.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

import math
import numpy as np
from adaspsa.common import testing
from . import corefuncs


@testing.parametrized(
    **{name: (name,) for name, info in [(n, corefuncs.registry.get_info(n)) for n in corefuncs.registry] if "argmax" in info}
)
def test_maximum_value(name: str) -> None:
    func = corefuncs.registry[name]
    info = corefuncs.registry.get_info(name)
    for dimension in [2, 5]:
        optimum = info["argmax"](dimension)
        np.testing.assert_almost_equal(func(optimum), info["max_value"])
        assert func(optimum + 0.01) < info["max_value"]


def test_paraboloid() -> None:
    np.testing.assert_array_equal(corefuncs._alternating_optimum(3), [-1, 1, -1])
    assert corefuncs.paraboloid(np.zeros(2)) == -1


@testing.parametrized(
    feasible=([1.0, 1.0], -12.0),
    boundary=([2.0, 4.0], 10.0),
    negative=([-0.1, 1.0], float("nan")),
    above_bound=([5.0, 5.0], float("nan")),
)
def test_bounded_paraboloid(point: list, expected: float) -> None:
    value = corefuncs.bounded_paraboloid(np.array(point))
    if math.isnan(expected):
        assert math.isnan(value)
    else:
        np.testing.assert_almost_equal(value, expected)


def test_undefined() -> None:
    assert math.isnan(corefuncs.undefined(np.zeros(3)))
    assert corefuncs.registry.get_info("undefined") == {}
