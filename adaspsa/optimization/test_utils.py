# Copyright (c) Facebook, Inc. and its affiliates. All Rights Reserved.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

import math
import numpy as np
import pytest
from adaspsa.common import testing
from . import utils


def test_norms() -> None:
    array = np.array([1.0, 2.0, 3.0, -1.0])
    assert utils.norm2(np.array([1.0, -1.0, 2.0, 1.0])) == 7
    np.testing.assert_almost_equal(utils.norm(array), 3.872983346207417)
    np.testing.assert_almost_equal(utils.norm(np.array([4.0, 1.0])), 4.1231056256)


@testing.parametrized(
    orthogonal=([1.0, 0.0], [0.0, 3.0], 0.0),
    colinear=([1.0, 1.0], [2.0, 2.0], 1.0),
    opposite=([1.0, -2.0], [-2.0, 4.0], -1.0),
    null=([0.0, 0.0], [1.0, 2.0], 0.0),
    tiny=([1e-4, 0.0], [1e-4, 0.0], 0.0),
)
def test_cosine(lhs: list, rhs: list, expected: float) -> None:
    np.testing.assert_almost_equal(utils.cosine(np.array(lhs), np.array(rhs)), expected)


def test_nz() -> None:
    assert utils.nz(float("nan")) == 0
    assert utils.nz(-3.0) == -3
    assert utils.nz(float("inf")) == float("inf")


@testing.parametrized(
    regular=(1.0, 2.0, 2.0),
    left_nan=(float("nan"), 2.0, 2.0),
    right_nan=(-1.0, float("nan"), -1.0),
)
def test_fmax(a: float, b: float, expected: float) -> None:
    assert utils.fmax(a, b) == expected
    assert utils.fmax(b, a) == expected


def test_fmax_nan() -> None:
    assert math.isnan(utils.fmax(float("nan"), float("nan")))


def test_randsign() -> None:
    out = np.zeros(1000)
    output = utils.randsign(np.random.RandomState(12), out=out)
    assert output is out
    assert set(out.tolist()) == {-1.0, 1.0}
    assert abs(np.mean(out)) < 0.1
    other = utils.randsign(np.random.RandomState(12), out=np.zeros(1000))
    np.testing.assert_array_equal(out, other)


def test_scratch_pool() -> None:
    pool = utils.ScratchPool(3)
    assert pool.size == 3
    gradient = pool.gradient
    np.testing.assert_array_equal(gradient, [0, 0, 0])
    gradient += 12
    pool.reset(3)
    assert pool.gradient is gradient, "Buffers should be reused"
    np.testing.assert_array_equal(gradient, [0, 0, 0])
    pool.reset(5)
    assert pool.gradient is not gradient
    assert all(getattr(pool, role).shape == (5,) for role in utils.ScratchPool.ROLES)
    assert repr(pool) == "ScratchPool(size=5, buffers=9)"


def test_scratch_pool_errors() -> None:
    pool = utils.ScratchPool()
    assert pool.size == 0
    with pytest.raises(AttributeError):
        pool.blublu  # pylint: disable=pointless-statement
    with pytest.raises(ValueError):
        pool.reset(-1)


def test_scratch_pool_buffers_are_distinct() -> None:
    pool = utils.ScratchPool(2)
    buffers = pool.buffers()
    assert len(buffers) == len(utils.ScratchPool.ROLES)
    assert len({id(b) for b in buffers}) == len(buffers)
    pool.probe[:] = 1
    assert not pool.previous.any()
