# Copyright (c) Facebook, Inc. and its affiliates. All Rights Reserved.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

import pytest
from . import tools
from . import testing


class _Dummy:
    def __init__(self, x: int, y: float = 1.0, *, z: str = "blublu", _hidden: int = 0) -> None:
        self.x = x
        self.y = y
        self.z = z
        self._hidden = _hidden


def test_init_defaults() -> None:
    assert tools.init_defaults(_Dummy) == {"y": 1.0, "z": "blublu", "_hidden": 0}


@testing.parametrized(
    defaults=({}, {}),
    changed=({"y": 2.0, "z": "blu"}, {"y": 2.0, "z": "blu"}),
    hidden=({"_hidden": 1}, {}),
)
def test_different_from_defaults(kwargs: dict, expected: dict) -> None:
    instance = _Dummy(12, **kwargs)
    testing.printed_assert_equal(tools.different_from_defaults(instance=instance), expected)


def test_different_from_defaults_mismatch() -> None:
    with pytest.raises(RuntimeError):
        tools.different_from_defaults(instance=_Dummy(12), instance_dict={"y": 1.0}, check_mismatches=True)


def test_assert_point_close() -> None:
    testing.assert_point_close([1.0, 2.0], [1.0, 2.1], 0.2)
    with pytest.raises(AssertionError):
        testing.assert_point_close([1.0, 2.0], [1.0, 2.5], 0.2)
    with pytest.raises(AssertionError):
        testing.assert_point_close([1.0, 2.0], [1.0], 0.2)
