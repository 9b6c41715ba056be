# Copyright (c) Facebook, Inc. and its affiliates. All Rights Reserved.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

import pytest
from adaspsa.common import errors
from adaspsa.common import testing
from . import options as optlib


def test_defaults() -> None:
    opts = optlib.Options()
    assert opts.adam
    assert opts.iterations == 10000
    assert opts.learning_rate is None
    assert opts.momentum == 0.9
    assert opts.beta == 0.999
    assert opts.epsilon == 1e-7
    assert repr(opts) == "Options()"


def test_repr_and_copy() -> None:
    opts = optlib.Options(iterations=12, px=3)
    assert repr(opts) == "Options(iterations=12, px=3.0)"
    other = opts.copy(learning_rate=0.1)
    assert other is not opts
    assert other.learning_rate == 0.1
    assert other.iterations == 12
    assert opts.learning_rate is None
    assert other != opts
    assert other.copy(learning_rate=None) == opts
    with pytest.raises(errors.OptionsError):
        opts.copy(blublu=12)


def test_config() -> None:
    config = optlib.Options(adam=False).config()
    assert config["adam"] is False
    assert optlib.Options(**config) == optlib.Options(adam=False)


@testing.parametrized(
    negative_iterations=({"iterations": -1},),
    null_lr=({"learning_rate": 0.0},),
    nan_lr=({"learning_rate": float("nan")},),
    negative_decay=({"lr_decay": -1e-3},),
    null_px=({"px": 0},),
    infinite_power=({"px_power": float("inf")},),
    momentum_one=({"momentum": 1.0},),
    negative_beta=({"beta": -0.1},),
    null_beta=({"beta": 0.0},),
    null_momentum=({"momentum": 0.0},),
    null_epsilon=({"epsilon": 0.0},),
)
def test_invalid_options(kwargs: dict) -> None:
    with pytest.raises(errors.OptionsError):
        optlib.Options(**kwargs)


def test_options_error_is_value_error() -> None:
    with pytest.raises(ValueError):
        optlib.Options(momentum=2)


def test_presets() -> None:
    assert set(optlib.presets) == {"default", "sgd", "short", "long"}
    assert optlib.presets["default"] == optlib.Options()
    assert not optlib.presets["sgd"].adam
    assert optlib.presets["short"].iterations < optlib.presets["long"].iterations
    assert "description" in optlib.presets.get_info("long")
    with pytest.raises(KeyError):
        optlib.presets["blublu"]  # pylint: disable=pointless-statement
