# Copyright (c) Facebook, Inc. and its affiliates. All Rights Reserved.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

import pytest
from . import decorators


def test_registry() -> None:
    functions: decorators.Registry[object] = decorators.Registry()

    @functions.register
    def dummy_register() -> None:
        pass

    @functions.register_with_info(some_info="info")
    def dummy_info() -> None:
        pass

    assert "dummy_register" in functions
    assert functions["dummy_info"] is dummy_info
    assert functions.get_info("dummy_info") == {"some_info": "info"}
    assert functions.get_info("dummy_register") == {}
    with pytest.raises(ValueError):
        functions.get_info("no_dummy")
    with pytest.raises(RuntimeError):
        functions.register(dummy_register)
    with pytest.raises(KeyError) as excinfo:
        functions["blublu"]  # pylint: disable=pointless-statement
    assert "dummy_info" in str(excinfo.value)
    functions["other"] = 12
    assert len(functions) == 3
    del functions["other"]
    assert sorted(functions) == ["dummy_info", "dummy_register"]
