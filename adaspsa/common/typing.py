# Copyright (c) Facebook, Inc. and its affiliates. All Rights Reserved.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

"""Definitions of some convenient types.
If you know better practices, feel free to submit it ;)
"""
# pylint: disable=unused-import
# structures
from typing import Any as Any
from typing import Optional as Optional
from typing import Union as Union
from typing import TYPE_CHECKING as TYPE_CHECKING

# containers
from typing import Dict as Dict
from typing import Tuple as Tuple
from typing import List as List

# others
from typing import Callable as Callable
from pathlib import Path as Path
from typing_extensions import Protocol

#
import numpy as _np


ArrayLike = Union[Tuple[float, ...], List[float], _np.ndarray]
PathLike = Union[str, Path]
Seed = Optional[Union[int, _np.random.RandomState]]


# %% Protocol definitions for evaluation functions


class EvaluationFunction(Protocol):
    # pylint: disable=pointless-statement,unused-argument

    def __call__(self, point: _np.ndarray) -> float:
        ...
