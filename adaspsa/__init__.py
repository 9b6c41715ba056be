# Copyright (c) Facebook, Inc. and its affiliates. All Rights Reserved.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

from .common import typing as typing
from .common import errors as errors
from .functions.base import Target as Target
from .functions.base import Iteration as Iteration
from .functions.wrappers import Oversample as Oversample
from .functions.wrappers import OutputNoise as OutputNoise
from .functions.wrappers import InputNoise as InputNoise
from .optimization.options import Options as Options
from .optimization.options import presets as presets
from .optimization.optimizer import Optimizer as Optimizer
from .optimization.optimizer import optimize as optimize
from .optimization import callbacks as callbacks


__all__ = [
    "Optimizer",
    "Options",
    "optimize",
    "presets",
    "Target",
    "Iteration",
    "Oversample",
    "OutputNoise",
    "InputNoise",
    "callbacks",
    "errors",
    "typing",
]


__version__ = "0.1.0"
