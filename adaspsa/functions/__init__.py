# Copyright (c) Facebook, Inc. and its affiliates. All Rights Reserved.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

from .base import Target as Target
from .base import FunctionTarget as FunctionTarget
from .base import Iteration as Iteration
from .wrappers import Oversample as Oversample
from .wrappers import OutputNoise as OutputNoise
from .wrappers import InputNoise as InputNoise
from . import corefuncs as corefuncs
