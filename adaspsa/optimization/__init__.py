# Copyright (c) Facebook, Inc. and its affiliates. All Rights Reserved.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

from .optimizer import Optimizer  # main entry point
from .optimizer import optimize
from .options import Options
from .options import presets
