# Copyright (c) Facebook, Inc. and its affiliates. All Rights Reserved.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

# base classes


class AdaSPSAError(Exception):
    """Base class for error raised by adaspsa"""


class AdaSPSAWarning(Warning):
    pass


# errors
# pylint: disable=too-many-ancestors


class EarlyStopping(StopIteration, AdaSPSAError):
    """Stops the iteration loop if raised from an iteration hook or callback.
    The run then goes through finalization as if the iterations were exhausted.
    """


class AdaSPSARuntimeError(RuntimeError, AdaSPSAError):
    """Runtime error raised by adaspsa"""


class AdaSPSAValueError(ValueError, AdaSPSAError):
    """Value error raised by adaspsa"""


class OptionsError(AdaSPSAValueError):
    """Invalid optimization options"""


class OutOfBoundsError(AdaSPSARuntimeError):
    """The current point and its rollback both evaluate to non-finite values:
    the run cannot get back into the feasible region.

    Parameters
    ----------
    iteration: int
        index of the iteration at which the run got stuck
    """

    def __init__(self, message: str, iteration: int = -1) -> None:
        super().__init__(message)
        self.iteration = iteration


# warnings


class AdaSPSARuntimeWarning(RuntimeWarning, AdaSPSAWarning):
    """Runtime warning raised by adaspsa"""


class InfeasibleStartWarning(AdaSPSARuntimeWarning):
    """The objective is undefined at the initial point, the output is filled with NaN"""


class BadPointWarning(AdaSPSARuntimeWarning):
    """Provided point holds non-finite values"""
