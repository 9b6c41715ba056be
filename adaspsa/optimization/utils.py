# Copyright (c) Facebook, Inc. and its affiliates. All Rights Reserved.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

import math
import numpy as np
import adaspsa.common.typing as tp


def norm2(array: np.ndarray) -> float:
    """Squared euclidean norm"""
    return float(array.dot(array))


def norm(array: np.ndarray) -> float:
    return math.sqrt(norm2(array))


def cosine(lhs: np.ndarray, rhs: np.ndarray) -> float:
    """Cosine similarity, or 0 if any of the vectors is (close to) null"""
    n1 = norm2(lhs)
    n2 = norm2(rhs)
    if n1 * n2 < 1e-6:
        return 0.0
    return float(lhs.dot(rhs)) / math.sqrt(n1 * n2)


def nz(value: float) -> float:
    """NaN to zero"""
    return 0.0 if math.isnan(value) else value


def fmax(a: float, b: float) -> float:
    """Maximum ignoring NaN (NaN only if both are NaN)"""
    if math.isnan(a):
        return b
    if math.isnan(b):
        return a
    return max(a, b)


def randsign(rng: np.random.RandomState, out: np.ndarray) -> np.ndarray:
    """Fills the output with uniformly drawn -1 and +1 values"""
    np.multiply(2.0, rng.randint(2, size=out.size), out=out)
    out -= 1.0
    return out


class ScratchPool:
    """Named float buffers of the problem dimension, allocated once and reused
    by all runs of an optimizer.

    Parameters
    ----------
    size: int
        dimension of the buffers

    Note
    ----
    Buffers are reallocated only when the size changes, otherwise they are zero-filled
    by :code:`reset`.
    """

    # pylint: disable=too-many-instance-attributes

    ROLES = (
        "gradient",
        "slow_gradient",
        "square_gradient",
        "direction",
        "perturbation",
        "average",
        "best",
        "probe",
        "previous",
    )

    def __init__(self, size: int = 0) -> None:
        self._size = -1
        self.gradient = np.zeros(0)  # fast EMA of the gradient
        self.slow_gradient = np.zeros(0)  # slow EMA of the gradient
        self.square_gradient = np.zeros(0)  # EMA of the squared bias-corrected slow gradient
        self.direction = np.zeros(0)  # step direction
        self.perturbation = np.zeros(0)  # perturbation and gradient sample
        self.average = np.zeros(0)  # trajectory average
        self.best = np.zeros(0)  # best averaged point
        self.probe = np.zeros(0)  # points to evaluate
        self.previous = np.zeros(0)  # rollback copy of the point
        self.reset(size)

    @property
    def size(self) -> int:
        return self._size

    def buffers(self) -> tp.List[np.ndarray]:
        return [getattr(self, role) for role in self.ROLES]

    def reset(self, size: int) -> None:
        if size < 0:
            raise ValueError(f"Size must be non-negative (got {size})")
        if size != self._size:
            for role in self.ROLES:
                setattr(self, role, np.zeros(size))
            self._size = size
        else:
            for buffer in self.buffers():
                buffer.fill(0.0)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(size={self._size}, buffers={len(self.ROLES)})"
