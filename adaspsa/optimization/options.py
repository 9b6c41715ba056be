# Copyright (c) Facebook, Inc. and its affiliates. All Rights Reserved.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

import math
import adaspsa.common.typing as tp
from adaspsa.common import errors
from adaspsa.common import tools
from adaspsa.common.decorators import Registry


class Options:
    """Configuration of an optimization run.

    Parameters
    ----------
    adam: bool
        whether to normalize the steps and perturbations with the second moment
        of the gradient (adaptive moment estimation)
    iterations: int
        maximum number of iterations of the main loop
    learning_rate: float or None
        initial learning rate, or None to estimate it through a line search.
        The learning rate is automatically tuned at each iteration anyway, and decays as
        :code:`learning_rate / (1 + lr_decay * i) ** lr_power`
    lr_decay: float
        learning rate decay
    lr_power: float
        learning rate decay power
    px: float
        perturbation size, relative to the norm of the previous step:
        :code:`px / (1 + px_decay * i) ** px_power * norm(lr * dx) * random_signs`
    px_decay: float
        perturbation decay
    px_power: float
        perturbation decay power
    momentum: float
        how much of the gradient is kept from previous iterations. It is automatically
        lowered when successive gradient estimates disagree. Must be in (0, 1).
    beta: float
        secondary momentum, closer to 1 than momentum, used by the slow gradient
        average and the second moment estimation. Must be in (0, 1).
    epsilon: float
        avoids divisions by 0 in adaptive moment estimation, and scales the learning
        rate floor
    """

    # pylint: disable=too-many-instance-attributes,too-many-arguments

    def __init__(
        self,
        *,
        adam: bool = True,
        iterations: int = 10000,
        learning_rate: tp.Optional[float] = None,
        lr_decay: float = 1e-3,
        lr_power: float = 0.5,
        px: float = 2.0,
        px_decay: float = 1e-2,
        px_power: float = 0.161,
        momentum: float = 0.9,
        beta: float = 0.999,
        epsilon: float = 1e-7,
    ) -> None:
        self.adam = bool(adam)
        self.iterations = int(iterations)
        self.learning_rate = None if learning_rate is None else float(learning_rate)
        self.lr_decay = float(lr_decay)
        self.lr_power = float(lr_power)
        self.px = float(px)
        self.px_decay = float(px_decay)
        self.px_power = float(px_power)
        self.momentum = float(momentum)
        self.beta = float(beta)
        self.epsilon = float(epsilon)
        self._check()

    def _check(self) -> None:
        nonfinite = [name for name, value in self.config().items() if isinstance(value, float) and not math.isfinite(value)]
        if nonfinite:
            raise errors.OptionsError(f"Options {nonfinite} must be finite")
        if self.iterations < 0:
            raise errors.OptionsError(f"iterations must be non-negative (got {self.iterations})")
        if self.learning_rate is not None and self.learning_rate <= 0:
            raise errors.OptionsError(f"learning_rate must be strictly positive (got {self.learning_rate})")
        for name in ["lr_decay", "px_decay"]:
            if getattr(self, name) < 0:
                raise errors.OptionsError(f"{name} must be non-negative (got {getattr(self, name)})")
        for name in ["px", "epsilon"]:
            if getattr(self, name) <= 0:
                raise errors.OptionsError(f"{name} must be strictly positive (got {getattr(self, name)})")
        for name in ["momentum", "beta"]:
            if not 0 < getattr(self, name) < 1:
                raise errors.OptionsError(f"{name} must be in (0, 1) (got {getattr(self, name)})")

    def config(self) -> tp.Dict[str, tp.Any]:
        return {name: getattr(self, name) for name in tools.init_defaults(self.__class__)}

    def copy(self, **changes: tp.Any) -> "Options":
        """Returns new options, with the provided values updated"""
        config = self.config()
        unknown = set(changes) - set(config)
        if unknown:
            raise errors.OptionsError(f"Unknown options {sorted(unknown)}")
        config.update(changes)
        return Options(**config)

    def __repr__(self) -> str:
        diff = tools.different_from_defaults(instance=self, instance_dict=self.config(), check_mismatches=True)
        params = ", ".join(f"{x}={y!r}" for x, y in sorted(diff.items()))
        return f"{self.__class__.__name__}({params})"

    def __eq__(self, other: tp.Any) -> bool:
        if self.__class__ == other.__class__:
            return self.config() == other.config()  # type: ignore
        return False


presets: Registry[Options] = Registry()
presets.register_name("default", Options())
presets.register_name("sgd", Options(adam=False), info={"description": "no adaptive moment estimation"})
presets.register_name("short", Options(iterations=1000), info={"description": "cheap functions, low precision"})
presets.register_name("long", Options(iterations=100000), info={"description": "noisy or high dimensional functions"})
