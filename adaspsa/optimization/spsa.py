# Copyright (c) Facebook, Inc. and its affiliates. All Rights Reserved.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

"""Adaptive simultaneous perturbation stochastic approximation (SPSA), for maximization.

The run goes through 4 phases, all sharing the same buffers and running statistics:

- warm-up: estimates the mean value and evaluation noise at the initial point, then
  a first smoothed gradient from perturbations of decreasing size.
- learning rate initialization (if not provided): geometric line search from 1e-5.
- main loop: two-point gradient estimation around the next point, momentum and
  second moment smoothing (Adam-like), learning rate adaptation by comparing no step,
  half step and larger step (with ties decided by the noise estimate), and weighted
  averaging of the trajectory for tracking the best point. When no improvement is
  recorded for a long time, the run restarts from the best point with rescaled
  statistics and a much smaller learning rate.
- finalization: keeps either the current point or the best averaged point.

References
----------
1) https://en.wikipedia.org/wiki/Simultaneous_perturbation_stochastic_approximation
2) Spall, James C. "Multivariate stochastic approximation using a simultaneous perturbation gradient approximation."
   IEEE transactions on automatic control 37.3 (1992): 332-341.
3) Kingma, Diederik P., and Jimmy Ba. "Adam: A method for stochastic optimization." (2014)
"""

import math
import logging
import numpy as np
import adaspsa.common.typing as tp
from adaspsa.common import errors
from adaspsa.functions.base import Target, Iteration
from .options import Options
from .utils import ScratchPool, norm, norm2, cosine, nz, fmax, randsign

logger = logging.getLogger(__name__)

COMPLETED = "completed"
INFEASIBLE_START = "infeasible_start"
NON_FINITE_GRADIENT = "non_finite_gradient"
EARLY_STOPPING = "early_stopping"


def warmup_rounds(dimension: int) -> int:
    """Number of evaluation rounds of the warm-up phase,
    which also scales the patience before a recovery
    """
    return int(math.sqrt(dimension + 100))


def adapt_learning_rate(lr: float, y3: float, y4: float, y5: float, margin: float) -> float:
    """Updates the learning rate by comparing the values with no step (y3), a half step (y4)
    and a larger step (y5). Each value which is the best up to the noise margin moves the
    learning rate towards its own step size, so that ties apply several factors.
    NaN values never win a comparison.
    """
    if y3 + margin > fmax(y4, y5):
        lr /= 1.3
    if y4 + margin > fmax(y3, y5):
        lr *= 1.3 / 1.4
    if y5 + margin > fmax(y3, y4):
        lr *= 1.4
    return lr


def _ignore(iteration: Iteration) -> None:  # pylint: disable=unused-argument
    pass


class SPSARun:  # pylint: disable=too-many-instance-attributes
    """State of one optimization run, updating the point in place.

    Parameters
    ----------
    target: Target
        function to maximize
    point: np.ndarray
        initial point, updated in place (float64, 1d)
    pool: ScratchPool
        buffers of the same size as the point, zero-filled
    options: Options
        settings of the run
    rng: np.random.RandomState
        random state for drawing perturbations
    on_iteration: callable
        hook called with the Iteration record at each iteration. It may update the
        learning rate through the record, or raise errors.EarlyStopping.
    """

    def __init__(
        self,
        target: Target,
        point: np.ndarray,
        pool: ScratchPool,
        options: Options,
        rng: np.random.RandomState,
        on_iteration: tp.Callable[[Iteration], None] = _ignore,
    ) -> None:
        assert pool.size == point.size, "Scratch pool does not match the point size"
        self.target = target
        self.x = point
        self.pool = pool
        self.options = options
        self.rng = rng
        self._on_iteration = on_iteration
        self.rounds = warmup_rounds(point.size)
        # running statistics
        self.m1 = 1.0 - options.momentum
        self.m2 = 1.0 - options.beta
        self.mx = math.sqrt(self.m1 * self.m2)
        self.y = 0.0
        self.bn = 0.0
        self.noise = 0.0
        self.b1 = 0.0
        self.b2 = 0.0
        self.bx = 0.0
        self.lr = float("nan")
        self.y_best = -float("inf")
        self.momentum_fails = 0
        self.consecutive_fails = 0
        self.improvement_fails = 0
        # bookkeeping
        self.num_evaluations = 0
        self.num_iterations = 0
        self.stop_reason = ""

    @property
    def noise_margin(self) -> float:
        """Difference of values under which two evaluations are considered equivalent"""
        return 0.25 * math.sqrt(self.noise / self.bn)

    def evaluate(self, point: np.ndarray) -> float:
        self.num_evaluations += 1
        view = point.view()
        view.flags.writeable = False
        return float(self.target.evaluate(view))

    def run(self) -> None:
        """Runs all phases, leaving the final point in place"""
        if not self.warmup():
            self.x.fill(np.nan)
            self.stop_reason = INFEASIBLE_START
            return
        self.lr = self.initial_learning_rate()
        logger.debug("Initial learning rate: %s", self.lr)
        self.iterate()
        self.finalize()

    def warmup(self) -> bool:
        """Estimates the mean value and the noise at the initial point, and
        a first smoothed gradient. Returns False if the initial point is infeasible.
        """
        x, m2 = self.x, self.m2
        for _ in range(self.rounds):
            value = self.evaluate(x)
            diff = value - self.evaluate(x)
            self.bn += m2 * (1.0 - self.bn)
            self.y += m2 * (value - self.y)
            self.noise += m2 * (diff * diff - self.noise)
        if math.isnan(self.y):
            return False
        delta, probe = self.pool.perturbation, self.pool.probe
        for i in range(self.rounds):
            randsign(self.rng, out=delta)
            delta /= 1.0 + i
            np.add(x, delta, out=probe)
            y1 = self.evaluate(probe)
            np.subtract(x, delta, out=probe)
            y2 = self.evaluate(probe)
            df = nz((y1 - self.y) * 0.5) - nz((y2 - self.y) * 0.5)
            self._accumulate(np.divide(df, delta, out=delta))
        logger.debug(
            "Warm-up done with value %s, noise %s and gradient norm %s",
            self.y / self.bn,
            self.noise / self.bn,
            norm(self.pool.gradient) / self.b1,
        )
        return True

    def _accumulate(self, df_dx: np.ndarray) -> None:
        """Updates the averages of the gradient with a new sample"""
        m1, m2 = self.m1, self.m2
        self.b1 += m1 * (1.0 - self.b1)
        self.b2 += m2 * (1.0 - self.b2)
        gx, slow_gx, square_gx = self.pool.gradient, self.pool.slow_gradient, self.pool.square_gradient
        gx += m1 * (df_dx - gx)
        slow_gx += m2 * (df_dx - slow_gx)
        square_gx += m2 * ((slow_gx / self.b2) ** 2 - square_gx)

    def gate_momentum(self, df_dx: np.ndarray) -> None:
        """Lowers the momentum when the gradient sample disagrees with the current estimate"""
        threshold = 0.5 / (1.0 + 0.1 * self.momentum_fails) ** 0.3 - 1.0
        if cosine(df_dx, self.pool.gradient) < threshold:
            self.momentum_fails += 1
            self.m1 = (1.0 - self.options.momentum) / math.sqrt(1.0 + 0.1 * self.momentum_fails)

    def _normalize(self, vector: np.ndarray) -> np.ndarray:
        if self.options.adam:
            vector /= np.sqrt(self.pool.square_gradient / self.b2 + self.options.epsilon)
        return vector

    def initial_learning_rate(self) -> float:
        """Provided learning rate, or coarse line search along the warm-up gradient"""
        if self.options.learning_rate is not None:
            return self.options.learning_rate
        x, probe = self.x, self.pool.probe
        direction = np.multiply(3.0 / self.b1, self.pool.gradient, out=self.pool.direction)
        self._normalize(direction)
        lr = 1e-5
        for _ in range(5):
            np.subtract(x, lr * direction, out=probe)
            stepped = fmax(self.evaluate(probe), self.evaluate(probe))
            current = fmax(self.evaluate(x), self.evaluate(x))
            if stepped > current:
                lr *= 1.4
            else:
                break
        return lr

    def iterate(self) -> None:
        """Main loop"""
        # pylint: disable=too-many-locals,too-many-statements
        opts = self.options
        x, pool = self.x, self.pool
        gx, dx, ndx, probe = pool.gradient, pool.direction, pool.perturbation, pool.probe
        x_avg, x_best, previous = pool.average, pool.best, pool.previous
        sqrt_size = math.sqrt(x.size)
        mx = self.mx
        self.bx = mx
        np.multiply(mx, x, out=x_avg)
        self.y_best = self.y / self.bn
        x_best[:] = x
        self._normalize(np.divide(gx, self.b1, out=dx))
        y3 = self.evaluate(x)
        y6 = self.evaluate(x)
        self.stop_reason = COMPLETED
        for i in range(opts.iterations):
            lr = self.lr
            # gradient estimation around the next point
            np.multiply(dx, lr, out=probe)
            probe += x
            scale = lr / self.m1 * opts.px / (1.0 + opts.px_decay * i) ** opts.px_power * norm(dx)
            randsign(self.rng, out=ndx)
            ndx *= scale
            self._normalize(ndx)
            probe += ndx
            y1 = self.evaluate(probe)
            probe -= 2.0 * ndx
            y2 = self.evaluate(probe)
            ndx_norm2 = norm2(ndx)
            numerator = (nz((y1 - self.y) * 0.5) - nz((y2 - self.y) * 0.5)) * sqrt_size
            df = numerator / ndx_norm2 if ndx_norm2 > 0 else float("nan")
            if not math.isfinite(df):
                logger.debug("Stopping at iteration %s: non-finite gradient estimate", i)
                self.stop_reason = NON_FINITE_GRADIENT
                break
            df_dx = np.multiply(ndx, df, out=ndx)
            self.gate_momentum(df_dx)
            self._accumulate(df_dx)
            np.multiply(gx, 1.0 / (self.b1 * (1.0 + opts.lr_decay * i) ** opts.lr_power), out=dx)
            self._normalize(dx)
            # learning rate adaptation
            np.multiply(dx, lr * 0.5, out=probe)
            probe += x
            y4 = self.evaluate(probe)
            np.multiply(dx, lr / math.sqrt(self.m1), out=probe)
            probe += x
            y5 = self.evaluate(probe)
            self.bn += self.m2 * (1.0 - self.bn)
            self.y += self.m2 * (y3 - self.y)
            self.noise += self.m2 * ((y3 - y6) * (y3 - y6) + 1e-64 * (abs(y3) + abs(y6)) - self.noise)
            lr = adapt_learning_rate(lr, y3, y4, y5, self.noise_margin)
            lr = fmax(lr, opts.epsilon / math.sqrt(1.0 + 0.01 * i) * (1.0 + 0.25 * norm(x)))
            self.lr = lr
            # step, with rollback if it leads out of bounds
            previous[:] = x
            np.multiply(dx, lr, out=probe)
            x += probe
            y3 = self.evaluate(x)
            y6 = self.evaluate(x)
            if not (math.isfinite(y3) and math.isfinite(y6)):
                x[:] = previous
                y3 = self.evaluate(x)
                y6 = self.evaluate(x)
                self.consecutive_fails += 10
                if not (math.isfinite(y3) and math.isfinite(y6)):
                    raise errors.OutOfBoundsError(
                        f"Stuck out of bounds at iteration {i}: the point and its rollback both "
                        f"evaluate to non-finite values ({y3}, {y6})",
                        iteration=i,
                    )
            # trajectory averaging and best point tracking
            fa = mx / (1.0 + 0.01 * i) ** 0.303
            self.bx += fa * (1.0 - self.bx)
            x_avg += fa * (x - x_avg)
            self.consecutive_fails += 1
            if self.y / self.bn > self.y_best:
                self.y_best = self.y / self.bn
                np.divide(x_avg, self.bx, out=x_best)
                self.consecutive_fails = 0
            self.num_iterations = i + 1
            record = Iteration(i, x, gx, self.lr)
            try:
                self._on_iteration(record)
            except errors.EarlyStopping as e:
                logger.debug("Early stopping at iteration %s: %s", i, e)
                self.lr = record.learning_rate
                self.stop_reason = EARLY_STOPPING
                break
            self.lr = record.learning_rate
            if self.consecutive_fails >= 128 * (self.improvement_fails + self.rounds):
                self.recover(i)

    def recover(self, iteration: int = -1) -> None:
        """Restarts from the best point, with statistics rescaled as if only the best
        value had been observed, and a much smaller learning rate
        """
        m1, m2, mx = self.m1, self.m2, self.mx
        pool = self.pool
        self.consecutive_fails = 0
        self.improvement_fails += 1
        self.x[:] = pool.best
        self.bx = mx * (1.0 - mx)
        np.multiply(self.x, self.bx, out=pool.average)
        fresh = m2 * (1.0 - m2)
        self.noise *= fresh / self.bn
        self.y = fresh * self.y_best
        self.bn = fresh
        self.b1 = m1 * (1.0 - m1)
        np.multiply(self.b1 / self.b2, pool.slow_gradient, out=pool.gradient)
        pool.slow_gradient *= fresh / self.b2
        pool.square_gradient *= fresh / self.b2
        self.b2 = fresh
        self.lr /= 64.0 * self.improvement_fails
        logger.debug(
            "Recovery #%s at iteration %s: back to best value %s with learning rate %s",
            self.improvement_fails,
            iteration,
            self.y_best,
            self.lr,
        )

    def finalize(self) -> None:
        """Keeps the best averaged point unless the current point is at least as good"""
        if self.y_best + self.noise_margin > fmax(self.evaluate(self.x), self.evaluate(self.x)):
            self.x[:] = self.pool.best
