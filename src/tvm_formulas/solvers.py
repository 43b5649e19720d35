# Requires Python 3.12+
# Uses native type hints: list[x], tuple[x, y], X | None (PEP 585, PEP 604)
"""
Root finding for the rate-of-return problems.

Neither IRR nor the periodic loan rate has a closed form, so both are found by
Newton-Raphson iteration on a residual function with an analytic derivative:

    x_{k+1} = x_k - f(x_k) / f'(x_k)

The routine is generic over the operand type: it works with ``float`` for the
loan rate and with ``decimal.Decimal`` for the high-precision IRR path.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

__version__ = "0.1.0"

logger = logging.getLogger(__name__)

# Upper bound on step halvings per iteration when damping is enabled
MAX_BACKTRACKS = 60


@dataclass(frozen=True)
class RootResult:
    """
    Outcome of one solver call.

    ``root`` is the last iterate whether or not the iteration converged;
    ``converged`` tells the two cases apart.
    """
    root: Any
    iterations: int
    converged: bool


def newton_raphson(
        func: Callable[[Any], Any],
        derivative: Callable[[Any], Any],
        initial_guess: Any,
        *,
        tolerance: Any = 1e-6,
        max_iterations: int = 100,
        damped: bool = False,
) -> RootResult:
    """
    Find a root of ``func`` by Newton-Raphson iteration.

    The iteration converges when the full Newton step f(x)/f'(x) is no larger
    than ``tolerance``. Exhausting ``max_iterations`` is not an error: the last
    iterate is returned with ``converged=False``. A zero derivative, or a
    residual that cannot be evaluated (ArithmeticError), also ends the
    iteration unconverged.

    DAMPING:
    --------
    With ``damped=True`` a full Newton step is accepted only if it reduces
    |f|. Otherwise the step is halved (at most MAX_BACKTRACKS times) until it
    does. Candidates where f is undefined count as no reduction. If no halving
    helps, the iteration stops unconverged. This keeps steep, convex residuals
    such as NPV(rate) from being thrown onto or past the pole at rate = -1.

    Args:
        func: Residual function f(x)
        derivative: Its derivative f'(x)
        initial_guess: Starting estimate x_0
        tolerance: Absolute tolerance on the Newton step |x_{k+1} - x_k|
        max_iterations: Maximum number of Newton steps
        damped: Enable step-halving backtracking

    Returns:
        RootResult with the final estimate, number of steps, and convergence flag
    """
    x = initial_guess
    for iteration in range(1, max_iterations + 1):
        try:
            value = func(x)
            slope = derivative(x)
        except ArithmeticError as e:
            logger.debug("Residual undefined at x=%s (%s); stopping Newton at iter %s", x, e, iteration)
            return RootResult(x, iteration, False)
        logger.debug("Newton iter %s: x=%s f=%s f'=%s", iteration, x, value, slope)
        if value == 0:
            return RootResult(x, iteration, True)
        if slope == 0:
            logger.debug("Zero derivative; stopping Newton at iter %s", iteration)
            return RootResult(x, iteration, False)

        step = value / slope
        if abs(step) <= tolerance:
            return RootResult(x - step, iteration, True)

        x_new = x - step
        if damped:
            for _ in range(MAX_BACKTRACKS):
                if _reduces(func, x_new, value):
                    break
                step = step / 2
                x_new = x - step
            else:
                logger.debug("No step reduces |f| at x=%s; stopping Newton at iter %s", x, iteration)
                return RootResult(x, iteration, False)
        x = x_new

    logger.debug("Newton stopped at iteration cap %s: x=%s", max_iterations, x)
    return RootResult(x, max_iterations, False)


def _reduces(func: Callable[[Any], Any], x: Any, value: Any) -> bool:
    # A point where the residual is undefined (e.g. the NPV pole) never counts as progress
    try:
        return abs(func(x)) < abs(value)
    except ArithmeticError:
        return False
