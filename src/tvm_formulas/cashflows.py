# Requires Python 3.12+
# Uses native type hints: list[x], tuple[x, y], X | None (PEP 585, PEP 604)
from __future__ import annotations

import logging
import warnings
from collections.abc import Sequence
from decimal import Decimal, localcontext

import numpy as np

from .errors import ConvergenceWarning
from .mathutils import power
from .solvers import RootResult, newton_raphson

__version__ = "0.1.0"

logger = logging.getLogger(__name__)

# IRR solver settings (significant digits, step tolerance, iteration cap, start)
IRR_PRECISION = 100
IRR_TOLERANCE = Decimal("1e-16")
IRR_MAX_ITERATIONS = 100
IRR_INITIAL_GUESS = Decimal("1.0")


# =============================================================================
# Cash-Flow Aggregation: Net Present Value
# =============================================================================

def npv(rate: float, values: Sequence[float]) -> float:
    """
    Net present value of a periodic cash-flow series.

    Formula:
        NPV = Σₖ values[k] / (1 + rate)^k,   k = 0 … N-1

    The first value occurs at time 0 and is not discounted. Signs follow the
    usual convention: outflows negative, inflows positive.

    rate = -1 is not special-cased; the IEEE result (inf/nan) propagates.

    Args:
        rate: Discount rate applied once per period (decimal)
        values: Ordered cash flows, one per period

    Returns:
        NPV of ``values`` at ``rate``

    Example:
        >>> npv(0.2, [-1000, 100, 100, 100])
        -789.3518518518517
    """
    flows = np.asarray(values, dtype=float)
    periods = np.arange(flows.size)
    return float(np.sum(flows / (1.0 + rate) ** periods))


def _npv_precise(rate: Decimal, flows: list[Decimal]) -> Decimal:
    total = Decimal(0)
    for k, value in enumerate(flows):
        total += value / (1 + rate) ** k
    return total


def _npv_precise_derivative(rate: Decimal, flows: list[Decimal]) -> Decimal:
    # d/dr [v / (1+r)^k] = -k·v / (1+r)^(k+1)
    total = Decimal(0)
    for k, value in enumerate(flows):
        total -= k * value / (1 + rate) ** (k + 1)
    return total


def _to_decimal(value) -> Decimal:
    if isinstance(value, (int, Decimal)):
        return Decimal(value)
    return Decimal(float(value))


def _has_inflows_and_outflows(values: Sequence[float]) -> bool:
    inflows = [v for v in values if v >= 0]
    outflows = [v for v in values if v < 0]
    return bool(inflows) and bool(outflows)


# =============================================================================
# Internal Rate of Return
# =============================================================================

def irr(
        values: Sequence[float],
        full_output: bool = False
) -> float | tuple[float, RootResult]:
    """
    Internal rate of return of a periodic cash-flow series.

    Solves NPV(rate) = 0 by damped Newton-Raphson starting at rate = 1.0.
    NPV and its derivative

        NPV'(r) = -Σₖ k · values[k] / (1 + r)^(k+1)

    are accumulated in ``decimal`` arithmetic with IRR_PRECISION significant
    digits; the converged rate is returned as a float.

    The rate is undefined without at least one outflow (< 0) and one
    non-negative value. That case returns 0.0 rather than raising.

    If the iteration cap is reached the last iterate is returned and a
    ConvergenceWarning is issued.

    Args:
        values: Ordered cash flows, one per period
        full_output: Also return the solver's RootResult

    Returns:
        IRR as a decimal rate per period, or (irr, RootResult) if full_output

    Example:
        >>> irr([-4000, 1200, 1410, 1875, 1050])
        0.14299344106053188
    """
    if not _has_inflows_and_outflows(values):
        logger.debug("irr: cash flows lack an inflow or an outflow, returning 0.0")
        return (0.0, RootResult(0.0, 0, False)) if full_output else 0.0

    with localcontext() as ctx:
        ctx.prec = IRR_PRECISION
        flows = [_to_decimal(v) for v in values]
        result = newton_raphson(
            lambda r: _npv_precise(r, flows),
            lambda r: _npv_precise_derivative(r, flows),
            IRR_INITIAL_GUESS,
            tolerance=IRR_TOLERANCE,
            max_iterations=IRR_MAX_ITERATIONS,
            damped=True,
        )

    if not result.converged:
        warnings.warn(
            f"irr did not converge after {result.iterations} iterations",
            ConvergenceWarning,
            stacklevel=2,
        )
    rate = float(result.root)
    if full_output:
        return rate, RootResult(rate, result.iterations, result.converged)
    return rate


# =============================================================================
# Modified Internal Rate of Return
# =============================================================================

def mirr(values: Sequence[float], finance_rate: float, reinvest_rate: float) -> float:
    """
    Modified internal rate of return.

    Outflows are discounted at the financing rate and inflows at the
    reinvestment rate:

        inflows[k]  = values[k] if values[k] >= 0 else 0
        outflows[k] = values[k] if values[k] <  0 else 0

        FV = |NPV(reinvest_rate, inflows)|
        PV = |NPV(finance_rate, outflows)|

        MIRR = (FV / PV)^(1 / (N - 1)) · (1 + reinvest_rate) - 1

    Both legs keep the full length of ``values`` (zero-filled), so the result
    depends on the order of the cash flows. A series with no inflow or no
    outflow returns 0.0.

    Args:
        values: Ordered cash flows, one per period
        finance_rate: Interest rate paid on the outflows
        reinvest_rate: Interest rate earned on reinvested inflows

    Returns:
        MIRR as a decimal rate per period

    Example:
        >>> mirr([100, 200, -50, 300, -200], 0.05, 0.06)
        0.3428233878421769
    """
    flows = np.asarray(values, dtype=float)
    inflows = np.where(flows >= 0, flows, 0.0)
    outflows = np.where(flows < 0, flows, 0.0)
    if not outflows.any() or not inflows.any():
        logger.debug("mirr: cash flows lack an inflow or an outflow, returning 0.0")
        return 0.0

    fv = abs(npv(reinvest_rate, inflows))
    pv = abs(npv(finance_rate, outflows))
    return power(fv / pv, 1.0 / (flows.size - 1)) * (1 + reinvest_rate) - 1


net_present_value = npv
internal_return_rate = irr
