# Requires Python 3.12+
"""Domain-checked math primitives shared by the annuity and cash-flow formulas."""

from __future__ import annotations

import math

from .errors import MathDomainError

__version__ = "0.1.0"


def power(base: float, exponent: float) -> float:
    """
    Real-valued ``base ** exponent``.

    Unlike the ``**`` operator, a negative base with a fractional exponent
    does not silently produce a complex number.

    Raises:
        MathDomainError: If the result is not a real number
        OverflowError: If the result is too large to represent
    """
    try:
        return math.pow(base, exponent)
    except ValueError as e:
        raise MathDomainError(
            f"power undefined for base={base!r}, exponent={exponent!r}"
        ) from e


def log(x: float) -> float:
    """
    Natural logarithm.

    Raises:
        MathDomainError: If x is not positive
    """
    try:
        return math.log(x)
    except ValueError as e:
        raise MathDomainError(f"log undefined for x={x!r}") from e
