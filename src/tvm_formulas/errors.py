# Requires Python 3.12+
"""
Error and warning types raised by tvm_formulas.

Taxonomy:
    MissingArgumentError: a required loan field (payment, period) is absent.
    MathDomainError: a logarithm or fractional power received an argument
        outside its domain.
    ConvergenceWarning: an iterative solver exhausted its iteration cap.
        The last iterate is still returned.

One-sided cash flows passed to irr/mirr are not errors; those return 0.0.
"""

from __future__ import annotations

__version__ = "0.1.0"


class FinanceError(ValueError):
    """Base class for tvm_formulas errors."""


class MissingArgumentError(FinanceError):
    """A required argument was neither stored on the loan nor passed in."""


class MathDomainError(FinanceError):
    """A transcendental operation was evaluated outside its domain."""


class ConvergenceWarning(RuntimeWarning):
    """Newton-Raphson stopped at its iteration cap without meeting tolerance."""
