# Requires Python 3.12+
"""
TVM Formulas — time-value-of-money functions for loans and cash-flow series.

Closed-form annuity functions (pmt, ipmt, ppmt, nper, fv, pv), net present
value, internal and modified internal rate of return, and a Newton-Raphson
periodic-rate solver.
"""

from __future__ import annotations

__version__ = "0.1.0"

# Errors and warnings
from tvm_formulas.errors import (
    FinanceError,
    MissingArgumentError,
    MathDomainError,
    ConvergenceWarning,
)

# Root finding
from tvm_formulas.solvers import (
    RootResult,
    newton_raphson,
)

# Cash-flow series (NPV, IRR, MIRR)
from tvm_formulas.cashflows import (
    npv,
    irr,
    mirr,
    net_present_value,
    internal_return_rate,
)

# Loan annuity functions
from tvm_formulas.loan import (
    PaymentTiming,
    Loan,
    remaining_balance,
)

__all__ = [
    "__version__",
    # Errors
    "FinanceError",
    "MissingArgumentError",
    "MathDomainError",
    "ConvergenceWarning",
    # Root finding
    "RootResult",
    "newton_raphson",
    # Cash flows
    "npv",
    "irr",
    "mirr",
    "net_present_value",
    "internal_return_rate",
    # Loan
    "PaymentTiming",
    "Loan",
    "remaining_balance",
]
