# Requires Python 3.12+
# Uses native type hints: list[x], tuple[x, y], X | None (PEP 585, PEP 604)
"""
Annuity formulas for a single uniform-payment loan.

Closed forms for pmt/ipmt/ppmt/nper/fv/pv and a Newton-Raphson rate solver,
following the OpenFormula (ODF 1.2, Part 2) definitions of the spreadsheet
financial functions.

Sign convention: money paid out is negative, money received is positive.
A 1,000 loan received today (amount=+1000) is repaid with negative payments.
"""

from __future__ import annotations

import numbers
import warnings
from collections.abc import Mapping
from dataclasses import dataclass, fields, replace
from enum import Enum
from typing import Any

from .errors import ConvergenceWarning, MissingArgumentError
from .mathutils import log, power
from .solvers import RootResult, newton_raphson

__version__ = "0.1.0"

# Rate solver defaults
DEFAULT_TOLERANCE = 1e-6
DEFAULT_MAX_ITERATIONS = 100
DEFAULT_RATE_GUESS = 0.1

PERIODS_PER_YEAR = 12


# =============================================================================
# ENUMS
# =============================================================================

class PaymentTiming(Enum):
    """When each payment falls within its period (ordinary annuity vs. annuity due)."""
    END = 0
    BEGINNING = 1

    @classmethod
    def normalize(cls, value: Any) -> PaymentTiming:
        """
        Map a member, a name ("end"/"beginning") or a number (0/1) to a member.

        Anything unrecognized, including None, falls back to END.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls[value.strip().upper()]
            except KeyError:
                return cls.END
        if isinstance(value, numbers.Real) and value == cls.BEGINNING.value:
            return cls.BEGINNING
        return cls.END


# =============================================================================
# LOAN PARAMETERS
# =============================================================================

_ALIASES = {
    "rate": "nominal_rate",
    "pv": "amount",
    "fv": "future_value",
    "ptype": "timing",
}


@dataclass(frozen=True)
class Loan:
    """
    Parameters of a uniform-payment loan plus the annuity formulas over them.

    Rate convention:
        - nominal_rate is the annual rate as a decimal (13% -> 0.13).
        - periodic_rate is always nominal_rate / 12 (monthly periods) and is
          derived, never stored.
        - duration is the number of periods (months).

    Field requirements per formula:
        - pmt: nominal_rate, duration, amount, future_value
        - fv: payment (stored or passed), nominal_rate, duration, amount
        - pv: payment, nominal_rate, duration, future_value
        - ipmt / ppmt: period, nominal_rate, duration, amount
        - nper: payment, nominal_rate, amount, future_value
        - rate: payment, duration, amount, future_value

    Instances are immutable; derived loans (e.g. the shortened loan behind
    ipmt) are new values built with dataclasses.replace.
    """
    nominal_rate: float = 0.0
    duration: float = 1.0
    amount: float = 0.0
    future_value: float = 0.0
    payment: float | None = None
    period: int | None = None
    timing: PaymentTiming = PaymentTiming.END

    def __post_init__(self) -> None:
        object.__setattr__(self, "nominal_rate", float(self.nominal_rate))
        object.__setattr__(self, "duration", float(self.duration))
        object.__setattr__(self, "amount", float(self.amount))
        object.__setattr__(self, "future_value", float(self.future_value))
        if self.payment is not None:
            object.__setattr__(self, "payment", float(self.payment))
        object.__setattr__(self, "timing", PaymentTiming.normalize(self.timing))

    @classmethod
    def from_mapping(cls, params: Mapping[str, Any]) -> Loan:
        """
        Build a Loan from named parameters.

        Accepts the field names plus the short aliases rate, pv, fv and ptype.
        A field name takes precedence over its alias; unknown keys are ignored.
        """
        names = {f.name for f in fields(cls)}
        kwargs: dict[str, Any] = {}
        for key, value in params.items():
            if key in _ALIASES:
                kwargs.setdefault(_ALIASES[key], value)
        for key, value in params.items():
            if key in names:
                kwargs[key] = value
        return cls(**kwargs)

    @property
    def periodic_rate(self) -> float:
        """Monthly rate: nominal_rate / 12."""
        return self.nominal_rate / PERIODS_PER_YEAR

    @property
    def _ptype(self) -> float:
        return float(self.timing.value)

    # -------------------------------------------------------------------------
    # Closed-form annuity functions
    # -------------------------------------------------------------------------

    def pmt(self) -> float:
        """
        Fixed periodic payment that amortizes ``amount`` to ``future_value``.

        Formula:
            factor = (1 + r)^n
            AF     = (factor - 1)(1 + r·type) / r      (AF = n when r = 0)
            PMT    = -(FV + PV·factor) / AF

        Where:
            r    = periodic rate
            n    = duration
            type = 0 (END) or 1 (BEGINNING)

        With r = 0 the loan amortizes in straight line, which requires a
        non-zero duration.

        Returns:
            Periodic payment (negative for a positive loan amount)

        Example:
            >>> Loan(nominal_rate=0.1, duration=12, amount=1000).pmt()
            -87.9158872300099
        """
        r = self.periodic_rate
        factor = power(1.0 + r, self.duration)
        if r == 0:
            annuity_factor = self.duration
        else:
            annuity_factor = (factor - 1) * (1 + r * self._ptype) / r
        return -((self.future_value + self.amount * factor) / annuity_factor)

    def fv(self, payment: float | None = None) -> float:
        """
        Value at the end of ``duration`` periods.

        Formula:
            FV = -(PV·(1 + r)^n + PMT·((1 + r)^n - 1)(1 + r·type) / r)

        There is no zero-rate branch; r = 0 raises ZeroDivisionError.

        Args:
            payment: Payment to use instead of the stored one. Leaves the loan
                untouched.

        Raises:
            MissingArgumentError: If neither a stored nor an explicit payment exists

        Example:
            >>> Loan(nominal_rate=0.05, duration=120, amount=-100, payment=-100).fv()
            15692.928894335748
        """
        if self.payment is None and payment is None:
            raise MissingArgumentError("no payment given")
        final_payment = payment if payment is not None else self.payment

        r = self.periodic_rate
        factor = power(1.0 + r, self.duration)
        annuity_factor = (factor - 1) * (1 + r * self._ptype) / r
        return -((self.amount * factor) + (float(final_payment) * annuity_factor))

    def pv(self) -> float:
        """
        Present value of ``payment`` over ``duration`` periods plus ``future_value``.

        Formula:
            PV = -(FV + PMT·((1 + r)^n - 1)(1 + r·type) / r) / (1 + r)^n

        A missing payment counts as zero.

        Example:
            >>> Loan(nominal_rate=0.24, duration=12, future_value=1000, payment=-300).pv()
            2384.1091906935
        """
        payment = self.payment if self.payment is not None else 0.0
        r = self.periodic_rate
        factor = power(1.0 + r, self.duration)
        annuity_factor = (factor - 1) * (1 + r * self._ptype) / r
        return -(self.future_value + (payment * annuity_factor)) / factor

    def ipmt(self) -> float:
        """
        Interest part of the payment in ``period``.

        The balance outstanding at the start of ``period`` is the future value,
        under this loan's payment, of the same loan shortened to ``period - 1``
        periods. Interest is that balance times the periodic rate.

        For BEGINNING timing the first period carries no interest. Later
        periods use the historical grouping ``interest / 1 + r``, kept for
        compatibility with published results.

        There is no zero-rate branch: the balance is an fv of the shortened
        loan, so nominal_rate = 0 raises ZeroDivisionError here and in ppmt.

        Raises:
            MissingArgumentError: If period is not set
            ZeroDivisionError: If nominal_rate is zero

        Example:
            >>> Loan(nominal_rate=0.0824, duration=12, amount=2500, period=1).ipmt()
            -17.166666666666668
        """
        if self.period is None:
            raise MissingArgumentError("no period given")

        interest = remaining_balance(self) * self.periodic_rate
        if self.timing is PaymentTiming.BEGINNING:
            if self.period == 1:
                return 0.0
            return interest / 1 + self.periodic_rate
        return interest

    def ppmt(self) -> float:
        """Principal part of the payment in ``period``: pmt - ipmt."""
        return self.pmt() - self.ipmt()

    def nper(self) -> float:
        """
        Number of periodic payments.

        Formula:
            z    = PMT·(1 + r·type) / r
            NPER = ln(-FV + z / (PV + z)) / ln(1 + r)

        Raises:
            MissingArgumentError: If payment is not set
            MathDomainError: If a logarithm argument is not positive

        Example:
            >>> Loan(nominal_rate=0.07, amount=8000, payment=-150).nper()
            64.07334877066186
        """
        if self.payment is None:
            raise MissingArgumentError("no payment given")

        r = self.periodic_rate
        z = self.payment * (1.0 + r * self._ptype) / r
        return log(-self.future_value + z / (self.amount + z)) / log(1.0 + r)

    # -------------------------------------------------------------------------
    # Iterative rate solver
    # -------------------------------------------------------------------------

    def rate(
            self,
            tolerance: float = DEFAULT_TOLERANCE,
            max_iterations: int = DEFAULT_MAX_ITERATIONS,
            initial_guess: float = DEFAULT_RATE_GUESS,
            full_output: bool = False,
    ) -> float | tuple[float, RootResult]:
        """
        Interest rate per period, by Newton-Raphson.

        Solves g(x) = 0 for the annuity equation in the rate variable:

            g(x) = FV + (1 + x)^n·PV + PMT·((1 + x)^n - 1)(x·type + 1) / x

        using its analytic derivative (see _rate_residual_derivative). The
        stored nominal_rate is not used.

        The iteration stops when successive estimates differ by at most
        ``tolerance``. If ``max_iterations`` is exhausted first, or an estimate
        lands where g is undefined (x = 0 exactly), the last estimate is
        returned unconverged and a ConvergenceWarning is issued.

        Args:
            tolerance: Absolute tolerance on successive estimates
            max_iterations: Iteration cap
            initial_guess: Starting rate
            full_output: Also return the solver's RootResult

        Returns:
            Periodic rate, or (rate, RootResult) if full_output

        Raises:
            MissingArgumentError: If payment is not set

        Example:
            >>> Loan(amount=-3500, payment=0, duration=10, future_value=10000).rate()
            0.11069085371426901
        """
        if self.payment is None:
            raise MissingArgumentError("no payment given")

        result = newton_raphson(
            self._rate_residual,
            self._rate_residual_derivative,
            float(initial_guess),
            tolerance=tolerance,
            max_iterations=max_iterations,
        )
        if not result.converged:
            warnings.warn(
                f"rate did not converge after {result.iterations} iterations",
                ConvergenceWarning,
                stacklevel=2,
            )
        if full_output:
            return result.root, result
        return result.root

    def _rate_residual(self, x: float) -> float:
        t1 = power(x + 1.0, self.duration)
        return (
            self.future_value
            + t1 * self.amount
            + self.payment * (t1 - 1.0) * (x * self._ptype + 1.0) / x
        )

    def _rate_residual_derivative(self, x: float) -> float:
        """
        g'(x) = n(1+x)^(n-1)·PV
                + PMT·n(1+x)^(n-1)(x·type + 1) / x
                + PMT·((1+x)^n - 1)·type / x
                - PMT·((1+x)^n - 1)(x·type + 1) / x²
        """
        n = self.duration
        t1 = power(x + 1.0, n)
        t2 = power(x + 1.0, n - 1.0)
        c = x * self._ptype + 1.0
        return (
            n * t2 * self.amount
            + self.payment * n * t2 * c / x
            + self.payment * (t1 - 1.0) * self._ptype / x
            - self.payment * (t1 - 1.0) * c / (x ** 2.0)
        )


# =============================================================================
# Remaining balance
# =============================================================================

def remaining_balance(loan: Loan) -> float:
    """
    Balance outstanding at the start of ``loan.period``.

    Builds a new loan with the same rate, amount and timing but only
    ``period - 1`` periods, and evaluates its future value under the original
    loan's payment. The input loan is not modified.

    Raises:
        MissingArgumentError: If period is not set
    """
    if loan.period is None:
        raise MissingArgumentError("no period given")
    shortened = replace(
        loan,
        duration=float(loan.period) - 1.0,
        future_value=0.0,
        payment=None,
        period=None,
    )
    return shortened.fv(payment=loan.pmt())
