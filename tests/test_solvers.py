"""
Unit tests for the Newton-Raphson solver and the domain-checked math helpers.

Version: 0.1.0
Status: Active
"""

import math
import unittest
from decimal import Decimal, localcontext

from tvm_formulas.errors import FinanceError, MathDomainError
from tvm_formulas.mathutils import log, power
from tvm_formulas.solvers import RootResult, newton_raphson

# =============================================================================
# Test Parameters
# =============================================================================

DECIMAL_PLACES_FOR_ASSERTIONS: int = 10  # decimal places for assertAlmostEqual


def _npv_like(x):
    """Steep convex residual with a pole at x = -1 (NPV of [-100, 0, 0, 74])."""
    return -100 + 74 / (1 + x) ** 3


def _npv_like_derivative(x):
    return -3 * 74 / (1 + x) ** 4


# =============================================================================
# Newton-Raphson
# =============================================================================

class TestNewtonRaphson(unittest.TestCase):

    def test_square_root_of_two(self):
        result = newton_raphson(lambda x: x * x - 2.0, lambda x: 2.0 * x, 1.0, tolerance=1e-12)
        self.assertIsInstance(result, RootResult)
        self.assertTrue(result.converged)
        self.assertAlmostEqual(result.root, math.sqrt(2.0), places=DECIMAL_PLACES_FOR_ASSERTIONS)
        self.assertLess(result.iterations, 10)

    def test_decimal_operands(self):
        with localcontext() as ctx:
            ctx.prec = 50
            result = newton_raphson(
                lambda x: x * x - 2,
                lambda x: 2 * x,
                Decimal(1),
                tolerance=Decimal("1e-40"),
            )
            self.assertIsInstance(result.root, Decimal)
            self.assertTrue(result.converged)
            self.assertLess(abs(result.root - Decimal(2).sqrt()), Decimal("1e-40"))

    def test_exact_root_at_guess(self):
        result = newton_raphson(lambda x: x - 3.0, lambda x: 1.0, 3.0)
        self.assertTrue(result.converged)
        self.assertEqual(result.root, 3.0)
        self.assertEqual(result.iterations, 1)

    def test_zero_derivative_stops_unconverged(self):
        result = newton_raphson(lambda x: x * x + 1.0, lambda x: 2.0 * x, 0.0)
        self.assertFalse(result.converged)
        self.assertEqual(result.root, 0.0)

    def test_iteration_cap_returns_last_iterate(self):
        result = newton_raphson(lambda x: x * x - 2.0, lambda x: 2.0 * x, 100.0, max_iterations=2)
        self.assertFalse(result.converged)
        self.assertEqual(result.iterations, 2)
        # Two steps from 100: 100 -> 50.01 -> ~25.02
        self.assertAlmostEqual(result.root, 25.024996000799838, places=6)

    def test_damping_keeps_iterates_right_of_pole(self):
        result = newton_raphson(_npv_like, _npv_like_derivative, 1.0, tolerance=1e-14, damped=True)
        self.assertTrue(result.converged)
        self.assertAlmostEqual(result.root, -0.09549583035161031, places=DECIMAL_PLACES_FOR_ASSERTIONS)

    def test_damping_steps_back_from_undefined_point(self):
        # The full first step from 1.0 lands on x = -1, where f is undefined
        result = newton_raphson(
            lambda x: -1.0 + 1.0 / (1.0 + x),
            lambda x: -1.0 / (1.0 + x) ** 2,
            1.0,
            damped=True,
        )
        self.assertTrue(result.converged)
        self.assertAlmostEqual(result.root, 0.0, places=DECIMAL_PLACES_FOR_ASSERTIONS)

    def test_undefined_residual_at_guess_stops_unconverged(self):
        result = newton_raphson(lambda x: 1.0 / x, lambda x: -1.0 / (x * x), 0.0)
        self.assertFalse(result.converged)
        self.assertEqual(result.root, 0.0)
        self.assertEqual(result.iterations, 1)

    def test_damping_stops_when_no_step_reduces_residual(self):
        # x**2 + 1 has no real root
        result = newton_raphson(lambda x: x * x + 1.0, lambda x: 2.0 * x, 1e-3, damped=True)
        self.assertFalse(result.converged)

    def test_logs_iterations_at_debug(self):
        with self.assertLogs("tvm_formulas.solvers", level="DEBUG") as captured:
            newton_raphson(lambda x: x * x - 2.0, lambda x: 2.0 * x, 1.0)
        self.assertTrue(any("Newton iter 1" in line for line in captured.output))


# =============================================================================
# Domain-checked math
# =============================================================================

class TestMathUtils(unittest.TestCase):

    def test_power(self):
        self.assertEqual(power(2.0, 10.0), 1024.0)
        self.assertAlmostEqual(power(1.01, 0.5), math.sqrt(1.01), places=DECIMAL_PLACES_FOR_ASSERTIONS)

    def test_fractional_power_of_negative_base_raises(self):
        with self.assertRaises(MathDomainError):
            power(-8.0, 1.0 / 3.0)

    def test_integer_power_of_negative_base_is_real(self):
        self.assertEqual(power(-2.0, 3.0), -8.0)

    def test_log(self):
        self.assertAlmostEqual(log(math.e), 1.0, places=DECIMAL_PLACES_FOR_ASSERTIONS)

    def test_log_of_non_positive_raises(self):
        for x in (0.0, -1.0, -1e-300):
            with self.subTest(x=x):
                with self.assertRaises(MathDomainError):
                    log(x)

    def test_domain_error_is_chained_value_error(self):
        with self.assertRaises(MathDomainError) as ctx:
            log(-1.0)
        self.assertIsInstance(ctx.exception, FinanceError)
        self.assertIsInstance(ctx.exception, ValueError)
        self.assertIsInstance(ctx.exception.__cause__, ValueError)


if __name__ == '__main__':
    unittest.main()
