"""Tests for interest accrual and contract totals."""
import os
import sys
import unittest
from dataclasses import replace
from datetime import date, timedelta
from decimal import Decimal

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from loanledger.exceptions import InvalidLoanTermsError
from loanledger.models import Loan, LoanStatus
from loanledger.money import from_minor, to_minor
from loanledger.services.accrual_calculator import AccrualCalculator


def fixed_loan(**overrides):
    params = dict(
        loan_id="L-001",
        principal=to_minor(1_000_000),
        periodic_rate=Decimal("0.10"),
        frequency="monthly",
        start_date=date(2024, 1, 1),
        term_periods=12,
    )
    params.update(overrides)
    return Loan.originate(**params)


def indefinite_loan(**overrides):
    params = dict(
        loan_id="L-002",
        principal=to_minor(500_000),
        periodic_rate=Decimal("0.005"),
        frequency="daily",
        start_date=date(2024, 1, 1),
        is_indefinite=True,
    )
    params.update(overrides)
    return Loan.originate(**params)


class TestAccruedInterest(unittest.TestCase):

    def setUp(self):
        self.calc = AccrualCalculator()

    def test_zero_on_start_date(self):
        for loan in (fixed_loan(), indefinite_loan(), fixed_loan(frequency="weekly")):
            self.assertEqual(self.calc.accrued_interest(loan, loan.start_date), 0)

    def test_indefinite_daily_scenario(self):
        """500,000 at 0.5% per day for 10 days accrues 25,000."""
        loan = indefinite_loan()
        accrued = self.calc.accrued_interest(loan, date(2024, 1, 11))
        self.assertEqual(from_minor(accrued), Decimal("25000.00"))

    def test_monthly_accrual(self):
        loan = fixed_loan()
        self.assertEqual(self.calc.accrued_interest(loan, date(2024, 3, 15)), 2 * to_minor(100_000))

    def test_weekly_accrual(self):
        loan = fixed_loan(frequency="weekly", periodic_rate=Decimal("0.02"))
        self.assertEqual(self.calc.accrued_interest(loan, date(2024, 1, 22)), 3 * to_minor(20_000))

    def test_fixed_term_caps_at_term(self):
        loan = fixed_loan()
        self.assertEqual(self.calc.accrued_interest(loan, date(2026, 6, 1)), 12 * to_minor(100_000))

    def test_indefinite_is_not_capped(self):
        loan = indefinite_loan(frequency="monthly", periodic_rate=Decimal("0.10"))
        self.assertEqual(self.calc.accrued_interest(loan, date(2026, 1, 1)), 24 * to_minor(50_000))

    def test_before_start_is_zero(self):
        self.assertEqual(self.calc.accrued_interest(fixed_loan(), date(2023, 6, 1)), 0)

    def test_zero_principal_or_rate(self):
        self.assertEqual(self.calc.accrued_interest(fixed_loan(principal=0), date(2024, 6, 1)), 0)
        self.assertEqual(
            self.calc.accrued_interest(fixed_loan(periodic_rate=Decimal("0")), date(2024, 6, 1)), 0)
        self.assertEqual(
            self.calc.accrued_interest(fixed_loan(periodic_rate=Decimal("-0.05")), date(2024, 6, 1)), 0)

    def test_monotonic_over_time(self):
        for loan in (fixed_loan(), indefinite_loan(), fixed_loan(frequency="weekly", term_periods=5)):
            previous = 0
            day = loan.start_date
            for _ in range(500):
                day += timedelta(days=3)
                accrued = self.calc.accrued_interest(loan, day)
                self.assertGreaterEqual(accrued, previous)
                previous = accrued

    def test_interest_per_period_rounds_half_up(self):
        loan = fixed_loan(principal=101, periodic_rate=Decimal("0.005"))
        # 101 * 0.005 = 0.505 minor units
        self.assertEqual(self.calc.interest_per_period(loan), 1)


class TestContractTerms(unittest.TestCase):

    def setUp(self):
        self.calc = AccrualCalculator()

    def test_fixed_term_installment_scenario(self):
        """1,000,000 at 10% monthly over 12 months."""
        terms = self.calc.contract_terms(fixed_loan())
        self.assertEqual(from_minor(terms.total_interest), Decimal("1200000.00"))
        self.assertEqual(from_minor(terms.total_payment), Decimal("2200000.00"))
        self.assertEqual(from_minor(terms.period_payment), Decimal("183333.33"))

    def test_originate_stores_contract_totals(self):
        loan = fixed_loan()
        self.assertEqual(loan.total_interest, to_minor(1_200_000))
        self.assertEqual(loan.total_payment, to_minor(2_200_000))
        self.assertEqual(loan.period_payment, to_minor("183333.33"))

    def test_indefinite_has_no_contract(self):
        with self.assertRaises(InvalidLoanTermsError):
            self.calc.contract_terms(indefinite_loan())


class TestBalances(unittest.TestCase):

    def setUp(self):
        self.calc = AccrualCalculator()

    def test_remaining_on_start_date_is_principal(self):
        loan = fixed_loan()
        self.assertEqual(self.calc.remaining_amount(loan, loan.start_date), loan.principal)

    def test_remaining_after_partial_payments(self):
        loan = replace(indefinite_loan(), paid_interest=1_000_000, paid_capital=10_000_000,
                       paid_amount=11_000_000)
        # accrued 2,500,000 on day 10
        self.assertEqual(
            self.calc.remaining_amount(loan, date(2024, 1, 11)),
            (50_000_000 - 10_000_000) + (2_500_000 - 1_000_000)
        )
        self.assertEqual(self.calc.pending_interest(loan, date(2024, 1, 11)), 1_500_000)
        self.assertEqual(self.calc.pending_capital(loan), 40_000_000)

    def test_maturity_date(self):
        self.assertEqual(self.calc.maturity_date(fixed_loan()), date(2025, 1, 1))
        self.assertIsNone(self.calc.maturity_date(indefinite_loan()))

    def test_overdue_only_after_maturity(self):
        loan = fixed_loan(term_periods=3)
        self.assertFalse(self.calc.is_overdue(loan, date(2024, 4, 1)))
        self.assertTrue(self.calc.is_overdue(loan, date(2024, 4, 2)))

    def test_month_end_maturity_follows_period_count(self):
        loan = fixed_loan(start_date=date(2024, 1, 31), term_periods=1)

        self.assertEqual(self.calc.maturity_date(loan), date(2024, 3, 1))
        self.assertEqual(self.calc.accrued_periods(loan, date(2024, 2, 29)), 0)
        self.assertEqual(self.calc.accrued_periods(loan, date(2024, 3, 1)), 1)
        self.assertFalse(self.calc.is_overdue(loan, date(2024, 3, 1)))
        self.assertTrue(self.calc.is_overdue(loan, date(2024, 3, 2)))

    def test_maturity_on_short_month_start_day(self):
        # Jan 30 2023 + 1 month clamps to Feb 28, which counts 0 periods
        loan = fixed_loan(start_date=date(2023, 1, 30), term_periods=1)
        self.assertEqual(self.calc.maturity_date(loan), date(2023, 3, 1))
        # no clamping when the start day exists in the target month
        self.assertEqual(self.calc.maturity_date(fixed_loan(start_date=date(2024, 1, 29), term_periods=1)),
                         date(2024, 2, 29))

    def test_completed_and_indefinite_loans_are_never_overdue(self):
        completed = replace(fixed_loan(term_periods=3), status=LoanStatus.COMPLETED)
        self.assertFalse(self.calc.is_overdue(completed, date(2030, 1, 1)))
        self.assertFalse(self.calc.is_overdue(indefinite_loan(), date(2030, 1, 1)))


if __name__ == '__main__':
    unittest.main()
