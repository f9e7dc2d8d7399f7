"""Interest accrual service for LoanLedger.

This service computes:
- Interest accrued as of a date (flat interest on the original principal)
- Contract totals of fixed-term loans
- Pending and remaining balances
- Maturity and overdue state of fixed-term loans
"""
from datetime import date, timedelta
from typing import Optional

from loanledger.exceptions import InvalidLoanTermsError
from loanledger.logging_config import get_logger
from loanledger.models import ContractTerms, Loan, LoanStatus
from loanledger.money import apply_rate, divide
from loanledger.services.period_clock import PeriodClock

logger = get_logger(__name__)


class AccrualCalculator:
    """Pure interest and balance computations over a Loan snapshot.

    Interest is simple: each elapsed period charges ``principal * rate``,
    independent of what has already been repaid.
    """

    def __init__(self, period_clock=None):
        """Initialize AccrualCalculator.

        Args:
            period_clock: Optional PeriodClock instance.
        """
        self.clock = period_clock or PeriodClock()

    def interest_per_period(self, loan: Loan) -> int:
        """Interest charged for one period, rounded to the minor unit."""
        if loan.principal <= 0 or loan.periodic_rate <= 0:
            return 0
        return apply_rate(loan.principal, loan.periodic_rate)

    def accrued_periods(self, loan: Loan, as_of_date: date) -> int:
        """Periods that have accrued interest, capped at the term for fixed-term loans."""
        periods = self.clock.elapsed_periods(loan.start_date, as_of_date, loan.frequency)
        if not loan.is_indefinite:
            periods = min(periods, loan.term_periods)
        return periods

    def accrued_interest(self, loan: Loan, as_of_date: date) -> int:
        """Interest accrued from the start date up to ``as_of_date``.

        Args:
            loan: Loan snapshot.
            as_of_date: Caller-supplied date; never the wall clock.

        Returns:
            Accrued interest in minor units. Zero before the start date, for
            a zero principal and for a non-positive rate.
        """
        per_period = self.interest_per_period(loan)
        if per_period == 0:
            return 0
        periods = self.accrued_periods(loan, as_of_date)
        accrued = per_period * periods
        logger.debug("Loan %s accrued %s over %s %s periods as of %s",
                     loan.loan_id, accrued, periods, loan.frequency.value, as_of_date)
        return accrued

    def contract_terms(self, loan: Loan) -> ContractTerms:
        """Compute total interest, total payment and the flat installment.

        Raises:
            InvalidLoanTermsError: If the loan is indefinite.
        """
        if loan.is_indefinite:
            raise InvalidLoanTermsError(
                f"Loan '{loan.loan_id}' is indefinite and has no contract totals",
                {'loan_id': loan.loan_id}
            )
        per_period = self.interest_per_period(loan)
        total_interest = per_period * loan.term_periods
        total_payment = loan.principal + total_interest
        return ContractTerms(
            interest_per_period=per_period,
            total_interest=total_interest,
            total_payment=total_payment,
            period_payment=divide(total_payment, loan.term_periods),
        )

    def pending_interest(self, loan: Loan, as_of_date: date) -> int:
        return max(0, self.accrued_interest(loan, as_of_date) - loan.paid_interest)

    def pending_capital(self, loan: Loan) -> int:
        return max(0, loan.principal - loan.paid_capital)

    def remaining_amount(self, loan: Loan, as_of_date: date) -> int:
        """Unpaid principal plus accrued-but-unpaid interest as of a date."""
        return max(0, self.pending_capital(loan) + self.pending_interest(loan, as_of_date))

    def maturity_date(self, loan: Loan) -> Optional[date]:
        """First date on which every contracted period has accrued.

        Matches the period count rather than the clamped calendar step, so a
        one-month loan started on Jan 31 matures on Mar 1, not Feb 29.
        Returns None for indefinite loans.
        """
        if loan.is_indefinite:
            return None
        maturity = self.clock.add_periods(loan.start_date, loan.term_periods, loan.frequency)
        if self.clock.elapsed_periods(loan.start_date, maturity, loan.frequency) < loan.term_periods:
            maturity += timedelta(days=1)  # clamped to month end; the period closes on the 1st
        return maturity

    def is_overdue(self, loan: Loan, as_of_date: date) -> bool:
        """True when an active fixed-term loan is past maturity with money still owed."""
        if loan.status != LoanStatus.ACTIVE or loan.is_indefinite:
            return False
        return (as_of_date > self.maturity_date(loan)
                and self.remaining_amount(loan, as_of_date) > 0)
