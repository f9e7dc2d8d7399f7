"""Finalization service for LoanLedger.

Closes an indefinite loan: the interest accrued up to the closing date is
frozen as the loan's final total and the loan becomes completed.
"""
from dataclasses import replace
from datetime import date

from loanledger.exceptions import AlreadyFinalizedError, NotIndefiniteError
from loanledger.logging_config import get_logger
from loanledger.models import FinalSnapshot, LedgerDelta, Loan, LoanStatus
from loanledger.services.accrual_calculator import AccrualCalculator

logger = get_logger(__name__)


class FinalizationService:
    """Freezes the final totals of indefinite loans."""

    def __init__(self, accrual_calculator=None):
        self.calculator = accrual_calculator or AccrualCalculator()

    def finalize(self, loan: Loan, as_of_date: date) -> LedgerDelta:
        """Close an indefinite loan as of a date.

        Args:
            loan: Current loan snapshot.
            as_of_date: Closing date; becomes the loan's end date.

        Returns:
            LedgerDelta with the completed loan and its FinalSnapshot.

        Raises:
            NotIndefiniteError: If the loan has a fixed term.
            AlreadyFinalizedError: If the loan is already completed.
        """
        if not loan.is_indefinite:
            raise NotIndefiniteError(loan.loan_id)
        if loan.status != LoanStatus.ACTIVE:
            raise AlreadyFinalizedError(loan.loan_id)

        final_accrued = self.calculator.accrued_interest(loan, as_of_date)
        periods = self.calculator.accrued_periods(loan, as_of_date)
        final_total_payment = loan.principal + final_accrued

        snapshot = FinalSnapshot(
            loan_id=loan.loan_id,
            end_date=as_of_date,
            periods_elapsed=periods,
            final_total_interest=final_accrued,
            final_total_payment=final_total_payment,
        )
        new_loan = replace(
            loan,
            status=LoanStatus.COMPLETED,
            end_date=as_of_date,
            periods_elapsed=periods,
            final_total_interest=final_accrued,
            final_total_payment=final_total_payment,
            remaining_amount=self.calculator.remaining_amount(loan, as_of_date),
            version=loan.version + 1,
        )

        logger.debug("Finalized loan %s after %s periods: interest %s, total %s",
                     loan.loan_id, periods, final_accrued, final_total_payment)
        return LedgerDelta(loan=new_loan, final_snapshot=snapshot)
