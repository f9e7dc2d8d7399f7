"""Payment allocation service for LoanLedger.

Applies a single interest or capital payment to a loan snapshot. The
allocator is pure: it reads the snapshot, validates the payment against the
balances pending on the payment date and returns a new snapshot together
with the Payment record. Persisting both is the caller's job.
"""
from dataclasses import replace
from datetime import date

from loanledger.config import DEFAULT_PAYMENT_METHOD
from loanledger.exceptions import (
    ExceedsPendingCapitalError,
    ExceedsPendingInterestError,
    InvalidAmountError,
    LoanNotActiveError,
)
from loanledger.logging_config import get_logger
from loanledger.models import LedgerDelta, Loan, LoanStatus, Payment, PaymentType
from loanledger.services.accrual_calculator import AccrualCalculator

logger = get_logger(__name__)


class PaymentAllocator:
    """Validates payments and derives the loan's next state."""

    def __init__(self, accrual_calculator=None):
        """Initialize PaymentAllocator.

        Args:
            accrual_calculator: Optional AccrualCalculator instance.
        """
        self.calculator = accrual_calculator or AccrualCalculator()

    def allocate(self, loan: Loan, payment_amount: int, payment_type, payment_date: date,
                 payment_method: str = DEFAULT_PAYMENT_METHOD, reference: str = "",
                 notes: str = "") -> LedgerDelta:
        """Apply a payment to a loan.

        An interest payment may not exceed the interest accrued and unpaid on
        ``payment_date``; a capital payment may not exceed the unpaid
        principal. The loan completes when nothing remains pending.

        Args:
            loan: Current loan snapshot.
            payment_amount: Amount in minor units.
            payment_type: PaymentType or its string value.
            payment_date: Date the payment is booked on (may be back-dated).
            payment_method: How the money was received.
            reference: Optional external reference (receipt, transfer id).
            notes: Free-form notes.

        Returns:
            LedgerDelta with the new loan snapshot and the Payment.

        Raises:
            LoanNotActiveError: If the loan is completed.
            InvalidAmountError: If the amount is not a positive integer.
            InvalidPaymentTypeError: If the type is not interest or capital.
            ExceedsPendingInterestError: If an interest payment is too large.
            ExceedsPendingCapitalError: If a capital payment is too large.
        """
        if loan.status != LoanStatus.ACTIVE:
            raise LoanNotActiveError(loan.loan_id, loan.status.value)
        if (isinstance(payment_amount, bool) or not isinstance(payment_amount, int)
                or payment_amount <= 0):
            raise InvalidAmountError(payment_amount)
        payment_type = PaymentType.coerce(payment_type)

        # Step 1: Pending balances on the payment date
        accrued = self.calculator.accrued_interest(loan, payment_date)
        pending_interest = max(0, accrued - loan.paid_interest)
        pending_capital = max(0, loan.principal - loan.paid_capital)

        # Step 2: Split
        if payment_type == PaymentType.INTEREST:
            if payment_amount > pending_interest:
                raise ExceedsPendingInterestError(payment_amount, pending_interest, loan.loan_id)
            interest_payment, capital_payment = payment_amount, 0
        else:
            if payment_amount > pending_capital:
                raise ExceedsPendingCapitalError(payment_amount, pending_capital, loan.loan_id)
            interest_payment, capital_payment = 0, payment_amount

        # Step 3: New totals
        new_paid_interest = loan.paid_interest + interest_payment
        new_paid_capital = loan.paid_capital + capital_payment
        new_paid_amount = loan.paid_amount + payment_amount

        new_pending_interest = max(0, accrued - new_paid_interest)
        new_pending_capital = max(0, loan.principal - new_paid_capital)
        new_remaining = new_pending_capital + new_pending_interest
        new_status = LoanStatus.COMPLETED if new_remaining <= 0 else LoanStatus.ACTIVE

        payment_count = loan.payment_count + 1
        payment = Payment(
            payment_id=f"{loan.loan_id}-P{payment_count:04d}",
            loan_id=loan.loan_id,
            amount=payment_amount,
            payment_type=payment_type,
            payment_date=payment_date,
            interest_payment=interest_payment,
            capital_payment=capital_payment,
            accrued_interest_at_payment=accrued,
            remaining_after_payment=new_remaining,
            payment_method=payment_method,
            reference=reference,
            notes=notes,
        )

        new_loan = replace(
            loan,
            paid_interest=new_paid_interest,
            paid_capital=new_paid_capital,
            paid_amount=new_paid_amount,
            remaining_amount=new_remaining,
            status=new_status,
            last_payment_date=payment_date,
            payment_count=payment_count,
            version=loan.version + 1,
        )

        logger.debug("Allocated %s %s to loan %s (remaining %s, status %s)",
                     payment_amount, payment_type.value, loan.loan_id,
                     new_remaining, new_status.value)
        return LedgerDelta(loan=new_loan, payment=payment)
