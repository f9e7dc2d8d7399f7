"""Business logic engine for LoanLedger.

This module provides the LedgerEngine class which acts as a facade over the
pure services in loanledger/services/ and the LedgerStore. It loads a loan
snapshot, runs the service, and commits the returned delta with a version
check so that two writers can never silently overwrite each other.

Service Classes:
    - AccrualCalculator: Interest and balance computations
    - PaymentAllocator: Payment validation and application
    - FinalizationService: Closing of indefinite loans
"""
from datetime import date

from loanledger.config import DEFAULT_PAYMENT_METHOD, LedgerConfig
from loanledger.database import LedgerStore
from loanledger.exceptions import LoanLedgerError
from loanledger.logging_config import get_logger, setup_logging
from loanledger.models import LedgerDelta, Loan
from loanledger.money import format_amount
from loanledger.result import Result
from loanledger.services import AccrualCalculator, FinalizationService, PaymentAllocator

logger = get_logger(__name__)


class LedgerEngine:
    """Handles ledger operations, interfacing with LedgerStore.

    Attributes:
        store: LedgerStore instance for data persistence.
        accrual_calculator: AccrualCalculator instance (lazy-loaded).
        payment_allocator: PaymentAllocator instance (lazy-loaded).
        finalization_service: FinalizationService instance (lazy-loaded).
    """

    def __init__(self, store):
        self.store = store
        self._accrual_calculator = None
        self._payment_allocator = None
        self._finalization_service = None

    @classmethod
    def from_config(cls, config=None):
        """Build an engine for a host application.

        Configures logging and opens the store named by ``config``, which
        defaults to ``LedgerConfig.from_env()``.
        """
        config = config or LedgerConfig.from_env()
        setup_logging(config.log_level, config.log_format)
        return cls(LedgerStore(config.db_name))

    @property
    def accrual_calculator(self):
        """Lazy-load AccrualCalculator instance."""
        if self._accrual_calculator is None:
            self._accrual_calculator = AccrualCalculator()
        return self._accrual_calculator

    @property
    def payment_allocator(self):
        """Lazy-load PaymentAllocator instance."""
        if self._payment_allocator is None:
            self._payment_allocator = PaymentAllocator(self.accrual_calculator)
        return self._payment_allocator

    @property
    def finalization_service(self):
        """Lazy-load FinalizationService instance."""
        if self._finalization_service is None:
            self._finalization_service = FinalizationService(self.accrual_calculator)
        return self._finalization_service

    # =========================================================================
    # Loans
    # =========================================================================

    def originate_loan(self, principal, periodic_rate, frequency, start_date,
                       term_periods=None, is_indefinite=False, debtor_id=None,
                       description="", loan_id=None) -> Loan:
        """Create and store a new loan.

        Args:
            principal: Amount lent in minor units.
            periodic_rate: Fraction charged per period (e.g. ``Decimal("0.10")``).
            frequency: "daily", "weekly" or "monthly".
            start_date: First day of accrual.
            term_periods: Number of periods (fixed-term loans).
            is_indefinite: True for open-ended loans.
            debtor_id: Optional debtor reference.
            description: Free-form description.
            loan_id: Optional reference; the next ``L-nnn`` id by default.

        Returns:
            The stored Loan snapshot.
        """
        if loan_id is None:
            loan_id = self.store.next_loan_id()
        loan = Loan.originate(
            loan_id=loan_id,
            principal=principal,
            periodic_rate=periodic_rate,
            frequency=frequency,
            start_date=start_date,
            term_periods=term_periods,
            is_indefinite=is_indefinite,
            debtor_id=debtor_id,
            description=description,
        )
        self.store.add_loan(loan)
        logger.info("Originated loan %s: principal %s at %s per %s period",
                    loan.loan_id, format_amount(loan.principal), loan.periodic_rate,
                    loan.frequency.value, extra={'loan_id': loan.loan_id, 'action': 'originate'})
        return loan

    def get_loan(self, loan_id) -> Loan:
        return self.store.get_loan(loan_id)

    def accrued_interest(self, loan_id, as_of_date: date) -> int:
        """Interest accrued on a stored loan as of a date."""
        return self.accrual_calculator.accrued_interest(self.store.get_loan(loan_id), as_of_date)

    def remaining_amount(self, loan_id, as_of_date: date) -> int:
        return self.accrual_calculator.remaining_amount(self.store.get_loan(loan_id), as_of_date)

    # =========================================================================
    # Payments and finalization
    # =========================================================================

    def record_payment(self, loan_id, amount, payment_type, payment_date: date,
                       payment_method=DEFAULT_PAYMENT_METHOD, reference="",
                       notes="") -> LedgerDelta:
        """Allocate a payment to a stored loan and commit it.

        Returns:
            The committed LedgerDelta.

        Raises:
            LoanNotFoundError: If the loan doesn't exist.
            LoanNotActiveError: If the loan is completed.
            ValidationError: If the payment is rejected by the allocator.
            ConcurrentUpdateError: If the loan changed while allocating.
        """
        try:
            loan = self.store.get_loan(loan_id)
            delta = self.payment_allocator.allocate(
                loan, amount, payment_type, payment_date,
                payment_method=payment_method, reference=reference, notes=notes
            )
            self.store.commit(delta, expected_version=loan.version)
        except LoanLedgerError as e:
            logger.warning("Payment on loan %s rejected: %s", loan_id, e,
                           extra={'loan_id': loan_id, 'action': 'payment'})
            raise

        logger.info("Recorded %s payment %s of %s on loan %s (remaining %s, %s)",
                    delta.payment.payment_type.value, delta.payment.payment_id,
                    format_amount(amount), loan_id,
                    format_amount(delta.loan.remaining_amount), delta.loan.status.value,
                    extra={'loan_id': loan_id, 'payment_id': delta.payment.payment_id,
                           'action': 'payment'})
        return delta

    def finalize_loan(self, loan_id, as_of_date: date) -> LedgerDelta:
        """Close a stored indefinite loan and commit its final totals.

        Raises:
            LoanNotFoundError: If the loan doesn't exist.
            NotIndefiniteError: If the loan has a fixed term.
            AlreadyFinalizedError: If the loan is already completed.
            ConcurrentUpdateError: If the loan changed while finalizing.
        """
        try:
            loan = self.store.get_loan(loan_id)
            delta = self.finalization_service.finalize(loan, as_of_date)
            self.store.commit(delta, expected_version=loan.version)
        except LoanLedgerError as e:
            logger.warning("Finalization of loan %s rejected: %s", loan_id, e,
                           extra={'loan_id': loan_id, 'action': 'finalize'})
            raise

        snapshot = delta.final_snapshot
        logger.info("Finalized loan %s on %s: interest %s, total %s",
                    loan_id, snapshot.end_date, format_amount(snapshot.final_total_interest),
                    format_amount(snapshot.final_total_payment),
                    extra={'loan_id': loan_id, 'action': 'finalize'})
        return delta

    def try_record_payment(self, *args, **kwargs) -> Result[LedgerDelta]:
        """Like record_payment, but returns a Result instead of raising."""
        try:
            return Result.ok(self.record_payment(*args, **kwargs))
        except LoanLedgerError as e:
            return Result.from_error(e)

    def try_finalize_loan(self, loan_id, as_of_date: date) -> Result[LedgerDelta]:
        """Like finalize_loan, but returns a Result instead of raising."""
        try:
            return Result.ok(self.finalize_loan(loan_id, as_of_date))
        except LoanLedgerError as e:
            return Result.from_error(e)
