"""Ledger entities for LoanLedger.

``Loan`` is an immutable snapshot: every operation returns a new snapshot
built with ``dataclasses.replace`` and never mutates the one it was given.
All monetary fields are integer minor units (see ``loanledger.money``).
"""
from dataclasses import dataclass, replace
from datetime import date
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Optional

from loanledger.config import DEFAULT_PAYMENT_METHOD
from loanledger.exceptions import InvalidLoanTermsError, InvalidPaymentTypeError


class Frequency(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"

    @classmethod
    def coerce(cls, value) -> "Frequency":
        try:
            return cls(value)
        except ValueError:
            raise InvalidLoanTermsError(f"Unknown frequency {value!r}", {'frequency': value}) from None


class LoanStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"

    @classmethod
    def coerce(cls, value) -> "LoanStatus":
        try:
            return cls(value)
        except ValueError:
            raise InvalidLoanTermsError(f"Unknown loan status {value!r}", {'status': value}) from None


class PaymentType(str, Enum):
    INTEREST = "interest"
    CAPITAL = "capital"

    @classmethod
    def coerce(cls, value) -> "PaymentType":
        try:
            return cls(value)
        except ValueError:
            raise InvalidPaymentTypeError(value) from None


@dataclass(frozen=True)
class ContractTerms:
    """Contract-time quantities of a fixed-term loan."""
    interest_per_period: int
    total_interest: int
    total_payment: int
    period_payment: int


@dataclass(frozen=True)
class Loan:
    """Snapshot of a loan's terms and running totals.

    Attributes:
        loan_id: Loan reference (e.g. ``"L-001"``).
        principal: Amount lent, fixed at origination.
        periodic_rate: Fraction of the principal charged per period.
        frequency: Length of one period.
        start_date: First day of accrual.
        is_indefinite: True for open-ended loans, which have no term.
        term_periods: Contracted number of periods (fixed-term loans only).
        status: ``active`` until paid off or finalized.
        version: Incremented on every change; used for optimistic commits.
    """
    loan_id: str
    principal: int
    periodic_rate: Decimal
    frequency: Frequency
    start_date: date
    is_indefinite: bool = False
    term_periods: Optional[int] = None
    debtor_id: Optional[str] = None
    description: str = ""
    status: LoanStatus = LoanStatus.ACTIVE
    paid_interest: int = 0
    paid_capital: int = 0
    paid_amount: int = 0
    remaining_amount: int = 0
    total_interest: Optional[int] = None
    total_payment: Optional[int] = None
    period_payment: Optional[int] = None
    last_payment_date: Optional[date] = None
    payment_count: int = 0
    end_date: Optional[date] = None
    final_total_interest: Optional[int] = None
    final_total_payment: Optional[int] = None
    periods_elapsed: Optional[int] = None
    version: int = 0

    def __post_init__(self):
        if isinstance(self.principal, bool) or not isinstance(self.principal, int) or self.principal < 0:
            raise InvalidLoanTermsError(
                f"Principal must be a non-negative whole number of minor units, got {self.principal!r}",
                {'loan_id': self.loan_id, 'principal': self.principal}
            )
        rate = self.periodic_rate
        if not isinstance(rate, Decimal):
            try:
                rate = Decimal(str(rate))
            except InvalidOperation:
                rate = None
        if isinstance(self.periodic_rate, bool) or rate is None or not rate.is_finite():
            raise InvalidLoanTermsError(
                f"Periodic rate must be a finite number, got {self.periodic_rate!r}",
                {'loan_id': self.loan_id, 'periodic_rate': self.periodic_rate}
            )
        object.__setattr__(self, 'periodic_rate', rate)
        object.__setattr__(self, 'frequency', Frequency.coerce(self.frequency))
        object.__setattr__(self, 'status', LoanStatus.coerce(self.status))

        if self.is_indefinite:
            object.__setattr__(self, 'term_periods', None)
        elif (isinstance(self.term_periods, bool) or not isinstance(self.term_periods, int)
                or self.term_periods <= 0):
            raise InvalidLoanTermsError(
                f"Fixed-term loan needs a positive number of periods, got {self.term_periods!r}",
                {'loan_id': self.loan_id, 'term_periods': self.term_periods}
            )

    @classmethod
    def originate(cls, loan_id, principal, periodic_rate, frequency, start_date,
                  term_periods=None, is_indefinite=False, debtor_id=None, description=""):
        """Build the initial snapshot of a new loan.

        Accumulators start at zero, the remaining amount equals the principal
        and, for fixed-term loans, the contract quantities are computed once
        and stored on the snapshot.

        Returns:
            A new active Loan at version 0.
        """
        loan = cls(
            loan_id=loan_id,
            principal=principal,
            periodic_rate=periodic_rate,
            frequency=frequency,
            start_date=start_date,
            is_indefinite=is_indefinite,
            term_periods=term_periods,
            debtor_id=debtor_id,
            description=description,
            remaining_amount=principal,
        )
        if loan.is_indefinite:
            return loan

        # Local import: the calculator depends on this module
        from loanledger.services.accrual_calculator import AccrualCalculator
        terms = AccrualCalculator().contract_terms(loan)
        return replace(
            loan,
            total_interest=terms.total_interest,
            total_payment=terms.total_payment,
            period_payment=terms.period_payment,
        )

    @property
    def is_active(self) -> bool:
        return self.status == LoanStatus.ACTIVE


@dataclass(frozen=True)
class Payment:
    """An applied payment. Append-only: never edited or deleted."""
    payment_id: str
    loan_id: str
    amount: int
    payment_type: PaymentType
    payment_date: date
    interest_payment: int
    capital_payment: int
    accrued_interest_at_payment: int
    remaining_after_payment: int
    payment_method: str = DEFAULT_PAYMENT_METHOD
    reference: str = ""
    notes: str = ""


@dataclass(frozen=True)
class FinalSnapshot:
    """Totals frozen when an indefinite loan is closed."""
    loan_id: str
    end_date: date
    periods_elapsed: int
    final_total_interest: int
    final_total_payment: int


@dataclass(frozen=True)
class LedgerDelta:
    """Outcome of an allocation or a finalization, to be committed atomically.

    ``loan`` is the new snapshot. Exactly one of ``payment`` (allocation) or
    ``final_snapshot`` (finalization) is set.
    """
    loan: Loan
    payment: Optional[Payment] = None
    final_snapshot: Optional[FinalSnapshot] = None
