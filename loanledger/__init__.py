"""LoanLedger: interest accrual and payment allocation for informal lending."""

from loanledger.models import (
    ContractTerms,
    Frequency,
    FinalSnapshot,
    LedgerDelta,
    Loan,
    LoanStatus,
    Payment,
    PaymentType,
)
from loanledger.services import (
    AccrualCalculator,
    FinalizationService,
    PaymentAllocator,
    PeriodClock,
)

__version__ = "0.1.0"

__all__ = [
    'AccrualCalculator', 'ContractTerms', 'FinalSnapshot', 'FinalizationService',
    'Frequency', 'LedgerDelta', 'Loan', 'LoanStatus', 'Payment', 'PaymentAllocator',
    'PaymentType', 'PeriodClock',
]
