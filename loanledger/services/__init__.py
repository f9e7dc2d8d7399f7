"""Services package for LoanLedger business logic.

This package contains the pure accrual and allocation services. Each takes
a Loan snapshot and returns values or a new snapshot; none performs I/O.
"""

from .period_clock import PeriodClock
from .accrual_calculator import AccrualCalculator
from .payment_allocator import PaymentAllocator
from .finalization_service import FinalizationService

__all__ = ['PeriodClock', 'AccrualCalculator', 'PaymentAllocator', 'FinalizationService']
