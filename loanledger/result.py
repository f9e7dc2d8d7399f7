"""Result pattern for consistent return types in LoanLedger.

The services raise exceptions; the engine's ``try_*`` methods wrap them in a
Result so that callers such as forms can show a message without handling
every exception type.
"""
from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

from loanledger.exceptions import (
    AlreadyFinalizedError,
    ConcurrentUpdateError,
    DatabaseError,
    ExceedsPendingCapitalError,
    ExceedsPendingInterestError,
    LoanNotActiveError,
    LoanNotFoundError,
    NotIndefiniteError,
    ValidationError,
)

T = TypeVar('T')


@dataclass
class Result(Generic[T]):
    """Represents the outcome of an operation.

    Attributes:
        success: Whether the operation succeeded.
        value: The return value on success, None on failure.
        error: Error message on failure, None on success.
        error_type: Type/category of error (e.g., "NOT_FOUND", "VALIDATION").

    Usage:
        result = engine.try_record_payment("L-001", 25000, "interest", date(2024, 2, 1))
        if result.success:
            delta = result.value
        else:
            print(f"Error: {result.error}")
    """
    success: bool
    value: Optional[T] = None
    error: Optional[str] = None
    error_type: Optional[str] = None

    @classmethod
    def ok(cls, value: T = None) -> 'Result[T]':
        return cls(success=True, value=value)

    @classmethod
    def fail(cls, error: str, error_type: str = None) -> 'Result[T]':
        return cls(success=False, error=error, error_type=error_type)

    @classmethod
    def from_error(cls, exc: Exception) -> 'Result[T]':
        """Create a failure result from a LoanLedger exception."""
        return cls.fail(str(exc), ErrorType.for_exception(exc))

    def __bool__(self) -> bool:
        return self.success

    def unwrap(self) -> T:
        """Get the value, raising an exception if the operation failed.

        Raises:
            ValueError: If the operation failed.
        """
        if not self.success:
            raise ValueError(f"Result unwrap failed: {self.error}")
        return self.value

    def unwrap_or(self, default: T) -> T:
        return self.value if self.success else default


class ErrorType:
    """Standard error type constants."""
    NOT_FOUND = "NOT_FOUND"
    INACTIVE = "INACTIVE"
    VALIDATION = "VALIDATION"
    EXCEEDS_PENDING_INTEREST = "EXCEEDS_PENDING_INTEREST"
    EXCEEDS_PENDING_CAPITAL = "EXCEEDS_PENDING_CAPITAL"
    NOT_INDEFINITE = "NOT_INDEFINITE"
    ALREADY_FINALIZED = "ALREADY_FINALIZED"
    CONFLICT = "CONFLICT"
    DATABASE = "DATABASE"

    # Most specific first
    _BY_EXCEPTION = (
        (LoanNotFoundError, NOT_FOUND),
        (ExceedsPendingInterestError, EXCEEDS_PENDING_INTEREST),
        (ExceedsPendingCapitalError, EXCEEDS_PENDING_CAPITAL),
        (ValidationError, VALIDATION),
        (LoanNotActiveError, INACTIVE),
        (NotIndefiniteError, NOT_INDEFINITE),
        (AlreadyFinalizedError, ALREADY_FINALIZED),
        (ConcurrentUpdateError, CONFLICT),
        (DatabaseError, DATABASE),
    )

    @classmethod
    def for_exception(cls, exc: Exception) -> Optional[str]:
        for exc_class, error_type in cls._BY_EXCEPTION:
            if isinstance(exc, exc_class):
                return error_type
        return None
