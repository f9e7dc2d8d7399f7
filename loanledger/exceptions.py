"""Custom exceptions for LoanLedger."""


class LoanLedgerError(Exception):
    """Base exception for all LoanLedger errors."""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self):
        if self.details:
            return f"{self.message} - {self.details}"
        return self.message


# =============================================================================
# VALIDATION ERRORS
# =============================================================================

class ValidationError(LoanLedgerError):
    """Raised when the input of an operation is not acceptable."""
    pass


class InvalidAmountError(ValidationError):
    """Raised when a monetary amount is not a positive whole number of minor units."""

    def __init__(self, amount, reason: str = "amount must be greater than zero"):
        details = {'amount': amount}
        super().__init__(f"Invalid amount {amount!r}: {reason}", details)


class InvalidPaymentTypeError(ValidationError):
    """Raised when a payment type is neither interest nor capital."""

    def __init__(self, payment_type):
        super().__init__(
            f"Invalid payment type {payment_type!r}",
            {'payment_type': payment_type}
        )


class InvalidLoanTermsError(ValidationError):
    """Raised when a loan's origination terms are inconsistent."""
    pass


class ExceedsPendingInterestError(ValidationError):
    """Raised when an interest payment is larger than the interest owed."""

    def __init__(self, amount: int, pending_interest: int, loan_id: str = None):
        details = {
            'amount': amount,
            'pending_interest': pending_interest
        }
        if loan_id:
            details['loan_id'] = loan_id

        message = f"Payment of {amount} exceeds pending interest of {pending_interest}"
        super().__init__(message, details)


class ExceedsPendingCapitalError(ValidationError):
    """Raised when a capital payment is larger than the unpaid principal."""

    def __init__(self, amount: int, pending_capital: int, loan_id: str = None):
        details = {
            'amount': amount,
            'pending_capital': pending_capital
        }
        if loan_id:
            details['loan_id'] = loan_id

        message = f"Payment of {amount} exceeds pending capital of {pending_capital}"
        super().__init__(message, details)


class LoanNotFoundError(ValidationError):
    """Raised when a loan cannot be found."""

    def __init__(self, loan_id: str = None):
        details = {}
        message = "Loan not found"
        if loan_id:
            details['loan_id'] = loan_id
            message = f"Loan '{loan_id}' not found"

        super().__init__(message, details)


# =============================================================================
# STATE ERRORS
# =============================================================================

class StateError(LoanLedgerError):
    """Raised when a loan is in the wrong state for the operation."""
    pass


class LoanNotActiveError(StateError):
    """Raised when an operation requires an active loan but the loan is completed."""

    def __init__(self, loan_id: str, status: str):
        details = {
            'loan_id': loan_id,
            'status': status
        }
        message = f"Loan '{loan_id}' is not active (status: {status})"
        super().__init__(message, details)


class NotIndefiniteError(StateError):
    """Raised when finalization is requested for a fixed-term loan."""

    def __init__(self, loan_id: str):
        super().__init__(
            f"Loan '{loan_id}' has a fixed term and cannot be finalized",
            {'loan_id': loan_id}
        )


class AlreadyFinalizedError(StateError):
    """Raised when finalization is requested for a loan that is already completed."""

    def __init__(self, loan_id: str):
        super().__init__(
            f"Loan '{loan_id}' is already completed",
            {'loan_id': loan_id}
        )


class ConcurrentUpdateError(StateError):
    """Raised when a loan changed in storage after its snapshot was read."""

    def __init__(self, loan_id: str, expected_version: int):
        details = {
            'loan_id': loan_id,
            'expected_version': expected_version
        }
        message = f"Loan '{loan_id}' was modified concurrently (expected version {expected_version})"
        super().__init__(message, details)


# =============================================================================
# STORAGE ERRORS
# =============================================================================

class DatabaseError(LoanLedgerError):
    """Raised when a database operation fails."""
    pass


class TransactionError(DatabaseError):
    """Raised when a database transaction fails to complete."""
    pass
