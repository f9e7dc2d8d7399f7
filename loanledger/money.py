"""Fixed-point money helpers for LoanLedger.

Amounts are plain ``int`` counts of the currency's minor unit. Rates stay
``Decimal`` and every product or quotient is rounded back to a whole minor
unit with ROUND_HALF_UP, so repeated small payments never drift.
"""
from decimal import Decimal, InvalidOperation, Overflow, getcontext

from loanledger.config import CURRENCY_ROUNDING, MINOR_UNIT_EXPONENT
from loanledger.exceptions import InvalidAmountError

getcontext().prec = 28  # High precision for financial calculations

_ONE = Decimal("1")


def _scale() -> Decimal:
    return Decimal(10) ** MINOR_UNIT_EXPONENT


def to_minor(value) -> int:
    """Convert a major-unit amount into integer minor units.

    Args:
        value: ``int``, ``Decimal`` or numeric ``str`` (commas are ignored).

    Returns:
        The amount in minor units, rounded half-up.

    Raises:
        InvalidAmountError: If the value is a float, a bool, non-numeric, not finite
            or too large to represent.
    """
    if isinstance(value, (bool, float)):
        raise InvalidAmountError(value, "use int, Decimal or str for money")
    if isinstance(value, str):
        try:
            value = Decimal(value.replace(",", "").strip())
        except InvalidOperation:
            raise InvalidAmountError(value, "not a number") from None
    if not isinstance(value, (int, Decimal)):
        raise InvalidAmountError(value, "unsupported type")
    value = Decimal(value)
    if not value.is_finite():
        raise InvalidAmountError(value, "not a finite number")
    try:
        return int((value * _scale()).quantize(_ONE, rounding=CURRENCY_ROUNDING))
    except (InvalidOperation, Overflow):
        raise InvalidAmountError(value, "out of range") from None


def from_minor(amount: int) -> Decimal:
    """Return ``amount`` minor units as a ``Decimal`` in major units."""
    return (Decimal(amount) / _scale()).quantize(_ONE / _scale())


def apply_rate(amount: int, rate: Decimal) -> int:
    """Multiply a minor-unit amount by a rate, rounding half-up."""
    if not isinstance(rate, Decimal):
        rate = Decimal(str(rate))
    return int((Decimal(amount) * rate).quantize(_ONE, rounding=CURRENCY_ROUNDING))


def divide(amount: int, parts: int) -> int:
    """Split ``amount`` into ``parts`` equal shares, rounding half-up."""
    if parts <= 0:
        raise ValueError("parts must be positive")
    return int((Decimal(amount) / Decimal(parts)).quantize(_ONE, rounding=CURRENCY_ROUNDING))


def format_amount(amount: int) -> str:
    """Format minor units for log lines and error messages (e.g. ``1,250.50``)."""
    return f"{from_minor(amount):,.{MINOR_UNIT_EXPONENT}f}"
