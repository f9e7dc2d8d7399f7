"""Centralized configuration for LoanLedger.

This module contains the default values and business rule constants used by
the accrual engine, plus a small environment-driven settings object for the
storage and logging layers.
"""
import os
from dataclasses import dataclass

# =============================================================================
# MONEY
# =============================================================================

# Number of decimal places of the ledger currency. Every amount is stored as
# an integer count of 10 ** -MINOR_UNIT_EXPONENT major units (cents for 2).
MINOR_UNIT_EXPONENT = 2

# Rounding applied whenever a rate or a division produces a fractional minor unit
CURRENCY_ROUNDING = "ROUND_HALF_UP"

# =============================================================================
# PAYMENTS
# =============================================================================

DEFAULT_PAYMENT_METHOD = "cash"

# =============================================================================
# STORAGE
# =============================================================================

# Date format for storage (ISO 8601)
DATE_FORMAT_STORAGE = "%Y-%m-%d"

DEFAULT_DB_NAME = "loan_ledger.db"

# =============================================================================
# LOGGING
# =============================================================================

DEFAULT_LOG_LEVEL = "INFO"

DEFAULT_LOG_FORMAT = "standard"


@dataclass
class LedgerConfig:
    """Runtime settings for the storage and logging layers."""

    db_name: str = DEFAULT_DB_NAME
    log_level: str = DEFAULT_LOG_LEVEL
    log_format: str = DEFAULT_LOG_FORMAT

    @classmethod
    def from_env(cls) -> "LedgerConfig":
        """Create config from environment variables."""
        return cls(
            db_name=os.getenv("LOANLEDGER_DB", DEFAULT_DB_NAME),
            log_level=os.getenv("LOG_LEVEL", DEFAULT_LOG_LEVEL),
            log_format=os.getenv("LOG_FORMAT", DEFAULT_LOG_FORMAT),
        )
