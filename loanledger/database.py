"""Database management module for LoanLedger.

Stores loan snapshots and the append-only payment log in SQLite. Loan rows
carry a version number; ``commit`` only overwrites a row whose stored
version still matches the snapshot the change was computed from.
"""
import sqlite3
from contextlib import contextmanager
from datetime import datetime
from decimal import Decimal

import pandas as pd

from loanledger.config import DATE_FORMAT_STORAGE, DEFAULT_DB_NAME
from loanledger.exceptions import ConcurrentUpdateError, LoanNotFoundError, TransactionError
from loanledger.logging_config import get_logger
from loanledger.models import LedgerDelta, Loan

logger = get_logger(__name__)

_LOAN_COLUMNS = (
    "loan_id", "debtor_id", "description", "principal", "periodic_rate", "frequency",
    "start_date", "is_indefinite", "term_periods", "status", "paid_interest",
    "paid_capital", "paid_amount", "remaining_amount", "total_interest", "total_payment",
    "period_payment", "last_payment_date", "payment_count", "end_date",
    "final_total_interest", "final_total_payment", "periods_elapsed", "version",
)

_DATE_COLUMNS = ("start_date", "last_payment_date", "end_date")


def _date_to_str(value):
    return value.strftime(DATE_FORMAT_STORAGE) if value is not None else None


def _str_to_date(value):
    return datetime.strptime(value, DATE_FORMAT_STORAGE).date() if value else None


class LedgerStore:
    """Handles all SQLite database operations."""

    def __init__(self, db_name=DEFAULT_DB_NAME):
        self.db_name = db_name
        self.conn = sqlite3.connect(db_name)
        self._closed = False
        self.create_tables()

    def close(self):
        """Close the database connection."""
        if self.conn and not self._closed:
            self.conn.close()
            self._closed = True

    def __del__(self):
        """Ensure connection is closed on garbage collection."""
        self.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    @contextmanager
    def transaction(self):
        """Context manager for database transactions with automatic rollback on failure.

        Usage:
            with store.transaction():
                store.conn.execute(...)

        If any exception occurs, the transaction is rolled back.
        """
        try:
            yield
            self.conn.commit()
        except sqlite3.Error as e:
            self.conn.rollback()
            raise TransactionError(f"Transaction failed: {str(e)}") from e
        except Exception:
            self.conn.rollback()
            raise

    def create_tables(self):
        cursor = self.conn.cursor()
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS loans (
                loan_id TEXT PRIMARY KEY,
                debtor_id TEXT,
                description TEXT DEFAULT '',
                principal INTEGER NOT NULL,
                periodic_rate TEXT NOT NULL,
                frequency TEXT NOT NULL,
                start_date TEXT NOT NULL,
                is_indefinite INTEGER DEFAULT 0,
                term_periods INTEGER,
                status TEXT DEFAULT 'active',
                paid_interest INTEGER DEFAULT 0,
                paid_capital INTEGER DEFAULT 0,
                paid_amount INTEGER DEFAULT 0,
                remaining_amount INTEGER DEFAULT 0,
                total_interest INTEGER,
                total_payment INTEGER,
                period_payment INTEGER,
                last_payment_date TEXT,
                payment_count INTEGER DEFAULT 0,
                end_date TEXT,
                final_total_interest INTEGER,
                final_total_payment INTEGER,
                periods_elapsed INTEGER,
                version INTEGER DEFAULT 0
            )
        """)
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS payments (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                payment_id TEXT UNIQUE NOT NULL,
                loan_id TEXT NOT NULL,
                amount INTEGER NOT NULL,
                payment_type TEXT NOT NULL,
                payment_date TEXT NOT NULL,
                interest_payment INTEGER DEFAULT 0,
                capital_payment INTEGER DEFAULT 0,
                accrued_interest_at_payment INTEGER DEFAULT 0,
                remaining_after_payment INTEGER DEFAULT 0,
                payment_method TEXT,
                reference TEXT,
                notes TEXT,
                created_at TEXT,
                FOREIGN KEY(loan_id) REFERENCES loans(loan_id)
            )
        """)
        self.conn.commit()

    # ------------------------------------------------------------------
    # Loans
    # ------------------------------------------------------------------

    def _loan_to_row(self, loan: Loan) -> dict:
        row = {col: getattr(loan, col) for col in _LOAN_COLUMNS}
        row['periodic_rate'] = str(loan.periodic_rate)
        row['frequency'] = loan.frequency.value
        row['status'] = loan.status.value
        row['is_indefinite'] = int(loan.is_indefinite)
        for col in _DATE_COLUMNS:
            row[col] = _date_to_str(row[col])
        return row

    def _row_to_loan(self, row: dict) -> Loan:
        data = dict(row)
        data['periodic_rate'] = Decimal(data['periodic_rate'])
        data['is_indefinite'] = bool(data['is_indefinite'])
        for col in _DATE_COLUMNS:
            data[col] = _str_to_date(data[col])
        return Loan(**data)

    def next_loan_id(self) -> str:
        """Generate the next sequential loan reference (``L-001``, ``L-002``, ...)."""
        cursor = self.conn.cursor()
        cursor.execute("SELECT loan_id FROM loans")
        max_id_num = 0
        for (ref,) in cursor.fetchall():
            try:
                ref_num = int(ref.split('-')[1])
                if ref_num > max_id_num:
                    max_id_num = ref_num
            except (IndexError, ValueError):
                pass
        return f"L-{max_id_num + 1:03d}"

    def add_loan(self, loan: Loan):
        row = self._loan_to_row(loan)
        placeholders = ", ".join("?" for _ in _LOAN_COLUMNS)
        with self.transaction():
            self.conn.execute(
                f"INSERT INTO loans ({', '.join(_LOAN_COLUMNS)}) VALUES ({placeholders})",
                tuple(row[col] for col in _LOAN_COLUMNS)
            )
        logger.debug("Stored loan %s", loan.loan_id)

    def get_loan(self, loan_id) -> Loan:
        """Load a loan snapshot.

        Raises:
            LoanNotFoundError: If no loan has this id.
        """
        cursor = self.conn.cursor()
        cursor.execute(f"SELECT {', '.join(_LOAN_COLUMNS)} FROM loans WHERE loan_id=?", (loan_id,))
        row = cursor.fetchone()
        if not row:
            raise LoanNotFoundError(loan_id)
        return self._row_to_loan(dict(zip(_LOAN_COLUMNS, row)))

    def get_loans(self, status=None, debtor_id=None):
        """Get loans, optionally filtered by status and/or debtor."""
        query = f"SELECT {', '.join(_LOAN_COLUMNS)} FROM loans WHERE 1=1"
        params = []
        if status is not None:
            query += " AND status = ?"
            params.append(getattr(status, 'value', status))
        if debtor_id is not None:
            query += " AND debtor_id = ?"
            params.append(debtor_id)
        query += " ORDER BY start_date, loan_id"

        cursor = self.conn.cursor()
        cursor.execute(query, tuple(params))
        return [self._row_to_loan(dict(zip(_LOAN_COLUMNS, row))) for row in cursor.fetchall()]

    # ------------------------------------------------------------------
    # Payments
    # ------------------------------------------------------------------

    def get_payments(self, loan_id=None, start_date=None, end_date=None):
        """Get the payment log as a DataFrame ordered by date."""
        query = "SELECT * FROM payments WHERE 1=1"
        params = []

        if loan_id:
            query += " AND loan_id = ?"
            params.append(loan_id)
        if start_date:
            query += " AND payment_date >= ?"
            params.append(_date_to_str(start_date))
        if end_date:
            query += " AND payment_date <= ?"
            params.append(_date_to_str(end_date))

        query += " ORDER BY payment_date, id"

        return pd.read_sql_query(query, self.conn, params=tuple(params))

    # ------------------------------------------------------------------
    # Commit
    # ------------------------------------------------------------------

    def commit(self, delta: LedgerDelta, expected_version: int):
        """Write a new loan snapshot and its payment in one transaction.

        Args:
            delta: Result of an allocation or a finalization.
            expected_version: Version of the snapshot the delta was computed from.

        Raises:
            LoanNotFoundError: If the loan row does not exist.
            ConcurrentUpdateError: If the stored version differs; nothing is written.
            TransactionError: If SQLite fails; nothing is written.
        """
        loan = delta.loan
        row = self._loan_to_row(loan)
        updates = [col for col in _LOAN_COLUMNS if col != 'loan_id']
        assignments = ", ".join(f"{col}=?" for col in updates)

        with self.transaction():
            cursor = self.conn.cursor()
            cursor.execute(
                f"UPDATE loans SET {assignments} WHERE loan_id=? AND version=?",
                tuple(row[col] for col in updates) + (loan.loan_id, expected_version)
            )
            if cursor.rowcount == 0:
                cursor.execute("SELECT 1 FROM loans WHERE loan_id=?", (loan.loan_id,))
                if cursor.fetchone() is None:
                    raise LoanNotFoundError(loan.loan_id)
                raise ConcurrentUpdateError(loan.loan_id, expected_version)

            payment = delta.payment
            if payment is not None:
                cursor.execute("""
                    INSERT INTO payments (
                        payment_id, loan_id, amount, payment_type, payment_date,
                        interest_payment, capital_payment, accrued_interest_at_payment,
                        remaining_after_payment, payment_method, reference, notes, created_at
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """, (
                    payment.payment_id, payment.loan_id, payment.amount,
                    payment.payment_type.value, _date_to_str(payment.payment_date),
                    payment.interest_payment, payment.capital_payment,
                    payment.accrued_interest_at_payment, payment.remaining_after_payment,
                    payment.payment_method, payment.reference, payment.notes,
                    datetime.now().isoformat()
                ))
