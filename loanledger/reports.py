"""Portfolio statistics for LoanLedger.

Aggregates the stored loans and the payment log into the figures shown on
the lender's dashboard. Nothing here writes files.
"""
from datetime import date

import pandas as pd

from loanledger.models import LoanStatus
from loanledger.services import AccrualCalculator


class PortfolioReport:
    """Dashboard figures over every loan in a LedgerStore."""

    def __init__(self, store, accrual_calculator=None):
        self.store = store
        self.calculator = accrual_calculator or AccrualCalculator()

    def _contracted_total(self, loan, as_of_date):
        """What the borrower owes in total: contract, final, or accrued so far."""
        if not loan.is_indefinite:
            return loan.total_payment
        if loan.final_total_payment is not None:
            return loan.final_total_payment
        return loan.principal + self.calculator.accrued_interest(loan, as_of_date)

    def loans_frame(self, as_of_date: date) -> pd.DataFrame:
        """One row per loan with its balances recomputed as of a date."""
        rows = []
        for loan in self.store.get_loans():
            active = loan.status == LoanStatus.ACTIVE
            rows.append({
                'loan_id': loan.loan_id,
                'debtor_id': loan.debtor_id,
                'status': loan.status.value,
                'principal': loan.principal,
                'contracted': self._contracted_total(loan, as_of_date),
                'paid_amount': loan.paid_amount,
                # Completed loans keep the balance frozen when they closed
                'pending': (self.calculator.remaining_amount(loan, as_of_date)
                            if active else loan.remaining_amount),
                'overdue': self.calculator.is_overdue(loan, as_of_date),
            })
        columns = ['loan_id', 'debtor_id', 'status', 'principal', 'contracted',
                   'paid_amount', 'pending', 'overdue']
        return pd.DataFrame(rows, columns=columns)

    def summary(self, as_of_date: date) -> dict:
        """Portfolio totals as of a date.

        Returns:
            Dict with loan counts (total, active, completed, overdue) and
            money totals in minor units (lent, contracted, collected, pending).
        """
        df = self.loans_frame(as_of_date)
        if df.empty:
            return {
                'total_loans': 0, 'active_loans': 0, 'completed_loans': 0,
                'overdue_loans': 0, 'total_lent': 0, 'total_contracted': 0,
                'total_collected': 0, 'total_pending': 0,
            }
        return {
            'total_loans': len(df),
            'active_loans': int((df['status'] == LoanStatus.ACTIVE.value).sum()),
            'completed_loans': int((df['status'] == LoanStatus.COMPLETED.value).sum()),
            'overdue_loans': int(df['overdue'].sum()),
            'total_lent': int(df['principal'].sum()),
            'total_contracted': int(df['contracted'].sum()),
            'total_collected': int(df['paid_amount'].sum()),
            'total_pending': int(df['pending'].sum()),
        }

    def monthly_collections(self, start_date=None, end_date=None) -> pd.DataFrame:
        """Payments grouped by ``YYYY-MM``.

        Returns:
            DataFrame with columns month, payments, amount, interest, capital.
        """
        columns = ['month', 'payments', 'amount', 'interest', 'capital']
        df = self.store.get_payments(start_date=start_date, end_date=end_date)
        if df.empty:
            return pd.DataFrame(columns=columns)

        df['month'] = df['payment_date'].str[:7]
        grouped = df.groupby('month').agg(
            payments=('payment_id', 'count'),
            amount=('amount', 'sum'),
            interest=('interest_payment', 'sum'),
            capital=('capital_payment', 'sum'),
        ).reset_index()
        return grouped[columns]
