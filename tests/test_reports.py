"""Tests for portfolio dashboard figures."""
import os
import sys
import unittest
from datetime import date
from decimal import Decimal

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from loanledger.database import LedgerStore
from loanledger.engine import LedgerEngine
from loanledger.money import to_minor
from loanledger.reports import PortfolioReport


class TestPortfolioReport(unittest.TestCase):

    def setUp(self):
        self.store = LedgerStore(":memory:")
        self.engine = LedgerEngine(self.store)
        self.report = PortfolioReport(self.store)

    def tearDown(self):
        self.store.close()

    def _seed(self):
        # L-001: 1,000,000 at 10% monthly, 12 months
        self.engine.originate_loan(to_minor(1_000_000), Decimal("0.10"), "monthly",
                                   date(2024, 1, 1), term_periods=12)
        # L-002: 500,000 at 0.5% daily, open-ended
        self.engine.originate_loan(to_minor(500_000), Decimal("0.005"), "daily",
                                   date(2024, 1, 1), is_indefinite=True)
        self.engine.record_payment("L-001", to_minor(100_000), "interest", date(2024, 2, 1))
        self.engine.record_payment("L-002", to_minor(25_000), "interest", date(2024, 1, 11))

    def test_empty_portfolio(self):
        summary = self.report.summary(date(2024, 1, 1))
        self.assertEqual(summary['total_loans'], 0)
        self.assertEqual(summary['total_pending'], 0)
        self.assertTrue(self.report.monthly_collections().empty)

    def test_summary(self):
        self._seed()
        summary = self.report.summary(date(2024, 2, 1))

        self.assertEqual(summary['total_loans'], 2)
        self.assertEqual(summary['active_loans'], 2)
        self.assertEqual(summary['completed_loans'], 0)
        self.assertEqual(summary['overdue_loans'], 0)
        self.assertEqual(summary['total_lent'], to_minor(1_500_000))
        # 2,200,000 contract + 500,000 principal + 31 days of 2,500
        self.assertEqual(summary['total_contracted'], to_minor(2_200_000 + 500_000 + 77_500))
        self.assertEqual(summary['total_collected'], to_minor(125_000))
        # L-001: 1,000,000 capital; L-002: 500,000 capital + 52,500 interest
        self.assertEqual(summary['total_pending'], to_minor(1_552_500))

    def test_summary_uses_final_totals_of_closed_loans(self):
        self._seed()
        self.engine.finalize_loan("L-002", date(2024, 1, 21))
        summary = self.report.summary(date(2024, 6, 1))

        self.assertEqual(summary['completed_loans'], 1)
        # finalized after 20 days: 500,000 + 50,000
        frame = self.report.loans_frame(date(2024, 6, 1)).set_index('loan_id')
        self.assertEqual(int(frame.loc['L-002', 'contracted']), to_minor(550_000))
        self.assertEqual(int(frame.loc['L-002', 'pending']), to_minor(525_000))

    def test_overdue_count(self):
        self.engine.originate_loan(to_minor(10_000), Decimal("0.10"), "monthly",
                                   date(2024, 1, 1), term_periods=1)
        self.assertEqual(self.report.summary(date(2024, 2, 1))['overdue_loans'], 0)
        self.assertEqual(self.report.summary(date(2024, 3, 1))['overdue_loans'], 1)

    def test_monthly_collections(self):
        self._seed()
        df = self.report.monthly_collections()

        self.assertEqual(list(df['month']), ["2024-01", "2024-02"])
        self.assertEqual([int(v) for v in df['payments']], [1, 1])
        self.assertEqual([int(v) for v in df['amount']], [to_minor(25_000), to_minor(100_000)])
        self.assertEqual([int(v) for v in df['interest']], [to_minor(25_000), to_minor(100_000)])
        self.assertEqual([int(v) for v in df['capital']], [0, 0])

    def test_monthly_collections_date_range(self):
        self._seed()
        df = self.report.monthly_collections(start_date=date(2024, 2, 1))
        self.assertEqual(list(df['month']), ["2024-02"])


if __name__ == '__main__':
    unittest.main()
