"""Period counting for LoanLedger.

Converts a start date and an as-of date into a number of whole billing
periods. Monthly periods are calendar months, not 30-day blocks.
"""
from datetime import date

from dateutil.relativedelta import relativedelta

from loanledger.models import Frequency


class PeriodClock:
    """Calendar arithmetic for daily, weekly and monthly periods."""

    def elapsed_periods(self, start_date: date, as_of_date: date, frequency) -> int:
        """Count whole periods elapsed between two dates.

        A monthly period counts once the as-of day of month reaches the start
        day of month. A loan started on Jan 31 therefore has 0 periods on
        Feb 28/29 and 1 period on Mar 31.

        Args:
            start_date: First day of accrual.
            as_of_date: Date to count up to.
            frequency: Frequency or its string value.

        Returns:
            Number of whole periods, never negative.
        """
        frequency = Frequency.coerce(frequency)

        if frequency == Frequency.MONTHLY:
            months = ((as_of_date.year * 12 + as_of_date.month)
                      - (start_date.year * 12 + start_date.month))
            if as_of_date.day < start_date.day:
                months -= 1  # current month not yet complete
            return max(0, months)

        days = max(0, (as_of_date - start_date).days)
        if frequency == Frequency.WEEKLY:
            return days // 7
        return days

    def add_periods(self, start_date: date, periods: int, frequency) -> date:
        """Return the date ``periods`` periods after ``start_date``.

        Monthly steps clamp to the last day of shorter months
        (Jan 31 + 1 month is Feb 28 or 29).
        """
        frequency = Frequency.coerce(frequency)
        if frequency == Frequency.MONTHLY:
            return start_date + relativedelta(months=periods)
        if frequency == Frequency.WEEKLY:
            return start_date + relativedelta(weeks=periods)
        return start_date + relativedelta(days=periods)
