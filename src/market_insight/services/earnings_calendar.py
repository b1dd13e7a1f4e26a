# src/market_insight/services/earnings_calendar.py
"""Calendar and arithmetic helpers shared by the earnings adapters"""

from datetime import date, datetime
from typing import Optional


def quarter_of(fiscal_date: str) -> str:
    """'2024-09-28' -> 'Q3'"""
    month = datetime.strptime(fiscal_date[:10], "%Y-%m-%d").month
    return f"Q{(month - 1) // 3 + 1}"


def year_of(fiscal_date: str) -> int:
    return datetime.strptime(fiscal_date[:10], "%Y-%m-%d").year


def estimate_next_earnings_date(today: Optional[date] = None) -> str:
    """The 15th of the first month of the next calendar quarter, as YYYY-MM-DD."""
    today = today or date.today()
    month = (today.month - 1) // 3 * 3 + 4
    year = today.year
    if month > 12:
        month -= 12
        year += 1
    return date(year, month, 15).isoformat()


def calculate_growth(current: Optional[float], previous: Optional[float]) -> Optional[float]:
    """Percent change against the previous figure; None when either side is unknown or zero-based."""
    if current is None or not previous:
        return None
    return (current - previous) / abs(previous) * 100
