"""Date parsing and calendar utilities."""

import calendar
import re
from datetime import date, timedelta
from typing import Optional

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

DMY_PATTERN = re.compile(r"^\d{1,2}-\d{1,2}-\d{4}$")

ALL_TIME_START = date(2000, 1, 1)

# April starts the financial year
FINANCIAL_YEAR_START_MONTH = 4

DATE_RANGE_PRESETS = (
    "today",
    "yesterday",
    "last_7_days",
    "last_30_days",
    "this_week",
    "last_week",
    "this_month",
    "last_month",
    "this_quarter",
    "last_quarter",
    "this_year",
    "last_year",
    "this_financial_year",
    "last_financial_year",
    "all_time",
)


def parse_date(date_str: str) -> date:
    """Parse a date string into a date object.

    Supports various formats including relative dates:
    - Absolute dates: "2024-01-15", "January 15, 2024", etc.
    - Relative dates: "today", "yesterday", "tomorrow"

    Args:
        date_str: Date string in various formats

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    date_str = date_str.strip().lower()
    today = date.today()

    relative_dates = {
        "today": today,
        "yesterday": today - timedelta(days=1),
        "tomorrow": today + timedelta(days=1),
    }
    if date_str in relative_dates:
        return relative_dates[date_str]

    if DMY_PATTERN.match(date_str):
        return parse_dmy_date(date_str)

    try:
        dt = date_parser.parse(date_str)
        return dt.date()
    except (ValueError, TypeError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def parse_dmy_date(date_str: str) -> date:
    """Parse a strict DD-MM-YYYY date as found in import files.

    Raises:
        ValueError: If the text is not DD-MM-YYYY or names an impossible date
    """
    text = date_str.strip()
    if not DMY_PATTERN.match(text):
        raise ValueError(f"Invalid date format: '{date_str}'")
    day, month, year = (int(part) for part in text.split("-"))
    return date(year, month, day)


def clamp_day(year: int, month: int, day: int) -> date:
    """Build a date, pulling ``day`` back to the last day of short months."""
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day, last_day))


def first_of_month(value: date) -> date:
    return value.replace(day=1)


def _quarter_start(value: date) -> date:
    return date(value.year, 3 * ((value.month - 1) // 3) + 1, 1)


def _financial_year_start(value: date) -> date:
    year = value.year if value.month >= FINANCIAL_YEAR_START_MONTH else value.year - 1
    return date(year, FINANCIAL_YEAR_START_MONTH, 1)


def normalize_preset(period: str) -> str:
    """Normalize a preset name so ``last-month`` and ``last_month`` are the same."""
    return period.strip().lower().replace("-", "_").replace(" ", "_")


def get_date_range(period: str, today: Optional[date] = None) -> tuple[date, date]:
    """Get start and end dates for a named period.

    "this" periods end today; "last" periods cover the whole previous period.
    Financial years run from April 1 to March 31.

    Args:
        period: Preset name (see DATE_RANGE_PRESETS); hyphens and underscores
            are interchangeable
        today: Reference date, defaults to the current date

    Returns:
        Tuple of (start_date, end_date) for the specified period

    Raises:
        ValueError: If period string is not recognized
    """
    preset = normalize_preset(period)
    today = today or date.today()

    if preset == "today":
        return (today, today)

    elif preset == "yesterday":
        yesterday = today - timedelta(days=1)
        return (yesterday, yesterday)

    elif preset == "last_7_days":
        return (today - timedelta(days=6), today)

    elif preset == "last_30_days":
        return (today - timedelta(days=29), today)

    elif preset == "this_week":
        return (today - timedelta(days=today.weekday()), today)

    elif preset == "last_week":
        # Monday to Sunday of the previous week
        start_date = today - timedelta(days=today.weekday() + 7)
        return (start_date, start_date + timedelta(days=6))

    elif preset == "this_month":
        return (first_of_month(today), today)

    elif preset == "last_month":
        start_date = first_of_month(today) - relativedelta(months=1)
        return (start_date, first_of_month(today) - timedelta(days=1))

    elif preset == "this_quarter":
        return (_quarter_start(today), today)

    elif preset == "last_quarter":
        current = _quarter_start(today)
        return (current - relativedelta(months=3), current - timedelta(days=1))

    elif preset == "this_year":
        return (today.replace(month=1, day=1), today)

    elif preset == "last_year":
        start_date = today.replace(month=1, day=1) - relativedelta(years=1)
        return (start_date, today.replace(month=1, day=1) - timedelta(days=1))

    elif preset == "this_financial_year":
        return (_financial_year_start(today), today)

    elif preset == "last_financial_year":
        current = _financial_year_start(today)
        return (current - relativedelta(years=1), current - timedelta(days=1))

    elif preset == "all_time":
        return (ALL_TIME_START, today)

    else:
        raise ValueError(
            f"Unknown period: '{period}'. Supported periods: {', '.join(DATE_RANGE_PRESETS)}"
        )
