"""Calendar utilities for payroll reporting."""

from __future__ import annotations

import calendar
from datetime import date, timedelta
from enum import Enum

from tax_engine.exceptions import InvalidDateRangeError


def iso_week(day: date) -> tuple[int, int]:
    """Return (iso_year, iso_week) for a calendar date.

    Weeks start on Monday and week 1 is the week containing the year's
    first Thursday, so early-January dates can belong to the previous ISO
    year and late-December dates to the next.
    """
    # Thursday of the same Monday-based week decides the ISO year
    thursday = day + timedelta(days=3 - day.weekday())
    iso_year = thursday.year
    week = (thursday.timetuple().tm_yday - 1) // 7 + 1
    return iso_year, week


def iso_week_key(day: date) -> str:
    """Bucket key such as ``2025-W03``."""
    iso_year, week = iso_week(day)
    return f"{iso_year}-W{week:02d}"


def subtract_months(day: date, months: int) -> date:
    """Shift a date back by whole months, clamping to the month's last day."""
    month_index = day.year * 12 + (day.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


class DateRangeType(str, Enum):
    """Report calculation windows."""

    ROLLING_12_MONTHS = "rolling_12_months"
    CALENDAR_YEAR = "calendar_year"
    PREVIOUS_YEAR = "previous_year"
    EMPLOYMENT_PERIOD = "employment_period"
    CUSTOM = "custom"


def parse_range_type(range_type: DateRangeType | str | None) -> DateRangeType | None:
    """Coerce a stored range type; None when it is not recognised."""
    try:
        return DateRangeType(range_type)
    except ValueError:
        return None


def resolve_date_range(
    range_type: DateRangeType | str,
    today: date,
    last_day_worked: date | None = None,
    hire_date: date | None = None,
    custom_start: date | None = None,
    custom_end: date | None = None,
) -> tuple[date, date]:
    """Resolve a report window to inclusive (start, end) dates.

    Unknown range types and incomplete custom ranges fall back to the
    current year to date.

    Raises:
        InvalidDateRangeError: If a custom range starts after it ends
    """
    end = last_day_worked or today
    year_to_date = (date(today.year, 1, 1), today)

    range_type = parse_range_type(range_type)
    if range_type is None:
        return year_to_date

    if range_type == DateRangeType.ROLLING_12_MONTHS:
        return subtract_months(end, 12), end
    if range_type == DateRangeType.CALENDAR_YEAR:
        return date(today.year, 1, 1), date(today.year, 12, 31)
    if range_type == DateRangeType.PREVIOUS_YEAR:
        return date(today.year - 1, 1, 1), date(today.year - 1, 12, 31)
    if range_type == DateRangeType.EMPLOYMENT_PERIOD:
        if hire_date is None:
            return year_to_date
        return hire_date, end

    # CUSTOM
    if custom_start is None or custom_end is None:
        return year_to_date
    if custom_start > custom_end:
        raise InvalidDateRangeError(custom_start, custom_end)
    return custom_start, custom_end
