"""Payroll tax reporting: pay frequency, ROE and T4 aggregation."""

from tax_engine.reporting.dates import (
    DateRangeType,
    iso_week,
    iso_week_key,
    parse_range_type,
    resolve_date_range,
)
from tax_engine.reporting.frequency import (
    PayFrequencyDetector,
    effective_frequency,
    periods_per_year,
)
from tax_engine.reporting.roe import ROEAggregator, WeeklyROEBreakdown
from tax_engine.reporting.t4 import T4Aggregator, T4Options
from tax_engine.reporting.types import (
    CalculationMethod,
    PayFrequency,
    PayFrequencyResult,
    PayPeriodRecord,
    PremiumBreakdown,
    PremiumLine,
    ROEResult,
    T4Breakdown,
    T4Result,
    WeeklyBucket,
    YTDSnapshot,
)

__all__ = [
    "CalculationMethod",
    "DateRangeType",
    "PayFrequency",
    "PayFrequencyDetector",
    "PayFrequencyResult",
    "PayPeriodRecord",
    "PremiumBreakdown",
    "PremiumLine",
    "ROEAggregator",
    "ROEResult",
    "T4Aggregator",
    "T4Breakdown",
    "T4Options",
    "T4Result",
    "WeeklyBucket",
    "WeeklyROEBreakdown",
    "YTDSnapshot",
    "effective_frequency",
    "iso_week",
    "iso_week_key",
    "parse_range_type",
    "periods_per_year",
    "resolve_date_range",
]
