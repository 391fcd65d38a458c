"""Record of Employment (ROE) aggregation."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from decimal import Decimal

from tax_engine.config import ReportingLimits, get_settings
from tax_engine.reporting.dates import iso_week_key
from tax_engine.reporting.types import PayPeriodRecord, ROEResult, WeeklyBucket

ZERO = Decimal("0")


def _newest_first(periods: Iterable[PayPeriodRecord]) -> list[PayPeriodRecord]:
    return sorted(periods, key=lambda p: p.pay_date, reverse=True)


class ROEAggregator:
    """Computes capped insurable earnings over the trailing ROE window.

    The window is always the most recent ``roe_period_window`` (53) pay
    periods, or fewer when history is shorter. Each period's earnings
    (gross + vacation + premiums) are capped at the weekly insurable
    maximum before summing.
    """

    def __init__(self, limits: ReportingLimits | None = None):
        self.limits = limits or ReportingLimits.from_settings(get_settings())

    def insurable_earnings(self, period: PayPeriodRecord) -> Decimal:
        return min(period.total_earnings, self.limits.max_weekly_insurable)

    def select_window(self, periods: Iterable[PayPeriodRecord]) -> list[PayPeriodRecord]:
        """Most recent periods first, at most the ROE window."""
        return _newest_first(periods)[: self.limits.roe_period_window]

    def compute_roe(self, periods: Iterable[PayPeriodRecord]) -> ROEResult | None:
        """Compute ROE totals; None when there is no history."""
        window = self.select_window(periods)
        if not window:
            return None

        total_insurable = sum((self.insurable_earnings(p) for p in window), ZERO)
        total_hours = sum((p.total_hours for p in window), ZERO)
        oldest, newest = window[-1], window[0]

        return ROEResult(
            total_insurable_earnings=total_insurable,
            total_hours=total_hours,
            periods_used=len(window),
            first_period_start=oldest.period_start,
            last_period_end=newest.period_end,
            average_weekly_earnings=total_insurable / len(window),
        )


class WeeklyROEBreakdown:
    """Buckets pay periods by the ISO week of their pay date.

    Periods sharing an ISO week merge into one bucket. Insurable earnings
    are capped per period before they are added to the bucket.
    """

    def __init__(self, limits: ReportingLimits | None = None):
        self.limits = limits or ReportingLimits.from_settings(get_settings())

    def bucket_by_iso_week(self, periods: Sequence[PayPeriodRecord]) -> list[WeeklyBucket]:
        """Weekly buckets sorted by pay date, newest first."""
        buckets: dict[str, WeeklyBucket] = {}

        for period in periods:
            key = iso_week_key(period.pay_date)
            bucket = buckets.get(key)
            if bucket is None:
                bucket = WeeklyBucket(
                    week_key=key,
                    week_start=period.period_start,
                    week_end=period.period_end,
                    pay_date=period.pay_date,
                )
                buckets[key] = bucket

            earnings = period.total_earnings
            bucket.hours += period.total_hours
            bucket.regular_hours += period.regular_hours
            bucket.overtime_hours += period.overtime_hours
            bucket.lieu_hours += period.lieu_hours
            bucket.gross_earnings += earnings
            bucket.insurable_earnings += min(earnings, self.limits.max_weekly_insurable)
            bucket.vacation_pay += period.vacation_pay
            bucket.premium_pay += period.premium_pay
            bucket.entries.append(period)

        return sorted(buckets.values(), key=lambda b: b.pay_date, reverse=True)
