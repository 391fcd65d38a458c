"""Employee tax report service - assembles ROE and T4 data."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date, datetime, timezone

from tax_engine.config import ReportingLimits, get_settings
from tax_engine.reporting.dates import DateRangeType, parse_range_type, resolve_date_range
from tax_engine.reporting.frequency import (
    PayFrequencyDetector,
    effective_frequency,
    periods_per_year,
)
from tax_engine.reporting.roe import ROEAggregator, WeeklyROEBreakdown
from tax_engine.reporting.t4 import T4Aggregator, T4Options, YTDLookup
from tax_engine.reporting.types import (
    CalculationMethod,
    PayFrequency,
    PayPeriodRecord,
    ROEResult,
    T4Result,
    WeeklyBucket,
    YTDSnapshot,
)

logger = logging.getLogger(__name__)


class DataSource:
    """Where the report's T4 figures came from."""

    YTD_OPTIMIZED = "ytd_optimized"
    PAYROLL_ENTRIES_FALLBACK = "payroll_entries_fallback"
    PAYROLL_ENTRIES_YTD_ERROR = "payroll_entries_ytd_error"
    YTD_DISABLED = "ytd_disabled"
    YTD_NOT_AVAILABLE = "ytd_not_available"


@dataclass(frozen=True)
class ReportConfig:
    """
    Report request configuration.

    Attributes:
        date_range_type: Window of pay dates to report on.
        today: Reference date for year-based windows. Defaults to the
            current date.
        last_day_worked: End of rolling/employment windows.
        hire_date: Start of the employment window.
        custom_start: Custom window start.
        custom_end: Custom window end.
        frequency_override: Manual pay frequency; skips detection.
        is_t4_report: Report is a T4 (enables the YTD fast path).
        use_ytd_optimization: Try the YTD snapshot for T4 boxes.
    """

    date_range_type: DateRangeType | str = DateRangeType.ROLLING_12_MONTHS
    today: date | None = None
    last_day_worked: date | None = None
    hire_date: date | None = None
    custom_start: date | None = None
    custom_end: date | None = None
    frequency_override: PayFrequency | None = None
    is_t4_report: bool = False
    use_ytd_optimization: bool = True


@dataclass(frozen=True)
class FrequencyInfo:
    effective: PayFrequency
    detected: PayFrequency | None
    confidence: int
    is_overridden: bool
    periods_per_year: int


@dataclass(frozen=True)
class ReportMetadata:
    data_source: str
    payroll_entries_used: int
    ytd_optimization_enabled: bool
    calculation_timestamp: datetime
    fallback_reason: str | None = None


@dataclass
class EmployeeTaxReport:
    """Everything the ROE/T4 report renderer needs for one employee."""

    employee_id: str
    start_date: date
    end_date: date
    date_range_type: DateRangeType | None  # None: unrecognised, reported year to date
    roe: ROEResult | None
    t4: T4Result
    pay_period_breakdown: list[WeeklyBucket]
    payment_frequency: FrequencyInfo
    metadata: ReportMetadata
    warnings: list[str] = field(default_factory=list)


def ytd_status(snapshot: YTDSnapshot | None) -> tuple[str, str]:
    """Status of an employee's YTD snapshot for display."""
    if snapshot is None:
        return "no_data", "No YTD data available"
    if snapshot.is_current:
        return "current", "YTD data is current"
    return "outdated", "YTD data needs updating"


class TaxReportService:
    """Builds the comprehensive ROE/T4 report for an employee.

    Steps:
    1) Resolve the report window and filter history to it
    2) Detect pay frequency from the full history (unless overridden)
    3) ROE totals over the window
    4) T4 boxes, via the YTD snapshot when enabled and usable
    5) ISO-week breakdown of the window
    """

    def __init__(
        self,
        limits: ReportingLimits | None = None,
        detector: PayFrequencyDetector | None = None,
    ):
        self.limits = limits or ReportingLimits.from_settings(get_settings())
        self.detector = detector or PayFrequencyDetector()
        self.roe_aggregator = ROEAggregator(self.limits)
        self.weekly_breakdown = WeeklyROEBreakdown(self.limits)

    def build_report(
        self,
        employee_id: str,
        history: Sequence[PayPeriodRecord],
        config: ReportConfig | None = None,
        ytd_lookup: YTDLookup | None = None,
    ) -> EmployeeTaxReport:
        config = config or ReportConfig()
        today = config.today or date.today()

        start_date, end_date = resolve_date_range(
            config.date_range_type,
            today,
            last_day_worked=config.last_day_worked,
            hire_date=config.hire_date,
            custom_start=config.custom_start,
            custom_end=config.custom_end,
        )
        period_entries = [p for p in history if start_date <= p.pay_date <= end_date]

        frequency = self._frequency_info(history, config)
        warnings: list[str] = []
        if not frequency.is_overridden and frequency.confidence == 0:
            warnings.append("Pay frequency could not be detected; supply it manually")

        roe = self.roe_aggregator.compute_roe(period_entries)
        t4, data_source = self._compute_t4(
            employee_id, period_entries, start_date, end_date, config, ytd_lookup
        )
        breakdown = self.weekly_breakdown.bucket_by_iso_week(period_entries)

        logger.info(
            "Built %s report for employee %s: %d entries, source=%s",
            "T4" if config.is_t4_report else "ROE",
            employee_id,
            len(period_entries),
            data_source,
        )

        return EmployeeTaxReport(
            employee_id=employee_id,
            start_date=start_date,
            end_date=end_date,
            date_range_type=parse_range_type(config.date_range_type),
            roe=roe,
            t4=t4,
            pay_period_breakdown=breakdown,
            payment_frequency=frequency,
            metadata=ReportMetadata(
                data_source=data_source,
                payroll_entries_used=len(period_entries),
                ytd_optimization_enabled=config.use_ytd_optimization,
                calculation_timestamp=datetime.now(timezone.utc),
                fallback_reason=t4.fallback_reason,
            ),
            warnings=warnings,
        )

    def _frequency_info(
        self,
        history: Sequence[PayPeriodRecord],
        config: ReportConfig,
    ) -> FrequencyInfo:
        if config.frequency_override is not None:
            effective = effective_frequency(None, config.frequency_override)
            return FrequencyInfo(
                effective=effective,
                detected=None,
                confidence=0,
                is_overridden=True,
                periods_per_year=periods_per_year(effective),
            )

        detection = self.detector.detect(p.pay_date for p in history)
        effective = effective_frequency(detection)
        return FrequencyInfo(
            effective=effective,
            detected=detection.frequency,
            confidence=detection.confidence,
            is_overridden=False,
            periods_per_year=periods_per_year(effective),
        )

    def _compute_t4(
        self,
        employee_id: str,
        period_entries: list[PayPeriodRecord],
        start_date: date,
        end_date: date,
        config: ReportConfig,
        ytd_lookup: YTDLookup | None,
    ) -> tuple[T4Result, str]:
        use_ytd = config.is_t4_report and config.use_ytd_optimization and ytd_lookup is not None
        options = T4Options(
            employee_id=employee_id,
            start_date=start_date,
            end_date=end_date,
            use_ytd_optimization=use_ytd,
        )
        aggregator = T4Aggregator(self.limits, ytd_lookup=ytd_lookup if use_ytd else None)
        t4 = aggregator.compute_t4(period_entries, options)

        if t4.calculation_method == CalculationMethod.YTD_OPTIMIZED:
            return t4, DataSource.YTD_OPTIMIZED
        if t4.calculation_method == CalculationMethod.YTD_FALLBACK:
            if t4.fallback_reason and t4.fallback_reason.startswith("lookup_error"):
                return t4, DataSource.PAYROLL_ENTRIES_YTD_ERROR
            return t4, DataSource.PAYROLL_ENTRIES_FALLBACK
        if config.use_ytd_optimization:
            return t4, DataSource.YTD_NOT_AVAILABLE
        return t4, DataSource.YTD_DISABLED
