"""T4 slip aggregation with a year-to-date fast path."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from tax_engine.config import ReportingLimits, get_settings
from tax_engine.reporting.types import (
    CalculationMethod,
    PayPeriodRecord,
    T4Breakdown,
    T4Result,
    YTDSnapshot,
)

logger = logging.getLogger(__name__)

ZERO = Decimal("0")

# (employee_id, as_of) -> snapshot or None
YTDLookup = Callable[[str, date], YTDSnapshot | None]


@dataclass(frozen=True)
class T4Options:
    """
    T4 calculation options.

    Attributes:
        employee_id: Employee the slip is for (needed for YTD lookup).
        start_date: First pay date included in a full recompute. None = open.
        end_date: Last pay date included; also the YTD as-of date.
        tax_year: Year the slip covers. Defaults to end_date's year.
        use_ytd_optimization: Try the YTD snapshot before recomputing.
    """

    employee_id: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    tax_year: int | None = None
    use_ytd_optimization: bool = True

    @property
    def effective_tax_year(self) -> int | None:
        if self.tax_year is not None:
            return self.tax_year
        return self.end_date.year if self.end_date else None


class T4Aggregator:
    """Rolls payroll history (or a YTD snapshot) up into T4 boxes.

    Both paths share one box mapping so caps and units never differ:
    employment income = gross + vacation + premiums, box 24 and box 26 are
    employment income capped at the annual EI and CPP maxima. Only the
    ``calculation_method`` tag tells the paths apart.

    A failed, missing or stale snapshot never raises; it is logged and the
    result is recomputed from history and tagged ``ytdFallback``.
    """

    def __init__(
        self,
        limits: ReportingLimits | None = None,
        ytd_lookup: YTDLookup | None = None,
    ):
        self.limits = limits or ReportingLimits.from_settings(get_settings())
        self.ytd_lookup = ytd_lookup

    def compute_t4(
        self,
        periods: Iterable[PayPeriodRecord],
        options: T4Options | None = None,
    ) -> T4Result:
        options = options or T4Options()

        if options.use_ytd_optimization and self.ytd_lookup is not None:
            snapshot, reason = self._lookup_snapshot(options)
            if snapshot is not None:
                return self.from_snapshot(snapshot)

            logger.warning(
                "YTD snapshot unusable for employee %s (%s), recomputing T4 from history",
                options.employee_id,
                reason,
            )
            return self.full_recompute(
                periods,
                options,
                method=CalculationMethod.YTD_FALLBACK,
                fallback_reason=reason,
            )

        return self.full_recompute(periods, options)

    def full_recompute(
        self,
        periods: Iterable[PayPeriodRecord],
        options: T4Options | None = None,
        method: CalculationMethod = CalculationMethod.FULL,
        fallback_reason: str | None = None,
    ) -> T4Result:
        """Sum every period whose pay date is in the requested range."""
        options = options or T4Options()

        gross = vacation = premium = federal = provincial = cpp = ei = ZERO
        for period in periods:
            if options.start_date and period.pay_date < options.start_date:
                continue
            if options.end_date and period.pay_date > options.end_date:
                continue
            gross += period.gross_pay
            vacation += period.vacation_pay
            premium += period.premium_pay
            federal += period.federal_tax
            provincial += period.provincial_tax
            cpp += period.cpp_deduction
            ei += period.ei_deduction

        return self._build_result(
            T4Breakdown(
                gross_income=gross,
                vacation_pay=vacation,
                premium_pay=premium,
                federal_tax=federal,
                provincial_tax=provincial,
            ),
            cpp_contributions=cpp,
            ei_premiums=ei,
            method=method,
            fallback_reason=fallback_reason,
            tax_year=options.effective_tax_year,
        )

    def from_snapshot(self, snapshot: YTDSnapshot) -> T4Result:
        """Map a current YTD snapshot straight into the box layout."""
        return self._build_result(
            T4Breakdown(
                gross_income=snapshot.gross_pay,
                vacation_pay=snapshot.vacation_pay,
                premium_pay=snapshot.shift_premiums,
                federal_tax=snapshot.federal_tax,
                provincial_tax=snapshot.provincial_tax,
                hours_worked=snapshot.hours_worked,
                regular_income=snapshot.regular_income,
                overtime_income=snapshot.overtime_income,
                lieu_income=snapshot.lieu_income,
            ),
            cpp_contributions=snapshot.cpp_deduction,
            ei_premiums=snapshot.ei_deduction,
            method=CalculationMethod.YTD_OPTIMIZED,
            tax_year=snapshot.tax_year,
        )

    def _lookup_snapshot(self, options: T4Options) -> tuple[YTDSnapshot | None, str]:
        """Return (snapshot, "") when usable, else (None, reason)."""
        if options.employee_id is None:
            return None, "no_employee"

        as_of = options.end_date or date.today()
        try:
            snapshot = self.ytd_lookup(options.employee_id, as_of)
        except Exception as e:
            logger.debug(
                "YTD lookup failed for employee %s", options.employee_id, exc_info=True
            )
            return None, f"lookup_error: {e}"

        if snapshot is None:
            return None, "ytd_missing"
        if not snapshot.is_current:
            return None, "ytd_not_current"
        tax_year = options.effective_tax_year or as_of.year
        if snapshot.tax_year != tax_year:
            return None, "ytd_tax_year_mismatch"
        return snapshot, ""

    def _build_result(
        self,
        breakdown: T4Breakdown,
        cpp_contributions: Decimal,
        ei_premiums: Decimal,
        method: CalculationMethod,
        fallback_reason: str | None = None,
        tax_year: int | None = None,
    ) -> T4Result:
        employment_income = (
            breakdown.gross_income + breakdown.vacation_pay + breakdown.premium_pay
        )
        return T4Result(
            box14_employment_income=employment_income,
            box16_cpp_contributions=cpp_contributions,
            box18_ei_premiums=ei_premiums,
            box22_income_tax=breakdown.federal_tax + breakdown.provincial_tax,
            box24_ei_insurable_earnings=min(
                employment_income, self.limits.ei_annual_max_insurable
            ),
            box26_cpp_pensionable_earnings=min(
                employment_income, self.limits.cpp_annual_max_pensionable
            ),
            breakdown=breakdown,
            calculation_method=method,
            fallback_reason=fallback_reason,
            tax_year=tax_year,
        )
