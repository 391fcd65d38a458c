"""Type definitions for payroll tax reporting."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


def to_decimal(value: Any) -> Decimal:
    """Coerce a stored numeric value to Decimal; null or empty is zero.

    Raises:
        ValueError: If the value is not a finite number
    """
    if value is None or value == "":
        return ZERO
    if isinstance(value, bool):
        raise ValueError(f"Not a number: {value!r}")
    try:
        result = Decimal(str(value))
    except InvalidOperation:
        raise ValueError(f"Not a number: {value!r}") from None
    if not result.is_finite():
        raise ValueError(f"Not a finite number: {value!r}")
    return result


class PayFrequency(str, Enum):
    """Pay-period cadences."""

    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    SEMIMONTHLY = "semimonthly"
    MONTHLY = "monthly"


class CalculationMethod(str, Enum):
    """How a T4 result was produced."""

    FULL = "full"
    YTD_OPTIMIZED = "ytdOptimized"
    YTD_FALLBACK = "ytdFallback"


@dataclass(frozen=True)
class PremiumLine:
    """A single premium (e.g., night shift) paid in a period."""

    rate: Decimal = ZERO
    hours: Decimal = ZERO
    total_pay: Decimal = ZERO


@dataclass(frozen=True)
class PremiumBreakdown(Mapping[str, PremiumLine]):
    """Ordered premium name -> premium line map.

    Stored premium data is loosely typed (a dict, or a JSON string of one).
    ``parse`` never raises: anything malformed becomes an empty breakdown.
    """

    lines: tuple[tuple[str, PremiumLine], ...] = ()

    def __getitem__(self, name: str) -> PremiumLine:
        for key, line in self.lines:
            if key == name:
                return line
        raise KeyError(name)

    def __iter__(self) -> Iterator[str]:
        return (key for key, _ in self.lines)

    def __len__(self) -> int:
        return len(self.lines)

    @property
    def total_pay(self) -> Decimal:
        return sum((line.total_pay for _, line in self.lines), ZERO)

    @classmethod
    def parse(cls, raw: Any) -> PremiumBreakdown:
        if isinstance(raw, PremiumBreakdown):
            return raw
        if raw is None or raw == "":
            return cls()

        try:
            data = json.loads(raw) if isinstance(raw, (str, bytes)) else raw
            if not isinstance(data, Mapping):
                raise ValueError(f"Premiums must be a mapping, got {type(data).__name__}")

            lines = []
            for name, entry in data.items():
                if not isinstance(entry, Mapping):
                    raise ValueError(f"Premium {name!r} is not a mapping")
                lines.append(
                    (
                        str(name),
                        PremiumLine(
                            rate=to_decimal(entry.get("rate")),
                            hours=to_decimal(entry.get("hours")),
                            total_pay=to_decimal(entry.get("total_pay")),
                        ),
                    )
                )
        except (ValueError, TypeError) as e:
            # json.JSONDecodeError is a ValueError
            logger.debug("Ignoring malformed premium data: %s", e)
            return cls()

        return cls(lines=tuple(lines))


@dataclass(frozen=True)
class PayPeriodRecord:
    """One historical payroll entry for an employee. Never mutated."""

    pay_date: date
    period_start: date
    period_end: date
    gross_pay: Decimal = ZERO
    vacation_pay: Decimal = ZERO
    regular_hours: Decimal = ZERO
    overtime_hours: Decimal = ZERO
    lieu_hours: Decimal = ZERO
    premiums: PremiumBreakdown = field(default_factory=PremiumBreakdown)
    federal_tax: Decimal = ZERO
    provincial_tax: Decimal = ZERO
    cpp_deduction: Decimal = ZERO
    ei_deduction: Decimal = ZERO

    @property
    def premium_pay(self) -> Decimal:
        return self.premiums.total_pay

    @property
    def total_earnings(self) -> Decimal:
        """Gross plus vacation plus premiums."""
        return self.gross_pay + self.vacation_pay + self.premium_pay

    @property
    def total_hours(self) -> Decimal:
        return self.regular_hours + self.overtime_hours + self.lieu_hours


@dataclass(frozen=True)
class PayFrequencyResult:
    """Inferred pay cadence.

    A zero confidence means "do not trust this, ask for a manual
    frequency", even when ``frequency`` is set.
    """

    frequency: PayFrequency | None
    confidence: int
    analysis: str


@dataclass(frozen=True)
class ROEResult:
    """Record of Employment earnings totals."""

    total_insurable_earnings: Decimal
    total_hours: Decimal
    periods_used: int
    first_period_start: date
    last_period_end: date
    average_weekly_earnings: Decimal


@dataclass(frozen=True)
class T4Breakdown:
    """Components behind the T4 boxes."""

    gross_income: Decimal = ZERO
    vacation_pay: Decimal = ZERO
    premium_pay: Decimal = ZERO
    federal_tax: Decimal = ZERO
    provincial_tax: Decimal = ZERO
    # Only known on the YTD path
    hours_worked: Decimal | None = None
    regular_income: Decimal | None = None
    overtime_income: Decimal | None = None
    lieu_income: Decimal | None = None


@dataclass(frozen=True)
class T4Result:
    """Annual T4 slip box totals."""

    box14_employment_income: Decimal
    box16_cpp_contributions: Decimal
    box18_ei_premiums: Decimal
    box22_income_tax: Decimal
    box24_ei_insurable_earnings: Decimal
    box26_cpp_pensionable_earnings: Decimal
    breakdown: T4Breakdown
    calculation_method: CalculationMethod
    fallback_reason: str | None = None
    tax_year: int | None = None


@dataclass
class WeeklyBucket:
    """Pay periods whose pay date falls in one ISO week."""

    week_key: str
    week_start: date
    week_end: date
    pay_date: date
    hours: Decimal = ZERO
    regular_hours: Decimal = ZERO
    overtime_hours: Decimal = ZERO
    lieu_hours: Decimal = ZERO
    gross_earnings: Decimal = ZERO
    insurable_earnings: Decimal = ZERO
    vacation_pay: Decimal = ZERO
    premium_pay: Decimal = ZERO
    entries: list[PayPeriodRecord] = field(default_factory=list)


@dataclass(frozen=True)
class YTDSnapshot:
    """Precomputed year-to-date payroll totals for one employee."""

    employee_id: str
    tax_year: int
    gross_pay: Decimal = ZERO
    vacation_pay: Decimal = ZERO
    shift_premiums: Decimal = ZERO
    federal_tax: Decimal = ZERO
    provincial_tax: Decimal = ZERO
    cpp_deduction: Decimal = ZERO
    ei_deduction: Decimal = ZERO
    hours_worked: Decimal = ZERO
    regular_income: Decimal = ZERO
    overtime_income: Decimal = ZERO
    lieu_income: Decimal = ZERO
    is_current: bool = False
    calculation_date: datetime | None = None
    last_updated: datetime | None = None
