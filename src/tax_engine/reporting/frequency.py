"""Pay-period cadence detection from historical pay dates."""

from __future__ import annotations

import logging
import statistics
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from tax_engine.reporting.types import PayFrequency, PayFrequencyResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FrequencyTemplate:
    """Expected gap between pay dates for a cadence."""

    frequency: PayFrequency
    expected_gap: float  # days
    tolerance: float  # days


DEFAULT_TEMPLATES: tuple[FrequencyTemplate, ...] = (
    FrequencyTemplate(PayFrequency.WEEKLY, 7, 2),
    FrequencyTemplate(PayFrequency.BIWEEKLY, 14, 3),
    FrequencyTemplate(PayFrequency.SEMIMONTHLY, 15.2, 4),
    FrequencyTemplate(PayFrequency.MONTHLY, 30.4, 5),
)

PERIODS_PER_YEAR: dict[PayFrequency, int] = {
    PayFrequency.WEEKLY: 52,
    PayFrequency.BIWEEKLY: 26,
    PayFrequency.SEMIMONTHLY: 24,
    PayFrequency.MONTHLY: 12,
}

FALLBACK_FREQUENCY = PayFrequency.BIWEEKLY
MIN_PAY_DATES = 3


class PayFrequencyDetector:
    """Infers the pay cadence from gaps between consecutive pay dates.

    Each template whose expected gap is within tolerance of the mean gap is
    scored as 0.7 * closeness + 0.3 * consistency, where closeness is how
    near the mean is to the expected gap and consistency penalises a large
    standard deviation. The best score wins.

    With no template in tolerance the result is biweekly at confidence 0.
    """

    def __init__(self, templates: Iterable[FrequencyTemplate] = DEFAULT_TEMPLATES):
        self.templates = tuple(templates)

    def detect(self, pay_dates: Iterable[date]) -> PayFrequencyResult:
        """Detect the cadence; input order does not matter."""
        dates = sorted(pay_dates)
        if len(dates) < MIN_PAY_DATES:
            return PayFrequencyResult(frequency=None, confidence=0, analysis="Insufficient data")

        gaps = [(later - earlier).days for earlier, later in zip(dates, dates[1:])]
        mean_gap = statistics.fmean(gaps)
        std_dev = statistics.pstdev(gaps)

        best: PayFrequencyResult | None = None
        best_score = 0.0

        for template in self.templates:
            deviation = abs(mean_gap - template.expected_gap)
            if deviation > template.tolerance:
                continue

            closeness = 1 - deviation / template.tolerance
            consistency = max(0.0, 1 - std_dev / template.expected_gap)
            score = closeness * 0.7 + consistency * 0.3

            if score > best_score:
                best_score = score
                best = PayFrequencyResult(
                    frequency=template.frequency,
                    confidence=_to_percent(score),
                    analysis=(
                        f"Avg gap: {mean_gap:.1f} days, Expected: {template.expected_gap}, "
                        f"StdDev: {std_dev:.1f}"
                    ),
                )

        if best is None:
            logger.debug(
                "No pay frequency matched mean gap %.1f (stddev %.1f)", mean_gap, std_dev
            )
            return PayFrequencyResult(
                frequency=FALLBACK_FREQUENCY,
                confidence=0,
                analysis=f"Irregular pattern - Avg gap: {mean_gap:.1f} days, StdDev: {std_dev:.1f}",
            )

        return best


def _to_percent(score: float) -> int:
    return int(Decimal(repr(score * 100)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def effective_frequency(
    detected: PayFrequencyResult | PayFrequency | None,
    override: PayFrequency | str | None = None,
) -> PayFrequency:
    """Pick the cadence a report should use.

    A manual override wins; otherwise the detected frequency; otherwise
    biweekly.
    """
    if override:
        return PayFrequency(override)
    if isinstance(detected, PayFrequencyResult):
        detected = detected.frequency
    return detected or FALLBACK_FREQUENCY


def periods_per_year(frequency: PayFrequency | str | None) -> int:
    if not frequency:
        return PERIODS_PER_YEAR[FALLBACK_FREQUENCY]
    return PERIODS_PER_YEAR[PayFrequency(frequency)]
