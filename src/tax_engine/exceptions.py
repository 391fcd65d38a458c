"""Exceptions raised by the tax engine."""

from __future__ import annotations

from datetime import date


class TaxEngineError(Exception):
    """Base class for tax engine errors."""


class TaxRuleNotFoundError(TaxEngineError):
    """Raised when a tax rule id is not present in the configuration."""

    def __init__(self, rule_id: str):
        self.rule_id = rule_id
        super().__init__(f"Tax rule '{rule_id}' not found")


class InvalidDateRangeError(TaxEngineError):
    """Raised when a report date range ends before it starts."""

    def __init__(self, start: date, end: date):
        self.start = start
        self.end = end
        super().__init__(f"Date range start {start} is after end {end}")
