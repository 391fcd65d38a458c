"""Configuration management for the tax engine.

Jurisdiction limits vary by tax year, so they are read from the environment
(or passed explicitly) rather than compiled into the calculators.

Pattern:
    limits = ReportingLimits(
        max_weekly_insurable=Decimal("1263"),
        ei_annual_max_insurable=Decimal("65700"),
        cpp_annual_max_pensionable=Decimal("71300"),
    )
    aggregator = ROEAggregator(limits=limits)
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from decimal import Decimal
from functools import lru_cache

from dotenv import load_dotenv


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment."""

    max_weekly_insurable: Decimal
    ei_annual_max_insurable: Decimal
    cpp_annual_max_pensionable: Decimal
    cash_rounding_increment: Decimal
    roe_period_window: int
    tax_year: int | None

    @classmethod
    def from_env(cls) -> Settings:
        """Load settings from environment variables."""
        load_dotenv()

        tax_year = os.getenv("TAX_YEAR")
        return cls(
            max_weekly_insurable=Decimal(os.getenv("MAX_WEEKLY_INSURABLE", "1263")),
            ei_annual_max_insurable=Decimal(os.getenv("EI_ANNUAL_MAX_INSURABLE", "65700")),
            cpp_annual_max_pensionable=Decimal(
                os.getenv("CPP_ANNUAL_MAX_PENSIONABLE", "71300")
            ),
            cash_rounding_increment=Decimal(os.getenv("CASH_ROUNDING_INCREMENT", "0.05")),
            roe_period_window=int(os.getenv("ROE_PERIOD_WINDOW", "53")),
            tax_year=int(tax_year) if tax_year else None,
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings.from_env()


@dataclass(frozen=True)
class ReportingLimits:
    """
    Statutory caps used by ROE and T4 aggregation.

    Attributes:
        max_weekly_insurable: Per-period cap on insurable earnings (ROE and
            weekly breakdown).
        ei_annual_max_insurable: Annual cap for T4 box 24.
        cpp_annual_max_pensionable: Annual cap for T4 box 26.
        roe_period_window: Number of trailing pay periods an ROE covers.
    """

    max_weekly_insurable: Decimal = Decimal("1263")
    ei_annual_max_insurable: Decimal = Decimal("65700")
    cpp_annual_max_pensionable: Decimal = Decimal("71300")
    roe_period_window: int = 53

    def __post_init__(self) -> None:
        """Validate configuration."""
        if self.max_weekly_insurable <= 0:
            raise ValueError("max_weekly_insurable must be positive")
        if self.ei_annual_max_insurable <= 0:
            raise ValueError("ei_annual_max_insurable must be positive")
        if self.cpp_annual_max_pensionable <= 0:
            raise ValueError("cpp_annual_max_pensionable must be positive")
        if self.roe_period_window < 1:
            raise ValueError("roe_period_window must be at least 1")

    @classmethod
    def from_settings(cls, settings: Settings) -> ReportingLimits:
        return cls(
            max_weekly_insurable=settings.max_weekly_insurable,
            ei_annual_max_insurable=settings.ei_annual_max_insurable,
            cpp_annual_max_pensionable=settings.cpp_annual_max_pensionable,
            roe_period_window=settings.roe_period_window,
        )


@dataclass(frozen=True)
class CashRoundingConfig:
    """
    Cash settlement configuration.

    Attributes:
        increment: Smallest tenderable cash denomination. Default 0.05
            (no pennies).
    """

    increment: Decimal = Decimal("0.05")

    def __post_init__(self) -> None:
        """Validate configuration."""
        if self.increment <= 0:
            raise ValueError("increment must be positive")

    @classmethod
    def from_settings(cls, settings: Settings) -> CashRoundingConfig:
        return cls(increment=settings.cash_rounding_increment)
