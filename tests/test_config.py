"""Tests for settings and limit configuration."""

from decimal import Decimal

import pytest

from tax_engine.config import CashRoundingConfig, ReportingLimits, Settings, get_settings


@pytest.fixture
def clean_env(monkeypatch):
    for key in (
        "MAX_WEEKLY_INSURABLE",
        "EI_ANNUAL_MAX_INSURABLE",
        "CPP_ANNUAL_MAX_PENSIONABLE",
        "CASH_ROUNDING_INCREMENT",
        "ROE_PERIOD_WINDOW",
        "TAX_YEAR",
    ):
        monkeypatch.delenv(key, raising=False)
    get_settings.cache_clear()
    yield monkeypatch
    get_settings.cache_clear()


class TestSettings:
    def test_defaults(self, clean_env):
        settings = Settings.from_env()

        assert settings.max_weekly_insurable == Decimal("1263")
        assert settings.ei_annual_max_insurable == Decimal("65700")
        assert settings.cpp_annual_max_pensionable == Decimal("71300")
        assert settings.cash_rounding_increment == Decimal("0.05")
        assert settings.roe_period_window == 53
        assert settings.tax_year is None

    def test_overrides(self, clean_env):
        clean_env.setenv("EI_ANNUAL_MAX_INSURABLE", "68500")
        clean_env.setenv("TAX_YEAR", "2026")

        settings = Settings.from_env()

        assert settings.ei_annual_max_insurable == Decimal("68500")
        assert settings.tax_year == 2026

    def test_get_settings_cached(self, clean_env):
        assert get_settings() is get_settings()

    def test_limits_from_settings(self, clean_env):
        clean_env.setenv("MAX_WEEKLY_INSURABLE", "1300")
        clean_env.setenv("ROE_PERIOD_WINDOW", "27")

        limits = ReportingLimits.from_settings(Settings.from_env())

        assert limits.max_weekly_insurable == Decimal("1300")
        assert limits.roe_period_window == 27


class TestReportingLimits:
    """Test limit validation."""

    def test_defaults(self):
        limits = ReportingLimits()

        assert limits.max_weekly_insurable == Decimal("1263")
        assert limits.roe_period_window == 53

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"max_weekly_insurable": Decimal("0")},
            {"ei_annual_max_insurable": Decimal("-1")},
            {"cpp_annual_max_pensionable": Decimal("0")},
            {"roe_period_window": 0},
        ],
    )
    def test_invalid(self, kwargs):
        with pytest.raises(ValueError):
            ReportingLimits(**kwargs)


class TestCashRoundingConfig:
    def test_invalid_increment(self):
        with pytest.raises(ValueError):
            CashRoundingConfig(increment=Decimal("0"))

    def test_from_settings(self, clean_env):
        clean_env.setenv("CASH_ROUNDING_INCREMENT", "0.10")

        config = CashRoundingConfig.from_settings(Settings.from_env())

        assert config.increment == Decimal("0.10")
