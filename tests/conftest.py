"""Pytest fixtures for tax engine tests."""

from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal

import pytest

from tax_engine.calculators.types import CategoryTaxBinding, LineItem, TaxKind, TaxRule
from tax_engine.config import CashRoundingConfig, ReportingLimits
from tax_engine.reporting.types import PayPeriodRecord, PremiumBreakdown


@pytest.fixture
def hst() -> TaxRule:
    """13% HST."""
    return TaxRule(id="hst", name="HST", kind=TaxKind.TAX, rate=Decimal("0.13"))


@pytest.fixture
def gst() -> TaxRule:
    return TaxRule(id="gst", name="GST", kind=TaxKind.TAX, rate=Decimal("0.05"))


@pytest.fixture
def pst() -> TaxRule:
    return TaxRule(id="pst", name="PST", kind=TaxKind.TAX, rate=Decimal("0.08"))


@pytest.fixture
def hst_rebate() -> TaxRule:
    """Full exemption from HST (rate 0, affects HST)."""
    return TaxRule(
        id="hst-rebate",
        name="HST Rebate",
        kind=TaxKind.REBATE,
        rate=Decimal("0"),
        affects=("hst",),
    )


@pytest.fixture
def exemption() -> TaxRule:
    return TaxRule(id="exempt", name="Exempt", kind=TaxKind.EXEMPTION)


@pytest.fixture
def tax_rules(hst, gst, pst, hst_rebate, exemption) -> list[TaxRule]:
    return [hst, gst, pst, hst_rebate, exemption]


@pytest.fixture
def bindings() -> list[CategoryTaxBinding]:
    """Food is HST; books are GST + PST; gift cards are untaxed."""
    return [
        CategoryTaxBinding(category_id="food", tax_rule_id="hst"),
        CategoryTaxBinding(category_id="books", tax_rule_id="gst"),
        CategoryTaxBinding(category_id="books", tax_rule_id="pst"),
    ]


@pytest.fixture
def make_item():
    """Factory for line items."""

    def _make(
        price: str,
        category_id: str | None = "food",
        quantity: str = "1",
        overrides: list[str] | None = None,
        item_id: str = "item",
    ) -> LineItem:
        return LineItem(
            id=item_id,
            name=item_id.title(),
            price=Decimal(price),
            quantity=Decimal(quantity),
            category_id=category_id,
            override_tax_rule_ids=overrides or [],
        )

    return _make


@pytest.fixture
def limits() -> ReportingLimits:
    return ReportingLimits(
        max_weekly_insurable=Decimal("1263"),
        ei_annual_max_insurable=Decimal("65700"),
        cpp_annual_max_pensionable=Decimal("71300"),
        roe_period_window=53,
    )


@pytest.fixture
def cash_config() -> CashRoundingConfig:
    return CashRoundingConfig(increment=Decimal("0.05"))


@pytest.fixture
def make_period():
    """Factory for pay period records.

    A period ends on its pay date and starts 13 days earlier.
    """

    def _make(
        pay_date: date,
        gross: str = "1000",
        vacation: str = "0",
        premiums: object = None,
        regular_hours: str = "80",
        overtime_hours: str = "0",
        lieu_hours: str = "0",
        federal_tax: str = "0",
        provincial_tax: str = "0",
        cpp: str = "0",
        ei: str = "0",
    ) -> PayPeriodRecord:
        return PayPeriodRecord(
            pay_date=pay_date,
            period_start=pay_date - timedelta(days=13),
            period_end=pay_date,
            gross_pay=Decimal(gross),
            vacation_pay=Decimal(vacation),
            regular_hours=Decimal(regular_hours),
            overtime_hours=Decimal(overtime_hours),
            lieu_hours=Decimal(lieu_hours),
            premiums=PremiumBreakdown.parse(premiums),
            federal_tax=Decimal(federal_tax),
            provincial_tax=Decimal(provincial_tax),
            cpp_deduction=Decimal(cpp),
            ei_deduction=Decimal(ei),
        )

    return _make


@pytest.fixture
def biweekly_history(make_period) -> list[PayPeriodRecord]:
    """Ten biweekly periods, newest first, ending 2025-06-27."""
    last = date(2025, 6, 27)
    return [make_period(last - timedelta(days=14 * i)) for i in range(10)]
