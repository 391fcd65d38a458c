"""Pydantic schemas for the engine's input rows and report outputs.

Input rows mirror the persistence layer's records; output models carry the
field names the tax-form renderer maps onto printed ROE/T4 layouts.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from tax_engine.calculators.types import CategoryTaxBinding, TaxKind, TaxRule
from tax_engine.reporting.types import (
    PayPeriodRecord,
    PremiumBreakdown,
    ROEResult,
    T4Result,
    YTDSnapshot,
)


def _zero_if_empty(value: Any) -> Any:
    if value is None or value == "":
        return Decimal("0")
    return value


# ============================================================================
# Tax configuration rows
# ============================================================================


class TaxRuleRow(BaseModel):
    """A tax category row (tax, rebate or exemption)."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str = ""
    category_type: TaxKind
    rate: Decimal = Decimal("0")
    rebate_affects: list[str] | None = None
    is_active: bool = True

    @field_validator("rate", mode="before")
    @classmethod
    def _coerce_rate(cls, value: Any) -> Any:
        return _zero_if_empty(value)

    def to_rule(self) -> TaxRule:
        return TaxRule(
            id=self.id,
            name=self.name,
            kind=self.category_type,
            rate=self.rate,
            affects=tuple(self.rebate_affects or ()),
            active=self.is_active,
        )


class CategoryTaxAssignmentRow(BaseModel):
    """Link from a product category to a default tax category."""

    model_config = ConfigDict(from_attributes=True)

    category_id: str
    tax_category_id: str

    def to_binding(self) -> CategoryTaxBinding:
        return CategoryTaxBinding(category_id=self.category_id, tax_rule_id=self.tax_category_id)


# ============================================================================
# Payroll rows
# ============================================================================


class PayrollEntryRow(BaseModel):
    """A payroll entry joined with its payroll run dates."""

    model_config = ConfigDict(from_attributes=True)

    pay_date: date
    pay_period_start: date
    pay_period_end: date
    gross_pay: Decimal = Decimal("0")
    vacation_pay: Decimal = Decimal("0")
    regular_hours: Decimal = Decimal("0")
    overtime_hours: Decimal = Decimal("0")
    lieu_hours: Decimal = Decimal("0")
    premiums: Any = None
    federal_tax: Decimal = Decimal("0")
    provincial_tax: Decimal = Decimal("0")
    cpp_deduction: Decimal = Decimal("0")
    ei_deduction: Decimal = Decimal("0")

    @model_validator(mode="before")
    @classmethod
    def _flatten_run(cls, data: Any) -> Any:
        """Lift pay dates out of a nested ``hrpayroll_runs`` join."""
        if isinstance(data, dict) and isinstance(data.get("hrpayroll_runs"), dict):
            run = data["hrpayroll_runs"]
            data = {**run, **{k: v for k, v in data.items() if k != "hrpayroll_runs"}}
        return data

    @field_validator(
        "gross_pay",
        "vacation_pay",
        "regular_hours",
        "overtime_hours",
        "lieu_hours",
        "federal_tax",
        "provincial_tax",
        "cpp_deduction",
        "ei_deduction",
        mode="before",
    )
    @classmethod
    def _coerce_amounts(cls, value: Any) -> Any:
        return _zero_if_empty(value)

    def to_record(self) -> PayPeriodRecord:
        return PayPeriodRecord(
            pay_date=self.pay_date,
            period_start=self.pay_period_start,
            period_end=self.pay_period_end,
            gross_pay=self.gross_pay,
            vacation_pay=self.vacation_pay,
            regular_hours=self.regular_hours,
            overtime_hours=self.overtime_hours,
            lieu_hours=self.lieu_hours,
            premiums=PremiumBreakdown.parse(self.premiums),
            federal_tax=self.federal_tax,
            provincial_tax=self.provincial_tax,
            cpp_deduction=self.cpp_deduction,
            ei_deduction=self.ei_deduction,
        )


class YTDSnapshotRow(BaseModel):
    """Stored year-to-date totals for an employee."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    employee_id: str = Field(alias="user_id")
    tax_year: int
    gross_pay: Decimal = Decimal("0")
    vacation_pay: Decimal = Decimal("0")
    shift_premiums: Decimal = Decimal("0")
    federal_tax: Decimal = Decimal("0")
    provincial_tax: Decimal = Decimal("0")
    cpp_deduction: Decimal = Decimal("0")
    ei_deduction: Decimal = Decimal("0")
    hours_worked: Decimal = Decimal("0")
    regular_income: Decimal = Decimal("0")
    overtime_income: Decimal = Decimal("0")
    lieu_income: Decimal = Decimal("0")
    is_current: bool = False
    calculation_date: datetime | None = None
    last_updated: datetime | None = None

    @field_validator(
        "gross_pay",
        "vacation_pay",
        "shift_premiums",
        "federal_tax",
        "provincial_tax",
        "cpp_deduction",
        "ei_deduction",
        "hours_worked",
        "regular_income",
        "overtime_income",
        "lieu_income",
        mode="before",
    )
    @classmethod
    def _coerce_amounts(cls, value: Any) -> Any:
        return _zero_if_empty(value)

    def to_snapshot(self) -> YTDSnapshot:
        return YTDSnapshot(**self.model_dump())


# ============================================================================
# Report outputs
# ============================================================================


class ROEReport(BaseModel):
    """ROE block as consumed by the report renderer."""

    model_config = ConfigDict(populate_by_name=True)

    total_insurable_earnings: Decimal = Field(alias="totalInsurableEarnings")
    total_hours: Decimal = Field(alias="totalHours")
    periods_used: int = Field(alias="periodsUsed")
    first_period_start: date = Field(alias="firstPeriodStart")
    last_period_end: date = Field(alias="lastPeriodEnd")
    average_weekly_earnings: Decimal = Field(alias="averageWeeklyEarnings")

    @classmethod
    def from_result(cls, result: ROEResult) -> "ROEReport":
        return cls(
            total_insurable_earnings=result.total_insurable_earnings,
            total_hours=result.total_hours,
            periods_used=result.periods_used,
            first_period_start=result.first_period_start,
            last_period_end=result.last_period_end,
            average_weekly_earnings=result.average_weekly_earnings,
        )


class T4BreakdownReport(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    gross_income: Decimal = Field(alias="grossIncome")
    vacation_pay: Decimal = Field(alias="vacationPay")
    premium_pay: Decimal = Field(alias="premiumPay")
    federal_tax: Decimal = Field(alias="federalTax")
    provincial_tax: Decimal = Field(alias="provincialTax")


class T4Report(BaseModel):
    """T4 slip boxes as consumed by the report renderer."""

    model_config = ConfigDict(populate_by_name=True)

    box14_employment_income: Decimal = Field(alias="box14_employmentIncome")
    box16_cpp_contributions: Decimal = Field(alias="box16_cppContributions")
    box18_ei_premiums: Decimal = Field(alias="box18_eiPremiums")
    box22_income_tax: Decimal = Field(alias="box22_incomeTax")
    box24_ei_insurable_earnings: Decimal = Field(alias="box24_eiInsurableEarnings")
    box26_cpp_pensionable_earnings: Decimal = Field(alias="box26_cppPensionableEarnings")
    breakdown: T4BreakdownReport
    calculation_method: str = Field(alias="calculationMethod")
    fallback_reason: str | None = Field(default=None, alias="fallbackReason")

    @classmethod
    def from_result(cls, result: T4Result) -> "T4Report":
        b = result.breakdown
        return cls(
            box14_employment_income=result.box14_employment_income,
            box16_cpp_contributions=result.box16_cpp_contributions,
            box18_ei_premiums=result.box18_ei_premiums,
            box22_income_tax=result.box22_income_tax,
            box24_ei_insurable_earnings=result.box24_ei_insurable_earnings,
            box26_cpp_pensionable_earnings=result.box26_cpp_pensionable_earnings,
            breakdown=T4BreakdownReport(
                gross_income=b.gross_income,
                vacation_pay=b.vacation_pay,
                premium_pay=b.premium_pay,
                federal_tax=b.federal_tax,
                provincial_tax=b.provincial_tax,
            ),
            calculation_method=result.calculation_method.value,
            fallback_reason=result.fallback_reason,
        )
