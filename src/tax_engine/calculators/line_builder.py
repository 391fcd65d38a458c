"""Settlement rounding and receipt summary lines."""

from __future__ import annotations

from decimal import ROUND_FLOOR, ROUND_HALF_UP, Decimal

from tax_engine.calculators.types import CartTaxResult, TaxKind, TaxSummaryLine, TenderType
from tax_engine.config import CashRoundingConfig, get_settings

OUTPUT_PRECISION = Decimal("0.01")  # 2 decimal places for display/settlement


def round_to_cents(amount: Decimal) -> Decimal:
    """Round amount to 2 decimal places (cents)."""
    return amount.quantize(OUTPUT_PRECISION, rounding=ROUND_HALF_UP)


def format_tax_amount(amount: Decimal, precision: int = 2) -> str:
    """Format an amount with a fixed number of decimals."""
    quantum = Decimal(1).scaleb(-precision)
    return str(Decimal(amount).quantize(quantum, rounding=ROUND_HALF_UP))


class CashRoundingPolicy:
    """Rounds cash-tendered totals to the smallest legal denomination.

    Only cash is rounded; every other tender settles to the exact amount.
    This is a settlement transform and must never run before tax
    aggregation.
    """

    def __init__(self, config: CashRoundingConfig | None = None):
        self.config = config or CashRoundingConfig.from_settings(get_settings())

    def round_for_tender(self, amount: Decimal, tender_type: TenderType | str) -> Decimal:
        if tender_type != TenderType.CASH:
            return amount

        # Halves round toward positive infinity, so refunds (negative
        # amounts) mirror sales: -10.025 -> -10.00, 10.025 -> 10.05
        increment = self.config.increment
        units = (amount / increment + Decimal("0.5")).to_integral_value(rounding=ROUND_FLOOR)
        return units * increment


class TaxSummaryBuilder:
    """Builds receipt lines from a cart result.

    Sign conventions:
    - TAX: positive
    - REBATE: negative
    """

    @staticmethod
    def create_tax_line(name: str, amount: Decimal) -> TaxSummaryLine:
        return TaxSummaryLine(
            line_type=TaxKind.TAX,
            name=name,
            amount=abs(amount),
            display=f"{name}: ${format_tax_amount(abs(amount))}",
        )

    @staticmethod
    def create_rebate_line(name: str, amount: Decimal) -> TaxSummaryLine:
        return TaxSummaryLine(
            line_type=TaxKind.REBATE,
            name=name,
            amount=-abs(amount),
            display=f"{name}: -${format_tax_amount(abs(amount))}",
        )

    @classmethod
    def build_summary(cls, result: CartTaxResult) -> list[TaxSummaryLine]:
        """Taxes first, then rebates, each in aggregation order."""
        lines = [
            cls.create_tax_line(name, amount)
            for name, amount in result.aggregated_taxes.items()
        ]
        lines.extend(
            cls.create_rebate_line(name, amount)
            for name, amount in result.aggregated_rebates.items()
        )
        return lines


def build_tax_summary(result: CartTaxResult) -> list[TaxSummaryLine]:
    return TaxSummaryBuilder.build_summary(result)
