"""Cart tax engine - main orchestrator for sales tax."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from decimal import Decimal

from tax_engine.calculators.rule_resolver import TaxRuleResolver
from tax_engine.calculators.tax_calculator import LineItemTaxCalculator
from tax_engine.calculators.types import (
    AmountBreakdown,
    CartTaxResult,
    CategoryTaxBinding,
    ItemTaxDetail,
    LineItem,
    TaxRule,
)

ZERO = Decimal("0")


class CartTaxAggregator:
    """Computes cart-level tax from line items.

    Calculation pipeline (stable order per cart):
    1) Cart subtotal (caller-supplied or sum of item subtotals)
    2) Reduction ratio = (discount + loyalty) / subtotal, clamped to [0, 1]
    3) Per item: taxable = item subtotal * (1 - ratio)
    4) Per item: resolve rules, calculate net tax
    5) Aggregate taxes and rebates by name, sum net tax

    No rounding happens here. Cash rounding and cents are applied at
    settlement by the caller.
    """

    def __init__(
        self,
        resolver: TaxRuleResolver,
        calculator: LineItemTaxCalculator | None = None,
    ):
        self.resolver = resolver
        self.calculator = calculator or LineItemTaxCalculator(resolver.rules_by_id)

    @classmethod
    def from_configuration(
        cls,
        rules: Iterable[TaxRule],
        bindings: Iterable[CategoryTaxBinding] = (),
    ) -> CartTaxAggregator:
        """Build an aggregator from rule and category binding tables."""
        return cls(TaxRuleResolver(rules, bindings))

    def calculate_cart_tax(
        self,
        items: Sequence[LineItem],
        discount_amount: Decimal = ZERO,
        loyalty_redemption: Decimal = ZERO,
        subtotal: Decimal | None = None,
    ) -> CartTaxResult:
        """Calculate tax for all cart items with aggregated breakdowns."""
        if subtotal is None:
            subtotal = sum((item.subtotal for item in items), ZERO)

        reduction_ratio = self._reduction_ratio(subtotal, discount_amount, loyalty_redemption)

        total_tax = ZERO
        aggregated_taxes = AmountBreakdown()
        aggregated_rebates = AmountBreakdown()
        details: list[ItemTaxDetail] = []

        for item in items:
            item_subtotal = item.subtotal
            taxable_amount = item_subtotal * (1 - reduction_ratio)

            result = self.calculator.calculate_item_tax(
                self.resolver.resolve(item), taxable_amount
            )
            total_tax += result.tax_amount

            details.append(
                ItemTaxDetail(
                    item_id=item.id,
                    item_name=item.name,
                    subtotal=item_subtotal,
                    taxable_amount=taxable_amount,
                    result=result,
                )
            )
            aggregated_taxes.merge(result.tax_breakdown)
            aggregated_rebates.merge(result.rebate_breakdown)

        return CartTaxResult(
            total_tax=total_tax,
            aggregated_taxes=aggregated_taxes,
            aggregated_rebates=aggregated_rebates,
            item_details=details,
            subtotal=subtotal,
            reduction_ratio=reduction_ratio,
        )

    @staticmethod
    def _reduction_ratio(
        subtotal: Decimal,
        discount_amount: Decimal,
        loyalty_redemption: Decimal,
    ) -> Decimal:
        if subtotal <= 0:
            return ZERO
        ratio = (discount_amount + loyalty_redemption) / subtotal
        # Reductions past the subtotal leave nothing taxable
        return min(max(ratio, ZERO), Decimal("1"))
