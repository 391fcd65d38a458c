"""Per-item tax calculation with rebates and exemptions."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from decimal import Decimal

from tax_engine.calculators.types import (
    AmountBreakdown,
    FullExemption,
    ItemTaxResult,
    PercentageRebate,
    TaxKind,
    TaxRule,
)

ZERO = Decimal("0")


def calculate_effective_rate(tax_amount: Decimal, taxable_amount: Decimal) -> Decimal:
    """Effective rate for display purposes, 0 when nothing is taxable."""
    if taxable_amount <= 0:
        return ZERO
    return tax_amount / taxable_amount


class LineItemTaxCalculator:
    """Calculates net tax for a taxable amount from its resolved rules.

    Rule semantics:
    - TAX: amount = taxable * rate, summed by rule name
    - REBATE, full exemption: nets out taxable * rate of each affected
      tax, whether or not that tax was resolved for the item
    - REBATE, percentage: taxable * rate
    - EXEMPTION: dominates everything, net tax is zero

    Rebates are applied independently, so two rebates naming the same tax
    both net it out. Net tax is clamped at zero.
    """

    def __init__(self, rules_by_id: Mapping[str, TaxRule]):
        self.rules_by_id = rules_by_id

    def calculate_item_tax(
        self,
        rules: Iterable[TaxRule],
        taxable_subtotal: Decimal,
    ) -> ItemTaxResult:
        """Calculate tax for one item's taxable subtotal."""
        rules = list(rules)

        if any(rule.kind == TaxKind.EXEMPTION for rule in rules):
            return ItemTaxResult(tax_amount=ZERO, effective_rate=ZERO, is_exempt=True)

        tax_breakdown = AmountBreakdown()
        rebate_breakdown = AmountBreakdown()

        for rule in rules:
            if rule.kind == TaxKind.TAX:
                tax_breakdown.accumulate(rule.name, taxable_subtotal * rule.rate)
            elif rule.kind == TaxKind.REBATE:
                self._apply_rebate(rule, taxable_subtotal, rebate_breakdown)

        net_tax = max(ZERO, tax_breakdown.total() - rebate_breakdown.total())

        return ItemTaxResult(
            tax_amount=net_tax,
            effective_rate=calculate_effective_rate(net_tax, taxable_subtotal),
            tax_breakdown=tax_breakdown,
            rebate_breakdown=rebate_breakdown,
        )

    def _apply_rebate(
        self,
        rule: TaxRule,
        taxable_subtotal: Decimal,
        rebate_breakdown: AmountBreakdown,
    ) -> None:
        effect = rule.rebate
        if isinstance(effect, FullExemption):
            for affected_id in effect.affects:
                affected = self.rules_by_id.get(affected_id)
                if affected is None:
                    continue
                rebate_breakdown.accumulate(rule.name, taxable_subtotal * affected.rate)
        elif isinstance(effect, PercentageRebate):
            rebate_breakdown.accumulate(rule.name, taxable_subtotal * effect.rate)
        # No effect: misconfigured rebate, reported by validate_tax_configuration
