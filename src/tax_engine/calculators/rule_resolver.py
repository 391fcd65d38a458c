"""Tax rule resolution from category defaults and item overrides."""

from __future__ import annotations

from collections.abc import Iterable

from tax_engine.calculators.types import CategoryTaxBinding, LineItem, TaxRule
from tax_engine.exceptions import TaxRuleNotFoundError


class TaxRuleResolver:
    """Resolves the tax rules that apply to a line item.

    Resolution order:
    1. Category default bindings (base taxes)
    2. Item-level overrides (usually rebates/exemptions)
    3. Deduplicate by rule id, first occurrence wins

    Only active rules take part. Unknown or inactive ids are skipped.
    """

    def __init__(
        self,
        rules: Iterable[TaxRule],
        bindings: Iterable[CategoryTaxBinding] = (),
    ):
        self._rules: dict[str, TaxRule] = {r.id: r for r in rules if r.active}
        self._category_rule_ids: dict[str, list[str]] = {}
        for binding in bindings:
            self._category_rule_ids.setdefault(binding.category_id, []).append(
                binding.tax_rule_id
            )

    @property
    def rules_by_id(self) -> dict[str, TaxRule]:
        return dict(self._rules)

    def get_rule(self, rule_id: str) -> TaxRule:
        """Look up an active rule by id.

        Raises:
            TaxRuleNotFoundError: If no active rule has this id
        """
        try:
            return self._rules[rule_id]
        except KeyError:
            raise TaxRuleNotFoundError(rule_id) from None

    def get_category_rules(self, category_id: str | None) -> list[TaxRule]:
        """Get the default rules bound to a product category."""
        if not category_id:
            return []
        return [
            self._rules[rule_id]
            for rule_id in self._category_rule_ids.get(category_id, [])
            if rule_id in self._rules
        ]

    def resolve(self, item: LineItem) -> list[TaxRule]:
        """Resolve the deduplicated rules for a line item.

        No category and no overrides means the item is untaxed.
        """
        candidates = self.get_category_rules(item.category_id)
        candidates.extend(
            self._rules[rule_id]
            for rule_id in item.override_tax_rule_ids
            if rule_id in self._rules
        )

        seen: set[str] = set()
        resolved: list[TaxRule] = []
        for rule in candidates:
            if rule.id in seen:
                continue
            seen.add(rule.id)
            resolved.append(rule)
        return resolved
