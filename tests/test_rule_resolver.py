"""Tests for tax rule resolution."""

from decimal import Decimal

import pytest

from tax_engine.calculators.rule_resolver import TaxRuleResolver
from tax_engine.calculators.types import TaxKind, TaxRule
from tax_engine.exceptions import TaxRuleNotFoundError


class TestTaxRuleResolver:
    """Test category defaults, overrides and deduplication."""

    def test_category_defaults(self, tax_rules, bindings, make_item):
        """Items pick up their category's default taxes."""
        resolver = TaxRuleResolver(tax_rules, bindings)

        rules = resolver.resolve(make_item("10.00", category_id="books"))

        assert [r.id for r in rules] == ["gst", "pst"]

    def test_overrides_added_after_defaults(self, tax_rules, bindings, make_item):
        """Overrides are unioned in after the category defaults."""
        resolver = TaxRuleResolver(tax_rules, bindings)

        rules = resolver.resolve(make_item("10.00", overrides=["hst-rebate"]))

        assert [r.id for r in rules] == ["hst", "hst-rebate"]

    def test_duplicate_rule_counted_once(self, tax_rules, bindings, make_item):
        """A rule in both the category and overrides appears once."""
        resolver = TaxRuleResolver(tax_rules, bindings)

        rules = resolver.resolve(make_item("10.00", overrides=["hst", "hst"]))

        assert [r.id for r in rules] == ["hst"]

    def test_no_category_no_overrides_is_untaxed(self, tax_rules, bindings, make_item):
        resolver = TaxRuleResolver(tax_rules, bindings)

        assert resolver.resolve(make_item("10.00", category_id=None)) == []

    def test_override_only_item(self, tax_rules, bindings, make_item):
        """An uncategorised item can still carry explicit rules."""
        resolver = TaxRuleResolver(tax_rules, bindings)

        rules = resolver.resolve(make_item("10.00", category_id=None, overrides=["gst"]))

        assert [r.id for r in rules] == ["gst"]

    def test_unknown_and_inactive_rules_skipped(self, hst, bindings, make_item):
        """Inactive or unknown ids never apply."""
        retired = TaxRule(
            id="retired", name="Old Tax", kind=TaxKind.TAX, rate=Decimal("0.07"), active=False
        )
        resolver = TaxRuleResolver([hst, retired], bindings)

        rules = resolver.resolve(make_item("10.00", overrides=["retired", "missing"]))

        assert [r.id for r in rules] == ["hst"]

    def test_get_rule_not_found(self, tax_rules):
        resolver = TaxRuleResolver(tax_rules)

        with pytest.raises(TaxRuleNotFoundError) as exc_info:
            resolver.get_rule("nope")

        assert exc_info.value.rule_id == "nope"

    def test_get_category_rules_unknown_category(self, tax_rules, bindings):
        resolver = TaxRuleResolver(tax_rules, bindings)

        assert resolver.get_category_rules("hardware") == []
        assert resolver.get_category_rules(None) == []
