"""Unit tests for LineItemTaxCalculator.

Tests per-item tax with rebates and exemptions.
"""

from decimal import Decimal

from tax_engine.calculators.tax_calculator import LineItemTaxCalculator, calculate_effective_rate
from tax_engine.calculators.types import (
    FullExemption,
    PercentageRebate,
    TaxKind,
    TaxRule,
)


def _calculator(*rules: TaxRule) -> LineItemTaxCalculator:
    return LineItemTaxCalculator({r.id: r for r in rules})


class TestTaxRules:
    """Test plain tax rules."""

    def test_single_tax(self, hst):
        """$100 at 13% is $13."""
        result = _calculator(hst).calculate_item_tax([hst], Decimal("100"))

        assert result.tax_amount == Decimal("13.00")
        assert result.tax_breakdown == {"HST": Decimal("13.00")}
        assert result.effective_rate == Decimal("0.13")
        assert result.is_exempt is False

    def test_multiple_taxes(self, gst, pst):
        result = _calculator(gst, pst).calculate_item_tax([gst, pst], Decimal("10"))

        assert result.tax_amount == Decimal("1.30")
        assert result.tax_breakdown == {"GST": Decimal("0.50"), "PST": Decimal("0.80")}

    def test_rules_sharing_a_name_are_summed(self):
        """Two rules named 'Tax' accumulate into one breakdown entry."""
        a = TaxRule(id="a", name="Tax", kind=TaxKind.TAX, rate=Decimal("0.05"))
        b = TaxRule(id="b", name="Tax", kind=TaxKind.TAX, rate=Decimal("0.08"))

        result = _calculator(a, b).calculate_item_tax([a, b], Decimal("100"))

        assert result.tax_breakdown == {"Tax": Decimal("13.00")}

    def test_no_rules_is_zero(self):
        result = _calculator().calculate_item_tax([], Decimal("50"))

        assert result.tax_amount == Decimal("0")
        assert result.effective_rate == Decimal("0")

    def test_zero_subtotal_effective_rate_zero(self, hst):
        result = _calculator(hst).calculate_item_tax([hst], Decimal("0"))

        assert result.tax_amount == Decimal("0")
        assert result.effective_rate == Decimal("0")


class TestRebates:
    """Test full-exemption and percentage rebates."""

    def test_full_exemption_rebate_nets_out_tax(self, hst, hst_rebate):
        """Rate-0 rebate naming HST cancels it exactly."""
        result = _calculator(hst, hst_rebate).calculate_item_tax(
            [hst, hst_rebate], Decimal("100")
        )

        assert result.tax_amount == Decimal("0")
        assert result.tax_breakdown == {"HST": Decimal("13.00")}
        assert result.rebate_breakdown == {"HST Rebate": Decimal("13.00")}

    def test_full_exemption_of_unresolved_tax(self, hst, gst, hst_rebate):
        """The rebate uses HST's rate even if HST wasn't resolved for the item.

        Net tax is clamped at zero rather than going negative.
        """
        result = _calculator(hst, gst, hst_rebate).calculate_item_tax(
            [gst, hst_rebate], Decimal("100")
        )

        assert result.rebate_breakdown == {"HST Rebate": Decimal("13.00")}
        assert result.tax_amount == Decimal("0")

    def test_full_exemption_partial(self, gst, pst):
        """Exempting PST leaves GST."""
        pst_exempt = TaxRule(
            id="pst-exempt",
            name="PST Exempt",
            kind=TaxKind.REBATE,
            rate=Decimal("0"),
            affects=("pst",),
        )
        result = _calculator(gst, pst, pst_exempt).calculate_item_tax(
            [gst, pst, pst_exempt], Decimal("20")
        )

        assert result.tax_amount == Decimal("1.00")

    def test_percentage_rebate(self, hst):
        """A positive-rate rebate discounts that share of the base."""
        rebate = TaxRule(
            id="pr", name="Point of Sale Rebate", kind=TaxKind.REBATE, rate=Decimal("0.08")
        )
        result = _calculator(hst, rebate).calculate_item_tax([hst, rebate], Decimal("100"))

        assert result.rebate_breakdown == {"Point of Sale Rebate": Decimal("8.00")}
        assert result.tax_amount == Decimal("5.00")

    def test_percentage_rebate_ignores_affects(self, hst, gst):
        """A positive rate wins over the affects list."""
        rebate = TaxRule(
            id="pr",
            name="Rebate",
            kind=TaxKind.REBATE,
            rate=Decimal("0.02"),
            affects=("hst",),
        )
        assert isinstance(rebate.rebate, PercentageRebate)

        result = _calculator(hst, gst, rebate).calculate_item_tax([gst, rebate], Decimal("100"))

        assert result.tax_amount == Decimal("3.00")

    def test_overlapping_rebates_double_net(self, hst, gst, hst_rebate):
        """Two rebates naming the same tax each net it out independently."""
        second = TaxRule(
            id="hst-rebate-2",
            name="Second Rebate",
            kind=TaxKind.REBATE,
            rate=Decimal("0"),
            affects=("hst",),
        )
        rules = [hst, gst, hst_rebate, second]

        result = _calculator(*rules).calculate_item_tax(rules, Decimal("100"))

        # 13 + 5 taxes, 13 + 13 rebates: clamped to zero
        assert result.rebate_breakdown.total() == Decimal("26.00")
        assert result.tax_amount == Decimal("0")

    def test_misconfigured_rebate_has_no_effect(self, hst):
        """Rate 0 with nothing affected does nothing."""
        broken = TaxRule(id="broken", name="Broken", kind=TaxKind.REBATE, rate=Decimal("0"))
        assert broken.rebate is None

        result = _calculator(hst, broken).calculate_item_tax([hst, broken], Decimal("100"))

        assert result.tax_amount == Decimal("13.00")
        assert result.rebate_breakdown == {}

    def test_rebate_variant_classification(self, hst_rebate, hst):
        assert hst_rebate.rebate == FullExemption(affects=("hst",))
        assert hst.rebate is None


class TestExemptions:
    """Exemption dominates every other rule."""

    def test_exemption_short_circuits(self, hst, gst, exemption):
        result = _calculator(hst, gst, exemption).calculate_item_tax(
            [hst, gst, exemption], Decimal("100")
        )

        assert result.is_exempt is True
        assert result.tax_amount == Decimal("0")
        assert result.tax_breakdown == {}
        assert result.rebate_breakdown == {}


class TestEffectiveRate:
    def test_effective_rate(self):
        assert calculate_effective_rate(Decimal("13"), Decimal("100")) == Decimal("0.13")

    def test_effective_rate_non_positive_base(self):
        assert calculate_effective_rate(Decimal("5"), Decimal("0")) == Decimal("0")
        assert calculate_effective_rate(Decimal("5"), Decimal("-10")) == Decimal("0")
