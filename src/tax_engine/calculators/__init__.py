"""Sales tax calculation engine."""

from tax_engine.calculators.engine import CartTaxAggregator
from tax_engine.calculators.line_builder import (
    CashRoundingPolicy,
    TaxSummaryBuilder,
    build_tax_summary,
    format_tax_amount,
    round_to_cents,
)
from tax_engine.calculators.rule_resolver import TaxRuleResolver
from tax_engine.calculators.tax_calculator import LineItemTaxCalculator, calculate_effective_rate
from tax_engine.calculators.validation import validate_tax_configuration

__all__ = [
    "CartTaxAggregator",
    "CashRoundingPolicy",
    "LineItemTaxCalculator",
    "TaxRuleResolver",
    "TaxSummaryBuilder",
    "build_tax_summary",
    "calculate_effective_rate",
    "format_tax_amount",
    "round_to_cents",
    "validate_tax_configuration",
]
