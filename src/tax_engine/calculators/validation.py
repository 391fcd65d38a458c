"""Tax configuration validation."""

from __future__ import annotations

from collections.abc import Iterable

from tax_engine.calculators.types import TaxKind, TaxRule, ValidationResult


def validate_tax_configuration(rules: Iterable[TaxRule]) -> ValidationResult:
    """Report data-quality problems in a tax configuration.

    Calculation never fails on these; a misconfigured rebate simply has no
    effect. This is where they surface instead.
    """
    rules = list(rules)
    known_ids = {rule.id for rule in rules}
    result = ValidationResult()

    for rule in rules:
        if not rule.name or not rule.name.strip():
            result.errors.append(f"Tax category missing name: {rule.id}")

        if rule.kind == TaxKind.TAX and not (0 <= rule.rate <= 1):
            result.errors.append(f"Invalid tax rate for {rule.name}: {rule.rate}")

        if rule.kind == TaxKind.REBATE:
            if rule.rate == 0 and not rule.affects:
                result.errors.append(f"Rebate {rule.name} must specify which taxes it affects")
            for affected_id in rule.affects:
                if affected_id not in known_ids:
                    result.errors.append(
                        f"Rebate {rule.name} affects unknown tax: {affected_id}"
                    )

    return result
