"""Type definitions for the sales-tax calculation pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, Union


class TaxKind(str, Enum):
    """Tax rule kinds."""

    TAX = "tax"
    REBATE = "rebate"
    EXEMPTION = "exemption"


class TenderType(str, Enum):
    """Settlement methods."""

    CASH = "cash"
    CARD = "card"
    GIFT_CARD = "gift_card"
    OTHER = "other"


@dataclass(frozen=True)
class FullExemption:
    """Rebate that nets out the named taxes entirely."""

    affects: tuple[str, ...]


@dataclass(frozen=True)
class PercentageRebate:
    """Rebate that discounts a percentage of the taxable base."""

    rate: Decimal


RebateEffect = Union[FullExemption, PercentageRebate]


def classify_rebate(rate: Decimal, affects: tuple[str, ...]) -> RebateEffect | None:
    """Classify a rebate by its configured rate and affected taxes.

    A zero rate with affected taxes is a full exemption of those taxes; a
    positive rate is a percentage rebate regardless of ``affects``. Anything
    else (zero rate, nothing affected) has no effect.
    """
    if rate == 0 and affects:
        return FullExemption(affects=affects)
    if rate > 0:
        return PercentageRebate(rate=rate)
    return None


@dataclass(frozen=True)
class TaxRule:
    """Tax rule configuration (tax, rebate or exemption)."""

    id: str
    name: str
    kind: TaxKind
    rate: Decimal = Decimal("0")  # As decimal, e.g., 0.13 for 13%
    affects: tuple[str, ...] = ()  # Rule ids, rebates only
    active: bool = True

    rebate: RebateEffect | None = field(init=False, compare=False, repr=False)

    def __post_init__(self) -> None:
        effect = classify_rebate(self.rate, self.affects) if self.kind == TaxKind.REBATE else None
        object.__setattr__(self, "rebate", effect)


@dataclass(frozen=True)
class CategoryTaxBinding:
    """Default tax rule for a product category."""

    category_id: str
    tax_rule_id: str


@dataclass(frozen=True)
class Modifier:
    """Priced modifier attached to a line item (e.g., extra shot)."""

    name: str
    price: Decimal = Decimal("0")


@dataclass
class LineItem:
    """A cart line item."""

    id: str
    name: str
    price: Decimal
    quantity: Decimal | None = Decimal("1")
    modifiers: list[Modifier] = field(default_factory=list)
    category_id: str | None = None
    override_tax_rule_ids: list[str] = field(default_factory=list)

    @property
    def subtotal(self) -> Decimal:
        """Unit price plus modifiers, times quantity (missing or zero counts as 1)."""
        modifiers_total = sum((m.price for m in self.modifiers), Decimal("0"))
        return (self.price + modifiers_total) * (self.quantity or Decimal("1"))


class AmountBreakdown(dict[str, Decimal]):
    """Ordered name -> amount map with accumulate-or-insert."""

    def accumulate(self, name: str, amount: Decimal) -> None:
        self[name] = self.get(name, Decimal("0")) + amount

    def merge(self, other: dict[str, Decimal]) -> None:
        for name, amount in other.items():
            self.accumulate(name, amount)

    def total(self) -> Decimal:
        return sum(self.values(), Decimal("0"))


@dataclass
class ItemTaxResult:
    """Tax computed for a single taxable amount."""

    tax_amount: Decimal
    effective_rate: Decimal
    tax_breakdown: AmountBreakdown = field(default_factory=AmountBreakdown)
    rebate_breakdown: AmountBreakdown = field(default_factory=AmountBreakdown)
    is_exempt: bool = False


@dataclass
class ItemTaxDetail:
    """Per-item detail in a cart calculation."""

    item_id: str
    item_name: str
    subtotal: Decimal
    taxable_amount: Decimal
    result: ItemTaxResult


@dataclass
class CartTaxResult:
    """Cart-level tax totals."""

    total_tax: Decimal
    aggregated_taxes: AmountBreakdown
    aggregated_rebates: AmountBreakdown
    item_details: list[ItemTaxDetail]
    subtotal: Decimal
    reduction_ratio: Decimal


@dataclass(frozen=True)
class TaxSummaryLine:
    """Receipt/display line for an aggregated tax or rebate."""

    line_type: TaxKind
    name: str
    amount: Decimal  # Taxes positive, rebates negative
    display: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.line_type.value,
            "name": self.name,
            "amount": str(self.amount),
            "display": self.display,
        }


@dataclass
class ValidationResult:
    """Outcome of validating a tax configuration."""

    errors: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0
