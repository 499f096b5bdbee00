from decimal import Decimal
from typing import Iterable, List, Tuple

from tax_engine.domain.fixed_decimal import ZERO, add, divide, fix, is_positive, multiply
from tax_engine.domain.models import FctMode, TaxLineItem, TaxRule, TaxType


class TaxCalculator:
    """
    Computes the tax contribution of each applicable rule for one transaction.

    Ordinary VAT rules are ad valorem on the USD base. The foreign contractor
    tax only applies to foreign vendors and has two modes:

    NET:   tax = base * rate                (tax added on top)
    GROSS: tax = base * rate / (1 + rate)   (base already includes the tax)
    """

    def __init__(self, is_foreign_vendor: bool = False, fct_mode: FctMode = FctMode.NET):
        self.is_foreign_vendor = is_foreign_vendor
        self.fct_mode = FctMode(fct_mode)

    def rule_tax(self, converted_base_usd: str, rule: TaxRule) -> str:
        rate = format(rule.rate, "f")
        if rule.tax_type != TaxType.FCT:
            return multiply(converted_base_usd, rate)

        if not self.is_foreign_vendor:
            return ZERO

        if self.fct_mode == FctMode.NET:
            return multiply(converted_base_usd, rate)
        return fct_gross_up(converted_base_usd, rule.rate)

    def line_items(self, converted_base_usd: str, rules: Iterable[TaxRule]) -> List[TaxLineItem]:
        """
        One line item per rule that produces a positive tax, in rule order.
        Zero-tax rules are evaluated but not surfaced.
        """
        items = []
        for rule in rules:
            amount = self.rule_tax(converted_base_usd, rule)
            if not is_positive(amount):
                continue
            items.append(TaxLineItem(
                rule_id=rule.id,
                tax_type=rule.tax_type,
                rate_percent=fix(rule.rate_percent, places=2),
                amount_usd=amount,
            ))
        return items

    def compute(self, converted_base_usd: str, rules: Iterable[TaxRule]) -> Tuple[List[TaxLineItem], str]:
        """Returns the line items and their total, both in USD."""
        items = self.line_items(converted_base_usd, rules)
        return items, add(*(item.amount_usd for item in items))


def fct_gross_up(converted_base_usd: str, rate: Decimal) -> str:
    """Withholding contained in a tax-inclusive amount: base * rate / (1 + rate)."""
    return divide(multiply(converted_base_usd, format(rate, "f")), format(1 + rate, "f"))
