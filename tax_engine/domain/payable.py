from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING, Iterable, Optional, Tuple

import structlog

from tax_engine.core.metrics import TAX_PREVIEWS
from tax_engine.domain.fixed_decimal import (
    ZERO, Numeric, add, divide, fix, is_positive, multiply, rate_from_quote,
)
from tax_engine.domain.models import (
    BASE_CURRENCY, CurrencyCode, TaxComputationInput, TaxComputationResult, TaxRule,
)
from tax_engine.domain.tax_calculator import TaxCalculator
from tax_engine.domain.tax_rules import applicable_rules

if TYPE_CHECKING:
    from tax_engine.caching.rate_cache import RateCache

logger = structlog.get_logger(__name__)


def effective_rate(currency: CurrencyCode, supplied_rate: Optional[str]) -> str:
    """USD per unit of ``currency``: always 1 for USD, otherwise the supplied rate."""
    if CurrencyCode(currency) == BASE_CURRENCY:
        return "1"
    return supplied_rate if supplied_rate is not None else ZERO


def tax_in_original_currency(total_tax_usd: str, rate: str) -> str:
    """Converts a USD tax total back with the same rate; 0 when no conversion is possible."""
    if not is_positive(rate):
        return ZERO
    return divide(total_tax_usd, rate)


def compute_tax_preview(
    computation: TaxComputationInput,
    rules: Iterable[TaxRule],
    reference_date: Optional[date] = None,
) -> TaxComputationResult:
    """
    Computes the converted base, per-rule taxes and total payable of one transaction.

    ``rules`` are the candidate rules; only those in
    ``computation.selected_rule_ids`` are applied. When ``reference_date`` is
    given, rules not in effect on that date are dropped first.
    No I/O happens here: one rate is used for the whole computation.
    """
    rate = effective_rate(computation.currency, computation.exchange_rate)
    converted_base_usd = multiply(computation.base_amount, rate)

    rules = applicable_rules(rules, computation.selected_rule_ids, reference_date)
    calculator = TaxCalculator(computation.is_foreign_vendor, computation.fct_mode)
    line_items, total_tax_usd = calculator.compute(converted_base_usd, rules)

    total_tax_original = tax_in_original_currency(total_tax_usd, rate)
    total_payable = add(computation.base_amount, total_tax_original, computation.side_fees)

    TAX_PREVIEWS.labels(
        currency=computation.currency.value,
        fct_mode=computation.fct_mode.value
    ).inc()
    logger.debug(
        "Tax preview computed",
        currency=computation.currency.value,
        rules=len(rules),
        line_items=len(line_items),
        total_tax_usd=total_tax_usd,
        total_payable=total_payable,
    )

    return TaxComputationResult(
        converted_base_usd=converted_base_usd,
        tax_line_items=tuple(line_items),
        total_tax_usd=total_tax_usd,
        total_payable_original_currency=total_payable,
        total_tax_original_currency=total_tax_original,
        effective_rate=rate,
    )


async def compute_tax_preview_with_cache(
    computation: TaxComputationInput,
    rules: Iterable[TaxRule],
    cache: 'RateCache',
    reference_date: Optional[date] = None,
) -> TaxComputationResult:
    """
    Same as ``compute_tax_preview`` but fills a missing exchange rate from the cache.

    The cache quotes target-currency units per USD, so it can only stand in
    for transactions denominated in the cache's target currency. The rate
    is read once, before any arithmetic.
    """
    if computation.currency != BASE_CURRENCY and not is_positive(computation.exchange_rate):
        if computation.currency == cache.target_currency:
            quote = await cache.get()
            computation = computation.with_exchange_rate(rate_from_quote(quote))
        else:
            logger.warning(
                "No exchange rate supplied and cache quotes another currency",
                currency=computation.currency.value,
                cache_currency=cache.target_currency.value,
            )
    return compute_tax_preview(computation, rules, reference_date)


async def convert_from_usd(amount_usd: Numeric, cache: 'RateCache') -> str:
    """Converts a USD amount into the cache's target currency at the current rate."""
    rate = await cache.get()
    return multiply(amount_usd, format(rate, "f"))


def order_subtotal(lines: Iterable[Tuple[Numeric, Numeric]]) -> str:
    """Sum of quantity * unit price over ``(quantity, unit_price)`` order lines."""
    return add(*(multiply(quantity, unit_price) for quantity, unit_price in lines))


def order_total(subtotal: Numeric, tax_rule: Optional[TaxRule] = None, side_fees: Numeric = ZERO) -> Tuple[str, str]:
    """Returns ``(tax, grand_total)`` for an order with at most one ad valorem rule."""
    tax = multiply(subtotal, format(tax_rule.rate, "f")) if tax_rule else fix(Decimal(0))
    return tax, add(subtotal, tax, side_fees)
