from .domain.fixed_decimal import add, divide, multiply
from .domain.models import (
    CurrencyCode, ExchangeRate, FctMode, TaxComputationInput,
    TaxComputationResult, TaxLineItem, TaxRule, TaxType,
)
from .domain.tax_rules import active_as_of, selected
from .domain.payable import compute_tax_preview, compute_tax_preview_with_cache
from .caching.rate_cache import RateCache

__version__ = "1.0.0"
