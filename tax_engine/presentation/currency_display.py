from typing import Optional
from decimal import Decimal

import structlog

from tax_engine.caching.rate_cache import RateCache
from tax_engine.domain.fixed_decimal import Numeric, multiply, to_decimal
from tax_engine.domain.formatting import (
    format_compact_usd, format_compact_vnd, format_usd, format_vnd,
)
from tax_engine.domain.models import CurrencyCode

logger = structlog.get_logger(__name__)

DISPLAY_CURRENCIES = (CurrencyCode.USD, CurrencyCode.VND)


class CurrencyDisplay:
    """
    USD <-> VND display toggle state for views.

    All amounts are stored in USD; VND output is computed from the cached
    rate. The rate is requested the first time VND is selected.
    """

    def __init__(self, cache: RateCache, currency: CurrencyCode = CurrencyCode.USD):
        if CurrencyCode(currency) not in DISPLAY_CURRENCIES:
            raise ValueError(f"Unsupported display currency: {currency}")
        self.cache = cache
        self.currency = CurrencyCode(currency)
        self._rate: Optional[Decimal] = None

    @property
    def rate(self) -> Optional[Decimal]:
        return self._rate

    @property
    def is_loading(self) -> bool:
        return self.cache.is_loading

    async def toggle(self) -> CurrencyCode:
        self.currency = CurrencyCode.VND if self.currency == CurrencyCode.USD else CurrencyCode.USD
        if self.currency == CurrencyCode.VND and self._rate is None:
            self._rate = await self.cache.get()
            logger.debug("Display rate loaded", rate=str(self._rate))
        return self.currency

    def _vnd(self, amount_usd: Numeric) -> str:
        return multiply(amount_usd, format(self._rate, "f"))

    def format(self, amount_usd: Numeric) -> str:
        if to_decimal(amount_usd) is None:
            return "$0.00" if self.currency == CurrencyCode.USD else "0 ₫"
        if self.currency == CurrencyCode.VND and self._rate is not None:
            return format_vnd(self._vnd(amount_usd))
        return format_usd(amount_usd)

    def format_short(self, amount_usd: Numeric) -> str:
        if to_decimal(amount_usd) is None:
            return "$0" if self.currency == CurrencyCode.USD else "0 ₫"
        if self.currency == CurrencyCode.VND and self._rate is not None:
            return format_compact_vnd(self._vnd(amount_usd))
        return format_compact_usd(amount_usd)
