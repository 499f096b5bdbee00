import asyncio
import time
from decimal import Decimal
from typing import Awaitable, Callable, Optional

import structlog

from tax_engine.config import get_config
from tax_engine.core.metrics import RATE_CACHE_LOOKUPS, RATE_FETCH_DURATION
from tax_engine.domain.fixed_decimal import Numeric, to_decimal
from tax_engine.domain.models import CurrencyCode, ExchangeRate

FetchRate = Callable[[], Awaitable[Numeric]]


class RateCache:
    """
    Time-bounded cache of the USD -> target currency exchange rate.

    The rate comes from an injected coroutine function, so the cache knows
    nothing about the transport. A fresh entry is served without fetching;
    a stale or missing one triggers a single shared fetch that every
    concurrent caller awaits. Fetch failures never propagate: the last known
    rate is served, or the fallback rate when nothing was ever fetched.
    """

    def __init__(
        self,
        fetch: Optional[FetchRate] = None,
        ttl: Optional[float] = None,
        fallback_rate: Optional[Numeric] = None,
        timeout: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
        target_currency: Optional[CurrencyCode] = None,
        cfg=None,
    ):
        cfg = cfg or get_config()
        self._fetch = fetch
        self._clock = clock
        self.ttl = float(cfg.RATE_CACHE_TTL_SECONDS if ttl is None else ttl)
        self.timeout = float(cfg.RATE_FETCH_TIMEOUT_SECONDS if timeout is None else timeout)
        configured_fallback = cfg.FALLBACK_RATE if fallback_rate is None else fallback_rate
        self.fallback_rate = to_decimal(configured_fallback)
        if self.fallback_rate is None or self.fallback_rate <= 0:
            raise ValueError(f"Fallback rate must be a positive number, got {configured_fallback!r}")
        self.target_currency = CurrencyCode(target_currency or cfg.RATE_TARGET_CURRENCY)
        self._log = structlog.get_logger(__name__).bind(currency=self.target_currency.value)
        self._entry: Optional[ExchangeRate] = None
        self._inflight: Optional[asyncio.Task] = None

    @property
    def entry(self) -> Optional[ExchangeRate]:
        return self._entry

    @property
    def rate(self) -> Optional[Decimal]:
        """The cached rate, fresh or stale; None before the first successful fetch."""
        return self._entry.rate if self._entry else None

    @property
    def is_loading(self) -> bool:
        return self._inflight is not None and not self._inflight.done()

    def invalidate(self):
        self._entry = None

    async def get(self, fetch: Optional[FetchRate] = None) -> Decimal:
        """
        Returns the current rate, fetching it when the cached one is stale or missing.

        ``fetch`` overrides the constructor's fetch function for this call.
        While a fetch is in flight, further callers join it instead of
        starting their own.
        """
        entry = self._entry
        if entry is not None and entry.is_fresh(self._clock(), self.ttl):
            RATE_CACHE_LOOKUPS.labels(outcome="hit").inc()
            return entry.rate

        if self._inflight is None:
            fetcher = fetch or self._fetch
            if fetcher is None:
                self._log.warning("No rate fetch function configured")
                return self._fallback()
            self._inflight = asyncio.ensure_future(self._refresh(fetcher))
        else:
            RATE_CACHE_LOOKUPS.labels(outcome="joined").inc()

        # A cancelled waiter must not cancel the fetch the others are waiting on
        return await asyncio.shield(self._inflight)

    async def _refresh(self, fetch: FetchRate) -> Decimal:
        started = time.perf_counter()
        try:
            raw = await asyncio.wait_for(fetch(), timeout=self.timeout)
            rate = to_decimal(raw)
            if rate is None or rate <= 0:
                raise ValueError(f"Invalid exchange rate returned: {raw!r}")
        except asyncio.TimeoutError:
            self._log.error("Exchange rate fetch timed out", timeout=self.timeout)
            return self._fallback()
        except Exception as e:
            self._log.error("Exchange rate fetch failed", error=str(e))
            return self._fallback()
        else:
            self._entry = ExchangeRate(rate=rate, observed_at=self._clock())
            RATE_CACHE_LOOKUPS.labels(outcome="refresh").inc()
            self._log.info("Exchange rate refreshed", rate=str(rate))
            return rate
        finally:
            RATE_FETCH_DURATION.observe(time.perf_counter() - started)
            self._inflight = None

    def _fallback(self) -> Decimal:
        if self._entry is not None:
            RATE_CACHE_LOOKUPS.labels(outcome="stale").inc()
            self._log.warning(
                "Serving stale exchange rate",
                rate=str(self._entry.rate),
                age_seconds=round(self._entry.age(self._clock()), 1),
            )
            return self._entry.rate
        RATE_CACHE_LOOKUPS.labels(outcome="fallback").inc()
        self._log.warning("Serving fallback exchange rate", rate=str(self.fallback_rate))
        return self.fallback_rate
