from decimal import Decimal

import pytest

from tax_engine.caching.rate_cache import RateCache
from tax_engine.domain.models import CurrencyCode
from tax_engine.presentation.currency_display import CurrencyDisplay


@pytest.fixture
def cache(clock):
    async def fetch():
        return "25000"
    return RateCache(fetch=fetch, clock=clock)


def test_starts_in_usd(cache):
    display = CurrencyDisplay(cache)

    assert display.currency == CurrencyCode.USD
    assert display.rate is None
    assert display.format("1234.5") == "$1,234.50"
    assert display.format_short("12500") == "13K"


@pytest.mark.asyncio
async def test_toggle_to_vnd_loads_rate(cache):
    display = CurrencyDisplay(cache)

    assert await display.toggle() == CurrencyCode.VND
    assert display.rate == Decimal("25000")
    assert not display.is_loading
    assert display.format("12.34") == "308.500 ₫"
    assert display.format_short("1000") == "25.0 tr ₫"


@pytest.mark.asyncio
async def test_toggle_back_to_usd_keeps_rate(cache):
    display = CurrencyDisplay(cache)
    await display.toggle()

    assert await display.toggle() == CurrencyCode.USD
    assert display.rate == Decimal("25000")
    assert display.format("1") == "$1.00"


def test_unparseable_amounts(cache):
    display = CurrencyDisplay(cache, currency="VND")
    # no rate yet: falls back to USD formatting for valid input
    assert display.format("2") == "$2.00"
    assert display.format("n/a") == "0 ₫"
    assert display.format_short("n/a") == "0 ₫"


def test_rejects_other_display_currencies(cache):
    with pytest.raises(ValueError):
        CurrencyDisplay(cache, currency=CurrencyCode.EUR)
