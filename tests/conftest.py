from datetime import date
from decimal import Decimal

import pytest

from tax_engine.domain.models import TaxRule, TaxType


class FakeClock:
    """Manually advanced clock, in seconds."""

    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def vat_rule():
    return TaxRule(
        id="vat-10",
        tax_type=TaxType.VAT_INLAND,
        rate=Decimal("0.10"),
        effective_from=date(2024, 1, 1),
        description="VAT 10%",
    )


@pytest.fixture
def vat_intl_rule():
    return TaxRule(
        id="vat-intl-8",
        tax_type=TaxType.VAT_INTL,
        rate=Decimal("0.08"),
        effective_from=date(2024, 1, 1),
        effective_to=date(2024, 12, 31),
        description="Reduced VAT 8%",
    )


@pytest.fixture
def fct_rule():
    return TaxRule(
        id="fct-5",
        tax_type=TaxType.FCT,
        rate=Decimal("0.05"),
        effective_from=date(2024, 1, 1),
        description="Foreign contractor tax 5%",
    )
