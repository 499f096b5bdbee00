from dataclasses import dataclass, field, replace
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, FrozenSet, Optional, Tuple

from tax_engine.domain.fixed_decimal import to_decimal


class CurrencyCode(str, Enum):
    USD = "USD"
    EUR = "EUR"
    JPY = "JPY"
    CNY = "CNY"
    KRW = "KRW"
    VND = "VND"


BASE_CURRENCY = CurrencyCode.USD


class TaxType(str, Enum):
    VAT_INLAND = "VAT_INLAND"
    VAT_INTL = "VAT_INTL"
    FCT = "FCT"  # foreign contractor (withholding) tax


class FctMode(str, Enum):
    NET = "NET"      # tax added on top of the base amount
    GROSS = "GROSS"  # base amount already includes the tax


def _as_date(value: Any) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    # API payloads carry "YYYY-MM-DD" or a full ISO timestamp
    return datetime.fromisoformat(str(value)[:10]).date()


@dataclass(frozen=True)
class ExchangeRate:
    """A fetched USD -> target rate and the clock reading when it was observed."""
    rate: Decimal
    observed_at: float

    def __post_init__(self):
        if self.rate is None or self.rate <= 0:
            raise ValueError(f"Exchange rate must be positive, got {self.rate}")

    def age(self, now: float) -> float:
        return now - self.observed_at

    def is_fresh(self, now: float, ttl: float) -> bool:
        return self.age(now) < ttl


@dataclass(frozen=True)
class TaxRule:
    id: str
    tax_type: TaxType
    rate: Decimal
    effective_from: date
    effective_to: Optional[date] = None
    description: str = ""

    def __post_init__(self):
        rate = to_decimal(self.rate)
        if rate is None:
            raise ValueError(f"Tax rule {self.id}: unparseable rate {self.rate!r}")
        object.__setattr__(self, "rate", rate)
        object.__setattr__(self, "tax_type", TaxType(self.tax_type))
        object.__setattr__(self, "effective_from", _as_date(self.effective_from))
        object.__setattr__(self, "effective_to", _as_date(self.effective_to))

        if self.effective_from is None:
            raise ValueError(f"Tax rule {self.id}: effective_from is required")
        if not (Decimal(0) <= self.rate < Decimal(1)):
            raise ValueError(f"Tax rule {self.id}: rate must be in [0, 1), got {self.rate}")
        if self.effective_to is not None and self.effective_to < self.effective_from:
            raise ValueError(
                f"Tax rule {self.id}: effective_to {self.effective_to} precedes effective_from {self.effective_from}"
            )

    def is_active(self, reference_date: date) -> bool:
        reference_date = _as_date(reference_date)
        if self.effective_from > reference_date:
            return False
        return self.effective_to is None or self.effective_to >= reference_date

    @property
    def rate_percent(self) -> Decimal:
        return self.rate * 100

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> 'TaxRule':
        """Builds a rule from the rules-management payload (snake_case keys, string rate and dates)."""
        return cls(
            id=str(payload["id"]),
            tax_type=payload["tax_type"],
            rate=payload.get("rate"),
            effective_from=payload.get("effective_from"),
            effective_to=payload.get("effective_to"),
            description=payload.get("description") or "",
        )


@dataclass(frozen=True)
class TaxComputationInput:
    base_amount: str
    currency: CurrencyCode = BASE_CURRENCY
    exchange_rate: Optional[str] = None  # USD per one unit of ``currency``
    selected_rule_ids: FrozenSet[str] = field(default_factory=frozenset)
    is_foreign_vendor: bool = False
    fct_mode: FctMode = FctMode.NET
    side_fees: str = "0"

    def __post_init__(self):
        # accept any iterable of ids, and plain strings for the enums
        if not isinstance(self.selected_rule_ids, frozenset):
            object.__setattr__(self, "selected_rule_ids", frozenset(self.selected_rule_ids or ()))
        object.__setattr__(self, "currency", CurrencyCode(self.currency))
        object.__setattr__(self, "fct_mode", FctMode(self.fct_mode))

    def with_exchange_rate(self, exchange_rate: str) -> 'TaxComputationInput':
        return replace(self, exchange_rate=exchange_rate)


@dataclass(frozen=True)
class TaxLineItem:
    rule_id: str
    tax_type: TaxType
    rate_percent: str
    amount_usd: str


@dataclass(frozen=True)
class TaxComputationResult:
    converted_base_usd: str
    tax_line_items: Tuple[TaxLineItem, ...]
    total_tax_usd: str
    total_payable_original_currency: str
    total_tax_original_currency: str = "0"
    effective_rate: str = "1"

    def as_dict(self) -> Dict[str, Any]:
        return {
            "converted_base_usd": self.converted_base_usd,
            "tax_line_items": [
                {
                    "rule_id": item.rule_id,
                    "tax_type": item.tax_type.value,
                    "rate_percent": item.rate_percent,
                    "amount_usd": item.amount_usd,
                }
                for item in self.tax_line_items
            ],
            "total_tax_usd": self.total_tax_usd,
            "total_tax_original_currency": self.total_tax_original_currency,
            "total_payable_original_currency": self.total_payable_original_currency,
            "effective_rate": self.effective_rate,
        }
