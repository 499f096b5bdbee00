from datetime import date
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from tax_engine.domain.models import CurrencyCode, FctMode, TaxType


def _amount_as_text(value):
    # keep the caller's digits; JSON numbers are accepted too
    if isinstance(value, (int, float, Decimal)) and not isinstance(value, bool):
        return str(value)
    return value


class TaxRulePayload(BaseModel):
    id: str
    tax_type: TaxType
    rate: Decimal = Field(..., ge=0, lt=1, description="Fractional rate, e.g. 0.10 for 10%.")
    effective_from: date
    effective_to: Optional[date] = Field(None, description="Null while the rule is open-ended.")
    description: str = ""


class TaxPreviewRequest(BaseModel):
    base_amount: str = Field(..., description="Amount in the transaction currency.")
    currency: CurrencyCode = CurrencyCode.USD
    exchange_rate: Optional[str] = Field(None, description="USD per one unit of the transaction currency.")
    selected_rule_ids: List[str] = Field(default_factory=list)
    is_foreign_vendor: bool = False
    fct_mode: FctMode = FctMode.NET
    side_fees: str = "0"
    rules: List[TaxRulePayload] = Field(default_factory=list, description="Candidate tax rules.")
    reference_date: Optional[date] = Field(None, description="Drop rules not in effect on this date.")

    @field_validator("base_amount", "exchange_rate", "side_fees", mode="before")
    @classmethod
    def amounts_as_text(cls, value):
        return _amount_as_text(value)


class TaxLineItemResponse(BaseModel):
    rule_id: str
    tax_type: TaxType
    rate_percent: str
    amount_usd: str


class TaxPreviewResponse(BaseModel):
    converted_base_usd: str
    tax_line_items: List[TaxLineItemResponse]
    total_tax_usd: str
    total_tax_original_currency: str
    total_payable_original_currency: str
    effective_rate: str
