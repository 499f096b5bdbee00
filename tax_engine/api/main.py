from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException
import structlog

from tax_engine.api.schemas import TaxPreviewRequest, TaxPreviewResponse
from tax_engine.config import get_config
from tax_engine.core.logging import setup_logging_from_config
from tax_engine.core.metrics import add_prometheus_endpoint
from tax_engine.domain.fixed_decimal import is_positive
from tax_engine.domain.models import BASE_CURRENCY, TaxComputationInput, TaxRule
from tax_engine.domain.payable import compute_tax_preview

logger = structlog.get_logger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging_from_config(get_config())
    logger.info("Tax engine service starting.")
    yield
    logger.info("Tax engine service stopping.")

app = FastAPI(
    title="Tax Engine",
    description="Currency conversion, VAT and foreign contractor tax previews.",
    version="1.0.0",
    lifespan=lifespan
)
add_prometheus_endpoint(app)

@app.get("/health")
async def health_check():
    """Provides a health check endpoint for the service."""
    return {"status": "healthy", "service": "tax-engine"}

@app.post("/api/v1/tax/preview", response_model=TaxPreviewResponse)
async def tax_preview(request: TaxPreviewRequest):
    """
    Computes the tax breakdown and total payable for one transaction.
    """
    if request.currency != BASE_CURRENCY and not is_positive(request.exchange_rate):
        raise HTTPException(
            status_code=422,
            detail=f"A positive exchange_rate is required for {request.currency.value}"
        )

    try:
        rules = [TaxRule(**rule.model_dump()) for rule in request.rules]
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))

    logger.info(
        "Tax preview requested",
        currency=request.currency.value,
        selected_rules=len(request.selected_rule_ids),
        is_foreign_vendor=request.is_foreign_vendor,
    )
    computation = TaxComputationInput(
        base_amount=request.base_amount,
        currency=request.currency,
        exchange_rate=request.exchange_rate,
        selected_rule_ids=request.selected_rule_ids,
        is_foreign_vendor=request.is_foreign_vendor,
        fct_mode=request.fct_mode,
        side_fees=request.side_fees,
    )
    result = compute_tax_preview(computation, rules, request.reference_date)
    return TaxPreviewResponse(**result.as_dict())

# To run this service:
# uvicorn tax_engine.api.main:app --host 0.0.0.0 --port 8002 --reload
