from prometheus_client import Counter, Histogram

# --- Exchange rate cache metrics ---
RATE_CACHE_LOOKUPS = Counter(
    'tax_engine_rate_cache_lookups_total',
    'Exchange rate cache lookups by outcome',
    ['outcome']  # hit, refresh, joined, stale, fallback
)

RATE_FETCH_DURATION = Histogram(
    'tax_engine_rate_fetch_duration_seconds',
    'Duration of exchange rate fetches, successful or not',
    buckets=[0.05, 0.1, 0.25, 0.5, 1, 2.5, 5, 10, float('inf')]
)

# --- Business metrics ---
TAX_PREVIEWS = Counter(
    'tax_engine_previews_total',
    'Number of tax previews computed',
    ['currency', 'fct_mode']
)

def add_prometheus_endpoint(app):
    """
    Adds the /metrics endpoint to a FastAPI application.
    """
    from prometheus_client import make_asgi_app

    metrics_app = make_asgi_app()
    app.mount("/metrics", metrics_app)
