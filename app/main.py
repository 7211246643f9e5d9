"""
FastAPI Application - Gold Price Cache

Serves the latest cached 18k gold price. A background poller refreshes the
cache from BrsApi; requests are answered from the local SQLite cache only and
never wait on the upstream.

Endpoints:
    - GET /api/gold/18k - latest cached price with a staleness flag
    - GET /health       - liveness only (no store or upstream access)

Startup order (lifespan):
    validate configuration -> open store -> one initial fetch (best-effort)
    -> start poller -> serve

Usage:
    python start.py
    uvicorn app.main:app --host 0.0.0.0 --port 8080
"""

from contextlib import asynccontextmanager
from datetime import timedelta
from typing import Optional

from fastapi import APIRouter, FastAPI, Request
from fastapi.responses import JSONResponse

from core.config import Settings, settings, validate_configuration
from core.errors import NotYetAvailable, StoreReadError
from core.fetcher_interface import PriceFetcher
from core.logging import logger
from core.schemas import ErrorResponse, HealthResponse, LatestPrice
from services.poller import PollOutcome, PricePoller
from services.price_query import PriceQueryService
from storage.price_store import PriceStore
from upstream.brsapi_client import BrsApiClient


# ============================================
# Routes
# ============================================

router = APIRouter()


@router.get(
    "/api/gold/18k",
    response_model=LatestPrice,
    responses={503: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    tags=["Gold"],
)
async def get_gold_18k(request: Request):
    """Latest cached 18k gold price in Rial."""
    query: PriceQueryService = request.app.state.query
    return await query.get_latest()


@router.get("/health", response_model=HealthResponse, tags=["System"])
async def health_check():
    """Liveness check."""
    return PriceQueryService.health()


# ============================================
# Error Handlers
# ============================================

async def not_yet_available_handler(request: Request, exc: NotYetAvailable):
    return JSONResponse(status_code=503, content={"error": str(exc)})


async def store_read_error_handler(request: Request, exc: StoreReadError):
    logger.error(f"Cache read failed: {exc}")
    return JSONResponse(status_code=500, content={"error": "cache store unavailable"})


# ============================================
# Application Factory
# ============================================

def create_app(
    config: Optional[Settings] = None,
    fetcher: Optional[PriceFetcher] = None,
    store: Optional[PriceStore] = None,
) -> FastAPI:
    """
    Build the application.

    Args:
        config: Settings (defaults to the global instance)
        fetcher: Price source (defaults to a BrsApiClient built from config)
        store: Price store (defaults to a PriceStore at config.db_path)

    The store, poller and query service are created once per lifespan and
    exposed on app.state for the routes.
    """
    config = config or settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("=== Application Starting ===")
        validate_configuration(config)

        price_store = store or PriceStore(config.db_path)
        price_store.open()

        price_fetcher = fetcher or BrsApiClient(
            api_key=config.brs_api_key,
            base_url=config.brs_api_url,
            timeout=config.request_timeout,
        )
        poller = PricePoller(price_fetcher, price_store, interval_seconds=config.poll_interval)
        app.state.store = price_store
        app.state.poller = poller
        app.state.query = PriceQueryService(
            price_store, stale_threshold=timedelta(seconds=config.stale_threshold)
        )

        # Everything after open() is guarded so a failed startup still closes the store
        try:
            await price_fetcher.initialize()

            logger.info("[poller] Initial fetch...")
            if await poller.run_cycle() is not PollOutcome.UPDATED:
                logger.warning("[poller] Initial fetch failed (will retry on next tick)")

            await poller.start()
            logger.info(f"=== Gold price service listening on :{config.port} ===")

            yield
        finally:
            logger.info("=== Shutting Down ===")
            await poller.stop(timeout=config.shutdown_timeout)
            await price_fetcher.shutdown()
            price_store.close()
            logger.info("=== Shutdown Complete ===")

    app = FastAPI(
        title="Gold Price Cache",
        description=(
            "Cached 18k gold price (Rial) refreshed from BrsApi in the background.\n\n"
            "- `GET /api/gold/18k` - latest cached price, `stale` once older than the threshold\n"
            "- `GET /health` - liveness check"
        ),
        version="1.0.0",
        lifespan=lifespan,
    )
    app.include_router(router)
    app.add_exception_handler(NotYetAvailable, not_yet_available_handler)
    app.add_exception_handler(StoreReadError, store_read_error_handler)
    return app


app = create_app()
