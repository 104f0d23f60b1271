"""FastAPI application factory"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from store_ledger.api.middleware import RequestContextMiddleware
from store_ledger.api.v1 import customers, transactions, statements, ledger
from store_ledger.application.state import LedgerState
from store_ledger.domain.exceptions import DomainException
from store_ledger.infrastructure.observability.logging import setup_logging
from store_ledger.config import settings

# Setup structured logging
setup_logging(settings.log_level)


def create_app(ledger_state: LedgerState | None = None, load_on_startup: bool = True) -> FastAPI:
    """Create and configure FastAPI application"""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Initial load is best-effort; POST /v1/refresh retries it
        if load_on_startup:
            try:
                await app.state.ledger.refresh()
            except DomainException as e:
                logging.error(f"Initial ledger load failed: {e}")
        yield

    app = FastAPI(
        title="Store Ledger",
        description="Customer balances and account statements",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.ledger = ledger_state or LedgerState()

    # Add middleware
    app.add_middleware(RequestContextMiddleware)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(customers.router, prefix="/v1", tags=["customers"])
    app.include_router(transactions.router, prefix="/v1", tags=["transactions"])
    app.include_router(statements.router, prefix="/v1", tags=["statements"])
    app.include_router(ledger.router, prefix="/v1", tags=["ledger"])

    return app


app = create_app()
