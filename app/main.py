"""
FastAPI application factory
"""
import logging
import traceback
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import PlainTextResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from app.config import get_settings
from app.infrastructure.db.session import check_db_connection
from app.application.scheduler import start_scheduler, shutdown_scheduler
from app.api.v1 import ai, budgets, categories, home, insights, sync, transactions, user_settings

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


class ErrorLoggingMiddleware(BaseHTTPMiddleware):
    """Catches all unhandled exceptions, including those of sync routes"""

    async def dispatch(self, request, call_next):
        try:
            return await call_next(request)
        except Exception:
            logger.error(
                "Unhandled error on %s %s\n%s",
                request.method, request.url.path, traceback.format_exc(),
            )
            return Response(content="Internal Server Error", status_code=500)


def create_app() -> FastAPI:
    """
    Application factory

    Returns:
        Configured FastAPI app
    """
    settings = get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if settings.SCHEDULER_ENABLED:
            start_scheduler()
        yield
        shutdown_scheduler()

    app = FastAPI(
        title="SpendIQ",
        debug=settings.DEBUG,
        lifespan=lifespan,
    )

    app.add_middleware(ErrorLoggingMiddleware)

    # Routers
    app.include_router(home.router)
    app.include_router(budgets.router)
    app.include_router(insights.router)
    app.include_router(transactions.router)
    app.include_router(categories.router)
    app.include_router(user_settings.router)
    app.include_router(ai.router)
    app.include_router(sync.router)

    # Health checks
    @app.get("/health", response_class=PlainTextResponse, tags=["system"])
    def health():
        """Health check endpoint"""
        return "ok"

    @app.get("/ready", response_class=PlainTextResponse, tags=["system"])
    def ready():
        """Readiness check endpoint (checks the database)"""
        check_db_connection()
        return "ok"

    return app


# Create app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host="127.0.0.1",
        port=8000,
        reload=True,
    )
