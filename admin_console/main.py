"""EMS Admin Console — FastAPI Application Factory."""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from admin_console.common.exceptions import register_exception_handlers
from admin_console.common.log import setup_logging
from admin_console.common.rate_limit import limiter
from admin_console.config import settings
from admin_console.data_service import build_http_client
from admin_console.leave.router import router as leave_router
from admin_console.reports.router import router as reports_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the shared EMS backend client on startup, close it on shutdown."""
    app.state.http_client = build_http_client(settings)
    try:
        yield
    finally:
        await app.state.http_client.aclose()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    setup_logging(settings.LOG_LEVEL)

    app = FastAPI(
        title="EMS Admin Console",
        description="Leave reconciliation and report export over the EMS backend",
        version="1.0.0",
        docs_url="/api/docs" if settings.ENVIRONMENT != "production" else None,
        redoc_url="/api/redoc" if settings.ENVIRONMENT != "production" else None,
        lifespan=lifespan,
    )

    # Exception handlers (RFC 7807)
    register_exception_handlers(app)

    # Rate limiting (slowapi)
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Health check (no auth)
    @app.get("/api/v1/health", tags=["system"])
    async def health_check():
        return {
            "status": "healthy",
            "version": "1.0.0",
            "environment": settings.ENVIRONMENT,
            "data_service": settings.DATA_SERVICE_URL,
        }

    # Register routers
    app.include_router(leave_router, prefix="/api/v1/leave", tags=["leave"])
    app.include_router(reports_router, prefix="/api/v1/reports", tags=["reports"])

    return app


app = create_app()
