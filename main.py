"""
Order Resolver API.

FastAPI application entry point. Run with `python main.py` or
`uvicorn main:app`.
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from datetime import datetime, timezone
import logging
import structlog

from config import settings, check_connection

logging.basicConfig(format="%(message)s", level=getattr(logging, settings.log_level))

# Configure structured logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.JSONRenderer() if settings.is_production
            else structlog.dev.ConsoleRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Startup: Check learned match storage and matcher credentials
    Shutdown: Log only
    """
    # Startup
    logger.info(
        "application_starting",
        environment=settings.environment,
        debug=settings.debug,
        learned_match_backend=settings.learned_match_backend
    )

    storage_status = check_connection()
    if storage_status["status"] == "healthy":
        logger.info("storage_ready", **storage_status)
    else:
        logger.error(
            "storage_connection_failed",
            error=storage_status.get("error")
        )

    if not settings.matcher_configured:
        logger.warning("matcher_not_configured")

    yield

    # Shutdown
    logger.info("application_shutting_down")


# Create FastAPI app
app = FastAPI(
    title="Order Resolver",
    description="Resolve freeform purchase orders into priced catalog line items",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)


# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",
        "http://localhost:5173",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ===================
# ROUTES
# ===================

@app.get("/health")
async def health_check():
    """
    Health check endpoint.

    Returns:
        Basic health status, storage state and matcher availability
    """
    storage_status = check_connection()

    return {
        "status": "healthy" if storage_status["status"] == "healthy" else "degraded",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": settings.environment,
        "storage": storage_status,
        "matcher_configured": settings.matcher_configured
    }


@app.get("/")
async def root():
    """
    Root endpoint.

    Returns:
        API information and available endpoints
    """
    return {
        "name": "Order Resolver API",
        "version": "0.1.0",
        "docs": "/docs" if settings.debug else "Disabled in production",
        "health": "/health",
        "endpoints": {
            "catalog": "/api/catalog",
            "resolve": "/api/resolve",
            "learned_matches": "/api/learned-matches"
        }
    }


# ===================
# ERROR HANDLERS
# ===================

@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """
    Global exception handler.

    Catches unhandled exceptions and returns standard error format.
    """
    logger.error(
        "unhandled_exception",
        path=request.url.path,
        method=request.method,
        error=str(exc),
        error_type=type(exc).__name__
    )

    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred",
                "details": str(exc) if settings.debug else None,
                "timestamp": datetime.now(timezone.utc).isoformat()
            }
        }
    )


# ===================
# INCLUDE ROUTERS
# ===================
from routes.catalog import router as catalog_router
from routes.resolution import router as resolution_router
from routes.learned_matches import router as learned_matches_router

app.include_router(catalog_router, prefix="/api/catalog", tags=["Catalog"])
app.include_router(resolution_router, prefix="/api/resolve", tags=["Resolution"])
app.include_router(learned_matches_router, prefix="/api/learned-matches", tags=["Learned Matches"])


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug
    )
