import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text

from discuss_board.api.v1 import api_router
from discuss_board.config import settings
from discuss_board.core.error_handlers import register_error_handlers
from discuss_board.core.logging import configure_logging
from discuss_board.core.middleware import RequestIDMiddleware, SecurityHeadersMiddleware
from discuss_board.database import async_session_factory, engine

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Refuse to start with the default secret key in non-debug mode
    if not settings.DEBUG and settings.SECRET_KEY == "change-me-in-production":
        raise RuntimeError(
            "SECRET_KEY is still the default value. "
            "Set a strong SECRET_KEY env var before running in production."
        )
    configure_logging()
    logger.info("%s %s starting", settings.APP_NAME, settings.APP_VERSION)
    yield
    await engine.dispose()


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    docs_url="/api/docs",
    openapi_url="/api/openapi.json",
    lifespan=lifespan,
)

# --- Middleware (outermost first) ---

# Security headers on every response
app.add_middleware(SecurityHeadersMiddleware, enable_hsts=not settings.DEBUG)

# Request ID injection
app.add_middleware(RequestIDMiddleware)

# CORS - tighten in production via CORS_ORIGINS env var
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
)

# --- Error handlers ---
register_error_handlers(app)

# --- Routes ---
app.include_router(api_router)


@app.get("/api/health")
async def health_check():
    """Health check: verifies DB connectivity."""
    try:
        async with async_session_factory() as session:
            await session.execute(text("SELECT 1"))
    except Exception as exc:
        logger.warning("Health check failed: %s", exc)
        return JSONResponse(
            content={"status": "degraded", "version": settings.APP_VERSION, "database": "error"},
            status_code=503,
        )
    return {"status": "healthy", "version": settings.APP_VERSION, "database": "ok"}
