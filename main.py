"""Memory Guide — FastAPI server entry point.

Serves:
- /health — health check
- /api/patients — patient profiles, memory cards, stats
- /api/patients/{id}/quiz, /api/quiz/runs — memory quiz runs
- /api/patients/{id}/conversations, /api/sessions — Tavus video conversations
"""

from __future__ import annotations

import sys
import warnings

from loguru import logger

from config import settings

# Configure log level: INFO in production, DEBUG locally
_log_level = settings.log_level or ("INFO" if settings.is_production else "DEBUG")
logger.remove()
logger.add(sys.stderr, level=_log_level)


# Route Python warnings through loguru instead of raw stderr.
# DeprecationWarnings → DEBUG (hidden at INFO), other warnings → WARNING.
def _warning_handler(message, category, filename, lineno, file=None, line=None):
    if issubclass(category, DeprecationWarning):
        logger.debug("{msg}", msg=str(message))
    else:
        logger.warning("{cat}: {msg}", cat=category.__name__, msg=str(message))


warnings.showwarning = _warning_handler

# Sentry error monitoring (before FastAPI import for auto-instrumentation)
try:
    import sentry_sdk
    if settings.sentry_dsn:
        sentry_sdk.init(
            dsn=settings.sentry_dsn,
            traces_sample_rate=0,
            send_default_pii=False,
            environment="production" if settings.is_production else "development",
        )
        logger.info("Sentry initialized")
except ImportError:
    pass

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from api.middleware.error_handler import register_error_handlers
from api.middleware.rate_limit import limiter
from api.routes.conversations import router as conversations_router
from api.routes.patients import router as patients_router
from api.routes.quiz import active_runs, router as quiz_router
from services.tavus import TavusClient, TavusConfig

app = FastAPI(title="Memory Guide", version="0.1.0")
app.state.tavus = None

# ---------------------------------------------------------------------------
# Middleware
# ---------------------------------------------------------------------------

# CORS
ALLOWED_ORIGINS = [settings.admin_url]
if not settings.is_production:
    ALLOWED_ORIGINS.extend(["http://localhost:5173", "http://localhost:3000"])

app.add_middleware(
    CORSMiddleware,
    allow_origins=[o for o in ALLOWED_ORIGINS if o],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# Error handlers
register_error_handlers(app)

# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------
app.include_router(patients_router)
app.include_router(quiz_router)
app.include_router(conversations_router)


@app.get("/health")
async def health():
    """Health check endpoint with service status."""
    from db import check_health as db_health

    db_ok = await db_health()
    return {
        "status": "ok" if db_ok else "degraded",
        "service": "memory-guide",
        "database": "ok" if db_ok else "error",
        "conversations": "ok" if app.state.tavus else "not_configured",
        "active_quiz_runs": sum(1 for r in active_runs.values() if not r.session.is_finished),
    }


# ---------------------------------------------------------------------------
# Startup / Shutdown
# ---------------------------------------------------------------------------
@app.on_event("startup")
async def startup():
    logger.info("Memory Guide starting on port {port}", port=settings.port)

    # Initialize database pool
    try:
        from db import get_pool
        await get_pool()
        logger.info("Database pool initialized")
    except Exception as e:
        logger.error("Database init failed: {err}", err=str(e))

    if settings.tavus_configured:
        app.state.tavus = TavusClient(TavusConfig.from_settings(settings))
        logger.info("Tavus client configured")
    else:
        logger.warning("Tavus not configured; conversation routes will return 503")


@app.on_event("shutdown")
async def shutdown():
    logger.info("Shutdown: stopping {n} quiz timers", n=len(active_runs))
    for run in active_runs.values():
        if run.timer:
            run.timer.cancel()
    active_runs.clear()

    # Close DB pool last
    try:
        from db import close_pool
        await close_pool()
        logger.info("Database pool closed")
    except Exception as e:
        logger.error("Database shutdown error: {err}", err=str(e))


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=settings.port)
