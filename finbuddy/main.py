"""
main.py — FinBuddy FastAPI application entry point.

Start with: uvicorn finbuddy.main:app --reload --port 8000
"""
import logging
import random
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from http import HTTPStatus
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from finbuddy.auth.session_store import SessionStore
from finbuddy.cache import MemorySessionSlot, RedisSessionSlot, SessionSlot, create_redis_pool
from finbuddy.clock import Clock
from finbuddy.config import settings
from finbuddy.records.aggregator import RecordAggregator

# ---------------------------------------------------------------------------
# Logging, configured before anything else
# ---------------------------------------------------------------------------
logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


async def init_state(
    app: FastAPI,
    slot: SessionSlot,
    clock: Optional[Clock] = None,
    rng: Optional[random.Random] = None,
    seed_demo_data: bool = settings.seed_demo_data,
) -> None:
    """
    Build the session store and record aggregator on app.state.
    Restores any persisted session before returning.
    """
    store = SessionStore(slot, clock=clock)
    await store.restore()
    app.state.session_store = store

    records = RecordAggregator(
        clock=clock,
        rng=rng if rng is not None else random.Random(settings.random_seed),
    )
    if seed_demo_data:
        records.seed_demo_data()
    app.state.records = records


# ---------------------------------------------------------------------------
# Lifespan: startup & shutdown hooks
# ---------------------------------------------------------------------------
@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Startup:
      1. Open the session slot (Redis pool, or process memory)
      2. Build SessionStore + RecordAggregator, restore the persisted session
    Shutdown:
      1. Cancel pending document timers
      2. Close Redis pool
    """
    app.state.redis = None
    if settings.session_backend == "redis":
        app.state.redis = await create_redis_pool()
        slot: SessionSlot = RedisSessionSlot(app.state.redis)
    else:
        slot = MemorySessionSlot()
        logger.info("Using process-local session slot")

    await init_state(app, slot)

    logger.info("FinBuddy v%s starting up", settings.app_version)
    yield

    # --- Shutdown ---
    app.state.records.processor.cancel_all()
    if app.state.redis is not None:
        await app.state.redis.aclose()
        logger.info("Redis connection pool closed")
    logger.info("FinBuddy shutting down")


# ---------------------------------------------------------------------------
# FastAPI application instance
# ---------------------------------------------------------------------------
app = FastAPI(
    title="FinBuddy API",
    version=settings.app_version,
    description=(
        "Personal finance dashboard backend: expense and budget tracking, "
        "Indian income-tax calculator, SIP goal planning and document upload."
    ),
    lifespan=lifespan,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------------------------------------------------------------------------
# Error envelope: every failure answers {"error": {code, message, details}}
# ---------------------------------------------------------------------------
def _error_code(status_code: int) -> str:
    """UNAUTHORIZED, NOT_FOUND, ... from the status phrase; 422 is always VALIDATION_ERROR."""
    if status_code == 422:
        return "VALIDATION_ERROR"
    try:
        phrase = HTTPStatus(status_code).phrase
    except ValueError:
        return f"HTTP_{status_code}"
    return phrase.upper().replace(" ", "_").replace("-", "_")


def error_response(
    status_code: int,
    message: str,
    details: Optional[list[dict[str, Any]]] = None,
    code: Optional[str] = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "error": {
                "code": code or _error_code(status_code),
                "message": message,
                "details": details or [],
            }
        },
    )


async def on_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = [
        {
            "field": ".".join(str(part) for part in err["loc"] if part != "body") or None,
            "issue": err["msg"],
        }
        for err in exc.errors()
    ]
    return error_response(422, "Request validation failed", details)


async def on_http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return error_response(exc.status_code, str(exc.detail))


async def on_value_error(request: Request, exc: ValueError) -> JSONResponse:
    return error_response(422, str(exc))


async def on_unexpected(request: Request, exc: Exception) -> JSONResponse:
    # Exception type and message only leave the server in debug mode
    logger.error("Unhandled exception on %s %s", request.method, request.url.path, exc_info=True)
    details = [{"issue": f"{type(exc).__name__}: {exc}"}] if settings.debug else []
    return error_response(500, "An unexpected error occurred", details, code="INTERNAL_ERROR")


app.add_exception_handler(RequestValidationError, on_request_validation)
app.add_exception_handler(StarletteHTTPException, on_http_error)
app.add_exception_handler(ValueError, on_value_error)
app.add_exception_handler(Exception, on_unexpected)


# ---------------------------------------------------------------------------
# Health endpoint
# ---------------------------------------------------------------------------
@app.get("/api/health", tags=["System"])
async def health_check() -> dict:
    return {
        "status": "ok",
        "version": settings.app_version,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
from finbuddy.auth.routes import router as auth_router
from finbuddy.calculator.routes import router as calculator_router
from finbuddy.records.routes import router as records_router

app.include_router(auth_router)
app.include_router(calculator_router)
app.include_router(records_router)
