import logging
import traceback
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError

from primesec.config import settings
from primesec.database import engine
from primesec.errors import NotFoundError, ValidationFailure
from primesec.middleware.logging_config import configure_logging

configure_logging(settings.log_level, settings.log_format)

from primesec.api.users import router as users_router  # noqa: E402
from primesec.api.containers import router as containers_router  # noqa: E402
from primesec.api.issues import router as issues_router  # noqa: E402
from primesec.api.reviews import router as reviews_router  # noqa: E402
from primesec.api.violations import router as violations_router  # noqa: E402
from primesec.api.controls import router as controls_router  # noqa: E402
from primesec.api.components import router as components_router  # noqa: E402
from primesec.api.dashboard import router as dashboard_router  # noqa: E402
from primesec.api.metrics import router as metrics_router  # noqa: E402

logger = logging.getLogger("primesec")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: verify DB connection
    async with engine.begin() as conn:
        await conn.execute(text("SELECT 1"))
    logger.info("PrimeSec API started (environment=%s)", settings.environment)
    yield
    # Shutdown
    await engine.dispose()


app = FastAPI(
    title="PrimeSec Security Posture API",
    description="Security issues, reviews, violations, controls and architecture per container",
    version="0.1.0",
    lifespan=lifespan,
)

# ── CORS ─────────────────────────────────────────────────────────────────────
origins = [o.strip() for o in settings.allowed_origins.split(",") if o.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
    allow_headers=["Content-Type", "X-Request-ID"],
)

# ── Request context middleware (request ID + timing) ─────────────────────────
from primesec.middleware.request_context import RequestContextMiddleware  # noqa: E402

app.add_middleware(RequestContextMiddleware)

# ── Prometheus metrics middleware ────────────────────────────────────────────
from primesec.middleware.metrics import PrometheusMiddleware  # noqa: E402

app.add_middleware(PrometheusMiddleware)


# ── Error handling ───────────────────────────────────────────────────────────

@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(ValidationFailure)
async def validation_failure_handler(request: Request, exc: ValidationFailure):
    return JSONResponse(status_code=422, content={"detail": str(exc)})


@app.exception_handler(IntegrityError)
async def integrity_error_handler(request: Request, exc: IntegrityError):
    logger.info("Constraint violation on %s %s: %s", request.method, request.url.path, exc.orig)
    return JSONResponse(status_code=409, content={"detail": str(exc.orig)})


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Return detailed error info in development mode so 500s are debuggable."""
    tb = traceback.format_exc()
    logger.error(
        "Unhandled %s on %s %s: %s\n%s",
        type(exc).__name__, request.method, request.url.path, exc, tb,
    )
    detail = f"{type(exc).__name__}: {exc}"
    if settings.environment == "development":
        return JSONResponse(
            status_code=500,
            content={"detail": detail, "traceback": tb.splitlines()[-5:]},
        )
    return JSONResponse(status_code=500, content={"detail": "Internal Server Error"})


# Register API routers
app.include_router(users_router)
app.include_router(containers_router)
app.include_router(issues_router)
app.include_router(reviews_router)
app.include_router(violations_router)
app.include_router(controls_router)
app.include_router(components_router)
app.include_router(dashboard_router)
app.include_router(metrics_router)


# ── Health check ─────────────────────────────────────────────────────────────

@app.get("/api/health")
async def health_check():
    try:
        async with engine.begin() as conn:
            await conn.execute(text("SELECT 1"))
        database = {"status": "connected"}
    except Exception as exc:
        logger.warning("Health check: database unreachable: %s", exc)
        database = {"status": "disconnected", "error": str(exc)}

    return {
        "status": "healthy" if database["status"] == "connected" else "unhealthy",
        "environment": settings.environment,
        "components": {"database": database},
    }
