"""FastAPI application entrypoint.

Responsibilities kept minimal:
  * App / lifespan initialization (schema, optional seed data)
  * Router registration (auth, users, organizations, departments, memberships, tasks, prizes, points)
  * Cross-cutting concerns: logging, metrics middleware & exception handlers
"""

from contextlib import asynccontextmanager
import logging
import os
import re
from fastapi import FastAPI, Request, Response
try:  # Optional OpenTelemetry
    from opentelemetry import trace
    from opentelemetry.sdk.resources import Resource
    from opentelemetry.sdk.trace import TracerProvider
    from opentelemetry.sdk.trace.export import BatchSpanProcessor
    from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
    _otel_available = True
except ImportError:  # pragma: no cover
    _otel_available = False
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from .api.auth import router as auth_router
from .api.users import router as users_router
from .api.organizations import router as organizations_router
from .api.departments import router as departments_router
from .api.memberships import router as memberships_router
from .api.tasks import router as tasks_router
from .api.prizes import router as prizes_router
from .api.points import router as points_router
from .db import models  # noqa: F401 register models before create_all
from .db.session import engine, Base, SessionLocal
from .errors import BaseAppException
from .services.seed_data import seed_database

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)
logger = logging.getLogger(__name__)

TRUTHY = {"1", "true", "TRUE", "yes", "on"}


@asynccontextmanager
async def lifespan(app: FastAPI):  # pragma: no cover - simple startup path
    """Create the schema (idempotent) and seed development data when asked to."""
    Base.metadata.create_all(bind=engine)
    if os.getenv("APP_SEED_DATA") in TRUTHY:
        with SessionLocal() as db:
            if seed_database(db):
                logger.info("development seed data loaded")
    yield


# --- Optional .env loading (opt-in via APP_LOAD_DOTENV) ---
if os.getenv("APP_LOAD_DOTENV") in TRUTHY:  # pragma: no cover
    try:
        from dotenv import load_dotenv  # type: ignore
        load_dotenv(override=False)
    except ImportError:
        logger.warning("APP_LOAD_DOTENV is set but python-dotenv is not installed")

app = FastAPI(title="Organization Tasks API", version="0.1.0", lifespan=lifespan)

# --- OpenTelemetry Tracing (optional) ---
if _otel_available and os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT"):
    endpoint = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT")
    resource = Resource.create({"service.name": "orgtasks-backend"})
    provider = TracerProvider(resource=resource)
    exporter = OTLPSpanExporter(endpoint=endpoint)
    provider.add_span_processor(BatchSpanProcessor(exporter))
    trace.set_tracer_provider(provider)
    tracer = trace.get_tracer(__name__)
else:  # pragma: no cover
    tracer = None

# --- Metrics setup ---
REQUEST_COUNT = Counter(
    "orgtasks_requests_total", "Total HTTP requests", ["method", "path", "status"]
)
REQUEST_LATENCY = Histogram(
    "orgtasks_request_latency_seconds", "Latency of HTTP requests", ["method", "path"]
)

_ID_SEGMENT = re.compile(r"/(\d+|[0-9a-fA-F-]{36})(?=/|$)")


def path_label(path: str) -> str:
    """Collapse numeric and uuid path segments so metric labels stay bounded."""
    return _ID_SEGMENT.sub("/:id", path)


# --- CORS (for local frontend dev) ---
cors_origins_env = os.getenv("CORS_ALLOW_ORIGINS")
if cors_origins_env:
    allow_origins = [o.strip() for o in cors_origins_env.split(",") if o.strip()]
else:
    allow_origins = ["http://localhost:3000"]

app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- Register routers once ---
app.include_router(auth_router)
app.include_router(users_router)
app.include_router(organizations_router)
app.include_router(departments_router)
app.include_router(memberships_router)
app.include_router(tasks_router)
app.include_router(prizes_router)
app.include_router(points_router)


@app.middleware("http")
async def metrics_middleware(request: Request, call_next):
    method = request.method
    label = path_label(request.url.path)
    with REQUEST_LATENCY.labels(method=method, path=label).time():
        if tracer:
            with tracer.start_as_current_span(f"HTTP {method} {label}"):
                response: Response = await call_next(request)
        else:
            response: Response = await call_next(request)
    REQUEST_COUNT.labels(method=method, path=label, status=str(response.status_code)).inc()
    return response


@app.get("/metrics")
def metrics():  # pragma: no cover - external scrape
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)


@app.exception_handler(BaseAppException)
async def app_exception_handler(request: Request, exc: BaseAppException):
    return JSONResponse(
        status_code=exc.http_status,
        content={"detail": exc.detail},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):  # pragma: no cover
    logger.exception("unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={"detail": {"code": "INTERNAL_ERROR", "message": "unexpected error"}},
    )


@app.get("/healthz")
def health():
    health = {"status": "ok"}
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        health["database"] = "up"
    except SQLAlchemyError:
        logger.exception("database health check failed")
        health["status"] = "degraded"
        health["database"] = "down"
    health["tracing"] = "enabled" if tracer else "disabled"
    return health
