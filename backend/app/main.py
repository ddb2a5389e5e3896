import re
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
import structlog
from prometheus_fastapi_instrumentator import Instrumentator

from app.core.settings import get_settings
from app.core.recommender.qloo import get_qloo_client
from app.db.session import db_manager, database_health_check
from app.api import destinations, itinerary, planner, chat, catalog, database
from app.api.limits import limiter
from app.middleware.logging import RequestLoggingMiddleware

settings = get_settings()

_QUERY_KEY_RE = re.compile(r'([?&]key=)[^&\s]+')
_GOOGLE_KEY_RE = re.compile(r'AIza[0-9A-Za-z\-_]{35}')
_BEARER_RE = re.compile(r'(Bearer\s+)[A-Za-z0-9\-._~+/]+=*')


# Redaction processor to scrub API keys from any string values in the event dict
def redact_api_keys(logger, method_name, event_dict):
    def scrub(v):
        if isinstance(v, str):
            v = _QUERY_KEY_RE.sub(r'\1REDACTED', v)
            v = _GOOGLE_KEY_RE.sub('REDACTED', v)
            v = _BEARER_RE.sub(r'\1REDACTED', v)
            return v
        if isinstance(v, list):
            return [scrub(x) for x in v]
        if isinstance(v, dict):
            return {k: scrub(vv) for k, vv in v.items()}
        return v

    for k, v in list(event_dict.items()):
        event_dict[k] = scrub(v)
    return event_dict


# Configure structured logging with JSON output; redaction runs before rendering
structlog.configure(
    processors=[
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        redact_api_keys,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

# Configure standard library logging to output to file and console
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format='%(message)s',  # structlog handles formatting
    handlers=[
        logging.StreamHandler(),
        logging.FileHandler(settings.LOG_FILE)
    ]
)

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting application...", chat_mode=settings.CHAT_MODE)
    try:
        await db_manager.initialize()
        await db_manager.init_db()
        logger.info("Database manager initialized successfully")
    except Exception:
        logger.exception("Failed to initialize database manager")
        raise

    yield

    logger.info("Shutting down application...")
    await get_qloo_client().close()
    await db_manager.close()
    logger.info("Database connections closed successfully")


app = FastAPI(
    title="Travel Planner API",
    description="Conversational trip planning: destination recommendations, itineraries and map routes",
    version="1.0.0",
    lifespan=lifespan
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.add_middleware(RequestLoggingMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Initialize Prometheus metrics instrumentation
Instrumentator().instrument(app).expose(app, endpoint="/metrics")


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(
        "unhandled_exception",
        error=str(exc),
        error_type=type(exc).__name__,
        path=request.url.path,
        method=request.method,
        exc_info=True
    )
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"}
    )


@app.get("/")
def health_check():
    return {"status": "API active", "version": "1.0.0"}


@app.get("/health")
async def health_check_detailed():
    """Database plus external-service configuration status"""
    db_health = await database_health_check()
    db_status = db_health["status"]

    return {
        "status": "healthy" if db_status == "healthy" else "degraded",
        "version": "1.0.0",
        "components": {
            "database": db_status,
            "gemini": "configured" if settings.GEMINI_API_KEY else "missing_api_key",
            "qloo": "configured" if settings.QLOO_API_KEY else "fallback",
            "api": "healthy"
        },
        "chat_mode": settings.CHAT_MODE,
        "timestamp": datetime.now(timezone.utc).isoformat()
    }


prefix = "/api/v1"

# Catalog routes stay at the root where the front end reads them
app.include_router(destinations.router)
app.include_router(itinerary.router)

app.include_router(planner.router, prefix=prefix)
app.include_router(chat.router, prefix=prefix)
app.include_router(catalog.router, prefix=prefix, tags=["catalog"])
app.include_router(database.router, prefix=f"{prefix}/database", tags=["database"])
