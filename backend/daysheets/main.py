# backend/daysheets/main.py

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse
from sqlalchemy.exc import TimeoutError as SA_TimeoutError
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import models  # noqa: F401  (registers tables on Base.metadata)
from .api import (
    api_chat,
    api_document,
    api_flight,
    api_health,
    api_invite,
    api_logo,
    api_notification,
    api_option,
    api_queue,
    api_selection,
    api_tour,
    auth,
)
from .core.config import settings
from .core.observability import setup_logging, setup_tracer
from .database import Base, engine, is_sqlite
from .utils.errors import DomainError
from .utils.redis_cache import close_redis_client

setup_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.PROJECT_NAME, default_response_class=ORJSONResponse)
setup_tracer(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.rstrip("/") for o in settings.CORS_ORIGINS],
    allow_credentials="*" not in settings.CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)
logger.info("CORS origins set to: %s", settings.CORS_ORIGINS)


@app.middleware("http")
async def catch_exceptions(request: Request, call_next):
    """Return JSON responses for unhandled errors and log them."""
    try:
        response = await call_next(request)
    except StarletteHTTPException as exc:
        logger.error("HTTP error %s at %s: %s", exc.status_code, request.url.path, exc.detail)
        response = ORJSONResponse(status_code=exc.status_code, content={"detail": exc.detail})
    except SA_TimeoutError as exc:  # DB pool timeout -> 503 to reduce retry storms
        logger.error("DB timeout at %s: %s", request.url.path, str(exc))
        response = ORJSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"detail": "Database busy, please retry"},
        )
    except Exception as exc:  # pragma: no cover - generic handler
        logger.exception("Unhandled error: %s", exc)
        response = ORJSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Internal Server Error"},
        )
    return response


@app.exception_handler(DomainError)
async def domain_exception_handler(request: Request, exc: DomainError):
    """Render service-layer errors with the shared ``{message, field_errors}`` body."""
    log = logger.error if exc.status_code >= 500 else logger.info
    log("%s at %s: %s", type(exc).__name__, request.url.path, exc.message)
    return ORJSONResponse(status_code=exc.status_code, content={"detail": exc.to_detail()})


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Return validation errors with details and log them for debugging."""
    errors = exc.errors()
    logger.warning("Validation error at %s: %s", request.url.path, errors)
    for err in errors:
        if err.get("loc") == ("body", "file"):
            return ORJSONResponse(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                content={"detail": {"message": "No file provided", "field_errors": {"file": "required"}}},
            )
    field_errors = {".".join(str(p) for p in err.get("loc", ())[1:]) or "body": err.get("msg", "") for err in errors}
    return ORJSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": {"message": "Invalid request", "field_errors": field_errors}},
    )


api_prefix = settings.API_PREFIX

# Clients POST to /auth/login
app.include_router(auth.router, prefix="/auth", tags=["auth"])
for router in (
    api_health.router,
    api_selection.router,
    api_queue.router,
    api_document.router,
    api_notification.router,
    api_chat.router,
    api_flight.router,
    api_logo.router,
    api_invite.router,
    api_option.router,
    api_tour.router,
):
    app.include_router(router, prefix=api_prefix)


@app.on_event("startup")
def create_sqlite_tables() -> None:
    """Local SQLite databases are created on the fly; others go through Alembic."""
    if is_sqlite:
        Base.metadata.create_all(bind=engine)


@app.on_event("shutdown")
def shutdown_redis_client() -> None:
    """Close Redis connections when the application shuts down."""
    logger.info("Closing Redis client")
    close_redis_client()
