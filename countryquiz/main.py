"""FastAPI application entry point."""
import os

# Force UTC before anything caches timezone information
os.environ['TZ'] = 'UTC'

import time
import sys

if hasattr(time, "tzset"):
    time.tzset()

# Ensure console streams can emit Unicode (emoji) on Windows
for stream in (sys.stdout, sys.stderr):
    if hasattr(stream, "reconfigure"):
        stream.reconfigure(encoding="utf-8", errors="backslashreplace")

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from contextlib import asynccontextmanager

from countryquiz.config import get_settings
from countryquiz.version import APP_VERSION
from countryquiz.routers import countries, health, players, rounds
from countryquiz.services.country_catalog import CountryCatalog
from countryquiz.utils.exceptions import (
    CatalogEmptyError,
    InvalidStateError,
    NotFoundError,
    QuizError,
    StorageError,
)

settings = get_settings()

logs_dir = Path(settings.log_dir)
logs_dir.mkdir(parents=True, exist_ok=True)

log_file = logs_dir / "countryquiz.log"
sql_log_file = logs_dir / "countryquiz_sql.log"

# 1 MB per file, 5 backups
rotating_handler = RotatingFileHandler(
    log_file,
    maxBytes=1024 * 1024,
    backupCount=5,
    encoding='utf-8',
)
rotating_handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))

sql_rotating_handler = RotatingFileHandler(
    sql_log_file,
    maxBytes=1024 * 1024,
    backupCount=5,
    encoding='utf-8',
)
sql_rotating_handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(),
        rotating_handler,
    ],
    force=True,
)

logger = logging.getLogger(__name__)

uvicorn_access_logger = logging.getLogger("uvicorn.access")
uvicorn_access_logger.setLevel(logging.INFO)
if rotating_handler not in uvicorn_access_logger.handlers:
    uvicorn_access_logger.addHandler(rotating_handler)

# SQL goes to its own file only
sqlalchemy_logger = logging.getLogger("sqlalchemy.engine.Engine")
sqlalchemy_logger.handlers.clear()
sqlalchemy_logger.addHandler(sql_rotating_handler)
sqlalchemy_logger.setLevel(logging.INFO)
sqlalchemy_logger.propagate = False


class SQLTransactionFilter(logging.Filter):
    """Drop transaction bookkeeping lines and flatten multi-line statements."""

    def filter(self, record):
        if record.levelno == logging.INFO:
            message = record.getMessage()

            if any(keyword in message for keyword in ['ROLLBACK', 'BEGIN', 'COMMIT', 'generated in']):
                return False

            if any(keyword in message for keyword in ['SELECT', 'DELETE', 'INSERT', 'UPDATE']):
                record.msg = ' '.join(message.split())
                record.args = ()

        return True


sqlalchemy_logger.addFilter(SQLTransactionFilter())


@asynccontextmanager
async def lifespan(app_instance: FastAPI):
    """Load the country catalog and start its one-shot refresh."""
    logger.info("=" * 60)
    logger.info("Country Quiz API Starting")
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"Database: {settings.database_url.split('@')[-1] if '@' in settings.database_url else 'SQLite'}")
    logger.info("=" * 60)

    # An empty fallback set aborts startup here
    catalog = CountryCatalog(settings)
    app_instance.state.catalog = catalog

    if settings.catalog_refresh_on_startup:
        catalog.start_background_refresh()
        logger.info("Country catalog refresh started in background")

    try:
        yield
    finally:
        logger.info("Shutting down country catalog...")
        await catalog.aclose()
        logger.info("Country Quiz API Shutting Down... Goodbye!")


app = FastAPI(
    title="Country Quiz API",
    description="Flag quiz rounds, scoring and leaderboards",
    version=APP_VERSION,
    lifespan=lifespan,
)


ERROR_STATUS_CODES = (
    (NotFoundError, 404),
    (InvalidStateError, 409),
    (CatalogEmptyError, 503),
    (StorageError, 500),
)


def _status_for(exc: QuizError) -> int:
    for error_type, status_code in ERROR_STATUS_CODES:
        if isinstance(exc, error_type):
            return status_code
    return 500


@app.exception_handler(QuizError)
async def quiz_exception_handler(request: Request, exc: QuizError):
    """Translate core failures into HTTP responses with a stable error code."""
    status_code = _status_for(exc)
    if status_code >= 500:
        logger.error(f"{exc.code} on {request.url.path}: {exc}", exc_info=exc)
    else:
        logger.info(f"{exc.code} on {request.url.path}: {exc}")

    return JSONResponse(
        status_code=status_code,
        content={"detail": exc.message, "code": exc.code},
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle Pydantic validation errors with user-friendly messages."""
    logger.warning(f"Validation error on {request.url.path}: {exc.errors()}")

    errors = []
    for error in exc.errors():
        loc = error.get("loc", [])
        field_path = " -> ".join(str(x) for x in loc[1:]) if len(loc) > 1 else "unknown field"
        errors.append({
            "field": field_path,
            "message": error.get("msg", "Validation error"),
            "type": error.get("type", "unknown"),
        })

    return JSONResponse(
        status_code=422,
        content={
            "detail": "Request validation failed",
            "code": "validation_error",
            "errors": errors,
        },
    )


app.include_router(players.router, tags=["players"])
app.include_router(rounds.router, tags=["rounds"])
app.include_router(countries.router, tags=["countries"])
app.include_router(health.router, tags=["health"])


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "Country Quiz API",
        "version": APP_VERSION,
        "environment": settings.environment,
        "docs": "/docs",
    }
