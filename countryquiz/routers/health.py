"""Health check endpoint."""
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from countryquiz.database import engine
from countryquiz.config import get_settings
from countryquiz.dependencies import get_catalog
from countryquiz.services.country_catalog import CountryCatalog
from countryquiz.services.formatting import help_text
from countryquiz.version import APP_VERSION
import logging

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health")
async def health_check(catalog: CountryCatalog = Depends(get_catalog)):
    """Health check endpoint for monitoring."""
    try:
        async with engine.begin() as conn:
            await conn.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {e}")
        return JSONResponse(
            status_code=503,
            content={"status": "error", "detail": "Database connection failed"},
        )

    return {
        "status": "ok",
        "database": "connected",
        "catalog": {
            "countries": catalog.count(),
            "source": catalog.source,
        },
    }


@router.get("/status")
async def game_status(catalog: CountryCatalog = Depends(get_catalog)):
    """Version, environment and game rules."""
    settings = get_settings()
    return {
        "version": APP_VERSION,
        "environment": settings.environment,
        "catalog": {
            "countries": catalog.count(),
            "source": catalog.source,
            "loaded_at": catalog.snapshot.loaded_at.isoformat(),
        },
        "rules": {
            "options_count": settings.options_count,
            "points_correct": settings.points_correct,
            "points_incorrect": settings.points_incorrect,
        },
        "help": help_text(settings),
    }
