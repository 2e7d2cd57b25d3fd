"""FastAPI dependencies."""
import logging

from fastapi import Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from countryquiz.database import get_db
from countryquiz.services.country_catalog import CountryCatalog
from countryquiz.services.player_service import PlayerService
from countryquiz.services.round_service import RoundService
from countryquiz.services.statistics_service import StatisticsService

logger = logging.getLogger(__name__)


def get_catalog(request: Request) -> CountryCatalog:
    """Country catalog created by the application lifespan."""
    catalog = getattr(request.app.state, "catalog", None)
    if catalog is None:
        logger.error("Country catalog requested before application startup")
        raise HTTPException(status_code=503, detail="Country catalog not initialized")
    return catalog


async def get_player_service(db: AsyncSession = Depends(get_db)) -> PlayerService:
    return PlayerService(db)


async def get_round_service(
    db: AsyncSession = Depends(get_db),
    catalog: CountryCatalog = Depends(get_catalog),
) -> RoundService:
    return RoundService(db, catalog)


async def get_statistics_service(db: AsyncSession = Depends(get_db)) -> StatisticsService:
    return StatisticsService(db)
