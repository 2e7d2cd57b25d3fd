"""Country catalog API router."""
from fastapi import APIRouter, Depends, Query

from countryquiz.dependencies import get_catalog, get_statistics_service
from countryquiz.schemas.country import (
    CountryCountResponse,
    CountryResponse,
    CountryStatistics,
)
from countryquiz.services.country_catalog import CountryCatalog
from countryquiz.services.statistics_service import StatisticsService

router = APIRouter(prefix="/countries")


@router.get("/count", response_model=CountryCountResponse)
async def count_countries(catalog: CountryCatalog = Depends(get_catalog)):
    return CountryCountResponse(count=catalog.count(), source=catalog.source)


@router.get("/search", response_model=list[CountryResponse])
async def search_countries(
    q: str = Query(..., min_length=1, max_length=100),
    limit: int = Query(default=10, ge=1, le=50),
    catalog: CountryCatalog = Depends(get_catalog),
):
    """Countries whose name contains the query."""
    return [CountryResponse(**record.model_dump()) for record in catalog.search(q, limit)]


@router.get("/statistics", response_model=list[CountryStatistics])
async def get_country_statistics(
    statistics_service: StatisticsService = Depends(get_statistics_service),
):
    return await statistics_service.country_statistics()


@router.get("/hardest", response_model=list[CountryStatistics])
async def get_hardest_countries(
    min_attempts: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    statistics_service: StatisticsService = Depends(get_statistics_service),
):
    """Countries with the lowest success rate."""
    return await statistics_service.hardest_countries(min_attempts=min_attempts, limit=limit)


@router.get("/{code}", response_model=CountryResponse)
async def get_country(code: str, catalog: CountryCatalog = Depends(get_catalog)):
    record = catalog.get_by_code(code)
    return CountryResponse(**record.model_dump())
