"""Country catalog schemas."""
from typing import Any, Optional
from pydantic import BaseModel, ConfigDict

from countryquiz.schemas.base import BaseSchema


class CountryRecord(BaseModel):
    """One playable country. Read-only to everything outside the catalog."""

    model_config = ConfigDict(frozen=True)

    code: str
    name: str
    flag_url: str
    capital: Optional[str] = None
    region: Optional[str] = None
    population: Optional[int] = None

    @classmethod
    def from_rest_countries(cls, payload: Any) -> Optional["CountryRecord"]:
        """Build a record from a REST Countries v3.1 item, or None if unusable."""
        if not isinstance(payload, dict):
            return None

        name_obj = payload.get("name")
        flags_obj = payload.get("flags")
        if not isinstance(name_obj, dict) or not isinstance(flags_obj, dict):
            return None

        name = name_obj.get("common")
        code = payload.get("cca3")
        flag_url = flags_obj.get("png")
        if not name or not code or not flag_url:
            return None

        capitals = payload.get("capital")
        capital = capitals[0] if isinstance(capitals, list) and capitals else None

        population = payload.get("population")
        if isinstance(population, bool) or not isinstance(population, (int, float)):
            population = None

        return cls(
            code=str(code),
            name=str(name),
            flag_url=str(flag_url),
            capital=capital,
            region=payload.get("region"),
            population=int(population) if population is not None else None,
        )


class CountryResponse(BaseSchema):
    code: str
    name: str
    flag_url: str
    capital: Optional[str] = None
    region: Optional[str] = None
    population: Optional[int] = None


class CountryCountResponse(BaseSchema):
    count: int
    source: str


class CountryStatistics(BaseSchema):
    """Aggregate results for one country across all resolved rounds."""
    country_code: str
    country_name: str
    total_games: int
    correct_answers: int
    success_rate: float
