"""API routers."""
from countryquiz.routers import countries, health, players, rounds

__all__ = [
    "countries",
    "health",
    "players",
    "rounds",
]
