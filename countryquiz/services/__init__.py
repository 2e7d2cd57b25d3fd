from countryquiz.services.country_catalog import CountryCatalog, CatalogSnapshot, parse_countries
from countryquiz.services.player_service import PlayerService
from countryquiz.services.round_service import RoundService, Question, is_correct_answer
from countryquiz.services.statistics_service import StatisticsService
from countryquiz.services.formatting import (
    describe_outcome,
    format_leaderboard,
    format_statistics,
    help_text,
)

__all__ = [
    "CountryCatalog",
    "CatalogSnapshot",
    "parse_countries",
    "PlayerService",
    "RoundService",
    "Question",
    "is_correct_answer",
    "StatisticsService",
    "describe_outcome",
    "format_leaderboard",
    "format_statistics",
    "help_text",
]
