"""Statistics service for player summaries and per-country results."""
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from countryquiz.repositories import QuizRepository
from countryquiz.schemas.country import CountryStatistics
from countryquiz.schemas.player import StatisticsSummary
from countryquiz.services.player_service import PlayerService

logger = logging.getLogger(__name__)


def _success_rate(correct: int, total: int) -> float:
    if total == 0:
        return 0.0
    return round(100.0 * correct / total, 2)


class StatisticsService:
    """Read-only aggregate views over players and rounds."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.repository = QuizRepository(db)
        self.player_service = PlayerService(db)

    async def get_statistics_summary(self, external_key: int) -> StatisticsSummary:
        """Totals and accuracy for one player.

        Raises:
            PlayerNotFoundError: If the player is not registered
        """
        player = await self.player_service.get_player(external_key)
        return StatisticsSummary(
            total_games=player.total_games,
            correct=player.correct_answers,
            incorrect=player.incorrect_answers,
            accuracy=round(player.accuracy, 2),
            total_score=player.total_score,
        )

    async def country_statistics(self) -> list[CountryStatistics]:
        """Resolved games and correct answers per country, most played first."""
        rows = await self.repository.country_totals()
        stats = [
            CountryStatistics(
                country_code=code,
                country_name=name,
                total_games=total,
                correct_answers=correct,
                success_rate=_success_rate(correct, total),
            )
            for code, name, total, correct in rows
        ]
        stats.sort(key=lambda item: (-item.total_games, item.country_code))
        return stats

    async def hardest_countries(self, min_attempts: int = 1, limit: int = 10) -> list[CountryStatistics]:
        """Countries with the lowest success rate among those played ``min_attempts`` times."""
        if limit <= 0:
            return []
        rows = await self.repository.country_totals(min_attempts=max(1, min_attempts))
        stats = [
            CountryStatistics(
                country_code=code,
                country_name=name,
                total_games=total,
                correct_answers=correct,
                success_rate=_success_rate(correct, total),
            )
            for code, name, total, correct in rows
        ]
        stats.sort(key=lambda item: (item.success_rate, -item.total_games, item.country_code))
        logger.debug(f"Computed hardest countries from {len(stats)} candidates")
        return stats[:limit]
