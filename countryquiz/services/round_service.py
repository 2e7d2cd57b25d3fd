"""Round engine: starts rounds, resolves answers, keeps one active round per player."""
from dataclasses import dataclass
from datetime import datetime, UTC
from typing import Optional
from uuid import UUID
import logging

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from countryquiz.config import get_settings
from countryquiz.models.base import RoundStatus
from countryquiz.models.round import Round
from countryquiz.repositories import QuizRepository
from countryquiz.schemas.country import CountryRecord
from countryquiz.services.country_catalog import CountryCatalog
from countryquiz.services.player_service import PlayerService
from countryquiz.utils import lock_client
from countryquiz.utils.datetime_helpers import elapsed_whole_seconds, start_of_day_utc
from countryquiz.utils.exceptions import (
    ConcurrentRoundError,
    RoundAlreadyResolvedError,
    RoundNotFoundError,
    StorageError,
)

logger = logging.getLogger(__name__)


def is_correct_answer(submitted_answer: str, country_name: str) -> bool:
    """Case-insensitive exact match after trimming the submitted answer."""
    return submitted_answer.strip().casefold() == country_name.casefold()


@dataclass
class Question:
    """A pending round together with the answer options to show."""
    round: Round
    options: list[CountryRecord]


class RoundService:
    """Service for managing quiz rounds."""

    def __init__(self, db: AsyncSession, catalog: CountryCatalog):
        self.db = db
        self.catalog = catalog
        self.settings = get_settings()
        self.repository = QuizRepository(db)
        self.player_service = PlayerService(db)

    async def start_new_round(self, external_key: int) -> Round:
        """
        Start a new round for a registered player.

        - Abandon the player's pending round, if any
        - Draw a random country from the catalog
        - Persist a pending round holding a snapshot of that country

        Runs under a per-player lock so concurrent starts leave one pending round.

        Raises:
            PlayerNotFoundError: If the player has not been registered
            CatalogEmptyError: If the catalog has no countries
            ConcurrentRoundError: If storage rejects a second pending round
        """
        logger.info(f"Starting new round for external key {external_key}")
        player = await self.player_service.get_player(external_key)

        lock_name = f"start_round:{external_key}"
        async with lock_client.lock(lock_name, timeout=self.settings.round_lock_timeout_seconds):
            country = self.catalog.random_country()
            try:
                abandoned_ids = await self.repository.abandon_pending_rounds(player.player_id)
                round_object = Round(
                    player_id=player.player_id,
                    country_code=country.code,
                    country_name=country.name,
                    flag_url=country.flag_url,
                    status=RoundStatus.PENDING.value,
                    is_correct=False,
                    points=0,
                )
                await self.repository.save_round(round_object)
                await self.db.commit()
            except IntegrityError as exc:
                await self.db.rollback()
                logger.warning(f"Pending round conflict for player {player.player_id}: {exc}")
                raise ConcurrentRoundError() from exc
            except SQLAlchemyError as exc:
                await self.db.rollback()
                logger.error(f"Failed to start round for player {player.player_id}: {exc}")
                raise StorageError() from exc

        for round_id in abandoned_ids:
            logger.info(f"Round {round_id} abandoned: player {player.player_id} started a new round")

        await self.db.refresh(round_object)
        logger.info(
            f"New round created: id={round_object.round_id}, player={player.player_id}, "
            f"country={country.name}"
        )
        return round_object

    async def resolve(self, round_id: UUID, submitted_answer: str) -> Round:
        """
        Check an answer and apply the outcome to the player's statistics.

        The round update (a compare-and-set on status) and the statistics increment
        commit together or not at all.

        Raises:
            RoundNotFoundError: If the round does not exist
            RoundAlreadyResolvedError: If the round is no longer pending
            StorageError: If the database update fails
        """
        logger.debug(f"Checking answer for round {round_id}")

        lock_name = f"resolve_round:{round_id}"
        async with lock_client.lock(lock_name, timeout=self.settings.round_lock_timeout_seconds):
            round_object = await self.repository.load_round(round_id, refresh=True)
            if round_object is None:
                raise RoundNotFoundError()
            if round_object.status != RoundStatus.PENDING.value:
                raise RoundAlreadyResolvedError()

            is_correct = is_correct_answer(submitted_answer, round_object.country_name)
            points = self.settings.points_correct if is_correct else self.settings.points_incorrect
            resolved_at = datetime.now(UTC)
            elapsed = elapsed_whole_seconds(round_object.created_at, resolved_at)

            try:
                updated = await self.repository.mark_round_resolved(
                    round_object.round_id,
                    submitted_answer=submitted_answer,
                    is_correct=is_correct,
                    points=points,
                    elapsed_seconds=elapsed,
                    resolved_at=resolved_at,
                )
                if not updated:
                    # Another session resolved or abandoned it after our read
                    await self.db.rollback()
                    raise RoundAlreadyResolvedError()

                player = await self.player_service.get_player_by_id(round_object.player_id)
                await self.player_service.apply_outcome(player, is_correct, points, auto_commit=False)
                await self.db.commit()
            except SQLAlchemyError as exc:
                await self.db.rollback()
                logger.error(f"Failed to resolve round {round_id}: {exc}")
                raise StorageError() from exc

            round_object = await self.repository.load_round(round_id, refresh=True)

        logger.info(f"Answer checked for round {round_id}: correct={is_correct}, points={points}")
        return round_object

    async def get_round(self, round_id: UUID) -> Round:
        round_object = await self.repository.load_round(round_id, refresh=True)
        if round_object is None:
            raise RoundNotFoundError()
        return round_object

    async def active_round(self, external_key: int) -> Optional[Round]:
        """The player's pending round, if any."""
        player = await self.player_service.get_player(external_key)
        return await self.repository.find_pending_round(player.player_id)

    async def abandon(self, external_key: int) -> Optional[Round]:
        """Abandon the player's pending round. Returns it, or None if there was none."""
        logger.info(f"Abandoning active round for external key {external_key}")
        player = await self.player_service.get_player(external_key)

        lock_name = f"start_round:{external_key}"
        async with lock_client.lock(lock_name, timeout=self.settings.round_lock_timeout_seconds):
            pending = await self.repository.find_pending_round(player.player_id)
            if pending is None:
                return None
            try:
                await self.repository.abandon_pending_rounds(player.player_id)
                await self.db.commit()
            except SQLAlchemyError as exc:
                await self.db.rollback()
                raise StorageError() from exc

        round_object = await self.repository.load_round(pending.round_id, refresh=True)
        logger.info(f"Round {round_object.round_id} abandoned")
        return round_object

    def build_question(self, round_object: Round) -> Question:
        """Answer options for a round: its country plus shuffled distractors.

        Uses the round's own snapshot when its country has since left the catalog.
        """
        correct = self.catalog.find_by_code(round_object.country_code)
        if correct is None or correct.name != round_object.country_name:
            correct = CountryRecord(
                code=round_object.country_code,
                name=round_object.country_name,
                flag_url=round_object.flag_url or "",
            )
        options = self.catalog.game_options(correct, self.settings.options_count)
        return Question(round=round_object, options=options)

    async def recent_rounds(self, external_key: int, limit: int = 10) -> list[Round]:
        """The player's latest rounds, newest first."""
        player = await self.player_service.get_player(external_key)
        return await self.repository.recent_rounds(player.player_id, limit)

    async def today_rounds(self, external_key: int) -> list[Round]:
        """Rounds the player started since midnight UTC, newest first."""
        player = await self.player_service.get_player(external_key)
        return await self.repository.recent_rounds(player.player_id, limit=0, since=start_of_day_utc())

    async def count_rounds(self, external_key: int, status: RoundStatus | None = None) -> int:
        player = await self.player_service.get_player(external_key)
        return await self.repository.count_rounds(player.player_id, status.value if status else None)
