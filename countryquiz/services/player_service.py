"""Player ledger: identity resolution and statistics mutation."""

import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from countryquiz.config import get_settings
from countryquiz.models.player import Player
from countryquiz.repositories import QuizRepository
from countryquiz.utils.exceptions import PlayerNotFoundError, StorageError

logger = logging.getLogger(__name__)


class PlayerService:
    """Service for managing players and their cumulative statistics."""

    def __init__(self, db: AsyncSession):
        """Initialize player service.

        Args:
            db: Database session
        """
        self.db = db
        self.settings = get_settings()
        self.repository = QuizRepository(db)

    async def find_player(self, external_key: int) -> Optional[Player]:
        """Get player by external key, or None if not registered."""
        logger.debug(f"Finding player by external key {external_key}")
        return await self.repository.load_player(external_key)

    async def get_player(self, external_key: int) -> Player:
        """Get player by external key.

        Raises:
            PlayerNotFoundError: If no player is registered for the key
        """
        player = await self.repository.load_player(external_key)
        if player is None:
            logger.info(f"Player not found for external key {external_key}")
            raise PlayerNotFoundError()
        return player

    async def get_player_by_id(self, player_id: int) -> Player:
        """Get player by internal id, bypassing any stale session state."""
        player = await self.repository.load_player_by_id(player_id, refresh=True)
        if player is None:
            raise PlayerNotFoundError()
        return player

    async def player_exists(self, external_key: int) -> bool:
        return await self.repository.load_player(external_key) is not None

    async def get_or_create(
        self,
        external_key: int,
        username: str | None = None,
        first_name: str | None = None,
        last_name: str | None = None,
    ) -> Player:
        """Return the player for ``external_key``, creating it on first contact.

        Display fields are only used on creation; an existing player is returned
        unchanged.
        """
        player = await self.repository.load_player(external_key)
        if player is not None:
            return player

        logger.info(f"Creating new player with external key {external_key}")
        player = Player(
            external_key=external_key,
            username=username,
            first_name=first_name,
            last_name=last_name,
            total_score=0,
            correct_answers=0,
            incorrect_answers=0,
        )
        try:
            await self.repository.save_player(player)
            await self.db.commit()
        except IntegrityError:
            # Lost a registration race for the same key
            await self.db.rollback()
            existing = await self.repository.load_player(external_key)
            if existing is None:
                raise StorageError("Could not create player")
            logger.info(f"Player {external_key} was registered concurrently; using existing record")
            return existing
        except SQLAlchemyError as exc:
            await self.db.rollback()
            logger.error(f"Failed to create player {external_key}: {exc}")
            raise StorageError() from exc

        await self.db.refresh(player)
        return player

    async def apply_outcome(
        self,
        player: Player,
        is_correct: bool,
        points: int,
        auto_commit: bool = True,
    ) -> Player:
        """Add one answer outcome to the player's statistics.

        The increment happens in the database so concurrent outcomes for the same
        player are never lost.

        Args:
            player: Player to update
            is_correct: Whether the answer was correct
            points: Signed score delta
            auto_commit: Commit immediately; pass False to join the caller's transaction

        Returns:
            Player: Player reloaded with the new totals
        """
        logger.debug(f"Updating stats for player {player.player_id}: correct={is_correct}, points={points}")
        try:
            updated = await self.repository.increment_player_stats(player.player_id, is_correct, points)
            if not updated:
                raise PlayerNotFoundError()
            if auto_commit:
                await self.db.commit()
        except SQLAlchemyError as exc:
            await self.db.rollback()
            logger.error(f"Failed to update stats for player {player.player_id}: {exc}")
            raise StorageError() from exc

        refreshed = await self.repository.load_player_by_id(player.player_id, refresh=True)
        logger.info(
            f"Player {refreshed.player_id} stats updated: score={refreshed.total_score}, "
            f"accuracy={refreshed.accuracy:.1f}%"
        )
        return refreshed

    async def top_players(self, limit: int | None = None) -> list[Player]:
        """Players by total score, highest first.

        Ties are broken by registration order (earlier players rank higher).
        """
        if limit is None:
            limit = self.settings.leaderboard_limit
        if limit <= 0:
            return []
        logger.debug(f"Getting top {limit} players")
        return await self.repository.top_players(limit)

    async def list_players(self) -> list[Player]:
        return await self.repository.all_players()

    async def reset_stats(self, external_key: int) -> Player:
        """Zero score and answer counters. Round history is kept."""
        logger.info(f"Resetting stats for player with external key {external_key}")
        player = await self.get_player(external_key)
        try:
            await self.repository.reset_player_stats(player.player_id)
            await self.db.commit()
        except SQLAlchemyError as exc:
            await self.db.rollback()
            raise StorageError() from exc

        player = await self.repository.load_player_by_id(player.player_id, refresh=True)
        logger.info(f"Stats reset for player {player.player_id}")
        return player

    async def delete_player(self, external_key: int) -> None:
        """Administrative removal of a player together with their rounds."""
        player = await self.get_player(external_key)
        try:
            await self.repository.delete_player(player)
            await self.db.commit()
        except SQLAlchemyError as exc:
            await self.db.rollback()
            raise StorageError() from exc
        logger.info(f"Deleted player with external key {external_key}")
