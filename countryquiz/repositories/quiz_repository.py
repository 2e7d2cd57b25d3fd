"""Persistence operations for players and rounds, named by query intent."""
import logging
from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import select, update, delete, func, case
from sqlalchemy.ext.asyncio import AsyncSession

from countryquiz.models.player import Player
from countryquiz.models.round import Round
from countryquiz.models.base import RoundStatus

logger = logging.getLogger(__name__)


class QuizRepository:
    """SQLAlchemy-backed storage for the quiz core.

    Methods never commit; the calling service owns the transaction.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    # Players

    async def load_player(self, external_key: int) -> Optional[Player]:
        stmt = select(Player).where(Player.external_key == external_key)
        result = await self.db.execute(stmt)
        return result.scalars().first()

    async def load_player_by_id(self, player_id: int, refresh: bool = False) -> Optional[Player]:
        stmt = select(Player).where(Player.player_id == player_id)
        if refresh:
            stmt = stmt.execution_options(populate_existing=True)
        result = await self.db.execute(stmt)
        return result.scalars().first()

    async def save_player(self, player: Player) -> Player:
        self.db.add(player)
        await self.db.flush()
        return player

    async def delete_player(self, player: Player) -> None:
        await self.db.execute(delete(Round).where(Round.player_id == player.player_id))
        await self.db.delete(player)
        await self.db.flush()

    async def top_players(self, limit: int) -> list[Player]:
        """Players by total score, highest first; ties keep registration order."""
        stmt = (
            select(Player)
            .order_by(Player.total_score.desc(), Player.player_id.asc())
            .limit(limit)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def all_players(self) -> list[Player]:
        result = await self.db.execute(select(Player).order_by(Player.player_id.asc()))
        return list(result.scalars().all())

    async def increment_player_stats(self, player_id: int, is_correct: bool, points: int) -> bool:
        """Apply one outcome as a single atomic UPDATE."""
        values = {"total_score": Player.total_score + points}
        if is_correct:
            values["correct_answers"] = Player.correct_answers + 1
        else:
            values["incorrect_answers"] = Player.incorrect_answers + 1

        stmt = (
            update(Player)
            .where(Player.player_id == player_id)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        return result.rowcount == 1

    async def reset_player_stats(self, player_id: int) -> bool:
        stmt = (
            update(Player)
            .where(Player.player_id == player_id)
            .values(total_score=0, correct_answers=0, incorrect_answers=0)
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        return result.rowcount == 1

    # Rounds

    async def load_round(self, round_id: UUID, refresh: bool = False) -> Optional[Round]:
        stmt = select(Round).where(Round.round_id == round_id)
        if refresh:
            stmt = stmt.execution_options(populate_existing=True)
        result = await self.db.execute(stmt)
        return result.scalars().first()

    async def save_round(self, round_object: Round) -> Round:
        self.db.add(round_object)
        await self.db.flush()
        return round_object

    async def find_pending_round(self, player_id: int) -> Optional[Round]:
        stmt = (
            select(Round)
            .where(Round.player_id == player_id, Round.status == RoundStatus.PENDING.value)
            .order_by(Round.created_at.desc())
            .limit(1)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return result.scalars().first()

    async def abandon_pending_rounds(self, player_id: int) -> list[UUID]:
        """Mark every pending round of the player abandoned; returns their ids."""
        pending = await self.db.execute(
            select(Round.round_id).where(
                Round.player_id == player_id,
                Round.status == RoundStatus.PENDING.value,
            )
        )
        round_ids = list(pending.scalars().all())
        if not round_ids:
            return []

        await self.db.execute(
            update(Round)
            .where(Round.round_id.in_(round_ids), Round.status == RoundStatus.PENDING.value)
            .values(status=RoundStatus.ABANDONED.value)
            .execution_options(synchronize_session=False)
        )
        return round_ids

    async def mark_round_resolved(
        self,
        round_id: UUID,
        submitted_answer: str,
        is_correct: bool,
        points: int,
        elapsed_seconds: Optional[int],
        resolved_at: datetime,
    ) -> bool:
        """Compare-and-set pending -> resolved. False if the round was not pending."""
        stmt = (
            update(Round)
            .where(Round.round_id == round_id, Round.status == RoundStatus.PENDING.value)
            .values(
                status=RoundStatus.RESOLVED.value,
                submitted_answer=submitted_answer,
                is_correct=is_correct,
                points=points,
                elapsed_seconds=elapsed_seconds,
                resolved_at=resolved_at,
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        return result.rowcount == 1

    async def recent_rounds(self, player_id: int, limit: int, since: Optional[datetime] = None) -> list[Round]:
        stmt = select(Round).where(Round.player_id == player_id)
        if since is not None:
            stmt = stmt.where(Round.created_at >= since)
        stmt = stmt.order_by(Round.created_at.desc())
        if limit:
            stmt = stmt.limit(limit)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def count_rounds(self, player_id: int, status: Optional[str] = None) -> int:
        stmt = select(func.count(Round.round_id)).where(Round.player_id == player_id)
        if status is not None:
            stmt = stmt.where(Round.status == status)
        result = await self.db.execute(stmt)
        return result.scalar_one()

    async def resolved_round_totals(self, player_id: int) -> tuple[int, int]:
        """(resolved round count, sum of their points) for a player."""
        stmt = select(
            func.count(Round.round_id),
            func.coalesce(func.sum(Round.points), 0),
        ).where(Round.player_id == player_id, Round.status == RoundStatus.RESOLVED.value)
        result = await self.db.execute(stmt)
        count, points = result.one()
        return int(count), int(points)

    async def country_totals(self, min_attempts: int = 1) -> list[tuple[str, str, int, int]]:
        """(code, name, resolved games, correct answers) per country."""
        correct_count = func.sum(case((Round.is_correct.is_(True), 1), else_=0))
        total_count = func.count(Round.round_id)
        stmt = (
            select(
                Round.country_code,
                func.max(Round.country_name),
                total_count,
                correct_count,
            )
            .where(Round.status == RoundStatus.RESOLVED.value)
            .group_by(Round.country_code)
            .having(total_count >= min_attempts)
        )
        result = await self.db.execute(stmt)
        return [(code, name, int(total), int(correct or 0)) for code, name, total, correct in result.all()]
