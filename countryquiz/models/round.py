"""Round model: one flag question and its resolution."""
from sqlalchemy import Column, String, Integer, Boolean, DateTime, ForeignKey, Index, text
from sqlalchemy.orm import relationship, validates
import uuid
from datetime import datetime, UTC
from countryquiz.database import Base
from countryquiz.models.base import get_uuid_column, RoundStatus

SNAPSHOT_FIELDS = ("country_code", "country_name", "flag_url")


class Round(Base):
    """A single question-answer cycle for a player."""
    __tablename__ = "rounds"

    round_id = get_uuid_column(primary_key=True, default=uuid.uuid4)
    player_id = Column(Integer, ForeignKey("players.player_id", ondelete="CASCADE"), nullable=False, index=True)
    status = Column(String(20), nullable=False, default=RoundStatus.PENDING.value)  # pending, resolved, abandoned
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(UTC), nullable=False, index=True)

    # Question snapshot, frozen at creation
    country_code = Column(String(8), nullable=False)
    country_name = Column(String(255), nullable=False)
    flag_url = Column(String(500), nullable=True)

    # Resolution
    submitted_answer = Column(String(255), nullable=True)
    is_correct = Column(Boolean, default=False, nullable=False)
    points = Column(Integer, default=0, nullable=False)
    elapsed_seconds = Column(Integer, nullable=True)
    resolved_at = Column(DateTime(timezone=True), nullable=True)

    player = relationship("Player", back_populates="rounds")

    __table_args__ = (
        Index("ix_rounds_player_status", "player_id", "status"),
        Index("ix_rounds_country_code", "country_code"),
        # At most one pending round per player
        Index(
            "uq_rounds_pending_player",
            "player_id",
            unique=True,
            sqlite_where=text("status = 'pending'"),
            postgresql_where=text("status = 'pending'"),
        ),
    )

    @validates(*SNAPSHOT_FIELDS)
    def _freeze_snapshot(self, key, value):
        current = self.__dict__.get(key)
        if current is not None and current != value:
            raise ValueError(f"{key} is immutable once the round is created")
        return value

    @property
    def is_pending(self) -> bool:
        return self.status == RoundStatus.PENDING.value

    def __repr__(self):
        return f"<Round(round_id={self.round_id}, country={self.country_code}, status={self.status})>"
