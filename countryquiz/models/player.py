"""Player model: identity and cumulative quiz statistics."""
from sqlalchemy import Column, Integer, BigInteger, String, DateTime
from sqlalchemy.orm import relationship
from datetime import datetime, UTC
from countryquiz.database import Base


class Player(Base):
    """A quiz player identified by an external chat/account key."""
    __tablename__ = "players"

    # Autoincrement key also records insertion order (leaderboard tie-break)
    player_id = Column(Integer, primary_key=True, autoincrement=True)
    external_key = Column(BigInteger, unique=True, nullable=False, index=True)
    username = Column(String(100), nullable=True)
    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)

    total_score = Column(Integer, default=0, nullable=False)
    correct_answers = Column(Integer, default=0, nullable=False)
    incorrect_answers = Column(Integer, default=0, nullable=False)

    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(UTC), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
        nullable=False,
    )

    rounds = relationship(
        "Round",
        back_populates="player",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def total_games(self) -> int:
        return (self.correct_answers or 0) + (self.incorrect_answers or 0)

    @property
    def accuracy(self) -> float:
        """Percentage of correct answers, 0.0 when nothing has been answered."""
        total = self.total_games
        if total == 0:
            return 0.0
        return (self.correct_answers * 100.0) / total

    @property
    def display_name(self) -> str:
        return self.first_name or self.username or f"Player {self.external_key}"

    def __repr__(self):
        return (f"<Player(player_id={self.player_id}, external_key={self.external_key}, "
                f"total_score={self.total_score})>")
