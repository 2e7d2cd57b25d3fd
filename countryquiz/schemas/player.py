"""Player-related schemas."""
from typing import Optional
from pydantic import BaseModel, Field

from countryquiz.schemas.base import BaseSchema, UTCDateTime


class RegisterPlayerRequest(BaseModel):
    """Get-or-create request sent by the chat transport on first contact."""
    external_key: int
    username: Optional[str] = Field(default=None, max_length=100)
    first_name: Optional[str] = Field(default=None, max_length=100)
    last_name: Optional[str] = Field(default=None, max_length=100)


class PlayerResponse(BaseSchema):
    external_key: int
    username: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    display_name: str
    total_score: int
    correct_answers: int
    incorrect_answers: int
    accuracy: float
    created_at: UTCDateTime


class StatisticsSummary(BaseSchema):
    total_games: int
    correct: int
    incorrect: int
    accuracy: float
    total_score: int


class StatisticsResponse(StatisticsSummary):
    text: str


class LeaderboardEntry(BaseSchema):
    rank: int
    external_key: int
    display_name: str
    total_score: int
    accuracy: float


class LeaderboardResponse(BaseSchema):
    entries: list[LeaderboardEntry]
    text: str
