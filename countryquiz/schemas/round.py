"""Round-related schemas."""
from typing import Optional
from uuid import UUID
from pydantic import BaseModel, Field

from countryquiz.schemas.base import BaseSchema, UTCDateTime
from countryquiz.schemas.player import PlayerResponse


class AnswerRequest(BaseModel):
    answer: str = Field(..., max_length=255)


class RoundDetails(BaseSchema):
    round_id: UUID
    status: str
    country_code: str
    country_name: str
    flag_url: Optional[str] = None
    submitted_answer: Optional[str] = None
    is_correct: bool
    points: int
    elapsed_seconds: Optional[int] = None
    created_at: UTCDateTime
    resolved_at: Optional[UTCDateTime] = None


class QuestionResponse(BaseSchema):
    """A pending round as shown to the player: the flag and the answer buttons."""
    round_id: UUID
    flag_url: Optional[str] = None
    prompt: str
    options: list[str]
    created_at: UTCDateTime


class AnswerResponse(BaseSchema):
    round: RoundDetails
    player: PlayerResponse
    message: str


class AbandonRoundResponse(BaseSchema):
    abandoned: bool
    round_id: Optional[UUID] = None
