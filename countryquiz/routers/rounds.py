"""Rounds API router."""
from uuid import UUID
import logging

from fastapi import APIRouter, Depends, Query

from countryquiz.dependencies import get_round_service
from countryquiz.models.round import Round
from countryquiz.schemas.player import PlayerResponse
from countryquiz.schemas.round import (
    AbandonRoundResponse,
    AnswerRequest,
    AnswerResponse,
    QuestionResponse,
    RoundDetails,
)
from countryquiz.services.formatting import QUESTION_PROMPT, describe_outcome
from countryquiz.services.round_service import RoundService
from countryquiz.utils.exceptions import NoActiveRoundError

logger = logging.getLogger(__name__)

router = APIRouter()


def _question_response(round_service: RoundService, round_object: Round) -> QuestionResponse:
    question = round_service.build_question(round_object)
    return QuestionResponse(
        round_id=round_object.round_id,
        flag_url=round_object.flag_url,
        prompt=QUESTION_PROMPT,
        options=[option.name for option in question.options],
        created_at=round_object.created_at,
    )


@router.post("/players/{external_key}/rounds", response_model=QuestionResponse)
async def start_round(
    external_key: int,
    round_service: RoundService = Depends(get_round_service),
):
    """Start a new round, abandoning any pending one."""
    round_object = await round_service.start_new_round(external_key)
    return _question_response(round_service, round_object)


@router.get("/players/{external_key}/rounds/active", response_model=QuestionResponse)
async def get_active_round(
    external_key: int,
    round_service: RoundService = Depends(get_round_service),
):
    round_object = await round_service.active_round(external_key)
    if round_object is None:
        raise NoActiveRoundError()
    return _question_response(round_service, round_object)


@router.post("/players/{external_key}/rounds/abandon", response_model=AbandonRoundResponse)
async def abandon_round(
    external_key: int,
    round_service: RoundService = Depends(get_round_service),
):
    round_object = await round_service.abandon(external_key)
    if round_object is None:
        return AbandonRoundResponse(abandoned=False)
    return AbandonRoundResponse(abandoned=True, round_id=round_object.round_id)


@router.get("/players/{external_key}/rounds", response_model=list[RoundDetails])
async def get_recent_rounds(
    external_key: int,
    limit: int = Query(default=10, ge=1, le=100),
    round_service: RoundService = Depends(get_round_service),
):
    """The player's latest rounds, newest first."""
    rounds = await round_service.recent_rounds(external_key, limit)
    return [RoundDetails.model_validate(round_object) for round_object in rounds]


@router.post("/rounds/{round_id}/answer", response_model=AnswerResponse)
async def submit_answer(
    round_id: UUID,
    request: AnswerRequest,
    round_service: RoundService = Depends(get_round_service),
):
    """Resolve a pending round with the player's answer."""
    round_object = await round_service.resolve(round_id, request.answer)
    player = await round_service.player_service.get_player_by_id(round_object.player_id)
    return AnswerResponse(
        round=RoundDetails.model_validate(round_object),
        player=PlayerResponse.model_validate(player),
        message=describe_outcome(round_object),
    )
