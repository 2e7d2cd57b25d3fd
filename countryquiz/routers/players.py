"""Player API router."""
from fastapi import APIRouter, Depends, Query, Response

from countryquiz.dependencies import get_player_service, get_statistics_service
from countryquiz.schemas.player import (
    LeaderboardEntry,
    LeaderboardResponse,
    PlayerResponse,
    RegisterPlayerRequest,
    StatisticsResponse,
)
from countryquiz.services.formatting import format_leaderboard, format_statistics
from countryquiz.services.player_service import PlayerService
from countryquiz.services.statistics_service import StatisticsService
import logging

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/players", response_model=PlayerResponse)
async def register_player(
    request: RegisterPlayerRequest,
    player_service: PlayerService = Depends(get_player_service),
):
    """Get or create the player for an external account."""
    player = await player_service.get_or_create(
        request.external_key,
        username=request.username,
        first_name=request.first_name,
        last_name=request.last_name,
    )
    return PlayerResponse.model_validate(player)


@router.get("/players/{external_key}", response_model=PlayerResponse)
async def get_player(
    external_key: int,
    player_service: PlayerService = Depends(get_player_service),
):
    player = await player_service.get_player(external_key)
    return PlayerResponse.model_validate(player)


@router.get("/players/{external_key}/statistics", response_model=StatisticsResponse)
async def get_player_statistics(
    external_key: int,
    statistics_service: StatisticsService = Depends(get_statistics_service),
):
    """Totals and accuracy, plus the chat-ready text."""
    summary = await statistics_service.get_statistics_summary(external_key)
    return StatisticsResponse(**summary.model_dump(), text=format_statistics(summary))


@router.post("/players/{external_key}/reset", response_model=PlayerResponse)
async def reset_player_stats(
    external_key: int,
    player_service: PlayerService = Depends(get_player_service),
):
    player = await player_service.reset_stats(external_key)
    return PlayerResponse.model_validate(player)


@router.delete("/players/{external_key}", status_code=204)
async def delete_player(
    external_key: int,
    player_service: PlayerService = Depends(get_player_service),
):
    """Remove a player and all of their rounds."""
    await player_service.delete_player(external_key)
    return Response(status_code=204)


@router.get("/leaderboard", response_model=LeaderboardResponse)
async def get_leaderboard(
    limit: int | None = Query(default=None, ge=1, le=100),
    player_service: PlayerService = Depends(get_player_service),
):
    """Top players by total score."""
    players = await player_service.top_players(limit)
    entries = [
        LeaderboardEntry(
            rank=index + 1,
            external_key=player.external_key,
            display_name=player.display_name,
            total_score=player.total_score,
            accuracy=round(player.accuracy, 2),
        )
        for index, player in enumerate(players)
    ]
    return LeaderboardResponse(entries=entries, text=format_leaderboard(players))
