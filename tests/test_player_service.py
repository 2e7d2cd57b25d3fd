"""Tests for the player ledger."""
import pytest

from countryquiz.models.player import Player
from countryquiz.services.player_service import PlayerService
from countryquiz.utils.exceptions import PlayerNotFoundError


async def add_player(db_session, external_key: int, total_score: int = 0,
                     correct: int = 0, incorrect: int = 0, first_name: str | None = None) -> Player:
    player = Player(
        external_key=external_key,
        first_name=first_name,
        total_score=total_score,
        correct_answers=correct,
        incorrect_answers=incorrect,
    )
    db_session.add(player)
    await db_session.commit()
    return player


@pytest.mark.asyncio
async def test_get_or_create_creates_with_zero_stats(db_session):
    service = PlayerService(db_session)

    player = await service.get_or_create(4242, username="quizfan", first_name="Ada")

    assert player.player_id is not None
    assert player.total_score == 0
    assert player.correct_answers == 0
    assert player.incorrect_answers == 0
    assert player.display_name == "Ada"


@pytest.mark.asyncio
async def test_get_or_create_returns_existing_unchanged(db_session):
    service = PlayerService(db_session)
    first = await service.get_or_create(4242, username="quizfan", first_name="Ada")

    second = await service.get_or_create(4242, username="renamed", first_name="Bob")

    assert second.player_id == first.player_id
    assert second.username == "quizfan"
    assert second.first_name == "Ada"
    assert len(await service.list_players()) == 1


@pytest.mark.asyncio
async def test_display_name_fallbacks(player_factory):
    with_username = await player_factory(username="flagger")
    anonymous = await player_factory(external_key=777)

    assert with_username.display_name == "flagger"
    assert anonymous.display_name == "Player 777"


@pytest.mark.asyncio
async def test_get_player_unknown_raises(db_session):
    service = PlayerService(db_session)

    with pytest.raises(PlayerNotFoundError):
        await service.get_player(999)
    assert await service.find_player(999) is None
    assert await service.player_exists(999) is False


@pytest.mark.asyncio
async def test_accuracy_zero_without_answers(player_factory):
    player = await player_factory()

    assert player.accuracy == 0.0
    assert player.total_games == 0


@pytest.mark.asyncio
async def test_apply_outcome_accumulates(db_session, player_factory):
    service = PlayerService(db_session)
    player = await player_factory()

    for _ in range(5):
        player = await service.apply_outcome(player, True, 10)
    player = await service.apply_outcome(player, False, -5)

    assert player.correct_answers == 5
    assert player.incorrect_answers == 1
    assert player.total_score == 45
    assert player.accuracy == pytest.approx(83.33, abs=0.01)


@pytest.mark.asyncio
async def test_apply_outcome_allows_negative_score(db_session, player_factory):
    service = PlayerService(db_session)
    player = await player_factory()

    player = await service.apply_outcome(player, False, -5)

    assert player.total_score == -5
    assert player.incorrect_answers == 1


@pytest.mark.asyncio
async def test_top_players_ordered_by_score(db_session):
    for index, score in enumerate([500, 1000, 250, 750, 900]):
        await add_player(db_session, external_key=10 + index, total_score=score)
    service = PlayerService(db_session)

    top = await service.top_players(3)

    assert [player.total_score for player in top] == [1000, 900, 750]


@pytest.mark.asyncio
async def test_top_players_ties_keep_registration_order(db_session):
    await add_player(db_session, external_key=1, total_score=100, first_name="First")
    await add_player(db_session, external_key=2, total_score=200, first_name="Leader")
    await add_player(db_session, external_key=3, total_score=100, first_name="Second")
    service = PlayerService(db_session)

    top = await service.top_players(10)

    assert [player.first_name for player in top] == ["Leader", "First", "Second"]


@pytest.mark.asyncio
async def test_top_players_limits(db_session):
    for index in range(12):
        await add_player(db_session, external_key=100 + index, total_score=index)
    service = PlayerService(db_session)

    assert len(await service.top_players()) == 10
    assert await service.top_players(0) == []
    assert await service.top_players(-1) == []


@pytest.mark.asyncio
async def test_reset_stats(db_session):
    await add_player(db_session, external_key=55, total_score=120, correct=12, incorrect=3)
    service = PlayerService(db_session)

    player = await service.reset_stats(55)

    assert player.total_score == 0
    assert player.correct_answers == 0
    assert player.incorrect_answers == 0


@pytest.mark.asyncio
async def test_delete_player(db_session, player_factory):
    await player_factory(external_key=31337)
    service = PlayerService(db_session)

    await service.delete_player(31337)

    assert await service.find_player(31337) is None
    with pytest.raises(PlayerNotFoundError):
        await service.delete_player(31337)
