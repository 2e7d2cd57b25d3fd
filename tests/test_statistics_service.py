"""Tests for StatisticsService."""
import pytest

from countryquiz.models.player import Player
from countryquiz.services.round_service import RoundService
from countryquiz.services.statistics_service import StatisticsService
from countryquiz.utils.exceptions import PlayerNotFoundError


async def play(service: RoundService, external_key: int, correct: bool):
    round_object = await service.start_new_round(external_key)
    answer = round_object.country_name if correct else "Atlantis"
    return await service.resolve(round_object.round_id, answer)


@pytest.mark.asyncio
async def test_summary_for_new_player(db_session, player_factory):
    player = await player_factory()

    summary = await StatisticsService(db_session).get_statistics_summary(player.external_key)

    assert summary.total_games == 0
    assert summary.accuracy == 0.0
    assert summary.total_score == 0


@pytest.mark.asyncio
async def test_summary_accuracy_rounded(db_session):
    db_session.add(Player(external_key=5150, total_score=45, correct_answers=5, incorrect_answers=1))
    await db_session.commit()

    summary = await StatisticsService(db_session).get_statistics_summary(5150)

    assert summary.total_games == 6
    assert summary.correct == 5
    assert summary.incorrect == 1
    assert summary.accuracy == 83.33
    assert summary.total_score == 45


@pytest.mark.asyncio
async def test_summary_unknown_player(db_session):
    with pytest.raises(PlayerNotFoundError):
        await StatisticsService(db_session).get_statistics_summary(1)


@pytest.mark.asyncio
async def test_country_statistics(db_session, germany_catalog, player_factory):
    first = await player_factory()
    second = await player_factory()
    rounds = RoundService(db_session, germany_catalog)

    await play(rounds, first.external_key, correct=True)
    await play(rounds, first.external_key, correct=False)
    await play(rounds, second.external_key, correct=True)
    # Pending rounds are not counted
    await rounds.start_new_round(second.external_key)

    stats = await StatisticsService(db_session).country_statistics()

    assert len(stats) == 1
    germany = stats[0]
    assert germany.country_code == "DEU"
    assert germany.country_name == "Germany"
    assert germany.total_games == 3
    assert germany.correct_answers == 2
    assert germany.success_rate == pytest.approx(66.67, abs=0.01)


@pytest.mark.asyncio
async def test_hardest_countries(db_session, catalog, germany_catalog, player_factory):
    player = await player_factory()
    germany_rounds = RoundService(db_session, germany_catalog)
    await play(germany_rounds, player.external_key, correct=False)
    await play(germany_rounds, player.external_key, correct=False)

    # Every other country answered correctly once
    other_rounds = RoundService(db_session, catalog)
    for _ in range(6):
        round_object = await other_rounds.start_new_round(player.external_key)
        if round_object.country_code == "DEU":
            await other_rounds.resolve(round_object.round_id, "Atlantis")
        else:
            await other_rounds.resolve(round_object.round_id, round_object.country_name)

    service = StatisticsService(db_session)
    hardest = await service.hardest_countries(min_attempts=1, limit=3)

    assert hardest[0].country_code == "DEU"
    assert hardest[0].success_rate == 0.0
    assert len(hardest) <= 3

    only_frequent = await service.hardest_countries(min_attempts=2)
    assert "DEU" in [item.country_code for item in only_frequent]
    assert all(item.total_games >= 2 for item in only_frequent)

    assert await service.hardest_countries(limit=0) == []
