"""Tests for the HTTP API."""
import uuid

import pytest
from httpx import AsyncClient, ASGITransport


API_BASE_URL = "http://test"


def client_for(app) -> AsyncClient:
    return AsyncClient(transport=ASGITransport(app=app), base_url=API_BASE_URL)


async def register(client: AsyncClient, external_key: int, **fields) -> dict:
    response = await client.post("/players", json={"external_key": external_key, **fields})
    assert response.status_code == 200
    return response.json()


async def stored_country_name(client: AsyncClient, external_key: int, round_id: str) -> str:
    response = await client.get(f"/players/{external_key}/rounds")
    assert response.status_code == 200
    return next(item["country_name"] for item in response.json() if item["round_id"] == round_id)


@pytest.mark.asyncio
async def test_register_player_is_idempotent(test_app):
    async with client_for(test_app) as client:
        created = await register(client, 1001, username="flagger", first_name="Ada")
        again = await register(client, 1001, first_name="Someone else")

    assert created["external_key"] == 1001
    assert created["display_name"] == "Ada"
    assert created["total_score"] == 0
    assert created["accuracy"] == 0.0
    assert created["created_at"].endswith("Z")
    assert again["first_name"] == "Ada"


@pytest.mark.asyncio
async def test_unknown_player_returns_404_with_code(test_app):
    async with client_for(test_app) as client:
        response = await client.get("/players/424242")

    assert response.status_code == 404
    assert response.json()["code"] == "player_not_found"


@pytest.mark.asyncio
async def test_full_round_flow(test_app):
    async with client_for(test_app) as client:
        await register(client, 2002, first_name="Bo")

        start = await client.post("/players/2002/rounds")
        assert start.status_code == 200
        question = start.json()
        assert len(question["options"]) == 4
        assert question["flag_url"].startswith("https://")

        active = await client.get("/players/2002/rounds/active")
        assert active.status_code == 200
        assert active.json()["round_id"] == question["round_id"]

        name = await stored_country_name(client, 2002, question["round_id"])
        assert name in question["options"]

        answer = await client.post(f"/rounds/{question['round_id']}/answer", json={"answer": f"  {name.lower()} "})
        assert answer.status_code == 200
        body = answer.json()
        assert body["round"]["status"] == "resolved"
        assert body["round"]["is_correct"] is True
        assert body["round"]["points"] == 10
        assert body["player"]["total_score"] == 10
        assert "Correct" in body["message"]

        again = await client.post(f"/rounds/{question['round_id']}/answer", json={"answer": name})
        assert again.status_code == 409
        assert again.json()["code"] == "round_already_resolved"

        no_active = await client.get("/players/2002/rounds/active")
        assert no_active.status_code == 409
        assert no_active.json()["code"] == "no_active_round"

        stats = await client.get("/players/2002/statistics")
        assert stats.status_code == 200
        assert stats.json()["total_games"] == 1
        assert stats.json()["accuracy"] == 100.0
        assert "Games played: 1" in stats.json()["text"]


@pytest.mark.asyncio
async def test_wrong_answer_and_abandon(test_app):
    async with client_for(test_app) as client:
        await register(client, 3003)

        first = (await client.post("/players/3003/rounds")).json()
        wrong = await client.post(f"/rounds/{first['round_id']}/answer", json={"answer": "Atlantis"})
        assert wrong.status_code == 200
        assert wrong.json()["round"]["points"] == -5
        assert wrong.json()["player"]["total_score"] == -5

        second = (await client.post("/players/3003/rounds")).json()
        abandoned = await client.post("/players/3003/rounds/abandon")
        assert abandoned.json() == {"abandoned": True, "round_id": second["round_id"]}

        nothing = await client.post("/players/3003/rounds/abandon")
        assert nothing.json() == {"abandoned": False, "round_id": None}

        late = await client.post(f"/rounds/{second['round_id']}/answer", json={"answer": "Germany"})
        assert late.status_code == 409


@pytest.mark.asyncio
async def test_start_round_requires_registration(test_app):
    async with client_for(test_app) as client:
        response = await client.post("/players/5005/rounds")

    assert response.status_code == 404
    assert response.json()["code"] == "player_not_found"


@pytest.mark.asyncio
async def test_active_round_without_pending_round(test_app):
    async with client_for(test_app) as client:
        await register(client, 5006)
        response = await client.get("/players/5006/rounds/active")

    assert response.status_code == 409
    assert response.json() == {
        "detail": "No active round. Start a new game first.",
        "code": "no_active_round",
    }


@pytest.mark.asyncio
async def test_answer_unknown_round(test_app):
    async with client_for(test_app) as client:
        response = await client.post(f"/rounds/{uuid.uuid4()}/answer", json={"answer": "Germany"})

    assert response.status_code == 404
    assert response.json()["code"] == "round_not_found"


@pytest.mark.asyncio
async def test_leaderboard(test_app):
    async with client_for(test_app) as client:
        for key, name in [(11, "Ann"), (12, "Ben"), (13, "Cid")]:
            await register(client, key, first_name=name)
        # Ben answers wrong once and drops below the others
        round_data = (await client.post("/players/12/rounds")).json()
        await client.post(f"/rounds/{round_data['round_id']}/answer", json={"answer": "Atlantis"})

        response = await client.get("/leaderboard", params={"limit": 2})

    assert response.status_code == 200
    data = response.json()
    assert [entry["display_name"] for entry in data["entries"]] == ["Ann", "Cid"]
    assert [entry["rank"] for entry in data["entries"]] == [1, 2]
    assert "🥇 *Ann*" in data["text"]


@pytest.mark.asyncio
async def test_reset_and_delete_player(test_app):
    async with client_for(test_app) as client:
        await register(client, 4004)
        round_data = (await client.post("/players/4004/rounds")).json()
        await client.post(f"/rounds/{round_data['round_id']}/answer", json={"answer": "Atlantis"})

        reset = await client.post("/players/4004/reset")
        assert reset.status_code == 200
        assert reset.json()["total_score"] == 0
        assert reset.json()["incorrect_answers"] == 0

        deleted = await client.delete("/players/4004")
        assert deleted.status_code == 204

        missing = await client.get("/players/4004")
        assert missing.status_code == 404


@pytest.mark.asyncio
async def test_country_endpoints(test_app):
    async with client_for(test_app) as client:
        count = await client.get("/countries/count")
        germany = await client.get("/countries/deu")
        missing = await client.get("/countries/XXX")
        search = await client.get("/countries/search", params={"q": "united"})

    assert count.json() == {"count": 12, "source": "fallback"}
    assert germany.json()["name"] == "Germany"
    assert germany.json()["capital"] == "Berlin"
    assert missing.status_code == 404
    assert missing.json()["code"] == "country_not_found"
    assert [item["code"] for item in search.json()] == ["USA", "GBR"]


@pytest.mark.asyncio
async def test_country_statistics_endpoints(test_app):
    async with client_for(test_app) as client:
        await register(client, 6006)
        for _ in range(3):
            round_data = (await client.post("/players/6006/rounds")).json()
            await client.post(f"/rounds/{round_data['round_id']}/answer", json={"answer": "Atlantis"})

        stats = await client.get("/countries/statistics")
        hardest = await client.get("/countries/hardest", params={"min_attempts": 1, "limit": 5})

    assert stats.status_code == 200
    assert sum(item["total_games"] for item in stats.json()) == 3
    assert all(item["success_rate"] == 0.0 for item in hardest.json())


@pytest.mark.asyncio
async def test_validation_error_shape(test_app):
    async with client_for(test_app) as client:
        response = await client.post("/players", json={"username": "no key"})

    assert response.status_code == 422
    assert response.json()["code"] == "validation_error"


@pytest.mark.asyncio
async def test_health_and_status(test_app):
    async with client_for(test_app) as client:
        health = await client.get("/health")
        status = await client.get("/status")

    assert health.status_code == 200
    assert health.json()["status"] == "ok"
    assert health.json()["catalog"]["countries"] == 12
    assert status.json()["rules"] == {"options_count": 4, "points_correct": 10, "points_incorrect": -5}
    assert "/play" in status.json()["help"]
