"""
Integration tests for Weeks, Leaderboard and Admin API endpoints
"""

import pytest

from factories import CHIEFS, TEST_APP_ID, WEEK_ID
from pickem.models.leaderboard import Leaderboard, LeaderboardEntry
from pickem.repositories.week_repository import week_doc_id


def stored_leaderboard():
    return Leaderboard(
        _id=week_doc_id(TEST_APP_ID, WEEK_ID),
        app_id=TEST_APP_ID,
        week_id=WEEK_ID,
        entries=[
            LeaderboardEntry(rank=1, user_id="bob", username="Bobby", total_correct_picks=2,
                             total_winner_bucks_won=5.0, tie_breaker_points=44),
            LeaderboardEntry(rank=2, user_id="alice", username="Ally", total_correct_picks=1,
                             total_winner_bucks_won=6.0, tie_breaker_points=50),
        ],
        actual_tie_breaker_total_points=48,
    )


class TestHealthEndpoints:
    @pytest.mark.asyncio
    async def test_health(self, client):
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok", "database": "connected"}

    @pytest.mark.asyncio
    async def test_root(self, client):
        response = await client.get("/")

        assert response.status_code == 200
        assert response.json()["docs"] == "/docs"


class TestWeeksEndpoints:
    """Test suite for /weeks endpoints."""

    @pytest.mark.asyncio
    async def test_current_week_not_loaded(self, client):
        response = await client.get("/weeks/current")

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_current_week(self, client, current_week):
        response = await client.get("/weeks/current")

        assert response.status_code == 200
        data = response.json()
        assert data["week_id"] == current_week.week_id
        assert [g["id"] for g in data["games"]] == ["game1", "game2"]
        assert data["tie_breaker_game_id"] == "game2"
        assert "version" not in data

    @pytest.mark.asyncio
    async def test_fetch_odds(self, client):
        """Test POST /weeks/current/odds"""
        response = await client.post("/weeks/current/odds")

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["message"] == f"NFL Week {data['week_id']} games updated."
        assert [g["id"] for g in data["games"]] == ["game1", "game2"]
        assert data["games"][0]["odds"]["moneyline"][CHIEFS] == -150

        week = await client.get("/weeks/current")
        assert week.status_code == 200
        assert week.json()["tie_breaker_game_id"] == "game2"

    @pytest.mark.asyncio
    async def test_fetch_odds_bad_payload(self, client, provider_records):
        provider_records["odds"] = [{"id": "broken"}]

        response = await client.post("/weeks/current/odds")

        assert response.status_code == 502

    @pytest.mark.asyncio
    async def test_fetch_odds_without_key(self, client, settings):
        settings.odds_api_key = None

        response = await client.post("/weeks/current/odds")

        assert response.status_code == 500


class TestLeaderboardEndpoints:
    """Test suite for /leaderboard endpoints."""

    @pytest.mark.asyncio
    async def test_leaderboard_not_built(self, client):
        response = await client.get(f"/leaderboard/{WEEK_ID}")

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_leaderboard(self, client, test_db):
        await test_db["leaderboards"].insert_one(stored_leaderboard().model_dump(by_alias=True))

        response = await client.get(f"/leaderboard/{WEEK_ID}?user_id=alice")

        assert response.status_code == 200
        data = response.json()
        assert [e["user_id"] for e in data["entries"]] == ["bob", "alice"]
        assert data["actual_tie_breaker_total_points"] == 48
        assert data["user_position"]["rank"] == 2

    @pytest.mark.asyncio
    async def test_leaderboard_user_not_ranked(self, client, test_db):
        await test_db["leaderboards"].insert_one(stored_leaderboard().model_dump(by_alias=True))

        response = await client.get(f"/leaderboard/{WEEK_ID}?user_id=ghost")

        assert response.json()["user_position"] is None


class TestAdminEndpoints:
    """Test suite for /admin endpoints."""

    @pytest.mark.asyncio
    async def test_reconcile(self, client, test_db):
        """Test POST /admin/reconcile"""
        response = await client.post("/admin/reconcile")

        assert response.status_code == 200
        data = response.json()
        assert data["app_id"] == TEST_APP_ID
        assert data["games_added"] == 2
        assert data["aborted"] is False
        assert await test_db["weeks"].count_documents({}) == 1

    @pytest.mark.asyncio
    async def test_reconcile_for_tenant(self, client, test_db):
        response = await client.post("/admin/reconcile?app_id=other-app")

        assert response.json()["app_id"] == "other-app"
        assert await test_db["weeks"].count_documents({"app_id": "other-app"}) == 1

    @pytest.mark.asyncio
    async def test_reconcile_without_key(self, client, settings):
        settings.odds_api_key = None

        response = await client.post("/admin/reconcile")

        assert response.status_code == 500
