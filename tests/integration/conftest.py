"""
Fixtures for integration tests
"""

from datetime import datetime, timedelta, timezone

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

from factories import BILLS, CHIEFS, COWBOYS, EAGLES, GAME1_KICKOFF, GAME2_KICKOFF, TEST_APP_ID, make_game
from pickem.core.config import get_settings
from pickem.database import Database
from pickem.main import app
from pickem.models.week import Week
from pickem.repositories.week_repository import week_doc_id
from pickem.services.odds_client import OddsApiClient
from pickem.services.week_clock import get_week_info


@pytest.fixture
def provider_records(sample_odds_records):
    """What the fake provider returns, tests may change it."""
    return {"odds": sample_odds_records, "scores": []}


@pytest.fixture
async def client(test_db, settings, provider_records):
    """
    HTTP client for testing API endpoints.

    Points the app at the test database, the test settings and a provider
    served from `provider_records`. The lifespan does not run.
    """
    def handler(request: httpx.Request) -> httpx.Response:
        feed = "odds" if request.url.path.endswith("/odds") else "scores"
        return httpx.Response(200, json=provider_records[feed])

    odds_http = httpx.AsyncClient(
        transport=httpx.MockTransport(handler),
        base_url=settings.odds_api_base_url,
    )

    # Store original db connection
    original_db = Database.db
    Database.db = test_db
    app.dependency_overrides[get_settings] = lambda: settings
    app.state.odds_client = OddsApiClient(settings, http_client=odds_http)

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    # Restore original state
    Database.db = original_db
    app.dependency_overrides.clear()
    app.state.odds_client = None
    await odds_http.aclose()


@pytest.fixture
async def current_week(test_db):
    """
    The wall-clock current week, with its betting window stretched around now.
    """
    now = datetime.now(timezone.utc)
    info = get_week_info(now)
    week = Week(
        _id=week_doc_id(TEST_APP_ID, info.week_id),
        app_id=TEST_APP_ID,
        week_id=info.week_id,
        betting_window_start=now - timedelta(hours=1),
        betting_window_end=now + timedelta(hours=1),
        picks_reveal_time=now + timedelta(hours=2),
        tie_breaker_game_id="game2",
        games=[
            make_game("game1", CHIEFS, BILLS, GAME1_KICKOFF),
            make_game("game2", COWBOYS, EAGLES, GAME2_KICKOFF),
        ],
    )
    await test_db["weeks"].insert_one(week.model_dump(by_alias=True))
    return week
