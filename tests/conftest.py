"""
Pytest fixtures and configuration for all tests.
"""

import os

# pickem.main reads settings at import time
os.environ.setdefault("MONGODB_URI", "mongodb://localhost:27017")

import pytest
from typing import AsyncGenerator
from mongomock_motor import AsyncMongoMockClient

from factories import (
    BILLS,
    CHIEFS,
    COWBOYS,
    EAGLES,
    GAME1_KICKOFF,
    GAME2_KICKOFF,
    TEST_APP_ID,
    TEST_DB_NAME,
    make_game,
    odds_record,
)
from pickem.core.config import Settings


@pytest.fixture
def settings() -> Settings:
    return Settings(
        mongodb_uri="mongodb://localhost:27017",
        mongodb_db_name=TEST_DB_NAME,
        default_app_id=TEST_APP_ID,
        odds_api_key="test-odds-key",
        week_timezone="America/New_York",
        scheduler_enabled=False,
    )


@pytest.fixture
async def test_db() -> AsyncGenerator:
    """
    Provide a clean in-memory database for each test.

    Every mock client owns its own store, so nothing leaks between tests.
    """
    client = AsyncMongoMockClient()
    yield client[TEST_DB_NAME]


@pytest.fixture
def sample_odds_records():
    """Raw odds feed for a two game week."""
    return [
        odds_record("game1", CHIEFS, BILLS, "2026-10-25T17:00:00Z", -150, 130),
        odds_record("game2", COWBOYS, EAGLES, "2026-10-26T00:20:00Z", 110, -130),
    ]


@pytest.fixture
def game1():
    return make_game("game1", CHIEFS, BILLS, GAME1_KICKOFF)


@pytest.fixture
def game2():
    return make_game("game2", COWBOYS, EAGLES, GAME2_KICKOFF)
