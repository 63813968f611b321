"""
FastAPI dependencies for DB, settings and the odds provider
"""

from typing import Annotated, Optional

from fastapi import Depends, Query, Request
from motor.motor_asyncio import AsyncIOMotorDatabase

from pickem.core.config import Settings, get_settings
from pickem.database import get_database
from pickem.services.odds_client import OddsApiClient


def get_odds_client(request: Request) -> OddsApiClient:
    """
    The odds client shared with the scheduler, created in the app lifespan.

    Falls back to a fresh client when the lifespan did not run (tests).
    """
    client = getattr(request.app.state, "odds_client", None)
    if client is None:
        client = OddsApiClient(get_settings())
        request.app.state.odds_client = client
    return client


def get_app_id(
    settings: Annotated[Settings, Depends(get_settings)],
    app_id: Optional[str] = Query(None, description="Tenant / app identifier"),
) -> str:
    return app_id or settings.default_app_id


# Type aliases so endpoints stay readable
Database = Annotated[AsyncIOMotorDatabase, Depends(get_database)]
AppSettings = Annotated[Settings, Depends(get_settings)]
OddsClient = Annotated[OddsApiClient, Depends(get_odds_client)]
AppId = Annotated[str, Depends(get_app_id)]
