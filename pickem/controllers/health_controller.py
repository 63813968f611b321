"""
Health controller - service check endpoint
"""

from fastapi import APIRouter
from pydantic import BaseModel

from pickem.database import Database


router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    database: str


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """
    Check that the API is up and the database is connected.
    """
    db_status = "connected" if Database.db is not None else "disconnected"

    return HealthResponse(
        status="ok",
        database=db_status
    )
