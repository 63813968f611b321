"""
API entry point
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from pickem.core.config import get_settings
from pickem.core.logging_config import setup_logging
from pickem.database import Database, create_indexes
from pickem.services.odds_client import OddsApiClient
from pickem.services.scheduler_service import SchedulerService

from pickem.controllers.health_controller import router as health_router
from pickem.controllers.weeks_controller import router as weeks_router
from pickem.controllers.submissions_controller import router as submissions_router
from pickem.controllers.profiles_controller import router as profiles_router
from pickem.controllers.leaderboard_controller import router as leaderboard_router
from pickem.controllers.admin_controller import router as admin_router

settings = get_settings()

# Parse CORS origins
CORS_ORIGINS = [origin.strip() for origin in settings.cors_origins.split(",") if origin.strip()]


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(settings)
    await Database.connect()
    await create_indexes(Database.get_db())

    odds_client = OddsApiClient(settings)
    app.state.odds_client = odds_client

    scheduler = SchedulerService(settings, Database.get_db, odds_client)
    if settings.scheduler_enabled:
        scheduler.start()

    yield

    await scheduler.shutdown()
    await Database.disconnect()

app = FastAPI(
    title="Pick'em Settlement API",
    description="Weekly NFL pick'em settlement and leaderboards",
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_methods=["GET", "POST"],
    allow_headers=["Content-Type"],
)

app.include_router(health_router)
app.include_router(weeks_router)
app.include_router(submissions_router)
app.include_router(profiles_router)
app.include_router(leaderboard_router)
app.include_router(admin_router)


@app.get("/")
async def root():
    # Root endpoint, confirms the API is up
    return {
        "name": "Pick'em Settlement API",
        "version": "1.0.0",
        "docs": "/docs"
    }
