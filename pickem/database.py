"""
🔌 Database Connection Setup - MongoDB

Centralized connection handling for the document store.
"""

import logging
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from pickem.core.config import get_settings

logger = logging.getLogger(__name__)


class Database:
    """Singleton holding the MongoDB connection"""

    client: Optional[AsyncIOMotorClient] = None
    db: Optional[AsyncIOMotorDatabase] = None

    @classmethod
    async def connect(cls):
        """Connect to MongoDB"""
        if cls.client is None:
            settings = get_settings()

            cls.client = AsyncIOMotorClient(
                settings.mongodb_uri,
                maxPoolSize=10,
                minPoolSize=2,
                tz_aware=True,
            )
            cls.db = cls.client[settings.mongodb_db_name]

            # Connection check
            await cls.client.admin.command("ping")
            logger.info(f"✅ Connected to MongoDB: {settings.mongodb_db_name}")

    @classmethod
    async def disconnect(cls):
        """Close the connection"""
        if cls.client is not None:
            cls.client.close()
            cls.client = None
            cls.db = None
            logger.info("❌ Disconnected from MongoDB")

    @classmethod
    def get_db(cls) -> AsyncIOMotorDatabase:
        """Return the database instance"""
        if cls.db is None:
            raise RuntimeError("Database not connected. Call Database.connect() first.")
        return cls.db


# ============================================
# 🎯 DEPENDENCY for FastAPI
# ============================================

async def get_database() -> AsyncIOMotorDatabase:
    """
    FastAPI dependency that injects the DB

    Usage:
        @router.get("/profiles/{user_id}")
        async def get_profile(
            user_id: str,
            db: AsyncIOMotorDatabase = Depends(get_database)
        ):
            repo = ProfileRepository(db)
            return await repo.get(app_id, user_id)
    """
    return Database.get_db()


# ============================================
# 🏗️ INDEXES (run once on deployment)
# ============================================

async def create_indexes(db: AsyncIOMotorDatabase):
    """
    Create the indexes the settlement queries rely on.

    Safe to call on every startup; Mongo ignores existing indexes.
    """
    # Weeks
    await db.weeks.create_index([("app_id", 1), ("week_id", 1)], unique=True)

    # Submissions
    await db.submissions.create_index([("app_id", 1), ("week_id", 1), ("is_settled", 1)])
    await db.submissions.create_index([("app_id", 1), ("user_id", 1), ("week_id", 1)])
    await db.submissions.create_index("submitted_at")

    # Profiles
    await db.profiles.create_index([("app_id", 1), ("user_id", 1)], unique=True)

    # Leaderboards
    await db.leaderboards.create_index([("app_id", 1), ("week_id", 1)], unique=True)

    logger.info("✅ Indexes created successfully")
