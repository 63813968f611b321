from motor.motor_asyncio import AsyncIOMotorDatabase

from pickem.core.config import Settings
from pickem.models.user import UserProfile, default_username
from pickem.repositories.profile_repository import ProfileRepository, profile_doc_id


class ProfileService:
    def __init__(self, db: AsyncIOMotorDatabase, settings: Settings):
        self.profile_repo = ProfileRepository(db)
        self.settings = settings

    def new_profile(self, app_id: str, user_id: str) -> UserProfile:
        """Starting balances for a user, not yet stored."""
        return UserProfile(
            _id=profile_doc_id(app_id, user_id),
            app_id=app_id,
            user_id=user_id,
            username=default_username(user_id),
            predictor_points=self.settings.initial_predictor_points,
            winner_bucks=self.settings.initial_winner_bucks,
            weekly_entries={},
        )

    async def get_or_create(self, app_id: str, user_id: str) -> UserProfile:
        """Get the user's profile, creating the starting balances on first access."""
        return await self.profile_repo.get_or_create(
            app_id,
            user_id,
            predictor_points=self.settings.initial_predictor_points,
            winner_bucks=self.settings.initial_winner_bucks,
        )
