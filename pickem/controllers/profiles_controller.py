"""
Profiles controller - balances and weekly entry counts
"""

from fastapi import APIRouter

from pickem.core.dependencies import AppId, AppSettings, Database
from pickem.models.user import ProfileResponse
from pickem.services.profile_service import ProfileService


router = APIRouter(prefix="/profiles", tags=["profiles"])


@router.get("/{user_id}", response_model=ProfileResponse)
async def get_profile(
    user_id: str,
    db: Database,
    settings: AppSettings,
    app_id: AppId
):
    """
    Get a user's profile, creating it with the starting balances on first read.
    """
    profile_service = ProfileService(db, settings)
    profile = await profile_service.get_or_create(app_id, user_id)

    return ProfileResponse(**profile.model_dump(exclude={"id", "app_id"}))
