"""The caller's own profile."""

from fastapi import APIRouter, Depends, HTTPException

from src.api.deps import get_current_user, get_store
from src.api.schemas import ProfileUpdate, UserProfileResponse
from src.data.base import FundingStore
from src.engine.profiles import apply_profile_update
from src.models.user import SessionUser

router = APIRouter(prefix="/api/v1/user", tags=["user"])


@router.get("", response_model=UserProfileResponse)
async def get_profile(
    user: SessionUser = Depends(get_current_user),
    store: FundingStore = Depends(get_store),
):
    profile = await store.get_profile(user.id)
    if profile is None:
        raise HTTPException(status_code=404, detail="User not found")
    return UserProfileResponse.from_profile(profile)


@router.patch("", response_model=UserProfileResponse)
async def update_profile(
    req: ProfileUpdate,
    user: SessionUser = Depends(get_current_user),
    store: FundingStore = Depends(get_store),
):
    profile = await store.get_profile(user.id)
    if profile is None:
        raise HTTPException(status_code=404, detail="User not found")

    changes = req.model_dump(exclude_unset=True, exclude={"physician_profile", "investor_profile"})
    updated = apply_profile_update(
        profile,
        changes,
        physician=req.physician_profile.model_dump(exclude_unset=True) if req.physician_profile else None,
        investor=req.investor_profile.model_dump(exclude_unset=True) if req.investor_profile else None,
    )
    saved = await store.save_profile(updated)
    return UserProfileResponse.from_profile(saved)
