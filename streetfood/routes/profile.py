"""routes/profile.py – GET/PUT /api/profile"""
import logging

from fastapi import APIRouter, Depends, HTTPException

from ..core.auth import AuthUser
from ..core.profiles import ProfileService
from ..deps import get_current_user, get_profiles
from ..errors import AppError
from ..models import ProfileOut, ProfileUpdate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/profile", tags=["Profile"])


@router.get("", response_model=ProfileOut)
async def get_profile(
    user: AuthUser = Depends(get_current_user),
    profiles: ProfileService = Depends(get_profiles),
):
    try:
        return await profiles.get(user.uid)
    except AppError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    except Exception:
        logger.exception("Error getting user profile")
        raise HTTPException(status_code=500, detail="Failed to get user profile")


@router.put("", response_model=ProfileOut)
async def update_profile(
    body: ProfileUpdate,
    user: AuthUser = Depends(get_current_user),
    profiles: ProfileService = Depends(get_profiles),
):
    """Chỉ displayName, photoURL, dietaryPreferences, favoriteCuisines. Field khác → 400."""
    try:
        return await profiles.update(user.uid, body, email=user.email)
    except AppError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    except Exception:
        logger.exception("Error updating user profile")
        raise HTTPException(status_code=500, detail="Failed to update user profile")
