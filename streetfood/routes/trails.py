"""routes/trails.py – /api/trails: list, detail, complete, favorite"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from ..core.auth import AuthUser
from ..core.trails import TrailService
from ..deps import get_current_user, get_trails
from ..errors import AppError
from ..models import SuccessResponse, TrailCompletion, TrailOut

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/trails", tags=["Food Trails"])


@router.get("", response_model=list[TrailOut])
async def list_trails(
    category: Optional[str] = Query(default=None),
    trails: TrailService = Depends(get_trails),
):
    try:
        return await trails.list_trails(category)
    except AppError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    except Exception:
        logger.exception("Error getting food trails")
        raise HTTPException(status_code=500, detail="Failed to get food trails")


@router.get("/{trail_id}", response_model=TrailOut)
async def get_trail(trail_id: str, trails: TrailService = Depends(get_trails)):
    """Trail kèm thông tin vendor đầy đủ cho từng stop."""
    try:
        return await trails.get(trail_id)
    except AppError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    except Exception:
        logger.exception("Error getting food trail")
        raise HTTPException(status_code=500, detail="Failed to get food trail")


@router.post("/{trail_id}/complete", response_model=TrailCompletion)
async def complete_trail(
    trail_id: str,
    user: AuthUser = Depends(get_current_user),
    trails: TrailService = Depends(get_trails),
):
    try:
        return await trails.complete(trail_id, user.uid)
    except AppError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    except Exception:
        logger.exception("Error marking trail as completed")
        raise HTTPException(status_code=500, detail="Failed to mark trail as completed")


@router.post("/{trail_id}/favorite", response_model=SuccessResponse)
async def save_favorite(
    trail_id: str,
    user: AuthUser = Depends(get_current_user),
    trails: TrailService = Depends(get_trails),
):
    try:
        return await trails.save_favorite(trail_id, user.uid)
    except AppError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    except Exception:
        logger.exception("Error saving trail to favorites")
        raise HTTPException(status_code=500, detail="Failed to save trail to favorites")


@router.delete("/{trail_id}/favorite", response_model=SuccessResponse)
async def remove_favorite(
    trail_id: str,
    user: AuthUser = Depends(get_current_user),
    trails: TrailService = Depends(get_trails),
):
    try:
        return await trails.remove_favorite(trail_id, user.uid)
    except AppError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    except Exception:
        logger.exception("Error removing trail from favorites")
        raise HTTPException(status_code=500, detail="Failed to remove trail from favorites")
