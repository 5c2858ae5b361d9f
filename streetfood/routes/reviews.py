"""routes/reviews.py – GET /api/vendors/{id}/reviews, POST/DELETE /api/reviews, helpful toggle"""
import logging

from fastapi import APIRouter, Depends, HTTPException

from ..core.auth import AuthUser
from ..core.reviews import ReviewService
from ..deps import get_current_user, get_reviews
from ..errors import AppError
from ..models import HelpfulResult, ReviewCreate, ReviewOut, SuccessResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Reviews"])


@router.get("/api/vendors/{vendor_id}/reviews", response_model=list[ReviewOut])
async def vendor_reviews(vendor_id: str, reviews: ReviewService = Depends(get_reviews)):
    """Reviews mới nhất trước; mỗi review có `user` {uid, displayName, photoURL}."""
    try:
        return await reviews.list_for_vendor(vendor_id)
    except AppError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    except Exception:
        logger.exception("Error getting reviews")
        raise HTTPException(status_code=500, detail="Failed to get reviews")


@router.post("/api/reviews", response_model=ReviewOut, status_code=201)
async def create_review(
    body: ReviewCreate,
    user: AuthUser = Depends(get_current_user),
    reviews: ReviewService = Depends(get_reviews),
):
    try:
        return await reviews.create(body, user.uid)
    except AppError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    except Exception:
        logger.exception("Error adding review")
        raise HTTPException(status_code=500, detail="Failed to add review")


@router.delete("/api/reviews/{review_id}", response_model=SuccessResponse)
async def delete_review(
    review_id: str,
    user: AuthUser = Depends(get_current_user),
    reviews: ReviewService = Depends(get_reviews),
):
    try:
        await reviews.delete(review_id, user.uid)
        return SuccessResponse()
    except AppError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    except Exception:
        logger.exception("Error deleting review")
        raise HTTPException(status_code=500, detail="Failed to delete review")


@router.post("/api/reviews/{review_id}/helpful", response_model=HelpfulResult)
async def toggle_helpful(
    review_id: str,
    user: AuthUser = Depends(get_current_user),
    reviews: ReviewService = Depends(get_reviews),
):
    try:
        return await reviews.toggle_helpful(review_id, user.uid)
    except AppError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    except Exception:
        logger.exception("Error marking review as helpful")
        raise HTTPException(status_code=500, detail="Failed to mark review as helpful")
