"""routes/vendors.py – /api/vendors: search, top-rated, recommended, CRUD, favorite"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from ..core.auth import AuthUser
from ..core.recommend import Recommender
from ..core.search import DEFAULT_PRICE_RANGE, DEFAULT_RADIUS_KM, SearchParams, VendorSearchService
from ..core.vendors import VendorService
from ..deps import get_current_user, get_recommender, get_search, get_vendors
from ..errors import AppError
from ..models import FavoriteResult, ScoredVendor, VendorCreate, VendorOut, VendorUpdate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/vendors", tags=["Vendors"])


@router.get("", response_model=list[VendorOut])
async def list_vendors(
    latitude:         Optional[float] = Query(default=None, ge=-90, le=90),
    longitude:        Optional[float] = Query(default=None, ge=-180, le=180),
    radius:           float = Query(default=DEFAULT_RADIUS_KM, gt=0, description="Bán kính (km)"),
    q:                str = Query(default="", description="Từ khoá (khớp nguyên token, ≥3 ký tự)"),
    minHygieneRating: float = Query(default=0, ge=0, le=5),
    cuisine:          Optional[list[str]] = Query(default=None),
    category:         Optional[str] = Query(default=None),
    minPrice:         Optional[float] = Query(default=None, ge=0),
    maxPrice:         Optional[float] = Query(default=None, ge=0),
    sortBy:           str = Query(default="distance", description="distance | rating | hygieneRating"),
    search: VendorSearchService = Depends(get_search),
):
    if (latitude is None) != (longitude is None):
        raise HTTPException(status_code=400, detail="latitude and longitude must be given together")
    price_range = None
    if minPrice is not None or maxPrice is not None:
        # thiếu 1 đầu → lấy mặc định 0 / 1000
        low, high = DEFAULT_PRICE_RANGE
        price_range = (
            minPrice if minPrice is not None else low,
            maxPrice if maxPrice is not None else high,
        )
    params = SearchParams(
        origin=(latitude, longitude) if latitude is not None else None,
        radius_km=radius,
        text_query=q,
        min_hygiene_rating=minHygieneRating,
        cuisines=cuisine,
        category=category,
        price_range=price_range,
        sort_by=sortBy,
    )
    try:
        return await search.search(params)
    except AppError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    except Exception:
        logger.exception("Error getting vendors")
        raise HTTPException(status_code=500, detail="Failed to get vendors")


@router.get("/top-rated", response_model=list[VendorOut])
async def top_rated(
    category: str = Query(default="All"),
    limit:    int = Query(default=10, ge=1, le=50),
    vendors: VendorService = Depends(get_vendors),
):
    try:
        return await vendors.top_rated(category, limit)
    except AppError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    except Exception:
        logger.exception("Error getting top rated vendors")
        raise HTTPException(status_code=500, detail="Failed to get top rated vendors")


@router.get("/recommended", response_model=list[ScoredVendor])
async def recommended(
    category: str = Query(default="All"),
    user: AuthUser = Depends(get_current_user),
    recommender: Recommender = Depends(get_recommender),
):
    """Tối đa 10 vendor, xếp theo điểm sở thích + chất lượng."""
    try:
        return await recommender.recommend(user.uid, category)
    except AppError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    except Exception:
        logger.exception("Error getting recommended vendors")
        raise HTTPException(status_code=500, detail="Failed to get recommended vendors")


@router.get("/{vendor_id}", response_model=VendorOut)
async def get_vendor(vendor_id: str, vendors: VendorService = Depends(get_vendors)):
    try:
        return await vendors.get(vendor_id)
    except AppError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    except Exception:
        logger.exception("Error getting vendor")
        raise HTTPException(status_code=500, detail="Failed to get vendor")


@router.post("", response_model=VendorOut, status_code=201)
async def create_vendor(
    body: VendorCreate,
    user: AuthUser = Depends(get_current_user),
    vendors: VendorService = Depends(get_vendors),
):
    try:
        return await vendors.create(body, user.uid)
    except AppError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    except Exception:
        logger.exception("Error adding vendor")
        raise HTTPException(status_code=500, detail="Failed to add vendor")


@router.put("/{vendor_id}", response_model=VendorOut)
async def update_vendor(
    vendor_id: str,
    body: VendorUpdate,
    user: AuthUser = Depends(get_current_user),
    vendors: VendorService = Depends(get_vendors),
):
    try:
        return await vendors.update(vendor_id, body, user.uid)
    except AppError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    except Exception:
        logger.exception("Error updating vendor")
        raise HTTPException(status_code=500, detail="Failed to update vendor")


@router.post("/{vendor_id}/favorite", response_model=FavoriteResult)
async def add_favorite(
    vendor_id: str,
    user: AuthUser = Depends(get_current_user),
    vendors: VendorService = Depends(get_vendors),
):
    try:
        return await vendors.add_favorite(vendor_id, user.uid)
    except AppError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    except Exception:
        logger.exception("Error adding vendor to favorites")
        raise HTTPException(status_code=500, detail="Failed to add vendor to favorites")


@router.delete("/{vendor_id}/favorite", response_model=FavoriteResult)
async def remove_favorite(
    vendor_id: str,
    user: AuthUser = Depends(get_current_user),
    vendors: VendorService = Depends(get_vendors),
):
    try:
        return await vendors.remove_favorite(vendor_id, user.uid)
    except AppError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    except Exception:
        logger.exception("Error removing vendor from favorites")
        raise HTTPException(status_code=500, detail="Failed to remove vendor from favorites")
