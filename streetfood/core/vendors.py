"""
core/vendors.py – VendorService class.
Trách nhiệm: CRUD vendor, top-rated, favorite/unfavorite.

Aggregate fields (rating, reviewCount, hygieneRating, ...) không bao giờ lấy
từ payload của client: create đặt về 0, update không có các field này.
"""
import asyncio
import logging
from typing import Optional

from ..db.models import Vendor, utcnow
from ..db.session import Database, get_or_create_user, lock_row
from ..errors import NotFoundError, UnauthorizedError
from ..models import FavoriteResult, PriceRange, VendorCreate, VendorOut, VendorUpdate
from .search import ALL_CATEGORIES, build_search_keywords
from .views import vendor_view

logger = logging.getLogger(__name__)

TOP_RATED_LIMIT = 10


def _normalize_categories(categories: list[str]) -> list[str]:
    seen: list[str] = []
    for c in categories:
        c = c.strip().lower()
        if c and c not in seen:
            seen.append(c)
    return seen


def _price_avg(price: PriceRange) -> Optional[float]:
    if price.avg is not None:
        return price.avg
    if price.min is not None and price.max is not None:
        return (price.min + price.max) / 2
    return None


class VendorService:
    """CRUD + favorites cho vendors."""

    def __init__(self, database: Database) -> None:
        self._db = database

    # ── Public ─────────────────────────────────────────────────────────────────

    async def get(self, vendor_id: str) -> VendorOut:
        return await asyncio.get_event_loop().run_in_executor(None, self._do_get, vendor_id)

    async def create(self, data: VendorCreate, user_id: str) -> VendorOut:
        return await asyncio.get_event_loop().run_in_executor(None, self._do_create, data, user_id)

    async def update(self, vendor_id: str, data: VendorUpdate, user_id: str) -> VendorOut:
        return await asyncio.get_event_loop().run_in_executor(
            None, self._do_update, vendor_id, data, user_id
        )

    async def top_rated(self, category: str = "All", limit: int = TOP_RATED_LIMIT) -> list[VendorOut]:
        """Vendors rating cao nhất, lọc theo category (trừ 'All')."""
        return await asyncio.get_event_loop().run_in_executor(None, self._fetch_top_rated, category, limit)

    async def add_favorite(self, vendor_id: str, user_id: str) -> FavoriteResult:
        return await asyncio.get_event_loop().run_in_executor(
            None, self._set_favorite, vendor_id, user_id, True
        )

    async def remove_favorite(self, vendor_id: str, user_id: str) -> FavoriteResult:
        return await asyncio.get_event_loop().run_in_executor(
            None, self._set_favorite, vendor_id, user_id, False
        )

    # ── Private ────────────────────────────────────────────────────────────────

    def _do_get(self, vendor_id: str) -> VendorOut:
        with self._db.session() as session:
            vendor = session.get(Vendor, vendor_id)
            if vendor is None:
                raise NotFoundError("Vendor not found")
            return vendor_view(vendor)

    def _do_create(self, data: VendorCreate, user_id: str) -> VendorOut:
        vendor = Vendor(
            name=data.name.strip(),
            cuisine=data.cuisine.strip(),
            categories=_normalize_categories(data.categories),
            description=data.description,
            address=data.address.model_dump(),
            latitude=data.location.latitude,
            longitude=data.location.longitude,
            is_vegetarian=data.is_vegetarian,
            images=list(data.images),
            cleanliness=data.hygiene.cleanliness,
            ingredients=data.hygiene.ingredients,
            water_safety=data.hygiene.water_safety,
            price_min=data.price_range.min,
            price_max=data.price_range.max,
            price_avg=_price_avg(data.price_range),
            rating=0.0,
            review_count=0,
            hygiene_rating=0.0,
            hygiene_review_count=0,
            favorite_count=0,
            favorite_users=[],
            search_keywords=build_search_keywords(data.name, data.cuisine, data.address.area),
            created_by=user_id,
            created_at=utcnow(),
        )
        with self._db.session() as session:
            session.add(vendor)
            session.flush()
            logger.info("Vendor created: %s by %s", vendor.id, user_id)
            return vendor_view(vendor)

    def _do_update(self, vendor_id: str, data: VendorUpdate, user_id: str) -> VendorOut:
        with self._db.session() as session:
            vendor = lock_row(session, Vendor, vendor_id)
            if vendor is None:
                raise NotFoundError("Vendor not found")
            if vendor.created_by != user_id:
                raise UnauthorizedError("Not authorized to update this vendor")

            fields = data.model_dump(exclude_unset=True)
            if data.name is not None:
                vendor.name = data.name.strip()
            if data.cuisine is not None:
                vendor.cuisine = data.cuisine.strip()
            if "categories" in fields:
                vendor.categories = _normalize_categories(data.categories or [])
            if "description" in fields:
                vendor.description = data.description or ""
            if data.address is not None:
                vendor.address = data.address.model_dump()
            if data.location is not None:
                vendor.latitude = data.location.latitude
                vendor.longitude = data.location.longitude
            if data.hygiene is not None:
                vendor.cleanliness = data.hygiene.cleanliness
                vendor.ingredients = data.hygiene.ingredients
                vendor.water_safety = data.hygiene.water_safety
            if data.is_vegetarian is not None:
                vendor.is_vegetarian = data.is_vegetarian
            if data.price_range is not None:
                vendor.price_min = data.price_range.min
                vendor.price_max = data.price_range.max
                vendor.price_avg = _price_avg(data.price_range)
            if data.images is not None:
                vendor.images = list(data.images)

            area = (vendor.address or {}).get("area", "")
            vendor.search_keywords = build_search_keywords(vendor.name, vendor.cuisine, area)
            vendor.updated_at = utcnow()
            session.flush()
            return vendor_view(vendor)

    def _fetch_top_rated(self, category: str, limit: int) -> list[VendorOut]:
        wanted = (category or "").strip().lower()
        with self._db.session() as session:
            rows = session.query(Vendor).order_by(Vendor.rating.desc(), Vendor.created_at, Vendor.id).all()
            if wanted and wanted != ALL_CATEGORIES:
                rows = [r for r in rows if wanted in (r.categories or [])]
            return [vendor_view(r) for r in rows[:limit]]

    def _set_favorite(self, vendor_id: str, user_id: str, favorite: bool) -> FavoriteResult:
        """Cập nhật vendor.favoriteUsers/favoriteCount và user.favoriteVendors trong 1 transaction."""
        with self._db.session() as session:
            vendor = lock_row(session, Vendor, vendor_id)
            if vendor is None:
                raise NotFoundError("Vendor not found")
            user = get_or_create_user(session, user_id)

            users = list(vendor.favorite_users or [])
            vendors = list(user.favorite_vendors or [])
            if favorite and user_id not in users:
                users.append(user_id)
            elif not favorite and user_id in users:
                users.remove(user_id)
            if favorite and vendor_id not in vendors:
                vendors.append(vendor_id)
            elif not favorite and vendor_id in vendors:
                vendors.remove(vendor_id)

            vendor.favorite_users = users
            vendor.favorite_count = len(users)
            user.favorite_vendors = vendors
            return FavoriteResult(favorite=favorite, favorite_count=vendor.favorite_count)
