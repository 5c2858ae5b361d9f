"""
core/search.py – VendorSearchService class.
Trách nhiệm: query vendors theo filter (keyword, hygiene, cuisine, category,
khoảng cách, giá) và sort theo key được chọn.

Pipeline:
  1. fetch candidates từ DB (predicate SQL: hygiene, cuisine; predicate trên
     JSON array: keyword, category – áp dụng tuần tự sau khi fetch)
  2. có origin → tính distance, bỏ vendor ngoài bán kính
  3. lọc theo giá trung bình khi client gửi minPrice/maxPrice (độc lập với origin)
  4. sort: distance ↑ | rating ↓ | hygieneRating ↓
Blocking calls được wrap trong run_in_executor để không block event loop.
"""
import asyncio
import logging
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from ..db.models import Vendor
from ..db.session import Database
from ..models import VendorOut
from .geo import haversine_km
from .views import vendor_view

logger = logging.getLogger(__name__)

MIN_TOKEN_LEN = 3
DEFAULT_RADIUS_KM = 5.0
DEFAULT_PRICE_RANGE = (0.0, 1000.0)
SORT_KEYS = {"distance", "rating", "hygieneRating"}
ALL_CATEGORIES = "all"


def tokenize(text: str) -> list[str]:
    """Lower-case, tách theo khoảng trắng, bỏ token < 3 ký tự, dedup giữ thứ tự."""
    seen: set[str] = set()
    tokens: list[str] = []
    for word in text.lower().split():
        if len(word) >= MIN_TOKEN_LEN and word not in seen:
            seen.add(word)
            tokens.append(word)
    return tokens


def build_search_keywords(name: str, cuisine: str, area: str = "") -> list[str]:
    return tokenize(f"{name} {cuisine} {area}")


@dataclass(frozen=True)
class SearchParams:
    origin:             Optional[tuple[float, float]] = None
    radius_km:          float = DEFAULT_RADIUS_KM
    text_query:         str = ""
    min_hygiene_rating: float = 0.0
    cuisines:           Optional[Sequence[str]] = None
    category:           Optional[str] = None
    price_range:        Optional[tuple[float, float]] = None
    sort_by:            str = "distance"


class VendorSearchService:
    """Search/filter/sort vendors. Không cache, không phân trang."""

    def __init__(self, database: Database) -> None:
        self._db = database

    # ── Public ─────────────────────────────────────────────────────────────────

    async def search(self, params: SearchParams) -> list[VendorOut]:
        candidates = await asyncio.get_event_loop().run_in_executor(
            None, self._fetch_candidates, params
        )
        results = self.filter_and_sort(candidates, params)
        logger.info("[Search] %d candidates → %d results (sort=%s)", len(candidates), len(results), params.sort_by)
        return results

    # ── Pipeline (pure) ────────────────────────────────────────────────────────

    @classmethod
    def filter_and_sort(cls, candidates: Iterable[VendorOut], params: SearchParams) -> list[VendorOut]:
        vendors = list(candidates)
        if params.origin is not None:
            vendors = cls._within_radius(vendors, params.origin, params.radius_km)
        if params.price_range is not None:
            vendors = cls._within_price(vendors, params.price_range)
        return cls._sort(vendors, params.sort_by)

    @staticmethod
    def _within_radius(vendors: list[VendorOut], origin: tuple[float, float], radius_km: float) -> list[VendorOut]:
        lat, lon = origin
        kept: list[VendorOut] = []
        for v in vendors:
            if v.location is None:
                logger.warning("Vendor %s has no location, skipped in distance filter", v.id)
                continue
            distance = haversine_km(lat, lon, v.location.latitude, v.location.longitude)
            if distance <= radius_km:
                kept.append(v.model_copy(update={"distance": distance}))
        return kept

    @staticmethod
    def _within_price(vendors: list[VendorOut], price_range: tuple[float, float]) -> list[VendorOut]:
        low, high = price_range
        return [
            v for v in vendors
            if v.price_range.avg is None or low <= v.price_range.avg <= high
        ]

    @staticmethod
    def _sort(vendors: list[VendorOut], sort_by: str) -> list[VendorOut]:
        if sort_by == "rating":
            return sorted(vendors, key=lambda v: v.rating, reverse=True)
        if sort_by == "hygieneRating":
            return sorted(vendors, key=lambda v: v.hygiene_rating, reverse=True)
        if sort_by not in SORT_KEYS:
            logger.debug("Unknown sortBy %r, falling back to distance", sort_by)
        # vendor không có distance giữ nguyên thứ tự fetch, xếp sau
        return sorted(vendors, key=lambda v: (v.distance is None, v.distance or 0.0))

    # ── Private: ORM ───────────────────────────────────────────────────────────

    def _fetch_candidates(self, params: SearchParams) -> list[VendorOut]:
        with self._db.session() as session:
            q = session.query(Vendor)
            if params.min_hygiene_rating > 0:
                q = q.filter(Vendor.hygiene_rating >= params.min_hygiene_rating)
            if params.cuisines:
                q = q.filter(Vendor.cuisine.in_(list(params.cuisines)))
            rows = q.order_by(Vendor.created_at, Vendor.id).all()
            vendors = [vendor_view(r) for r in rows]

        tokens = tokenize(params.text_query)
        if tokens:
            wanted = set(tokens)
            vendors = [v for v in vendors if wanted.intersection(v.search_keywords)]

        category = (params.category or "").strip().lower()
        if category and category != ALL_CATEGORIES:
            vendors = [v for v in vendors if category in v.categories]
        return vendors
