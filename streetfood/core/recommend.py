"""
core/recommend.py – Recommender class.
Heuristic cố định (không train, không lưu score):

    score = 3·[user ăn chay ∧ vendor chay] + 2·[cuisine ∈ favoriteCuisines]
            + hygieneRating + rating
"""
import asyncio
import logging
from typing import Iterable

from ..db.models import UserProfile, Vendor
from ..db.session import Database
from ..errors import NotFoundError
from ..models import ScoredVendor, VendorOut
from .search import ALL_CATEGORIES
from .views import vendor_view

logger = logging.getLogger(__name__)

CANDIDATE_LIMIT = 20
RESULT_LIMIT = 10
VEGETARIAN = "vegetarian"
VEGETARIAN_WEIGHT = 3.0
CUISINE_WEIGHT = 2.0


def score_vendor(vendor: VendorOut, dietary: set[str], cuisines: set[str]) -> float:
    score = 0.0
    if VEGETARIAN in dietary and vendor.is_vegetarian:
        score += VEGETARIAN_WEIGHT
    if vendor.cuisine in cuisines:
        score += CUISINE_WEIGHT
    return score + vendor.hygiene_rating + vendor.rating


def rank_vendors(
    vendors: Iterable[VendorOut],
    dietary: Iterable[str],
    cuisines: Iterable[str],
    limit: int = RESULT_LIMIT,
) -> list[ScoredVendor]:
    """Score + stable sort giảm dần; hoà điểm giữ thứ tự fetch."""
    diet, fav = set(dietary), set(cuisines)
    scored = [
        ScoredVendor(**v.model_dump(), recommendation_score=score_vendor(v, diet, fav))
        for v in vendors
    ]
    scored.sort(key=lambda s: s.recommendation_score, reverse=True)
    return scored[:limit]


class Recommender:
    """Gợi ý vendor theo sở thích user."""

    def __init__(self, database: Database) -> None:
        self._db = database

    async def recommend(self, user_id: str, category: str = "All") -> list[ScoredVendor]:
        dietary, cuisines, candidates = await asyncio.get_event_loop().run_in_executor(
            None, self._load, user_id, category
        )
        ranked = rank_vendors(candidates, dietary, cuisines)
        logger.info("[Recommend] user=%s category=%s → %d vendors", user_id, category, len(ranked))
        return ranked

    def _load(self, user_id: str, category: str) -> tuple[list[str], list[str], list[VendorOut]]:
        wanted = (category or "").strip().lower()
        with self._db.session() as session:
            user = session.get(UserProfile, user_id)
            if user is None:
                raise NotFoundError("User not found")
            dietary = [d.lower() for d in (user.dietary_preferences or [])]
            cuisines = list(user.favorite_cuisines or [])

            q = session.query(Vendor).order_by(Vendor.created_at, Vendor.id)
            if not wanted or wanted == ALL_CATEGORIES:
                rows = q.limit(CANDIDATE_LIMIT).all()
            else:
                rows = [r for r in q.all() if wanted in (r.categories or [])][:CANDIDATE_LIMIT]
            return dietary, cuisines, [vendor_view(r) for r in rows]
