"""
core/trails.py – TrailService class.
Trách nhiệm: food trails – danh sách, chi tiết (embed vendor cho từng stop),
đánh dấu hoàn thành, lưu/bỏ yêu thích.
"""
import asyncio
import logging
from typing import Optional

from ..db.models import FoodTrail, Vendor
from ..db.session import Database, get_or_create_user, lock_row
from ..errors import NotFoundError
from ..models import SuccessResponse, TrailCompletion, TrailOut
from .views import trail_view, vendor_view

logger = logging.getLogger(__name__)


class TrailService:
    """Food trails: list / detail / complete / favorite."""

    def __init__(self, database: Database) -> None:
        self._db = database

    # ── Public ─────────────────────────────────────────────────────────────────

    async def list_trails(self, category: Optional[str] = None) -> list[TrailOut]:
        return await asyncio.get_event_loop().run_in_executor(None, self._fetch_all, category)

    async def get(self, trail_id: str) -> TrailOut:
        return await asyncio.get_event_loop().run_in_executor(None, self._fetch_one, trail_id)

    async def complete(self, trail_id: str, user_id: str) -> TrailCompletion:
        return await asyncio.get_event_loop().run_in_executor(None, self._do_complete, trail_id, user_id)

    async def save_favorite(self, trail_id: str, user_id: str) -> SuccessResponse:
        return await asyncio.get_event_loop().run_in_executor(
            None, self._set_favorite, trail_id, user_id, True
        )

    async def remove_favorite(self, trail_id: str, user_id: str) -> SuccessResponse:
        return await asyncio.get_event_loop().run_in_executor(
            None, self._set_favorite, trail_id, user_id, False
        )

    # ── Private ────────────────────────────────────────────────────────────────

    def _fetch_all(self, category: Optional[str]) -> list[TrailOut]:
        with self._db.session() as session:
            q = session.query(FoodTrail)
            if category:
                q = q.filter(FoodTrail.category == category)
            rows = q.order_by(FoodTrail.created_at.desc(), FoodTrail.id).all()
            return [trail_view(t) for t in rows]

    def _fetch_one(self, trail_id: str) -> TrailOut:
        with self._db.session() as session:
            trail = session.get(FoodTrail, trail_id)
            if trail is None:
                raise NotFoundError("Food trail not found")
            vendor_ids = {s.get("vendorId") for s in (trail.stops or []) if s.get("vendorId")}
            vendors = {}
            if vendor_ids:
                rows = session.query(Vendor).filter(Vendor.id.in_(vendor_ids)).all()
                vendors = {v.id: vendor_view(v) for v in rows}
            return trail_view(trail, vendors)

    def _do_complete(self, trail_id: str, user_id: str) -> TrailCompletion:
        with self._db.session() as session:
            trail = lock_row(session, FoodTrail, trail_id)
            if trail is None:
                raise NotFoundError("Food trail not found")
            user = get_or_create_user(session, user_id)
            completed = list(user.completed_trails or [])
            # mỗi user chỉ được đếm 1 lần
            if trail_id not in completed:
                completed.append(trail_id)
                user.completed_trails = completed
                trail.completion_count = (trail.completion_count or 0) + 1
            return TrailCompletion(completion_count=trail.completion_count)

    def _set_favorite(self, trail_id: str, user_id: str, favorite: bool) -> SuccessResponse:
        with self._db.session() as session:
            if session.get(FoodTrail, trail_id) is None:
                raise NotFoundError("Food trail not found")
            user = get_or_create_user(session, user_id)
            trails = [t for t in (user.favorite_trails or []) if t != trail_id]
            if favorite:
                trails.append(trail_id)
            user.favorite_trails = trails
            return SuccessResponse()
