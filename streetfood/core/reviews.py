"""
core/reviews.py – ReviewService class.
Trách nhiệm: các write path của review và read path có join tác giả.

Mỗi mutation là 1 transaction duy nhất:
  - create: insert review + cập nhật rating/hygiene của vendor + user.reviewCount +1
  - delete: xoá review + đảo ngược đóng góp vào aggregate + user.reviewCount -1
  - toggle_helpful: read-check-write helpfulUsers/helpfulCount
Thiếu 1 bước thì rollback toàn bộ.
"""
import asyncio
import logging

from ..db.models import Review, UserProfile, Vendor, utcnow
from ..db.session import Database, get_or_create_user, lock_row
from ..errors import NotFoundError, UnauthorizedError, ValidationError
from ..models import HelpfulResult, ReviewCreate, ReviewOut
from .ratings import add_rating, remove_rating
from .views import ANONYMOUS_AUTHOR, author_view, review_view

logger = logging.getLogger(__name__)


class ReviewService:
    """Reviews + incremental rating aggregation."""

    def __init__(self, database: Database) -> None:
        self._db = database

    # ── Public ─────────────────────────────────────────────────────────────────

    async def list_for_vendor(self, vendor_id: str) -> list[ReviewOut]:
        """Reviews mới nhất trước, kèm snippet tác giả (batch fetch 1 query)."""
        return await asyncio.get_event_loop().run_in_executor(None, self._fetch_for_vendor, vendor_id)

    async def create(self, data: ReviewCreate, user_id: str) -> ReviewOut:
        if not data.vendor_id or data.rating is None:
            raise ValidationError("Missing required fields")
        return await asyncio.get_event_loop().run_in_executor(None, self._do_create, data, user_id)

    async def delete(self, review_id: str, user_id: str) -> None:
        await asyncio.get_event_loop().run_in_executor(None, self._do_delete, review_id, user_id)

    async def toggle_helpful(self, review_id: str, user_id: str) -> HelpfulResult:
        return await asyncio.get_event_loop().run_in_executor(
            None, self._do_toggle_helpful, review_id, user_id
        )

    # ── Private: read ──────────────────────────────────────────────────────────

    def _fetch_for_vendor(self, vendor_id: str) -> list[ReviewOut]:
        with self._db.session() as session:
            rows = (
                session.query(Review)
                .filter(Review.vendor_id == vendor_id)
                .order_by(Review.created_at.desc(), Review.id)
                .all()
            )
            author_ids = {r.user_id for r in rows}
            authors = {}
            if author_ids:
                profiles = session.query(UserProfile).filter(UserProfile.id.in_(author_ids)).all()
                authors = {p.id: author_view(p) for p in profiles}
            return [review_view(r, authors.get(r.user_id, ANONYMOUS_AUTHOR)) for r in rows]

    # ── Private: write ─────────────────────────────────────────────────────────

    def _do_create(self, data: ReviewCreate, user_id: str) -> ReviewOut:
        with self._db.session() as session:
            vendor = lock_row(session, Vendor, data.vendor_id)
            if vendor is None:
                raise NotFoundError("Vendor not found")

            review = Review(
                vendor_id=vendor.id,
                user_id=user_id,
                rating=data.rating,
                hygiene_rating=data.hygiene_rating,
                text=data.text,
                images=list(data.images),
                helpful_count=0,
                helpful_users=[],
                created_at=utcnow(),
            )
            session.add(review)

            vendor.rating, vendor.review_count = add_rating(
                vendor.rating or 0.0, vendor.review_count or 0, data.rating
            )
            if data.hygiene_rating is not None:
                vendor.hygiene_rating, vendor.hygiene_review_count = add_rating(
                    vendor.hygiene_rating or 0.0, vendor.hygiene_review_count or 0, data.hygiene_rating
                )

            user = get_or_create_user(session, user_id)
            user.review_count = (user.review_count or 0) + 1

            session.flush()
            logger.info(
                "Review %s added to vendor %s → rating=%.1f (%d reviews)",
                review.id, vendor.id, vendor.rating, vendor.review_count,
            )
            return review_view(review)

    def _do_delete(self, review_id: str, user_id: str) -> None:
        with self._db.session() as session:
            review = lock_row(session, Review, review_id)
            if review is None:
                raise NotFoundError("Review not found")
            if review.user_id != user_id:
                raise UnauthorizedError("Not authorized to delete this review")

            vendor = lock_row(session, Vendor, review.vendor_id)
            if vendor is not None:
                vendor.rating, vendor.review_count = remove_rating(
                    vendor.rating or 0.0, vendor.review_count or 0, review.rating
                )
                if review.hygiene_rating is not None:
                    vendor.hygiene_rating, vendor.hygiene_review_count = remove_rating(
                        vendor.hygiene_rating or 0.0, vendor.hygiene_review_count or 0, review.hygiene_rating
                    )

            user = lock_row(session, UserProfile, user_id)
            if user is not None:
                user.review_count = max((user.review_count or 0) - 1, 0)

            session.delete(review)
            logger.info("Review %s deleted by %s", review_id, user_id)

    def _do_toggle_helpful(self, review_id: str, user_id: str) -> HelpfulResult:
        with self._db.session() as session:
            review = lock_row(session, Review, review_id)
            if review is None:
                raise NotFoundError("Review not found")

            users = list(review.helpful_users or [])
            if user_id in users:
                users = [u for u in users if u != user_id]
                helpful = False
            else:
                users.append(user_id)
                helpful = True
            review.helpful_users = users
            review.helpful_count = len(users)
            return HelpfulResult(helpful=helpful, helpful_count=review.helpful_count)
