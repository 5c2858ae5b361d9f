"""
core/profiles.py – ProfileService class.
Update chỉ nhận ProfileUpdate (displayName, photoURL, dietaryPreferences,
favoriteCuisines). Field do server quản lý bị reject ở tầng schema.
"""
import asyncio
import logging
from typing import Optional

from ..db.models import UserProfile, utcnow
from ..db.session import Database, lock_row
from ..errors import NotFoundError
from ..models import ProfileOut, ProfileUpdate
from .views import profile_view

logger = logging.getLogger(__name__)


class ProfileService:

    def __init__(self, database: Database) -> None:
        self._db = database

    async def get(self, user_id: str) -> ProfileOut:
        return await asyncio.get_event_loop().run_in_executor(None, self._do_get, user_id)

    async def update(self, user_id: str, data: ProfileUpdate, email: Optional[str] = None) -> ProfileOut:
        """Cập nhật profile; tạo mới nếu user chưa có profile."""
        return await asyncio.get_event_loop().run_in_executor(None, self._do_update, user_id, data, email)

    def _do_get(self, user_id: str) -> ProfileOut:
        with self._db.session() as session:
            user = session.get(UserProfile, user_id)
            if user is None:
                raise NotFoundError("User profile not found")
            return profile_view(user)

    def _do_update(self, user_id: str, data: ProfileUpdate, email: Optional[str]) -> ProfileOut:
        with self._db.session() as session:
            user = lock_row(session, UserProfile, user_id)
            if user is None:
                user = UserProfile(id=user_id, email=email, review_count=0)
                session.add(user)
                logger.info("Profile created for %s", user_id)

            for name, value in data.model_dump(exclude_unset=True).items():
                setattr(user, name, list(value) if isinstance(value, list) else value)
            user.updated_at = utcnow()
            session.flush()
            return profile_view(user)
