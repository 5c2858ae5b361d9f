"""
db/session.py – Database handle: Engine + Session helper.

Một Database instance được tạo ở lifespan và inject vào các service
(không có engine global). Mỗi operation = 1 session = 1 transaction,
commit toàn bộ hoặc rollback toàn bộ.
"""
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Generator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from ..errors import StorageError
from .models import Base, UserProfile

logger = logging.getLogger(__name__)


class Database:
    """Engine + sessionmaker cho một DATABASE_URL."""

    def __init__(self, url: str, echo: bool = False) -> None:
        self._url = make_url(url)
        self._engine = self._create_engine(echo)
        self._factory = sessionmaker(bind=self._engine, expire_on_commit=False)

    @property
    def engine(self) -> Engine:
        return self._engine

    @property
    def is_sqlite(self) -> bool:
        return self._url.get_backend_name() == "sqlite"

    def create_all(self) -> None:
        Base.metadata.create_all(self._engine)

    def dispose(self) -> None:
        self._engine.dispose()

    @contextmanager
    def session(self) -> Generator[Session, None, None]:
        """Context manager trả về Session, tự commit/rollback/close."""
        session: Session = self._factory()
        try:
            yield session
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            logger.error("Transaction rolled back: %s", e)
            raise StorageError("Database operation failed") from e
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    # ── Private ────────────────────────────────────────────────────────────────

    def _create_engine(self, echo: bool) -> Engine:
        if not self.is_sqlite:
            return create_engine(self._url, echo=echo, pool_pre_ping=True)

        db_file = self._url.database
        if db_file and db_file != ":memory:":
            Path(db_file).parent.mkdir(parents=True, exist_ok=True)

        engine = create_engine(
            self._url,
            connect_args={"check_same_thread": False},
            echo=echo,
        )

        # pysqlite tự quản lý BEGIN → tắt đi, tự phát BEGIN IMMEDIATE để
        # read-modify-write của aggregate được serialize giữa các request.
        @event.listens_for(engine, "connect")
        def _on_connect(conn, _):
            conn.isolation_level = None
            conn.execute("PRAGMA journal_mode=WAL")
            conn.execute("PRAGMA synchronous=NORMAL")
            conn.execute("PRAGMA foreign_keys=ON")

        @event.listens_for(engine, "begin")
        def _on_begin(conn):
            conn.exec_driver_sql("BEGIN IMMEDIATE")

        return engine


# ── Row helpers (dùng trong transaction của service) ──────────────────────────

def lock_row(session: Session, model, row_id: str):
    """SELECT ... FOR UPDATE theo id. SQLite bỏ qua FOR UPDATE, đã serialize bằng BEGIN IMMEDIATE."""
    return (
        session.query(model)
        .filter(model.id == row_id)
        .with_for_update()
        .one_or_none()
    )


def get_or_create_user(session: Session, user_id: str) -> UserProfile:
    """Profile của user (tạo rỗng nếu chưa có) – dùng khi write path cần cập nhật user."""
    user = lock_row(session, UserProfile, user_id)
    if user is None:
        user = UserProfile(id=user_id, review_count=0)
        session.add(user)
    return user
