"""tests/conftest.py – shared fixtures for all tests."""
import itertools
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from jose import jwt

from streetfood.config import Settings
from streetfood.db.models import FoodTrail, UserProfile, Vendor
from streetfood.db.session import Database
from streetfood.deps import build_container
from streetfood.models import Location, PriceRange, VendorOut

SECRET = "test-secret"
MUMBAI = (19.0760, 72.8777)

_BASE_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)
_seq = itertools.count()


def _next_time() -> datetime:
    # created_at tăng dần → thứ tự fetch xác định
    return _BASE_TIME + timedelta(seconds=next(_seq))


def make_token(uid: str, **claims) -> str:
    return jwt.encode({"sub": uid, **claims}, SECRET, algorithm="HS256")


def auth(uid: str) -> dict:
    return {"Authorization": f"Bearer {make_token(uid)}"}


def make_view(**kw) -> VendorOut:
    """VendorOut không cần DB – dùng cho test pipeline thuần."""
    lat, lon = kw.pop("lat", MUMBAI[0]), kw.pop("lon", MUMBAI[1])
    avg = kw.pop("price_avg", 100.0)
    defaults = dict(
        id="v1", name="Test Chaat", cuisine="Chaat",
        location=Location(latitude=lat, longitude=lon),
        price_range=PriceRange(avg=avg),
        rating=0.0, hygiene_rating=0.0,
    )
    defaults.update(kw)
    return VendorOut(**defaults)


def add_vendor(db: Database, **kw) -> str:
    defaults = dict(
        name="Test Chaat", cuisine="Chaat", categories=["snacks"],
        address={"street": "", "area": "Dadar", "city": "Mumbai"},
        latitude=MUMBAI[0], longitude=MUMBAI[1],
        price_min=50.0, price_max=150.0, price_avg=100.0,
        rating=0.0, review_count=0, hygiene_rating=0.0, hygiene_review_count=0,
        search_keywords=["test", "chaat", "dadar"],
        created_at=_next_time(),
    )
    defaults.update(kw)
    with db.session() as session:
        vendor = Vendor(**defaults)
        session.add(vendor)
        session.flush()
        return vendor.id


def add_user(db: Database, uid: str, **kw) -> str:
    with db.session() as session:
        session.add(UserProfile(id=uid, **kw))
    return uid


def add_trail(db: Database, **kw) -> str:
    defaults = dict(name="Khau Galli Walk", category="evening", stops=[], created_at=_next_time())
    defaults.update(kw)
    with db.session() as session:
        trail = FoodTrail(**defaults)
        session.add(trail)
        session.flush()
        return trail.id


def load_vendor(db: Database, vendor_id: str) -> Vendor:
    with db.session() as session:
        return session.get(Vendor, vendor_id)


def load_user(db: Database, uid: str) -> UserProfile:
    with db.session() as session:
        return session.get(UserProfile, uid)


@pytest.fixture
def database(tmp_path):
    db = Database(f"sqlite:///{tmp_path / 'test.db'}")
    db.create_all()
    yield db
    db.dispose()


@pytest.fixture
def settings() -> Settings:
    return Settings(database_url="sqlite://", auth_secret=SECRET)


@pytest.fixture
def container(settings, database):
    return build_container(settings, database)


@pytest.fixture
def client(container):
    from streetfood.main import create_app
    return TestClient(create_app(container))
