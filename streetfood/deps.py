"""
deps.py – Dependency Injection.

Container được build 1 lần trong lifespan (hoặc truyền vào create_app khi
test) và gắn lên app.state. Routes lấy service qua các getter bên dưới,
không có singleton ở cấp module.
"""
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .config import Settings
from .core.auth import AuthUser, TokenVerifier
from .core.profiles import ProfileService
from .core.recommend import Recommender
from .core.reviews import ReviewService
from .core.search import VendorSearchService
from .core.trails import TrailService
from .core.vendors import VendorService
from .db.session import Database
from .errors import UnauthorizedError

_bearer = HTTPBearer(auto_error=False)


@dataclass
class Container:
    database:    Database
    verifier:    TokenVerifier
    vendors:     VendorService
    search:      VendorSearchService
    recommender: Recommender
    reviews:     ReviewService
    trails:      TrailService
    profiles:    ProfileService


def build_container(settings: Settings, database: Optional[Database] = None) -> Container:
    db = database or Database(settings.database_url)
    verifier = TokenVerifier(
        secret=settings.auth_secret,
        algorithm=settings.auth_algorithm,
        audience=settings.auth_audience,
        issuer=settings.auth_issuer,
    )
    return Container(
        database=db,
        verifier=verifier,
        vendors=VendorService(db),
        search=VendorSearchService(db),
        recommender=Recommender(db),
        reviews=ReviewService(db),
        trails=TrailService(db),
        profiles=ProfileService(db),
    )


# ── Getters (dùng trong routes) ────────────────────────────────────────────────

def get_container(request: Request) -> Container:
    return request.app.state.container

def get_vendors(request: Request)     -> VendorService:       return get_container(request).vendors
def get_search(request: Request)      -> VendorSearchService: return get_container(request).search
def get_recommender(request: Request) -> Recommender:         return get_container(request).recommender
def get_reviews(request: Request)     -> ReviewService:       return get_container(request).reviews
def get_trails(request: Request)      -> TrailService:        return get_container(request).trails
def get_profiles(request: Request)    -> ProfileService:      return get_container(request).profiles


def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
) -> AuthUser:
    """Bearer token → AuthUser. Thiếu / sai token → UnauthorizedError (401)."""
    if credentials is None or credentials.scheme.lower() != "bearer" or not credentials.credentials:
        raise UnauthorizedError("Unauthorized")
    return get_container(request).verifier.verify(credentials.credentials)
