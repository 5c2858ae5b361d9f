"""
models.py – Pydantic schemas cho request/response.

Wire format dùng camelCase (reviewCount, hygieneRating, photoURL, ...),
Python code dùng snake_case qua alias.
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class StrictCamelModel(CamelModel):
    """Input schema: field lạ (vd. rating, reviewCount) bị reject."""
    model_config = ConfigDict(extra="forbid")


# ── Value objects ──────────────────────────────────────────────────────────────

class Location(CamelModel):
    latitude:  float = Field(..., ge=-90,  le=90)
    longitude: float = Field(..., ge=-180, le=180)


class Address(CamelModel):
    street: str = ""
    area:   str = ""
    city:   str = ""


class HygieneScores(CamelModel):
    cleanliness:  float = Field(default=0, ge=0, le=5)
    ingredients:  float = Field(default=0, ge=0, le=5)
    water_safety: float = Field(default=0, ge=0, le=5)


class PriceRange(CamelModel):
    min: Optional[float] = Field(default=None, ge=0)
    max: Optional[float] = Field(default=None, ge=0)
    avg: Optional[float] = Field(default=None, ge=0)


# ── Request Models ─────────────────────────────────────────────────────────────

class VendorCreate(StrictCamelModel):
    name:          str = Field(..., min_length=1, max_length=200)
    cuisine:       str = Field(..., min_length=1, max_length=100)
    categories:    list[str] = Field(default_factory=list)
    description:   str = ""
    address:       Address = Field(default_factory=Address)
    location:      Location
    hygiene:       HygieneScores = Field(default_factory=HygieneScores)
    is_vegetarian: bool = False
    price_range:   PriceRange = Field(default_factory=PriceRange)
    images:        list[str] = Field(default_factory=list)


class VendorUpdate(StrictCamelModel):
    name:          Optional[str] = Field(default=None, min_length=1, max_length=200)
    cuisine:       Optional[str] = Field(default=None, min_length=1, max_length=100)
    categories:    Optional[list[str]] = None
    description:   Optional[str] = None
    address:       Optional[Address] = None
    location:      Optional[Location] = None
    hygiene:       Optional[HygieneScores] = None
    is_vegetarian: Optional[bool] = None
    price_range:   Optional[PriceRange] = None
    images:        Optional[list[str]] = None


class ReviewCreate(StrictCamelModel):
    # vendorId / rating validate ở service → 400 "Missing required fields"
    vendor_id:      Optional[str] = None
    rating:         Optional[float] = Field(default=None, ge=1, le=5)
    hygiene_rating: Optional[float] = Field(default=None, ge=1, le=5)
    text:           str = Field(default="", max_length=5000)
    images:         list[str] = Field(default_factory=list)


class ProfileUpdate(StrictCamelModel):
    """Chỉ các field user được phép sửa. reviewCount, favorites... do server quản lý."""
    display_name:        Optional[str] = Field(default=None, max_length=100)
    photo_url:           Optional[str] = Field(default=None, alias="photoURL")
    dietary_preferences: Optional[list[str]] = None
    favorite_cuisines:   Optional[list[str]] = None


# ── Response Models ────────────────────────────────────────────────────────────

class VendorOut(CamelModel):
    id:                   str
    name:                 str
    cuisine:              str
    categories:           list[str] = []
    description:          str = ""
    address:              Address = Address()
    location:             Optional[Location] = None
    hygiene:              HygieneScores = HygieneScores()
    is_vegetarian:        bool = False
    price_range:          PriceRange = PriceRange()
    images:               list[str] = []
    rating:               float = 0.0
    review_count:         int = 0
    hygiene_rating:       float = 0.0
    hygiene_review_count: int = 0
    favorite_count:       int = 0
    favorite_users:       list[str] = []
    search_keywords:      list[str] = []
    created_by:           Optional[str] = None
    created_at:           Optional[datetime] = None
    updated_at:           Optional[datetime] = None
    distance:             Optional[float] = Field(default=None, description="Khoảng cách (km) tới origin của query")


class ScoredVendor(VendorOut):
    recommendation_score: float


class ReviewAuthor(CamelModel):
    uid:          Optional[str] = None
    display_name: Optional[str] = None
    photo_url:    Optional[str] = Field(default=None, alias="photoURL")


class ReviewOut(CamelModel):
    id:             str
    vendor_id:      str
    user_id:        str
    rating:         float
    hygiene_rating: Optional[float] = None
    text:           str = ""
    images:         list[str] = []
    helpful_count:  int = 0
    helpful_users:  list[str] = []
    created_at:     Optional[datetime] = None
    user:           Optional[ReviewAuthor] = None


class HelpfulResult(CamelModel):
    helpful:       bool
    helpful_count: int


class FavoriteResult(CamelModel):
    favorite:       bool
    favorite_count: int


class TrailStop(CamelModel):
    model_config = ConfigDict(extra="allow")

    vendor_id: str
    vendor:    Optional[VendorOut] = None


class TrailOut(CamelModel):
    id:               str
    name:             str
    description:      str = ""
    category:         Optional[str] = None
    stops:            list[TrailStop] = []
    completion_count: int = 0
    created_at:       Optional[datetime] = None


class TrailCompletion(CamelModel):
    success:          bool = True
    completion_count: int


class ProfileOut(CamelModel):
    id:                  str
    display_name:        Optional[str] = None
    photo_url:           Optional[str] = Field(default=None, alias="photoURL")
    email:               Optional[str] = None
    dietary_preferences: list[str] = []
    favorite_cuisines:   list[str] = []
    favorite_vendors:    list[str] = []
    favorite_trails:     list[str] = []
    completed_trails:    list[str] = []
    review_count:        int = 0
    created_at:          Optional[datetime] = None
    updated_at:          Optional[datetime] = None


class SuccessResponse(BaseModel):
    success: bool = True
