"""
db/models.py – SQLAlchemy ORM models: vendors, reviews, users, food_trails.

Các field dạng set/list (categories, helpful_users, stops, ...) lưu JSON
theo kiểu document. Khi sửa phải gán list mới để SQLAlchemy nhận thay đổi.
"""
import uuid
from datetime import datetime, timezone

from sqlalchemy import JSON, Boolean, Column, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase


def new_id() -> str:
    return uuid.uuid4().hex


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class Vendor(Base):
    __tablename__ = "vendors"

    id            = Column(String(32), primary_key=True, default=new_id)
    name          = Column(String,  nullable=False)
    cuisine       = Column(String,  nullable=False, default="", index=True)
    categories    = Column(JSON,    nullable=False, default=list)
    description   = Column(Text,    nullable=True, default="")
    address       = Column(JSON,    nullable=False, default=dict)
    latitude      = Column(Float,   nullable=True)
    longitude     = Column(Float,   nullable=True)
    is_vegetarian = Column(Boolean, nullable=False, default=False)
    images        = Column(JSON,    nullable=False, default=list)

    # hygiene sub-scores 0–5, do người tạo vendor khai báo
    cleanliness   = Column(Float, nullable=False, default=0.0)
    ingredients   = Column(Float, nullable=False, default=0.0)
    water_safety  = Column(Float, nullable=False, default=0.0)

    price_min     = Column(Float, nullable=True)
    price_max     = Column(Float, nullable=True)
    price_avg     = Column(Float, nullable=True)

    # aggregates – chỉ review write path được ghi
    rating               = Column(Float,   nullable=False, default=0.0, index=True)
    review_count         = Column(Integer, nullable=False, default=0)
    hygiene_rating       = Column(Float,   nullable=False, default=0.0, index=True)
    hygiene_review_count = Column(Integer, nullable=False, default=0)
    favorite_count       = Column(Integer, nullable=False, default=0)
    favorite_users       = Column(JSON,    nullable=False, default=list)

    search_keywords = Column(JSON,     nullable=False, default=list)
    created_by      = Column(String,   nullable=True)
    created_at      = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at      = Column(DateTime(timezone=True), nullable=True)

    def __repr__(self) -> str:
        return f"<Vendor id={self.id} name={self.name!r}>"


class Review(Base):
    __tablename__ = "reviews"

    id             = Column(String(32), primary_key=True, default=new_id)
    vendor_id      = Column(String(32), ForeignKey("vendors.id"), nullable=False, index=True)
    user_id        = Column(String,  nullable=False, index=True)
    rating         = Column(Float,   nullable=False)
    hygiene_rating = Column(Float,   nullable=True)
    text           = Column(Text,    nullable=True, default="")
    images         = Column(JSON,    nullable=False, default=list)
    helpful_count  = Column(Integer, nullable=False, default=0)
    helpful_users  = Column(JSON,    nullable=False, default=list)
    created_at     = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    def __repr__(self) -> str:
        return f"<Review id={self.id} vendor_id={self.vendor_id} rating={self.rating}>"


class UserProfile(Base):
    __tablename__ = "users"

    id                  = Column(String, primary_key=True)   # == auth uid
    display_name        = Column(String, nullable=True)
    photo_url           = Column(String, nullable=True)
    email               = Column(String, nullable=True)
    dietary_preferences = Column(JSON,   nullable=False, default=list)
    favorite_cuisines   = Column(JSON,   nullable=False, default=list)
    favorite_vendors    = Column(JSON,   nullable=False, default=list)
    favorite_trails     = Column(JSON,   nullable=False, default=list)
    completed_trails    = Column(JSON,   nullable=False, default=list)
    review_count        = Column(Integer, nullable=False, default=0)
    created_at          = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at          = Column(DateTime(timezone=True), nullable=True)

    def __repr__(self) -> str:
        return f"<UserProfile id={self.id} display_name={self.display_name!r}>"


class FoodTrail(Base):
    __tablename__ = "food_trails"

    id               = Column(String(32), primary_key=True, default=new_id)
    name             = Column(String,  nullable=False)
    description      = Column(Text,    nullable=True, default="")
    category         = Column(String,  nullable=True, index=True)
    stops            = Column(JSON,    nullable=False, default=list)   # [{"vendorId": ..., ...}]
    completion_count = Column(Integer, nullable=False, default=0)
    created_at       = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    def __repr__(self) -> str:
        return f"<FoodTrail id={self.id} name={self.name!r}>"
