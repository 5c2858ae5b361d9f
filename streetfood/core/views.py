"""
core/views.py – ORM row → response view model.

Giá trị tính thêm (distance, recommendation score, user snippet) chỉ gắn
vào view model, không bao giờ ghi lên ORM object.
"""
from typing import Optional

from ..db.models import FoodTrail, Review, UserProfile, Vendor
from ..models import (
    Address,
    HygieneScores,
    Location,
    PriceRange,
    ProfileOut,
    ReviewAuthor,
    ReviewOut,
    TrailOut,
    TrailStop,
    VendorOut,
)

ANONYMOUS_AUTHOR = ReviewAuthor(uid=None, display_name="Anonymous User", photo_url=None)


def vendor_view(v: Vendor) -> VendorOut:
    location = None
    if v.latitude is not None and v.longitude is not None:
        location = Location(latitude=v.latitude, longitude=v.longitude)
    return VendorOut(
        id=v.id,
        name=v.name,
        cuisine=v.cuisine or "",
        categories=list(v.categories or []),
        description=v.description or "",
        address=Address(**(v.address or {})),
        location=location,
        hygiene=HygieneScores(
            cleanliness=v.cleanliness or 0,
            ingredients=v.ingredients or 0,
            water_safety=v.water_safety or 0,
        ),
        is_vegetarian=bool(v.is_vegetarian),
        price_range=PriceRange(min=v.price_min, max=v.price_max, avg=v.price_avg),
        images=list(v.images or []),
        rating=v.rating or 0.0,
        review_count=v.review_count or 0,
        hygiene_rating=v.hygiene_rating or 0.0,
        hygiene_review_count=v.hygiene_review_count or 0,
        favorite_count=v.favorite_count or 0,
        favorite_users=list(v.favorite_users or []),
        search_keywords=list(v.search_keywords or []),
        created_by=v.created_by,
        created_at=v.created_at,
        updated_at=v.updated_at,
    )


def author_view(profile: Optional[UserProfile]) -> ReviewAuthor:
    if profile is None:
        return ANONYMOUS_AUTHOR
    return ReviewAuthor(uid=profile.id, display_name=profile.display_name, photo_url=profile.photo_url)


def review_view(r: Review, author: Optional[ReviewAuthor] = None) -> ReviewOut:
    return ReviewOut(
        id=r.id,
        vendor_id=r.vendor_id,
        user_id=r.user_id,
        rating=r.rating,
        hygiene_rating=r.hygiene_rating,
        text=r.text or "",
        images=list(r.images or []),
        helpful_count=r.helpful_count or 0,
        helpful_users=list(r.helpful_users or []),
        created_at=r.created_at,
        user=author,
    )


def trail_view(t: FoodTrail, vendors: Optional[dict[str, VendorOut]] = None) -> TrailOut:
    """vendors: map vendorId → VendorOut để embed vào từng stop (nếu có)."""
    stops = []
    for raw in t.stops or []:
        stop = TrailStop.model_validate(raw)
        if vendors is not None and stop.vendor_id in vendors:
            stop = stop.model_copy(update={"vendor": vendors[stop.vendor_id]})
        stops.append(stop)
    return TrailOut(
        id=t.id,
        name=t.name,
        description=t.description or "",
        category=t.category,
        stops=stops,
        completion_count=t.completion_count or 0,
        created_at=t.created_at,
    )


def profile_view(p: UserProfile) -> ProfileOut:
    return ProfileOut(
        id=p.id,
        display_name=p.display_name,
        photo_url=p.photo_url,
        email=p.email,
        dietary_preferences=list(p.dietary_preferences or []),
        favorite_cuisines=list(p.favorite_cuisines or []),
        favorite_vendors=list(p.favorite_vendors or []),
        favorite_trails=list(p.favorite_trails or []),
        completed_trails=list(p.completed_trails or []),
        review_count=p.review_count or 0,
        created_at=p.created_at,
        updated_at=p.updated_at,
    )
