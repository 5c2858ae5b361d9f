"""
tests/test_api.py – Integration tests via FastAPI TestClient.
Kịch bản: tất cả endpoints trả đúng status + body; lỗi luôn là {"error": message}.
"""
from unittest.mock import AsyncMock

import pytest

from conftest import MUMBAI, add_trail, add_user, add_vendor, auth, load_vendor


@pytest.fixture
def vendor_id(database):
    return add_vendor(database, name="Sharma Chaat", search_keywords=["sharma", "chaat"])


# ── /health ────────────────────────────────────────────────────────────────────

class TestHealth:
    def test_health_ok(self, client):
        r = client.get("/health")
        assert r.status_code == 200
        assert r.json()["status"] == "ok"
        assert "time" in r.json()


# ── Auth ───────────────────────────────────────────────────────────────────────

class TestAuth:
    def test_missing_token(self, client):
        r = client.get("/api/profile")
        assert r.status_code == 401
        assert r.json() == {"error": "Unauthorized"}

    def test_invalid_token(self, client):
        r = client.get("/api/profile", headers={"Authorization": "Bearer not-a-jwt"})
        assert r.status_code == 401
        assert r.json() == {"error": "Unauthorized"}

    def test_wrong_secret(self, client):
        from jose import jwt

        token = jwt.encode({"sub": "u1"}, "other-secret", algorithm="HS256")
        r = client.get("/api/profile", headers={"Authorization": f"Bearer {token}"})
        assert r.status_code == 401


# ── /api/vendors ───────────────────────────────────────────────────────────────

class TestVendors:
    def test_search_with_origin(self, client, database, vendor_id):
        far = add_vendor(database, latitude=MUMBAI[0] + 0.03)
        r = client.get("/api/vendors", params={"latitude": MUMBAI[0], "longitude": MUMBAI[1], "radius": 2})
        assert r.status_code == 200
        body = r.json()
        assert [v["id"] for v in body] == [vendor_id]
        assert body[0]["distance"] == pytest.approx(0.0, abs=1e-6)
        assert far not in [v["id"] for v in body]

    def test_search_camel_case_fields(self, client, vendor_id):
        [vendor] = client.get("/api/vendors").json()
        for key in ("reviewCount", "hygieneRating", "isVegetarian", "priceRange", "searchKeywords"):
            assert key in vendor
        assert vendor["distance"] is None

    def test_search_keyword_and_sort(self, client, database, vendor_id):
        other = add_vendor(database, name="Chaat Corner", rating=4.9, search_keywords=["chaat", "corner"])
        r = client.get("/api/vendors", params={"q": "chaat", "sortBy": "rating"})
        assert [v["id"] for v in r.json()] == [other, vendor_id]

    def test_price_filter_only_when_requested(self, client, database, vendor_id):
        pricey = add_vendor(database, price_avg=1500.0)
        r = client.get("/api/vendors")
        assert {v["id"] for v in r.json()} == {vendor_id, pricey}

        r = client.get("/api/vendors", params={"maxPrice": 500})
        assert [v["id"] for v in r.json()] == [vendor_id]

        r = client.get("/api/vendors", params={"minPrice": 200, "maxPrice": 2000})
        assert [v["id"] for v in r.json()] == [pricey]

    def test_latitude_without_longitude(self, client):
        r = client.get("/api/vendors", params={"latitude": 19.0})
        assert r.status_code == 400
        assert "error" in r.json()

    def test_bad_query_type_is_400(self, client):
        r = client.get("/api/vendors", params={"radius": "far"})
        assert r.status_code == 400
        assert "error" in r.json()

    def test_search_failure(self, client, container):
        container.search.search = AsyncMock(side_effect=RuntimeError("db down"))
        r = client.get("/api/vendors")
        assert r.status_code == 500
        assert r.json() == {"error": "Failed to get vendors"}

    def test_get_by_id(self, client, vendor_id):
        r = client.get(f"/api/vendors/{vendor_id}")
        assert r.status_code == 200
        assert r.json()["name"] == "Sharma Chaat"

    def test_get_missing(self, client):
        r = client.get("/api/vendors/nope")
        assert r.status_code == 404
        assert r.json() == {"error": "Vendor not found"}

    def test_top_rated(self, client, database, vendor_id):
        best = add_vendor(database, rating=4.9)
        r = client.get("/api/vendors/top-rated")
        assert r.status_code == 200
        assert r.json()[0]["id"] == best

    def test_create_requires_auth(self, client):
        r = client.post("/api/vendors", json={"name": "X", "cuisine": "Y"})
        assert r.status_code == 401

    def test_create(self, client):
        r = client.post("/api/vendors", headers=auth("owner"), json={
            "name": "Anna Dosa",
            "cuisine": "South Indian",
            "categories": ["Breakfast"],
            "address": {"area": "Matunga"},
            "location": {"latitude": 19.027, "longitude": 72.855},
            "isVegetarian": True,
            "priceRange": {"min": 30, "max": 90},
        })
        assert r.status_code == 201
        body = r.json()
        assert body["rating"] == 0
        assert body["reviewCount"] == 0
        assert body["createdBy"] == "owner"
        assert body["searchKeywords"] == ["anna", "dosa", "south", "indian", "matunga"]

    def test_create_rejects_aggregates(self, client):
        r = client.post("/api/vendors", headers=auth("owner"), json={
            "name": "Anna Dosa",
            "cuisine": "South Indian",
            "location": {"latitude": 19.0, "longitude": 72.8},
            "rating": 5,
        })
        assert r.status_code == 400

    def test_update_null_name_keeps_value(self, client):
        created = client.post("/api/vendors", headers=auth("owner"), json={
            "name": "Anna Dosa",
            "cuisine": "South Indian",
            "location": {"latitude": 19.0, "longitude": 72.8},
        }).json()
        r = client.put(f"/api/vendors/{created['id']}", headers=auth("owner"), json={"name": None})
        assert r.status_code == 200
        assert r.json()["name"] == "Anna Dosa"

    def test_update_by_non_creator(self, client, vendor_id):
        r = client.put(f"/api/vendors/{vendor_id}", headers=auth("someone"), json={"name": "Mine"})
        assert r.status_code == 401
        assert r.json() == {"error": "Not authorized to update this vendor"}

    def test_favorite_toggle(self, client, vendor_id):
        r = client.post(f"/api/vendors/{vendor_id}/favorite", headers=auth("u1"))
        assert r.json() == {"favorite": True, "favoriteCount": 1}
        r = client.delete(f"/api/vendors/{vendor_id}/favorite", headers=auth("u1"))
        assert r.json() == {"favorite": False, "favoriteCount": 0}


# ── /api/vendors/recommended ───────────────────────────────────────────────────

class TestRecommended:
    def test_no_profile(self, client):
        r = client.get("/api/vendors/recommended", headers=auth("ghost"))
        assert r.status_code == 404
        assert r.json() == {"error": "User not found"}

    def test_ranked(self, client, database, vendor_id):
        add_user(database, "u1", dietary_preferences=["vegetarian"])
        veg = add_vendor(database, is_vegetarian=True)
        r = client.get("/api/vendors/recommended", headers=auth("u1"))
        assert r.status_code == 200
        body = r.json()
        assert [v["id"] for v in body] == [veg, vendor_id]
        assert body[0]["recommendationScore"] == 3.0


# ── Reviews ────────────────────────────────────────────────────────────────────

class TestReviews:
    def test_missing_fields(self, client, vendor_id):
        r = client.post("/api/reviews", headers=auth("u1"), json={"vendorId": vendor_id})
        assert r.status_code == 400
        assert r.json() == {"error": "Missing required fields"}

    def test_unknown_vendor(self, client):
        r = client.post("/api/reviews", headers=auth("u1"), json={"vendorId": "nope", "rating": 4})
        assert r.status_code == 404
        assert r.json() == {"error": "Vendor not found"}

    def test_rating_out_of_range(self, client, vendor_id):
        r = client.post("/api/reviews", headers=auth("u1"), json={"vendorId": vendor_id, "rating": 9})
        assert r.status_code == 400

    def test_flow(self, client, database, vendor_id):
        client.put("/api/profile", headers=auth("u1"), json={"displayName": "Asha", "photoURL": "http://a.png"})

        r = client.post("/api/reviews", headers=auth("u1"), json={
            "vendorId": vendor_id, "rating": 3, "hygieneRating": 4, "text": "Good",
        })
        assert r.status_code == 201
        review_id = r.json()["id"]

        r = client.get(f"/api/vendors/{vendor_id}/reviews")
        [review] = r.json()
        assert review["user"] == {"uid": "u1", "displayName": "Asha", "photoURL": "http://a.png"}
        assert review["helpfulCount"] == 0

        r = client.post(f"/api/reviews/{review_id}/helpful", headers=auth("u2"))
        assert r.json() == {"helpful": True, "helpfulCount": 1}
        r = client.post(f"/api/reviews/{review_id}/helpful", headers=auth("u2"))
        assert r.json() == {"helpful": False, "helpfulCount": 0}

        r = client.delete(f"/api/reviews/{review_id}", headers=auth("u2"))
        assert r.status_code == 401
        assert r.json() == {"error": "Not authorized to delete this review"}

        r = client.delete(f"/api/reviews/{review_id}", headers=auth("u1"))
        assert r.status_code == 200
        assert r.json() == {"success": True}
        vendor = load_vendor(database, vendor_id)
        assert (vendor.rating, vendor.review_count) == (0.0, 0)

    def test_delete_missing(self, client):
        r = client.delete("/api/reviews/nope", headers=auth("u1"))
        assert r.status_code == 404
        assert r.json() == {"error": "Review not found"}


# ── Trails ─────────────────────────────────────────────────────────────────────

class TestTrails:
    def test_list_and_detail(self, client, database, vendor_id):
        trail_id = add_trail(database, category="evening", stops=[{"vendorId": vendor_id, "order": 1}])

        r = client.get("/api/trails", params={"category": "evening"})
        assert [t["id"] for t in r.json()] == [trail_id]

        r = client.get(f"/api/trails/{trail_id}")
        assert r.status_code == 200
        stop = r.json()["stops"][0]
        assert stop["vendorId"] == vendor_id
        assert stop["order"] == 1
        assert stop["vendor"]["name"] == "Sharma Chaat"

    def test_missing(self, client):
        r = client.get("/api/trails/nope")
        assert r.status_code == 404
        assert r.json() == {"error": "Food trail not found"}

    def test_complete_and_favorite(self, client, database):
        trail_id = add_trail(database)
        r = client.post(f"/api/trails/{trail_id}/complete", headers=auth("u1"))
        assert r.json() == {"success": True, "completionCount": 1}

        r = client.post(f"/api/trails/{trail_id}/favorite", headers=auth("u1"))
        assert r.json() == {"success": True}
        r = client.delete(f"/api/trails/{trail_id}/favorite", headers=auth("u1"))
        assert r.json() == {"success": True}


# ── /api/profile ───────────────────────────────────────────────────────────────

class TestProfile:
    def test_not_found(self, client):
        r = client.get("/api/profile", headers=auth("u1"))
        assert r.status_code == 404
        assert r.json() == {"error": "User profile not found"}

    def test_update_then_get(self, client):
        r = client.put("/api/profile", headers=auth("u1"), json={
            "displayName": "Asha", "dietaryPreferences": ["vegetarian"],
        })
        assert r.status_code == 200

        body = client.get("/api/profile", headers=auth("u1")).json()
        assert body["displayName"] == "Asha"
        assert body["dietaryPreferences"] == ["vegetarian"]
        assert body["reviewCount"] == 0

    def test_server_owned_field_rejected(self, client):
        r = client.put("/api/profile", headers=auth("u1"), json={"displayName": "Asha", "reviewCount": 100})
        assert r.status_code == 400
        assert "error" in r.json()
        assert client.get("/api/profile", headers=auth("u1")).status_code == 404
