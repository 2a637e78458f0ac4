"""HTTP contract for /api/streaks."""

from datetime import datetime, timedelta, timezone

import jwt

H = {"X-User-Id": "api-user"}


def test_get_streaks_creates_empty_record(client):
    resp = client.get("/api/streaks", headers=H)

    assert resp.status_code == 200
    body = resp.json()
    assert body["user_id"] == "api-user"
    assert body["workout_streak"] == 0
    assert body["water_streak"] == 0
    assert body["diet_streak"] == 0
    assert body["last_workout_date"] is None
    assert body["badges"] == []
    assert "version" not in body


def test_requests_without_identity_are_unauthorized(client):
    resp = client.get("/api/streaks")

    assert resp.status_code == 401
    assert resp.json()["error"]["code"] == "unauthorized"


def test_bearer_jwt_identifies_user(client):
    token = jwt.encode(
        {"sub": "jwt-user", "exp": datetime.now(timezone.utc) + timedelta(minutes=5)},
        "test-secret",
        algorithm="HS256",
    )
    resp = client.get("/api/streaks", headers={"Authorization": f"Bearer {token}"})

    assert resp.status_code == 200
    assert resp.json()["user_id"] == "jwt-user"


def test_expired_jwt_is_rejected(client):
    token = jwt.encode(
        {"sub": "jwt-user", "exp": datetime.now(timezone.utc) - timedelta(minutes=5)},
        "test-secret",
        algorithm="HS256",
    )
    resp = client.get("/api/streaks", headers={"Authorization": f"Bearer {token}"})

    assert resp.status_code == 401
    assert resp.json()["detail"] == "Token expired"


def test_manual_override_then_check_badges(client):
    resp = client.put("/api/streaks/update", headers=H, json={"workout_streak": 7, "diet_streak": 2})
    assert resp.status_code == 200
    assert resp.json()["workout_streak"] == 7
    assert resp.json()["diet_streak"] == 2

    check = client.post("/api/streaks/check-badges", headers=H)
    assert check.status_code == 200
    body = check.json()
    assert body["new_badges"] == ["Week Warrior"]
    assert body["streak"]["badges"][0]["name"] == "Week Warrior"
    assert body["streak"]["last_diet_date"] is None
    assert "version" not in body["streak"]

    again = client.post("/api/streaks/check-badges", headers=H)
    assert again.json()["new_badges"] == []


def test_check_badges_without_record(client):
    resp = client.post("/api/streaks/check-badges", headers={"X-User-Id": "ghost"})

    assert resp.status_code == 200
    assert resp.json()["message"] == "No streaks found"
    assert resp.json()["new_badges"] == []


def test_negative_override_is_rejected(client):
    resp = client.put("/api/streaks/update", headers=H, json={"water_streak": -3})
    assert resp.status_code == 422


def test_add_badge_and_duplicate(client):
    badge = {"name": "Early Bird", "description": "Logged before 6am", "image": "/images/early.png"}

    first = client.post("/api/streaks/badge", headers=H, json=badge)
    assert first.status_code == 200
    assert [b["name"] for b in first.json()["badges"]] == ["Early Bird"]

    dup = client.post("/api/streaks/badge", headers=H, json=badge)
    assert dup.status_code == 400
    body = dup.json()
    assert body["error"]["code"] == "badge_exists"
    assert body["detail"] == "Badge already exists"
    assert body["error"]["request_id"] == dup.headers.get("x-request-id")


def test_add_badge_missing_field(client):
    resp = client.post("/api/streaks/badge", headers=H, json={"name": "No image", "description": "d"})

    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "validation_error"
    assert resp.json()["detail"] == "Name, description, and image are required"


def test_available_badges_lists_catalog(client):
    resp = client.get("/api/streaks/available-badges", headers=H)

    assert resp.status_code == 200
    catalog = resp.json()
    assert len(catalog) == 6
    week_warrior = next(b for b in catalog if b["name"] == "Week Warrior")
    assert week_warrior["requirement"] == {"type": "workout_streak", "count": 7}
    assert week_warrior["image"] == "/images/badges/week-warrior.png"
