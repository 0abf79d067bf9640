"""
Tests for holiday calendar endpoints
"""
from datetime import date
from approval_engine.constants import PUBLIC_HOLIDAYS
from approval_engine.models.holiday import Holiday, HolidayKind
from approval_engine.services.holiday_service import get_holiday_set


def test_hr_creates_holiday(client, db, hr_user, auth_headers):
    response = client.post(
        "/api/v1/holidays",
        json={"date": "2026-07-03", "name": "Ziua Institutului"},
        headers=auth_headers(hr_user),
    )

    assert response.status_code == 201
    data = response.json()
    assert data["year"] == 2026
    assert data["kind"] == HolidayKind.CUSTOM.value
    assert data["active"] is True
    assert db.query(Holiday).count() == 1


def test_duplicate_holiday_conflicts(client, hr_user, auth_headers):
    payload = {"date": "2026-07-03", "name": "Ziua Institutului"}
    client.post("/api/v1/holidays", json=payload, headers=auth_headers(hr_user))

    response = client.post("/api/v1/holidays", json=payload, headers=auth_headers(hr_user))

    assert response.status_code == 409
    assert response.json()["code"] == "DUPLICATE_HOLIDAY"


def test_employee_cannot_create_holiday(client, requester, auth_headers):
    response = client.post(
        "/api/v1/holidays",
        json={"date": "2026-07-03", "name": "Zi libera"},
        headers=auth_headers(requester),
    )

    assert response.status_code == 403


def test_any_employee_can_list_holidays(client, db, hr_user, requester, auth_headers):
    client.post("/api/v1/holidays/seed/2026", headers=auth_headers(hr_user))

    response = client.get("/api/v1/holidays", params={"year": 2026}, headers=auth_headers(requester))

    assert response.status_code == 200
    dates = [h["date"] for h in response.json()]
    assert dates == sorted(dates)
    assert len(dates) == len(PUBLIC_HOLIDAYS[2026])


def test_seed_is_repeatable(client, hr_user, auth_headers):
    first = client.post("/api/v1/holidays/seed/2026", headers=auth_headers(hr_user))
    second = client.post("/api/v1/holidays/seed/2026", headers=auth_headers(hr_user))

    assert first.json() == {"year": 2026, "created": len(PUBLIC_HOLIDAYS[2026])}
    assert second.json() == {"year": 2026, "created": 0}


def test_seed_unknown_year(client, hr_user, auth_headers):
    response = client.post("/api/v1/holidays/seed/1990", headers=auth_headers(hr_user))

    assert response.status_code == 404


def test_deactivated_holiday_is_a_working_day(client, db, hr_user, auth_headers):
    created = client.post(
        "/api/v1/holidays",
        json={"date": "2026-07-03", "name": "Ziua Institutului"},
        headers=auth_headers(hr_user),
    ).json()

    response = client.patch(
        f"/api/v1/holidays/{created['id']}",
        json={"active": False},
        headers=auth_headers(hr_user),
    )

    assert response.status_code == 200
    assert response.json()["active"] is False
    assert get_holiday_set(db, date(2026, 7, 1), date(2026, 7, 31)) == set()


def test_delete_holiday(client, db, hr_user, auth_headers):
    created = client.post(
        "/api/v1/holidays",
        json={"date": "2026-07-03", "name": "Ziua Institutului"},
        headers=auth_headers(hr_user),
    ).json()

    response = client.delete(f"/api/v1/holidays/{created['id']}", headers=auth_headers(hr_user))
    assert response.status_code == 204
    assert db.query(Holiday).count() == 0

    missing = client.delete(f"/api/v1/holidays/{created['id']}", headers=auth_headers(hr_user))
    assert missing.status_code == 404
