"""
Tests for working-day arithmetic and the calendar endpoint
"""
import pytest
from datetime import date
from approval_engine.core.exceptions import InvalidRangeError
from approval_engine.models.holiday import Holiday, HolidayKind
from approval_engine.services.calendar_service import count_working_days, is_working_day


def test_week_without_holidays():
    # 2024-01-01 is a Monday
    assert count_working_days(date(2024, 1, 1), date(2024, 1, 7), set()) == 5


def test_week_with_holiday():
    assert count_working_days(date(2024, 1, 1), date(2024, 1, 7), {date(2024, 1, 1)}) == 4


def test_reversed_range_rejected():
    with pytest.raises(InvalidRangeError):
        count_working_days(date(2024, 1, 7), date(2024, 1, 1), set())


def test_single_day_range():
    assert count_working_days(date(2024, 1, 3), date(2024, 1, 3), set()) == 1
    assert count_working_days(date(2024, 1, 6), date(2024, 1, 6), set()) == 0


def test_holiday_on_weekend_is_not_counted_twice():
    # 2024-01-06 is a Saturday
    assert count_working_days(date(2024, 1, 1), date(2024, 1, 7), {date(2024, 1, 6)}) == 5


def test_both_ends_inclusive_across_weekend():
    # Thursday .. Monday
    assert count_working_days(date(2030, 3, 7), date(2030, 3, 11), set()) == 3


def test_is_working_day():
    assert is_working_day(date(2024, 1, 2), set())
    assert not is_working_day(date(2024, 1, 6), set())
    assert not is_working_day(date(2024, 1, 2), {date(2024, 1, 2)})


def test_working_days_endpoint_uses_active_holidays(client, db, requester, auth_headers):
    db.add_all([
        Holiday(year=2024, date=date(2024, 1, 2), name="Anul Nou", kind=HolidayKind.PUBLIC, active=True),
        Holiday(year=2024, date=date(2024, 1, 3), name="Inactive", kind=HolidayKind.CUSTOM, active=False),
    ])
    db.commit()

    response = client.get(
        "/api/v1/calendar/working-days",
        params={"start": "2024-01-01", "end": "2024-01-07"},
        headers=auth_headers(requester),
    )

    assert response.status_code == 200
    data = response.json()
    assert data["working_days"] == 4
    assert data["holidays"] == ["2024-01-02"]


def test_working_days_endpoint_reversed_range(client, requester, auth_headers):
    response = client.get(
        "/api/v1/calendar/working-days",
        params={"start": "2024-01-07", "end": "2024-01-01"},
        headers=auth_headers(requester),
    )

    assert response.status_code == 400
    assert response.json()["code"] == "INVALID_RANGE"


def test_working_days_endpoint_requires_auth(client):
    response = client.get("/api/v1/calendar/working-days", params={"start": "2024-01-01", "end": "2024-01-07"})

    assert response.status_code in (401, 403)
