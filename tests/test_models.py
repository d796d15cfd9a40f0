"""Tests for user aggregates and the driving-log helpers"""

from datetime import date, datetime, timezone

import pytest
from pydantic import ValidationError as PydanticValidationError

from drivelog.models.driving_log import DayEntry, has_entry, with_entry, without_entry
from drivelog.models.session import Session
from drivelog.models.user import Role


def test_totals_and_progress(make_user):
    user = make_user(
        required_day_hours=10,
        required_night_hours=4,
        driving_log={
            "2024-01-01": DayEntry(day_hours=3, night_hours=1),
            "2024-01-02": DayEntry(day_hours=2, night_hours=0.5),
        },
    )
    assert user.total_day_hours() == 5
    assert user.total_night_hours() == 1.5
    assert user.total_hours() == 6.5
    assert user.day_progress() == 50
    assert user.night_progress() == pytest.approx(37.5)


def test_progress_caps_at_100_and_zero_requirement(make_user):
    user = make_user(
        required_day_hours=1,
        required_night_hours=0,
        driving_log={"2024-01-01": DayEntry(day_hours=5, night_hours=5)},
    )
    assert user.day_progress() == 100
    assert user.night_progress() == 0


def test_weekly_average_uses_last_28_days(make_user):
    today = date(2024, 3, 31)
    user = make_user(driving_log={
        "2024-03-31": DayEntry(day_hours=2),                  # today: in
        "2024-03-04": DayEntry(night_hours=2),                # 27 days ago: in
        "2024-03-03": DayEntry(day_hours=100),                # exactly 28 days ago: out
        "2024-04-01": DayEntry(day_hours=100),                # future: out
        "not-a-date": DayEntry(day_hours=100),                # ignored
    })
    assert user.weekly_average(today) == 1.0


def test_stats_keys(make_user):
    stats = make_user().stats(date(2024, 1, 1))
    assert set(stats) == {
        "total_day_hours", "total_night_hours", "total_hours",
        "required_day_hours", "required_night_hours",
        "day_progress", "night_progress", "weekly_average",
    }


def test_zero_entry_is_same_as_no_entry():
    log = with_entry({}, "2024-01-01", 0, 0)
    assert "2024-01-01" not in log
    assert not has_entry(log, "2024-01-01")

    stored_zeros = {"2024-01-01": DayEntry()}
    assert not has_entry(stored_zeros, "2024-01-01")


def test_with_entry_replaces_and_zero_removes():
    log = with_entry({}, "2024-01-01", 1.5, 0)
    log = with_entry(log, "2024-01-01", 0, 2)
    assert log["2024-01-01"] == DayEntry(day_hours=0, night_hours=2)

    cleared = with_entry(log, "2024-01-01", 0, 0)
    assert cleared == {}
    # Original mapping is untouched
    assert "2024-01-01" in log


def test_without_entry_missing_is_noop():
    assert without_entry({}, "2024-01-01") == {}


def test_negative_hours_rejected_by_model():
    with pytest.raises(PydanticValidationError):
        DayEntry(day_hours=-1)


def test_role_round_trip(make_user):
    admin = make_user(role=Role.ADMIN)
    assert admin.is_admin and not admin.is_driver
    assert admin.model_dump(mode="json")["role"] == "admin"


def test_session_validity_boundary():
    now = datetime(2024, 1, 1, tzinfo=timezone.utc)
    session = Session(token="t", user_id="u", created_at=now, expires_at=now)
    assert not session.is_expired(now)
    assert session.is_expired(now.replace(microsecond=1))
