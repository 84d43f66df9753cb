"""Daily meditation/breathing aggregates: rounding, accumulation, recency queries."""
import math

import pytest

from tests.conftest import utc
from wellnest.errors import ValidationError
from wellnest.models.daily_aggregate import DailyAggregate
from wellnest.services.practice_service import PracticeService, round_minutes


def test_sessions_on_same_day_accumulate_rounded_minutes(db):
    PracticeService.credit_session(db, "u1", "meditation", 12.7, date="2024-01-01")
    row = PracticeService.credit_session(db, "u1", "meditation", 5.4, date="2024-01-01")

    assert row["minutes"] == 18
    assert row["session_count"] == 2
    assert db.query(DailyAggregate).count() == 1


def test_sum_of_rounded_minutes_equals_final_total(db):
    minutes = [0, 0.49, 0.5, 1.5, 2.5, 7, 19.99]
    for m in minutes:
        row = PracticeService.credit_session(db, "u1", "breathing", m, date="2024-02-02")
    assert row["minutes"] == sum(round_minutes(m) for m in minutes)
    assert row["session_count"] == len(minutes)


def test_halves_round_up():
    assert round_minutes(0.5) == 1
    assert round_minutes(2.5) == 3
    assert round_minutes(2.49) == 2
    assert round_minutes(0) == 0


def test_kinds_and_users_and_days_are_separate_rows(db):
    PracticeService.credit_session(db, "u1", "meditation", 10, date="2024-01-01")
    PracticeService.credit_session(db, "u1", "breathing", 3, date="2024-01-01")
    PracticeService.credit_session(db, "u1", "meditation", 4, date="2024-01-02")
    PracticeService.credit_session(db, "u2", "meditation", 6, date="2024-01-01")

    assert db.query(DailyAggregate).count() == 4


def test_date_defaults_to_utc_today(db):
    row = PracticeService.credit_session(db, "u1", "meditation", 5, now=utc(2024, 6, 30, 23, 30))
    assert row["date"] == "2024-06-30"


@pytest.mark.parametrize("minutes", [-1, -0.1, math.nan, math.inf, "10", None, True, 1441, 1e20])
def test_invalid_minutes_rejected(db, minutes):
    with pytest.raises(ValidationError):
        PracticeService.credit_session(db, "u1", "meditation", minutes, date="2024-01-01")
    assert db.query(DailyAggregate).count() == 0


def test_unknown_kind_rejected(db):
    with pytest.raises(ValidationError):
        PracticeService.credit_session(db, "u1", "yoga", 5)


@pytest.mark.parametrize("date", ["2024-1-1", "01/01/2024", "2024-02-30", ""])
def test_malformed_date_rejected(db, date):
    with pytest.raises(ValidationError):
        PracticeService.credit_session(db, "u1", "meditation", 5, date=date)


def test_recent_aggregates_newest_first_and_clamped(db):
    for day in range(1, 11):
        PracticeService.credit_session(db, "u1", "breathing", day, date=f"2024-03-{day:02d}")
    PracticeService.credit_session(db, "u1", "meditation", 30, date="2024-03-05")

    recent = PracticeService.get_recent_aggregates(db, "u1", "breathing", day_count=3)
    assert [r["date"] for r in recent] == ["2024-03-10", "2024-03-09", "2024-03-08"]

    assert len(PracticeService.get_recent_aggregates(db, "u1", "breathing", day_count=0)) == 1
    assert len(PracticeService.get_recent_aggregates(db, "u1", "breathing", day_count=500)) == 10
    assert PracticeService.get_recent_aggregates(db, "u2", "breathing") == []


def test_full_day_session_is_accepted(db):
    row = PracticeService.credit_session(db, "u1", "meditation", 1440, date="2024-01-01")
    assert row["minutes"] == 1440


def test_insert_race_falls_back_to_increment(db, session_factory, monkeypatch):
    """Another request creates the day's row between our UPDATE and INSERT."""
    increment = PracticeService._increment
    calls = []

    def racing_increment(session, user_id, activity_kind, date, added, moment):
        calls.append(added)
        if len(calls) == 1:
            other = session_factory()
            other.add(DailyAggregate(
                user_id=user_id, activity_kind=activity_kind, date=date,
                minutes=5, session_count=1, created_at=moment, updated_at=moment,
            ))
            other.commit()
            other.close()
            return 0
        return increment(session, user_id, activity_kind, date, added, moment)

    monkeypatch.setattr(PracticeService, "_increment", staticmethod(racing_increment))
    row = PracticeService.credit_session(db, "u1", "meditation", 3, date="2024-03-10")

    assert calls == [3, 3]
    assert row["minutes"] == 8
    assert row["session_count"] == 2
    assert db.query(DailyAggregate).count() == 1
