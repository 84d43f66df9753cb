"""
practice_service.py — Timed practice ledger
Accumulates meditation and breathing minutes into one row per user, kind and
UTC day, and serves the most recent rows to the dashboard and timeline.
"""

import logging
import math
from datetime import datetime

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from wellnest.config import RECENT_DAYS_MAX, SESSION_MINUTES_MAX
from wellnest.errors import ValidationError, store_guard
from wellnest.models.daily_aggregate import ACTIVITY_KINDS, DailyAggregate
from wellnest.utils.day_keys import as_utc, day_key, parse_day_key, utc_now

logger = logging.getLogger(__name__)


def validate_kind(activity_kind: str) -> str:
    if activity_kind not in ACTIVITY_KINDS:
        raise ValidationError(
            f"Unsupported activity kind {activity_kind!r}. Allowed: {', '.join(ACTIVITY_KINDS)}"
        )
    return activity_kind


def round_minutes(minutes) -> int:
    """Whole minutes, halves rounded up."""
    if isinstance(minutes, bool) or not isinstance(minutes, (int, float)):
        raise ValidationError("Minutes must be a number")
    if not math.isfinite(minutes) or minutes < 0:
        raise ValidationError("Minutes must be a non-negative number")
    if minutes > SESSION_MINUTES_MAX:
        raise ValidationError(f"A single session cannot exceed {SESSION_MINUTES_MAX} minutes")
    return int(math.floor(minutes + 0.5))


class PracticeService:
    @staticmethod
    def _increment(db: Session, user_id: str, activity_kind: str, date: str,
                   added: int, moment: datetime) -> int:
        # Single UPDATE statement, so concurrent sessions cannot lose increments
        return db.query(DailyAggregate).filter_by(
            user_id=user_id, activity_kind=activity_kind, date=date
        ).update(
            {
                DailyAggregate.minutes: DailyAggregate.minutes + added,
                DailyAggregate.session_count: DailyAggregate.session_count + 1,
                DailyAggregate.updated_at: moment,
            },
            synchronize_session=False,
        )

    @staticmethod
    def credit_session(
        db: Session,
        user_id: str,
        activity_kind: str,
        minutes,
        date: str | None = None,
        now: datetime | None = None,
    ) -> dict:
        """Add one finished session to the (user, kind, day) aggregate and return the row."""
        validate_kind(activity_kind)
        added = round_minutes(minutes)
        moment = as_utc(now or utc_now())
        if date is None:
            date = day_key(moment)
        else:
            parse_day_key(date)

        with store_guard(db):
            if not PracticeService._increment(db, user_id, activity_kind, date, added, moment):
                db.add(DailyAggregate(
                    user_id=user_id,
                    activity_kind=activity_kind,
                    date=date,
                    minutes=added,
                    session_count=1,
                    created_at=moment,
                    updated_at=moment,
                ))
                try:
                    db.commit()
                    logger.info("First %s session of %s for %s", activity_kind, date, user_id)
                except IntegrityError:
                    # Another request inserted the row between our UPDATE and INSERT
                    db.rollback()
                    PracticeService._increment(db, user_id, activity_kind, date, added, moment)
                    db.commit()
            else:
                db.commit()

            row = db.query(DailyAggregate).filter_by(
                user_id=user_id, activity_kind=activity_kind, date=date
            ).one()
            return row.to_dict()

    @staticmethod
    def get_recent_aggregates(db: Session, user_id: str, activity_kind: str, day_count: int = 14) -> list[dict]:
        validate_kind(activity_kind)
        day_count = max(1, min(RECENT_DAYS_MAX, int(day_count)))
        with store_guard(db):
            rows = db.query(DailyAggregate).filter_by(
                user_id=user_id, activity_kind=activity_kind
            ).order_by(DailyAggregate.date.desc()).limit(day_count).all()
            return [r.to_dict() for r in rows]
