"""
streak_service.py — Consecutive-day streaks & achievements
One record per user, advanced at most once per UTC day by any qualifying
activity (published journal, finished meditation/breathing session).
"""

import logging
from datetime import datetime

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from wellnest.errors import ValidationError, store_guard
from wellnest.models.streak import StreakRecord
from wellnest.utils.day_keys import as_utc, day_key, shift_day_key, utc_now

logger = logging.getLogger(__name__)

ONBOARDING_ACHIEVEMENT = {
    "type": "onboarding_complete",
    "title": "Welcome Aboard!",
    "description": "You've completed your onboarding journey",
}


class StreakService:
    @staticmethod
    def _locked(db: Session, user_id: str) -> StreakRecord | None:
        # FOR UPDATE is a no-op on SQLite, a row lock on PostgreSQL
        return db.query(StreakRecord).filter_by(user_id=user_id).with_for_update().first()

    @staticmethod
    def _insert(db: Session, record: StreakRecord) -> StreakRecord | None:
        """Insert a fresh record; None if a concurrent writer created it first."""
        db.add(record)
        try:
            db.flush()
        except IntegrityError:
            db.rollback()
            return None
        return record

    @staticmethod
    def _zeroed(db: Session, user_id: str, moment: datetime) -> StreakRecord:
        record = StreakService._locked(db, user_id)
        if record is not None:
            return record
        record = StreakService._insert(db, StreakRecord(
            user_id=user_id,
            current_streak=0,
            longest_streak=0,
            last_entry_date=None,
            achievements=[],
            created_at=moment,
            updated_at=moment,
        ))
        return record if record is not None else StreakService._locked(db, user_id)

    @staticmethod
    def to_dict(record: StreakRecord | None) -> dict:
        if record is None:
            return {
                "current_streak": 0,
                "longest_streak": 0,
                "last_entry_date": None,
                "achievements": [],
            }
        return {
            "current_streak": record.current_streak,
            "longest_streak": record.longest_streak,
            "last_entry_date": record.last_entry_date,
            "achievements": list(record.achievements or []),
        }

    @staticmethod
    def ensure_streak_record(db: Session, user_id: str, now: datetime | None = None) -> dict:
        """Create the zeroed record a new user starts with (no-op if present)."""
        moment = as_utc(now or utc_now())
        with store_guard(db):
            record = StreakService._zeroed(db, user_id, moment)
            db.commit()
            return StreakService.to_dict(record)

    @staticmethod
    def credit_activity_for_today(db: Session, user_id: str, now: datetime | None = None) -> dict:
        """
        Credit one qualifying activity for the current UTC day.

        Same-day repeats only touch updated_at. A credit on the day after
        last_entry_date extends the streak; any longer gap restarts it at 1.
        """
        moment = as_utc(now or utc_now())
        today = day_key(moment)
        yesterday = shift_day_key(today, -1)

        with store_guard(db):
            record = StreakService._locked(db, user_id)
            if record is None:
                record = StreakService._insert(db, StreakRecord(
                    user_id=user_id,
                    current_streak=1,
                    longest_streak=1,
                    last_entry_date=today,
                    achievements=[],
                    created_at=moment,
                    updated_at=moment,
                ))
                if record is not None:
                    db.commit()
                    logger.info("Started streak for %s on %s", user_id, today)
                    return StreakService.to_dict(record)
                record = StreakService._locked(db, user_id)

            last = record.last_entry_date
            if last is not None and last >= today:
                # already credited today (or a later day from a skewed clock)
                record.updated_at = moment
                db.commit()
                return StreakService.to_dict(record)

            if last == yesterday:
                current = record.current_streak + 1
            else:
                current = 1
                if record.current_streak:
                    logger.info("Streak for %s reset after gap (last %s, today %s)", user_id, last, today)

            record.current_streak = current
            record.longest_streak = max(record.longest_streak or 0, current)
            record.last_entry_date = today
            record.updated_at = moment
            db.commit()
            return StreakService.to_dict(record)

    @staticmethod
    def unlock_achievement(
        db: Session,
        user_id: str,
        achievement_type: str,
        title: str,
        description: str,
        unlocked_at: datetime | None = None,
    ) -> bool:
        """Append an achievement unless one with the same type exists. Returns True if added."""
        if not achievement_type:
            raise ValidationError("Achievement type is required")
        moment = as_utc(unlocked_at or utc_now())

        with store_guard(db):
            record = StreakService._zeroed(db, user_id, moment)
            existing = list(record.achievements or [])
            if any(a.get("type") == achievement_type for a in existing):
                db.commit()
                return False

            existing.append({
                "type": achievement_type,
                "unlocked_at": moment.isoformat(),
                "title": title,
                "description": description,
            })
            record.achievements = existing
            record.updated_at = moment
            db.commit()
            logger.info("Unlocked achievement %s for %s", achievement_type, user_id)
            return True

    @staticmethod
    def get_streak(db: Session, user_id: str) -> dict:
        with store_guard(db):
            record = db.query(StreakRecord).filter_by(user_id=user_id).first()
            return StreakService.to_dict(record)
