"""
timeline_service.py — Weekly journey timeline
Lines up journal entries with same-day meditation and breathing aggregates,
one row per UTC day, most recent day first.
"""

from sqlalchemy.orm import Session

from wellnest.config import RECENT_DAYS_MAX
from wellnest.errors import store_guard
from wellnest.models.daily_aggregate import DailyAggregate
from wellnest.services.journal_service import JournalService
from wellnest.utils.day_keys import as_utc, day_key, parse_day_key, shift_day_key


class TimelineService:
    @staticmethod
    def build_timeline(db: Session, user_id: str, end_date: str | None = None, days: int = 7) -> list[dict]:
        end_date = end_date or day_key()
        parse_day_key(end_date)
        days = max(1, min(RECENT_DAYS_MAX, int(days)))
        start_date = shift_day_key(end_date, -(days - 1))

        journals = JournalService.get_journals_by_date_range(db, user_id, start_date, end_date)
        with store_guard(db):
            aggregates = db.query(DailyAggregate).filter(
                DailyAggregate.user_id == user_id,
                DailyAggregate.date >= start_date,
                DailyAggregate.date <= end_date,
            ).all()

        minutes = {(a.date, a.activity_kind): a.minutes for a in aggregates}
        # journals arrive newest first, so the first hit per day is the latest entry
        latest_by_day = {}
        for entry in journals:
            latest_by_day.setdefault(day_key(as_utc(entry.created_at)), entry)

        timeline = []
        for offset in range(days):
            date = shift_day_key(end_date, -offset)
            entry = latest_by_day.get(date)
            timeline.append({
                "date": date,
                "journal": {
                    "id": entry.id,
                    "title": entry.title or "Untitled",
                    "tags": list(entry.tags or []),
                    "word_count": entry.word_count or 0,
                } if entry else None,
                "meditation_minutes": minutes.get((date, "meditation"), 0),
                "breathing_minutes": minutes.get((date, "breathing"), 0),
            })
        return timeline
