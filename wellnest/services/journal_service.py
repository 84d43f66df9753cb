"""
journal_service.py — Journal ledger
Owner-scoped journal documents (draft/published), autosave, tag and text
search over the most recent entries, and UTC day-range lookups for the
weekly timeline. Publishing an entry credits the author's daily streak.
"""

import logging
from datetime import datetime, timedelta

from sqlalchemy.orm import Session

from wellnest.config import SEARCH_LIMIT_MAX
from wellnest.errors import NotFoundOrForbidden, ValidationError, store_guard
from wellnest.models.journal import JournalEntry
from wellnest.services.streak_service import StreakService
from wellnest.utils.day_keys import as_utc, day_start, parse_day_key, utc_now

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "New Journal"


def _check_word_count(word_count) -> int:
    if word_count is None:
        return 0
    if isinstance(word_count, bool) or not isinstance(word_count, int) or word_count < 0:
        raise ValidationError("word_count must be a non-negative integer")
    return word_count


def _check_content(content):
    if content is not None and not isinstance(content, list):
        raise ValidationError("content must be a list of editor blocks")
    return content


def _clean_tags(tags) -> list[str]:
    if not isinstance(tags, (list, tuple, set)) or not all(isinstance(t, str) for t in tags):
        raise ValidationError("tags must be a list of strings")
    # set semantics, first occurrence wins
    return list(dict.fromkeys(tags))


class JournalService:
    @staticmethod
    def _owned(db: Session, journal_id: int, user_id: str) -> JournalEntry:
        entry = db.query(JournalEntry).filter_by(id=journal_id).first()
        if entry is None or entry.user_id != user_id:
            raise NotFoundOrForbidden("Journal not found or access denied")
        return entry

    @staticmethod
    def create_journal(
        db: Session,
        user_id: str,
        title: str | None = None,
        prompt: str | None = None,
        is_custom_prompt: bool = False,
        now: datetime | None = None,
    ) -> int:
        moment = as_utc(now or utc_now())
        with store_guard(db):
            entry = JournalEntry(
                user_id=user_id,
                title=title or DEFAULT_TITLE,
                content=None,
                prompt=prompt,
                is_custom_prompt=bool(is_custom_prompt),
                word_count=0,
                tags=[],
                is_draft=True,
                is_private=True,
                created_at=moment,
                updated_at=moment,
                last_auto_saved=moment,
            )
            db.add(entry)
            db.commit()
            return entry.id

    @staticmethod
    def get_journal(db: Session, journal_id: int, user_id: str) -> JournalEntry:
        with store_guard(db):
            return JournalService._owned(db, journal_id, user_id)

    @staticmethod
    def save_content(
        db: Session,
        journal_id: int,
        user_id: str,
        content,
        word_count: int | None = None,
        is_draft: bool | None = None,
        now: datetime | None = None,
    ) -> JournalEntry:
        """
        Save the editor content. A non-draft result credits today's streak
        once per call; repeat publishes on the same day are absorbed by the
        streak's per-day idempotency.
        """
        content = _check_content(content)
        word_count = _check_word_count(word_count)
        moment = as_utc(now or utc_now())

        with store_guard(db):
            entry = JournalService._owned(db, journal_id, user_id)
            final_is_draft = entry.is_draft if is_draft is None else bool(is_draft)
            entry.content = content
            entry.word_count = word_count
            entry.is_draft = final_is_draft
            entry.last_auto_saved = moment
            entry.updated_at = moment
            db.commit()

        if not final_is_draft:
            StreakService.credit_activity_for_today(db, user_id, now=moment)
        return entry

    @staticmethod
    def auto_save_content(
        db: Session,
        journal_id: int,
        user_id: str,
        content,
        word_count: int | None = None,
        now: datetime | None = None,
    ) -> JournalEntry:
        """Frequent editor autosave: never changes draft state, never credits."""
        content = _check_content(content)
        word_count = _check_word_count(word_count)
        moment = as_utc(now or utc_now())
        with store_guard(db):
            entry = JournalService._owned(db, journal_id, user_id)
            entry.content = content
            entry.word_count = word_count
            entry.last_auto_saved = moment
            entry.updated_at = moment
            db.commit()
            return entry

    @staticmethod
    def update_title(db: Session, journal_id: int, user_id: str, title: str) -> JournalEntry:
        if not isinstance(title, str):
            raise ValidationError("title must be a string")
        with store_guard(db):
            entry = JournalService._owned(db, journal_id, user_id)
            entry.title = title
            entry.updated_at = utc_now()
            db.commit()
            return entry

    @staticmethod
    def update_prompt(db: Session, journal_id: int, user_id: str, prompt: str,
                      is_custom_prompt: bool) -> JournalEntry:
        with store_guard(db):
            entry = JournalService._owned(db, journal_id, user_id)
            entry.prompt = prompt
            entry.is_custom_prompt = bool(is_custom_prompt)
            entry.updated_at = utc_now()
            db.commit()
            return entry

    @staticmethod
    def update_tags(db: Session, journal_id: int, user_id: str, tags) -> JournalEntry:
        """Replace the whole tag set."""
        tags = _clean_tags(tags)
        with store_guard(db):
            entry = JournalService._owned(db, journal_id, user_id)
            entry.tags = tags
            entry.updated_at = utc_now()
            db.commit()
            return entry

    @staticmethod
    def delete_journal(db: Session, journal_id: int, user_id: str) -> None:
        with store_guard(db):
            entry = JournalService._owned(db, journal_id, user_id)
            db.delete(entry)
            db.commit()
            logger.info("Deleted journal %s for %s", journal_id, user_id)

    @staticmethod
    def _recent(db: Session, user_id: str, limit: int) -> list[JournalEntry]:
        return db.query(JournalEntry).filter_by(user_id=user_id).order_by(
            JournalEntry.created_at.desc(), JournalEntry.id.desc()
        ).limit(limit).all()

    @staticmethod
    def list_journals(db: Session, user_id: str, limit: int = 50,
                      include_drafts: bool = True) -> list[JournalEntry]:
        limit = max(1, min(SEARCH_LIMIT_MAX, int(limit)))
        with store_guard(db):
            entries = JournalService._recent(db, user_id, limit)
        if not include_drafts:
            return [e for e in entries if not e.is_draft]
        return entries

    @staticmethod
    def search_journals(
        db: Session,
        user_id: str,
        query: str | None = None,
        tag: str | None = None,
        start_ts: datetime | None = None,
        end_ts: datetime | None = None,
        include_drafts: bool = True,
        limit: int = 200,
    ) -> list[JournalEntry]:
        """
        Filter the user's newest ``limit`` entries (not the full history).

        All predicates are ANDed; ``query`` is a case-insensitive substring
        match against title or prompt, the timestamp bounds are inclusive.
        """
        limit = max(1, min(SEARCH_LIMIT_MAX, int(limit)))
        needle = (query or "").strip().lower()
        start = as_utc(start_ts) if start_ts is not None else None
        end = as_utc(end_ts) if end_ts is not None else None

        with store_guard(db):
            entries = JournalService._recent(db, user_id, limit)

        results = []
        for entry in entries:
            if not include_drafts and entry.is_draft:
                continue
            if tag and tag not in (entry.tags or []):
                continue
            created = as_utc(entry.created_at)
            if start is not None and created < start:
                continue
            if end is not None and created > end:
                continue
            if needle:
                title = (entry.title or "").lower()
                prompt = (entry.prompt or "").lower()
                if needle not in title and needle not in prompt:
                    continue
            results.append(entry)
        return results

    @staticmethod
    def get_journals_by_date_range(db: Session, user_id: str, start_date: str,
                                   end_date: str) -> list[JournalEntry]:
        """Entries created between two UTC day keys, both days included."""
        if parse_day_key(start_date) > parse_day_key(end_date):
            raise ValidationError("start_date must not be after end_date")
        lower = day_start(start_date)
        upper = day_start(end_date) + timedelta(days=1)
        with store_guard(db):
            return db.query(JournalEntry).filter(
                JournalEntry.user_id == user_id,
                JournalEntry.created_at >= lower,
                JournalEntry.created_at < upper,
            ).order_by(JournalEntry.created_at.desc(), JournalEntry.id.desc()).all()
