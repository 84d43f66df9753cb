from datetime import datetime
from typing import Any, List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from wellnest.auth import get_current_user
from wellnest.database import get_db
from wellnest.services.journal_service import JournalService
from wellnest.services.streak_service import StreakService

router = APIRouter(prefix="/api/v1/journals", tags=["Journal"])


class JournalCreate(BaseModel):
    title: Optional[str] = None
    prompt: Optional[str] = None
    is_custom_prompt: bool = False


class JournalContent(BaseModel):
    content: List[Any]
    word_count: Optional[int] = None
    is_draft: Optional[bool] = None


class JournalAutoSave(BaseModel):
    content: List[Any]
    word_count: Optional[int] = None


class JournalTitle(BaseModel):
    title: str


class JournalPrompt(BaseModel):
    prompt: str
    is_custom_prompt: bool


class JournalTags(BaseModel):
    tags: List[str]


@router.post("")
def create_journal(body: JournalCreate, user_id: str = Depends(get_current_user), db: Session = Depends(get_db)):
    journal_id = JournalService.create_journal(
        db, user_id, title=body.title, prompt=body.prompt, is_custom_prompt=body.is_custom_prompt
    )
    return {"status": "success", "id": journal_id}


@router.get("")
def list_journals(limit: int = 50, include_drafts: bool = True,
                  user_id: str = Depends(get_current_user), db: Session = Depends(get_db)):
    entries = JournalService.list_journals(db, user_id, limit=limit, include_drafts=include_drafts)
    return [e.to_dict() for e in entries]


@router.get("/search")
def search_journals(
    q: Optional[str] = None,
    tag: Optional[str] = None,
    start_ts: Optional[datetime] = None,
    end_ts: Optional[datetime] = None,
    include_drafts: bool = True,
    limit: int = 200,
    user_id: str = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    entries = JournalService.search_journals(
        db, user_id, query=q, tag=tag, start_ts=start_ts, end_ts=end_ts,
        include_drafts=include_drafts, limit=limit,
    )
    return [e.to_dict() for e in entries]


@router.get("/range")
def journals_by_date_range(start_date: str, end_date: str,
                           user_id: str = Depends(get_current_user), db: Session = Depends(get_db)):
    entries = JournalService.get_journals_by_date_range(db, user_id, start_date, end_date)
    return [e.to_dict() for e in entries]


@router.get("/{journal_id}")
def get_journal(journal_id: int, user_id: str = Depends(get_current_user), db: Session = Depends(get_db)):
    return JournalService.get_journal(db, journal_id, user_id).to_dict()


@router.put("/{journal_id}/content")
def save_content(journal_id: int, body: JournalContent,
                 user_id: str = Depends(get_current_user), db: Session = Depends(get_db)):
    entry = JournalService.save_content(
        db, journal_id, user_id, body.content, word_count=body.word_count, is_draft=body.is_draft
    )
    return {"status": "success", "data": entry.to_dict(), "streak": StreakService.get_streak(db, user_id)}


@router.put("/{journal_id}/autosave")
def auto_save_content(journal_id: int, body: JournalAutoSave,
                      user_id: str = Depends(get_current_user), db: Session = Depends(get_db)):
    entry = JournalService.auto_save_content(db, journal_id, user_id, body.content, word_count=body.word_count)
    return {"status": "success", "data": entry.to_dict()}


@router.put("/{journal_id}/title")
def update_title(journal_id: int, body: JournalTitle,
                 user_id: str = Depends(get_current_user), db: Session = Depends(get_db)):
    return {"status": "success", "data": JournalService.update_title(db, journal_id, user_id, body.title).to_dict()}


@router.put("/{journal_id}/prompt")
def update_prompt(journal_id: int, body: JournalPrompt,
                  user_id: str = Depends(get_current_user), db: Session = Depends(get_db)):
    entry = JournalService.update_prompt(db, journal_id, user_id, body.prompt, body.is_custom_prompt)
    return {"status": "success", "data": entry.to_dict()}


@router.put("/{journal_id}/tags")
def update_tags(journal_id: int, body: JournalTags,
                user_id: str = Depends(get_current_user), db: Session = Depends(get_db)):
    return {"status": "success", "data": JournalService.update_tags(db, journal_id, user_id, body.tags).to_dict()}


@router.delete("/{journal_id}")
def delete_journal(journal_id: int, user_id: str = Depends(get_current_user), db: Session = Depends(get_db)):
    JournalService.delete_journal(db, journal_id, user_id)
    return {"status": "success"}
