from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from wellnest.auth import get_current_user
from wellnest.database import get_db
from wellnest.services.practice_service import PracticeService
from wellnest.services.streak_service import StreakService

router = APIRouter(prefix="/api/v1/practice", tags=["Practice"])


class SessionLog(BaseModel):
    minutes: float
    date: Optional[str] = None  # YYYY-MM-DD UTC; default today
    count_toward_streak: bool = True


@router.post("/{activity_kind}/sessions")
def log_session(activity_kind: str, body: SessionLog,
                user_id: str = Depends(get_current_user), db: Session = Depends(get_db)):
    """Record a finished meditation/breathing session and, by default, credit today's streak."""
    aggregate = PracticeService.credit_session(db, user_id, activity_kind, body.minutes, date=body.date)
    # Separate atomic step: a failure here leaves the aggregate recorded and is safe to retry
    streak = StreakService.credit_activity_for_today(db, user_id) if body.count_toward_streak else None
    return {"status": "success", "data": aggregate, "streak": streak}


@router.get("/{activity_kind}/recent")
def recent_sessions(activity_kind: str, days: int = 14,
                    user_id: str = Depends(get_current_user), db: Session = Depends(get_db)):
    return PracticeService.get_recent_aggregates(db, user_id, activity_kind, day_count=days)
