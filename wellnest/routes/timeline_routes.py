from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from wellnest.auth import get_current_user
from wellnest.database import get_db
from wellnest.services.timeline_service import TimelineService

router = APIRouter(prefix="/api/v1/timeline", tags=["Timeline"])


@router.get("")
def weekly_timeline(end_date: Optional[str] = None, days: int = 7,
                    user_id: str = Depends(get_current_user), db: Session = Depends(get_db)):
    return TimelineService.build_timeline(db, user_id, end_date=end_date, days=days)
