from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from wellnest.auth import get_current_user
from wellnest.database import get_db
from wellnest.services.streak_service import StreakService

router = APIRouter(prefix="/api/v1/streak", tags=["Streak"])


@router.get("")
def get_streak(user_id: str = Depends(get_current_user), db: Session = Depends(get_db)):
    return StreakService.get_streak(db, user_id)


@router.post("/credit")
def credit_today(user_id: str = Depends(get_current_user), db: Session = Depends(get_db)):
    return StreakService.credit_activity_for_today(db, user_id)
