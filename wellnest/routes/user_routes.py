from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from wellnest.auth import get_current_user
from wellnest.database import get_db
from wellnest.services.user_service import UserService

router = APIRouter(prefix="/api/v1/users", tags=["Users"])


class UserSync(BaseModel):
    email: Optional[str] = None
    name: Optional[str] = None
    profile_image: Optional[str] = None


@router.post("/me")
def sync_user(body: UserSync, user_id: str = Depends(get_current_user), db: Session = Depends(get_db)):
    """Called after sign-in; creates the user and its streak record on first visit."""
    UserService.get_or_create_user(db, user_id, email=body.email, name=body.name, profile_image=body.profile_image)
    return UserService.get_dashboard(db, user_id)


@router.get("/me/dashboard")
def dashboard(user_id: str = Depends(get_current_user), db: Session = Depends(get_db)):
    return UserService.get_dashboard(db, user_id)


@router.post("/me/onboarding/complete")
def complete_onboarding(user_id: str = Depends(get_current_user), db: Session = Depends(get_db)):
    UserService.complete_onboarding(db, user_id)
    return UserService.get_dashboard(db, user_id)
