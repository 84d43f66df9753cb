from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from wellnest.auth import get_current_user
from wellnest.database import get_db
from wellnest.services.feedback_service import FeedbackService, OnboardingFeedbackRequest
from wellnest.services.llm_router import get_llm_router
from wellnest.services.user_service import UserService

router = APIRouter(prefix="/api/v1/onboarding", tags=["Onboarding"])


def get_feedback_service() -> FeedbackService:
    return FeedbackService(get_llm_router())


@router.post("/feedback")
async def onboarding_feedback(
    body: OnboardingFeedbackRequest,
    user_id: str = Depends(get_current_user),
    db: Session = Depends(get_db),
    service: FeedbackService = Depends(get_feedback_service),
):
    result = await service.generate(body)
    payload = result.model_dump()
    UserService.save_onboarding_feedback(db, user_id, body.model_dump(), payload)
    return {"status": "success", **payload}
