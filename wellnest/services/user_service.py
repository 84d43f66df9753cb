"""
user_service.py — Users keyed by the identity provider's subject
Signup seeds a zeroed streak; finishing onboarding unlocks the first achievement.
"""

import logging
from datetime import datetime

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from wellnest.errors import NotFoundOrForbidden, store_guard
from wellnest.models.user import User
from wellnest.services.streak_service import ONBOARDING_ACHIEVEMENT, StreakService
from wellnest.utils.day_keys import as_utc, utc_now

logger = logging.getLogger(__name__)


class UserService:
    @staticmethod
    def get_or_create_user(
        db: Session,
        user_id: str,
        email: str | None = None,
        name: str | None = None,
        profile_image: str | None = None,
    ) -> User:
        with store_guard(db):
            user = db.query(User).filter_by(user_id=user_id).first()
            if user is None:
                user = UserService._create(db, user_id, email, name, profile_image)

        # also repairs a user whose streak insert never landed
        StreakService.ensure_streak_record(db, user_id)
        return user

    @staticmethod
    def _create(db: Session, user_id: str, email: str | None, name: str | None,
                profile_image: str | None) -> User:
        now = utc_now()
        user = User(
            user_id=user_id,
            email=email,
            name=name,
            profile_image=profile_image,
            onboarding_completed=False,
            created_at=now,
            updated_at=now,
        )
        db.add(user)
        try:
            db.commit()
            logger.info("Created user %s", user_id)
        except IntegrityError:
            db.rollback()
            user = db.query(User).filter_by(user_id=user_id).one()
        return user

    @staticmethod
    def get_user(db: Session, user_id: str) -> User:
        with store_guard(db):
            user = db.query(User).filter_by(user_id=user_id).first()
        if user is None:
            raise NotFoundOrForbidden("User not found")
        return user

    @staticmethod
    def complete_onboarding(db: Session, user_id: str, now: datetime | None = None) -> User:
        moment = as_utc(now or utc_now())
        user = UserService.get_user(db, user_id)
        with store_guard(db):
            if not user.onboarding_completed:
                user.onboarding_completed = True
                user.onboarding_completed_at = moment
                user.updated_at = moment
                db.commit()

        StreakService.unlock_achievement(
            db,
            user_id,
            ONBOARDING_ACHIEVEMENT["type"],
            ONBOARDING_ACHIEVEMENT["title"],
            ONBOARDING_ACHIEVEMENT["description"],
            unlocked_at=moment,
        )
        return user

    @staticmethod
    def save_onboarding_feedback(db: Session, user_id: str, responses: dict, feedback: dict,
                                 now: datetime | None = None) -> User:
        """Keep the latest questionnaire answers and reflection so the dashboard can show them again."""
        moment = as_utc(now or utc_now())
        user = UserService.get_or_create_user(db, user_id)
        with store_guard(db):
            user.onboarding_responses = dict(responses)
            user.onboarding_feedback = dict(feedback)
            user.updated_at = moment
            db.commit()
        return user

    @staticmethod
    def get_dashboard(db: Session, user_id: str) -> dict:
        user = UserService.get_user(db, user_id)
        return {
            "user": {
                "user_id": user.user_id,
                "email": user.email,
                "name": user.name,
                "profile_image": user.profile_image,
                "onboarding_completed": user.onboarding_completed,
                "onboarding_completed_at": (
                    user.onboarding_completed_at.isoformat() if user.onboarding_completed_at else None
                ),
            },
            "streak": StreakService.get_streak(db, user_id),
            "onboarding": {
                "responses": user.onboarding_responses,
                "feedback": user.onboarding_feedback,
            } if user.onboarding_responses is not None else None,
            "needs_onboarding": not user.onboarding_completed,
        }
