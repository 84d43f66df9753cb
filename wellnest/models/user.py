from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, DateTime, Boolean, JSON
from wellnest.database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(255), unique=True, nullable=False, index=True)  # identity-provider subject
    email = Column(String(255), nullable=True)
    name = Column(String(255), nullable=True)
    profile_image = Column(String(1024), nullable=True)
    onboarding_completed = Column(Boolean, default=False, nullable=False)
    onboarding_completed_at = Column(DateTime(timezone=True), nullable=True)
    onboarding_responses = Column(JSON, nullable=True)  # questionnaire answers sent for feedback
    onboarding_feedback = Column(JSON, nullable=True)  # last AI reflection (or the fallback)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
