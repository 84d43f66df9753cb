from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, DateTime, JSON
from wellnest.database import Base


class StreakRecord(Base):
    __tablename__ = "user_streaks"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(255), unique=True, nullable=False, index=True)
    current_streak = Column(Integer, default=0, nullable=False)
    longest_streak = Column(Integer, default=0, nullable=False)
    last_entry_date = Column(String(10), nullable=True)  # UTC day key
    # JSON list of {type, unlocked_at, title, description}; reassign, never mutate in place
    achievements = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
