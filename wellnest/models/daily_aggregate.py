from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, DateTime, UniqueConstraint
from wellnest.database import Base

ACTIVITY_KINDS = ("meditation", "breathing")


class DailyAggregate(Base):
    __tablename__ = "daily_aggregates"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(255), nullable=False)
    activity_kind = Column(String(20), nullable=False)  # meditation/breathing
    date = Column(String(10), nullable=False)  # UTC day key, YYYY-MM-DD
    minutes = Column(Integer, default=0, nullable=False)
    session_count = Column(Integer, default=1, nullable=False)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        UniqueConstraint("user_id", "activity_kind", "date", name="uq_aggregate_user_kind_date"),
    )

    def to_dict(self) -> dict:
        return {
            "user_id": self.user_id,
            "activity_kind": self.activity_kind,
            "date": self.date,
            "minutes": self.minutes,
            "session_count": self.session_count,
        }
