# Import all models so they register with SQLAlchemy Base.metadata
# This ensures Base.metadata.create_all() creates all tables

from wellnest.models.user import User
from wellnest.models.journal import JournalEntry
from wellnest.models.daily_aggregate import DailyAggregate, ACTIVITY_KINDS
from wellnest.models.streak import StreakRecord

__all__ = [
    "User",
    "JournalEntry",
    "DailyAggregate",
    "ACTIVITY_KINDS",
    "StreakRecord",
]
