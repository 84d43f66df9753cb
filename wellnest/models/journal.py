from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, JSON, Index
from wellnest.database import Base


class JournalEntry(Base):
    __tablename__ = "journal_entries"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(255), nullable=False)
    title = Column(String(500), nullable=False, default="New Journal")
    content = Column(JSON, nullable=True)  # editor block array, stored verbatim
    prompt = Column(Text, nullable=True)
    is_custom_prompt = Column(Boolean, default=False, nullable=False)
    word_count = Column(Integer, default=0, nullable=False)
    tags = Column(JSON, nullable=False, default=list)  # list of tag keys
    is_draft = Column(Boolean, default=True, nullable=False)
    is_private = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False)
    updated_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False)
    last_auto_saved = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index("ix_journal_user_created", "user_id", "created_at"),
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "title": self.title,
            "content": self.content,
            "prompt": self.prompt,
            "is_custom_prompt": self.is_custom_prompt,
            "word_count": self.word_count,
            "tags": list(self.tags or []),
            "is_draft": self.is_draft,
            "is_private": self.is_private,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
            "last_auto_saved": self.last_auto_saved.isoformat() if self.last_auto_saved else None,
        }
