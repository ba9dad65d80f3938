"""Thread model for conversation management."""
from datetime import datetime, timezone
from sqlalchemy import Column, String, DateTime, Uuid
from sqlalchemy.orm import declarative_base, relationship
from uuid import uuid4

Base = declarative_base()


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Thread(Base):
    """
    SQLAlchemy model for conversation threads.
    
    A thread groups the ordered messages of one conversation together with
    the search audit rows recorded while answering them.
    """
    __tablename__ = "threads"
    
    id = Column(Uuid, primary_key=True, default=uuid4, index=True)
    title = Column(String(255), nullable=False, default="New Conversation")
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow, index=True)
    
    messages = relationship(
        "Message",
        back_populates="thread",
        cascade="all, delete-orphan",
        order_by="[Message.created_at, Message.position]",
    )
    searches = relationship("SearchHistory", back_populates="thread", cascade="all, delete-orphan")
