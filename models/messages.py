"""Message model for user and assistant turns."""
from sqlalchemy import Column, DateTime, Enum, ForeignKey, Integer, JSON, Text, Uuid
from sqlalchemy.orm import relationship
from uuid import uuid4
from .threads import Base, utcnow
import enum


class MessageRole(str, enum.Enum):
    """Author of a message."""
    USER = "user"
    ASSISTANT = "assistant"


class Message(Base):
    """
    SQLAlchemy model for a single chat message.
    
    Assistant messages may carry the provider records they cite in `sources`,
    copied verbatim from the search results.
    """
    __tablename__ = "messages"
    
    id = Column(Uuid, primary_key=True, default=uuid4, index=True)
    thread_id = Column(Uuid, ForeignKey("threads.id", ondelete="CASCADE"), nullable=False, index=True)
    role = Column(Enum(MessageRole, values_callable=lambda e: [m.value for m in e]), nullable=False)
    content = Column(Text, nullable=False)
    sources = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    # Order within the thread; breaks created_at ties
    position = Column(Integer, nullable=False, default=0)
    
    thread = relationship("Thread", back_populates="messages")
