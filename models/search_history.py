"""Search audit model."""
from sqlalchemy import Column, DateTime, ForeignKey, Integer, Text, Uuid
from sqlalchemy.orm import relationship
from uuid import uuid4
from .threads import Base, utcnow


class SearchHistory(Base):
    """Write-only audit row: one per search issued while answering a message."""
    __tablename__ = "search_history"
    
    id = Column(Uuid, primary_key=True, default=uuid4)
    thread_id = Column(Uuid, ForeignKey("threads.id", ondelete="CASCADE"), nullable=False, index=True)
    query = Column(Text, nullable=False)
    results_count = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    
    thread = relationship("Thread", back_populates="searches")
