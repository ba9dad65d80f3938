"""Thread service for CRUD operations."""
from typing import Optional, List
from uuid import UUID
from sqlalchemy.orm import Session
from sqlalchemy import desc

from models.threads import Thread
from schemas.threads import ThreadCreate
from services.conversations import store_operation


class ThreadService:
    """Service class for thread CRUD operations."""
    
    @staticmethod
    def create_thread(db: Session, thread_data: Optional[ThreadCreate] = None) -> Thread:
        """Create a new thread."""
        thread_data = thread_data or ThreadCreate()
        db_thread = Thread(title=thread_data.title or "New Conversation")
        
        with store_operation(db, "creating thread"):
            db.add(db_thread)
        db.refresh(db_thread)
        
        return db_thread
    
    @staticmethod
    def get_thread(db: Session, thread_id: UUID) -> Optional[Thread]:
        """Retrieve a thread by ID."""
        return db.query(Thread).filter(Thread.id == thread_id).first()
    
    @staticmethod
    def list_threads(db: Session, skip: int = 0, limit: int = 20) -> List[Thread]:
        """Retrieve threads, most recently updated first."""
        return db.query(Thread).order_by(
            desc(Thread.updated_at)
        ).offset(skip).limit(limit).all()
    
    @staticmethod
    def rename_thread(db: Session, thread_id: UUID, title: str) -> Optional[Thread]:
        """Change a thread's title."""
        thread = ThreadService.get_thread(db, thread_id)
        
        if not thread:
            return None
        
        with store_operation(db, f"renaming thread {thread_id}"):
            thread.title = title
        db.refresh(thread)
        
        return thread
    
    @staticmethod
    def delete_thread(db: Session, thread_id: UUID) -> bool:
        """Delete a thread together with its messages and search history."""
        thread = ThreadService.get_thread(db, thread_id)
        
        if not thread:
            return False
        
        with store_operation(db, f"deleting thread {thread_id}"):
            db.delete(thread)
        
        return True
