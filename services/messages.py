"""Message service for appending and reading conversation turns."""
from typing import Any, Dict, List, Optional
from uuid import UUID
from sqlalchemy.orm import Session

from models.messages import Message, MessageRole
from services.conversations import store_operation


class MessageService:
    """Service class for message operations."""
    
    @staticmethod
    def append_message(
        db: Session,
        thread_id: UUID,
        role: MessageRole,
        content: str,
        sources: Optional[List[Dict[str, Any]]] = None
    ) -> Message:
        """Store a message at the end of a thread."""
        message = Message(
            thread_id=thread_id,
            role=MessageRole(role),
            content=content,
            sources=sources,
            position=MessageService.count_messages(db, thread_id)
        )
        
        with store_operation(db, f"appending {MessageRole(role).value} message to thread {thread_id}"):
            db.add(message)
        db.refresh(message)
        
        return message
    
    @staticmethod
    def list_messages(db: Session, thread_id: UUID) -> List[Message]:
        """Messages of a thread in creation order."""
        return db.query(Message).filter(
            Message.thread_id == thread_id
        ).order_by(Message.created_at, Message.position).all()
    
    @staticmethod
    def count_messages(db: Session, thread_id: UUID) -> int:
        return db.query(Message).filter(Message.thread_id == thread_id).count()
