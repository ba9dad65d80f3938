"""Pydantic schemas for messages and chat turns."""
from datetime import datetime
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict
from uuid import UUID

from models.messages import MessageRole
from schemas.threads import ThreadResponse


class MessageResponse(BaseModel):
    """Schema for a stored message."""
    id: UUID
    thread_id: UUID
    role: MessageRole
    content: str
    sources: Optional[List[Dict[str, Any]]] = None
    created_at: datetime
    
    model_config = ConfigDict(from_attributes=True)


class ChatTurnResponse(BaseModel):
    """Schema for the outcome of one user turn."""
    thread: ThreadResponse
    user_message: MessageResponse
    assistant_message: MessageResponse
    total_results: int
    
    model_config = ConfigDict(from_attributes=True)
