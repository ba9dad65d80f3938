"""Search audit service."""
from uuid import UUID
from sqlalchemy.orm import Session

from models.search_history import SearchHistory
from services.conversations import store_operation


class SearchHistoryService:
    """Records the searches issued while answering messages. Rows are never read back."""
    
    @staticmethod
    def record_search(db: Session, thread_id: UUID, query: str, results_count: int) -> SearchHistory:
        entry = SearchHistory(thread_id=thread_id, query=query, results_count=results_count)
        
        with store_operation(db, f"recording search for thread {thread_id}"):
            db.add(entry)
        
        return entry
