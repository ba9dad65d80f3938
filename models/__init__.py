from .threads import Thread, Base
from .messages import Message, MessageRole
from .search_history import SearchHistory

__all__ = ["Thread", "Message", "MessageRole", "SearchHistory", "Base"]
