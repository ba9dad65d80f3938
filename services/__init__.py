from .threads import ThreadService
from .messages import MessageService
from .search_history import SearchHistoryService
from .conversations import ConversationStoreError
from .azure_search import AzureSearchAdapter, AzureSearchClient, AzureSearchRequestError
from .fanout import SearchFanout, FanoutResult, build_fanout
from .composer import compose, ComposedResponse
from .blob_storage import BlobStorageService, BlobStorageRequestError
from .chat import ChatService, ChatTurn, TurnInProgressError

__all__ = ["ThreadService", "MessageService", "SearchHistoryService", "ConversationStoreError",
           "AzureSearchAdapter", "AzureSearchClient", "AzureSearchRequestError",
           "SearchFanout", "FanoutResult", "build_fanout", "compose", "ComposedResponse",
           "BlobStorageService", "BlobStorageRequestError",
           "ChatService", "ChatTurn", "TurnInProgressError"]
