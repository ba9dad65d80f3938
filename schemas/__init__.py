from .threads import ThreadCreate, ThreadUpdate, ThreadResponse
from .messages import MessageResponse, ChatTurnResponse
from .search import (
    SearchSource, SearchDebugInfo, SourceDocument, SearchOutcome,
    AzureConfigOverride, SearchRequest, SearchResponse,
)
from .storage import StorageRequest, BlobListResponse, BlobUrlResponse

__all__ = ["ThreadCreate", "ThreadUpdate", "ThreadResponse",
           "MessageResponse", "ChatTurnResponse",
           "SearchSource", "SearchDebugInfo", "SourceDocument", "SearchOutcome",
           "AzureConfigOverride", "SearchRequest", "SearchResponse",
           "StorageRequest", "BlobListResponse", "BlobUrlResponse"]
