from pydantic import BaseModel, Field

from schemas.search import SearchSource

class ChatRequest(BaseModel):
    content: str = Field(..., min_length=1, max_length=4000, description="User message text")
    source: SearchSource = Field(default=SearchSource.BLOB, description="Document index to search for this turn")
    search_all: bool = Field(default=False, description="Search every configured source instead of only the selected one")
