"""Search schemas shared by the adapter, fanout, composer and edge endpoint."""
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field
import enum


class SearchSource(str, enum.Enum):
    """Document indexes a chat turn can search."""
    BLOB = "blob"
    SHAREPOINT = "sharepoint"

    @property
    def label(self) -> str:
        return SOURCE_LABELS[self]


SOURCE_LABELS = {
    SearchSource.BLOB: "Azure Blob Storage",
    SearchSource.SHAREPOINT: "SharePoint",
}


class SearchDebugInfo(BaseModel):
    """Where a search was sent and what the provider reported in total."""
    endpoint: str
    index: str
    total_results: Optional[int] = Field(default=None, alias="totalResults")
    
    model_config = ConfigDict(populate_by_name=True)


class SourceDocument(BaseModel):
    """A provider record with its display title and body resolved once."""
    title: Optional[str] = None
    content: Optional[str] = None
    raw: Dict[str, Any] = Field(default_factory=dict)


class SearchOutcome(BaseModel):
    """Result of one adapter call. Failures are carried in `error`, never raised."""
    source: SearchSource
    query: str
    count: int = 0
    results: List[SourceDocument] = Field(default_factory=list)
    error: Optional[str] = None
    debug_info: Optional[SearchDebugInfo] = None


class AzureConfigOverride(BaseModel):
    """Per-request credentials that take precedence over the environment."""
    endpoint: Optional[str] = None
    key: Optional[str] = None
    index: Optional[str] = None


class SearchRequest(BaseModel):
    """Body of the search edge endpoint."""
    query: Optional[str] = None
    top: int = Field(default=5, ge=1, le=1000)
    azure_config: Optional[AzureConfigOverride] = Field(default=None, alias="azureConfig")
    
    model_config = ConfigDict(populate_by_name=True)


class SearchResponse(BaseModel):
    """Successful search edge endpoint response."""
    query: str
    count: int
    results: List[Dict[str, Any]]
    debug_info: SearchDebugInfo = Field(alias="debugInfo")
    
    model_config = ConfigDict(populate_by_name=True)
