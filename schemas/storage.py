"""Schemas for the blob storage edge endpoint."""
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class StorageRequest(BaseModel):
    """Body of the storage edge endpoint."""
    operation: Optional[str] = Field(default=None, description="list or get")
    blob_name: Optional[str] = Field(default=None, alias="blobName")
    
    model_config = ConfigDict(populate_by_name=True)


class BlobListResponse(BaseModel):
    """Raw container listing as returned by the blob service."""
    container: str
    xml: str


class BlobUrlResponse(BaseModel):
    """Direct URL of a single blob."""
    blob_url: str = Field(alias="blobUrl")
    blob_name: str = Field(alias="blobName")
    
    model_config = ConfigDict(populate_by_name=True)
