"""Pytest configuration and shared fixtures."""
import os

# Settings are read at import time; pin them before any project module loads.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ALLOWED_ORIGINS"] = "http://localhost:5173,https://chat.example.com"
os.environ["AZURE_SEARCH_ENDPOINT"] = "https://search.example.net"
os.environ["AZURE_SEARCH_KEY"] = "test-search-key"
os.environ["AZURE_SEARCH_INDEX"] = "blob-index"
os.environ["AZURE_SEARCH_SHAREPOINT_INDEX"] = "sharepoint-index"
os.environ["AZURE_STORAGE_ACCOUNT"] = "teststorage"
os.environ["AZURE_STORAGE_KEY"] = "c2VjcmV0LXN0b3JhZ2Uta2V5"
os.environ["AZURE_STORAGE_CONTAINER"] = "documents"
for var in ("AZURE_SEARCH_SEMANTIC_CONFIG", "AZURE_SEARCH_HIGHLIGHT", "AZURE_SEARCH_API_VERSION",
            "AZURE_SEARCH_TIMEOUT", "SEARCH_TOP", "CHAT_TOP",
            "AZURE_SEARCH_SHAREPOINT_ENDPOINT", "AZURE_SEARCH_SHAREPOINT_KEY"):
    os.environ.pop(var, None)

from typing import Any, Callable, Dict, List, Optional, Union

import httpx
import pytest
from fastapi.testclient import TestClient

from config import settings
from database import SessionLocal, engine
from models import Base
from services import BlobStorageService, ChatService, build_fanout


ResponseSpec = Union[httpx.Response, Callable[[httpx.Request], httpx.Response]]


class FakeSearchService:
    """Stands in for Azure Cognitive Search; answers per index name."""

    def __init__(self):
        self.responses: Dict[str, ResponseSpec] = {}
        self.requests: List[httpx.Request] = []
        self.transport = httpx.MockTransport(self.handle)

    def respond(self, index: str, records: Optional[List[Dict[str, Any]]] = None, **extra: Any) -> None:
        self.responses[index] = httpx.Response(200, json={"value": records or [], **extra})

    def fail(self, index: str, status_code: int, body: str) -> None:
        self.responses[index] = httpx.Response(status_code, text=body)

    def raise_error(self, index: str, exc: Exception) -> None:
        def _raise(request: httpx.Request) -> httpx.Response:
            raise exc
        self.responses[index] = _raise

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        index = request.url.path.split("/")[2]
        spec = self.responses.get(index)
        if spec is None:
            return httpx.Response(200, json={"value": []})
        if callable(spec):
            return spec(request)
        return spec


class FakeBlobService:
    """Stands in for Azure Blob Storage."""

    def __init__(self):
        self.response = httpx.Response(200, text="<EnumerationResults><Blobs/></EnumerationResults>")
        self.requests: List[httpx.Request] = []
        self.transport = httpx.MockTransport(self.handle)

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.response


@pytest.fixture
def fake_search() -> FakeSearchService:
    return FakeSearchService()


@pytest.fixture
def fake_blob() -> FakeBlobService:
    return FakeBlobService()


@pytest.fixture
def db_session():
    """Fresh in-memory schema per test."""
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def chat_service(fake_search: FakeSearchService) -> ChatService:
    return ChatService(build_fanout(settings, transport=fake_search.transport), top=settings.chat_top)


@pytest.fixture
def client(db_session, fake_search, fake_blob, chat_service):
    from main import app, get_blob_storage, get_chat_service, get_search_transport

    app.dependency_overrides[get_chat_service] = lambda: chat_service
    app.dependency_overrides[get_search_transport] = lambda: fake_search.transport
    app.dependency_overrides[get_blob_storage] = lambda: BlobStorageService(
        settings.storage, transport=fake_blob.transport
    )
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
