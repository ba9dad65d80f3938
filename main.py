from fastapi import FastAPI, Depends, HTTPException, Query, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from typing import List, Optional
from uuid import UUID
import logging

import httpx

logger = logging.getLogger(__name__)

# Local imports
from config import settings
from database import get_db, engine
from dtos.chat_request import ChatRequest
from models import Base
from schemas import (
    ThreadCreate, ThreadUpdate, ThreadResponse,
    MessageResponse, ChatTurnResponse,
    AzureConfigOverride, SearchRequest, SearchResponse, SearchDebugInfo,
    StorageRequest, BlobListResponse, BlobUrlResponse,
)
from services import (
    ThreadService, MessageService, ConversationStoreError,
    AzureSearchClient, AzureSearchRequestError, build_fanout,
    BlobStorageService, BlobStorageRequestError,
    ChatService, TurnInProgressError,
)
from sqlalchemy.orm import Session
from sqlalchemy import text


search_fanout = build_fanout(settings)
chat_service = ChatService(search_fanout, top=settings.chat_top)
blob_storage_service = BlobStorageService(settings.storage)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logging.basicConfig(level=settings.log_level)

    # Create tables if they don't exist
    Base.metadata.create_all(bind=engine)
    logger.info("Conversation tables ready")

    configured = [source.value for source in search_fanout.configured_sources]
    logger.info(f"Configured search sources: {configured or 'none'}")

    yield


app = FastAPI(
    title="Azure Knowledge Chat",
    version="1.0.0",
    lifespan=lifespan
)

# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "X-Client-Info", "Apikey"],
    max_age=3600
)


@app.exception_handler(ConversationStoreError)
async def conversation_store_error_handler(request: Request, exc: ConversationStoreError):
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Conversation store failure", "message": str(exc)}
    )


# Dependencies, overridable in tests
def get_chat_service() -> ChatService:
    return chat_service


def get_blob_storage() -> BlobStorageService:
    return blob_storage_service


def get_search_transport() -> Optional[httpx.AsyncBaseTransport]:
    return None


@app.get("/")
async def root():
    return {"message": "Azure Knowledge Chat", "status": "running"}

@app.get("/health")
async def health_check():
    return {"status": "healthy", "service": "azure-knowledge-chat"}


@app.get("/health/detailed")
async def detailed_health_check(
    db: Session = Depends(get_db),
    chat: ChatService = Depends(get_chat_service),
    storage: BlobStorageService = Depends(get_blob_storage)
):
    """Database connectivity plus configuration status of each external service."""
    health_status = {
        "status": "healthy",
        "service": "azure-knowledge-chat",
        "checks": {}
    }

    # Check database connection
    try:
        db.execute(text("SELECT 1"))
        health_status["checks"]["database"] = {"status": "healthy"}
    except Exception as e:
        health_status["checks"]["database"] = {"status": "unhealthy", "error": str(e)}
        health_status["status"] = "unhealthy"

    for source, adapter in chat.fanout.adapters.items():
        health_status["checks"][f"search_{source.value}"] = {
            "status": "configured" if adapter.config.is_configured else "not_configured",
            "index": adapter.config.index or None
        }

    health_status["checks"]["storage"] = {
        "status": "configured" if storage.config.is_configured else "not_configured",
        "container": storage.container
    }

    return health_status


# Edge endpoints
@app.post("/azure-search", response_model=SearchResponse)
async def azure_search(
    req: SearchRequest,
    transport: Optional[httpx.AsyncBaseTransport] = Depends(get_search_transport)
):
    """Search the document index, with optional per-request credentials."""
    override = req.azure_config or AzureConfigOverride()
    config = settings.blob_search.with_overrides(override.endpoint, override.key, override.index)

    if not config.endpoint or not config.key:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": "Azure Search credentials not configured",
                "message": "Please provide Azure credentials in the request or set environment variables"
            }
        )

    query = (req.query or "").strip()
    if not query:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": "Query parameter is required"}
        )

    client = AzureSearchClient(config, transport=transport)
    try:
        data = await client.query(query, req.top)
    except AzureSearchRequestError as e:
        return JSONResponse(
            status_code=e.status_code,
            content={
                "error": "Azure Search request failed",
                "details": e.details,
                "statusCode": e.status_code,
                "searchUrl": e.url,
                "indexName": e.index
            }
        )
    except (httpx.HTTPError, ValueError) as e:
        logger.error(f"Azure Search error: {e!r}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Internal server error", "message": str(e) or type(e).__name__}
        )

    results = data.get("value") or []
    return SearchResponse(
        query=query,
        count=len(results),
        results=results,
        debug_info=SearchDebugInfo(
            endpoint=config.endpoint,
            index=config.index,
            total_results=data.get("@odata.count")
        )
    )


@app.post("/azure-storage")
async def azure_storage(
    req: StorageRequest,
    storage: BlobStorageService = Depends(get_blob_storage)
):
    """List the container or resolve a blob URL."""
    if not storage.config.is_configured:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": "Azure Storage credentials not configured",
                "message": "Please set AZURE_STORAGE_ACCOUNT and AZURE_STORAGE_KEY environment variables"
            }
        )

    if req.operation == "list":
        try:
            xml = await storage.list_blobs()
        except BlobStorageRequestError as e:
            return JSONResponse(
                status_code=e.status_code,
                content={"error": "Failed to list blobs", "details": e.details}
            )
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Azure Storage error: {e!r}")
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={"error": "Internal server error", "message": str(e) or type(e).__name__}
            )
        return BlobListResponse(container=storage.container, xml=xml).model_dump()

    if req.operation == "get" and req.blob_name:
        return BlobUrlResponse(
            blob_url=storage.get_blob_url(req.blob_name),
            blob_name=req.blob_name
        ).model_dump(by_alias=True)

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "Invalid operation or missing parameters"}
    )


# Thread management endpoints
@app.post("/threads", response_model=ThreadResponse, status_code=status.HTTP_201_CREATED)
async def create_thread(
    thread: Optional[ThreadCreate] = None,
    db: Session = Depends(get_db)
) -> ThreadResponse:
    """Create a new conversation thread."""
    db_thread = ThreadService.create_thread(db=db, thread_data=thread)
    return ThreadResponse.model_validate(db_thread)


@app.get("/threads", response_model=List[ThreadResponse])
async def list_threads(
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db)
) -> List[ThreadResponse]:
    """List threads, most recently updated first."""
    threads = ThreadService.list_threads(db=db, skip=skip, limit=limit)
    return [ThreadResponse.model_validate(thread) for thread in threads]


@app.get("/threads/{thread_id}", response_model=ThreadResponse)
async def get_thread(
    thread_id: UUID,
    db: Session = Depends(get_db)
) -> ThreadResponse:
    """Get a specific thread by ID."""
    thread = ThreadService.get_thread(db=db, thread_id=thread_id)

    if not thread:
        raise HTTPException(status_code=404, detail="Thread not found")

    return ThreadResponse.model_validate(thread)


@app.patch("/threads/{thread_id}", response_model=ThreadResponse)
async def rename_thread(
    thread_id: UUID,
    thread_update: ThreadUpdate,
    db: Session = Depends(get_db)
) -> ThreadResponse:
    """Rename a thread."""
    updated_thread = ThreadService.rename_thread(
        db=db,
        thread_id=thread_id,
        title=thread_update.title
    )

    if not updated_thread:
        raise HTTPException(status_code=404, detail="Thread not found")

    return ThreadResponse.model_validate(updated_thread)


@app.delete("/threads/{thread_id}")
async def delete_thread(
    thread_id: UUID,
    db: Session = Depends(get_db)
) -> dict:
    """Delete a thread with its messages."""
    deleted = ThreadService.delete_thread(db=db, thread_id=thread_id)

    if not deleted:
        raise HTTPException(status_code=404, detail="Thread not found")

    return {"message": "Thread deleted successfully"}


# Message endpoints
@app.get("/threads/{thread_id}/messages", response_model=List[MessageResponse])
async def list_messages(
    thread_id: UUID,
    db: Session = Depends(get_db)
) -> List[MessageResponse]:
    """List a thread's messages in the order they were written."""
    if not ThreadService.get_thread(db=db, thread_id=thread_id):
        raise HTTPException(status_code=404, detail="Thread not found")

    messages = MessageService.list_messages(db=db, thread_id=thread_id)
    return [MessageResponse.model_validate(message) for message in messages]


@app.post("/threads/{thread_id}/messages", response_model=ChatTurnResponse)
async def send_message(
    thread_id: UUID,
    req: ChatRequest,
    db: Session = Depends(get_db),
    chat: ChatService = Depends(get_chat_service)
) -> ChatTurnResponse:
    """Send a user message and get the assistant reply built from search results."""
    try:
        turn = await chat.send_message(db=db, thread_id=thread_id, request=req)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except TurnInProgressError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

    if turn is None:
        raise HTTPException(status_code=404, detail="Thread not found")

    return ChatTurnResponse.model_validate(turn)
