"""Chat turn orchestration: persist, search, compose, persist."""
import logging
from dataclasses import dataclass
from typing import List, Optional, Set
from uuid import UUID

from sqlalchemy.orm import Session

from dtos.chat_request import ChatRequest
from models import Message, MessageRole, Thread
from schemas.search import SearchSource
from services.composer import compose
from services.conversations import ConversationStoreError
from services.fanout import SearchFanout
from services.messages import MessageService
from services.search_history import SearchHistoryService
from services.threads import ThreadService

logger = logging.getLogger(__name__)

TITLE_WORDS = 6
TITLE_MAX_LENGTH = 255


class TurnInProgressError(Exception):
    """A message was sent to a thread that is still answering the previous one."""


@dataclass
class ChatTurn:
    thread: Thread
    user_message: Message
    assistant_message: Message
    total_results: int


def derive_title(content: str) -> str:
    """First words of the opening message, marked with '...' when cut short."""
    words = content.split()
    title = " ".join(words[:TITLE_WORDS])
    if len(words) > TITLE_WORDS:
        title = f"{title}..."
    return title[:TITLE_MAX_LENGTH]


class ChatService:
    """Runs one user turn against a thread. Turns on the same thread never overlap."""

    def __init__(self, fanout: SearchFanout, top: int = 3):
        self.fanout = fanout
        self.top = top
        self._in_flight: Set[UUID] = set()

    def is_sending(self, thread_id: UUID) -> bool:
        return thread_id in self._in_flight

    def _sources_for(self, request: ChatRequest) -> List[SearchSource]:
        if request.search_all:
            return self.fanout.configured_sources or [request.source]
        return [request.source]

    async def send_message(self, db: Session, thread_id: UUID, request: ChatRequest) -> Optional[ChatTurn]:
        """
        Answer a user message.

        Returns None when the thread does not exist.

        Raises:
            ValueError: the message is blank
            TurnInProgressError: the thread is still answering a previous message
            ConversationStoreError: a message could not be stored
        """
        content = request.content.strip()
        if not content:
            raise ValueError("Message content cannot be empty")

        thread = ThreadService.get_thread(db, thread_id)
        if thread is None:
            return None

        if self.is_sending(thread_id):
            raise TurnInProgressError(f"Thread {thread_id} is still answering the previous message")

        self._in_flight.add(thread_id)
        try:
            return await self._run_turn(db, thread, content, request)
        finally:
            self._in_flight.discard(thread_id)

    async def _run_turn(self, db: Session, thread: Thread, content: str, request: ChatRequest) -> ChatTurn:
        is_first_message = MessageService.count_messages(db, thread.id) == 0

        user_message = MessageService.append_message(db, thread.id, MessageRole.USER, content)

        if is_first_message:
            thread = ThreadService.rename_thread(db, thread.id, derive_title(content)) or thread

        result = await self.fanout.fanout(content, self._sources_for(request), top=self.top)

        try:
            SearchHistoryService.record_search(db, thread.id, content, result.total_results)
        except ConversationStoreError as e:
            logger.warning(f"Search audit skipped for thread {thread.id}: {e}")

        reply = compose(result)
        assistant_message = MessageService.append_message(
            db, thread.id, MessageRole.ASSISTANT, reply.text, sources=reply.sources
        )
        db.refresh(thread)

        logger.info(f"Answered message in thread {thread.id} with {result.total_results} result(s)")
        return ChatTurn(
            thread=thread,
            user_message=user_message,
            assistant_message=assistant_message,
            total_results=result.total_results,
        )
