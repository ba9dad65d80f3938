"""Shared failure handling for the conversation store services."""
from contextlib import contextmanager
from typing import Iterator
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
import logging

logger = logging.getLogger(__name__)


class ConversationStoreError(Exception):
    """A thread, message or audit write could not be applied."""


@contextmanager
def store_operation(db: Session, action: str) -> Iterator[None]:
    """Commit the work done in the block; roll back and log on database errors."""
    try:
        yield
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error {action}: {e}")
        raise ConversationStoreError(f"Error {action}") from e
