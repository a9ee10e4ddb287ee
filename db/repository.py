"""
Thin wrappers around SQLAlchemy sessions: the symptom log slot and chat history.
"""
import logging
import os
from contextlib import contextmanager
from pathlib import Path
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from assistant.schemas import ChatMessage, ChatRole
from db.engine import get_engine, init_db, resolve_db_path
from db.models import ChatMessageORM, KeyValueSlotORM
from tracking.errors import PersistenceError

logger = logging.getLogger(__name__)

_engine = None
_SessionLocal = None
_engine_path: Optional[Path] = None


@contextmanager
def session_scope():
    """
    Provide a transactional database session scoped to the current engine.

    The engine is (re)created whenever the resolved database path changes, which
    happens when HEALTH_DB_PATH is set or the working directory moves. Tables are
    created on first use of each path. The context commits on success, rolls back
    and re-raises on exception, and always closes the session.
    """
    global _engine, _SessionLocal, _engine_path

    desired_path = resolve_db_path()
    if _SessionLocal is None or desired_path != _engine_path:
        if _engine is not None:
            _engine.dispose()
        _engine = init_db(get_engine(desired_path))
        _SessionLocal = sessionmaker(bind=_engine, expire_on_commit=False)
        _engine_path = desired_path
        logger.info("Using database at %s", desired_path)

    db = _SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


# ---------- symptom log slot -------------------------------------------


class SqlSlot:
    """Persistence slot stored as one row of the ``key_value_slots`` table."""

    def __init__(self, key: Optional[str] = None) -> None:
        self.key = key or os.getenv("SYMPTOM_SLOT_KEY", "healthwise_symptoms")

    def read(self) -> Optional[str]:
        try:
            with session_scope() as db:
                row = db.get(KeyValueSlotORM, self.key)
                return row.value if row else None
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Could not read slot {self.key!r}: {exc}") from exc

    def write(self, payload: str) -> None:
        try:
            with session_scope() as db:
                row = db.get(KeyValueSlotORM, self.key)
                if row is None:
                    db.add(KeyValueSlotORM(key=self.key, value=payload))
                else:
                    row.value = payload
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Could not write slot {self.key!r}: {exc}") from exc


# ---------- chat history ------------------------------------------------


def save_chat_message(user_id: str, role: ChatRole, text: str) -> ChatMessage:
    """Append one chat turn for ``user_id`` with a server-side timestamp."""
    try:
        with session_scope() as db:
            row = ChatMessageORM(
                user_id=user_id,
                role=role,
                text=text,
                created_at=datetime.now(timezone.utc),
            )
            db.add(row)
            db.flush()
            return ChatMessage.model_validate(row, from_attributes=True)
    except SQLAlchemyError as exc:
        logger.error("Failed to save chat message for %s: %s", user_id, exc)
        raise PersistenceError("Could not save chat message.") from exc


def get_chat_history(user_id: str) -> List[ChatMessage]:
    """Return ``user_id``'s chat messages, oldest first."""
    try:
        with session_scope() as db:
            rows = db.scalars(
                select(ChatMessageORM)
                .where(ChatMessageORM.user_id == user_id)
                .order_by(ChatMessageORM.created_at, ChatMessageORM.id)
            ).all()
            return [ChatMessage.model_validate(row, from_attributes=True) for row in rows]
    except SQLAlchemyError as exc:
        logger.error("Failed to load chat history for %s: %s", user_id, exc)
        raise PersistenceError("Could not retrieve chat history.") from exc
