"""
History Gateway - the only code that reads or writes history_records.

Two very different failure policies live here:

- record(): best effort. It runs after the user already has their answer,
  so storage errors are rolled back and logged, never raised.
- toggle_saved(): a direct user action. Storage errors surface as
  PersistenceError, and a record that doesn't exist or belongs to someone
  else surfaces as NotFoundOrNotOwned without touching the row.

The gateway opens its own short-lived sessions from a session factory
instead of borrowing the request's session, because record() runs in a
worker thread after the request may already have finished.
"""

import logging
from typing import Callable, List, Optional
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from medisage.ai.errors import NotFoundOrNotOwned, PersistenceError
from medisage.ai.schemas.query import QueryKind
from medisage.db.session import SessionLocal
from medisage.models.history import HistoryRecord

logger = logging.getLogger("medisage.history")


class HistoryGateway:
    """
    Append-only history store with a `saved` flag.

    Usage:
        history_gateway.record(HistoryRecord(kind="medical-query", ...))
        history_gateway.toggle_saved(QueryKind.MEDICAL_QUERY, 42, user.id, True)
    """

    def __init__(self, session_factory: Optional[Callable[[], Session]] = None):
        self._session_factory = session_factory or SessionLocal

    def record(self, record: HistoryRecord) -> None:
        """
        Persist one history record. Never raises for storage failures.

        Blocking; the orchestrator runs it via asyncio.to_thread.
        """
        session = self._session_factory()
        try:
            session.add(record)
            session.commit()
            logger.info(f"History recorded: kind={record.kind} id={record.id}")
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"Failed to record {record.kind} history: {e}")
        finally:
            session.close()

    def toggle_saved(
        self,
        kind: QueryKind,
        record_id: int,
        user_id: UUID,
        saved: bool,
    ) -> HistoryRecord:
        """
        Set the saved flag on a record owned by user_id.

        Setting the same value twice is a no-op, not a flip.

        Raises:
            NotFoundOrNotOwned: no such record of that kind, or another user's
            PersistenceError: the store failed
        """
        kind = QueryKind(kind)
        session = self._session_factory()
        try:
            record = session.get(HistoryRecord, record_id)
            if record is None or record.kind != kind.value or record.user_id != user_id:
                raise NotFoundOrNotOwned(f"{kind.value} {record_id} not found")

            if record.saved != saved:
                record.saved = saved
                session.commit()
                session.refresh(record)
            return record
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"Failed to update saved flag on {kind.value} {record_id}: {e}")
            raise PersistenceError("Failed to update item") from e
        finally:
            session.close()

    def list_history(
        self,
        user_id: UUID,
        kind: Optional[QueryKind] = None,
        saved_only: bool = False,
    ) -> List[HistoryRecord]:
        """Records owned by user_id, newest first by timestamp."""
        session = self._session_factory()
        try:
            query = session.query(HistoryRecord).filter(HistoryRecord.user_id == user_id)
            if kind is not None:
                query = query.filter(HistoryRecord.kind == QueryKind(kind).value)
            if saved_only:
                query = query.filter(HistoryRecord.saved.is_(True))
            return query.order_by(
                HistoryRecord.timestamp.desc(), HistoryRecord.id.desc()
            ).all()
        except SQLAlchemyError as e:
            logger.error(f"Failed to load history for user {user_id}: {e}")
            raise PersistenceError("Failed to load history") from e
        finally:
            session.close()


# ---------------------------------------------------------------------------
# SINGLETON INSTANCE
# ---------------------------------------------------------------------------
history_gateway = HistoryGateway()


def get_history_gateway() -> HistoryGateway:
    """FastAPI dependency; tests override it with a gateway bound to their database."""
    return history_gateway
