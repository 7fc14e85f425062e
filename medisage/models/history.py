"""
HistoryRecord model - one completed request/result pair.

Rows are appended by the Persistence Gateway after every successful
orchestration. The only mutation ever applied is the `saved` toggle;
nothing in the application deletes rows.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Dict

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from medisage.db.base import Base
from medisage.models.user import User


class HistoryRecord(Base):
    """
    SQLAlchemy ORM model for the 'history_records' table.

    All four request kinds share this table; `kind` holds the QueryKind
    value ("medical-query", "symptom-check", "medicine-scan",
    "voice-interaction").
    """

    __tablename__ = "history_records"

    # Integer ids: the web client sends them back as itemId on save-item
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    kind: Mapped[str] = mapped_column(String(40), index=True, nullable=False)

    # request_summary: question / symptoms / transcript, or mime type and size for images
    request_summary: Mapped[Dict[str, Any]] = mapped_column(JSON, nullable=False)

    # result: the normalized QueryResult as sent to the client
    result: Mapped[Dict[str, Any]] = mapped_column(JSON, nullable=False)

    # model_id: registry id that answered, None for locally answered voice shortcuts
    model_id: Mapped[str | None] = mapped_column(String(40), nullable=True)

    # timestamp: taken when the record is built, the only trustworthy ordering key
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        index=True,
    )

    # user_id: None for anonymous requests
    user_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    saved: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    user: Mapped[User | None] = relationship(User, back_populates="history")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "kind": self.kind,
            "request": self.request_summary,
            "result": self.result,
            "modelId": self.model_id,
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
            "saved": self.saved,
        }
