"""
Tests for the History Gateway.

Covers:
- Appending records and listing them newest first
- Saved-flag toggling (idempotent set, ownership, kind matching)
- Storage failures: swallowed by record(), surfaced by toggle_saved()
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from medisage.ai.errors import NotFoundOrNotOwned, PersistenceError
from medisage.ai.schemas.query import QueryKind
from medisage.models.history import HistoryRecord
from medisage.services.history_gateway import HistoryGateway


def make_record(user_id, kind=QueryKind.MEDICAL_QUERY, minutes_ago=0, question="What is a fever?"):
    return HistoryRecord(
        kind=kind.value,
        request_summary={"question": question},
        result={"answer": "A raised body temperature."},
        model_id="mistral",
        timestamp=datetime.now(timezone.utc) - timedelta(minutes=minutes_ago),
        user_id=user_id,
        saved=False,
    )


def stored(db, record_id):
    db.expire_all()
    return db.get(HistoryRecord, record_id)


class TestRecord:
    """Tests for record() and list_history()."""

    def test_record_persists(self, gateway, db, test_user):
        """A recorded row is readable from another session."""
        gateway.record(make_record(test_user.id))

        rows = gateway.list_history(test_user.id)

        assert len(rows) == 1
        assert rows[0].kind == "medical-query"
        assert rows[0].result == {"answer": "A raised body temperature."}
        assert rows[0].saved is False
        assert isinstance(rows[0].id, int)

    def test_list_newest_first(self, gateway, db, test_user):
        """History is ordered by timestamp, newest first."""
        gateway.record(make_record(test_user.id, minutes_ago=10, question="old"))
        gateway.record(make_record(test_user.id, minutes_ago=0, question="new"))
        gateway.record(make_record(test_user.id, minutes_ago=5, question="middle"))

        rows = gateway.list_history(test_user.id)

        assert [r.request_summary["question"] for r in rows] == ["new", "middle", "old"]

    def test_list_filters(self, gateway, db, test_user, other_user):
        """Filtering by kind, saved flag and owner."""
        gateway.record(make_record(test_user.id))
        gateway.record(make_record(test_user.id, kind=QueryKind.SYMPTOM_CHECK))
        gateway.record(make_record(other_user.id))

        assert len(gateway.list_history(test_user.id)) == 2
        assert len(gateway.list_history(test_user.id, kind=QueryKind.SYMPTOM_CHECK)) == 1
        assert gateway.list_history(test_user.id, saved_only=True) == []

    def test_anonymous_records_are_kept(self, gateway, db):
        """Records without a user are stored but belong to no one's history."""
        gateway.record(make_record(None))

        assert db.query(HistoryRecord).count() == 1

    def test_storage_failure_is_swallowed(self):
        """record() rolls back and logs; it never raises."""
        session = MagicMock()
        session.commit.side_effect = OperationalError("INSERT", {}, Exception("database is locked"))
        gateway = HistoryGateway(session_factory=lambda: session)

        gateway.record(make_record(None))

        session.rollback.assert_called_once()
        session.close.assert_called_once()


class TestToggleSaved:
    """Tests for toggle_saved()."""

    def test_save_and_unsave(self, gateway, db, test_user):
        record = make_record(test_user.id)
        gateway.record(record)

        updated = gateway.toggle_saved(QueryKind.MEDICAL_QUERY, record.id, test_user.id, True)
        assert updated.saved is True
        assert stored(db, record.id).saved is True

        updated = gateway.toggle_saved(QueryKind.MEDICAL_QUERY, record.id, test_user.id, False)
        assert updated.saved is False
        assert stored(db, record.id).saved is False

    def test_same_value_twice_is_not_a_flip(self, gateway, db, test_user):
        """Setting saved=True twice leaves it True."""
        record = make_record(test_user.id)
        gateway.record(record)

        gateway.toggle_saved(QueryKind.MEDICAL_QUERY, record.id, test_user.id, True)
        second = gateway.toggle_saved(QueryKind.MEDICAL_QUERY, record.id, test_user.id, True)

        assert second.saved is True
        assert stored(db, record.id).saved is True

    def test_other_users_record(self, gateway, db, test_user, other_user):
        """Another user's record looks exactly like a missing one, and is untouched."""
        record = make_record(other_user.id)
        gateway.record(record)

        with pytest.raises(NotFoundOrNotOwned):
            gateway.toggle_saved(QueryKind.MEDICAL_QUERY, record.id, test_user.id, True)

        assert stored(db, record.id).saved is False

    def test_missing_record(self, gateway, db, test_user):
        with pytest.raises(NotFoundOrNotOwned):
            gateway.toggle_saved(QueryKind.MEDICAL_QUERY, 9999, test_user.id, True)

    def test_kind_must_match(self, gateway, db, test_user):
        """A symptom check can't be saved through the medical-query kind."""
        record = make_record(test_user.id, kind=QueryKind.SYMPTOM_CHECK)
        gateway.record(record)

        with pytest.raises(NotFoundOrNotOwned):
            gateway.toggle_saved(QueryKind.MEDICAL_QUERY, record.id, test_user.id, True)

    def test_kind_accepts_plain_string(self, gateway, db, test_user):
        record = make_record(test_user.id, kind=QueryKind.VOICE_INTERACTION)
        gateway.record(record)

        updated = gateway.toggle_saved("voice-interaction", record.id, test_user.id, True)

        assert updated.saved is True

    def test_storage_failure_raises(self, test_user):
        """Unlike record(), a failed toggle surfaces as PersistenceError."""
        session = MagicMock()
        session.get.side_effect = OperationalError("SELECT", {}, Exception("connection lost"))
        gateway = HistoryGateway(session_factory=lambda: session)

        with pytest.raises(PersistenceError):
            gateway.toggle_saved(QueryKind.MEDICAL_QUERY, 1, test_user.id, True)

        session.rollback.assert_called_once()
