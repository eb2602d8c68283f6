"""Tests for the append-only audit trail."""

import pytest

from lot_kernel.exceptions import ImmutabilityViolationError
from lot_kernel.logging_config import LogContext
from lot_kernel.models.audit_entry import AuditAction
from lot_kernel.services.auditor_service import AuditorService


@pytest.fixture
def auditor(session, clock):
    return AuditorService(session, clock)


def test_seq_increases(auditor):
    first = auditor.record("memos", "m-1", AuditAction.CREATE)
    second = auditor.record("memos", "m-1", AuditAction.CLOSE)

    assert second.seq == first.seq + 1


def test_trace_is_in_seq_order_and_per_entity(auditor):
    auditor.record("memos", "m-1", AuditAction.CREATE)
    auditor.record("memos", "m-2", AuditAction.CREATE)
    auditor.record("memos", "m-1", "close")

    trace = auditor.trace("memos", "m-1")

    assert [entry.action for entry in trace.entries] == ["create", "close"]
    assert trace.first_action == "create"


def test_empty_trace(auditor):
    trace = auditor.trace("memos", "nothing")

    assert trace.is_empty
    assert trace.last_action is None


def test_actor_defaults_to_log_context(auditor):
    with LogContext.bind(actor="ops"):
        entry = auditor.record("memos", "m-1", AuditAction.CREATE)

    assert entry.actor == "ops"


def test_entity_id_may_be_null(auditor):
    auditor.record("sell_records", None, AuditAction.CREATE, {"count": 2})

    trace = auditor.trace("sell_records", None)

    assert trace.entries[0].summary == {"count": 2}


def test_audit_entries_cannot_be_modified(auditor, session):
    entry = auditor.record("memos", "m-1", AuditAction.CREATE)

    entry.action = "close"
    with pytest.raises(ImmutabilityViolationError):
        session.flush()


def test_audit_entries_cannot_be_deleted(auditor, session):
    entry = auditor.record("memos", "m-1", AuditAction.CREATE)

    session.delete(entry)
    with pytest.raises(ImmutabilityViolationError):
        session.flush()
