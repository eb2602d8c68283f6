"""
ORM-level immutability enforcement.

SQLAlchemy fires mapper events before UPDATE/DELETE statements generated by
the unit of work reach the database.  The listeners registered here reject
modifications that would rewrite production history:

    session.flush()
         |
         v
    [before_update] --> _check_*_immutability() --> ImmutabilityViolationError
    [before_delete] --> _check_*_delete() --------/

Protected entities:

Entity      | When immutable                  | Rule
------------|---------------------------------|------------------------------
Memo        | After status = LOCKED           | Locked memos are final
Memo        | ALWAYS for delete               | Memos are never deleted
MemoItem    | When parent memo is LOCKED      | Items are part of the memo
AuditEntry  | ALWAYS (from creation)          | The audit trail is append-only

Status transitions themselves go through a single conditional UPDATE
statement (services/status_transition.py), which does not pass through the
unit of work and therefore does not trigger these listeners.  Row metadata
(``updated_at``) is allowed to change.

Usage:

    from lot_kernel.db.immutability import register_immutability_listeners
    register_immutability_listeners()  # idempotent; create_tables() calls it
"""

from sqlalchemy import event, inspect
from sqlalchemy.orm.attributes import get_history

from lot_kernel.exceptions import ImmutabilityViolationError
from lot_kernel.logging_config import get_logger

logger = get_logger("db.immutability")

_LOCKED = "LOCKED"
_METADATA_FIELDS = frozenset({"updated_at"})


def _blocked(entity_type: str, entity_id: str, operation: str, reason: str) -> None:
    logger.error(
        "immutability_violation_blocked",
        extra={
            "entity_type": entity_type,
            "entity_id": entity_id,
            "operation": operation,
        },
    )
    raise ImmutabilityViolationError(
        entity_type=entity_type,
        entity_id=entity_id,
        reason=reason,
    )


def _was_locked(target) -> bool:
    """True when the memo was LOCKED before this flush began."""
    status_history = get_history(target, "status")
    if status_history.deleted:
        return status_history.deleted[0] == _LOCKED
    if not status_history.added:
        return target.status == _LOCKED
    # OPEN -> LOCKED inside the unit of work is the lock itself.
    return False


def _check_memo_immutability(mapper, connection, target):
    if not _was_locked(target):
        return
    for attr in inspect(target).attrs:
        if attr.key in _METADATA_FIELDS or attr.key == "items":
            continue
        if attr.history.has_changes():
            _blocked(
                "Memo",
                str(target.id),
                "UPDATE",
                f"Cannot modify field '{attr.key}' on locked memo",
            )


def _check_memo_delete(mapper, connection, target):
    _blocked("Memo", str(target.id), "DELETE", "Memos cannot be deleted")


def _parent_locked(target) -> bool:
    return target.memo is not None and target.memo.status == _LOCKED


def _check_memo_item_immutability(mapper, connection, target):
    if _parent_locked(target):
        _blocked(
            "MemoItem",
            str(target.id),
            "UPDATE",
            "Memo items cannot be modified after the memo is locked",
        )


def _check_memo_item_delete(mapper, connection, target):
    if _parent_locked(target):
        _blocked(
            "MemoItem",
            str(target.id),
            "DELETE",
            "Memo items cannot be deleted after the memo is locked",
        )


def _check_audit_entry_immutability(mapper, connection, target):
    _blocked(
        "AuditEntry",
        str(target.id),
        "UPDATE",
        "Audit entries are immutable and cannot be modified",
    )


def _check_audit_entry_delete(mapper, connection, target):
    _blocked("AuditEntry", str(target.id), "DELETE", "Audit entries cannot be deleted")


def _listeners():
    from lot_kernel.models.audit_entry import AuditEntry
    from lot_kernel.models.memo import Memo, MemoItem

    return (
        (Memo, "before_update", _check_memo_immutability),
        (Memo, "before_delete", _check_memo_delete),
        (MemoItem, "before_update", _check_memo_item_immutability),
        (MemoItem, "before_delete", _check_memo_item_delete),
        (AuditEntry, "before_update", _check_audit_entry_immutability),
        (AuditEntry, "before_delete", _check_audit_entry_delete),
    )


def register_immutability_listeners():
    """Register all immutability listeners.  Safe to call more than once."""
    for target, event_name, listener_fn in _listeners():
        if not event.contains(target, event_name, listener_fn):
            event.listen(target, event_name, listener_fn)
