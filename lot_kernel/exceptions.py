"""
Typed Exception Hierarchy for the Lot Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Callers (the HTTP layer, the CLI, tests) must tell an "already locked" memo
apart from a missing memo or a broken database connection without parsing
message strings.  Every error therefore:

  1. Has its own class (catch by type, not by message)
  2. Carries a ``code`` class attribute (machine-readable, API-safe)
  3. Stores its context as attributes (memo_id, status, ...)

Example:

    try:
        memo_service.close_memo(memo_id, actor="ops")
    except MemoAlreadyLockedError as e:
        return {"error": str(e)}, 409
    except RecordNotFoundError as e:
        return {"error": str(e)}, 400

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    LotKernelError (base)
    |
    +-- RecordNotFoundError
    |   +-- MemoNotFoundError
    |   +-- LedgerEntryNotFoundError
    |   +-- InventoryRecordNotFoundError
    |
    +-- StatusConflictError
    |   +-- MemoAlreadyLockedError
    |   +-- EntryAlreadyPostedError
    |   +-- InventoryAlreadySoldError
    |
    +-- ValidationError
    |   +-- MemoValidationError
    |
    +-- StoreError
    |
    +-- AuthError
    |   +-- InvalidPasscodeError
    |
    +-- ImmutabilityViolationError

Derivation code (transition parsing, memo accounting, timelines, stage
aggregation) never raises any of these.  Malformed labels and weights degrade
to sentinel values instead.

===============================================================================
ERROR CODES
===============================================================================

Category      | Code                       | When Raised
--------------|----------------------------|-----------------------------------
Not found     | MEMO_NOT_FOUND             | Memo id does not resolve
              | LEDGER_ENTRY_NOT_FOUND     | Ledger entry id does not resolve
              | INVENTORY_RECORD_NOT_FOUND | Inventory record id does not resolve
--------------|----------------------------|-----------------------------------
Conflict      | MEMO_ALREADY_LOCKED        | Close on a LOCKED memo
              | ENTRY_ALREADY_POSTED       | Post on a POSTED ledger entry
              | INVENTORY_ALREADY_SOLD     | Sell of a SOLD inventory record
--------------|----------------------------|-----------------------------------
Validation    | MEMO_VALIDATION_ERROR      | Malformed memo create/close request
--------------|----------------------------|-----------------------------------
Store         | STORE_ERROR                | Underlying database failure
--------------|----------------------------|-----------------------------------
Auth          | INVALID_PASSCODE           | Passcode header mismatch
--------------|----------------------------|-----------------------------------
Immutability  | IMMUTABILITY_VIOLATION     | Modifying a locked memo / audit row

===============================================================================
"""


class LotKernelError(Exception):
    """
    Base exception for all lot kernel errors.

    All subclasses define a ``code`` class attribute.
    """

    code: str = "LOT_KERNEL_ERROR"


# Not-found errors


class RecordNotFoundError(LotKernelError):
    """Base exception for identifiers that do not resolve in the store."""

    code: str = "RECORD_NOT_FOUND"
    entity_type: str = "record"

    def __init__(self, record_id: str):
        self.record_id = record_id
        super().__init__(f"{self.entity_type} not found: {record_id}")


class MemoNotFoundError(RecordNotFoundError):
    """Memo with the given id was not found."""

    code: str = "MEMO_NOT_FOUND"
    entity_type: str = "Memo"

    @property
    def memo_id(self) -> str:
        return self.record_id


class LedgerEntryNotFoundError(RecordNotFoundError):
    """Cash ledger entry with the given id was not found."""

    code: str = "LEDGER_ENTRY_NOT_FOUND"
    entity_type: str = "Ledger entry"


class InventoryRecordNotFoundError(RecordNotFoundError):
    """One or more inventory records in a sell request were not found."""

    code: str = "INVENTORY_RECORD_NOT_FOUND"
    entity_type: str = "Inventory record"


# Conflict errors


class StatusConflictError(LotKernelError):
    """
    Base exception for a transition attempted on a record in a terminal state.

    Reported distinctly from generic failures so a caller can say
    "already locked" rather than "something went wrong".
    """

    code: str = "STATUS_CONFLICT"


class MemoAlreadyLockedError(StatusConflictError):
    """Close attempted on a memo that is already LOCKED."""

    code: str = "MEMO_ALREADY_LOCKED"

    def __init__(self, memo_id: str):
        self.memo_id = memo_id
        super().__init__("Memo is already locked")


class EntryAlreadyPostedError(StatusConflictError):
    """Post attempted on a ledger entry that is already POSTED."""

    code: str = "ENTRY_ALREADY_POSTED"

    def __init__(self, entry_id: str):
        self.entry_id = entry_id
        super().__init__("Entry already posted")


class InventoryAlreadySoldError(StatusConflictError):
    """Sell attempted on inventory records of which some are already SOLD."""

    code: str = "INVENTORY_ALREADY_SOLD"

    def __init__(self, inventory_ids: list[str]):
        self.inventory_ids = inventory_ids
        super().__init__(
            f"Inventory already sold: {', '.join(inventory_ids)}"
        )


# Validation errors


class ValidationError(LotKernelError):
    """Base exception for rejected requests."""

    code: str = "VALIDATION_ERROR"


class MemoValidationError(ValidationError):
    """Memo create/close request is malformed."""

    code: str = "MEMO_VALIDATION_ERROR"

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(reason)


# Store errors


class StoreError(LotKernelError):
    """
    Underlying store failure.

    The message is the driver's message, unmodified, so no diagnostic
    detail is lost on the way to the caller.
    """

    code: str = "STORE_ERROR"

    def __init__(self, message: str, operation: str | None = None):
        self.operation = operation
        super().__init__(message)


# Auth errors


class AuthError(LotKernelError):
    """Base exception for authentication failures."""

    code: str = "AUTH_ERROR"


class InvalidPasscodeError(AuthError):
    """Shared passcode header missing or does not match."""

    code: str = "INVALID_PASSCODE"

    def __init__(self):
        super().__init__("Invalid passcode")


# Immutability


class ImmutabilityViolationError(LotKernelError):
    """ORM code attempted to modify or delete an immutable record."""

    code: str = "IMMUTABILITY_VIOLATION"

    def __init__(self, entity_type: str, entity_id: str, reason: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.reason = reason
        super().__init__(
            f"Cannot modify {entity_type} {entity_id}: {reason}"
        )
