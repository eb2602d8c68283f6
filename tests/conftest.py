"""
Shared fixtures for the lot kernel test suite.

Database tests run against in-memory SQLite (``sqlite://``).  Set
``LOT_TEST_DATABASE_URL`` to run the same tests against PostgreSQL.
"""

import json
import logging
import os
from io import StringIO

import pytest

from lot_kernel.db.engine import (
    create_tables,
    drop_tables,
    get_session,
    init_engine_from_url,
    reset_engine,
)
from lot_kernel.domain.clock import DeterministicClock
from lot_kernel.domain.dtos import MemoDraft, MemoItemRecord, MemoRecord
from lot_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)

TEST_DATABASE_URL = os.environ.get("LOT_TEST_DATABASE_URL", "sqlite://")


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------


@pytest.fixture(scope="session", autouse=True)
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture lot_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, memo_service):
            memo_service.close_memo(memo_id)
            logs = captured_logs()
            assert any(r["message"] == "memo_locked" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("lot_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# ---------------------------------------------------------------------------
# Clock
# ---------------------------------------------------------------------------


@pytest.fixture
def clock():
    return DeterministicClock()


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------


@pytest.fixture
def engine():
    """Fresh schema per test."""
    engine = init_engine_from_url(TEST_DATABASE_URL, echo=False)
    create_tables()
    yield engine
    drop_tables()
    reset_engine()


@pytest.fixture
def session(engine):
    session = get_session()
    yield session
    session.rollback()
    session.close()


# ---------------------------------------------------------------------------
# Sample production data
# ---------------------------------------------------------------------------

# Three memos over two lots: AJMZ 2 goes ROUGH -> PREFORM -> CUTTING,
# AJMZ 3 sits in HEAT 2.  Unused weighing columns carry 0 or null.
SAMPLE_MEMOS = (
    {
        "id": "memo-1",
        "memo_no": "R2235",
        "process": "ROUGH TO PREFORM",
        "lot_code": "AJMZ 2",
        "description": "Ruby rough to preform",
        "from_party": "RUBY CENTER",
        "to_party": "MAESOT",
        "date_out_header": "2024-07-01",
        "date_in_header": "2024-07-07",
        "remark_header": "Priority lot",
        "status_locked": True,
        "items": [
            {
                "item_no": 1,
                "out_date": "2024-07-01",
                "out_grade": "A",
                "out_size": "3-4mm",
                "out_pcs": 120,
                "out_weight_1": 0,
                "out_weight_2": 52.4,
                "in_date": "2024-07-07",
                "in_grade": "A",
                "in_size": "3-4mm",
                "in_pcs": 100,
                "in_weight_1": 48.1,
                "in_weight_2": None,
                "price": 0,
                "amount": 0,
                "rej_pcs": 8,
                "rej_cts": 1.2,
                "wastage_in": 0.4,
                "percent": 91.8,
                "remark_line": "Cleaned",
            }
        ],
    },
    {
        "id": "memo-2",
        "memo_no": "R2238",
        "process": "PREFORM TO CUTTING",
        "lot_code": "AJMZ 2",
        "description": "Preform to cutting",
        "from_party": "MAESOT",
        "to_party": "RUBY CENTER",
        "date_out_header": "2024-07-10",
        "date_in_header": "2024-07-12",
        "remark_header": "",
        "status_locked": False,
        "items": [
            {
                "item_no": 1,
                "out_date": "2024-07-10",
                "out_pcs": 100,
                "out_weight_1": 0,
                "out_weight_2": 48.1,
                "in_date": "2024-07-12",
                "in_pcs": 96,
                "in_weight_1": 46.5,
                "in_weight_2": None,
                "rej_pcs": 2,
                "rej_cts": 0.6,
                "wastage_in": 0.2,
                "percent": 96.7,
            }
        ],
    },
    {
        "id": "memo-3",
        "memo_no": "R2669",
        "process": "HEAT 2",
        "lot_code": "AJMZ 3",
        "description": "Heat treatment",
        "from_party": "RUBY CENTER",
        "to_party": "HEAT HOUSE",
        "date_out_header": "2024-08-05",
        "date_in_header": "2024-08-11",
        "remark_header": "",
        "status_locked": True,
        "items": [
            {
                "item_no": 1,
                "out_date": "2024-08-05",
                "out_pcs": 80,
                "out_weight_1": 0,
                "out_weight_2": 61.8,
                "in_date": "2024-08-11",
                "in_pcs": 78,
                "in_weight_1": 58.4,
                "in_weight_2": None,
                "rej_pcs": 2,
                "rej_cts": 1.8,
                "wastage_in": 1.6,
                "percent": 94.5,
            }
        ],
    },
)


@pytest.fixture
def sample_memos() -> tuple[MemoRecord, ...]:
    """The sample memos as MemoRecords, in fetch order."""
    return tuple(MemoRecord.from_mapping(data) for data in SAMPLE_MEMOS)


@pytest.fixture
def make_item():
    """Factory for MemoItemRecord with keyword weights."""

    def _make(item_no: int = 1, **fields) -> MemoItemRecord:
        return MemoItemRecord.from_mapping({"item_no": item_no, **fields})

    return _make


@pytest.fixture
def make_memo():
    """Factory for MemoRecord from header fields and item mappings."""

    def _make(
        memo_id: str = "memo-x",
        process: str = "ROUGH TO PREFORM",
        lot_code: str | None = "LOT-1",
        date_out_header: str | None = None,
        date_in_header: str | None = None,
        items: list[dict] | None = None,
        status_locked: bool = False,
    ) -> MemoRecord:
        return MemoRecord.from_mapping(
            {
                "id": memo_id,
                "memo_no": memo_id.upper(),
                "process": process,
                "lot_code": lot_code,
                "date_out_header": date_out_header,
                "date_in_header": date_in_header,
                "status_locked": status_locked,
                "items": items or [],
            }
        )

    return _make


def draft_from_sample(data: dict) -> MemoDraft:
    record = MemoRecord.from_mapping(data)
    return MemoDraft(
        process=record.process,
        lot_code=record.lot_code,
        items=record.items,
        memo_no=record.memo_no,
        description=record.description,
        from_party=record.from_party,
        to_party=record.to_party,
        date_out_header=record.date_out_header,
        date_in_header=record.date_in_header,
        remark_header=record.remark_header,
    )


@pytest.fixture
def sample_drafts() -> tuple[MemoDraft, ...]:
    return tuple(draft_from_sample(data) for data in SAMPLE_MEMOS)


@pytest.fixture
def seeded_memos(session, clock, sample_drafts):
    """
    Insert the sample memos through MemoService and lock the ones the
    sample marks as locked.  Returns the stored records by memo number.
    """
    from lot_kernel.services.memo_service import MemoService

    service = MemoService(session, clock)
    stored = {}
    for data, draft in zip(SAMPLE_MEMOS, sample_drafts):
        record = service.create_memo(draft, actor="seed")
        if data["status_locked"]:
            record = service.close_memo(record.id, actor="seed")
        stored[record.memo_no] = record
    session.flush()
    return stored
