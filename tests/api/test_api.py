"""
HTTP tests for the lot tracker API.

Wire contract tested:
- Every route except /health needs the passcode header (401 otherwise).
- Success bodies are {"data": ...}; failures are {"error": message}.
- Closing a locked memo is 409 "Memo is already locked"; a missing or
  unknown id is 400.
"""

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import text

from lot_api import create_app
from lot_config import (
    AppConfig,
    AuthConfig,
    DatabaseConfig,
    LoggingConfig,
    ProductionConfig,
)
from lot_kernel.db.engine import get_engine, reset_engine, session_scope
from lot_kernel.services.sell_service import SellService

PASSCODE = "ruby-center"
HEADERS = {"X-COMPANY-PASSCODE": PASSCODE}


@pytest.fixture
def config():
    return AppConfig(
        database=DatabaseConfig(url="sqlite://"),
        auth=AuthConfig(passcode=PASSCODE),
        production=ProductionConfig(),
        logging=LoggingConfig(level="DEBUG"),
    )


@pytest.fixture
def client(config, clock):
    app = create_app(config, clock)
    with TestClient(app) as test_client:
        yield test_client
    reset_engine()


def _memo_body(process, lot_code, date_out, date_in, out_cts, in_cts, rej_cts, memo_no):
    return {
        "memo_no": memo_no,
        "process": process,
        "lot_code": lot_code,
        "date_out_header": date_out,
        "date_in_header": date_in,
        "items": [
            {
                "item_no": 1,
                "out_weight_1": 0,
                "out_weight_2": out_cts,
                "in_weight_1": in_cts,
                "in_weight_2": None,
                "rej_cts": rej_cts,
            }
        ],
    }


SAMPLE_BODIES = (
    _memo_body("ROUGH TO PREFORM", "AJMZ 2", "2024-07-01", "2024-07-07", 52.4, 48.1, 1.2, "R2235"),
    _memo_body("PREFORM TO CUTTING", "AJMZ 2", "2024-07-10", "2024-07-12", 48.1, 46.5, 0.6, "R2238"),
    _memo_body("HEAT 2", "AJMZ 3", "2024-08-05", "2024-08-11", 61.8, 58.4, 1.8, "R2669"),
)


@pytest.fixture
def memo_ids(client):
    ids = {}
    for body in SAMPLE_BODIES:
        response = client.post("/memo/create", json=body, headers=HEADERS)
        assert response.status_code == 200
        ids[body["memo_no"]] = response.json()["data"]["id"]
    return ids


class TestPasscode:
    def test_missing_passcode(self, client):
        response = client.get("/lots")

        assert response.status_code == 401
        assert response.json() == {"error": "Invalid passcode"}

    def test_wrong_passcode(self, client):
        response = client.post(
            "/memo/close",
            json={"memo_id": "x"},
            headers={"X-COMPANY-PASSCODE": "guess"},
        )

        assert response.status_code == 401

    def test_no_configured_passcode_rejects_everything(self, config, clock):
        open_config = AppConfig(
            database=config.database,
            auth=AuthConfig(passcode=None),
            production=config.production,
            logging=config.logging,
        )
        with TestClient(create_app(open_config, clock)) as client:
            response = client.get("/lots", headers={"X-COMPANY-PASSCODE": ""})
        reset_engine()

        assert response.status_code == 401

    def test_health_needs_no_passcode(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestMemoRoutes:
    def test_create_memo(self, client):
        response = client.post("/memo/create", json=SAMPLE_BODIES[0], headers=HEADERS)

        data = response.json()["data"]
        assert data["status"] == "OPEN"
        assert data["status_locked"] is False
        assert data["from_stage"] == "ROUGH"
        assert data["to_stage"] == "PREFORM"
        assert data["items"][0]["out_weight_2"] == 52.4

    def test_create_memo_without_items(self, client):
        body = dict(SAMPLE_BODIES[0], items=[])

        response = client.post("/memo/create", json=body, headers=HEADERS)

        assert response.status_code == 400
        assert response.json() == {"error": "Memo must have at least one item"}

    def test_create_memo_without_process(self, client):
        body = {key: value for key, value in SAMPLE_BODIES[0].items() if key != "process"}

        response = client.post("/memo/create", json=body, headers=HEADERS)

        assert response.status_code == 400
        assert "process" in response.json()["error"]

    def test_close_memo(self, client, memo_ids):
        response = client.post(
            "/memo/close", json={"memo_id": memo_ids["R2238"]}, headers=HEADERS
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["id"] == memo_ids["R2238"]
        assert data["status_locked"] is True

    def test_close_locked_memo_is_conflict(self, client, memo_ids):
        body = {"memo_id": memo_ids["R2235"]}
        client.post("/memo/close", json=body, headers=HEADERS)

        response = client.post("/memo/close", json=body, headers=HEADERS)

        assert response.status_code == 409
        assert response.json() == {"error": "Memo is already locked"}

    def test_close_unknown_memo(self, client):
        response = client.post("/memo/close", json={"memo_id": "nope"}, headers=HEADERS)

        assert response.status_code == 400
        assert "nope" in response.json()["error"]

    def test_close_without_memo_id(self, client):
        response = client.post("/memo/close", json={}, headers=HEADERS)

        assert response.status_code == 400
        assert response.json() == {"error": "memo_id is required"}

    def test_list_memos_with_totals(self, client, memo_ids):
        response = client.get("/memos", headers=HEADERS)

        memos = response.json()["data"]
        assert [memo["memo_no"] for memo in memos] == ["R2235", "R2238", "R2669"]
        assert memos[0]["totals"]["remaining"] == pytest.approx(3.1)

    def test_request_id_is_echoed(self, client):
        response = client.get("/health", headers={"X-Request-ID": "req-42"})

        assert response.headers["X-Request-ID"] == "req-42"


class TestLotRoutes:
    def test_list_lots(self, client, memo_ids):
        response = client.get("/lots", headers=HEADERS)

        lots = {lot["lot_code"]: lot for lot in response.json()["data"]}
        assert lots["AJMZ 2"]["current_stage"] == "CUTTING"
        assert lots["AJMZ 2"]["total_out"] == pytest.approx(100.5)
        assert lots["AJMZ 2"]["last_updated"] == "2024-07-12"
        assert lots["AJMZ 3"]["current_stage"] == "HEAT 2"

    def test_filters(self, client, memo_ids):
        response = client.get(
            "/lots", params={"search": "ajmz", "stage": "HEAT 2"}, headers=HEADERS
        )

        assert [lot["lot_code"] for lot in response.json()["data"]] == ["AJMZ 3"]

    def test_lot_detail(self, client, memo_ids):
        response = client.get("/lots/AJMZ 2", headers=HEADERS)

        data = response.json()["data"]
        assert data["snapshot"]["total_reject"] == pytest.approx(1.8)
        assert [entry["memo_no"] for entry in data["timeline"]] == ["R2235", "R2238"]

    def test_unknown_lot_detail(self, client):
        response = client.get("/lots/NOPE", headers=HEADERS)

        snapshot = response.json()["data"]["snapshot"]
        assert snapshot["current_stage"] == "Unknown"
        assert snapshot["last_updated"] == "-"
        assert snapshot["yield_percent"] is None

    def test_stage_board(self, client, memo_ids):
        response = client.get("/production/stages", headers=HEADERS)

        board = {row["stage"]: row for row in response.json()["data"]}
        assert len(board) == 7
        assert board["CUTTING"]["count"] == 1
        assert board["ACID"]["count"] == 0


class TestLedgerRoutes:
    def test_create_and_post(self, client):
        created = client.post(
            "/ledger/create",
            json={"party": "MAESOT", "entry_type": "PAYMENT", "amount": 1250.5},
            headers=HEADERS,
        ).json()["data"]
        assert created["status"] == "OPEN"

        posted = client.post(
            "/ledger/post", json={"entry_id": created["id"]}, headers=HEADERS
        )
        again = client.post(
            "/ledger/post", json={"entry_id": created["id"]}, headers=HEADERS
        )

        assert posted.json()["data"]["status"] == "POSTED"
        assert again.status_code == 409
        assert again.json() == {"error": "Entry already posted"}

    def test_post_unknown_entry(self, client):
        response = client.post("/ledger/post", json={"entry_id": "nope"}, headers=HEADERS)

        assert response.status_code == 400


class TestSellRoutes:
    @pytest.fixture
    def stock(self, client, clock):
        with session_scope() as session:
            service = SellService(session, clock)
            return [
                service.add_record("AJMZ 2", Decimal("10.5")),
                service.add_record("AJMZ 2", Decimal("4.25")),
            ]

    def test_sell(self, client, stock):
        response = client.post(
            "/sell/create",
            json={"inventory_ids": stock, "sell_id": "SELL-1"},
            headers=HEADERS,
        )

        assert response.status_code == 200
        assert response.json()["data"] == {
            "sell_id": "SELL-1",
            "inventory_ids": stock,
            "total_cts": 14.75,
        }

    def test_sell_twice_is_conflict(self, client, stock):
        client.post("/sell/create", json={"inventory_ids": stock}, headers=HEADERS)

        response = client.post(
            "/sell/create", json={"inventory_ids": stock[:1]}, headers=HEADERS
        )

        assert response.status_code == 409

    def test_sell_nothing(self, client):
        response = client.post("/sell/create", json={"inventory_ids": []}, headers=HEADERS)

        assert response.status_code == 400
        assert response.json() == {"error": "No inventory selected"}


def _drop_table(name):
    with get_engine().begin() as connection:
        connection.execute(text(f"DROP TABLE {name}"))


class TestStoreFailures:
    @pytest.mark.parametrize(
        "table, path, body",
        [
            ("memos", "/memo/close", {"memo_id": "m-1"}),
            ("ledger_entries", "/ledger/post", {"entry_id": "e-1"}),
            ("inventory_records", "/sell/create", {"inventory_ids": ["i-1"]}),
        ],
    )
    def test_driver_message_is_a_400(self, client, table, path, body):
        _drop_table(table)

        response = client.post(path, json=body, headers=HEADERS)

        assert response.status_code == 400
        assert "no such table" in response.json()["error"]
