"""Smoke test for scripts/view_lots.py against a file-backed SQLite database."""

import importlib.util
import logging
from pathlib import Path

import pytest
import yaml

from lot_kernel.db.engine import (
    create_tables,
    init_engine_from_url,
    reset_engine,
    session_scope,
)
from lot_kernel.services.memo_service import MemoService

SCRIPT = Path(__file__).resolve().parents[2] / "scripts" / "view_lots.py"


@pytest.fixture
def view_lots():
    spec = importlib.util.spec_from_file_location("view_lots", SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    yield module
    logging.disable(logging.NOTSET)


@pytest.fixture
def config_path(tmp_path, clock, sample_drafts):
    url = f"sqlite:///{tmp_path / 'lots.db'}"
    init_engine_from_url(url)
    create_tables()
    with session_scope() as session:
        for draft in sample_drafts:
            MemoService(session, clock).create_memo(draft)
    reset_engine()

    path = tmp_path / "lot.yaml"
    path.write_text(yaml.safe_dump({"database": {"url": url}}))
    yield path
    reset_engine()


def test_prints_board_and_lots(view_lots, config_path, capsys):
    assert view_lots.main(["--config", str(config_path)]) == 0

    out = capsys.readouterr().out
    assert "STAGE BOARD" in out
    assert "AJMZ 2  [CUTTING]  updated 2024-07-12" in out
    assert "AJMZ 3  [HEAT 2]" in out


def test_stage_filter(view_lots, config_path, capsys):
    view_lots.main(["--config", str(config_path), "--stage", "HEAT 2"])

    out = capsys.readouterr().out
    assert "LOTS (1)" in out
    assert "AJMZ 2  [" not in out
