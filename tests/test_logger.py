"""Logging setup and per-mode context."""
import logging

import pytest

from geodash.core import logger as geodash_logger
from geodash.core.logger import get_logger, get_mode_logger, setup_logging
from geodash.measure.session import MeasurementMode


@pytest.fixture
def fresh_logging(monkeypatch):
    root = logging.getLogger("geodash")
    handlers, level = list(root.handlers), root.level
    monkeypatch.setattr(geodash_logger, "_setup_done", False)
    monkeypatch.delenv("GEODASH_LOG_DIR", raising=False)
    yield root
    for h in list(root.handlers):
        if h not in handlers:
            root.removeHandler(h)
            h.close()
    root.setLevel(level)


def test_setup_writes_mode_tagged_lines(fresh_logging, tmp_path):
    setup_logging(level=logging.INFO, log_dir=tmp_path / "logs")
    log = get_mode_logger(get_logger("session"), MeasurementMode.AREA)
    log.info("Measurement #%d finalized", 1)
    for h in fresh_logging.handlers:
        h.flush()

    text = (tmp_path / "logs" / "geodash.log").read_text(encoding="utf-8")
    assert "geodash.session [area] Measurement #1 finalized" in text


def test_setup_is_idempotent(fresh_logging, monkeypatch, tmp_path):
    monkeypatch.setenv("GEODASH_LOG_DIR", str(tmp_path))
    setup_logging(level=logging.DEBUG)
    count = len(fresh_logging.handlers)
    setup_logging(level=logging.DEBUG)
    assert len(fresh_logging.handlers) == count
    assert (tmp_path / "geodash.log").exists()


def test_logger_names_and_plain_records(fresh_logging, tmp_path):
    assert get_logger("tool").name == "geodash.tool"
    assert get_logger("geodash.tool").name == "geodash.tool"
    setup_logging(level=logging.INFO, log_dir=tmp_path)
    get_logger("cli").warning("no mode here")
    for h in fresh_logging.handlers:
        h.flush()
    assert "geodash.cli no mode here" in (tmp_path / "geodash.log").read_text(encoding="utf-8")
