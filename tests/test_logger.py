# tests/test_logger.py
"""Logging setup: app logger tree, line format, rotating file."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import logging
import re
import pytest
from logging.handlers import RotatingFileHandler
from app.config import settings
from app.utils.logger import configure_logging, get_logger


@pytest.fixture
def log_dir(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "LOG_DIR", str(tmp_path))
    monkeypatch.setattr(settings, "LOG_FILE", "test-parking.log")
    configure_logging(force=True)
    yield tmp_path
    monkeypatch.undo()
    configure_logging(force=True)


class TestLogger:
    def test_names_live_under_app_tree(self):
        assert get_logger("app.services.lot").name == "app.services.lot"
        assert get_logger("console").name == "app.console"

    def test_line_format_carries_name_and_line(self, log_dir):
        get_logger("app.services.allocation_engine").info("KA01 parked at [0,0]")
        for handler in logging.getLogger("app").handlers:
            handler.flush()
        line = (log_dir / "test-parking.log").read_text().strip().splitlines()[-1]
        assert re.match(
            r"^\d{4}-\d\d-\d\d \d\d:\d\d:\d\d \| INFO    \| "
            r"app\.services\.allocation_engine:\d+ \| KA01 parked at \[0,0\]$",
            line,
        )

    def test_rotation_follows_settings(self, log_dir):
        files = [h for h in logging.getLogger("app").handlers if isinstance(h, RotatingFileHandler)]
        assert len(files) == 1
        assert files[0].maxBytes == settings.LOG_MAX_BYTES
        assert files[0].backupCount == settings.LOG_BACKUP_COUNT

    def test_empty_log_dir_is_console_only(self, log_dir, monkeypatch):
        monkeypatch.setattr(settings, "LOG_DIR", "")
        configure_logging(force=True)
        handlers = logging.getLogger("app").handlers
        assert len(handlers) == 1
        assert not isinstance(handlers[0], RotatingFileHandler)
