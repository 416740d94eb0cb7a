from __future__ import annotations

import logging
from pathlib import Path

from esg_pipeline.logging_config import configure_logging


def test_configure_logging_adds_stream_handler() -> None:
    configure_logging(None)
    root = logging.getLogger()
    assert any(isinstance(h, logging.StreamHandler) for h in root.handlers)


def test_configure_logging_accepts_level_names_and_writes_file(tmp_path: Path) -> None:
    log_file = tmp_path / "logs" / "pipeline.log"
    configure_logging(log_file, level="debug")
    logging.getLogger("esg_pipeline.test").debug("hello %s", "file")
    for h in logging.getLogger().handlers:
        h.flush()

    assert logging.getLogger().level == logging.DEBUG
    assert "hello file" in log_file.read_text(encoding="utf-8")
    configure_logging(None)


def test_configure_logging_unknown_level_name_falls_back_to_info() -> None:
    configure_logging(None, level="chatty")
    assert logging.getLogger().level == logging.INFO
