"""Tests for the console formatter and the bulk summary line."""
import io
import logging

from app.logger import IssueManagerFormatter, log_bulk_summary, setup_logging
from app.models import BulkOperationResult


def _record(name: str, level: int, message: str) -> logging.LogRecord:
    return logging.LogRecord(name, level, __file__, 1, message, None, None)


def test_plain_format_names_the_component() -> None:
    line = IssueManagerFormatter(use_colors=False).format(_record("app.github_client", logging.ERROR, "boom"))
    parts = line.split(" | ")
    assert parts[1] == "ERROR"
    assert parts[2].startswith("🐙 github_client")
    assert parts[3] == "boom"


def test_colors_disabled_for_non_tty_stream() -> None:
    formatter = IssueManagerFormatter(use_colors=True, stream=io.StringIO())
    assert "\033[" not in formatter.format(_record("main", logging.INFO, "hello"))


def test_setup_logging_writes_to_given_stream() -> None:
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    stream = io.StringIO()
    try:
        setup_logging(level="INFO", stream=stream)
        logging.getLogger("app.storage").info("written")
        logging.getLogger("httpx").info("hidden")
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)

    output = stream.getvalue()
    assert "written" in output
    assert "hidden" not in output


def test_bulk_summary_levels(caplog) -> None:
    logger = logging.getLogger("app.github_client")
    with caplog.at_level(logging.INFO, logger="app.github_client"):
        log_bulk_summary(BulkOperationResult(operation="close", succeeded=[1, 2]), logger)
        log_bulk_summary(BulkOperationResult(operation="reopen", succeeded=[1], failed={5: "gone"}), logger)

    info, warning = caplog.records
    assert info.levelno == logging.INFO
    assert "Succeeded: 2, Failed: 0" in info.getMessage()
    assert warning.levelno == logging.WARNING
    assert "#5" in warning.getMessage()
