"""
Logging setup for the issue manager.

Console lines read ``time | level | icon component | message``; the component
is the last segment of the logger name, so ``app.github_client`` shows up as
``github_client``.
"""
import logging
import sys
from datetime import datetime
from typing import TYPE_CHECKING, Optional, TextIO

if TYPE_CHECKING:
    from app.models import BulkOperationResult


class Colors:
    """ANSI escape sequences used by the console formatter."""
    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"
    WHITE = "\033[37m"
    RED = "\033[91m"
    YELLOW = "\033[93m"
    BLUE = "\033[94m"
    CYAN = "\033[96m"


COMPONENT_ICONS = {
    "github_client": "🐙",
    "auth_service": "🔑",
    "jwt_handler": "🔑",
    "oauth2": "🔑",
    "repository_service": "📌",
    "filter_service": "🔍",
    "export_service": "📤",
    "mcp_service": "🤖",
    "server": "🤖",
    "storage": "💾",
    "errors": "🚨",
    "main": "🚀",
}
DEFAULT_ICON = "▶️"

LEVELS = {
    logging.DEBUG: ("DEBUG", Colors.DIM),
    logging.INFO: ("INFO ", Colors.CYAN),
    logging.WARNING: ("WARN ", Colors.YELLOW),
    logging.ERROR: ("ERROR", Colors.RED),
    logging.CRITICAL: ("CRIT ", Colors.BOLD + Colors.RED),
}

# Third-party loggers that are chatty at INFO
QUIET_LOGGERS = ("httpx", "httpcore", "uvicorn.access", "mcp.server.lowlevel.server")


class IssueManagerFormatter(logging.Formatter):

    def __init__(self, use_colors: bool = True, stream: Optional[TextIO] = None):
        super().__init__()
        target = stream or sys.stdout
        self.use_colors = use_colors and hasattr(target, "isatty") and target.isatty()

    def _paint(self, text: str, color: str) -> str:
        return f"{color}{text}{Colors.RESET}" if self.use_colors else text

    def format(self, record: logging.LogRecord) -> str:
        level_text, color = LEVELS.get(record.levelno, (record.levelname[:5], Colors.WHITE))
        component = record.name.rsplit(".", 1)[-1] if record.name else "root"
        icon = COMPONENT_ICONS.get(component, DEFAULT_ICON)
        timestamp = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")

        sep = " │ " if self.use_colors else " | "
        line = sep.join([
            self._paint(timestamp, Colors.DIM),
            self._paint(level_text, color),
            f"{icon} {self._paint(f'{component:20}', Colors.BLUE)}",
            record.getMessage(),
        ])
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    use_colors: bool = True,
    stream: Optional[TextIO] = None,
) -> None:
    """
    Configure the root logger.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional path of a plain-text log file
        use_colors: Colorize console output when the stream is a TTY
        stream: Console stream, stdout by default (the MCP stdio transport needs stderr)
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    console_stream = stream or sys.stdout

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    root_logger.handlers.clear()

    handlers = [logging.StreamHandler(console_stream)]
    handlers[0].setFormatter(IssueManagerFormatter(use_colors=use_colors, stream=console_stream))
    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(IssueManagerFormatter(use_colors=False))
        handlers.append(file_handler)

    for handler in handlers:
        handler.setLevel(numeric_level)
        root_logger.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Logger for ``name`` (typically ``__name__``)."""
    return logging.getLogger(name)


def log_bulk_summary(result: "BulkOperationResult", logger: logging.Logger) -> None:
    """Log the outcome of a bulk issue operation in one line."""
    if result.failed:
        logger.warning(
            f"⚠️ Bulk {result.operation} complete. "
            f"Succeeded: {len(result.succeeded)}, Failed: {len(result.failed)} "
            f"(issues {', '.join(f'#{n}' for n in result.failed)})"
        )
    else:
        logger.info(f"✅ Bulk {result.operation} complete. Succeeded: {len(result.succeeded)}, Failed: 0")
