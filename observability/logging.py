"""Logging setup for toolscout.

Console output is either colored text or one JSON object per line; file output
is always JSON. Components log through ``logging.getLogger(__name__)`` and pass
structured context with ``extra=``.
"""

from __future__ import annotations
import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Iterable, Optional

if TYPE_CHECKING:
    from config.settings import ServiceConfig

# Attributes every LogRecord carries; anything else came in through ``extra=``
_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {'message', 'asctime', 'taskName'}

# Third-party loggers that drown out ours at INFO
NOISY_LOGGERS = ("uvicorn", "uvicorn.access", "fastapi", "aiohttp.access")


class JSONFormatter(logging.Formatter):
    """Render records as single-line JSON documents."""

    def __init__(self, service_name: str = "toolscout"):
        super().__init__()
        self.service_name = service_name

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "service": self.service_name,
            "component": record.name.split(".", 1)[0],
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}:{record.funcName}:{record.lineno}",
        }

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        entry.update({k: v for k, v in record.__dict__.items() if k not in _RECORD_ATTRS})
        return json.dumps(entry, default=str)


class ColoredFormatter(logging.Formatter):
    """Human-readable console lines, with the level colored when enabled."""

    LEVEL_COLORS = {
        'DEBUG': '\033[36m',
        'INFO': '\033[32m',
        'WARNING': '\033[33m',
        'ERROR': '\033[31m',
        'CRITICAL': '\033[35m',
    }
    RESET = '\033[0m'

    def __init__(self, use_colors: bool = True):
        super().__init__(fmt="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
                         datefmt="%Y-%m-%d %H:%M:%S")
        self.use_colors = use_colors

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        color = self.LEVEL_COLORS.get(record.levelname) if self.use_colors else None
        return f"{color}{line}{self.RESET}" if color else line


def setup_logging(
    level: str = "INFO",
    service_name: str = "toolscout",
    log_file: Optional[str] = None,
    use_json: bool = False,
    use_colors: bool = True,
    quiet: Iterable[str] = NOISY_LOGGERS
) -> None:
    """Configure the root logger.

    Args:
        level: Log level name; unknown names fall back to INFO
        service_name: Value of the ``service`` field in JSON output
        log_file: Optional path of a JSON log file, parent directories created
        use_json: JSON instead of colored text on the console
        use_colors: Color console lines (ignored with ``use_json``)
        quiet: Logger names raised to WARNING
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(numeric_level)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(JSONFormatter(service_name) if use_json else ColoredFormatter(use_colors))
    root_logger.addHandler(console_handler)

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(JSONFormatter(service_name))
        root_logger.addHandler(file_handler)

    for name in quiet:
        logging.getLogger(name).setLevel(logging.WARNING)


def configure_logging(config: "ServiceConfig") -> None:
    """Apply the logging fields of a ``ServiceConfig``."""
    setup_logging(level=config.log_level, log_file=config.log_file, use_json=config.log_json,
                  use_colors=sys.stdout.isatty())
