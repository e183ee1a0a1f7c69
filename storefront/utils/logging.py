# storefront/utils/logging.py
import json
import logging
import sys
from datetime import datetime, timezone

from storefront.utils.settings import LOG_FORMAT, LOG_LEVEL

_TEXT_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


class JSONFormatter(logging.Formatter):
    """Formatter zapisujacy kazdy rekord jako jedna linie JSON."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "line": record.lineno,
        }
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_data, default=str)


_configured = False


def configure_logging(level: str | None = None, fmt: str | None = None) -> None:
    global _configured

    handler = logging.StreamHandler(sys.stdout)
    if (fmt or LOG_FORMAT).lower() == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(_TEXT_FORMAT))

    root = logging.getLogger("storefront")
    root.handlers = [handler]
    root.setLevel((level or LOG_LEVEL).upper())
    root.propagate = True
    _configured = True


def get_logger(name: str) -> logging.Logger:
    if not _configured:
        configure_logging()
    return logging.getLogger(name)
