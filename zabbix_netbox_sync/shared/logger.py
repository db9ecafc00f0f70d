"""Налаштування логування."""

from __future__ import annotations

import json
import logging
import sys

TEXT_FORMAT = "%(asctime)s | %(levelname)-7s | %(name)s | %(message)s"


class JsonFormatter(logging.Formatter):
    """One JSON object per record — for log shippers."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "time": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def setup_logging(level: str = "INFO", fmt: str = "text") -> None:
    """Налаштовує стандартний логер.

    Args:
        level: Рівень логування (DEBUG, INFO, WARNING, ERROR).
        fmt: ``text`` — лаконічний формат, ``json`` — JSON на рядок.
    """
    numeric = getattr(logging, level.upper(), logging.INFO)
    handler = logging.StreamHandler(sys.stderr)
    if fmt == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT, datefmt="%H:%M:%S"))
    logging.basicConfig(level=numeric, handlers=[handler], force=True)
    # requests/urllib3 log every connection at DEBUG
    logging.getLogger("urllib3").setLevel(max(numeric, logging.INFO))
