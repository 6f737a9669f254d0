"""Root logger setup driven by ``settings.logging``.

Called once from the application lifespan. Modules only ever do
``logger = logging.getLogger(__name__)``.
"""
from __future__ import annotations

import json
import logging
from datetime import datetime, timezone

from .config import settings

_CONFIGURED = False

_TEXT_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


class JsonFormatter(logging.Formatter):
    """Render each record as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def build_formatter(fmt: str) -> logging.Formatter:
    if fmt == "json":
        return JsonFormatter()
    return logging.Formatter(_TEXT_FORMAT)


def setup_logging(force: bool = False) -> None:
    """Configure the root logger.

    Args:
        force: Reconfigure even if logging was already set up
    """
    global _CONFIGURED
    if _CONFIGURED and not force:
        return

    level = getattr(logging, settings.logging.level.upper(), logging.INFO)
    formatter = build_formatter(settings.logging.format)

    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if settings.logging.file:
        handlers.append(logging.FileHandler(settings.logging.file, encoding="utf-8"))

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)
    root.setLevel(level)

    # sentence-transformers and httpx are chatty at INFO
    logging.getLogger("sentence_transformers").setLevel(max(level, logging.WARNING))
    logging.getLogger("httpx").setLevel(max(level, logging.WARNING))

    _CONFIGURED = True
    logging.getLogger(__name__).debug(
        f"Logging configured: level={settings.logging.level} format={settings.logging.format}"
    )
