"""
Structured JSON logging configuration for lorelink.

All log records are emitted as single-line JSON objects. When
``Settings.log_file`` is set, the file gets every record at
``Settings.log_level`` and stderr only warnings; otherwise stderr gets
everything at ``Settings.log_level``.

Usage::

    from lorelink.utils.logging_config import get_logger

    logger = get_logger(__name__)
    logger.info("cards injected", extra={"pass_id": pid, "metadata": {"count": 3}})

For a context pass that needs its id on every message::

    from lorelink.utils.logging_config import get_logger, PassAdapter

    raw = get_logger("lorelink.pipeline")
    logger = PassAdapter(raw, pass_id="9f1c...")
    logger.info("stage finished")        # automatically includes pass_id
"""
from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, MutableMapping


# ---------------------------------------------------------------------------
# JSON formatter
# ---------------------------------------------------------------------------

class JSONFormatter(logging.Formatter):
    """Emits each record as a single-line JSON object."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "ts": datetime.now(timezone.utc).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        # Merge extra fields (pass_id, stage, etc.)
        for key in ("pass_id", "stage", "card_id", "duration_ms", "metadata"):
            val = getattr(record, key, None)
            if val is not None:
                entry[key] = val

        if record.exc_info and record.exc_info[0] is not None:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


# ---------------------------------------------------------------------------
# PassAdapter — attaches pass_id to every log call
# ---------------------------------------------------------------------------

class PassAdapter(logging.LoggerAdapter):
    """Logger adapter that injects ``pass_id`` into every record."""

    def __init__(self, logger: logging.Logger, pass_id: str):
        super().__init__(logger, {"pass_id": pass_id})

    def process(
        self,
        msg: str,
        kwargs: MutableMapping[str, Any],
    ) -> tuple[str, MutableMapping[str, Any]]:
        extra = kwargs.setdefault("extra", {})
        extra.update(self.extra)
        return msg, kwargs


# ---------------------------------------------------------------------------
# Setup
# ---------------------------------------------------------------------------

_CONFIGURED = False


def setup_logging(log_file: str | None = None, level: int | str = logging.INFO) -> None:
    """Configure the root ``lorelink`` logger with JSON handlers.

    Safe to call multiple times — only the first call has effect.
    """
    global _CONFIGURED
    if _CONFIGURED:
        return
    _CONFIGURED = True

    root = logging.getLogger("lorelink")
    root.setLevel(level)
    root.propagate = False

    formatter = JSONFormatter()

    if log_file:
        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setFormatter(formatter)
        root.addHandler(fh)

    # With a log file, stderr only carries warnings; without one it is the only sink
    sh = logging.StreamHandler(sys.stderr)
    sh.setFormatter(formatter)
    sh.setLevel(logging.WARNING if log_file else level)
    root.addHandler(sh)


def get_logger(name: str = "lorelink") -> logging.Logger:
    """Return a child logger under the ``lorelink`` namespace.

    Automatically calls :func:`setup_logging` on first use, with the file
    and level taken from :func:`lorelink.config.get_settings`.
    """
    if not _CONFIGURED:
        from lorelink.config import get_settings

        settings = get_settings()
        setup_logging(log_file=settings.log_file, level=settings.log_level.upper())
    if name.startswith("lorelink"):
        return logging.getLogger(name)
    return logging.getLogger(f"lorelink.{name}")
