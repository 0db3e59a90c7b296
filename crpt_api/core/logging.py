"""Logging setup for the registry client.

Records are rendered as one JSON object per line. Two filters run on the
installed handler:
- SubmissionIdFilter tags every record with the submission being dispatched,
  including records emitted from worker threads.
- SensitiveDataFilter masks signatures and document bodies passed through
  ``extra``; the transport logs its outbound headers at DEBUG and relies on it.
"""

from __future__ import annotations

import json
import logging
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Iterable, Mapping

from crpt_api.core.config import LogSettings, settings

REDACTED = "[REDACTED]"

SENSITIVE_KEYS_DEFAULT: frozenset[str] = frozenset(
    {"signature", "x-signature", "authorization", "payload", "document"}
)

# Attributes present on every LogRecord; anything else arrived through ``extra``
_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {
    "message",
    "asctime",
}

_submission_id_var: ContextVar[str | None] = ContextVar("submission_id", default=None)


def set_submission_id(submission_id: str | None) -> None:
    _submission_id_var.set(submission_id)


def get_submission_id() -> str | None:
    return _submission_id_var.get()


def clear_submission_id() -> None:
    _submission_id_var.set(None)


def extra_fields(record: logging.LogRecord) -> dict[str, Any]:
    """Return the caller-supplied ``extra`` fields of a record."""
    return {
        key: value
        for key, value in vars(record).items()
        if key not in _RECORD_ATTRS and not key.startswith("_")
    }


def _mask(value: Any, sensitive_keys: frozenset[str]) -> Any:
    if isinstance(value, Mapping):
        return {
            key: REDACTED if str(key).lower() in sensitive_keys else _mask(item, sensitive_keys)
            for key, item in value.items()
        }
    if isinstance(value, (list, tuple)):
        return type(value)(_mask(item, sensitive_keys) for item in value)
    return value


class SubmissionIdFilter(logging.Filter):
    """Attach the current submission_id unless the record already has one."""

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: D401
        if getattr(record, "submission_id", None) is None:
            submission_id = get_submission_id()
            if submission_id:
                record.submission_id = submission_id
        return True


class SensitiveDataFilter(logging.Filter):
    """Mask sensitive ``extra`` fields, at any nesting depth, before formatting.

    Key matching is case-insensitive, so ``X-signature`` inside a headers
    mapping is caught by the ``x-signature`` entry.
    """

    def __init__(self, sensitive_keys: Iterable[str] | None = None) -> None:
        super().__init__()
        keys = SENSITIVE_KEYS_DEFAULT if sensitive_keys is None else sensitive_keys
        self.sensitive_keys = frozenset(key.lower() for key in keys)

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: D401
        for key, value in extra_fields(record).items():
            if key.lower() in self.sensitive_keys:
                setattr(record, key, REDACTED)
            else:
                setattr(record, key, _mask(value, self.sensitive_keys))
        return True


class JsonFormatter(logging.Formatter):
    """Render a record and its extras as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update(extra_fields(record))

        if "submission_id" not in entry and get_submission_id():
            entry["submission_id"] = get_submission_id()
        if record.exc_info:
            entry["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


def configure_logging(log_settings: LogSettings | None = None) -> None:
    """Install a single JSON (or plain) handler on the root logger.

    The client never calls this itself; applications embedding it opt in.
    The configured signature header name is always treated as sensitive.
    """
    cfg = log_settings or settings.log

    handler: logging.Handler
    if cfg.output.lower() == "file":
        path = Path(cfg.file_path or "logs/crpt_api.log")
        path.parent.mkdir(parents=True, exist_ok=True)
        if cfg.max_bytes:
            handler = RotatingFileHandler(
                path, maxBytes=cfg.max_bytes, backupCount=cfg.backup_count, encoding="utf-8"
            )
        else:
            handler = logging.FileHandler(path, encoding="utf-8")
    else:
        handler = logging.StreamHandler(sys.stdout)

    handler.addFilter(SubmissionIdFilter())
    handler.addFilter(
        SensitiveDataFilter(SENSITIVE_KEYS_DEFAULT | {settings.client.signature_header})
    )
    if cfg.format.lower() == "plain":
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
    else:
        handler.setFormatter(JsonFormatter())

    level = getattr(logging, cfg.level.upper(), logging.INFO)
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    # httpx logs every request at INFO; keep it at WARNING unless debugging
    if level > logging.DEBUG:
        logging.getLogger("httpx").setLevel(logging.WARNING)
