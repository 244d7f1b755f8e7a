"""
Structured logging configuration for gameinstaller.

Provides one-line JSON (or human-readable) log output with:
- Credential filtering (account tokens never reach the logs)
- URL normalization (download URLs are reduced to their path)
- Bounded field sizes (no raw documents or huge lists)

Usage:
    from gameinstaller.logging_config import setup_logging

    setup_logging(json_format=False)  # Call once at startup
    logger = logging.getLogger(__name__)
    logger.info("message", extra={"version_id": "1.20.1"})
"""

from __future__ import annotations

import json
import logging
import re
import sys
from datetime import UTC, datetime
from typing import Any
from urllib.parse import urlsplit

# Standard LogRecord attributes, everything else came from extra={...}
_RECORD_ATTRS: frozenset[str] = frozenset(
    {
        "name",
        "msg",
        "args",
        "created",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "module",
        "msecs",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "exc_info",
        "exc_text",
        "thread",
        "threadName",
        "message",
        "taskName",
    }
)

_URL_PATTERN = re.compile(r"(https?://[^\s\"'<>]+)")

_SENSITIVE_PATTERNS: list[tuple[re.Pattern[str], str]] = [
    # Launch arguments carrying account credentials
    (re.compile(r"--(accessToken|session|clientId|xuid)\s+\S+", re.I), r"--\1 [REDACTED]"),
    (re.compile(r"\b(access[_-]?token|client[_-]?token)[=:]\s*['\"]?[\w\-\.]+['\"]?", re.I), "[TOKEN]"),
    (re.compile(r"\bbearer\s+[\w\-\.]+", re.I), "[TOKEN]"),
    (re.compile(r"\b[\w\.-]+@[\w\.-]+\.\w+\b"), "[EMAIL]"),
]

# Fields dropped when the key matches exactly
BLOCKED_FIELDS: frozenset[str] = frozenset(
    {
        "access_token",
        "client_token",
        "password",
        "session_id",
        "authorization",
        "xuid",
        "client_id",
        "email",
        "headers",
    }
)

# Fields dropped when the key contains one of these
BLOCKED_SUBSTRINGS: tuple[str, ...] = ("token", "password", "secret", "session", "credential")

# Fields replaced wholesale (raw documents)
REDACTED_FIELDS: dict[str, str] = {
    "body": "[BODY]",
    "manifest": "[MANIFEST]",
}

_MAX_LIST_ITEMS = 10
_MAX_DEPTH = 3


def _normalize_url(url: str) -> str:
    """Reduce a URL to its path (drops host, query and fragment)."""
    return urlsplit(url).path or "/"


def _replace_url(match: re.Match[str]) -> str:
    url = match.group(1)
    stripped = url.rstrip(".,:;)")
    return _normalize_url(stripped) + url[len(stripped) :]


def _sanitize_text(text: str) -> str:
    """Normalize URLs and redact credentials in free-form text."""
    if not text:
        return text
    result = _URL_PATTERN.sub(_replace_url, text)
    for pattern, replacement in _SENSITIVE_PATTERNS:
        result = pattern.sub(replacement, result)
    return result


def _is_blocked(key: str) -> bool:
    key_lower = key.lower()
    return key_lower in BLOCKED_FIELDS or any(s in key_lower for s in BLOCKED_SUBSTRINGS)


def filter_fields(fields: dict[str, Any], *, _depth: int = 0) -> dict[str, Any]:
    """
    Drop credentials and normalize values of structured log fields.

    Args:
        fields: Fields passed through extra={...}.

    Returns:
        Safe copy of the fields. "url" values are reduced to their path,
        long lists are summarized and nested dicts filtered recursively.
    """
    if _depth > _MAX_DEPTH:
        return {"_truncated": "max depth exceeded"}

    filtered: dict[str, Any] = {}
    for key, value in fields.items():
        if _is_blocked(key):
            continue
        key_lower = key.lower()
        if key_lower in REDACTED_FIELDS:
            filtered[key] = REDACTED_FIELDS[key_lower]
        elif key_lower == "url" and isinstance(value, str):
            filtered[key] = _normalize_url(value)
        elif isinstance(value, (int, float, bool, type(None))):
            filtered[key] = value
        elif isinstance(value, str):
            filtered[key] = _sanitize_text(value)
        elif isinstance(value, (list, tuple)):
            if len(value) <= _MAX_LIST_ITEMS:
                filtered[key] = [_sanitize_text(str(v)) for v in value]
            else:
                filtered[key] = f"[list:{len(value)} items]"
        elif isinstance(value, dict):
            filtered[key] = filter_fields(value, _depth=_depth + 1)
        else:
            filtered[key] = _sanitize_text(str(value))
    return filtered


def _extra_fields(record: logging.LogRecord) -> dict[str, Any]:
    extra = {k: v for k, v in record.__dict__.items() if k not in _RECORD_ATTRS}
    return filter_fields(extra) if extra else {}


class JsonFormatter(logging.Formatter):
    """
    One JSON object per line.

    {"ts":"2024-01-01T00:00:00.000+00:00","level":"INFO","logger":"...","msg":"...", ...}
    """

    def format(self, record: logging.LogRecord) -> str:
        log_dict: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "logger": record.name,
            "msg": _sanitize_text(record.getMessage()),
            "thread": record.threadName,
        }

        if record.levelno >= logging.WARNING:
            log_dict["src"] = f"{record.filename}:{record.lineno}"

        if record.exc_info:
            log_dict["exc"] = _sanitize_text(self.formatException(record.exc_info))

        for key, value in _extra_fields(record).items():
            log_dict.setdefault(key, value)

        return json.dumps(log_dict, default=str, ensure_ascii=False)


class SimpleFormatter(logging.Formatter):
    """Human-readable formatter for the command line."""

    def format(self, record: logging.LogRecord) -> str:
        base = f"{record.levelname:8s} {record.name}: {_sanitize_text(record.getMessage())}"
        extra = _extra_fields(record)
        if extra:
            base = f"{base} | " + " ".join(f"{k}={v}" for k, v in extra.items())
        if record.exc_info:
            base = f"{base}\n{_sanitize_text(self.formatException(record.exc_info))}"
        return base


def setup_logging(
    *,
    level: int | str = logging.INFO,
    json_format: bool = True,
    stream: Any = None,
) -> None:
    """
    Configure root logging. Call once at startup.

    Args:
        level: Log level (default INFO).
        json_format: Use JsonFormatter (default) or SimpleFormatter.
        stream: Output stream (default stderr).
    """
    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(JsonFormatter() if json_format else SimpleFormatter())

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()
    root.addHandler(handler)

    logging.getLogger("aiohttp").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)
