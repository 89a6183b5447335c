"""Log records rendered as one orjson document per line.

Each line carries the ids of the trace context active when the record was
emitted, plus the query being served when the search engine tagged one.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime, timezone
import logging
from pathlib import Path
import sys
from typing import Any

import orjson

from offline_docs_search.observability.context import get_trace_context


PLAIN_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

_RESERVED_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime", "taskName"}


def _clip(text: str, limit: int) -> str:
    return text if len(text) <= limit else f"{text[:limit]}..."


def _resolve_level(name: str, fallback: int = logging.INFO) -> int:
    resolved = logging.getLevelName(name.strip().upper())
    return resolved if isinstance(resolved, int) else fallback


class JsonFormatter(logging.Formatter):
    """Serialize records with trace ids, the active query and record extras."""

    SENSITIVE_FIELDS = frozenset({"api_key", "authorization", "password", "secret", "token"})
    MESSAGE_LIMIT = 2000
    FIELD_LIMIT = 500

    def format(self, record: logging.LogRecord) -> str:
        document = self._core_fields(record)
        document.update(self._context_fields(get_trace_context()))
        if record.exc_info:
            document["exception"] = self.formatException(record.exc_info)
        document.update(self._extra_fields(record))
        return orjson.dumps(document, default=self._json_default).decode("utf-8")

    def _core_fields(self, record: logging.LogRecord) -> dict[str, Any]:
        fields: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": _clip(record.getMessage(), self.MESSAGE_LIMIT),
        }
        _, dot, leaf = record.name.rpartition(".")
        if dot:
            fields["component"] = leaf
        return fields

    def _context_fields(self, ctx: Mapping[str, Any]) -> dict[str, Any]:
        fields = {"trace_id": ctx.get("trace_id", ""), "span_id": ctx.get("span_id", "")}
        query = ctx.get("query")
        if query:
            fields["query"] = self._scrub("query", query)
        return fields

    def _extra_fields(self, record: logging.LogRecord) -> dict[str, Any]:
        return {
            name: self._scrub(name, value)
            for name, value in vars(record).items()
            if name not in _RESERVED_ATTRS and not name.startswith("_")
        }

    def _scrub(self, name: str, value: Any) -> Any:
        if name.lower() in self.SENSITIVE_FIELDS:
            return "[REDACTED]"
        if isinstance(value, str):
            return _clip(value, self.FIELD_LIMIT)
        return value

    @staticmethod
    def _json_default(value: Any) -> Any:
        if isinstance(value, (set, frozenset)):
            try:
                return sorted(value)
            except TypeError:
                return list(value)
        if isinstance(value, (bytes, bytearray)):
            return bytes(value).decode("utf-8", errors="replace")
        if isinstance(value, (Path, BaseException)):
            return str(value)
        return repr(value)


def _build_handler(json_output: bool) -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JsonFormatter() if json_output else logging.Formatter(PLAIN_FORMAT))
    return handler


def configure_logging(
    level: str = "INFO",
    json_output: bool = True,
    *,
    logger_levels: dict[str, str] | None = None,
) -> None:
    """Route all logging through a single stderr handler.

    Args:
        level: Root level name, case-insensitive
        json_output: JSON lines when True, a plain text layout otherwise
        logger_levels: Level overrides keyed by logger name
    """
    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(_build_handler(json_output))
    root.setLevel(_resolve_level(level))

    for name, override in (logger_levels or {}).items():
        logging.getLogger(name).setLevel(_resolve_level(override))
