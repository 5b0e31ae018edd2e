"""JSON log lines correlated with the source operation that emitted them."""

from __future__ import annotations

from datetime import datetime, timezone
import logging
import sys

import orjson

from hitomi_source.observability.context import get_trace_context


_RECORD_ATTRIBUTES = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime"}


class JsonFormatter(logging.Formatter):
    """One JSON object per record.

    Carries the trace and span ids, the ``operation`` bound by ``create_span``
    and any ``extra=`` fields (the transport logs ``request_headers``).
    """

    def format(self, record: logging.LogRecord) -> str:
        ctx = get_trace_context()
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "trace_id": ctx.get("trace_id", ""),
            "span_id": ctx.get("span_id", ""),
        }
        if operation := ctx.get("operation"):
            entry["operation"] = operation
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        entry.update((key, value) for key, value in vars(record).items() if key not in _RECORD_ATTRIBUTES)
        return orjson.dumps(entry, default=str).decode("utf-8")


def configure_logging(
    level: str = "INFO",
    json_output: bool = True,
    *,
    logger_levels: dict[str, str] | None = None,
) -> None:
    """Route every log record to stderr, as JSON unless ``json_output`` is False.

    ``logger_levels`` maps logger names to level overrides.
    """
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    for handler in root.handlers[:]:
        root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    if json_output:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s"))
    root.addHandler(handler)

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    for logger_name, logger_level in (logger_levels or {}).items():
        logging.getLogger(logger_name).setLevel(getattr(logging, logger_level.upper(), logging.INFO))
