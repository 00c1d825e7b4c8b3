"""JSON log lines for section store events.

Each stored-function call that fails, and each successful mutation at DEBUG,
is logged as one JSON object tagged with the current correlation ID.
"""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from typing import Any

from sectionstore.core.request_context import get_request_id


def log_json(
    logger: logging.Logger,
    level: int,
    event: str,
    **fields: Any,
) -> None:
    """Emit a single JSON log line with the optional correlation ID."""

    if not logger.isEnabledFor(level):
        return

    payload: dict[str, Any] = {
        "timestamp": datetime.now(UTC).isoformat(),
        "event": event,
    }
    request_id = get_request_id()
    if request_id:
        payload["request_id"] = request_id

    payload.update(fields)
    logger.log(level, json.dumps(payload, default=str))


def configure_logging(level: str | int | None = None) -> None:
    """Configure the package logger from settings when no level is given."""

    if level is None:
        from sectionstore.core.config import get_settings

        level = get_settings().log_level

    logging.getLogger("sectionstore").setLevel(level)
