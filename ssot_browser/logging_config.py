from __future__ import annotations

import logging
import os
from typing import Optional

from pythonjsonlogger import jsonlogger

LOG_FORMAT_ENV = "SSOT_BROWSER_LOG_FORMAT"
LOG_LEVEL_ENV = "SSOT_BROWSER_LOG_LEVEL"

# Third-party loggers that log every request at INFO; the transport logs its own calls
NOISY_LOGGERS = ("httpx", "httpcore", "werkzeug")


def _resolve_level(level: Optional[int]) -> int:
    if level is not None:
        return level
    name = os.getenv(LOG_LEVEL_ENV, "INFO").upper()
    resolved = logging.getLevelName(name)
    return resolved if isinstance(resolved, int) else logging.INFO


def configure_logging(
        level: Optional[int] = None,
        force_format: Optional[str] = None,
) -> None:
    """
    Configure the root logger for the browser.

    Format ("json" or "plain"): force_format if given, else
    SSOT_BROWSER_LOG_FORMAT, else JSON. Level: `level` if given, else
    SSOT_BROWSER_LOG_LEVEL, else INFO.

    In JSON mode the `extra` fields modules attach (resource, scope,
    n_records, ...) become top-level keys of each record.
    """
    format_mode = (force_format or os.getenv(LOG_FORMAT_ENV, "json")).lower()

    root = logging.getLogger()
    root.setLevel(_resolve_level(level))

    handler = logging.StreamHandler()
    if format_mode == "plain":
        handler.setFormatter(
            logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")
        )
    else:
        handler.setFormatter(
            jsonlogger.JsonFormatter("%(asctime)s %(levelname)s %(name)s %(message)s")
        )

    # Replace any existing handlers to avoid duplicate logs
    root.handlers.clear()
    root.addHandler(handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
