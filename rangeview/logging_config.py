from __future__ import annotations

import logging
import os
from typing import Optional

from pythonjsonlogger import jsonlogger

_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(
        level: int = logging.INFO,
        force_format: Optional[str] = None,
) -> None:
    """
    Configure the root logger for rangeview consumers.

    Modes:
    - JSON (default), fields passed through `extra=` become JSON keys
    - plain text for local debugging

    Selection order:
        1) force_format argument ("json" or "plain") if provided
        2) env var RANGEVIEW_LOG_FORMAT
        3) default = "json"
    """
    if force_format is not None:
        format_mode = force_format.lower()
    else:
        format_mode = os.getenv("RANGEVIEW_LOG_FORMAT", "json").lower()

    root = logging.getLogger()
    root.setLevel(level)

    handler = logging.StreamHandler()
    if format_mode == "plain":
        formatter: logging.Formatter = logging.Formatter(_FORMAT)
    else:
        formatter = jsonlogger.JsonFormatter(_FORMAT)
    handler.setFormatter(formatter)

    # one handler only, repeated calls must not duplicate output
    root.handlers.clear()
    root.addHandler(handler)
