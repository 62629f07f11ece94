from __future__ import annotations

import logging

from surveyflow.core.config import LoggingSettings, settings


def configure_logging(config: LoggingSettings | None = None) -> None:
    """Configure the root logger for processes embedding surveyflow."""

    resolved = config or settings.logging
    logging.basicConfig(level=resolved.level_number, format=resolved.format, force=True)
    logging.getLogger(__name__).debug("Logging configured at %s", resolved.level)
