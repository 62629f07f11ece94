from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


def _strip_or_none(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    cleaned = value.strip()
    return cleaned or None


@dataclass(frozen=True)
class LoggingSettings:
    level: str
    format: str = "%(asctime)s %(levelname)s %(name)s: %(message)s"

    @property
    def level_number(self) -> int:
        return logging.getLevelName(self.level)


class Settings:

    def __init__(self) -> None:
        data_path = _strip_or_none(os.getenv("SURVEYFLOW_DATA_PATH")) or "data/surveyflow.json"
        self.data_path = Path(data_path).expanduser().resolve()

        survey_file = _strip_or_none(os.getenv("SURVEYFLOW_SURVEY_FILE"))
        self.survey_file_path = Path(survey_file).expanduser().resolve() if survey_file else None

        log_level = (_strip_or_none(os.getenv("SURVEYFLOW_LOG_LEVEL")) or "INFO").upper()
        if log_level not in _LOG_LEVELS:
            raise RuntimeError(f"Unknown log level {log_level!r}; expected one of {', '.join(_LOG_LEVELS)}.")

        self.logging = LoggingSettings(level=log_level)


settings = Settings()
