from __future__ import annotations

import os
import sys
import tempfile
from pathlib import Path
from typing import Any, Dict, List

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]

if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

os.environ.setdefault(
    "SURVEYFLOW_DATA_PATH",
    str(Path(tempfile.gettempdir()) / "surveyflow-test" / "store.json"),
)
os.environ.setdefault("SURVEYFLOW_LOG_LEVEL", "DEBUG")

from surveyflow.models.survey import Question, Survey  # noqa: E402
from surveyflow.services.survey_database import JsonSurveyDatabase  # noqa: E402


def make_question(question_id: str, question_type: str = "short_text", **fields: Any) -> Question:
    fields.setdefault("prompt", f"Prompt for {question_id}")
    return Question(id=question_id, type=question_type, **fields)


def make_survey(questions: List[Question], **fields: Any) -> Survey:
    fields.setdefault("id", "survey-1")
    fields.setdefault("title", "Team survey")
    return Survey(questions=questions, **fields)


@pytest.fixture
def branching_survey() -> Survey:
    """q1 branches to q3 on "Yes" and to q2 on "No"."""

    logic: Dict[str, str] = {"Yes": "q3", "No": "q2"}
    return make_survey(
        [
            make_question("q1", "single_choice", options=["Yes", "No"], sortOrder=0, conditionalLogic=logic),
            make_question("q2", "short_text", sortOrder=1),
            make_question("q3", "long_text", sortOrder=2),
        ]
    )


@pytest.fixture
def database(tmp_path: Path) -> JsonSurveyDatabase:
    return JsonSurveyDatabase(tmp_path / "store.json")
