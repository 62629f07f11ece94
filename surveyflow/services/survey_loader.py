from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List

from pydantic import ValidationError

from surveyflow.core.config import settings
from surveyflow.models.survey import Question, Survey
from surveyflow.services.question_graph import QuestionGraph
from surveyflow.services.validation import validate_survey


class SurveyLoader:
    """Load a survey definition from a JSON file.

    The file holds one survey object using the same field names the store
    persists::

        {
          "id": "onboarding",
          "title": "Onboarding feedback",
          "questions": [
            {"id": "q1", "prompt": "Did onboarding help?", "type": "single_choice",
             "options": ["Yes", "No"], "sortOrder": 0,
             "conditionalLogic": {"No": "q3"}},
            ...
          ]
        }

    ``id`` defaults to the file name without its extension. Legacy type
    labels are accepted for ``type``. Without an explicit source the
    configured ``SURVEYFLOW_SURVEY_FILE`` is used.
    """

    def __init__(self, source: str | Path | None = None) -> None:
        if source is None:
            source = settings.survey_file_path
        if source is None:
            raise FileNotFoundError("No survey file given and SURVEYFLOW_SURVEY_FILE is not set")
        self._path = Path(source)
        if not self._path.is_file():
            raise FileNotFoundError(f"Survey file not found: {self._path}")

        self._survey = self._load_survey()
        validate_survey(self._survey).raise_for_issues()
        self._ordered: List[Question] = QuestionGraph.from_survey(self._survey).ordered
        self._cursor = 0

    @property
    def survey(self) -> Survey:
        """Return the full survey loaded from the file."""

        return self._survey

    def next_question(self) -> Question | None:
        """Return the next question in base order or ``None`` once exhausted."""

        if self._cursor >= len(self._ordered):
            return None

        question = self._ordered[self._cursor]
        self._cursor += 1
        return question

    def reset(self) -> None:
        """Reset the internal cursor so iteration can begin again."""

        self._cursor = 0

    def _load_survey(self) -> Survey:
        try:
            payload: Dict[str, Any] = json.loads(self._path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise ValueError(f"{self._path}: invalid JSON at line {exc.lineno}") from exc

        if not isinstance(payload, dict):
            raise ValueError(f"{self._path}: expected a JSON object describing one survey")

        payload.setdefault("id", self._path.stem)
        try:
            survey = Survey.model_validate(payload)
        except ValidationError as exc:
            raise ValueError(f"{self._path}: {exc}") from exc

        return survey.model_copy(
            update={"questions": [question.normalized() for question in survey.questions]}
        )
