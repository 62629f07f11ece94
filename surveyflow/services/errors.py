from __future__ import annotations

from typing import Sequence

from surveyflow.models.validation import ValidationIssue


class SurveyError(Exception):
    """Base class for errors raised by surveyflow."""


class EmptySurveyError(SurveyError, ValueError):
    """Raised when a survey defines no questions."""

    def __init__(self, survey_id: str | None = None) -> None:
        self.survey_id = survey_id
        target = f"Survey {survey_id!r}" if survey_id else "Survey"
        super().__init__(f"{target} must contain at least one question.")


class SurveyValidationError(SurveyError, ValueError):
    """Raised when a survey or a submission fails validation."""

    def __init__(self, issues: Sequence[ValidationIssue]) -> None:
        self.issues = list(issues)
        summary = "; ".join(str(issue) for issue in self.issues) or "validation failed"
        super().__init__(summary)


class SurveyNotFoundError(SurveyError, KeyError):
    """Raised when a survey id is unknown to the store."""

    def __init__(self, survey_id: str) -> None:
        self.survey_id = survey_id
        super().__init__(f"Unknown survey id: {survey_id}")

    def __str__(self) -> str:
        return str(self.args[0])


class AnswerEncodingError(SurveyError, TypeError):
    """Raised when an answer's shape does not fit its question type."""
