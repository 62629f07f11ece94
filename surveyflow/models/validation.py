from __future__ import annotations

from typing import List

from pydantic import BaseModel, ConfigDict, Field


class ValidationIssue(BaseModel):
    """A user-facing problem tied to a survey field or a question."""

    question_id: str | None = None
    field: str
    message: str

    model_config = ConfigDict(extra="forbid", frozen=True)

    def __str__(self) -> str:
        if self.question_id is None:
            return f"{self.field}: {self.message}"
        return f"{self.question_id}.{self.field}: {self.message}"


class ValidationResult(BaseModel):
    """Outcome of a validation pass; ``ok`` when no issues were found."""

    issues: List[ValidationIssue] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")

    @property
    def ok(self) -> bool:
        return not self.issues

    def for_question(self, question_id: str) -> List[ValidationIssue]:
        return [issue for issue in self.issues if issue.question_id == question_id]

    def raise_for_issues(self) -> None:
        # errors imports this module.
        from surveyflow.services.errors import SurveyValidationError

        if self.issues:
            raise SurveyValidationError(self.issues)
