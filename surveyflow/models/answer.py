from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated, Dict, List, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class SingleAnswer(BaseModel):
    """One selected option (single choice or dropdown)."""

    kind: Literal["single"] = Field(default="single", frozen=True)
    value: str

    model_config = ConfigDict(extra="forbid")


class MultiAnswer(BaseModel):
    """An ordered list of values: selections, ranked options or text lines."""

    kind: Literal["multi"] = Field(default="multi", frozen=True)
    values: List[str] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")


class TextAnswer(BaseModel):
    """Free-form text."""

    kind: Literal["text"] = Field(default="text", frozen=True)
    text: str

    model_config = ConfigDict(extra="forbid")


AnswerValue = Annotated[
    Union[SingleAnswer, MultiAnswer, TextAnswer],
    Field(discriminator="kind"),
]

# Raw shape handed over by a respondent UI before coercion.
RawAnswer = Union[str, List[str], None]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SurveyResponse(BaseModel):
    """One respondent's completed pass through a survey."""

    id: str
    survey_id: str = Field(alias="surveyId")
    employee_id: str = Field(alias="employeeId")
    submitted_at: datetime = Field(default_factory=_utcnow, alias="submittedAt")
    answers: Dict[str, str] = Field(default_factory=dict)

    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)

    @field_validator("submitted_at")
    @classmethod
    def _as_utc(cls, value: datetime) -> datetime:
        # Naive timestamps are taken as UTC.
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    def answer_for(self, question_id: str) -> str | None:
        return self.answers.get(question_id)


class AnswerRow(BaseModel):
    """Flat persisted row: ``(response_id, question_id) -> answer_text``."""

    response_id: str
    question_id: str
    answer_text: str

    model_config = ConfigDict(extra="forbid", frozen=True)
