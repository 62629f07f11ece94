from __future__ import annotations

from datetime import datetime
from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field

from surveyflow.models.survey import QuestionType


class RankedTally(BaseModel):
    """Aggregate counters for a ranked-choice question."""

    responses_ranked: int = 0
    total_ranked_selections: int = 0

    model_config = ConfigDict(extra="forbid")


class QuestionStatistics(BaseModel):
    """Option counts for one choice question across all responses."""

    question_id: str
    prompt: str
    question_type: QuestionType
    option_counts: Dict[str, int] = Field(default_factory=dict)
    ranked: RankedTally | None = None

    model_config = ConfigDict(extra="forbid")

    @property
    def total_selections(self) -> int:
        """Return the sum of all option counters."""

        if self.ranked is not None:
            return self.ranked.total_ranked_selections
        return sum(self.option_counts.values())


class FreeTextEntry(BaseModel):
    """One non-blank free-text answer."""

    respondent_id: str
    text: str
    submitted_at: datetime

    model_config = ConfigDict(extra="forbid", frozen=True)


class FreeTextCollection(BaseModel):
    """All free-text answers for a question, oldest submission first."""

    question_id: str
    prompt: str
    question_type: QuestionType
    entries: List[FreeTextEntry] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")


class SurveyReport(BaseModel):
    """Statistics derived from a survey and its responses."""

    survey_id: str
    title: str | None = None
    response_count: int = 0
    per_respondent_counts: Dict[str, int] = Field(default_factory=dict)
    per_question_tallies: Dict[str, QuestionStatistics] = Field(default_factory=dict)
    free_text_by_question: Dict[str, FreeTextCollection] = Field(default_factory=dict)

    model_config = ConfigDict(extra="forbid")

    @property
    def respondents(self) -> List[str]:
        """Return respondent ids in sorted order."""

        return sorted(self.per_respondent_counts)

    @property
    def respondent_count(self) -> int:
        return len(self.per_respondent_counts)
