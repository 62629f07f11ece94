from __future__ import annotations

from typing import Dict, Iterator, List, Sequence

from surveyflow.models.survey import Question, Survey
from surveyflow.services.errors import EmptySurveyError


class QuestionGraph:
    """Ordered, id-addressable view over a survey's questions.

    Questions are ordered by ``sort_order`` ascending; ties keep the position
    they had in the survey's question list. Branch targets are looked up by
    id, so a target may point anywhere in the sequence, including backwards.
    """

    def __init__(self, questions: Sequence[Question], *, survey_id: str | None = None) -> None:
        if not questions:
            raise EmptySurveyError(survey_id)

        self._survey_id = survey_id
        self._ordered: List[Question] = sorted(questions, key=lambda question: question.sort_order)
        self._positions: Dict[str, int] = {}
        for position, question in enumerate(self._ordered):
            # First occurrence wins for duplicate ids; validation reports them.
            self._positions.setdefault(question.id, position)

    @classmethod
    def from_survey(cls, survey: Survey) -> "QuestionGraph":
        return cls(survey.questions, survey_id=survey.id)

    @property
    def survey_id(self) -> str | None:
        return self._survey_id

    @property
    def ordered(self) -> List[Question]:
        """Return the questions in base presentation order."""

        return list(self._ordered)

    @property
    def first(self) -> Question:
        return self._ordered[0]

    def __len__(self) -> int:
        return len(self._ordered)

    def __iter__(self) -> Iterator[Question]:
        return iter(self._ordered)

    def __contains__(self, question_id: object) -> bool:
        return question_id in self._positions

    def get(self, question_id: str) -> Question | None:
        """Return the question with the given id or ``None``."""

        position = self._positions.get(question_id)
        if position is None:
            return None
        return self._ordered[position]

    def position_of(self, question_id: str) -> int:
        position = self._positions.get(question_id)
        if position is None:
            raise KeyError(f"Unknown question id: {question_id}")
        return position

    def following(self, question: Question) -> Question | None:
        """Return the question immediately after ``question`` in base order."""

        next_position = self.position_of(question.id) + 1
        if next_position >= len(self._ordered):
            return None
        return self._ordered[next_position]
