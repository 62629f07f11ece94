from __future__ import annotations

import logging
from typing import List, Mapping, Sequence, Set, Union

from surveyflow.models.answer import MultiAnswer, RawAnswer, SingleAnswer, TextAnswer
from surveyflow.models.survey import Question, Survey
from surveyflow.services.question_graph import QuestionGraph

logger = logging.getLogger(__name__)

AnswerInput = Union[RawAnswer, SingleAnswer, MultiAnswer, TextAnswer]


def answer_values(answer: AnswerInput) -> List[str]:
    """Flatten a raw or typed answer into the list of values it carries."""

    if answer is None:
        return []
    if isinstance(answer, str):
        return [answer]
    if isinstance(answer, SingleAnswer):
        return [answer.value]
    if isinstance(answer, MultiAnswer):
        return list(answer.values)
    if isinstance(answer, TextAnswer):
        return [answer.text]
    return [str(value) for value in answer]


def has_answer(answer: AnswerInput) -> bool:
    """Return True when at least one carried value is non-blank."""

    return any(value.strip() for value in answer_values(answer))


def first_selection(answer: AnswerInput) -> str | None:
    """Return the first non-blank value, trimmed the way it is stored."""

    for value in answer_values(answer):
        if value.strip():
            return value.strip()
    return None


class BranchResolver:
    """Resolve which questions a respondent is shown, given answers so far.

    Resolution walks from the first question in base order. A question that
    branches (a choice question with options and conditional logic) must be
    answered before the walk may continue past it; its successor is the
    target mapped from the first non-blank selection, trimmed as stored, or
    the next question in base order when the option has no rule. The walk
    stops at the end of the survey, at a dangling branch target, or when it
    reaches a question it has already visited, so the result never contains
    more questions than the survey holds.
    """

    def __init__(self, graph: QuestionGraph) -> None:
        self._graph = graph

    @classmethod
    def for_survey(cls, survey: Survey) -> "BranchResolver":
        return cls(QuestionGraph.from_survey(survey))

    @property
    def graph(self) -> QuestionGraph:
        return self._graph

    def resolve(self, answers: Mapping[str, AnswerInput]) -> List[Question]:
        """Return the visible questions in presentation order."""

        visible: List[Question] = []
        visited: Set[str] = set()
        current: Question | None = self._graph.first

        while current is not None:
            if current.id in visited:
                logger.debug("Stopping at revisited question %s", current.id)
                break
            visited.add(current.id)
            visible.append(current)

            answer = answers.get(current.id)
            if current.has_branching and not has_answer(answer):
                break
            current = self.next_question(current, answer)

        return visible

    def next_question(self, question: Question, answer: AnswerInput) -> Question | None:
        """Return the question that follows ``question`` for the given answer."""

        selected = first_selection(answer)
        if selected is not None and question.options and question.conditional_logic:
            target_id = question.conditional_logic.get(selected)
            if target_id is not None:
                target = self._graph.get(target_id)
                if target is None:
                    logger.debug(
                        "Branch target %s from question %s does not exist",
                        target_id,
                        question.id,
                    )
                return target

        return self._graph.following(question)


def resolve_visible_questions(
    survey: Survey | QuestionGraph | Sequence[Question],
    answers: Mapping[str, AnswerInput],
) -> List[Question]:
    """Convenience wrapper returning the visible question sequence."""

    if isinstance(survey, QuestionGraph):
        graph = survey
    elif isinstance(survey, Survey):
        graph = QuestionGraph.from_survey(survey)
    else:
        graph = QuestionGraph(survey)
    return BranchResolver(graph).resolve(answers)
