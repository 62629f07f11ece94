from __future__ import annotations

import logging
from collections import Counter
from typing import Dict, Iterable, List, Sequence

from surveyflow.models.analysis import (
    FreeTextCollection,
    FreeTextEntry,
    QuestionStatistics,
    RankedTally,
    SurveyReport,
)
from surveyflow.models.answer import SurveyResponse
from surveyflow.models.survey import Question, QuestionType, Survey
from surveyflow.services.answer_codec import decode_answer, split_encoded

logger = logging.getLogger(__name__)


def aggregate(survey: Survey, responses: Iterable[SurveyResponse]) -> SurveyReport:
    """Build a report from a survey and its responses.

    The result depends only on the arguments. Responses belonging to another
    survey are ignored.
    """

    relevant = [response for response in responses if response.survey_id == survey.id]
    ordered_questions = sorted(survey.questions, key=lambda question: question.sort_order)

    tallies: Dict[str, QuestionStatistics] = {}
    free_text: Dict[str, FreeTextCollection] = {}
    for question in ordered_questions:
        if question.type.is_choice and question.options:
            tallies[question.id] = tally_question(question, relevant)
        elif question.type.is_free_text:
            free_text[question.id] = collect_free_text(question, relevant)

    return SurveyReport(
        survey_id=survey.id,
        title=survey.title,
        response_count=len(relevant),
        per_respondent_counts=count_by_respondent(relevant),
        per_question_tallies=tallies,
        free_text_by_question=free_text,
    )


def count_by_respondent(responses: Sequence[SurveyResponse]) -> Dict[str, int]:
    """Return response counts keyed by respondent id, sorted by id."""

    counts = Counter(response.employee_id for response in responses)
    return {employee_id: counts[employee_id] for employee_id in sorted(counts)}


def tally_question(question: Question, responses: Sequence[SurveyResponse]) -> QuestionStatistics:
    """Count how often each declared option was chosen."""

    if question.type == QuestionType.RANKED_CHOICE:
        return QuestionStatistics(
            question_id=question.id,
            prompt=question.prompt,
            question_type=question.type,
            ranked=_tally_ranked(question, responses),
        )

    counts: Dict[str, int] = {option: 0 for option in question.options}
    for response in responses:
        encoded = response.answer_for(question.id)
        if not encoded:
            continue

        if question.type == QuestionType.MULTI_CHOICE:
            selected = [value.strip() for value in split_encoded(encoded)]
        else:
            selected = [encoded.strip()]

        for value in dict.fromkeys(selected):
            if value in counts:
                counts[value] += 1
            else:
                logger.debug("Ignoring unmatched value %r for question %s", value, question.id)

    return QuestionStatistics(
        question_id=question.id,
        prompt=question.prompt,
        question_type=question.type,
        option_counts=counts,
    )


def _tally_ranked(question: Question, responses: Sequence[SurveyResponse]) -> RankedTally:
    tally = RankedTally()
    for response in responses:
        encoded = response.answer_for(question.id)
        if not encoded:
            continue
        ranks = decode_answer(question.type, encoded).values
        if ranks:
            tally.responses_ranked += 1
            tally.total_ranked_selections += len(ranks)
    return tally


def collect_free_text(question: Question, responses: Sequence[SurveyResponse]) -> FreeTextCollection:
    """Gather non-blank text answers ordered by submission time."""

    entries: List[FreeTextEntry] = []
    for response in sorted(responses, key=lambda item: item.submitted_at):
        text = (response.answer_for(question.id) or "").strip()
        if not text:
            continue
        entries.append(
            FreeTextEntry(
                respondent_id=response.employee_id,
                text=text,
                submitted_at=response.submitted_at,
            )
        )

    return FreeTextCollection(
        question_id=question.id,
        prompt=question.prompt,
        question_type=question.type,
        entries=entries,
    )
