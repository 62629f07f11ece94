"""Conversion between in-memory answers and the single persisted answer string.

Every question type maps to exactly one encoded string per response:

* single and dropdown choice: the selected option, trimmed
* multi choice: the selections joined with ``,`` in selection order
* ranked choice: the rank positions ``1..n`` joined with ``,``
* short and long text: the text, trimmed
* multi text: the lines joined with ``,``

List entries are trimmed and blank entries dropped before joining. Ranked
choice and multi text also accept the already comma-joined string a form
hands over; a multi-choice string is one selection.

Ranked choice does not keep which option holds which rank once encoded; only
the number of ranked options survives a round trip.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Mapping, Sequence

from surveyflow.models.answer import (
    AnswerValue,
    MultiAnswer,
    RawAnswer,
    SingleAnswer,
    TextAnswer,
)
from surveyflow.models.survey import Question, QuestionType
from surveyflow.services.errors import AnswerEncodingError

logger = logging.getLogger(__name__)

SEPARATOR = ","

_SINGLE_TYPES = (QuestionType.SINGLE_CHOICE, QuestionType.DROPDOWN_CHOICE)
_LIST_TYPES = (QuestionType.MULTI_CHOICE, QuestionType.RANKED_CHOICE, QuestionType.MULTI_TEXT)
_TEXT_TYPES = (QuestionType.SHORT_TEXT, QuestionType.LONG_TEXT)


def coerce_answer(question_type: QuestionType, raw: RawAnswer | AnswerValue) -> AnswerValue | None:
    """Turn a raw UI value into the typed answer for ``question_type``."""

    if raw is None:
        return None
    if isinstance(raw, (SingleAnswer, MultiAnswer, TextAnswer)):
        return raw

    if question_type in _SINGLE_TYPES:
        if isinstance(raw, str):
            return SingleAnswer(value=raw)
        values = list(raw)
        if len(values) != 1:
            raise AnswerEncodingError(
                f"{question_type.value} expects one selected option, got {len(values)}"
            )
        return SingleAnswer(value=str(values[0]))

    if question_type in _LIST_TYPES:
        if isinstance(raw, str):
            if question_type == QuestionType.MULTI_CHOICE:
                return MultiAnswer(values=[raw])
            return MultiAnswer(values=split_encoded(raw))
        return MultiAnswer(values=[str(value) for value in raw])

    if question_type in _TEXT_TYPES:
        if not isinstance(raw, str):
            raise AnswerEncodingError(f"{question_type.value} expects text, got a list")
        return TextAnswer(text=raw)

    raise AnswerEncodingError(f"Unsupported question type: {question_type!r}")


def encode_answer(question_type: QuestionType, value: RawAnswer | AnswerValue) -> str:
    """Encode an answer into its persisted string form."""

    answer = coerce_answer(question_type, value)
    if answer is None:
        return ""

    if question_type in _SINGLE_TYPES:
        return _expect(answer, SingleAnswer, question_type).value.strip()
    if question_type in _LIST_TYPES:
        values = _non_blank(_expect(answer, MultiAnswer, question_type).values)
        if question_type == QuestionType.RANKED_CHOICE:
            return SEPARATOR.join(str(rank) for rank in range(1, len(values) + 1))
        return SEPARATOR.join(values)
    if question_type in _TEXT_TYPES:
        return _expect(answer, TextAnswer, question_type).text.strip()

    raise AnswerEncodingError(f"Unsupported question type: {question_type!r}")


def decode_answer(question_type: QuestionType, encoded: str) -> AnswerValue:
    """Decode a persisted answer string.

    Ranked choice decodes to the rank positions, not to option text.
    """

    if question_type in _SINGLE_TYPES:
        return SingleAnswer(value=encoded)
    if question_type == QuestionType.MULTI_CHOICE:
        return MultiAnswer(values=split_encoded(encoded))
    if question_type == QuestionType.RANKED_CHOICE:
        return MultiAnswer(values=[rank.strip() for rank in split_encoded(encoded) if rank.strip()])
    if question_type == QuestionType.MULTI_TEXT:
        return MultiAnswer(values=split_encoded(encoded))
    if question_type in _TEXT_TYPES:
        return TextAnswer(text=encoded)

    raise AnswerEncodingError(f"Unsupported question type: {question_type!r}")


def split_encoded(encoded: str | None) -> List[str]:
    """Split an encoded list answer; an empty string decodes to no values."""

    if not encoded:
        return []
    return encoded.split(SEPARATOR)


def encode_answers(
    questions: Sequence[Question],
    raw_answers: Mapping[str, RawAnswer | AnswerValue],
) -> Dict[str, str]:
    """Encode the answers for ``questions`` into ``{question_id: answer_text}``.

    Answers for ids outside ``questions`` and unset answers are left out.
    """

    by_id = {question.id: question for question in questions}
    encoded: Dict[str, str] = {}
    for question_id, raw in raw_answers.items():
        question = by_id.get(question_id)
        if question is None:
            logger.debug("Dropping answer for question %s outside the visible set", question_id)
            continue
        if raw is None:
            continue
        encoded[question_id] = encode_answer(question.type, raw)
    return encoded


def _non_blank(values: Sequence[str]) -> List[str]:
    return [value.strip() for value in values if value.strip()]


def _expect(answer: AnswerValue, expected: type, question_type: QuestionType):
    if not isinstance(answer, expected):
        raise AnswerEncodingError(
            f"{question_type.value} cannot encode a {answer.kind} answer"
        )
    return answer
