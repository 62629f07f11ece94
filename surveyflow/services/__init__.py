from .aggregator import aggregate
from .answer_codec import coerce_answer, decode_answer, encode_answer, encode_answers
from .branching import BranchResolver, resolve_visible_questions
from .errors import (
    AnswerEncodingError,
    EmptySurveyError,
    SurveyError,
    SurveyNotFoundError,
    SurveyValidationError,
)
from .question_graph import QuestionGraph
from .validation import validate_submission, validate_survey

__all__ = [
    "AnswerEncodingError",
    "BranchResolver",
    "EmptySurveyError",
    "QuestionGraph",
    "SurveyError",
    "SurveyNotFoundError",
    "SurveyValidationError",
    "aggregate",
    "coerce_answer",
    "decode_answer",
    "encode_answer",
    "encode_answers",
    "resolve_visible_questions",
    "validate_submission",
    "validate_survey",
]
