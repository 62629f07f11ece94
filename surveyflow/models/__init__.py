from .analysis import FreeTextCollection, FreeTextEntry, QuestionStatistics, RankedTally, SurveyReport
from .answer import AnswerRow, AnswerValue, MultiAnswer, RawAnswer, SingleAnswer, SurveyResponse, TextAnswer
from .survey import Question, QuestionTemplate, QuestionType, Survey
from .validation import ValidationIssue, ValidationResult

__all__ = [
    "AnswerRow",
    "AnswerValue",
    "FreeTextCollection",
    "FreeTextEntry",
    "MultiAnswer",
    "Question",
    "QuestionStatistics",
    "QuestionTemplate",
    "QuestionType",
    "RankedTally",
    "RawAnswer",
    "SingleAnswer",
    "Survey",
    "SurveyReport",
    "SurveyResponse",
    "TextAnswer",
    "ValidationIssue",
    "ValidationResult",
]
