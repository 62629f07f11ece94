from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Mapping

from surveyflow.models.analysis import SurveyReport
from surveyflow.models.answer import SurveyResponse
from surveyflow.models.survey import Question, Survey
from surveyflow.services.aggregator import aggregate
from surveyflow.services.answer_codec import encode_answers
from surveyflow.services.branching import AnswerInput, BranchResolver
from surveyflow.services.errors import SurveyNotFoundError
from surveyflow.services.survey_database import SurveyDatabaseInterface, get_survey_database
from surveyflow.services.validation import validate_submission

logger = logging.getLogger(__name__)


class SurveyDataProvider:
    """Expose survey flow and reporting through an interchangeable API layer.

    A web layer hands in plain arguments (survey id, respondent id, the
    answers collected so far); no identity or session state is kept here.
    """

    def __init__(self, *, database: SurveyDatabaseInterface | None = None) -> None:
        self._database = database or get_survey_database()

    def get_survey(self, survey_id: str, *, include_deleted: bool = False) -> Survey:
        """Return a survey, hiding soft-deleted ones unless asked for."""

        survey = self._database.get_survey(survey_id)
        if survey.is_deleted and not include_deleted:
            raise SurveyNotFoundError(survey_id)
        return survey

    def visible_questions(self, survey_id: str, answers: Mapping[str, AnswerInput]) -> List[Question]:
        """Return the questions a respondent currently sees."""

        return BranchResolver.for_survey(self.get_survey(survey_id)).resolve(answers)

    def submit_response(
        self,
        survey_id: str,
        employee_id: str,
        answers: Mapping[str, AnswerInput],
        *,
        submitted_at: datetime | None = None,
    ) -> SurveyResponse:
        """Validate, encode and persist one respondent's answers.

        Answers to questions the respondent was not shown are discarded.
        Raises ``SurveyValidationError`` naming each unanswered or
        over-selected question.
        """

        survey = self.get_survey(survey_id)
        validate_submission(survey, answers).raise_for_issues()

        visible = BranchResolver.for_survey(survey).resolve(answers)
        encoded = encode_answers(visible, answers)
        return self._database.save_response(
            survey_id,
            employee_id,
            encoded,
            submitted_at=submitted_at,
        )

    def build_report(self, survey_id: str, *, employee_id: str | None = None) -> SurveyReport:
        """Aggregate stored responses, optionally for a single respondent."""

        survey = self.get_survey(survey_id, include_deleted=True)
        responses = self._database.list_responses(survey_id)
        if employee_id is not None:
            responses = [response for response in responses if response.employee_id == employee_id]
        logger.debug("Aggregating %d response(s) for survey %s", len(responses), survey_id)
        return aggregate(survey, responses)

    def respondents(self, survey_id: str) -> List[str]:
        """Return the sorted unique respondent ids for a survey."""

        return sorted({response.employee_id for response in self._database.list_responses(survey_id)})
