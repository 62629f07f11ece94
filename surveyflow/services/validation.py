from __future__ import annotations

import logging
from collections import Counter
from typing import List, Mapping

from surveyflow.models.survey import Question, QuestionType, Survey
from surveyflow.models.validation import ValidationIssue, ValidationResult
from surveyflow.services.answer_codec import coerce_answer
from surveyflow.services.branching import AnswerInput, BranchResolver, answer_values, has_answer
from surveyflow.services.errors import EmptySurveyError
from surveyflow.services.question_graph import QuestionGraph

logger = logging.getLogger(__name__)


def validate_survey(survey: Survey) -> ValidationResult:
    """Check a survey definition before it is persisted.

    Raises ``EmptySurveyError`` for a survey without questions; every other
    problem is collected into the returned result.
    """

    if not survey.questions:
        raise EmptySurveyError(survey.id)

    issues: List[ValidationIssue] = []
    if not survey.title.strip():
        issues.append(ValidationIssue(field="title", message="Survey title is required."))

    known_ids = {question.id for question in survey.questions}
    id_counts = Counter(question.id for question in survey.questions)
    for question_id, count in id_counts.items():
        if count > 1:
            issues.append(
                ValidationIssue(
                    question_id=question_id,
                    field="id",
                    message=f"Question id is used by {count} questions.",
                )
            )

    for question in survey.questions:
        issues.extend(_question_issues(question, known_ids))

    result = ValidationResult(issues=issues)
    if not result.ok:
        logger.info("Survey %s failed validation with %d issue(s)", survey.id, len(issues))
    return result


def _question_issues(question: Question, known_ids: set[str]) -> List[ValidationIssue]:
    issues: List[ValidationIssue] = []

    def report(field: str, message: str) -> None:
        issues.append(ValidationIssue(question_id=question.id, field=field, message=message))

    if not question.prompt.strip():
        report("prompt", "Question prompt is required.")

    options = [option.strip() for option in question.options if option.strip()]
    if question.type.is_choice:
        if not options:
            report("options", "Choice questions must define at least one option.")
        elif question.type != QuestionType.RANKED_CHOICE and len(options) < 2:
            report("options", "Choice questions must define at least two options.")
    elif question.conditional_logic:
        report("conditionalLogic", "Only choice questions may carry branch rules.")

    for option, target_id in question.conditional_logic.items():
        if option not in question.options:
            report("conditionalLogic", f"Branch option {option!r} is not one of the question's options.")
        if target_id not in known_ids:
            report("conditionalLogic", f"Branch target {target_id!r} does not exist in this survey.")

    issues.extend(_limit_issues(question, "maxSelected", question.max_selected, QuestionType.MULTI_CHOICE, len(options)))
    issues.extend(_limit_issues(question, "maxRank", question.max_rank, QuestionType.RANKED_CHOICE, len(options)))
    return issues


def _limit_issues(
    question: Question,
    field: str,
    limit: int | None,
    allowed_type: QuestionType,
    option_count: int,
) -> List[ValidationIssue]:
    if limit is None:
        return []
    if question.type != allowed_type:
        message = f"{field} only applies to {allowed_type.value} questions."
    elif limit < 0:
        message = f"{field} must not be negative."
    elif limit > option_count:
        message = f"{field} cannot exceed the number of options ({option_count})."
    else:
        return []
    return [ValidationIssue(question_id=question.id, field=field, message=message)]


def validate_submission(survey: Survey, answers: Mapping[str, AnswerInput]) -> ValidationResult:
    """Check a respondent's answers against the questions they were shown.

    Every visible question must be answered, and multi and ranked choice
    answers must respect the question's selection limits.
    """

    resolver = BranchResolver(QuestionGraph.from_survey(survey))
    issues: List[ValidationIssue] = []

    for question in resolver.resolve(answers):
        answer = answers.get(question.id)
        if not has_answer(answer):
            issues.append(
                ValidationIssue(
                    question_id=question.id,
                    field="answer",
                    message=f'Please answer "{question.prompt}".',
                )
            )
            continue

        limit = _selection_limit(question)
        if not limit:
            continue
        selected = [value for value in answer_values(coerce_answer(question.type, answer)) if value.strip()]
        if len(selected) > limit:
            issues.append(
                ValidationIssue(
                    question_id=question.id,
                    field="answer",
                    message=f"Select at most {limit} option(s); {len(selected)} selected.",
                )
            )

    result = ValidationResult(issues=issues)
    if not result.ok:
        logger.info("Submission for survey %s failed validation with %d issue(s)", survey.id, len(issues))
    return result


def _selection_limit(question: Question) -> int | None:
    if question.type == QuestionType.MULTI_CHOICE:
        return question.max_selected
    if question.type == QuestionType.RANKED_CHOICE:
        return question.max_rank
    return None
