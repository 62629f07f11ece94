from __future__ import annotations

import json
import logging
import threading
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence

from surveyflow.core.config import settings
from surveyflow.models.answer import AnswerRow, SurveyResponse
from surveyflow.models.survey import Question, QuestionTemplate, Survey
from surveyflow.services.errors import SurveyError, SurveyNotFoundError
from surveyflow.services.validation import validate_survey

logger = logging.getLogger(__name__)


def new_id() -> str:
    """Return a fresh opaque identifier."""

    return str(uuid.uuid4())


class SurveyDatabaseInterface(Protocol):
    """Storage contract for surveys, responses and question templates."""

    def create_survey(self, survey: Survey) -> Survey: ...

    def get_survey(self, survey_id: str) -> Survey: ...

    def list_surveys(self, *, include_deleted: bool = False) -> List[Survey]: ...

    def replace_questions(self, survey_id: str, questions: Sequence[Question]) -> Survey: ...

    def soft_delete_survey(self, survey_id: str) -> Survey: ...

    def restore_survey(self, survey_id: str) -> Survey: ...

    def delete_survey(self, survey_id: str) -> None: ...

    def save_response(
        self,
        survey_id: str,
        employee_id: str,
        answers: Mapping[str, str],
        *,
        submitted_at: datetime | None = None,
    ) -> SurveyResponse: ...

    def list_responses(self, survey_id: str) -> List[SurveyResponse]: ...

    def save_template(self, template: QuestionTemplate) -> QuestionTemplate: ...

    def list_templates(self) -> List[QuestionTemplate]: ...

    def delete_template(self, template_id: str) -> None: ...


class JsonSurveyDatabase(SurveyDatabaseInterface):
    """File-backed store laid out like the relational tables it stands in for.

    ``surveys`` hold question definitions, ``responses`` hold one row per
    submission and ``answers`` hold one ``(response_id, question_id,
    answer_text)`` row per answered question. Every operation reads and
    rewrites the whole file under a lock, so a response and its answer rows
    are written together or not at all.
    """

    def __init__(self, storage_path: Path) -> None:
        self._path = Path(storage_path)
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def create_survey(self, survey: Survey) -> Survey:
        prepared = _prepare(survey)
        with self._lock:
            payload = self._read_all_unlocked()
            if prepared.id in payload["surveys"]:
                raise SurveyError(f"Survey {prepared.id} already exists")
            payload["surveys"][prepared.id] = _dump(prepared)
            self._write_all_unlocked(payload)
        logger.info("Created survey %s with %d question(s)", prepared.id, len(prepared.questions))
        return prepared

    def get_survey(self, survey_id: str) -> Survey:
        with self._lock:
            payload = self._read_all_unlocked()
        return Survey.model_validate(self._survey_record(payload, survey_id))

    def list_surveys(self, *, include_deleted: bool = False) -> List[Survey]:
        with self._lock:
            payload = self._read_all_unlocked()
        surveys = [Survey.model_validate(record) for record in payload["surveys"].values()]
        if not include_deleted:
            surveys = [survey for survey in surveys if not survey.is_deleted]
        return sorted(surveys, key=lambda survey: survey.created_at, reverse=True)

    def replace_questions(self, survey_id: str, questions: Sequence[Question]) -> Survey:
        with self._lock:
            payload = self._read_all_unlocked()
            current = Survey.model_validate(self._survey_record(payload, survey_id))
            updated = _prepare(current.model_copy(update={"questions": list(questions)}))

            before = {question.id for question in current.questions}
            after = {question.id for question in updated.questions}
            payload["surveys"][survey_id] = _dump(updated)
            self._write_all_unlocked(payload)

        logger.info(
            "Replaced questions of survey %s: %d updated, %d added, %d removed",
            survey_id,
            len(before & after),
            len(after - before),
            len(before - after),
        )
        return updated

    def soft_delete_survey(self, survey_id: str) -> Survey:
        survey = self._set_deleted_at(survey_id, datetime.now(timezone.utc))
        logger.info("Soft-deleted survey %s", survey_id)
        return survey

    def restore_survey(self, survey_id: str) -> Survey:
        survey = self._set_deleted_at(survey_id, None)
        logger.info("Restored survey %s", survey_id)
        return survey

    def delete_survey(self, survey_id: str) -> None:
        with self._lock:
            payload = self._read_all_unlocked()
            self._survey_record(payload, survey_id)
            del payload["surveys"][survey_id]
            removed = {
                response_id
                for response_id, record in payload["responses"].items()
                if record["surveyId"] == survey_id
            }
            for response_id in removed:
                del payload["responses"][response_id]
            payload["answers"] = [row for row in payload["answers"] if row["response_id"] not in removed]
            self._write_all_unlocked(payload)
        logger.info("Deleted survey %s and %d response(s)", survey_id, len(removed))

    def save_response(
        self,
        survey_id: str,
        employee_id: str,
        answers: Mapping[str, str],
        *,
        submitted_at: datetime | None = None,
    ) -> SurveyResponse:
        if not employee_id or not employee_id.strip():
            raise SurveyError("employee_id must be a non-empty string")

        response = SurveyResponse(
            id=new_id(),
            survey_id=survey_id,
            employee_id=employee_id.strip(),
            submitted_at=submitted_at or datetime.now(timezone.utc),
            answers=dict(answers),
        )
        rows = [
            AnswerRow(response_id=response.id, question_id=question_id, answer_text=answer_text)
            for question_id, answer_text in response.answers.items()
        ]

        with self._lock:
            payload = self._read_all_unlocked()
            survey = Survey.model_validate(self._survey_record(payload, survey_id))
            if survey.is_deleted:
                raise SurveyError(f"Survey {survey_id} is deleted and no longer accepts responses")
            payload["responses"][response.id] = response.model_dump(
                mode="json", by_alias=True, exclude={"answers"}
            )
            payload["answers"].extend(row.model_dump(mode="json") for row in rows)
            self._write_all_unlocked(payload)

        logger.info("Stored response %s for survey %s with %d answer(s)", response.id, survey_id, len(rows))
        return response

    def list_responses(self, survey_id: str) -> List[SurveyResponse]:
        with self._lock:
            payload = self._read_all_unlocked()
        self._survey_record(payload, survey_id)

        answers_by_response: Dict[str, Dict[str, str]] = {}
        for row in payload["answers"]:
            answer = AnswerRow.model_validate(row)
            answers_by_response.setdefault(answer.response_id, {})[answer.question_id] = answer.answer_text

        responses = [
            SurveyResponse.model_validate({**record, "answers": answers_by_response.get(response_id, {})})
            for response_id, record in payload["responses"].items()
            if record["surveyId"] == survey_id
        ]
        return sorted(responses, key=lambda response: response.submitted_at)

    def save_template(self, template: QuestionTemplate) -> QuestionTemplate:
        with self._lock:
            payload = self._read_all_unlocked()
            payload["templates"][template.id] = template.model_dump(mode="json")
            self._write_all_unlocked(payload)
        logger.info("Saved question template %s (%s)", template.id, template.name)
        return template

    def list_templates(self) -> List[QuestionTemplate]:
        with self._lock:
            payload = self._read_all_unlocked()
        templates = [QuestionTemplate.model_validate(record) for record in payload["templates"].values()]
        return sorted(templates, key=lambda template: template.created_at, reverse=True)

    def delete_template(self, template_id: str) -> None:
        with self._lock:
            payload = self._read_all_unlocked()
            if payload["templates"].pop(template_id, None) is None:
                raise KeyError(f"Unknown template id: {template_id}")
            self._write_all_unlocked(payload)
        logger.info("Deleted question template %s", template_id)

    def _set_deleted_at(self, survey_id: str, value: datetime | None) -> Survey:
        with self._lock:
            payload = self._read_all_unlocked()
            current = Survey.model_validate(self._survey_record(payload, survey_id))
            updated = current.model_copy(update={"deleted_at": value})
            payload["surveys"][survey_id] = _dump(updated)
            self._write_all_unlocked(payload)
        return updated

    @staticmethod
    def _survey_record(payload: Dict[str, Any], survey_id: str) -> Dict[str, Any]:
        record = payload["surveys"].get(survey_id)
        if record is None:
            raise SurveyNotFoundError(survey_id)
        return record

    def _read_all_unlocked(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {}
        if self._path.is_file():
            try:
                payload = json.loads(self._path.read_text(encoding="utf-8"))
            except json.JSONDecodeError:
                logger.warning("Ignoring unreadable survey store at %s", self._path)
                payload = {}
        payload.setdefault("surveys", {})
        payload.setdefault("responses", {})
        payload.setdefault("answers", [])
        payload.setdefault("templates", {})
        return payload

    def _write_all_unlocked(self, payload: Dict[str, Any]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")


def _prepare(survey: Survey) -> Survey:
    normalized = survey.model_copy(
        update={"questions": [question.normalized() for question in survey.questions]}
    )
    validate_survey(normalized).raise_for_issues()
    return normalized


def _dump(survey: Survey) -> Dict[str, Any]:
    return survey.model_dump(mode="json", by_alias=True)


_DATABASE_INSTANCE: Optional[SurveyDatabaseInterface] = None
_DATABASE_LOCK = threading.Lock()


def get_survey_database() -> SurveyDatabaseInterface:
    """Return the shared survey database instance."""

    global _DATABASE_INSTANCE
    if _DATABASE_INSTANCE is None:
        with _DATABASE_LOCK:
            if _DATABASE_INSTANCE is None:
                _DATABASE_INSTANCE = JsonSurveyDatabase(settings.data_path)
    return _DATABASE_INSTANCE


__all__ = [
    "SurveyDatabaseInterface",
    "JsonSurveyDatabase",
    "get_survey_database",
    "new_id",
]
