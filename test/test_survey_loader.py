from __future__ import annotations

import json

import pytest

from surveyflow.models.survey import QuestionType
from surveyflow.services.errors import SurveyValidationError
from surveyflow.services.survey_loader import SurveyLoader


def _write(tmp_path, payload, name: str = "onboarding.json"):
    path = tmp_path / name
    path.write_text(json.dumps(payload, ensure_ascii=False), encoding="utf-8")
    return path


def test_loads_survey_and_walks_base_order(tmp_path) -> None:
    path = _write(
        tmp_path,
        {
            "title": "Onboarding",
            "questions": [
                {"id": "q2", "prompt": "Anything else?", "type": "서술형", "sortOrder": 1},
                {
                    "id": "q1",
                    "prompt": "Was onboarding useful?",
                    "type": "객관식(단일)",
                    "options": [" Yes", "No ", ""],
                    "sortOrder": 0,
                    "conditionalLogic": {"No": "q2"},
                },
            ],
        },
    )

    loader = SurveyLoader(path)

    assert loader.survey.id == "onboarding"
    assert loader.survey.questions[1].type is QuestionType.SINGLE_CHOICE
    assert loader.survey.questions[1].options == ["Yes", "No"]
    assert [loader.next_question().id, loader.next_question().id] == ["q1", "q2"]
    assert loader.next_question() is None

    loader.reset()
    assert loader.next_question().id == "q1"


def test_missing_file(tmp_path) -> None:
    with pytest.raises(FileNotFoundError):
        SurveyLoader(tmp_path / "absent.json")


def test_invalid_json(tmp_path) -> None:
    path = tmp_path / "broken.json"
    path.write_text("{", encoding="utf-8")

    with pytest.raises(ValueError, match="invalid JSON"):
        SurveyLoader(path)


def test_unknown_question_type(tmp_path) -> None:
    path = _write(tmp_path, {"title": "T", "questions": [{"id": "q1", "prompt": "P", "type": "slider"}]})

    with pytest.raises(ValueError, match="slider"):
        SurveyLoader(path)


def test_invalid_survey_is_rejected(tmp_path) -> None:
    path = _write(
        tmp_path,
        {"title": "T", "questions": [{"id": "q1", "prompt": "P", "type": "single_choice", "options": ["A"]}]},
    )

    with pytest.raises(SurveyValidationError):
        SurveyLoader(path)


def test_defaults_to_configured_survey_file(tmp_path, monkeypatch) -> None:
    from surveyflow.core.config import settings

    path = _write(tmp_path, {"id": "cfg", "title": "T", "questions": [{"id": "q1", "prompt": "P", "type": "단답형"}]})
    monkeypatch.setattr(settings, "survey_file_path", path)

    assert SurveyLoader().survey.id == "cfg"

    monkeypatch.setattr(settings, "survey_file_path", None)
    with pytest.raises(FileNotFoundError, match="SURVEYFLOW_SURVEY_FILE"):
        SurveyLoader()
