from __future__ import annotations

import pytest

from conftest import make_question, make_survey
from surveyflow.API.survey_data_provider import SurveyDataProvider
from surveyflow.services.errors import SurveyNotFoundError, SurveyValidationError


@pytest.fixture
def provider(database, branching_survey) -> SurveyDataProvider:
    database.create_survey(branching_survey)
    return SurveyDataProvider(database=database)


def test_visible_questions_follow_branching(provider) -> None:
    assert [question.id for question in provider.visible_questions("survey-1", {})] == ["q1"]
    assert [question.id for question in provider.visible_questions("survey-1", {"q1": "Yes"})] == ["q1", "q3"]


def test_submit_encodes_and_drops_hidden_answers(provider, database) -> None:
    response = provider.submit_response(
        "survey-1",
        "alice",
        {"q1": " Yes ", "q2": "answered before switching branch", "q3": "  closing thoughts "},
    )

    assert response.answers == {"q1": "Yes", "q3": "closing thoughts"}
    assert database.list_responses("survey-1") == [response]
    stored_path = provider.visible_questions("survey-1", response.answers)
    assert [question.id for question in stored_path] == ["q1", "q3"]


def test_submit_rejects_unanswered_visible_question(provider, database) -> None:
    with pytest.raises(SurveyValidationError) as excinfo:
        provider.submit_response("survey-1", "alice", {"q1": "No", "q3": "x"})

    assert [issue.question_id for issue in excinfo.value.issues] == ["q2"]
    assert database.list_responses("survey-1") == []


def test_soft_deleted_survey_is_hidden(provider, database) -> None:
    database.soft_delete_survey("survey-1")

    with pytest.raises(SurveyNotFoundError):
        provider.visible_questions("survey-1", {})
    assert provider.get_survey("survey-1", include_deleted=True).is_deleted


def test_report_over_stored_ranked_responses(database) -> None:
    survey = make_survey(
        [
            make_question("rank", "ranked_choice", options=["X", "Y", "Z"]),
            make_question("why", "short_text", sortOrder=1),
        ],
        id="ranked",
    )
    database.create_survey(survey)
    provider = SurveyDataProvider(database=database)

    provider.submit_response("ranked", "alice", {"rank": ["Y", "X"], "why": "speed"})
    provider.submit_response("ranked", "bob", {"rank": ["Y", "X"], "why": "price"})

    report = provider.build_report("ranked")
    ranked = report.per_question_tallies["rank"].ranked

    assert database.list_responses("ranked")[0].answers["rank"] == "1,2"
    assert ranked.responses_ranked == 2
    assert ranked.total_ranked_selections == 4
    assert [entry.text for entry in report.free_text_by_question["why"].entries] == ["speed", "price"]


def test_report_can_be_filtered_by_respondent(provider) -> None:
    provider.submit_response("survey-1", "alice", {"q1": "Yes", "q3": "a"})
    provider.submit_response("survey-1", "bob", {"q1": "No", "q2": "b", "q3": "c"})
    provider.submit_response("survey-1", "alice", {"q1": "No", "q2": "d", "q3": "e"})

    everyone = provider.build_report("survey-1")
    alice = provider.build_report("survey-1", employee_id="alice")

    assert everyone.per_respondent_counts == {"alice": 2, "bob": 1}
    assert everyone.per_question_tallies["q1"].option_counts == {"Yes": 1, "No": 2}
    assert alice.per_question_tallies["q1"].option_counts == {"Yes": 1, "No": 1}
    assert provider.respondents("survey-1") == ["alice", "bob"]
