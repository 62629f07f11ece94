from __future__ import annotations

from datetime import datetime, timedelta, timezone

from conftest import make_question, make_survey
from surveyflow.models.answer import SurveyResponse
from surveyflow.services.aggregator import aggregate

BASE_TIME = datetime(2025, 3, 1, 9, 0, tzinfo=timezone.utc)


def _response(response_id: str, employee_id: str, answers: dict[str, str], minutes: int = 0,
              survey_id: str = "survey-1") -> SurveyResponse:
    return SurveyResponse(
        id=response_id,
        survey_id=survey_id,
        employee_id=employee_id,
        submitted_at=BASE_TIME + timedelta(minutes=minutes),
        answers=answers,
    )


def _survey():
    return make_survey(
        [
            make_question("single", "single_choice", options=["Yes", "No"], sortOrder=0),
            make_question("multi", "multi_choice", options=["A", "B", "C"], sortOrder=1),
            make_question("rank", "ranked_choice", options=["X", "Y", "Z"], sortOrder=2),
            make_question("drop", "dropdown_choice", options=["Red", "Blue"], sortOrder=3),
            make_question("short", "short_text", sortOrder=4),
            make_question("long", "long_text", sortOrder=5),
            make_question("lines", "multi_text", options=["Line 1"], sortOrder=6),
        ]
    )


def test_single_choice_tallies() -> None:
    responses = [
        _response("r1", "alice", {"single": "Yes"}),
        _response("r2", "bob", {"single": " Yes "}),
        _response("r3", "carol", {"single": "No"}),
        _response("r4", "dave", {"single": "Maybe"}),
        _response("r5", "erin", {}),
    ]

    report = aggregate(_survey(), responses)
    tallies = report.per_question_tallies["single"]

    assert tallies.option_counts == {"Yes": 2, "No": 1}
    assert tallies.total_selections <= report.response_count


def test_single_choice_totals_equal_responses_when_all_answered() -> None:
    responses = [
        _response("r1", "alice", {"drop": "Red"}),
        _response("r2", "bob", {"drop": "Blue"}),
        _response("r3", "alice", {"drop": "Red"}),
    ]

    report = aggregate(_survey(), responses)

    assert report.per_question_tallies["drop"].total_selections == report.response_count == 3


def test_multi_choice_counts_each_selected_option() -> None:
    responses = [
        _response("r1", "alice", {"multi": "C,A"}),
        _response("r2", "bob", {"multi": "A, B"}),
        _response("r3", "carol", {"multi": "A,A,Unknown"}),
    ]

    tallies = aggregate(_survey(), responses).per_question_tallies["multi"]

    assert tallies.option_counts == {"A": 3, "B": 1, "C": 1}


def test_ranked_choice_reports_aggregate_counters() -> None:
    responses = [
        _response("r1", "alice", {"rank": "1,2"}),
        _response("r2", "bob", {"rank": "1,2"}),
        _response("r3", "carol", {"rank": ""}),
    ]

    tallies = aggregate(_survey(), responses).per_question_tallies["rank"]

    assert tallies.option_counts == {}
    assert tallies.ranked is not None
    assert tallies.ranked.responses_ranked == 2
    assert tallies.ranked.total_ranked_selections == 4


def test_per_respondent_counts() -> None:
    responses = [
        _response("r1", "bob", {}),
        _response("r2", "alice", {}),
        _response("r3", "bob", {}),
    ]

    report = aggregate(_survey(), responses)

    assert report.per_respondent_counts == {"alice": 1, "bob": 2}
    assert report.respondents == ["alice", "bob"]
    assert report.response_count == 3


def test_free_text_is_collected_in_submission_order() -> None:
    responses = [
        _response("r1", "late", {"short": "third"}, minutes=30),
        _response("r2", "early", {"short": "  first  "}, minutes=1),
        _response("r3", "blank", {"short": "   "}, minutes=5),
        _response("r4", "middle", {"short": "second", "long": "essay"}, minutes=10),
    ]

    report = aggregate(_survey(), responses)
    short = report.free_text_by_question["short"]

    assert [(entry.respondent_id, entry.text) for entry in short.entries] == [
        ("early", "first"),
        ("middle", "second"),
        ("late", "third"),
    ]
    assert [entry.text for entry in report.free_text_by_question["long"].entries] == ["essay"]
    assert "lines" not in report.free_text_by_question
    assert "lines" not in report.per_question_tallies


def test_responses_for_other_surveys_are_ignored() -> None:
    responses = [
        _response("r1", "alice", {"single": "Yes"}),
        _response("r2", "bob", {"single": "Yes"}, survey_id="other"),
    ]

    report = aggregate(_survey(), responses)

    assert report.response_count == 1
    assert report.per_question_tallies["single"].option_counts["Yes"] == 1


def test_aggregation_is_repeatable() -> None:
    responses = [_response("r1", "alice", {"single": "No", "multi": "B", "short": "hi"})]
    survey = _survey()

    assert aggregate(survey, responses) == aggregate(survey, responses)


def test_naive_and_aware_timestamps_order_as_utc() -> None:
    naive = SurveyResponse(
        id="r1",
        survey_id="survey-1",
        employee_id="alice",
        submitted_at=datetime(2025, 3, 1, 10, 0),
        answers={"short": "later"},
    )
    aware = SurveyResponse(
        id="r2",
        survey_id="survey-1",
        employee_id="bob",
        submitted_at=datetime(2025, 3, 1, 11, 30, tzinfo=timezone(timedelta(hours=2))),
        answers={"short": "earlier"},
    )

    report = aggregate(_survey(), [naive, aware])

    assert naive.submitted_at.tzinfo is timezone.utc
    assert aware.submitted_at == datetime(2025, 3, 1, 9, 30, tzinfo=timezone.utc)
    entries = report.free_text_by_question["short"].entries
    assert [entry.text for entry in entries] == ["earlier", "later"]
