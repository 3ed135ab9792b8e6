import pytest

from factcheck.errors import MalformedResponseError
from factcheck.interview.schemas import (
    ANALYSIS_RESPONSE_SCHEMA, FEEDBACK_RESPONSE_SCHEMA, Verdict,
    parse_analysis_report, parse_feedback_report,
)
from factcheck.interview.testing import create_analysis_payload, create_feedback_payload


def test_analysis_report_parses_camel_case_payload():
    report = parse_analysis_report(create_analysis_payload())

    assert len(report.items) == 2
    first = report.items[0]
    assert first.verdict is Verdict.MISSING
    assert first.resume_claim.startswith("Cut API latency")
    assert first.interview_question == "Where in this codebase does the Redis cache live?"
    assert report.evaluation.code_quality.score == 70
    assert report.summary.practical_tips.answer_tips == ["t1", "t2", "t3"]


def test_flagged_excludes_verified_claims():
    report = parse_analysis_report(create_analysis_payload())
    assert [item.topic for item in report.flagged()] == ["Redis caching"]


def test_missing_section_is_malformed():
    payload = create_analysis_payload()
    del payload["summary"]
    with pytest.raises(MalformedResponseError):
        parse_analysis_report(payload)


def test_out_of_range_score_is_malformed():
    payload = create_analysis_payload()
    payload["evaluation"]["architecture"]["score"] = 150
    with pytest.raises(MalformedResponseError):
        parse_analysis_report(payload)


def test_unknown_verdict_is_malformed():
    payload = create_analysis_payload()
    payload["items"][0]["verdict"] = "PROBABLY"
    with pytest.raises(MalformedResponseError):
        parse_analysis_report(payload)


def test_defense_score_is_sum_of_sub_scores():
    report = parse_feedback_report(create_feedback_payload(logic=3, solution=2.5, defense=9))
    assert report.defense_score == 5.5


def test_feedback_sub_score_range():
    with pytest.raises(MalformedResponseError):
        parse_feedback_report(create_feedback_payload(logic=6))


def test_feedback_requires_lists():
    payload = create_feedback_payload()
    del payload["actionItems"]
    with pytest.raises(MalformedResponseError):
        parse_feedback_report(payload)


def test_response_schemas_require_every_section():
    assert ANALYSIS_RESPONSE_SCHEMA["required"] == ["items", "evaluation", "summary"]
    assert set(ANALYSIS_RESPONSE_SCHEMA["properties"]["evaluation"]["required"]) == {
        "architecture", "codeQuality", "problemSolving", "techProficiency",
        "projectCompleteness", "consistency", "growthPotential",
    }
    assert "defenseScore" in FEEDBACK_RESPONSE_SCHEMA["required"]
