import logging

import pytest

from factcheck.config import InterviewLevel, get_config
from factcheck.interview.events import (
    EventLogger, EventType, InterviewEventBus, InterviewMetrics, TurnAppendedEvent, SessionStartedEvent,
)
from factcheck.interview.models import CandidateSubmission


def test_config_requires_reasoning_credentials():
    with pytest.raises(ValueError):
        get_config()


def test_config_from_environment(monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "gem-key")
    monkeypatch.setenv("GITHUB_TOKEN", "ghp_secret")
    monkeypatch.setenv("FACTCHECK_MODEL", "gemini-2.5-pro")
    monkeypatch.setenv("FACTCHECK_LANGUAGE", "English")

    config = get_config()

    assert config.api_key == "gem-key"
    assert config.github_token == "ghp_secret"
    assert config.model_name == "gemini-2.5-pro"
    assert config.language == "English"
    assert config.level is InterviewLevel.JUNIOR
    assert config.per_turn_seconds is None


def test_vertex_project_is_enough(monkeypatch):
    monkeypatch.setenv("GOOGLE_CLOUD_PROJECT", "my-project")
    config = get_config()
    assert config.api_key is None
    assert config.google_cloud_project == "my-project"


def test_credentials_are_masked_in_repr(monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "gem-key")
    monkeypatch.setenv("GITHUB_TOKEN", "ghp_secret")
    text = repr(get_config())
    assert "gem-key" not in text and "ghp_secret" not in text

    submission = CandidateSubmission(repository_urls=["https://github.com/a/b"], repository_token="ghp_secret")
    assert "ghp_secret" not in repr(submission)


def test_failing_handler_does_not_break_the_bus():
    bus = InterviewEventBus()
    seen = []

    def broken(event):
        raise RuntimeError("handler bug")

    bus.subscribe(EventType.SESSION_STARTED, broken)
    bus.subscribe(EventType.SESSION_STARTED, seen.append)
    bus.emit(SessionStartedEvent("s1", 0.0, "topic", None))

    assert len(seen) == 1


def test_unsubscribe_and_metrics():
    bus = InterviewEventBus()
    metrics = InterviewMetrics()
    bus.subscribe(EventType.TURN_APPENDED, metrics.handle_event)
    bus.emit(TurnAppendedEvent("s1", 0.0, 0, "interviewer", "Q?"))
    bus.unsubscribe(EventType.TURN_APPENDED, metrics.handle_event)
    bus.emit(TurnAppendedEvent("s1", 0.0, 1, "candidate", "A."))
    assert metrics.get_metrics()["total_turns"] == 1
    metrics.reset()
    assert metrics.get_metrics()["total_turns"] == 0


def test_event_logger_omits_turn_text(caplog):
    with caplog.at_level(logging.INFO, logger="event_logger"):
        EventLogger().handle_event(TurnAppendedEvent("s1", 0.0, 1, "candidate", "my private answer"))
    assert "turn_appended" in caplog.text
    assert "my private answer" not in caplog.text
    assert "<17 chars>" in caplog.text
