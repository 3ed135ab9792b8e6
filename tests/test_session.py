import pytest

from factcheck.config import Tone
from factcheck.errors import ReasoningServiceError, SessionStateError
from factcheck.interview.events import EventType
from factcheck.interview.models import InterviewTurn, SessionSettings, SessionState, Speaker
from factcheck.interview.prompts import InterviewPrompts, TIME_EXCEEDED_MARKER
from factcheck.interview.session import InterviewSession
from factcheck.interview.testing import MockDecisionEngine, service_error

CONCLUDE = "Good, that matches the code. This concludes the interview."


class FeedbackSpy:
    def __init__(self):
        self.transcripts = []

    def __call__(self, transcript):
        self.transcripts.append(list(transcript))
        return "feedback-report"


@pytest.fixture
def feedback():
    return FeedbackSpy()


@pytest.fixture
def make_session(claim, bus, clock, sleeper, feedback):
    def _make(replies=(), time_limit=None, **kwargs):
        engine = MockDecisionEngine(list(replies))
        session = InterviewSession(
            item=claim,
            settings=SessionSettings(time_limit_seconds=time_limit, tone=Tone.NEUTRAL),
            engine=engine,
            feedback_handler=feedback,
            event_bus=bus,
            language="English",
            clock=clock,
            sleep=sleeper,
            **kwargs,
        )
        return session, engine
    return _make


def test_session_opens_with_seeded_question(make_session, claim, recorder):
    session, _ = make_session()
    assert session.state is SessionState.AWAITING_ANSWER
    assert session.transcript == (InterviewTurn(Speaker.INTERVIEWER, claim.interview_question),)
    assert session.question_count == 0
    assert len(recorder.of_type(EventType.SESSION_STARTED)) == 1
    assert recorder.of_type(EventType.TURN_APPENDED)[0].data["index"] == 0


def test_answer_round_trip(make_session, recorder):
    session, engine = make_session(["Which module holds the cache?"])

    reply = session.submit("  It lives in the service layer.  ")

    assert reply == "Which module holds the cache?"
    assert session.state is SessionState.AWAITING_ANSWER
    assert [t.speaker for t in session.transcript] == [Speaker.INTERVIEWER, Speaker.CANDIDATE, Speaker.INTERVIEWER]
    assert session.transcript[1].text == "It lives in the service layer."
    # the engine saw the full transcript ending with the answer
    assert engine.seen_transcripts[0][-1] == InterviewTurn(Speaker.CANDIDATE, "It lives in the service layer.")
    states = [e.data["current"] for e in recorder.of_type(EventType.STATE_CHANGED)]
    assert states == ["processing", "awaiting_answer"]
    assert session.question_count == 1


def test_empty_submission_without_time_limit_gets_voluntary_reply(make_session, recorder):
    session, engine = make_session()

    reply = session.submit("")

    assert reply == InterviewPrompts.silence_response(False, Tone.NEUTRAL, "English")
    assert engine.seen_transcripts == []
    assert session.state is SessionState.AWAITING_ANSWER
    assert session.transcript[-1] == InterviewTurn(Speaker.INTERVIEWER, reply)
    # PROCESSING is bypassed entirely
    assert recorder.of_type(EventType.STATE_CHANGED) == []


def test_time_exceeded_marker_gets_time_up_reply(make_session, clock):
    session, engine = make_session(time_limit=30)
    clock.advance(31)
    assert session.time_remaining == 0

    reply = session.submit(TIME_EXCEEDED_MARKER)

    assert reply == InterviewPrompts.silence_response(True, Tone.NEUTRAL, "English")
    assert engine.seen_transcripts == []
    # a new deadline starts with the next question
    assert session.time_remaining == 30


def test_timer_runs_only_while_awaiting_answer(make_session, clock):
    observed = []

    class WatchingEngine(MockDecisionEngine):
        def next_interviewer_turn(self, transcript, item, settings):
            observed.append((session.state, session.time_remaining))
            return "Next?"

    session, _ = make_session(time_limit=60)
    session.engine = WatchingEngine([])
    clock.advance(15)
    assert session.time_remaining == 45

    session.submit("A real answer about cache invalidation.")

    assert observed == [(SessionState.PROCESSING, None)]
    assert session.time_remaining == 60


def test_time_remaining_reaches_zero_only_at_the_deadline(make_session, clock):
    session, _ = make_session(time_limit=30)
    clock.advance(29.5)
    assert session.time_remaining == 1
    clock.advance(0.5)
    assert session.time_remaining == 0


def test_no_timer_without_time_limit(make_session):
    session, _ = make_session()
    assert session.time_remaining is None


def test_termination_phrase_counts_down_then_hands_over_transcript(make_session, feedback, sleeper, recorder):
    session, _ = make_session(["Tell me about eviction.", CONCLUDE])
    session.submit("We cache product pages.")
    session.submit("LRU with a 5 minute TTL.")

    assert session.state is SessionState.TERMINATED
    assert sleeper.calls == [1.0] * 5
    assert [e.data["remaining"] for e in recorder.of_type(EventType.COUNTDOWN_TICK)] == [4, 3, 2, 1, 0]
    states = [e.data["current"] for e in recorder.of_type(EventType.STATE_CHANGED)]
    assert states[-2:] == ["concluding", "terminated"]

    assert feedback.transcripts == [list(session.transcript)]
    handed = feedback.transcripts[0]
    assert [t.text for t in handed] == [
        session.item.interview_question,
        "We cache product pages.",
        "Tell me about eviction.",
        "LRU with a 5 minute TTL.",
        CONCLUDE,
    ]
    assert session.feedback == "feedback-report"
    assert recorder.of_type(EventType.SESSION_TERMINATED)[0].data["forced"] is False


def test_manual_countdown(make_session, feedback):
    session, _ = make_session([CONCLUDE], auto_countdown=False)
    session.submit("Detailed answer.")

    assert session.state is SessionState.CONCLUDING
    assert session.countdown_remaining == 5
    with pytest.raises(SessionStateError):
        session.submit("one more thing")
    with pytest.raises(SessionStateError):
        session.force_finish()

    for expected in (4, 3, 2, 1):
        assert session.tick() == expected
        assert session.state is SessionState.CONCLUDING
    assert feedback.transcripts == []
    assert session.tick() == 0
    assert session.state is SessionState.TERMINATED
    assert len(feedback.transcripts) == 1


def test_tick_outside_concluding_is_rejected(make_session):
    session, _ = make_session()
    with pytest.raises(SessionStateError):
        session.tick()


def test_force_finish_skips_countdown(make_session, feedback, sleeper, recorder):
    session, _ = make_session(["Go on."])
    session.submit("Partial answer.")

    assert session.force_finish() == "feedback-report"

    assert session.state is SessionState.TERMINATED
    assert sleeper.calls == []
    assert len(feedback.transcripts[0]) == 3
    assert recorder.of_type(EventType.SESSION_TERMINATED)[0].data["forced"] is True
    with pytest.raises(SessionStateError):
        session.submit("late answer")
    with pytest.raises(SessionStateError):
        session.force_finish()


def test_cancel_discards_without_feedback(make_session, feedback, recorder):
    session, _ = make_session()
    session.cancel()
    session.cancel()

    assert session.cancelled
    assert feedback.transcripts == []
    assert len(recorder.of_type(EventType.SESSION_CANCELLED)) == 1
    with pytest.raises(SessionStateError):
        session.submit("hello?")


def test_cancel_while_reply_in_flight_discards_reply(make_session):
    class CancellingEngine(MockDecisionEngine):
        def next_interviewer_turn(self, transcript, item, settings):
            session.cancel()
            return "This reply arrives too late."

    session, _ = make_session()
    session.engine = CancellingEngine([])

    assert session.submit("My answer.") is None
    assert session.cancelled
    assert [t.text for t in session.transcript][-1] == "My answer."


def test_cancel_after_termination_is_rejected(make_session):
    session, _ = make_session()
    session.force_finish()
    with pytest.raises(SessionStateError):
        session.cancel()


def test_reasoning_failure_returns_to_awaiting_answer(make_session, recorder):
    session, _ = make_session([service_error(500), "Recovered question?"])

    with pytest.raises(ReasoningServiceError):
        session.submit("First try.")

    assert session.state is SessionState.AWAITING_ANSWER
    errors = recorder.of_type(EventType.ERROR_OCCURRED)
    assert errors and errors[0].data["component"] == "interview_session"

    assert session.submit("Second try.") == "Recovered question?"


def test_question_count_is_clamped(make_session):
    session, _ = make_session([f"Question {i}?" for i in range(12)])
    for i in range(12):
        session.submit(f"Answer {i}.")
    assert session.question_count == 10
    assert sum(1 for t in session.transcript if t.speaker is Speaker.CANDIDATE) == 12


def test_transcript_is_a_read_only_copy(make_session):
    session, _ = make_session()
    snapshot = session.transcript
    assert isinstance(snapshot, tuple)
    session.submit("pass")
    assert len(snapshot) == 1
    assert len(session.transcript) == 3
