"""
Interview session state machine.

One session covers one flagged claim. The opening question is seeded as the
first interviewer turn; every later interviewer turn comes either from the
decision engine or, for silent answers, from a canned reply. The session owns
its transcript and state exclusively and reports progress through the event
bus, so the caller (CLI or UI) never mutates either directly.
"""
import logging
import time
import uuid
from typing import Callable, List, Optional, Tuple

from .decision_engine import InterviewDecisionEngine
from .events import (
    InterviewEventBus, SessionStartedEvent, TurnAppendedEvent, StateChangedEvent,
    CountdownTickEvent, SessionTerminatedEvent, SessionCancelledEvent, ErrorOccurredEvent
)
from .models import InterviewTurn, SessionSettings, SessionState, Speaker, TimerState
from .prompts import InterviewPrompts, TIME_EXCEEDED_MARKER, is_silence, is_termination
from .schemas import FeedbackReport, FlaggedClaim
from ..config import CONCLUDE_COUNTDOWN_TICKS, COUNTDOWN_TICK_SECONDS, OUTPUT_LANGUAGE, TARGET_QUESTIONS
from ..errors import SessionStateError

logger = logging.getLogger("interview_session")

FeedbackHandler = Callable[[List[InterviewTurn]], FeedbackReport]


class InterviewSession:
    """
    Turn-based interview over a single flagged claim.

    States move AWAITING_ANSWER -> PROCESSING -> AWAITING_ANSWER | CONCLUDING,
    and CONCLUDING -> TERMINATED after a fixed countdown. ``force_finish``
    jumps straight to TERMINATED; ``cancel`` discards the session without
    feedback.
    """

    def __init__(self,
                 item: FlaggedClaim,
                 settings: SessionSettings,
                 engine: InterviewDecisionEngine,
                 feedback_handler: Optional[FeedbackHandler] = None,
                 event_bus: Optional[InterviewEventBus] = None,
                 session_id: Optional[str] = None,
                 language: str = OUTPUT_LANGUAGE,
                 clock: Callable[[], float] = time.time,
                 sleep: Callable[[float], None] = time.sleep,
                 auto_countdown: bool = True,
                 countdown_ticks: int = CONCLUDE_COUNTDOWN_TICKS,
                 tick_seconds: float = COUNTDOWN_TICK_SECONDS):
        self.item = item
        self.settings = settings
        self.engine = engine
        self.feedback_handler = feedback_handler
        self.event_bus = event_bus or InterviewEventBus()
        self.session_id = session_id or uuid.uuid4().hex[:12]
        self.language = language
        self.auto_countdown = auto_countdown
        self.countdown_ticks = countdown_ticks
        self.tick_seconds = tick_seconds

        self._clock = clock
        self._sleep = sleep
        self._turns: List[InterviewTurn] = []
        self._state = SessionState.AWAITING_ANSWER
        self._timer = TimerState()
        self._countdown_remaining: Optional[int] = None
        self._cancelled = False
        self._feedback: Optional[FeedbackReport] = None

        self.event_bus.emit(SessionStartedEvent(
            self.session_id, self._clock(), item.topic, settings.time_limit_seconds
        ))
        self._append(Speaker.INTERVIEWER, item.interview_question)
        self._arm_timer()
        logger.info("Session %s started on topic '%s' (time limit: %s)",
                    self.session_id, item.topic, settings.time_limit_seconds)

    # ------------------------------------------------------------------
    # Observable state
    # ------------------------------------------------------------------

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def transcript(self) -> Tuple[InterviewTurn, ...]:
        return tuple(self._turns)

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def feedback(self) -> Optional[FeedbackReport]:
        return self._feedback

    @property
    def countdown_remaining(self) -> Optional[int]:
        """Ticks left while CONCLUDING, otherwise None."""
        return self._countdown_remaining

    @property
    def time_remaining(self) -> Optional[int]:
        """Seconds left to answer, or None when no timer is running."""
        if self._state is not SessionState.AWAITING_ANSWER:
            return None
        return self._timer.remaining(self._clock())

    @property
    def question_count(self) -> int:
        """Candidate answers so far, clamped to the target question count."""
        answered = sum(1 for turn in self._turns if turn.speaker is Speaker.CANDIDATE)
        return min(answered, TARGET_QUESTIONS)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def submit(self, text: str) -> Optional[str]:
        """
        Submit a candidate answer.

        Args:
            text: The candidate's answer, or the time-exceeded marker synthesized
                by the caller when the per-turn timer ran out

        Returns:
            The interviewer's reply, or None when the session was cancelled
            while the reply was being generated

        Raises:
            SessionStateError: If the session is not awaiting an answer
            ReasoningServiceError: If the interviewer turn could not be produced;
                the session is back in AWAITING_ANSWER
        """
        self._require_awaiting("submit")
        answer = (text or "").strip()

        if is_silence(answer):
            return self._handle_silence(answer)

        self._append(Speaker.CANDIDATE, answer)
        self._transition(SessionState.PROCESSING)

        try:
            reply = self.engine.next_interviewer_turn(list(self._turns), self.item, self.settings)
        except Exception as e:
            logger.error("Session %s: interviewer turn failed: %s", self.session_id, e)
            self.event_bus.emit(ErrorOccurredEvent(
                self.session_id, self._clock(), type(e).__name__, str(e), "interview_session"
            ))
            if not self._cancelled:
                self._transition(SessionState.AWAITING_ANSWER)
            raise

        if self._cancelled:
            logger.info("Session %s: discarding reply that arrived after cancellation", self.session_id)
            return None

        self._append(Speaker.INTERVIEWER, reply)

        if is_termination(reply):
            self._transition(SessionState.CONCLUDING)
            self._countdown_remaining = self.countdown_ticks
            if self.auto_countdown:
                self.run_countdown()
        else:
            self._transition(SessionState.AWAITING_ANSWER)
        return reply

    def tick(self) -> int:
        """
        Advance the concluding countdown by one tick.

        Returns:
            Ticks left after this one; the session is TERMINATED at zero
        """
        if self._state is not SessionState.CONCLUDING:
            raise SessionStateError(f"Cannot tick the countdown while {self._state.value}")
        self._countdown_remaining -= 1
        remaining = self._countdown_remaining
        self.event_bus.emit(CountdownTickEvent(self.session_id, self._clock(), remaining))
        logger.debug("Session %s: countdown %d", self.session_id, remaining)
        if remaining <= 0:
            self._terminate(forced=False)
        return remaining

    def run_countdown(self) -> None:
        """Run the remaining countdown, one tick per ``tick_seconds``."""
        while self._state is SessionState.CONCLUDING and not self._cancelled:
            self._sleep(self.tick_seconds)
            self.tick()

    def force_finish(self) -> Optional[FeedbackReport]:
        """End the interview now with whatever transcript exists."""
        self._require_awaiting("finish")
        logger.info("Session %s finished early by the candidate", self.session_id)
        self._terminate(forced=True)
        return self._feedback

    def cancel(self) -> None:
        """
        Abandon the session without feedback.

        Allowed while awaiting an answer, or while a reply is in flight (the
        reply is discarded when it arrives).
        """
        if self._cancelled:
            return
        if self._state not in (SessionState.AWAITING_ANSWER, SessionState.PROCESSING):
            raise SessionStateError(f"Cannot cancel a session that is {self._state.value}")
        self._cancelled = True
        self._timer.clear()
        self.event_bus.emit(SessionCancelledEvent(self.session_id, self._clock(), len(self._turns)))
        logger.info("Session %s cancelled after %d turns", self.session_id, len(self._turns))

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _require_awaiting(self, action: str):
        if self._cancelled:
            raise SessionStateError(f"Cannot {action}: session was cancelled")
        if self._state is not SessionState.AWAITING_ANSWER:
            raise SessionStateError(f"Cannot {action} while {self._state.value}")

    def _handle_silence(self, answer: str) -> str:
        """Canned reply for an answer with no technical content; no service call."""
        time_exceeded = bool(self.settings.time_limit_seconds) or TIME_EXCEEDED_MARKER in answer.lower()
        reply = InterviewPrompts.silence_response(time_exceeded, self.settings.tone, self.language)
        self._append(Speaker.CANDIDATE, answer)
        self._append(Speaker.INTERVIEWER, reply)
        # Fresh question, fresh deadline
        self._arm_timer()
        logger.info("Session %s: silent answer, canned %s reply",
                    self.session_id, "time-exceeded" if time_exceeded else "voluntary")
        return reply

    def _append(self, speaker: Speaker, text: str):
        turn = InterviewTurn(speaker=speaker, text=text)
        self._turns.append(turn)
        self.event_bus.emit(TurnAppendedEvent(
            self.session_id, self._clock(), len(self._turns) - 1, speaker.value, text
        ))

    def _arm_timer(self):
        if self.settings.time_limit_seconds:
            self._timer.arm(self._clock(), self.settings.time_limit_seconds)

    def _transition(self, new_state: SessionState):
        previous = self._state
        self._state = new_state
        if new_state is SessionState.AWAITING_ANSWER:
            self._arm_timer()
        else:
            self._timer.clear()
        if new_state is not SessionState.CONCLUDING:
            self._countdown_remaining = None
        self.event_bus.emit(StateChangedEvent(
            self.session_id, self._clock(), previous.value, new_state.value, self.time_remaining
        ))
        logger.debug("Session %s: %s -> %s", self.session_id, previous.value, new_state.value)

    def _terminate(self, forced: bool):
        self._transition(SessionState.TERMINATED)
        self.event_bus.emit(SessionTerminatedEvent(
            self.session_id, self._clock(), len(self._turns), forced
        ))
        logger.info("Session %s terminated after %d turns (forced=%s)",
                    self.session_id, len(self._turns), forced)
        if self.feedback_handler is None:
            return
        try:
            self._feedback = self.feedback_handler(list(self._turns))
        except Exception as e:
            logger.error("Session %s: feedback failed: %s", self.session_id, e)
            self.event_bus.emit(ErrorOccurredEvent(
                self.session_id, self._clock(), type(e).__name__, str(e), "feedback"
            ))
            raise
