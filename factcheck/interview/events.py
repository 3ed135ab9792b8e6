"""
Event-driven communication between the pipeline and its UI collaborator.
"""
import logging
from abc import ABC
from typing import Dict, Any, List, Callable, Optional
from dataclasses import dataclass
from enum import Enum

logger = logging.getLogger("events")


class EventType(str, Enum):
    """Types of interview pipeline events."""
    ANALYSIS_STARTED = "analysis_started"
    ANALYSIS_COMPLETED = "analysis_completed"
    SESSION_STARTED = "session_started"
    TURN_APPENDED = "turn_appended"
    STATE_CHANGED = "state_changed"
    COUNTDOWN_TICK = "countdown_tick"
    SESSION_TERMINATED = "session_terminated"
    SESSION_CANCELLED = "session_cancelled"
    ERROR_OCCURRED = "error_occurred"


@dataclass
class InterviewEvent(ABC):
    """Base class for all pipeline events."""
    event_type: EventType
    session_id: str
    timestamp: float
    data: Dict[str, Any]


@dataclass
class AnalysisStartedEvent(InterviewEvent):
    """Event fired when evidence aggregation begins."""
    def __init__(self, session_id: str, timestamp: float, repository_count: int):
        super().__init__(
            event_type=EventType.ANALYSIS_STARTED,
            session_id=session_id,
            timestamp=timestamp,
            data={"repository_count": repository_count}
        )


@dataclass
class AnalysisCompletedEvent(InterviewEvent):
    """Event fired when the fact-check report is ready."""
    def __init__(self, session_id: str, timestamp: float, claim_count: int, flagged_count: int):
        super().__init__(
            event_type=EventType.ANALYSIS_COMPLETED,
            session_id=session_id,
            timestamp=timestamp,
            data={"claim_count": claim_count, "flagged_count": flagged_count}
        )


@dataclass
class SessionStartedEvent(InterviewEvent):
    """Event fired when an interview session is created."""
    def __init__(self, session_id: str, timestamp: float, topic: str, time_limit_seconds: Optional[int]):
        super().__init__(
            event_type=EventType.SESSION_STARTED,
            session_id=session_id,
            timestamp=timestamp,
            data={"topic": topic, "time_limit_seconds": time_limit_seconds}
        )


@dataclass
class TurnAppendedEvent(InterviewEvent):
    """Event fired for every transcript turn, in order."""
    def __init__(self, session_id: str, timestamp: float, index: int, speaker: str, text: str):
        super().__init__(
            event_type=EventType.TURN_APPENDED,
            session_id=session_id,
            timestamp=timestamp,
            data={"index": index, "speaker": speaker, "text": text}
        )


@dataclass
class StateChangedEvent(InterviewEvent):
    """Event fired on every session state transition."""
    def __init__(self, session_id: str, timestamp: float, previous: str, current: str,
                 time_remaining: Optional[int]):
        super().__init__(
            event_type=EventType.STATE_CHANGED,
            session_id=session_id,
            timestamp=timestamp,
            data={"previous": previous, "current": current, "time_remaining": time_remaining}
        )


@dataclass
class CountdownTickEvent(InterviewEvent):
    """Event fired once per second while the session is concluding."""
    def __init__(self, session_id: str, timestamp: float, remaining: int):
        super().__init__(
            event_type=EventType.COUNTDOWN_TICK,
            session_id=session_id,
            timestamp=timestamp,
            data={"remaining": remaining}
        )


@dataclass
class SessionTerminatedEvent(InterviewEvent):
    """Event fired when a session reaches TERMINATED."""
    def __init__(self, session_id: str, timestamp: float, turn_count: int, forced: bool):
        super().__init__(
            event_type=EventType.SESSION_TERMINATED,
            session_id=session_id,
            timestamp=timestamp,
            data={"turn_count": turn_count, "forced": forced}
        )


@dataclass
class SessionCancelledEvent(InterviewEvent):
    """Event fired when the caller abandons a session."""
    def __init__(self, session_id: str, timestamp: float, turn_count: int):
        super().__init__(
            event_type=EventType.SESSION_CANCELLED,
            session_id=session_id,
            timestamp=timestamp,
            data={"turn_count": turn_count}
        )


@dataclass
class ErrorOccurredEvent(InterviewEvent):
    """Event fired when an error occurs."""
    def __init__(self, session_id: str, timestamp: float, error_type: str,
                 error_message: str, component: str):
        super().__init__(
            event_type=EventType.ERROR_OCCURRED,
            session_id=session_id,
            timestamp=timestamp,
            data={
                "error_type": error_type,
                "error_message": error_message,
                "component": component
            }
        )


EventHandler = Callable[[InterviewEvent], None]


class InterviewEventBus:
    """Event bus for pipeline communication."""

    def __init__(self):
        self._handlers: Dict[EventType, List[EventHandler]] = {}
        self._global_handlers: List[EventHandler] = []

    def subscribe(self, event_type: EventType, handler: EventHandler) -> None:
        """
        Subscribe to specific event type.

        Args:
            event_type: Type of event to listen for
            handler: Function to call when event occurs
        """
        self._handlers.setdefault(event_type, []).append(handler)
        logger.debug(f"Subscribed handler to {event_type}")

    def subscribe_all(self, handler: EventHandler) -> None:
        """
        Subscribe to all events.

        Args:
            handler: Function to call for any event
        """
        self._global_handlers.append(handler)
        logger.debug("Subscribed global handler")

    def unsubscribe(self, event_type: EventType, handler: EventHandler) -> None:
        """Unsubscribe from specific event type."""
        if event_type in self._handlers:
            try:
                self._handlers[event_type].remove(handler)
                logger.debug(f"Unsubscribed handler from {event_type}")
            except ValueError:
                logger.warning(f"Handler not found for {event_type}")

    def emit(self, event: InterviewEvent) -> None:
        """
        Emit an event to all subscribers.

        A failing handler is logged and skipped; it never breaks the emitter.
        """
        logger.debug(f"Emitting event: {event.event_type} for session {event.session_id}")

        for handler in self._handlers.get(event.event_type, []):
            try:
                handler(event)
            except Exception as e:
                logger.error(f"Error in event handler for {event.event_type}: {e}")

        for handler in self._global_handlers:
            try:
                handler(event)
            except Exception as e:
                logger.error(f"Error in global event handler: {e}")

    def clear_handlers(self) -> None:
        """Clear all event handlers."""
        self._handlers.clear()
        self._global_handlers.clear()


class EventLogger:
    """Logs all events for debugging and analysis."""

    def __init__(self, log_level: int = logging.INFO):
        self.logger = logging.getLogger("event_logger")
        self.logger.setLevel(log_level)

    def handle_event(self, event: InterviewEvent) -> None:
        """Log event details. Turn text is summarized by length only."""
        data = dict(event.data)
        if "text" in data:
            data["text"] = f"<{len(data['text'])} chars>"
        self.logger.info(f"Event: {event.event_type.value} | Session: {event.session_id} | Data: {data}")


class InterviewMetrics:
    """Collects metrics from pipeline events."""

    def __init__(self):
        self.reset()

    def handle_event(self, event: InterviewEvent) -> None:
        """Update metrics based on event."""
        if event.event_type == EventType.ANALYSIS_COMPLETED:
            self.analyses_completed += 1
        elif event.event_type == EventType.SESSION_STARTED:
            self.sessions_started += 1
        elif event.event_type == EventType.SESSION_TERMINATED:
            self.sessions_terminated += 1
        elif event.event_type == EventType.SESSION_CANCELLED:
            self.sessions_cancelled += 1
        elif event.event_type == EventType.TURN_APPENDED:
            self.total_turns += 1
        elif event.event_type == EventType.ERROR_OCCURRED:
            self.errors_occurred += 1

    def get_metrics(self) -> Dict[str, int]:
        """Get current metrics snapshot."""
        return {
            "analyses_completed": self.analyses_completed,
            "sessions_started": self.sessions_started,
            "sessions_terminated": self.sessions_terminated,
            "sessions_cancelled": self.sessions_cancelled,
            "total_turns": self.total_turns,
            "errors_occurred": self.errors_occurred,
        }

    def reset(self) -> None:
        """Reset all metrics to zero."""
        self.analyses_completed = 0
        self.sessions_started = 0
        self.sessions_terminated = 0
        self.sessions_cancelled = 0
        self.total_turns = 0
        self.errors_occurred = 0
