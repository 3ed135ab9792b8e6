"""Fact-check and interview components.

This module contains the business logic for fact-checking candidate claims
against repository evidence and conducting the follow-up interview,
including orchestration, the session state machine and feedback generation.
"""

# Core orchestrator class
from .orchestrator import FactCheckOrchestrator

# Data models
from .models import (
    Attachment, CandidateSubmission, CoverLetterItem, InterviewTurn,
    SessionSettings, SessionState, Speaker, TimerState
)

# Structured schemas
from .schemas import (
    AnalysisReport, FeedbackReport, FlaggedClaim, Verdict,
    parse_analysis_report, parse_feedback_report
)

# Analysis and decision engine
from .analysis import FactCheckAnalyzer
from .decision_engine import InterviewDecisionEngine, PromptEngine

# Session state machine
from .session import InterviewSession
from .prompts import InterviewPrompts, is_silence, is_termination

# Event system
from .events import (
    InterviewEventBus, EventLogger, InterviewMetrics,
    EventType, InterviewEvent, AnalysisStartedEvent, AnalysisCompletedEvent,
    SessionStartedEvent, TurnAppendedEvent, StateChangedEvent,
    CountdownTickEvent, SessionTerminatedEvent, SessionCancelledEvent,
    ErrorOccurredEvent
)

__all__ = [
    # Orchestrator
    "FactCheckOrchestrator",

    # Data models
    "Attachment", "CandidateSubmission", "CoverLetterItem", "InterviewTurn",
    "SessionSettings", "SessionState", "Speaker", "TimerState",

    # Schemas
    "AnalysisReport", "FeedbackReport", "FlaggedClaim", "Verdict",
    "parse_analysis_report", "parse_feedback_report",

    # Analysis and decisions
    "FactCheckAnalyzer", "InterviewDecisionEngine", "PromptEngine",

    # Session
    "InterviewSession", "InterviewPrompts", "is_silence", "is_termination",

    # Events
    "InterviewEventBus", "EventLogger", "InterviewMetrics",
    "EventType", "InterviewEvent", "AnalysisStartedEvent", "AnalysisCompletedEvent",
    "SessionStartedEvent", "TurnAppendedEvent", "StateChangedEvent",
    "CountdownTickEvent", "SessionTerminatedEvent", "SessionCancelledEvent",
    "ErrorOccurredEvent",
]
