"""
FactCheck: verify a candidate's claims against their code, then interview them on the gaps.

Aggregates evidence from GitHub repositories, asks Gemini for a structured
fact-check report, and runs a timed interview over one flagged claim ending
in a scored feedback report.
"""

__version__ = "1.0.0"

# Main entry points
from .interview.orchestrator import FactCheckOrchestrator
from .interview.session import InterviewSession
from .interview.models import CandidateSubmission, SessionSettings

__all__ = ["FactCheckOrchestrator", "InterviewSession", "CandidateSubmission", "SessionSettings"]
