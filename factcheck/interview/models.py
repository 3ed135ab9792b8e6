"""
Data models for the fact-check and interview pipeline.
"""
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, List

from ..config import InterviewLevel, Tone


class Speaker(str, Enum):
    """Who produced a transcript turn."""
    INTERVIEWER = "interviewer"
    CANDIDATE = "candidate"

    @property
    def api_role(self) -> str:
        """Role name in the reasoning-service conversation format."""
        return "model" if self is Speaker.INTERVIEWER else "user"


@dataclass(frozen=True)
class InterviewTurn:
    """Represents a single transcript turn. Never mutated after append."""
    speaker: Speaker
    text: str


class SessionState(str, Enum):
    """Lifecycle of an interview session."""
    AWAITING_ANSWER = "awaiting_answer"
    PROCESSING = "processing"
    CONCLUDING = "concluding"
    TERMINATED = "terminated"


@dataclass
class TimerState:
    """Per-turn answer deadline; only armed while awaiting an answer."""
    deadline_epoch: Optional[float] = None

    @property
    def armed(self) -> bool:
        return self.deadline_epoch is not None

    def arm(self, now: float, limit_seconds: float):
        self.deadline_epoch = now + limit_seconds

    def clear(self):
        self.deadline_epoch = None

    def remaining(self, now: float) -> Optional[int]:
        """Whole seconds left, rounded up and floored at zero, or None when unarmed."""
        if self.deadline_epoch is None:
            return None
        return max(0, math.ceil(self.deadline_epoch - now))


@dataclass
class Attachment:
    """Binary document supplied alongside text (JD image, resume PDF)."""
    data_b64: str
    mime_type: str


@dataclass
class CoverLetterItem:
    question: str
    answer: str


@dataclass
class CandidateSubmission:
    """Everything the candidate and recruiter supply for one analysis."""
    repository_urls: List[str]
    level: InterviewLevel = InterviewLevel.JUNIOR
    time_limit_seconds: Optional[int] = None
    tone: Tone = Tone.NEUTRAL

    # Company
    talent_ideal: str = ""
    jd_type: str = "text"  # text | url | file
    job_description: str = ""
    jd_attachment: Optional[Attachment] = None

    # Candidate document
    doc_type: str = "resume"  # resume | coverLetter
    resume_text: str = ""
    resume_attachment: Optional[Attachment] = None
    cover_letter_items: List[CoverLetterItem] = field(default_factory=list)

    # Code
    repository_token: Optional[str] = None

    def __repr__(self) -> str:
        # Token stays out of logs
        return (f"CandidateSubmission(repos={self.repository_urls!r}, level={self.level.value}, "
                f"tone={self.tone.value}, time_limit={self.time_limit_seconds}, doc_type={self.doc_type})")

    def candidate_document(self) -> str:
        """Text rendering of the candidate's claims."""
        if self.doc_type == "coverLetter":
            qa = "\n\n".join(
                f"Q{i}: {item.question}\nA{i}: {item.answer}"
                for i, item in enumerate(self.cover_letter_items, start=1)
            )
            return "--- COVER LETTER (Q&A) ---\n" + qa
        return "--- RESUME/PORTFOLIO ---\n" + self.resume_text


@dataclass
class SessionSettings:
    """Configuration passed to the interviewer on every turn."""
    level: InterviewLevel = InterviewLevel.JUNIOR
    time_limit_seconds: Optional[int] = None
    tone: Tone = Tone.NEUTRAL
