"""
FactCheck Configuration System
==============================

This file contains ALL configuration for the FactCheck pipeline.
- User settings at the top (things users might want to change)
- Internal constants at the bottom (technical defaults)
"""
import os
from dataclasses import dataclass
from enum import Enum
from typing import Optional


# =============================================================================
# USER SETTINGS - Edit these to customize the pipeline
# =============================================================================

# Reasoning service: set an API key (AI Studio) OR a Google Cloud project (Vertex)
GEMINI_API_KEY = None
GOOGLE_CLOUD_PROJECT = None
GOOGLE_APPLICATION_CREDENTIALS = None  # Optional: path to credentials JSON

# Repository access token (only needed for private repositories)
GITHUB_TOKEN = None

# Interview settings
DEFAULT_LEVEL = "junior"
DEFAULT_TONE = "neutral"
PER_TURN_SECONDS = None  # e.g. 60 to enable time limit mode
OUTPUT_LANGUAGE = "Korean"

# Logging
LOG_FILE = "./_factcheck/factcheck.log"
LOG_LEVEL = "INFO"


# =============================================================================
# INTERVIEW OPTIONS
# =============================================================================

class InterviewLevel(str, Enum):
    """Seniority the candidate is assessed against."""
    INTERN = "intern"
    JUNIOR = "junior"
    MID3 = "mid3"
    MID5 = "mid5"


class Tone(str, Enum):
    """Interviewer style. Affects wording only, never numeric scores."""
    NEUTRAL = "neutral"
    DIRECT = "direct"
    ANALYTICAL = "analytical"


LEVEL_INSTRUCTIONS = {
    InterviewLevel.INTERN: "Level: Intern. Focus on terminology understanding, basic usage, and willingness to learn. Keep questions fundamental.",
    InterviewLevel.JUNIOR: "Level: Junior (New Grad). Verify basic CS knowledge, project roles, and actual contribution to code. Check if they understand what they copy-pasted.",
    InterviewLevel.MID3: "Level: Mid-Level (3 years). Focus on Architecture, Troubleshooting, and Operational experience. Ask 'Why this stack?' and 'How did you handle this error?'.",
    InterviewLevel.MID5: "Level: Senior/Lead (5 years+). Deep dive into Design Patterns, Bottleneck resolution, Non-reproducible bugs, and Trade-offs. Question the design intent rigorously.",
}

TONE_INSTRUCTIONS = {
    Tone.NEUTRAL: "Tone: Professional and balanced. Acknowledge good answers briefly and move on.",
    Tone.DIRECT: "Tone: Bright, Direct, Crisp. Be energetic. If the answer is good, praise efficiently.",
    Tone.ANALYTICAL: "Tone: Calm, Analytical, Serious. Be critical like a strict code reviewer. If the answer is good, acknowledge quietly.",
}


# =============================================================================
# INTERNAL CONSTANTS - Don't change these unless you know what you're doing
# =============================================================================

# Code host
GITHUB_API_BASE = "https://api.github.com"
GITHUB_RAW_BASE = "https://raw.githubusercontent.com"
GITHUB_ACCEPT = "application/vnd.github.v3+json"
HOST_TIMEOUT = 30
MAX_STRUCTURE_ENTRIES = 500
MAX_FILES_PER_REPO = 12
MAX_FILE_CHARS = 50000
INTER_REQUEST_DELAY = 0.1

# Reasoning service
VERTEX_LOCATION = "us-central1"
MODEL_NAME = "gemini-2.5-flash"
GENERATIVE_LANGUAGE_BASE = "https://generativelanguage.googleapis.com/v1beta"
LLM_TIMEOUT = 120
MAX_OUTPUT_TOKENS = 8192
ANALYSIS_TEMPERATURE = 0.3
FEEDBACK_TEMPERATURE = 0.5

# Retry policy
RETRY_MAX_ATTEMPTS = 3
RETRY_BASE_DELAY = 2.0

# Session
CONCLUDE_COUNTDOWN_TICKS = 5
COUNTDOWN_TICK_SECONDS = 1.0
TARGET_QUESTIONS = 10


# =============================================================================
# MAIN CONFIG OBJECT
# =============================================================================

@dataclass
class Config:
    """Main configuration object."""
    api_key: Optional[str] = None
    google_cloud_project: Optional[str] = None
    google_application_credentials: Optional[str] = None
    vertex_location: str = VERTEX_LOCATION
    model_name: str = MODEL_NAME
    llm_timeout: int = LLM_TIMEOUT
    github_token: Optional[str] = None
    level: InterviewLevel = InterviewLevel(DEFAULT_LEVEL)
    tone: Tone = Tone(DEFAULT_TONE)
    per_turn_seconds: Optional[int] = PER_TURN_SECONDS
    language: str = OUTPUT_LANGUAGE
    log_file: str = LOG_FILE
    log_level: str = LOG_LEVEL

    def __repr__(self) -> str:
        # Credentials stay out of logs
        return (
            f"Config(model_name={self.model_name!r}, project={self.google_cloud_project!r}, "
            f"api_key={'set' if self.api_key else None}, github_token={'set' if self.github_token else None}, "
            f"level={self.level.value}, tone={self.tone.value}, per_turn_seconds={self.per_turn_seconds})"
        )


def get_config() -> Config:
    """Load configuration."""
    api_key = os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY") or GEMINI_API_KEY
    project = os.getenv("GOOGLE_CLOUD_PROJECT") or GOOGLE_CLOUD_PROJECT
    credentials = os.getenv("GOOGLE_APPLICATION_CREDENTIALS") or GOOGLE_APPLICATION_CREDENTIALS

    if not api_key and not project:
        raise ValueError("Please set GEMINI_API_KEY or GOOGLE_CLOUD_PROJECT in config.py or as environment variable")

    return Config(
        api_key=api_key,
        google_cloud_project=project,
        google_application_credentials=credentials,
        vertex_location=os.getenv("VERTEX_LOCATION") or VERTEX_LOCATION,
        model_name=os.getenv("FACTCHECK_MODEL") or MODEL_NAME,
        llm_timeout=int(os.getenv("FACTCHECK_LLM_TIMEOUT") or LLM_TIMEOUT),
        github_token=os.getenv("GITHUB_TOKEN") or GITHUB_TOKEN,
        language=os.getenv("FACTCHECK_LANGUAGE") or OUTPUT_LANGUAGE,
        log_file=os.getenv("FACTCHECK_LOG_FILE") or LOG_FILE,
        log_level=os.getenv("FACTCHECK_LOG_LEVEL") or LOG_LEVEL,
    )
