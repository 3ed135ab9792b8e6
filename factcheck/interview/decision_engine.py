"""
Interviewer decision engine: next-turn generation and feedback reports.
"""
import logging
from typing import List, Optional

from .models import InterviewTurn, SessionSettings, Speaker
from .prompts import InterviewPrompts, NO_ANSWER_PLACEHOLDER
from .schemas import FlaggedClaim, FeedbackReport, FEEDBACK_RESPONSE_SCHEMA, parse_feedback_report
from ..config import FEEDBACK_TEMPERATURE, OUTPUT_LANGUAGE
from ..errors import MalformedResponseError
from ..infrastructure.llm import GeminiRestClient, ResilientInvoker, text_part

logger = logging.getLogger("decision_engine")


def spoken_text(turn: InterviewTurn) -> str:
    """Turn text as sent to the model; the API rejects empty text parts."""
    return turn.text.strip() or NO_ANSWER_PLACEHOLDER


class PromptEngine:
    """Handles prompt generation and conversation formatting."""

    def __init__(self, language: str = OUTPUT_LANGUAGE):
        self.language = language

    def build_interviewer_contents(self,
                                   transcript: List[InterviewTurn],
                                   item: FlaggedClaim,
                                   settings: SessionSettings) -> List[dict]:
        """
        Build the conversation sent for the next interviewer turn.

        The system prompt leads as a user turn, followed by the full
        transcript in order.
        """
        system_prompt = InterviewPrompts.interviewer_system_prompt(
            topic=item.topic,
            resume_claim=item.resume_claim,
            code_observation=item.code_observation,
            verdict=item.verdict.value,
            level=settings.level,
            time_limit_seconds=settings.time_limit_seconds,
            tone=settings.tone,
            language=self.language,
        )
        contents = [{"role": "user", "parts": [text_part(system_prompt)]}]
        contents.extend(
            {"role": turn.speaker.api_role, "parts": [text_part(spoken_text(turn))]}
            for turn in transcript
        )
        return contents

    def build_feedback_prompt(self,
                              transcript: List[InterviewTurn],
                              item: FlaggedClaim,
                              settings: SessionSettings) -> str:
        conversation = "\n".join(f"{turn.speaker.value}: {spoken_text(turn)}" for turn in transcript)
        return InterviewPrompts.feedback_prompt(
            topic=item.topic,
            level=settings.level,
            tone=settings.tone,
            transcript=conversation,
            language=self.language,
        )


class InterviewDecisionEngine:
    """Handles all reasoning-service calls made during and after an interview."""

    def __init__(self,
                 llm_client: GeminiRestClient,
                 prompt_engine: Optional[PromptEngine] = None,
                 invoker: Optional[ResilientInvoker] = None):
        self.llm_client = llm_client
        self.prompt_engine = prompt_engine or PromptEngine()
        self.invoker = invoker or ResilientInvoker()

    def next_interviewer_turn(self,
                              transcript: List[InterviewTurn],
                              item: FlaggedClaim,
                              settings: SessionSettings) -> str:
        """
        Ask the reasoning service for the interviewer's next utterance.

        Args:
            transcript: Full transcript so far, ending with the candidate's answer
            item: The flagged claim under discussion
            settings: Level, time limit and tone for this session

        Returns:
            Interviewer text

        Raises:
            RateLimitExceededError: Quota exhausted after retries
            MalformedResponseError: Empty reply
            ReasoningServiceError: Any other terminal failure
        """
        contents = self.prompt_engine.build_interviewer_contents(transcript, item, settings)

        def _call() -> str:
            return self.llm_client.generate_content(contents, temperature=0.7)

        text = self.invoker.invoke(_call).strip()
        if not text:
            raise MalformedResponseError("The interviewer returned an empty reply.")
        logger.info("Interviewer turn generated (%d chars)", len(text))
        return text

    def generate_feedback(self,
                          transcript: List[InterviewTurn],
                          item: FlaggedClaim,
                          settings: SessionSettings) -> FeedbackReport:
        """Produce the scored feedback report for a finished session."""
        prompt = self.prompt_engine.build_feedback_prompt(transcript, item, settings)
        contents = [{"role": "user", "parts": [text_part(prompt)]}]

        def _call() -> FeedbackReport:
            data = self.llm_client.generate_json(contents, FEEDBACK_RESPONSE_SCHEMA, temperature=FEEDBACK_TEMPERATURE)
            return parse_feedback_report(data)

        report = self.invoker.invoke(_call)
        candidate_turns = sum(1 for t in transcript if t.speaker is Speaker.CANDIDATE)
        logger.info("Feedback generated: defense=%.1f over %d answers", report.defense_score, candidate_turns)
        return report
