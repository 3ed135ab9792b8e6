"""
Fact-check analysis: candidate claims versus repository evidence.
"""
import logging
from typing import Any, Dict, List, Optional

from .models import CandidateSubmission
from .prompts import InterviewPrompts
from .schemas import AnalysisReport, ANALYSIS_RESPONSE_SCHEMA, parse_analysis_report
from ..config import ANALYSIS_TEMPERATURE, OUTPUT_LANGUAGE
from ..infrastructure.llm import GeminiRestClient, ResilientInvoker, inline_part, text_part

logger = logging.getLogger("analysis")


class FactCheckAnalyzer:
    """Sends evidence plus claims to the reasoning service for a structured report."""

    def __init__(self,
                 llm_client: GeminiRestClient,
                 invoker: Optional[ResilientInvoker] = None,
                 language: str = OUTPUT_LANGUAGE):
        self.llm_client = llm_client
        self.invoker = invoker or ResilientInvoker()
        self.language = language

    def build_parts(self, submission: CandidateSubmission, code_context: str) -> List[Dict[str, Any]]:
        """Prompt text followed by any binary attachments, each with a trailing note."""
        prompt = InterviewPrompts.analysis_prompt(
            level=submission.level,
            tone=submission.tone,
            time_limit_seconds=submission.time_limit_seconds,
            talent_ideal=submission.talent_ideal,
            jd_context=InterviewPrompts.jd_context(submission.jd_type, submission.job_description, submission.level),
            doc_type=submission.doc_type,
            candidate_document=submission.candidate_document(),
            code_context=code_context,
            language=self.language,
        )
        parts = [text_part(prompt)]

        if submission.jd_type == "file" and submission.jd_attachment:
            att = submission.jd_attachment
            parts.append(inline_part(att.data_b64, att.mime_type or "image/png"))
            parts.append(text_part("\n(JD Image Provided above)"))

        if submission.doc_type == "resume" and submission.resume_attachment:
            att = submission.resume_attachment
            parts.append(inline_part(att.data_b64, att.mime_type or "application/pdf"))
            parts.append(text_part("\n(Candidate Resume File Provided above)"))

        return parts

    def analyze(self, submission: CandidateSubmission, code_context: str) -> AnalysisReport:
        """
        Produce the fact-check report.

        Raises:
            RateLimitExceededError: Quota exhausted after retries
            MalformedResponseError: Reply missing required fields or not JSON
            ReasoningServiceError: Any other terminal failure
        """
        contents = [{"role": "user", "parts": self.build_parts(submission, code_context)}]
        logger.info("Requesting analysis: level=%s context=%d chars", submission.level.value, len(code_context))

        def _call() -> AnalysisReport:
            data = self.llm_client.generate_json(contents, ANALYSIS_RESPONSE_SCHEMA, temperature=ANALYSIS_TEMPERATURE)
            return parse_analysis_report(data)

        report = self.invoker.invoke(_call)
        logger.info("Analysis complete: %d claims (%d flagged)", len(report.items), len(report.flagged()))
        return report
