"""
FactCheck orchestrator: evidence aggregation, analysis and interview sessions.
"""
import logging
import time
import uuid
from typing import Callable, Dict, List, Optional, Sequence

from .analysis import FactCheckAnalyzer
from .decision_engine import InterviewDecisionEngine, PromptEngine
from .events import (
    InterviewEventBus, EventLogger, InterviewMetrics,
    AnalysisStartedEvent, AnalysisCompletedEvent, ErrorOccurredEvent
)
from .models import CandidateSubmission, InterviewTurn, SessionSettings
from .schemas import AnalysisReport, FeedbackReport, FlaggedClaim
from .session import InterviewSession
from ..infrastructure.github import EvidenceAggregator, render_evidence, summarize_evidence
from ..infrastructure.llm import GeminiRestClient, ResilientInvoker
from ..utils import setup_logging
from ..config import Config, VERTEX_LOCATION, MODEL_NAME, LLM_TIMEOUT, OUTPUT_LANGUAGE

logger = logging.getLogger("orchestrator")


class FactCheckOrchestrator:
    """
    Runs the three pipeline stages.

    ``analyze`` aggregates repository evidence and asks the reasoning service
    for a fact-check report. ``start_interview`` opens a session on one
    flagged claim, wired so that termination produces the feedback report.
    """

    def __init__(self,
                 project_id: Optional[str] = None,
                 api_key: Optional[str] = None,
                 location: str = VERTEX_LOCATION,
                 model_name: str = MODEL_NAME,
                 credentials_json: Optional[str] = None,
                 llm_timeout: int = LLM_TIMEOUT,
                 language: str = OUTPUT_LANGUAGE,
                 log_file: Optional[str] = None,
                 log_level: str = "DEBUG",
                 llm_client: Optional[GeminiRestClient] = None,
                 aggregator: Optional[EvidenceAggregator] = None,
                 invoker: Optional[ResilientInvoker] = None,
                 event_bus: Optional[InterviewEventBus] = None,
                 clock: Callable[[], float] = time.time,
                 sleep: Callable[[float], None] = time.sleep):

        self.language = language
        self.log_file = log_file
        if log_file:
            setup_logging(log_file, log_level)

        # Initialize event system
        self.event_bus = event_bus or InterviewEventBus()
        self.event_logger = EventLogger()
        self.metrics = InterviewMetrics()
        self.event_bus.subscribe_all(self.event_logger.handle_event)
        self.event_bus.subscribe_all(self.metrics.handle_event)

        self._clock = clock
        self._sleep = sleep

        # Initialize LLM and decision services
        if llm_client is None:
            if not api_key and not project_id:
                raise ValueError("api_key or project_id is required for LLM functionality")
            llm_client = GeminiRestClient(
                project=project_id,
                location=location,
                model=model_name,
                api_key=api_key,
                credentials_json=credentials_json,
                timeout=llm_timeout,
            )
        self.llm_client = llm_client
        self.invoker = invoker or ResilientInvoker(sleep=sleep)
        self.aggregator = aggregator or EvidenceAggregator()

        self.analyzer = FactCheckAnalyzer(self.llm_client, self.invoker, language)
        self.decision_engine = InterviewDecisionEngine(self.llm_client, PromptEngine(language), self.invoker)

        self.last_source_summary = ""
        self.last_failures: List[str] = []

    @classmethod
    def from_config(cls, config: Config, **overrides) -> "FactCheckOrchestrator":
        """Build an orchestrator from a loaded Config."""
        kwargs = dict(
            project_id=config.google_cloud_project,
            api_key=config.api_key,
            location=config.vertex_location,
            model_name=config.model_name,
            credentials_json=config.google_application_credentials,
            llm_timeout=config.llm_timeout,
            language=config.language,
            log_file=config.log_file,
            log_level=config.log_level,
        )
        kwargs.update(overrides)
        return cls(**kwargs)

    def analyze(self, submission: CandidateSubmission, tolerate_failures: bool = False) -> AnalysisReport:
        """
        Aggregate evidence for the submission's repositories and fact-check the claims.

        Args:
            submission: Candidate, company and repository inputs
            tolerate_failures: Skip repositories that cannot be read instead of failing

        Returns:
            AnalysisReport from the reasoning service

        Raises:
            ValueError: No repository URL was supplied
            InvalidReferenceError: A repository URL is malformed
            RepositoryAccessError: A repository could not be read (fail-fast mode)
            ReasoningServiceError: The analysis call failed
        """
        urls = [url.strip() for url in submission.repository_urls if url and url.strip()]
        if not urls:
            raise ValueError("At least one repository URL is required.")

        run_id = uuid.uuid4().hex[:12]
        self.event_bus.emit(AnalysisStartedEvent(run_id, self._clock(), len(urls)))
        logger.info("Analysis %s started: %r", run_id, submission)

        try:
            bundles = self.aggregator.aggregate(
                urls, credential=submission.repository_token, tolerate_failures=tolerate_failures
            )
            self.last_failures = [failure.reference.slug for failure in self.aggregator.last_failures]
            self.last_source_summary = summarize_evidence(bundles)
            logger.info("Evidence ready: %s", self.last_source_summary)

            code_context = render_evidence(bundles)
            report = self.analyzer.analyze(submission, code_context)
        except Exception as e:
            self.event_bus.emit(ErrorOccurredEvent(
                run_id, self._clock(), type(e).__name__, str(e), "analysis"
            ))
            logger.error("Analysis %s failed: %s", run_id, e)
            raise

        self.event_bus.emit(AnalysisCompletedEvent(
            run_id, self._clock(), len(report.items), len(report.flagged())
        ))
        return report

    def start_interview(self,
                        item: FlaggedClaim,
                        settings: Optional[SessionSettings] = None,
                        auto_countdown: bool = True) -> InterviewSession:
        """
        Open an interview session on one flagged claim.

        The claim's interview question is the opening turn. When the session
        terminates, the transcript goes to ``feedback`` automatically.
        """
        settings = settings or SessionSettings()

        def _feedback_handler(transcript: List[InterviewTurn]) -> FeedbackReport:
            return self.feedback(transcript, item, settings)

        session = InterviewSession(
            item=item,
            settings=settings,
            engine=self.decision_engine,
            feedback_handler=_feedback_handler,
            event_bus=self.event_bus,
            language=self.language,
            clock=self._clock,
            sleep=self._sleep,
            auto_countdown=auto_countdown,
        )
        logger.info("Interview %s opened on '%s'", session.session_id, item.topic)
        return session

    def feedback(self,
                 transcript: Sequence[InterviewTurn],
                 item: FlaggedClaim,
                 settings: Optional[SessionSettings] = None) -> FeedbackReport:
        """Produce the feedback report for a finished transcript."""
        return self.decision_engine.generate_feedback(list(transcript), item, settings or SessionSettings())

    def get_metrics(self) -> Dict[str, int]:
        """Get current pipeline metrics."""
        return self.metrics.get_metrics()

    def reset_metrics(self):
        """Reset pipeline metrics."""
        self.metrics.reset()
