"""
Structured response schemas for the reasoning service.

Each report is described twice: as a Gemini ``responseSchema`` (the contract
sent with the request) and as a pydantic model (the validation applied to
the reply). A reply that fails validation is a MalformedResponseError.
"""
import logging
from enum import Enum
from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from ..errors import MalformedResponseError

logger = logging.getLogger("schemas")


class Verdict(str, Enum):
    """Fact-check outcome for one claim."""
    VERIFIED = "VERIFIED"
    EXAGGERATED = "EXAGGERATED"
    MISSING = "MISSING"
    UNCERTAIN = "UNCERTAIN"


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


# =============================================================================
# ANALYSIS REPORT
# =============================================================================

class FlaggedClaim(_CamelModel):
    """A candidate claim paired with a verdict and a pressure question."""
    topic: str
    resume_claim: str = Field(alias="resumeClaim")
    code_observation: str = Field(alias="codeObservation")
    question_basis: str = Field(alias="questionBasis")
    verdict: Verdict
    interview_question: str = Field(alias="interviewQuestion")
    score: float = Field(ge=0, le=100)


class EvaluationMetric(_CamelModel):
    score: float = Field(ge=0, le=100)
    reason: str = ""


class EvaluationMetrics(_CamelModel):
    architecture: EvaluationMetric
    code_quality: EvaluationMetric = Field(alias="codeQuality")
    problem_solving: EvaluationMetric = Field(alias="problemSolving")
    tech_proficiency: EvaluationMetric = Field(alias="techProficiency")
    project_completeness: EvaluationMetric = Field(alias="projectCompleteness")
    consistency: EvaluationMetric
    growth_potential: EvaluationMetric = Field(alias="growthPotential")


class PracticalTips(_CamelModel):
    expected_questions: List[str] = Field(alias="expectedQuestions")
    improvements: List[str]
    answer_tips: List[str] = Field(alias="answerTips")


class AnalysisSummary(_CamelModel):
    jd_analysis: str = Field(alias="jdAnalysis")
    alignment_analysis: str = Field(alias="alignmentAnalysis")
    practical_tips: PracticalTips = Field(alias="practicalTips")


class AnalysisReport(_CamelModel):
    """Fact-check report: flagged claims, seven metrics, narrative summary."""
    items: List[FlaggedClaim]
    evaluation: EvaluationMetrics
    summary: AnalysisSummary

    def flagged(self) -> List[FlaggedClaim]:
        """Claims worth an interview, i.e. everything not VERIFIED."""
        return [item for item in self.items if item.verdict is not Verdict.VERIFIED]


# =============================================================================
# FEEDBACK REPORT
# =============================================================================

class FeedbackReport(_CamelModel):
    """Scored feedback for one interview session."""
    defense_score: float = Field(default=0, alias="defenseScore")
    logic_score: float = Field(alias="logicScore", ge=0, le=5)
    logic_reasoning: str = Field(alias="logicReasoning")
    logic_improvement: str = Field(alias="logicImprovement")
    solution_score: float = Field(alias="solutionScore", ge=0, le=5)
    solution_reasoning: str = Field(alias="solutionReasoning")
    solution_improvement: str = Field(alias="solutionImprovement")
    feedback_summary: str = Field(alias="feedbackSummary")
    positive_feedback: List[str] = Field(alias="positiveFeedback")
    constructive_feedback: List[str] = Field(alias="constructiveFeedback")
    action_items: List[str] = Field(alias="actionItems")

    @model_validator(mode="after")
    def _total_is_sum_of_parts(self):
        total = self.logic_score + self.solution_score
        if self.defense_score != total:
            logger.debug("Recomputing defenseScore %s -> %s", self.defense_score, total)
            self.defense_score = total
        return self


# =============================================================================
# GEMINI RESPONSE SCHEMAS
# =============================================================================

def _metric() -> Dict[str, Any]:
    return {
        "type": "OBJECT",
        "properties": {"score": {"type": "NUMBER"}, "reason": {"type": "STRING"}},
        "required": ["score", "reason"],
    }


_STRING_LIST = {"type": "ARRAY", "items": {"type": "STRING"}}

METRIC_NAMES = (
    "architecture", "codeQuality", "problemSolving", "techProficiency",
    "projectCompleteness", "consistency", "growthPotential",
)

ANALYSIS_RESPONSE_SCHEMA: Dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "items": {
            "type": "ARRAY",
            "description": "Specific claims in the candidate document that need to be fact-checked against the code and JD.",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "topic": {"type": "STRING"},
                    "resumeClaim": {"type": "STRING"},
                    "codeObservation": {"type": "STRING"},
                    "questionBasis": {
                        "type": "STRING",
                        "description": "Structured text: '[JD requirement]: ... [Code reality]: ... [Interviewer intent]: ...'",
                    },
                    "verdict": {"type": "STRING", "enum": [v.value for v in Verdict]},
                    "interviewQuestion": {
                        "type": "STRING",
                        "description": "Specific pressure question. Must mention the time limit if one is set.",
                    },
                    "score": {"type": "NUMBER"},
                },
                "required": ["topic", "resumeClaim", "codeObservation", "questionBasis",
                             "verdict", "interviewQuestion", "score"],
            },
        },
        "evaluation": {
            "type": "OBJECT",
            "description": "Score the candidate on 7 technical criteria (0-100).",
            "properties": {name: _metric() for name in METRIC_NAMES},
            "required": list(METRIC_NAMES),
        },
        "summary": {
            "type": "OBJECT",
            "properties": {
                "jdAnalysis": {"type": "STRING"},
                "alignmentAnalysis": {"type": "STRING"},
                "practicalTips": {
                    "type": "OBJECT",
                    "properties": {
                        "expectedQuestions": _STRING_LIST,
                        "improvements": _STRING_LIST,
                        "answerTips": _STRING_LIST,
                    },
                    "required": ["expectedQuestions", "improvements", "answerTips"],
                },
            },
            "required": ["jdAnalysis", "alignmentAnalysis", "practicalTips"],
        },
    },
    "required": ["items", "evaluation", "summary"],
}

FEEDBACK_RESPONSE_SCHEMA: Dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "defenseScore": {"type": "NUMBER"},
        "logicScore": {"type": "NUMBER"},
        "logicReasoning": {"type": "STRING"},
        "logicImprovement": {"type": "STRING"},
        "solutionScore": {"type": "NUMBER"},
        "solutionReasoning": {"type": "STRING"},
        "solutionImprovement": {"type": "STRING"},
        "feedbackSummary": {"type": "STRING"},
        "positiveFeedback": _STRING_LIST,
        "constructiveFeedback": _STRING_LIST,
        "actionItems": _STRING_LIST,
    },
    "required": [
        "defenseScore",
        "logicScore", "logicReasoning", "logicImprovement",
        "solutionScore", "solutionReasoning", "solutionImprovement",
        "feedbackSummary", "positiveFeedback", "constructiveFeedback", "actionItems",
    ],
}


def parse_analysis_report(data: Dict[str, Any]) -> AnalysisReport:
    """
    Validate a decoded analysis reply.

    Raises:
        MalformedResponseError: If required fields are missing or out of range
    """
    try:
        return AnalysisReport.model_validate(data)
    except ValidationError as e:
        raise MalformedResponseError(f"Analysis report did not match the expected schema: {e}") from e


def parse_feedback_report(data: Dict[str, Any]) -> FeedbackReport:
    """
    Validate a decoded feedback reply.

    Raises:
        MalformedResponseError: If required fields are missing or out of range
    """
    try:
        return FeedbackReport.model_validate(data)
    except ValidationError as e:
        raise MalformedResponseError(f"Feedback report did not match the expected schema: {e}") from e
