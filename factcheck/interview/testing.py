"""
Testing infrastructure with mock collaborators for the FactCheck pipeline.

Nothing here touches the network: the code host is a routed fake HTTP
session and the reasoning service is a scripted client.
"""
import base64
import json
from typing import Any, Dict, List, Optional, Set, Tuple, Union

import requests

from .decision_engine import InterviewDecisionEngine
from .models import InterviewTurn, SessionSettings
from .schemas import FeedbackReport, FlaggedClaim, Verdict, parse_feedback_report
from ..errors import ReasoningServiceError
from ..infrastructure.llm import parse_json_text


class FakeResponse:
    """Minimal stand-in for ``requests.Response``."""

    def __init__(self, status_code: int = 200, text: str = "", reason: str = ""):
        self.status_code = status_code
        self.text = text
        self.reason = reason or ("OK" if status_code < 400 else "Error")

    def json(self) -> Any:
        return json.loads(self.text)


Route = Union[Tuple[int, str], Exception]

NOT_FOUND: Route = (404, '{"message": "Not Found"}')


class FakeHTTPSession:
    """
    Routes GET/POST calls by exact URL.

    A route is ``(status, body)`` or an exception instance to raise. Unknown
    URLs answer 404, as do credentialed routes reached without an
    ``Authorization`` header. Every call is recorded with its headers.
    """

    def __init__(self, routes: Optional[Dict[str, Route]] = None):
        self.routes: Dict[str, Route] = dict(routes or {})
        self.credentialed: Set[str] = set()
        self.calls: List[Dict[str, Any]] = []

    def add(self, url: str, status: int = 200, body: Union[str, Dict[str, Any]] = "",
            requires_auth: bool = False) -> None:
        self.routes[url] = (status, body if isinstance(body, str) else json.dumps(body))
        if requires_auth:
            self.credentialed.add(url)

    def _respond(self, method: str, url: str, headers: Optional[Dict[str, str]], payload: Any) -> FakeResponse:
        headers = dict(headers or {})
        self.calls.append({"method": method, "url": url, "headers": headers, "json": payload})
        route = self.routes.get(url, NOT_FOUND)
        if url in self.credentialed and "Authorization" not in headers:
            route = NOT_FOUND
        if isinstance(route, Exception):
            raise route
        status, body = route
        return FakeResponse(status, body)

    def get(self, url: str, headers: Optional[Dict[str, str]] = None, timeout: Optional[float] = None, **kwargs):
        return self._respond("GET", url, headers, None)

    def post(self, url: str, headers: Optional[Dict[str, str]] = None, json: Any = None,
             timeout: Optional[float] = None, **kwargs):
        return self._respond("POST", url, headers, json)

    def urls(self) -> List[str]:
        return [call["url"] for call in self.calls]


class MockLLMClient:
    """
    Scripted reasoning-service client.

    Each scripted entry is consumed by one call: a string is returned as the
    generated text, a dict is returned as the decoded JSON, an exception is
    raised.
    """

    def __init__(self, mock_responses: Optional[List[Any]] = None):
        self.mock_responses = list(mock_responses or [])
        self.current_response_idx = 0
        self.request_history: List[Dict[str, Any]] = []

    def _next(self) -> Any:
        if self.current_response_idx >= len(self.mock_responses):
            raise AssertionError("MockLLMClient ran out of scripted responses")
        response = self.mock_responses[self.current_response_idx]
        self.current_response_idx += 1
        if isinstance(response, Exception):
            raise response
        return response

    def generate_content(self, contents: List[Dict[str, Any]], temperature: float = 0.0, **kwargs) -> str:
        self.request_history.append({"contents": contents, "temperature": temperature, "kwargs": kwargs})
        response = self._next()
        return response if isinstance(response, str) else json.dumps(response)

    def generate_json(self, contents: List[Dict[str, Any]], response_schema: Dict[str, Any],
                      temperature: float = 0.0) -> Dict[str, Any]:
        self.request_history.append({
            "contents": contents, "temperature": temperature, "kwargs": {"response_schema": response_schema}
        })
        response = self._next()
        return response if isinstance(response, dict) else parse_json_text(response)

    @property
    def call_count(self) -> int:
        return len(self.request_history)


class MockDecisionEngine(InterviewDecisionEngine):
    """Decision engine that replays scripted interviewer turns."""

    def __init__(self, replies: List[Union[str, Exception]], feedback: Optional[FeedbackReport] = None):
        # Don't call super().__init__ to avoid requiring a real LLM client
        self.replies = list(replies)
        self.feedback_report = feedback or parse_feedback_report(create_feedback_payload())
        self.seen_transcripts: List[List[InterviewTurn]] = []

    def next_interviewer_turn(self, transcript: List[InterviewTurn], item: FlaggedClaim,
                              settings: SessionSettings) -> str:
        self.seen_transcripts.append(list(transcript))
        if not self.replies:
            raise AssertionError("MockDecisionEngine ran out of scripted replies")
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply

    def generate_feedback(self, transcript: List[InterviewTurn], item: FlaggedClaim,
                          settings: SessionSettings) -> FeedbackReport:
        self.seen_transcripts.append(list(transcript))
        return self.feedback_report


def service_error(status: int, body: str = "") -> ReasoningServiceError:
    """A reasoning-service failure as the REST client raises it."""
    return ReasoningServiceError(f"Gemini REST error {status}: {body}", status=status)


def gemini_envelope(text: str) -> Dict[str, Any]:
    """Wrap text the way generateContent returns it."""
    return {"candidates": [{"content": {"role": "model", "parts": [{"text": text}]}, "finishReason": "STOP"}]}


# =============================================================================
# Canned payloads
# =============================================================================

def create_flagged_claim(**overrides) -> FlaggedClaim:
    data = {
        "topic": "Redis caching",
        "resumeClaim": "Cut API latency by 80% with a Redis cache layer",
        "codeObservation": "No Redis client or cache code found in the repository",
        "questionBasis": "[JD requirement]: caching [Code reality]: none [Interviewer intent]: verify",
        "verdict": Verdict.MISSING.value,
        "interviewQuestion": "Where in this codebase does the Redis cache live?",
        "score": 85,
    }
    data.update(overrides)
    return FlaggedClaim.model_validate(data)


def create_analysis_payload(items: Optional[List[Dict[str, Any]]] = None) -> Dict[str, Any]:
    metric = {"score": 70, "reason": "Reasonable"}
    return {
        "items": items if items is not None else [
            create_flagged_claim().model_dump(by_alias=True, mode="json"),
            {
                "topic": "FastAPI",
                "resumeClaim": "Built the REST API with FastAPI",
                "codeObservation": "app/main.py defines FastAPI routers",
                "questionBasis": "[JD requirement]: Python web [Code reality]: present [Interviewer intent]: depth",
                "verdict": "VERIFIED",
                "interviewQuestion": "Why FastAPI over Flask here?",
                "score": 10,
            },
        ],
        "evaluation": {
            name: dict(metric) for name in (
                "architecture", "codeQuality", "problemSolving", "techProficiency",
                "projectCompleteness", "consistency", "growthPotential",
            )
        },
        "summary": {
            "jdAnalysis": "Backend role focused on Python services.",
            "alignmentAnalysis": "Caching claim is not backed by code.",
            "practicalTips": {
                "expectedQuestions": ["q1", "q2", "q3"],
                "improvements": ["i1", "i2", "i3"],
                "answerTips": ["t1", "t2", "t3"],
            },
        },
    }


def create_feedback_payload(logic: float = 3, solution: float = 2, defense: float = 5) -> Dict[str, Any]:
    return {
        "defenseScore": defense,
        "logicScore": logic,
        "logicReasoning": "Mostly consistent with the code.",
        "logicImprovement": "Tie answers to concrete files.",
        "solutionScore": solution,
        "solutionReasoning": "Few alternatives offered.",
        "solutionImprovement": "Discuss trade-offs.",
        "feedbackSummary": "Solid basics, thin on specifics.",
        "positiveFeedback": ["p1", "p2", "p3"],
        "constructiveFeedback": ["c1", "c2", "c3"],
        "actionItems": ["a1", "a2", "a3"],
    }


def create_mock_repository_host(session: Optional[FakeHTTPSession] = None,
                                owner: str = "acme",
                                project: str = "shop",
                                private: bool = False,
                                files: Optional[Dict[str, str]] = None,
                                branch: str = "main",
                                api_base: str = "https://api.github.com",
                                raw_base: str = "https://raw.githubusercontent.com") -> FakeHTTPSession:
    """
    Register one repository on a fake code host.

    Public repositories serve bodies from the raw host. Private ones serve
    base64 blobs from the API and, like GitHub, answer 404 to callers
    without a credential.
    """
    session = session or FakeHTTPSession()
    files = files if files is not None else {
        "README.md": "# Shop\nA small web shop.",
        "app/service.py": "def checkout():\n    return True\n",
    }
    repo_api = f"{api_base}/repos/{owner}/{project}"
    session.add(repo_api, 200, {"default_branch": branch, "private": private}, requires_auth=private)

    tree = []
    for i, (path, content) in enumerate(files.items()):
        blob_url = f"{repo_api}/git/blobs/sha{i}"
        tree.append({"path": path, "type": "blob", "url": blob_url})
        if private:
            encoded = base64.b64encode(content.encode("utf-8")).decode("ascii")
            session.add(blob_url, 200, {"content": encoded, "encoding": "base64"}, requires_auth=True)
        else:
            session.add(f"{raw_base}/{owner}/{project}/{branch}/{path}", 200, content)
    session.add(f"{repo_api}/git/trees/{branch}?recursive=1", 200, {"tree": tree, "truncated": False},
                requires_auth=private)
    return session


def unreachable(url: str) -> requests.ConnectionError:
    """Transport failure for a route."""
    return requests.ConnectionError(f"Connection refused: {url}")
