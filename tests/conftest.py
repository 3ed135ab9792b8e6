import pytest

from factcheck.infrastructure.github import EvidenceAggregator, GitHubClient, RateLimitedFetcher
from factcheck.infrastructure.llm import ResilientInvoker
from factcheck.interview.events import InterviewEventBus
from factcheck.interview.testing import FakeHTTPSession, create_flagged_claim


class SleepRecorder:
    """Injected in place of time.sleep; records requested delays."""

    def __init__(self):
        self.calls = []

    def __call__(self, seconds):
        self.calls.append(seconds)


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class EventRecorder:
    def __init__(self, bus):
        self.events = []
        bus.subscribe_all(self.events.append)

    def of_type(self, event_type):
        return [e for e in self.events if e.event_type == event_type]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("GEMINI_API_KEY", "API_KEY", "GOOGLE_CLOUD_PROJECT", "GITHUB_TOKEN",
                 "FACTCHECK_MODEL", "FACTCHECK_LANGUAGE", "FACTCHECK_LLM_TIMEOUT"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def sleeper():
    return SleepRecorder()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def http():
    return FakeHTTPSession()


@pytest.fixture
def fetcher(http, sleeper):
    return RateLimitedFetcher(session=http, sleep=sleeper)


@pytest.fixture
def aggregator(fetcher):
    return EvidenceAggregator(client=GitHubClient(fetcher=fetcher))


@pytest.fixture
def invoker(sleeper):
    return ResilientInvoker(sleep=sleeper)


@pytest.fixture
def bus():
    return InterviewEventBus()


@pytest.fixture
def recorder(bus):
    return EventRecorder(bus)


@pytest.fixture
def claim():
    return create_flagged_claim()
