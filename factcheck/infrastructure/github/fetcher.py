"""
Throttled, strictly sequential HTTP fetching.

Requests are issued one at a time with a fixed pause between them so that
bulk file retrieval stays under the code host's abuse-detection threshold.
"""
import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

import requests

from ...config import HOST_TIMEOUT, INTER_REQUEST_DELAY

logger = logging.getLogger("github_fetcher")


class FetchError(Exception):
    """A single HTTP fetch failed."""

    def __init__(self, url: str, status: Optional[int] = None, reason: str = ""):
        self.url = url
        self.status = status
        self.reason = reason
        detail = f"status {status}" if status is not None else (reason or "transport error")
        super().__init__(f"Fetch failed for {url}: {detail}")


@dataclass
class FetchRequest:
    """One entry in a sequential batch."""
    url: str
    headers: Dict[str, str] = field(default_factory=dict)
    label: str = ""


@dataclass
class FetchOutcome:
    """Result slot for one request of a batch: a body or an error marker."""
    request: FetchRequest
    body: Optional[str] = None
    status: Optional[int] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class RateLimitedFetcher:
    """Sequential HTTP GET primitive with per-batch throttling."""

    def __init__(self,
                 session: Optional[requests.Session] = None,
                 timeout: float = HOST_TIMEOUT,
                 inter_request_delay: float = INTER_REQUEST_DELAY,
                 sleep: Callable[[float], None] = time.sleep):
        self.session = session or requests.Session()
        self.timeout = timeout
        self.inter_request_delay = inter_request_delay
        self._sleep = sleep

    def fetch(self, url: str, headers: Optional[Dict[str, str]] = None) -> str:
        """
        Fetch a single URL and return the response body as text.

        Raises:
            FetchError: On transport failure or any status >= 400
        """
        try:
            resp = self.session.get(url, headers=headers or {}, timeout=self.timeout)
        except requests.RequestException as e:
            logger.warning("Transport failure for %s: %s", url, e)
            raise FetchError(url, reason=str(e)) from e

        if resp.status_code >= 400:
            logger.debug("HTTP %s for %s", resp.status_code, url)
            raise FetchError(url, status=resp.status_code, reason=resp.reason or "")
        return resp.text

    def fetch_many(self,
                   requests_: List[FetchRequest],
                   inter_request_delay: Optional[float] = None) -> List[FetchOutcome]:
        """
        Fetch a batch one request at a time, pausing before each request.

        A failed request yields an outcome carrying an error marker in its
        slot; the rest of the batch still runs.

        Args:
            requests_: Requests in the order they should be issued
            inter_request_delay: Pause in seconds, defaults to the instance setting

        Returns:
            One FetchOutcome per request, in request order
        """
        delay = self.inter_request_delay if inter_request_delay is None else inter_request_delay
        outcomes: List[FetchOutcome] = []

        for req in requests_:
            self._sleep(delay)
            try:
                body = self.fetch(req.url, req.headers)
                outcomes.append(FetchOutcome(request=req, body=body, status=200))
            except FetchError as e:
                logger.warning("Batch fetch failed for %s: %s", req.label or req.url, e)
                outcomes.append(FetchOutcome(request=req, status=e.status, error=str(e)))

        failed = sum(1 for o in outcomes if not o.ok)
        logger.info("Fetched %d/%d bodies (%d failed)", len(outcomes) - failed, len(outcomes), failed)
        return outcomes
