"""
Exception hierarchy for the fact-check pipeline.

Every fatal error carries one human-readable message suitable for display.
"""
from typing import Optional


class FactCheckError(Exception):
    """Base class for all pipeline errors."""


class InvalidReferenceError(FactCheckError, ValueError):
    """Raised when a repository reference string is malformed."""

    def __init__(self, reference: str):
        self.reference = reference
        super().__init__(f"Invalid GitHub repository URL: {reference}")


# -----------------------------------------------------------------------------
# Code host
# -----------------------------------------------------------------------------

class RepositoryAccessError(FactCheckError):
    """Base class for failures talking to the code host."""

    def __init__(self, message: str, owner: str = "", project: str = "", status: Optional[int] = None):
        super().__init__(message)
        self.owner = owner
        self.project = project
        self.status = status

    @property
    def slug(self) -> str:
        return f"{self.owner}/{self.project}"


class HostRateLimitedError(RepositoryAccessError):
    """403/429 from the code host. Terminal; the user must wait or supply a token."""


class UnauthorizedError(RepositoryAccessError):
    """Bad credential, or a private repository reached without one."""


class RepositoryNotFoundError(RepositoryAccessError):
    """404 from the code host."""


class PrivateOrMissingRepositoryError(UnauthorizedError, RepositoryNotFoundError):
    """Anonymous 404. The code host hides private repositories this way."""


class RepositoryFetchError(RepositoryAccessError):
    """Any other code host failure (tree listing, unexpected status, transport)."""


# -----------------------------------------------------------------------------
# Reasoning service
# -----------------------------------------------------------------------------

class ReasoningServiceError(FactCheckError):
    """Transport or HTTP failure of a reasoning-service call."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class RateLimitExceededError(ReasoningServiceError):
    """Raised once retries are exhausted on a rate-limit condition."""

    DEFAULT_MESSAGE = (
        "Too many users are using the service right now and the API quota was exceeded. "
        "Please try again in about a minute."
    )

    def __init__(self, message: str = DEFAULT_MESSAGE, status: Optional[int] = 429):
        super().__init__(message, status)


class MalformedResponseError(ReasoningServiceError):
    """Response was not valid JSON or did not satisfy the required schema."""


# -----------------------------------------------------------------------------
# Interview session
# -----------------------------------------------------------------------------

class SessionStateError(FactCheckError):
    """An interview session operation was invoked in a state that forbids it."""
