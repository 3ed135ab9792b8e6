"""Infrastructure components for the FactCheck pipeline.

This module contains low-level technical components that talk to the
code host and the reasoning service.
"""

# Code host infrastructure
from .github import (
    EvidenceAggregator, EvidenceBundle, GitHubClient, RateLimitedFetcher,
    RepositoryReference, parse_repository_reference, score_file_importance,
)

# LLM infrastructure
from .llm import GeminiRestClient, InvocationPolicy, ResilientInvoker

__all__ = [
    # Code host
    "EvidenceAggregator", "EvidenceBundle", "GitHubClient", "RateLimitedFetcher",
    "RepositoryReference", "parse_repository_reference", "score_file_importance",

    # LLM client
    "GeminiRestClient", "InvocationPolicy", "ResilientInvoker",
]
