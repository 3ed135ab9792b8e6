"""Code host access: reference parsing, file ranking, throttled fetching and evidence aggregation."""

from .locator import RepositoryReference, parse_repository_reference
from .scoring import FileCandidate, rank_files, score_file_importance
from .fetcher import FetchError, FetchOutcome, FetchRequest, RateLimitedFetcher
from .client import GitHubClient, RepositoryMetadata, TreeEntry
from .aggregator import (
    EvidenceAggregator, EvidenceBundle, FileEvidence, RepositoryFailure,
    render_evidence, summarize_evidence,
)

__all__ = [
    "RepositoryReference", "parse_repository_reference",
    "FileCandidate", "rank_files", "score_file_importance",
    "FetchError", "FetchOutcome", "FetchRequest", "RateLimitedFetcher",
    "GitHubClient", "RepositoryMetadata", "TreeEntry",
    "EvidenceAggregator", "EvidenceBundle", "FileEvidence", "RepositoryFailure",
    "render_evidence", "summarize_evidence",
]
