"""
Repository evidence aggregation.

Builds one size-bounded EvidenceBundle per repository: a capped listing of
the tree plus the bodies of the highest-ranked files. Repositories are
processed one at a time and so are their files.
"""
import base64
import binascii
import json
import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple, Union

from ...config import MAX_FILE_CHARS, MAX_FILES_PER_REPO, MAX_STRUCTURE_ENTRIES
from ...errors import RepositoryAccessError, UnauthorizedError
from .client import GitHubClient, parse_blob_payload
from .fetcher import FetchOutcome
from .locator import RepositoryReference, parse_repository_reference
from .scoring import FileCandidate, rank_files

logger = logging.getLogger("evidence_aggregator")


@dataclass(frozen=True)
class FileEvidence:
    """One file body (or its failure marker) attributed to a repository."""
    repository: str
    path: str
    text: str = ""
    status: Optional[int] = None
    failed: bool = False
    empty: bool = False

    def block(self) -> str:
        """Render the delimited block the reasoning service sees."""
        if self.failed:
            status = f" (Status: {self.status})" if self.status else ""
            return f"--- ERROR FETCHING: {self.repository}/{self.path}{status} ---"
        if self.empty:
            return f"--- EMPTY FILE: {self.repository}/{self.path} ---"
        return f"--- START OF FILE: {self.repository}/{self.path} ---\n{self.text}\n--- END OF FILE ---"


@dataclass
class EvidenceBundle:
    """Size-bounded evidence extracted from a single repository."""
    reference: RepositoryReference
    structure_listing: List[str] = field(default_factory=list)
    file_contents: List[FileEvidence] = field(default_factory=list)
    source_summary: str = ""

    @property
    def structure_text(self) -> str:
        listing = "\n".join(self.structure_listing)
        return f"Directory Structure (Repo: {self.reference.slug}):\n{listing}"

    @property
    def file_contents_text(self) -> str:
        return "\n\n".join(item.block() for item in self.file_contents)


@dataclass
class RepositoryFailure:
    """A repository skipped under partial tolerance."""
    reference: RepositoryReference
    error: RepositoryAccessError


def render_evidence(bundles: Iterable[EvidenceBundle]) -> str:
    """Concatenate bundles into the code context sent for analysis."""
    bundles = list(bundles)
    structure = "\n\n".join(b.structure_text for b in bundles)
    contents = "\n".join(b.file_contents_text for b in bundles)
    return f"{structure}\n\n{contents}"


def summarize_evidence(bundles: Iterable[EvidenceBundle]) -> str:
    return ", ".join(b.source_summary for b in bundles)


def decode_blob(payload: str) -> str:
    """Decode a base64 blob payload (line-wrapped by the host) to text."""
    raw = base64.b64decode(payload.replace("\n", ""))
    return raw.decode("utf-8", errors="replace")


class EvidenceAggregator:
    """Turns repository references into evidence bundles."""

    def __init__(self,
                 client: Optional[GitHubClient] = None,
                 max_structure_entries: int = MAX_STRUCTURE_ENTRIES,
                 max_files: int = MAX_FILES_PER_REPO,
                 max_file_chars: int = MAX_FILE_CHARS):
        self.client = client or GitHubClient()
        self.max_structure_entries = max_structure_entries
        self.max_files = max_files
        self.max_file_chars = max_file_chars
        self.last_failures: List[RepositoryFailure] = []

    def aggregate(self,
                  references: Iterable[Union[RepositoryReference, str]],
                  credential: Optional[str] = None,
                  tolerate_failures: bool = False) -> List[EvidenceBundle]:
        """
        Aggregate evidence for each repository, sequentially.

        Args:
            references: Parsed references or raw repository URLs
            credential: Optional access token, forwarded only as a bearer header
            tolerate_failures: Skip failing repositories instead of raising

        Returns:
            One EvidenceBundle per successfully processed repository, in input order

        Raises:
            InvalidReferenceError: A raw URL is malformed (always fatal)
            RepositoryAccessError: First repository failure, unless tolerate_failures
        """
        parsed = [ref if isinstance(ref, RepositoryReference) else parse_repository_reference(ref)
                  for ref in references]
        self.last_failures = []
        bundles: List[EvidenceBundle] = []

        for ref in parsed:
            try:
                bundles.append(self.aggregate_repository(ref, credential))
            except RepositoryAccessError as e:
                if not tolerate_failures:
                    raise
                logger.warning("Skipping %s: %s", ref.slug, e)
                self.last_failures.append(RepositoryFailure(reference=ref, error=e))

        return bundles

    def aggregate_repository(self, ref: RepositoryReference, credential: Optional[str] = None) -> EvidenceBundle:
        """Build the evidence bundle for a single repository."""
        meta = self.client.get_repo_meta(ref.owner, ref.project, credential)
        if meta.is_private and not credential:
            raise UnauthorizedError(
                f"{ref.slug} is private. Enter an access token to analyze it.",
                ref.owner, ref.project,
            )
        ref = RepositoryReference(owner=ref.owner, project=ref.project, is_private=meta.is_private)

        tree = self.client.list_tree(ref.owner, ref.project, meta.default_branch, credential)
        files = [entry for entry in tree if entry.is_file]
        structure = [entry.path for entry in files[: self.max_structure_entries]]
        candidates = rank_files(files, self.max_files)
        logger.info("%s: %d tree entries, %d files, fetching %d", ref.slug, len(tree), len(files), len(candidates))

        contents = self._fetch_contents(ref, meta.default_branch, candidates, credential)

        return EvidenceBundle(
            reference=ref,
            structure_listing=structure,
            file_contents=contents,
            source_summary=f"Repo {ref.slug}: {len(tree)} files.",
        )

    def _fetch_contents(self,
                        ref: RepositoryReference,
                        branch: str,
                        candidates: List[FileCandidate],
                        credential: Optional[str]) -> List[FileEvidence]:
        if ref.is_private:
            batch = [self.client.blob_request(c.fetch_handle, credential, label=c.path) for c in candidates]
        else:
            batch = [self.client.raw_request(ref.owner, ref.project, branch, c.path) for c in candidates]

        outcomes = self.client.fetcher.fetch_many(batch)
        return [self._to_evidence(ref, c, o) for c, o in zip(candidates, outcomes)]

    def _to_evidence(self, ref: RepositoryReference, candidate: FileCandidate, outcome: FetchOutcome) -> FileEvidence:
        if not outcome.ok:
            return FileEvidence(ref.slug, candidate.path, status=outcome.status, failed=True)

        text, failed = self._decode_body(ref, outcome.body or "")
        if failed:
            return FileEvidence(ref.slug, candidate.path, failed=True)
        if not text:
            return FileEvidence(ref.slug, candidate.path, empty=True)
        return FileEvidence(ref.slug, candidate.path, text=text[: self.max_file_chars])

    @staticmethod
    def _decode_body(ref: RepositoryReference, body: str) -> Tuple[str, bool]:
        if not ref.is_private:
            return body, False
        try:
            return decode_blob(parse_blob_payload(body)), False
        except (ValueError, binascii.Error, json.JSONDecodeError) as e:
            logger.warning("Could not decode blob for %s: %s", ref.slug, e)
            return "", True
