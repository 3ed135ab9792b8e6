"""
GitHub REST client for repository metadata, trees and file bodies.
"""
import json
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional
from urllib.parse import quote

from ...config import GITHUB_ACCEPT, GITHUB_API_BASE, GITHUB_RAW_BASE
from ...errors import (
    HostRateLimitedError,
    PrivateOrMissingRepositoryError,
    RepositoryFetchError,
    RepositoryNotFoundError,
    UnauthorizedError,
)
from .fetcher import FetchError, FetchRequest, RateLimitedFetcher

logger = logging.getLogger("github_client")


@dataclass(frozen=True)
class RepositoryMetadata:
    """What the aggregator needs to know before listing a tree."""
    default_branch: str
    is_private: bool


@dataclass(frozen=True)
class TreeEntry:
    """One node of a recursive git tree listing."""
    path: str
    type: str
    fetch_handle: str = ""

    @property
    def is_file(self) -> bool:
        return self.type == "blob"


def auth_headers(credential: Optional[str] = None) -> Dict[str, str]:
    """Build API headers, adding a bearer token when a credential is given."""
    headers = {"Accept": GITHUB_ACCEPT}
    if credential and credential.strip():
        headers["Authorization"] = f"Bearer {credential.strip()}"
    return headers


class GitHubClient:
    """Code host collaborator built on a RateLimitedFetcher."""

    def __init__(self,
                 fetcher: Optional[RateLimitedFetcher] = None,
                 api_base: str = GITHUB_API_BASE,
                 raw_base: str = GITHUB_RAW_BASE):
        self.fetcher = fetcher or RateLimitedFetcher()
        self.api_base = api_base.rstrip("/")
        self.raw_base = raw_base.rstrip("/")

    def get_repo_meta(self, owner: str, project: str, credential: Optional[str] = None) -> RepositoryMetadata:
        """
        Resolve default branch and visibility.

        Raises:
            HostRateLimitedError: 403/429
            UnauthorizedError: 401
            PrivateOrMissingRepositoryError: 404 without a credential
            RepositoryNotFoundError: 404 with a credential
            RepositoryFetchError: Anything else
        """
        url = f"{self.api_base}/repos/{owner}/{project}"
        try:
            meta = json.loads(self.fetcher.fetch(url, auth_headers(credential)))
        except FetchError as e:
            raise self._metadata_error(e, owner, project, bool(credential)) from e
        except ValueError as e:
            raise RepositoryFetchError(
                f"GitHub returned an unreadable response for {owner}/{project}.", owner, project
            ) from e

        meta_obj = RepositoryMetadata(
            default_branch=meta.get("default_branch") or "main",
            is_private=bool(meta.get("private", False)),
        )
        logger.info("Resolved %s/%s: branch=%s private=%s", owner, project,
                    meta_obj.default_branch, meta_obj.is_private)
        return meta_obj

    def list_tree(self, owner: str, project: str, branch: str,
                  credential: Optional[str] = None) -> List[TreeEntry]:
        """List every entry of the branch recursively, in tree order."""
        url = f"{self.api_base}/repos/{owner}/{project}/git/trees/{quote(branch, safe='')}?recursive=1"
        try:
            data = json.loads(self.fetcher.fetch(url, auth_headers(credential)))
        except (FetchError, ValueError) as e:
            status = getattr(e, "status", None)
            raise RepositoryFetchError(
                f"Failed to fetch the file tree for {owner}/{project}.", owner, project, status
            ) from e

        if data.get("truncated"):
            logger.warning("Tree for %s/%s was truncated by the host", owner, project)

        return [
            TreeEntry(path=item.get("path", ""), type=item.get("type", ""), fetch_handle=item.get("url") or "")
            for item in data.get("tree", [])
        ]

    def raw_request(self, owner: str, project: str, branch: str, path: str, label: str = "") -> FetchRequest:
        """Unauthenticated raw-content request; does not consume API quota."""
        url = f"{self.raw_base}/{owner}/{project}/{quote(branch)}/{quote(path)}"
        return FetchRequest(url=url, headers={}, label=label or path)

    def blob_request(self, fetch_handle: str, credential: Optional[str], label: str = "") -> FetchRequest:
        """Authenticated blob request against the metered API."""
        return FetchRequest(url=fetch_handle, headers=auth_headers(credential), label=label or fetch_handle)

    def fetch_raw(self, owner: str, project: str, branch: str, path: str) -> str:
        """Fetch a file body as text without credentials."""
        req = self.raw_request(owner, project, branch, path)
        return self.fetcher.fetch(req.url, req.headers)

    def fetch_blob(self, fetch_handle: str, credential: Optional[str]) -> str:
        """Fetch a blob and return its base64 payload (may be empty)."""
        req = self.blob_request(fetch_handle, credential)
        return parse_blob_payload(self.fetcher.fetch(req.url, req.headers))

    @staticmethod
    def _metadata_error(error: FetchError, owner: str, project: str, has_credential: bool):
        status = error.status
        if status in (403, 429):
            if has_credential:
                message = "GitHub API rate limit exceeded. Please wait a moment and try again."
            else:
                message = "GitHub API rate limit exceeded. Enter an access token or try again later."
            return HostRateLimitedError(message, owner, project, status)
        if status == 401:
            return UnauthorizedError(
                f"The GitHub access token was rejected for {owner}/{project}. Check or rotate the token.",
                owner, project, status,
            )
        if status == 404 and not has_credential:
            return PrivateOrMissingRepositoryError(
                f"Repository not found ({owner}/{project}). If it is private, enter an access token.",
                owner, project, status,
            )
        if status == 404:
            return RepositoryNotFoundError(
                f"Repository not found ({owner}/{project}). Check that the access token can read it.",
                owner, project, status,
            )
        reason = error.reason or (f"status {status}" if status else "network error")
        return RepositoryFetchError(f"GitHub API error ({owner}/{project}): {reason}", owner, project, status)


def parse_blob_payload(body: str) -> str:
    """Extract the base64 ``content`` field from a blob API response."""
    data = json.loads(body)
    return (data.get("content") or "") if isinstance(data, dict) else ""
