"""
Repository reference parsing.
"""
import re
from dataclasses import dataclass
from typing import Optional

from ...errors import InvalidReferenceError

# host/owner/project[.git], with or without scheme, also git@host:owner/project
_REFERENCE_PATTERN = re.compile(r"github\.com[/:]([^/\s?#]+)/([^/\s?#]+)", re.IGNORECASE)
_PROJECT_SUFFIX = ".git"


@dataclass(frozen=True)
class RepositoryReference:
    """Canonical identity of a repository on the code host."""
    owner: str
    project: str
    is_private: Optional[bool] = None

    @property
    def slug(self) -> str:
        return f"{self.owner}/{self.project}"

    def __str__(self) -> str:
        return self.slug


def parse_repository_reference(reference: str) -> RepositoryReference:
    """
    Extract owner/project from a repository URL.

    Args:
        reference: Raw string such as ``https://github.com/owner/project.git``

    Returns:
        RepositoryReference with the exact owner and project substrings

    Raises:
        InvalidReferenceError: If the string does not have the host/owner/project shape
    """
    if not isinstance(reference, str):
        raise InvalidReferenceError(repr(reference))

    match = _REFERENCE_PATTERN.search(reference.strip())
    if not match:
        raise InvalidReferenceError(reference)

    owner, project = match.group(1), match.group(2)
    if project.endswith(_PROJECT_SUFFIX):
        project = project[: -len(_PROJECT_SUFFIX)]
    if not owner or not project:
        raise InvalidReferenceError(reference)

    return RepositoryReference(owner=owner, project=project)
