"""
File importance heuristics used to rank a repository tree.

Architecturally revealing files (docs, manifests, deployment descriptors,
configuration, request handlers) rank above bulk source, which ranks above
tests and binary noise. First matching tier wins.
"""
import posixpath
from dataclasses import dataclass

README_SCORE = 100
MANIFEST_SCORE = 90
CONTAINER_SCORE = 85
CONFIG_SCORE = 80
APP_LOGIC_SCORE = 70
SOURCE_SCORE = 50
TEST_SCORE = 20
BINARY_SCORE = 0
DEFAULT_SCORE = 10

MANIFEST_MARKERS = (
    "package.json", "pom.xml", "requirements.txt", "pyproject.toml",
    "build.gradle", "go.mod", "cargo.toml", "composer.json", "gemfile",
)
CONTAINER_MARKERS = ("docker", "k8s", "helm", "kubernetes")
CONFIG_MARKERS = ("config", "settings", "application.y")
APP_LOGIC_MARKERS = ("controller", "service", "api", "handler", "router")
SOURCE_EXTENSIONS = (
    ".ts", ".tsx", ".js", ".jsx", ".java", ".kt", ".py", ".go",
    ".rs", ".rb", ".cs", ".cpp", ".c", ".swift", ".php", ".scala",
)
BINARY_EXTENSIONS = (
    ".lock", ".png", ".jpg", ".jpeg", ".gif", ".ico", ".pdf",
    ".zip", ".jar", ".woff", ".woff2", ".ttf", ".pt", ".pkl",
)
TEST_DIRECTORIES = {"test", "tests", "__tests__", "spec", "specs"}


@dataclass(frozen=True)
class FileCandidate:
    """A tree entry that has been scored for fetching."""
    path: str
    fetch_handle: str
    importance: int


def _is_test_path(lower: str) -> bool:
    parts = lower.split("/")
    if any(part in TEST_DIRECTORIES for part in parts[:-1]):
        return True
    name = parts[-1]
    stem = posixpath.splitext(name)[0]
    return (
        ".test." in name
        or ".spec." in name
        or stem.startswith("test_")
        or stem.endswith("_test")
        or stem.endswith("_spec")
    )


def score_file_importance(path: str) -> int:
    """
    Score a file path from 0 to 100.

    Pure and total: any string yields a score, the same string always
    yields the same score.
    """
    lower = (path or "").lower()

    if "readme.md" in lower:
        return README_SCORE
    if any(marker in lower for marker in MANIFEST_MARKERS):
        return MANIFEST_SCORE
    if any(marker in lower for marker in CONTAINER_MARKERS):
        return CONTAINER_SCORE
    if any(marker in lower for marker in CONFIG_MARKERS):
        return CONFIG_SCORE
    if any(marker in lower for marker in APP_LOGIC_MARKERS):
        return APP_LOGIC_SCORE
    # Tests are checked before extensions so foo.spec.ts does not rank as source
    if _is_test_path(lower):
        return TEST_SCORE
    if lower.endswith(SOURCE_EXTENSIONS):
        return SOURCE_SCORE
    if lower.endswith(BINARY_EXTENSIONS):
        return BINARY_SCORE
    return DEFAULT_SCORE


def rank_files(entries, limit: int):
    """
    Score regular files and return the top ``limit`` candidates.

    Args:
        entries: Tree entries with ``path``, ``type`` and ``fetch_handle``
        limit: Maximum number of candidates to return

    Returns:
        List of FileCandidate, highest score first; ties keep tree order
    """
    candidates = [
        FileCandidate(path=entry.path, fetch_handle=entry.fetch_handle,
                      importance=score_file_importance(entry.path))
        for entry in entries
        if entry.is_file and entry.fetch_handle
    ]
    # sorted() is stable, so equal scores stay in tree order
    candidates = sorted(candidates, key=lambda c: c.importance, reverse=True)
    return candidates[:limit]
