import pytest

from factcheck.errors import (
    HostRateLimitedError, PrivateOrMissingRepositoryError, RepositoryFetchError, RepositoryNotFoundError,
    UnauthorizedError,
)
from factcheck.infrastructure.github import GitHubClient

REPO_API = "https://api.github.com/repos/octo/app"


@pytest.fixture
def client(fetcher):
    return GitHubClient(fetcher=fetcher)


def test_repo_meta(http, client):
    http.add(REPO_API, 200, {"default_branch": "develop", "private": True})
    meta = client.get_repo_meta("octo", "app", "tok")
    assert meta.default_branch == "develop"
    assert meta.is_private is True
    assert http.calls[0]["headers"]["Authorization"] == "Bearer tok"


def test_repo_meta_without_credential_sends_no_auth(http, client):
    http.add(REPO_API, 200, {"default_branch": "main", "private": False})
    client.get_repo_meta("octo", "app")
    assert "Authorization" not in http.calls[0]["headers"]


@pytest.mark.parametrize("status, error_type", [
    (401, UnauthorizedError),
    (403, HostRateLimitedError),
    (429, HostRateLimitedError),
    (404, RepositoryNotFoundError),
    (500, RepositoryFetchError),
])
def test_repo_meta_status_mapping(http, client, status, error_type):
    http.add(REPO_API, status, "{}")
    with pytest.raises(error_type) as exc:
        client.get_repo_meta("octo", "app")
    assert exc.value.status == status
    assert exc.value.slug == "octo/app"


def test_rate_limit_message_depends_on_credential(http, client):
    http.add(REPO_API, 403, "{}")
    with pytest.raises(HostRateLimitedError) as anonymous:
        client.get_repo_meta("octo", "app")
    with pytest.raises(HostRateLimitedError) as authenticated:
        client.get_repo_meta("octo", "app", "tok")
    assert "access token" in str(anonymous.value)
    assert "access token" not in str(authenticated.value)


def test_anonymous_not_found_is_unauthorized(http, client):
    with pytest.raises(PrivateOrMissingRepositoryError) as exc:
        client.get_repo_meta("octo", "app")
    assert isinstance(exc.value, UnauthorizedError)
    assert isinstance(exc.value, RepositoryNotFoundError)
    assert "private" in str(exc.value)


def test_authenticated_not_found_is_not_unauthorized(http, client):
    with pytest.raises(RepositoryNotFoundError) as exc:
        client.get_repo_meta("octo", "app", "tok")
    assert not isinstance(exc.value, UnauthorizedError)


def test_list_tree(http, client):
    http.add(f"{REPO_API}/git/trees/main?recursive=1", 200, {"tree": [
        {"path": "src", "type": "tree", "url": "u0"},
        {"path": "src/a.py", "type": "blob", "url": "u1"},
    ]})
    entries = client.list_tree("octo", "app", "main")
    assert [(e.path, e.is_file, e.fetch_handle) for e in entries] == [("src", False, "u0"), ("src/a.py", True, "u1")]


def test_list_tree_failure(http, client):
    http.add(f"{REPO_API}/git/trees/main?recursive=1", 409, "{}")
    with pytest.raises(RepositoryFetchError) as exc:
        client.list_tree("octo", "app", "main")
    assert exc.value.status == 409


def test_fetch_raw_and_blob(http, client):
    http.add("https://raw.githubusercontent.com/octo/app/main/src/a.py", 200, "print(1)")
    http.add(f"{REPO_API}/git/blobs/abc", 200, {"content": "cHJpbnQoMSk=\n", "encoding": "base64"})
    assert client.fetch_raw("octo", "app", "main", "src/a.py") == "print(1)"
    assert client.fetch_blob(f"{REPO_API}/git/blobs/abc", "tok") == "cHJpbnQoMSk=\n"
    assert http.calls[0]["headers"] == {}
    assert http.calls[1]["headers"]["Authorization"] == "Bearer tok"
