import pytest

from factcheck.errors import InvalidReferenceError
from factcheck.infrastructure.github import RepositoryReference, parse_repository_reference


@pytest.mark.parametrize("url, owner, project", [
    ("https://github.com/octo/hello-world", "octo", "hello-world"),
    ("https://github.com/octo/hello-world.git", "octo", "hello-world"),
    ("github.com/octo/hello-world/tree/main/src", "octo", "hello-world"),
    ("git@github.com:octo/hello-world.git", "octo", "hello-world"),
    ("  https://GitHub.com/Octo/Hello.World  ", "Octo", "Hello.World"),
    ("https://github.com/octo/hello-world?tab=readme", "octo", "hello-world"),
])
def test_parses_owner_and_project(url, owner, project):
    ref = parse_repository_reference(url)
    assert ref == RepositoryReference(owner=owner, project=project)
    assert ref.slug == f"{owner}/{project}"
    assert ref.is_private is None


@pytest.mark.parametrize("url", [
    "",
    "not a url",
    "https://gitlab.com/octo/hello-world",
    "https://github.com/octo",
    "https://github.com/",
])
def test_invalid_reference_raises(url):
    with pytest.raises(InvalidReferenceError) as exc:
        parse_repository_reference(url)
    assert "Invalid GitHub repository URL" in str(exc.value)


def test_invalid_reference_is_a_value_error():
    with pytest.raises(ValueError):
        parse_repository_reference("octo/hello-world")


def test_non_string_is_rejected():
    with pytest.raises(InvalidReferenceError):
        parse_repository_reference(None)
