"""Tests for GitHub URL splitting and joining."""

import pytest

from ghrest.core.config import Settings
from ghrest.core.errors import GitHubValidationError
from ghrest.core.uri import join_uri, resolve_repository_elements, split_uri


class TestSplitUri:
    """Owner/repository extraction."""

    @pytest.mark.parametrize("url", [
        "https://github.com/octocat/Hello-World",
        "https://github.com/octocat/Hello-World/",
        "https://www.github.com/octocat/Hello-World/issues/12",
        "http://github.com/octocat/Hello-World?tab=readme",
        "https://api.github.com/repos/octocat/Hello-World",
        "https://api.github.com/repos/octocat/Hello-World/pulls/1/comments",
    ])
    def test_web_and_api_forms(self, url):
        assert split_uri(url, "github.com") == ("octocat", "Hello-World")

    def test_owner_only(self):
        assert split_uri("https://github.com/octocat", "github.com") == ("octocat", "")

    @pytest.mark.parametrize("url", [
        "",
        "not a url",
        "https://gitlab.com/octocat/Hello-World",
        "https://api.github.com/users/octocat",
    ])
    def test_non_matching_gives_empty_names(self, url):
        assert split_uri(url, "github.com") == ("", "")

    def test_enterprise_forms(self):
        host = "git.example.com"
        assert split_uri("https://git.example.com/team/tool/pulls", host) == ("team", "tool")
        assert split_uri("https://git.example.com/api/v3/repos/team/tool/issues", host) == ("team", "tool")

    def test_named_fields(self):
        elements = split_uri("https://github.com/octocat/Hello-World", "github.com")
        assert elements.owner_name == "octocat"
        assert elements.repository_name == "Hello-World"


class TestJoinUri:
    """Canonical web URL composition."""

    def test_join(self):
        assert join_uri("octocat", "Hello-World", "github.com") == "https://github.com/octocat/Hello-World"

    @pytest.mark.parametrize("url", [
        "https://api.github.com/repos/octocat/Hello-World/issues",
        "https://www.github.com/octocat/Hello-World/tree/main",
    ])
    def test_round_trip(self, url):
        owner, repo = split_uri(url, "github.com")
        joined = join_uri(owner, repo, "github.com")
        assert joined == "https://github.com/octocat/Hello-World"
        assert split_uri(joined, "github.com") == (owner, repo)


class TestResolveRepositoryElements:
    """Resolution from URI, names and configured defaults."""

    def test_from_uri(self):
        settings = Settings()
        assert resolve_repository_elements(uri="https://github.com/o/r", settings=settings) == ("o", "r")

    def test_from_names(self):
        assert resolve_repository_elements(owner_name="o", repository_name="r", settings=Settings()) == ("o", "r")

    def test_defaults_fill_gaps(self):
        settings = Settings(default_owner_name="me", default_repository_name="stuff")
        assert resolve_repository_elements(repository_name="other", settings=settings) == ("me", "other")

    def test_uri_and_names_conflict(self):
        with pytest.raises(GitHubValidationError, match="not both"):
            resolve_repository_elements(uri="https://github.com/o/r", owner_name="o", settings=Settings())

    def test_missing_repository_raises(self):
        with pytest.raises(GitHubValidationError, match="repository name"):
            resolve_repository_elements(owner_name="o", settings=Settings())

    def test_validation_can_be_skipped(self):
        assert resolve_repository_elements(settings=Settings(), validate=False) == ("", "")
