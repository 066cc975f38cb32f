"""Shared fixtures for all tests."""

import os
import pytest

from gha_pin.github.client import TransportError
from gha_pin.resolver import VersionResolver


FIXTURES_DIR = os.path.join(os.path.dirname(__file__), "fixtures/.github/workflows")

SHA_A = "a" * 40
SHA_B = "b" * 40
SHA_C = "c" * 40
SHA_D = "d" * 40
SHA_TAG_OBJECT = "e" * 40


class FakeGitHub:
    """In-memory stand-in for GitHubClient, keyed by owner/repo."""

    def __init__(self):
        self.releases = {}
        self.tags = {}
        self.tag_refs = {}
        self.tag_objects = {}
        self.repos = {}
        self.commits = {}
        self.calls = []

    def _lookup(self, table, key, what):
        if key not in table:
            raise TransportError(f"GitHub API error: 404 - {what} not found", status=404, body="Not Found")
        return table[key]

    def list_releases(self, repository):
        self.calls.append(("list_releases", repository))
        return self._lookup(self.releases, repository, "releases")

    def list_tags(self, repository):
        self.calls.append(("list_tags", repository))
        return self._lookup(self.tags, repository, "tags")

    def get_tag_ref(self, repository, tag):
        self.calls.append(("get_tag_ref", repository, tag))
        return self._lookup(self.tag_refs, (repository, tag), "ref")

    def get_tag_object(self, repository, sha):
        self.calls.append(("get_tag_object", repository, sha))
        return self._lookup(self.tag_objects, (repository, sha), "tag object")

    def get_repository(self, repository):
        self.calls.append(("get_repository", repository))
        return self._lookup(self.repos, repository, "repository")

    def get_commit(self, repository, ref):
        self.calls.append(("get_commit", repository, ref))
        return self._lookup(self.commits, (repository, ref), "commit")

    def add_release(self, repository, tag, sha, prerelease=False):
        self.releases.setdefault(repository, []).append({"tag_name": tag, "prerelease": prerelease})
        self.tags.setdefault(repository, []).append({"name": tag, "commit": {"sha": sha}})
        self.tag_refs[(repository, tag)] = {"object": {"type": "commit", "sha": sha}}


@pytest.fixture
def fixtures_dir():
    """Path to the fixtures workflow directory."""
    return FIXTURES_DIR


@pytest.fixture
def ci_workflow_path():
    return os.path.join(FIXTURES_DIR, "ci.yml")


@pytest.fixture
def ci_workflow_text(ci_workflow_path):
    with open(ci_workflow_path, "r", encoding="utf-8") as f:
        return f.read()


@pytest.fixture
def github():
    """A FakeGitHub with a few repositories that cover the fixtures."""
    gh = FakeGitHub()
    gh.add_release("actions/checkout", "v4.1.0", SHA_B)
    gh.add_release("actions/checkout", "v4.2.2", SHA_A)
    gh.add_release("actions/setup-python", "v5.3.0", SHA_C)
    gh.add_release("acme/toolkit", "v1.2.0", SHA_D)
    gh.add_release("acme/tools", "v2.1.0", SHA_B)
    return gh


@pytest.fixture
def resolver(github):
    return VersionResolver(github)
