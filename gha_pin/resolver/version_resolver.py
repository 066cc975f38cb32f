"""
Version resolver: finds the newest version of an action and its commit SHA.

Resolution falls back through three tiers and stops at the first one that
produces a candidate:

  1. Releases       newest stable semver release, tag dereferenced to a commit
  2. Tags           newest semver tag, or the most recent tag if none are semver
  3. Default branch head commit of the repository's default branch

resolve() never raises for API problems. It returns either a
ResolvedVersion or a ResolutionFailure so one broken repository doesn't
stop a batch.
"""

import logging
import re
from dataclasses import dataclass
from typing import Any, Optional, Protocol, Union

from gha_pin.github.client import TransportError
from gha_pin.resolver.versions import latest_by_version

logger = logging.getLogger(__name__)

SHA_LENGTH = 40
_FULL_SHA = re.compile(r"^[0-9a-fA-F]{40}$")


class GitHubSource(Protocol):
    """The subset of GitHubClient the resolver needs."""

    def list_releases(self, repository: str) -> list[dict[str, Any]]: ...
    def list_tags(self, repository: str) -> list[dict[str, Any]]: ...
    def get_tag_ref(self, repository: str, tag: str) -> dict[str, Any]: ...
    def get_tag_object(self, repository: str, sha: str) -> dict[str, Any]: ...
    def get_repository(self, repository: str) -> dict[str, Any]: ...
    def get_commit(self, repository: str, ref: str) -> dict[str, Any]: ...


@dataclass(frozen=True)
class ResolvedVersion:
    """The newest version of a repository and the commit it points to."""
    repository: str
    version: str      # tag name, or branch name for the default-branch tier
    commit_sha: str   # always a full 40-character SHA


@dataclass(frozen=True)
class ResolutionFailure:
    """Why a repository could not be resolved."""
    repository: str
    reason: str
    kind: str = "transport"   # "transport", "not-found" or "no-candidate"
    status: Optional[int] = None

    def __str__(self) -> str:
        return f"Failed to update {self.repository}: {self.reason}"


Resolution = Union[ResolvedVersion, ResolutionFailure]


class NoCandidateFound(Exception):
    """Releases, tags and the default branch all came up empty."""


def _is_full_sha(value: Any) -> bool:
    return isinstance(value, str) and bool(_FULL_SHA.match(value))


def _as_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_list(value: Any) -> list[Any]:
    return value if isinstance(value, list) else []


class VersionResolver:
    def __init__(self, client: GitHubSource):
        self.client = client

    def resolve(self, repository: str) -> Resolution:
        """
        Resolve an owner/repo identity to its newest version.

        Args:
            repository: e.g. "actions/checkout". Sub-paths must already be
                stripped off.

        Returns:
            ResolvedVersion on success, ResolutionFailure otherwise.
        """
        try:
            resolved = self._resolve(repository)
        except TransportError as e:
            kind = "not-found" if e.status == 404 else "transport"
            logger.warning("Could not resolve %s: %s", repository, e)
            return ResolutionFailure(repository, str(e), kind=kind, status=e.status)
        except NoCandidateFound as e:
            logger.warning("Could not resolve %s: %s", repository, e)
            return ResolutionFailure(repository, str(e), kind="no-candidate")
        except (KeyError, TypeError, AttributeError) as e:
            logger.warning("Unexpected GitHub response for %s: %r", repository, e)
            return ResolutionFailure(
                repository, f"Unexpected response from GitHub API: {e!r}", kind="transport",
            )

        logger.info(
            "Resolved %s -> %s (%s)",
            repository, resolved.version, resolved.commit_sha[:12],
        )
        return resolved

    def _resolve(self, repository: str) -> ResolvedVersion:
        resolved = self._from_releases(repository)
        if resolved is None:
            resolved = self._from_tags(repository)
        if resolved is None:
            resolved = self._from_default_branch(repository)

        if not _is_full_sha(resolved.commit_sha):
            raise NoCandidateFound(
                f"{resolved.version} did not resolve to a full commit SHA"
            )
        return resolved

    def _from_releases(self, repository: str) -> Optional[ResolvedVersion]:
        releases = _as_list(self.client.list_releases(repository))
        stable = [r for r in releases if isinstance(r, dict) and not r.get("prerelease")]
        latest = latest_by_version(stable, key=lambda r: r.get("tag_name") or "")
        logger.debug(
            "%s: %d release(s), %d stable, latest=%s",
            repository, len(releases), len(stable),
            latest.get("tag_name") if latest else None,
        )
        if latest is None:
            return None

        tag_name = latest["tag_name"]
        return ResolvedVersion(repository, tag_name, self._commit_for_tag(repository, tag_name))

    def _commit_for_tag(self, repository: str, tag_name: str) -> str:
        """Follow a tag ref to its commit, dereferencing annotated tags."""
        try:
            obj = _as_dict(_as_dict(self.client.get_tag_ref(repository, tag_name)).get("object"))
            if obj.get("type") != "tag":
                return obj.get("sha") or ""
            if obj.get("sha"):
                logger.debug("%s: %s is an annotated tag, dereferencing", repository, tag_name)
                tag_object = _as_dict(self.client.get_tag_object(repository, obj["sha"]))
                return _as_dict(tag_object.get("object")).get("sha") or ""
            logger.debug("%s: annotated tag %s has no object SHA, trying tag list", repository, tag_name)
        except TransportError as e:
            logger.debug("%s: tag ref lookup for %s failed (%s), trying tag list", repository, tag_name, e)

        for tag in _as_list(self.client.list_tags(repository)):
            if isinstance(tag, dict) and tag.get("name") == tag_name:
                return _as_dict(tag.get("commit")).get("sha") or ""
        raise NoCandidateFound(f"Could not find a commit for tag {tag_name}")

    def _from_tags(self, repository: str) -> Optional[ResolvedVersion]:
        tags = [t for t in _as_list(self.client.list_tags(repository)) if isinstance(t, dict)]
        if not tags:
            logger.debug("%s: no tags", repository)
            return None

        chosen = latest_by_version(tags, key=lambda t: t.get("name") or "")
        if chosen is None:
            # No semver tags; GitHub lists the most recent tag first
            chosen = tags[0]
            logger.debug("%s: no semver tags, using most recent tag %s", repository, chosen.get("name"))

        return ResolvedVersion(
            repository,
            str(chosen.get("name") or ""),
            _as_dict(chosen.get("commit")).get("sha") or "",
        )

    def _from_default_branch(self, repository: str) -> ResolvedVersion:
        repo = _as_dict(self.client.get_repository(repository))
        branch = repo.get("default_branch") or "main"
        sha = _as_dict(self.client.get_commit(repository, branch)).get("sha") or ""
        if not sha:
            raise NoCandidateFound(f"No releases, tags or commits found on {branch}")
        logger.debug("%s: falling back to %s head %s", repository, branch, sha[:12])
        return ResolvedVersion(repository, branch, sha)
