"""
Semantic-version helpers for picking the newest release or tag.
"""

import re
from typing import Callable, Iterable, Optional, TypeVar

from semver import Version

T = TypeVar("T")

# Versions linked to a release page instead of a commit
_RELEASE_TAG = re.compile(r"^v?\d+\.\d+\.\d+")


def parse_version(tag: str) -> Optional[Version]:
    """
    Parse a tag like 'v1.2.3' or '1.2.3-rc.1+build.5'.

    A single leading 'v' or 'V' is ignored. Anything that isn't a full
    MAJOR.MINOR.PATCH version (e.g. 'v4', 'latest') returns None.
    """
    if not tag:
        return None
    candidate = tag[1:] if tag[0] in "vV" else tag
    try:
        return Version.parse(candidate)
    except (ValueError, TypeError):
        return None


def looks_like_release_tag(tag: str) -> bool:
    """True for tags starting with MAJOR.MINOR.PATCH, e.g. 'v1.2.3' or 'v1.2.3.4'."""
    return bool(_RELEASE_TAG.match(tag or ""))


def latest_by_version(items: Iterable[T], key: Callable[[T], str]) -> Optional[T]:
    """
    Return the item whose key is the highest semantic version.

    Items with an invalid version are ignored. When two items have equal
    precedence the one seen first wins.
    """
    best: Optional[T] = None
    best_version: Optional[Version] = None
    for item in items:
        version = parse_version(key(item))
        if version is None:
            continue
        if best_version is None or version > best_version:
            best, best_version = item, version
    return best
