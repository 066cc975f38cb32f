from .version_resolver import (
    NoCandidateFound,
    Resolution,
    ResolutionFailure,
    ResolvedVersion,
    VersionResolver,
)
from .versions import latest_by_version, parse_version

__all__ = [
    "NoCandidateFound",
    "Resolution",
    "ResolutionFailure",
    "ResolvedVersion",
    "VersionResolver",
    "latest_by_version",
    "parse_version",
]
