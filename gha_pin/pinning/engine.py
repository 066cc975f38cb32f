"""
Rewrite engine: decides which references need pinning and patches the text.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from gha_pin.parser.workflow_parser import (
    ActionReference,
    extract_version_from_comment,
    versions_equal,
)
from gha_pin.resolver.version_resolver import SHA_LENGTH, ResolvedVersion
from gha_pin.resolver.versions import looks_like_release_tag

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RewriteDecision:
    """A reference that will be rewritten, and what it becomes."""
    reference: ActionReference
    resolved: ResolvedVersion
    updated_line: str
    old_version: str      # version from the old comment, else the old ref

    @property
    def line_index(self) -> int:
        return self.reference.line_index

    @property
    def link(self) -> str:
        """Release page for tagged versions, commit page for branch heads."""
        repo = self.resolved.repository
        if looks_like_release_tag(self.resolved.version):
            return f"https://github.com/{repo}/releases/tag/{self.resolved.version}"
        return f"https://github.com/{repo}/commit/{self.resolved.commit_sha}"


def render_pinned_line(reference: ActionReference, version: str, commit_sha: str) -> str:
    """Format: <indent>[- ]uses: <full path>@<sha> # tag <version>"""
    return reference.render(ref=commit_sha, comment=f"tag {version}")


def needs_rewrite(reference: ActionReference, resolved: ResolvedVersion) -> bool:
    """
    Decide whether a reference is out of date.

    Only a ref exactly as long as a full SHA counts as pinned. A pinned
    reference is current if its comment names the resolved version or its
    ref already is the resolved SHA. Tags, branches and short SHAs always
    get rewritten.
    """
    if len(reference.current_ref) != SHA_LENGTH:
        return True

    current_version = extract_version_from_comment(reference.comment)
    if current_version and versions_equal(current_version, resolved.version):
        return False
    return reference.current_ref != resolved.commit_sha


def build_decision(reference: ActionReference, resolved: ResolvedVersion) -> Optional[RewriteDecision]:
    """Return a RewriteDecision, or None if the line should be left alone."""
    if reference.skip_pinning:
        logger.debug("Line %d: %s is marked skip-pinning", reference.line_index + 1, reference.repository)
        return None

    if not needs_rewrite(reference, resolved):
        logger.debug(
            "Line %d: %s already pinned to %s",
            reference.line_index + 1, reference.repository, resolved.version,
        )
        return None

    old_version = extract_version_from_comment(reference.comment) or reference.current_ref
    return RewriteDecision(
        reference=reference,
        resolved=resolved,
        updated_line=render_pinned_line(reference, resolved.version, resolved.commit_sha),
        old_version=old_version,
    )


def apply_decisions(text: str, decisions: Iterable[RewriteDecision]) -> str:
    """
    Replace the lines named by decisions and return the new text.

    Every other line, and the line count, is left exactly as it was.
    Decisions pointing past the end of the text are skipped.
    """
    decisions = list(decisions)
    if not decisions:
        return text

    lines = text.split("\n")
    for decision in sorted(decisions, key=lambda d: d.line_index, reverse=True):
        index = decision.line_index
        if not 0 <= index < len(lines):
            logger.warning(
                "Skipping edit for %s: line %d is out of range",
                decision.reference.repository, index + 1,
            )
            continue
        lines[index] = decision.updated_line

    logger.info("Applied %d edit(s)", len(decisions))
    return "\n".join(lines)
