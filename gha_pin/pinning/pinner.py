"""
Pinning loop: extract -> filter -> resolve each reference -> patch once.

References are resolved one at a time with no de-duplication. A failed
resolution is recorded and the loop moves on. The text is only patched
after the loop ends, so cancelling part way leaves a smaller set of edits,
never a half-written document.
"""

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Optional

from gha_pin.parser.workflow_parser import ActionReference, extract_references
from gha_pin.pinning.engine import RewriteDecision, apply_decisions, build_decision
from gha_pin.resolver.version_resolver import ResolutionFailure, VersionResolver

logger = logging.getLogger(__name__)

# Called before each resolution with (1-based position, total, reference)
ProgressCallback = Callable[[int, int, ActionReference], None]


class CancellationToken:
    """Cooperative cancellation flag checked once per reference."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


@dataclass
class PinResult:
    """Everything a caller needs to persist and report a pinning run."""
    original_text: str
    text: str
    references: list[ActionReference] = field(default_factory=list)
    skipped: list[ActionReference] = field(default_factory=list)
    updates: list[RewriteDecision] = field(default_factory=list)
    errors: list[ResolutionFailure] = field(default_factory=list)
    cancelled: bool = False
    file_path: str = ""

    @property
    def changed(self) -> bool:
        return self.text != self.original_text


def pin_workflow(
    text: str,
    resolver: VersionResolver,
    cancel_token: Optional[CancellationToken] = None,
    progress: Optional[ProgressCallback] = None,
    file_path: str = "",
) -> PinResult:
    """
    Pin every action reference in a workflow to its newest commit SHA.

    Args:
        text: Workflow contents. Structural validation is the caller's job.
        resolver: Resolves owner/repo identities.
        cancel_token: Checked before each reference; stops the loop early.
        progress: Optional callback invoked before each resolution.
        file_path: Label carried through to reports.

    Returns:
        A PinResult with the patched text, decisions and collected failures.
    """
    references = extract_references(text)
    skipped = [r for r in references if r.skip_pinning]
    to_update = [r for r in references if not r.skip_pinning]
    if skipped:
        logger.info("Skipping %d action(s) marked with skip-pinning", len(skipped))

    result = PinResult(
        original_text=text,
        text=text,
        references=references,
        skipped=skipped,
        file_path=file_path,
    )

    t0 = time.monotonic()
    for position, reference in enumerate(to_update, 1):
        if cancel_token is not None and cancel_token.cancelled:
            logger.info("Cancelled after %d of %d reference(s)", position - 1, len(to_update))
            result.cancelled = True
            break

        if progress is not None:
            progress(position, len(to_update), reference)

        resolution = resolver.resolve(reference.repository)
        if isinstance(resolution, ResolutionFailure):
            result.errors.append(resolution)
            continue

        decision = build_decision(reference, resolution)
        if decision is not None:
            result.updates.append(decision)

    result.text = apply_decisions(text, result.updates)
    elapsed_ms = (time.monotonic() - t0) * 1000
    logger.info(
        "Pinning done: %d update(s), %d error(s), %d skipped in %.0fms",
        len(result.updates), len(result.errors), len(skipped), elapsed_ms,
    )
    return result
