"""
Markdown reporter: an update summary suitable for a PR description.
"""

from gha_pin.pinning.pinner import PinResult
from gha_pin.resolver.versions import looks_like_release_tag


def report_markdown(results: list[PinResult]) -> str:
    """Format pinning results as a Markdown summary with release/commit links."""
    lines = ["# GitHub Workflow Update Summary", ""]

    updates = [u for r in results for u in r.updates]
    errors = [e for r in results for e in r.errors]

    lines.append("## Updated Actions")
    if not updates:
        lines.append("")
        lines.append("No actions needed updating.")
    for update in updates:
        label = "Release" if looks_like_release_tag(update.resolved.version) else "Commit"
        lines.append(
            f"- **{update.resolved.repository}**: {update.old_version} → "
            f"{update.resolved.version} ([View {label}]({update.link}))"
        )

    if errors:
        lines.append("")
        lines.append("## Errors")
        lines.extend(f"- {error}" for error in errors)

    lines.append("")
    return "\n".join(lines)
