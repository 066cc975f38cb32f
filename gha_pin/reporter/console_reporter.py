"""
Console reporter: prints the outcome of a pinning run with colors.
"""

from gha_pin.pinning.pinner import PinResult


BOLD = "\033[1m"
GREEN = "\033[32m"
YELLOW = "\033[33m"
RED = "\033[31m"
DIM = "\033[2m"
RESET = "\033[0m"


def report_console(results: list[PinResult], dry_run: bool = False) -> str:
    """
    Format pinning results as a colored console report.

    Args:
        results: One PinResult per workflow file.
        dry_run: Word the summary as "would update" instead of "updated".

    Returns:
        The formatted report string (also prints it).
    """
    lines = []

    lines.append("")
    lines.append(f"{BOLD}{'=' * 60}{RESET}")
    lines.append(f"{BOLD}  GitHub Workflow Action Pinning{RESET}")
    lines.append(f"{BOLD}{'=' * 60}{RESET}")

    verb = "Would update" if dry_run else "Updated"
    total_updates = 0
    total_errors = 0
    for result in results:
        lines.append("")
        if result.file_path:
            lines.append(f"  {BOLD}{result.file_path}{RESET}")

        if not result.references:
            lines.append("    No GitHub actions found in this workflow")
            continue
        if result.skipped:
            lines.append(
                f"    {DIM}Skipping {len(result.skipped)} action(s) marked with skip-pinning{RESET}"
            )
        if len(result.skipped) == len(result.references):
            lines.append("    All actions are marked to skip pinning")
            continue

        if result.updates:
            lines.append(f"    {verb} {len(result.updates)} action(s):")
            for update in result.updates:
                lines.append(
                    f"      {GREEN}✔{RESET} {update.resolved.repository}: "
                    f"{update.old_version} → {update.resolved.version} "
                    f"{DIM}({update.resolved.commit_sha[:7]}){RESET}"
                )
        elif not result.errors and not result.cancelled:
            lines.append("    No actions needed updating")

        if result.errors:
            lines.append(f"    {RED}{len(result.errors)} error(s) occurred during update:{RESET}")
            for error in result.errors:
                lines.append(f"      {RED}✘{RESET} {error}")

        if result.cancelled:
            lines.append(f"    {YELLOW}Cancelled before all actions were processed{RESET}")

        total_updates += len(result.updates)
        total_errors += len(result.errors)

    lines.append("")
    lines.append(f"  {'-' * 56}")
    lines.append(f"  {verb} {BOLD}{total_updates}{RESET} action(s), {BOLD}{total_errors}{RESET} error(s)")
    lines.append(f"{BOLD}{'=' * 60}{RESET}")
    lines.append("")

    report = "\n".join(lines)
    print(report)
    return report
