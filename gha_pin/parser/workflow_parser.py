"""
Parser for GitHub Actions workflow files.

Scans workflow text line by line and pulls out every `uses:` reference to
a third-party action, keeping enough of the original line to rewrite it in
place later. Also provides the coarse structural check that runs before
any network activity.
"""

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import yaml

logger = logging.getLogger(__name__)

SKIP_MARKER = "skip-pinning"

# Grammar of a reference line:
#   [<indent>][- ]uses: <path>@<ref>[ # <comment>]
# indent   leading whitespace, kept verbatim on rewrite
# item     sequence-item marker ("- "), present on the first key of a step
# path     owner/repo[/sub/path], no whitespace, '@' or quotes
# ref      tag, branch or SHA, no whitespace, '#' or quotes
# comment  everything after '#', up to end of line
ACTION_PATTERN = re.compile(
    r"^(?P<indent>\s*)"
    r"(?P<item>-\s+)?"
    r"uses:\s+"
    r"(?P<path>[^@\s'\"]+)"
    r"@(?P<ref>[^\s#'\"]+)"
    r"(?:\s*#\s*(?P<comment>.*))?$"
)

REUSABLE_WORKFLOW_PATTERN = re.compile(r"^(?P<repo>[^/]+/[^/]+)/\.github/workflows/.+$")
SUB_ACTION_PATTERN = re.compile(r"^(?P<repo>[^/]+/[^/]+)/.+$")
COMMENT_VERSION_PATTERN = re.compile(r"(?:tag\s+)?(v?\d+\.\d+\.\d+(?:[.-]\w+)*)", re.IGNORECASE)


class StructuralValidationError(ValueError):
    """The document is not YAML, or has no jobs section."""


@dataclass(frozen=True)
class ActionReference:
    """A single `uses:` line found in a workflow."""
    line_index: int       # 0-based line number in the source text
    original_text: str    # the line exactly as it appeared
    indentation: str      # e.g. "      "
    list_item: bool       # True for "- uses: ..."
    repository: str       # e.g. "actions/checkout"
    full_path: str        # e.g. "actions/checkout" or "org/repo/.github/workflows/ci.yml"
    current_ref: str      # e.g. "v4" or a SHA
    comment: str          # text after '#', stripped
    skip_pinning: bool    # comment carries the opt-out marker

    def render(self, ref: Optional[str] = None, comment: Optional[str] = None) -> str:
        """
        Build a reference line in the standard format.

        Uses the current ref and comment unless replacements are given.
        A trailing carriage return on the original line is kept.
        """
        ref = self.current_ref if ref is None else ref
        comment = self.comment if comment is None else comment
        marker = "- " if self.list_item else ""
        line = f"{self.indentation}{marker}uses: {self.full_path}@{ref}"
        if comment:
            line += f" # {comment}"
        if self.original_text.endswith("\r"):
            line += "\r"
        return line


def _repository_identity(path: str) -> str:
    """Reduce a reference path to the owner/repo used for resolution."""
    reusable = REUSABLE_WORKFLOW_PATTERN.match(path)
    if reusable:
        return reusable.group("repo")
    sub_action = SUB_ACTION_PATTERN.match(path)
    if sub_action and ".github/workflows" not in path:
        return sub_action.group("repo")
    return path


def _parse_line(index: int, line: str) -> Optional[ActionReference]:
    match = ACTION_PATTERN.match(line.rstrip("\r"))
    if not match:
        return None

    path = match.group("path")
    if path.startswith("./") or path.startswith("docker://") or "/" not in path:
        logger.debug("Line %d: skipping non-repository reference %s", index + 1, path)
        return None

    comment = (match.group("comment") or "").strip()
    repository = _repository_identity(path)
    reference = ActionReference(
        line_index=index,
        original_text=line,
        indentation=match.group("indent"),
        list_item=match.group("item") is not None,
        repository=repository,
        full_path=path,
        current_ref=match.group("ref"),
        comment=comment,
        skip_pinning=SKIP_MARKER in comment.lower(),
    )
    logger.debug(
        "Line %d: %s@%s (repository=%s, skip=%s)",
        index + 1, path, reference.current_ref, repository, reference.skip_pinning,
    )
    return reference


def extract_references(text: str) -> list[ActionReference]:
    """
    Find every action reference in workflow text.

    Args:
        text: The full workflow file contents.

    Returns:
        References in line order. Lines that don't look like a reference
        are ignored, never reported as errors.
    """
    references = []
    for index, line in enumerate(text.split("\n")):
        reference = _parse_line(index, line)
        if reference is not None:
            references.append(reference)
    logger.info("Found %d action reference(s)", len(references))
    return references


def extract_version_from_comment(comment: str) -> str:
    """Pull a version like 'v1.2.3' out of a comment such as 'tag v1.2.3'."""
    match = COMMENT_VERSION_PATTERN.search(comment or "")
    return match.group(1) if match else ""


def normalize_version(version: str) -> str:
    if not version:
        return ""
    return version if version.startswith("v") else f"v{version}"


def versions_equal(first: str, second: str) -> bool:
    return normalize_version(first) == normalize_version(second)


def is_workflow_file(file_path: str) -> bool:
    """True for .yml/.yaml files that live under a workflows/ directory."""
    path = Path(file_path)
    return path.suffix in (".yml", ".yaml") and "workflows" in path.parent.parts


def looks_like_workflow(text: str) -> bool:
    """Content heuristic for files outside .github/workflows/."""
    return "uses:" in text and ("jobs:" in text or "on:" in text)


def validate_workflow_syntax(text: str) -> None:
    """
    Check that text is YAML with a top-level mapping and a jobs section.

    This is a sanity gate, not schema validation.

    Raises:
        StructuralValidationError: With a message that tells parse failures
            apart from a missing jobs section.
    """
    try:
        parsed = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise StructuralValidationError(f"YAML parse error: {e}") from e

    if not isinstance(parsed, dict):
        raise StructuralValidationError("Invalid YAML structure")

    if not isinstance(parsed.get("jobs"), dict):
        raise StructuralValidationError("No jobs found in workflow")


def parse_workflow_file(file_path: str) -> str:
    """
    Read a workflow file and run the structural check on it.

    Args:
        file_path: Path to the .yml/.yaml workflow file.

    Returns:
        The file contents, unchanged.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        StructuralValidationError: If the file isn't a usable workflow.
    """
    path = Path(file_path)
    if not path.exists():
        raise FileNotFoundError(f"Workflow file not found: {file_path}")

    logger.info("Reading workflow: %s", file_path)
    # newline="" keeps CRLF endings intact for the rewrite
    with open(path, "r", encoding="utf-8", newline="") as f:
        text = f.read()

    validate_workflow_syntax(text)
    return text


def find_workflow_files(dir_path: str) -> list[str]:
    """List the .yml/.yaml files in a directory, sorted by name."""
    path = Path(dir_path)
    if not path.is_dir():
        raise NotADirectoryError(f"Not a directory: {dir_path}")

    files = sorted(str(f) for f in path.iterdir() if f.is_file() and f.suffix in (".yml", ".yaml"))
    logger.debug("Found %d YAML file(s) in %s", len(files), dir_path)
    return files
