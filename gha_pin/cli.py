"""
CLI entry point: ties together parser → resolver → rewrite engine → reporter.

Usage:
  # Pin every action in every workflow of a repository:
  python3 -m gha_pin pin .github/workflows/

  # Preview without writing anything:
  python3 -m gha_pin pin .github/workflows/ci.yml --dry-run

  # Machine-readable or PR-friendly output:
  python3 -m gha_pin pin .github/workflows/ --format json
  python3 -m gha_pin pin .github/workflows/ --format markdown

  # Show the references that would be considered (no network):
  python3 -m gha_pin list .github/workflows/

Exit codes:
  0 - success (including nothing to update)
  1 - one or more actions could not be resolved
  2 - error (bad input, invalid workflow, unwritable file, etc.)
"""

import contextlib
import fnmatch
import logging
import os
import signal
import sys
from typing import Iterator, Optional

import click

from gha_pin.config import load_config, resolve_token
from gha_pin.github.client import GitHubClient
from gha_pin.parser import (
    ActionReference,
    StructuralValidationError,
    extract_references,
    find_workflow_files,
    parse_workflow_file,
)
from gha_pin.parser.workflow_parser import is_workflow_file, looks_like_workflow
from gha_pin.pinning import CancellationToken, PinResult, pin_workflow
from gha_pin.reporter import report_console, report_json, report_markdown
from gha_pin.resolver import VersionResolver

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURES = 1
EXIT_ERROR = 2


def _setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity flag."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def _collect_files(path: str, exclude: list[str], force: bool) -> list[str]:
    """Resolve PATH to workflow files, exiting with EXIT_ERROR on bad input."""
    if os.path.isfile(path):
        if not force and not is_workflow_file(path):
            try:
                with open(path, "r", encoding="utf-8") as f:
                    text = f.read()
            except (OSError, UnicodeDecodeError) as e:
                click.echo(f"Error: {e}", err=True)
                sys.exit(EXIT_ERROR)
            if not looks_like_workflow(text):
                click.echo(
                    f"Error: '{path}' doesn't appear to be a GitHub workflow file "
                    "(use --force to continue anyway).",
                    err=True,
                )
                sys.exit(EXIT_ERROR)
        files = [path]
    elif os.path.isdir(path):
        files = find_workflow_files(path)
    else:
        click.echo(f"Error: '{path}' is not a file or directory.", err=True)
        sys.exit(EXIT_ERROR)

    if exclude:
        before = len(files)
        files = [f for f in files if not any(fnmatch.fnmatch(f, pat) for pat in exclude)]
        excluded = before - len(files)
        if excluded:
            logger.info("Excluded %d workflow(s) via config", excluded)
    return files


def _read_workflows(files: list[str]) -> dict[str, str]:
    """Read and validate every file before any network activity."""
    contents = {}
    for file_path in files:
        try:
            contents[file_path] = parse_workflow_file(file_path)
        except StructuralValidationError as e:
            click.echo(f"Error: Invalid workflow file {file_path}: {e}", err=True)
            sys.exit(EXIT_ERROR)
        except (OSError, UnicodeDecodeError) as e:
            click.echo(f"Error: {e}", err=True)
            sys.exit(EXIT_ERROR)
    return contents


@contextlib.contextmanager
def _cancel_on_interrupt(token: CancellationToken) -> Iterator[None]:
    """Turn Ctrl-C into a cooperative cancel for the duration of the block."""
    try:
        previous = signal.signal(signal.SIGINT, lambda signum, frame: token.cancel())
    except ValueError:
        # Not on the main thread; leave SIGINT alone
        yield
        return
    try:
        yield
    finally:
        if previous is not None:
            signal.signal(signal.SIGINT, previous)


def _write_workflow(file_path: str, text: str) -> None:
    with open(file_path, "w", encoding="utf-8", newline="") as f:
        f.write(text)
    logger.info("Wrote %s", file_path)


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose logging.")
def cli(verbose: bool):
    """Pin GitHub Actions in workflow files to immutable commit SHAs."""
    _setup_logging(verbose)


@cli.command()
@click.argument("path")
@click.option("--dry-run", is_flag=True, help="Show what would change without writing files.")
@click.option("--format", "output_format", type=click.Choice(["console", "json", "markdown"]), default="console", help="Output format.")
@click.option("--token", default=None, help="GitHub token (overrides GITHUB_TOKEN and the config file).")
@click.option("--config", "config_path", default=None, help="Path to .gha-pin.yml config file.")
@click.option("--force", is_flag=True, help="Process files that don't look like workflows.")
def pin(path: str, dry_run: bool, output_format: str, token: Optional[str], config_path: Optional[str], force: bool):
    """Rewrite action references to the latest release's commit SHA.

    Exits with code 0 on success, 1 if some actions failed to resolve, 2 on error.
    """
    path = os.path.abspath(path)

    config = load_config(config_path=config_path, scan_path=path)
    files = _collect_files(path, config.exclude, force)
    if not files:
        click.echo("No workflow files found.")
        sys.exit(EXIT_OK)

    contents = _read_workflows(files)

    github_token = resolve_token(token, config)
    if not github_token and not config.suppress_token_warning:
        click.echo(
            "Warning: No GitHub token configured. This may limit access to private "
            "repositories and hit API rate limits.",
            err=True,
        )

    resolver = VersionResolver(GitHubClient(
        token=github_token,
        api_url=config.api_url,
        timeout=config.timeout,
    ))

    def show_progress(position: int, total: int, reference: ActionReference) -> None:
        click.echo(f"[{position}/{total}] Updating {reference.repository}...", err=True)

    progress = show_progress if output_format == "console" else None
    cancel_token = CancellationToken()
    results: list[PinResult] = []

    with _cancel_on_interrupt(cancel_token):
        for file_path, text in contents.items():
            if cancel_token.cancelled:
                break
            result = pin_workflow(
                text, resolver,
                cancel_token=cancel_token,
                progress=progress,
                file_path=file_path,
            )
            results.append(result)

            if result.changed and not dry_run:
                try:
                    _write_workflow(file_path, result.text)
                except OSError as e:
                    click.echo(f"Error writing {file_path}: {e}", err=True)
                    sys.exit(EXIT_ERROR)

    if output_format == "json":
        click.echo(report_json(results))
    elif output_format == "markdown":
        click.echo(report_markdown(results))
    else:
        report_console(results, dry_run=dry_run)

    if any(r.errors for r in results):
        sys.exit(EXIT_FAILURES)
    sys.exit(EXIT_OK)


@cli.command(name="list")
@click.argument("path")
def list_references(path: str):
    """List the action references found in workflow files (no network)."""
    path = os.path.abspath(path)
    config = load_config(scan_path=path)
    files = _collect_files(path, config.exclude, force=True)
    contents = _read_workflows(files)

    found = 0
    for file_path, text in contents.items():
        references = extract_references(text)
        found += len(references)
        click.echo(f"{file_path}: {len(references)} reference(s)")
        for ref in references:
            marker = "  [skip-pinning]" if ref.skip_pinning else ""
            click.echo(f"  {ref.line_index + 1:>4}  {ref.repository:<40} {ref.full_path}@{ref.current_ref}{marker}")

    if not found:
        click.echo("No GitHub actions found.")
    sys.exit(EXIT_OK)


if __name__ == "__main__":
    cli()
