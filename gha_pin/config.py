"""
Configuration file support for gha-pin.

Looks for a .gha-pin.yml file near the workflows being pinned and loads
settings for GitHub access and file exclusions.

Example .gha-pin.yml:

    # Token used for GitHub API calls (GITHUB_TOKEN / GH_TOKEN take precedence)
    github_token: ghp_xxx

    # Don't warn when running without a token
    suppress_token_warning: true

    # GitHub Enterprise API root and request timeout in seconds
    api_url: https://github.example.com/api/v3
    timeout: 30

    # Workflow files to leave alone (glob patterns)
    exclude:
      - "**/legacy.yml"
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

from gha_pin.github.client import DEFAULT_API_URL

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILENAME = ".gha-pin.yml"
TOKEN_ENV_VARS = ("GITHUB_TOKEN", "GH_TOKEN")


@dataclass
class Config:
    """Parsed gha-pin configuration."""
    github_token: str = ""
    suppress_token_warning: bool = False
    api_url: str = DEFAULT_API_URL
    timeout: float = 15
    exclude: list[str] = field(default_factory=list)


def load_config(config_path: Optional[str] = None, scan_path: Optional[str] = None) -> Config:
    """
    Load configuration from a .gha-pin.yml file.

    Search order:
      1. Explicit config_path if provided
      2. .gha-pin.yml in the scan_path directory (or its parent if scan_path is a file)
         and the directories above it
      3. .gha-pin.yml in the current working directory

    Returns a Config with defaults if no config file is found.
    """
    path = _find_config_file(config_path, scan_path)

    if path is None:
        logger.debug("No config file found, using defaults")
        return Config()

    logger.info("Loading config from %s", path)

    with open(path, "r") as f:
        raw = yaml.safe_load(f)

    if not isinstance(raw, dict):
        logger.warning("Config file is not a YAML mapping, using defaults")
        return Config()

    timeout = raw.get("timeout", 15)
    if not isinstance(timeout, (int, float)) or isinstance(timeout, bool) or timeout <= 0:
        logger.warning("Ignoring invalid timeout %r in config", timeout)
        timeout = 15

    return Config(
        github_token=str(raw.get("github_token") or ""),
        suppress_token_warning=bool(raw.get("suppress_token_warning", False)),
        api_url=str(raw.get("api_url") or DEFAULT_API_URL),
        timeout=timeout,
        exclude=raw.get("exclude") or [],
    )


def resolve_token(cli_token: Optional[str], config: Config) -> str:
    """Pick a token: command-line flag, then environment, then config file."""
    if cli_token:
        return cli_token
    for name in TOKEN_ENV_VARS:
        value = os.environ.get(name)
        if value:
            logger.debug("Using GitHub token from $%s", name)
            return value
    return config.github_token


def _find_config_file(
    config_path: Optional[str] = None,
    scan_path: Optional[str] = None,
) -> Optional[str]:
    """Find the config file, returning its path or None."""
    # 1. Explicit path
    if config_path:
        p = Path(config_path)
        if p.is_file():
            return str(p)
        logger.warning("Config file not found: %s", config_path)
        return None

    # 2. Relative to scan path
    if scan_path:
        scan_p = Path(scan_path)
        if scan_p.is_file():
            scan_p = scan_p.parent
        for directory in (scan_p, *scan_p.parents):
            candidate = directory / DEFAULT_CONFIG_FILENAME
            if candidate.is_file():
                return str(candidate)

    # 3. Current working directory
    cwd_candidate = Path.cwd() / DEFAULT_CONFIG_FILENAME
    if cwd_candidate.is_file():
        return str(cwd_candidate)

    return None
