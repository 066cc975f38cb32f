"""
GitHub REST API client: the only place that talks to the network.

Returns decoded JSON and raises TransportError for anything else, so the
resolver never has to know about requests.
"""

import logging
import time
from typing import Any, Optional

import requests

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.github.com"
USER_AGENT = "gha-pin"
PER_PAGE = 100


class TransportError(Exception):
    """A request failed or returned a non-2xx status."""

    def __init__(self, message: str, status: Optional[int] = None, body: str = ""):
        super().__init__(message)
        self.status = status
        self.body = body


class ResponseParseError(TransportError):
    """The response body was not valid JSON."""


class GitHubClient:
    def __init__(
        self,
        token: str = "",
        api_url: str = DEFAULT_API_URL,
        timeout: float = 15,
        session: Optional[requests.Session] = None,
    ):
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            "User-Agent": USER_AGENT,
            "Accept": "application/vnd.github+json",
        })
        if token:
            self.session.headers["Authorization"] = f"Bearer {token}"

    def _url(self, url_or_path: str) -> str:
        if url_or_path.startswith(("http://", "https://")):
            return url_or_path
        return f"{self.api_url}/{url_or_path.lstrip('/')}"

    def fetch_json(self, url_or_path: str, params: Optional[dict[str, Any]] = None) -> Any:
        """
        GET a URL (or a path relative to the API root) and decode the JSON body.

        Raises:
            TransportError: On connection problems or non-2xx responses.
            ResponseParseError: If the body isn't JSON.
        """
        url = self._url(url_or_path)
        t0 = time.monotonic()
        try:
            resp = self.session.get(url, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            logger.debug("GET %s failed: %s", url, e)
            raise TransportError(f"Request to {url} failed: {e}") from e

        elapsed_ms = (time.monotonic() - t0) * 1000
        logger.debug("GET %s -> %d in %.0fms", url, resp.status_code, elapsed_ms)

        if not resp.ok:
            message = f"GitHub API error: {resp.status_code} - {resp.text}"
            if resp.status_code in (403, 429) and resp.headers.get("X-RateLimit-Remaining") == "0":
                message = f"GitHub API rate limit exceeded ({resp.status_code}); configure a token"
            raise TransportError(message, status=resp.status_code, body=resp.text)

        try:
            return resp.json()
        except ValueError as e:
            raise ResponseParseError(
                f"Failed to parse JSON from {url}: {e}",
                status=resp.status_code,
                body=resp.text,
            ) from e

    def list_releases(self, repository: str) -> list[dict[str, Any]]:
        return self.fetch_json(f"repos/{repository}/releases", params={"per_page": PER_PAGE})

    def list_tags(self, repository: str) -> list[dict[str, Any]]:
        """Tags in the order GitHub returns them, newest first."""
        return self.fetch_json(f"repos/{repository}/tags", params={"per_page": PER_PAGE})

    def get_tag_ref(self, repository: str, tag: str) -> dict[str, Any]:
        return self.fetch_json(f"repos/{repository}/git/ref/tags/{tag}")

    def get_tag_object(self, repository: str, sha: str) -> dict[str, Any]:
        """Fetch an annotated tag object; its 'object' is the tagged commit."""
        return self.fetch_json(f"repos/{repository}/git/tags/{sha}")

    def get_repository(self, repository: str) -> dict[str, Any]:
        return self.fetch_json(f"repos/{repository}")

    def get_commit(self, repository: str, ref: str) -> dict[str, Any]:
        return self.fetch_json(f"repos/{repository}/commits/{ref}")
