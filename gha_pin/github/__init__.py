from .client import GitHubClient, TransportError, ResponseParseError

__all__ = ["GitHubClient", "TransportError", "ResponseParseError"]
