"""Services built on top of the rate-limited executor."""

from hubgate.app.services.github import GitHubClient

__all__ = ["GitHubClient"]
