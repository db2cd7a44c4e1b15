"""Repository host implementations."""

from .github import DEFAULT_BASE_URL, GitHubHost

__all__ = ["DEFAULT_BASE_URL", "GitHubHost"]
