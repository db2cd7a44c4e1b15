"""Shared test utilities."""

from .memory_host import InMemoryGitHost
from .schema_builders import action, layout, prop, snapshot_text

__all__ = ["InMemoryGitHost", "action", "layout", "prop", "snapshot_text"]
