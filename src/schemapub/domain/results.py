"""Typed workflow result envelopes used by CLI and SDK entrypoints."""

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from schemapub.models import Change


@dataclass(slots=True)
class CommandResult:
    """Common command/service response payload."""

    success: bool
    code: str = "ok"
    message: str = ""
    data: dict[str, Any] = field(default_factory=dict)

    def as_json_dict(self) -> dict[str, Any]:
        """Return a stable machine-readable structure."""
        return {
            "success": self.success,
            "code": self.code,
            "message": self.message,
            "data": self.data,
        }


class PublishStatus(StrEnum):
    """Outcome of one publish/update call"""

    UP_TO_DATE = "up_to_date"
    UPDATED = "updated"
    PUBLISHED = "published"
    PUBLISHED_WITHOUT_RELEASE = "published_without_release"


@dataclass(slots=True)
class CommitResult:
    """Result of building and landing one commit"""

    committed: bool
    changed_count: int
    commit_sha: str | None = None
    tree_sha: str | None = None
    skipped: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


@dataclass(slots=True)
class PublishResult:
    """Structured result of a publish; distinguishes no-op, release and no-release."""

    status: PublishStatus
    changed_file_count: int = 0
    version: str | None = None
    tag_name: str | None = None
    release_url: str | None = None
    commit_sha: str | None = None
    changes: list[Change] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def committed(self) -> bool:
        return self.status is not PublishStatus.UP_TO_DATE

    def as_json_dict(self) -> dict[str, Any]:
        """Return a stable machine-readable structure."""
        return {
            "status": str(self.status),
            "changedFileCount": self.changed_file_count,
            "version": self.version,
            "tagName": self.tag_name,
            "releaseUrl": self.release_url,
            "commitSha": self.commit_sha,
            "changes": [change.model_dump(mode="json", exclude_none=True) for change in self.changes],
            "warnings": list(self.warnings),
        }
