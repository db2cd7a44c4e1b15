"""
Pydantic models for publish inputs, remote state and schema change records.
"""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, field_validator


class Artifact(BaseModel):
    """One generated output file to publish"""

    model_config = ConfigDict(frozen=True)

    path: str  # forward-slash, repository-relative
    content: bytes

    @field_validator("path")
    @classmethod
    def _normalize_path(cls, value: str) -> str:
        normalized = value.replace("\\", "/").lstrip("/")
        if not normalized or normalized.endswith("/"):
            raise ValueError(f"Invalid artifact path: {value!r}")
        return normalized


class BlobRecord(BaseModel):
    """Artifact plus the outcome of comparing it with the remote branch"""

    path: str
    content: bytes
    local_hash: str
    needs_commit: bool
    warning: str | None = None  # set when the remote lookup failed


class RepositoryRef(BaseModel):
    """Handle on a remote repository (owner/name + branch published by default)"""

    model_config = ConfigDict(frozen=True)

    owner: str
    name: str
    default_branch: str = "main"

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"

    @classmethod
    def parse(cls, full_name: str, default_branch: str = "main") -> "RepositoryRef":
        """Build a ref from an ``owner/name`` string"""
        owner, sep, name = full_name.strip().partition("/")
        if not sep or not owner or not name or "/" in name:
            raise ValueError(f"Expected repository as 'owner/name', got: {full_name!r}")
        return cls(owner=owner, name=name, default_branch=default_branch)


class FieldCategory(StrEnum):
    """Kind of schema-declared leaf element"""

    FIELD = "field"
    ACTION = "action"


class FieldDescriptor(BaseModel):
    """One declared field or action at a nesting location"""

    model_config = ConfigDict(frozen=True)

    name: str
    type_tag: str
    category: FieldCategory
    location: str  # e.g. "Hero" or "Hero - CombatSection"
    modifiers: frozenset[str] = frozenset()
    parameters: tuple[str, ...] = ()

    @property
    def key(self) -> str:
        return f"{self.location}.{self.name}"


class ChangeKind(StrEnum):
    """What happened to an element between two schema snapshots"""

    ADDED = "added"
    REMOVED = "removed"
    MODIFIED = "modified"
    RENAMED = "renamed"


class ChangeCategory(StrEnum):
    """Which part of the schema a change touches"""

    FIELD = "field"
    ACTION = "action"
    SYSTEM = "system"


class Change(BaseModel):
    """One categorized schema change"""

    model_config = ConfigDict(frozen=True)

    kind: ChangeKind
    category: ChangeCategory
    description: str
    name: str | None = None
    details: str | None = None
