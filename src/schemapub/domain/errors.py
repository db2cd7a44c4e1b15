"""Unified domain error taxonomy for publish orchestration."""

from dataclasses import dataclass


@dataclass(slots=True)
class SchemaPubDomainError(Exception):
    """Base class for application/domain-level failures."""

    message: str
    code: str = "error"

    def __str__(self) -> str:
        return self.message


@dataclass(slots=True)
class RemoteError(SchemaPubDomainError):
    """Raised when the repository hosting service rejects or fails a request."""

    status_code: int | None = None


class NotFoundError(RemoteError):
    """Raised when a remote object, ref or path does not exist."""


class AuthRequiredError(RemoteError):
    """Raised when the hosting service refuses the credentials. Always fatal."""


class RateLimitedError(RemoteError):
    """Raised when the hosting service rate limit is exhausted."""


class NetworkError(RemoteError):
    """Raised for transport failures and 5xx responses after retries."""


class ConflictError(RemoteError):
    """Raised when a ref update is rejected (e.g. not a fast forward)."""


class DuplicateTagError(RemoteError):
    """Raised when a release tag already exists on the remote."""


class InvalidTagNameError(SchemaPubDomainError):
    """Raised when a computed tag violates the hosting service naming rules."""


class SchemaParseError(SchemaPubDomainError):
    """Raised when a schema snapshot cannot be parsed."""


class ArtifactValidationError(SchemaPubDomainError):
    """Raised for malformed artifact sets (duplicate or empty paths)."""


class BlobUploadError(SchemaPubDomainError):
    """Raised when no changed artifact could be uploaded."""


class PublishCancelledError(SchemaPubDomainError):
    """Raised when a publish is cancelled before the branch ref moved."""
