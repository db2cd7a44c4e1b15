"""Domain contracts, errors and result envelopes."""

from .contracts import FILE_MODE, RemoteContent, RepositoryHost, TreeEntry
from .errors import (
    ArtifactValidationError,
    AuthRequiredError,
    BlobUploadError,
    ConflictError,
    DuplicateTagError,
    InvalidTagNameError,
    NetworkError,
    NotFoundError,
    PublishCancelledError,
    RateLimitedError,
    RemoteError,
    SchemaParseError,
    SchemaPubDomainError,
)
from .results import CommandResult, CommitResult, PublishResult, PublishStatus

__all__ = [
    "FILE_MODE",
    "RemoteContent",
    "RepositoryHost",
    "TreeEntry",
    "ArtifactValidationError",
    "AuthRequiredError",
    "BlobUploadError",
    "ConflictError",
    "DuplicateTagError",
    "InvalidTagNameError",
    "NetworkError",
    "NotFoundError",
    "PublishCancelledError",
    "RateLimitedError",
    "RemoteError",
    "SchemaParseError",
    "SchemaPubDomainError",
    "CommandResult",
    "CommitResult",
    "PublishResult",
    "PublishStatus",
]
