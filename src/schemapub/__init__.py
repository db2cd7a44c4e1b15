"""
schemapub

Incremental publish and semantic-versioning engine for generated system
artifacts hosted in a Git repository.
"""

__version__ = "0.1.0"

from .core.config import PublishSettings, RetryPolicy, read_settings
from .core.hashing import blob_hash
from .core.version import BumpType, VersionPolicy, sanitize_version
from .domain.results import PublishResult, PublishStatus
from .models import Artifact, Change, ChangeCategory, ChangeKind, RepositoryRef
from .publish import (
    ChangeDetector,
    ObjectGraphBuilder,
    PublishOrchestrator,
    collect_artifacts,
    publish,
    publish_sync,
)
from .schema import SchemaDiffer, diff_schemas

__all__ = [
    "__version__",
    "Artifact",
    "Change",
    "ChangeCategory",
    "ChangeKind",
    "RepositoryRef",
    "PublishSettings",
    "RetryPolicy",
    "read_settings",
    "blob_hash",
    "BumpType",
    "VersionPolicy",
    "sanitize_version",
    "PublishResult",
    "PublishStatus",
    "ChangeDetector",
    "ObjectGraphBuilder",
    "PublishOrchestrator",
    "collect_artifacts",
    "publish",
    "publish_sync",
    "SchemaDiffer",
    "diff_schemas",
]
