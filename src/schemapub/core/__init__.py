"""
Core Infrastructure

Foundational, host-agnostic infrastructure for schemapub:
- Hashing: Git object ids for content comparison
- Version: Semantic versioning, bump policy and tag validation
- Config: Workspace publish settings
"""

from .config import (
    PublishSettings,
    RetryPolicy,
    get_config_file_path,
    get_schemapub_dir,
    read_settings,
    write_settings,
)
from .hashing import blob_hash, git_object_hash
from .version import (
    BumpType,
    SemanticVersion,
    VersionPolicy,
    get_next_version,
    is_valid_tag_name,
    latest_version,
    parse_semantic_version,
    sanitize_version,
    validate_tag_name,
)

__all__ = [
    # Config
    "PublishSettings",
    "RetryPolicy",
    "get_config_file_path",
    "get_schemapub_dir",
    "read_settings",
    "write_settings",
    # Hashing
    "blob_hash",
    "git_object_hash",
    # Version
    "BumpType",
    "SemanticVersion",
    "VersionPolicy",
    "get_next_version",
    "is_valid_tag_name",
    "latest_version",
    "parse_semantic_version",
    "sanitize_version",
    "validate_tag_name",
]
