"""
Publish Settings

Workspace-level configuration stored in ``.schemapub/config.json``.
Keys are camelCase on disk (``defaultBranch``) and snake_case in Python.
"""

import json
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from schemapub.core.version import BumpType

SCHEMAPUB_DIR = ".schemapub"
CONFIG_FILENAME = "config.json"


class RetryPolicy(BaseModel):
    """Exponential backoff for transient remote failures (5xx, 429, network)"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    max_retries: int = Field(3, ge=0)
    backoff_seconds: float = Field(1.0, ge=0)
    max_backoff_seconds: float = Field(30.0, ge=0)

    def delay_for(self, attempt: int) -> float:
        """Delay before retry number ``attempt`` (0-based)"""
        return min(self.backoff_seconds * (2**attempt), self.max_backoff_seconds)


class PublishSettings(BaseModel):
    """Settings for publishing generated artifacts to a repository"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    default_branch: str = "main"
    commit_message: str = "Update system files"
    schema_path: str = "system.schema.json"
    tag_releases: bool = True
    generate_changelog: bool = True
    ensure_workflow: bool = True
    workflow_path: str = ".github/workflows/main.yml"
    release_title: str | None = None
    seed_branch: str | None = None  # copied from when default_branch is missing
    max_concurrency: int = Field(8, ge=1)
    timeout_seconds: float = Field(30.0, gt=0)
    retry: RetryPolicy = Field(default_factory=RetryPolicy)
    system_change_bump: BumpType = BumpType.MINOR


def get_schemapub_dir(workspace_path: Path) -> Path:
    """Get the .schemapub directory path"""
    return workspace_path / SCHEMAPUB_DIR


def get_config_file_path(workspace_path: Path) -> Path:
    """Get the settings file path"""
    return get_schemapub_dir(workspace_path) / CONFIG_FILENAME


def read_settings(workspace_path: Path) -> PublishSettings:
    """Read workspace settings, returning defaults when no file exists

    Raises:
        ValueError: If the file exists but is not valid settings JSON
    """
    config_path = get_config_file_path(workspace_path)
    if not config_path.exists():
        return PublishSettings()

    with open(config_path, encoding="utf-8") as f:
        data = json.load(f)

    return PublishSettings.model_validate(data)


def write_settings(workspace_path: Path, settings: PublishSettings) -> Path:
    """Write workspace settings, creating .schemapub/ if needed"""
    config_path = get_config_file_path(workspace_path)
    config_path.parent.mkdir(parents=True, exist_ok=True)

    with open(config_path, "w", encoding="utf-8") as f:
        json.dump(settings.model_dump(mode="json", by_alias=True), f, indent=2)
        f.write("\n")

    return config_path
