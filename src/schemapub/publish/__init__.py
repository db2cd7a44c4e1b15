"""
Publish Pipeline

Change detection, commit building and release orchestration:
- ChangeDetector: which artifacts differ from the remote branch
- ObjectGraphBuilder: blob -> tree -> commit -> ref for changed files
- PublishOrchestrator: version planning, commit and tagged release
"""

from .collect import collect_artifacts
from .detector import ChangeDetector, ensure_unique_paths
from .graph import DEFAULT_COMMIT_MESSAGE, ObjectGraphBuilder
from .orchestrator import PublishOrchestrator, ReleasePlan, publish, publish_sync
from .release_notes import generate_changelog_section, generate_release_notes
from .workflow import WORKFLOW_TEMPLATE, ensure_workflow_file

__all__ = [
    "collect_artifacts",
    "ChangeDetector",
    "ensure_unique_paths",
    "DEFAULT_COMMIT_MESSAGE",
    "ObjectGraphBuilder",
    "PublishOrchestrator",
    "ReleasePlan",
    "publish",
    "publish_sync",
    "generate_changelog_section",
    "generate_release_notes",
    "WORKFLOW_TEMPLATE",
    "ensure_workflow_file",
]
