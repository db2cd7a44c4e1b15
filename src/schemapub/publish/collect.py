"""Collect generated output files into publishable artifacts."""

from fnmatch import fnmatch
from pathlib import Path

from schemapub.models import Artifact

SKIP_DIRECTORIES = frozenset({"node_modules", ".git", ".vscode", "__pycache__", ".schemapub"})
SKIP_FILE_PATTERNS = (".DS_Store", "Thumbs.db", "*.log", "*.tmp")


def _should_skip(relative: Path) -> bool:
    if any(part in SKIP_DIRECTORIES for part in relative.parts[:-1]):
        return True
    return any(fnmatch(relative.name, pattern) for pattern in SKIP_FILE_PATTERNS)


def collect_artifacts(root: Path) -> list[Artifact]:
    """Read every file under ``root`` as an Artifact, sorted by path

    Paths are relative to ``root`` with forward slashes; editor, VCS and
    build-tool clutter is skipped.

    Raises:
        FileNotFoundError: If ``root`` is not a directory
    """
    if not root.is_dir():
        raise FileNotFoundError(f"Output directory not found: {root}")

    artifacts = []
    for path in sorted(root.rglob("*")):
        if not path.is_file():
            continue
        relative = path.relative_to(root)
        if _should_skip(relative):
            continue
        artifacts.append(Artifact(path=relative.as_posix(), content=path.read_bytes()))
    return artifacts
