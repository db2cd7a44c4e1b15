"""
Change Detector

Partitions artifacts into unchanged / needs-commit by comparing their local
Git blob hash with the sha the host reports for the same path on the
branch. Read-only and safely retryable.
"""

import logging
from collections.abc import Sequence

from schemapub.core.hashing import blob_hash
from schemapub.domain.contracts import RepositoryHost
from schemapub.domain.errors import (
    ArtifactValidationError,
    AuthRequiredError,
    NotFoundError,
    RemoteError,
)
from schemapub.models import Artifact, BlobRecord, RepositoryRef

from .concurrency import gather_bounded

logger = logging.getLogger(__name__)

DEFAULT_MAX_CONCURRENCY = 8


def ensure_unique_paths(artifacts: Sequence[Artifact]) -> None:
    """Raise ArtifactValidationError if two artifacts share a path"""
    seen: set[str] = set()
    duplicates: list[str] = []
    for artifact in artifacts:
        if artifact.path in seen:
            duplicates.append(artifact.path)
        seen.add(artifact.path)
    if duplicates:
        raise ArtifactValidationError(
            f"Duplicate artifact paths: {', '.join(sorted(set(duplicates)))}",
            code="duplicate_paths",
        )


class ChangeDetector:
    """Finds which artifacts differ from the remote branch"""

    def __init__(self, host: RepositoryHost, max_concurrency: int = DEFAULT_MAX_CONCURRENCY) -> None:
        self.host = host
        self.max_concurrency = max_concurrency

    async def detect(
        self, artifacts: Sequence[Artifact], repo: RepositoryRef, branch: str
    ) -> list[BlobRecord]:
        """Compare every artifact with the remote branch

        Args:
            artifacts: Candidate artifact set (unique paths)
            repo: Target repository
            branch: Branch to compare against

        Returns:
            One BlobRecord per artifact, in input order

        Raises:
            ArtifactValidationError: Duplicate paths
            AuthRequiredError: Credentials rejected (aborts detection)
        """
        ensure_unique_paths(artifacts)
        logger.info("Checking %d files for changes on %s@%s", len(artifacts), repo.full_name, branch)

        records = await gather_bounded(
            [lambda a=artifact: self._check(a, repo, branch) for artifact in artifacts],
            self.max_concurrency,
        )

        changed = sum(1 for record in records if record.needs_commit)
        logger.info("Change summary: %d/%d files need updating", changed, len(records))
        return records

    async def _check(self, artifact: Artifact, repo: RepositoryRef, branch: str) -> BlobRecord:
        local_hash = blob_hash(artifact.content)

        def _record(needs_commit: bool, warning: str | None = None) -> BlobRecord:
            return BlobRecord(
                path=artifact.path,
                content=artifact.content,
                local_hash=local_hash,
                needs_commit=needs_commit,
                warning=warning,
            )

        try:
            remote = await self.host.get_content(repo, artifact.path, branch)
        except NotFoundError:
            logger.debug("%s - new file", artifact.path)
            return _record(True)
        except AuthRequiredError:
            raise
        except RemoteError as e:
            warning = f"{artifact.path}: cannot check remote state ({e}), assuming changed"
            logger.warning(warning)
            return _record(True, warning)

        if remote.sha == local_hash:
            logger.debug("%s - no changes needed", artifact.path)
            return _record(False)

        logger.debug("%s - content changed", artifact.path)
        return _record(True)
