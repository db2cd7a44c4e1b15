"""
Object Graph Builder

Lands changed artifacts as one commit: uploads blobs for changed files only,
builds a tree on top of the branch tip's tree (unchanged files are inherited
by reference), creates the commit and moves the branch ref last.
"""

import asyncio
import logging
from collections.abc import Sequence

from schemapub.domain.contracts import RepositoryHost, TreeEntry
from schemapub.domain.errors import (
    AuthRequiredError,
    BlobUploadError,
    NotFoundError,
    PublishCancelledError,
    RemoteError,
)
from schemapub.domain.results import CommitResult
from schemapub.models import BlobRecord, RepositoryRef

from .concurrency import gather_bounded
from .detector import DEFAULT_MAX_CONCURRENCY

logger = logging.getLogger(__name__)

DEFAULT_COMMIT_MESSAGE = "Update system files"


class ObjectGraphBuilder:
    """Builds blob -> tree -> commit -> ref for a set of BlobRecords

    Attributes:
        host: Remote repository host
        max_concurrency: Parallel blob uploads
        seed_branch: Branch whose tip seeds a missing target branch
    """

    def __init__(
        self,
        host: RepositoryHost,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
        seed_branch: str | None = None,
    ) -> None:
        self.host = host
        self.max_concurrency = max_concurrency
        self.seed_branch = seed_branch

    async def commit(
        self,
        repo: RepositoryRef,
        branch: str,
        records: Sequence[BlobRecord],
        message: str = DEFAULT_COMMIT_MESSAGE,
        *,
        cancel_event: asyncio.Event | None = None,
    ) -> CommitResult:
        """Commit every record with ``needs_commit`` to ``branch``

        Returns ``committed=False`` without touching the remote when nothing
        needs committing. Blob upload failures are absorbed per file; any
        failure from tree creation onwards is fatal and leaves the branch
        where it was.

        Raises:
            BlobUploadError: Every changed file failed to upload
            AuthRequiredError: Credentials rejected
            PublishCancelledError: ``cancel_event`` set before the ref moved
        """
        to_commit = [record for record in records if record.needs_commit]
        if not to_commit:
            logger.info("No files need updating - all files are already up to date")
            return CommitResult(committed=False, changed_count=0)

        logger.info("Committing %d changed files out of %d total", len(to_commit), len(records))

        parent_sha, create_ref = await self._resolve_tip(repo, branch)
        base_tree = await self.host.get_commit_tree(repo, parent_sha) if parent_sha else None
        check_cancelled(cancel_event)

        uploads = await gather_bounded(
            [lambda r=record: self._upload(repo, r) for record in to_commit],
            self.max_concurrency,
        )

        entries: list[TreeEntry] = []
        skipped: list[str] = []
        warnings: list[str] = []
        for record, blob_sha, error in uploads:
            if blob_sha is None:
                skipped.append(record.path)
                warnings.append(f"{record.path}: blob upload failed ({error}), not committed")
            else:
                entries.append(TreeEntry(path=record.path, sha=blob_sha))

        if not entries:
            raise BlobUploadError(
                f"All {len(to_commit)} changed files failed to upload",
                code="blob_upload_failed",
            )
        check_cancelled(cancel_event)

        entries.sort(key=lambda entry: entry.path)
        logger.info("Creating tree with %d blobs, base_tree: %s", len(entries), base_tree or "none")
        tree_sha = await self.host.create_tree(repo, entries, base_tree)
        check_cancelled(cancel_event)

        commit_message = message
        if len(entries) != len(records):
            commit_message = f"{message} ({len(entries)}/{len(records)} files changed)"
        parents = [parent_sha] if parent_sha else []
        commit_sha = await self.host.create_commit(repo, commit_message, tree_sha, parents)
        check_cancelled(cancel_event)

        # Last mutating step: the branch only ever points at complete trees.
        if create_ref:
            await self.host.create_ref(repo, branch, commit_sha)
        else:
            await self.host.update_ref(repo, branch, commit_sha)
        logger.info("Branch %s now at %s", branch, commit_sha)

        return CommitResult(
            committed=True,
            changed_count=len(entries),
            commit_sha=commit_sha,
            tree_sha=tree_sha,
            skipped=skipped,
            warnings=warnings,
        )

    async def _resolve_tip(self, repo: RepositoryRef, branch: str) -> tuple[str | None, bool]:
        """Return ``(parent_commit, create_ref)`` for the branch

        A missing branch is bootstrapped: it is created rather than updated,
        seeded from ``seed_branch`` when that exists, else from no parent.
        """
        try:
            return await self.host.get_ref(repo, branch), False
        except NotFoundError:
            pass

        if self.seed_branch and self.seed_branch != branch:
            try:
                seed_sha = await self.host.get_ref(repo, self.seed_branch)
                logger.info("Branch %s missing, seeding from %s", branch, self.seed_branch)
                return seed_sha, True
            except NotFoundError:
                pass

        logger.info("Branch %s missing, creating it from scratch", branch)
        return None, True

    async def _upload(
        self, repo: RepositoryRef, record: BlobRecord
    ) -> tuple[BlobRecord, str | None, RemoteError | None]:
        try:
            return record, await self.host.create_blob(repo, record.content), None
        except AuthRequiredError:
            raise
        except RemoteError as e:
            logger.error("Failed to upload blob for %s: %s", record.path, e)
            return record, None, e


def check_cancelled(cancel_event: asyncio.Event | None) -> None:
    if cancel_event is not None and cancel_event.is_set():
        raise PublishCancelledError(
            "Publish cancelled before the branch was updated", code="cancelled"
        )
