"""
Publish Orchestrator

Coordinates one publish: resolves the latest release tag, diffs the schema
attached to it against the current schema, lands the changed artifacts as
a single commit and tags a release on top of it.

Nothing is tagged when the commit step finds no changed files, so
publishing twice in a row is a no-op the second time.
"""

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date

from schemapub.core.config import PublishSettings
from schemapub.core.version import BumpType, VersionPolicy, latest_version, validate_tag_name
from schemapub.domain.contracts import RepositoryHost
from schemapub.domain.errors import (
    AuthRequiredError,
    DuplicateTagError,
    NotFoundError,
    RemoteError,
)
from schemapub.domain.results import CommitResult, PublishResult, PublishStatus
from schemapub.models import Artifact, Change, ChangeCategory, ChangeKind, RepositoryRef
from schemapub.schema.differ import diff_schemas

from .detector import ChangeDetector
from .graph import ObjectGraphBuilder, check_cancelled
from .release_notes import generate_release_notes
from .workflow import ensure_workflow_file, workflow_artifact

logger = logging.getLogger(__name__)

NEW_SYSTEM_DESCRIPTION = "New system created"


@dataclass(slots=True)
class ReleasePlan:
    """Version decision for one publish, computed before any remote mutation"""

    version: str
    tag_name: str
    bump: BumpType
    changes: list[Change] = field(default_factory=list)
    previous_tag: str | None = None

    @property
    def first_release(self) -> bool:
        return self.previous_tag is None


class PublishOrchestrator:
    """Runs detect -> commit -> release against one repository host

    Attributes:
        host: Remote repository host
        settings: Publish settings (branch, paths, concurrency, policy)
        policy: Version policy built from ``settings.system_change_bump``
    """

    def __init__(self, host: RepositoryHost, settings: PublishSettings | None = None) -> None:
        self.host = host
        self.settings = settings or PublishSettings()
        self.policy = VersionPolicy(self.settings.system_change_bump)
        self.detector = ChangeDetector(host, self.settings.max_concurrency)
        self.builder = ObjectGraphBuilder(
            host, self.settings.max_concurrency, seed_branch=self.settings.seed_branch
        )

    async def plan_release(
        self,
        repo: RepositoryRef,
        schema_text: str,
        bump_type: BumpType | None = None,
    ) -> ReleasePlan:
        """Work out the changes and the next version without mutating anything

        Raises:
            InvalidTagNameError: The computed tag is not a valid Git ref name
            AuthRequiredError: Credentials rejected
        """
        tags = await self.host.list_tags(repo)
        found = latest_version(tags)
        previous_tag = found[0] if found else None

        previous_text = await self._schema_at(repo, previous_tag) if previous_tag else None
        if previous_text is None:
            logger.info("No previous schema found, treating as first release")
            changes = [
                Change(
                    kind=ChangeKind.ADDED,
                    category=ChangeCategory.SYSTEM,
                    description=NEW_SYSTEM_DESCRIPTION,
                )
            ]
            bump = BumpType(bump_type) if bump_type else BumpType.MINOR
        else:
            changes = diff_schemas(previous_text, schema_text)
            bump = BumpType(bump_type) if bump_type else self.policy.classify(changes)

        version = self.policy.next_version(changes, tags, bump)
        tag_name = validate_tag_name(f"v{version}")
        logger.info(
            "Next version %s (%s bump, %d changes since %s)",
            version,
            bump,
            len(changes),
            previous_tag or "nothing",
        )
        return ReleasePlan(
            version=version,
            tag_name=tag_name,
            bump=bump,
            changes=changes,
            previous_tag=previous_tag,
        )

    async def publish(
        self,
        artifacts: Sequence[Artifact],
        repo: RepositoryRef,
        branch: str | None,
        schema_text: str,
        *,
        bump_type: BumpType | None = None,
        cancel_event: asyncio.Event | None = None,
        release_date: date | None = None,
    ) -> PublishResult:
        """Publish artifacts and tag a release if anything changed

        Args:
            artifacts: Full current artifact set
            repo: Target repository
            branch: Target branch (None: ``settings.default_branch``)
            schema_text: Current schema snapshot (JSON)
            bump_type: Explicit bump, overriding change classification
            cancel_event: Set to abort before the branch is moved
            release_date: Date shown in the release notes (default: today)

        Returns:
            PublishResult; ``UP_TO_DATE`` when nothing changed

        Raises:
            InvalidTagNameError: Raised before any remote mutation
            AuthRequiredError: Credentials rejected
            BlobUploadError: No changed file could be uploaded
            ConflictError: Branch moved concurrently
            PublishCancelledError: Cancelled before the ref update
        """
        branch = branch or self.settings.default_branch
        plan = await self.plan_release(repo, schema_text, bump_type)

        commit, warnings = await self._land(artifacts, repo, branch, schema_text, cancel_event)
        if not commit.committed:
            logger.info("Nothing to publish, %s@%s is up to date", repo.full_name, branch)
            return PublishResult(status=PublishStatus.UP_TO_DATE, warnings=warnings)

        result = PublishResult(
            status=PublishStatus.UPDATED,
            changed_file_count=commit.changed_count,
            version=plan.version,
            tag_name=plan.tag_name,
            commit_sha=commit.commit_sha,
            changes=plan.changes,
            warnings=warnings,
        )
        if not self.settings.tag_releases:
            return result

        title = self.settings.release_title or repo.name
        body = generate_release_notes(
            title,
            repo,
            plan.tag_name,
            plan.changes,
            release_date or date.today(),
            include_changelog=self.settings.generate_changelog,
        )
        try:
            result.release_url = await self.host.create_release(
                repo,
                tag_name=plan.tag_name,
                target_commitish=commit.commit_sha,
                name=f"{title} v{plan.version}",
                body=body,
            )
        except DuplicateTagError:
            logger.warning("Tag %s already exists, files were updated without a release", plan.tag_name)
            result.status = PublishStatus.PUBLISHED_WITHOUT_RELEASE
            result.warnings.append(
                f"Release tag {plan.tag_name} already exists; files updated but no new release created"
            )
            return result

        result.status = PublishStatus.PUBLISHED
        logger.info("Published %s release %s", repo.full_name, result.release_url)
        return result

    async def update(
        self,
        artifacts: Sequence[Artifact],
        repo: RepositoryRef,
        branch: str | None = None,
        schema_text: str | None = None,
        *,
        cancel_event: asyncio.Event | None = None,
    ) -> PublishResult:
        """Commit changed artifacts without versioning or releasing"""
        branch = branch or self.settings.default_branch
        commit, warnings = await self._land(artifacts, repo, branch, schema_text, cancel_event)
        if not commit.committed:
            return PublishResult(status=PublishStatus.UP_TO_DATE, warnings=warnings)
        return PublishResult(
            status=PublishStatus.UPDATED,
            changed_file_count=commit.changed_count,
            commit_sha=commit.commit_sha,
            warnings=warnings,
        )

    async def _land(
        self,
        artifacts: Sequence[Artifact],
        repo: RepositoryRef,
        branch: str,
        schema_text: str | None,
        cancel_event: asyncio.Event | None,
    ) -> tuple[CommitResult, list[str]]:
        # The workflow write below moves the branch on its own
        check_cancelled(cancel_event)
        warnings: list[str] = []
        to_publish = list(artifacts)

        if schema_text is not None and not _has_path(to_publish, self.settings.schema_path):
            to_publish.append(
                Artifact(path=self.settings.schema_path, content=schema_text.encode("utf-8"))
            )

        if self.settings.ensure_workflow:
            warnings += await self._ensure_workflow(repo, branch, to_publish, cancel_event)

        records = await self.detector.detect(to_publish, repo, branch)
        warnings += [record.warning for record in records if record.warning]

        commit = await self.builder.commit(
            repo, branch, records, self.settings.commit_message, cancel_event=cancel_event
        )
        warnings += commit.warnings
        return commit, warnings

    async def _ensure_workflow(
        self,
        repo: RepositoryRef,
        branch: str,
        to_publish: list[Artifact],
        cancel_event: asyncio.Event | None,
    ) -> list[str]:
        path = self.settings.workflow_path
        if _has_path(to_publish, path):
            return []

        try:
            await self.host.get_ref(repo, branch)
        except NotFoundError:
            # Contents API needs an existing branch; ship it in the first commit instead
            to_publish.append(workflow_artifact(path))
            return []

        check_cancelled(cancel_event)
        try:
            await ensure_workflow_file(self.host, repo, branch, path)
        except AuthRequiredError:
            raise
        except RemoteError as e:
            logger.warning("Could not update workflow file %s: %s", path, e)
            return [f"{path}: workflow file not updated ({e})"]
        return []

    async def _schema_at(self, repo: RepositoryRef, tag: str) -> str | None:
        try:
            remote = await self.host.get_content(repo, self.settings.schema_path, tag)
        except NotFoundError:
            logger.info("Tag %s has no %s", tag, self.settings.schema_path)
            return None
        content = remote.content
        if content is None:
            # Contents API omits inline content for large files
            content = await self.host.get_blob(repo, remote.sha)
        return content.decode("utf-8", errors="replace")


def _has_path(artifacts: Sequence[Artifact], path: str) -> bool:
    return any(artifact.path == path for artifact in artifacts)


async def publish(
    artifacts: Sequence[Artifact],
    repo_ref: RepositoryRef,
    branch: str | None,
    schema_text: str,
    *,
    host: RepositoryHost | None = None,
    token: str | None = None,
    settings: PublishSettings | None = None,
    cancel_event: asyncio.Event | None = None,
) -> PublishResult:
    """Library entry point: publish ``artifacts`` to ``repo_ref``

    Pass either a ready ``host`` or a GitHub ``token``; in the latter case a
    GitHubHost is opened and closed around the call.

    Example:
        >>> result = await publish(artifacts, RepositoryRef.parse("me/my-system"),
        ...                        "main", schema_text, token=os.environ["GITHUB_TOKEN"])
        >>> result.status, result.version
        (<PublishStatus.PUBLISHED: 'published'>, '1.3.0')
    """
    settings = settings or PublishSettings()

    if host is not None:
        return await PublishOrchestrator(host, settings).publish(
            artifacts, repo_ref, branch, schema_text, cancel_event=cancel_event
        )

    if not token:
        raise ValueError("Either host or token is required")

    from schemapub.hosts.github import GitHubHost

    async with GitHubHost(
        token, timeout_seconds=settings.timeout_seconds, retry_policy=settings.retry
    ) as github:
        return await PublishOrchestrator(github, settings).publish(
            artifacts, repo_ref, branch, schema_text, cancel_event=cancel_event
        )


def publish_sync(
    artifacts: Sequence[Artifact],
    repo_ref: RepositoryRef,
    branch: str | None,
    schema_text: str,
    **kwargs,
) -> PublishResult:
    """Blocking wrapper around ``publish`` for non-async callers"""
    return asyncio.run(publish(artifacts, repo_ref, branch, schema_text, **kwargs))
