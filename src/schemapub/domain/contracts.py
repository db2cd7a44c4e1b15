"""Repository host contract used by change detection and commit building.

Any Git-compatible hosting service can be plugged in by implementing
:class:`RepositoryHost`; the detector, graph builder and orchestrator only
ever talk to this protocol.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from schemapub.models import RepositoryRef

FILE_MODE = "100644"


@dataclass(slots=True, frozen=True)
class RemoteContent:
    """A file as reported by the host: its blob hash and (when small enough) its bytes."""

    path: str
    sha: str
    content: bytes | None = None


@dataclass(slots=True, frozen=True)
class TreeEntry:
    """One entry of a tree being created."""

    path: str
    sha: str
    mode: str = FILE_MODE
    type: str = "blob"

    def as_payload(self) -> dict[str, str]:
        return {"path": self.path, "mode": self.mode, "type": self.type, "sha": self.sha}


@runtime_checkable
class RepositoryHost(Protocol):
    """Remote object store operations needed to publish.

    Implementations raise the errors of :mod:`schemapub.domain.errors`:
    ``NotFoundError`` for missing paths/refs, ``AuthRequiredError`` for
    rejected credentials, ``RateLimitedError``/``NetworkError`` once their own
    retries are exhausted.
    """

    async def get_content(self, repo: RepositoryRef, path: str, ref: str) -> RemoteContent: ...

    async def get_ref(self, repo: RepositoryRef, branch: str) -> str: ...

    async def get_commit_tree(self, repo: RepositoryRef, commit_sha: str) -> str: ...

    async def get_blob(self, repo: RepositoryRef, blob_sha: str) -> bytes: ...

    async def create_blob(self, repo: RepositoryRef, content: bytes) -> str: ...

    async def create_tree(
        self,
        repo: RepositoryRef,
        entries: list[TreeEntry],
        base_tree: str | None = None,
    ) -> str: ...

    async def create_commit(
        self,
        repo: RepositoryRef,
        message: str,
        tree_sha: str,
        parents: list[str],
    ) -> str: ...

    async def update_ref(self, repo: RepositoryRef, branch: str, commit_sha: str) -> None: ...

    async def create_ref(self, repo: RepositoryRef, branch: str, commit_sha: str) -> None: ...

    async def list_tags(self, repo: RepositoryRef) -> list[str]: ...

    async def create_release(
        self,
        repo: RepositoryRef,
        *,
        tag_name: str,
        target_commitish: str,
        name: str,
        body: str,
        draft: bool = False,
        prerelease: bool = False,
    ) -> str: ...

    async def put_file(
        self,
        repo: RepositoryRef,
        *,
        path: str,
        content: bytes,
        message: str,
        branch: str,
        sha: str | None = None,
    ) -> str: ...
