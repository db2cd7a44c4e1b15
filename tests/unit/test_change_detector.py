"""
Unit tests for ChangeDetector

Tests hash comparison against the remote branch and the fail-open policy
for lookups that error.
"""

import pytest

from schemapub.core.hashing import blob_hash
from schemapub.domain.errors import (
    ArtifactValidationError,
    AuthRequiredError,
    NetworkError,
    RateLimitedError,
)
from schemapub.models import Artifact
from schemapub.publish.detector import ChangeDetector


class TestChangeDetector:
    async def test_unchanged_files_are_skipped(self, host, repo, artifacts) -> None:
        host.seed("main", {a.path: a.content for a in artifacts})

        records = await ChangeDetector(host).detect(artifacts, repo, "main")

        assert [r.needs_commit for r in records] == [False, False, False]

    async def test_changed_and_new_files_need_commit(self, host, repo, artifacts) -> None:
        host.seed("main", {"system.json": artifacts[0].content, "scripts/hero.js": b"old\n"})

        records = await ChangeDetector(host).detect(artifacts, repo, "main")

        assert {r.path: r.needs_commit for r in records} == {
            "system.json": False,
            "scripts/hero.js": True,
            "styles/hero.css": True,
        }

    async def test_records_keep_input_order_and_local_hash(self, host, repo, artifacts) -> None:
        records = await ChangeDetector(host, max_concurrency=1).detect(artifacts, repo, "main")

        assert [r.path for r in records] == [a.path for a in artifacts]
        assert all(r.local_hash == blob_hash(r.content) for r in records)

    async def test_missing_branch_means_everything_is_new(self, host, repo, artifacts) -> None:
        records = await ChangeDetector(host).detect(artifacts, repo, "gh-pages")

        assert all(r.needs_commit and r.warning is None for r in records)

    @pytest.mark.parametrize(
        "error",
        [
            NetworkError("boom", code="server_error", status_code=502),
            RateLimitedError("slow down", code="rate_limited", status_code=429),
        ],
    )
    async def test_lookup_failure_assumes_changed(self, host, repo, artifacts, error) -> None:
        host.seed("main", {a.path: a.content for a in artifacts})
        host.content_failures["scripts/hero.js"] = error

        records = await ChangeDetector(host).detect(artifacts, repo, "main")

        by_path = {r.path: r for r in records}
        assert by_path["scripts/hero.js"].needs_commit
        assert "assuming changed" in by_path["scripts/hero.js"].warning
        assert not by_path["system.json"].needs_commit

    async def test_auth_failure_aborts(self, host, repo, artifacts) -> None:
        host.content_failures["styles/hero.css"] = AuthRequiredError(
            "bad credentials", code="auth_required", status_code=401
        )

        with pytest.raises(AuthRequiredError):
            await ChangeDetector(host).detect(artifacts, repo, "main")

    async def test_duplicate_paths_rejected(self, host, repo) -> None:
        duplicated = [
            Artifact(path="a.txt", content=b"1"),
            Artifact(path="b.txt", content=b"2"),
            Artifact(path="/a.txt", content=b"3"),
        ]

        with pytest.raises(ArtifactValidationError) as exc_info:
            await ChangeDetector(host).detect(duplicated, repo, "main")

        assert exc_info.value.code == "duplicate_paths"
        assert host.calls["get_content"] == 0

    async def test_empty_artifact_set(self, host, repo) -> None:
        assert await ChangeDetector(host).detect([], repo, "main") == []


class TestArtifact:
    def test_path_normalized(self) -> None:
        assert Artifact(path="\\scripts\\hero.js", content=b"").path == "scripts/hero.js"

    @pytest.mark.parametrize("path", ["", "/", "scripts/"])
    def test_invalid_paths(self, path: str) -> None:
        with pytest.raises(ValueError):
            Artifact(path=path, content=b"")
