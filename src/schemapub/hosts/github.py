"""
GitHub Repository Host

Async client for the GitHub REST API (contents, Git data, tags, releases)
implementing the RepositoryHost contract:
- Retries transient failures (5xx, 429, secondary rate limits, transport
  errors) with exponential backoff
- Fails fast on other 4xx
- Maps HTTP errors onto the domain error taxonomy

Usage:
    async with GitHubHost(token) as host:
        sha = await host.get_ref(repo, "main")
"""

import asyncio
import base64
import logging
from typing import Any
from urllib.parse import quote

import httpx

from schemapub.core.config import RetryPolicy
from schemapub.domain.contracts import RemoteContent, TreeEntry
from schemapub.domain.errors import (
    AuthRequiredError,
    ConflictError,
    DuplicateTagError,
    NetworkError,
    NotFoundError,
    RateLimitedError,
    RemoteError,
)
from schemapub.models import RepositoryRef

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.github.com"
API_VERSION = "2022-11-28"
USER_AGENT = "schemapub"
TAGS_PAGE_SIZE = 100


class GitHubHost:
    """
    Async GitHub REST client.

    Attributes:
        base_url: API root (GitHub Enterprise hosts use ``https://host/api/v3``)
        timeout_seconds: Per-request timeout
        retry_policy: Backoff policy for transient failures
    """

    def __init__(
        self,
        token: str | None,
        *,
        base_url: str = DEFAULT_BASE_URL,
        timeout_seconds: float = 30.0,
        retry_policy: RetryPolicy | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize GitHub host.

        Args:
            token: Personal access / app token (None for anonymous reads)
            base_url: API root URL
            timeout_seconds: Per-request timeout in seconds
            retry_policy: Retry/backoff policy (default: 3 retries, 1s base)
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.retry_policy = retry_policy or RetryPolicy()

        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": API_VERSION,
            "User-Agent": USER_AGENT,
        }
        if token:
            headers["Authorization"] = f"Bearer {token}"

        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            headers=headers,
            timeout=httpx.Timeout(timeout_seconds),
            transport=transport,
            follow_redirects=True,
        )

    async def __aenter__(self) -> "GitHubHost":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def close(self) -> None:
        await self.client.aclose()

    # ------------------------------------------------------------------
    # Request plumbing
    # ------------------------------------------------------------------

    async def _request(
        self,
        method: str,
        url: str,
        *,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> httpx.Response:
        """Send one request, retrying transient failures

        Raises:
            RemoteError subclass matching the final failure
        """
        policy = self.retry_policy
        attempt = 0

        while True:
            retry_after: float | None = None
            try:
                response = await self.client.request(method, url, json=json, params=params)
            except httpx.TransportError as e:
                error: RemoteError = NetworkError(
                    f"{method} {url} failed: {e.__class__.__name__}: {e}", code="network_error"
                )
            else:
                if response.is_success:
                    return response
                error = _error_for_response(method, url, response)
                if not isinstance(error, (NetworkError, RateLimitedError)):
                    raise error
                retry_after = _retry_after_seconds(response)

            if attempt >= policy.max_retries:
                raise error

            delay = retry_after if retry_after is not None else policy.delay_for(attempt)
            delay = min(delay, policy.max_backoff_seconds)
            attempt += 1
            logger.warning(
                "%s (attempt %d/%d), retrying in %.2fs",
                error,
                attempt,
                policy.max_retries,
                delay,
            )
            await asyncio.sleep(delay)

    @staticmethod
    def _repo_path(repo: RepositoryRef) -> str:
        return f"/repos/{quote(repo.owner, safe='')}/{quote(repo.name, safe='')}"

    # ------------------------------------------------------------------
    # RepositoryHost
    # ------------------------------------------------------------------

    async def get_content(self, repo: RepositoryRef, path: str, ref: str) -> RemoteContent:
        response = await self._request(
            "GET",
            f"{self._repo_path(repo)}/contents/{quote(path)}",
            params={"ref": ref},
        )
        data = response.json()
        if isinstance(data, list) or data.get("type") not in (None, "file"):
            raise RemoteError(f"{path} is not a file on {ref}", code="not_a_file")

        content: bytes | None = None
        if data.get("encoding") == "base64" and data.get("content"):
            content = base64.b64decode(data["content"])
        return RemoteContent(path=path, sha=data["sha"], content=content)

    async def get_ref(self, repo: RepositoryRef, branch: str) -> str:
        try:
            response = await self._request(
                "GET", f"{self._repo_path(repo)}/git/ref/heads/{quote(branch)}"
            )
        except ConflictError as e:
            # GitHub answers 409 for refs of a repository with no commits at all
            raise NotFoundError(str(e), code="repository_empty", status_code=409) from e
        return response.json()["object"]["sha"]

    async def get_commit_tree(self, repo: RepositoryRef, commit_sha: str) -> str:
        response = await self._request("GET", f"{self._repo_path(repo)}/git/commits/{commit_sha}")
        return response.json()["tree"]["sha"]

    async def get_blob(self, repo: RepositoryRef, blob_sha: str) -> bytes:
        """Fetch raw blob bytes; works for files the contents API won't inline"""
        response = await self._request("GET", f"{self._repo_path(repo)}/git/blobs/{blob_sha}")
        return base64.b64decode(response.json()["content"])

    async def create_blob(self, repo: RepositoryRef, content: bytes) -> str:
        response = await self._request(
            "POST",
            f"{self._repo_path(repo)}/git/blobs",
            json={"content": base64.b64encode(content).decode("ascii"), "encoding": "base64"},
        )
        return response.json()["sha"]

    async def create_tree(
        self,
        repo: RepositoryRef,
        entries: list[TreeEntry],
        base_tree: str | None = None,
    ) -> str:
        payload: dict[str, Any] = {"tree": [entry.as_payload() for entry in entries]}
        if base_tree is not None:
            payload["base_tree"] = base_tree
        response = await self._request("POST", f"{self._repo_path(repo)}/git/trees", json=payload)
        return response.json()["sha"]

    async def create_commit(
        self,
        repo: RepositoryRef,
        message: str,
        tree_sha: str,
        parents: list[str],
    ) -> str:
        response = await self._request(
            "POST",
            f"{self._repo_path(repo)}/git/commits",
            json={"message": message, "tree": tree_sha, "parents": list(parents)},
        )
        return response.json()["sha"]

    async def update_ref(self, repo: RepositoryRef, branch: str, commit_sha: str) -> None:
        await self._request(
            "PATCH",
            f"{self._repo_path(repo)}/git/refs/heads/{quote(branch)}",
            json={"sha": commit_sha, "force": False},
        )

    async def create_ref(self, repo: RepositoryRef, branch: str, commit_sha: str) -> None:
        await self._request(
            "POST",
            f"{self._repo_path(repo)}/git/refs",
            json={"ref": f"refs/heads/{branch}", "sha": commit_sha},
        )

    async def list_tags(self, repo: RepositoryRef) -> list[str]:
        names: list[str] = []
        page = 1
        while True:
            response = await self._request(
                "GET",
                f"{self._repo_path(repo)}/tags",
                params={"per_page": TAGS_PAGE_SIZE, "page": page},
            )
            batch = response.json()
            names.extend(tag["name"] for tag in batch)
            if len(batch) < TAGS_PAGE_SIZE:
                return names
            page += 1

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
    ) -> str:
        try:
            response = await self._request(
                "POST",
                f"{self._repo_path(repo)}/releases",
                json={
                    "tag_name": tag_name,
                    "target_commitish": target_commitish,
                    "name": name,
                    "body": body,
                    "draft": draft,
                    "prerelease": prerelease,
                    "generate_release_notes": False,
                },
            )
        except RemoteError as e:
            if e.status_code == 422 and "already_exists" in e.code:
                raise DuplicateTagError(
                    f"Release tag {tag_name} already exists",
                    code="duplicate_tag",
                    status_code=422,
                ) from e
            raise
        return response.json()["html_url"]

    async def put_file(
        self,
        repo: RepositoryRef,
        *,
        path: str,
        content: bytes,
        message: str,
        branch: str,
        sha: str | None = None,
    ) -> str:
        payload: dict[str, Any] = {
            "message": message,
            "content": base64.b64encode(content).decode("ascii"),
            "branch": branch,
        }
        if sha:
            payload["sha"] = sha
        response = await self._request(
            "PUT", f"{self._repo_path(repo)}/contents/{quote(path)}", json=payload
        )
        return response.json()["commit"]["sha"]


def _error_for_response(method: str, url: str, response: httpx.Response) -> RemoteError:
    """Translate a non-2xx response into a domain error"""
    status = response.status_code
    detail = _error_message(response)
    message = f"{method} {url} returned {status}: {detail}"

    if status == 401:
        return AuthRequiredError(message, code="auth_required", status_code=status)
    if status == 429 or (status == 403 and _is_rate_limited(response)):
        return RateLimitedError(message, code="rate_limited", status_code=status)
    if status == 403:
        return AuthRequiredError(message, code="forbidden", status_code=status)
    if status == 404:
        return NotFoundError(message, code="not_found", status_code=status)
    if status == 409:
        return ConflictError(message, code="conflict", status_code=status)
    if status == 422:
        codes = _validation_codes(response)
        code = "validation_failed" + "".join(f":{c}" for c in codes)
        if "not a fast forward" in detail.lower():
            return ConflictError(message, code="not_fast_forward", status_code=status)
        return RemoteError(message, code=code, status_code=status)
    if status >= 500:
        return NetworkError(message, code="server_error", status_code=status)
    return RemoteError(message, code="http_error", status_code=status)


def _error_message(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return response.text[:200] or response.reason_phrase
    if isinstance(data, dict) and data.get("message"):
        return str(data["message"])
    return response.reason_phrase


def _validation_codes(response: httpx.Response) -> list[str]:
    try:
        errors = response.json().get("errors", [])
    except (ValueError, AttributeError):
        return []
    return [str(err.get("code")) for err in errors if isinstance(err, dict) and err.get("code")]


def _is_rate_limited(response: httpx.Response) -> bool:
    if response.headers.get("x-ratelimit-remaining") == "0":
        return True
    return "rate limit" in _error_message(response).lower()


def _retry_after_seconds(response: httpx.Response) -> float | None:
    value = response.headers.get("retry-after")
    if value is None:
        return None
    try:
        return max(float(value), 0.0)
    except ValueError:
        return None
