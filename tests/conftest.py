import pytest

from schemapub.core.config import PublishSettings, RetryPolicy
from schemapub.models import Artifact, RepositoryRef
from tests.utils import InMemoryGitHost, prop, snapshot_text


@pytest.fixture
def temp_workspace(tmp_path):
    """Create a temporary workspace directory"""
    workspace = tmp_path / "workspace"
    workspace.mkdir()
    return workspace


@pytest.fixture
def repo():
    """Target repository handle"""
    return RepositoryRef(owner="acme", name="hero-system")


@pytest.fixture
def host():
    """Empty in-memory Git host"""
    return InMemoryGitHost()


@pytest.fixture
def settings():
    """Publish settings with no workflow management and no retry delays"""
    return PublishSettings(
        ensure_workflow=False,
        retry=RetryPolicy(max_retries=0, backoff_seconds=0),
    )


@pytest.fixture
def artifacts():
    """Generated output of a small system"""
    return [
        Artifact(path="system.json", content=b'{"id": "hero-system", "version": "1.0.0"}\n'),
        Artifact(path="scripts/hero.js", content=b"export class Hero {}\n"),
        Artifact(path="styles/hero.css", content=b".hero { color: red; }\n"),
    ]


@pytest.fixture
def base_schema():
    """Snapshot with a single hit-point resource"""
    return snapshot_text(prop("ResourceExp", "hp", max=10))
