"""
Release Workflow Descriptor

Fixed GitHub Actions workflow that packages the published system when a
release is created. ``ensure_workflow_file`` keeps the repository copy
byte-identical to the template.
"""

import logging

from schemapub.core.hashing import blob_hash
from schemapub.domain.contracts import RepositoryHost
from schemapub.domain.errors import NotFoundError
from schemapub.models import Artifact, RepositoryRef

logger = logging.getLogger(__name__)

DEFAULT_WORKFLOW_PATH = ".github/workflows/main.yml"

WORKFLOW_TEMPLATE = """\
name: Release Creation

on:
  release:
    types: [published]

jobs:
  build:
    runs-on: ubuntu-latest
    permissions:
      contents: write
    steps:
      - uses: actions/checkout@v4

      - name: Substitute manifest and download links for versioned ones
        id: sub_manifest_link_version
        uses: microsoft/variable-substitution@v1
        with:
          files: "system.json"
        env:
          version: ${{ github.event.release.tag_name }}
          url: https://github.com/${{ github.repository }}
          manifest: https://github.com/${{ github.repository }}/releases/latest/download/system.json
          download: https://github.com/${{ github.repository }}/releases/download/${{ github.event.release.tag_name }}/system.zip

      - name: Create system archive
        run: zip -r ./system.zip . -x ".git/*" ".github/*"

      - name: Attach manifest and archive to release
        uses: ncipollo/release-action@v1
        with:
          allowUpdates: true
          name: ${{ github.event.release.name }}
          token: ${{ secrets.GITHUB_TOKEN }}
          artifacts: "./system.json, ./system.zip"
          tag: ${{ github.event.release.tag_name }}
          body: ${{ github.event.release.body }}
          omitBodyDuringUpdate: true
"""


def workflow_bytes() -> bytes:
    return WORKFLOW_TEMPLATE.encode("utf-8")


def workflow_artifact(path: str = DEFAULT_WORKFLOW_PATH) -> Artifact:
    """Workflow as an artifact, for branches that don't exist yet"""
    return Artifact(path=path, content=workflow_bytes())


async def ensure_workflow_file(
    host: RepositoryHost,
    repo: RepositoryRef,
    branch: str,
    path: str = DEFAULT_WORKFLOW_PATH,
) -> bool:
    """Create or update the workflow file when it differs from the template

    Returns:
        True if the remote file was written, False if already current

    Raises:
        RemoteError: Lookup (other than not-found) or write failed
    """
    desired = workflow_bytes()
    existing_sha: str | None = None

    try:
        existing = await host.get_content(repo, path, branch)
    except NotFoundError:
        logger.info("Workflow file %s does not exist, creating it", path)
        message = "Add GitHub workflow for automated system releases"
    else:
        if existing.sha == blob_hash(desired):
            logger.debug("Workflow file %s is up to date", path)
            return False
        existing_sha = existing.sha
        logger.info("Workflow file %s differs from template, updating it", path)
        message = "Update GitHub workflow for automated system releases"

    await host.put_file(
        repo,
        path=path,
        content=desired,
        message=message,
        branch=branch,
        sha=existing_sha,
    )
    return True
