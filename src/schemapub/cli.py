"""
Click-based CLI for schemapub.
"""

import asyncio
import json
import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from .core.config import PublishSettings, get_config_file_path, read_settings, write_settings
from .core.version import BumpType, VersionPolicy
from .domain.errors import SchemaPubDomainError
from .domain.results import CommandResult, PublishResult, PublishStatus
from .hosts.github import GitHubHost
from .models import Change, RepositoryRef
from .publish.collect import collect_artifacts
from .publish.orchestrator import PublishOrchestrator
from .schema.differ import diff_schemas

console = Console()
err_console = Console(stderr=True)

BUMP_CHOICES = click.Choice([b.value for b in BumpType])


@click.group()
@click.version_option(version="0.1.0", prog_name="schemapub")
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging")
def cli(verbose: bool) -> None:
    """schemapub CLI for publishing generated systems to GitHub"""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _create_host(token: str, settings: PublishSettings) -> GitHubHost:
    return GitHubHost(
        token, timeout_seconds=settings.timeout_seconds, retry_policy=settings.retry
    )


def _emit_json(result: CommandResult) -> None:
    click.echo(json.dumps(result.as_json_dict(), indent=2))


def _fail(message: str, json_output: bool, code: str = "error") -> None:
    if json_output:
        _emit_json(CommandResult(success=False, code=code, message=message))
    else:
        console.print(f"[red]✗ Error:[/red] {escape(message)}")
    sys.exit(1)


def _read_text(path: str | None) -> str | None:
    if path is None:
        return None
    return Path(path).read_text(encoding="utf-8")


def _print_changes(changes: list[Change]) -> None:
    if not changes:
        console.print("[green]No schema changes[/green]")
        return

    table = Table(title="Schema changes")
    table.add_column("Kind")
    table.add_column("Category")
    table.add_column("Description")
    table.add_column("Details", style="dim")
    for change in changes:
        table.add_row(
            change.kind, change.category, escape(change.description), escape(change.details or "")
        )
    console.print(table)


def _print_publish_result(result: PublishResult, repo: RepositoryRef, branch: str) -> None:
    if result.status is PublishStatus.UP_TO_DATE:
        console.print(f"[green]✓[/green] {repo.full_name}@{branch} is already up to date")
    else:
        console.print(
            f"[green]✓[/green] Committed {result.changed_file_count} file(s) to "
            f"{repo.full_name}@{branch} ({result.commit_sha})"
        )
    if result.status is PublishStatus.PUBLISHED:
        console.print(f"[green]✓[/green] Released [cyan]{result.tag_name}[/cyan]: {result.release_url}")
    elif result.status is PublishStatus.PUBLISHED_WITHOUT_RELEASE:
        console.print(f"[yellow]⚠️  Files updated, but release {result.tag_name} already exists[/yellow]")
    for warning in result.warnings:
        console.print(f"[yellow]⚠️  {escape(warning)}[/yellow]")


@cli.command()
@click.option("--force", is_flag=True, help="Overwrite an existing config file")
@click.argument("workspace", type=click.Path(exists=True), required=False, default=".")
def init(force: bool, workspace: str) -> None:
    """Write a default .schemapub/config.json"""
    try:
        workspace_path = Path(workspace).resolve()
        config_path = get_config_file_path(workspace_path)

        if config_path.exists() and not force:
            console.print(f"[yellow]Config already exists:[/yellow] {config_path}")
            return

        write_settings(workspace_path, PublishSettings())
        console.print(f"[green]✓[/green] Wrote {config_path}")

    except Exception as e:
        console.print(f"[red]✗[/red] Error initializing config: {e}")
        sys.exit(1)


@cli.command()
@click.option("--json", "json_output", is_flag=True, help="Output results as JSON")
@click.argument("old_schema", type=click.Path(exists=True, dir_okay=False))
@click.argument("new_schema", type=click.Path(exists=True, dir_okay=False))
def diff(json_output: bool, old_schema: str, new_schema: str) -> None:
    """Show schema changes between two snapshot files and the resulting bump

    Example:

        schemapub diff previous.schema.json system.schema.json
    """
    try:
        settings = read_settings(Path.cwd())
        changes = diff_schemas(_read_text(old_schema) or "", _read_text(new_schema) or "")
        bump = VersionPolicy(settings.system_change_bump).classify(changes)

        if json_output:
            _emit_json(
                CommandResult(
                    success=True,
                    code="diff",
                    message=f"{len(changes)} change(s)",
                    data={
                        "bump": str(bump),
                        "changes": [c.model_dump(mode="json", exclude_none=True) for c in changes],
                    },
                )
            )
            return

        _print_changes(changes)
        console.print(f"Bump: [cyan]{bump}[/cyan]")

    except Exception as e:
        _fail(str(e), json_output)


@cli.command(name="next-version")
@click.option("--tag", "tags", multiple=True, help="Existing tag name (repeatable)")
@click.option("--old", "old_schema", type=click.Path(exists=True, dir_okay=False))
@click.option("--bump", type=BUMP_CHOICES, help="Force a bump instead of classifying")
@click.option("--json", "json_output", is_flag=True, help="Output results as JSON")
@click.argument("new_schema", type=click.Path(exists=True, dir_okay=False))
def next_version(
    tags: tuple[str, ...],
    old_schema: str | None,
    bump: str | None,
    json_output: bool,
    new_schema: str,
) -> None:
    """Print the version the next release would get

    Example:

        schemapub next-version --tag v1.2.3 --old old.json system.schema.json
    """
    try:
        settings = read_settings(Path.cwd())
        policy = VersionPolicy(settings.system_change_bump)
        old_text = _read_text(old_schema)

        if old_text is None:
            changes: list[Change] = []
            bump_type = BumpType(bump) if bump else BumpType.MINOR
        else:
            changes = diff_schemas(old_text, _read_text(new_schema) or "")
            bump_type = BumpType(bump) if bump else policy.classify(changes)

        version = policy.next_version(changes, tags, bump_type)

        if json_output:
            _emit_json(
                CommandResult(
                    success=True,
                    code="next_version",
                    message=version,
                    data={"version": version, "tag": f"v{version}", "bump": str(bump_type)},
                )
            )
            return

        click.echo(version)

    except Exception as e:
        _fail(str(e), json_output)


@cli.command()
@click.option("--repo", "repo_name", required=True, help="Target repository (owner/name)")
@click.option("--schema", "schema_file", required=True, type=click.Path(exists=True, dir_okay=False))
@click.option("--branch", "-b", help="Target branch (default: config defaultBranch)")
@click.option("--bump", type=BUMP_CHOICES, help="Force a bump instead of classifying")
@click.option("--token", envvar="GITHUB_TOKEN", help="GitHub token (default: $GITHUB_TOKEN)")
@click.option("--json", "json_output", is_flag=True, help="Output results as JSON")
@click.argument("output_dir", type=click.Path(exists=True, file_okay=False))
def publish(
    repo_name: str,
    schema_file: str,
    branch: str | None,
    bump: str | None,
    token: str | None,
    json_output: bool,
    output_dir: str,
) -> None:
    """Publish generated files and create a versioned release

    Example:

        schemapub publish out/ --repo me/my-system --schema system.schema.json
    """
    _run_upload(
        output_dir,
        repo_name,
        schema_file,
        branch,
        token,
        json_output,
        release=True,
        bump=BumpType(bump) if bump else None,
    )


@cli.command()
@click.option("--repo", "repo_name", required=True, help="Target repository (owner/name)")
@click.option("--schema", "schema_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--branch", "-b", help="Target branch (default: config defaultBranch)")
@click.option("--token", envvar="GITHUB_TOKEN", help="GitHub token (default: $GITHUB_TOKEN)")
@click.option("--json", "json_output", is_flag=True, help="Output results as JSON")
@click.argument("output_dir", type=click.Path(exists=True, file_okay=False))
def update(
    repo_name: str,
    schema_file: str | None,
    branch: str | None,
    token: str | None,
    json_output: bool,
    output_dir: str,
) -> None:
    """Commit changed files without creating a release"""
    _run_upload(output_dir, repo_name, schema_file, branch, token, json_output, release=False)


def _run_upload(
    output_dir: str,
    repo_name: str,
    schema_file: str | None,
    branch: str | None,
    token: str | None,
    json_output: bool,
    *,
    release: bool,
    bump: BumpType | None = None,
) -> None:
    try:
        if not token:
            _fail("GitHub token required (set GITHUB_TOKEN or pass --token)", json_output, "auth_required")

        settings = read_settings(Path.cwd())
        repo = RepositoryRef.parse(repo_name, default_branch=settings.default_branch)
        target_branch = branch or settings.default_branch
        artifacts = collect_artifacts(Path(output_dir))
        schema_text = _read_text(schema_file)

        async def _run() -> PublishResult:
            async with _create_host(token, settings) as host:
                orchestrator = PublishOrchestrator(host, settings)
                if release:
                    return await orchestrator.publish(
                        artifacts, repo, target_branch, schema_text or "", bump_type=bump
                    )
                return await orchestrator.update(artifacts, repo, target_branch, schema_text)

        if not json_output:
            console.print(f"Publishing {len(artifacts)} file(s) to [cyan]{repo.full_name}[/cyan]...")
        result = asyncio.run(_run())

        if json_output:
            _emit_json(
                CommandResult(
                    success=True,
                    code=str(result.status),
                    message=f"{result.changed_file_count} file(s) changed",
                    data=result.as_json_dict(),
                )
            )
            return

        _print_publish_result(result, repo, target_branch)

    except SchemaPubDomainError as e:
        _fail(e.message, json_output, e.code)
    except (FileNotFoundError, ValueError) as e:
        _fail(str(e), json_output)


if __name__ == "__main__":
    cli()
