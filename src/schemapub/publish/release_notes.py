"""
Release Notes

Markdown release body built from categorized schema changes: breaking
changes first, then new features, then improvements.
"""

from collections.abc import Sequence
from datetime import date

from schemapub.models import Change, ChangeCategory, ChangeKind, RepositoryRef

CATEGORY_ICONS = {
    ChangeCategory.FIELD: "📝",
    ChangeCategory.ACTION: "⚡",
    ChangeCategory.SYSTEM: "🔧",
}

DEFAULT_CHANGELOG = """### What's New

- System implementation updated
- Bug fixes and performance improvements"""


def _change_lines(change: Change, prefix: str) -> list[str]:
    lines = [f"- {prefix}{change.description}"]
    if change.details:
        lines.append(f"  - {change.details}")
    return lines


def generate_changelog_section(changes: Sequence[Change]) -> str:
    """Render the "What's New" section for a change set"""
    if not changes:
        return DEFAULT_CHANGELOG

    breaking = [c for c in changes if c.kind in (ChangeKind.REMOVED, ChangeKind.RENAMED)]
    added = [c for c in changes if c.kind is ChangeKind.ADDED]
    modified = [c for c in changes if c.kind is ChangeKind.MODIFIED]

    lines = ["### What's New", ""]

    if breaking:
        lines += ["#### ⚠️ Breaking Changes", ""]
        for change in breaking:
            lines += _change_lines(change, f"**{change.kind.upper()}:** ")
        lines.append("")

    if added:
        # System additions lead, then fields, then actions
        order = (ChangeCategory.SYSTEM, ChangeCategory.FIELD, ChangeCategory.ACTION)
        lines += ["#### ✨ New Features", ""]
        for category in order:
            for change in (c for c in added if c.category is category):
                lines += _change_lines(change, f"{CATEGORY_ICONS[category]} ")
        lines.append("")

    if modified:
        lines += ["#### 🔧 Improvements", ""]
        for change in modified:
            lines += _change_lines(change, f"{CATEGORY_ICONS[change.category]} ")
        lines.append("")

    return "\n".join(lines).rstrip() + "\n"


def generate_release_notes(
    title: str,
    repo: RepositoryRef,
    tag_name: str,
    changes: Sequence[Change],
    release_date: date,
    include_changelog: bool = True,
) -> str:
    """Render the full release body"""
    base_url = f"https://github.com/{repo.full_name}"
    sections = [
        f"## {title} Release",
        "",
        f"**Release Date:** {release_date.isoformat()}",
        "",
        "### Installation",
        "",
        "**Manifest URL:**",
        "```",
        f"{base_url}/releases/download/{tag_name}/system.json",
        "```",
        "",
    ]
    if include_changelog:
        sections += [generate_changelog_section(changes).rstrip(), ""]
    sections += [
        "### Links",
        "",
        f"- [Repository README]({base_url}#readme)",
        f"- [Report Issues]({base_url}/issues)",
    ]
    return "\n".join(sections) + "\n"
