"""
Semantic Version Utilities

Version parsing, comparison, bump policy and tag-name validation for
releases (MAJOR.MINOR.PATCH).
"""

import re
from collections.abc import Iterable
from dataclasses import dataclass
from enum import StrEnum

from schemapub.domain.errors import InvalidTagNameError
from schemapub.models import Change, ChangeCategory, ChangeKind

DEFAULT_VERSION = "1.0.0"

_VERSION_PATTERN = re.compile(r"^(v)?(\d+)\.(\d+)(?:\.(\d+))?$")
_TAG_FORBIDDEN_CHARS = re.compile(r"[\s~^:?*\[\]\\]")


class BumpType(StrEnum):
    """Semantic version increment"""

    MAJOR = "major"
    MINOR = "minor"
    PATCH = "patch"


@dataclass
class SemanticVersion:
    """Semantic version (MAJOR.MINOR.PATCH)"""

    major: int
    minor: int
    patch: int
    prefix: str = "v"

    def __str__(self) -> str:
        return f"{self.prefix}{self.major}.{self.minor}.{self.patch}"

    @property
    def core(self) -> str:
        """Version without prefix, e.g. ``1.3.0``"""
        return f"{self.major}.{self.minor}.{self.patch}"

    def _key(self) -> tuple[int, int, int]:
        return (self.major, self.minor, self.patch)

    def __lt__(self, other: "SemanticVersion") -> bool:
        return self._key() < other._key()

    def __le__(self, other: "SemanticVersion") -> bool:
        return self._key() <= other._key()

    def __gt__(self, other: "SemanticVersion") -> bool:
        return self._key() > other._key()

    def __ge__(self, other: "SemanticVersion") -> bool:
        return self._key() >= other._key()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SemanticVersion):
            return False
        return self._key() == other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def bump_major(self) -> "SemanticVersion":
        """Bump major version and reset minor/patch"""
        return SemanticVersion(self.major + 1, 0, 0, self.prefix)

    def bump_minor(self) -> "SemanticVersion":
        """Bump minor version and reset patch"""
        return SemanticVersion(self.major, self.minor + 1, 0, self.prefix)

    def bump_patch(self) -> "SemanticVersion":
        """Bump patch version"""
        return SemanticVersion(self.major, self.minor, self.patch + 1, self.prefix)

    def bump(self, bump_type: BumpType) -> "SemanticVersion":
        if bump_type is BumpType.MAJOR:
            return self.bump_major()
        if bump_type is BumpType.MINOR:
            return self.bump_minor()
        return self.bump_patch()


def parse_semantic_version(version_str: str) -> SemanticVersion:
    """Parse semantic version string

    Args:
        version_str: Version string (e.g., "v0.3.0", "0.3.0", "v1.2")

    Returns:
        SemanticVersion object (missing patch defaults to 0)

    Raises:
        ValueError: If version string is invalid

    Example:
        >>> parse_semantic_version("v1.2")
        SemanticVersion(major=1, minor=2, patch=0, prefix='v')
    """
    match = _VERSION_PATTERN.match(version_str.strip()) if version_str else None

    if not match:
        raise ValueError(
            f"Invalid semantic version: {version_str!r}. "
            f"Expected format: v1.2.3, 1.2.3 or 1.2 (MAJOR.MINOR[.PATCH])"
        )

    prefix = match.group(1) or ""
    major = int(match.group(2))
    minor = int(match.group(3))
    patch = int(match.group(4) or 0)

    return SemanticVersion(major, minor, patch, prefix)


def latest_version(tags: Iterable[str]) -> tuple[str, SemanticVersion] | None:
    """Find the highest valid semantic version among tag names

    Tags that don't parse are ignored.

    Returns:
        ``(tag_name, version)`` of the highest tag, or None if none parse
    """
    best: tuple[str, SemanticVersion] | None = None
    for tag in tags:
        try:
            parsed = parse_semantic_version(tag)
        except ValueError:
            continue
        if best is None or parsed > best[1]:
            best = (tag, parsed)
    return best


def get_next_version(current_version: str, bump_type: str = "minor", prefix: str = "v") -> str:
    """Get next semantic version

    Example:
        >>> get_next_version("v0.3.0", "minor")
        "v0.4.0"
        >>> get_next_version("v0.3.0", "patch")
        "v0.3.1"
    """
    next_version = parse_semantic_version(current_version).bump(BumpType(bump_type))
    next_version.prefix = prefix
    return str(next_version)


def sanitize_version(version: str | None) -> str:
    """Coerce a raw version string into ``MAJOR.MINOR.PATCH``

    Falls back to ``1.0.0`` for empty input or input that does not start
    with a digit; pads missing parts with 0 and drops anything past three.

    Example:
        >>> sanitize_version("1.2")
        "1.2.0"
        >>> sanitize_version(None)
        "1.0.0"
    """
    if not version or not isinstance(version, str):
        return DEFAULT_VERSION

    sanitized = re.sub(r"[^a-zA-Z0-9.-]", "", version.strip().removeprefix("v"))
    if not sanitized or not sanitized[0].isdigit():
        return DEFAULT_VERSION

    parts = sanitized.split(".")[:3]
    parts.extend(["0"] * (3 - len(parts)))

    numbers = []
    for part in parts:
        leading_digits = re.match(r"\d+", part)
        numbers.append(str(int(leading_digits.group(0))) if leading_digits else "0")
    return ".".join(numbers)


def is_valid_tag_name(tag_name: str) -> bool:
    """Check a tag against Git/GitHub ref naming rules"""
    if not tag_name:
        return False
    if any(ord(ch) <= 31 or ord(ch) == 127 for ch in tag_name):
        return False
    if _TAG_FORBIDDEN_CHARS.search(tag_name):
        return False
    if tag_name.startswith("/") or tag_name.endswith("/") or "//" in tag_name:
        return False
    if ".." in tag_name or "@{" in tag_name or tag_name == "@":
        return False
    if tag_name.endswith(".lock") or tag_name.endswith("."):
        return False
    return True


def validate_tag_name(tag_name: str) -> str:
    """Return ``tag_name`` unchanged or raise InvalidTagNameError"""
    if not is_valid_tag_name(tag_name):
        raise InvalidTagNameError(
            f"Invalid tag name: {tag_name!r}. Tag names may not contain whitespace, control "
            "characters or any of ~^:?*[]\\, start/end with '/', or end with '.lock'",
            code="invalid_tag_name",
        )
    return tag_name


class VersionPolicy:
    """Maps categorized schema changes to the next release version

    Attributes:
        system_change_bump: Bump applied when only system-configuration
            changes are present. Defaults to MINOR; set to PATCH to treat
            cosmetic configuration edits as fixes.
    """

    def __init__(self, system_change_bump: BumpType = BumpType.MINOR) -> None:
        self.system_change_bump = BumpType(system_change_bump)

    def classify(self, changes: Iterable[Change]) -> BumpType:
        """Pick the bump type for a change set

        Removed or renamed elements are breaking (MAJOR). Added fields or
        actions and any system change are features. Everything else is a
        PATCH.
        """
        changes = list(changes)

        if any(c.kind in (ChangeKind.REMOVED, ChangeKind.RENAMED) for c in changes):
            return BumpType.MAJOR

        has_new_features = any(
            c.kind is ChangeKind.ADDED
            and c.category in (ChangeCategory.FIELD, ChangeCategory.ACTION)
            for c in changes
        )
        if has_new_features:
            return BumpType.MINOR

        if any(c.category is ChangeCategory.SYSTEM for c in changes):
            return self.system_change_bump

        return BumpType.PATCH

    def next_version(
        self,
        changes: Iterable[Change],
        existing_tags: Iterable[str],
        bump_type: BumpType | None = None,
    ) -> str:
        """Compute the next version string (without ``v``)

        Args:
            changes: Categorized schema changes
            existing_tags: Tag names already on the remote
            bump_type: Explicit bump, overriding classification

        Returns:
            Next version, strictly greater than every valid existing tag;
            ``1.0.0`` when no tag parses
        """
        found = latest_version(existing_tags)
        if found is None:
            return DEFAULT_VERSION
        bump = BumpType(bump_type) if bump_type else self.classify(changes)
        return sanitize_version(get_next_version(found[0], bump, prefix=""))
