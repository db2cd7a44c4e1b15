"""
Unit tests for semantic versioning, bump policy and tag validation
"""

import pytest

from schemapub.core.version import (
    BumpType,
    SemanticVersion,
    VersionPolicy,
    get_next_version,
    is_valid_tag_name,
    latest_version,
    parse_semantic_version,
    sanitize_version,
    validate_tag_name,
)
from schemapub.domain.errors import InvalidTagNameError
from schemapub.models import Change, ChangeCategory, ChangeKind


def _change(kind: ChangeKind, category: ChangeCategory, name: str = "x") -> Change:
    return Change(kind=kind, category=category, description=f"{kind} {name}", name=name)


class TestParseSemanticVersion:
    def test_parses_prefixed_version(self) -> None:
        version = parse_semantic_version("v1.2.3")
        assert (version.major, version.minor, version.patch) == (1, 2, 3)
        assert version.prefix == "v"

    def test_missing_patch_defaults_to_zero(self) -> None:
        assert parse_semantic_version("1.2") == SemanticVersion(1, 2, 0)

    @pytest.mark.parametrize("raw", ["", "latest", "v1", "1.2.3.4", "v1.2.x", "release-1.0.0"])
    def test_rejects_invalid(self, raw: str) -> None:
        with pytest.raises(ValueError):
            parse_semantic_version(raw)

    def test_ordering_is_numeric(self) -> None:
        assert parse_semantic_version("v1.10.0") > parse_semantic_version("v1.9.9")
        assert parse_semantic_version("2.0.0") > parse_semantic_version("v1.99.99")


class TestLatestVersion:
    def test_ignores_unparsable_tags(self) -> None:
        found = latest_version(["nightly", "v1.1.0", "v1.2.3", "v1.2.2", "junk-2.0"])
        assert found is not None
        assert found[0] == "v1.2.3"

    def test_none_when_nothing_parses(self) -> None:
        assert latest_version(["nightly", "beta"]) is None
        assert latest_version([]) is None


class TestSanitizeVersion:
    @pytest.mark.parametrize("raw", ["", None, "   ", "abc", "v"])
    def test_falls_back_to_default(self, raw) -> None:
        assert sanitize_version(raw) == "1.0.0"

    def test_pads_missing_parts(self) -> None:
        assert sanitize_version("1.2") == "1.2.0"
        assert sanitize_version("3") == "3.0.0"

    def test_strips_prefix_and_extra_parts(self) -> None:
        assert sanitize_version("v2.4.6") == "2.4.6"
        assert sanitize_version("1.2.3.4") == "1.2.3"

    def test_drops_non_numeric_suffixes(self) -> None:
        assert sanitize_version("1.2.3-beta") == "1.2.3"
        assert sanitize_version("1.x.7") == "1.0.7"


class TestTagNames:
    @pytest.mark.parametrize("tag", ["v1.0.0", "v1.3.0", "release/v2.0.0", "1.0.0"])
    def test_valid(self, tag: str) -> None:
        assert is_valid_tag_name(tag)
        assert validate_tag_name(tag) == tag

    @pytest.mark.parametrize(
        "tag",
        ["", "v1 .0", "v1..0", "v1.0.0.lock", "v1.0.", "/v1", "v1/", "a//b", "v1^0", "v1:0", "v1~0",
         "v1?", "v1*", "v[1]", "v1\\0", "@", "v@{1}", "v1\x07"],
    )
    def test_invalid(self, tag: str) -> None:
        assert not is_valid_tag_name(tag)
        with pytest.raises(InvalidTagNameError):
            validate_tag_name(tag)


class TestGetNextVersion:
    def test_minor(self) -> None:
        assert get_next_version("v0.3.0", "minor") == "v0.4.0"

    def test_patch(self) -> None:
        assert get_next_version("v0.3.0", "patch") == "v0.3.1"

    def test_major_resets_minor_and_patch(self) -> None:
        assert get_next_version("1.4.2", "major") == "v2.0.0"

    def test_empty_prefix(self) -> None:
        assert get_next_version("v1.2.3", "patch", prefix="") == "1.2.4"


class TestVersionPolicy:
    """Test change classification and next-version selection"""

    def test_removed_field_is_major(self) -> None:
        policy = VersionPolicy()
        changes = [_change(ChangeKind.REMOVED, ChangeCategory.FIELD)]
        assert policy.classify(changes) is BumpType.MAJOR

    def test_breaking_change_takes_precedence_over_features(self) -> None:
        """One removed field plus two added actions should still be major"""
        policy = VersionPolicy()
        changes = [
            _change(ChangeKind.REMOVED, ChangeCategory.FIELD, "hp"),
            _change(ChangeKind.ADDED, ChangeCategory.ACTION, "attack"),
            _change(ChangeKind.ADDED, ChangeCategory.ACTION, "defend"),
        ]
        assert policy.classify(changes) is BumpType.MAJOR

    def test_renamed_is_major(self) -> None:
        changes = [_change(ChangeKind.RENAMED, ChangeCategory.ACTION)]
        assert VersionPolicy().classify(changes) is BumpType.MAJOR

    def test_added_field_is_minor(self) -> None:
        changes = [_change(ChangeKind.ADDED, ChangeCategory.FIELD)]
        assert VersionPolicy().classify(changes) is BumpType.MINOR

    def test_system_change_uses_configured_bump(self) -> None:
        changes = [_change(ChangeKind.MODIFIED, ChangeCategory.SYSTEM, "label")]
        assert VersionPolicy().classify(changes) is BumpType.MINOR
        assert VersionPolicy(BumpType.PATCH).classify(changes) is BumpType.PATCH

    def test_system_bump_does_not_override_added_fields(self) -> None:
        changes = [
            _change(ChangeKind.MODIFIED, ChangeCategory.SYSTEM, "label"),
            _change(ChangeKind.ADDED, ChangeCategory.FIELD, "mana"),
        ]
        assert VersionPolicy(BumpType.PATCH).classify(changes) is BumpType.MINOR

    def test_modified_field_is_patch(self) -> None:
        changes = [_change(ChangeKind.MODIFIED, ChangeCategory.FIELD)]
        assert VersionPolicy().classify(changes) is BumpType.PATCH

    def test_no_changes_is_patch(self) -> None:
        assert VersionPolicy().classify([]) is BumpType.PATCH

    def test_next_version_is_above_every_existing_tag(self) -> None:
        policy = VersionPolicy()
        changes = [_change(ChangeKind.ADDED, ChangeCategory.FIELD)]

        version = policy.next_version(changes, ["v1.2.2", "v1.2.3", "v1.1.0"])

        assert version == "1.3.0"

    def test_next_version_without_tags_is_first_release(self) -> None:
        assert VersionPolicy().next_version([], []) == "1.0.0"
        assert VersionPolicy().next_version([], ["nightly"]) == "1.0.0"

    def test_explicit_bump_overrides_classification(self) -> None:
        changes = [_change(ChangeKind.REMOVED, ChangeCategory.FIELD)]
        assert VersionPolicy().next_version(changes, ["v2.0.1"], BumpType.PATCH) == "2.0.2"

    def test_explicit_bump_accepts_string(self) -> None:
        assert VersionPolicy().next_version([], ["v2.0.1"], "major") == "3.0.0"  # type: ignore[arg-type]
