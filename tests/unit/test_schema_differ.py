"""
Unit tests for SchemaDiffer

Tests field/action diffing across nested layouts, system configuration
changes and parse-failure degradation.
"""

import json

import pytest

from schemapub.domain.errors import SchemaParseError
from schemapub.models import ChangeCategory, ChangeKind
from schemapub.schema import (
    PARSE_FAILED_DESCRIPTION,
    SchemaDiffer,
    SchemaSnapshot,
    diff_schemas,
    flatten_snapshot,
)
from tests.utils import action, layout, prop, snapshot_text


class TestFlattenSnapshot:
    def test_nested_layouts_extend_location(self) -> None:
        text = snapshot_text(
            layout("Page", "Combat", layout("Section", "Defense", prop("NumberExp", "armor"))),
        )

        fields = flatten_snapshot(SchemaSnapshot.from_text(text))

        assert len(fields) == 1
        assert fields[0].location == "Hero - Combat - Defense"
        assert fields[0].key == "Hero - Combat - Defense.armor"

    def test_unnamed_layout_keeps_parent_location(self) -> None:
        text = snapshot_text(layout("Row", None, prop("StringExp", "title")))

        fields = flatten_snapshot(SchemaSnapshot.from_text(text))

        assert fields[0].location == "Hero"

    def test_action_modifiers(self) -> None:
        text = snapshot_text(action("attack", quick=True, macro=True))

        field = flatten_snapshot(SchemaSnapshot.from_text(text))[0]

        assert field.category == "action"
        assert field.modifiers == frozenset({"quick", "macro"})

    def test_parameters_rendered_in_order(self) -> None:
        text = snapshot_text(prop("NumberExp", "level", min=1, max=20, hidden=True))

        field = flatten_snapshot(SchemaSnapshot.from_text(text))[0]

        assert field.parameters == ("min=1", "max=20", "hidden=true")

    def test_unknown_node_kind_is_parse_error(self) -> None:
        text = snapshot_text({"kind": "Carousel", "name": "spin"})

        with pytest.raises(SchemaParseError):
            SchemaSnapshot.from_text(text)


class TestSchemaDiffer:
    """Test change generation between two snapshots"""

    def test_added_field(self) -> None:
        """Adding mana next to hp should yield exactly one added field"""
        previous = snapshot_text(prop("ResourceExp", "hp"))
        current = snapshot_text(prop("ResourceExp", "hp"), prop("NumberExp", "mana"))

        changes = SchemaDiffer(previous, current).generate_changes()

        assert len(changes) == 1
        assert changes[0].kind is ChangeKind.ADDED
        assert changes[0].category is ChangeCategory.FIELD
        assert changes[0].name == "mana"
        assert changes[0].description == "Added field 'mana' to Hero"
        assert changes[0].details == "Type: NumberExp"

    def test_removed_action(self) -> None:
        previous = snapshot_text(action("attack"), prop("ResourceExp", "hp"))
        current = snapshot_text(prop("ResourceExp", "hp"))

        changes = diff_schemas(previous, current)

        assert len(changes) == 1
        assert changes[0].kind is ChangeKind.REMOVED
        assert changes[0].category is ChangeCategory.ACTION
        assert changes[0].description == "Removed action 'attack' from Hero"

    def test_moving_field_between_sections_is_remove_and_add(self) -> None:
        previous = snapshot_text(layout("Section", "Stats", prop("NumberExp", "str")))
        current = snapshot_text(layout("Section", "Attributes", prop("NumberExp", "str")))

        changes = diff_schemas(previous, current)

        assert [c.kind for c in changes] == [ChangeKind.REMOVED, ChangeKind.ADDED]
        assert changes[0].description == "Removed field 'str' from Hero - Stats"
        assert changes[1].description == "Added field 'str' to Hero - Attributes"

    def test_modified_type(self) -> None:
        previous = snapshot_text(prop("NumberExp", "hp"))
        current = snapshot_text(prop("ResourceExp", "hp"))

        changes = diff_schemas(previous, current)

        assert len(changes) == 1
        assert changes[0].kind is ChangeKind.MODIFIED
        assert changes[0].details == "Type changed from NumberExp to ResourceExp"

    def test_modified_modifiers_and_parameters(self) -> None:
        previous = snapshot_text(prop("NumberExp", "hp", min=0))
        current = snapshot_text(prop("NumberExp", "hp", "readonly", min=1))

        changes = diff_schemas(previous, current)

        assert len(changes) == 1
        assert changes[0].details == (
            "Modifiers changed from [] to [readonly]; Parameters changed"
        )

    def test_identical_snapshots_have_no_changes(self) -> None:
        text = snapshot_text(prop("ResourceExp", "hp"), action("attack", quick=True))

        assert diff_schemas(text, text) == []

    def test_same_content_different_formatting_has_no_changes(self) -> None:
        text = snapshot_text(prop("ResourceExp", "hp"))
        compact = json.dumps(json.loads(text), separators=(",", ":"))

        assert diff_schemas(text, compact) == []

    def test_output_order_removed_added_modified_system(self) -> None:
        previous = snapshot_text(
            prop("NumberExp", "old"),
            prop("NumberExp", "hp"),
            config={"label": "Old"},
        )
        current = snapshot_text(
            prop("NumberExp", "new"),
            prop("ResourceExp", "hp"),
            config={"label": "New"},
        )

        changes = diff_schemas(previous, current)

        assert [(c.kind, c.category) for c in changes] == [
            (ChangeKind.REMOVED, ChangeCategory.FIELD),
            (ChangeKind.ADDED, ChangeCategory.FIELD),
            (ChangeKind.MODIFIED, ChangeCategory.FIELD),
            (ChangeKind.MODIFIED, ChangeCategory.SYSTEM),
        ]

    def test_same_name_in_different_documents_is_distinct(self) -> None:
        previous = snapshot_text(prop("NumberExp", "hp"), document="Hero")
        current = snapshot_text(prop("NumberExp", "hp"), document="Monster")

        changes = diff_schemas(previous, current)

        assert {c.kind for c in changes} == {ChangeKind.REMOVED, ChangeKind.ADDED}


class TestSystemConfigDiff:
    def test_changed_key(self) -> None:
        previous = snapshot_text(config={"label": "Hero System"})
        current = snapshot_text(config={"label": "Heroes"})

        changes = diff_schemas(previous, current)

        assert len(changes) == 1
        assert changes[0].kind is ChangeKind.MODIFIED
        assert changes[0].category is ChangeCategory.SYSTEM
        assert changes[0].description == "Updated system label: Heroes"
        assert changes[0].details == "Changed from 'Hero System' to 'Heroes'"

    def test_added_key(self) -> None:
        previous = snapshot_text(config={})
        current = snapshot_text(config={"author": "acme"})

        changes = diff_schemas(previous, current)

        assert changes[0].kind is ChangeKind.ADDED
        assert changes[0].description == "Added system author: acme"

    def test_removed_key_is_not_breaking(self) -> None:
        previous = snapshot_text(config={"author": "acme"})
        current = snapshot_text(config={})

        changes = diff_schemas(previous, current)

        assert changes[0].kind is ChangeKind.MODIFIED
        assert changes[0].description == "Removed system author"


class TestParseFailure:
    @pytest.mark.parametrize(
        ("previous", "current"),
        [
            ("{not json", snapshot_text(prop("NumberExp", "hp"))),
            (snapshot_text(prop("NumberExp", "hp")), ""),
            ('{"documents": [{"kind": "Actor"}]}', snapshot_text()),
        ],
    )
    def test_degrades_to_single_system_change(self, previous: str, current: str) -> None:
        changes = diff_schemas(previous, current)

        assert len(changes) == 1
        assert changes[0].kind is ChangeKind.MODIFIED
        assert changes[0].category is ChangeCategory.SYSTEM
        assert changes[0].description == PARSE_FAILED_DESCRIPTION
