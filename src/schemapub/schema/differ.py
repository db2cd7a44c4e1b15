"""
Schema Differ - Compare two schema snapshots

Parses the snapshot attached to the previous release and the one being
published, then reports added/removed/modified fields and actions plus
system configuration changes. Pure: the result depends only on the two
input strings.
"""

import logging

from schemapub.domain.errors import SchemaParseError
from schemapub.models import Change, ChangeCategory, ChangeKind, FieldDescriptor

from .flatten import flatten_snapshot
from .models import ConfigValue, SchemaSnapshot

logger = logging.getLogger(__name__)

PARSE_FAILED_DESCRIPTION = "schema changed (parse failed)"


class SchemaDiffer:
    """Compares two serialized schema snapshots

    Produces the Change list that drives the version bump. A snapshot that
    fails to parse degrades to a single conservative system change instead
    of raising.
    """

    def __init__(self, previous_text: str, current_text: str) -> None:
        """Initialize schema differ

        Args:
            previous_text: Snapshot JSON attached to the last release
            current_text: Snapshot JSON being published
        """
        self.previous_text = previous_text
        self.current_text = current_text

    def generate_changes(self) -> list[Change]:
        """Generate the list of changes from previous to current

        Returns:
            Removed, added, modified field/action changes followed by
            system configuration changes
        """
        try:
            previous = SchemaSnapshot.from_text(self.previous_text)
            current = SchemaSnapshot.from_text(self.current_text)
        except SchemaParseError as e:
            logger.warning("Schema diff degraded: %s", e)
            return [
                Change(
                    kind=ChangeKind.MODIFIED,
                    category=ChangeCategory.SYSTEM,
                    description=PARSE_FAILED_DESCRIPTION,
                )
            ]

        changes = self._compare_fields(flatten_snapshot(previous), flatten_snapshot(current))
        changes.extend(self._compare_config(previous.config, current.config))
        return changes

    def _build_key_map(self, fields: list[FieldDescriptor]) -> dict[str, FieldDescriptor]:
        """Map ``location.name`` keys to descriptors (last declaration wins)"""
        return {field.key: field for field in fields}

    def _compare_fields(
        self, previous_fields: list[FieldDescriptor], current_fields: list[FieldDescriptor]
    ) -> list[Change]:
        previous_map = self._build_key_map(previous_fields)
        current_map = self._build_key_map(current_fields)
        changes: list[Change] = []

        for key, field in previous_map.items():
            if key not in current_map:
                changes.append(
                    Change(
                        kind=ChangeKind.REMOVED,
                        category=ChangeCategory(field.category),
                        description=f"Removed {field.category} '{field.name}' from {field.location}",
                        name=field.name,
                        details=_describe_field(field),
                    )
                )

        for key, field in current_map.items():
            if key not in previous_map:
                changes.append(
                    Change(
                        kind=ChangeKind.ADDED,
                        category=ChangeCategory(field.category),
                        description=f"Added {field.category} '{field.name}' to {field.location}",
                        name=field.name,
                        details=_describe_field(field),
                    )
                )

        for key, current_field in current_map.items():
            previous_field = previous_map.get(key)
            if previous_field is None or _fields_equal(previous_field, current_field):
                continue
            changes.append(
                Change(
                    kind=ChangeKind.MODIFIED,
                    category=ChangeCategory(current_field.category),
                    description=(
                        f"Modified {current_field.category} '{current_field.name}' "
                        f"in {current_field.location}"
                    ),
                    name=current_field.name,
                    details=_field_change_details(previous_field, current_field),
                )
            )

        return changes

    def _compare_config(
        self, previous: dict[str, ConfigValue], current: dict[str, ConfigValue]
    ) -> list[Change]:
        changes: list[Change] = []

        for key, value in current.items():
            if key not in previous:
                changes.append(
                    Change(
                        kind=ChangeKind.ADDED,
                        category=ChangeCategory.SYSTEM,
                        description=f"Added system {key}: {value}",
                        name=key,
                    )
                )
            elif previous[key] != value:
                changes.append(
                    Change(
                        kind=ChangeKind.MODIFIED,
                        category=ChangeCategory.SYSTEM,
                        description=f"Updated system {key}: {value}",
                        name=key,
                        details=f"Changed from '{previous[key]}' to '{value}'",
                    )
                )

        for key, value in previous.items():
            if key not in current:
                changes.append(
                    Change(
                        kind=ChangeKind.MODIFIED,
                        category=ChangeCategory.SYSTEM,
                        description=f"Removed system {key}",
                        name=key,
                        details=f"Was '{value}'",
                    )
                )

        return changes


def diff_schemas(previous_text: str, current_text: str) -> list[Change]:
    """Diff two snapshot strings (see SchemaDiffer)"""
    return SchemaDiffer(previous_text, current_text).generate_changes()


def _fields_equal(a: FieldDescriptor, b: FieldDescriptor) -> bool:
    return a.type_tag == b.type_tag and a.modifiers == b.modifiers and a.parameters == b.parameters


def _format_modifiers(modifiers: frozenset[str]) -> str:
    return ", ".join(sorted(modifiers))


def _describe_field(field: FieldDescriptor) -> str:
    details = f"Type: {field.type_tag}"
    if field.modifiers:
        details += f", Modifiers: {_format_modifiers(field.modifiers)}"
    return details


def _field_change_details(old: FieldDescriptor, new: FieldDescriptor) -> str:
    details: list[str] = []

    if old.type_tag != new.type_tag:
        details.append(f"Type changed from {old.type_tag} to {new.type_tag}")

    if old.modifiers != new.modifiers:
        details.append(
            f"Modifiers changed from [{_format_modifiers(old.modifiers)}] "
            f"to [{_format_modifiers(new.modifiers)}]"
        )

    if old.parameters != new.parameters:
        details.append("Parameters changed")

    return "; ".join(details)
