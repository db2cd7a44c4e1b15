"""
Pydantic models for serialized schema snapshots.

A snapshot is the JSON form of a compiled system schema: a flat system
configuration plus documents whose bodies nest layout groups around leaf
field/action declarations. Node kinds form a closed set discriminated on
``kind``; an unknown kind fails validation.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Annotated, Any, Literal, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from schemapub.domain.errors import SchemaParseError

if TYPE_CHECKING:
    from .flatten import SchemaVisitor

T = TypeVar("T")

PropertyKind = Literal[
    "StringExp",
    "NumberExp",
    "BooleanExp",
    "HtmlExp",
    "ResourceExp",
    "TrackerExp",
    "AttributeExp",
    "DamageTrackExp",
    "DateExp",
    "TimeExp",
    "DateTimeExp",
    "DieField",
    "DiceField",
    "DocumentArrayExp",
    "SingleDocumentExp",
    "DocumentChoiceExp",
    "ParentPropertyRefExp",
    "StringChoiceField",
    "MeasuredTemplateField",
    "PaperDollExp",
    "MacroField",
    "TableField",
]

LayoutKind = Literal["Section", "Row", "Column", "Page", "Tab"]

ConfigValue = str | int | float | bool | None


class SchemaParam(BaseModel):
    """Parameter attached to a field or action (e.g. ``min=1``)"""

    kind: str
    value: ConfigValue = None

    def render(self) -> str:
        if self.value is None:
            return self.kind
        if isinstance(self.value, bool):
            return f"{self.kind}={str(self.value).lower()}"
        return f"{self.kind}={self.value}"


class SchemaNode(BaseModel, ABC):
    """Base for every node that can appear in a document body"""

    model_config = ConfigDict(populate_by_name=True)

    @abstractmethod
    def accept(self, visitor: SchemaVisitor[T], location: str) -> T: ...


class PropertyNode(SchemaNode):
    """Data field declaration"""

    kind: PropertyKind
    name: str
    modifier: str | None = None
    params: list[SchemaParam] = Field(default_factory=list)

    def accept(self, visitor: SchemaVisitor[T], location: str) -> T:
        return visitor.visit_property(self, location)


class ActionNode(SchemaNode):
    """Invocable action declaration"""

    kind: Literal["Action"]
    name: str
    modifier: str | None = None
    is_quick: bool = Field(False, alias="isQuick")
    is_macro: bool = Field(False, alias="isMacro")
    params: list[SchemaParam] = Field(default_factory=list)

    def accept(self, visitor: SchemaVisitor[T], location: str) -> T:
        return visitor.visit_action(self, location)


class LayoutNode(SchemaNode):
    """Layout group; named groups extend the location of their children"""

    kind: LayoutKind
    name: str | None = None
    body: list[BodyNode] = Field(default_factory=list)

    def accept(self, visitor: SchemaVisitor[T], location: str) -> T:
        return visitor.visit_layout(self, location)


BodyNode = Annotated[PropertyNode | ActionNode | LayoutNode, Field(discriminator="kind")]


class SchemaDocument(BaseModel):
    """Top-level document (e.g. an Actor or Item type)"""

    kind: str
    name: str
    body: list[BodyNode] = Field(default_factory=list)


class SchemaSnapshot(BaseModel):
    """Complete serialized schema"""

    config: dict[str, ConfigValue] = Field(default_factory=dict)
    documents: list[SchemaDocument] = Field(default_factory=list)

    @classmethod
    def from_text(cls, text: str) -> SchemaSnapshot:
        """Parse snapshot JSON

        Raises:
            SchemaParseError: If the text is not a valid snapshot
        """
        if not text or not text.strip():
            raise SchemaParseError("Schema snapshot is empty", code="schema_empty")
        try:
            return cls.model_validate_json(text)
        except ValidationError as e:
            raise SchemaParseError(
                f"Invalid schema snapshot: {e.error_count()} validation error(s)",
                code="schema_invalid",
            ) from e

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SchemaSnapshot:
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise SchemaParseError(
                f"Invalid schema snapshot: {e.error_count()} validation error(s)",
                code="schema_invalid",
            ) from e


LayoutNode.model_rebuild()
SchemaDocument.model_rebuild()
SchemaSnapshot.model_rebuild()
