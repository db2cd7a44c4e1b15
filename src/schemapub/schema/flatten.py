"""
Schema Flattening

Walks a snapshot depth-first and turns every leaf declaration into a
FieldDescriptor whose location records the named layout groups above it.
"""

from abc import ABC, abstractmethod
from typing import Generic, TypeVar

from schemapub.models import FieldCategory, FieldDescriptor

from .models import ActionNode, LayoutNode, PropertyNode, SchemaSnapshot

T = TypeVar("T")

LOCATION_SEPARATOR = " - "


class SchemaVisitor(ABC, Generic[T]):
    """Visitor over the closed set of body node variants"""

    @abstractmethod
    def visit_property(self, node: PropertyNode, location: str) -> T: ...

    @abstractmethod
    def visit_action(self, node: ActionNode, location: str) -> T: ...

    @abstractmethod
    def visit_layout(self, node: LayoutNode, location: str) -> T: ...


class FieldCollector(SchemaVisitor[list[FieldDescriptor]]):
    """Collects field/action descriptors in declaration order"""

    def visit_property(self, node: PropertyNode, location: str) -> list[FieldDescriptor]:
        return [
            FieldDescriptor(
                name=node.name,
                type_tag=node.kind,
                category=FieldCategory.FIELD,
                location=location,
                modifiers=frozenset([node.modifier] if node.modifier else []),
                parameters=tuple(param.render() for param in node.params),
            )
        ]

    def visit_action(self, node: ActionNode, location: str) -> list[FieldDescriptor]:
        modifiers = set()
        if node.is_quick:
            modifiers.add("quick")
        if node.is_macro:
            modifiers.add("macro")
        if node.modifier:
            modifiers.add(node.modifier)

        return [
            FieldDescriptor(
                name=node.name,
                type_tag=node.kind,
                category=FieldCategory.ACTION,
                location=location,
                modifiers=frozenset(modifiers),
                parameters=tuple(param.render() for param in node.params),
            )
        ]

    def visit_layout(self, node: LayoutNode, location: str) -> list[FieldDescriptor]:
        child_location = f"{location}{LOCATION_SEPARATOR}{node.name}" if node.name else location
        fields: list[FieldDescriptor] = []
        for child in node.body:
            fields.extend(child.accept(self, child_location))
        return fields


def flatten_snapshot(snapshot: SchemaSnapshot) -> list[FieldDescriptor]:
    """Flatten every document of a snapshot into descriptors

    Example:
        Document "Hero" containing Section "Combat" containing NumberExp "hp"
        yields one descriptor with location "Hero - Combat" and key
        "Hero - Combat.hp".
    """
    collector = FieldCollector()
    fields: list[FieldDescriptor] = []
    for document in snapshot.documents:
        for node in document.body:
            fields.extend(node.accept(collector, document.name))
    return fields
