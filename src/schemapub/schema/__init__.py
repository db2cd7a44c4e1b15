"""Schema snapshot models, flattening and diffing."""

from .differ import PARSE_FAILED_DESCRIPTION, SchemaDiffer, diff_schemas
from .flatten import FieldCollector, SchemaVisitor, flatten_snapshot
from .models import (
    ActionNode,
    LayoutNode,
    PropertyNode,
    SchemaDocument,
    SchemaParam,
    SchemaSnapshot,
)

__all__ = [
    "PARSE_FAILED_DESCRIPTION",
    "SchemaDiffer",
    "diff_schemas",
    "FieldCollector",
    "SchemaVisitor",
    "flatten_snapshot",
    "ActionNode",
    "LayoutNode",
    "PropertyNode",
    "SchemaDocument",
    "SchemaParam",
    "SchemaSnapshot",
]
