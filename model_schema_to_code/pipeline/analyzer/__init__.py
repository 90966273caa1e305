"""
Analyzer module.

Contains name resolution, type resolution, reference checking and IR building.
"""

from __future__ import annotations

from .analyzer import EntityAnalyzer, classify
from .ir_nodes import (
    EntityNode,
    FieldNode,
    IdentifierType,
    List,
    Optional,
    Primitive,
    PrimitiveKind,
    RecordKind,
    Reference,
    StringMap,
    TypeNode,
    UnionKind,
    VariantNode,
    retarget_references,
)
from .name_resolver import NameResolver, apply_rename_policy
from .reference_resolver import ReferenceTable
from .type_resolver import TypeResolver

__all__ = [
    "EntityAnalyzer",
    "EntityNode",
    "FieldNode",
    "IdentifierType",
    "List",
    "NameResolver",
    "Optional",
    "Primitive",
    "PrimitiveKind",
    "RecordKind",
    "Reference",
    "ReferenceTable",
    "StringMap",
    "TypeNode",
    "TypeResolver",
    "UnionKind",
    "VariantNode",
    "apply_rename_policy",
    "classify",
    "retarget_references",
]
