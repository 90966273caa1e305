"""
IR (Intermediate Representation) node definitions.

These nodes represent a resolved entity, ready for emission. Every field
type is reduced to the closed TypeNode vocabulary below, names are wire
names, and no emitter ever needs to look at declaration text again.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Union


class PrimitiveKind(str, Enum):
    """Kind of scalar value."""

    BOOLEAN = "boolean"
    STRING = "string"
    INTEGER = "integer"
    FLOAT = "float"


@dataclass(frozen=True)
class Primitive:
    """A scalar. `literal` and `min_length` only apply to STRING."""

    kind: PrimitiveKind = PrimitiveKind.STRING
    literal: str | None = None
    min_length: int | None = None


@dataclass(frozen=True)
class Optional:
    """The value may be absent from its containing object."""

    inner: TypeNode


@dataclass(frozen=True)
class List:
    """An ordered sequence of values."""

    element: TypeNode


@dataclass(frozen=True)
class StringMap:
    """An associative collection keyed by text."""

    value: TypeNode


@dataclass(frozen=True)
class Reference:
    """A reference to another entity by wire name."""

    entity_name: str


@dataclass(frozen=True)
class IdentifierType:
    """A 24-hex-character identifier serialized as {"$oid": "<hex>"}."""

    pass


TypeNode = Union[Primitive, Optional, List, StringMap, Reference, IdentifierType]


@dataclass(frozen=True)
class FieldNode:
    """A resolved field of a record or a tagged-union variant."""

    declared_name: str
    wire_name: str
    type: TypeNode
    required: bool = True  # False iff type is Optional
    doc_comment: tuple[str, ...] = ()


@dataclass(frozen=True)
class VariantNode:
    """A resolved union alternative. Unit variants have no fields."""

    declared_name: str
    wire_name: str
    fields: tuple[FieldNode, ...] = ()
    doc_comment: tuple[str, ...] = ()


@dataclass(frozen=True)
class RecordKind:
    """Named-field aggregate."""

    fields: tuple[FieldNode, ...] = ()


@dataclass(frozen=True)
class UnionKind:
    """Union of named alternatives. tag_key is set iff the union is tagged."""

    variants: tuple[VariantNode, ...] = ()
    tag_key: str | None = None

    @property
    def is_tagged(self) -> bool:
        return self.tag_key is not None


@dataclass(frozen=True)
class EntityNode:
    """A fully resolved entity."""

    declared_name: str
    wire_name: str
    kind: RecordKind | UnionKind
    doc_comment: tuple[str, ...] = ()

    # Wire names of every entity referenced from this one, in first-use order
    references: tuple[str, ...] = field(default=(), compare=False)

    @property
    def is_record(self) -> bool:
        return isinstance(self.kind, RecordKind)

    @property
    def is_plain_union(self) -> bool:
        return isinstance(self.kind, UnionKind) and not self.kind.is_tagged

    @property
    def is_tagged_union(self) -> bool:
        return isinstance(self.kind, UnionKind) and self.kind.is_tagged


def iter_fields(entity: EntityNode):
    """Yield every field of an entity, including fields of union variants."""
    if isinstance(entity.kind, RecordKind):
        yield from entity.kind.fields
    else:
        for variant in entity.kind.variants:
            yield from variant.fields


def innermost_type(node: TypeNode) -> TypeNode:
    """The element type once optional and collection wrappers are removed."""
    if isinstance(node, Optional):
        return innermost_type(node.inner)
    if isinstance(node, List):
        return innermost_type(node.element)
    if isinstance(node, StringMap):
        return innermost_type(node.value)
    return node


def collect_references(node: TypeNode) -> list[str]:
    """Wire names referenced by a type node."""
    inner = innermost_type(node)
    return [inner.entity_name] if isinstance(inner, Reference) else []


def retarget_type(node: TypeNode, targets: dict[str, str]) -> TypeNode:
    """Rewrite Reference targets through a name -> wire name mapping."""
    if isinstance(node, Reference):
        return Reference(targets.get(node.entity_name, node.entity_name))
    if isinstance(node, Optional):
        return Optional(retarget_type(node.inner, targets))
    if isinstance(node, List):
        return List(retarget_type(node.element, targets))
    if isinstance(node, StringMap):
        return StringMap(retarget_type(node.value, targets))
    return node


def retarget_references(entity: EntityNode, targets: dict[str, str]) -> EntityNode:
    """Copy of an entity whose references point at the wire names in `targets`."""

    def fields(items: tuple[FieldNode, ...]) -> tuple[FieldNode, ...]:
        return tuple(replace(item, type=retarget_type(item.type, targets)) for item in items)

    if isinstance(entity.kind, RecordKind):
        kind: RecordKind | UnionKind = RecordKind(fields=fields(entity.kind.fields))
    else:
        variants = tuple(replace(variant, fields=fields(variant.fields)) for variant in entity.kind.variants)
        kind = replace(entity.kind, variants=variants)

    references = []
    for name in entity.references:
        name = targets.get(name, name)
        if name not in references:
            references.append(name)
    return replace(entity, kind=kind, references=tuple(references))
