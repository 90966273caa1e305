"""
Declaration node definitions.

These nodes are the input contract of the generator: a structured
description of one record or union type as handed over by a syntax
front-end, before any naming or type resolution happens. Directive and
type texts are kept raw; the parser module turns them into structured
values on demand.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from ..errors import DeclarationError


class DeclarationKind(str, Enum):
    """Kind of declared type."""

    RECORD = "record"  # Named-field aggregate (struct)
    UNION = "union"  # Named alternatives (enum)


class TypeShape(str, Enum):
    """Syntactic shape of a parsed type expression."""

    PATH = "path"  # Foo, Vec<T>, std::collections::HashMap<K, V>
    TUPLE = "tuple"  # (A, B)
    ARRAY = "array"  # [T] or [T; N]
    REFERENCE = "reference"  # &T, &'a mut T


@dataclass
class TypeExpr:
    """A parsed type expression."""

    shape: TypeShape = TypeShape.PATH

    # Last path segment (e.g. "HashMap" for std::collections::HashMap)
    name: str = ""

    # Full path as written (e.g. "std::collections::HashMap")
    path: str = ""

    # Generic arguments, tuple elements, or the single element/referent type
    args: list[TypeExpr] = field(default_factory=list)

    # Original spelling, used in diagnostics
    spelling: str = ""


@dataclass
class Directive:
    """A parsed attribute directive such as serde(rename = "id")."""

    namespace: str = ""  # e.g. "serde", "model_schema_prop"
    args: dict[str, Any] = field(default_factory=dict)  # flags map to True
    text: str = ""

    def get(self, key: str, default: Any = None) -> Any:
        return self.args.get(key, default)


@dataclass
class FieldDeclaration:
    """A named field of a record or of a union variant."""

    name: str = ""
    type_expr: str = ""  # Raw type spelling, e.g. "Option<Vec<String>>"
    directives: list[str] = field(default_factory=list)  # Raw directive texts
    docs: list[str] = field(default_factory=list)

    @staticmethod
    def from_dict(d: dict) -> FieldDeclaration:
        """Create a field declaration from a dictionary."""
        if "name" not in d or "type" not in d:
            raise DeclarationError(f"Field declarations need 'name' and 'type': {d!r}")
        return FieldDeclaration(
            name=d["name"],
            type_expr=d["type"],
            directives=list(d.get("directives", [])),
            docs=_as_lines(d.get("docs")),
        )


@dataclass
class VariantDeclaration:
    """A named alternative of a union. Unit variants have no fields."""

    name: str = ""
    fields: list[FieldDeclaration] = field(default_factory=list)
    directives: list[str] = field(default_factory=list)
    docs: list[str] = field(default_factory=list)

    @staticmethod
    def from_dict(d: dict) -> VariantDeclaration:
        """Create a variant declaration from a dictionary."""
        if "name" not in d:
            raise DeclarationError(f"Variant declarations need a 'name': {d!r}")
        return VariantDeclaration(
            name=d["name"],
            fields=[FieldDeclaration.from_dict(f) for f in d.get("fields", [])],
            directives=list(d.get("directives", [])),
            docs=_as_lines(d.get("docs")),
        )


@dataclass
class Declaration:
    """A declared record or union type."""

    name: str = ""
    kind: DeclarationKind = DeclarationKind.RECORD

    # Record fields, in declaration order
    fields: list[FieldDeclaration] = field(default_factory=list)

    # Union variants, in declaration order
    variants: list[VariantDeclaration] = field(default_factory=list)

    # Raw type-level directives, e.g. 'serde(rename_all = "camelCase")'
    directives: list[str] = field(default_factory=list)

    docs: list[str] = field(default_factory=list)

    @staticmethod
    def record(name: str, fields: list[FieldDeclaration], directives: list[str] | None = None, docs: list[str] | None = None) -> Declaration:
        """Shorthand for a record declaration."""
        return Declaration(name=name, kind=DeclarationKind.RECORD, fields=fields, directives=directives or [], docs=docs or [])

    @staticmethod
    def union(name: str, variants: list[VariantDeclaration], directives: list[str] | None = None, docs: list[str] | None = None) -> Declaration:
        """Shorthand for a union declaration."""
        return Declaration(name=name, kind=DeclarationKind.UNION, variants=variants, directives=directives or [], docs=docs or [])

    @staticmethod
    def from_dict(d: dict) -> Declaration:
        """Create a declaration from its JSON form."""
        if "name" not in d:
            raise DeclarationError(f"Declarations need a 'name': {d!r}")
        try:
            kind = DeclarationKind(d.get("kind", "record"))
        except ValueError as e:
            raise DeclarationError(f"Unknown declaration kind {d.get('kind')!r} for {d['name']}") from e

        return Declaration(
            name=d["name"],
            kind=kind,
            fields=[FieldDeclaration.from_dict(f) for f in d.get("fields", [])],
            variants=[VariantDeclaration.from_dict(v) for v in d.get("variants", [])],
            directives=list(d.get("directives", [])),
            docs=_as_lines(d.get("docs")),
        )


def _as_lines(docs: str | list[str] | None) -> list[str]:
    """Normalize documentation to a list of lines."""
    if docs is None:
        return []
    if isinstance(docs, str):
        return docs.splitlines()
    return [line for entry in docs for line in str(entry).splitlines()]


def load_declarations(path: str | Path) -> list[Declaration]:
    """
    Load declarations from a JSON file.

    The file holds either a list of declarations or an object with an
    "entities" list. Order is preserved.
    """
    with open(path, encoding="utf-8") as f:
        data = json.load(f)

    entries = data.get("entities", []) if isinstance(data, dict) else data
    return [Declaration.from_dict(entry) for entry in entries]
