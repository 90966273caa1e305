"""Declaration input: the nodes handed to the generator and their parsers."""

from .nodes import (
    Declaration,
    DeclarationKind,
    Directive,
    FieldDeclaration,
    TypeExpr,
    TypeShape,
    VariantDeclaration,
    load_declarations,
)
from .parser import TypeExprParser, parse_directive, parse_type_expr

__all__ = [
    "Declaration",
    "DeclarationKind",
    "Directive",
    "FieldDeclaration",
    "TypeExpr",
    "TypeExprParser",
    "TypeShape",
    "VariantDeclaration",
    "load_declarations",
    "parse_directive",
    "parse_type_expr",
]
