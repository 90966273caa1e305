"""
Type resolver.

Reduces a declared type expression to one node of the closed TypeNode
vocabulary. Resolution is structural: the same expression always resolves
to the same node, wherever it appears.
"""

from __future__ import annotations

from dataclasses import replace

from loguru import logger

from ...utils import strip_suffix
from ..config import Capability, GeneratorConfig, UnknownTypePolicy
from ..declaration import TypeExpr, TypeShape, parse_type_expr
from ..diagnostics import DiagnosticSink
from ..errors import (
    InvalidRefinementError,
    NestedOptionalError,
    ResolutionError,
    UnsupportedMapKeyError,
    UnsupportedTypeError,
)
from .ir_nodes import (
    IdentifierType,
    List,
    Optional,
    Primitive,
    PrimitiveKind,
    Reference,
    StringMap,
    TypeNode,
)

PRIMITIVE_TYPES: dict[str, PrimitiveKind] = {
    "bool": PrimitiveKind.BOOLEAN,
    "String": PrimitiveKind.STRING,
    "str": PrimitiveKind.STRING,
    "char": PrimitiveKind.STRING,
    **{name: PrimitiveKind.INTEGER for name in ("u8", "u16", "u32", "u64", "u128", "usize")},
    **{name: PrimitiveKind.INTEGER for name in ("i8", "i16", "i32", "i64", "i128", "isize")},
    "f32": PrimitiveKind.FLOAT,
    "f64": PrimitiveKind.FLOAT,
}

OPTIONAL_TYPES = {"Option"}
LIST_TYPES = {"Vec", "VecDeque", "HashSet", "BTreeSet", "IndexSet"}
MAP_TYPES = {"HashMap", "BTreeMap", "IndexMap"}
TRANSPARENT_TYPES = {"Box", "Rc", "Arc"}
IDENTIFIER_TYPES = {"ObjectId"}

# Name given to degraded types that have no usable name of their own
UNKNOWN_TYPE_NAME = "Unknown"


class TypeResolver:
    """Resolves type expressions for the fields of one entity."""

    def __init__(self, config: GeneratorConfig, sink: DiagnosticSink, entity: str | None = None):
        """
        Initialize the resolver.

        Args:
            config: Generator configuration (feature gate and policies)
            sink: Where non-fatal diagnostics go
            entity: Declared name of the entity being resolved
        """
        self.config = config
        self.features = config.features
        self.sink = sink
        self.entity = entity

    def resolve(self, type_expr: TypeExpr | str, field: str | None = None) -> TypeNode:
        """
        Resolve a type expression into a TypeNode.

        Args:
            type_expr: Parsed expression or raw spelling
            field: Declared field name, for diagnostics

        Raises:
            ResolutionError: If the type cannot be represented
        """
        if isinstance(type_expr, str):
            type_expr = parse_type_expr(type_expr)
        try:
            return self._resolve(type_expr, field, in_collection=False)
        except ResolutionError as e:
            raise e.with_location(self.entity, field) from None

    def resolve_field(
        self,
        type_expr: TypeExpr | str,
        field: str | None = None,
        override: str | None = None,
        literal: str | None = None,
        min_length: int | None = None,
    ) -> TypeNode:
        """
        Resolve the type of a field, honoring its override and refinements.

        An override (`as = T`) replaces the declared type before resolution.
        """
        if override is not None:
            logger.debug(f"{self.entity}.{field}: type overridden as {override}")
            type_expr = override

        node = self.resolve(type_expr, field)
        if literal is not None or min_length is not None:
            node = self._refine(node, literal, min_length, field)
        return node

    def _resolve(self, expr: TypeExpr, field: str | None, in_collection: bool) -> TypeNode:
        if expr.shape == TypeShape.REFERENCE:
            return self._resolve(expr.args[0], field, in_collection)

        if expr.shape == TypeShape.ARRAY:
            return List(self._resolve_element(expr.args[0], field))

        if expr.shape == TypeShape.TUPLE:
            return self._unsupported(expr, field, "tuples are not supported")

        name, args = expr.name, expr.args

        if name in PRIMITIVE_TYPES and not args:
            return Primitive(PRIMITIVE_TYPES[name])

        if name in IDENTIFIER_TYPES and not args:
            return self._resolve_identifier(name, field)

        if name in OPTIONAL_TYPES and len(args) == 1:
            inner = self._resolve(args[0], field, in_collection)
            if isinstance(inner, Optional):
                raise NestedOptionalError(
                    "Optional types cannot be nested", field=field, type_spelling=expr.spelling
                )
            if in_collection:
                raise NestedOptionalError(
                    "Collections cannot hold optional elements", field=field, type_spelling=expr.spelling
                )
            return Optional(inner)

        if name in TRANSPARENT_TYPES and len(args) == 1:
            return self._resolve(args[0], field, in_collection)

        if name in LIST_TYPES and len(args) == 1:
            return List(self._resolve_element(args[0], field))

        if name in MAP_TYPES and len(args) == 2:
            self._check_map_key(args[0], field)
            return StringMap(self._resolve_element(args[1], field))

        if not args and name not in OPTIONAL_TYPES | TRANSPARENT_TYPES | LIST_TYPES | MAP_TYPES:
            # Open world: any other bare name refers to another entity
            return Reference(strip_suffix(name, self.config.entity_suffix))

        return self._unsupported(expr, field, f"unsupported generic type {expr.spelling!r}")

    def _resolve_element(self, expr: TypeExpr, field: str | None) -> TypeNode:
        return self._resolve(expr, field, in_collection=True)

    def _check_map_key(self, key: TypeExpr, field: str | None) -> None:
        """Only text keys are allowed. Anything else fails, even under the reference policy."""
        try:
            node = self._resolve(key, field, in_collection=True)
        except ResolutionError:
            node = None
        if not (isinstance(node, Primitive) and node.kind == PrimitiveKind.STRING):
            raise UnsupportedMapKeyError(key.spelling, field=field)

    def _resolve_identifier(self, name: str, field: str | None) -> TypeNode:
        if self.features.is_enabled(Capability.IDENTIFIER):
            return IdentifierType()
        self.sink.warn(
            "identifier-disabled",
            f"{name} used while the identifier capability is disabled; treated as an opaque reference",
            entity=self.entity,
            field=field,
        )
        return Reference(name)

    def _unsupported(self, expr: TypeExpr, field: str | None, reason: str) -> TypeNode:
        if self.config.unknown_type_policy == UnknownTypePolicy.REFERENCE:
            name = strip_suffix(expr.name, self.config.entity_suffix) if expr.name else UNKNOWN_TYPE_NAME
            self.sink.warn(
                "unsupported-type-degraded",
                f"{reason}; degraded to a reference to {name}",
                entity=self.entity,
                field=field,
            )
            return Reference(name)
        raise UnsupportedTypeError(reason, field=field, type_spelling=expr.spelling)

    def _refine(self, node: TypeNode, literal: str | None, min_length: int | None, field: str | None) -> TypeNode:
        """Apply string refinements to the innermost string primitive."""
        if isinstance(node, Optional):
            return Optional(self._refine(node.inner, literal, min_length, field))
        if isinstance(node, List):
            return List(self._refine(node.element, literal, min_length, field))
        if isinstance(node, StringMap):
            return StringMap(self._refine(node.value, literal, min_length, field))
        if isinstance(node, Primitive) and node.kind == PrimitiveKind.STRING:
            return replace(node, literal=literal, min_length=min_length)
        raise InvalidRefinementError(
            "literal and minLength only apply to string fields",
            entity=self.entity,
            field=field,
        )
