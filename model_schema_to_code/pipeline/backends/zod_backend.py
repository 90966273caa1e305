"""
Zod validation-schema backend.

Builds a Zod node tree from the IR and serializes it. The same tree is
used to validate Python values, so the rendered schema and the tested
semantics cannot drift apart.
"""

from __future__ import annotations

from ..analyzer.ir_nodes import (
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
    VariantNode,
)
from ..config import Capability, Target
from .base import EntityBackend
from .zod_nodes import (
    ValidationContext,
    ZodArray,
    ZodBoolean,
    ZodDiscriminatedUnion,
    ZodEnum,
    ZodLazy,
    ZodLiteral,
    ZodNever,
    ZodNode,
    ZodNumber,
    ZodRecord,
    ZodStrictObject,
    ZodString,
    ZodUndefined,
    ZodUnionOr,
    schema_const_name,
)

IDENTIFIER_REGEX = r"^[a-f\d]{24}$"
IDENTIFIER_MESSAGE = "Invalid ObjectId"


def identifier_validator() -> ZodStrictObject:
    """Validator of the wrapped identifier form {"$oid": "<24 hex>"}."""
    return ZodStrictObject(
        shape={"$oid": ZodString(pattern=IDENTIFIER_REGEX, flags="i", message=IDENTIFIER_MESSAGE)},
        inline=True,
    )


class ZodBackend(EntityBackend):
    """Zod emission backend."""

    TARGET = Target.VALIDATION_SCHEMA
    TEMPLATE_LANG = "typescript"

    def emit(self, entity: EntityNode) -> str:
        """Render the exported schema constant of one entity."""
        template = self.get_template("zod_schema.ts.jinja2")
        return template.render(
            SCHEMA_NAME=schema_const_name(entity.wire_name),
            TYPE_ANNOTATION=self._type_annotation(entity),
            SCHEMA=self.schema_node(entity).render(),
        ).strip()

    def schema_node(self, entity: EntityNode) -> ZodNode:
        """Build the validation tree of one entity."""
        if isinstance(entity.kind, RecordKind):
            return self._object(entity.kind.fields)

        if entity.kind.is_tagged:
            return ZodDiscriminatedUnion(
                discriminator=entity.kind.tag_key,
                options=[self._variant(v, entity.kind.tag_key) for v in entity.kind.variants],
            )

        if not entity.kind.variants:
            return ZodNever()
        return ZodEnum(values=[v.wire_name for v in entity.kind.variants])

    def validation_context(self, entities: list[EntityNode]) -> ValidationContext:
        """A context in which references between the given entities resolve."""
        return ValidationContext(schemas={entity.wire_name: self.schema_node(entity) for entity in entities})

    def translate_type(self, node: TypeNode) -> ZodNode:
        """Translate an IR type into a Zod node."""
        if isinstance(node, Primitive):
            if node.kind == PrimitiveKind.STRING:
                if node.literal is not None:
                    return ZodLiteral(node.literal)
                return ZodString(min_length=node.min_length)
            if node.kind == PrimitiveKind.BOOLEAN:
                return ZodBoolean()
            return ZodNumber(integer=node.kind == PrimitiveKind.INTEGER)

        if isinstance(node, Optional):
            return ZodUnionOr(self.translate_type(node.inner), ZodUndefined())

        if isinstance(node, List):
            return ZodArray(self.translate_type(node.element))

        if isinstance(node, StringMap):
            return ZodRecord(self.translate_type(node.value))

        if isinstance(node, Reference):
            return ZodLazy(node.entity_name)

        if isinstance(node, IdentifierType):
            return identifier_validator()

        raise self._unknown_node(node)

    def _object(self, fields: tuple[FieldNode, ...], pinned: dict[str, ZodNode] | None = None) -> ZodStrictObject:
        shape: dict[str, ZodNode] = dict(pinned or {})
        for field in fields:
            shape[field.wire_name] = self.translate_type(field.type)
        return ZodStrictObject(shape=shape)

    def _variant(self, variant: VariantNode, tag_key: str) -> ZodStrictObject:
        return self._object(variant.fields, {tag_key: ZodLiteral(variant.wire_name)})

    def _type_annotation(self, entity: EntityNode) -> str | None:
        # Without structural types there is no TypeScript type to annotate with
        if not self.features.is_enabled(Capability.STRUCTURAL_TYPE):
            return None
        if entity.is_plain_union:
            return f"z.Schema<{entity.wire_name}>"
        return f"z.Schema<{entity.wire_name}, z.ZodTypeDef, unknown>"
