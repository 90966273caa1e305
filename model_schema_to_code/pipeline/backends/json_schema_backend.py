"""
JSON Schema backend.

Renders entities as draft-07 JSON Schema documents. Optionality is encoded
only by leaving a field out of "required"; absent and null are never
conflated through nullable unions.
"""

from __future__ import annotations

from typing import Any

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
from ..config import Target
from .base import EntityBackend

DRAFT_07 = "http://json-schema.org/draft-07/schema#"
DEFINITIONS_PREFIX = "#/definitions/"
IDENTIFIER_PATTERN = "^[0-9a-fA-F]{24}$"


class JsonSchemaBackend(EntityBackend):
    """JSON Schema emission backend."""

    TARGET = Target.JSON_SCHEMA

    TYPE_MAP = {
        PrimitiveKind.BOOLEAN: "boolean",
        PrimitiveKind.STRING: "string",
        PrimitiveKind.INTEGER: "integer",
        PrimitiveKind.FLOAT: "number",
    }

    def emit(self, entity: EntityNode) -> dict[str, Any]:
        """Render one entity as a JSON Schema document."""
        schema: dict[str, Any] = {"title": entity.wire_name}
        if entity.doc_comment:
            schema["description"] = "\n".join(entity.doc_comment)

        if isinstance(entity.kind, RecordKind):
            schema.update(self._object_schema(entity.kind.fields))
        elif entity.kind.is_tagged:
            schema["type"] = "object"
            schema["oneOf"] = [self._variant_schema(v, entity.kind.tag_key) for v in entity.kind.variants]
        else:
            schema["type"] = "string"
            schema["enum"] = [v.wire_name for v in entity.kind.variants]

        return schema

    def document(self, entities: list[EntityNode]) -> dict[str, Any]:
        """Bundle several entities into one draft-07 document under "definitions"."""
        return {
            "$schema": DRAFT_07,
            "definitions": {entity.wire_name: self.emit(entity) for entity in entities},
        }

    def translate_type(self, node: TypeNode) -> dict[str, Any]:
        """Translate an IR type into a JSON Schema fragment."""
        if isinstance(node, Primitive):
            schema: dict[str, Any] = {"type": self.TYPE_MAP[node.kind]}
            if node.literal is not None:
                schema["const"] = node.literal
            if node.min_length is not None:
                schema["minLength"] = node.min_length
            return schema

        if isinstance(node, Optional):
            # Absence is expressed by the containing object's "required" list
            return self.translate_type(node.inner)

        if isinstance(node, List):
            return {"type": "array", "items": self.translate_type(node.element)}

        if isinstance(node, StringMap):
            return {"type": "object", "additionalProperties": self.translate_type(node.value)}

        if isinstance(node, Reference):
            return {"$ref": f"{DEFINITIONS_PREFIX}{node.entity_name}"}

        if isinstance(node, IdentifierType):
            return identifier_schema()

        raise self._unknown_node(node)

    def _field_schema(self, field: FieldNode) -> dict[str, Any]:
        schema = self.translate_type(field.type)
        # Keywords next to $ref are ignored by draft-07 validators
        if field.doc_comment and "$ref" not in schema:
            schema = {**schema, "description": "\n".join(field.doc_comment)}
        return schema

    def _object_schema(self, fields: tuple[FieldNode, ...], pinned: dict[str, Any] | None = None) -> dict[str, Any]:
        properties: dict[str, Any] = dict(pinned or {})
        required: list[str] = list(pinned or {})
        for field in fields:
            properties[field.wire_name] = self._field_schema(field)
            if field.required:
                required.append(field.wire_name)

        return {
            "type": "object",
            "properties": properties,
            "required": required,
            "additionalProperties": False,
        }

    def _variant_schema(self, variant: VariantNode, tag_key: str) -> dict[str, Any]:
        schema: dict[str, Any] = {"title": variant.wire_name}
        if variant.doc_comment:
            schema["description"] = "\n".join(variant.doc_comment)
        schema.update(self._object_schema(variant.fields, {tag_key: {"type": "string", "const": variant.wire_name}}))
        return schema


def identifier_schema() -> dict[str, Any]:
    """Schema of the wrapped identifier form {"$oid": "<24 hex>"}."""
    return {
        "type": "object",
        "properties": {"$oid": {"type": "string", "pattern": IDENTIFIER_PATTERN}},
        "required": ["$oid"],
        "additionalProperties": False,
    }
