"""
TypeScript structural-type backend.

Generates `export type` declarations from the IR using Jinja2 templates.
"""

from __future__ import annotations

import json
from typing import Any

from ...utils import format_doc_lines
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
    innermost_type,
)
from ..config import Capability, GeneratorConfig, Target
from .base import EntityBackend
from .json_schema_backend import JsonSchemaBackend
from .zod_nodes import js_key

IDENTIFIER_TYPE_NAME = "ObjectId"
IDENTIFIER_TYPE_DECLARATION = "export type ObjectId = { $oid: string };"


class TypeScriptBackend(EntityBackend):
    """TypeScript structural-type emission backend."""

    TARGET = Target.STRUCTURAL_TYPE
    TEMPLATE_LANG = "typescript"

    TYPE_MAP = {
        PrimitiveKind.BOOLEAN: "boolean",
        PrimitiveKind.STRING: "string",
        PrimitiveKind.INTEGER: "number",
        PrimitiveKind.FLOAT: "number",
    }

    def __init__(self, config: GeneratorConfig):
        super().__init__(config)
        self.type_template = self.get_template("type.ts.jinja2")
        self.json_schema_backend = None
        if config.embed_json_schema_in_docs and self.features.is_enabled(Capability.JSON_SCHEMA):
            self.json_schema_backend = JsonSchemaBackend(config)

    def emit(self, entity: EntityNode) -> str:
        """Render the `export type` declaration of one entity."""
        context: dict[str, Any] = {
            "TYPE_NAME": entity.wire_name,
            "DOC_LINES": self._entity_doc_lines(entity),
        }

        if isinstance(entity.kind, RecordKind):
            context["KIND"] = "record"
            context["FIELDS"] = [self._prepare_field_context(f) for f in entity.kind.fields]
        elif entity.kind.is_tagged:
            context["KIND"] = "tagged"
            context["VARIANTS"] = [self._render_variant(v, entity.kind.tag_key) for v in entity.kind.variants]
        else:
            context["KIND"] = "plain"
            context["MEMBERS"] = [json.dumps(v.wire_name) for v in entity.kind.variants]

        return self.type_template.render(context).strip()

    def translate_type(self, node: TypeNode) -> str:
        """Translate an IR type to a TypeScript type string."""
        if isinstance(node, Primitive):
            if node.literal is not None:
                return json.dumps(node.literal)
            return self.TYPE_MAP[node.kind]

        if isinstance(node, Optional):
            return f"{self.translate_type(node.inner)} | undefined"

        if isinstance(node, List):
            return f"Array<{self.translate_type(node.element)}>"

        if isinstance(node, StringMap):
            return f"Partial<Record<string, {self.translate_type(node.value)}>>"

        if isinstance(node, Reference):
            return node.entity_name

        if isinstance(node, IdentifierType):
            return IDENTIFIER_TYPE_NAME

        raise self._unknown_node(node)

    def _prepare_field_context(self, field: FieldNode) -> dict[str, Any]:
        """
        Prepare the template context for a field.

        Args:
            field: The resolved field

        Returns:
            Dictionary of template variables
        """
        return {
            "key": js_key(field.wire_name),
            "type": self.translate_type(field.type),
            "required": field.required,
            "doc_lines": self._field_doc_lines(field),
        }

    def _render_variant(self, variant: VariantNode, tag_key: str) -> str:
        """Render one tagged-union branch as an inline object type."""
        members = [([], f"{js_key(tag_key)}: {json.dumps(variant.wire_name)}")]
        for field in variant.fields:
            optional = "" if field.required else "?"
            members.append(
                (self._field_doc_lines(field), f"{js_key(field.wire_name)}{optional}: {self.translate_type(field.type)}")
            )

        if not any(doc_lines for doc_lines, _ in members):
            return "{ " + "; ".join(member for _, member in members) + " }"

        # Documented fields need one line per member
        lines = ["{"]
        for doc_lines, member in members:
            lines.extend(f"      {line}" for line in doc_lines)
            lines.append(f"      {member};")
        lines.append("    }")
        return "\n".join(lines)

    def _field_doc_lines(self, field: FieldNode) -> list[str]:
        lines = list(field.doc_comment)
        inner = innermost_type(field.type)
        if isinstance(inner, Primitive) and inner.min_length is not None:
            lines.append(f"Minimum length: {inner.min_length}")

        if not lines:
            return []
        if len(lines) == 1:
            return [f"/** {lines[0]} */"]
        return ["/**", *format_doc_lines(lines), " */"]

    def _entity_doc_lines(self, entity: EntityNode) -> list[str]:
        lines = list(entity.doc_comment)

        if self.json_schema_backend is not None:
            schema = json.dumps(self.json_schema_backend.emit(entity), indent=2)
            if lines:
                lines.append("")
            lines.append("JSON Schema:")
            lines.extend(schema.splitlines())

        if not lines:
            return []
        return ["/**", *format_doc_lines(lines), " */"]
