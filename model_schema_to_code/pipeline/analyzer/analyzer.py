"""
Entity analyzer that builds the IR from a declaration.

Phase 2 of the pipeline: read directives, resolve wire names and field
types, and classify the declaration as a record, plain union or tagged
union.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any

from loguru import logger

from ...utils import strip_suffix
from ..config import Capability, GeneratorConfig
from ..declaration import Declaration, DeclarationKind, FieldDeclaration, parse_directive
from ..diagnostics import DiagnosticSink
from ..errors import InvalidDirectiveValueError, InvalidRefinementError, ResolutionError, TagFieldCollisionError
from .ir_nodes import (
    EntityNode,
    FieldNode,
    Optional,
    RecordKind,
    UnionKind,
    VariantNode,
    collect_references,
    iter_fields,
)
from .name_resolver import NameResolver
from .type_resolver import TypeResolver

NAMING_NAMESPACE = "serde"
PROPERTY_NAMESPACE = "model_schema_prop"

# serde flags that remove a field from the wire form entirely
SKIP_FLAGS = ("skip", "skip_serializing", "skip_deserializing")

# serde arguments that name something and must be given a string
NAME_ARGS = ("rename", "rename_all", "rename_all_fields", "tag")


@dataclass
class DirectiveSet:
    """Directive arguments of one item, grouped by namespace."""

    naming: dict[str, Any] = field(default_factory=dict)
    properties: dict[str, Any] = field(default_factory=dict)


class EntityAnalyzer:
    """Turns declarations into EntityNodes."""

    def __init__(self, config: GeneratorConfig | None = None, sink: DiagnosticSink | None = None):
        self.config = config or GeneratorConfig()
        self.sink = sink if sink is not None else DiagnosticSink()

    def classify(self, declaration: Declaration) -> EntityNode:
        """
        Classify a declaration and resolve all of its fields.

        Args:
            declaration: The declaration to analyze

        Returns:
            The resolved EntityNode

        Raises:
            ResolutionError: If the entity cannot be generated
            DeclarationError: If a directive or type spelling is malformed
        """
        try:
            return self._classify(declaration)
        except ResolutionError as e:
            raise e.with_location(declaration.name) from None

    def _classify(self, declaration: Declaration) -> EntityNode:
        naming_enabled = self._check_naming(declaration)
        directives = self._collect(declaration.directives, naming_enabled)
        resolver = TypeResolver(self.config, self.sink, entity=declaration.name)

        wire_name = directives.naming.get("rename")
        if wire_name is None:
            wire_name = strip_suffix(declaration.name, self.config.entity_suffix)
            if wire_name == declaration.name:
                logger.debug(f"{declaration.name} has no {self.config.entity_suffix!r} suffix; wire name unchanged")

        if declaration.kind == DeclarationKind.RECORD:
            fields = self._resolve_fields(
                declaration.name, declaration.fields, directives.naming.get("rename_all"), resolver, naming_enabled
            )
            kind: RecordKind | UnionKind = RecordKind(fields=fields)
        else:
            kind = self._classify_union(declaration, directives, resolver, naming_enabled)

        entity = EntityNode(
            declared_name=declaration.name,
            wire_name=wire_name,
            kind=kind,
            doc_comment=tuple(declaration.docs),
        )
        return replace(entity, references=tuple(self._references(entity)))

    def _classify_union(
        self,
        declaration: Declaration,
        directives: DirectiveSet,
        resolver: TypeResolver,
        naming_enabled: bool,
    ) -> UnionKind:
        """Resolve variants and decide between plain and tagged."""
        variant_names = NameResolver(directives.naming.get("rename_all"), entity=declaration.name)
        tagged = any(variant.fields for variant in declaration.variants)

        variants = []
        for variant in declaration.variants:
            variant_directives = self._collect(variant.directives, naming_enabled, field=variant.name)
            wire_name = variant_names.resolve(variant.name, variant_directives.naming.get("rename"))

            # Variant-level rename_all wins over the union-level rename_all_fields
            policy = variant_directives.naming.get("rename_all", directives.naming.get("rename_all_fields"))
            fields = self._resolve_fields(declaration.name, variant.fields, policy, resolver, naming_enabled)
            variants.append(
                VariantNode(
                    declared_name=variant.name,
                    wire_name=wire_name,
                    fields=fields,
                    doc_comment=tuple(variant.docs),
                )
            )

        if not tagged:
            if "tag" in directives.naming:
                logger.debug(f"{declaration.name}: tag key ignored for a union without payloads")
            return UnionKind(variants=tuple(variants), tag_key=None)

        tag_key = directives.naming.get("tag", self.config.default_tag_key)
        for variant in variants:
            for field_node in variant.fields:
                if field_node.wire_name == tag_key:
                    raise TagFieldCollisionError(tag_key, variant.declared_name, entity=declaration.name)

        return UnionKind(variants=tuple(variants), tag_key=tag_key)

    def _resolve_fields(
        self,
        entity: str,
        declarations: list[FieldDeclaration],
        policy: str | None,
        resolver: TypeResolver,
        naming_enabled: bool,
    ) -> tuple[FieldNode, ...]:
        names = NameResolver(policy, entity=entity)
        fields = []

        for declared in declarations:
            directives = self._collect(declared.directives, naming_enabled, field=declared.name)
            if any(directives.naming.get(flag) for flag in SKIP_FLAGS):
                logger.debug(f"{entity}.{declared.name}: skipped")
                continue

            wire_name = names.resolve(declared.name, directives.naming.get("rename"))
            literal, min_length = self._refinements(directives.properties, entity, declared.name)
            type_node = resolver.resolve_field(
                declared.type_expr,
                field=declared.name,
                override=self._override(directives.properties),
                literal=literal,
                min_length=min_length,
            )
            required = not isinstance(type_node, Optional)

            if "skip_serializing_if" in directives.naming and required:
                self.sink.warn(
                    "skip-if-on-required",
                    "skip_serializing_if on a required field; the field may be missing from serialized values",
                    entity=entity,
                    field=declared.name,
                )

            fields.append(
                FieldNode(
                    declared_name=declared.name,
                    wire_name=wire_name,
                    type=type_node,
                    required=required,
                    doc_comment=tuple(declared.docs),
                )
            )

        return tuple(fields)

    def _override(self, properties: dict[str, Any]) -> str | None:
        override = properties.get("as")
        return None if override is None else str(override)

    def _refinements(self, properties: dict[str, Any], entity: str, field_name: str) -> tuple[str | None, int | None]:
        literal = properties.get("literal")
        min_length = properties.get("minLength")
        if literal is not None and not isinstance(literal, str):
            raise InvalidRefinementError("literal must be a string", entity=entity, field=field_name)
        if min_length is not None and (isinstance(min_length, bool) or not isinstance(min_length, int) or min_length < 0):
            raise InvalidRefinementError("minLength must be a non-negative integer", entity=entity, field=field_name)
        return literal, min_length

    def _check_naming(self, declaration: Declaration) -> bool:
        """Warn once per entity when naming directives are present but the capability is off."""
        if self.config.features.is_enabled(Capability.NAMING):
            return True

        texts = list(declaration.directives)
        for item in [*declaration.fields, *declaration.variants]:
            texts.extend(item.directives)
        for variant in declaration.variants:
            for field_decl in variant.fields:
                texts.extend(field_decl.directives)

        if any(parse_directive(text).namespace == NAMING_NAMESPACE for text in texts):
            self.sink.warn(
                "naming-disabled",
                "naming directives are ignored because the naming capability is disabled",
                entity=declaration.name,
            )
        return False

    def _collect(self, texts: list[str], naming_enabled: bool, field: str | None = None) -> DirectiveSet:
        """Parse raw directive texts and merge their arguments by namespace."""
        result = DirectiveSet()
        for text in texts:
            directive = parse_directive(text)
            if directive.namespace == NAMING_NAMESPACE:
                if naming_enabled:
                    result.naming.update(directive.args)
            elif directive.namespace == PROPERTY_NAMESPACE:
                result.properties.update(directive.args)
            else:
                logger.debug(f"Ignoring directive {directive.namespace}")

        for key in NAME_ARGS:
            value = result.naming.get(key)
            if value is not None and not isinstance(value, str):
                raise InvalidDirectiveValueError(key, value, field=field)
        return result

    def _references(self, entity: EntityNode) -> list[str]:
        seen: list[str] = []
        for field_node in iter_fields(entity):
            for name in collect_references(field_node.type):
                if name not in seen:
                    seen.append(name)
        return seen


def classify(
    declaration: Declaration,
    config: GeneratorConfig | None = None,
    sink: DiagnosticSink | None = None,
) -> EntityNode:
    """Classify one declaration into an EntityNode."""
    return EntityAnalyzer(config, sink).classify(declaration)
