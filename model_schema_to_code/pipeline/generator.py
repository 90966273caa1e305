"""
Per-entity generator.

Resolves one declaration once and runs every enabled emitter over the
resulting IR. Emitters of disabled capabilities are never constructed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .analyzer import EntityAnalyzer, EntityNode
from .backends import EntityBackend, JsonSchemaBackend, TypeScriptBackend, ZodBackend
from .config import GeneratorConfig, Target
from .declaration import Declaration
from .diagnostics import Diagnostic, DiagnosticSink
from .errors import CapabilityDisabledError

BACKENDS: dict[Target, type[EntityBackend]] = {
    Target.STRUCTURAL_TYPE: TypeScriptBackend,
    Target.VALIDATION_SCHEMA: ZodBackend,
    Target.JSON_SCHEMA: JsonSchemaBackend,
}

# Targets whose fragments are TypeScript source and go into the composite artifact
TEXT_TARGETS = (Target.STRUCTURAL_TYPE, Target.VALIDATION_SCHEMA)


@dataclass
class EntityOutput:
    """The artifacts generated for one entity, keyed by target."""

    entity: EntityNode
    fragments: dict[Target, Any] = field(default_factory=dict)
    diagnostics: list[Diagnostic] = field(default_factory=list)

    @property
    def declared_name(self) -> str:
        return self.entity.declared_name

    @property
    def wire_name(self) -> str:
        return self.entity.wire_name

    def has(self, target: Target) -> bool:
        return target in self.fragments

    def _get(self, target: Target) -> Any:
        if target not in self.fragments:
            raise CapabilityDisabledError(target.value, self.declared_name)
        return self.fragments[target]

    def ts_definition(self) -> str:
        """The `export type` declaration."""
        return self._get(Target.STRUCTURAL_TYPE)

    def zod_schema(self) -> str:
        """The `export const Name$Schema` declaration."""
        return self._get(Target.VALIDATION_SCHEMA)

    def json_schema(self) -> dict[str, Any]:
        """The JSON Schema document of the entity."""
        return self._get(Target.JSON_SCHEMA)

    def enum_members(self) -> list[str]:
        """Wire names of a plain union's members, in declaration order."""
        if not self.entity.is_plain_union:
            raise TypeError(f"{self.declared_name} is not a plain union")
        return [variant.wire_name for variant in self.entity.kind.variants]

    def text_fragments(self) -> list[str]:
        """TypeScript fragments in emission order."""
        return [self.fragments[target] for target in TEXT_TARGETS if target in self.fragments]


class EntityGenerator:
    """Runs the enabled emitters over resolved entities."""

    def __init__(self, config: GeneratorConfig | None = None):
        self.config = config or GeneratorConfig()
        self.backends: dict[Target, EntityBackend] = {
            target: BACKENDS[target](self.config) for target in self.config.features.enabled_targets()
        }

    def emit(self, entity: EntityNode, diagnostics: list[Diagnostic] | None = None) -> EntityOutput:
        """Emit every enabled artifact for one entity."""
        fragments = {target: backend.emit(entity) for target, backend in self.backends.items()}
        return EntityOutput(entity=entity, fragments=fragments, diagnostics=list(diagnostics or []))


def generate_entity(
    declaration: Declaration,
    config: GeneratorConfig | None = None,
    sink: DiagnosticSink | None = None,
) -> EntityOutput:
    """
    Resolve one declaration and emit its artifacts.

    Args:
        declaration: The declaration to generate
        config: Generation configuration
        sink: Collects diagnostics; a fresh sink is used when omitted

    Returns:
        EntityOutput with one fragment per enabled target

    Raises:
        ResolutionError: If the entity cannot be resolved
        DeclarationError: If the declaration is malformed
    """
    config = config or GeneratorConfig()
    local_sink = DiagnosticSink()
    try:
        entity = EntityAnalyzer(config, local_sink).classify(declaration)
    finally:
        if sink is not None:
            sink.extend(local_sink)
    return EntityGenerator(config).emit(entity, local_sink.diagnostics)
