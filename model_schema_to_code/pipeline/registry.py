"""
Registry that composes the generated artifact of many entities.

Entities are generated in the order they were added. A failing entity is
reported and left out; the others are still generated.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import jinja2
from loguru import logger

from ..utils import strip_suffix, to_kebab_case
from .analyzer import EntityAnalyzer, EntityNode, ReferenceTable, retarget_references
from .backends import JsonSchemaBackend, ValidationContext, ZodBackend
from .backends.typescript_backend import IDENTIFIER_TYPE_DECLARATION
from .config import Capability, GeneratorConfig
from .declaration import Declaration
from .diagnostics import Diagnostic, DiagnosticSink
from .errors import DuplicateWireNameError, ModelSchemaError
from .generator import EntityGenerator, EntityOutput

ZOD_IMPORT = 'import { z } from "zod";'
DEFAULT_GENERATION_COMMENT = "// Generated by model_schema_to_code. Do not edit by hand."


@dataclass
class EntityFailure:
    """An entity that could not be generated."""

    declared_name: str = ""
    error: ModelSchemaError | None = None

    def __str__(self) -> str:
        return str(self.error)


@dataclass
class GenerationResult:
    """Outcome of a registry run."""

    artifact: str = ""
    entities: list[EntityOutput] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)
    errors: list[EntityFailure] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.errors

    def entity(self, name: str) -> EntityOutput:
        """Look up a generated entity by declared or wire name."""
        for output in self.entities:
            if name in (output.declared_name, output.wire_name):
                return output
        raise KeyError(name)


def _error_code(error: ModelSchemaError) -> str:
    """Diagnostic code of an error, e.g. UnsupportedMapKeyError -> unsupported-map-key."""
    name = type(error).__name__
    if name.endswith("Error") and name != "Error":
        name = name[: -len("Error")]
    return to_kebab_case(name)


class Registry:
    """Collects declarations and generates one composite TypeScript artifact."""

    def __init__(self, config: GeneratorConfig | None = None):
        """
        Initialize the registry.

        Args:
            config: Generation configuration shared by every entity
        """
        self.config = config or GeneratorConfig()
        self.declarations: list[Declaration] = []
        template_dir = Path(__file__).parent.parent / "templates" / "typescript"
        self.jinja_env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(str(template_dir)),
            lstrip_blocks=True,
            trim_blocks=True,
        )

    def add(self, declaration: Declaration) -> Registry:
        """Append a declaration. Order is preserved and never sorted."""
        self.declarations.append(declaration)
        return self

    def extend(self, declarations: list[Declaration]) -> Registry:
        for declaration in declarations:
            self.add(declaration)
        return self

    def resolve(self, sink: DiagnosticSink | None = None) -> tuple[list[EntityNode], list[EntityFailure], dict]:
        """
        Resolve every declaration and check references between them.

        Returns:
            (resolved entities in order, failures, per-entity diagnostics keyed by declared name)
        """
        sink = sink if sink is not None else DiagnosticSink()
        entities: list[EntityNode] = []
        failures: list[EntityFailure] = []
        per_entity: dict[str, list[Diagnostic]] = {}

        # Pass 1: resolve each entity on its own
        seen_wire_names: dict[str, str] = {}
        for declaration in self.declarations:
            local = DiagnosticSink()
            try:
                entity = EntityAnalyzer(self.config, local).classify(declaration)
                if entity.wire_name in seen_wire_names:
                    raise DuplicateWireNameError(
                        entity.wire_name, seen_wire_names[entity.wire_name], declaration.name, entity=declaration.name
                    )
            except ModelSchemaError as e:
                self._fail(declaration.name, e, local, failures)
                sink.extend(local)
                continue
            seen_wire_names[entity.wire_name] = declaration.name
            entities.append(entity)
            per_entity[declaration.name] = local.diagnostics
            sink.extend(local)

        # References name entities by their suffix-stripped declared name
        entities = self._retarget(entities)

        # Pass 2: every wire name is known, check the references. A failing
        # entity leaves the table, so entities referring to it are checked again.
        while True:
            table = ReferenceTable([entity.wire_name for entity in entities])
            checked = []
            checked_diagnostics = {}
            for entity in entities:
                local = DiagnosticSink()
                try:
                    table.check(entity, self.config.undefined_references, local)
                except ModelSchemaError as e:
                    self._fail(entity.declared_name, e, local, failures)
                    sink.extend(local)
                    continue
                checked.append(entity)
                checked_diagnostics[entity.declared_name] = local
            if len(checked) == len(entities):
                break
            entities = checked

        for entity in checked:
            local = checked_diagnostics[entity.declared_name]
            per_entity[entity.declared_name].extend(local.diagnostics)
            sink.extend(local)

        return checked, failures, per_entity

    def _retarget(self, entities: list[EntityNode]) -> list[EntityNode]:
        """Point references at renamed entities under their final wire names."""
        targets = {}
        for entity in entities:
            name = strip_suffix(entity.declared_name, self.config.entity_suffix)
            if name != entity.wire_name:
                targets.setdefault(name, entity.wire_name)
        # A name that is itself some entity's wire name keeps pointing at that entity
        for entity in entities:
            targets.pop(entity.wire_name, None)

        if not targets:
            return entities
        return [retarget_references(entity, targets) for entity in entities]

    def _fail(self, name: str, error: ModelSchemaError, sink: DiagnosticSink, failures: list[EntityFailure]) -> None:
        field_name = getattr(error, "field", None)
        sink.error(_error_code(error), str(error), entity=name, field=field_name)
        failures.append(EntityFailure(declared_name=name, error=error))

    def generate(self, generation_comment: str | None = None) -> GenerationResult:
        """
        Generate the composite artifact.

        Args:
            generation_comment: Comment placed at the top of the artifact when
                add_generation_comment is set; a default is used when omitted

        Returns:
            GenerationResult with the artifact, per-entity outputs and diagnostics
        """
        sink = DiagnosticSink()
        entities, failures, per_entity = self.resolve(sink)

        generator = EntityGenerator(self.config)
        outputs = [generator.emit(entity, per_entity.get(entity.declared_name)) for entity in entities]

        fragments = [fragment for output in outputs for fragment in output.text_fragments()]
        artifact = self._render_prefix(generation_comment)
        if fragments:
            artifact += "\n\n" + "\n\n".join(fragments)
        artifact = artifact.strip() + "\n"

        logger.info(f"Generated {len(outputs)} entities, {len(failures)} failed")
        return GenerationResult(
            artifact=artifact,
            entities=outputs,
            diagnostics=list(sink.diagnostics),
            errors=failures,
        )

    def _render_prefix(self, generation_comment: str | None) -> str:
        features = self.config.features
        imports = [ZOD_IMPORT] if features.is_enabled(Capability.VALIDATION_SCHEMA) else []
        declarations = []
        if features.is_enabled(Capability.IDENTIFIER) and features.is_enabled(Capability.STRUCTURAL_TYPE):
            declarations.append(IDENTIFIER_TYPE_DECLARATION)

        comment = None
        if self.config.add_generation_comment:
            comment = generation_comment or DEFAULT_GENERATION_COMMENT

        template = self.jinja_env.get_template("prefix.ts.jinja2")
        return template.render(
            GENERATION_COMMENT=comment,
            IMPORTS=imports,
            DECLARATIONS=declarations,
        ).strip()

    def json_schema_document(self, result: GenerationResult | None = None) -> dict[str, Any]:
        """
        Bundle the JSON Schema of every resolvable entity into one draft-07 document.

        Failing entities are left out, as in generate(). When the result of a
        generate() run is given, its entities are reused instead of resolving again.
        """
        if result is not None:
            entities = [output.entity for output in result.entities]
        else:
            entities, _, _ = self.resolve()
        return JsonSchemaBackend(self.config).document(entities)

    def validation_context(self) -> ValidationContext:
        """Validation context holding the Zod tree of every resolvable entity."""
        entities, _, _ = self.resolve()
        return ZodBackend(self.config).validation_context(entities)
