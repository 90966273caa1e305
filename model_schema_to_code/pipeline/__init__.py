"""
Pipeline - declaration to TypeScript, Zod and JSON Schema generator.

This module provides a multi-phase architecture where every artifact is
rendered from one resolved intermediate representation:

1. Phase 1 (Declaration): Parse directives and type spellings
2. Phase 2 (Analyzer): Resolve wire names and types, classify entities into IR
3. Phase 3 (Backends): Emit TypeScript types, Zod schemas and JSON Schema
4. Phase 4 (Registry): Check references and compose the artifact
"""

from __future__ import annotations

from .analyzer import EntityAnalyzer, EntityNode, classify
from .config import (
    Capability,
    FeatureGate,
    GeneratorConfig,
    Target,
    UndefinedReferencePolicy,
    UnknownTypePolicy,
)
from .declaration import (
    Declaration,
    DeclarationKind,
    FieldDeclaration,
    VariantDeclaration,
    load_declarations,
    parse_directive,
    parse_type_expr,
)
from .diagnostics import Diagnostic, DiagnosticSink, Severity
from .errors import (
    CapabilityDisabledError,
    DeclarationError,
    ModelSchemaError,
    ResolutionError,
)
from .generator import EntityGenerator, EntityOutput, generate_entity
from .registry import GenerationResult, Registry

__all__ = [
    "Capability",
    "CapabilityDisabledError",
    "Declaration",
    "DeclarationError",
    "DeclarationKind",
    "Diagnostic",
    "DiagnosticSink",
    "EntityAnalyzer",
    "EntityGenerator",
    "EntityNode",
    "EntityOutput",
    "FeatureGate",
    "FieldDeclaration",
    "GenerationResult",
    "GeneratorConfig",
    "ModelSchemaError",
    "Registry",
    "ResolutionError",
    "Severity",
    "Target",
    "UndefinedReferencePolicy",
    "UnknownTypePolicy",
    "VariantDeclaration",
    "classify",
    "generate_entity",
    "load_declarations",
    "parse_directive",
    "parse_type_expr",
]
