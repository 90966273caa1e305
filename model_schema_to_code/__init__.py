"""Model Schema to Code Generator

A Python package for generating coordinated TypeScript types, Zod schemas
and JSON Schema documents from record and union declarations.
"""

__version__ = "0.3.0"

from .pipeline import (
    Capability,
    Declaration,
    EntityOutput,
    FeatureGate,
    GenerationResult,
    GeneratorConfig,
    ModelSchemaError,
    Registry,
    generate_entity,
    load_declarations,
)

__all__ = [
    "Capability",
    "Declaration",
    "EntityOutput",
    "FeatureGate",
    "GenerationResult",
    "GeneratorConfig",
    "ModelSchemaError",
    "Registry",
    "generate_entity",
    "load_declarations",
]
