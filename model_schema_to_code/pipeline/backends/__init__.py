"""
Emission backends.

Contains one emitter per target: TypeScript types, Zod schemas and JSON Schema.
"""

from __future__ import annotations

from .base import EntityBackend
from .json_schema_backend import JsonSchemaBackend
from .typescript_backend import TypeScriptBackend
from .zod_backend import ZodBackend
from .zod_nodes import ValidationContext, ValidationResult, ZodNode

__all__ = [
    "EntityBackend",
    "JsonSchemaBackend",
    "TypeScriptBackend",
    "ValidationContext",
    "ValidationResult",
    "ZodBackend",
    "ZodNode",
]
