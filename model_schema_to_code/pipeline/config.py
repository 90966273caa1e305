"""
Configuration for the model schema generator.

The FeatureGate is the single immutable set of capability flags threaded
through every resolution and emission call. GeneratorConfig wraps it with
the remaining generation options.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from enum import Enum


class Capability(str, Enum):
    """Independently toggleable generation capabilities."""

    NAMING = "naming"  # serde rename / rename_all / tag directives
    VALIDATION_SCHEMA = "validation_schema"  # Zod schemas
    JSON_SCHEMA = "json_schema"  # JSON Schema documents
    IDENTIFIER = "identifier"  # ObjectId support
    STRUCTURAL_TYPE = "structural_type"  # TypeScript types


class Target(str, Enum):
    """Emission targets, each backed by the capability of the same name."""

    STRUCTURAL_TYPE = "structural_type"
    VALIDATION_SCHEMA = "validation_schema"
    JSON_SCHEMA = "json_schema"


# Emission order within one entity
TARGET_ORDER = [Target.STRUCTURAL_TYPE, Target.VALIDATION_SCHEMA, Target.JSON_SCHEMA]


class UnknownTypePolicy(str, Enum):
    """What to do with type shapes outside the supported vocabulary."""

    ERROR = "error"  # Default: fail the entity
    REFERENCE = "reference"  # Degrade to an opaque reference with a warning


class UndefinedReferencePolicy(str, Enum):
    """How the registry treats references to entities it never saw."""

    IGNORE = "ignore"  # Default: caller responsibility, not checked
    WARN = "warn"  # Report a warning per dangling reference
    ERROR = "error"  # Fail the referencing entity


@dataclass(frozen=True)
class FeatureGate:
    """Which optional capabilities are active. All are on by default."""

    naming: bool = True
    validation_schema: bool = True
    json_schema: bool = True
    identifier: bool = True
    structural_type: bool = True

    def is_enabled(self, capability: Capability) -> bool:
        """Check whether a capability is active."""
        return getattr(self, Capability(capability).value)

    def enabled_targets(self) -> list[Target]:
        """Emission targets whose capability is active, in emission order."""
        return [target for target in TARGET_ORDER if getattr(self, target.value)]

    def enabled_features(self) -> list[str]:
        """Names of the active capabilities, or ["minimal"] when none are."""
        features = [capability.value for capability in Capability if self.is_enabled(capability)]
        return features or ["minimal"]

    def without(self, *capabilities: Capability | str) -> FeatureGate:
        """Return a copy with the given capabilities disabled."""
        changes = {Capability(capability).value: False for capability in capabilities}
        return replace(self, **changes)

    @staticmethod
    def minimal() -> FeatureGate:
        """A gate with every capability disabled."""
        return FeatureGate(**{f.name: False for f in fields(FeatureGate)})

    @staticmethod
    def from_dict(d: dict) -> FeatureGate:
        """Create a gate from a dictionary, ignoring unknown keys."""
        known = {f.name for f in fields(FeatureGate)}
        return FeatureGate(**{k: bool(v) for k, v in d.items() if k in known})

    def to_dict(self) -> dict:
        """Convert the gate to a dictionary."""
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass
class GeneratorConfig:
    """Configuration options for generation."""

    # Active capabilities
    features: FeatureGate = field(default_factory=FeatureGate)

    # Suffix stripped from declared entity names to form wire names
    entity_suffix: str = "Json"

    # Discriminant key for tagged unions without a tag directive
    default_tag_key: str = "type"

    # Handling of tuples and unknown generic types
    unknown_type_policy: UnknownTypePolicy = UnknownTypePolicy.ERROR

    # Handling of references to entities missing from the registry
    undefined_references: UndefinedReferencePolicy = UndefinedReferencePolicy.IGNORE

    # Add generation comment at top of the composite artifact
    add_generation_comment: bool = True

    # Embed the JSON Schema in the JSDoc of each entity
    embed_json_schema_in_docs: bool = True

    @staticmethod
    def from_dict(d: dict) -> GeneratorConfig:
        """Create a config from a dictionary."""
        config = GeneratorConfig()
        for k, v in d.items():
            if k == "features" and isinstance(v, dict):
                config.features = FeatureGate.from_dict(v)
            elif k == "unknown_type_policy":
                config.unknown_type_policy = UnknownTypePolicy(v)
            elif k == "undefined_references":
                config.undefined_references = UndefinedReferencePolicy(v)
            elif hasattr(config, k):
                setattr(config, k, v)
        return config

    def to_dict(self) -> dict:
        """Convert config to a dictionary."""
        return {
            "features": self.features.to_dict(),
            "entity_suffix": self.entity_suffix,
            "default_tag_key": self.default_tag_key,
            "unknown_type_policy": self.unknown_type_policy.value,
            "undefined_references": self.undefined_references.value,
            "add_generation_comment": self.add_generation_comment,
            "embed_json_schema_in_docs": self.embed_json_schema_in_docs,
        }
