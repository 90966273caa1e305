"""
Exception classes raised while reading declarations and resolving entities.
"""

from __future__ import annotations


class ModelSchemaError(Exception):
    """Base class for all errors raised by the generator."""

    pass


class DeclarationError(ModelSchemaError):
    """Raised when a declaration handed to the generator is malformed."""

    pass


class DirectiveSyntaxError(DeclarationError):
    """Raised when raw directive text cannot be parsed."""

    def __init__(self, text: str, reason: str):
        self.text = text
        self.reason = reason
        super().__init__(f"Invalid directive {text!r}: {reason}")


class TypeSyntaxError(DeclarationError):
    """Raised when a type spelling cannot be parsed."""

    def __init__(self, spelling: str, reason: str):
        self.spelling = spelling
        self.reason = reason
        super().__init__(f"Invalid type expression {spelling!r}: {reason}")


class ResolutionError(ModelSchemaError):
    """Fatal error that blocks generation for one entity.

    Attributes:
        entity: Declared name of the entity being resolved
        field: Declared name of the field (or variant) involved, if any
        type_spelling: Offending type spelling, if any
    """

    def __init__(
        self,
        message: str,
        entity: str | None = None,
        field: str | None = None,
        type_spelling: str | None = None,
    ):
        self.message = message
        self.entity = entity
        self.field = field
        self.type_spelling = type_spelling
        super().__init__(self._format())

    def _format(self) -> str:
        location = []
        if self.entity:
            location.append(self.entity)
        if self.field:
            location.append(self.field)
        prefix = ".".join(location)
        return f"{prefix}: {self.message}" if prefix else self.message

    def with_location(self, entity: str | None = None, field: str | None = None) -> ResolutionError:
        """Fill in location details that were not known where the error was raised."""
        if self.entity is None and entity is not None:
            self.entity = entity
        if self.field is None and field is not None:
            self.field = field
        self.args = (self._format(),)
        return self


class NestedOptionalError(ResolutionError):
    """Raised for Option<Option<T>> and for optionals nested inside collections."""

    pass


class UnsupportedMapKeyError(ResolutionError):
    """Raised when an associative type is keyed by anything other than text."""

    def __init__(self, key_spelling: str, entity: str | None = None, field: str | None = None):
        self.key_spelling = key_spelling
        super().__init__(
            f"Map keys must be strings, got {key_spelling!r}",
            entity=entity,
            field=field,
            type_spelling=key_spelling,
        )


class UnsupportedTypeError(ResolutionError):
    """Raised for type shapes outside the supported vocabulary."""

    pass


class DuplicateWireNameError(ResolutionError):
    """Raised when two fields or variants resolve to the same wire name."""

    def __init__(self, wire_name: str, first: str, second: str, entity: str | None = None):
        self.wire_name = wire_name
        self.first = first
        self.second = second
        super().__init__(
            f"{first!r} and {second!r} both resolve to wire name {wire_name!r}",
            entity=entity,
            field=second,
        )


class TagFieldCollisionError(ResolutionError):
    """Raised when a variant field uses the wire name of the union's tag key."""

    def __init__(self, tag_key: str, variant: str, entity: str | None = None):
        self.tag_key = tag_key
        self.variant = variant
        super().__init__(
            f"Variant {variant!r} has a field named {tag_key!r}, which is the discriminant key",
            entity=entity,
            field=variant,
        )


class UnsupportedCasingError(ResolutionError):
    """Raised for unknown rename_all policies."""

    def __init__(self, policy: str, entity: str | None = None):
        self.policy = policy
        super().__init__(f"Unsupported casing policy {policy!r}", entity=entity)


class InvalidRefinementError(ResolutionError):
    """Raised when a literal or minLength refinement targets a non-string type."""

    pass


class InvalidDirectiveValueError(ResolutionError):
    """Raised when a naming directive argument that takes a name is given something else."""

    def __init__(self, key: str, value, entity: str | None = None, field: str | None = None):
        self.key = key
        self.value = value
        super().__init__(f"{key} expects a string value, got {value!r}", entity=entity, field=field)


class UndefinedReferenceError(ResolutionError):
    """Raised when strict reference checking finds a reference to an unknown entity."""

    pass


class CapabilityDisabledError(ModelSchemaError):
    """Raised when accessing an artifact whose capability is disabled."""

    def __init__(self, capability: str, entity: str):
        self.capability = capability
        self.entity = entity
        super().__init__(f"{entity} has no {capability} artifact: the capability is disabled")
