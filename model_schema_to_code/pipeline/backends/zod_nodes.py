"""
Zod validation tree node definitions.

These nodes represent a Zod schema expression. They are built from the IR
and serialized to TypeScript source with render(). Each node can also
validate a decoded JSON value in Python with the same semantics as the
rendered schema, which is how the generated schemas are tested.
"""

from __future__ import annotations

import json
import math
import re
from dataclasses import dataclass, field
from typing import Any

INDENT = "  "
_JS_IDENTIFIER = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")


class _Missing:
    """Marker for a key that is absent from its object."""

    def __repr__(self) -> str:
        return "MISSING"


MISSING = _Missing()


@dataclass
class ValidationIssue:
    """One validation failure."""

    path: str = ""
    message: str = ""

    def __str__(self) -> str:
        return f"{self.path or '<root>'}: {self.message}"


@dataclass
class ValidationResult:
    """Outcome of validating one value."""

    issues: list[ValidationIssue] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.issues


@dataclass
class ValidationContext:
    """Named schemas that z.lazy references resolve against."""

    schemas: dict[str, ZodNode] = field(default_factory=dict)

    def lookup(self, name: str) -> ZodNode | None:
        return self.schemas.get(name)


def _child_path(path: str, key: str | int) -> str:
    if isinstance(key, int):
        return f"{path}[{key}]"
    return f"{path}.{key}" if path else key


def _describe(value: Any) -> str:
    if value is MISSING:
        return "undefined"
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def _type_issue(path: str, expected: str, value: Any) -> list[ValidationIssue]:
    return [ValidationIssue(path, f"Expected {expected}, received {_describe(value)}")]


def js_key(key: str) -> str:
    """Render an object key, quoting it when it is not a valid identifier."""
    return key if _JS_IDENTIFIER.match(key) else json.dumps(key)


@dataclass
class ZodNode:
    """Base class for all Zod nodes."""

    def render(self, indent: int = 0) -> str:
        raise NotImplementedError

    def validate(self, value: Any, ctx: ValidationContext, path: str = "") -> list[ValidationIssue]:
        raise NotImplementedError

    def safe_parse(self, value: Any, ctx: ValidationContext | None = None) -> ValidationResult:
        """Validate a value, like Zod's safeParse."""
        return ValidationResult(self.validate(value, ctx or ValidationContext()))


@dataclass
class ZodBoolean(ZodNode):
    """z.boolean()"""

    def render(self, indent: int = 0) -> str:
        return "z.boolean()"

    def validate(self, value: Any, ctx: ValidationContext, path: str = "") -> list[ValidationIssue]:
        return [] if isinstance(value, bool) else _type_issue(path, "boolean", value)


@dataclass
class ZodString(ZodNode):
    """z.string() with optional .min() and .regex() checks."""

    min_length: int | None = None
    pattern: str | None = None  # JavaScript regex source
    flags: str = ""
    message: str | None = None

    def render(self, indent: int = 0) -> str:
        out = "z.string()"
        if self.min_length is not None:
            out += f".min({self.min_length})"
        if self.pattern is not None:
            regex = f"/{self.pattern}/{self.flags}"
            if self.message:
                out += f".regex({regex}, {{ message: {json.dumps(self.message)} }})"
            else:
                out += f".regex({regex})"
        return out

    def _compiled(self) -> re.Pattern:
        flags = re.ASCII
        if "i" in self.flags:
            flags |= re.IGNORECASE
        return re.compile(self.pattern, flags)

    def validate(self, value: Any, ctx: ValidationContext, path: str = "") -> list[ValidationIssue]:
        if not isinstance(value, str):
            return _type_issue(path, "string", value)
        if self.min_length is not None and len(value) < self.min_length:
            return [ValidationIssue(path, f"String must contain at least {self.min_length} character(s)")]
        # fullmatch keeps JavaScript's meaning of a trailing $
        if self.pattern is not None and not self._compiled().fullmatch(value):
            return [ValidationIssue(path, self.message or "Invalid")]
        return []


@dataclass
class ZodNumber(ZodNode):
    """z.number(), or z.number().int() for integers."""

    integer: bool = False

    def render(self, indent: int = 0) -> str:
        return "z.number().int()" if self.integer else "z.number()"

    def validate(self, value: Any, ctx: ValidationContext, path: str = "") -> list[ValidationIssue]:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return _type_issue(path, "number", value)
        if isinstance(value, float) and not math.isfinite(value):
            return _type_issue(path, "number", value)
        if self.integer and isinstance(value, float) and not value.is_integer():
            return [ValidationIssue(path, "Expected integer, received float")]
        return []


@dataclass
class ZodLiteral(ZodNode):
    """z.literal(value)"""

    value: str = ""

    def render(self, indent: int = 0) -> str:
        return f"z.literal({json.dumps(self.value)})"

    def validate(self, value: Any, ctx: ValidationContext, path: str = "") -> list[ValidationIssue]:
        if value != self.value or not isinstance(value, str):
            return [ValidationIssue(path, f"Invalid literal value, expected {json.dumps(self.value)}")]
        return []


@dataclass
class ZodUndefined(ZodNode):
    """z.undefined(): only an absent value passes. null does not."""

    def render(self, indent: int = 0) -> str:
        return "z.undefined()"

    def validate(self, value: Any, ctx: ValidationContext, path: str = "") -> list[ValidationIssue]:
        return [] if value is MISSING else _type_issue(path, "undefined", value)


@dataclass
class ZodUnionOr(ZodNode):
    """left.or(right)"""

    left: ZodNode = field(default_factory=ZodNode)
    right: ZodNode = field(default_factory=ZodUndefined)

    def render(self, indent: int = 0) -> str:
        return f"{self.left.render(indent)}.or({self.right.render(indent)})"

    def validate(self, value: Any, ctx: ValidationContext, path: str = "") -> list[ValidationIssue]:
        right_issues = self.right.validate(value, ctx, path)
        if not right_issues:
            return []
        # Report the main branch, which is the one a present value was meant for
        return self.left.validate(value, ctx, path)


@dataclass
class ZodArray(ZodNode):
    """z.array(element)"""

    element: ZodNode = field(default_factory=ZodNode)

    def render(self, indent: int = 0) -> str:
        return f"z.array({self.element.render(indent)})"

    def validate(self, value: Any, ctx: ValidationContext, path: str = "") -> list[ValidationIssue]:
        if not isinstance(value, list):
            return _type_issue(path, "array", value)
        issues = []
        for index, item in enumerate(value):
            issues.extend(self.element.validate(item, ctx, _child_path(path, index)))
        return issues


@dataclass
class ZodRecord(ZodNode):
    """z.record(z.string(), value)"""

    value: ZodNode = field(default_factory=ZodNode)

    def render(self, indent: int = 0) -> str:
        return f"z.record(z.string(), {self.value.render(indent)})"

    def validate(self, value: Any, ctx: ValidationContext, path: str = "") -> list[ValidationIssue]:
        if not isinstance(value, dict):
            return _type_issue(path, "object", value)
        issues = []
        for key, item in value.items():
            if not isinstance(key, str):
                issues.append(ValidationIssue(_child_path(path, str(key)), "Expected string key"))
                continue
            issues.extend(self.value.validate(item, ctx, _child_path(path, key)))
        return issues


@dataclass
class ZodStrictObject(ZodNode):
    """z.strictObject({...}): a closed object, unknown keys are rejected."""

    shape: dict[str, ZodNode] = field(default_factory=dict)
    inline: bool = False  # Render on a single line

    def render(self, indent: int = 0) -> str:
        if not self.shape:
            return "z.strictObject({})"
        if self.inline:
            entries = ", ".join(f"{js_key(k)}: {v.render(indent)}" for k, v in self.shape.items())
            return f"z.strictObject({{ {entries} }})"

        inner = INDENT * (indent + 1)
        lines = [f"{inner}{js_key(k)}: {v.render(indent + 1)}," for k, v in self.shape.items()]
        return "z.strictObject({\n" + "\n".join(lines) + f"\n{INDENT * indent}}})"

    def validate(self, value: Any, ctx: ValidationContext, path: str = "") -> list[ValidationIssue]:
        if not isinstance(value, dict):
            return _type_issue(path, "object", value)

        issues = []
        unknown = [key for key in value if key not in self.shape]
        if unknown:
            keys = ", ".join(repr(key) for key in unknown)
            issues.append(ValidationIssue(path, f"Unrecognized key(s) in object: {keys}"))

        for key, node in self.shape.items():
            issues.extend(node.validate(value.get(key, MISSING), ctx, _child_path(path, key)))
        return issues


@dataclass
class ZodEnum(ZodNode):
    """z.enum([...])"""

    values: list[str] = field(default_factory=list)

    def render(self, indent: int = 0) -> str:
        return f"z.enum([{', '.join(json.dumps(v) for v in self.values)}])"

    def validate(self, value: Any, ctx: ValidationContext, path: str = "") -> list[ValidationIssue]:
        if not isinstance(value, str) or value not in self.values:
            expected = " | ".join(repr(v) for v in self.values)
            return [ValidationIssue(path, f"Invalid enum value. Expected {expected}")]
        return []


@dataclass
class ZodNever(ZodNode):
    """z.never(): nothing validates."""

    def render(self, indent: int = 0) -> str:
        return "z.never()"

    def validate(self, value: Any, ctx: ValidationContext, path: str = "") -> list[ValidationIssue]:
        return _type_issue(path, "never", value)


@dataclass
class ZodDiscriminatedUnion(ZodNode):
    """z.discriminatedUnion(key, [...]): one closed object per variant."""

    discriminator: str = "type"
    options: list[ZodStrictObject] = field(default_factory=list)

    def _literal(self, option: ZodStrictObject) -> str:
        return option.shape[self.discriminator].value

    def render(self, indent: int = 0) -> str:
        inner = INDENT * (indent + 1)
        lines = [f"{inner}{option.render(indent + 1)}," for option in self.options]
        body = "\n".join(lines)
        return f"z.discriminatedUnion({json.dumps(self.discriminator)}, [\n{body}\n{INDENT * indent}])"

    def validate(self, value: Any, ctx: ValidationContext, path: str = "") -> list[ValidationIssue]:
        if not isinstance(value, dict):
            return _type_issue(path, "object", value)

        tag = value.get(self.discriminator, MISSING)
        for option in self.options:
            if isinstance(tag, str) and tag == self._literal(option):
                return option.validate(value, ctx, path)

        expected = " | ".join(repr(self._literal(option)) for option in self.options)
        return [
            ValidationIssue(
                _child_path(path, self.discriminator),
                f"Invalid discriminator value. Expected {expected}",
            )
        ]


@dataclass
class ZodLazy(ZodNode):
    """z.lazy(() => Name$Schema): a reference to another entity's schema."""

    name: str = ""

    @property
    def schema_name(self) -> str:
        return schema_const_name(self.name)

    def render(self, indent: int = 0) -> str:
        return f"z.lazy(() => {self.schema_name})"

    def validate(self, value: Any, ctx: ValidationContext, path: str = "") -> list[ValidationIssue]:
        target = ctx.lookup(self.name)
        if target is None:
            return [ValidationIssue(path, f"Unknown schema reference {self.schema_name}")]
        return target.validate(value, ctx, path)


def schema_const_name(wire_name: str) -> str:
    """Name of the exported schema constant for an entity."""
    return f"{wire_name}$Schema"
