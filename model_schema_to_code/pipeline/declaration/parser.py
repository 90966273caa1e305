"""
Parsers for raw directive text and type spellings.

Phase 1 of the pipeline: turn the raw strings carried by declarations
into structured values, without resolving names or types.
"""

from __future__ import annotations

import re
from typing import Any

from ..errors import DirectiveSyntaxError, TypeSyntaxError
from .nodes import Directive, TypeExpr, TypeShape

_DIRECTIVE_PATTERN = re.compile(r"^\s*([A-Za-z_][\w:]*)\s*(?:\((.*)\))?\s*$", re.DOTALL)
_IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z_][\w-]*$")
_INTEGER_PATTERN = re.compile(r"^-?\d+$")

_TOKEN_PATTERN = re.compile(
    r"\s*(?:(?P<lifetime>'[A-Za-z_]\w*)|(?P<ident>[A-Za-z_]\w*)|(?P<number>\d+)|(?P<punct>::|[<>,()\[\];&]))"
)

_OPENERS = {"(": ")", "[": "]", "<": ">", "{": "}"}


def _split_top_level(body: str, separator: str, text: str) -> list[str]:
    """Split on a separator that is not nested in brackets or string literals."""
    parts: list[str] = []
    stack: list[str] = []
    current: list[str] = []
    in_string = False
    escaped = False

    for char in body:
        if in_string:
            current.append(char)
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue

        if char == '"':
            in_string = True
        elif char in _OPENERS:
            stack.append(_OPENERS[char])
        elif stack and char == stack[-1]:
            stack.pop()
        elif char in _OPENERS.values():
            raise DirectiveSyntaxError(text, f"unbalanced {char!r}")
        elif char == separator and not stack:
            parts.append("".join(current))
            current = []
            continue
        current.append(char)

    if in_string:
        raise DirectiveSyntaxError(text, "unterminated string literal")
    if stack:
        raise DirectiveSyntaxError(text, f"missing {stack[-1]!r}")

    parts.append("".join(current))
    return parts


def _parse_value(raw: str, text: str) -> Any:
    """Parse a directive argument value: string literal, integer, boolean or type text."""
    value = raw.strip()
    if not value:
        raise DirectiveSyntaxError(text, "missing value after '='")
    if value.startswith('"'):
        if len(value) < 2 or not value.endswith('"'):
            raise DirectiveSyntaxError(text, f"malformed string literal {value}")
        return value[1:-1].replace('\\"', '"').replace("\\\\", "\\")
    if _INTEGER_PATTERN.match(value):
        return int(value)
    if value in ("true", "false"):
        return value == "true"
    # Type paths such as `as = Vec<String>` stay as text
    return value


def parse_directive(text: str) -> Directive:
    """
    Parse one attribute directive.

    Accepts both the bare form `serde(rename = "id")` and the attribute
    form `#[serde(rename = "id")]`.

    Args:
        text: Raw directive text

    Returns:
        Directive with its namespace and arguments (flags map to True)

    Raises:
        DirectiveSyntaxError: If the text is not a well-formed directive
    """
    stripped = text.strip()
    if stripped.startswith("#[") and stripped.endswith("]"):
        stripped = stripped[2:-1]

    match = _DIRECTIVE_PATTERN.match(stripped)
    if not match:
        raise DirectiveSyntaxError(text, "expected `name(args)`")

    namespace, body = match.group(1), match.group(2)
    args: dict[str, Any] = {}
    if not body or not body.strip():
        return Directive(namespace=namespace, args=args, text=text)

    for item in _split_top_level(body, ",", text):
        if not item.strip():
            # Trailing comma
            continue
        key, sep, raw_value = item.partition("=")
        key = key.strip()
        if not _IDENTIFIER_PATTERN.match(key):
            raise DirectiveSyntaxError(text, f"invalid argument name {key!r}")
        if key in args:
            raise DirectiveSyntaxError(text, f"duplicate argument {key!r}")
        args[key] = _parse_value(raw_value, text) if sep else True

    return Directive(namespace=namespace, args=args, text=text)


class TypeExprParser:
    """Recursive-descent parser for type spellings."""

    def __init__(self, spelling: str):
        self.spelling = spelling
        self.tokens = self._tokenize(spelling)
        self.pos = 0

    def _tokenize(self, spelling: str) -> list[str]:
        tokens = []
        pos = 0
        spelling = spelling.rstrip()
        while pos < len(spelling):
            match = _TOKEN_PATTERN.match(spelling, pos)
            if not match or match.end() == pos:
                raise TypeSyntaxError(spelling, f"unexpected character {spelling[pos:].strip()[:1]!r}")
            tokens.append(match.group(match.lastgroup))
            pos = match.end()
        return tokens

    def _peek(self) -> str | None:
        return self.tokens[self.pos] if self.pos < len(self.tokens) else None

    def _next(self) -> str:
        token = self._peek()
        if token is None:
            raise TypeSyntaxError(self.spelling, "unexpected end of type")
        self.pos += 1
        return token

    def _expect(self, expected: str) -> None:
        token = self._next()
        if token != expected:
            raise TypeSyntaxError(self.spelling, f"expected {expected!r}, got {token!r}")

    def parse(self) -> TypeExpr:
        """Parse the whole spelling into a TypeExpr."""
        if not self.tokens:
            raise TypeSyntaxError(self.spelling, "empty type")
        expr = self._parse_type()
        if self._peek() is not None:
            raise TypeSyntaxError(self.spelling, f"unexpected {self._peek()!r}")
        return expr

    def _parse_type(self) -> TypeExpr:
        start = self.pos
        token = self._peek()

        if token == "&":
            self._next()
            if self._peek() and self._peek().startswith("'"):
                self._next()
            if self._peek() == "mut":
                self._next()
            inner = self._parse_type()
            return TypeExpr(shape=TypeShape.REFERENCE, args=[inner], spelling=self._spelled(start))

        if token == "(":
            return self._parse_tuple(start)

        if token == "[":
            self._next()
            element = self._parse_type()
            if self._peek() == ";":
                self._next()
                length = self._next()
                if not length.isdigit():
                    raise TypeSyntaxError(self.spelling, f"array length must be a number, got {length!r}")
            self._expect("]")
            return TypeExpr(shape=TypeShape.ARRAY, args=[element], spelling=self._spelled(start))

        return self._parse_path(start)

    def _parse_tuple(self, start: int) -> TypeExpr:
        self._expect("(")
        elements: list[TypeExpr] = []
        trailing_comma = False
        while self._peek() != ")":
            elements.append(self._parse_type())
            trailing_comma = False
            if self._peek() == ",":
                self._next()
                trailing_comma = True
            elif self._peek() != ")":
                raise TypeSyntaxError(self.spelling, f"expected ',' or ')', got {self._peek()!r}")
        self._expect(")")

        # A parenthesized single type without comma is just that type
        if len(elements) == 1 and not trailing_comma:
            return elements[0]
        return TypeExpr(shape=TypeShape.TUPLE, args=elements, spelling=self._spelled(start))

    def _parse_path(self, start: int) -> TypeExpr:
        segments = []
        if self._peek() == "::":
            self._next()
        while True:
            token = self._next()
            if not re.match(r"^[A-Za-z_]\w*$", token):
                raise TypeSyntaxError(self.spelling, f"expected a type name, got {token!r}")
            segments.append(token)
            if self._peek() != "::":
                break
            self._next()

        args: list[TypeExpr] = []
        if self._peek() == "<":
            self._next()
            while self._peek() != ">":
                if self._peek() and self._peek().startswith("'"):
                    # Lifetime arguments carry no type information
                    self._next()
                else:
                    args.append(self._parse_type())
                if self._peek() == ",":
                    self._next()
                elif self._peek() != ">":
                    raise TypeSyntaxError(self.spelling, f"expected ',' or '>', got {self._peek()!r}")
            self._expect(">")

        return TypeExpr(
            shape=TypeShape.PATH,
            name=segments[-1],
            path="::".join(segments),
            args=args,
            spelling=self._spelled(start),
        )

    def _spelled(self, start: int) -> str:
        """Canonical spelling of the tokens consumed since start."""
        out = ""
        for token in self.tokens[start : self.pos]:
            if token == ",":
                out += ", "
            elif token == ";":
                out += "; "
            elif token == "mut" or token.startswith("'"):
                out += token + " "
            else:
                out += token
        return out.strip()


def parse_type_expr(spelling: str) -> TypeExpr:
    """
    Parse a type spelling such as `Option<Vec<String>>` into a TypeExpr.

    Raises:
        TypeSyntaxError: If the spelling is malformed
    """
    return TypeExprParser(spelling).parse()
