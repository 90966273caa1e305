"""
Utility functions for the model schema code generator.
"""

import re

# Split identifiers into words, handling acronyms and camelCase boundaries
_WORD_PATTERN = re.compile(r"[A-Z]+(?=[A-Z][a-z])|[A-Z]?[a-z]+|[A-Z]+|[0-9]+")


def _normalize_separators(text: str) -> str:
    """Normalize separators (underscores, hyphens) to spaces."""
    return text.replace("_", " ").replace("-", " ")


def split_into_words(text: str) -> list[str]:
    """Split text into words on separators and camelCase boundaries.

    Examples:
        "first_name" -> ["first", "name"]
        "PayPal" -> ["Pay", "Pal"]
        "HTTPServer" -> ["HTTP", "Server"]
        "address-line-2" -> ["address", "line", "2"]
    """
    return _WORD_PATTERN.findall(_normalize_separators(text))


def _capitalize_and_join(words: list[str]) -> str:
    """Capitalize each word and join them together."""
    return "".join(word.capitalize() for word in words if word)


def to_pascal_case(text: str) -> str:
    """Convert snake_case, camelCase, or space-separated text to PascalCase.

    Examples:
        "first_name" -> "FirstName"
        "FIRST_NAME" -> "FirstName"
        "actionTemplate" -> "ActionTemplate"
        "first 3 rows" -> "First3Rows"
    """
    if not text:
        return ""
    return _capitalize_and_join(split_into_words(text))


def to_camel_case(text: str) -> str:
    """Convert text to camelCase: "user_name" -> "userName"."""
    words = split_into_words(text)
    if not words:
        return ""
    return words[0].lower() + _capitalize_and_join(words[1:])


def to_snake_case(text: str) -> str:
    """Convert text to snake_case: "CreditCard" -> "credit_card"."""
    return "_".join(word.lower() for word in split_into_words(text))


def to_kebab_case(text: str) -> str:
    """Convert text to kebab-case: "CreditCard" -> "credit-card"."""
    return "-".join(word.lower() for word in split_into_words(text))


def strip_suffix(name: str, suffix: str) -> str:
    """Remove a trailing suffix from a name, keeping names that are only the suffix."""
    if suffix and name.endswith(suffix) and name != suffix:
        return name[: -len(suffix)]
    return name


def format_doc_lines(lines: list[str], indent: str = "") -> list[str]:
    """Format documentation lines as the body of a JSDoc block."""
    # A literal */ would close the comment early
    escaped = [line.replace("*/", "*\\/") for line in lines]
    return [f"{indent} * {line}".rstrip() for line in escaped]
