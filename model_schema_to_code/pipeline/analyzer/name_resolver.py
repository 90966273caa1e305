"""
Name resolver for wire names.

Applies rename policies and explicit renames to fields and variants and
checks that the resulting wire names are unique within their scope.
"""

from __future__ import annotations

from collections.abc import Callable

from ...utils import to_camel_case, to_kebab_case, to_pascal_case, to_snake_case
from ..errors import DuplicateWireNameError, UnsupportedCasingError

RENAME_POLICIES: dict[str, Callable[[str], str]] = {
    "lowercase": str.lower,
    "UPPERCASE": str.upper,
    "camelCase": to_camel_case,
    "PascalCase": to_pascal_case,
    "snake_case": to_snake_case,
    "SCREAMING_SNAKE_CASE": lambda name: to_snake_case(name).upper(),
    "kebab-case": to_kebab_case,
    "SCREAMING-KEBAB-CASE": lambda name: to_kebab_case(name).upper(),
}


def apply_rename_policy(name: str, policy: str | None) -> str:
    """
    Apply a rename_all policy to a declared name.

    Args:
        name: Declared identifier
        policy: Policy name, or None for identity

    Raises:
        UnsupportedCasingError: If the policy is unknown
    """
    if policy is None:
        return name
    converter = RENAME_POLICIES.get(policy)
    if converter is None:
        raise UnsupportedCasingError(policy)
    return converter(name)


class NameResolver:
    """Resolves wire names for one scope (the fields of a record, or the variants of a union)."""

    def __init__(self, policy: str | None = None, entity: str | None = None):
        """
        Initialize the resolver.

        Args:
            policy: rename_all policy for this scope
            entity: Declared entity name, used in error messages
        """
        if policy is not None and policy not in RENAME_POLICIES:
            raise UnsupportedCasingError(policy, entity=entity)
        self.policy = policy
        self.entity = entity
        self._used: dict[str, str] = {}  # wire name -> declared name

    def resolve(self, declared_name: str, explicit: str | None = None) -> str:
        """
        Resolve the wire name of one item and register it.

        An explicit rename wins over the policy.

        Raises:
            DuplicateWireNameError: If another item of this scope already uses the wire name
        """
        wire_name = explicit if explicit is not None else apply_rename_policy(declared_name, self.policy)

        if wire_name in self._used:
            raise DuplicateWireNameError(wire_name, self._used[wire_name], declared_name, entity=self.entity)
        self._used[wire_name] = declared_name
        return wire_name

    def is_used(self, wire_name: str) -> bool:
        return wire_name in self._used
