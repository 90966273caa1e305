"""
Reference resolver for entity references.

Field types refer to other entities by wire name, possibly before those
entities are declared. The table below is filled with every entity's wire
name first and checked against the references afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..config import UndefinedReferencePolicy
from ..diagnostics import DiagnosticSink
from ..errors import UndefinedReferenceError
from .ir_nodes import EntityNode, collect_references, iter_fields

# Names every artifact can refer to without a declaring entity
BUILTIN_NAMES = {"ObjectId"}


@dataclass
class DanglingReference:
    """A reference from an entity to a name no entity declares."""

    entity: str = ""  # Declared name of the referencing entity
    field: str = ""  # Declared name of the referencing field
    target: str = ""  # Referenced wire name


class ReferenceTable:
    """Two-pass name table of entity wire names."""

    def __init__(self, names: list[str] | None = None):
        self._names: dict[str, int] = {}
        for name in names or []:
            self.register(name)

    def register(self, wire_name: str) -> None:
        """Record an entity wire name. Repeated names are counted."""
        self._names[wire_name] = self._names.get(wire_name, 0) + 1

    def __contains__(self, wire_name: str) -> bool:
        return wire_name in self._names or wire_name in BUILTIN_NAMES

    def duplicates(self) -> list[str]:
        """Wire names registered more than once."""
        return [name for name, count in self._names.items() if count > 1]

    def dangling(self, entity: EntityNode) -> list[DanglingReference]:
        """References of an entity that the table cannot resolve, in field order."""
        result = []
        for field_node in iter_fields(entity):
            for target in collect_references(field_node.type):
                if target not in self:
                    result.append(DanglingReference(entity.declared_name, field_node.declared_name, target))
        return result

    def check(
        self,
        entity: EntityNode,
        policy: UndefinedReferencePolicy,
        sink: DiagnosticSink,
    ) -> None:
        """
        Apply the undefined-reference policy to one entity.

        Raises:
            UndefinedReferenceError: Under the "error" policy, for the first dangling reference
        """
        if policy == UndefinedReferencePolicy.IGNORE:
            return

        for ref in self.dangling(entity):
            message = f"reference to undefined entity {ref.target!r}"
            if policy == UndefinedReferencePolicy.ERROR:
                raise UndefinedReferenceError(message, entity=ref.entity, field=ref.field, type_spelling=ref.target)
            sink.warn("undefined-reference", message, entity=ref.entity, field=ref.field)
