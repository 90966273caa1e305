"""
Base class for emission backends.

Defines the interface every target emitter implements. Emitters are pure
functions of the IR: they never look at declaration text.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

import jinja2

from ..analyzer.ir_nodes import EntityNode, TypeNode
from ..config import Capability, GeneratorConfig, Target


class EntityBackend(ABC):
    """Abstract base class for emission backends."""

    # Target emitted by this backend
    TARGET: Target

    # Template directory name, empty when the backend does not use templates
    TEMPLATE_LANG: str = ""

    def __init__(self, config: GeneratorConfig):
        """
        Initialize the backend.

        Args:
            config: Generation configuration
        """
        self.config = config
        self.features = config.features
        if self.TEMPLATE_LANG:
            self._setup_templates()

    def _setup_templates(self) -> None:
        """Set up Jinja2 templates."""
        template_dir = Path(__file__).parent.parent.parent / "templates" / self.TEMPLATE_LANG
        self.jinja_env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(str(template_dir)),
            lstrip_blocks=True,
            trim_blocks=True,
            keep_trailing_newline=False,
        )

    def get_template(self, name: str) -> jinja2.Template:
        return self.jinja_env.get_template(name)

    @property
    def enabled(self) -> bool:
        """Whether the capability behind this backend is active."""
        return self.features.is_enabled(Capability(self.TARGET.value))

    @abstractmethod
    def emit(self, entity: EntityNode) -> Any:
        """
        Emit the artifact for one entity.

        Args:
            entity: The resolved entity

        Returns:
            Source text, or a schema document for the JSON-Schema target
        """

    @abstractmethod
    def translate_type(self, node: TypeNode) -> Any:
        """
        Translate an IR type node to its target rendering.

        Args:
            node: The type node

        Returns:
            Target-specific rendering of the type
        """

    def _unknown_node(self, node: Any) -> TypeError:
        return TypeError(f"{type(self).__name__} cannot emit {type(node).__name__}")
