"""Tool registry: tool name -> (definition, handler).

Built once at startup, then frozen. The definitions are exposed in
registration order so the model sees the same tool surface every round.
"""

import logging
from typing import Any, Callable, Dict, Tuple

from ..errors import DuplicateToolError, RegistryFrozenError, UnknownToolError
from .schema import ToolSpec, callable_to_tool_spec

logger = logging.getLogger(__name__)


class ToolRegistry:
    """Holds registered tools and their handlers."""

    def __init__(self) -> None:
        self._entries: Dict[str, Tuple[ToolSpec, Callable[..., Any]]] = {}
        self._frozen = False

    def register(self, definition: ToolSpec, handler: Callable[..., Any]) -> None:
        if self._frozen:
            raise RegistryFrozenError(f"Cannot register '{definition.name}': registry is frozen")
        if definition.name in self._entries:
            raise DuplicateToolError(definition.name)
        self._entries[definition.name] = (definition, handler)
        logger.debug("Registered tool: %s", definition.name)

    def register_function(
        self,
        name: str,
        fn: Callable[..., Any],
        description: str = "",
    ) -> ToolSpec:
        """Register a callable, deriving its definition from the signature."""
        definition = callable_to_tool_spec(name, fn, description=description)
        self.register(definition, fn)
        return definition

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def lookup(self, name: str) -> Callable[..., Any]:
        try:
            return self._entries[name][1]
        except KeyError:
            raise UnknownToolError(name) from None

    def definition(self, name: str) -> ToolSpec:
        try:
            return self._entries[name][0]
        except KeyError:
            raise UnknownToolError(name) from None

    @property
    def definitions(self) -> Tuple[ToolSpec, ...]:
        return tuple(spec for spec, _handler in self._entries.values())

    @property
    def names(self) -> Tuple[str, ...]:
        return tuple(self._entries)

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __len__(self) -> int:
        return len(self._entries)
