"""Tool system for Chainscout function calling.

Builds the tool registry from the Blockscout tool set.
"""

from typing import Dict, Optional

from ..blockscout import BlockscoutClient
from .blockscout import BlockscoutTools
from .dispatcher import ToolDispatcher, normalize_arguments
from .registry import ToolRegistry
from .schema import ParamSpec, ToolSpec, callable_to_tool_spec


def build_tool_registry(
    client: BlockscoutClient,
    enabled: Optional[Dict[str, bool]] = None,
) -> ToolRegistry:
    """Register every enabled Blockscout tool and freeze the registry.

    Args:
        client: Explorer client the handlers query.
        enabled: Optional tool_name -> bool overrides; tools default to enabled.
    """
    enabled = enabled or {}
    tool_set = BlockscoutTools(client)

    registry = ToolRegistry()
    for tool_name, fn in tool_set.get_tools().items():
        if not enabled.get(tool_name, True):
            continue
        registry.register_function(tool_name, fn, description=tool_set.description)
    registry.freeze()
    return registry


__all__ = [
    "BlockscoutTools",
    "ParamSpec",
    "ToolDispatcher",
    "ToolRegistry",
    "ToolSpec",
    "build_tool_registry",
    "callable_to_tool_spec",
    "normalize_arguments",
]
