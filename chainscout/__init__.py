"""Chainscout - natural-language Ethereum queries through a tool-calling model."""

__version__ = "0.1.0"

from .orchestrator import Orchestrator, OrchestratorConfig, TurnResult, TurnStatus
from .providers import BaseProvider, GeminiProvider, ProviderConfig
from .tools import ToolDispatcher, ToolRegistry
from .config import ConfigManager

__all__ = [
    "Orchestrator",
    "OrchestratorConfig",
    "TurnResult",
    "TurnStatus",
    "BaseProvider",
    "GeminiProvider",
    "ProviderConfig",
    "ToolDispatcher",
    "ToolRegistry",
    "ConfigManager",
]
