"""Exception hierarchy for Chainscout.

Tool-level failures never surface as exceptions to the orchestrator; the
dispatcher turns them into tagged tool results. The classes here cover
startup mistakes, model API failures, and the data service taxonomy that
handlers raise.
"""

from typing import Optional


class ChainscoutError(Exception):
    """Base class for all Chainscout errors."""


class ConfigError(ChainscoutError):
    """Configuration is missing or malformed."""


# ---------------------------------------------------------------------------
# Tool registry
# ---------------------------------------------------------------------------

class ToolRegistryError(ChainscoutError):
    """Base class for registry errors."""


class DuplicateToolError(ToolRegistryError):
    def __init__(self, name: str):
        super().__init__(f"Tool '{name}' is already registered")
        self.name = name


class UnknownToolError(ToolRegistryError):
    def __init__(self, name: str):
        super().__init__(f"Unknown tool: {name}")
        self.name = name


class RegistryFrozenError(ToolRegistryError):
    """Raised when registering after the registry was frozen."""


# ---------------------------------------------------------------------------
# Model API
# ---------------------------------------------------------------------------

class ModelCallFailure(ChainscoutError):
    """The model API call failed (network, HTTP status, or malformed body)."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


# ---------------------------------------------------------------------------
# Data service (Blockscout)
# ---------------------------------------------------------------------------

class DataServiceError(ChainscoutError):
    """Base class for failures of the block explorer API."""


class NotFound(DataServiceError):
    def __init__(self, path: str):
        super().__init__(f"Not found: {path}")
        self.path = path


class RateLimited(DataServiceError):
    def __init__(self, path: str):
        super().__init__(f"Rate limit exceeded for {path}")
        self.path = path


class TransientNetworkError(DataServiceError):
    """Connection, DNS or timeout failure talking to the data service."""


class UpstreamError(DataServiceError):
    def __init__(self, status: int, path: str):
        super().__init__(f"Upstream error {status} for {path}")
        self.status = status
        self.path = path
