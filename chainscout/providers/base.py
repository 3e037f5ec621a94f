"""Base model interface for the orchestrator."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple, TYPE_CHECKING

if TYPE_CHECKING:
    from ..conversation.turns import ModelTurn, Turn
    from ..tools.schema import ToolSpec


@dataclass
class ProviderConfig:
    """Configuration for a provider. The API key is injected here, never read globally."""
    api_key: str
    model: str
    base_url: Optional[str] = None
    temperature: float = 0.7
    max_tokens: Optional[int] = None
    timeout: float = 60.0


class BaseProvider(ABC):
    """Abstract base class for model providers.

    ``manages_history`` tells the orchestrator who owns the replayed context.
    When False the provider is stateless and receives the full history on
    every call. When True the provider keeps its own copy and receives only
    the turns added since its previous call.
    """

    manages_history = False

    def __init__(self, config: ProviderConfig):
        self.config = config
        self.name = self.__class__.__name__
        self._last_usage: Optional[Tuple[int, int]] = None

    @property
    def last_usage(self) -> Optional[Tuple[int, int]]:
        """Token usage from the last send_turn call: (input_tokens, output_tokens)."""
        return self._last_usage

    @abstractmethod
    def send_turn(
        self,
        history: Sequence["Turn"],
        tools: Sequence["ToolSpec"],
        system: Optional[str] = None,
    ) -> "ModelTurn":
        """Send the conversation to the model and return its next turn.

        Raises:
            ModelCallFailure: on network, HTTP or decoding errors.
        """

    def sync_history(self, history: Sequence["Turn"]) -> None:
        """Replace any provider-held history with ``history``.

        Stateless providers have nothing to sync.
        """

    def validate(self) -> bool:
        """Validate provider configuration."""
        return bool(self.config.api_key and self.config.model)

    def close(self) -> None:
        """Release network resources."""
