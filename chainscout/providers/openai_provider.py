"""OpenAI-compatible chat completions provider.

Also serves OpenRouter and other compatible gateways through ``base_url``.
"""

import json
import logging
from typing import List, Optional, Sequence, TYPE_CHECKING

import httpx

from ..conversation.turns import (
    ModelTurn,
    TextSegment,
    ToolCallRequest,
    ToolTurn,
    Turn,
    UserTurn,
)
from ..errors import ModelCallFailure
from .base import BaseProvider, ProviderConfig
from .registry import register_provider

if TYPE_CHECKING:
    from ..tools.schema import ToolSpec

logger = logging.getLogger(__name__)


def turn_to_messages(turn: Turn) -> List[dict]:
    """Convert a conversation turn to one or more chat messages.

    A tool turn becomes one ``tool`` message per result.
    """
    if isinstance(turn, UserTurn):
        return [{"role": "user", "content": turn.text}]

    if isinstance(turn, ModelTurn):
        if turn.raw is not None:
            return [turn.raw]
        message = {"role": "assistant", "content": turn.text or None}
        calls = [
            {
                "id": call.call_id,
                "type": "function",
                "function": {"name": call.name, "arguments": json.dumps(call.arguments)},
            }
            for call in turn.tool_calls
        ]
        if calls:
            message["tool_calls"] = calls
        return [message]

    if isinstance(turn, ToolTurn):
        return [
            {
                "role": "tool",
                "tool_call_id": result.call_id,
                "content": json.dumps(result.to_response(), default=str),
            }
            for result in turn.results
        ]

    raise TypeError(f"Unsupported turn type: {type(turn).__name__}")


def parse_message(message: dict) -> tuple:
    """Split an assistant message into a text segment and tool calls, in order."""
    parts = []
    content = message.get("content") or ""
    if content:
        parts.append(TextSegment(content))

    for tc in message.get("tool_calls") or []:
        fn = tc.get("function", {})
        try:
            arguments = json.loads(fn.get("arguments") or "{}")
        except json.JSONDecodeError:
            arguments = {}
        if not isinstance(arguments, dict):
            arguments = {}
        parts.append(ToolCallRequest(
            name=fn.get("name", ""),
            arguments=arguments,
            call_id=tc.get("id"),
        ))
    return tuple(parts)


@register_provider("openai")
class OpenAIProvider(BaseProvider):
    """OpenAI API provider - supports custom base_url for OpenRouter/Azure/proxies."""

    def __init__(self, config: ProviderConfig, client: Optional[httpx.Client] = None):
        super().__init__(config)
        self.base_url = (config.base_url or "https://api.openai.com/v1").rstrip("/")
        self.client = client or httpx.Client(timeout=config.timeout)

    def _headers(self) -> dict:
        return {
            "Authorization": f"Bearer {self.config.api_key}",
            "Content-Type": "application/json",
        }

    def send_turn(
        self,
        history: Sequence[Turn],
        tools: Sequence["ToolSpec"],
        system: Optional[str] = None,
    ) -> ModelTurn:
        self._last_usage = None
        url = f"{self.base_url}/chat/completions"

        messages = []
        if system:
            messages.append({"role": "system", "content": system})
        for turn in history:
            messages.extend(turn_to_messages(turn))

        payload = {
            "model": self.config.model,
            "messages": messages,
            "temperature": self.config.temperature,
        }
        if tools:
            payload["tools"] = [
                {
                    "type": "function",
                    "function": {
                        "name": spec.name,
                        "description": spec.description,
                        "parameters": spec.parameters,
                    },
                }
                for spec in tools
            ]
        if self.config.max_tokens:
            payload["max_tokens"] = self.config.max_tokens

        logger.debug("OpenAI request: %d message(s), %d tool(s)", len(messages), len(tools))
        try:
            response = self.client.post(url, json=payload, headers=self._headers())
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            raise ModelCallFailure(
                f"OpenAI API error {status}: {e.response.text[:200]}", status=status,
            ) from e
        except httpx.HTTPError as e:
            raise ModelCallFailure(f"OpenAI request failed: {e}") from e
        except ValueError as e:
            raise ModelCallFailure("OpenAI returned a malformed response") from e

        usage = data.get("usage") or {}
        in_t = usage.get("prompt_tokens", 0)
        out_t = usage.get("completion_tokens", 0)
        if in_t or out_t:
            self._last_usage = (in_t, out_t)

        choices = data.get("choices", [])
        if not choices:
            return ModelTurn()

        message = dict(choices[0].get("message") or {})
        message.setdefault("role", "assistant")
        return ModelTurn(parts=parse_message(message), raw=message)

    def close(self) -> None:
        self.client.close()
