"""Google Gemini provider implementation (REST generateContent)."""

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


def turn_to_content(turn: Turn) -> dict:
    """Convert a conversation turn to a Gemini ``contents`` entry."""
    if isinstance(turn, UserTurn):
        return {"role": "user", "parts": [{"text": turn.text}]}

    if isinstance(turn, ModelTurn):
        if turn.raw is not None:
            return turn.raw
        parts = []
        for part in turn.parts:
            if isinstance(part, TextSegment):
                parts.append({"text": part.text})
            else:
                call = {"name": part.name, "args": dict(part.arguments)}
                if part.call_id:
                    call["id"] = part.call_id
                parts.append({"functionCall": call})
        return {"role": "model", "parts": parts}

    if isinstance(turn, ToolTurn):
        parts = []
        for result in turn.results:
            response = {"name": result.name, "response": result.to_response()}
            if result.call_id:
                response["id"] = result.call_id
            parts.append({"functionResponse": response})
        return {"role": "user", "parts": parts}

    raise TypeError(f"Unsupported turn type: {type(turn).__name__}")


def parse_parts(parts: Sequence[dict]) -> tuple:
    """Split Gemini response parts into text segments and function calls, in order.

    Thought parts are internal reasoning and are not surfaced.
    """
    result = []
    for part in parts:
        if "functionCall" in part:
            fc = part["functionCall"]
            arguments = fc.get("args") or {}
            if not isinstance(arguments, dict):
                arguments = {}
            result.append(ToolCallRequest(
                name=fc.get("name", ""),
                arguments=dict(arguments),
                call_id=fc.get("id"),
            ))
        elif "text" in part and not part.get("thought"):
            result.append(TextSegment(part["text"]))
    return tuple(result)


def function_declarations(tools: Sequence["ToolSpec"]) -> List[dict]:
    declarations = []
    for spec in tools:
        decl = {"name": spec.name, "description": spec.description}
        # Gemini rejects an object schema with no properties
        if spec.params:
            decl["parameters"] = spec.parameters
        declarations.append(decl)
    return declarations


@register_provider("gemini")
class GeminiProvider(BaseProvider):
    """Google Gemini API provider. Stateless: the full history is sent every call."""

    def __init__(self, config: ProviderConfig, client: Optional[httpx.Client] = None):
        super().__init__(config)
        self.base_url = config.base_url or "https://generativelanguage.googleapis.com/v1beta/models"
        self.client = client or httpx.Client(timeout=config.timeout)
        # OAuth tokens start with "ya29." and use Bearer auth
        # API keys use ?key= query param
        self._use_bearer = config.api_key.startswith("ya29.")

    def _auth_params(self) -> tuple:
        """Return (headers, params) for authentication."""
        headers = {"Content-Type": "application/json"}
        if self._use_bearer:
            headers["Authorization"] = f"Bearer {self.config.api_key}"
            return headers, {}
        return headers, {"key": self.config.api_key}

    def send_turn(
        self,
        history: Sequence[Turn],
        tools: Sequence["ToolSpec"],
        system: Optional[str] = None,
    ) -> ModelTurn:
        contents = [turn_to_content(t) for t in history]
        return self._generate(contents, tools, system)

    def _generate(
        self,
        contents: List[dict],
        tools: Sequence["ToolSpec"],
        system: Optional[str],
    ) -> ModelTurn:
        """POST one generateContent request and parse the first candidate."""
        self._last_usage = None
        url = f"{self.base_url}/{self.config.model}:generateContent"
        headers, params = self._auth_params()

        payload = {
            "contents": contents,
            "generationConfig": {
                "temperature": self.config.temperature,
                "maxOutputTokens": self.config.max_tokens or 2048,
            },
        }
        if tools:
            payload["tools"] = [{"function_declarations": function_declarations(tools)}]
            payload["toolConfig"] = {"functionCallingConfig": {"mode": "AUTO"}}
        if system:
            payload["systemInstruction"] = {"parts": [{"text": system}]}

        logger.debug("Gemini request: %d content(s), %d tool(s)", len(contents), len(tools))
        try:
            response = self.client.post(url, json=payload, params=params, headers=headers)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            raise ModelCallFailure(
                f"Gemini API error {status}: {e.response.text[:200]}", status=status,
            ) from e
        except httpx.HTTPError as e:
            raise ModelCallFailure(f"Gemini request failed: {e}") from e
        except ValueError as e:
            raise ModelCallFailure("Gemini returned a malformed response") from e

        usage = data.get("usageMetadata", {})
        in_t = usage.get("promptTokenCount", 0)
        out_t = usage.get("candidatesTokenCount", 0)
        if in_t or out_t:
            self._last_usage = (in_t, out_t)

        candidates = data.get("candidates", [])
        if not candidates:
            reason = data.get("promptFeedback", {}).get("blockReason")
            logger.debug("Gemini returned no candidates (blockReason=%s)", reason)
            return ModelTurn()

        content = dict(candidates[0].get("content") or {})
        content.setdefault("role", "model")
        content.setdefault("parts", [])
        turn = ModelTurn(parts=parse_parts(content["parts"]), raw=content)
        logger.debug(
            "Gemini response: %d text segment(s), %d function call(s)",
            len(turn.text_segments), len(turn.tool_calls),
        )
        return turn

    def close(self) -> None:
        self.client.close()


@register_provider("gemini-chat")
class GeminiChatSession(GeminiProvider):
    """Gemini provider that keeps the conversation itself.

    The orchestrator passes only the turns added since the previous call;
    the session prepends what it already holds.
    """

    manages_history = True

    def __init__(self, config: ProviderConfig, client: Optional[httpx.Client] = None):
        super().__init__(config, client=client)
        self._contents: List[dict] = []

    @property
    def contents(self) -> List[dict]:
        return list(self._contents)

    def send_turn(
        self,
        history: Sequence[Turn],
        tools: Sequence["ToolSpec"],
        system: Optional[str] = None,
    ) -> ModelTurn:
        contents = self._contents + [turn_to_content(t) for t in history]
        turn = self._generate(contents, tools, system)
        # Only commit once the call succeeded
        if turn.parts:
            contents = contents + [turn_to_content(turn)]
        self._contents = contents
        return turn

    def sync_history(self, history: Sequence[Turn]) -> None:
        self._contents = [turn_to_content(t) for t in history]
