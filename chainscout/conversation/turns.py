"""Turn and tool-call value objects.

A conversation is an ordered sequence of turns, each tagged by who
produced it. Model turns carry an ordered mix of text segments and tool-call
requests; tool turns carry the results for those requests in the same order.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple, Union


@dataclass(frozen=True)
class ToolCallRequest:
    """A model-issued request to invoke a named tool."""

    name: str
    arguments: Dict[str, Any] = field(default_factory=dict)
    call_id: Optional[str] = None


@dataclass(frozen=True)
class TextSegment:
    text: str


ModelPart = Union[TextSegment, ToolCallRequest]


# ---------------------------------------------------------------------------
# Tool errors (returned as data, never raised)
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class UnknownTool:
    name: str

    @property
    def message(self) -> str:
        return f"Unknown tool: {self.name}"


@dataclass(frozen=True)
class InvalidArguments:
    name: str
    missing_fields: Tuple[str, ...] = ()
    invalid_fields: Tuple[str, ...] = ()

    @property
    def message(self) -> str:
        problems = []
        if self.missing_fields:
            problems.append(f"missing required {', '.join(self.missing_fields)}")
        if self.invalid_fields:
            problems.append(f"invalid value for {', '.join(self.invalid_fields)}")
        return f"Invalid arguments for {self.name}: {'; '.join(problems)}"


@dataclass(frozen=True)
class HandlerFailure:
    name: str
    reason: str

    @property
    def message(self) -> str:
        return f"Tool {self.name} failed: {self.reason}"


ToolError = Union[UnknownTool, InvalidArguments, HandlerFailure]


@dataclass(frozen=True)
class ToolResult:
    """Outcome of one tool call: a success payload or a tagged error."""

    name: str
    payload: Any = None
    error: Optional[ToolError] = None
    call_id: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_response(self) -> Dict[str, Any]:
        """Render the dict the model sees for this result."""
        if self.error is None:
            return {"result": self.payload}
        body = {"kind": type(self.error).__name__, "message": self.error.message}
        if isinstance(self.error, InvalidArguments):
            body["missing_fields"] = list(self.error.missing_fields)
            body["invalid_fields"] = list(self.error.invalid_fields)
        return {"error": body}


# ---------------------------------------------------------------------------
# Turns
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class UserTurn:
    text: str

    role = "user"


@dataclass(frozen=True)
class ModelTurn:
    """A model response. ``raw`` keeps the provider-native message, if any,
    so it can be replayed verbatim on the next request."""

    parts: Tuple[ModelPart, ...] = ()
    raw: Any = field(default=None, compare=False, repr=False)

    role = "model"

    @property
    def text_segments(self) -> Tuple[str, ...]:
        return tuple(p.text for p in self.parts if isinstance(p, TextSegment))

    @property
    def tool_calls(self) -> Tuple[ToolCallRequest, ...]:
        return tuple(p for p in self.parts if isinstance(p, ToolCallRequest))

    @property
    def text(self) -> str:
        return "".join(self.text_segments)

    @property
    def has_tool_calls(self) -> bool:
        return any(isinstance(p, ToolCallRequest) for p in self.parts)

    @classmethod
    def from_text(cls, text: str) -> "ModelTurn":
        return cls(parts=(TextSegment(text),))


@dataclass(frozen=True)
class ToolTurn:
    results: Tuple[ToolResult, ...] = ()

    role = "tool"


Turn = Union[UserTurn, ModelTurn, ToolTurn]
