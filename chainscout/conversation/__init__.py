"""Conversation turns and the state log they live in."""

from .state import ConversationState
from .turns import (
    HandlerFailure,
    InvalidArguments,
    ModelPart,
    ModelTurn,
    TextSegment,
    ToolCallRequest,
    ToolError,
    ToolResult,
    ToolTurn,
    Turn,
    UnknownTool,
    UserTurn,
)

__all__ = [
    "ConversationState",
    "HandlerFailure",
    "InvalidArguments",
    "ModelPart",
    "ModelTurn",
    "TextSegment",
    "ToolCallRequest",
    "ToolError",
    "ToolResult",
    "ToolTurn",
    "Turn",
    "UnknownTool",
    "UserTurn",
]
