"""Terminal UI components."""

from .theme import CYAN, VIOLET, PALETTE, console, render_header
from .output import (
    NO_RESPONSE,
    render_error,
    render_notice,
    render_response,
    render_thinking,
    render_tool_call,
)

__all__ = [
    "CYAN",
    "VIOLET",
    "PALETTE",
    "NO_RESPONSE",
    "console",
    "render_header",
    "render_error",
    "render_notice",
    "render_response",
    "render_thinking",
    "render_tool_call",
]
