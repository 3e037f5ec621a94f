"""Output rendering for answers, progress lines, and errors."""

import json
from typing import Any, Dict

from rich.markdown import Markdown
from rich.text import Text

from .theme import PALETTE, console

NO_RESPONSE = "No response generated"


def _prefixed(label: str, label_style: str, body: str, body_style: str) -> Text:
    line = Text()
    line.append(f"{label} ", style=label_style)
    line.append("| ", style=f"dim {PALETTE.text_muted}")
    line.append(body, style=body_style)
    return line


def render_response(text: str) -> None:
    """Render a final answer as Markdown."""
    console.print(Text("assistant", style=f"bold {PALETTE.accent}"))
    console.print(Markdown(text.strip() or NO_RESPONSE))
    console.print()


def render_thinking(text: str) -> None:
    """Render intermediate narration the model emitted before calling tools."""
    console.print(_prefixed("...", f"dim {PALETTE.tool}", text.strip(), f"dim {PALETTE.text}"))


def render_tool_call(name: str, arguments: Dict[str, Any]) -> None:
    """Render one 'Executing' progress line."""
    args = ", ".join(f"{k}={json.dumps(v, default=str)}" for k, v in arguments.items())
    console.print(_prefixed("tool", f"bold {PALETTE.tool}", f"Executing {name}({args})...", f"dim {PALETTE.text}"))


def render_notice(text: str) -> None:
    """Render a non-error terminal outcome, such as an exhausted round budget."""
    console.print(_prefixed("note", f"bold {PALETTE.warning}", text, PALETTE.warning))


def render_error(text: str) -> None:
    """Render an error message."""
    console.print(_prefixed("err", f"bold {PALETTE.error}", text, PALETTE.error))
