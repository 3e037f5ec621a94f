"""System prompt assembly."""

from typing import Any, Dict, Optional

from .default import build_default_prompt, DEFAULT_IDENTITY


def resolve_system_prompt(orchestrator_config: Dict[str, Any]) -> Optional[str]:
    """Pick the system prompt from orchestrator settings.

    An explicit ``system_prompt`` wins; otherwise the default prompt is used
    unless ``use_default_system_prompt`` is off.
    """
    explicit = (orchestrator_config.get("system_prompt") or "").strip()
    if explicit:
        return explicit
    if orchestrator_config.get("use_default_system_prompt", True):
        return build_default_prompt()
    return None


__all__ = [
    "build_default_prompt",
    "resolve_system_prompt",
    "DEFAULT_IDENTITY",
]
