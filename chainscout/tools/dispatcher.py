"""Dispatch model-issued tool calls to registered handlers.

Every outcome becomes a ToolResult. Unknown names, bad arguments and handler
failures are returned as tagged errors so the model can see and react to
them; dispatch itself never raises.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List, Sequence, Tuple

from ..conversation.turns import (
    HandlerFailure,
    InvalidArguments,
    ToolCallRequest,
    ToolResult,
    UnknownTool,
)
from .registry import ToolRegistry
from .schema import ToolSpec

logger = logging.getLogger(__name__)

_TRUE_STRINGS = ("true", "yes", "1")
_FALSE_STRINGS = ("false", "no", "0")


class _Invalid(Exception):
    """Internal signal that a value could not be coerced."""


def _coerce(value: Any, json_type: str) -> Any:
    """Coerce a model-supplied value to the declared JSON type."""
    if json_type == "integer":
        if isinstance(value, bool):
            raise _Invalid
        if isinstance(value, int):
            return value
        if isinstance(value, float) and value.is_integer():
            return int(value)
        if isinstance(value, str):
            try:
                return int(value.strip())
            except ValueError:
                raise _Invalid from None
        raise _Invalid

    if json_type == "number":
        if isinstance(value, bool):
            raise _Invalid
        if isinstance(value, (int, float)):
            return value
        if isinstance(value, str):
            try:
                return float(value.strip())
            except ValueError:
                raise _Invalid from None
        raise _Invalid

    if json_type == "string":
        if isinstance(value, str):
            return value
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            if isinstance(value, float) and value.is_integer():
                return str(int(value))
            return str(value)
        raise _Invalid

    if json_type == "boolean":
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered in _TRUE_STRINGS:
                return True
            if lowered in _FALSE_STRINGS:
                return False
        raise _Invalid

    if json_type == "array":
        if isinstance(value, (list, tuple)):
            return list(value)
        raise _Invalid

    if json_type == "object":
        if isinstance(value, dict):
            return value
        raise _Invalid

    return value


def normalize_arguments(
    spec: ToolSpec,
    arguments: Dict[str, Any],
) -> Tuple[Dict[str, Any], Tuple[str, ...], Tuple[str, ...]]:
    """Validate and normalize arguments against a tool definition.

    Undeclared arguments and null values are dropped.

    Returns:
        Tuple of (normalized_arguments, missing_fields, invalid_fields).
    """
    normalized: Dict[str, Any] = {}
    invalid = []

    for key, value in (arguments or {}).items():
        param = spec.param(key)
        if param is None:
            logger.debug("Dropping undeclared argument %r for %s", key, spec.name)
            continue
        if value is None:
            continue
        try:
            normalized[key] = _coerce(value, param.type)
        except _Invalid:
            invalid.append(key)

    missing = tuple(
        name for name in spec.required
        if name not in normalized and name not in invalid
    )
    return normalized, missing, tuple(invalid)


class ToolDispatcher:
    """Execute tool calls against a registry."""

    def __init__(self, registry: ToolRegistry):
        self._registry = registry

    @property
    def registry(self) -> ToolRegistry:
        return self._registry

    def dispatch(self, call: ToolCallRequest) -> ToolResult:
        """Resolve, validate and invoke one tool call.

        Args:
            call: The model-issued request.

        Returns:
            ToolResult carrying the handler's return value, or a tagged
            UnknownTool / InvalidArguments / HandlerFailure error.
        """
        if call.name not in self._registry:
            logger.warning("Unknown tool requested: %s", call.name)
            return ToolResult(name=call.name, error=UnknownTool(call.name), call_id=call.call_id)

        spec = self._registry.definition(call.name)
        handler = self._registry.lookup(call.name)

        arguments, missing, invalid = normalize_arguments(spec, call.arguments)
        if missing or invalid:
            error = InvalidArguments(call.name, missing_fields=missing, invalid_fields=invalid)
            logger.debug(error.message)
            return ToolResult(name=call.name, error=error, call_id=call.call_id)

        logger.debug("Executing %s(%s)", call.name, arguments)
        try:
            payload = handler(**arguments)
        except Exception as e:
            reason = str(e) or type(e).__name__
            logger.warning("Tool %s failed: %s", call.name, reason)
            return ToolResult(
                name=call.name,
                error=HandlerFailure(call.name, reason),
                call_id=call.call_id,
            )

        return ToolResult(name=call.name, payload=payload, call_id=call.call_id)

    def dispatch_all(
        self,
        calls: Sequence[ToolCallRequest],
        concurrent: bool = True,
        max_workers: int = 4,
    ) -> List[ToolResult]:
        """Dispatch a round of calls, returning results in request order."""
        if not calls:
            return []
        if not concurrent or len(calls) == 1:
            return [self.dispatch(call) for call in calls]

        workers = max(1, min(max_workers, len(calls)))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="tool") as pool:
            return list(pool.map(self.dispatch, calls))
