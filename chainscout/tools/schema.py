"""Tool definitions and their JSON Schema rendering.

Inspects type annotations on handler signatures to build the parameter
schema that model providers need for native function calling.
"""

import inspect
from dataclasses import dataclass
from typing import Any, Callable, Optional, Tuple, get_type_hints


_TYPE_MAP = {
    str: "string",
    int: "integer",
    float: "number",
    bool: "boolean",
    list: "array",
    dict: "object",
}


@dataclass(frozen=True)
class ParamSpec:
    """One declared parameter of a tool."""

    name: str
    type: str = "string"
    description: str = ""
    required: bool = True


@dataclass(frozen=True)
class ToolSpec:
    """A tool definition: name, model guidance, and parameter schema."""

    name: str
    description: str
    params: Tuple[ParamSpec, ...] = ()

    @property
    def required(self) -> Tuple[str, ...]:
        return tuple(p.name for p in self.params if p.required)

    def param(self, name: str) -> Optional[ParamSpec]:
        for p in self.params:
            if p.name == name:
                return p
        return None

    @property
    def parameters(self) -> dict:
        """JSON Schema object for the tool's arguments."""
        properties = {}
        for p in self.params:
            prop = {"type": p.type}
            if p.description:
                prop["description"] = p.description
            properties[p.name] = prop

        schema = {"type": "object", "properties": properties}
        if self.required:
            schema["required"] = list(self.required)
        return schema


def _annotation_to_type(annotation: Any) -> str:
    """Convert a Python type annotation to a JSON Schema type name."""
    if annotation is inspect.Parameter.empty or annotation is None:
        return "string"

    if annotation in _TYPE_MAP:
        return _TYPE_MAP[annotation]

    origin = getattr(annotation, "__origin__", None)
    args = getattr(annotation, "__args__", ())

    # typing.Optional[X] is Union[X, None]
    if origin is not None and len(args) == 2 and type(None) in args:
        inner = [a for a in args if a is not type(None)][0]
        return _annotation_to_type(inner)

    if origin in _TYPE_MAP:
        return _TYPE_MAP[origin]

    return "string"


def callable_to_tool_spec(
    name: str,
    fn: Callable,
    description: str = "",
) -> ToolSpec:
    """Build a ToolSpec from a Python callable using its signature and docstring.

    Args:
        name: Tool name the model will call.
        fn: The callable to introspect.
        description: Fallback description if the function has no docstring.

    Returns:
        A ToolSpec whose parameters follow the callable's annotations. Parameters
        without a default are required.
    """
    sig = inspect.signature(fn)
    doc = inspect.getdoc(fn) or ""

    try:
        hints = get_type_hints(fn)
    except Exception:
        hints = {}

    params = []
    for param_name, param in sig.parameters.items():
        if param_name in ("self", "cls"):
            continue
        if param.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
            continue

        annotation = hints.get(param_name, param.annotation)
        params.append(ParamSpec(
            name=param_name,
            type=_annotation_to_type(annotation),
            description=_extract_param_doc(doc, param_name) or "",
            required=param.default is inspect.Parameter.empty,
        ))

    return ToolSpec(
        name=name,
        description=_summary(doc) or description,
        params=tuple(params),
    )


def _summary(docstring: str) -> str:
    """Return the docstring text before its Args/Returns sections."""
    lines = []
    for line in docstring.split("\n"):
        if line.strip().lower() in ("args:", "returns:", "raises:"):
            break
        lines.append(line)
    return " ".join(part.strip() for part in lines if part.strip())


def _extract_param_doc(docstring: str, param_name: str) -> Optional[str]:
    """Extract a parameter's description from a Google-style docstring."""
    if not docstring:
        return None

    in_args = False
    for line in docstring.split("\n"):
        stripped = line.strip()

        if stripped.lower() == "args:":
            in_args = True
            continue

        if in_args:
            if stripped.lower() in ("returns:", "raises:"):
                return None
            # Match "param_name: description" or "param_name (type): description"
            if stripped.startswith(f"{param_name}:") or stripped.startswith(f"{param_name} ("):
                colon_idx = stripped.index(":")
                return stripped[colon_idx + 1:].strip()

    return None
