"""Model provider registry.

Provider classes register under the name used in ``model.provider`` in the
config file. ``create_provider`` imports the provider modules on first use,
so ``gemini``, ``gemini-chat`` and ``openai`` resolve without explicit
imports at the call site.
"""

import importlib
import logging
import pkgutil
import sys
from typing import Dict, Type

from ..errors import ConfigError
from .base import BaseProvider, ProviderConfig

logger = logging.getLogger(__name__)

_REGISTRY: Dict[str, Type[BaseProvider]] = {}

_NON_PROVIDER_MODULES = ("base", "registry")


def register_provider(name: str):
    """Class decorator registering a provider under ``name``.

    Usage:
        @register_provider("gemini")
        class GeminiProvider(BaseProvider):
            ...
    """
    def decorator(cls: Type[BaseProvider]):
        if not issubclass(cls, BaseProvider):
            raise TypeError(f"{cls.__name__} must be a subclass of BaseProvider")
        _REGISTRY[name] = cls
        return cls
    return decorator


def discover_providers() -> None:
    """Import every provider module so its decorators run.

    Modules already in sys.modules are reloaded; otherwise a registry emptied
    by clear_registry() would stay empty.
    """
    package = importlib.import_module(__package__)
    for _importer, module_name, _is_pkg in pkgutil.iter_modules(package.__path__):
        if module_name in _NON_PROVIDER_MODULES or module_name.startswith("_"):
            continue
        fqn = f"{__package__}.{module_name}"
        if fqn in sys.modules:
            importlib.reload(sys.modules[fqn])
        else:
            importlib.import_module(fqn)
    logger.debug("Providers available: %s", sorted(_REGISTRY))


def create_provider(name: str, config: ProviderConfig) -> BaseProvider:
    """Instantiate the provider registered as ``name``.

    Raises:
        ConfigError: if no provider is registered under that name.
    """
    if name not in _REGISTRY:
        discover_providers()
    try:
        cls = _REGISTRY[name]
    except KeyError:
        raise ConfigError(
            f"Provider '{name}' not found. Available: {sorted(_REGISTRY)}"
        ) from None
    logger.debug("Initializing %s with model %s", name, config.model)
    return cls(config)


def get_registry() -> Dict[str, Type[BaseProvider]]:
    """Return a copy of the registry (name -> class)."""
    return dict(_REGISTRY)


def clear_registry() -> None:
    """Clear the registry. Primarily for testing."""
    _REGISTRY.clear()
