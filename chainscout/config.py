"""Configuration management for Chainscout."""

import logging
import os
from pathlib import Path
from typing import Optional, Dict, Any
import yaml

from .providers.base import ProviderConfig

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "~/.config/chainscout/config.yaml"

_DEBUG_ENV_VARS = ("CHAINSCOUT_DEBUG", "DEBUG")

_DEFAULT_MODELS = {
    "gemini": "gemini-2.0-flash-001",
    "gemini-chat": "gemini-2.0-flash-001",
    "openai": "gpt-4o-mini",
}

_ORCHESTRATOR_DEFAULTS: Dict[str, Any] = {
    "max_rounds": 5,
    "max_turns": 40,
    "concurrent_tools": True,
    "max_workers": 4,
    "use_default_system_prompt": True,
    "system_prompt": "",
}

_BLOCKSCOUT_DEFAULTS: Dict[str, Any] = {
    "base_url": "https://eth.blockscout.com/api/v2/",
    "timeout": 30,
}


class ConfigManager:
    """Manage Chainscout configuration from YAML."""

    def __init__(self, config_path: Optional[str] = None):
        self.config_path = Path(config_path or DEFAULT_CONFIG_PATH).expanduser()
        self.data = self._load_config()

    def _load_config(self) -> Dict[str, Any]:
        """Load configuration from YAML file."""
        if not self.config_path.exists():
            self._create_default_config()

        return self._read_yaml()

    def _read_yaml(self) -> Dict[str, Any]:
        """Read and parse YAML file."""
        try:
            with open(self.config_path, "r") as f:
                content = yaml.safe_load(f)
                return content or {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning("Error reading config %s: %s", self.config_path, e)
            return {}

    def _create_default_config(self) -> None:
        """Create default configuration file."""
        self.config_path.parent.mkdir(parents=True, exist_ok=True)

        default_config = {
            "model": {
                "provider": "gemini",
                "api_key": "${GEMINI_API_KEY}",
                "model": _DEFAULT_MODELS["gemini"],
                "temperature": 0.7,
                "timeout": 60,
            },
            "blockscout": dict(_BLOCKSCOUT_DEFAULTS),
            "orchestrator": dict(_ORCHESTRATOR_DEFAULTS),
            "tools": {},
            "debug": False,
        }

        with open(self.config_path, "w") as f:
            yaml.dump(default_config, f, default_flow_style=False)

    def _resolve_env_var(self, value: Any) -> str:
        """Resolve environment variable references like ${VAR_NAME}."""
        if not isinstance(value, str):
            return "" if value is None else str(value)
        if not value.startswith("${") or not value.endswith("}"):
            return value

        var_name = value[2:-1]
        return os.getenv(var_name, "")

    def get_provider_name(self) -> str:
        """Get the configured model provider name."""
        return self.data.get("model", {}).get("provider", "gemini")

    def get_api_key_reference(self) -> str:
        """The raw api_key value, e.g. ``${GEMINI_API_KEY}``, for error messages."""
        return str(self.data.get("model", {}).get("api_key", ""))

    def get_provider_config(self) -> Optional[ProviderConfig]:
        """Build the provider config, or None when no API key resolves."""
        model_data = self.data.get("model", {})

        api_key = self._resolve_env_var(model_data.get("api_key", ""))
        if not api_key:
            return None

        provider = self.get_provider_name()
        return ProviderConfig(
            api_key=api_key,
            model=model_data.get("model") or _DEFAULT_MODELS.get(provider, ""),
            base_url=model_data.get("base_url") or None,
            temperature=model_data.get("temperature", 0.7),
            max_tokens=model_data.get("max_tokens"),
            timeout=model_data.get("timeout", 60),
        )

    def get_blockscout_config(self) -> Dict[str, Any]:
        """Get the block explorer connection settings."""
        config = self.data.get("blockscout", {})
        return {**_BLOCKSCOUT_DEFAULTS, **config} if config else dict(_BLOCKSCOUT_DEFAULTS)

    def get_orchestrator_config(self) -> Dict[str, Any]:
        """Get conversation loop settings."""
        config = self.data.get("orchestrator", {})
        return {**_ORCHESTRATOR_DEFAULTS, **config} if config else dict(_ORCHESTRATOR_DEFAULTS)

    def get_tools_config(self) -> Dict[str, bool]:
        """Get per-tool enable/disable overrides."""
        return dict(self.data.get("tools") or {})

    def debug_enabled(self) -> bool:
        """Debug output is on via config flag or a DEBUG-style env var."""
        if self.data.get("debug", False):
            return True
        return any(
            os.getenv(var, "").lower() in ("1", "true")
            for var in _DEBUG_ENV_VARS
        )

    def save(self) -> None:
        """Save configuration to file."""
        with open(self.config_path, "w") as f:
            yaml.dump(self.data, f, default_flow_style=False)
