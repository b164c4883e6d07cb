"""
Config system - layered configuration for authentication clients.

Merge precedence (later wins):
defaults < config files (YAML/JSON) < .env file < environment variables < overrides
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, fields
from glob import glob
from pathlib import Path
from typing import Any, Dict, Optional
from urllib.parse import urlsplit

import yaml
from dotenv import dotenv_values

from .attempts import DEFAULT_ATTEMPT_TTL
from .clients.base import DEFAULT_CLIENT_NAME_PARAMETER, DEFAULT_REDIRECT_PARAMETER
from .context import DEFAULT_AJAX_HEADER
from .faults import CLIENT_CONFIG_INVALID


@dataclass(frozen=True)
class ClientsConfig:
    """Settings shared by the client registry and the auth flow."""
    callback_url: str = "/callback"
    default_url: str = "/"
    client_name_parameter: str = DEFAULT_CLIENT_NAME_PARAMETER
    redirect_parameter: str = DEFAULT_REDIRECT_PARAMETER
    ajax_header: str = DEFAULT_AJAX_HEADER
    attempt_ttl: float = DEFAULT_ATTEMPT_TTL
    profile_session_key: str = "aquilauth.profile"
    requested_url_session_key: str = "aquilauth.requested_url"

    def __post_init__(self):
        for f in fields(self):
            value = getattr(self, f.name)
            if f.name == "attempt_ttl":
                if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
                    raise CLIENT_CONFIG_INVALID(reason=f"attempt_ttl must be a positive number, got {value!r}")
            elif not isinstance(value, str) or not value:
                raise CLIENT_CONFIG_INVALID(reason=f"{f.name} must be a non-empty string, got {value!r}")

    def client_options(self) -> dict[str, str]:
        """
        Constructor keywords that make a client agree with this config.

        Example:
            >>> CasClient("cas", authenticator=a, profile_builder=b, **config.client_options())
        """
        return {
            "callback_url": self.callback_url,
            "client_name_parameter": self.client_name_parameter,
            "redirect_parameter": self.redirect_parameter,
        }

    @property
    def callback_path(self) -> str:
        """Path component of ``callback_url``."""
        return urlsplit(self.callback_url).path or "/"


class ConfigLoader:
    """
    Loads and merges configuration from multiple sources.

    Environment variables use the prefix (``AQA_`` by default); a double
    underscore separates nested keys (``AQA_ATTEMPT_TTL=120``, ``AQA_SECTION__KEY=value``).
    """

    def __init__(self, env_prefix: str = "AQA_"):
        self.env_prefix = env_prefix
        self.config_data: Dict[str, Any] = {}

    @classmethod
    def load(
        cls,
        paths: Optional[list[str]] = None,
        env_prefix: str = "AQA_",
        env_file: Optional[str] = None,
        overrides: Optional[Dict[str, Any]] = None,
    ) -> ConfigLoader:
        """
        Load configuration with proper merge strategy.

        Args:
            paths: Config file paths (glob patterns supported)
            env_prefix: Prefix for environment variables
            env_file: Path to .env file
            overrides: Manual overrides (highest precedence)

        Returns:
            Configured ConfigLoader instance
        """
        loader = cls(env_prefix=env_prefix)

        for pattern in paths or []:
            loader._load_from_files(pattern)

        if env_file:
            loader._load_env_file(env_file)

        loader._load_from_env()

        if overrides:
            loader._merge_dict(loader.config_data, overrides)

        return loader

    def _load_from_files(self, pattern: str):
        """Load config from JSON or YAML files."""
        for path_str in sorted(glob(pattern)):
            path = Path(path_str)
            if path.suffix == ".json":
                self._load_json_file(path)
            elif path.suffix in (".yaml", ".yml"):
                self._load_yaml_file(path)

    def _load_json_file(self, path: Path):
        with open(path) as f:
            data = json.load(f)
            if data:
                self._merge_dict(self.config_data, data)

    def _load_yaml_file(self, path: Path):
        with open(path) as f:
            data = yaml.safe_load(f)
            if data:
                self._merge_dict(self.config_data, data)

    def _load_env_file(self, path: str):
        """Load prefixed keys from a .env file."""
        env_path = Path(path)
        if not env_path.exists():
            return

        for key, value in dotenv_values(env_path).items():
            if value is not None and key.startswith(self.env_prefix):
                self._set_nested(key, value)

    def _load_from_env(self):
        for key, value in os.environ.items():
            if key.startswith(self.env_prefix):
                self._set_nested(key, value)

    def _set_nested(self, key: str, value: str):
        """Convert AQA_ATTEMPT_TTL or AQA_SECTION__KEY to a (nested) dict entry."""
        key = key[len(self.env_prefix):]
        parts = key.lower().split("__")

        current = self.config_data
        for part in parts[:-1]:
            if not isinstance(current.get(part), dict):
                current[part] = {}
            current = current[part]

        current[parts[-1]] = self._parse_value(value)

    def _parse_value(self, value: str) -> Any:
        """Parse string value to appropriate type."""
        if value.lower() in ("true", "yes"):
            return True
        if value.lower() in ("false", "no"):
            return False

        try:
            if "." in value:
                return float(value)
            return int(value)
        except ValueError:
            pass

        if value.startswith(("{", "[")):
            try:
                return json.loads(value)
            except json.JSONDecodeError:
                pass

        return value

    def _merge_dict(self, target: dict, source: dict):
        """Deep merge source into target."""
        for key, value in source.items():
            if key in target and isinstance(target[key], dict) and isinstance(value, dict):
                self._merge_dict(target[key], value)
            else:
                target[key] = value

    def get(self, path: str, default: Any = None) -> Any:
        """Get config value by dot-separated path."""
        current: Any = self.config_data
        for part in path.split("."):
            if isinstance(current, dict) and part in current:
                current = current[part]
            else:
                return default
        return current

    def to_clients_config(self) -> ClientsConfig:
        """
        Build validated ClientsConfig from the merged data.

        Raises:
            CLIENT_CONFIG_INVALID: A value has the wrong type
        """
        known = {f.name for f in fields(ClientsConfig)}
        kwargs = {key: value for key, value in self.config_data.items() if key in known}
        return ClientsConfig(**kwargs)

    def to_dict(self) -> dict:
        return self.config_data.copy()
