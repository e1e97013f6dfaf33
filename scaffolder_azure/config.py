"""
config.py

Responsibility: Load app-config YAML into an immutable, read-only `Config`.

Rules:
- Files are loaded in order; later files deep-merge over earlier ones
  (e.g. `app-config.yaml` then `app-config.local.yaml`).
- `${VAR}` placeholders in string values are substituted from the environment.
- Lookups use dotted keys (`scaffolder.defaultAuthor.name`).

Config is passed explicitly into each action factory; nothing here reads
global state after loading.
"""

from __future__ import annotations

import os
import re
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any

import yaml

from scaffolder_azure.errors import ConfigurationError

DEFAULT_COMMIT_MESSAGE = "Initial commit"

_ENV_PATTERN = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)\}")


def _freeze(value: Any) -> Any:
    if isinstance(value, Mapping):
        return MappingProxyType({str(k): _freeze(v) for k, v in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(v) for v in value)
    return value


def _substitute_env(value: Any, env: Mapping[str, str], *, where: str) -> Any:
    if isinstance(value, str):

        def _replace(match: re.Match[str]) -> str:
            name = match.group(1)
            if name not in env:
                raise ConfigurationError(f"Environment variable {name} referenced at {where} is not set")
            return env[name]

        return _ENV_PATTERN.sub(_replace, value)
    if isinstance(value, Mapping):
        return {k: _substitute_env(v, env, where=f"{where}.{k}" if where else str(k)) for k, v in value.items()}
    if isinstance(value, list):
        return [_substitute_env(v, env, where=f"{where}[{i}]") for i, v in enumerate(value)]
    return value


def _deep_merge(base: dict[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    out = dict(base)
    for key, value in override.items():
        if isinstance(value, Mapping) and isinstance(out.get(key), Mapping):
            out[key] = _deep_merge(dict(out[key]), value)
        else:
            out[key] = value
    return out


class Config:
    """Read-only view over merged app-config data."""

    def __init__(self, data: Mapping[str, Any] | None = None, *, prefix: str = "") -> None:
        self._data = _freeze(data or {})
        self._prefix = prefix

    def __repr__(self) -> str:
        return f"Config(prefix={self._prefix!r}, keys={sorted(self._data)})"

    def _full_key(self, key: str) -> str:
        return f"{self._prefix}.{key}" if self._prefix else key

    def get(self, key: str) -> Any:
        """
        Return the raw value at a dotted key, or None if any segment is missing.
        """
        node: Any = self._data
        for part in key.split("."):
            if not isinstance(node, Mapping) or part not in node:
                return None
            node = node[part]
        return node

    def get_optional_string(self, key: str) -> str | None:
        value = self.get(key)
        if value is None:
            return None
        if not isinstance(value, str):
            raise ConfigurationError(f"Invalid type in config for key '{self._full_key(key)}', expected a string")
        return value

    def get_optional_string_array(self, key: str) -> list[str] | None:
        value = self.get(key)
        if value is None:
            return None
        if not isinstance(value, tuple) or not all(isinstance(v, str) for v in value):
            raise ConfigurationError(
                f"Invalid type in config for key '{self._full_key(key)}', expected a list of strings"
            )
        return list(value)

    def get_optional_config(self, key: str) -> Config | None:
        value = self.get(key)
        if value is None:
            return None
        if not isinstance(value, Mapping):
            raise ConfigurationError(f"Invalid type in config for key '{self._full_key(key)}', expected an object")
        return Config(value, prefix=self._full_key(key))

    def get_optional_config_array(self, key: str) -> list[Config] | None:
        value = self.get(key)
        if value is None:
            return None
        if not isinstance(value, tuple):
            raise ConfigurationError(f"Invalid type in config for key '{self._full_key(key)}', expected a list")
        out: list[Config] = []
        for i, item in enumerate(value):
            if not isinstance(item, Mapping):
                raise ConfigurationError(
                    f"Invalid type in config for key '{self._full_key(key)}[{i}]', expected an object"
                )
            out.append(Config(item, prefix=f"{self._full_key(key)}[{i}]"))
        return out


def load_config(*paths: str | Path, env: Mapping[str, str] | None = None) -> Config:
    """
    Load and deep-merge YAML app-config files into a `Config`.

    Missing files are an error; an empty file contributes nothing.
    """
    environ = os.environ if env is None else env
    merged: dict[str, Any] = {}
    for p in paths:
        path = Path(p)
        if not path.exists():
            raise ConfigurationError(f"Config file does not exist: {path}")
        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Failed to parse config file: {path}") from e
        if not isinstance(data, dict):
            raise ConfigurationError(f"Config file must contain a mapping at the top level: {path}")
        merged = _deep_merge(merged, _substitute_env(data, environ, where=""))
    return Config(merged)


@dataclass(frozen=True)
class ScaffolderDefaults:
    """Per-field fallbacks read from `scaffolder.*`; resolved once per handler."""

    author_name: str | None = None
    author_email: str | None = None
    commit_message: str = DEFAULT_COMMIT_MESSAGE

    @classmethod
    def from_config(cls, config: Config) -> ScaffolderDefaults:
        return cls(
            author_name=config.get_optional_string("scaffolder.defaultAuthor.name"),
            author_email=config.get_optional_string("scaffolder.defaultAuthor.email"),
            commit_message=config.get_optional_string("scaffolder.defaultCommitMessage") or DEFAULT_COMMIT_MESSAGE,
        )
