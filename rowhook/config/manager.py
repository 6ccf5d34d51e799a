"""Process-wide access to the active rowhook configuration."""

from __future__ import annotations

import json
import os
from collections.abc import Mapping
from threading import Lock
from typing import Any, Callable, ClassVar

from rowhook.config.loader import CONFIG_ENV_VAR, load_yaml
from rowhook.config.models import RowHookConfig

ConfigListener = Callable[[RowHookConfig, RowHookConfig], None]

ENV_PREFIX = "ROWHOOK_"


def _deep_merge(base: Mapping[str, Any], updates: Mapping[str, Any]) -> dict[str, Any]:
    merged: dict[str, Any] = dict(base)
    for key, value in updates.items():
        current = merged.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            merged[key] = _deep_merge(current, value)
        else:
            merged[key] = value
    return merged


def _parse_env_value(raw: str) -> Any:
    # Scalars stay strings; pydantic coerces them against the field type.
    value = raw.strip()
    if value[:1] in {"[", "{"}:
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            return value
    return value


def env_overrides(environ: Mapping[str, str] | None = None, prefix: str = ENV_PREFIX) -> dict[str, Any]:
    """Nested overrides from ``ROWHOOK_SECTION__FIELD=value`` variables."""
    source = os.environ if environ is None else environ
    overrides: dict[str, Any] = {}
    for key, raw_value in source.items():
        if not key.startswith(prefix) or key == CONFIG_ENV_VAR:
            continue
        path = [part.lower() for part in key[len(prefix) :].split("__") if part]
        if not path:
            continue
        cursor = overrides
        for part in path[:-1]:
            nested = cursor.get(part)
            if not isinstance(nested, dict):
                nested = cursor[part] = {}
            cursor = nested
        cursor[path[-1]] = _parse_env_value(raw_value)
    return overrides


class ConfigManager:
    """Thread-safe singleton holding the validated ``RowHookConfig``."""

    _instance: ClassVar[ConfigManager | None] = None
    _class_lock: ClassVar[Lock] = Lock()

    def __init__(self) -> None:
        self._lock = Lock()
        self._config = RowHookConfig()
        self._listeners: list[ConfigListener] = []
        self._config_path: str | None = None

    @classmethod
    def instance(cls) -> ConfigManager:
        if cls._instance is not None:
            return cls._instance
        with cls._class_lock:
            if cls._instance is None:
                cls._instance = cls()
        return cls._instance

    @classmethod
    def _reset_for_tests(cls) -> None:
        """Reset singleton state for isolated unit tests."""
        with cls._class_lock:
            cls._instance = None

    @classmethod
    def load(
        cls,
        config_path: str | None = None,
        overrides: dict[str, Any] | None = None,
    ) -> ConfigManager:
        """Validate defaults < YAML < environment < *overrides* and publish the result."""
        manager = cls.instance()
        merged = _deep_merge(load_yaml(config_path), env_overrides())
        merged = _deep_merge(merged, overrides or {})
        new_config = RowHookConfig.model_validate(merged)
        with manager._lock:
            old = manager._config
            manager._config = new_config
            manager._config_path = config_path
            listeners = list(manager._listeners)
        for callback in listeners:
            callback(old, new_config)
        return manager

    @property
    def config_path(self) -> str | None:
        with self._lock:
            return self._config_path

    def get(self) -> RowHookConfig:
        """Return current config snapshot."""
        with self._lock:
            return self._config

    def on_change(self, callback: ConfigListener) -> None:
        with self._lock:
            self._listeners.append(callback)
