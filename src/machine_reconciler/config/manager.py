"""Unified configuration management for the reconciler."""
from __future__ import annotations

import copy
import json
import logging
import os
import threading
from typing import Any, Dict, Optional, Type, TypeVar

from pydantic import ValidationError as PydanticValidationError

from machine_reconciler.config.defaults import DEFAULT_CONFIG, ENV_OVERRIDE_PREFIX
from machine_reconciler.config.env_expansion import expand_env_vars
from machine_reconciler.config.schemas import (
    AppConfig,
    AWSProviderConfig,
    LoggingConfig,
    ReconcilerConfig,
)
from machine_reconciler.domain.core.exceptions import ConfigurationError

T = TypeVar("T")
logger = logging.getLogger(__name__)


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class ConfigurationManager:
    """
    Single source of truth for configuration.

    Configuration is assembled lazily from, in increasing precedence:
    - DEFAULT_CONFIG
    - an optional JSON file
    - environment overrides of the form MACHINE_RECONCILER_<SECTION>__<KEY>

    ``${VAR}`` / ``${VAR:default}`` placeholders are expanded last and the
    result is validated into an AppConfig.
    """

    def __init__(self, config_file: Optional[str] = None, environ: Optional[Dict[str, str]] = None):
        """Initialize configuration manager with lazy loading."""
        self._config_file = config_file
        self._environ = environ
        self._lock = threading.RLock()
        self._app_config: Optional[AppConfig] = None

    @property
    def app_config(self) -> AppConfig:
        """Lazy load application configuration."""
        if self._app_config is None:
            with self._lock:
                if self._app_config is None:
                    self._app_config = self._load_app_config()
        return self._app_config

    def _load_app_config(self) -> AppConfig:
        config_data = copy.deepcopy(DEFAULT_CONFIG)

        if self._config_file:
            config_data = _deep_merge(config_data, self._load_file(self._config_file))

        config_data = self._apply_environment_overrides(config_data)
        config_data = expand_env_vars(config_data)

        try:
            return AppConfig.from_dict(config_data)
        except PydanticValidationError as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e

    @staticmethod
    def _load_file(path: str) -> Dict[str, Any]:
        if not os.path.exists(path):
            raise ConfigurationError(f"Configuration file not found: {path}")
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Configuration file {path} is not valid JSON: {e}") from e
        if not isinstance(data, dict):
            raise ConfigurationError(f"Configuration file {path} must contain a JSON object")
        logger.debug("Loaded configuration file %s", path)
        return data

    def _apply_environment_overrides(self, config_data: Dict[str, Any]) -> Dict[str, Any]:
        environ = os.environ if self._environ is None else self._environ
        for name, value in environ.items():
            if not name.startswith(ENV_OVERRIDE_PREFIX) or "__" not in name:
                continue
            path = name[len(ENV_OVERRIDE_PREFIX):].lower().split("__")
            section = config_data
            for part in path[:-1]:
                section = section.setdefault(part, {})
                if not isinstance(section, dict):
                    raise ConfigurationError(f"Cannot override {name}: {part} is not a section")
            section[path[-1]] = value
            logger.debug("Applied environment override %s", name)
        return config_data

    def get_typed(self, config_type: Type[T]) -> T:
        """Get a configuration section by its schema type."""
        type_mapping = {
            AWSProviderConfig: "aws",
            LoggingConfig: "logging",
            ReconcilerConfig: "reconciler",
        }
        if config_type not in type_mapping:
            raise ValueError(f"Unknown configuration type: {config_type.__name__}")
        return getattr(self.app_config, type_mapping[config_type])

    def get_aws_config(self) -> AWSProviderConfig:
        return self.app_config.aws

    def get_logging_config(self) -> LoggingConfig:
        return self.app_config.logging

    def get_reconciler_config(self) -> ReconcilerConfig:
        return self.app_config.reconciler

    def reload(self) -> None:
        """Reload configuration from sources."""
        with self._lock:
            self._app_config = None
