"""
Configuration for the AbuseIPDB client.

This module defines the typed configuration dataclasses, a nested-key JSON
configuration store addressed with dotted paths ("api.key"), and the
loader that merges the store with .env / environment overrides.
"""

import copy
import json
import os
import re
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from dotenv import find_dotenv, load_dotenv

from .audit_logger import AuditLogger
from .exceptions import ConfigError
from .request_builder import DEFAULT_BASE_URL


if sys.platform.startswith("win"):
    DEFAULT_CONFIG_LOCATION = Path(r"C:\abuseipdb_client\config.json")
else:
    DEFAULT_CONFIG_LOCATION = Path("/etc/abuseipdb_client/config.json")

CONFIG_PATH_PATTERN = re.compile(r"[A-Za-z0-9_-]+(?:\.[A-Za-z0-9_-]+)*")

DEFAULT_CONFIG: dict[str, Any] = {
    "api": {
        "key": "",
        "base_url": DEFAULT_BASE_URL,
        "timeout_seconds": 20.0,
        "verify_tls": True,
        "force_ipv4": False,
    },
    "logging": {
        "level": "info",
        "output_format": "text",
    },
    "report": {
        "default_comment": "",
    },
}

COMPONENT = "config"

_MISSING = object()


@dataclass
class ApiConfig:
    """Connection settings for the AbuseIPDB API."""

    api_key: str = ""
    base_url: str = DEFAULT_BASE_URL
    timeout_seconds: float = 20.0
    verify_tls: bool = True
    force_ipv4: bool = False


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "info"
    output_format: str = "text"  # 'json', 'text', 'both'


@dataclass
class ReportConfig:
    """Defaults applied to report calls."""

    default_comment: str = ""


@dataclass
class SystemConfig:
    """Main configuration combining all sub-configurations."""

    api: ApiConfig = field(default_factory=ApiConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    report: ReportConfig = field(default_factory=ReportConfig)
    source_path: Optional[Path] = None


class ConfigStore:
    """
    Nested-key JSON configuration store.

    Values are addressed with dotted paths, e.g. ``store.get("api.key")``.
    A missing or unreadable file falls back to the built-in defaults.
    """

    def __init__(
        self,
        path: Optional[Path] = None,
        logger: Optional[AuditLogger] = None,
    ) -> None:
        self._path = Path(path) if path is not None else DEFAULT_CONFIG_LOCATION
        self._logger = logger
        self._data: dict[str, Any] = {}
        self._loaded_from_file = False

    @property
    def path(self) -> Path:
        return self._path

    @path.setter
    def path(self, value: Path) -> None:
        self._path = Path(value)

    @property
    def loaded_from_file(self) -> bool:
        return self._loaded_from_file

    @property
    def data(self) -> dict[str, Any]:
        return copy.deepcopy(self._data)

    def load(self) -> "ConfigStore":
        """
        Load the configuration file.

        A missing or unreadable file loads the defaults and logs an error.
        Text that is not valid JSON loads the defaults and logs a critical
        message.
        """
        self._loaded_from_file = False
        try:
            text = self._path.read_text(encoding="utf-8")
        except OSError as e:
            if self._logger:
                self._logger.log_error(
                    COMPONENT,
                    "Couldn't open config file. Loading defaults; some features may not work as expected",
                    error=e,
                    additional_data={"path": str(self._path)},
                )
            self._data = copy.deepcopy(DEFAULT_CONFIG)
            return self

        try:
            parsed = json.loads(text)
        except json.JSONDecodeError as e:
            if self._logger:
                self._logger.critical(
                    COMPONENT,
                    f"Failed to parse configuration! Error: {e}",
                    {"path": str(self._path)},
                )
            self._data = copy.deepcopy(DEFAULT_CONFIG)
            return self

        if not isinstance(parsed, dict):
            if self._logger:
                self._logger.critical(
                    COMPONENT,
                    "Configuration root must be a JSON object",
                    {"path": str(self._path)},
                )
            self._data = copy.deepcopy(DEFAULT_CONFIG)
            return self

        self._data = parsed
        self._loaded_from_file = True
        return self

    def load_dict(self, data: dict[str, Any]) -> "ConfigStore":
        self._data = copy.deepcopy(data)
        return self

    @staticmethod
    def _split(path: str) -> list[str]:
        if not isinstance(path, str) or not CONFIG_PATH_PATTERN.fullmatch(path):
            raise ConfigError(
                code="invalid_path",
                message=f"Invalid config path: {path!r}",
                details={"path": path},
            )
        return path.split(".")

    def has(self, path: str) -> bool:
        node: Any = self._data
        for token in self._split(path):
            if not isinstance(node, dict) or token not in node:
                return False
            node = node[token]
        return True

    def get(self, path: str, default: Any = _MISSING) -> Any:
        """
        Look up a value by dotted path.

        Raises:
            ConfigError: If the path does not exist and no default was given
        """
        node: Any = self._data
        for token in self._split(path):
            if not isinstance(node, dict) or token not in node:
                if default is _MISSING:
                    raise ConfigError(
                        code="missing_config",
                        message="Attempt to retrieve non-existing config!",
                        details={"path": path},
                    )
                return default
            node = node[token]
        return node

    def set(self, path: str, value: Any) -> None:
        tokens = self._split(path)
        node = self._data
        for token in tokens[:-1]:
            child = node.get(token)
            if not isinstance(child, dict):
                child = {}
                node[token] = child
            node = child
        node[tokens[-1]] = value


def _parse_bool(raw: Any) -> bool:
    if isinstance(raw, bool):
        return raw
    return str(raw).strip().lower() in {"1", "true", "yes", "on"}


def config_from_store(store: ConfigStore) -> SystemConfig:
    """Build typed configuration from a loaded store, filling gaps with defaults."""
    defaults = ApiConfig()
    try:
        api = ApiConfig(
            api_key=str(store.get("api.key", defaults.api_key) or ""),
            base_url=str(store.get("api.base_url", defaults.base_url)),
            timeout_seconds=float(store.get("api.timeout_seconds", defaults.timeout_seconds)),
            verify_tls=_parse_bool(store.get("api.verify_tls", defaults.verify_tls)),
            force_ipv4=_parse_bool(store.get("api.force_ipv4", defaults.force_ipv4)),
        )
    except (TypeError, ValueError) as e:
        raise ConfigError(
            code="invalid_value",
            message=f"Invalid value in api section: {e}",
            details={"path": str(store.path)},
        ) from e

    logging_config = LoggingConfig(
        level=str(store.get("logging.level", "info")),
        output_format=str(store.get("logging.output_format", "text")),
    )
    report = ReportConfig(
        default_comment=str(store.get("report.default_comment", "") or ""),
    )

    return SystemConfig(
        api=api,
        logging=logging_config,
        report=report,
        source_path=store.path if store.loaded_from_file else None,
    )


def apply_env_overrides(config: SystemConfig) -> SystemConfig:
    """Apply ABUSEIPDB_* environment variables (after loading .env) on top of config."""
    load_dotenv(find_dotenv(usecwd=True))

    api_key = os.getenv("ABUSEIPDB_API_KEY", "").strip()
    if api_key:
        config.api.api_key = api_key

    base_url = os.getenv("ABUSEIPDB_BASE_URL", "").strip()
    if base_url:
        config.api.base_url = base_url

    timeout = os.getenv("ABUSEIPDB_TIMEOUT", "").strip()
    if timeout:
        try:
            config.api.timeout_seconds = float(timeout)
        except ValueError as e:
            raise ConfigError(
                code="invalid_value",
                message=f"ABUSEIPDB_TIMEOUT is not a number: {timeout!r}",
            ) from e

    log_level = os.getenv("ABUSEIPDB_LOG_LEVEL", "").strip()
    if log_level:
        config.logging.level = log_level

    return config


def load_system_config(
    path: Optional[Path] = None,
    logger: Optional[AuditLogger] = None,
    use_env: bool = True,
) -> SystemConfig:
    """
    Load configuration from the JSON store and environment.

    Args:
        path: Config file path (defaults to DEFAULT_CONFIG_LOCATION)
        logger: Optional audit logger for load diagnostics
        use_env: Apply .env / environment overrides

    Returns:
        SystemConfig
    """
    store = ConfigStore(path, logger=logger).load()
    config = config_from_store(store)
    if use_env:
        config = apply_env_overrides(config)
    return config


def config_to_dict(config: SystemConfig) -> dict[str, Any]:
    return {
        "api": {
            "key": config.api.api_key,
            "base_url": config.api.base_url,
            "timeout_seconds": config.api.timeout_seconds,
            "verify_tls": config.api.verify_tls,
            "force_ipv4": config.api.force_ipv4,
        },
        "logging": {
            "level": config.logging.level,
            "output_format": config.logging.output_format,
        },
        "report": {
            "default_comment": config.report.default_comment,
        },
    }


def save_config_to_file(config: SystemConfig, config_path: Path) -> None:
    """
    Save configuration to a JSON file.

    Raises:
        ConfigError: If the file cannot be written
    """
    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, "w", encoding="utf-8") as f:
            json.dump(config_to_dict(config), f, indent=2, ensure_ascii=False)
    except OSError as e:
        raise ConfigError(
            code="io_error",
            message=f"Error saving config: {e}",
            details={"path": str(config_path)},
        ) from e
