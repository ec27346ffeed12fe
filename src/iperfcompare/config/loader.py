"""
Configuration loading utilities.

Supports environment variable interpolation and config inheritance.
Every key is optional; an absent file yields the defaults.
"""

import os
import re
from pathlib import Path
from typing import Any

import yaml

from iperfcompare.config.settings import (
    AppConfig,
    LoggingConfig,
    ServerConfig,
    UploadConfig,
)


def _interpolate_env_vars(value: str) -> str:
    """
    Interpolate environment variables in string values.

    Supports ${VAR} and ${VAR:default} syntax.
    """
    pattern = r"\$\{([^}:]+)(?::([^}]*))?\}"

    def replacer(match: re.Match[str]) -> str:
        var_name = match.group(1)
        default = match.group(2)
        return os.environ.get(var_name, default if default is not None else "")

    return re.sub(pattern, replacer, value)


def _process_config_values(obj: Any) -> Any:
    """Recursively process config values for env var interpolation."""
    if isinstance(obj, str):
        return _interpolate_env_vars(obj)
    if isinstance(obj, dict):
        return {k: _process_config_values(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_process_config_values(item) for item in obj]
    return obj


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries, with override taking precedence."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def load_yaml(path: Path) -> dict[str, Any]:
    """Load a YAML file and process environment variables."""
    with path.open(encoding="utf-8") as f:
        data = yaml.safe_load(f)
    return _process_config_values(data) if data else {}


def load_config(
    config_path: Path | None = None,
    base_path: Path | None = None,
) -> AppConfig:
    """
    Load application configuration from YAML file(s).

    Recognized sections: upload, server, logging.

    Args:
        config_path: Path to the main configuration file. None means defaults.
        base_path: Optional path to base configuration for inheritance.

    Returns:
        Fully validated AppConfig instance.
    """
    if config_path is None:
        return AppConfig()

    if base_path is not None:
        base_data = load_yaml(base_path)
    else:
        potential_base = config_path.parent / "base.yaml"
        base_data = (
            load_yaml(potential_base)
            if potential_base.exists() and potential_base != config_path
            else {}
        )

    main_data = load_yaml(config_path)
    merged = _deep_merge(base_data, main_data)

    upload_data = merged.get("upload", {})
    upload = UploadConfig(
        max_files=upload_data.get("max_files", 6),
        upload_dir=Path(upload_data.get("dir", "./uploads")),
        delete_after_processing=upload_data.get("delete_after_processing", True),
    )

    server_data = merged.get("server", {})
    server = ServerConfig(
        host=server_data.get("host", "localhost"),
        port=server_data.get("port", 3001),
        cors_origin=server_data.get("cors_origin", "*"),
    )

    logging_data = merged.get("logging", {})
    logging_config = LoggingConfig(
        level=logging_data.get("level", "INFO"),
        json_output=logging_data.get("json", False),
    )

    return AppConfig(upload=upload, server=server, logging=logging_config)
