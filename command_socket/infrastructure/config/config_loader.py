"""
Configuration Loader - Bridge Between JSON Config and AppSettings
=================================================================
Loads configuration from a JSON file and maps it onto AppSettings.

Example config/config.json:
    {
        "logging": {"level": "DEBUG", "file": "logs/command_socket.jsonl"},
        "websocket": {"port": "${PORT:-8000}", "path": "/ws"}
    }
"""

import json
import os
import re
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv
from pydantic import ValidationError

from .settings import AppSettings, LoggingSettings, WebSocketSettings

load_dotenv()

# ${VAR} and ${VAR:-default}, anywhere inside a string
ENV_VAR_PATTERN = re.compile(r"\$\{(\w+)(?::-([^}]*))?\}")

DEFAULT_CONFIG_PATHS = [
    "config/config.json",
    "../config/config.json",
]


def _resolve_env_vars(data: Any) -> Any:
    """Recursively resolves environment variable placeholders with default values support."""
    if isinstance(data, dict):
        return {k: _resolve_env_vars(v) for k, v in data.items()}
    elif isinstance(data, list):
        return [_resolve_env_vars(i) for i in data]
    elif isinstance(data, str):
        def replace_env_var(match):
            return os.getenv(match.group(1), match.group(2) or "")
        return ENV_VAR_PATTERN.sub(replace_env_var, data)
    return data


def _map_logging_section(logging_config: Dict[str, Any]) -> Dict[str, Any]:
    mapped = dict(logging_config)
    if 'level' in mapped:
        mapped['level'] = str(mapped['level']).upper()
    # Legacy "file" key: a full path, only its directory is used
    if 'file' in mapped:
        mapped['log_dir'] = str(Path(mapped.pop('file')).parent)
        mapped.setdefault('file_enabled', True)
    return mapped


def load_app_settings_from_json(config_path: str = "config/config.json") -> AppSettings:
    """
    Load AppSettings from JSON configuration file.

    Values from the file override environment variables and defaults.
    An unreadable or invalid file falls back to the default AppSettings.

    Args:
        config_path: Path to config.json file

    Returns:
        Configured AppSettings instance
    """
    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            config_data = json.load(f)

        resolved_data = _resolve_env_vars(config_data)

        overrides: Dict[str, Any] = {}
        for key in ('app_name', 'debug'):
            if key in resolved_data:
                overrides[key] = resolved_data[key]

        if 'logging' in resolved_data:
            overrides['logging'] = LoggingSettings(**_map_logging_section(resolved_data['logging']))

        if 'websocket' in resolved_data:
            overrides['websocket'] = WebSocketSettings(**resolved_data['websocket'])

        return AppSettings(**overrides)

    except (OSError, json.JSONDecodeError, ValidationError, TypeError) as e:
        print(f"[WARNING] Failed to load JSON config from {config_path}: {e}")
        print("[INFO] Using default AppSettings configuration")
        return AppSettings()


def get_settings_from_working_directory(config_path: Optional[str] = None) -> AppSettings:
    """
    Load settings from an explicit path or from config.json near the working directory.

    Returns:
        Configured AppSettings instance
    """
    if config_path:
        return load_app_settings_from_json(config_path)

    for candidate in DEFAULT_CONFIG_PATHS:
        if Path(candidate).exists():
            return load_app_settings_from_json(candidate)

    return AppSettings()
