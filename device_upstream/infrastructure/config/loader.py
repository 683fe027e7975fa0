"""
Reads and writes ApplicationConfig.

Values come from an optional YAML or JSON file; ``UPSTREAM_*`` environment
variables are then overlaid on top of it.
"""

import json
import os
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

import yaml

from .models import ApplicationConfig


def parse_bool(value: str) -> bool:
    return value.strip().lower() in ('true', '1', 'yes', 'on', 'enabled')


# (variable suffix, dotted config path, converter)
ENV_OVERRIDES: List[Tuple[str, str, Callable[[str], Any]]] = [
    ("DEBUG", "debug", parse_bool),
    ("ENVIRONMENT", "environment", str),
    ("API_HOST", "api.host", str),
    ("API_PORT", "api.port", int),
    ("BROKER_KIND", "broker.kind", str),
    ("MQTT_HOST", "broker.mqtt.host", str),
    ("MQTT_PORT", "broker.mqtt.port", int),
    ("MQTT_USERNAME", "broker.mqtt.username", str),
    ("MQTT_PASSWORD", "broker.mqtt.password", str),
    ("MQTT_TOPIC_PREFIX", "broker.mqtt.topic_prefix", str),
    ("SIDE_EFFECT_WORKERS", "side_effects.workers", int),
    ("SIDE_EFFECT_QUEUE_SIZE", "side_effects.queue_size", int),
    ("ABORT_ON_SUB_DEVICE_ERROR", "registration.abort_on_sub_device_error", parse_bool),
    ("SERIALIZE_STATE_UPDATES", "state.serialize_per_device", parse_bool),
    ("LOG_LEVEL", "logging.level", str),
    ("LOG_DIR", "logging.log_directory", str),
]


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Merge override into a copy of base, descending into nested mappings."""
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = value
    return merged


class ConfigLoader:
    """Builds ApplicationConfig from files and the environment."""

    def __init__(self, env_prefix: str = "UPSTREAM_") -> None:
        self._env_prefix = env_prefix

    def load_config(self, config_file: Optional[str] = None) -> ApplicationConfig:
        """
        Build a validated configuration.

        Args:
            config_file: Optional YAML (.yaml/.yml) or JSON (.json) file

        Raises:
            FileNotFoundError: If config_file does not exist
            ValueError: If the file, its keys or an environment override is invalid
        """
        data = self._read_file(config_file) if config_file else {}
        data = deep_merge(data, self._read_environment())

        try:
            config = ApplicationConfig.from_dict(data)
        except TypeError as e:
            # Unknown keys surface as unexpected keyword arguments
            raise ValueError(f"Invalid configuration: {e}") from e

        config.config_file_path = config_file
        return config

    def save_config(self, config: ApplicationConfig, file_path: str, format: str = "yaml") -> None:
        """Write config as YAML or JSON; the source file path is not persisted."""
        data = config.to_dict()
        data.pop('config_file_path', None)

        kind = format.lower()
        if kind not in ("yaml", "json"):
            raise ValueError(f"Unsupported format: {format}")

        with open(file_path, 'w', encoding='utf-8') as f:
            if kind == "yaml":
                yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)
            else:
                json.dump(data, f, indent=2)

    def _read_file(self, file_path: str) -> Dict[str, Any]:
        path = Path(file_path)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {file_path}")

        suffix = path.suffix.lower()
        if suffix not in ('.yaml', '.yml', '.json'):
            raise ValueError(f"Unsupported configuration file format: {path.suffix}")

        text = path.read_text(encoding='utf-8')
        try:
            data = json.loads(text) if suffix == '.json' else (yaml.safe_load(text) or {})
        except (yaml.YAMLError, json.JSONDecodeError) as e:
            raise ValueError(f"Cannot parse {file_path}: {e}") from e

        if not isinstance(data, dict):
            raise ValueError(f"Top level of {file_path} must be a mapping, got {type(data).__name__}")
        return data

    def _read_environment(self) -> Dict[str, Any]:
        overrides: Dict[str, Any] = {}

        for suffix, config_path, converter in ENV_OVERRIDES:
            name = self._env_prefix + suffix
            raw = os.environ.get(name)
            if raw is None:
                continue
            try:
                value = converter(raw)
            except ValueError as e:
                raise ValueError(f"Invalid value for {name}: {raw!r} ({e})") from e

            *parents, leaf = config_path.split('.')
            target = overrides
            for key in parents:
                target = target.setdefault(key, {})
            target[leaf] = value

        return overrides
