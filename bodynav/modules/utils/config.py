"""
Centralized configuration manager.
Loads the YAML config and provides typed access with defaults.
"""

import os
import logging

import yaml

logger = logging.getLogger(__name__)

_BASE_DIR = os.path.dirname(os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))
_CONFIG_DIR = os.path.join(_BASE_DIR, "config")

# Schema: sections and the expected type of their critical fields
_CONFIG_SCHEMA = {
    "sensor": {
        "replay_fps": float,
        "loop": bool,
        "seated_mode": bool,
    },
    "control": {
        "target_process": str,
        "method": str,
        "keys": dict,
    },
    "pipeline": {
        "mode": str,
        "start_flying": bool,
    },
    "logging": {
        "level": str,
    },
}


def _deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge override into base dict."""
    merged = base.copy()
    for key, value in override.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class Config:
    """Singleton configuration manager."""

    _instance = None
    _data = {}

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def load(self, config_path=None):
        """Load configuration from a YAML file; a missing file means defaults."""
        config_path = config_path or os.path.join(_CONFIG_DIR, "config.yaml")

        try:
            with open(config_path, "r") as f:
                self._data = yaml.safe_load(f) or {}
            logger.info("Loaded config from %s", config_path)
        except FileNotFoundError:
            logger.warning("Config file not found: %s, using defaults", config_path)
            self._data = {}

        self._validate()
        return self

    def override(self, values: dict):
        """Merge command-line overrides on top of the loaded file."""
        self._data = _deep_merge(self._data, values)

    def _validate(self):
        """Warn about wrongly typed fields; never fails the load."""
        warnings = []
        for section_name, fields in _CONFIG_SCHEMA.items():
            section = self._data.get(section_name)
            if section is None:
                continue
            if not isinstance(section, dict):
                warnings.append(f"Section '{section_name}' should be a dict, got {type(section).__name__}")
                continue
            for field_name, expected_type in fields.items():
                if field_name in section:
                    value = section[field_name]
                    # Allow int where float is expected
                    if expected_type is float and isinstance(value, (int, float)) \
                            and not isinstance(value, bool):
                        continue
                    if not isinstance(value, expected_type):
                        warnings.append(
                            f"{section_name}.{field_name}: expected {expected_type.__name__}, "
                            f"got {type(value).__name__} ({value!r})"
                        )

        keys = self.get("control.keys")
        if isinstance(keys, dict):
            for name, code in keys.items():
                if not isinstance(code, int) or isinstance(code, bool):
                    warnings.append(f"control.keys.{name}: expected int key code, got {code!r}")

        for w in warnings:
            logger.warning("Config validation: %s", w)
        if not warnings:
            logger.debug("Config validation passed")
        return warnings

    def get(self, key_path: str, default=None):
        """Get nested config value using dot notation: 'control.method'."""
        keys = key_path.split(".")
        value = self._data
        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default
        return value

    def get_section(self, section: str) -> dict:
        """Get an entire config section."""
        return self._data.get(section, {}) or {}

    @property
    def sensor(self) -> dict:
        return self.get_section("sensor")

    @property
    def control(self) -> dict:
        return self.get_section("control")

    @property
    def pipeline(self) -> dict:
        return self.get_section("pipeline")

    @property
    def performance(self) -> dict:
        return self.get_section("performance")

    @property
    def base_dir(self) -> str:
        return _BASE_DIR

    @classmethod
    def reset(cls):
        """Reset singleton instance (for testing)."""
        cls._instance = None
        cls._data = {}
