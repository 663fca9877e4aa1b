"""
Configuration management for csa-scan.

Handles loading, merging, environment overrides and validation of the scan
configuration with single responsibility for config operations.
"""
import copy
import importlib.resources as importlib_resources
import os
from typing import Any, Dict, Optional
from urllib.parse import urlparse

import yaml

from csascan.api.exceptions import ConfigurationError
from csascan.api.models import OnFailure, OutputFormat
from csascan.rich_utils.ui_helpers import parse_log_level


USER_CONFIG_FILE = "csa-scan.config.yaml"

# (section, key) filled from environment variables when set
ENVIRONMENT_VARIABLES = {
    "SOOS_API_KEY": ("api", "api_key"),
    "SOOS_CLIENT_ID": ("api", "client_id"),
    "SOOS_API_URL": ("api", "url"),
    "SOOS_PROJECT_NAME": ("scan", "project_name"),
}

REQUIRED_VALUES = {
    ("api", "api_key"): "apiKey (SOOS_API_KEY)",
    ("api", "client_id"): "clientId (SOOS_CLIENT_ID)",
    ("scan", "project_name"): "projectName",
    ("scan", "target"): "target",
}


class ConfigManager:
    """Manages csa-scan configuration loading and merging operations."""

    def load_config(self, path: str) -> dict:
        """Load configuration from YAML file."""
        with open(path, "r") as f:
            return yaml.safe_load(f) or {}

    def deep_merge(self, default: dict, user: dict) -> dict:
        """Deep merge user config into default config."""
        result = copy.deepcopy(default)
        for key, value in user.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self.deep_merge(result[key], value)
            else:
                result[key] = value
        return result

    def load_package_default_config(self) -> dict:
        """Load default config shipped with the package."""
        default_config_path = importlib_resources.files("csascan.config") / "default.yaml"
        with default_config_path.open("r") as f:
            return yaml.safe_load(f)

    def load_and_merge_config(self, user_config_path: str) -> dict:
        """Load user config and merge with package default."""
        default_config = self.load_package_default_config()
        user_config = self.load_config(user_config_path)
        return self.deep_merge(default_config, user_config)

    def discover_and_load_config(self, config_arg: Optional[str]) -> dict:
        """Discover config file with priority order."""

        # Priority 1: --config argument
        if config_arg:
            if os.path.exists(config_arg):
                return self.load_and_merge_config(config_arg)
            raise ConfigurationError(f"Config file not found: {config_arg}")

        # Priority 2: csa-scan.config.yaml in current directory
        if os.path.exists(USER_CONFIG_FILE):
            return self.load_and_merge_config(USER_CONFIG_FILE)

        # Priority 3: Package default config
        return self.load_package_default_config()

    def apply_environment(self, config: dict) -> dict:
        """Override config values with environment variables that are set."""
        overrides: Dict[str, Dict[str, Any]] = {}
        for var_name, (section, key) in ENVIRONMENT_VARIABLES.items():
            value = os.getenv(var_name)
            if value:
                overrides.setdefault(section, {})[key] = value
        return self.deep_merge(config, overrides)

    def merge_config_and_args(self, config: dict, overrides: Dict[str, Dict[str, Any]]) -> dict:
        """Merge CLI arguments into config; None means the flag was not given."""
        cleaned = {
            section: {key: value for key, value in values.items() if value is not None}
            for section, values in overrides.items()
        }
        return self.deep_merge(config, cleaned)

    def fill_missing(self, config: dict, section: str, values: Dict[str, Any]) -> dict:
        """Set values in section only where the config has none."""
        result = copy.deepcopy(config)
        target = result.setdefault(section, {})
        for key, value in values.items():
            if target.get(key) in (None, "") and value is not None:
                target[key] = value
        return result

    def validate(self, config: dict) -> None:
        """Fail fast on missing or malformed values before any remote call."""
        missing = [
            label for (section, key), label in REQUIRED_VALUES.items()
            if not (config.get(section) or {}).get(key)
        ]
        if missing:
            raise ConfigurationError(
                f"Missing required values: {', '.join(missing)}",
                missing=missing,
            )

        api_url = config["api"].get("url") or ""
        parsed = urlparse(api_url)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ConfigurationError(f"Invalid API URL format: {api_url}")

        try:
            OnFailure.parse(config["scan"].get("on_failure") or OnFailure.CONTINUE.value)
            output_format = (config.get("output") or {}).get("format")
            if output_format:
                OutputFormat.parse(output_format)
            parse_log_level((config.get("logging") or {}).get("level") or "INFO")
        except ValueError as e:
            raise ConfigurationError(str(e))

        status = config.get("status") or {}
        if int(status.get("max_attempts", 0)) < 0 or float(status.get("delay_seconds", 0)) < 0:
            raise ConfigurationError("status.max_attempts and status.delay_seconds must not be negative")
