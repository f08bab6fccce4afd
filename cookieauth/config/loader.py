"""Configuration loading and processing."""

import os
import re
from pathlib import Path
from typing import Any, Dict

import yaml
from pydantic import ValidationError

from ..exceptions import ConfigurationError
from .schema import CookieAuthConfig

DEFAULT_SECTION = "cookie_auth"


class CookieAuthConfigLoader:
    """Loads and validates cookie authentication configuration."""

    # Pattern for environment variable substitution
    ENV_VAR_PATTERN = re.compile(r"\$\{([^}]+)\}")

    @classmethod
    def load(cls, config_path: Path, section: str = DEFAULT_SECTION) -> CookieAuthConfig:
        """Load cookie authentication configuration from a YAML file.

        Args:
            config_path: Path to the YAML configuration file
            section: Top-level key holding the cookie auth settings

        Returns:
            Validated CookieAuthConfig instance

        Raises:
            ConfigurationError: If configuration is invalid or cannot be loaded
        """
        try:
            with open(config_path, "r") as f:
                raw_config = yaml.safe_load(f)
        except FileNotFoundError:
            raise ConfigurationError(f"Configuration file not found: {config_path}")
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in configuration file: {e}")

        if not raw_config:
            raise ConfigurationError("Configuration file is empty")

        section_config = raw_config.get(section)
        if section_config is None:
            raise ConfigurationError(f"No '{section}' section found in configuration")

        return cls.parse(section_config)

    @classmethod
    def parse(cls, config: Dict[str, Any]) -> CookieAuthConfig:
        """Validate an in-memory configuration mapping.

        Raises:
            ConfigurationError: If the mapping does not validate
        """
        if not isinstance(config, dict):
            raise ConfigurationError("Cookie auth configuration must be a mapping")

        processed_config = cls._substitute_env_vars(config)

        try:
            return CookieAuthConfig(**processed_config)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid cookie auth configuration: {e}")

    @classmethod
    def _substitute_env_vars(cls, config: Any) -> Any:
        """Recursively substitute environment variables in configuration.

        Supports these patterns:
        - ${VAR_NAME} - simple substitution
        - ${VAR_NAME:-default} - substitution with default value
        - ${VAR_NAME:?error message} - required variable with error message

        Raises:
            ConfigurationError: If required environment variable is missing
        """
        if isinstance(config, dict):
            return {
                key: cls._substitute_env_vars(value) for key, value in config.items()
            }
        elif isinstance(config, list):
            return [cls._substitute_env_vars(item) for item in config]
        elif isinstance(config, str):
            return cls._substitute_env_var_string(config)
        else:
            return config

    @classmethod
    def _substitute_env_var_string(cls, value: str) -> str:
        def replace_var(match):
            var_expr = match.group(1)

            # Handle default value syntax: VAR_NAME:-default
            if ":-" in var_expr:
                var_name, default_value = var_expr.split(":-", 1)
                return os.getenv(var_name, default_value)

            # Handle required variable syntax: VAR_NAME:?error message
            elif ":?" in var_expr:
                var_name, error_msg = var_expr.split(":?", 1)
                env_value = os.getenv(var_name)
                if env_value is None:
                    raise ConfigurationError(
                        f"Required environment variable '{var_name}' not set: {error_msg}"
                    )
                return env_value

            else:
                env_value = os.getenv(var_expr)
                if env_value is None:
                    raise ConfigurationError(
                        f"Environment variable '{var_expr}' not set"
                    )
                return env_value

        return cls.ENV_VAR_PATTERN.sub(replace_var, value)


def load_cookie_auth_config(
    config_path: Path | str, section: str = DEFAULT_SECTION
) -> CookieAuthConfig:
    """Load and validate cookie auth configuration from a YAML file."""
    return CookieAuthConfigLoader.load(Path(config_path), section)


def parse_cookie_auth_config(config: Dict[str, Any]) -> CookieAuthConfig:
    """Validate cookie auth configuration from a dictionary."""
    return CookieAuthConfigLoader.parse(config)
