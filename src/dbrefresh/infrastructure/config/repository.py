"""
Configuration repository for loading config.yaml.

This module provides the infrastructure layer for configuration persistence:
file lookup, environment expansion, YAML parsing and model validation.
"""

import logging
import os
import re
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import SecretStr, ValidationError

from dbrefresh.domain.config import RefreshConfig

logger = logging.getLogger(__name__)

CONFIG_NAMES = ("config.yaml", "config.yml")

# ${VAR} or $VAR
_ENV_REF = re.compile(r"\$\{([^}]+)\}|\$([a-zA-Z_][a-zA-Z0-9_]*)")

# Environment variables overriding the database passwords
PASSWORD_OVERRIDES = {
    "local_db": "DBREFRESH_LOCAL_DB_PASSWORD",
    "remote_db": "DBREFRESH_REMOTE_DB_PASSWORD",
}


def expand_env(content: str, environ: Optional[Dict[str, str]] = None) -> str:
    """
    Expand $VAR and ${VAR} references.

    Unset variables are left as written.
    """
    env = os.environ if environ is None else environ

    def replace_match(match):
        var_name = match.group(1) or match.group(2)
        return env.get(var_name, match.group(0))

    return _ENV_REF.sub(replace_match, content)


def expand_env_values(data: Any, environ: Optional[Dict[str, str]] = None) -> Any:
    """
    Expand environment references inside parsed YAML string values.

    Expansion happens after parsing so substituted values are never
    re-interpreted as YAML (a password such as `123456` stays a string,
    and `#` is not read as a comment).
    """
    if isinstance(data, dict):
        return {key: expand_env_values(value, environ) for key, value in data.items()}
    if isinstance(data, list):
        return [expand_env_values(item, environ) for item in data]
    if isinstance(data, str):
        return expand_env(data, environ)
    return data


class ConfigRepository:
    """
    Repository for the refresh configuration file.

    Looks for config.yaml (then config.yml) in the configured directory.
    """

    def __init__(self, config_dir: Optional[Path] = None, environ: Optional[Dict[str, str]] = None):
        """
        Initialize the config repository.

        Args:
            config_dir: Directory holding config.yaml. Defaults to the current working directory.
            environ: Environment used for expansion and overrides. Defaults to os.environ.
        """
        self.config_dir = Path(config_dir) if config_dir is not None else Path.cwd()
        self.environ = os.environ if environ is None else environ

    def find_config_file(self) -> Path:
        """
        Locate the configuration file.

        Raises:
            FileNotFoundError: If neither config.yaml nor config.yml exists
        """
        for name in CONFIG_NAMES:
            path = self.config_dir / name
            if path.exists():
                return path
        raise FileNotFoundError(
            f"Config file 'config.yaml' not found in {self.config_dir}\n"
            f"Hint: Copy config.example.yaml to config.yaml and customize it."
        )

    def load_raw(self) -> Dict[str, Any]:
        """
        Load the configuration file as a dictionary.

        Raises:
            FileNotFoundError: If the file doesn't exist
            ValueError: If the file is empty or not valid YAML
        """
        path = self.find_config_file()
        content = path.read_text(encoding="utf-8")
        if not content.strip():
            raise ValueError(f"Configuration file is empty: {path}")

        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in config file {path}: {e}") from e

        if not isinstance(data, dict):
            raise ValueError(f"Config file {path} must contain a mapping at the top level")

        logger.debug("Loaded configuration from %s", path)
        return expand_env_values(data, self.environ)

    def load_config(self) -> RefreshConfig:
        """
        Load and validate the refresh configuration.

        Returns:
            RefreshConfig domain model

        Raises:
            FileNotFoundError: If the file doesn't exist
            ValueError: If the file cannot be parsed or fails validation
        """
        data = self.load_raw()
        try:
            config = RefreshConfig(**data)
        except ValidationError as e:
            raise ValueError(f"Invalid configuration: {e}") from e

        for section, var_name in PASSWORD_OVERRIDES.items():
            override = self.environ.get(var_name)
            if override:
                logger.debug("Using %s for %s password", var_name, section)
                db = getattr(config, section).model_copy(update={"password": SecretStr(override)})
                config = config.model_copy(update={section: db})

        return config
