"""
Loading of Xapo adapter configuration from YAML files.

The file is looked up from (in order) the explicit path, the
``XAPO_AUTH_CONFIG`` environment variable and ``~/.xapo/config.yml``.
String values may reference environment variables as ``${ENV_VAR}``::

    xapo:
      client_id: ${XAPO_CLIENT_ID}
      client_secret: ${XAPO_CLIENT_SECRET}
      callback_url: https://www.example.net/auth/xapo/callback
      api_version: v2
"""

import logging
import os
import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from .contracts import ConfigError
from .models import XapoAuthConfigModel

logger = logging.getLogger(__name__)

ENV_VAR_PATTERN = re.compile(r"\${([A-Za-z0-9_]+)}")
CONFIG_ENV_VAR = "XAPO_AUTH_CONFIG"
DEFAULT_CONFIG_NAME = Path(".xapo") / "config.yml"


def resolve_env_var(value: str) -> str:
    """Resolve environment variable references in a string.

    Args:
        value: String potentially containing ${ENV_VAR} references

    Returns:
        String with all environment variables resolved

    Raises:
        ConfigError: If an environment variable is not set
    """
    matches = ENV_VAR_PATTERN.findall(value)
    if not matches:
        return value

    result = value
    for env_var in matches:
        if env_var not in os.environ:
            raise ConfigError(f"Environment variable {env_var} is not set")
        result = result.replace(f"${{{env_var}}}", os.environ[env_var])

    return result


def interpolate_all(config: Any) -> Any:
    """Recursively resolve ${ENV_VAR} references in a parsed YAML document."""
    if isinstance(config, dict):
        return {k: interpolate_all(v) for k, v in config.items()}
    if isinstance(config, list):
        return [interpolate_all(item) for item in config]
    if isinstance(config, str):
        return resolve_env_var(config)
    return config


def _config_path(path: str | Path | None) -> Path:
    if path is not None:
        return Path(path)
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path)
    return Path.home() / DEFAULT_CONFIG_NAME


def load_xapo_config(path: str | Path | None = None) -> XapoAuthConfigModel:
    """Load and validate the Xapo adapter configuration.

    Settings are read from the top-level ``xapo`` key; a document holding
    the settings directly is accepted too.
    """
    config_path = _config_path(path)
    if not config_path.exists():
        raise ConfigError(f"Xapo config file not found at {config_path}")

    logger.debug(f"Loading Xapo config from {config_path}")
    try:
        with open(config_path) as f:
            document = yaml.safe_load(f)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Error parsing Xapo config {config_path}: {exc}") from exc

    if document is None:
        document = {}
    if not isinstance(document, dict):
        raise ConfigError(f"Xapo config {config_path} must contain a mapping")

    section = document.get("xapo", document)
    if not isinstance(section, dict):
        raise ConfigError(f"'xapo' section in {config_path} must be a mapping")

    section = interpolate_all(section)
    try:
        return XapoAuthConfigModel.model_validate(section)
    except ValidationError as exc:
        raise ConfigError(f"Invalid Xapo config {config_path}: {exc}") from exc
