"""Configuration for deepnote_bridge.

Settings are resolved in this order (later wins):

1. Defaults of BridgeConfig.
2. A JSON or YAML config file, from the config_path argument or the
   DEEPNOTE_BRIDGE_CONFIG environment variable.
3. DEEPNOTE_BRIDGE_* environment variables, optionally seeded from a .env
   file (which never overrides variables already set).

Config file format (.deepnote-bridge.json):
    {
      "code_language": "python",
      "markup_language": "markdown",
      "disabled_processors": ["application"],
      "trace_log": "/tmp/deepnote_bridge_trace.log",
      "log_level": "DEBUG"
    }
"""

import json
import logging
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from dotenv import load_dotenv

from .errors import ConfigError
from .trace import TRACE_ENV_VAR

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "DEEPNOTE_BRIDGE_CONFIG"
DEFAULT_ENV_FILE = ".env"


@dataclass
class BridgeConfig:
    """Settings for the converter and its MIME registry.

    Attributes:
        code_language: Language id given to host code cells.
        markup_language: Language id given to host markup cells.
        disabled_processors: Built-in MIME processors to leave out of the registry.
        trace_log: Trace file path; None disables tracing.
        log_level: Level name for the deepnote_bridge logger.
    """
    code_language: str = "python"
    markup_language: str = "markdown"
    disabled_processors: List[str] = field(default_factory=list)
    trace_log: Optional[str] = None
    log_level: str = "WARNING"

    def apply_logging(self) -> None:
        """Apply log_level to the package logger and export trace_log."""
        level = logging.getLevelName(self.log_level.upper())
        if isinstance(level, int):
            logging.getLogger("deepnote_bridge").setLevel(level)
        else:
            logger.warning("Unknown log level '%s', keeping current level", self.log_level)

        if self.trace_log:
            os.environ[TRACE_ENV_VAR] = self.trace_log


# Environment variable -> (field name, parser)
_ENV_OVERRIDES = {
    "DEEPNOTE_BRIDGE_CODE_LANGUAGE": ("code_language", str),
    "DEEPNOTE_BRIDGE_MARKUP_LANGUAGE": ("markup_language", str),
    "DEEPNOTE_BRIDGE_DISABLED_PROCESSORS": (
        "disabled_processors",
        lambda value: [name.strip() for name in value.split(",") if name.strip()],
    ),
    TRACE_ENV_VAR: ("trace_log", str),
    "DEEPNOTE_BRIDGE_LOG_LEVEL": ("log_level", str),
}


def _read_config_file(path: Path) -> Dict[str, Any]:
    """Parse a JSON or YAML config file.

    Raises:
        ConfigError: If the file cannot be parsed or is not a mapping.
    """
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(str(path), str(e)) from e

    try:
        if path.suffix in (".yaml", ".yml"):
            data = yaml.safe_load(content)
        else:
            data = json.loads(content)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigError(str(path), str(e)) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(str(path), "config must be a mapping")
    return data


def _apply_file_values(config: BridgeConfig, data: Dict[str, Any], path: Path) -> None:
    known = {f.name for f in fields(BridgeConfig)}

    for key, value in data.items():
        if key not in known:
            logger.warning("Ignoring unknown config key '%s' in %s", key, path)
            continue
        if key == "disabled_processors":
            if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
                raise ConfigError(str(path), "disabled_processors must be a list of names")
        elif value is not None and not isinstance(value, str):
            raise ConfigError(str(path), f"{key} must be a string")
        setattr(config, key, value)


def load_config(
    config_path: Optional[str] = None,
    env_file: Optional[str] = None,
) -> BridgeConfig:
    """Load configuration from file and environment.

    Args:
        config_path: Config file path. Defaults to $DEEPNOTE_BRIDGE_CONFIG.
        env_file: .env file to load. Defaults to ./.env when it exists.

    Returns:
        The resolved BridgeConfig.

    Raises:
        ConfigError: If a config file exists but is malformed.
    """
    dotenv_path = Path(env_file) if env_file else Path(DEFAULT_ENV_FILE)
    if dotenv_path.is_file():
        load_dotenv(dotenv_path, override=False)

    config = BridgeConfig()

    path_value = config_path or os.environ.get(CONFIG_ENV_VAR)
    if path_value:
        path = Path(path_value)
        if path.is_file():
            _apply_file_values(config, _read_config_file(path), path)
            logger.debug("Loaded config from %s", path)
        else:
            logger.debug("Config file does not exist: %s", path)

    for env_var, (name, parse) in _ENV_OVERRIDES.items():
        value = os.environ.get(env_var)
        if value:
            setattr(config, name, parse(value))

    return config
