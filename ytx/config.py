import json
import logging
import os
import threading
from pathlib import Path
from typing import Any, Dict, Optional, Union

from .defaults import CONFIG_ENV_VAR, CONFIG_FILE, DEFAULT_CONFIG
from .error_handler import InvalidInput

logger = logging.getLogger(__name__)

_config_lock = threading.Lock()

# accepted value types per key; None is allowed only where listed
_CONFIG_TYPES = {
    "locale": (str, type(None)),
    "format": (str,),
    "output_dir": (str,),
    "keep_audio": (bool,),
    "video": (bool,),
    "model": (str,),
    "device": (str,),
    "compute_type": (str,),
    "max_line_length": (int,),
}


def get_default_config() -> Dict[str, Any]:
    """Get default configuration values"""
    return DEFAULT_CONFIG.copy()


def config_path(path: Optional[Union[str, Path]] = None) -> Path:
    """Config file location: explicit path, then $YTX_CONFIG, then ~/.ytx/config.json"""
    if path:
        return Path(path).expanduser()
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path).expanduser()
    return CONFIG_FILE


def _validate(key: str, value: Any) -> None:
    expected = _CONFIG_TYPES[key]
    # bool is a subclass of int
    if isinstance(value, bool) and bool not in expected:
        valid = False
    else:
        valid = isinstance(value, expected)
    if not valid:
        names = " or ".join("null" if t is type(None) else t.__name__ for t in expected)
        raise InvalidInput(f"Config value '{key}' must be {names}, got {type(value).__name__}")
    if key == "max_line_length" and value < 1:
        raise InvalidInput("Config value 'max_line_length' must be positive")


def load_config(path: Optional[Union[str, Path]] = None) -> Dict[str, Any]:
    """Load configuration from file merged over the defaults.

    A missing file means defaults. Unknown keys are dropped with a warning;
    unreadable JSON or a wrongly typed value is an ``InvalidInput``.
    """
    config = get_default_config()
    file_path = config_path(path)

    if not file_path.exists():
        if path:
            raise InvalidInput(f"Config file not found: {file_path}")
        logger.debug("No config file at %s, using defaults", file_path)
        return config

    with _config_lock:
        try:
            with open(file_path, "r", encoding="utf-8") as f:
                loaded_config = json.load(f)
        except json.JSONDecodeError as e:
            raise InvalidInput(f"Failed to parse config file {file_path}: {e}") from e
        except OSError as e:
            raise InvalidInput(f"Could not read config file {file_path}: {e}") from e

    if not isinstance(loaded_config, dict):
        raise InvalidInput(f"Config file {file_path} must contain a JSON object")

    for key, value in loaded_config.items():
        if key not in DEFAULT_CONFIG:
            logger.warning("Ignoring unknown config key '%s' in %s", key, file_path)
            continue
        _validate(key, value)
        config[key] = value

    logger.debug("Loaded config from %s", file_path)
    return config


def merge_overrides(config: Dict[str, Any], **overrides) -> Dict[str, Any]:
    """Return ``config`` updated with every override that is not ``None``"""
    merged = dict(config)
    merged.update({k: v for k, v in overrides.items() if v is not None})
    return merged
