import os
from pathlib import Path

import tomli as toml

from cinline import logging as cinline_logging

logger = cinline_logging.get_logger(__name__)

_DEFAULT_CONFIG_NAME = "cinline.default.toml"


def _merge_configs(config, default_config):
    """Overlay ``config`` on ``default_config``, one table at a time."""
    merged = dict(default_config)
    for key, value in config.items():
        default_value = default_config.get(key)
        if isinstance(value, dict) and isinstance(default_value, dict):
            merged[key] = _merge_configs(value, default_value)
        elif key in default_config and isinstance(value, dict) != isinstance(default_value, dict):
            raise TypeError(f"Config key '{key}' must be a {'table' if isinstance(default_value, dict) else 'value'}")
        else:
            merged[key] = value
    return merged


def load_default_config():
    """Load the bundled default configuration from packaged resources."""
    candidate = Path(__file__).resolve().parent / "_resources" / _DEFAULT_CONFIG_NAME
    if not candidate.is_file():
        raise FileNotFoundError(f"Could not load _resources/{_DEFAULT_CONFIG_NAME}")
    with open(candidate, "rb") as f:
        return toml.load(f)


def _user_config_path(config_file):
    # an explicit or environment path must exist; the fallbacks are optional
    for source, value in (("--config", config_file), ("CINLINE_CONFIG", os.environ.get("CINLINE_CONFIG"))):
        if value:
            path = Path(value).expanduser()
            if not path.is_file():
                raise FileNotFoundError(f"{source}={value} does not point to a readable file")
            return path
    for path in (Path.cwd() / "cinline.toml", Path(__file__).resolve().parent.parent / "cinline.toml"):
        if path.is_file():
            return path
    return None


def try_load_config(config_file=None):
    """Load user configuration merged with defaults.

    The user file is the first of: ``config_file``, ``$CINLINE_CONFIG``,
    ``./cinline.toml`` and ``cinline.toml`` in a source checkout.
    """
    default_config = load_default_config()
    path = _user_config_path(config_file)
    if path is None:
        logger.info("No user config found; falling back to default configuration only")
        return default_config
    logger.debug("Loading config from %s", path)
    with open(path, "rb") as f:
        return _merge_configs(toml.load(f), default_config)


def read_file(path: str) -> str:
    if not os.path.exists(path):
        raise FileNotFoundError(f"Could not find file {path}")
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


def save_code(path, code):
    path_dir = os.path.dirname(path)
    if path_dir:
        os.makedirs(path_dir, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        f.write(code)


def try_backup_file(file_path):
    if not os.path.exists(file_path):
        return None
    backup_path = file_path + ".bak"
    number = 1
    while os.path.exists(backup_path):
        backup_path = file_path + f".bak.{number}"
        number += 1

    os.rename(file_path, backup_path)
    return backup_path
