#!/usr/bin/env python3

import os
import json
import tomllib
from pathlib import Path

import logging
import sys

import yaml

from .exit_codes import ConfigError

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s: %(message)s",
    handlers=[
        logging.StreamHandler(sys.stderr) # Default to stderr
    ]
)
logger = logging.getLogger("repodriver")

CONFIG_FILENAMES = ['config.json', 'config.toml', 'config.yaml', 'config.yml']
ENV_PREFIX = 'REPODRIVER_'
CONFIG_ENV_VAR = 'REPODRIVER_CONFIG'


def get_config_path():
    """Get the path to the configuration file.

    Checks in order:
    1. REPODRIVER_CONFIG environment variable
    2. ~/.repodriver/ directory
    """
    if CONFIG_ENV_VAR in os.environ:
        path = Path(os.environ[CONFIG_ENV_VAR])
        if path.exists():
            return path

    repodriver_dir = Path.home() / '.repodriver'
    for filename in CONFIG_FILENAMES:
        path = repodriver_dir / filename
        if path.exists():
            return path

    # If no file exists, return default path
    return repodriver_dir / 'config.json'


def read_config_file(config_path: Path) -> dict:
    """Read a JSON, TOML or YAML configuration file."""
    suffix = config_path.suffix.lower()
    try:
        if suffix == '.toml':
            with open(config_path, 'rb') as f:
                data = tomllib.load(f)
        elif suffix in ('.yaml', '.yml'):
            with open(config_path, 'r') as f:
                data = yaml.safe_load(f)
        else:
            with open(config_path, 'r') as f:
                data = json.load(f)
    except (OSError, ValueError, yaml.YAMLError) as e:
        raise ConfigError(f"Error loading config from {config_path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {config_path} must contain a mapping")
    return data


def load_config():
    """Load configuration from file."""
    config_path = get_config_path()

    # Start with default config
    config = get_default_config()

    if config_path.exists():
        config = merge_configs(config, read_config_file(config_path))

    config = apply_env_overrides(config)

    # Fall back to the conventional token variable
    if not config['github'].get('token') and os.environ.get('GITHUB_TOKEN'):
        config['github']['token'] = os.environ['GITHUB_TOKEN']

    return config


def get_default_config():
    """Get default configuration."""
    return {
        "home": str(Path.home() / '.repodriver'),
        "manifest": {
            "filename": "composer.json"
        },
        "github": {
            "token": "",
            "api_url": "https://api.github.com",
            "raw_url": "https://raw.githubusercontent.com"
        },
        "http": {
            "timeout_seconds": 30,
            "user_agent": "repodriver"
        },
        "git": {
            "timeout_seconds": 300
        },
        "credentials": {},
        "logging": {
            "level": "INFO",
            "format": "%(levelname)s: %(message)s"
        }
    }


def get_home(config) -> Path:
    """Directory holding caches and mirrors."""
    return Path(os.path.expanduser(config.get('home') or '~/.repodriver'))


def configure_logging(config, verbose: bool = False) -> None:
    """Apply the logging section of the configuration."""
    log_config = config.get('logging', {})
    level = 'DEBUG' if verbose else str(log_config.get('level', 'INFO')).upper()
    logger.setLevel(getattr(logging, level, logging.INFO))
    fmt = log_config.get('format')
    if fmt:
        for handler in logging.getLogger().handlers:
            handler.setFormatter(logging.Formatter(fmt))


def merge_configs(base_config, override_config):
    """Recursively merge override_config into a copy of base_config."""
    merged = dict(base_config)
    for key, value in override_config.items():
        if isinstance(merged.get(key), dict) and isinstance(value, dict):
            value = merge_configs(merged[key], value)
        merged[key] = value
    return merged


def _typed_env_value(value):
    if value.lower() in ('true', 'false'):
        return value.lower() == 'true'
    if value.isdigit():
        return int(value)
    return value


def apply_env_overrides(config):
    """
    Apply REPODRIVER_<SECTION>_<KEY> environment overrides.

    Top-level keys are matched whole (REPODRIVER_HOME). Otherwise the first
    word names the section and the rest is the key inside it, so
    REPODRIVER_HTTP_TIMEOUT_SECONDS sets http.timeout_seconds. Unknown
    sections are ignored.
    """
    for env_key, value in os.environ.items():
        if not env_key.startswith(ENV_PREFIX) or env_key == CONFIG_ENV_VAR:
            continue

        name = env_key[len(ENV_PREFIX):].lower()
        if name in config and not isinstance(config[name], dict):
            config[name] = _typed_env_value(value)
            continue

        section, _, key = name.partition('_')
        if key and isinstance(config.get(section), dict) and section != 'credentials':
            config[section][key] = _typed_env_value(value)

    return config
