#!/usr/bin/env python3

import os
import json
import tomllib
from pathlib import Path

import logging
import sys

import toml
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
logger = logging.getLogger("gitdag")

CONFIG_FILENAMES = ['config.json', 'config.toml', 'config.yaml', 'config.yml']


def get_config_path():
    """Get the path to the configuration file.

    Checks in order:
    1. GITDAG_CONFIG environment variable
    2. ~/.gitdag/ directory
    """
    if 'GITDAG_CONFIG' in os.environ:
        path = Path(os.environ['GITDAG_CONFIG'])
        if path.exists():
            return path

    gitdag_dir = Path.home() / '.gitdag'
    for filename in CONFIG_FILENAMES:
        path = gitdag_dir / filename
        if path.exists() and path.stat().st_size > 10:  # Not empty/trivial
            return path

    # nothing found: where save_config writes by default
    return gitdag_dir / 'config.json'


def _read_config_file(config_path):
    """Read a JSON, TOML or YAML config file into a dict."""
    suffix = config_path.suffix.lower()
    if suffix == '.toml':
        with open(config_path, 'rb') as f:
            return tomllib.load(f)
    if suffix in ('.yaml', '.yml'):
        with open(config_path, 'r') as f:
            return yaml.safe_load(f) or {}
    with open(config_path, 'r') as f:
        return json.load(f)


def load_config(config_path=None):
    """Load configuration from file.

    Args:
        config_path: Explicit config file. Uses get_config_path() when None.
    """
    config_path = Path(config_path).expanduser() if config_path else get_config_path()

    # defaults < config file < GITDAG_* environment
    config = get_default_config()
    if config_path.exists():
        try:
            file_config = _read_config_file(config_path)
            if isinstance(file_config, dict):
                config = merge_configs(config, file_config)
            else:
                logger.error(f"Ignoring config {config_path}: top level is not a mapping")
        except (OSError, ValueError, yaml.YAMLError) as e:
            logger.error(f"Error loading config from {config_path}: {e}")

    return apply_env_overrides(config)


def save_config(config, config_path=None):
    """
    Write configuration as JSON, TOML or YAML, chosen by file suffix.

    Returns the path written.
    """
    config_path = Path(config_path).expanduser() if config_path else get_config_path()

    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)

        suffix = config_path.suffix.lower()
        if suffix in ('.yaml', '.yml'):
            with open(config_path, 'w') as f:
                yaml.safe_dump(config, f, default_flow_style=False)
        elif suffix == '.toml':
            # tomllib only reads; null values are left out
            with open(config_path, 'w') as f:
                toml.dump(config, f)
        else:
            with open(config_path, 'w') as f:
                json.dump(config, f, indent=2)

        logger.info(f"Configuration saved to {config_path}")
    except OSError as e:
        logger.error(f"Error saving config to {config_path}: {e}")
    return config_path


def get_default_config():
    """Built-in configuration; every key gitdag reads has a value here."""
    return {
        "general": {
            "max_workers": 0,    # 0 = half of the available CPUs, at least 1
            "link_workers": 0,   # 0 = thread pool default
            "deps_cache": "",    # empty = never read or write a dependency cache
        },
        "git": {
            "binary": "git",
        },
        "reports": {
            "top_blobs": 10,
        },
        "logging": {
            "level": "INFO",
        },
        "progress": {
            "enabled": None,     # None = show progress when stderr is a terminal
        },
    }


def merge_configs(base_config, override_config):
    """
    Overlay `override_config` onto `base_config`.

    Nested mappings are merged key by key; any other value replaces the
    base value. Neither argument is modified.
    """
    merged = dict(base_config)
    for key, value in override_config.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = merge_configs(current, value)
        else:
            merged[key] = value
    return merged


def _env_value(value):
    """Type an environment string: integers, then booleans, then text."""
    if value.isdigit():
        return int(value)
    lowered = value.lower()
    if lowered in ('true', 'yes', 'on'):
        return True
    if lowered in ('false', 'no', 'off'):
        return False
    return value


def _assign(section, parts, value):
    """
    Set the key named by `parts` inside `section`.

    Config keys may themselves contain underscores, so at each level the
    longest key whose words prefix `parts` is taken. Unknown keys are
    ignored.
    """
    candidates = [
        key for key in section
        if parts[:len(key.split('_'))] == key.split('_')
    ]
    if not candidates:
        return False

    key = max(candidates, key=lambda k: len(k.split('_')))
    rest = parts[len(key.split('_')):]
    if not rest:
        section[key] = value
        return True
    if isinstance(section[key], dict):
        return _assign(section[key], rest, value)
    return False


def apply_env_overrides(config):
    """
    Apply GITDAG_SECTION_KEY environment variables to the configuration.

    For example GITDAG_GENERAL_MAX_WORKERS=4 sets general.max_workers.
    GITDAG_CONFIG names the config file and is not an override.
    """
    prefix = "GITDAG_"
    for env_key, value in os.environ.items():
        if not env_key.startswith(prefix) or env_key == 'GITDAG_CONFIG':
            continue
        parts = env_key[len(prefix):].lower().split('_')
        if not _assign(config, parts, _env_value(value)):
            logger.debug(f"Ignoring {env_key}: no such config key")
    return config


def validate_config(config):
    """
    Check the values gitdag reads from the configuration.

    Raises:
        ConfigError: if a value has the wrong type or is out of range
    """
    general = config.get('general', {})
    for key in ('max_workers', 'link_workers'):
        value = general.get(key, 0)
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise ConfigError(f"general.{key} must be a non-negative integer, got {value!r}")

    top_blobs = config.get('reports', {}).get('top_blobs', 10)
    if isinstance(top_blobs, bool) or not isinstance(top_blobs, int) or top_blobs < 0:
        raise ConfigError(f"reports.top_blobs must be a non-negative integer, got {top_blobs!r}")

    binary = config.get('git', {}).get('binary', 'git')
    if not isinstance(binary, str) or not binary:
        raise ConfigError(f"git.binary must be a non-empty string, got {binary!r}")

    return config


def configure_logging(config):
    """Apply the configured log level to the gitdag logger."""
    level_name = str(config.get('logging', {}).get('level', 'INFO')).upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        logger.warning(f"Unknown log level {level_name!r}, using INFO")
        level = logging.INFO
    logger.setLevel(level)
    return level


def resolve_worker_count(configured, cpu_count=None):
    """
    Number of dependency workers to use.

    A positive configured value wins; otherwise half of the available CPUs,
    never less than one.
    """
    if isinstance(configured, int) and not isinstance(configured, bool) and configured > 0:
        return configured
    cpus = cpu_count if cpu_count is not None else (os.cpu_count() or 1)
    return max(1, cpus // 2)
