"""
Configuration utilities for DUET.

This module provides functions for loading and saving configuration files
in YAML format and for resolving the R installation used by the embedded
R runtime.
"""

import yaml
import os
import logging
from pathlib import Path

from ..exceptions import ConfigurationError

R_HOME_ENV_VAR = 'DUET_R_HOME'

DEFAULT_CONFIG = {
    'r_home': None,
    'r_packages': [],
    'bridge_names': {
        'python': 'r',
        'r': 'py',
    },
    'figures': {
        'dpi': 100,
        'width': 7,
        'height': 5,
    },
    'log_level': 'INFO',
}


def get_default_config_path():
    """
    Get the default path for the configuration file.

    Returns:
        Path: Path to the default configuration file.
    """
    # Look for config in the standard locations
    possible_paths = [
        # Current directory
        Path("./configs/duet_config.yaml"),
        # User's home directory
        Path.home() / ".duet" / "config.yaml",
    ]

    for path in possible_paths:
        if path.exists():
            return path

    # Return the user config path even if it doesn't exist (for writing)
    return possible_paths[1]


def load_config(config_path=None):
    """
    Load a configuration file.

    Args:
        config_path (str, optional): Path to the configuration file.
            If None, searches in default locations.

    Returns:
        dict: Configuration dictionary.

    Raises:
        ConfigurationError: If an explicitly given file is missing or is not
            valid YAML.
    """
    logger = logging.getLogger(__name__)

    explicit = config_path is not None

    # If no path provided, use default
    if config_path is None:
        config_path = get_default_config_path()

    config_path = Path(config_path)

    if not config_path.exists():
        if explicit:
            raise ConfigurationError(f"Configuration file not found: {config_path}")
        logger.debug(f"No configuration file at {config_path}, using defaults")
        return {}

    try:
        with open(config_path, 'r') as file:
            config = yaml.safe_load(file)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Error parsing configuration {config_path}: {e}") from e

    if config is not None and not isinstance(config, dict):
        raise ConfigurationError(f"Configuration {config_path} must be a mapping")

    logger.info(f"Loaded configuration from {config_path}")
    return config or {}


def save_config(config, config_path=None):
    """
    Save a configuration to a file.

    Args:
        config (dict): Configuration dictionary.
        config_path (str, optional): Path to save the configuration file.
            If None, uses the default location.

    Returns:
        Path: Where the configuration was written.
    """
    logger = logging.getLogger(__name__)

    if config_path is None:
        config_path = get_default_config_path()

    config_path = Path(config_path)
    config_path.parent.mkdir(parents=True, exist_ok=True)

    with open(config_path, 'w') as file:
        yaml.safe_dump(config, file, default_flow_style=False)

    logger.info(f"Saved configuration to {config_path}")
    return config_path


def merge_configs(base_config, override_config):
    """
    Merge two configuration dictionaries, with override_config taking precedence.

    Args:
        base_config (dict): Base configuration dictionary.
        override_config (dict): Configuration dictionary with overrides.

    Returns:
        dict: Merged configuration dictionary.
    """
    def recursive_update(d, u):
        for k, v in u.items():
            if isinstance(v, dict) and k in d and isinstance(d[k], dict):
                d[k] = recursive_update(dict(d[k]), v)
            else:
                d[k] = v
        return d

    return recursive_update(dict(base_config), override_config)


def validate_config(config):
    """
    Validate a configuration dictionary.

    Args:
        config (dict): Configuration dictionary to validate.

    Returns:
        tuple: (is_valid, errors) where is_valid is a boolean and errors is a list of error messages.
    """
    logger = logging.getLogger(__name__)

    errors = []

    unknown = set(config) - set(DEFAULT_CONFIG)
    for key in sorted(unknown):
        errors.append(f"Unknown field: {key}")

    if config.get('r_home') is not None and not isinstance(config['r_home'], str):
        errors.append("'r_home' must be a string")

    packages = config.get('r_packages', [])
    if not isinstance(packages, list) or not all(isinstance(p, str) for p in packages):
        errors.append("'r_packages' must be a list of package names")

    names = config.get('bridge_names', {})
    if not isinstance(names, dict):
        errors.append("'bridge_names' must be a mapping")
    else:
        for language, name in names.items():
            if not isinstance(name, str) or not name.isidentifier():
                errors.append(f"bridge name for '{language}' must be an identifier")

    figures = config.get('figures', {})
    if not isinstance(figures, dict):
        errors.append("'figures' must be a mapping")
    else:
        for key in ('dpi', 'width', 'height'):
            value = figures.get(key)
            if value is not None and (isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0):
                errors.append(f"'figures.{key}' must be a positive number")

    level = config.get('log_level', 'INFO')
    if str(level).upper() not in ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'):
        errors.append(f"'log_level' must be a logging level name, got {level!r}")

    if errors:
        logger.warning(f"Configuration validation failed with {len(errors)} errors")
        for error in errors:
            logger.warning(f"  - {error}")
    else:
        logger.debug("Configuration validated successfully")

    return len(errors) == 0, errors


def get_config_value(config, key_path, default=None):
    """
    Get a value from a nested configuration dictionary.

    Args:
        config (dict): Configuration dictionary.
        key_path (str): Path to the key, using dots to separate levels (e.g., 'figures.dpi').
        default: Default value to return if the key is not found.

    Returns:
        The value at the specified key path, or the default if not found.
    """
    keys = key_path.split('.')
    result = config

    for key in keys:
        if isinstance(result, dict) and key in result:
            result = result[key]
        else:
            return default

    return result


def resolve_r_home(r_home):
    """
    Check that ``r_home`` points at a usable R installation.

    Args:
        r_home (str or None): Candidate R home directory.

    Returns:
        str: The absolute R home directory.

    Raises:
        ConfigurationError: If no R home is configured or it is not an R
            installation.
    """
    if not r_home:
        raise ConfigurationError(
            f"No R installation configured: set {R_HOME_ENV_VAR} (or R_HOME) "
            "to the R home directory, e.g. the output of `R RHOME`"
        )

    path = Path(r_home).expanduser()
    if not path.is_dir():
        raise ConfigurationError(f"R home is not a directory: {path}")

    candidates = [path / 'bin' / 'R', path / 'bin' / 'R.exe', path / 'bin' / 'x64' / 'R.exe']
    if not any(candidate.exists() for candidate in candidates):
        raise ConfigurationError(f"No R executable found under {path / 'bin'}")

    return str(path.resolve())
