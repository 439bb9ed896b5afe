"""
Utility functions for DUET.

This module provides general-purpose utilities for file handling and
configuration management.
"""

from .config import (
    load_config,
    save_config,
    merge_configs,
    validate_config,
    get_config_value,
    resolve_r_home,
)
from .file_handling import ensure_dir, safe_filename, default_output_path

__all__ = [
    'load_config',
    'save_config',
    'merge_configs',
    'validate_config',
    'get_config_value',
    'resolve_r_home',
    'ensure_dir',
    'safe_filename',
    'default_output_path',
]
