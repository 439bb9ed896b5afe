"""
R integration module for DUET.

This module provides the embedded R runtime and the rules for transferring
data between Python and R.
"""

from .r_bridge import (
    initialize_r,
    r_to_pandas,
    pandas_to_r,
    classify_r,
    r_to_python,
    python_to_r,
    opaque_to_r,
    register_r_conversions,
)
from .r_runtime import RRuntime

__all__ = [
    'initialize_r',
    'r_to_pandas',
    'pandas_to_r',
    'classify_r',
    'r_to_python',
    'python_to_r',
    'opaque_to_r',
    'register_r_conversions',
    'RRuntime',
]
