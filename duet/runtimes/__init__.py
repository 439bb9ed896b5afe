"""
Runtime module for DUET.

This module provides the runtime base class and the in-process Python
runtime. The embedded R runtime lives in ``duet.r_integration``.
"""

from .base import Runtime, BlockOutput, Figure
from .python_runtime import PythonRuntime

__all__ = [
    'Runtime',
    'BlockOutput',
    'Figure',
    'PythonRuntime',
]
