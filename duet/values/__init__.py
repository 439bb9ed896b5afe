"""
Interop value module for DUET.

This module provides the tagged value type that carries bindings across
runtimes and the registry of per-pair conversion rules.
"""

from .interop import ValueKind, InteropValue, classify_python, wrap_python
from .conversion import ConversionRegistry

__all__ = [
    'ValueKind',
    'InteropValue',
    'classify_python',
    'wrap_python',
    'ConversionRegistry',
]
