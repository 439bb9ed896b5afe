"""
DUET - Python and R in one document

A Python package for running documents that interleave Python and R code
blocks, sharing top-level bindings between the two languages through
read-only bridge namespaces.
"""

__version__ = '0.1.0'

# Import sub-packages to make them available at the top level
from . import document
from . import values
from . import bridge
from . import runtimes
from . import r_integration
from . import rendering
from . import utils
from .exceptions import (
    DuetError,
    ConfigurationError,
    ConversionError,
    DocumentParseError,
    ExecutionError,
    NameNotFoundError,
)
from .orchestrator import Orchestrator, BlockResult
from .session import Session, Settings, load_settings

__all__ = [
    'document',
    'values',
    'bridge',
    'runtimes',
    'r_integration',
    'rendering',
    'utils',
    'DuetError',
    'ConfigurationError',
    'ConversionError',
    'DocumentParseError',
    'ExecutionError',
    'NameNotFoundError',
    'Orchestrator',
    'BlockResult',
    'Session',
    'Settings',
    'load_settings',
]
