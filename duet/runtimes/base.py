"""
Runtime base class.

A runtime owns the top-level bindings of one language for the lifetime of a
session. The orchestrator is its only caller.
"""

import logging
from collections import namedtuple


Figure = namedtuple('Figure', ['format', 'data'])


class BlockOutput(namedtuple('BlockOutput', ['text', 'figures'])):
    """Console text and figures captured while a block ran."""

    __slots__ = ()

    @property
    def empty(self):
        return not self.text and not self.figures


class Runtime:
    """
    Base class for language runtimes.

    Subclasses set ``family`` and implement ``_start``, ``execute``,
    ``bindings``, ``wrap`` and ``install_bridge``.

    Args:
        language (str): Language tag of the blocks this runtime executes.
        bridge_name (str): Name under which the other runtime's bindings
            are visible inside this runtime.
    """

    family = None

    def __init__(self, language, bridge_name):
        self.language = language.lower()
        self.bridge_name = bridge_name
        self._started = False

    @property
    def started(self):
        return self._started

    def start(self):
        """Start the runtime. Calling it again is a no-op."""
        if self._started:
            return
        logging.getLogger(__name__).info(f"Starting {self.language} runtime")
        self._start()
        self._started = True

    def close(self):
        if not self._started:
            return
        self._close()
        self._started = False
        logging.getLogger(__name__).info(f"Closed {self.language} runtime")

    def _start(self):
        pass

    def _close(self):
        pass

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    def install_bridge(self, namespace):
        """Make ``namespace`` visible to subsequent blocks under ``bridge_name``."""
        raise NotImplementedError

    def execute(self, code, label=None):
        """
        Execute one block of code.

        Args:
            code (str): Source code of the block.
            label (str, optional): Name used in tracebacks and figure names.

        Returns:
            BlockOutput: Captured console text and figures.
        """
        raise NotImplementedError

    def bindings(self):
        """Return the user's top-level bindings as an ordered mapping."""
        raise NotImplementedError

    def wrap(self, obj):
        """Wrap a native value as an InteropValue."""
        raise NotImplementedError

    def same_value(self, old, new):
        """True if two values read from ``bindings()`` are the same object."""
        return old is new

    def register_conversions(self, registry):
        """Add the conversion rules this runtime's value family needs."""

    def __repr__(self):
        state = 'started' if self._started else 'stopped'
        return f"<{type(self).__name__} {self.language} ({state})>"
