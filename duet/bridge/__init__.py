"""
Bridge module for DUET.

This module provides the namespaces through which each runtime sees the
other runtime's bindings, and the read-only views handed to block code.
"""

from .namespace import BridgeNamespace, BridgeView, SyncReport

__all__ = [
    'BridgeNamespace',
    'BridgeView',
    'SyncReport',
]
