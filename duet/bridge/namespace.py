"""
Bridge namespaces.

A BridgeNamespace holds the snapshot of one runtime's top-level bindings
that the other runtime reads. Only the orchestrator publishes into it. Block
code never sees the namespace itself: runtimes hand it a BridgeView, which
resolves every non-dunder attribute as a binding name and has no write API.
"""

import logging
import operator
from collections import OrderedDict, namedtuple

from ..exceptions import NameNotFoundError
from ..values import ConversionRegistry


class SyncReport(namedtuple('SyncReport', ['added', 'updated', 'removed'])):
    """Names added, updated and removed by one synchronization."""

    __slots__ = ()

    @property
    def changed(self):
        return bool(self.added or self.updated or self.removed)


class BridgeNamespace:
    """
    Ordered mapping of names to values published by a source runtime.

    Args:
        source_language (str): Language tag of the runtime that owns the bindings.
        target_family (str): Value family of the runtime reading the bridge.
        conversions (ConversionRegistry, optional): Conversion rules.
            Defaults to an empty registry (same-family identity only).
    """

    def __init__(self, source_language, target_family, conversions=None):
        self.source_language = source_language
        self.target_family = target_family
        self.conversions = conversions if conversions is not None else ConversionRegistry()
        self._entries = OrderedDict()
        self._view = BridgeView(self)

    def view(self):
        """Return the read-only object block code uses to reach the bindings."""
        return self._view

    def publish(self, bindings, wrap, same=None):
        """
        Replace the namespace contents with a snapshot of the source bindings.

        Args:
            bindings (Mapping): Name to native value, in the source runtime's order.
            wrap (callable): Turns a native value into an InteropValue.
            same (callable, optional): ``same(old, new)`` decides whether two
                native values are the same object. Defaults to identity.

        Returns:
            SyncReport: What changed relative to the previous snapshot.
        """
        logger = logging.getLogger(__name__)

        if same is None:
            same = operator.is_

        previous = self._entries
        entries = OrderedDict()
        added = []
        updated = []

        for name, obj in bindings.items():
            old = previous.get(name)
            if old is not None and same(old.payload, obj):
                entries[name] = old
                continue
            entries[name] = wrap(obj)
            if old is None:
                added.append(name)
            else:
                updated.append(name)

        removed = [name for name in previous if name not in entries]
        self._entries = entries

        report = SyncReport(tuple(added), tuple(updated), tuple(removed))
        if report.changed:
            logger.debug(
                f"Bridge from {self.source_language}: added={list(report.added)} "
                f"updated={list(report.updated)} removed={list(report.removed)}"
            )
        return report

    def lookup(self, name):
        """
        Return the value bound to ``name``, converted for the reading runtime.

        Raises:
            NameNotFoundError: If the source runtime never published ``name``.
        """
        return self.conversions.convert(self.raw(name), self.target_family)

    def raw(self, name):
        """Return the InteropValue stored under ``name`` without converting it."""
        try:
            return self._entries[name]
        except KeyError:
            raise NameNotFoundError(name, self.source_language) from None

    def kind_of(self, name):
        return self.raw(name).kind

    def names(self):
        return list(self._entries)

    def __getitem__(self, name):
        return self.lookup(name)

    def __contains__(self, name):
        return name in self._entries

    def __iter__(self):
        return iter(list(self._entries))

    def __len__(self):
        return len(self._entries)

    def __repr__(self):
        return f"<BridgeNamespace from {self.source_language}: {', '.join(self._entries) or 'empty'}>"


def _namespace_of(view):
    return object.__getattribute__(view, '_namespace')


class BridgeView:
    """
    Read-only view of a BridgeNamespace for block code.

    ``view.x`` and ``view["x"]`` both look ``x`` up in the namespace, so a
    binding may be called anything, ``names`` or ``items`` included. Only
    dunder attributes resolve on the view itself.
    """

    __slots__ = ('_namespace',)

    def __init__(self, namespace):
        object.__setattr__(self, '_namespace', namespace)

    def __getattribute__(self, name):
        if name.startswith('__') and name.endswith('__'):
            return object.__getattribute__(self, name)
        if name.startswith('_'):
            raise AttributeError(name)
        return _namespace_of(self).lookup(name)

    def __getitem__(self, name):
        return _namespace_of(self).lookup(name)

    def __contains__(self, name):
        return name in _namespace_of(self)

    def __iter__(self):
        return iter(_namespace_of(self))

    def __len__(self):
        return len(_namespace_of(self))

    def __dir__(self):
        return _namespace_of(self).names()

    def __setattr__(self, name, value):
        raise TypeError(f"bridge namespace from {_namespace_of(self).source_language} is read-only")

    def __delattr__(self, name):
        raise TypeError(f"bridge namespace from {_namespace_of(self).source_language} is read-only")

    def __setitem__(self, name, value):
        raise TypeError(f"bridge namespace from {_namespace_of(self).source_language} is read-only")

    def __delitem__(self, name):
        raise TypeError(f"bridge namespace from {_namespace_of(self).source_language} is read-only")

    def __repr__(self):
        namespace = _namespace_of(self)
        return f"<bridge from {namespace.source_language}: {', '.join(namespace.names()) or 'empty'}>"
