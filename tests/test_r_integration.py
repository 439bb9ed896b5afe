"""
Tests for installing the bridge into the R runtime.

The embedded R is replaced by mocks so these run without rpy2 or R.
"""

from collections import OrderedDict
from unittest.mock import MagicMock

import pytest

from duet.bridge import BridgeNamespace
from duet.r_integration import RRuntime
from duet.values import ConversionRegistry, wrap_python


def _limited_rule(value):
    # R integers and doubles cannot hold arbitrarily large Python ints.
    if isinstance(value.payload, int) and abs(value.payload) > 2 ** 1023:
        raise OverflowError('int too large to convert to float')
    return ('converted', value.payload)


@pytest.fixture
def runtime(monkeypatch):
    runtime = RRuntime()
    runtime._ro = MagicMock()
    runtime._ro.vectors.ListVector = list
    runtime.installed = MagicMock(return_value=[False])
    runtime._helpers = MagicMock()
    runtime._helpers.rx2.return_value = runtime.installed
    monkeypatch.setattr('duet.r_integration.r_runtime.opaque_to_r', lambda obj: ('opaque', repr(obj)))
    return runtime


@pytest.fixture
def bridge():
    registry = ConversionRegistry()
    registry.register('python', 'r', _limited_rule)
    return BridgeNamespace('python', 'r', registry)


def test_unconvertible_binding_falls_back_to_opaque(runtime, bridge, caplog):
    huge = 2 ** 1100
    bridge.publish(OrderedDict([('huge', huge), ('small', 3)]), wrap_python)

    runtime.install_bridge(bridge)

    runtime._helpers.rx2.assert_called_with('install_bridge')
    name, values = runtime.installed.call_args[0]
    assert name == 'py'
    assert values == [('huge', ('opaque', repr(huge))), ('small', ('converted', 3))]
    assert "'huge'" in caplog.text


def test_all_bindings_convert(runtime, bridge, caplog):
    bridge.publish(OrderedDict([('a', 1), ('b', 'text')]), wrap_python)

    runtime.install_bridge(bridge)

    _, values = runtime.installed.call_args[0]
    assert values == [('a', ('converted', 1)), ('b', ('converted', 'text'))]
    assert 'opaque' not in caplog.text


def test_shadowed_bridge_name_is_reported(runtime, bridge, caplog):
    runtime.installed.return_value = [True]
    runtime.install_bridge(bridge)
    assert 'reserved for the bridge namespace' in caplog.text
