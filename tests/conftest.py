"""Shared fixtures for the DUET test suite."""

import textwrap

import pytest

from duet.document import parse_document
from duet.orchestrator import Orchestrator
from duet.runtimes import PythonRuntime
from duet.values import ConversionRegistry


@pytest.fixture
def python_runtime():
    runtime = PythonRuntime()
    runtime.start()
    yield runtime
    runtime.close()


@pytest.fixture
def orchestrator():
    """
    Two independent Python runtimes standing in for the two languages.

    Blocks tagged ``python`` see the other runtime as ``r``; blocks tagged
    ``pyb`` see the first runtime as ``other``.
    """
    primary = PythonRuntime(language='python', bridge_name='r')
    secondary = PythonRuntime(language='pyb', bridge_name='other')
    orch = Orchestrator(primary, secondary, conversions=ConversionRegistry())
    yield orch
    orch.close()


@pytest.fixture
def make_document():
    def _make(text):
        return parse_document(textwrap.dedent(text).lstrip('\n'), source='<test>')
    return _make
