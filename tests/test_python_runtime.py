"""Tests for the in-process Python runtime."""

import pytest

from duet.bridge import BridgeNamespace
from duet.runtimes import PythonRuntime
from duet.values import ConversionRegistry, wrap_python


def test_bindings_persist_across_blocks(python_runtime):
    python_runtime.execute('x = 2')
    python_runtime.execute('y = x * 21')
    assert python_runtime.bindings()['y'] == 42


def test_stdout_is_captured(python_runtime):
    output = python_runtime.execute('print("hello")\nprint("world")')
    assert output.text == 'hello\nworld\n'
    assert output.figures == []


def test_trailing_expression_is_echoed(python_runtime):
    output = python_runtime.execute('x = [1, 2]\nx')
    assert output.text == '[1, 2]\n'


def test_trailing_none_is_not_echoed(python_runtime):
    output = python_runtime.execute('x = None\nx')
    assert output.text == ''
    assert output.empty


def test_errors_propagate(python_runtime):
    with pytest.raises(ZeroDivisionError):
        python_runtime.execute('1 / 0')


def test_syntax_errors_propagate(python_runtime):
    with pytest.raises(SyntaxError):
        python_runtime.execute('def broken(:\n    pass')


def test_bindings_skip_private_modules_and_bridge(python_runtime):
    bridge = BridgeNamespace('r', 'python', ConversionRegistry())
    python_runtime.install_bridge(bridge)
    python_runtime.execute('import os\n_private = 1\npublic = 2')
    names = list(python_runtime.bindings())
    assert names == ['public']
    assert python_runtime.namespace['r'] is bridge.view()


def test_bindings_keep_definition_order(python_runtime):
    python_runtime.execute('b = 1\na = 2\nc = 3')
    assert list(python_runtime.bindings()) == ['b', 'a', 'c']


def test_bridge_is_visible_to_code(python_runtime):
    bridge = BridgeNamespace('r', 'python', ConversionRegistry())
    bridge.publish({'answer': 42}, wrap_python)
    python_runtime.install_bridge(bridge)
    output = python_runtime.execute('print(r.answer + 1)')
    assert output.text == '43\n'


def test_shadowed_bridge_is_restored(python_runtime, caplog):
    bridge = BridgeNamespace('r', 'python', ConversionRegistry())
    python_runtime.install_bridge(bridge)
    python_runtime.execute('r = "mine"')
    assert 'r' not in python_runtime.bindings()

    python_runtime.install_bridge(bridge)
    assert python_runtime.namespace['r'] is bridge.view()
    assert "reserved" in caplog.text


def test_matplotlib_figures_are_captured(python_runtime):
    pytest.importorskip('matplotlib')
    output = python_runtime.execute(
        'import matplotlib.pyplot as plt\n'
        'fig, ax = plt.subplots()\n'
        'ax.plot([1, 2, 3])\n'
    )
    assert len(output.figures) == 1
    assert output.figures[0].format == 'png'
    assert output.figures[0].data.startswith(b'\x89PNG')

    # figures are closed after capture
    assert python_runtime.execute('x = 1').figures == []


def test_figures_of_a_failed_block_are_discarded(python_runtime):
    pytest.importorskip('matplotlib')
    with pytest.raises(RuntimeError):
        python_runtime.execute(
            'import matplotlib.pyplot as plt\n'
            'plt.plot([1, 2, 3])\n'
            'raise RuntimeError("after plotting")\n'
        )

    import matplotlib.pyplot as plt
    assert plt.get_fignums() == []
    assert python_runtime.execute('y = 2').figures == []


def test_sys_exit_propagates_without_leaving_figures(python_runtime):
    pytest.importorskip('matplotlib')
    with pytest.raises(SystemExit):
        python_runtime.execute(
            'import sys\n'
            'import matplotlib.pyplot as plt\n'
            'plt.figure()\n'
            'sys.exit(3)\n'
        )

    import matplotlib.pyplot as plt
    assert plt.get_fignums() == []


def test_bridge_store_is_not_exposed(python_runtime):
    bridge = BridgeNamespace('r', 'python', ConversionRegistry())
    bridge.publish({'names': ['alpha', 'beta']}, wrap_python)
    python_runtime.install_bridge(bridge)

    python_runtime.execute('got = r.names\nreachable = hasattr(r, "publish")')

    bindings = python_runtime.bindings()
    assert bindings['got'] == ['alpha', 'beta']
    assert bindings['reachable'] is False


def test_close_resets_namespace():
    runtime = PythonRuntime()
    with runtime:
        runtime.execute('x = 1')
        assert runtime.started
    assert not runtime.started
    assert runtime.bindings() == {}
