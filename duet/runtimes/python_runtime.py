"""
In-process Python runtime.

Blocks are compiled and executed in a private namespace dict that persists
across blocks. Standard output and error are captured, the value of a
trailing expression is echoed, and open matplotlib figures are collected.
"""

import ast
import contextlib
import io
import logging
import sys
import types
from collections import OrderedDict

from ..values import wrap_python
from .base import BlockOutput, Figure, Runtime


class PythonRuntime(Runtime):
    """
    Runtime executing Python blocks.

    Args:
        language (str): Language tag handled by this runtime.
        bridge_name (str): Name of the bridge object inside the namespace.
        figure_dpi (int): Resolution used when saving matplotlib figures.
    """

    family = 'python'

    def __init__(self, language='python', bridge_name='r', figure_dpi=100):
        super().__init__(language, bridge_name)
        self.figure_dpi = figure_dpi
        self.namespace = {'__name__': '__main__', '__builtins__': __builtins__}
        self._bridge = None
        self._block_count = 0

    def _start(self):
        # Figures are captured, never shown: force a non-interactive backend.
        import matplotlib
        matplotlib.use('Agg')

    def _close(self):
        self.namespace = {'__name__': '__main__', '__builtins__': __builtins__}
        self._bridge = None

    def install_bridge(self, namespace):
        logger = logging.getLogger(__name__)
        view = namespace.view()
        current = self.namespace.get(self.bridge_name)
        if current is not None and current is not view:
            logger.warning(
                f"'{self.bridge_name}' is reserved for the bridge namespace; "
                f"the value bound to it by a {self.language} block is replaced"
            )
        self._bridge = view
        self.namespace[self.bridge_name] = view

    def execute(self, code, label=None):
        self._block_count += 1
        filename = f"<{self.language} block {label or self._block_count}>"

        tree = ast.parse(code, filename=filename, mode='exec')
        trailing = None
        if tree.body and isinstance(tree.body[-1], ast.Expr):
            trailing = ast.Expression(tree.body.pop().value)

        buffer = io.StringIO()
        try:
            with contextlib.redirect_stdout(buffer), contextlib.redirect_stderr(buffer):
                exec(compile(tree, filename, 'exec'), self.namespace)
                if trailing is not None:
                    value = eval(compile(trailing, filename, 'eval'), self.namespace)
                    if value is not None:
                        print(repr(value))
            figures = self._collect_figures()
        finally:
            # Figures of a failed block must not leak into the next one.
            self._close_figures()

        return BlockOutput(buffer.getvalue(), figures)

    def _collect_figures(self):
        if 'matplotlib.pyplot' not in sys.modules:
            return []
        plt = sys.modules['matplotlib.pyplot']

        figures = []
        for number in plt.get_fignums():
            fig = plt.figure(number)
            out = io.BytesIO()
            fig.savefig(out, format='png', dpi=self.figure_dpi, bbox_inches='tight')
            figures.append(Figure('png', out.getvalue()))
        return figures

    def _close_figures(self):
        if 'matplotlib.pyplot' in sys.modules:
            sys.modules['matplotlib.pyplot'].close('all')

    def bindings(self):
        result = OrderedDict()
        for name, value in self.namespace.items():
            if name.startswith('_') or name == self.bridge_name:
                continue
            if isinstance(value, types.ModuleType):
                continue
            result[name] = value
        return result

    def wrap(self, obj):
        return wrap_python(obj)
