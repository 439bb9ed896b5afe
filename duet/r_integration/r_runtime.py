"""
Embedded R runtime.

R runs inside the Python process through rpy2. Blocks are evaluated in the
R global environment one top-level expression at a time, printing visible
values the way the R console does. Console output is captured through the
rpy2 console callbacks and plots are recorded with a PNG device per block.
"""

import contextlib
import logging
import re
import shutil
import tempfile
from collections import OrderedDict
from pathlib import Path

from ..exceptions import ConversionError, NameNotFoundError
from ..runtimes.base import BlockOutput, Figure, Runtime
from ..utils.config import resolve_r_home
from .r_bridge import import_rpy2, initialize_r, opaque_to_r, register_r_conversions, wrap_r

_HELPERS_SOURCE = r'''
local({
  lookup <- function(x, name) {
    if (!exists(name, envir = x, inherits = FALSE)) {
      cond <- structure(
        class = c("duet_name_not_found", "error", "condition"),
        list(message = paste0("duet: name not found: ", name), call = NULL)
      )
      stop(cond)
    }
    get(name, envir = x, inherits = FALSE)
  }
  registerS3method("$", "duet_bridge", function(x, name) lookup(x, name), envir = baseenv())
  registerS3method("[[", "duet_bridge", function(x, i, ...) lookup(x, i), envir = baseenv())
  registerS3method("print", "duet_bridge", function(x, ...) {
    cat("<bridge namespace:", paste(sort(ls(x)), collapse = ", "), ">\n")
    invisible(x)
  }, envir = baseenv())

  list(
    eval_block = function(code) {
      exprs <- parse(text = code, keep.source = FALSE)
      for (e in exprs) {
        res <- withVisible(eval(e, envir = globalenv()))
        if (res$visible) print(res$value)
      }
      invisible(NULL)
    },
    install_bridge = function(name, values) {
      shadowed <- exists(name, envir = globalenv(), inherits = FALSE) &&
        !inherits(get(name, envir = globalenv()), "duet_bridge")
      env <- new.env(parent = emptyenv())
      for (n in names(values)) assign(n, values[[n]], envir = env)
      lockEnvironment(env, bindings = TRUE)
      class(env) <- "duet_bridge"
      assign(name, env, envir = globalenv())
      shadowed
    },
    user_names = function(reserved) setdiff(ls(globalenv()), reserved),
    open_device = function(pattern, width, height, dpi) {
      grDevices::png(filename = pattern, width = width, height = height, units = "in", res = dpi)
      grDevices::dev.cur()
    },
    close_device = function(device) {
      if (device %in% grDevices::dev.list()) grDevices::dev.off(device)
      invisible(NULL)
    }
  )
})
'''

_NAME_NOT_FOUND_RE = re.compile(r"duet: name not found: (\S+)")


class RRuntime(Runtime):
    """
    Runtime executing R blocks in an embedded R interpreter.

    Args:
        language (str): Language tag handled by this runtime.
        bridge_name (str): Name of the bridge environment in R's global env.
        r_home (str, optional): R installation to use. Checked at start.
        packages (list, optional): R packages to load at start.
        figure_dpi (int): Resolution of captured plots.
        figure_size (tuple): (width, height) of captured plots in inches.
    """

    family = 'r'

    def __init__(self, language='r', bridge_name='py', r_home=None, packages=None,
                 figure_dpi=100, figure_size=(7, 5)):
        super().__init__(language, bridge_name)
        self.r_home = r_home
        self.packages = list(packages or [])
        self.figure_dpi = figure_dpi
        self.figure_size = figure_size
        self._ro = None
        self._helpers = None
        self._bridge = None
        self._figure_dir = None
        self._block_count = 0

    def _start(self):
        r_home = resolve_r_home(self.r_home)
        self._ro = import_rpy2(r_home)
        initialize_r(self.packages)
        self._helpers = self._ro.r(_HELPERS_SOURCE)
        self._figure_dir = Path(tempfile.mkdtemp(prefix='duet_r_figures_'))

    def _close(self):
        if self._figure_dir is not None:
            shutil.rmtree(self._figure_dir, ignore_errors=True)
        self._figure_dir = None
        self._helpers = None
        self._bridge = None

    def _helper(self, name):
        return self._helpers.rx2(name)

    def register_conversions(self, registry):
        register_r_conversions(registry)

    def install_bridge(self, namespace):
        logger = logging.getLogger(__name__)
        items = []
        for name in namespace.names():
            try:
                value = namespace.lookup(name)
            except ConversionError as e:
                logger.warning(f"Passing '{name}' to {self.language} as an opaque value: {e}")
                value = opaque_to_r(namespace.raw(name).payload)
            items.append((name, value))
        values = self._ro.vectors.ListVector(items)
        shadowed = self._helper('install_bridge')(self.bridge_name, values)[0]
        if shadowed:
            logger.warning(
                f"'{self.bridge_name}' is reserved for the bridge namespace; "
                f"the value bound to it by an {self.language} block is replaced"
            )
        self._bridge = namespace

    @contextlib.contextmanager
    def _capture_console(self):
        import rpy2.rinterface_lib.callbacks as callbacks

        chunks = []
        saved = (callbacks.consolewrite_print, callbacks.consolewrite_warnerror)
        callbacks.consolewrite_print = chunks.append
        callbacks.consolewrite_warnerror = chunks.append
        try:
            yield chunks
        finally:
            callbacks.consolewrite_print, callbacks.consolewrite_warnerror = saved

    def execute(self, code, label=None):
        from rpy2.rinterface_lib.embedded import RRuntimeError

        self._block_count += 1
        prefix = f"block{self._block_count:03d}"
        pattern = str(self._figure_dir / f"{prefix}-%03d.png")
        width, height = self.figure_size

        device = self._helper('open_device')(pattern, width, height, self.figure_dpi)[0]
        with self._capture_console() as chunks:
            try:
                self._helper('eval_block')(code)
            except RRuntimeError as e:
                match = _NAME_NOT_FOUND_RE.search(str(e))
                if match:
                    source = self._bridge.source_language if self._bridge is not None else None
                    raise NameNotFoundError(match.group(1), source) from None
                raise
            finally:
                self._helper('close_device')(device)

        return BlockOutput(''.join(chunks), self._collect_figures(prefix))

    def _collect_figures(self, prefix):
        figures = []
        for path in sorted(self._figure_dir.glob(f"{prefix}-*.png")):
            figures.append(Figure('png', path.read_bytes()))
            path.unlink()
        return figures

    def bindings(self):
        ro = self._ro
        result = OrderedDict()
        for name in self._helper('user_names')(self.bridge_name):
            result[str(name)] = ro.globalenv[str(name)]
        return result

    def wrap(self, obj):
        return wrap_r(obj)

    def same_value(self, old, new):
        # rpy2 hands out a fresh wrapper per read; compare the R objects.
        return old.rid == new.rid
