"""
R integration bridge for DUET.

This module provides functions for starting the embedded R interpreter and
for transferring data between Python and R. rpy2 is imported lazily: the
embedded R starts on first import, and R_HOME must be set before that.
"""

import logging
import numbers
import os
from collections import OrderedDict
from functools import lru_cache

import numpy as np
import pandas as pd

from ..exceptions import ConfigurationError
from ..values import ValueKind, InteropValue, classify_python

# Kind of an R object, computed on the R side.
R_KIND_SOURCE = r'''
function(x) {
  if (is.null(x)) return("null")
  if (is.data.frame(x)) return("tabular")
  if (is.factor(x)) {
    if (length(x) == 1L && is.null(names(x))) return("text")
    return("sequence")
  }
  if (is.atomic(x) && is.null(dim(x))) {
    kind <- if (is.logical(x)) "logical"
            else if (is.numeric(x)) "numeric"
            else if (is.character(x)) "text"
            else NA_character_
    if (is.na(kind)) return("opaque")
    if (!is.null(names(x))) return("mapping")
    if (length(x) == 1L) return(kind)
    return("sequence")
  }
  if (is.list(x) && is.null(attr(x, "class"))) {
    if (!is.null(names(x))) return("mapping")
    return("sequence")
  }
  "opaque"
}
'''

_INT32_MAX = 2 ** 31 - 1


def import_rpy2(r_home=None):
    """
    Import rpy2, starting the embedded R interpreter.

    Args:
        r_home (str, optional): R home directory, exported as R_HOME first.

    Returns:
        module: ``rpy2.robjects``.

    Raises:
        ConfigurationError: If rpy2 is not installed or R cannot start.
    """
    logger = logging.getLogger(__name__)

    if r_home:
        os.environ['R_HOME'] = r_home

    try:
        import rpy2.robjects as ro
    except ImportError as e:
        raise ConfigurationError(
            "rpy2 is not installed. Install with 'pip install duet[r_integration]'"
        ) from e
    except Exception as e:
        # rpy2 raises plain RuntimeError/OSError when libR cannot be loaded
        raise ConfigurationError(f"Cannot start embedded R from R_HOME={r_home}: {e}") from e

    logger.debug(f"Embedded R started from {os.environ.get('R_HOME')}")
    return ro


def initialize_r(packages=None):
    """
    Initialize the R environment with necessary packages.

    Args:
        packages (list, optional): List of R packages to load.

    Raises:
        ConfigurationError: If a package cannot be installed or loaded.
    """
    logger = logging.getLogger(__name__)

    import rpy2.robjects.packages as rpackages

    if not packages:
        return

    utils = rpackages.importr('utils')
    for package in packages:
        if not rpackages.isinstalled(package):
            logger.info(f"Installing R package: {package}")
            utils.install_packages(package, repos='https://cloud.r-project.org')

        try:
            rpackages.importr(package)
        except Exception as e:
            raise ConfigurationError(f"Error loading R package {package}: {e}") from e
        logger.info(f"Loaded R package: {package}")

    logger.info("R environment initialized successfully")


def r_to_pandas(r_object):
    """
    Convert an R data.frame to a pandas DataFrame.

    Args:
        r_object: An R data.frame.

    Returns:
        pandas.DataFrame: Pandas DataFrame.
    """
    import rpy2.robjects as ro
    from rpy2.robjects import pandas2ri
    from rpy2.robjects.conversion import localconverter

    with localconverter(ro.default_converter + pandas2ri.converter):
        return ro.conversion.rpy2py(r_object)


def pandas_to_r(pd_df):
    """
    Convert a pandas DataFrame to an R data.frame.

    Args:
        pd_df (pandas.DataFrame): Pandas DataFrame.

    Returns:
        rpy2.robjects.DataFrame: R data.frame.
    """
    import rpy2.robjects as ro
    from rpy2.robjects import pandas2ri
    from rpy2.robjects.conversion import localconverter

    with localconverter(ro.default_converter + pandas2ri.converter):
        return ro.conversion.py2rpy(pd_df)


def classify_r(r_object):
    """
    Classify an R object into a ValueKind.

    Args:
        r_object: An rpy2 object.

    Returns:
        ValueKind: The variant this object travels as.
    """
    return ValueKind(_kind_function()(r_object)[0])


@lru_cache(maxsize=None)
def _kind_function():
    import rpy2.robjects as ro

    return ro.r(R_KIND_SOURCE)


def wrap_r(r_object):
    """Wrap an R object as an InteropValue of the 'r' family."""
    return InteropValue(classify_r(r_object), 'r', r_object)


def _atomic_values(r_object):
    import rpy2.robjects as ro

    if ro.r['is.factor'](r_object)[0]:
        r_object = ro.r['as.character'](r_object)
    missing = list(ro.r['is.na'](r_object))
    is_logical = ro.r['is.logical'](r_object)[0]

    values = []
    for value, na in zip(r_object, missing):
        if na:
            values.append(None)
        elif is_logical:
            values.append(bool(value))
        else:
            values.append(value)
    return values


def r_to_python(value):
    """
    Convert an 'r' family InteropValue to a Python object.

    Args:
        value (InteropValue): Value published by the R runtime.

    Returns:
        The Python counterpart. OPAQUE values are returned as the rpy2
        object itself.
    """
    import rpy2.robjects as ro

    obj = value.payload
    kind = value.kind

    if kind == ValueKind.NULL:
        return None
    if kind == ValueKind.TABULAR:
        return r_to_pandas(obj)
    if kind == ValueKind.OPAQUE:
        return obj
    if kind in (ValueKind.LOGICAL, ValueKind.NUMERIC, ValueKind.TEXT):
        return _atomic_values(obj)[0]

    is_list = ro.r['is.list'](obj)[0]
    if is_list:
        items = [r_to_python(wrap_r(element)) for element in obj]
    else:
        items = _atomic_values(obj)

    if kind == ValueKind.MAPPING:
        names = [str(name) for name in ro.r['names'](obj)]
        return OrderedDict(zip(names, items))
    return items


def _vector_for(items):
    """Build an atomic R vector for homogeneous scalars, or None."""
    import rpy2.robjects as ro

    present = [item for item in items if item is not None]
    if not present:
        return None
    kinds = {classify_python(item) for item in present}
    if len(kinds) != 1:
        return None
    kind = kinds.pop()

    if kind == ValueKind.LOGICAL:
        return ro.BoolVector([ro.NA_Logical if i is None else bool(i) for i in items])
    if kind == ValueKind.TEXT:
        return ro.StrVector([ro.NA_Character if i is None else i for i in items])
    if kind == ValueKind.NUMERIC:
        if all(_fits_integer(i) for i in present):
            return ro.IntVector([ro.NA_Integer if i is None else int(i) for i in items])
        return ro.FloatVector([ro.NA_Real if i is None else float(i) for i in items])
    return None


def _fits_integer(item):
    return isinstance(item, (numbers.Integral, np.integer)) and abs(int(item)) <= _INT32_MAX


def _to_r(obj):
    return python_to_r(InteropValue(classify_python(obj), 'python', obj))


def python_to_r(value):
    """
    Convert a 'python' family InteropValue to an R object.

    Args:
        value (InteropValue): Value published by the Python runtime.

    Returns:
        An rpy2 object. OPAQUE values become a character scalar holding
        the object's repr, classed ``duet_opaque``.
    """
    import rpy2.robjects as ro

    obj = value.payload
    kind = value.kind

    if kind == ValueKind.NULL:
        return ro.NULL
    if kind in (ValueKind.LOGICAL, ValueKind.NUMERIC, ValueKind.TEXT):
        return _vector_for([obj])
    if kind == ValueKind.TABULAR:
        return pandas_to_r(obj)
    if kind == ValueKind.SEQUENCE:
        items = obj.tolist() if isinstance(obj, (np.ndarray, pd.Series)) else list(obj)
        vector = _vector_for(items)
        if vector is not None:
            return vector
        return ro.r['list'](*[_to_r(item) for item in items])
    if kind == ValueKind.MAPPING:
        return ro.vectors.ListVector([(key, _to_r(item)) for key, item in obj.items()])

    return opaque_to_r(obj)


def opaque_to_r(obj):
    """Represent a Python object in R as its repr, classed ``duet_opaque``."""
    import rpy2.robjects as ro

    logging.getLogger(__name__).debug(f"Passing {type(obj).__name__} to R as its repr")
    return ro.r['structure'](ro.StrVector([repr(obj)]), **{'class': 'duet_opaque'})


def register_r_conversions(registry):
    """Register the python <-> r conversion rules in ``registry``."""
    registry.register('python', 'r', python_to_r)
    registry.register('r', 'python', r_to_python)
