"""
Tagged interop values.

Every binding that crosses a bridge is wrapped in an InteropValue: a kind
tag, the value system ("family") its payload belongs to, and a reference to
the payload itself. Conversions between families are looked up by the
(source family, target family) pair, see ``duet.values.conversion``.
"""

import numbers
from enum import Enum

import numpy as np
import pandas as pd


class ValueKind(Enum):
    NULL = 'null'
    LOGICAL = 'logical'
    NUMERIC = 'numeric'
    TEXT = 'text'
    SEQUENCE = 'sequence'
    MAPPING = 'mapping'
    TABULAR = 'tabular'
    OPAQUE = 'opaque'


class InteropValue:
    """
    A reference to a runtime value together with its kind.

    Args:
        kind (ValueKind): Variant tag.
        family (str): Value system of the payload, e.g. 'python' or 'r'.
        payload: The source runtime's object. Not copied.
    """

    __slots__ = ('kind', 'family', 'payload')

    def __init__(self, kind, family, payload):
        self.kind = kind
        self.family = family
        self.payload = payload

    def __repr__(self):
        return f"InteropValue({self.kind.name}, family={self.family!r}, payload={type(self.payload).__name__})"


def classify_python(obj):
    """
    Classify a Python object into a ValueKind.

    Args:
        obj: Any Python object.

    Returns:
        ValueKind: The variant this object travels as.
    """
    if obj is None:
        return ValueKind.NULL
    # bool before numbers: bool is an int subclass
    if isinstance(obj, (bool, np.bool_)):
        return ValueKind.LOGICAL
    if isinstance(obj, (numbers.Number, np.number)) and not isinstance(obj, (complex, np.complexfloating)):
        return ValueKind.NUMERIC
    if isinstance(obj, str):
        return ValueKind.TEXT
    if isinstance(obj, pd.DataFrame):
        return ValueKind.TABULAR
    if isinstance(obj, (list, tuple, pd.Series)):
        return ValueKind.SEQUENCE
    if isinstance(obj, np.ndarray):
        return ValueKind.SEQUENCE if obj.ndim == 1 else ValueKind.OPAQUE
    if isinstance(obj, dict) and all(isinstance(k, str) for k in obj):
        return ValueKind.MAPPING
    return ValueKind.OPAQUE


def wrap_python(obj):
    """Wrap a Python object as an InteropValue of the 'python' family."""
    return InteropValue(classify_python(obj), 'python', obj)
