"""
Conversion rules between value families.

Rules are registered explicitly per (source family, target family) pair.
Converting within one family returns the payload itself.
"""

import logging

from ..exceptions import ConversionError


class ConversionRegistry:
    """
    Registry of conversion functions keyed by family pair.

    A rule is a callable ``rule(value)`` taking an InteropValue and returning
    an object native to the target family.
    """

    def __init__(self):
        self._rules = {}

    def register(self, source, target, rule):
        self._rules[(source, target)] = rule

    def convert(self, value, target):
        """
        Convert an InteropValue into the target family.

        Args:
            value (InteropValue): Value to convert.
            target (str): Target family.

        Returns:
            The converted object.
        """
        if value.family == target:
            return value.payload

        rule = self._rules.get((value.family, target))
        if rule is None:
            raise ConversionError(f"no conversion rule from '{value.family}' to '{target}'")
        try:
            return rule(value)
        except ConversionError:
            raise
        except Exception as e:
            logging.getLogger(__name__).debug(f"Conversion of {value!r} to {target} failed: {e}")
            raise ConversionError(
                f"cannot convert {value.kind.value} value from '{value.family}' to '{target}': {e}"
            ) from e

