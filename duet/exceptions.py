"""
Exceptions raised by DUET.

All errors derive from DuetError so callers can catch everything the
package raises with a single except clause.
"""


class DuetError(Exception):
    """Base class for all DUET errors."""

    block_index = None


class ConfigurationError(DuetError):
    """The session is misconfigured (e.g. no usable R installation)."""


class DocumentParseError(DuetError):
    """A document could not be split into narrative and code blocks."""

    def __init__(self, message, line=None):
        self.line = line
        if line is not None:
            message = f"line {line}: {message}"
        super().__init__(message)


class ConversionError(DuetError):
    """A value cannot be converted between two runtimes."""


class NameNotFoundError(DuetError, KeyError, AttributeError):
    """
    A bridge lookup named a binding that the source runtime never published.

    Subclasses KeyError and AttributeError so that ``bridge["x"]``,
    ``bridge.x``, ``getattr(bridge, "x", None)`` and ``hasattr`` behave
    the way Python code expects.
    """

    def __init__(self, name, language=None):
        self.name = name
        self.language = language
        if language:
            message = f"no binding named '{name}' was published by the {language} runtime"
        else:
            message = f"no binding named '{name}'"
        super().__init__(message)

    def __str__(self):
        return self.args[0]


class ExecutionError(DuetError):
    """
    A block's code raised an error.

    Args:
        block_index (int): Position of the failing block in the document.
        language (str): Language tag of the failing block.
        detail (str): Error message reported by the runtime.
        label (str, optional): Chunk label of the failing block.
    """

    def __init__(self, block_index, language, detail, label=None):
        self.block_index = block_index
        self.language = language
        self.detail = detail
        self.label = label
        where = f"block {block_index} ({language}"
        if label:
            where += f", '{label}'"
        where += ")"
        super().__init__(f"{where} failed: {detail}")
