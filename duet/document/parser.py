"""
Document parsing for DUET.

This module splits a Markdown / R Markdown document into narrative text and
executable code blocks. Executable chunks use the R Markdown header form::

    ```{r fit-model, echo=FALSE}
    fit <- glm(y ~ x, data = py$data)
    ```

Plain fences such as ```` ```python ```` are kept as narrative.
"""

import ast
import logging
import re
from collections import namedtuple
from pathlib import Path

from ..exceptions import DocumentParseError

_FENCE_RE = re.compile(r"^(?P<indent>[ ]{0,3})(?P<fence>`{3,}|~{3,})(?P<info>.*)$")
_CHUNK_HEADER_RE = re.compile(r"^\{\s*(?P<lang>[A-Za-z][\w.+-]*)\s*(?P<rest>.*?)\s*\}\s*$")

OPTION_DEFAULTS = {
    'eval': True,
    'echo': True,
    'include': True,
}


ChunkOptions = namedtuple('ChunkOptions', ['eval', 'echo', 'include', 'label'])
ChunkOptions.__new__.__defaults__ = (True, True, True, None)


class Narrative(namedtuple('Narrative', ['text', 'line'])):
    """Text between code blocks, passed through to the rendered output."""

    __slots__ = ()
    is_block = False


class Block(namedtuple('Block', ['language', 'code', 'options', 'line'])):
    """A language-tagged unit of code."""

    __slots__ = ()
    is_block = True

    @property
    def label(self):
        return self.options.label


class Document:
    """
    An immutable, ordered sequence of narrative segments and code blocks.

    Args:
        segments (iterable): Narrative and Block objects in document order.
        source (str, optional): Where the document was read from.
    """

    def __init__(self, segments, source=None):
        self._segments = tuple(segments)
        self._blocks = tuple(s for s in self._segments if s.is_block)
        self._source = source

    @property
    def segments(self):
        return self._segments

    @property
    def blocks(self):
        return self._blocks

    @property
    def source(self):
        return self._source

    @property
    def languages(self):
        """Language tags used by the document's blocks, in first-use order."""
        seen = []
        for block in self._blocks:
            if block.language not in seen:
                seen.append(block.language)
        return seen

    def __len__(self):
        return len(self._blocks)

    def __iter__(self):
        return iter(self._blocks)

    def __repr__(self):
        return f"Document(blocks={len(self._blocks)}, source={self._source!r})"


def _split_header_items(rest, line):
    """Split a chunk header on commas that are not inside quotes or brackets."""
    items = []
    current = []
    quote = None
    depth = 0
    for ch in rest:
        if quote:
            current.append(ch)
            if ch == quote:
                quote = None
        elif ch in ('"', "'"):
            quote = ch
            current.append(ch)
        elif ch in '([{':
            depth += 1
            current.append(ch)
        elif ch in ')]}':
            depth = max(depth - 1, 0)
            current.append(ch)
        elif ch == ',' and depth == 0:
            items.append(''.join(current).strip())
            current = []
        else:
            current.append(ch)
    if quote:
        raise DocumentParseError("unterminated quote in chunk header", line)
    items.append(''.join(current).strip())
    return [item for item in items if item]


def _parse_option_value(raw, line):
    value = raw.strip()
    if value in ('TRUE', 'True', 'T', 'true'):
        return True
    if value in ('FALSE', 'False', 'F', 'false'):
        return False
    if value in ('NULL', 'None'):
        return None
    try:
        return ast.literal_eval(value)
    except (ValueError, SyntaxError):
        raise DocumentParseError(f"cannot parse chunk option value: {value}", line)


def parse_chunk_header(info, line=None):
    """
    Parse the info string of a fenced block.

    Args:
        info (str): Text after the opening fence, e.g. ``{r setup, echo=FALSE}``.
        line (int, optional): Line number used in error messages.

    Returns:
        tuple or None: (language, ChunkOptions) for executable chunks,
            None for plain fences.
    """
    match = _CHUNK_HEADER_RE.match(info.strip())
    if not match:
        return None

    language = match.group('lang').lower()
    rest = match.group('rest').strip()
    options = dict(OPTION_DEFAULTS)
    options['label'] = None

    items = _split_header_items(rest, line)
    for position, item in enumerate(items):
        if '=' not in item:
            if position == 0:
                options['label'] = item
                continue
            raise DocumentParseError(f"unexpected item in chunk header: {item}", line)

        key, raw = item.split('=', 1)
        key = key.strip()
        if key not in options:
            # Other knitr options (fig.width, message, ...) have no effect here.
            logging.getLogger(__name__).warning(f"Ignoring unsupported chunk option: {key}")
            continue
        value = _parse_option_value(raw, line)
        if key == 'label':
            options['label'] = None if value is None else str(value)
        elif not isinstance(value, bool):
            raise DocumentParseError(f"chunk option '{key}' must be TRUE or FALSE", line)
        else:
            options[key] = value

    return language, ChunkOptions(**options)


def parse_document(text, source=None):
    """
    Parse document text into a Document.

    Args:
        text (str): Full document text.
        source (str, optional): Name of the document, kept for reporting.

    Returns:
        Document: The parsed document.
    """
    logger = logging.getLogger(__name__)

    segments = []
    narrative = []
    narrative_start = 1
    lines = text.splitlines(keepends=True)

    i = 0
    while i < len(lines):
        raw = lines[i]
        match = _FENCE_RE.match(raw.rstrip('\r\n'))
        header = parse_chunk_header(match.group('info'), i + 1) if match else None

        if header is None:
            if match:
                # Plain fence: copy it through verbatim, including its body.
                fence = match.group('fence')
                end = _find_closing_fence(lines, i + 1, fence)
                stop = len(lines) if end is None else end + 1
                narrative.extend(lines[i:stop])
                i = stop
            else:
                narrative.append(raw)
                i += 1
            continue

        fence = match.group('fence')
        end = _find_closing_fence(lines, i + 1, fence)
        if end is None:
            raise DocumentParseError(f"unterminated '{header[0]}' chunk", i + 1)

        if narrative:
            segments.append(Narrative(''.join(narrative), narrative_start))
            narrative = []

        language, options = header
        code = ''.join(lines[i + 1:end])
        segments.append(Block(language, code, options, i + 1))
        i = end + 1
        narrative_start = i + 1

    if narrative:
        segments.append(Narrative(''.join(narrative), narrative_start))

    document = Document(segments, source=source)
    logger.debug(f"Parsed {len(document.blocks)} code blocks from {source or '<string>'}")
    return document


def _find_closing_fence(lines, start, fence):
    for j in range(start, len(lines)):
        stripped = lines[j].strip()
        if stripped.startswith(fence[0] * len(fence)) and set(stripped) == {fence[0]}:
            return j
    return None


def read_document(path):
    """
    Read and parse a document file.

    Args:
        path (str or Path): Path to the document.

    Returns:
        Document: The parsed document.
    """
    path = Path(path)
    text = path.read_text(encoding='utf-8')
    return parse_document(text, source=str(path))
