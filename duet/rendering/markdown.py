"""
Markdown rendering of executed documents.

Narrative text is copied through unchanged. Each block is followed by its
captured console output (knitr style, every line prefixed with ``## ``) and
links to the figures it produced, which are written to a figure directory.
"""

import logging
import os
from pathlib import Path

from ..utils.file_handling import ensure_dir, safe_filename

OUTPUT_PREFIX = '## '


def format_output(text, prefix=OUTPUT_PREFIX):
    """
    Format captured console text as a fenced block.

    Args:
        text (str): Captured output.
        prefix (str): Prefix added to every line.

    Returns:
        str: Markdown, or '' when there is no output.
    """
    lines = text.rstrip('\n').splitlines()
    if not lines:
        return ''
    body = '\n'.join(f"{prefix}{line}".rstrip() for line in lines)
    return f"```\n{body}\n```\n"


def format_code(block):
    code = block.code if block.code.endswith('\n') or not block.code else block.code + '\n'
    return f"```{block.language}\n{code}```\n"


def write_figures(result, figure_dir, link_base=None):
    """
    Write a block's figures to disk.

    Args:
        result (BlockResult): Result holding the figures.
        figure_dir (str or Path): Directory for the image files.
        link_base (str or Path, optional): Directory links are made relative to.

    Returns:
        list: Link targets, one per figure.
    """
    logger = logging.getLogger(__name__)

    figures = result.output.figures
    if not figures:
        return []

    figure_dir = ensure_dir(figure_dir)
    stem = safe_filename(result.block.label or f"chunk-{result.index + 1}")

    links = []
    for number, figure in enumerate(figures, start=1):
        path = figure_dir / f"{stem}-{number}.{figure.format}"
        path.write_bytes(figure.data)
        logger.debug(f"Wrote figure {path}")
        if link_base is not None:
            target = os.path.relpath(path, link_base)
        else:
            target = str(path)
        links.append(Path(target).as_posix())
    return links


def render_block(result, figure_dir, link_base=None):
    """Render one block with its output and figures."""
    block = result.block
    options = block.options

    if result.skipped:
        return format_code(block) if options.echo and options.include else ''
    if not options.include:
        return ''

    parts = []
    if options.echo:
        parts.append(format_code(block))
    output = format_output(result.output.text)
    if output:
        parts.append(output)
    for link in write_figures(result, figure_dir, link_base):
        parts.append(f"![{safe_filename(block.label or 'plot')}]({link})\n")
    return '\n'.join(parts)


def render_markdown(document, results, figure_dir, link_base=None):
    """
    Render an executed document as Markdown.

    Args:
        document (Document): The parsed document.
        results (list): BlockResults from ``Orchestrator.run``, in order.
        figure_dir (str or Path): Directory for figure files.
        link_base (str or Path, optional): Directory figure links are made
            relative to, normally the directory of the output file.

    Returns:
        str: The rendered Markdown.
    """
    by_block = {id(result.block): result for result in results}

    pieces = []
    for segment in document.segments:
        if not segment.is_block:
            pieces.append(segment.text)
            continue
        result = by_block.get(id(segment))
        if result is None:
            raise ValueError(f"no result for the block at line {segment.line}")
        rendered = render_block(result, figure_dir, link_base)
        if rendered:
            pieces.append(rendered)

    return ''.join(pieces)
