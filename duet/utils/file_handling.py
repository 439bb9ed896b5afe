"""
File handling utilities for DUET.

This module provides functions for managing output directories and
choosing output file names for rendered documents.
"""

import re
from pathlib import Path

_UNSAFE_CHARS_RE = re.compile(r'[^A-Za-z0-9_.-]+')


def ensure_dir(directory):
    """
    Ensure that a directory exists, creating it if necessary.

    Args:
        directory (str or Path): Directory path.

    Returns:
        Path: Path object for the directory.
    """
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)
    return directory


def safe_filename(name):
    """
    Turn a chunk label into something usable as a file name.

    Args:
        name (str): Arbitrary label.

    Returns:
        str: The label with unsafe characters replaced by '-'.
    """
    cleaned = _UNSAFE_CHARS_RE.sub('-', name).strip('-.')
    return cleaned or 'chunk'


def default_output_path(input_path):
    """
    Choose where the rendered Markdown for a document goes.

    ``report.Rmd`` renders to ``report.md``; a plain ``notes.md`` renders to
    ``notes.out.md`` so the input is never overwritten.

    Args:
        input_path (str or Path): Path of the source document.

    Returns:
        Path: Path of the rendered output.
    """
    input_path = Path(input_path)
    if input_path.suffix.lower() in ('.rmd', '.qmd'):
        return input_path.with_suffix('.md')
    return input_path.with_name(f"{input_path.stem}.out.md")
