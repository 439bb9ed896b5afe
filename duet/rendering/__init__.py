"""
Rendering module for DUET.

This module turns an executed document into Markdown with captured output
and figures.
"""

from .markdown import render_markdown, render_block, format_output, write_figures

__all__ = [
    'render_markdown',
    'render_block',
    'format_output',
    'write_figures',
]
