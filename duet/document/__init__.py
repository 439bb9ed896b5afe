"""
Document module for DUET.

This module parses documents that interleave narrative text with
language-tagged code blocks.
"""

from .parser import (
    Block,
    ChunkOptions,
    Document,
    Narrative,
    parse_chunk_header,
    parse_document,
    read_document,
)

__all__ = [
    'Block',
    'ChunkOptions',
    'Document',
    'Narrative',
    'parse_chunk_header',
    'parse_document',
    'read_document',
]
