"""
Normalization Layer

RESPONSIBILITY: Strip non-substantive markup from extracted note text
ALLOWED INPUTS: Plain markdown text (full documents or extracted insertions)
OUTPUTS: Single-line, whitespace-collapsed prose

WHAT THIS LAYER MUST NOT DO:
============================
- Inspect edit history or diffs
- Decide which text is "new" (that belongs to the temporal layer)
"""

from .markdown import (
    MarkdownNormalizer, PassthroughNormalizer, clean_note_contents, has_front_matter
)

__all__ = ['MarkdownNormalizer', 'PassthroughNormalizer', 'clean_note_contents', 'has_front_matter']
