"""
Markdown Note Normalizer
========================

Default TextNormalizer: turns markdown notes into plain prose suitable for
a generation request.

Passes run in a fixed order; later passes assume earlier ones ran.
"""

from __future__ import annotations
import re
from typing import Tuple

FRONT_MATTER = re.compile(r"---[\s\S]+?---\n")
FRONT_MATTER_AT_START = re.compile(r"^---\r?\n[\s\S]*?\r?\n---[ \t]*(?:\r?\n|$)")
COMMENT = re.compile(r"%%[\s\S]*?%%")
TODO_ITEM = re.compile(r"^[\s]*[-*+]\s+\[[^\]]*\].*$", re.MULTILINE)
LINK = re.compile(r"\[\[([^\]|]+)(?:\|([^\]]+))??]]|\[([^\]]+)]\([^)]+\)")
HEADING = re.compile(r"^(#+.*)$", re.MULTILINE)
FORMATTING = re.compile(r"([*_]{1,3}|~~|==|%%)(.*?)\1")
WHITESPACE = re.compile(r"\s+")

# Code blocks produced by plugins rather than written as content
METADATA_PLUGINS: Tuple[str, ...] = (
    'button',
    'todoist',
    'dataview',
    'dataviewjs',
    'tasks',
    'tracker',
    'breadcrumbs',
    'kanban',
    'excalidraw',
    'mermaid',
    'chart',
    'timeline',
)

ANECDOTAL_CALLOUTS: Tuple[str, ...] = ('todo', 'aside')

_METADATA_BLOCKS = tuple(
    re.compile(r"```" + re.escape(plugin) + r"[\s\S]*?```", re.IGNORECASE)
    for plugin in METADATA_PLUGINS
)
_CALLOUTS = tuple(
    re.compile(
        r"^>\s*\[!" + re.escape(callout) + r"\][+-]?\s*.*$(?:\n^>.*$)*",
        re.MULTILINE | re.IGNORECASE
    )
    for callout in ANECDOTAL_CALLOUTS
)


def has_front_matter(text: str) -> bool:
    """True when text opens with a YAML front matter block."""
    return FRONT_MATTER_AT_START.match(text) is not None


def _link_text(match: re.Match) -> str:
    wiki_target, wiki_display, markdown_text = match.groups()
    if wiki_display is not None:
        return wiki_display
    if wiki_target is not None:
        return wiki_target
    return markdown_text


def clean_note_contents(text: str, has_header_block: bool) -> str:
    cleaned = text
    if has_header_block:
        cleaned = FRONT_MATTER.sub("", cleaned, count=1)
    cleaned = COMMENT.sub("", cleaned)
    for pattern in _METADATA_BLOCKS:
        cleaned = pattern.sub("", cleaned)
    cleaned = TODO_ITEM.sub("", cleaned)
    for pattern in _CALLOUTS:
        cleaned = pattern.sub("", cleaned)
    cleaned = LINK.sub(_link_text, cleaned)
    cleaned = HEADING.sub("", cleaned)
    cleaned = FORMATTING.sub(r"\2", cleaned)
    return WHITESPACE.sub(" ", cleaned).strip()


class MarkdownNormalizer:
    """TextNormalizer for markdown notes with optional YAML front matter."""

    def normalize(self, text: str, has_header_block: bool) -> str:
        return clean_note_contents(text, has_header_block)

    def has_header_block(self, text: str) -> bool:
        return has_front_matter(text)


class PassthroughNormalizer:
    """TextNormalizer that returns extracted text untouched."""

    def normalize(self, text: str, has_header_block: bool) -> str:
        return text

    def has_header_block(self, text: str) -> bool:
        return has_front_matter(text)
