"""
Reading-order text reconstruction from positioned page fragments.

Fragments whose vertical positions differ by less than a small tolerance
are treated as one visual line and read left to right; lines are read top
to bottom (higher ``y`` first, bottom-left page origin).
"""

import re
from functools import cmp_to_key
from typing import List, Sequence

from .parsers.base import TextFragment

LINE_TOLERANCE = 5.0

_HORIZONTAL_WS = re.compile(r"[^\S\n]+")
_WS_AROUND_NEWLINE = re.compile(r" ?\n ?")
_BLANK_LINES = re.compile(r"\n\s*\n")


def _has_text(fragment: TextFragment) -> bool:
    return isinstance(fragment.text, str) and fragment.text != ""


def sort_fragments(
    fragments: Sequence[TextFragment],
    tolerance: float = LINE_TOLERANCE,
) -> List[TextFragment]:
    """Order fragments top-to-bottom, then left-to-right within a line."""

    def compare(a: TextFragment, b: TextFragment) -> float:
        if abs(a.y - b.y) < tolerance:
            return a.x - b.x
        return b.y - a.y

    return sorted(fragments, key=cmp_to_key(compare))


def reconstruct_page(
    fragments: Sequence[TextFragment],
    tolerance: float = LINE_TOLERANCE,
    line_breaks: bool = True,
) -> str:
    """
    Rebuild the text of one page in reading order.

    Fragments without a text string are dropped. Fragments are joined with
    single spaces; with ``line_breaks`` a newline separates fragments that
    sit on different visual lines.
    """
    ordered = sort_fragments([f for f in fragments if _has_text(f)], tolerance)
    if not ordered:
        return ""

    parts = [ordered[0].text]
    for previous, fragment in zip(ordered, ordered[1:]):
        same_line = abs(previous.y - fragment.y) < tolerance
        parts.append(" " if same_line or not line_breaks else "\n")
        parts.append(fragment.text)
    return "".join(parts)


def join_pages(page_texts: Sequence[str]) -> str:
    """Concatenate page texts, each followed by a blank line."""
    return "".join(text + "\n\n" for text in page_texts)


def normalize_text(text: str) -> str:
    """
    Clean concatenated page text.

    Horizontal whitespace runs become one space, blank-line runs become a
    single newline, and the result is trimmed. Line breaks survive so the
    segmenter can still see header lines.
    """
    text = _HORIZONTAL_WS.sub(" ", text)
    text = _WS_AROUND_NEWLINE.sub("\n", text)
    text = _BLANK_LINES.sub("\n", text)
    return text.strip()
