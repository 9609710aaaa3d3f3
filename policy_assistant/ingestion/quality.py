import re

from .document import ExtractionQuality

_PARAGRAPH_BREAK = re.compile(r"\n\s*\n")
_DIGIT = re.compile(r"\d")
# A non-whitespace run this long usually means words were glued together
_RUN_ON_TOKEN = re.compile(r"\S{51,}")


def count_words(text: str) -> int:
    """Count whitespace-delimited, non-empty tokens."""
    return len(text.split())


def assess_extraction_quality(
    text: str, word_count: int, page_count: int
) -> ExtractionQuality:
    """
    Classify how cleanly text was recovered from a document.

    Args:
        text: Extracted text, ideally before whitespace normalization so
            paragraph breaks are still visible.
        word_count: Number of words in the cleaned content.
        page_count: Number of pages (values below 1 are treated as 1).

    Returns:
        The highest quality tier whose conditions all hold.
    """
    avg_words_per_page = word_count / max(page_count, 1)
    has_structure = _PARAGRAPH_BREAK.search(text) is not None
    has_numbers = _DIGIT.search(text) is not None
    has_proper_spacing = _RUN_ON_TOKEN.search(text) is None

    if avg_words_per_page > 200 and has_structure and has_numbers and has_proper_spacing:
        return ExtractionQuality.EXCELLENT
    if avg_words_per_page > 100 and has_structure:
        return ExtractionQuality.GOOD
    if avg_words_per_page > 50:
        return ExtractionQuality.FAIR
    return ExtractionQuality.POOR
