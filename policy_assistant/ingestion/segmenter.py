"""
Heuristic section segmentation for policy documents.

PDF text carries no heading markup, so headers are recognised by shape:
a leading policy keyword, a numbered heading, or a short all-caps line.
Each header opens a section that collects the lines up to the next header.
"""

import re
from typing import Dict, Iterable, List, Optional, Sequence

from .document import DocumentSection
from .text_reconstructor import normalize_text
from ..utils.logger import get_logger

logger = get_logger(__name__)

FALLBACK_SECTION_TITLE = "Document Content"
MAX_KEYWORDS = 20
KEYWORD_RESAMPLE_INTERVAL = 500
MAX_HEADER_LENGTH = 100

PAGE_ESTIMATION_MODES = ("proportional", "tracked")

POLICY_KEYWORDS = [
    "POLICY", "PROCEDURE", "GUIDELINES?", "OVERVIEW", "INTRODUCTION",
    "PURPOSE", "SCOPE", "DEFINITIONS?", "RESPONSIBILITIES", "PROCESS",
    "REQUIREMENTS?", "BENEFITS?", "LEAVE", "VACATION", "SICK", "REMOTE",
    "WORK", "HOURS", "SECURITY", "CONDUCT", "ETHICS", "TRAINING",
    "DEVELOPMENT", "EXPENSE", "REIMBURSEMENT", "INSURANCE", "HEALTH",
    "DENTAL", "VISION", "401K", "RETIREMENT",
]

STOP_WORDS = frozenset([
    "this", "that", "with", "from", "they", "have", "will", "been", "were",
    "said", "each", "which", "their", "time", "would", "there", "could",
    "other", "more", "very", "what", "know", "just", "first", "into",
    "over", "think", "also", "your", "work", "life", "only", "can",
    "still", "should", "after", "being", "now", "made", "before", "here",
    "through", "when", "where", "much", "some", "these", "many", "then",
    "them", "well",
])

_KEYWORD_HEADER = re.compile(
    r"^(?:" + "|".join(POLICY_KEYWORDS) + r")[\s:]", re.IGNORECASE
)
_NUMBERED_HEADER = re.compile(r"^\d+\.\s+[A-Z][^.]{10,50}$")
_UPPERCASE_LINE = re.compile(r"^[A-Z][A-Z\s]*$")
_NON_WORD = re.compile(r"[^\w\s]")


def extract_keywords(text: str, limit: int = MAX_KEYWORDS) -> List[str]:
    """
    Pull distinctive lowercase content words out of text.

    Punctuation becomes whitespace, words of three characters or fewer and
    stop words are dropped, and duplicates are removed keeping the first
    occurrence.
    """
    words = _NON_WORD.sub(" ", text.lower()).split()
    keywords = [w for w in words if len(w) > 3 and w not in STOP_WORDS]
    return list(dict.fromkeys(keywords))[:limit]


def _merge_keywords(existing: Iterable[str], new: Iterable[str]) -> List[str]:
    return list(dict.fromkeys([*existing, *new]))


def is_header(line: str, max_length: int = MAX_HEADER_LENGTH) -> bool:
    """Return True if a line looks like a section header."""
    line = line.strip()
    if not line or len(line) >= max_length:
        return False
    if _KEYWORD_HEADER.match(line) or _NUMBERED_HEADER.match(line):
        return True
    return 5 < len(line) < 30 and _UPPERCASE_LINE.match(line) is not None


class SectionSegmenter:
    """
    Splits normalized document text into titled sections.

    Page numbers are estimated once per section, from the position of its
    header line. In ``proportional`` mode that is the header's relative
    position in the whole document; ``tracked`` mode looks the line up in
    the per-page texts and falls back to the proportional estimate when
    the pages cannot be lined up with the full text.
    """

    def __init__(
        self,
        page_estimation: str = "proportional",
        max_keywords: int = MAX_KEYWORDS,
        keyword_resample_interval: int = KEYWORD_RESAMPLE_INTERVAL,
        max_header_length: int = MAX_HEADER_LENGTH,
    ):
        if page_estimation not in PAGE_ESTIMATION_MODES:
            raise ValueError(
                f"Unknown page estimation mode: {page_estimation}. "
                f"Available: {list(PAGE_ESTIMATION_MODES)}"
            )
        self.page_estimation = page_estimation
        self.max_keywords = max_keywords
        self.keyword_resample_interval = keyword_resample_interval
        self.max_header_length = max_header_length

    def segment(self, full_text: str, page_texts: Sequence[str]) -> List[DocumentSection]:
        """
        Partition text into sections.

        Args:
            full_text: Normalized document text.
            page_texts: Reconstructed text of each page, used for page
                number estimation.

        Returns:
            Sections in document order. Never empty: text without any
            header yields a single "Document Content" section.
        """
        page_count = max(len(page_texts), 1)
        lines = [line for line in full_text.split("\n") if line.strip()]
        tracked_pages = self._track_pages(lines, page_texts)

        sections: List[DocumentSection] = []
        current: Optional[DocumentSection] = None

        for index, line in enumerate(lines):
            trimmed = line.strip()

            if is_header(trimmed, self.max_header_length):
                if current is not None and current.content.strip():
                    sections.append(current)

                if tracked_pages is not None:
                    page_number = tracked_pages[index]
                else:
                    page_number = index * page_count // len(lines) + 1

                current = DocumentSection(
                    title=trimmed,
                    content="",
                    page_numbers=[page_number],
                    keywords=extract_keywords(trimmed, self.max_keywords),
                )
            elif current is not None:
                current.content += line + "\n"

                # Keywords are resampled from the latest line whenever the
                # content length lands exactly on the interval
                if len(current.content) % self.keyword_resample_interval == 0:
                    current.keywords = _merge_keywords(
                        current.keywords,
                        extract_keywords(line, self.max_keywords),
                    )

        if current is not None and current.content.strip():
            sections.append(current)

        if not sections:
            sections.append(DocumentSection(
                title=FALLBACK_SECTION_TITLE,
                content=full_text,
                page_numbers=list(range(1, len(page_texts) + 1)) or [1],
                keywords=extract_keywords(full_text, self.max_keywords),
            ))

        logger.debug("Segmented %d lines into %d sections", len(lines), len(sections))
        return sections

    def _track_pages(
        self, lines: List[str], page_texts: Sequence[str]
    ) -> Optional[Dict[int, int]]:
        if self.page_estimation != "tracked":
            return None

        line_pages: List[int] = []
        page_lines: List[str] = []
        for page_number, page_text in enumerate(page_texts, start=1):
            for line in normalize_text(page_text).split("\n"):
                if line.strip():
                    page_lines.append(line)
                    line_pages.append(page_number)

        if page_lines != lines:
            logger.debug("Page text does not line up with full text; using proportional pages")
            return None
        return dict(enumerate(line_pages))


def segment_sections(
    full_text: str,
    page_texts: Sequence[str],
    page_estimation: str = "proportional",
) -> List[DocumentSection]:
    """Segment text with default settings."""
    return SectionSegmenter(page_estimation=page_estimation).segment(full_text, page_texts)
