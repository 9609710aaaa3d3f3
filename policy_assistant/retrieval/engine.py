"""
Lexical section retrieval and context assembly.

Every section of every document is scored against the query terms in a
single pass: title hits weigh most, then keyword hits, then each
occurrence in the body. The best sections are rendered into a bounded,
source-attributed context block for the language model prompt. This is
not an inverted index; corpora are a handful of uploaded PDFs.
"""

import re
from dataclasses import dataclass
from typing import List, Optional, Sequence

from ..config import RetrievalConfig
from ..ingestion.document import DocumentSection, ProcessedDocument
from ..utils.logger import get_logger

logger = get_logger(__name__)

CONTEXT_HEADER = "RELEVANT COMPANY POLICY INFORMATION:\n\n"
SOURCES_PREFIX = "\nSOURCE DOCUMENTS: "

_SENTENCE_BOUNDARY = re.compile(r"[.!?]+")


@dataclass
class SectionMatch:
    """A scored section together with its extracted excerpt."""
    document: ProcessedDocument
    section: DocumentSection
    score: int
    excerpt: str
    rank: int = 0

    @property
    def source(self) -> str:
        return self.document.name

    def __repr__(self) -> str:
        return (
            f"SectionMatch(rank={self.rank}, score={self.score}, "
            f"source={self.source!r}, section={self.section.title!r})"
        )


class RetrievalEngine:
    """Scores document sections against a free-text query."""

    def __init__(self, config: Optional[RetrievalConfig] = None):
        self.config = config or RetrievalConfig()

    def search_terms(self, query: str) -> List[str]:
        """Lowercase whitespace tokens longer than the minimum term length."""
        return [
            term for term in query.lower().split()
            if len(term) > self.config.min_term_length
        ]

    def score_section(self, section: DocumentSection, terms: Sequence[str]) -> int:
        title = section.title.lower()
        content = section.content.lower()
        score = 0

        for term in terms:
            if term in title:
                score += self.config.title_weight

            occurrences = len(re.findall(re.escape(term), content))
            score += occurrences * self.config.content_weight

            if any(term in keyword for keyword in section.keywords):
                score += self.config.keyword_weight

        return score

    def extract_excerpt(self, content: str, terms: Sequence[str]) -> str:
        """Join the first few sentences that mention any term."""
        sentences = [
            s for s in _SENTENCE_BOUNDARY.split(content)
            if len(s.strip()) > self.config.min_sentence_length
        ]
        relevant = [
            s for s in sentences
            if any(term in s.lower() for term in terms)
        ]
        return ". ".join(relevant[:self.config.max_sentences]).strip()

    def rank(
        self, query: str, documents: Sequence[ProcessedDocument]
    ) -> List[SectionMatch]:
        """
        Score all sections and return the best matches.

        Sections scoring zero, or without a single sentence that mentions
        a query term, are dropped. Ties keep document order.

        Returns:
            At most ``top_k`` matches, highest score first.
        """
        terms = self.search_terms(query)
        if not terms or not documents:
            return []

        matches = []
        for document in documents:
            for section in document.sections:
                score = self.score_section(section, terms)
                if score <= 0:
                    continue

                excerpt = self.extract_excerpt(section.content, terms)
                if not excerpt:
                    continue

                matches.append(SectionMatch(
                    document=document,
                    section=section,
                    score=score,
                    excerpt=excerpt,
                ))

        # sorted() is stable, so equal scores stay in encounter order
        top = sorted(matches, key=lambda m: m.score, reverse=True)[:self.config.top_k]
        for i, match in enumerate(top, 1):
            match.rank = i
        return top

    def search(self, query: str, documents: Sequence[ProcessedDocument]) -> str:
        """
        Build the context block for a query.

        Returns:
            The rendered context, or an empty string when nothing relevant
            was found. An empty result is not an error.
        """
        logger.info('Searching for: "%s" in %d documents', query, len(documents))
        matches = self.rank(query, documents)
        if not matches:
            logger.debug("No relevant sections found")
            return ""

        context = render_context(matches)
        logger.info("Found %d relevant sections for context", len(matches))
        return context


def render_context(matches: Sequence[SectionMatch]) -> str:
    """Render ranked matches into the attributed context block."""
    parts = [CONTEXT_HEADER]
    for index, match in enumerate(matches, 1):
        parts.append(f'{index}. FROM "{match.source}" - {match.section.title}:\n')
        parts.append(f"{match.excerpt}\n\n")

    sources = list(dict.fromkeys(match.source for match in matches))
    parts.append(SOURCES_PREFIX + ", ".join(sources))
    return "".join(parts)
