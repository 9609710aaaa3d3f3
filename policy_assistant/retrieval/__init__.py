"""Lexical retrieval over document sections."""

from .engine import RetrievalEngine, SectionMatch, render_context

__all__ = [
    "RetrievalEngine",
    "SectionMatch",
    "render_context",
]
