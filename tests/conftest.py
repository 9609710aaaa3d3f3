"""Pytest configuration and shared fixtures."""

from datetime import datetime, timezone
from typing import Dict, List, Sequence

import pymupdf
import pytest

from policy_assistant.ingestion.document import (
    DocumentMetadata,
    DocumentSection,
    ExtractionQuality,
    ProcessedDocument,
)
from policy_assistant.ingestion.document_store import DocumentStore
from policy_assistant.ingestion.parsers.base import PageTextSource, TextFragment
from policy_assistant.ingestion.storage import InMemoryStore


class FakePageSource(PageTextSource):
    """Page source serving canned fragments; listed pages raise on read."""

    def __init__(self, pages: Sequence[List[TextFragment]], failing_pages=()):
        self.pages = list(pages)
        self.failing_pages = set(failing_pages)
        self.closed = False

    @property
    def page_count(self) -> int:
        return len(self.pages)

    def page_fragments(self, page_index: int) -> List[TextFragment]:
        if page_index in self.failing_pages:
            raise RuntimeError(f"corrupt page {page_index}")
        return self.pages[page_index]

    def close(self) -> None:
        self.closed = True


def lines_to_fragments(lines: Sequence[str], top: float = 800.0, step: float = 20.0):
    """One fragment per line, laid out top to bottom."""
    return [
        TextFragment(text=line, x=72.0, y=top - i * step, width=100.0, height=12.0)
        for i, line in enumerate(lines)
    ]


def make_document(
    name: str = "handbook.pdf",
    sections: Sequence[DocumentSection] = (),
    doc_id: str = "doc-1",
    uploaded_at: datetime = None,
) -> ProcessedDocument:
    sections = list(sections)
    content = "\n".join(s.title + "\n" + s.content for s in sections)
    return ProcessedDocument(
        id=doc_id,
        name=name,
        content=content,
        sections=sections,
        metadata=DocumentMetadata(
            page_count=1,
            word_count=len(content.split()),
            file_size=1024,
            extraction_quality=ExtractionQuality.FAIR,
        ),
        uploaded_at=uploaded_at or datetime(2024, 3, 1, 9, 30, 15, 123456, tzinfo=timezone.utc),
    )


def build_pdf(pages: Sequence[Sequence[str]]) -> bytes:
    """Create a PDF in memory, one text line per entry, 20pt apart."""
    doc = pymupdf.open()
    for lines in pages:
        page = doc.new_page()
        for i, line in enumerate(lines):
            page.insert_text((72, 72 + i * 20), line, fontsize=11)
    data = doc.tobytes()
    doc.close()
    return data


@pytest.fixture
def memory_backend() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def document_store(memory_backend) -> DocumentStore:
    store = DocumentStore(memory_backend)
    store.open()
    yield store
    store.close()


@pytest.fixture
def leave_document() -> ProcessedDocument:
    return make_document(
        name="leave_policy.pdf",
        doc_id="leave",
        sections=[
            DocumentSection(
                title="POLICY: Leave",
                content="Employees get 15 vacation days per year.\n",
                page_numbers=[1],
                keywords=["policy", "leave"],
            ),
        ],
    )


@pytest.fixture
def fake_sources() -> Dict[str, FakePageSource]:
    """Registry used by fake_source_factory, keyed by file name."""
    return {}


@pytest.fixture
def fake_source_factory(fake_sources):
    def factory(data: bytes, name: str) -> PageTextSource:
        if name not in fake_sources:
            raise ValueError("Invalid PDF structure")
        return fake_sources[name]
    return factory
