"""Document ingestion: text reconstruction, sectioning, quality and storage."""

from .document import (
    DocumentMetadata,
    DocumentSection,
    ExtractionQuality,
    ProcessedDocument,
)
from .parsers import PageTextSource, PDFPageSource, TextFragment, UploadedFile
from .segmenter import SectionSegmenter, extract_keywords, is_header, segment_sections
from .quality import assess_extraction_quality
from .storage import KeyValueStore, JSONFileStore, InMemoryStore
from .document_store import DocumentStore
from .processor import DocumentProcessor

__all__ = [
    # Pipeline
    "DocumentProcessor",
    "DocumentStore",
    # Document models
    "ProcessedDocument",
    "DocumentMetadata",
    "DocumentSection",
    "ExtractionQuality",
    # Page sources
    "PageTextSource",
    "PDFPageSource",
    "TextFragment",
    "UploadedFile",
    # Sectioning and quality
    "SectionSegmenter",
    "segment_sections",
    "extract_keywords",
    "is_header",
    "assess_extraction_quality",
    # Storage backends
    "KeyValueStore",
    "JSONFileStore",
    "InMemoryStore",
]
