"""
Batch ingestion pipeline: uploaded files in, ProcessedDocuments out.

Files are processed strictly one after another and pages strictly in
order, which keeps progress reporting monotonic and error attribution
tied to a single file. Within a file, a page that cannot be read is
logged and skipped; a file that cannot be opened is rejected as a whole.
"""

import uuid
from datetime import datetime, timezone
from typing import Callable, List, Optional, Sequence

from .document import DocumentMetadata, ProcessedDocument
from .parsers.base import PageTextSource, UploadedFile
from .parsers.pdf_parser import PDFPageSource
from .quality import assess_extraction_quality, count_words
from .segmenter import SectionSegmenter
from .text_reconstructor import (
    LINE_TOLERANCE,
    join_pages,
    normalize_text,
    reconstruct_page,
)
from ..exceptions import BatchIngestionError, FileExtractionError, PageExtractionError
from ..utils.logger import get_logger

logger = get_logger(__name__)

ProgressCallback = Callable[[float], None]
PageSourceFactory = Callable[[bytes, str], PageTextSource]

# Per-file progress milestones, in percent of that file's share
_STARTED = 10.0
_OPENED = 20.0
_PAGES_SPAN = 60.0
_EXTRACTED = 85.0
_DONE = 100.0

ERROR_POLICIES = ("continue", "abort")


class _Progress:
    """Maps per-file milestones onto a monotonic 0-100 batch scale."""

    def __init__(self, callback: Optional[ProgressCallback], total_files: int):
        self._callback = callback
        self._total = max(total_files, 1)
        self._last = 0.0

    def report(self, file_index: int, percent: float) -> None:
        value = (file_index * 100.0 + percent) / self._total
        if value < self._last:
            return
        self._last = value
        if self._callback is not None:
            self._callback(value)


class DocumentProcessor:
    """Turns uploaded PDF files into ProcessedDocuments."""

    def __init__(
        self,
        segmenter: Optional[SectionSegmenter] = None,
        page_source_factory: Optional[PageSourceFactory] = None,
        line_tolerance: float = LINE_TOLERANCE,
        line_breaks: bool = True,
        on_file_error: str = "continue",
    ):
        if on_file_error not in ERROR_POLICIES:
            raise ValueError(
                f"Unknown error policy: {on_file_error}. "
                f"Available: {list(ERROR_POLICIES)}"
            )
        self.segmenter = segmenter if segmenter is not None else SectionSegmenter()
        self.page_source_factory = page_source_factory or PDFPageSource.from_bytes
        self.line_tolerance = line_tolerance
        self.line_breaks = line_breaks
        self.on_file_error = on_file_error

    def process(
        self,
        files: Sequence[UploadedFile],
        progress_callback: Optional[ProgressCallback] = None,
    ) -> List[ProcessedDocument]:
        """
        Process a batch of files in order.

        Args:
            files: Uploaded files, each with a name, size and bytes.
            progress_callback: Called with the batch progress in percent.

        Returns:
            The new documents, in the order of ``files``.

        Raises:
            FileExtractionError: A file failed and the policy is "abort".
            BatchIngestionError: One or more files failed under the
                "continue" policy; the error carries the documents that
                were processed successfully.
        """
        logger.info("Processing %d PDF files", len(files))
        progress = _Progress(progress_callback, len(files))
        progress.report(0, 0.0)

        processed: List[ProcessedDocument] = []
        failures: List[FileExtractionError] = []

        for i, uploaded in enumerate(files):
            logger.info("Processing file %d/%d: %s", i + 1, len(files), uploaded.name)
            try:
                document = self.process_file(
                    uploaded, lambda pct, i=i: progress.report(i, pct)
                )
            except FileExtractionError as e:
                logger.error("%s", e)
                if self.on_file_error == "abort":
                    raise
                failures.append(e)
                progress.report(i, _DONE)
                continue

            processed.append(document)
            logger.info(
                "Processed %s: %d chars, %d words, %d sections",
                uploaded.name,
                len(document.content),
                document.metadata.word_count,
                len(document.sections),
            )

        if failures:
            raise BatchIngestionError(failures, processed)

        logger.info("Successfully processed %d documents", len(processed))
        return processed

    def process_file(
        self,
        uploaded: UploadedFile,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> ProcessedDocument:
        """
        Extract, clean and segment a single file.

        Raises:
            FileExtractionError: The file could not be read or opened.
        """
        report = progress_callback or (lambda pct: None)
        report(_STARTED)

        try:
            source = self.page_source_factory(uploaded.read(), uploaded.name)
        except Exception as e:
            raise FileExtractionError(uploaded.name, e) from e

        try:
            with source:
                page_count = source.page_count
                logger.debug("%s has %d pages", uploaded.name, page_count)
                report(_OPENED)
                page_texts = self._extract_pages(source, page_count, report)
        except Exception as e:
            raise FileExtractionError(uploaded.name, e) from e

        report(_EXTRACTED)

        raw_text = join_pages(page_texts)
        content = normalize_text(raw_text)
        sections = self.segmenter.segment(content, page_texts)

        word_count = count_words(content)
        metadata = DocumentMetadata(
            page_count=max(page_count, 1),
            word_count=word_count,
            file_size=uploaded.size,
            # Page breaks are the paragraph structure normalization removes
            extraction_quality=assess_extraction_quality(
                raw_text.strip(), word_count, page_count
            ),
        )

        report(_DONE)
        logger.info(
            "Extracted %d characters, %d words from %s",
            len(content), word_count, uploaded.name,
        )

        return ProcessedDocument(
            id=uuid.uuid4().hex,
            name=uploaded.name,
            content=content,
            sections=sections,
            metadata=metadata,
            uploaded_at=datetime.now(timezone.utc),
        )

    def _extract_pages(
        self,
        source: PageTextSource,
        page_count: int,
        report: ProgressCallback,
    ) -> List[str]:
        page_texts = []
        for page_index in range(page_count):
            page_number = page_index + 1
            try:
                fragments = source.page_fragments(page_index)
                page_text = reconstruct_page(
                    fragments, self.line_tolerance, self.line_breaks
                )
            except Exception as e:
                logger.error("%s", PageExtractionError(page_number, e))
                page_text = ""
            else:
                logger.debug(
                    "Extracted %d characters from page %d", len(page_text), page_number
                )

            page_texts.append(page_text)
            report(_OPENED + page_number / page_count * _PAGES_SPAN)
        return page_texts
