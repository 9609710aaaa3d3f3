"""
Error taxonomy for document ingestion and storage.

Page-level failures are recoverable and only logged; file-level failures
reject a single upload and always name the offending file. Retrieval never
raises for "nothing found": an empty context string is a valid result.
"""

from typing import List, Optional, Sequence


class PolicyAssistantError(Exception):
    """Base class for all Policy Assistant errors."""


class ExtractionError(PolicyAssistantError):
    """Text could not be extracted from an uploaded document."""


class PageExtractionError(ExtractionError):
    """A single page could not be read. Processing continues without it."""

    def __init__(self, page_number: int, cause: Optional[BaseException] = None):
        self.page_number = page_number
        self.cause = cause
        message = f"Error extracting page {page_number}"
        if cause is not None:
            message += f": {cause}"
        super().__init__(message)


class FileExtractionError(ExtractionError):
    """A whole file was rejected during ingestion."""

    def __init__(self, filename: str, cause: Optional[BaseException] = None):
        self.filename = filename
        self.cause = cause
        super().__init__(f"Failed to extract text from {filename}: {cause}")


class BatchIngestionError(PolicyAssistantError):
    """
    One or more files of an ingestion batch failed.

    Raised after the rest of the batch has been processed and stored.
    ``documents`` holds the documents that were ingested successfully.
    """

    def __init__(
        self,
        failures: Sequence[FileExtractionError],
        documents: Optional[Sequence] = None,
    ):
        self.failures: List[FileExtractionError] = list(failures)
        self.documents = list(documents or [])
        names = ", ".join(f.filename for f in self.failures)
        super().__init__(
            f"{len(self.failures)} file(s) failed to ingest: {names}"
        )

    @property
    def filenames(self) -> List[str]:
        return [f.filename for f in self.failures]


class StorageError(PolicyAssistantError):
    """The persistent store could not be written or cleared."""
