"""High-level API for the Policy Assistant."""
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Union

from .config import AppConfig
from .exceptions import BatchIngestionError
from .ingestion.document import ProcessedDocument
from .ingestion.document_store import DocumentStore
from .ingestion.parsers.base import UploadedFile
from .ingestion.parsers.pdf_parser import PDFPageSource
from .ingestion.processor import DocumentProcessor, ProgressCallback
from .ingestion.segmenter import SectionSegmenter
from .ingestion.storage import JSONFileStore
from .retrieval.engine import RetrievalEngine, SectionMatch
from .utils.logger import get_logger

logger = get_logger(__name__)


class KnowledgeBase:
    """High-level API for the Policy Assistant.

    Ties together the ingestion pipeline, the persistent document store
    and the retrieval engine. The store is injected so that callers own
    its lifecycle; ``from_config`` builds a file-backed one.
    """

    def __init__(
        self,
        store: DocumentStore,
        processor: Optional[DocumentProcessor] = None,
        engine: Optional[RetrievalEngine] = None,
    ):
        self.store = store
        self.processor = processor if processor is not None else DocumentProcessor()
        self.engine = engine if engine is not None else RetrievalEngine()

    @classmethod
    def from_config(cls, config: Optional[AppConfig] = None) -> "KnowledgeBase":
        """Build a knowledge base backed by a JSON file store and open it."""
        config = config or AppConfig()
        store = DocumentStore(
            JSONFileStore(Path(config.storage.directory)),
            key=config.storage.key,
        )
        segmenter = SectionSegmenter(
            page_estimation=config.segmentation.page_estimation,
            max_keywords=config.segmentation.max_keywords,
            keyword_resample_interval=config.segmentation.keyword_resample_interval,
            max_header_length=config.segmentation.max_header_length,
        )
        processor = DocumentProcessor(
            segmenter=segmenter,
            line_tolerance=config.extraction.line_tolerance,
            line_breaks=config.extraction.line_breaks,
            on_file_error=config.ingestion.on_file_error,
        )
        kb = cls(store, processor=processor, engine=RetrievalEngine(config.retrieval))
        kb.open()
        return kb

    # ─── Lifecycle ────────────────────────────────────────────────────

    def open(self) -> "KnowledgeBase":
        self.store.open()
        return self

    def close(self) -> None:
        self.store.close()

    def __enter__(self) -> "KnowledgeBase":
        return self.open()

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    # ─── Ingestion ────────────────────────────────────────────────────

    def ingest(
        self,
        files: Sequence[UploadedFile],
        progress_callback: Optional[ProgressCallback] = None,
    ) -> List[ProcessedDocument]:
        """Process a batch of uploaded files and store the results.

        Args:
            files: Uploaded files in the order they should be processed.
            progress_callback: Receives the batch progress in percent.

        Returns:
            The newly created documents.

        Raises:
            FileExtractionError: A file failed and the batch was aborted.
                Nothing from the batch is stored.
            BatchIngestionError: Some files failed; the rest were stored.
        """
        try:
            documents = self.processor.process(files, progress_callback)
        except BatchIngestionError as e:
            if e.documents:
                self.store.add(e.documents)
            raise

        self.store.add(documents)
        return documents

    def ingest_paths(
        self,
        paths: Iterable[Union[str, Path]],
        progress_callback: Optional[ProgressCallback] = None,
    ) -> List[ProcessedDocument]:
        """Ingest PDF files, expanding directories recursively."""
        return self.ingest(collect_files(paths), progress_callback)

    # ─── Retrieval ────────────────────────────────────────────────────

    def search(self, query: str) -> str:
        """Return the context block for a query, or "" if nothing matches."""
        return self.engine.search(query, self.store.documents)

    def rank(self, query: str) -> List[SectionMatch]:
        return self.engine.rank(query, self.store.documents)

    # ─── Management ───────────────────────────────────────────────────

    def delete_document(self, doc_id: str) -> bool:
        return self.store.delete_by_id(doc_id)

    def clear(self) -> None:
        self.store.clear_all()

    @property
    def documents(self) -> List[ProcessedDocument]:
        return self.store.documents

    def get_document(self, doc_id: str) -> Optional[ProcessedDocument]:
        return self.store.get(doc_id)

    @property
    def supported_formats(self) -> List[str]:
        return list(PDFPageSource.supported_extensions)

    def __len__(self): return len(self.store)
    def __repr__(self): return f"KnowledgeBase(documents={len(self)})"


def collect_files(paths: Iterable[Union[str, Path]]) -> List[UploadedFile]:
    """Turn file and directory paths into UploadedFiles, in a stable order."""
    files = []
    for path in paths:
        path = Path(path)
        if path.is_dir():
            found = sorted(
                f for f in path.rglob("*")
                if f.is_file() and f.suffix.lower() in PDFPageSource.supported_extensions
            )
            logger.info("Found %d PDF files in %s", len(found), path)
            files.extend(UploadedFile.from_path(f) for f in found)
        else:
            files.append(UploadedFile.from_path(path))
    return files
