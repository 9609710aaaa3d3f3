from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional


@dataclass
class TextFragment:
    """
    A single positioned run of text on a page.

    Coordinates use a bottom-left origin: a larger ``y`` is higher on
    the page and therefore earlier in reading order.
    """
    text: Optional[str]
    x: float
    y: float
    width: float = 0.0
    height: float = 0.0


class PageTextSource(ABC):
    """Abstract page-by-page text extraction backend."""

    @property
    @abstractmethod
    def page_count(self) -> int:
        """Number of pages in the document."""
        pass

    @abstractmethod
    def page_fragments(self, page_index: int) -> List[TextFragment]:
        """
        Return the text fragments of one page, in any order.

        Args:
            page_index: Zero-based page index.

        Raises:
            Any exception if the page cannot be read.
        """
        pass

    def close(self) -> None:
        """Release the underlying document."""
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False


class UploadedFile:
    """A file handed to the ingestion pipeline: a name, a size and its bytes."""

    def __init__(self, name: str, size: int, reader: Callable[[], bytes]):
        self.name = name
        self.size = size
        self._reader = reader

    def read(self) -> bytes:
        return self._reader()

    @classmethod
    def from_path(cls, file_path: Path) -> "UploadedFile":
        file_path = Path(file_path)
        if not file_path.exists():
            raise FileNotFoundError(f"File not found: {file_path}")
        return cls(
            name=file_path.name,
            size=file_path.stat().st_size,
            reader=file_path.read_bytes,
        )

    @classmethod
    def from_bytes(cls, name: str, data: bytes) -> "UploadedFile":
        return cls(name=name, size=len(data), reader=lambda: data)

    def __repr__(self) -> str:
        return f"UploadedFile(name={self.name!r}, size={self.size})"
