from pathlib import Path
from typing import List

import pymupdf

from .base import PageTextSource, TextFragment


class PDFPageSource(PageTextSource):
    """
    PyMuPDF-backed page text source.

    Every text span on a page becomes one fragment. PyMuPDF measures ``y``
    downward from the top edge, so fragments are flipped to a bottom-left
    origin using the span's lower edge.
    """

    supported_extensions = ['.pdf']

    def __init__(self, pdf_doc: pymupdf.Document):
        self._doc = pdf_doc

    @classmethod
    def from_bytes(cls, data: bytes, name: str = "document.pdf") -> "PDFPageSource":
        """Open a PDF held in memory."""
        return cls(pymupdf.open(stream=data, filetype="pdf"))

    @classmethod
    def from_path(cls, file_path: Path) -> "PDFPageSource":
        file_path = Path(file_path)
        if not file_path.exists():
            raise FileNotFoundError(f"File not found: {file_path}")
        return cls(pymupdf.open(file_path))

    @property
    def page_count(self) -> int:
        return len(self._doc)

    def page_fragments(self, page_index: int) -> List[TextFragment]:
        page = self._doc[page_index]
        page_height = page.rect.height
        fragments = []

        for block in page.get_text("dict")["blocks"]:
            # Image blocks (type 1) carry no lines
            for line in block.get("lines", []):
                for span in line["spans"]:
                    x0, y0, x1, y1 = span["bbox"]
                    fragments.append(TextFragment(
                        text=span.get("text"),
                        x=x0,
                        y=page_height - y1,
                        width=x1 - x0,
                        height=y1 - y0,
                    ))

        return fragments

    def close(self) -> None:
        self._doc.close()
