"""Page text sources for supported file formats."""

from .base import PageTextSource, TextFragment, UploadedFile
from .pdf_parser import PDFPageSource

__all__ = [
    "PageTextSource",
    "PDFPageSource",
    "TextFragment",
    "UploadedFile",
]
