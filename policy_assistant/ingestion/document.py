from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List


class ExtractionQuality(str, Enum):
    """Coarse confidence signal for how cleanly text was recovered."""
    POOR = "poor"
    FAIR = "fair"
    GOOD = "good"
    EXCELLENT = "excellent"

    @property
    def rank(self) -> int:
        return _QUALITY_ORDER.index(self)


_QUALITY_ORDER = [
    ExtractionQuality.POOR,
    ExtractionQuality.FAIR,
    ExtractionQuality.GOOD,
    ExtractionQuality.EXCELLENT,
]


@dataclass
class DocumentMetadata:
    """Metadata for a processed document."""
    page_count: int
    word_count: int
    file_size: int
    extraction_quality: ExtractionQuality

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pageCount": self.page_count,
            "wordCount": self.word_count,
            "fileSize": self.file_size,
            "extractionQuality": self.extraction_quality.value,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DocumentMetadata":
        return cls(
            page_count=int(data["pageCount"]),
            word_count=int(data["wordCount"]),
            file_size=int(data["fileSize"]),
            extraction_quality=ExtractionQuality(data["extractionQuality"]),
        )


@dataclass
class DocumentSection:
    """A titled, contiguous span of a document: the unit of retrieval."""
    title: str
    content: str = ""
    page_numbers: List[int] = field(default_factory=list)
    keywords: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "content": self.content,
            "pageNumbers": list(self.page_numbers),
            "keywords": list(self.keywords),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DocumentSection":
        return cls(
            title=data["title"],
            content=data.get("content", ""),
            page_numbers=[int(p) for p in data.get("pageNumbers", [])],
            keywords=list(data.get("keywords", [])),
        )


@dataclass
class ProcessedDocument:
    """Represents an ingested document with its sections and metadata."""
    id: str
    name: str
    content: str
    sections: List[DocumentSection]
    metadata: DocumentMetadata
    uploaded_at: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc)
    )

    def __len__(self):
        return len(self.content)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to a JSON-compatible dict with an ISO-8601 timestamp."""
        return {
            "id": self.id,
            "name": self.name,
            "content": self.content,
            "sections": [s.to_dict() for s in self.sections],
            "metadata": self.metadata.to_dict(),
            "uploadedAt": self.uploaded_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProcessedDocument":
        """Rebuild a document, turning the timestamp string back into a datetime."""
        return cls(
            id=str(data["id"]),
            name=data["name"],
            content=data.get("content", ""),
            sections=[DocumentSection.from_dict(s) for s in data.get("sections", [])],
            metadata=DocumentMetadata.from_dict(data["metadata"]),
            uploaded_at=_parse_timestamp(data["uploadedAt"]),
        )


def _parse_timestamp(value: str) -> datetime:
    # JavaScript-style "Z" suffix is not accepted by fromisoformat before 3.11
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)
