"""
Application configuration with Pydantic validation.

Typed, validated configuration models with defaults and value
constraints, so bad configuration is caught at start-up.

Usage:
    config = AppConfig.from_yaml("configs/config.yaml")
    config = AppConfig()  # Uses defaults
"""

from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field

from .utils.logger import get_logger

logger = get_logger(__name__)


class ExtractionConfig(BaseModel):
    """Configuration for page text reconstruction."""
    line_tolerance: float = Field(
        default=5.0, gt=0.0, le=100.0,
        description="Vertical distance under which fragments share a line.",
    )
    line_breaks: bool = Field(
        default=True,
        description="Break reconstructed page text at visual line changes.",
    )


class SegmentationConfig(BaseModel):
    """Configuration for section segmentation."""
    page_estimation: Literal["proportional", "tracked"] = Field(
        default="proportional",
        description="How section page numbers are estimated.",
    )
    max_keywords: int = Field(
        default=20, ge=1, le=200,
        description="Maximum keywords taken from one extraction.",
    )
    keyword_resample_interval: int = Field(
        default=500, ge=1,
        description="Content length multiple at which keywords are resampled.",
    )
    max_header_length: int = Field(
        default=100, ge=10, le=1000,
        description="Lines at least this long are never headers.",
    )


class IngestionConfig(BaseModel):
    """Configuration for batch ingestion."""
    on_file_error: Literal["continue", "abort"] = Field(
        default="continue",
        description="Skip a failing file and go on, or abort the batch.",
    )


class RetrievalConfig(BaseModel):
    """Configuration for lexical section retrieval."""
    title_weight: int = Field(default=50, ge=0, description="Score for a term in the title.")
    content_weight: int = Field(default=10, ge=0, description="Score per term occurrence in content.")
    keyword_weight: int = Field(default=25, ge=0, description="Score for a term in the keywords.")
    min_term_length: int = Field(
        default=2, ge=0,
        description="Query tokens must be longer than this.",
    )
    min_sentence_length: int = Field(
        default=20, ge=0,
        description="Excerpt sentences must be longer than this.",
    )
    max_sentences: int = Field(default=3, ge=1, le=20, description="Sentences per excerpt.")
    top_k: int = Field(default=5, ge=1, le=50, description="Sections in the context block.")


class StorageConfig(BaseModel):
    """Configuration for document persistence."""
    directory: str = Field(
        default="data/store",
        description="Directory holding the JSON document store.",
    )
    key: str = Field(
        default="company_documents_ai",
        min_length=1,
        description="Storage key of the document collection.",
    )


class WebConfig(BaseModel):
    """Configuration for the web interface."""
    host: str = Field(default="127.0.0.1", description="Server host.")
    port: int = Field(default=5000, ge=1024, le=65535, description="Server port.")
    debug: bool = Field(default=False, description="Flask debug mode.")
    max_upload_mb: int = Field(default=50, ge=1, le=500, description="Max upload size in MB.")


class AppConfig(BaseModel):
    """Root application configuration.

    Aggregates all sub-configurations and provides factory
    methods for loading from and saving to YAML.
    """
    extraction: ExtractionConfig = Field(default_factory=ExtractionConfig)
    segmentation: SegmentationConfig = Field(default_factory=SegmentationConfig)
    ingestion: IngestionConfig = Field(default_factory=IngestionConfig)
    retrieval: RetrievalConfig = Field(default_factory=RetrievalConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    web: WebConfig = Field(default_factory=WebConfig)

    @classmethod
    def from_yaml(cls, path: str | Path) -> "AppConfig":
        """Load configuration from a YAML file.

        Missing keys use defaults. Extra keys are ignored.
        Invalid values raise ValidationError with details.
        """
        path = Path(path)
        if not path.exists():
            logger.warning(
                "Config file not found: %s. Using defaults.", path
            )
            return cls()

        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}

        config = cls(**raw)
        logger.info("Loaded configuration from %s", path)
        return config

    def to_yaml(self, path: str | Path) -> None:
        """Save configuration to a YAML file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            yaml.dump(
                self.model_dump(), f,
                default_flow_style=False, sort_keys=False,
            )
        logger.info("Saved configuration to %s", path)
