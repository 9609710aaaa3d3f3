"""Policy Assistant - PDF policy ingestion and lexical context retrieval."""

from .config import AppConfig
from .knowledge_base import KnowledgeBase

__version__ = "0.1.0"

__all__ = [
    "AppConfig",
    "KnowledgeBase",
]
