"""
Services package for the Brari Backend.
"""

from .pdf_processor import PDFProcessor
from .title_service import TitleService
from .document_store import DocumentStore
from .ingestion_service import IngestionService
from .chat_service import ChatService

__all__ = [
    "PDFProcessor",
    "TitleService",
    "DocumentStore",
    "IngestionService",
    "ChatService"
]
