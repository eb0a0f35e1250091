"""
Ingestion service that turns extracted document text into a stored record.
"""

import asyncio
from typing import Any

from .document_store import DocumentStore
from .title_service import TitleService
from ..config import Settings
from ..exceptions import BrariError, IngestionError, ValidationError
from ..models import DocumentRecord
from ..utils import (
    sanitize_title,
    measure_time,
    log_processing_info,
    handle_processing_error
)
import logging

logger = logging.getLogger(__name__)


class IngestionService:
    """Coordinates title inference, key allocation and persistence."""

    def __init__(self, settings: Settings, store: DocumentStore, title_service: TitleService):
        self.settings = settings
        self.store = store
        self.title_service = title_service

    @staticmethod
    def validate_text(text: Any) -> str:
        if not isinstance(text, str) or not text:
            raise ValidationError("No text provided")
        return text

    @measure_time
    async def ingest(self, text: Any) -> DocumentRecord:
        """
        Infer a title, allocate a key and store the document.

        Steps run strictly in order and nothing is written unless every
        earlier step succeeded.

        Args:
            text: Extracted document text

        Returns:
            The stored DocumentRecord

        Raises:
            ValidationError: If text is missing or empty
            IngestionError: If any later step fails
        """
        text = self.validate_text(text)
        timeout = self.settings.ingest_timeout_seconds
        loop = asyncio.get_running_loop()
        started = loop.time()

        try:
            return await asyncio.wait_for(self._run_pipeline(text), timeout=timeout)
        except Exception as e:
            handle_processing_error("document_ingestion", e, {"text_length": len(text)})
            # A step's own TimeoutError keeps its message; only the budget gets the generic one
            budget_expired = (
                isinstance(e.__cause__, asyncio.CancelledError)
                or loop.time() - started >= timeout
            )
            if isinstance(e, asyncio.TimeoutError) and budget_expired:
                raise IngestionError("Document processing timed out")
            message = e.message if isinstance(e, BrariError) else str(e)
            raise IngestionError(message or "Unknown error")

    async def _run_pipeline(self, text: str) -> DocumentRecord:
        log_processing_info("Document ingestion started", {"text_length": len(text)})

        guess = await self.title_service.infer(text)
        base_name = sanitize_title(guess.title)
        store_key = await self.store.allocate_key(base_name)

        record = DocumentRecord(
            title=guess.title,
            text=text,
            author=guess.author,
            source_link="",
            store_key=store_key
        )
        await self.store.save(record)

        log_processing_info("Document ingestion completed", {
            "title": record.title,
            "author": record.author,
            "key": record.store_key
        })
        return record
