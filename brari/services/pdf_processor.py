"""
PDF processing service for extracting text from PDF files.
"""

import PyPDF2
from io import BytesIO
from typing import List

from ..config import Settings
from ..exceptions import ValidationError
from ..utils import (
    measure_time,
    log_processing_info,
    handle_processing_error
)
import logging

logger = logging.getLogger(__name__)


class PDFProcessor:
    """Service for processing PDF files and extracting text."""

    def __init__(self, settings: Settings):
        """Initialize the PDF processor."""
        self.settings = settings

    def validate_upload(self, file_content: bytes, filename: str) -> None:
        """
        Validate an uploaded file before extraction.

        Raises:
            ValidationError: If the type, size or content is not acceptable
        """
        if not filename:
            raise ValidationError("No file provided")

        file_extension = filename.lower().rsplit('.', 1)[-1] if '.' in filename else ''
        if file_extension not in self.settings.allowed_file_types:
            raise ValidationError(f"Invalid file type: {filename}. Only PDF files are allowed.")

        if not file_content:
            raise ValidationError(f"Empty file content for {filename}")

        max_size = self.settings.max_file_size_mb * 1024 * 1024
        if len(file_content) > max_size:
            raise ValidationError(
                f"File {filename} is too large: {len(file_content)/1024/1024:.1f}MB. "
                f"Maximum size is {self.settings.max_file_size_mb}MB."
            )

    def extract_pages(self, file_content: bytes, filename: str) -> List[str]:
        """
        Extract the text of every page, in order.

        Args:
            file_content: PDF file content as bytes
            filename: Name of the PDF file

        Returns:
            One trimmed string per page (empty for pages without text)
        """
        try:
            pdf_reader = PyPDF2.PdfReader(BytesIO(file_content))
        except Exception as e:
            handle_processing_error("pdf_open", e, {"filename": filename})
            raise ValidationError(f"Could not read PDF {filename}")

        total_pages = len(pdf_reader.pages)
        log_processing_info("PDF extraction started", {
            "filename": filename,
            "total_pages": total_pages,
            "file_size": len(file_content)
        })

        pages = []
        for page_num, page in enumerate(pdf_reader.pages):
            try:
                page_text = page.extract_text() or ""
            except Exception as page_error:
                error_info = handle_processing_error(
                    "page_extraction",
                    page_error,
                    {"filename": filename, "page": page_num + 1}
                )
                logger.warning(f"Skipping page {page_num + 1}: {error_info}")
                page_text = ""
            pages.append(page_text.strip())

        return pages

    @measure_time
    def extract_text(self, file_content: bytes, filename: str) -> str:
        """
        Extract the whole document as one string.

        Pages are joined with blank lines and the result is trimmed.

        Raises:
            ValidationError: If no text could be extracted
        """
        pages = self.extract_pages(file_content, filename)
        text = "\n\n".join(pages).strip()

        log_processing_info("PDF extraction completed", {
            "filename": filename,
            "total_pages": len(pages),
            "text_length": len(text)
        })

        if not text:
            raise ValidationError(f"No text could be extracted from {filename}")
        return text
