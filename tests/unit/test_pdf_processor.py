"""Unit tests for PDF validation and text extraction."""

from io import BytesIO

import PyPDF2
import pytest

from brari.config import Settings
from brari.exceptions import ValidationError
from brari.services.pdf_processor import PDFProcessor


def _blank_pdf(pages: int = 1) -> bytes:
    writer = PyPDF2.PdfWriter()
    for _ in range(pages):
        writer.add_blank_page(width=72, height=72)
    buffer = BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


class _FakePage:
    def __init__(self, text: str | None = None, error: Exception | None = None) -> None:
        self.text = text
        self.error = error

    def extract_text(self) -> str | None:
        if self.error is not None:
            raise self.error
        return self.text


class _FakeReader:
    def __init__(self, pages: list[_FakePage]) -> None:
        self.pages = pages


@pytest.fixture
def processor(settings: Settings) -> PDFProcessor:
    return PDFProcessor(settings)


def test_validate_upload_accepts_pdf(processor: PDFProcessor) -> None:
    """Test a PDF within limits passes validation."""
    processor.validate_upload(b"%PDF-1.4", "Book.PDF")


@pytest.mark.parametrize(
    ("content", "filename", "message"),
    [
        (b"%PDF-1.4", "", "No file provided"),
        (b"%PDF-1.4", "notes.txt", "Invalid file type"),
        (b"%PDF-1.4", "noextension", "Invalid file type"),
        (b"", "book.pdf", "Empty file content"),
    ],
)
def test_validate_upload_rejects_bad_files(processor: PDFProcessor, content: bytes, filename: str, message: str) -> None:
    """Test wrong type, missing name and empty files are rejected."""
    with pytest.raises(ValidationError) as exc_info:
        processor.validate_upload(content, filename)

    assert message in exc_info.value.message
    assert exc_info.value.status_code == 400


def test_validate_upload_rejects_large_files(settings: Settings) -> None:
    """Test files over the configured size limit are rejected."""
    processor = PDFProcessor(settings.model_copy(update={"max_file_size_mb": 1}))

    with pytest.raises(ValidationError) as exc_info:
        processor.validate_upload(b"x" * (1024 * 1024 + 1), "big.pdf")

    assert "too large" in exc_info.value.message


def test_extract_text_joins_pages_with_blank_lines(processor: PDFProcessor, monkeypatch: pytest.MonkeyPatch) -> None:
    """Test page texts are trimmed, kept in order and joined by blank lines."""
    pages = [_FakePage("  Chapter 1  "), _FakePage(None), _FakePage(error=RuntimeError("bad page")), _FakePage("Chapter 2\n")]
    monkeypatch.setattr(PyPDF2, "PdfReader", lambda stream: _FakeReader(pages))

    text = processor.extract_text(b"%PDF", "book.pdf")

    assert text == "Chapter 1\n\n\n\n\n\nChapter 2"


def test_extract_text_rejects_pdf_without_text(processor: PDFProcessor) -> None:
    """Test a PDF with only blank pages is rejected."""
    with pytest.raises(ValidationError) as exc_info:
        processor.extract_text(_blank_pdf(2), "blank.pdf")

    assert "No text could be extracted" in exc_info.value.message


def test_extract_pages_counts_blank_pages(processor: PDFProcessor) -> None:
    """Test every page is returned even without text."""
    assert processor.extract_pages(_blank_pdf(3), "blank.pdf") == ["", "", ""]


def test_extract_text_rejects_unreadable_pdf(processor: PDFProcessor) -> None:
    """Test bytes that are not a PDF raise a validation error."""
    with pytest.raises(ValidationError) as exc_info:
        processor.extract_text(b"definitely not a pdf", "broken.pdf")

    assert "Could not read PDF" in exc_info.value.message
