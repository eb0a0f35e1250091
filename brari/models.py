"""
Pydantic models for request/response validation.
"""

from typing import List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field

from .utils import display_author


class DocumentTitle(BaseModel):
    """Structured title/author guess returned by the language model."""
    title: str = Field(..., description="A clear, specific title for the document")
    author: str = Field(..., description="The author of the document")


class DocumentRecord(BaseModel):
    """A stored book or document."""
    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(..., description="Inferred display title")
    text: str = Field(..., description="Full extracted document text")
    author: Optional[str] = Field(default=None, description="Inferred author")
    source_link: str = Field(default="", alias="sourceLink", description="Reserved reference link")
    store_key: str = Field(..., alias="storeKey", description="Key the record is stored under")

    @property
    def display_author(self) -> str:
        return display_author(self.author)

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)


class EnrichResponse(BaseModel):
    """Response model for text ingestion."""
    text: str = Field(..., description="Stored document text")
    title: str = Field(..., description="Inferred title")
    author: Optional[str] = Field(default=None, description="Inferred author")


class UploadResult(BaseModel):
    """Outcome of one uploaded file."""
    model_config = ConfigDict(populate_by_name=True)

    filename: str = Field(..., description="Name of the uploaded file")
    status: Literal["success", "error"] = Field(..., description="Processing status")
    title: Optional[str] = Field(default=None, description="Inferred title")
    author: Optional[str] = Field(default=None, description="Inferred author")
    store_key: Optional[str] = Field(default=None, alias="storeKey", description="Key the record is stored under")
    error: Optional[str] = Field(default=None, description="Error message if any")


class UploadResponse(BaseModel):
    """Response model for PDF upload."""
    results: List[UploadResult] = Field(default_factory=list, description="One result per file, in upload order")
    files_processed: int = Field(..., description="Number of files stored")


class DocumentSummary(BaseModel):
    """A stored document as listed to clients."""
    model_config = ConfigDict(populate_by_name=True)

    title: str
    author: str
    text: str
    store_key: str = Field(..., alias="storeKey")


class DocumentListResponse(BaseModel):
    """Response model for listing stored documents."""
    documents: List[DocumentSummary] = Field(default_factory=list)
    total_count: int = Field(..., description="Number of stored documents")


class Attachment(BaseModel):
    """File attached to a chat message."""
    url: str
    name: Optional[str] = None
    content_type: Optional[str] = Field(default=None, alias="contentType")


class ChatMessage(BaseModel):
    """A single chat message."""
    content: str
    role: Literal["user", "assistant", "system"]
    experimental_attachments: Optional[List[Attachment]] = None


class BenefitsDocument(BaseModel):
    """A document sent by the client as chat context."""
    model_config = ConfigDict(populate_by_name=True)

    document_title: str = Field(..., alias="documentTitle")
    document_context: str = Field(..., alias="documentContext")


class ChatRequest(BaseModel):
    """Request model for chat."""
    model_config = ConfigDict(populate_by_name=True)

    messages: List[ChatMessage]
    benefits_data: List[BenefitsDocument] = Field(default_factory=list, alias="benefitsData")


class HealthResponse(BaseModel):
    """Response model for health check."""
    status: str = Field(..., description="Health status")
    message: str = Field(..., description="Status message")
    version: str = Field(..., description="Application version")
    timestamp: str = Field(..., description="Current timestamp")


class ErrorResponse(BaseModel):
    """Response model for errors."""
    error: str = Field(..., description="Error message")
