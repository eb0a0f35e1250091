"""
FastAPI application for the Brari Backend.
"""

from contextlib import asynccontextmanager
from typing import List, Optional
from fastapi import FastAPI, File, UploadFile, Depends, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, StreamingResponse
import logging

from .auth import require_enrich_token
from .config import Settings, get_settings, validate_required_settings
from .exceptions import BrariError, ValidationError
from .models import (
    ChatRequest, DocumentListResponse, DocumentSummary, EnrichResponse,
    ErrorResponse, HealthResponse, UploadResponse, UploadResult
)
from .services import ChatService, DocumentStore, IngestionService, PDFProcessor, TitleService
from .utils import format_timestamp, handle_processing_error

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

CHAT_ERROR_MESSAGE = "Failed to process chat request"
MAX_UPLOAD_FILES = 10


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=message).model_dump()
    )


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[DocumentStore] = None,
    title_service: Optional[TitleService] = None,
    chat_service: Optional[ChatService] = None,
) -> FastAPI:
    """
    Build the application.

    Collaborators that are not passed in are created at startup from
    settings.
    """
    settings = settings or get_settings()
    owns_store = store is None

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        state = app.state
        if state.title_service is None or state.chat_service is None:
            try:
                validate_required_settings(settings)
            except ValueError as e:
                logger.error(f"Configuration validation failed: {e}")
                raise
        if state.store is None:
            state.store = DocumentStore.from_settings(settings)
        if state.title_service is None:
            state.title_service = TitleService(settings)
        if state.chat_service is None:
            state.chat_service = ChatService(settings)
        state.ingestion_service = IngestionService(settings, state.store, state.title_service)
        logger.info("Services initialized.")

        yield

        if owns_store:
            await state.store.client.aclose()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="A document-grounded chat assistant for your books",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan
    )

    app.state.settings = settings
    app.state.store = store
    app.state.title_service = title_service
    app.state.chat_service = chat_service
    app.state.pdf_processor = PDFProcessor(settings)
    app.state.ingestion_service = (
        IngestionService(settings, store, title_service)
        if store is not None and title_service is not None else None
    )

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(BrariError)
    async def brari_exception_handler(request: Request, exc: BrariError):
        return _error_response(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        logger.warning(f"Request validation failed: {exc.errors()}")
        return _error_response(400, "Invalid request")

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Global exception handler."""
        logger.error(f"Unhandled exception: {str(exc)}")
        return _error_response(500, str(exc) if settings.debug else "Internal server error")

    @app.get("/", response_model=dict)
    async def root():
        """Root endpoint."""
        return {
            "message": "Brari API is running",
            "version": settings.app_version,
            "timestamp": format_timestamp()
        }

    @app.get("/health", response_model=HealthResponse)
    async def health_check(request: Request):
        """Store connectivity check."""
        store_health = await request.app.state.store.health_check()
        return HealthResponse(
            status=store_health.get("status", "unknown"),
            message="Service health check completed",
            version=settings.app_version,
            timestamp=format_timestamp()
        )

    @app.post("/api/enrich", response_model=EnrichResponse, dependencies=[Depends(require_enrich_token)])
    async def enrich(request: Request):
        """
        Store extracted document text.

        Infers title and author, allocates a unique store key and persists
        the record.
        """
        try:
            body = await request.json()
        except ValueError:
            body = None
        text = body.get("text") if isinstance(body, dict) else None

        record = await request.app.state.ingestion_service.ingest(text)

        return EnrichResponse(
            text=record.text,
            title=record.title,
            author=record.author
        )

    @app.post("/upload-pdf", response_model=UploadResponse, dependencies=[Depends(require_enrich_token)])
    async def upload_pdf(request: Request, files: List[UploadFile] = File(...)):
        """
        Upload PDFs, extract their text and store each one.

        Files are processed in memory, in order, and not kept. A failing file
        gets an error result and does not stop the others.
        """
        if not files:
            raise ValidationError("No files provided")

        if len(files) > MAX_UPLOAD_FILES:
            raise ValidationError(f"Too many files. Maximum {MAX_UPLOAD_FILES} files allowed.")

        pdf_processor: PDFProcessor = request.app.state.pdf_processor
        ingestion_service: IngestionService = request.app.state.ingestion_service
        results = []

        for file in files:
            filename = file.filename or ""
            try:
                content = await file.read()
                pdf_processor.validate_upload(content, filename)
                text = await run_in_threadpool(pdf_processor.extract_text, content, filename)
                record = await ingestion_service.ingest(text)
            except BrariError as e:
                logger.warning(f"Upload of {filename} failed: {e.message}")
                results.append(UploadResult(filename=filename, status="error", error=e.message))
                continue

            results.append(UploadResult(
                filename=filename,
                status="success",
                title=record.title,
                author=record.author,
                store_key=record.store_key
            ))

        return UploadResponse(
            results=results,
            files_processed=sum(1 for result in results if result.status == "success")
        )

    @app.get("/documents", response_model=DocumentListResponse)
    async def list_documents(request: Request):
        """List stored documents for the chat context."""
        records = await request.app.state.store.list_records()
        documents = [
            DocumentSummary(
                title=record.title,
                author=record.display_author,
                text=record.text,
                store_key=record.store_key
            )
            for record in records
        ]
        return DocumentListResponse(documents=documents, total_count=len(documents))

    @app.post("/api/chat-web")
    async def chat(request: Request):
        """Stream an answer grounded in the supplied documents."""
        try:
            body = await request.json()
            chat_request = ChatRequest.model_validate(body)
            stream = request.app.state.chat_service.stream_response(chat_request)
            first_chunk = await anext(stream, None)
        except Exception as e:
            handle_processing_error("chat_request", e)
            return _error_response(500, CHAT_ERROR_MESSAGE)

        async def body_iterator():
            if first_chunk is None:
                return
            yield first_chunk
            async for chunk in stream:
                yield chunk

        return StreamingResponse(body_iterator(), media_type="text/plain; charset=utf-8")

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "brari.main:app",
        host="0.0.0.0",
        port=8000,
        reload=get_settings().debug
    )
