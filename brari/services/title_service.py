"""
Title and author inference using the language model.
"""

from typing import Any
from langchain_core.messages import HumanMessage
from langchain_google_genai import ChatGoogleGenerativeAI

from ..config import Settings
from ..exceptions import UpstreamServiceError
from ..models import DocumentTitle
from ..utils import (
    measure_time,
    log_processing_info,
    handle_processing_error
)
import logging

logger = logging.getLogger(__name__)

TITLE_PROMPT = (
    "Based on the following document content, provide a clear and specific title of the book, "
    "article, or document. It should reflect the actual title of the document, even if the title "
    "is not immediately clear from the text. For instance, if the text is 'It was the best of "
    "times, it was the worst of times...' You can infer the title is 'A Tale of Two Cities'. "
    "If the title is explicitly mentioned, use that. Also do your best to infer the author of the "
    "document, even if it is not explicitly mentioned. If it is unknown, return 'Unknown Author'. "
    ":\n\n{sample}..."
)


class TitleService:
    """Service for guessing a document's title and author."""

    def __init__(self, settings: Settings, llm: Any = None):
        """
        Initialize the title service.

        Args:
            settings: Application settings
            llm: Chat model supporting ``with_structured_output``; built from
                settings when omitted
        """
        self.settings = settings
        self.llm = llm if llm is not None else self._initialize_llm()
        self.structured_llm = self.llm.with_structured_output(DocumentTitle)

    def _initialize_llm(self) -> ChatGoogleGenerativeAI:
        """Initialize the language model."""
        llm = ChatGoogleGenerativeAI(
            model=self.settings.google_title_model,
            api_key=self.settings.google_api_key,
            temperature=self.settings.google_temperature
        )

        log_processing_info("Title LLM initialized", {
            "model": self.settings.google_title_model
        })

        return llm

    def build_prompt(self, text: str) -> str:
        """Build the inference prompt from the opening of the document."""
        sample = text[:self.settings.title_sample_chars]
        return TITLE_PROMPT.format(sample=sample)

    @measure_time
    async def infer(self, text: str) -> DocumentTitle:
        """
        Infer title and author from document text.

        Raises:
            UpstreamServiceError: If the model call fails or returns nothing usable
        """
        prompt = self.build_prompt(text)

        try:
            result = await self.structured_llm.ainvoke([HumanMessage(content=prompt)])
        except Exception as e:
            handle_processing_error("title_inference", e, {"text_length": len(text)})
            raise UpstreamServiceError(str(e) or "Title inference failed")

        if isinstance(result, dict):
            result = DocumentTitle(**result)
        if not isinstance(result, DocumentTitle) or not result.title:
            raise UpstreamServiceError("Title inference returned no title")

        log_processing_info("Title inferred", {
            "title": result.title,
            "author": result.author
        })
        return result
