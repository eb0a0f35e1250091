"""
Chat service for streaming responses grounded in the user's documents.
"""

import asyncio
import base64
import re
from typing import Any, AsyncIterator, Dict, List, Optional, Sequence
from urllib.parse import unquote_to_bytes
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage
from langchain_google_genai import ChatGoogleGenerativeAI

from ..config import Settings
from ..costs import TokenUsage, log_usage
from ..models import Attachment, BenefitsDocument, ChatMessage, ChatRequest
from ..utils import (
    log_processing_info,
    handle_processing_error
)
import logging

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a helpful bot called Brari (like library) that lets users ask questions about books. "
    "You will be given content - you should answer the questions based on the content."
)

WORD_CHUNK = re.compile(r"\S+\s+")


def build_context(documents: Sequence[BenefitsDocument], max_chars: Optional[int] = None) -> str:
    """
    Join documents into one context block.

    Each document becomes ``Document: <title>\\nContext: <text>`` and blocks
    are separated by a blank line, in input order. ``max_chars`` cuts the
    joined context; None leaves it unbounded.
    """
    context = "\n\n".join(
        f"Document: {doc.document_title}\nContext: {doc.document_context}"
        for doc in documents
    )
    if max_chars is not None and len(context) > max_chars:
        logger.warning(f"Chat context truncated from {len(context)} to {max_chars} characters")
        context = context[:max_chars]
    return context


def build_system_prompt(documents: Sequence[BenefitsDocument], max_chars: Optional[int] = None) -> str:
    context = build_context(documents, max_chars)
    return f"{SYSTEM_PROMPT}\n\n*RAW BACKGROUND CONTEXT:*\n\n{context}"


def _decode_data_url(url: str) -> Optional[str]:
    if not url.startswith("data:") or "," not in url:
        return None
    header, payload = url[5:].split(",", 1)
    if header.endswith(";base64"):
        raw = base64.b64decode(payload)
    else:
        raw = unquote_to_bytes(payload)
    return raw.decode("utf-8", errors="replace")


def _attachment_part(attachment: Attachment) -> Dict[str, Any]:
    content_type = attachment.content_type or ""
    if content_type.startswith("image/"):
        return {"type": "image_url", "image_url": {"url": attachment.url}}
    if content_type.startswith("text/"):
        text = _decode_data_url(attachment.url)
        if text is not None:
            return {"type": "text", "text": text}
    return {"type": "text", "text": f"[Attachment: {attachment.name or attachment.url}]"}


def to_langchain_messages(system_prompt: str, messages: Sequence[ChatMessage]) -> List[BaseMessage]:
    """Convert the system prompt and client messages to LangChain messages."""
    converted: List[BaseMessage] = [SystemMessage(content=system_prompt)]

    for message in messages:
        if message.role == "system":
            converted.append(SystemMessage(content=message.content))
        elif message.role == "assistant":
            converted.append(AIMessage(content=message.content))
        elif message.experimental_attachments:
            parts = [{"type": "text", "text": message.content}] if message.content else []
            parts.extend(_attachment_part(a) for a in message.experimental_attachments)
            converted.append(HumanMessage(content=parts))
        else:
            converted.append(HumanMessage(content=message.content))

    return converted


def _chunk_text(chunk: Any) -> str:
    content = getattr(chunk, "content", "")
    if isinstance(content, str):
        return content
    pieces = []
    for part in content or []:
        if isinstance(part, str):
            pieces.append(part)
        elif isinstance(part, dict) and part.get("type") == "text":
            pieces.append(part.get("text", ""))
    return "".join(pieces)


async def smooth_stream(chunks: AsyncIterator[str], delay_seconds: float = 0.0) -> AsyncIterator[str]:
    """
    Re-chunk a text stream into whole words with trailing whitespace.

    Waits ``delay_seconds`` after each word. Text left in the buffer when the
    source ends is emitted as a final chunk.
    """
    buffer = ""
    async for text in chunks:
        buffer += text
        match = WORD_CHUNK.search(buffer)
        while match:
            word = buffer[:match.end()]
            buffer = buffer[match.end():]
            yield word
            if delay_seconds:
                await asyncio.sleep(delay_seconds)
            match = WORD_CHUNK.search(buffer)

    if buffer:
        yield buffer


async def with_deadline(stream: AsyncIterator[str], timeout: float) -> AsyncIterator[str]:
    """Pass items through until ``timeout`` seconds have elapsed in total."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    iterator = stream.__aiter__()

    while True:
        remaining = deadline - loop.time()
        if remaining <= 0:
            raise asyncio.TimeoutError()
        try:
            item = await asyncio.wait_for(iterator.__anext__(), remaining)
        except StopAsyncIteration:
            return
        yield item


class ChatService:
    """Service for generating streamed chat responses using LLM."""

    def __init__(self, settings: Settings, llm: Any = None):
        """
        Initialize the chat service.

        Args:
            settings: Application settings
            llm: Streaming chat model; built from settings when omitted
        """
        self.settings = settings
        self.llm = llm if llm is not None else self._initialize_llm()

    def _initialize_llm(self) -> ChatGoogleGenerativeAI:
        """Initialize the language model."""
        llm = ChatGoogleGenerativeAI(
            model=self.settings.google_chat_model,
            api_key=self.settings.google_api_key,
            temperature=self.settings.google_temperature
        )

        log_processing_info("Chat LLM initialized", {
            "model": self.settings.google_chat_model,
            "temperature": self.settings.google_temperature
        })

        return llm

    def build_messages(self, request: ChatRequest) -> List[BaseMessage]:
        system_prompt = build_system_prompt(request.benefits_data, self.settings.max_context_chars)
        return to_langchain_messages(system_prompt, request.messages)

    async def stream_response(self, request: ChatRequest) -> AsyncIterator[str]:
        """
        Stream the model's answer word by word.

        Token usage of the generation is logged with an estimated cost once
        the stream ends. A response is a single generation step (no tool
        calls), so the combined usage of its chunks is that step's usage.
        """
        messages = self.build_messages(request)
        log_processing_info("Chat request started", {
            "documents_count": len(request.benefits_data),
            "messages_count": len(request.messages),
            "system_prompt_length": len(messages[0].content)
        })

        aggregate = None

        async def model_text() -> AsyncIterator[str]:
            nonlocal aggregate
            async for chunk in self.llm.astream(messages):
                aggregate = chunk if aggregate is None else aggregate + chunk
                text = _chunk_text(chunk)
                if text:
                    yield text

        delay_seconds = self.settings.stream_delay_ms / 1000
        smoothed = smooth_stream(model_text(), delay_seconds)

        try:
            async for word in with_deadline(smoothed, self.settings.chat_timeout_seconds):
                yield word
        except asyncio.TimeoutError:
            logger.warning(
                f"Chat stream exceeded {self.settings.chat_timeout_seconds}s budget; stopping"
            )
        except Exception as e:
            handle_processing_error("chat_stream", e, {"messages_count": len(request.messages)})
            raise
        finally:
            if aggregate is not None:
                usage = TokenUsage.from_usage_metadata(getattr(aggregate, "usage_metadata", None))
                log_usage(self.settings.cost_model, usage)
