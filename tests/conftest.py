"""Shared pytest fixtures and in-memory fakes for all test suites."""

import asyncio
from fnmatch import fnmatch
from typing import Any

import pytest
from langchain_core.messages import AIMessageChunk

from brari.config import Settings
from brari.models import DocumentTitle


class FakeRedis:
    """In-memory stand-in for the async Redis client used by DocumentStore."""

    def __init__(
        self,
        data: dict[str, str] | None = None,
        fail_exists_after: int | None = None,
        fail_set: bool = False,
        acknowledge: bool = True,
    ) -> None:
        self.data = dict(data or {})
        self.fail_exists_after = fail_exists_after
        self.fail_set = fail_set
        self.acknowledge = acknowledge
        self.exists_calls: list[str] = []
        self.set_calls: list[tuple[str, str]] = []

    async def exists(self, key: str) -> int:
        self.exists_calls.append(key)
        if self.fail_exists_after is not None and len(self.exists_calls) > self.fail_exists_after:
            raise ConnectionError("store unavailable")
        return int(key in self.data)

    async def set(self, key: str, value: str) -> bool:
        self.set_calls.append((key, value))
        if self.fail_set:
            raise ConnectionError("store unavailable")
        if not self.acknowledge:
            return False
        self.data[key] = value
        return True

    async def get(self, key: str) -> str | None:
        return self.data.get(key)

    async def scan_iter(self, match: str | None = None):
        for key in list(self.data):
            if match is None or fnmatch(key, match):
                yield key

    async def ping(self) -> bool:
        return True

    async def aclose(self) -> None:
        return None


class FakeTitleService:
    """Title service returning a fixed guess."""

    def __init__(
        self,
        title: str = "A Tale of Two Cities",
        author: str = "Charles Dickens",
        error: Exception | None = None,
        delay: float = 0.0,
    ) -> None:
        self.title = title
        self.author = author
        self.error = error
        self.delay = delay
        self.calls: list[str] = []

    async def infer(self, text: str) -> DocumentTitle:
        self.calls.append(text)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return DocumentTitle(title=self.title, author=self.author)


class FakeChatModel:
    """Streaming chat model that replies with fixed text, word by word."""

    def __init__(
        self,
        reply: str = "Hello there reader",
        usage: dict[str, Any] | None = None,
        error: Exception | None = None,
        delay: float = 0.0,
    ) -> None:
        self.reply = reply
        self.usage = usage or {"input_tokens": 1200, "output_tokens": 30, "total_tokens": 1230}
        self.error = error
        self.delay = delay
        self.calls: list[list[Any]] = []

    async def astream(self, messages: list[Any]):
        self.calls.append(messages)
        if self.error is not None:
            raise self.error
        words = self.reply.split(" ")
        for index, word in enumerate(words):
            text = word if index == len(words) - 1 else word + " "
            yield AIMessageChunk(content=text)
            if self.delay:
                await asyncio.sleep(self.delay)
        yield AIMessageChunk(content="", usage_metadata=self.usage)


@pytest.fixture
def settings() -> Settings:
    """Settings with test secrets and no streaming delay."""
    return Settings(
        enrich_password="secret",
        google_api_key="test-key",
        stream_delay_ms=0,
        redis_url="redis://localhost:6379/15",
    )


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
def fake_title_service() -> FakeTitleService:
    return FakeTitleService()


@pytest.fixture
def fake_chat_model() -> FakeChatModel:
    return FakeChatModel()
