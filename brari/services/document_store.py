"""
Redis-backed document store.

Records live under ``docs:<base>[_<n>].json`` keys as JSON strings. Keys are
allocated by probing for the first unused suffix; the probe and the final
write are separate commands, so two concurrent ingestions of the same title
can still race for one key.
"""

from typing import Any, Dict, List, Optional
import redis.asyncio as redis

from ..config import Settings
from ..exceptions import StoreError
from ..models import DocumentRecord
from ..utils import (
    DOCS_KEY_PREFIX,
    build_store_key,
    log_processing_info,
    handle_processing_error
)
import logging

logger = logging.getLogger(__name__)


class DocumentStore:
    """Key-value persistence for document records."""

    def __init__(self, client: Any):
        """
        Initialize the document store.

        Args:
            client: An async Redis client (``redis.asyncio.Redis``) or any
                object with the same ``exists``/``get``/``set``/``scan_iter``
                coroutine interface
        """
        self.client = client

    @classmethod
    def from_settings(cls, settings: Settings) -> "DocumentStore":
        client = redis.from_url(settings.redis_url, decode_responses=True)
        return cls(client)

    async def exists(self, key: str) -> bool:
        return bool(await self.client.exists(key))

    async def allocate_key(self, base_name: str) -> str:
        """
        Find an unused key for ``base_name``.

        Tries ``docs:<base>.json`` then ``docs:<base>_1.json``,
        ``docs:<base>_2.json`` and so on. If the store cannot be checked the
        last computed key is returned as is.
        """
        base_name = base_name.removesuffix(".json")
        index = 0
        key = build_store_key(base_name, index)

        try:
            while await self.exists(key):
                index += 1
                key = build_store_key(base_name, index)
        except Exception as e:
            handle_processing_error("key_existence_check", e, {"key": key})

        log_processing_info("Store key allocated", {"base_name": base_name, "key": key})
        return key

    async def save(self, record: DocumentRecord) -> None:
        """
        Persist a record under its store key.

        Raises:
            StoreError: If the write fails or is not acknowledged
        """
        try:
            acknowledged = await self.client.set(record.store_key, record.to_json())
        except Exception as e:
            handle_processing_error("document_save", e, {"key": record.store_key})
            raise StoreError(f"Failed to store document: {e}")

        if not acknowledged:
            raise StoreError(f"Store did not acknowledge write for {record.store_key}")

        log_processing_info("Document stored", {
            "key": record.store_key,
            "text_length": len(record.text)
        })

    async def get(self, key: str) -> Optional[DocumentRecord]:
        raw = await self.client.get(key)
        if raw is None:
            return None
        return DocumentRecord.model_validate_json(raw)

    async def list_records(self) -> List[DocumentRecord]:
        """Load every stored record, ordered by key."""
        keys = []
        async for key in self.client.scan_iter(match=f"{DOCS_KEY_PREFIX}*"):
            keys.append(key.decode("utf-8") if isinstance(key, bytes) else key)

        records = []
        for key in sorted(keys):
            try:
                record = await self.get(key)
            except ValueError as e:
                handle_processing_error("document_load", e, {"key": key})
                continue
            if record is not None:
                records.append(record)
        return records

    async def health_check(self) -> Dict[str, Any]:
        try:
            await self.client.ping()
            return {"status": "healthy"}
        except Exception as e:
            handle_processing_error("store_health_check", e)
            return {"status": "unhealthy", "error": str(e)}
