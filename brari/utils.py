"""
Utility functions for the Brari Backend.
"""

import functools
import inspect
import re
import time
from typing import Dict, Any, Optional
from datetime import datetime, timezone
import logging

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

DOCS_KEY_PREFIX = "docs:"
UNKNOWN_AUTHOR = "Unknown Author"

_UNSAFE_KEY_CHARS = re.compile(r"[^a-z0-9]")


def format_timestamp() -> str:
    """Get current timestamp in ISO format."""
    return datetime.now(timezone.utc).isoformat()


def measure_time(func):
    """Decorator to measure function execution time.

    Works for both plain functions and coroutine functions.
    """
    if inspect.iscoroutinefunction(func):
        @functools.wraps(func)
        async def async_wrapper(*args, **kwargs):
            start_time = time.time()
            try:
                return await func(*args, **kwargs)
            finally:
                execution_time = time.time() - start_time
                logger.info(f"{func.__name__} executed in {execution_time:.2f} seconds")
        return async_wrapper

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        start_time = time.time()
        try:
            return func(*args, **kwargs)
        finally:
            execution_time = time.time() - start_time
            logger.info(f"{func.__name__} executed in {execution_time:.2f} seconds")
    return wrapper


def sanitize_title(title: str) -> str:
    """
    Turn a document title into a store-safe base name.

    The title is lower-cased and every character outside ``[a-z0-9]`` is
    replaced with ``_``.
    """
    return _UNSAFE_KEY_CHARS.sub("_", title.lower())


def build_store_key(base_name: str, index: int = 0) -> str:
    """Build ``docs:<base>.json`` or ``docs:<base>_<index>.json``."""
    if index:
        return f"{DOCS_KEY_PREFIX}{base_name}_{index}.json"
    return f"{DOCS_KEY_PREFIX}{base_name}.json"


def display_author(author: Optional[str]) -> str:
    """Author as shown to users."""
    return author or UNKNOWN_AUTHOR


def log_processing_info(operation: str, details: Dict[str, Any]) -> None:
    """Log processing information."""
    logger.info(f"{operation}: {details}")


def handle_processing_error(operation: str, error: Exception, context: Dict[str, Any] = None) -> Dict[str, Any]:
    """Handle and log processing errors."""
    error_info = {
        'operation': operation,
        'error_type': type(error).__name__,
        'error_message': str(error),
        'timestamp': format_timestamp()
    }

    if context:
        error_info.update(context)

    logger.error(f"Processing error: {error_info}")
    return error_info
