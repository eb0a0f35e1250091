"""
Static bearer-token authentication for ingestion endpoints.
"""

import hmac
from typing import Optional
from fastapi import Header, Request
import logging

from .config import Settings
from .exceptions import AuthError

logger = logging.getLogger(__name__)


def verify_bearer_token(authorization: Optional[str], secret: Optional[str]) -> None:
    """
    Check an ``Authorization`` header against the configured secret.

    Args:
        authorization: Raw header value, e.g. ``"Bearer s3cret"``
        secret: Configured ingestion password

    Raises:
        AuthError: If the secret is unset, or the header is missing or wrong
    """
    if not secret or not authorization:
        logger.warning("Rejected request without bearer token")
        raise AuthError()

    expected = f"Bearer {secret}"
    if not hmac.compare_digest(authorization.encode("utf-8"), expected.encode("utf-8")):
        logger.warning("Rejected request with invalid bearer token")
        raise AuthError()


async def require_enrich_token(
    request: Request,
    authorization: Optional[str] = Header(default=None),
) -> None:
    """Dependency guarding ingestion endpoints."""
    settings: Settings = request.app.state.settings
    verify_bearer_token(authorization, settings.enrich_password)
