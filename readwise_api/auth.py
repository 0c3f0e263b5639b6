import logging

import requests

from .client import ReadwiseClient
from .transport import DEFAULT_BASE_URL, DEFAULT_TIMEOUT

logger = logging.getLogger(__name__)


def authenticate(
    api_token: str,
    *,
    base_url: str = DEFAULT_BASE_URL,
    timeout: float = DEFAULT_TIMEOUT,
    max_read_retries: int = 0,
    retry_backoff: float = 1.0,
    session: requests.Session | None = None,
) -> ReadwiseClient:
    """Check a Readwise access token and return a client that uses it.

    The token format is not checked locally; only the server's answer counts.

    Args:
        api_token: Readwise API token
        base_url: API root
        timeout: Per-request timeout in seconds
        max_read_retries: Retries allowed for idempotent reads
        retry_backoff: Base delay in seconds between read retries
        session: Optional ``requests.Session`` to reuse

    Returns:
        A ready-to-use client

    Raises:
        UnauthorizedError: If the token is rejected (HTTP 401/403)
        ApiError: For any other failure of the handshake
    """
    client = ReadwiseClient(
        api_token,
        base_url=base_url,
        timeout=timeout,
        max_read_retries=max_read_retries,
        retry_backoff=retry_backoff,
        session=session,
    )
    client.verify_token()
    logger.debug("Authenticated %r", client)
    return client
