import logging
from typing import Any

import requests

from .classifier import classify_exception
from .utils.credentials import mask_token

# Initialize logger for this module
logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://readwise.io/api/v2"
DEFAULT_TIMEOUT = 30.0


class Transport:
    """Performs single HTTP exchanges against the Readwise API.

    The transport attaches the access token to every request and hands back
    the raw response whatever its status. It never retries.
    """

    def __init__(
        self,
        api_token: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        session: requests.Session | None = None,
    ):
        """Initialize the transport.

        Args:
            api_token: Readwise API token
            base_url: API root, without a trailing slash
            timeout: Per-request timeout in seconds
            session: Optional session to reuse; a new one is created otherwise
        """
        self._api_token = api_token
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        logger.debug("Transport for %s, token %s", self.base_url, mask_token(api_token))

    def __repr__(self) -> str:
        return f"Transport(base_url={self.base_url!r}, token={mask_token(self._api_token)!r}, timeout={self.timeout})"

    def _auth_headers(self) -> dict[str, str]:
        # requests adds Content-Type itself when a JSON body is sent
        return {"Authorization": f"Token {self._api_token}"}

    def url_for(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def send(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        json: Any = None,
    ) -> requests.Response:
        """Send one request and return the response.

        Args:
            method: HTTP method (GET, POST, PATCH, DELETE)
            path: Path relative to the base URL
            params: Optional query parameters
            json: Optional JSON body

        Returns:
            The response, for any HTTP status

        Raises:
            RequestTimeoutError: If the request timed out
            TransportError: On any other network failure
        """
        url = self.url_for(path)
        logger.debug("%s %s params=%s", method, url, params)
        try:
            response = self.session.request(
                method,
                url,
                headers=self._auth_headers(),
                params=params,
                json=json,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error("Network error on %s %s: %s", method, url, e)
            raise classify_exception(e, path) from e

        logger.debug("%s %s -> HTTP %d", method, url, response.status_code)
        return response
