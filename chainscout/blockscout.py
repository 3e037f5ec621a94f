"""HTTP client for the Blockscout v2 REST API.

Each method performs exactly one GET request. Failures are mapped onto the
data service error taxonomy in ``chainscout.errors``; no retries or caching.
"""

import logging
from typing import Any, Dict, Optional

import httpx

from .errors import (
    DataServiceError,
    NotFound,
    RateLimited,
    TransientNetworkError,
    UpstreamError,
)

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://eth.blockscout.com/api/v2/"


class BlockscoutClient:
    """Thin request/response wrapper around the explorer API."""

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        if not base_url.endswith("/"):
            base_url += "/"
        self.base_url = base_url
        self.client = httpx.Client(
            base_url=base_url,
            timeout=timeout,
            headers={"Accept": "application/json"},
            transport=transport,
        )

    def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """GET ``path`` relative to the base URL and return the decoded JSON."""
        path = path.lstrip("/")
        logger.debug("GET %s%s params=%s", self.base_url, path, params)
        try:
            response = self.client.get(path, params=params)
        except httpx.TransportError as e:
            raise TransientNetworkError(f"Network error for {path}: {e}") from e

        logger.debug("GET %s -> %d", path, response.status_code)
        status = response.status_code
        if status == 404:
            raise NotFound(path)
        if status == 429:
            logger.error("Rate limit exceeded")
            raise RateLimited(path)
        if not 200 <= status < 300:
            raise UpstreamError(status, path)

        try:
            return response.json()
        except ValueError as e:
            raise DataServiceError(f"Malformed response for {path}") from e

    # -- Endpoints ----------------------------------------------------------

    def address(self, address_hash: str) -> dict:
        return self.get(f"addresses/{address_hash}")

    def address_transactions(self, address_hash: str) -> dict:
        return self.get(f"addresses/{address_hash}/transactions")

    def address_token_balances(self, address_hash: str) -> list:
        return self.get(f"addresses/{address_hash}/token-balances")

    def token(self, address_hash: str) -> dict:
        return self.get(f"tokens/{address_hash}")

    def transaction(self, transaction_hash: str) -> dict:
        return self.get(f"transactions/{transaction_hash}")

    def blocks(self) -> dict:
        return self.get("blocks")

    def search(self, query: str) -> dict:
        return self.get("search", params={"q": query})

    def stats(self) -> dict:
        return self.get("stats")

    def close(self) -> None:
        self.client.close()

    def __enter__(self) -> "BlockscoutClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
