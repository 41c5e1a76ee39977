"""Off-ledger document store on IPFS.

Documents are fetched through an HTTP gateway and published through the
IPFS HTTP API. Paths are IPFS paths as stored on chain, e.g.
``/ipfs/QmHash/registration.json``; they are appended to the gateway URL.
"""

from __future__ import annotations

import abc
import asyncio
import json
import logging
from typing import Any, Optional

import aiohttp

from clrscan.errors import DocumentUnavailable


logger = logging.getLogger(__name__)


def gateway_url(gateway: str, path: str) -> str:
    """Join a gateway base URL and an IPFS path."""
    if not path:
        return ""
    if not path.startswith("/"):
        path = "/" + path
    return gateway.rstrip("/") + path


class DocumentStore(abc.ABC):
    """Fetch-by-reference JSON store."""

    @abc.abstractmethod
    async def fetch_json(self, path: str) -> Any:
        """Return the JSON document at ``path``."""

    @abc.abstractmethod
    async def publish_json(self, document: Any) -> str:
        """Store ``document`` and return its content hash."""


class IpfsDocumentStore(DocumentStore):
    """DocumentStore over an IPFS gateway (reads) and IPFS API (writes)."""

    def __init__(
        self,
        gateway: str,
        api_url: Optional[str] = None,
        timeout_seconds: float = 30,
    ) -> None:
        self.gateway = gateway
        self.api_url = api_url
        self._timeout = aiohttp.ClientTimeout(total=timeout_seconds)

    async def fetch_json(self, path: str) -> Any:
        url = gateway_url(self.gateway, path)
        if not url:
            raise DocumentUnavailable("Empty document path")
        logger.info("Fetching document %s", url)
        try:
            async with aiohttp.ClientSession(timeout=self._timeout) as session:
                async with session.get(url) as response:
                    response.raise_for_status()
                    return await response.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as exc:
            raise DocumentUnavailable(f"Could not fetch {url}: {exc}") from exc

    async def publish_json(self, document: Any) -> str:
        if not self.api_url:
            raise DocumentUnavailable("No IPFS API URL configured for publishing")
        url = self.api_url.rstrip("/") + "/api/v0/add"
        payload = json.dumps(document, sort_keys=True).encode("utf-8")
        form = aiohttp.FormData()
        form.add_field(
            "file", payload, filename="document.json", content_type="application/json"
        )
        try:
            async with aiohttp.ClientSession(timeout=self._timeout) as session:
                async with session.post(url, data=form) as response:
                    response.raise_for_status()
                    result = await response.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as exc:
            raise DocumentUnavailable(f"Could not publish to {url}: {exc}") from exc
        content_hash = result.get("Hash") if isinstance(result, dict) else None
        if not content_hash:
            raise DocumentUnavailable(f"IPFS API returned no hash: {result!r}")
        logger.info("Published document %s", content_hash)
        return content_hash
