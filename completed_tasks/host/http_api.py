"""
Logseq HTTP API host for Completed Tasks.

This module talks to the local HTTP API server of the desktop application.
Every call is a POST to <api_url>/api with a bearer token and a JSON body
naming the API method and its positional arguments, e.g.

    {"method": "logseq.Editor.getBlock", "args": ["<uuid>"]}

The HTTP API does not push change notifications; events are delivered by
whoever drives this host through emit_changed().
"""

import logging
from typing import Any, Dict, Mapping, Optional

import httpx

from ..models import Block, UserConfigs
from .base import BaseHost, HostAPIError


class LogseqAPIHost(BaseHost):
    """
    Host binding over the Logseq local HTTP API.
    """

    def __init__(self, api_url: str = "http://127.0.0.1:12315", api_token: str = "",
                 timeout: float = 10.0, client: Optional[httpx.AsyncClient] = None):
        """
        Initialize the HTTP API host.

        Args:
            api_url: Base URL of the API server
            api_token: Token configured in the API server settings
            timeout: Request timeout in seconds
            client: Optional preconfigured client (used by tests)
        """
        super().__init__()
        self.api_url = api_url.rstrip("/")
        self.api_token = api_token
        self.client = client or httpx.AsyncClient(timeout=timeout)

        logging.info(f"Initialized Logseq API host for: {self.api_url}")

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.client.aclose()

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_token:
            headers["Authorization"] = f"Bearer {self.api_token}"
        return headers

    async def call(self, method: str, *args: Any) -> Any:
        """
        Invoke an API method.

        Args:
            method: Fully qualified method name (e.g. "logseq.Editor.getBlock")
            *args: Positional arguments of the method

        Returns:
            The decoded JSON result (None for methods without a result)

        Raises:
            HostAPIError: On transport errors, HTTP errors or API error payloads
        """
        payload = {"method": method, "args": list(args)}

        try:
            response = await self.client.post(
                f"{self.api_url}/api",
                json=payload,
                headers=self._headers()
            )
        except httpx.HTTPError as e:
            raise HostAPIError(f"{method} failed: {e}") from e

        if response.status_code >= 400:
            raise HostAPIError(
                f"{method} failed with HTTP {response.status_code}: {response.text}",
                status_code=response.status_code
            )

        if not response.content:
            return None

        try:
            result = response.json()
        except ValueError as e:
            raise HostAPIError(f"{method} returned invalid JSON: {e}",
                               status_code=response.status_code) from e

        if isinstance(result, dict) and set(result.keys()) == {"error"}:
            raise HostAPIError(f"{method} failed: {result['error']}",
                               status_code=response.status_code)

        return result

    async def get_user_configs(self) -> UserConfigs:
        result = await self.call("logseq.App.getUserConfigs")
        return UserConfigs.model_validate(result or {})

    async def get_current_block(self) -> Optional[Block]:
        result = await self.call("logseq.Editor.getCurrentBlock")
        return Block.model_validate(result) if result else None

    async def get_block(self, uuid: str) -> Optional[Block]:
        result = await self.call("logseq.Editor.getBlock", uuid)
        return Block.model_validate(result) if result else None

    async def update_block(self, uuid: str, content: str,
                           properties: Mapping[str, Any]) -> None:
        await self.call("logseq.Editor.updateBlock", uuid, content,
                        {"properties": dict(properties)})

    async def insert_block(self, anchor_uuid: str, content: str,
                           before: bool = False, sibling: bool = False) -> Optional[Block]:
        options: Dict[str, Any] = {"before": before, "sibling": sibling}

        result = await self.call("logseq.Editor.insertBlock", anchor_uuid, content, options)
        return Block.model_validate(result) if result else None
