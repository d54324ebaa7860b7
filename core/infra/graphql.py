"""
Shopify Admin GraphQL client.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Mapping, Optional

from ..errors import APIError, ConfigError
from ..settings import Settings
from .http import HttpClient

logger = logging.getLogger(__name__)


class GraphQLClient:
    """Issues one query + variables pair against the Admin API."""

    def __init__(
        self,
        shop: str,
        access_token: str,
        *,
        api_version: str = "2024-07",
        http: Optional[HttpClient] = None,
        timeout: float = 30.0,
    ) -> None:
        self.shop = shop
        self.api_version = api_version
        self._token = access_token
        self._http = http or HttpClient(timeout=timeout)

    @classmethod
    def from_settings(cls, settings: Settings, http: Optional[HttpClient] = None) -> "GraphQLClient":
        return cls(
            settings.shop,
            settings.admin_token,
            api_version=settings.api_version,
            http=http,
            timeout=settings.http_timeout,
        )

    @property
    def endpoint(self) -> str:
        return f"https://{self.shop}/admin/api/{self.api_version}/graphql.json"

    async def __aenter__(self) -> "GraphQLClient":
        return self

    async def __aexit__(self, *_) -> None:
        await self.close()

    async def close(self) -> None:
        await self._http.close()

    async def execute(self, document: str, variables: Mapping[str, Any]) -> Dict[str, Any]:
        """Run ``document`` and return the response's ``data`` member.

        Raises:
            ConfigError: shop domain or access token not configured.
            TransportError: network failure or non-2xx response.
            APIError: the response envelope carries ``errors``.
        """
        if not self.shop or not self._token:
            raise ConfigError("Missing SHOPIFY_SHOP or SHOPIFY_ADMIN_TOKEN")

        logger.debug("Executing GraphQL query (%d chars) vars=%s", len(document), dict(variables))
        payload = {"query": document, "variables": dict(variables)}
        result = await self._http.post_json(
            self.endpoint,
            payload,
            headers={
                "Content-Type": "application/json",
                "X-Shopify-Access-Token": self._token,
            },
        )

        if not isinstance(result, dict):
            raise APIError(f"Unexpected GraphQL response: {result!r}")
        if result.get("errors"):
            raise APIError(json.dumps(result["errors"]), errors=result["errors"])

        return result.get("data") or {}
