"""
Planning Center API client.

Performs a single authenticated GET against a list endpoint and returns the
JSON:API `data` array. Only the first page is ever requested.
"""

from typing import Optional

import httpx

from .errors import (
    BadResponseError,
    InvalidPayloadError,
    MissingCredentialsError,
    PlanningCenterRequestError,
)
from .logging_conf import get_logger

logger = get_logger(__name__)

DEFAULT_TIMEOUT = 15.0


class PlanningCenterClient:
    """
    Fetches list resources from the Planning Center API.

    Authenticates with HTTP Basic auth using an application ID / secret
    pair (a Planning Center personal access token).
    """

    def __init__(
        self,
        app_id: str,
        app_secret: str,
        timeout: float = DEFAULT_TIMEOUT,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize the client.

        Args:
            app_id: Planning Center application ID
            app_secret: Planning Center application secret
            timeout: Request timeout in seconds
            http_client: Shared client to use; the caller owns its lifecycle
        """
        self.app_id = app_id or ""
        self.app_secret = app_secret or ""
        self.timeout = timeout
        self._http_client = http_client

    @property
    def has_credentials(self) -> bool:
        return bool(self.app_id and self.app_secret)

    async def fetch(self, endpoint: str, limit: int) -> list[dict]:
        """
        Fetch one page of items from an endpoint.

        Args:
            endpoint: Full list endpoint URL
            limit: Page size, sent as `per_page`

        Returns:
            The `data` array from the response

        Raises:
            MissingCredentialsError: app ID or secret is empty
            PlanningCenterRequestError: the request itself failed
            BadResponseError: non-2xx status
            InvalidPayloadError: body is not an object with a `data` list
        """
        if not self.has_credentials:
            raise MissingCredentialsError()

        logger.debug("planning_center_fetch", endpoint=endpoint, per_page=limit)

        if self._http_client is not None:
            response = await self._get(self._http_client, endpoint, limit)
        else:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await self._get(client, endpoint, limit)

        items = self._extract_data(response)
        logger.info(
            "planning_center_fetched",
            endpoint=endpoint,
            items=len(items),
        )
        return items

    async def _get(
        self,
        client: httpx.AsyncClient,
        endpoint: str,
        limit: int,
    ) -> httpx.Response:
        try:
            return await client.get(
                endpoint,
                params={"per_page": limit},
                auth=httpx.BasicAuth(self.app_id, self.app_secret),
                timeout=self.timeout,
            )
        except httpx.HTTPError as e:
            raise PlanningCenterRequestError(
                f"Request to Planning Center failed: {e}"
            ) from e

    @staticmethod
    def _extract_data(response: httpx.Response) -> list[dict]:
        """Validate status and payload shape, return the `data` array."""
        if not 200 <= response.status_code < 300:
            raise BadResponseError(response.status_code)

        try:
            payload = response.json()
        except ValueError as e:
            raise InvalidPayloadError(body_preview=response.text[:200]) from e

        if not isinstance(payload, dict):
            raise InvalidPayloadError(body_preview=response.text[:200])

        data = payload.get("data")
        if not isinstance(data, list):
            raise InvalidPayloadError(body_preview=response.text[:200])

        return data
