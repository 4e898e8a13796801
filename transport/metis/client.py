"""
Metis Gateway HTTP Client

Authenticated JSON requests against the Metis API base.
No retries. No caching. No business logic.

Every outbound call carries:
- Authorization: Bearer <api key>
- X-Metis-Client / User-Agent identification headers

Transport failures are wrapped in UpstreamFailure with the
original message preserved; nothing else is caught here.
"""

import logging
from typing import Any, Optional
from urllib.parse import quote

import httpx

from config import Config

from .errors import UpstreamFailure

logger = logging.getLogger(__name__)


def encode_path_segment(value: str) -> str:
    """Percent-encode a single path segment, slashes included."""
    return quote(str(value), safe="")


class MetisClient:
    """
    Thin async client for the Metis gateway.

    Usage:
        client = MetisClient(api_key="tpsg-...")
        meta = await client.request("GET", "/api/v1/meta")
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        client_id: Optional[str] = None,
        user_agent: Optional[str] = None,
    ):
        self._api_key = api_key if api_key is not None else Config.METIS_API_KEY
        self.base_url = (base_url or Config.METIS_BASE_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else Config.METIS_HTTP_TIMEOUT_S
        self.client_id = client_id or Config.METIS_CLIENT_ID
        self.user_agent = user_agent or Config.METIS_USER_AGENT

    def _build_headers(self) -> dict:
        """Auth + identification headers. The key itself is never logged."""
        authorization = self._api_key
        if authorization and not authorization.lower().startswith("bearer "):
            authorization = f"Bearer {authorization}"
        return {
            "Authorization": authorization,
            "X-Metis-Client": self.client_id,
            "User-Agent": self.user_agent,
            "Accept": "application/json",
        }

    async def request(
        self,
        method: str,
        path: str,
        body: Any = None,
        params: Optional[dict] = None,
    ) -> Any:
        """
        Send one JSON request and return the decoded response body.

        Args:
            method: HTTP method
            path: Path under the API base, starting with "/"
            body: JSON-serializable request body (omitted when None)
            params: Query string parameters

        Returns:
            Decoded JSON body, or {} for an empty response

        Raises:
            UpstreamFailure: Network error, non-2xx status or undecodable body
        """
        url = f"{self.base_url}{path}"
        logger.debug(f"Metis request: {method} {path}")

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.request(
                    method,
                    url,
                    json=body,
                    params=params,
                    headers=self._build_headers(),
                )
                response.raise_for_status()

        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            error_text = e.response.text
            logger.error(
                f"Metis API error: {status_code} on {method} {path}",
                extra={
                    "status_code": status_code,
                    "error_body": error_text,
                }
            )
            raise UpstreamFailure(
                f"Metis API returned {status_code}: {error_text}",
                status_code=status_code,
            ) from e

        except httpx.RequestError as e:
            logger.error(
                f"HTTP request failed: {e}",
                exc_info=True,
                extra={"path": path, "error": str(e)},
            )
            raise UpstreamFailure(f"HTTP request failed: {e}") from e

        if not response.content:
            return {}

        try:
            return response.json()
        except ValueError as e:
            raise UpstreamFailure(f"Metis API returned a non-JSON body on {method} {path}") from e

    async def verify_credentials(self) -> dict:
        """Fetch the account behind the configured key (credential test)."""
        return await self.request("GET", "/api/v1/user/me")
