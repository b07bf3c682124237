"""
ApiClient - HTTP client for the zkpay service
"""

import logging
import secrets
import string
from typing import Any

import httpx

from zkpay.config import SdkConfig
from zkpay.exceptions import ApiError, RequestTimeoutError
from zkpay.types import BackendErrorResponse

logger = logging.getLogger(__name__)

_REQUEST_ID_ALPHABET = string.ascii_lowercase + string.digits


class ApiClient:
    """
    Client for the zkpay REST API.

    Non-2xx responses, timeouts and transport failures are raised as
    :class:`ApiError` (timeouts as :class:`RequestTimeoutError`).
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: int | None = None,
        headers: dict[str, str] | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """
        Initialize API client.

        Args:
            base_url: Service base URL, defaults to SdkConfig.BASE_API_URL
            timeout: Request timeout in milliseconds
            headers: Extra default headers
            http_client: Pre-configured httpx.AsyncClient (not closed by us)
        """
        self._base_url = (base_url or SdkConfig.get_base_url()).rstrip("/")
        self._timeout = timeout if timeout is not None else SdkConfig.DEFAULT_TIMEOUT_MS
        self._headers = {"Content-Type": "application/json", **(headers or {})}
        self._http_client = http_client
        self._owns_client = http_client is None

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def timeout(self) -> int:
        return self._timeout

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client"""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self._timeout / 1000)
        return self._http_client

    async def aclose(self) -> None:
        """Close HTTP client if owned"""
        if self._http_client is not None and self._owns_client:
            await self._http_client.aclose()
            self._http_client = None

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def request(
        self,
        method: str,
        endpoint: str,
        *,
        json: Any = None,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        """
        Make an API request.

        Args:
            method: HTTP method
            endpoint: Path relative to the base URL
            json: JSON body
            params: Query parameters
            headers: Per-request headers, merged over the defaults

        Returns:
            Decoded JSON, or the text body for non-JSON responses

        Raises:
            ApiError: If the request fails
        """
        request_id = self._generate_request_id()
        method = method.upper()
        logger.debug(f"[API] {method} {endpoint} [Request ID: {request_id}]")

        try:
            response = await self._get_client().request(
                method,
                f"{self._base_url}{endpoint}",
                json=json,
                params=params,
                headers={**self._headers, **(headers or {})},
                timeout=self._timeout / 1000,
            )
        except httpx.TimeoutException as e:
            raise RequestTimeoutError(self._timeout, request_id=request_id) from e
        except httpx.HTTPError as e:
            raise ApiError(
                str(e) or "Network request failed",
                error_type="NetworkError",
                request_id=request_id,
            ) from e

        if response.is_error:
            error = self._parse_error_response(response)
            raise ApiError(
                error.message or "API request failed",
                status_code=error.status_code,
                error_type=error.error,
                request_id=request_id,
            )

        return self._parse_response(response)

    async def get(self, endpoint: str, **kwargs: Any) -> Any:
        return await self.request("GET", endpoint, **kwargs)

    async def post(self, endpoint: str, body: Any = None, **kwargs: Any) -> Any:
        return await self.request("POST", endpoint, json=body, **kwargs)

    async def put(self, endpoint: str, body: Any = None, **kwargs: Any) -> Any:
        return await self.request("PUT", endpoint, json=body, **kwargs)

    async def delete(self, endpoint: str, **kwargs: Any) -> Any:
        return await self.request("DELETE", endpoint, **kwargs)

    @staticmethod
    def _parse_response(response: httpx.Response) -> Any:
        content_type = response.headers.get("content-type", "")
        if "application/json" in content_type:
            return response.json()
        return response.text

    @staticmethod
    def _parse_error_response(response: httpx.Response) -> BackendErrorResponse:
        try:
            data = response.json()
            if not isinstance(data, dict):
                raise ValueError("error body is not an object")
            message = data.get("message")
            # Validation errors carry one message per failed constraint
            if isinstance(message, list):
                message = "; ".join(str(m) for m in message)
            return BackendErrorResponse(
                message=message or response.reason_phrase,
                error=data.get("error") or "Unknown Error",
                statusCode=data.get("statusCode") or response.status_code,
            )
        except ValueError:
            return BackendErrorResponse(
                message=response.reason_phrase,
                error="Request Failed",
                statusCode=response.status_code,
            )

    @staticmethod
    def _generate_request_id() -> str:
        return "".join(secrets.choice(_REQUEST_ID_ALPHABET) for _ in range(7))
