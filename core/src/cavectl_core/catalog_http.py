"""HTTP transport layer for the catalog API"""

from __future__ import annotations
from typing import Any, Optional, Dict
import httpx
import logging
import time

logger = logging.getLogger(__name__)


class CatalogApiError(RuntimeError):
    """Exception raised when the catalog API returns an error."""

    def __init__(self, status_code: int, message: str, payload: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload

    def __str__(self) -> str:
        return f"CatalogApiError({self.status_code}): {super().__str__()}"


class CatalogHttp:
    """Low-level HTTP client for the catalog API with consistent error handling."""

    DEFAULT_BASE_URL = "https://api.itch.io"

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout_s: float = 30.0,
        retries: int = 3,
        rate_limit_s: float = 0.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        if not api_key:
            raise ValueError("API key is required")

        self.base_url = base_url.rstrip("/")
        self.retries = retries
        self.rate_limit_s = rate_limit_s
        self._last_request_time: float = 0.0

        self.client = httpx.Client(
            base_url=self.base_url,
            headers={
                "Authorization": f"Bearer {api_key}",
                "Accept": "application/json",
            },
            timeout=httpx.Timeout(timeout_s),
            transport=transport or httpx.HTTPTransport(retries=retries),
        )

        logger.debug(f"CatalogHttp initialized with base_url={self.base_url}")

    def close(self) -> None:
        """Close the HTTP client."""
        self.client.close()

    def __enter__(self) -> "CatalogHttp":
        return self

    def __exit__(self, *args) -> None:
        self.close()

    def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """
        Make an HTTP request to the catalog API.

        Args:
            method: HTTP method (GET, POST, PUT, DELETE)
            path: API endpoint path (e.g., "/games/42")
            params: Query parameters
            json: JSON body payload

        Returns:
            Parsed JSON response or None for empty responses

        Raises:
            CatalogApiError: On HTTP 4xx/5xx responses or network errors
        """
        if not path.startswith("/"):
            path = f"/{path}"

        if self.rate_limit_s > 0:
            elapsed = time.time() - self._last_request_time
            if elapsed < self.rate_limit_s:
                sleep_time = self.rate_limit_s - elapsed
                logger.debug(f"Rate limiting: sleeping {sleep_time:.2f}s")
                time.sleep(sleep_time)

        logger.debug(f"API Request: {method} {path}")
        self._last_request_time = time.time()

        # Retry 429s with exponential backoff
        max_retries = 5
        for attempt in range(max_retries):
            try:
                response = self.client.request(
                    method,
                    path,
                    params=params,
                    json=json,
                )
            except httpx.RequestError as e:
                logger.error(f"Request failed: {method} {path} - {e}")
                raise CatalogApiError(0, f"Network error: {e}") from e

            if response.status_code == 429 and attempt < max_retries - 1:
                wait_time = (2 ** attempt) + 1  # 2, 3, 5, 9 seconds
                logger.warning(f"Rate limited (429), retrying in {wait_time}s... ({attempt + 1}/{max_retries})")
                time.sleep(wait_time)
                continue

            if response.status_code >= 400:
                error_msg = self._extract_error_message(response)
                logger.error(f"API Error: {method} {path} -> {response.status_code}: {error_msg}")
                raise CatalogApiError(
                    status_code=response.status_code,
                    message=f"{method} {path} failed: {error_msg}",
                    payload=self._safe_json(response),
                )

            break

        if not response.content:
            return None

        try:
            data = response.json()
        except ValueError:
            return response.text

        # errors can also come back with a 200
        if isinstance(data, dict) and data.get("errors"):
            error_msg = self._extract_error_message(response)
            logger.error(f"API Error: {method} {path} -> {error_msg}")
            raise CatalogApiError(
                status_code=response.status_code,
                message=f"{method} {path} failed: {error_msg}",
                payload=data,
            )

        return data

    def _extract_error_message(self, response: httpx.Response) -> str:
        """Extract error message from response."""
        try:
            data = response.json()
        except ValueError:
            return response.text or f"HTTP {response.status_code}"

        if isinstance(data, dict):
            # the catalog reports errors as a list under "errors"
            errors = data.get("errors")
            if isinstance(errors, list) and errors:
                return "; ".join(str(e) for e in errors)
            return (
                data.get("error") or
                data.get("message") or
                data.get("detail") or
                response.text
            )
        return response.text

    def _safe_json(self, response: httpx.Response) -> Optional[Dict[str, Any]]:
        """Safely parse JSON from response."""
        try:
            v = response.json()
        except ValueError:
            return None
        return v if isinstance(v, dict) else {"data": v}

    # Convenience methods
    def get(self, path: str, **kwargs) -> Any:
        return self.request("GET", path, **kwargs)

    def post(self, path: str, **kwargs) -> Any:
        return self.request("POST", path, **kwargs)
