"""
Transport to the hosted wallet service.

All wallet components talk to the remote service through a Transport.
HttpTransport is the REST implementation on top of httpx; tests swap in
their own Transport or an httpx.MockTransport.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

import httpx
from loguru import logger

from hostwallet.errors import NetworkError

DEFAULT_API_URL = "https://test.bitgo.com/api/v1"

# Timeout for regular API calls (seconds)
DEFAULT_TIMEOUT = 30.0


class Transport(ABC):
    """
    Abstract transport interface.
    Every method returns the parsed JSON body or raises NetworkError.
    """

    @abstractmethod
    async def get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        """GET a resource"""

    @abstractmethod
    async def post(self, path: str, body: dict[str, Any] | None = None) -> Any:
        """POST a JSON body"""

    @abstractmethod
    async def delete(self, path: str) -> Any:
        """DELETE a resource"""

    async def close(self) -> None:
        """Close transport connection"""
        pass

    async def __aenter__(self) -> Transport:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()


class HttpTransport(Transport):
    """
    Transport using the service's REST API.
    Failed calls are not retried.
    """

    def __init__(
        self,
        api_url: str = DEFAULT_API_URL,
        access_token: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        client: httpx.AsyncClient | None = None,
    ):
        self.api_url = api_url.rstrip("/")
        headers = {"Authorization": f"Bearer {access_token}"} if access_token else {}
        self.client = client or httpx.AsyncClient(timeout=timeout, headers=headers)

    def url(self, path: str) -> str:
        return f"{self.api_url}/{path.lstrip('/')}"

    async def _api_call(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        data: dict[str, Any] | None = None,
    ) -> Any:
        """
        Make an API call to the wallet service.

        Raises:
            NetworkError: On timeouts, connection errors, non-2xx status codes
                and bodies that are not JSON
        """
        if method not in ("GET", "POST", "DELETE"):
            raise ValueError(f"Unsupported HTTP method: {method}")

        url = self.url(path)

        try:
            if method == "GET":
                response = await self.client.get(url, params=params)
            elif method == "POST":
                response = await self.client.post(url, json=data if data is not None else {})
            else:
                response = await self.client.delete(url)

            response.raise_for_status()
            return response.json()

        except httpx.TimeoutException as e:
            logger.error(f"API call timed out: {method} {path} - {e}")
            raise NetworkError(f"Request timed out: {method} {path}") from e
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            message = _error_message(e.response) or f"HTTP {status}"
            logger.error(f"API call failed: {method} {path} - {status} {message}")
            raise NetworkError(message, status_code=status) from e
        except httpx.HTTPError as e:
            logger.error(f"API call failed: {method} {path} - {e}")
            raise NetworkError(f"Request failed: {method} {path}") from e
        except ValueError as e:
            # json.JSONDecodeError is a ValueError
            logger.error(f"Malformed response: {method} {path} - {e}")
            raise NetworkError(f"Malformed response: {method} {path}") from e

    async def get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        return await self._api_call("GET", path, params=params)

    async def post(self, path: str, body: dict[str, Any] | None = None) -> Any:
        return await self._api_call("POST", path, data=body)

    async def delete(self, path: str) -> Any:
        return await self._api_call("DELETE", path)

    async def close(self) -> None:
        await self.client.aclose()


def _error_message(response: httpx.Response) -> str | None:
    """Pull the service's error text out of a failed response, if any."""
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        error = body.get("error") or body.get("message")
        if isinstance(error, str):
            return error
    return None
