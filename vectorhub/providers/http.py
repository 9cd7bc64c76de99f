"""Shared aiohttp plumbing for HTTP-based provider adapters."""

from typing import Any, Dict, Optional

import aiohttp

from ..config.logging import LoggerMixin
from ..core.exceptions import ProviderConnectionError, ProviderError
from .errors import classify_exception, classify_http_error


class ProviderHttpClient(LoggerMixin):
    """JSON-over-HTTP client owned by one provider adapter.

    The ``aiohttp`` session is created lazily on first use, so adapters can be
    constructed outside a running event loop. Every failure leaves this class
    as a ``ProviderError``.
    """

    def __init__(
        self,
        provider: str,
        base_url: str,
        headers: Optional[Dict[str, str]] = None,
        request_timeout: float = 600.0,
        list_timeout: float = 5.0,
    ):
        self.provider = provider
        self.base_url = base_url.rstrip("/")
        self.headers = dict(headers or {})
        self.request_timeout = request_timeout
        self.list_timeout = list_timeout
        self._session: Optional[aiohttp.ClientSession] = None

    def url(self, path: str) -> str:
        """Absolute URL for an API path."""
        return f"{self.base_url}/{path.lstrip('/')}"

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(headers=self.headers)
        return self._session

    async def get_json(
        self,
        path: str,
        timeout: Optional[float] = None,
        model_name: Optional[str] = None,
    ) -> Any:
        """GET a JSON document, using the listing timeout unless overridden."""
        return await self._request(
            "GET", path, None, timeout or self.list_timeout, model_name
        )

    async def post_json(
        self,
        path: str,
        payload: Dict[str, Any],
        timeout: Optional[float] = None,
        model_name: Optional[str] = None,
    ) -> Any:
        """POST a JSON payload and decode the JSON reply."""
        return await self._request(
            "POST", path, payload, timeout or self.request_timeout, model_name
        )

    async def _request(
        self,
        method: str,
        path: str,
        payload: Optional[Dict[str, Any]],
        timeout: float,
        model_name: Optional[str],
    ) -> Any:
        url = self.url(path)
        operation = f"{method} {path}"

        try:
            session = await self._get_session()
            async with session.request(
                method,
                url,
                json=payload,
                timeout=aiohttp.ClientTimeout(total=timeout),
            ) as response:
                if response.status >= 300:
                    body = await response.text()
                    raise classify_http_error(
                        self.provider,
                        response.status,
                        body,
                        model_name,
                        response.headers.get("Retry-After"),
                    )

                data = await response.json(content_type=None)
                if data is None:
                    raise ProviderConnectionError(
                        self.provider, f"Empty response body from {operation}", model_name
                    )

                self.logger.debug(
                    "Provider request completed",
                    provider=self.provider,
                    method=method,
                    path=path,
                    status=response.status,
                )
                return data

        except ProviderError as e:
            self.logger.warning(
                "Provider request failed",
                provider=self.provider,
                operation=operation,
                error_code=e.error_code,
                error=e.message,
            )
            raise
        except Exception as e:
            error = classify_exception(self.provider, e, model_name, operation)
            self.logger.warning(
                "Provider request failed",
                provider=self.provider,
                operation=operation,
                error_code=error.error_code,
                error=error.message,
            )
            raise error from e

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        if self._session is not None:
            await self._session.close()
            self._session = None

    async def __aenter__(self) -> "ProviderHttpClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
