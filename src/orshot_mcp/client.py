"""Orshot HTTP API client — timeout + retry wrapper around one shared httpx pool.

Every public method returns a :class:`~orshot_mcp.errors.RequestResult`
and never raises: transport failures, timeouts and non-2xx answers are
retried per the configured policy and then reported as a failed result.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any

import httpx

from . import __version__
from .config import ServerConfig, get_config
from .errors import OrshotAPIError, RequestResult
from .retry import with_retry

logger = logging.getLogger(__name__)

SOURCE_TAG = "orshot-mcp-server"
USER_AGENT = f"{SOURCE_TAG}/{__version__}"


def extract_error_message(response: httpx.Response) -> str:
    """Best human-readable message from an error response.

    Prefers JSON ``message`` then ``error``; falls back to the raw body,
    then to the status line.
    """
    status_line = f"HTTP {response.status_code} {response.reason_phrase}".strip()
    text = response.text
    try:
        body = json.loads(text)
    except ValueError:
        return text.strip() or status_line
    if isinstance(body, dict):
        message = body.get("message") or body.get("error")
        if message:
            return str(message)
    return text.strip() or status_line


def _as_list(payload: Any) -> list:
    return payload if isinstance(payload, list) else []


class OrshotClient:
    """Async Orshot API client with per-attempt timeout and backoff retry."""

    def __init__(
        self,
        config: ServerConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config
        self._transport = transport
        self._http: httpx.AsyncClient | None = None

    @property
    def base_url(self) -> str:
        return self.config.base_url

    def _client(self) -> httpx.AsyncClient:
        if self._http is None or self._http.is_closed:
            self._http = httpx.AsyncClient(
                base_url=self.config.base_url,
                timeout=httpx.Timeout(self.config.request_timeout),
                headers={"Content-Type": "application/json", "User-Agent": USER_AGENT},
                transport=self._transport,
            )
        return self._http

    async def aclose(self) -> None:
        """Close the underlying connection pool."""
        if self._http is not None and not self._http.is_closed:
            await self._http.aclose()
        self._http = None

    async def _attempt(
        self,
        method: str,
        path: str,
        api_key: str,
        json_body: dict | None,
        params: dict | None,
    ) -> tuple[Any, int]:
        """One bounded attempt; raises on any failure."""
        request = self._client().request(
            method,
            path,
            json=json_body,
            params=params,
            headers={"Authorization": f"Bearer {api_key}"},
        )
        response = await asyncio.wait_for(request, timeout=self.config.request_timeout)
        if not response.is_success:
            raise OrshotAPIError(response.status_code, extract_error_message(response))
        return response.json(), response.status_code

    async def request(
        self,
        method: str,
        path: str,
        *,
        api_key: str,
        json: dict | None = None,
        params: dict | None = None,
        retries: int | None = None,
    ) -> RequestResult[Any]:
        """Issue *method* *path* with timeout and retry; never raises.

        Args:
            method: HTTP method.
            path: Path relative to the configured base URL.
            api_key: Bearer token for this call.
            json: Optional JSON body.
            params: Optional query parameters.
            retries: Total attempts (defaults to ``retry_max_attempts``).

        Returns:
            RequestResult with the decoded JSON body on success, or the
            error kind, message and last status code on failure.
        """
        max_attempts = max(1, retries if retries is not None else self.config.retry_max_attempts)
        url = f"{self.config.base_url}{path}"
        attempts = 0

        def _count(attempt: int) -> None:
            nonlocal attempts
            attempts = attempt

        async def _one() -> tuple[Any, int]:
            try:
                value, status = await self._attempt(method, path, api_key, json, params)
            except OrshotAPIError as exc:
                logger.warning(
                    "API request failed on attempt %d/%d: %s %s",
                    attempts, max_attempts, method, url,
                    extra={"method": method, "url": url, "status": exc.status_code, "error": exc.message},
                )
                raise
            except (asyncio.TimeoutError, httpx.TimeoutException):
                logger.warning(
                    "Request timeout on attempt %d/%d: %s %s",
                    attempts, max_attempts, method, url,
                    extra={"method": method, "url": url, "timeout": self.config.request_timeout},
                )
                raise
            except (httpx.HTTPError, ValueError) as exc:
                logger.warning(
                    "Request failed on attempt %d/%d: %s %s",
                    attempts, max_attempts, method, url,
                    extra={"method": method, "url": url, "error": str(exc)},
                )
                raise
            logger.info(
                "API request: %s %s",
                method, url,
                extra={"method": method, "url": url, "status": status, "attempt": attempts},
            )
            return value, status

        try:
            value, status = await with_retry(
                _one,
                max_attempts=max_attempts,
                base_delay=self.config.retry_base_delay,
                max_delay=self.config.retry_max_delay,
                on_attempt=_count,
            )
        except Exception as exc:
            logger.error(
                "All retry attempts failed: %s %s",
                method, url,
                extra={"method": method, "url": url, "attempts": attempts, "error": str(exc)},
            )
            return RequestResult.failure(exc, attempts=attempts)
        return RequestResult.success(value, status_code=status, attempts=attempts)

    # ── Endpoint helpers ────────────────────────────────────────────────

    async def list_library_templates(self, api_key: str, **kwargs: Any) -> RequestResult[list]:
        result = await self.request("GET", "/v1/templates", api_key=api_key, **kwargs)
        if result.ok:
            result.value = _as_list(result.value)
        return result

    async def list_studio_templates(self, api_key: str, **kwargs: Any) -> RequestResult[list]:
        result = await self.request("GET", "/v1/studio/templates", api_key=api_key, **kwargs)
        if result.ok:
            result.value = _as_list(result.value)
        return result

    async def get_library_modifications(
        self, template_id: str, api_key: str, **kwargs: Any
    ) -> RequestResult[list]:
        result = await self.request(
            "GET",
            "/v1/templates/modifications",
            api_key=api_key,
            params={"template_id": template_id},
            **kwargs,
        )
        if result.ok:
            result.value = _as_list(result.value)
        return result

    async def get_studio_modifications(
        self, template_id: str, api_key: str, **kwargs: Any
    ) -> RequestResult[list]:
        result = await self.request(
            "GET",
            "/v1/studio/template/modifications",
            api_key=api_key,
            params={"templateId": template_id},
            **kwargs,
        )
        if result.ok:
            result.value = _as_list(result.value)
        return result

    async def render_library(self, body: dict, api_key: str) -> RequestResult[dict]:
        return await self.request("POST", "/v1/generate/images", api_key=api_key, json=body)

    async def render_studio(self, body: dict, api_key: str) -> RequestResult[dict]:
        return await self.request("POST", "/v1/studio/render", api_key=api_key, json=body)


_client: OrshotClient | None = None


def get_client() -> OrshotClient:
    """Return the process-wide client, built from :func:`get_config` on first use."""
    global _client
    if _client is None:
        _client = OrshotClient(get_config())
        logger.info("Created Orshot client", extra={"base_url": _client.base_url})
    return _client


async def close_client() -> None:
    """Close and forget the process-wide client (server lifespan shutdown)."""
    global _client
    if _client is not None:
        await _client.aclose()
    _client = None
