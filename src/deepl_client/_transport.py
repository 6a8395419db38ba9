"""Execute requests against the configured server with retries.

'why': keep URL rewriting, fixed headers, and failure classification behind one seam
"""
from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from functools import partial
from typing import Final

import httpx
from tenacity import AsyncRetrying, RetryCallState, stop_after_attempt, wait_exponential, wait_random

from ._errors import TransportError, URLConstructionError
from ._logging import get_logger
from ._models import TransportConfig


_logger = get_logger()

_TOO_MANY_REQUESTS: Final[int] = 429
_JITTER_RATIO: Final[float] = 0.2
_SUPPORTED_SCHEMES: Final[frozenset[str]] = frozenset({"http", "https"})


def should_retry(status_code: int, error: BaseException | None) -> bool:
    """Return True when an attempt with this outcome should be repeated.

    Network errors, 5xx, 429 and a missing status (0) are transient; every other
    status is final.
    """

    if error is not None:
        return True
    return status_code >= 500 or status_code == _TOO_MANY_REQUESTS or status_code == 0


class Transport:
    """Send relative requests to the configured server, retrying transient failures."""

    def __init__(
        self,
        config: TransportConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config: TransportConfig = config
        self._transport: httpx.AsyncBaseTransport | None = transport

    @property
    def config(self) -> TransportConfig:
        return self._config

    async def aclose(self) -> None:
        """Close the injected transport's pooled connections, if one was given."""

        if self._transport is not None:
            await self._transport.aclose()

    async def execute(self, request: httpx.Request) -> httpx.Response:
        """Send `request` and return the final response with its body read."""

        async with self.stream(request) as response:
            _ = await response.aread()
        return response

    @asynccontextmanager
    async def stream(self, request: httpx.Request) -> AsyncIterator[httpx.Response]:
        """Send `request` and yield the final response before its body is read."""

        prepared = self.prepare(request, await _request_body(request))
        _logger.debug("request start: method=%s path=%s", prepared.method, prepared.url.path)
        async with self._inner_transport() as inner:
            response = await self._send(inner, prepared)
            try:
                yield response
            finally:
                await response.aclose()

    def prepare(self, request: httpx.Request, content: bytes) -> httpx.Request:
        """Return a private copy of `request` targeting the server with fixed headers."""

        path = request.url.raw_path.split(b"?", 1)[0].decode("ascii")
        query = request.url.query.decode("ascii")
        full_url = f"{self._config.base_url}{path}?{query}"
        try:
            url = httpx.URL(full_url)
        except httpx.InvalidURL as exc:
            raise URLConstructionError(f"cannot build request URL {full_url!r}: {exc}") from exc
        if url.scheme not in _SUPPORTED_SCHEMES or not url.host:
            raise URLConstructionError(f"request URL {full_url!r} is not an absolute http(s) URL")

        headers = httpx.Headers(request.headers)
        if "host" in headers:
            del headers["host"]
        for name, value in self._config.headers.items():
            headers[name] = value

        return httpx.Request(
            request.method,
            url,
            headers=headers,
            content=content,
            extensions={"timeout": httpx.Timeout(self._config.timeout).as_dict()},
        )

    @asynccontextmanager
    async def _inner_transport(self) -> AsyncIterator[httpx.AsyncBaseTransport]:
        if self._transport is not None:
            yield self._transport
            return
        async with httpx.AsyncHTTPTransport() as inner:
            yield inner

    async def _send(self, inner: httpx.AsyncBaseTransport, request: httpx.Request) -> httpx.Response:
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self._config.max_retries + 1),
            wait=wait_exponential(multiplier=self._config.retry_backoff, max=self._config.retry_backoff_max)
            + wait_random(0, self._config.retry_backoff * _JITTER_RATIO),
            retry=_retryable_outcome,
            before_sleep=partial(_log_retry, request),
            retry_error_callback=_last_outcome,
        )
        try:
            return await retrying(_attempt, inner, request)
        except httpx.TransportError as exc:
            _logger.error(
                "request failed: method=%s path=%s err=%s",
                request.method,
                request.url.path,
                exc,
            )
            raise TransportError(f"request to {request.url.path} failed: {exc}") from exc


async def _attempt(inner: httpx.AsyncBaseTransport, request: httpx.Request) -> httpx.Response:
    response = await inner.handle_async_request(request)
    response.request = request
    if should_retry(response.status_code, None):
        # A response that may be discarded must not hold a connection open.
        _ = await response.aread()
    return response


async def _request_body(request: httpx.Request) -> bytes:
    try:
        return request.content
    except httpx.RequestNotRead:
        pass
    stream = request.stream
    if isinstance(stream, httpx.AsyncByteStream):
        return b"".join([chunk async for chunk in stream])
    return b"".join(stream)


def _retryable_outcome(state: RetryCallState) -> bool:
    outcome = state.outcome
    if outcome is None:
        return False
    if outcome.failed:
        error = outcome.exception()
        return isinstance(error, httpx.TransportError) and should_retry(0, error)
    response: httpx.Response = outcome.result()
    return should_retry(response.status_code, None)


def _last_outcome(state: RetryCallState) -> httpx.Response:
    # Re-raises the last exception when the final attempt failed at the network level.
    if state.outcome is None:
        raise RuntimeError("retry loop finished without an attempt outcome")
    return state.outcome.result()


def _log_retry(request: httpx.Request, state: RetryCallState) -> None:
    outcome = state.outcome
    if outcome is None:
        return
    if outcome.failed:
        reason = repr(outcome.exception())
    else:
        reason = f"status={outcome.result().status_code}"
    delay = state.next_action.sleep if state.next_action is not None else 0.0
    _logger.warning(
        "request retry: method=%s path=%s attempt=%s reason=%s wait=%.2fs",
        request.method,
        request.url.path,
        state.attempt_number,
        reason,
        delay,
    )
