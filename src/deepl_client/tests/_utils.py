"""Offer reusable test utilities.

'why': centralize HTTP mocking and request capture for scenario assertions
"""
from __future__ import annotations

import json
import threading
from collections.abc import AsyncIterator, Iterator, Mapping, Sequence
from contextlib import contextmanager
from dataclasses import dataclass
from functools import partial
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing_extensions import override
from urllib.parse import parse_qs

import httpx


Reply = tuple[int, object] | Exception


@dataclass(slots=True)
class MockTransportCapture:
    """Capture requests emitted during a mocked exchange.

    'why': allow tests to assert on request construction without global state
    """

    transport: httpx.MockTransport
    requests: list[httpx.Request]


def json_success(payload: object, *, status_code: int = 200) -> MockTransportCapture:
    """Return a mock transport yielding a JSON success payload."""

    recorded: list[httpx.Request] = []

    async def handler(request: httpx.Request) -> httpx.Response:
        recorded.append(request)
        return httpx.Response(status_code, json=payload, request=request)

    return MockTransportCapture(httpx.MockTransport(handler), recorded)


def json_failure(payload: dict[str, object], *, status_code: int) -> MockTransportCapture:
    """Return a mock transport returning a JSON failure payload.

    'why': drive error mapping with realistic API responses
    """

    recorded: list[httpx.Request] = []

    async def handler(request: httpx.Request) -> httpx.Response:
        recorded.append(request)
        body = json.dumps(payload).encode("utf-8")
        return httpx.Response(status_code, headers={"content-type": "application/json"}, content=body, request=request)

    return MockTransportCapture(httpx.MockTransport(handler), recorded)


def text_success(body: str, *, content_type: str, status_code: int = 200) -> MockTransportCapture:
    """Return a mock transport yielding a plain text body."""

    recorded: list[httpx.Request] = []

    async def handler(request: httpx.Request) -> httpx.Response:
        recorded.append(request)
        return httpx.Response(
            status_code,
            headers={"content-type": content_type},
            content=body.encode("utf-8"),
            request=request,
        )

    return MockTransportCapture(httpx.MockTransport(handler), recorded)


def transport_error(exc: Exception) -> MockTransportCapture:
    """Return a mock transport that raises the provided exception.

    'why': simplify negative-path tests covering transport failures
    """

    recorded: list[httpx.Request] = []

    async def handler(request: httpx.Request) -> httpx.Response:
        recorded.append(request)
        raise exc

    return MockTransportCapture(httpx.MockTransport(handler), recorded)


def scripted(replies: Sequence[Reply]) -> MockTransportCapture:
    """Return a mock transport answering each request with the next scripted reply.

    'why': exercise retry sequences; the last reply repeats once the script runs out
    """

    recorded: list[httpx.Request] = []
    remaining = list(replies)

    async def handler(request: httpx.Request) -> httpx.Response:
        recorded.append(request)
        reply = remaining.pop(0) if len(remaining) > 1 else remaining[0]
        if isinstance(reply, Exception):
            raise reply
        status_code, payload = reply
        return httpx.Response(status_code, json=payload, request=request)

    return MockTransportCapture(httpx.MockTransport(handler), recorded)


def streaming_success(
    chunks: Sequence[bytes], *, headers: dict[str, str] | None = None, status_code: int = 200
) -> MockTransportCapture:
    """Return a mock transport streaming raw bytes.

    'why': reuse identical streaming responses for download scenarios
    """

    recorded: list[httpx.Request] = []

    handler = partial(
        _streaming_handler,
        chunks=tuple(chunks),
        headers=headers,
        status_code=status_code,
        recorded=recorded,
    )

    return MockTransportCapture(httpx.MockTransport(handler), recorded)


def document_service(
    statuses: Sequence[Mapping[str, object] | int],
    *,
    result: Sequence[bytes] = (b"translated ", b"document"),
    upload_status: int = 200,
    result_status: int = 200,
) -> MockTransportCapture:
    """Return a mock transport emulating upload, status, and download endpoints.

    'why': drive the whole document workflow; an int in `statuses` answers that poll
    with an error status instead of a JSON snapshot
    """

    recorded: list[httpx.Request] = []
    remaining = list(statuses)

    async def handler(request: httpx.Request) -> httpx.Response:
        recorded.append(request)
        path = request.url.path
        if request.method == "POST" and path.endswith("/document"):
            if upload_status != 200:
                return httpx.Response(upload_status, json={"message": "upload rejected"}, request=request)
            return httpx.Response(200, json={"document_id": "D1", "document_key": "K1"}, request=request)
        if path.endswith("/result"):
            if result_status != 200:
                return httpx.Response(result_status, json={"message": "result unavailable"}, request=request)
            return httpx.Response(200, stream=_ChunkStream(result), request=request)
        if request.method == "GET" and "/document/" in path:
            reply = remaining.pop(0) if len(remaining) > 1 else remaining[0]
            if isinstance(reply, int):
                return httpx.Response(reply, json={"message": "status lookup failed"}, request=request)
            return httpx.Response(200, json=dict(reply), request=request)
        return httpx.Response(404, json={"message": "not found"}, request=request)

    return MockTransportCapture(httpx.MockTransport(handler), recorded)


@dataclass(slots=True)
class LocalServer:
    """Address of a local HTTP server and the client ports of requests it served."""

    url: str
    client_ports: list[int]


@contextmanager
def local_json_server(payload: object) -> Iterator[LocalServer]:
    """Serve `payload` as JSON over keep-alive HTTP/1.1 on a free local port.

    'why': exercise a real pooled transport, which a MockTransport cannot stand in for
    """

    body = json.dumps(payload).encode("utf-8")
    ports: list[int] = []

    class _Handler(BaseHTTPRequestHandler):
        protocol_version = "HTTP/1.1"

        def do_GET(self) -> None:
            ports.append(self.client_address[1])
            self.send_response(200)
            self.send_header("Content-Type", "application/json")
            self.send_header("Content-Length", str(len(body)))
            self.end_headers()
            _ = self.wfile.write(body)

        @override
        def log_message(self, format: str, *args: object) -> None:
            return

    server = ThreadingHTTPServer(("127.0.0.1", 0), _Handler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        yield LocalServer(url=f"http://127.0.0.1:{server.server_port}/v2", client_ports=ports)
    finally:
        server.shutdown()
        server.server_close()


def form_fields(request: httpx.Request) -> dict[str, list[str]]:
    """Decode a form-encoded request body."""

    return parse_qs(request.content.decode("utf-8"), keep_blank_values=True)


class _ChunkStream(httpx.AsyncByteStream):
    """Provide an async byte stream backed by an in-memory sequence."""

    def __init__(self, payload: Sequence[bytes]) -> None:
        self._payload: list[bytes] = list(payload)

    async def aiter_bytes(self) -> AsyncIterator[bytes]:
        for chunk in self._payload:
            yield chunk

    @override
    def __aiter__(self) -> AsyncIterator[bytes]:
        return self.aiter_bytes()


async def _streaming_handler(
    request: httpx.Request,
    *,
    chunks: Sequence[bytes],
    headers: dict[str, str] | None,
    status_code: int,
    recorded: list[httpx.Request],
) -> httpx.Response:
    recorded.append(request)
    response_headers = headers or {"Content-Type": "application/octet-stream"}
    return httpx.Response(
        status_code,
        headers=response_headers,
        stream=_ChunkStream(chunks),
        request=request,
    )
