"""Run the upload, poll, and download steps of document translation.

'why': sequence dependent steps fail-fast and let server estimates drive the poll cadence
"""
from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import BinaryIO, Final

from ._decode import check_response, decode_document_handle, decode_document_status
from ._errors import DocumentTranslationError, DocumentTranslationFailed
from ._http import build_download_request, build_status_request, build_upload_request
from ._logging import get_logger
from ._models import DocumentHandle, DocumentStatus, Formality
from ._tasks import spawn
from ._transport import Transport


_logger = get_logger()

_DEFAULT_FILENAME: Final[str] = "document"


def next_poll_delay(status: DocumentStatus, max_interval: float | None = None) -> float:
    """Return seconds to wait before the next status query.

    Half the server's remaining-time estimate plus one second; `max_interval` caps it
    when given.
    """

    delay = float(status.seconds_remaining // 2 + 1)
    if max_interval is not None:
        return min(delay, max_interval)
    return delay


async def _sleep(seconds: float) -> None:
    await asyncio.sleep(seconds)


async def upload_document(
    transport: Transport,
    document: bytes | BinaryIO | None,
    *,
    target_lang: str,
    source_lang: str | None = None,
    filename: str | None = None,
    formality: Formality | str | None = None,
    glossary_id: str | None = None,
) -> DocumentHandle:
    """Upload `document` and return the handle identifying it on the server."""

    if document is None:
        raise ValueError("document must be bytes or a readable binary stream")
    if not isinstance(document, (bytes, bytearray)) and not callable(getattr(document, "read", None)):
        raise ValueError("document must be bytes or a readable binary stream")

    name = filename or _stream_name(document)
    request = build_upload_request(
        document,
        filename=name,
        target_lang=target_lang,
        source_lang=source_lang,
        formality=formality,
        glossary_id=glossary_id,
    )
    _logger.info("document upload start: filename=%s target_lang=%s", name, target_lang)
    response = check_response(await transport.execute(request), "document upload")
    handle = decode_document_handle(response)
    _logger.info("document upload complete: document_id=%s", handle.document_id)
    return handle


async def get_document_status(transport: Transport, handle: DocumentHandle) -> DocumentStatus:
    response = check_response(await transport.execute(build_status_request(handle)), "document status")
    return decode_document_status(response)


async def wait_until_done(
    transport: Transport,
    handle: DocumentHandle,
    *,
    max_interval: float | None = None,
    on_status: Callable[[DocumentStatus], None] | None = None,
) -> DocumentStatus:
    """Poll until the document is done or the server reports an error.

    Raises DocumentTranslationFailed for a non-ok status; query errors propagate as-is.
    `on_status` sees every snapshot, so callers keep the last one if a query fails.
    """

    async def query() -> DocumentStatus:
        snapshot = await get_document_status(transport, handle)
        if on_status is not None:
            on_status(snapshot)
        return snapshot

    status = await spawn(query)
    while not status.is_terminal:
        delay = next_poll_delay(status, max_interval)
        _logger.debug(
            "document status: document_id=%s status=%s seconds_remaining=%s next_poll=%.0fs",
            handle.document_id,
            status.status.value,
            status.seconds_remaining,
            delay,
        )
        await _sleep(delay)
        status = await spawn(query)

    if not status.is_ok:
        _logger.error(
            "document translation failed: document_id=%s message=%s",
            handle.document_id,
            status.error_message,
        )
        raise DocumentTranslationFailed(
            f"document translation failed, status not ok: {status.error_message}",
            stage="poll",
            status=status,
            handle=handle,
        )
    _logger.info(
        "document translation done: document_id=%s billed_characters=%s",
        handle.document_id,
        status.billed_characters,
    )
    return status


async def download_document(transport: Transport, handle: DocumentHandle, output: BinaryIO) -> None:
    """Stream the translated document into `output`."""

    async with transport.stream(build_download_request(handle)) as response:
        if not response.is_success:
            _ = await response.aread()
            _ = check_response(response, "document download")
        async for chunk in response.aiter_bytes():
            _ = output.write(chunk)
    _logger.info("document download complete: document_id=%s", handle.document_id)


async def translate_document(
    transport: Transport,
    document: bytes | BinaryIO | None,
    output: BinaryIO,
    *,
    target_lang: str,
    source_lang: str | None = None,
    filename: str | None = None,
    formality: Formality | str | None = None,
    glossary_id: str | None = None,
    max_interval: float | None = None,
) -> DocumentStatus:
    """Upload, wait for, and download a document translation.

    Every failure is raised as DocumentTranslationError whose `stage`, `status`, and
    `handle` tell how far the workflow got; the triggering error is chained.
    """

    try:
        handle = await spawn(
            lambda: upload_document(
                transport,
                document,
                target_lang=target_lang,
                source_lang=source_lang,
                filename=filename,
                formality=formality,
                glossary_id=glossary_id,
            )
        )
    except Exception as exc:
        raise DocumentTranslationError(f"document upload failed: {exc}", stage="upload") from exc

    observed: list[DocumentStatus] = []
    try:
        status = await spawn(
            lambda: wait_until_done(
                transport,
                handle,
                max_interval=max_interval,
                on_status=observed.append,
            )
        )
    except DocumentTranslationFailed:
        raise
    except Exception as exc:
        raise DocumentTranslationError(
            f"document status check failed: {exc}",
            stage="poll",
            status=observed[-1] if observed else None,
            handle=handle,
        ) from exc

    try:
        await spawn(lambda: download_document(transport, handle, output))
    except Exception as exc:
        _logger.error("document download failed: document_id=%s err=%s", handle.document_id, exc)
        raise DocumentTranslationError(
            f"document translated but download failed: {exc}",
            stage="download",
            status=status,
            handle=handle,
        ) from exc
    return status


def _stream_name(document: bytes | bytearray | BinaryIO) -> str:
    raw = getattr(document, "name", None)
    if isinstance(raw, str) and raw:
        return raw.replace("\\", "/").rsplit("/", 1)[-1]
    return _DEFAULT_FILENAME
