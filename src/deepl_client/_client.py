"""Expose the translator facade.

'why': compose transport, codec, and document workflow behind one object with sync and async calls
"""
from __future__ import annotations

from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import BinaryIO, overload

import httpx

from . import _document
from ._config import AUTH_KEY_ENV, SERVER_URL_ENV, build_settings, load_env, transport_config
from ._decode import (
    check_response,
    decode_glossaries,
    decode_glossary,
    decode_glossary_language_pairs,
    decode_languages,
    decode_text_results,
    decode_usage,
)
from ._errors import ConfigurationError, GlossaryValidationError, ResponseDecodingError
from ._glossary import GlossaryEntries
from ._http import (
    build_create_glossary_request,
    build_delete_glossary_request,
    build_glossary_entries_request,
    build_glossary_language_pairs_request,
    build_glossary_request,
    build_languages_request,
    build_list_glossaries_request,
    build_translate_request,
    build_usage_request,
)
from ._logging import get_logger, redacted
from ._models import (
    AppInfo,
    DocumentHandle,
    DocumentStatus,
    Formality,
    Glossary,
    GlossaryLanguagePair,
    Language,
    LogLevel,
    Settings,
    TextResult,
    TextTranslateOptions,
    Usage,
)
from ._tasks import LoopThread
from ._transport import Transport


_logger = get_logger()


class Translator:
    """Client for text translation, document translation, and glossaries.

    Every operation has a blocking form and an `_async` coroutine form; the blocking
    form must not be called from inside a running event loop. Blocking calls share one
    private event loop, so a pooled `transport` keeps its connections across calls.
    `close` (or leaving a `with` block) closes the transport and stops that loop.
    """

    def __init__(
        self,
        auth_key: str,
        *,
        server_url: str | None = None,
        headers: Mapping[str, str] | None = None,
        send_platform_info: bool = True,
        app_info: AppInfo | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        log_level: LogLevel | str | None = None,
        max_poll_interval: float | None = None,
        retry_backoff: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings: Settings = build_settings(
            auth_key,
            server_url=server_url,
            headers=headers,
            send_platform_info=send_platform_info,
            app_info=app_info,
            timeout=timeout,
            max_retries=max_retries,
            log_level=log_level,
            max_poll_interval=max_poll_interval,
            retry_backoff=retry_backoff,
        )
        self._transport: Transport = Transport(transport_config(self._settings), transport)
        self._loop: LoopThread = LoopThread()
        _logger.debug(
            "translator configured: server_url=%s auth_key=%s timeout=%s max_retries=%s",
            self._settings.server_url,
            redacted(self._settings.auth_key),
            self._settings.timeout,
            self._settings.max_retries,
        )

    @classmethod
    def from_env(cls, env_path: Path | None = None, **kwargs: object) -> Translator:
        """Build a translator from DEEPL_AUTH_KEY / DEEPL_SERVER_URL in `.env` or the environment."""

        values = load_env(env_path)
        auth_key = values.get(AUTH_KEY_ENV)
        if not auth_key:
            raise ConfigurationError(f"{AUTH_KEY_ENV} is not set in .env or the environment")
        if SERVER_URL_ENV in values:
            _ = kwargs.setdefault("server_url", values[SERVER_URL_ENV])
        return cls(auth_key, **kwargs)  # type: ignore[arg-type]

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def transport(self) -> Transport:
        return self._transport

    def close(self) -> None:
        """Close the injected transport and stop the event loop behind the blocking methods."""

        try:
            self._loop.run_sync(self._transport.aclose())
        finally:
            self._loop.close()

    async def aclose(self) -> None:
        await self._transport.aclose()
        self._loop.close()

    def __enter__(self) -> Translator:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # --- Text ---

    @overload
    async def translate_text_async(
        self,
        text: str,
        *,
        target_lang: str,
        source_lang: str | None = None,
        options: TextTranslateOptions | None = None,
    ) -> TextResult: ...

    @overload
    async def translate_text_async(
        self,
        text: Sequence[str],
        *,
        target_lang: str,
        source_lang: str | None = None,
        options: TextTranslateOptions | None = None,
    ) -> list[TextResult]: ...

    async def translate_text_async(
        self,
        text: str | Sequence[str],
        *,
        target_lang: str,
        source_lang: str | None = None,
        options: TextTranslateOptions | None = None,
    ) -> TextResult | list[TextResult]:
        """Translate one text or a batch; a single string yields a single result."""

        single = isinstance(text, str)
        texts = [text] if isinstance(text, str) else list(text)
        if not texts:
            raise ValueError("text must contain at least one string")
        if not all(isinstance(item, str) for item in texts):
            raise TypeError("text must be a string or a sequence of strings")

        request = build_translate_request(
            texts,
            target_lang=target_lang,
            source_lang=source_lang,
            options=options,
        )
        response = check_response(await self._transport.execute(request), "text translation")
        results = decode_text_results(response)
        if len(results) != len(texts):
            raise ResponseDecodingError(
                f"expected {len(texts)} translations, received {len(results)}"
            )
        _logger.info("text translation complete: texts=%s target_lang=%s", len(texts), target_lang)
        return results[0] if single else results

    @overload
    def translate_text(
        self,
        text: str,
        *,
        target_lang: str,
        source_lang: str | None = None,
        options: TextTranslateOptions | None = None,
    ) -> TextResult: ...

    @overload
    def translate_text(
        self,
        text: Sequence[str],
        *,
        target_lang: str,
        source_lang: str | None = None,
        options: TextTranslateOptions | None = None,
    ) -> list[TextResult]: ...

    def translate_text(
        self,
        text: str | Sequence[str],
        *,
        target_lang: str,
        source_lang: str | None = None,
        options: TextTranslateOptions | None = None,
    ) -> TextResult | list[TextResult]:
        return self._loop.run_sync(
            self.translate_text_async(
                text,
                target_lang=target_lang,
                source_lang=source_lang,
                options=options,
            )
        )

    # --- Documents ---

    async def translate_document_async(
        self,
        input_document: bytes | BinaryIO,
        output_document: BinaryIO,
        *,
        target_lang: str,
        source_lang: str | None = None,
        filename: str | None = None,
        formality: Formality | str | None = None,
        glossary_id: str | None = None,
    ) -> DocumentStatus:
        """Upload, await, and download a document translation; return the final status."""

        return await _document.translate_document(
            self._transport,
            input_document,
            output_document,
            target_lang=target_lang,
            source_lang=source_lang,
            filename=filename,
            formality=formality,
            glossary_id=glossary_id,
            max_interval=self._settings.max_poll_interval,
        )

    def translate_document(
        self,
        input_document: bytes | BinaryIO,
        output_document: BinaryIO,
        *,
        target_lang: str,
        source_lang: str | None = None,
        filename: str | None = None,
        formality: Formality | str | None = None,
        glossary_id: str | None = None,
    ) -> DocumentStatus:
        return self._loop.run_sync(
            self.translate_document_async(
                input_document,
                output_document,
                target_lang=target_lang,
                source_lang=source_lang,
                filename=filename,
                formality=formality,
                glossary_id=glossary_id,
            )
        )

    async def translate_document_from_filepath_async(
        self,
        input_path: Path | str,
        output_path: Path | str,
        *,
        target_lang: str,
        source_lang: str | None = None,
        formality: Formality | str | None = None,
        glossary_id: str | None = None,
    ) -> DocumentStatus:
        """Translate the file at `input_path` into `output_path`.

        A partially written output file is removed when the workflow fails.
        """

        source = Path(input_path)
        destination = Path(output_path)
        with source.open("rb") as in_file:
            try:
                with destination.open("wb") as out_file:
                    return await self.translate_document_async(
                        in_file,
                        out_file,
                        target_lang=target_lang,
                        source_lang=source_lang,
                        filename=source.name,
                        formality=formality,
                        glossary_id=glossary_id,
                    )
            except Exception:
                destination.unlink(missing_ok=True)
                raise

    def translate_document_from_filepath(
        self,
        input_path: Path | str,
        output_path: Path | str,
        *,
        target_lang: str,
        source_lang: str | None = None,
        formality: Formality | str | None = None,
        glossary_id: str | None = None,
    ) -> DocumentStatus:
        return self._loop.run_sync(
            self.translate_document_from_filepath_async(
                input_path,
                output_path,
                target_lang=target_lang,
                source_lang=source_lang,
                formality=formality,
                glossary_id=glossary_id,
            )
        )

    async def upload_document_async(
        self,
        input_document: bytes | BinaryIO,
        *,
        target_lang: str,
        source_lang: str | None = None,
        filename: str | None = None,
        formality: Formality | str | None = None,
        glossary_id: str | None = None,
    ) -> DocumentHandle:
        return await _document.upload_document(
            self._transport,
            input_document,
            target_lang=target_lang,
            source_lang=source_lang,
            filename=filename,
            formality=formality,
            glossary_id=glossary_id,
        )

    def upload_document(
        self,
        input_document: bytes | BinaryIO,
        *,
        target_lang: str,
        source_lang: str | None = None,
        filename: str | None = None,
        formality: Formality | str | None = None,
        glossary_id: str | None = None,
    ) -> DocumentHandle:
        return self._loop.run_sync(
            self.upload_document_async(
                input_document,
                target_lang=target_lang,
                source_lang=source_lang,
                filename=filename,
                formality=formality,
                glossary_id=glossary_id,
            )
        )

    async def get_document_status_async(self, handle: DocumentHandle) -> DocumentStatus:
        return await _document.get_document_status(self._transport, handle)

    def get_document_status(self, handle: DocumentHandle) -> DocumentStatus:
        return self._loop.run_sync(self.get_document_status_async(handle))

    async def wait_until_document_done_async(self, handle: DocumentHandle) -> DocumentStatus:
        return await _document.wait_until_done(
            self._transport,
            handle,
            max_interval=self._settings.max_poll_interval,
        )

    def wait_until_document_done(self, handle: DocumentHandle) -> DocumentStatus:
        return self._loop.run_sync(self.wait_until_document_done_async(handle))

    async def download_document_async(self, handle: DocumentHandle, output_document: BinaryIO) -> None:
        await _document.download_document(self._transport, handle, output_document)

    def download_document(self, handle: DocumentHandle, output_document: BinaryIO) -> None:
        self._loop.run_sync(self.download_document_async(handle, output_document))

    # --- Account and languages ---

    async def get_usage_async(self) -> Usage:
        response = await self._transport.execute(build_usage_request())
        return decode_usage(check_response(response, "usage lookup"))

    def get_usage(self) -> Usage:
        return self._loop.run_sync(self.get_usage_async())

    async def get_source_languages_async(self) -> list[Language]:
        response = await self._transport.execute(build_languages_request("source"))
        return decode_languages(check_response(response, "source language lookup"))

    def get_source_languages(self) -> list[Language]:
        return self._loop.run_sync(self.get_source_languages_async())

    async def get_target_languages_async(self) -> list[Language]:
        response = await self._transport.execute(build_languages_request("target"))
        return decode_languages(check_response(response, "target language lookup"))

    def get_target_languages(self) -> list[Language]:
        return self._loop.run_sync(self.get_target_languages_async())

    async def get_glossary_languages_async(self) -> list[GlossaryLanguagePair]:
        response = await self._transport.execute(build_glossary_language_pairs_request())
        return decode_glossary_language_pairs(check_response(response, "glossary language lookup"))

    def get_glossary_languages(self) -> list[GlossaryLanguagePair]:
        return self._loop.run_sync(self.get_glossary_languages_async())

    # --- Glossaries ---

    async def create_glossary_async(
        self,
        name: str,
        source_lang: str,
        target_lang: str,
        entries: GlossaryEntries,
    ) -> Glossary:
        """Validate `entries` locally, then create the glossary on the server."""

        if not name or not name.strip():
            raise GlossaryValidationError("glossary name must be a non-empty string")
        entries.validate()
        request = build_create_glossary_request(
            name=name,
            source_lang=source_lang,
            target_lang=target_lang,
            entries=entries,
        )
        response = check_response(await self._transport.execute(request), "glossary creation")
        glossary = decode_glossary(response)
        _logger.info(
            "glossary created: glossary_id=%s entries=%s",
            glossary.glossary_id,
            len(entries),
        )
        return glossary

    def create_glossary(
        self,
        name: str,
        source_lang: str,
        target_lang: str,
        entries: GlossaryEntries,
    ) -> Glossary:
        return self._loop.run_sync(self.create_glossary_async(name, source_lang, target_lang, entries))

    async def list_glossaries_async(self) -> list[Glossary]:
        response = await self._transport.execute(build_list_glossaries_request())
        return decode_glossaries(check_response(response, "glossary listing"))

    def list_glossaries(self) -> list[Glossary]:
        return self._loop.run_sync(self.list_glossaries_async())

    async def get_glossary_async(self, glossary_id: str) -> Glossary:
        response = await self._transport.execute(build_glossary_request(glossary_id))
        return decode_glossary(check_response(response, "glossary lookup"))

    def get_glossary(self, glossary_id: str) -> Glossary:
        return self._loop.run_sync(self.get_glossary_async(glossary_id))

    async def get_glossary_entries_async(self, glossary_id: str) -> GlossaryEntries:
        response = await self._transport.execute(build_glossary_entries_request(glossary_id))
        return GlossaryEntries.from_tsv(check_response(response, "glossary entries lookup").text)

    def get_glossary_entries(self, glossary_id: str) -> GlossaryEntries:
        return self._loop.run_sync(self.get_glossary_entries_async(glossary_id))

    async def delete_glossary_async(self, glossary_id: str) -> None:
        response = await self._transport.execute(build_delete_glossary_request(glossary_id))
        _ = check_response(response, "glossary deletion")
        _logger.info("glossary deleted: glossary_id=%s", glossary_id)

    def delete_glossary(self, glossary_id: str) -> None:
        self._loop.run_sync(self.delete_glossary_async(glossary_id))
