"""HTTP request builders for every endpoint.

Requests carry only a relative path; the transport supplies server URL and credentials.
"""
from __future__ import annotations

from collections.abc import Sequence
from typing import BinaryIO, Final, Literal
from urllib.parse import quote

import httpx

from ._glossary import GlossaryEntries
from ._models import DocumentHandle, Formality, TextTranslateOptions

TSV_MEDIA_TYPE: Final[str] = "text/tab-separated-values"
GLOSSARY_ENTRIES_FORMAT: Final[str] = "tsv"


def build_translate_request(
    texts: Sequence[str],
    *,
    target_lang: str,
    source_lang: str | None = None,
    options: TextTranslateOptions | None = None,
) -> httpx.Request:
    """Return a form POST translating one or more texts."""

    data: dict[str, str | list[str]] = {"text": list(texts), "target_lang": target_lang}
    if source_lang:
        data["source_lang"] = source_lang
    if options is not None:
        data.update(options.to_params())
    return httpx.Request("POST", "/translate", data=data)


def build_upload_request(
    document: bytes | BinaryIO,
    *,
    filename: str,
    target_lang: str,
    source_lang: str | None = None,
    formality: Formality | str | None = None,
    glossary_id: str | None = None,
) -> httpx.Request:
    """Return a multipart POST uploading a document for translation."""

    data: dict[str, str] = {"target_lang": target_lang}
    if source_lang:
        data["source_lang"] = source_lang
    if formality:
        data["formality"] = formality.value if isinstance(formality, Formality) else formality
    if glossary_id:
        data["glossary_id"] = glossary_id
    return httpx.Request("POST", "/document", data=data, files={"file": (filename, document)})


def build_status_request(handle: DocumentHandle) -> httpx.Request:
    return httpx.Request(
        "GET",
        _document_path(handle),
        params={"document_key": handle.document_key},
    )


def build_download_request(handle: DocumentHandle) -> httpx.Request:
    return httpx.Request(
        "GET",
        f"{_document_path(handle)}/result",
        params={"document_key": handle.document_key},
    )


def build_usage_request() -> httpx.Request:
    return httpx.Request("GET", "/usage")


def build_languages_request(kind: Literal["source", "target"]) -> httpx.Request:
    return httpx.Request("GET", "/languages", params={"type": kind})


def build_glossary_language_pairs_request() -> httpx.Request:
    return httpx.Request("GET", "/glossary-language-pairs")


def build_create_glossary_request(
    *,
    name: str,
    source_lang: str,
    target_lang: str,
    entries: GlossaryEntries,
) -> httpx.Request:
    """Return a form POST creating a glossary from TSV-encoded entries."""

    data = {
        "name": name,
        "source_lang": source_lang,
        "target_lang": target_lang,
        "entries": entries.to_tsv(),
        "entries_format": GLOSSARY_ENTRIES_FORMAT,
    }
    return httpx.Request("POST", "/glossaries", data=data)


def build_list_glossaries_request() -> httpx.Request:
    return httpx.Request("GET", "/glossaries")


def build_glossary_request(glossary_id: str) -> httpx.Request:
    return httpx.Request("GET", _glossary_path(glossary_id))


def build_glossary_entries_request(glossary_id: str) -> httpx.Request:
    return httpx.Request(
        "GET",
        f"{_glossary_path(glossary_id)}/entries",
        headers={"Accept": TSV_MEDIA_TYPE},
    )


def build_delete_glossary_request(glossary_id: str) -> httpx.Request:
    return httpx.Request("DELETE", _glossary_path(glossary_id))


def _document_path(handle: DocumentHandle) -> str:
    return f"/document/{quote(handle.document_id, safe='')}"


def _glossary_path(glossary_id: str) -> str:
    return f"/glossaries/{quote(glossary_id, safe='')}"
