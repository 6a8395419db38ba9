"""Turn HTTP responses into typed results.

'why': isolate schema checks so every endpoint fails the same way on unexpected bodies
"""
from __future__ import annotations

import json
from collections.abc import Mapping
from datetime import datetime
from typing import Final, cast

import httpx

from ._errors import ResponseDecodingError, TransportError
from ._models import (
    DocumentHandle,
    DocumentState,
    DocumentStatus,
    Glossary,
    GlossaryLanguagePair,
    Language,
    TextResult,
    Usage,
)

_UNREPORTED_ERROR: Final[str] = "document translation failed without an error message"
_MESSAGE_PREVIEW: Final[int] = 200


def check_response(response: httpx.Response, action: str) -> httpx.Response:
    """Raise TransportError unless `response` reports success."""

    if response.is_success:
        return response
    message = _error_message(response)
    raise TransportError(
        f"{action} failed with status {response.status_code}: {message}",
        status_code=response.status_code,
    )


def decode_text_results(response: httpx.Response) -> list[TextResult]:
    payload = _json_mapping(response)
    items = _list_field(payload, "translations")
    results: list[TextResult] = []
    for item in items:
        entry = _require_mapping(item, "translation")
        results.append(
            TextResult(
                text=_str_field(entry, "text"),
                detected_source_lang=_str_field(entry, "detected_source_language"),
            )
        )
    return results


def decode_document_handle(response: httpx.Response) -> DocumentHandle:
    payload = _json_mapping(response)
    return DocumentHandle(
        document_id=_str_field(payload, "document_id"),
        document_key=_str_field(payload, "document_key"),
    )


def decode_document_status(response: httpx.Response) -> DocumentStatus:
    """Decode a status snapshot; an `error` status always carries a message."""

    payload = _json_mapping(response)
    raw_status = _str_field(payload, "status")
    try:
        state = DocumentState(raw_status)
    except ValueError as exc:
        raise ResponseDecodingError(f"unknown document status: {raw_status!r}") from exc

    error_message = _optional_str(payload, "error_message") or _optional_str(payload, "message")
    if state is DocumentState.ERROR and not error_message:
        error_message = _UNREPORTED_ERROR
    return DocumentStatus(
        document_id=_str_field(payload, "document_id"),
        status=state,
        seconds_remaining=max(_optional_int(payload, "seconds_remaining"), 0),
        billed_characters=max(_optional_int(payload, "billed_characters"), 0),
        error_message=error_message,
    )


def decode_usage(response: httpx.Response) -> Usage:
    payload = _json_mapping(response)
    return Usage(
        character_count=_optional_int(payload, "character_count"),
        character_limit=_optional_int(payload, "character_limit"),
        document_count=_optional_int(payload, "document_count"),
        document_limit=_optional_int(payload, "document_limit"),
        team_document_count=_optional_int(payload, "team_document_count"),
        team_document_limit=_optional_int(payload, "team_document_limit"),
    )


def decode_languages(response: httpx.Response) -> list[Language]:
    payload = _json_value(response)
    if not isinstance(payload, list):
        raise ResponseDecodingError("expected a JSON array of languages")
    languages: list[Language] = []
    for item in cast(list[object], payload):
        entry = _require_mapping(item, "language")
        supports = entry.get("supports_formality")
        languages.append(
            Language(
                code=_str_field(entry, "language"),
                name=_str_field(entry, "name"),
                supports_formality=supports if isinstance(supports, bool) else None,
            )
        )
    return languages


def decode_glossary_language_pairs(response: httpx.Response) -> list[GlossaryLanguagePair]:
    payload = _json_mapping(response)
    pairs: list[GlossaryLanguagePair] = []
    for item in _list_field(payload, "supported_languages"):
        entry = _require_mapping(item, "language pair")
        pairs.append(
            GlossaryLanguagePair(
                source_lang=_str_field(entry, "source_lang"),
                target_lang=_str_field(entry, "target_lang"),
            )
        )
    return pairs


def decode_glossary(response: httpx.Response) -> Glossary:
    return _glossary_from_mapping(_json_mapping(response))


def decode_glossaries(response: httpx.Response) -> list[Glossary]:
    payload = _json_mapping(response)
    return [
        _glossary_from_mapping(_require_mapping(item, "glossary"))
        for item in _list_field(payload, "glossaries")
    ]


def _glossary_from_mapping(entry: Mapping[str, object]) -> Glossary:
    ready = entry.get("ready")
    if not isinstance(ready, bool):
        raise ResponseDecodingError("glossary field 'ready' must be a boolean")
    return Glossary(
        glossary_id=_str_field(entry, "glossary_id"),
        ready=ready,
        name=_str_field(entry, "name"),
        source_lang=_str_field(entry, "source_lang"),
        target_lang=_str_field(entry, "target_lang"),
        creation_time=_datetime_field(entry, "creation_time"),
        entry_count=_optional_int(entry, "entry_count"),
    )


def _json_value(response: httpx.Response) -> object:
    try:
        return cast(object, response.json())
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ResponseDecodingError(f"response body is not valid JSON: {exc}") from exc


def _json_mapping(response: httpx.Response) -> Mapping[str, object]:
    return _require_mapping(_json_value(response), "response body")


def _require_mapping(value: object, what: str) -> Mapping[str, object]:
    if not isinstance(value, Mapping):
        raise ResponseDecodingError(f"expected {what} to be a JSON object")
    return cast(Mapping[str, object], value)


def _list_field(payload: Mapping[str, object], key: str) -> list[object]:
    value = payload.get(key)
    if not isinstance(value, list):
        raise ResponseDecodingError(f"expected field {key!r} to be a list")
    return cast(list[object], value)


def _str_field(payload: Mapping[str, object], key: str) -> str:
    value = payload.get(key)
    if not isinstance(value, str):
        raise ResponseDecodingError(f"expected field {key!r} to be a string")
    return value


def _optional_str(payload: Mapping[str, object], key: str) -> str:
    value = payload.get(key)
    return value if isinstance(value, str) else ""


def _optional_int(payload: Mapping[str, object], key: str) -> int:
    value = payload.get(key)
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise ResponseDecodingError(f"expected field {key!r} to be an integer")
    return value


def _datetime_field(payload: Mapping[str, object], key: str) -> datetime:
    raw = _str_field(payload, key)
    try:
        return datetime.fromisoformat(raw)
    except ValueError as exc:
        raise ResponseDecodingError(f"field {key!r} is not an ISO 8601 timestamp: {raw!r}") from exc


def _error_message(response: httpx.Response) -> str:
    try:
        payload = cast(object, response.json())
    except (json.JSONDecodeError, UnicodeDecodeError):
        return response.text[:_MESSAGE_PREVIEW] or response.reason_phrase
    if isinstance(payload, Mapping):
        typed = cast(Mapping[str, object], payload)
        message = typed.get("message")
        detail = typed.get("detail")
        if isinstance(message, str) and isinstance(detail, str) and detail:
            return f"{message}, {detail}"
        if isinstance(message, str) and message:
            return message
    return response.text[:_MESSAGE_PREVIEW] or response.reason_phrase
