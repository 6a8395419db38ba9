"""Define dataclasses and types for the client.

'why': capture configuration and API results in typed, testable shapes
"""
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from datetime import datetime
from enum import Enum


class LogLevel(str, Enum):
    """Enumerate supported logging levels for the client."""

    CRITICAL = "CRITICAL"
    ERROR = "ERROR"
    WARNING = "WARNING"
    INFO = "INFO"
    DEBUG = "DEBUG"


class Formality(str, Enum):
    """Enumerate formality preferences accepted by the translation endpoints."""

    DEFAULT = "default"
    MORE = "more"
    LESS = "less"
    PREFER_MORE = "prefer_more"
    PREFER_LESS = "prefer_less"


class DocumentState(str, Enum):
    """Enumerate server-side document translation states."""

    QUEUED = "queued"
    TRANSLATING = "translating"
    ERROR = "error"
    DONE = "done"


@dataclass(frozen=True)
class AppInfo:
    """Identify the calling application in the user agent."""

    name: str
    version: str


@dataclass(frozen=True)
class Settings:
    """Capture runtime settings for API calls."""

    auth_key: str
    server_url: str
    timeout: float
    max_retries: int
    log_level: LogLevel
    user_agent: str
    extra_headers: Mapping[str, str]
    max_poll_interval: float | None
    retry_backoff: float


@dataclass(frozen=True)
class TransportConfig:
    """Describe how the transport reaches the server.

    'why': fixed once per translator so concurrent calls share read-only state
    """

    base_url: str
    headers: Mapping[str, str]
    timeout: float
    max_retries: int
    retry_backoff: float = 1.0
    retry_backoff_max: float = 30.0


@dataclass(frozen=True)
class TextTranslateOptions:
    """Optional parameters flattened into a text translation request."""

    split_sentences: str | None = None
    preserve_formatting: bool | None = None
    formality: Formality | str | None = None
    glossary_id: str | None = None
    tag_handling: str | None = None
    outline_detection: bool | None = None
    non_splitting_tags: tuple[str, ...] = ()
    splitting_tags: tuple[str, ...] = ()
    ignore_tags: tuple[str, ...] = ()

    def to_params(self) -> dict[str, str]:
        """Return the non-empty options as form parameters."""

        params: dict[str, str] = {}
        for item in fields(self):
            value = _param_value(getattr(self, item.name))
            if value:
                params[item.name] = value
        return params


def _param_value(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, tuple):
        return ",".join(str(tag) for tag in value)
    return str(value)


@dataclass(frozen=True)
class TextResult:
    """Hold one translated text and the language the server detected."""

    text: str
    detected_source_lang: str


@dataclass(frozen=True)
class DocumentHandle:
    """Identify an uploaded document.

    The key is a capability token: whoever holds it can query or download the result.
    """

    document_id: str
    document_key: str = field(repr=False)


@dataclass(frozen=True)
class DocumentStatus:
    """Snapshot of a document translation as reported by one status query."""

    document_id: str
    status: DocumentState
    seconds_remaining: int = 0
    billed_characters: int = 0
    error_message: str = ""

    @property
    def is_ok(self) -> bool:
        return self.error_message == ""

    @property
    def is_done(self) -> bool:
        return self.status is DocumentState.DONE

    @property
    def is_terminal(self) -> bool:
        return self.is_done or not self.is_ok


@dataclass(frozen=True)
class Usage:
    """Report character and document consumption for the account."""

    character_count: int = 0
    character_limit: int = 0
    document_count: int = 0
    document_limit: int = 0
    team_document_count: int = 0
    team_document_limit: int = 0

    @property
    def any_limit_reached(self) -> bool:
        pairs = (
            (self.character_count, self.character_limit),
            (self.document_count, self.document_limit),
            (self.team_document_count, self.team_document_limit),
        )
        return any(limit > 0 and count >= limit for count, limit in pairs)


@dataclass(frozen=True)
class Language:
    """Describe a language supported by the service."""

    code: str
    name: str
    supports_formality: bool | None = None


@dataclass(frozen=True)
class GlossaryLanguagePair:
    """Describe a source/target pair for which glossaries can be created."""

    source_lang: str
    target_lang: str


@dataclass(frozen=True)
class Glossary:
    """Describe a glossary stored on the server."""

    glossary_id: str
    ready: bool
    name: str
    source_lang: str
    target_lang: str
    creation_time: datetime
    entry_count: int
