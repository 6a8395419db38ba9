"""Expose the translator, glossary codec, and result types.

'why': provide a small, explicit surface for text, document, and glossary translation
"""
from ._client import Translator
from ._config import CLIENT_VERSION, is_free_account_auth_key
from ._errors import (
    ConfigurationError,
    DeepLClientError,
    DocumentTranslationError,
    DocumentTranslationFailed,
    EntryExistsError,
    GlossaryValidationError,
    MalformedEntryError,
    ResponseDecodingError,
    TransportError,
    URLConstructionError,
)
from ._glossary import GlossaryEntries, validate_glossary_term
from ._models import (
    AppInfo,
    DocumentHandle,
    DocumentState,
    DocumentStatus,
    Formality,
    Glossary,
    GlossaryLanguagePair,
    Language,
    LogLevel,
    TextResult,
    TextTranslateOptions,
    Usage,
)
from ._tasks import AsyncTask, spawn

__all__ = [
    "AppInfo",
    "AsyncTask",
    "ConfigurationError",
    "DeepLClientError",
    "DocumentHandle",
    "DocumentState",
    "DocumentStatus",
    "DocumentTranslationError",
    "DocumentTranslationFailed",
    "EntryExistsError",
    "Formality",
    "Glossary",
    "GlossaryEntries",
    "GlossaryLanguagePair",
    "GlossaryValidationError",
    "Language",
    "LogLevel",
    "MalformedEntryError",
    "ResponseDecodingError",
    "TextResult",
    "TextTranslateOptions",
    "TransportError",
    "Translator",
    "URLConstructionError",
    "Usage",
    "is_free_account_auth_key",
    "spawn",
    "validate_glossary_term",
]

__version__ = CLIENT_VERSION
