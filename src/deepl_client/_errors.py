"""Define the client exception taxonomy.

'why': give callers one hierarchy to catch while keeping failure causes distinguishable
"""
from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ._models import DocumentHandle, DocumentStatus


class DeepLClientError(Exception):
    """Base class for all client errors."""


class ConfigurationError(DeepLClientError):
    """Raised when the client is constructed with invalid settings."""


class URLConstructionError(DeepLClientError):
    """Raised when a request URL cannot be rebuilt against the server URL."""


class TransportError(DeepLClientError):
    """Raised on network failure or a non-success HTTP status.

    `status_code` is None when no response was obtained.
    """

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message: str = message
        self.status_code: int | None = status_code


class ResponseDecodingError(DeepLClientError):
    """Raised when a response body does not match the expected schema."""


class GlossaryValidationError(DeepLClientError):
    """Raised when glossary entries or terms are rejected locally."""


class MalformedEntryError(GlossaryValidationError):
    """Raised when a TSV record does not split into exactly two fields."""


class EntryExistsError(GlossaryValidationError):
    """Raised when adding a source term that already has a target."""


class DocumentTranslationError(DeepLClientError):
    """Raised when the document workflow fails.

    `stage` names the step that failed ("upload", "poll" or "download"); `status` is
    the last status seen (None before polling started) and `handle` is set once the
    upload succeeded, so a failed download can be retried with it.
    """

    def __init__(
        self,
        message: str,
        *,
        stage: str,
        status: DocumentStatus | None = None,
        handle: DocumentHandle | None = None,
    ) -> None:
        super().__init__(message)
        self.stage: str = stage
        self.status: DocumentStatus | None = status
        self.handle: DocumentHandle | None = handle


class DocumentTranslationFailed(DocumentTranslationError):
    """Raised when the server reports a non-ok document status."""
