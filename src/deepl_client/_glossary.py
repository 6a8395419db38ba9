"""Encode, decode, and validate glossary entries.

'why': glossaries travel as tab-separated text; keep that format lossless and safe
"""
from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import Final

from ._errors import EntryExistsError, GlossaryValidationError, MalformedEntryError


FIELD_SEPARATOR: Final[str] = "\t"
RECORD_SEPARATOR: Final[str] = "\n"

_LINE_SEPARATOR: Final[int] = 0x2028
_PARAGRAPH_SEPARATOR: Final[int] = 0x2029


def validate_glossary_term(term: str) -> None:
    """Raise GlossaryValidationError if `term` cannot be stored in a glossary.

    Rejects empty terms and any C0/C1 control character or Unicode line/paragraph
    separator, which also rules out the TSV delimiters.
    """

    if not term:
        raise GlossaryValidationError("term is empty")
    for position, char in enumerate(term):
        if _is_forbidden(ord(char)):
            raise GlossaryValidationError(
                f"term {term!r} contains invalid character at position {position}"
            )


def _is_forbidden(codepoint: int) -> bool:
    return (
        0 <= codepoint <= 31
        or 128 <= codepoint <= 159
        or codepoint in (_LINE_SEPARATOR, _PARAGRAPH_SEPARATOR)
    )


class GlossaryEntries:
    """Mapping of source terms to target terms."""

    def __init__(self) -> None:
        self._entries: dict[str, str] = {}

    @classmethod
    def from_dict(cls, entries: Mapping[str, str]) -> GlossaryEntries:
        """Build entries from a source → target mapping."""

        glossary = cls()
        glossary._entries = dict(entries)
        return glossary

    @classmethod
    def from_tsv(cls, text: str) -> GlossaryEntries:
        """Build entries from tab-separated text, one entry per line."""

        glossary = cls()
        for record in text.split(RECORD_SEPARATOR):
            record = record.removesuffix("\r")
            if not record:
                continue
            parts = record.split(FIELD_SEPARATOR)
            if len(parts) != 2:
                raise MalformedEntryError(f"tab missing in entry: {record!r}")
            source, target = parts
            glossary._entries[source] = target
        return glossary

    def to_tsv(self) -> str:
        """Return the entries as tab-separated text."""

        return RECORD_SEPARATOR.join(
            f"{source}{FIELD_SEPARATOR}{target}" for source, target in self._entries.items()
        )

    def add(self, source: str, target: str, *, overwrite: bool = False) -> None:
        """Insert or replace an entry.

        Raises EntryExistsError when `source` already has a target and `overwrite` is false.
        """

        if not overwrite and self._entries.get(source):
            raise EntryExistsError(f"entry already exists: {source!r}")
        self._entries[source] = target

    def validate(self) -> None:
        """Raise GlossaryValidationError unless every entry may be sent to the server."""

        if not self._entries:
            raise GlossaryValidationError("glossary entries must not be empty")
        for source, target in self._entries.items():
            validate_glossary_term(source)
            validate_glossary_term(target)

    def to_dict(self) -> dict[str, str]:
        return dict(self._entries)

    def __getitem__(self, source: str) -> str:
        return self._entries[source]

    def __contains__(self, source: object) -> bool:
        return source in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, GlossaryEntries):
            return NotImplemented
        return self._entries == other._entries

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"GlossaryEntries({self._entries!r})"
