"""Entry type schemas and field aliases."""
from __future__ import annotations

import threading
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from .errors import RegistryError


class FieldName:
    ABSTRACT = "abstract"
    ADDRESS = "address"
    ANNOTE = "annote"
    AUTHOR = "author"
    BOOKTITLE = "booktitle"
    CHAPTER = "chapter"
    COPYRIGHT = "copyright"
    DOI = "doi"
    EDITION = "edition"
    EDITOR = "editor"
    HOWPUBLISHED = "howpublished"
    INSTITUTION = "institution"
    ISBN = "isbn"
    ISSN = "issn"
    JOURNAL = "journal"
    KEYWORDS = "keywords"
    LANGUAGE = "language"
    MONTH = "month"
    NOTE = "note"
    NUMBER = "number"
    ORGANIZATION = "organization"
    PAGES = "pages"
    PUBLISHER = "publisher"
    SCHOOL = "school"
    SERIES = "series"
    TITLE = "title"
    TYPE = "type"
    URL = "url"
    VOLUME = "volume"
    YEAR = "year"


F = FieldName
_COMMON = (F.NOTE, F.URL, F.LANGUAGE, F.KEYWORDS, F.ABSTRACT, F.COPYRIGHT)
_PROCEEDINGS_OPTIONAL = (
    F.EDITOR, F.VOLUME, F.NUMBER, F.SERIES, F.PAGES, F.ADDRESS, F.MONTH, F.ORGANIZATION,
    F.PUBLISHER, F.ISBN, F.ISSN, F.DOI,
) + _COMMON
_THESIS_OPTIONAL = (F.TYPE, F.ADDRESS, F.MONTH) + _COMMON


@dataclass(frozen=True)
class EntryTypeDefinition:
    name: str
    required: Tuple[str, ...] = ()
    optional: Tuple[str, ...] = ()

    def allows(self, field_name: str) -> bool:
        return field_name in self.required or field_name in self.optional


def _define(name: str, required: Iterable[str], optional: Iterable[str]) -> EntryTypeDefinition:
    return EntryTypeDefinition(name, tuple(required), tuple(optional))


STANDARD_TYPES = (
    _define("article", (F.AUTHOR, F.TITLE, F.JOURNAL, F.YEAR),
            (F.VOLUME, F.NUMBER, F.PAGES, F.MONTH, F.DOI, F.ISSN) + _COMMON),
    _define("book", (F.TITLE, F.PUBLISHER, F.YEAR),
            (F.AUTHOR, F.EDITOR, F.VOLUME, F.NUMBER, F.SERIES, F.ADDRESS, F.EDITION, F.MONTH,
             F.ISBN, F.DOI) + _COMMON),
    _define("booklet", (F.TITLE,), (F.AUTHOR, F.HOWPUBLISHED, F.ADDRESS, F.MONTH, F.YEAR) + _COMMON),
    _define("conference", (F.AUTHOR, F.TITLE, F.BOOKTITLE, F.YEAR), _PROCEEDINGS_OPTIONAL),
    _define("inbook", (F.AUTHOR, F.TITLE, F.PUBLISHER, F.YEAR),
            (F.EDITOR, F.CHAPTER, F.PAGES, F.ADDRESS, F.VOLUME, F.NUMBER, F.SERIES, F.EDITION,
             F.MONTH, F.ISBN, F.DOI) + _COMMON),
    _define("incollection", (F.AUTHOR, F.TITLE, F.BOOKTITLE, F.PUBLISHER, F.YEAR),
            (F.EDITOR, F.CHAPTER, F.PAGES, F.ADDRESS, F.EDITION, F.MONTH, F.SERIES, F.VOLUME,
             F.NUMBER, F.TYPE, F.ISBN, F.DOI) + _COMMON),
    _define("inproceedings", (F.AUTHOR, F.TITLE, F.BOOKTITLE, F.YEAR), _PROCEEDINGS_OPTIONAL),
    _define("manual", (F.TITLE,),
            (F.AUTHOR, F.ORGANIZATION, F.ADDRESS, F.EDITION, F.MONTH, F.YEAR, F.DOI) + _COMMON),
    _define("mastersthesis", (F.AUTHOR, F.TITLE, F.SCHOOL, F.YEAR), _THESIS_OPTIONAL),
    _define("misc", (),
            (F.AUTHOR, F.TITLE, F.HOWPUBLISHED, F.MONTH, F.YEAR, F.DOI, F.ISBN, F.ISSN, F.ANNOTE)
            + _COMMON),
    _define("phdthesis", (F.AUTHOR, F.TITLE, F.SCHOOL, F.YEAR), _THESIS_OPTIONAL),
    _define("proceedings", (F.TITLE, F.YEAR),
            (F.EDITOR, F.PUBLISHER, F.ORGANIZATION, F.ADDRESS, F.MONTH, F.ISBN, F.ISSN, F.DOI)
            + _COMMON),
    _define("techreport", (F.AUTHOR, F.TITLE, F.INSTITUTION, F.YEAR),
            (F.TYPE, F.NUMBER, F.ADDRESS, F.MONTH, F.DOI) + _COMMON),
    _define("unpublished", (F.AUTHOR, F.TITLE, F.NOTE),
            (F.MONTH, F.YEAR, F.URL, F.LANGUAGE, F.KEYWORDS, F.ABSTRACT, F.COPYRIGHT)),
)

STANDARD_ALIASES = {
    "journaltitle": F.JOURNAL,
    "journal-title": F.JOURNAL,
    "book-title": F.BOOKTITLE,
    "university": F.INSTITUTION,
    "issue": F.NUMBER,
    "location": F.ADDRESS,
    "isbn-10": F.ISBN,
    "isbn-13": F.ISBN,
    "electronic-issn": F.ISSN,
    "print-issn": F.ISSN,
    "link": F.URL,
    "doi-url": F.DOI,
    "keyword": F.KEYWORDS,
    "tags": F.KEYWORDS,
}


def _clean_name(name: Optional[str], label: str) -> str:
    cleaned = (name or "").strip().lower()
    if not cleaned:
        raise RegistryError(f"{label} must not be empty")
    return cleaned


class BibRegistry:
    """Shared configuration of entry types and field aliases.

    Registration is additive and serialized by a single lock; every write
    publishes a fresh read-only mapping, so lookups never take the lock.
    """

    def __init__(self, include_standard: bool = True):
        self._lock = threading.Lock()
        types: Dict[str, EntryTypeDefinition] = {}
        aliases: Dict[str, str] = {}
        if include_standard:
            types = {definition.name: definition for definition in STANDARD_TYPES}
            aliases = dict(STANDARD_ALIASES)
        self._types: Mapping[str, EntryTypeDefinition] = MappingProxyType(types)
        self._aliases: Mapping[str, str] = MappingProxyType(aliases)

    def register_custom_type(
        self,
        name: str,
        required: Iterable[str] = (),
        optional: Iterable[str] = (),
    ) -> EntryTypeDefinition:
        type_name = _clean_name(name, "Entry type name")
        definition = EntryTypeDefinition(
            type_name,
            tuple(self.resolve_alias(field) for field in required),
            tuple(self.resolve_alias(field) for field in optional),
        )
        with self._lock:
            updated = dict(self._types)
            updated[type_name] = definition
            self._types = MappingProxyType(updated)
        return definition

    def register_field_alias(self, alias: str, canonical: str) -> None:
        alias_name = _clean_name(alias, "Field alias")
        target = _clean_name(canonical, "Canonical field name")
        if alias_name == target:
            raise RegistryError(f"Field alias '{alias_name}' cannot point to itself")
        with self._lock:
            updated = dict(self._aliases)
            updated[alias_name] = target
            self._aliases = MappingProxyType(updated)

    def resolve_alias(self, name: str) -> str:
        key = (name or "").strip().lower()
        return self._aliases.get(key, key)

    def get_type(self, name: str) -> Optional[EntryTypeDefinition]:
        return self._types.get((name or "").strip().lower())

    def is_known_type(self, name: str) -> bool:
        return self.get_type(name) is not None

    def type_names(self) -> List[str]:
        return sorted(self._types)

    def aliases(self) -> Dict[str, str]:
        return dict(self._aliases)


default_registry = BibRegistry()


__all__ = [
    "BibRegistry",
    "EntryTypeDefinition",
    "FieldName",
    "STANDARD_ALIASES",
    "STANDARD_TYPES",
    "default_registry",
]
