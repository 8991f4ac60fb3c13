"""Mutable bibliography entry backed by a single ordered field map."""
from __future__ import annotations

import logging
from typing import Dict, Iterable, Iterator, List, Optional, Tuple, Union

from .author_names import join_authors, parse_author_name, split_author_list
from .errors import ConstructionError
from .models import Author, AuthorFormat, Doi, Month, PageRange, ValidationResult
from .registry import BibRegistry, EntryTypeDefinition, FieldName, default_registry

logger = logging.getLogger(__name__)

AuthorLike = Union[Author, str]


def _text_property(name: str, doc: str = "") -> property:
    def getter(self: "BibEntry") -> Optional[str]:
        return self.get_field(name)

    def setter(self: "BibEntry", value: Optional[str]) -> None:
        self.set_field(name, value)

    return property(getter, setter, doc=doc or f"Raw ``{name}`` field.")


def _parse_int(value: Optional[str]) -> Optional[int]:
    if value is None:
        return None
    text = value.strip()
    if text.startswith("-") and text[1:].isdigit():
        return int(text)
    return int(text) if text.isdigit() else None


def _as_author(value: AuthorLike) -> Author:
    if isinstance(value, Author):
        return value
    return parse_author_name(value)


class BibEntry:
    """One bibliography record.

    Field names are case-insensitive and pass through the registry's alias
    table. Typed views such as :attr:`year` or :attr:`pages` read and write
    the same field map, so there is never a second copy of a value.
    """

    def __init__(
        self,
        entry_type: str = "misc",
        key: str = "",
        registry: Optional[BibRegistry] = None,
    ):
        self.registry = registry or default_registry
        self.entry_type = entry_type
        self.key = key or ""
        self._fields: Dict[str, str] = {}
        self._name_cache: Dict[str, Tuple[str, Tuple[Author, ...], bool]] = {}

    # entry type -----------------------------------------------------------

    @property
    def entry_type(self) -> str:
        return self._entry_type

    @entry_type.setter
    def entry_type(self, value: str) -> None:
        self._entry_type = (value or "misc").strip().lower() or "misc"

    @property
    def entry_type_definition(self) -> Optional[EntryTypeDefinition]:
        return self.registry.get_type(self._entry_type)

    # raw field access -----------------------------------------------------

    def canonical_name(self, name: str) -> str:
        return self.registry.resolve_alias(name)

    def get_field(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return self._fields.get(self.canonical_name(name), default)

    def set_field(self, name: str, value: Optional[object]) -> "BibEntry":
        canonical = self.canonical_name(name)
        if not canonical:
            raise ConstructionError("Field name must not be empty")
        if value is None or str(value) == "":
            self._fields.pop(canonical, None)
        else:
            self._fields[canonical] = str(value)
        return self

    def remove_field(self, name: str) -> bool:
        return self._fields.pop(self.canonical_name(name), None) is not None

    def has_field(self, name: str) -> bool:
        return self.canonical_name(name) in self._fields

    def field_names(self) -> List[str]:
        return list(self._fields)

    def fields(self) -> Dict[str, str]:
        return dict(self._fields)

    def items(self) -> Iterator[Tuple[str, str]]:
        return iter(list(self._fields.items()))

    def sort_fields(self) -> "BibEntry":
        self._fields = dict(sorted(self._fields.items()))
        return self

    def __getitem__(self, name: str) -> str:
        value = self.get_field(name)
        if value is None:
            raise KeyError(name)
        return value

    def __setitem__(self, name: str, value: Optional[object]) -> None:
        self.set_field(name, value)

    def __delitem__(self, name: str) -> None:
        if not self.remove_field(name):
            raise KeyError(name)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.has_field(name)

    def __len__(self) -> int:
        return len(self._fields)

    # contributors ---------------------------------------------------------

    def _parse_contributors(self, field: str) -> Tuple[Tuple[Author, ...], bool]:
        raw = self._fields.get(field)
        if not raw:
            return (), True
        cached = self._name_cache.get(field)
        if cached is not None and cached[0] == raw:
            return cached[1], cached[2]
        parsed: List[Author] = []
        complete = True
        for name in split_author_list(raw):
            try:
                parsed.append(parse_author_name(name))
            except ConstructionError:
                complete = False
                logger.debug("Skipping unparseable name %r in %s of %s", name, field, self.key)
        result = tuple(parsed)
        self._name_cache[field] = (raw, result, complete)
        return result, complete

    def _contributors(self, field: str) -> Tuple[Author, ...]:
        return self._parse_contributors(field)[0]

    def contributors_complete(self, field: str) -> bool:
        """True when every name in the author or editor field parses.

        Fields with an unparseable name must be written back verbatim, since
        the parsed view leaves that name out.
        """
        return self._parse_contributors(self.canonical_name(field))[1]

    def _write_contributors(self, field: str, authors: Iterable[AuthorLike]) -> "BibEntry":
        names = [_as_author(author) for author in authors]
        return self.set_field(field, join_authors(names) if names else None)

    @property
    def authors(self) -> Tuple[Author, ...]:
        return self._contributors(FieldName.AUTHOR)

    @authors.setter
    def authors(self, value: Iterable[AuthorLike]) -> None:
        self.set_authors(value)

    @property
    def editors(self) -> Tuple[Author, ...]:
        return self._contributors(FieldName.EDITOR)

    @editors.setter
    def editors(self, value: Iterable[AuthorLike]) -> None:
        self.set_editors(value)

    def set_authors(self, authors: Iterable[AuthorLike]) -> "BibEntry":
        return self._write_contributors(FieldName.AUTHOR, authors)

    def set_editors(self, editors: Iterable[AuthorLike]) -> "BibEntry":
        return self._write_contributors(FieldName.EDITOR, editors)

    def add_author(self, author: AuthorLike) -> "BibEntry":
        return self._write_contributors(FieldName.AUTHOR, self.authors + (_as_author(author),))

    def add_editor(self, editor: AuthorLike) -> "BibEntry":
        return self._write_contributors(FieldName.EDITOR, self.editors + (_as_author(editor),))

    def clear_authors(self) -> "BibEntry":
        return self.set_field(FieldName.AUTHOR, None)

    def clear_editors(self) -> "BibEntry":
        return self.set_field(FieldName.EDITOR, None)

    def update_contributor_fields(self, fmt: AuthorFormat = AuthorFormat.LAST_FIRST) -> "BibEntry":
        """Rewrite author and editor fields in the given name order."""
        for field in (FieldName.AUTHOR, FieldName.EDITOR):
            names, complete = self._parse_contributors(field)
            if names and complete:
                self.set_field(field, join_authors(names, fmt))
        return self

    # typed views ----------------------------------------------------------

    title = _text_property(FieldName.TITLE)
    journal = _text_property(FieldName.JOURNAL)
    booktitle = _text_property(FieldName.BOOKTITLE)
    publisher = _text_property(FieldName.PUBLISHER)
    url = _text_property(FieldName.URL)
    note = _text_property(FieldName.NOTE)
    number = _text_property(FieldName.NUMBER)
    edition = _text_property(FieldName.EDITION)
    series = _text_property(FieldName.SERIES)
    chapter = _text_property(FieldName.CHAPTER)
    address = _text_property(FieldName.ADDRESS)
    howpublished = _text_property(FieldName.HOWPUBLISHED)
    isbn = _text_property(FieldName.ISBN)
    issn = _text_property(FieldName.ISSN)
    institution = _text_property(FieldName.INSTITUTION)
    school = _text_property(FieldName.SCHOOL)
    organization = _text_property(FieldName.ORGANIZATION)
    abstract = _text_property(FieldName.ABSTRACT)
    keywords = _text_property(FieldName.KEYWORDS)
    language = _text_property(FieldName.LANGUAGE)

    @property
    def year(self) -> Optional[int]:
        return _parse_int(self.get_field(FieldName.YEAR))

    @year.setter
    def year(self, value: Optional[int]) -> None:
        self.set_field(FieldName.YEAR, None if value is None else int(value))

    @property
    def volume(self) -> Optional[int]:
        return _parse_int(self.get_field(FieldName.VOLUME))

    @volume.setter
    def volume(self, value: Optional[int]) -> None:
        self.set_field(FieldName.VOLUME, None if value is None else int(value))

    @property
    def pages(self) -> Optional[PageRange]:
        return PageRange.try_parse(self.get_field(FieldName.PAGES))

    @pages.setter
    def pages(self, value: Union[PageRange, str, None]) -> None:
        if isinstance(value, str):
            value = PageRange.parse(value)
        self.set_field(FieldName.PAGES, None if value is None else str(value))

    @property
    def doi(self) -> Optional[Doi]:
        return Doi.try_parse(self.get_field(FieldName.DOI))

    @doi.setter
    def doi(self, value: Union[Doi, str, None]) -> None:
        if isinstance(value, str):
            value = Doi(value)
        self.set_field(FieldName.DOI, None if value is None else value.identifier)

    @property
    def month(self) -> Optional[Month]:
        return Month.parse(self.get_field(FieldName.MONTH))

    @month.setter
    def month(self, value: Union[Month, int, str, None]) -> None:
        if value is None:
            self.set_field(FieldName.MONTH, None)
            return
        if isinstance(value, str):
            parsed = Month.parse(value)
            if parsed is None:
                raise ConstructionError(f"Unknown month: {value!r}")
            value = parsed
        self.set_field(FieldName.MONTH, Month.from_number(int(value)).abbreviation)

    # keywords -------------------------------------------------------------

    def keyword_list(self) -> List[str]:
        raw = self.get_field(FieldName.KEYWORDS) or ""
        return [item.strip() for item in raw.replace(";", ",").split(",") if item.strip()]

    def set_keyword_list(self, keywords: Iterable[str]) -> "BibEntry":
        unique: List[str] = []
        seen = set()
        for keyword in keywords:
            cleaned = keyword.strip()
            if cleaned and cleaned.lower() not in seen:
                seen.add(cleaned.lower())
                unique.append(cleaned)
        return self.set_field(FieldName.KEYWORDS, ", ".join(unique) or None)

    def add_keyword(self, keyword: str) -> "BibEntry":
        return self.set_keyword_list(self.keyword_list() + [keyword])

    # validation and copies ------------------------------------------------

    def validate(self) -> ValidationResult:
        result = ValidationResult()
        if not self.key.strip():
            result = result.with_error("Entry key is missing")

        definition = self.entry_type_definition
        if definition is None:
            result = result.with_warning(f"Entry type '{self.entry_type}' is not a known type")
        else:
            for field in definition.required:
                if not self.has_field(field):
                    result = result.with_error(f"Required field '{field}' is missing")

        raw_year = self.get_field(FieldName.YEAR)
        year = self.year
        if raw_year is not None and year is None:
            result = result.with_warning(f"Year value '{raw_year}' is not numeric")
        elif year is not None and not 1000 <= year <= 3000:
            result = result.with_warning(f"Year value {year} seems suspicious")

        volume = self.volume
        if volume is not None and volume < 0:
            result = result.with_warning(f"Volume value {volume} should be non-negative")

        raw_pages = self.get_field(FieldName.PAGES)
        if raw_pages is not None and self.pages is None:
            result = result.with_warning(f"Page range '{raw_pages}' could not be parsed")
        return result

    def clone(self) -> "BibEntry":
        copy = BibEntry(self.entry_type, self.key, self.registry)
        copy._fields = dict(self._fields)
        return copy

    def _comparable(self) -> Tuple[str, str, Dict[str, object]]:
        values: Dict[str, object] = dict(self._fields)
        for field in (FieldName.AUTHOR, FieldName.EDITOR):
            names, complete = self._parse_contributors(field)
            if field in values and complete:
                values[field] = names
        return self.entry_type, self.key, values

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BibEntry):
            return NotImplemented
        return self._comparable() == other._comparable()

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"BibEntry({self.entry_type!r}, {self.key!r}, fields={len(self._fields)})"


__all__ = ["BibEntry"]
