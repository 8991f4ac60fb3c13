"""Stable, case-insensitive orderings for entry lists."""
from __future__ import annotations

from typing import Any, Callable, Iterable, List, Optional, Tuple

from .entry import BibEntry
from .normalization import fold_ascii

SortKey = Callable[[BibEntry], Optional[Any]]


def _sorted(entries: Iterable[BibEntry], key: SortKey, descending: bool) -> List[BibEntry]:
    """Entries without a value go first when ascending, last when descending."""

    def wrapped(entry: BibEntry) -> Tuple[int, Any]:
        value = key(entry)
        if value is None or value == "":
            return (0, "")
        return (1, value)

    return sorted(entries, key=wrapped, reverse=descending)


def _text(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    return fold_ascii(value).replace("{", "").replace("}", "").casefold()


def sort_by_author(entries: Iterable[BibEntry], descending: bool = False) -> List[BibEntry]:
    def key(entry: BibEntry) -> Optional[Tuple[str, str]]:
        authors = entry.authors
        if not authors:
            return None
        return (_text(authors[0].last) or "", _text(authors[0].given_names) or "")

    return _sorted(entries, key, descending)


def sort_by_year(entries: Iterable[BibEntry], descending: bool = False) -> List[BibEntry]:
    return _sorted(entries, lambda entry: entry.year, descending)


def sort_by_title(entries: Iterable[BibEntry], descending: bool = False) -> List[BibEntry]:
    return _sorted(entries, lambda entry: _text(entry.title), descending)


def sort_by_key(entries: Iterable[BibEntry], descending: bool = False) -> List[BibEntry]:
    return _sorted(entries, lambda entry: entry.key.casefold() or None, descending)


def sort_by_field(entries: Iterable[BibEntry], field: str, descending: bool = False) -> List[BibEntry]:
    return _sorted(entries, lambda entry: _text(entry.get_field(field)), descending)


__all__ = ["sort_by_author", "sort_by_field", "sort_by_key", "sort_by_title", "sort_by_year"]
