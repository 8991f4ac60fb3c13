"""Citation style formatters for entries.

Each style is an independent class with a ``format(entry)`` method; styles
are chosen by name through :func:`get_formatter`. Formatters only read the
entry.
"""
from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Protocol, Sequence

from .entry import BibEntry
from .models import Author


class CitationFormatter(Protocol):
    name: str

    def format(self, entry: BibEntry) -> str:
        ...


def _initials(author: Author) -> str:
    return author.initials()


def _join_with(names: List[str], conjunction: str, serial_comma: bool = True) -> str:
    if len(names) <= 1:
        return "".join(names)
    if len(names) == 2:
        return f"{names[0]} {conjunction} {names[1]}"
    comma = "," if serial_comma else ""
    return f"{', '.join(names[:-1])}{comma} {conjunction} {names[-1]}"


def _pages(entry: BibEntry) -> Optional[str]:
    pages = entry.pages
    if pages is None:
        return entry.get_field("pages")
    if pages.end is None:
        return str(pages.start)
    return f"{pages.start}–{pages.end}"


def _venue(entry: BibEntry) -> Optional[str]:
    return entry.journal or entry.booktitle


def _volume_issue_pages(entry: BibEntry, sep: str = ", ") -> Optional[str]:
    trailing = []
    volume = entry.get_field("volume")
    if volume:
        if entry.number:
            volume = f"{volume}({entry.number})"
        trailing.append(volume)
    pages = _pages(entry)
    if pages:
        trailing.append(pages)
    return sep.join(trailing) if trailing else None


def _sentence(components: Iterable[Optional[str]]) -> str:
    return ". ".join(comp.rstrip(".") for comp in components if comp)


def _locator(entry: BibEntry) -> Optional[str]:
    doi = entry.doi
    if doi is not None:
        return doi.url
    return entry.url


class ApaFormatter:
    name = "apa"
    max_authors = 20

    def format(self, entry: BibEntry) -> str:
        authors = self._authors(entry.authors)
        year = f"({entry.year})" if entry.year else "(n.d.)"
        venue = _venue(entry)
        details = _volume_issue_pages(entry)
        venue_text = ", ".join(part for part in (venue, details) if part) or None
        publisher = None if venue else entry.publisher
        return _sentence([authors, year, entry.title, venue_text, publisher, _locator(entry)])

    def _authors(self, authors: Sequence[Author]) -> Optional[str]:
        if not authors:
            return None
        names = [f"{author.last}, {_initials(author)}".rstrip(", ") for author in authors]
        if len(names) > self.max_authors:
            return f"{', '.join(names[: self.max_authors - 1])}, ... {names[-1]}"
        return _join_with(names, "&")


class ChicagoFormatter:
    name = "chicago"
    max_authors = 3

    def format(self, entry: BibEntry) -> str:
        authors = self._authors(entry.authors)
        title = f"\"{entry.title}\"" if entry.title else None
        venue = _venue(entry) or entry.publisher
        core = []
        if venue:
            core.append(venue)
        details = _volume_issue_pages(entry)
        if details:
            core.append(details)
        if entry.year:
            core.append(f"({entry.year})")
        core_text = " ".join(core) if core else None
        return _sentence([authors, title, core_text, _locator(entry)])

    def _authors(self, authors: Sequence[Author]) -> Optional[str]:
        if not authors:
            return None
        first = authors[0].last_first() if authors[0].given_names else authors[0].last
        if len(authors) > self.max_authors:
            return f"{first} et al."
        names = [first] + [author.first_last() for author in authors[1:]]
        return _join_with(names, "and")


class MlaFormatter:
    name = "mla"

    def format(self, entry: BibEntry) -> str:
        authors = self._authors(entry.authors)
        title = f"\"{entry.title}.\"" if entry.title else None
        venue = _venue(entry) or entry.publisher
        pieces = []
        if venue:
            pieces.append(venue)
        if entry.get_field("volume"):
            pieces.append(f"vol. {entry.get_field('volume')}")
        if entry.number:
            pieces.append(f"no. {entry.number}")
        if entry.year:
            pieces.append(str(entry.year))
        pages = _pages(entry)
        if pages:
            pieces.append(f"pp. {pages}")
        parts = []
        if authors:
            parts.append(f"{authors}.")
        if title:
            parts.append(title)
        if pieces:
            parts.append(f"{', '.join(pieces)}.")
        locator = _locator(entry)
        if locator:
            parts.append(f"{locator}.")
        return " ".join(parts)

    @staticmethod
    def _authors(authors: Sequence[Author]) -> Optional[str]:
        if not authors:
            return None
        first = authors[0].last_first() if authors[0].given_names else authors[0].last
        if len(authors) == 1:
            return first.rstrip(".")
        if len(authors) == 2:
            return f"{first}, and {authors[1].first_last()}"
        return f"{first}, et al"


class HarvardFormatter:
    name = "harvard"
    max_authors = 3

    def format(self, entry: BibEntry) -> str:
        authors = self._authors(entry.authors)
        year = f"({entry.year})" if entry.year else "(n.d.)"
        head = " ".join(part for part in (authors, year, entry.title) if part)
        venue = _venue(entry) or entry.publisher
        details = ", ".join(part for part in (venue, _volume_issue_pages(entry)) if part) or None
        return _sentence([head, details, _locator(entry)])

    def _authors(self, authors: Sequence[Author]) -> Optional[str]:
        if not authors:
            return None
        names = [f"{author.last}, {_initials(author)}".rstrip(", ") for author in authors]
        if len(names) > self.max_authors:
            return f"{names[0]} et al."
        return _join_with(names, "and", serial_comma=False)


class IeeeFormatter:
    name = "ieee"
    max_authors = 6

    def format(self, entry: BibEntry) -> str:
        authors = self._authors(entry.authors)
        title = f"\"{entry.title}\"" if entry.title else None
        venue = _venue(entry) or entry.publisher
        pieces = []
        if entry.get_field("volume"):
            pieces.append(f"vol. {entry.get_field('volume')}")
        if entry.number:
            pieces.append(f"no. {entry.number}")
        pages = _pages(entry)
        if pages:
            pieces.append(f"pp. {pages}")
        if entry.year:
            pieces.append(str(entry.year))
        details = ", ".join(pieces) if pieces else None
        components = [authors, title, venue, details, _locator(entry)]
        return ", ".join(comp for comp in components if comp)

    def _authors(self, authors: Sequence[Author]) -> Optional[str]:
        if not authors:
            return None
        names = [" ".join(part for part in (_initials(author), author.last) if part) for author in authors]
        if len(names) > self.max_authors:
            return f"{names[0]} et al."
        return _join_with(names, "and")


FORMATTERS: Dict[str, CitationFormatter] = {
    formatter.name: formatter
    for formatter in (
        ApaFormatter(),
        ChicagoFormatter(),
        MlaFormatter(),
        HarvardFormatter(),
        IeeeFormatter(),
    )
}

SUPPORTED_STYLES = tuple(FORMATTERS)


def get_formatter(style: str = "apa") -> CitationFormatter:
    """Look up a style by name, falling back to APA."""
    return FORMATTERS.get((style or "").lower().strip(), FORMATTERS["apa"])


def format_entry(entry: BibEntry, style: str = "apa") -> str:
    return get_formatter(style).format(entry)


def format_bibliography(entries: Iterable[BibEntry], style: str = "apa") -> str:
    formatter = get_formatter(style)
    return "\n\n".join(formatter.format(entry) for entry in entries)


__all__ = [
    "ApaFormatter",
    "ChicagoFormatter",
    "CitationFormatter",
    "FORMATTERS",
    "HarvardFormatter",
    "IeeeFormatter",
    "MlaFormatter",
    "SUPPORTED_STYLES",
    "format_bibliography",
    "format_entry",
    "get_formatter",
]
