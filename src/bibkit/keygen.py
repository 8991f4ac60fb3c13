"""Citation key generation with collision handling."""
from __future__ import annotations

import logging
import re
from enum import Enum
from typing import Iterable, List, Optional, Set

from .entry import BibEntry
from .normalization import fold_ascii

logger = logging.getLogger(__name__)

STOP_WORDS = frozenset(
    {
        "a", "an", "the", "of", "and", "or", "to", "in", "for", "with", "on", "by", "at", "as",
        "from", "about", "into", "like", "through", "after", "over", "between", "out", "against",
        "during", "without", "before", "under", "around", "among",
    }
)

_LATEX_COMMAND = re.compile(r"\\[A-Za-z]+")
_BRACES = re.compile(r"[{}]")
_TITLE_SPLIT = re.compile(r"[\s\-:.,;!?]+")
_INVALID = re.compile(r"[^A-Za-z0-9_\-]")
_DASHES = re.compile(r"-+")
_SHORT_LENGTH = 3


class KeyFormat(str, Enum):
    AUTHOR_YEAR = "author_year"
    AUTHOR_TITLE_YEAR = "author_title_year"
    AUTHOR_TITLE_YEAR_SHORT = "author_title_year_short"
    AUTHOR_JOURNAL_YEAR = "author_journal_year"


def _is_stop_word(word: str) -> bool:
    return len(word) <= 1 or word.lower() in STOP_WORDS


def _strip_markup(text: str) -> str:
    return _BRACES.sub("", _LATEX_COMMAND.sub("", text))


def author_part(entry: BibEntry) -> str:
    authors = entry.authors
    if not authors:
        return "noauthor"
    return _BRACES.sub("", authors[0].last).lower()


def year_part(entry: BibEntry) -> str:
    year = entry.year
    return str(year) if year is not None else "nodate"


def title_part(entry: BibEntry) -> str:
    """First word of the title that is not a stop word."""
    title = entry.title
    if not title:
        return "notitle"
    words = [word for word in _TITLE_SPLIT.split(_strip_markup(title)) if word]
    if not words:
        return "notitle"
    for word in words:
        if not _is_stop_word(word):
            return word.lower()
    return words[0].lower()


def abbreviate(text: str) -> str:
    """Initial letters of the significant words of a venue name."""
    stripped = _strip_markup(text)
    letters = [word[0].lower() for word in stripped.split() if not _is_stop_word(word) and word[0].isalpha()]
    if letters:
        return "".join(letters)
    return stripped.strip()[:_SHORT_LENGTH].lower()


def venue_part(entry: BibEntry) -> str:
    if entry.journal:
        return abbreviate(entry.journal)
    if entry.booktitle and entry.entry_type in ("inproceedings", "conference"):
        return abbreviate(entry.booktitle)
    return entry.entry_type


def clean_key(raw: str) -> str:
    key = _INVALID.sub("-", fold_ascii(raw))
    key = _DASHES.sub("-", key).strip("-")
    return key or "unknownkey"


def base_key(entry: BibEntry, fmt: KeyFormat = KeyFormat.AUTHOR_YEAR) -> str:
    if fmt == KeyFormat.AUTHOR_TITLE_YEAR:
        raw = author_part(entry) + title_part(entry) + year_part(entry)
    elif fmt == KeyFormat.AUTHOR_TITLE_YEAR_SHORT:
        raw = author_part(entry)[:_SHORT_LENGTH] + title_part(entry)[:_SHORT_LENGTH] + year_part(entry)
    elif fmt == KeyFormat.AUTHOR_JOURNAL_YEAR:
        raw = author_part(entry) + venue_part(entry) + year_part(entry)
    else:
        raw = author_part(entry) + year_part(entry)
    return clean_key(raw)


def resolve_collision(key: str, used: Set[str]) -> str:
    """Append ``a``..``z`` and then ``1``, ``2``, ... until unused.

    ``used`` must hold lower-cased keys.
    """
    if key.lower() not in used:
        return key
    for offset in range(26):
        candidate = key + chr(ord("a") + offset)
        if candidate.lower() not in used:
            return candidate
    number = 1
    while f"{key}{number}".lower() in used:
        number += 1
    return f"{key}{number}"


def generate_key(
    entry: BibEntry,
    fmt: KeyFormat = KeyFormat.AUTHOR_YEAR,
    existing_keys: Optional[Iterable[str]] = None,
) -> str:
    key = base_key(entry, fmt)
    if existing_keys is None:
        return key
    resolved = resolve_collision(key, {existing.lower() for existing in existing_keys})
    if resolved != key:
        logger.debug("Key %s already taken, using %s", key, resolved)
    return resolved


def generate_keys(
    entries: Iterable[BibEntry],
    fmt: KeyFormat = KeyFormat.AUTHOR_YEAR,
    preserve_existing: bool = True,
) -> List[str]:
    """Keys for a batch, aligned with the input order.

    With ``preserve_existing`` entries that already have a key keep it, and
    all such keys are reserved before new ones are generated.
    """
    entries = list(entries)
    used: Set[str] = set()
    keys: List[Optional[str]] = [None] * len(entries)
    if preserve_existing:
        for index, entry in enumerate(entries):
            if entry.key.strip():
                keys[index] = entry.key
                used.add(entry.key.lower())
    for index, entry in enumerate(entries):
        if keys[index] is not None:
            continue
        key = resolve_collision(base_key(entry, fmt), used)
        used.add(key.lower())
        keys[index] = key
    return [key or "" for key in keys]


def regenerate_keys(
    entries: Iterable[BibEntry],
    fmt: KeyFormat = KeyFormat.AUTHOR_YEAR,
    preserve_existing: bool = True,
) -> List[BibEntry]:
    """Assign generated keys to the entries in place."""
    entries = list(entries)
    for entry, key in zip(entries, generate_keys(entries, fmt, preserve_existing)):
        entry.key = key
    return entries


__all__ = [
    "KeyFormat",
    "STOP_WORDS",
    "abbreviate",
    "base_key",
    "clean_key",
    "generate_key",
    "generate_keys",
    "regenerate_keys",
    "resolve_collision",
]
