"""Heuristics for splitting free-text personal names into components.

Two notations are recognized:

* ``Last, First Middle [Suffix]`` whenever a comma appears outside braces.
* ``First Middle Last [Suffix]`` otherwise.

Brace groups such as ``{World Health Organization}`` are kept as a single
token, so corporate names survive as last-name-only authors.
"""
from __future__ import annotations

from typing import Iterable, List, Optional, Tuple

from .errors import ConstructionError
from .models import Author, AuthorFormat

_SUFFIXES = {
    "jr": "Jr.",
    "jr.": "Jr.",
    "junior": "Jr.",
    "sr": "Sr.",
    "sr.": "Sr.",
    "senior": "Sr.",
    "ii": "II",
    "iii": "III",
    "iv": "IV",
    "v": "V",
    "vi": "VI",
    "vii": "VII",
    "viii": "VIII",
    "ix": "IX",
    "x": "X",
    "2nd": "II",
    "3rd": "III",
    "4th": "IV",
    "5th": "V",
    "esq": "Esq.",
    "esq.": "Esq.",
    "ph.d": "Ph.D.",
    "ph.d.": "Ph.D.",
    "phd": "Ph.D.",
    "m.d": "M.D.",
    "m.d.": "M.D.",
    "md": "M.D.",
    "d.d.s": "D.D.S.",
    "d.d.s.": "D.D.S.",
    "dds": "D.D.S.",
    "j.d": "J.D.",
    "j.d.": "J.D.",
    "jd": "J.D.",
    "m.b.a": "M.B.A.",
    "m.b.a.": "M.B.A.",
    "mba": "M.B.A.",
    "cpa": "CPA",
    "rn": "RN",
}


def normalize_suffix(token: str) -> Optional[str]:
    """Return the canonical spelling of a name suffix, or ``None``."""
    return _SUFFIXES.get(token.strip().rstrip(",").lower())


def _split_top_level(text: str, separator: str) -> List[str]:
    parts: List[str] = []
    depth = 0
    current: List[str] = []
    for ch in text:
        if ch == "{":
            depth += 1
        elif ch == "}" and depth > 0:
            depth -= 1
        if depth == 0 and (ch == separator or (separator == " " and ch.isspace())):
            parts.append("".join(current))
            current = []
            continue
        current.append(ch)
    parts.append("".join(current))
    return parts


def tokenize_name(text: str) -> List[str]:
    """Split on whitespace outside of brace groups."""
    return [token for token in _split_top_level(text, " ") if token]


def _pop_suffix(tokens: List[str]) -> Tuple[List[str], Optional[str]]:
    if len(tokens) < 2:
        return tokens, None
    suffix = normalize_suffix(tokens[-1])
    if suffix is None:
        return tokens, None
    return tokens[:-1], suffix


def _parse_last_first(last_part: str, rest: str) -> Author:
    last = " ".join(tokenize_name(last_part))
    suffix: Optional[str] = None
    # "von Last, Jr, First" puts the suffix between two commas
    pieces = _split_top_level(rest, ",")
    if len(pieces) > 1 and normalize_suffix(pieces[0]):
        suffix = normalize_suffix(pieces[0])
        rest = ",".join(pieces[1:])
    tokens = tokenize_name(rest.replace(",", " "))
    if suffix is None:
        tokens, suffix = _pop_suffix(tokens)
    if not last:
        raise ConstructionError(f"Author name has no last name: {last_part!r}")
    if not tokens:
        return Author(last, suffix=suffix)
    middle = " ".join(tokens[1:]) or None
    return Author(last, tokens[0], middle, suffix)


def _parse_first_last(text: str) -> Author:
    tokens, suffix = _pop_suffix(tokenize_name(text))
    if len(tokens) == 1:
        return Author(tokens[0], suffix=suffix)
    middle = " ".join(tokens[1:-1]) or None
    return Author(tokens[-1], tokens[0], middle, suffix)


def parse_author_name(text: str) -> Author:
    """Parse one name in either supported notation."""
    if text is None or not text.strip():
        raise ConstructionError("Author name must not be empty")
    value = " ".join(text.split())
    pieces = _split_top_level(value, ",")
    if len(pieces) > 1:
        return _parse_last_first(pieces[0], ",".join(pieces[1:]))
    return _parse_first_last(value)


def split_author_list(text: str) -> List[str]:
    """Split a BibTeX name list on the word ``and`` outside of braces."""
    if not text:
        return []
    names: List[str] = []
    current: List[str] = []
    for token in tokenize_name(text):
        if token.lower() == "and":
            if current:
                names.append(" ".join(current))
            current = []
        else:
            current.append(token)
    if current:
        names.append(" ".join(current))
    return names


def parse_author_list(text: str) -> List[Author]:
    return [parse_author_name(name) for name in split_author_list(text)]


def join_authors(authors: Iterable[Author], fmt: AuthorFormat = AuthorFormat.LAST_FIRST) -> str:
    return " and ".join(author.format(fmt) for author in authors)


def normalize_author_field(text: str, fmt: AuthorFormat = AuthorFormat.LAST_FIRST) -> str:
    """Rewrite a name list in canonical form, leaving unparseable input as is."""
    try:
        return join_authors(parse_author_list(text), fmt)
    except ConstructionError:
        return text


__all__ = [
    "join_authors",
    "normalize_author_field",
    "normalize_suffix",
    "parse_author_list",
    "parse_author_name",
    "split_author_list",
    "tokenize_name",
]
