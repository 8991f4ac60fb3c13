"""Value types shared across the bibliography model."""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Iterable, Optional, Tuple

from .errors import ConstructionError


class AuthorFormat(str, Enum):
    LAST_FIRST = "last_first"
    FIRST_LAST = "first_last"


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = " ".join(value.split())
    return value or None


def _fold(value: Optional[str]) -> str:
    return (value or "").casefold()


@dataclass(frozen=True, eq=False)
class Author:
    """A personal or corporate name split into its components.

    Renderings are derived on demand; only the components are stored.
    Equality ignores case on every component.
    """

    last: str
    first: Optional[str] = None
    middle: Optional[str] = None
    suffix: Optional[str] = None

    def __post_init__(self) -> None:
        last = _clean(self.last)
        if not last:
            raise ConstructionError("Author last name must not be empty")
        object.__setattr__(self, "last", last)
        object.__setattr__(self, "first", _clean(self.first))
        object.__setattr__(self, "middle", _clean(self.middle))
        object.__setattr__(self, "suffix", _clean(self.suffix))

    @classmethod
    def from_text(cls, text: str) -> "Author":
        from .author_names import parse_author_name

        return parse_author_name(text)

    def _key(self) -> Tuple[str, str, str, str]:
        return (_fold(self.last), _fold(self.first), _fold(self.middle), _fold(self.suffix))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Author):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    @property
    def given_names(self) -> str:
        return " ".join(part for part in (self.first, self.middle) if part)

    def last_first(self) -> str:
        given = self.given_names
        text = f"{self.last}, {given}" if given else self.last
        if self.suffix:
            text = f"{text} {self.suffix}"
        return text

    def first_last(self) -> str:
        return " ".join(part for part in (self.first, self.middle, self.last, self.suffix) if part)

    def format(self, fmt: AuthorFormat = AuthorFormat.LAST_FIRST) -> str:
        if fmt == AuthorFormat.FIRST_LAST:
            return self.first_last()
        return self.last_first()

    def initials(self, with_periods: bool = True) -> str:
        letters = []
        for name in self.given_names.split():
            for piece in name.split("-"):
                stripped = piece.strip("{}.")
                if stripped:
                    letters.append(stripped[0].upper() + ("." if with_periods else ""))
        return " ".join(letters)

    def __str__(self) -> str:
        return self.last_first()


_DASH_RUN = re.compile(r"[-–—]+")


@dataclass(frozen=True)
class PageRange:
    """A start page with an optional end page (end >= start)."""

    start: int
    end: Optional[int] = None

    def __post_init__(self) -> None:
        if self.start < 0:
            raise ConstructionError(f"Start page must be non-negative, got {self.start}")
        if self.end is not None and self.end < self.start:
            raise ConstructionError(
                f"End page {self.end} must not be before start page {self.start}"
            )

    @classmethod
    def parse(cls, text: str) -> "PageRange":
        if text is None or not text.strip():
            raise ConstructionError("Page range text is empty")
        collapsed = _DASH_RUN.sub("-", text.strip())
        parts = [part.strip() for part in collapsed.split("-")]
        if len(parts) > 2 or not all(part.isdigit() for part in parts):
            raise ConstructionError(f"Invalid page range: {text!r}")
        if len(parts) == 1:
            return cls(int(parts[0]))
        return cls(int(parts[0]), int(parts[1]))

    @classmethod
    def try_parse(cls, text: Optional[str]) -> Optional["PageRange"]:
        if not text:
            return None
        try:
            return cls.parse(text)
        except ConstructionError:
            return None

    @property
    def page_count(self) -> int:
        if self.end is None:
            return 1
        return self.end - self.start + 1

    def __str__(self) -> str:
        if self.end is None:
            return str(self.start)
        return f"{self.start}--{self.end}"


_DOI_PREFIX = re.compile(r"^(?:https?://(?:dx\.)?doi\.org/|doi:\s*)", re.IGNORECASE)
_DOI_PATTERN = re.compile(r"^10\.\d{4,}(?:\.\d+)*/\S+$")


def normalize_doi(text: str) -> str:
    """Strip resolver URLs and ``doi:`` prefixes from an identifier."""
    value = (text or "").strip()
    previous = None
    while value != previous:
        previous = value
        value = _DOI_PREFIX.sub("", value).strip()
    return value


@dataclass(frozen=True, eq=False)
class Doi:
    """A normalized Digital Object Identifier."""

    identifier: str

    def __post_init__(self) -> None:
        identifier = normalize_doi(self.identifier)
        if not _DOI_PATTERN.match(identifier):
            raise ConstructionError(f"Invalid DOI: {self.identifier!r}")
        object.__setattr__(self, "identifier", identifier)

    @classmethod
    def parse(cls, text: str) -> "Doi":
        return cls(text)

    @classmethod
    def try_parse(cls, text: Optional[str]) -> Optional["Doi"]:
        if not text:
            return None
        try:
            return cls(text)
        except ConstructionError:
            return None

    @property
    def url(self) -> str:
        return f"https://doi.org/{self.identifier}"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Doi):
            return NotImplemented
        return self.identifier.lower() == other.identifier.lower()

    def __hash__(self) -> int:
        return hash(self.identifier.lower())

    def __str__(self) -> str:
        return self.identifier


@dataclass(frozen=True)
class ValidationResult:
    """Errors and warnings collected while checking an entry."""

    errors: Tuple[str, ...] = field(default_factory=tuple)
    warnings: Tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "errors", tuple(self.errors))
        object.__setattr__(self, "warnings", tuple(self.warnings))

    @property
    def is_valid(self) -> bool:
        return not self.errors

    @property
    def has_warnings(self) -> bool:
        return bool(self.warnings)

    def merge(self, other: "ValidationResult") -> "ValidationResult":
        return ValidationResult(self.errors + other.errors, self.warnings + other.warnings)

    def with_error(self, message: str) -> "ValidationResult":
        return ValidationResult(self.errors + (message,), self.warnings)

    def with_warning(self, message: str) -> "ValidationResult":
        return ValidationResult(self.errors, self.warnings + (message,))

    @classmethod
    def combine(cls, results: Iterable["ValidationResult"]) -> "ValidationResult":
        combined = cls()
        for result in results:
            combined = combined.merge(result)
        return combined


_MONTH_NAMES = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)


class Month(IntEnum):
    JANUARY = 1
    FEBRUARY = 2
    MARCH = 3
    APRIL = 4
    MAY = 5
    JUNE = 6
    JULY = 7
    AUGUST = 8
    SEPTEMBER = 9
    OCTOBER = 10
    NOVEMBER = 11
    DECEMBER = 12

    @property
    def full_name(self) -> str:
        return _MONTH_NAMES[self.value - 1]

    @property
    def abbreviation(self) -> str:
        return self.full_name[:3].lower()

    @classmethod
    def from_number(cls, number: int) -> "Month":
        if not 1 <= number <= 12:
            raise ConstructionError(f"Month number must be between 1 and 12, got {number}")
        return cls(number)

    @classmethod
    def parse(cls, text: Optional[str]) -> Optional["Month"]:
        """Read a month from a number, an abbreviation or a full name."""
        if not text:
            return None
        value = text.strip().strip(".").lower()
        if value.isdigit():
            number = int(value)
            return cls(number) if 1 <= number <= 12 else None
        for month in cls:
            name = month.full_name.lower()
            if value in (name, name[:3]) or (month == cls.SEPTEMBER and value == "sept"):
                return month
        return None


__all__ = [
    "Author",
    "AuthorFormat",
    "Doi",
    "Month",
    "PageRange",
    "ValidationResult",
    "normalize_doi",
]
