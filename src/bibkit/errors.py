"""Exception types and diagnostics."""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional


class BibKitError(Exception):
    """Base class for every error raised by bibkit."""


class BibParseError(BibKitError):
    """Malformed input, with the position of the offending source text."""

    def __init__(
        self,
        message: str,
        line: int = 0,
        column: int = 0,
        fragment: Optional[str] = None,
    ):
        self.message = message
        self.line = line
        self.column = column
        self.fragment = fragment
        super().__init__(self._render())

    def _render(self) -> str:
        text = self.message
        if self.line > 0:
            text = f"{text} at line {self.line}, column {self.column}"
        if self.fragment:
            text = f"{text}: '{self.fragment}'"
        return text

    def to_diagnostic(self) -> "ParseDiagnostic":
        return ParseDiagnostic(self.message, self.line, self.column, self.fragment)


class ConstructionError(BibKitError, ValueError):
    """A value object was built from invalid components."""


class RegistryError(BibKitError, ValueError):
    """Invalid entry type or field alias registration."""


class BibValidationError(BibKitError):
    """An entry failed validation before serialization."""

    def __init__(self, entry_key: str, errors: List[str]):
        self.entry_key = entry_key
        self.errors = list(errors)
        label = entry_key or "<no key>"
        super().__init__(f"Entry '{label}' failed validation: {'; '.join(self.errors)}")


@dataclass(frozen=True)
class ParseDiagnostic:
    """A parse problem that was recovered from in lenient mode."""

    message: str
    line: int = 0
    column: int = 0
    fragment: Optional[str] = None

    def __str__(self) -> str:
        return str(BibParseError(self.message, self.line, self.column, self.fragment))


__all__ = [
    "BibKitError",
    "BibParseError",
    "BibValidationError",
    "ConstructionError",
    "ParseDiagnostic",
    "RegistryError",
]
