"""Canonical BibTeX output for entry collections."""
from __future__ import annotations

import logging
import textwrap
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple, Union

from .author_names import join_authors
from .encoder import escape_structure, to_latex
from .entry import BibEntry
from .errors import BibValidationError
from .registry import FieldName
from .settings import BibEncoding, SerializerSettings

logger = logging.getLogger(__name__)


def is_balanced(text: str) -> bool:
    """True when the lexer would read ``{text}`` back as the same text."""
    depth = 0
    index = 0
    while index < len(text):
        ch = text[index]
        if ch == "\\":
            if index + 1 >= len(text):
                return False
            index += 2
            continue
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth < 0:
                return False
        index += 1
    return depth == 0


def _protect_quotes(text: str) -> str:
    out = []
    depth = 0
    index = 0
    while index < len(text):
        ch = text[index]
        if ch == "\\" and index + 1 < len(text):
            out.append(text[index : index + 2])
            index += 2
            continue
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
        if ch == '"' and depth == 0:
            out.append('{"}')
        else:
            out.append(ch)
        index += 1
    return "".join(out)


class BibSerializer:
    """Render entries as text according to :class:`SerializerSettings`."""

    def __init__(self, settings: Optional[SerializerSettings] = None):
        self.settings = settings or SerializerSettings()
        self._macros: Dict[str, str] = {}

    def add_string_macro(self, name: str, value: str) -> "BibSerializer":
        self._macros[name] = value
        return self

    def serialize(
        self,
        entries: Iterable[BibEntry],
        preambles: Iterable[str] = (),
        comments: Iterable[str] = (),
        update_author_fields: bool = False,
    ) -> str:
        entries = list(entries)
        if self.settings.validate_before_serialization:
            self._validate_all(entries)

        blocks: List[str] = []
        for name, value in self._macros.items():
            blocks.append(f"@string{{{name} = {self._delimit(self._encode(value))}}}")
        for preamble in preambles:
            blocks.append(f"@preamble{{{self._delimit(self._encode(preamble))}}}")
        for comment in comments:
            blocks.append("\n".join(f"% {line}".rstrip() for line in comment.splitlines() or [""]))
        for entry in entries:
            if update_author_fields:
                entry.update_contributor_fields(self.settings.author_format)
            blocks.append(self._render_entry(entry))

        logger.debug("Serialized %d entries and %d macros", len(entries), len(self._macros))
        text = "\n\n".join(blocks)
        if text:
            text += "\n"
        newline = self.settings.line_ending.text
        return text if newline == "\n" else text.replace("\n", newline)

    def serialize_entry(self, entry: BibEntry) -> str:
        return self.serialize([entry])

    def write_file(self, entries: Iterable[BibEntry], path: Union[str, Path], **kwargs) -> None:
        text = self.serialize(entries, **kwargs)
        with open(path, "w", encoding="utf-8", newline="") as handle:
            handle.write(text)

    # internals ------------------------------------------------------------

    @staticmethod
    def _validate_all(entries: List[BibEntry]) -> None:
        for entry in entries:
            result = entry.validate()
            if not result.is_valid:
                raise BibValidationError(entry.key, list(result.errors))

    def _ordered_fields(self, entry: BibEntry) -> List[Tuple[str, str]]:
        values = entry.fields()
        for field, names in ((FieldName.AUTHOR, entry.authors), (FieldName.EDITOR, entry.editors)):
            if field in values and names and entry.contributors_complete(field):
                values[field] = join_authors(names, self.settings.author_format)

        ordered: List[Tuple[str, str]] = []
        for name in self.settings.field_order or []:
            canonical = entry.canonical_name(name)
            if canonical in values and all(canonical != seen for seen, _ in ordered):
                ordered.append((canonical, values[canonical]))
        listed = {name for name, _ in ordered}
        ordered.extend((name, value) for name, value in values.items() if name not in listed)
        return [(name, value) for name, value in ordered if value != ""]

    def _render_entry(self, entry: BibEntry) -> str:
        lines = [f"@{entry.entry_type}{{{entry.key},"]
        fields = self._ordered_fields(entry)
        for index, (name, value) in enumerate(fields):
            comma = "," if index < len(fields) - 1 else ""
            lines.append(self._render_field(name, value, comma))
        lines.append("}")
        return "\n".join(lines)

    def _render_field(self, name: str, value: str, comma: str) -> str:
        prefix = f"{self.settings.indent}{name} = "
        delimited = self._delimit(self._encode(value))
        line = f"{prefix}{delimited}{comma}"
        if not self.settings.wrap_long_fields or len(line) <= self.settings.max_line_length:
            return line
        return textwrap.fill(
            delimited + comma,
            width=self.settings.max_line_length,
            initial_indent=prefix,
            subsequent_indent=self.settings.indent * 2,
            break_long_words=False,
            break_on_hyphens=False,
        )

    def _encode(self, value: str) -> str:
        balanced = is_balanced(value)
        if self.settings.encoding == BibEncoding.LATEX:
            return to_latex(value, keep_structure=balanced)
        if not balanced:
            return escape_structure(value)
        return value

    def _delimit(self, text: str) -> str:
        if self.settings.use_braces:
            return f"{{{text}}}"
        return f'"{_protect_quotes(text)}"'


def serialize(entries: Iterable[BibEntry], settings: Optional[SerializerSettings] = None) -> str:
    return BibSerializer(settings).serialize(entries)


__all__ = ["BibSerializer", "is_balanced", "serialize"]
