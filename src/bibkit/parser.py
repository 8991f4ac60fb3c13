"""BibTeX parser built on the pull lexer."""
from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Dict, Iterator, List, Mapping, Optional, Union

from .author_names import normalize_author_field
from .encoder import to_unicode
from .entry import BibEntry
from .errors import BibParseError, ParseDiagnostic
from .lexer import Lexer, Source, Token, TokenKind
from .macros import MacroTable
from .models import Month
from .registry import BibRegistry, FieldName, default_registry
from .settings import ParserSettings

logger = logging.getLogger(__name__)

_KEY_WHITESPACE = re.compile(r"\s+")
_KEY_SEPARATORS = re.compile(r"[:/\\]")


class _DiscardedBlock(Exception):
    """A block that was read completely but must be dropped."""

    def __init__(self, error: BibParseError):
        super().__init__(str(error))
        self.error = error


def _auto_correct_key(key: str) -> str:
    return _KEY_SEPARATORS.sub("_", _KEY_WHITESPACE.sub("", key))


class BibParser:
    """Turn BibTeX text into :class:`BibEntry` objects.

    Each parse call gets a fresh macro table. After a call the parser
    exposes the macros, comments, preambles and recovered diagnostics of
    that call.
    """

    def __init__(
        self,
        settings: Optional[ParserSettings] = None,
        registry: Optional[BibRegistry] = None,
        macros: Optional[Mapping[str, str]] = None,
    ):
        self.settings = settings or ParserSettings()
        self.registry = registry or default_registry
        self._initial_macros = dict(macros or {})
        self.macros: Dict[str, str] = {}
        self.comments: List[str] = []
        self.preambles: List[str] = []
        self.diagnostics: List[ParseDiagnostic] = []

    # public API -----------------------------------------------------------

    def parse_all(self, source: Source) -> List[BibEntry]:
        return list(self.iter_entries(source))

    def parse_one(self, source: Source) -> BibEntry:
        entries = self.parse_all(source)
        if len(entries) != 1:
            raise BibParseError(f"Expected exactly one entry, found {len(entries)}")
        return entries[0]

    def parse_file(self, path: Union[str, Path], encoding: str = "utf-8") -> List[BibEntry]:
        with open(path, encoding=encoding) as handle:
            return self.parse_all(handle)

    def iter_entries(self, source: Source) -> Iterator[BibEntry]:
        """Yield entries one block at a time.

        Works on strings and text streams; a stream is consumed as the
        generator advances and cannot be restarted.
        """
        table = MacroTable(self._initial_macros)
        lexer = Lexer(source)
        self.macros = {}
        self.comments = lexer.comments
        self.preambles = []
        self.diagnostics = []
        count = 0

        while True:
            at = lexer.next_block(capture_comments=self.settings.preserve_comments)
            if at.kind is TokenKind.EOF:
                break
            lexer.begin_block()
            try:
                entry = self._parse_block(lexer, table)
            except _DiscardedBlock as discarded:
                lexer.end_block()
                self._record(discarded.error)
                continue
            except BibParseError as exc:
                if self.settings.strict_mode:
                    raise
                lexer.rewind_block()
                self._record(exc)
                continue
            lexer.end_block()
            self.macros = table.as_dict()
            if entry is not None:
                count += 1
                yield entry

        self.macros = table.as_dict()
        logger.debug(
            "Parsed %d entries (%d macros, %d diagnostics)",
            count,
            len(self.macros),
            len(self.diagnostics),
        )

    # blocks ---------------------------------------------------------------

    def _record(self, error: BibParseError) -> None:
        self.diagnostics.append(error.to_diagnostic())
        logger.warning("Skipping malformed block: %s", error)

    def _parse_block(self, lexer: Lexer, table: MacroTable) -> Optional[BibEntry]:
        type_token = lexer.next_token()
        if type_token.kind not in (TokenKind.IDENT, TokenKind.NUMBER):
            raise lexer.error(
                "Expected entry type after '@'", type_token.line, type_token.column, lexer.block_fragment()
            )
        entry_type = type_token.value.lower()

        opener = lexer.next_token()
        if opener.kind is not TokenKind.LBRACE:
            raise lexer.error(
                f"Expected '{{' or '(' after '@{type_token.value}'",
                opener.line,
                opener.column,
                lexer.block_fragment(),
            )
        closer = "}" if opener.value == "{" else ")"

        if entry_type == "comment":
            body = lexer.read_raw_body(closer, opener.line, opener.column)
            if self.settings.preserve_comments:
                self.comments.append(body.strip())
            return None
        if entry_type == "preamble":
            value = self._read_expression(lexer, table, [])
            self._expect_closer(lexer, closer, "@preamble")
            if self.settings.preserve_comments:
                self.preambles.append(value)
            return None
        if entry_type == "string":
            self._parse_string(lexer, table, closer)
            return None
        return self._parse_entry(lexer, table, type_token, closer)

    def _expect_closer(self, lexer: Lexer, closer: str, context: str) -> None:
        token = lexer.next_token()
        if token.kind is TokenKind.COMMA:
            token = lexer.next_token()
        if token.kind is not TokenKind.RBRACE or token.value != closer:
            raise lexer.error(
                f"Expected '{closer}' to close {context}", token.line, token.column, lexer.block_fragment()
            )

    def _parse_string(self, lexer: Lexer, table: MacroTable, closer: str) -> None:
        name = lexer.next_token()
        if name.kind is not TokenKind.IDENT:
            raise lexer.error("Expected macro name in @string", name.line, name.column, lexer.block_fragment())
        equals = lexer.next_token()
        if equals.kind is not TokenKind.EQUALS:
            raise lexer.error(
                f"Expected '=' after macro '{name.value}'", equals.line, equals.column, lexer.block_fragment()
            )
        issues: List[BibParseError] = []
        value = self._read_expression(lexer, table, issues)
        self._expect_closer(lexer, closer, "@string")
        if issues:
            raise _DiscardedBlock(issues[0])
        table.define(name.value, value)

    def _parse_entry(self, lexer: Lexer, table: MacroTable, type_token: Token, closer: str) -> BibEntry:
        entry_type = type_token.value.lower()
        if not self.registry.is_known_type(entry_type) and self.settings.strict_mode:
            raise lexer.error(
                f"Unknown entry type '{type_token.value}'", type_token.line, type_token.column, type_token.value
            )

        key, terminator = lexer.read_key(closer)
        if self.settings.auto_correct_keys:
            key = _auto_correct_key(key)
        entry = BibEntry(entry_type, key, self.registry)
        issues: List[BibParseError] = []

        while terminator != closer:
            token = lexer.next_token()
            if token.kind is TokenKind.RBRACE:
                if token.value != closer:
                    raise lexer.error("Mismatched closing delimiter", token.line, token.column, lexer.block_fragment())
                break
            if token.kind is TokenKind.EOF:
                raise lexer.error(
                    "Unterminated entry", type_token.line, type_token.column, lexer.block_fragment()
                )
            if token.kind not in (TokenKind.IDENT, TokenKind.NUMBER):
                raise lexer.error("Expected field name", token.line, token.column, lexer.block_fragment())

            equals = lexer.next_token()
            if equals.kind is not TokenKind.EQUALS:
                raise lexer.error(
                    f"Expected '=' after field '{token.value}'", equals.line, equals.column, lexer.block_fragment()
                )
            value = self._read_expression(lexer, table, issues)
            self._store_field(entry, token, value, issues)

            separator = lexer.next_token()
            if separator.kind is TokenKind.COMMA:
                continue
            if separator.kind is TokenKind.RBRACE and separator.value == closer:
                break
            if separator.kind is TokenKind.EOF:
                raise lexer.error(
                    "Unterminated entry", type_token.line, type_token.column, lexer.block_fragment()
                )
            raise lexer.error(
                f"Expected ',' or '{closer}' after field '{token.value}'",
                separator.line,
                separator.column,
                lexer.block_fragment(),
            )

        if not self.settings.preserve_field_order:
            entry.sort_fields()
        if issues:
            raise _DiscardedBlock(issues[0])
        return entry

    # values ---------------------------------------------------------------

    def _read_expression(self, lexer: Lexer, table: MacroTable, issues: List[BibParseError]) -> str:
        parts = []
        while True:
            operand = lexer.next_value()
            parts.append(self._resolve_operand(operand, table, issues))
            if not lexer.accept("#"):
                break
        return "".join(parts)

    def _resolve_operand(self, token: Token, table: MacroTable, issues: List[BibParseError]) -> str:
        if token.kind is not TokenKind.IDENT:
            return token.value
        value = table.lookup(token.value)
        if value is not None:
            return value if self.settings.expand_macros else token.value

        error = BibParseError(f"Undefined macro '{token.value}'", token.line, token.column, token.value)
        if self.settings.strict_mode:
            raise error
        if self.settings.strict_macros:
            issues.append(error)
        else:
            self.diagnostics.append(error.to_diagnostic())
            logger.warning("%s; using the literal name", error)
        return token.value

    def _store_field(self, entry: BibEntry, name: Token, value: str, issues: List[BibParseError]) -> None:
        settings = self.settings
        field = self.registry.resolve_alias(name.value)
        if settings.normalize_whitespace:
            value = " ".join(value.split())
        if settings.convert_latex_to_unicode:
            value = to_unicode(value)
        if settings.normalize_author_names and field in (FieldName.AUTHOR, FieldName.EDITOR):
            value = normalize_author_field(value)
        if settings.normalize_months and field == FieldName.MONTH:
            month = Month.parse(value)
            if month is not None:
                value = month.abbreviation
        if settings.require_numeric_year and field == FieldName.YEAR and not value.strip().isdigit():
            error = BibParseError(f"Non-numeric year '{value}'", name.line, name.column, value)
            if settings.strict_mode:
                raise error
            issues.append(error)
        entry.set_field(field, value)


def parse_all(
    source: Source,
    settings: Optional[ParserSettings] = None,
    registry: Optional[BibRegistry] = None,
) -> List[BibEntry]:
    return BibParser(settings, registry).parse_all(source)


def parse_one(
    source: Source,
    settings: Optional[ParserSettings] = None,
    registry: Optional[BibRegistry] = None,
) -> BibEntry:
    return BibParser(settings, registry).parse_one(source)


def iter_entries(
    source: Source,
    settings: Optional[ParserSettings] = None,
    registry: Optional[BibRegistry] = None,
) -> Iterator[BibEntry]:
    return BibParser(settings, registry).iter_entries(source)


__all__ = ["BibParser", "iter_entries", "parse_all", "parse_one"]
