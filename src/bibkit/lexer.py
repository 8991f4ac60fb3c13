"""Tokenizer for BibTeX source text.

The lexer pulls characters lazily from a string or a text stream and keeps
1-based line and column numbers for every token. Values are only read when
the parser asks for one, since ``{`` opens either an entry or a value
depending on where it appears.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, TextIO, Tuple, Union

from .errors import BibParseError

Source = Union[str, TextIO]

_DELIMITERS = set('{}(),=#"%@')
_FRAGMENT_LENGTH = 40


class TokenKind(str, Enum):
    AT = "at"
    IDENT = "ident"
    NUMBER = "number"
    LBRACE = "lbrace"
    RBRACE = "rbrace"
    COMMA = "comma"
    EQUALS = "equals"
    HASH = "hash"
    BRACED = "braced"
    QUOTED = "quoted"
    EOF = "eof"


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    value: str
    line: int
    column: int


def _fragment(text: str) -> str:
    text = " ".join(text.split())
    if len(text) > _FRAGMENT_LENGTH:
        return text[: _FRAGMENT_LENGTH - 3] + "..."
    return text


class CharSource:
    """Character reader with position tracking, recording and pushback."""

    def __init__(self, source: Source, chunk_size: int = 8192):
        if isinstance(source, str):
            self._buffer = source
            self._stream: Optional[TextIO] = None
        else:
            self._buffer = ""
            self._stream = source
        self._chunk_size = chunk_size
        self._pos = 0
        self._line = 1
        self._column = 1
        self._pushback: List[Tuple[str, int, int]] = []
        self._recording: Optional[List[Tuple[str, int, int]]] = None

    def _fill(self) -> bool:
        if self._stream is None:
            return False
        chunk = self._stream.read(self._chunk_size)
        if not chunk:
            self._stream = None
            return False
        self._buffer = self._buffer[self._pos:] + chunk
        self._pos = 0
        return True

    @property
    def replaying(self) -> bool:
        return bool(self._pushback)

    @property
    def position(self) -> Tuple[int, int]:
        if self._pushback:
            _, line, column = self._pushback[-1]
            return line, column
        return self._line, self._column

    def peek(self) -> Optional[str]:
        if self._pushback:
            return self._pushback[-1][0]
        if self._pos >= len(self._buffer) and not self._fill():
            return None
        return self._buffer[self._pos]

    def next(self) -> Optional[str]:
        if self._pushback:
            item = self._pushback.pop()
        else:
            if self._pos >= len(self._buffer) and not self._fill():
                return None
            ch = self._buffer[self._pos]
            self._pos += 1
            item = (ch, self._line, self._column)
            if ch == "\n":
                self._line += 1
                self._column = 1
            else:
                self._column += 1
        if self._recording is not None:
            self._recording.append(item)
        return item[0]

    def start_recording(self) -> None:
        self._recording = []

    def stop_recording(self) -> None:
        self._recording = None

    def recorded_text(self) -> str:
        return "".join(item[0] for item in self._recording or [])

    def rewind(self) -> None:
        """Push every recorded character back so it is read again."""
        recorded = self._recording or []
        self._recording = None
        self._pushback.extend(reversed(recorded))


class Lexer:
    """Pull-based tokenizer driven by the parser."""

    def __init__(self, source: Source):
        self._chars = CharSource(source)
        self.comments: List[str] = []

    @property
    def position(self) -> Tuple[int, int]:
        return self._chars.position

    def error(self, message: str, line: int = 0, column: int = 0, fragment: Optional[str] = None) -> BibParseError:
        if not line:
            line, column = self.position
        return BibParseError(message, line, column, fragment)

    # block bookkeeping ----------------------------------------------------

    def begin_block(self) -> None:
        self._chars.start_recording()

    def end_block(self) -> None:
        self._chars.stop_recording()

    def block_fragment(self) -> str:
        return _fragment("@" + self._chars.recorded_text())

    def rewind_block(self) -> None:
        self._chars.rewind()

    # scanning -------------------------------------------------------------

    def _read_line_comment(self) -> str:
        self._chars.next()
        chars = []
        while True:
            ch = self._chars.peek()
            if ch is None or ch == "\n":
                break
            chars.append(self._chars.next())
        return "".join(chars).strip()

    def _skip_whitespace(self) -> None:
        while True:
            ch = self._chars.peek()
            if ch is None:
                return
            if ch.isspace():
                self._chars.next()
            elif ch == "%":
                self._read_line_comment()
            else:
                return

    def _read_word(self) -> str:
        chars = []
        while True:
            ch = self._chars.peek()
            if ch is None or ch.isspace() or ch in _DELIMITERS:
                break
            chars.append(self._chars.next())
        return "".join(chars)

    def next_block(self, capture_comments: bool = True) -> Token:
        """Skip text between blocks and return the next ``@`` or EOF."""
        while True:
            ch = self._chars.peek()
            line, column = self.position
            if ch is None:
                return Token(TokenKind.EOF, "", line, column)
            if ch == "@":
                self._chars.next()
                return Token(TokenKind.AT, "@", line, column)
            if ch == "%":
                replaying = self._chars.replaying
                comment = self._read_line_comment()
                if capture_comments and not replaying:
                    self.comments.append(comment)
                continue
            self._chars.next()

    def next_token(self) -> Token:
        self._skip_whitespace()
        line, column = self.position
        ch = self._chars.peek()
        if ch is None:
            return Token(TokenKind.EOF, "", line, column)
        single = {
            "{": TokenKind.LBRACE,
            "(": TokenKind.LBRACE,
            "}": TokenKind.RBRACE,
            ")": TokenKind.RBRACE,
            ",": TokenKind.COMMA,
            "=": TokenKind.EQUALS,
            "#": TokenKind.HASH,
            "@": TokenKind.AT,
        }
        if ch in single:
            self._chars.next()
            return Token(single[ch], ch, line, column)
        if ch == '"':
            self._chars.next()
            return Token(TokenKind.QUOTED, self._read_quoted(line, column), line, column)
        word = self._read_word()
        kind = TokenKind.NUMBER if word.isdigit() else TokenKind.IDENT
        return Token(kind, word, line, column)

    def next_value(self) -> Token:
        """Read one value operand: braced, quoted, number or macro name."""
        self._skip_whitespace()
        line, column = self.position
        ch = self._chars.peek()
        if ch == "{":
            self._chars.next()
            return Token(TokenKind.BRACED, self._read_braced(line, column), line, column)
        if ch == '"':
            self._chars.next()
            return Token(TokenKind.QUOTED, self._read_quoted(line, column), line, column)
        if ch is None or ch in _DELIMITERS:
            raise self.error("Expected a field value", line, column, ch)
        word = self._read_word()
        kind = TokenKind.NUMBER if word.isdigit() else TokenKind.IDENT
        return Token(kind, word, line, column)

    def accept(self, char: str) -> bool:
        self._skip_whitespace()
        if self._chars.peek() == char:
            self._chars.next()
            return True
        return False

    def read_key(self, closer: str) -> Tuple[str, str]:
        """Read an entry key up to the first comma or the block closer."""
        self._skip_whitespace()
        line, column = self.position
        chars = []
        while True:
            ch = self._chars.next()
            if ch is None:
                raise self.error("Unterminated entry", line, column, _fragment("".join(chars)))
            if ch == "," or ch == closer:
                key = "".join(chars).strip()
                if "=" in key or "{" in key:
                    raise self.error("Missing entry key", line, column, _fragment(key))
                return key, ch
            chars.append(ch)

    def read_raw_body(self, closer: str, line: int, column: int) -> str:
        """Read verbatim text up to the closer, keeping nested braces."""
        depth = 0
        chars = []
        while True:
            ch = self._chars.next()
            if ch is None:
                raise self.error("Unterminated block", line, column, self.block_fragment())
            if depth == 0 and ch == closer:
                return "".join(chars)
            if ch == "{":
                depth += 1
            elif ch == "}" and depth > 0:
                depth -= 1
            chars.append(ch)

    def _read_braced(self, line: int, column: int) -> str:
        depth = 1
        chars = []
        while True:
            ch = self._chars.next()
            if ch is None:
                raise self.error(
                    "Unterminated brace-delimited value", line, column, _fragment("{" + "".join(chars))
                )
            if ch == "\\":
                chars.append(ch)
                escaped = self._chars.next()
                if escaped is not None:
                    chars.append(escaped)
                continue
            if ch == "{":
                depth += 1
            elif ch == "}":
                depth -= 1
                if depth == 0:
                    return "".join(chars)
            chars.append(ch)

    def _read_quoted(self, line: int, column: int) -> str:
        depth = 0
        chars = []
        while True:
            ch = self._chars.next()
            if ch is None:
                raise self.error("Unterminated quoted value", line, column, _fragment('"' + "".join(chars)))
            if ch == "\\":
                chars.append(ch)
                escaped = self._chars.next()
                if escaped is not None:
                    chars.append(escaped)
                continue
            if ch == '"' and depth == 0:
                return "".join(chars)
            if ch == "{":
                depth += 1
            elif ch == "}":
                if depth == 0:
                    raise self.error(
                        "Unbalanced '}' in quoted value", line, column, _fragment('"' + "".join(chars) + "}")
                    )
                depth -= 1
            chars.append(ch)


__all__ = ["CharSource", "Lexer", "Token", "TokenKind"]
