import io

import pytest

from bibkit.errors import BibParseError
from bibkit.lexer import CharSource, Lexer, TokenKind


def test_tokens_carry_line_and_column():
    lexer = Lexer('  @article{key,\n title = "Q {x}" # jan}')

    at = lexer.next_block()
    assert (at.kind, at.line, at.column) == (TokenKind.AT, 1, 3)

    entry_type = lexer.next_token()
    assert (entry_type.kind, entry_type.value, entry_type.column) == (TokenKind.IDENT, "article", 4)
    assert lexer.next_token().kind is TokenKind.LBRACE
    assert lexer.read_key("}") == ("key", ",")

    name = lexer.next_token()
    assert (name.value, name.line, name.column) == ("title", 2, 2)
    assert lexer.next_token().kind is TokenKind.EQUALS

    value = lexer.next_value()
    assert (value.kind, value.value, value.column) == (TokenKind.QUOTED, "Q {x}", 10)
    assert lexer.accept("#")
    assert lexer.next_value().value == "jan"
    assert lexer.next_token().kind is TokenKind.RBRACE
    assert lexer.next_token().kind is TokenKind.EOF


def test_braced_values_keep_nesting_and_escaped_braces():
    lexer = Lexer(r"{A {Nested} \{ value}")

    assert lexer.next_value().value == r"A {Nested} \{ value"


def test_parentheses_act_as_block_delimiters():
    lexer = Lexer("@misc(key)")
    lexer.next_block()
    lexer.next_token()

    opener = lexer.next_token()
    assert (opener.kind, opener.value) == (TokenKind.LBRACE, "(")
    assert lexer.read_key(")") == ("key", ")")


def test_line_comments_between_blocks_are_captured():
    lexer = Lexer("% first\n% second\n@misc{k}")

    assert lexer.next_block().kind is TokenKind.AT
    assert lexer.comments == ["first", "second"]


def test_unterminated_brace_reports_opening_position():
    lexer = Lexer("\n  {never closed")

    with pytest.raises(BibParseError) as excinfo:
        lexer.next_value()

    assert (excinfo.value.line, excinfo.value.column) == (2, 3)
    assert "Unterminated" in str(excinfo.value)


def test_unbalanced_closing_brace_in_quotes():
    with pytest.raises(BibParseError):
        Lexer('"oops } here"').next_value()


def test_missing_key_is_reported():
    lexer = Lexer("title = {x}}")

    with pytest.raises(BibParseError, match="Missing entry key"):
        lexer.read_key("}")


def test_char_source_rewind_replays_positions():
    source = CharSource(io.StringIO("ab\ncd"), chunk_size=2)
    source.next()
    source.start_recording()
    assert [source.next() for _ in range(3)] == ["b", "\n", "c"]

    source.rewind()
    assert source.replaying
    assert source.position == (1, 2)
    assert [source.next() for _ in range(4)] == ["b", "\n", "c", "d"]
    assert source.position == (2, 3)
    assert source.next() is None
