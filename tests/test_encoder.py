import pytest

from bibkit.encoder import (
    UNICODE_TO_LATEX,
    contains_special_characters,
    escape_structure,
    to_latex,
    to_unicode,
)


def test_to_latex_escapes_accents_and_reserved_characters():
    assert to_latex("Müller") == 'M\\"uller'
    assert to_latex("50% & more") == "50\\% \\& more"
    assert to_latex("Straße") == "Stra\\ss{}e"


def test_to_latex_separates_commands_from_following_letters():
    assert to_latex("°C") == "\\textdegree{}C"
    assert to_unicode(to_latex("°C")) == "°C"


def test_keep_structure_leaves_braces_and_commands():
    assert to_latex("{DNA} in café", keep_structure=True) == "{DNA} in caf\\'e"
    assert to_latex("{DNA}") == "\\{DNA\\}"


@pytest.mark.parametrize(
    "encoded",
    [r"Caf\'e", r"Caf\'{e}", r"Caf{\'e}", r"Caf{\'{e}}"],
)
def test_to_unicode_accepts_common_accent_spellings(encoded):
    assert to_unicode(encoded) == "Café"


def test_to_unicode_handles_dotless_i_and_argument_commands():
    assert to_unicode(r"Na\"{\i}ve") == "Naïve"
    assert to_unicode(r"Gar\c{c}on") == "Garçon"
    assert to_unicode(r"Dvo\v{r}\'ak") == "Dvořák"


def test_to_unicode_named_commands():
    assert to_unicode(r"and so on\ldots") == "and so on…"
    assert to_unicode(r"\textquotedblleft{}hi\textquotedblright{}") == "“hi”"
    assert to_unicode(r"pages 1\textendash{}2") == "pages 1–2"


def test_to_unicode_leaves_unknown_commands_alone():
    assert to_unicode(r"\foo bar") == r"\foo bar"
    assert to_unicode(r"\alphabet") == r"\alphabet"
    assert to_unicode("plain text -- with dashes") == "plain text -- with dashes"


def test_every_table_character_round_trips():
    for char in UNICODE_TO_LATEX:
        assert to_unicode(to_latex(char)) == char, char


def test_escape_structure_only_touches_braces_and_backslash():
    assert escape_structure("a { b } \\ 50%") == "a \\{ b \\} \\textbackslash{} 50%"


def test_contains_special_characters():
    assert contains_special_characters("Ünïcode")
    assert not contains_special_characters("plain ascii")
