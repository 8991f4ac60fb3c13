import pytest

from bibkit.entry import BibEntry
from bibkit.errors import BibValidationError
from bibkit.models import AuthorFormat
from bibkit.parser import BibParser, parse_all, parse_one
from bibkit.serializer import BibSerializer, is_balanced, serialize
from bibkit.settings import BibEncoding, LineEnding, SerializerSettings


def _entry() -> BibEntry:
    entry = BibEntry("article", "smith2020")
    entry.set_field("author", "Smith, John")
    entry.title = "A Study"
    entry.journal = "J"
    entry.year = 2020
    return entry


def test_canonical_layout():
    assert serialize([_entry()]) == (
        "@article{smith2020,\n"
        "  author = {Smith, John},\n"
        "  title = {A Study},\n"
        "  journal = {J},\n"
        "  year = {2020}\n"
        "}\n"
    )


def test_round_trip_preserves_entries(article):
    article.title = "Über {DNA} & RNA: 50% faster"
    article.note = "open { brace"
    article.set_field("keywords", "ß, ø, “quoted”")

    text = BibSerializer().serialize([article])
    reparsed = parse_one(text)

    assert reparsed == article
    assert reparsed.note == "open { brace"


def test_round_trip_in_latex_mode(article):
    article.title = "Müller’s théorème {DNA}"
    settings = SerializerSettings(encoding=BibEncoding.LATEX)

    text = serialize([article], settings)

    assert 'M\\"uller' in text
    assert parse_one(text) == article


def test_sample_file_round_trip(sample_bib):
    parser = BibParser()
    entries = parser.parse_all(sample_bib)
    serializer = BibSerializer()
    for name, value in parser.macros.items():
        serializer.add_string_macro(name, value)

    text = serializer.serialize(entries)

    assert text.startswith('@string{jts = {Journal of Testing Studies}}\n\n@article{doe2021,')
    assert parse_all(text) == entries


def test_explicit_field_order_comes_first():
    settings = SerializerSettings(field_order=["Year", "title", "missing"])

    lines = serialize([_entry()], settings).splitlines()

    assert lines[1] == "  year = {2020},"
    assert lines[2] == "  title = {A Study},"
    assert lines[3] == "  author = {Smith, John},"


def test_author_format_and_update_flag():
    entry = _entry()
    serializer = BibSerializer(SerializerSettings(author_format=AuthorFormat.FIRST_LAST))

    assert "author = {John Smith}" in serializer.serialize([entry])
    assert entry.get_field("author") == "Smith, John"

    serializer.serialize([entry], update_author_fields=True)
    assert entry.get_field("author") == "John Smith"


def test_crlf_line_endings():
    text = serialize([_entry()], SerializerSettings(line_ending=LineEnding.CRLF))

    assert "\r\n" in text
    assert "\n" not in text.replace("\r\n", "")


def test_validation_is_all_or_nothing():
    broken = BibEntry("article", "broken").set_field("title", "No author")

    with pytest.raises(BibValidationError) as excinfo:
        serialize([_entry(), broken])

    assert excinfo.value.entry_key == "broken"
    assert "Required field 'author' is missing" in excinfo.value.errors


def test_validation_can_be_disabled():
    broken = BibEntry("article", "broken").set_field("title", "No author")

    text = serialize([broken], SerializerSettings(validate_before_serialization=False))

    assert text.startswith("@article{broken,")


def test_quote_delimiters():
    entry = _entry()
    entry.note = 'say "hi"'

    text = serialize([entry], SerializerSettings(use_braces=False))

    assert '  title = "A Study",' in text
    assert '  note = "say {"}hi{"}"' in text


def test_long_fields_wrap():
    entry = _entry()
    entry.title = " ".join(["word"] * 30)
    settings = SerializerSettings(wrap_long_fields=True, max_line_length=40)

    text = serialize([entry], settings)
    title_lines = [line for line in text.splitlines() if "word" in line]

    assert len(title_lines) > 1
    assert all(len(line) <= 40 for line in title_lines)
    assert title_lines[1].startswith("    word")
    reparsed = parse_one(text)
    assert " ".join(reparsed.title.split()) == entry.title


def test_preambles_and_comments_are_written():
    text = BibSerializer().serialize([_entry()], preambles=["\\def\\x{y}"], comments=["made by hand"])

    assert '@preamble{{\\def\\x{y}}}' in text
    assert "% made by hand" in text


def test_settings_validation():
    with pytest.raises(ValueError):
        SerializerSettings(indent="xx")
    with pytest.raises(ValueError):
        SerializerSettings(max_line_length=0)


def test_is_balanced():
    assert is_balanced("a {b} c")
    assert is_balanced(r"escaped \{")
    assert not is_balanced("open {")
    assert not is_balanced("} close {")
    assert not is_balanced("trailing \\")


def test_empty_input_serializes_to_empty_text():
    assert serialize([]) == ""


def test_unparseable_author_is_written_verbatim():
    entry = _entry()
    entry.set_field("author", "Smith, John and , Jane")

    text = serialize([entry], SerializerSettings(author_format=AuthorFormat.FIRST_LAST))

    assert "author = {Smith, John and , Jane}" in text
    assert parse_one(text).get_field("author") == "Smith, John and , Jane"


def test_parsed_unparseable_author_round_trips():
    source = "@misc{k1, author = {Smith, John and , Jane}, title = {T}}"

    text = serialize(parse_all(source))

    assert parse_one(text).get_field("author") == "Smith, John and , Jane"


def test_quote_mode_limitation_is_documented():
    description = SerializerSettings.model_fields["use_braces"].description

    assert "round-trips" in description
    assert '{"}' in description
