import pytest

from bibkit.errors import ConstructionError
from bibkit.models import Author, AuthorFormat, Doi, Month, PageRange, ValidationResult


def test_author_equality_ignores_case_and_source_notation():
    first = Author.from_text("John Smith")
    second = Author.from_text("SMITH, john")

    assert first == second
    assert hash(first) == hash(second)
    assert Author("Smith", "John") != Author("Smith", "Jane")


def test_author_requires_last_name():
    with pytest.raises(ConstructionError):
        Author("   ")


def test_author_renderings():
    author = Author("Smith", "John", "Robert", "Jr.")

    assert author.last_first() == "Smith, John Robert Jr."
    assert author.first_last() == "John Robert Smith Jr."
    assert author.format(AuthorFormat.FIRST_LAST) == "John Robert Smith Jr."
    assert author.initials() == "J. R."
    assert str(Author("Plato")) == "Plato"


def test_page_range_parsing_accepts_dash_runs():
    expected = PageRange(100, 110)

    for text in ("100-110", "100--110", "100---110", " 100 - 110 ", "100–110"):
        assert PageRange.parse(text) == expected
    assert str(expected) == "100--110"
    assert PageRange.parse(str(expected)) == expected


def test_page_range_bounds():
    with pytest.raises(ConstructionError):
        PageRange(110, 100)
    with pytest.raises(ConstructionError):
        PageRange(-1)

    assert PageRange(100, 100).page_count == 1
    assert PageRange(7).page_count == 1
    assert PageRange(1, 5).page_count == 5
    assert str(PageRange(7)) == "7"


def test_page_range_rejects_garbage():
    with pytest.raises(ConstructionError):
        PageRange.parse("abc")
    with pytest.raises(ConstructionError):
        PageRange.parse("1-2-3")
    assert PageRange.try_parse("e1234") is None
    assert PageRange.try_parse(None) is None


def test_doi_normalizes_prefixes():
    doi = Doi.parse("https://doi.org/10.1000/XYZ.123")

    assert doi.identifier == "10.1000/XYZ.123"
    assert doi.url == "https://doi.org/10.1000/XYZ.123"
    assert Doi("doi:10.1000/xyz.123") == doi
    assert Doi("http://dx.doi.org/10.1000/xyz.123") == doi
    assert hash(Doi("10.1000/xyz.123")) == hash(doi)
    assert Doi(str(doi)) == doi


def test_doi_rejects_invalid_identifiers():
    with pytest.raises(ConstructionError):
        Doi("not-a-doi")
    with pytest.raises(ConstructionError):
        Doi("10.12/too-short-registrant")
    assert Doi.try_parse("") is None
    assert Doi.try_parse("11.1000/x") is None


def test_validation_result_accumulates():
    result = ValidationResult().with_error("missing title").with_warning("odd year")

    assert not result.is_valid
    assert result.has_warnings
    assert result.errors == ("missing title",)

    merged = ValidationResult.combine([result, ValidationResult(warnings=["second"])])
    assert merged.warnings == ("odd year", "second")
    assert ValidationResult().is_valid


def test_month_parsing():
    assert Month.parse("March") is Month.MARCH
    assert Month.parse("mar") is Month.MARCH
    assert Month.parse("3") is Month.MARCH
    assert Month.parse("Sept.") is Month.SEPTEMBER
    assert Month.parse("13") is None
    assert Month.parse("someday") is None
    assert Month.DECEMBER.abbreviation == "dec"
    assert Month.JUNE.full_name == "June"
    with pytest.raises(ConstructionError):
        Month.from_number(0)
