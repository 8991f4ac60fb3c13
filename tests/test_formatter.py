from bibkit.entry import BibEntry
from bibkit.formatter import SUPPORTED_STYLES, format_bibliography, format_entry, get_formatter


def test_apa_citation(article):
    assert format_entry(article, "apa") == (
        "Smith, J. R. & Doe, J. (2020). A Study. Journal of Tests, 5(2), 10–20. https://doi.org/10.1234/abc"
    )


def test_chicago_uses_full_names(article):
    text = format_entry(article, "chicago")

    assert text.startswith("Smith, John Robert and Jane Doe.")
    assert "\"A Study\"" in text
    assert "(2020)" in text


def test_mla_abbreviates_many_authors(article):
    article.add_author("Ada Lovelace")

    assert format_entry(article, "mla").startswith("Smith, John Robert, et al.")


def test_ieee_initials_first(article):
    assert format_entry(article, "ieee").startswith("J. R. Smith and J. Doe")


def test_harvard_year_after_authors(article):
    assert format_entry(article, "harvard") == (
        "Smith, J. R. and Doe, J. (2020) A Study. Journal of Tests, 5(2), 10–20. https://doi.org/10.1234/abc"
    )


def test_harvard_without_authors_or_year():
    entry = BibEntry("book", "anon").set_field("title", "Anonymous Work").set_field("publisher", "Press")

    assert format_entry(entry, "harvard") == "(n.d.) Anonymous Work. Press"


def test_unknown_style_falls_back_to_apa(article):
    assert get_formatter("nonexistent").name == "apa"
    assert set(SUPPORTED_STYLES) == {"apa", "chicago", "mla", "harvard", "ieee"}


def test_entry_without_authors_or_year():
    entry = BibEntry("book", "anon").set_field("title", "Anonymous Work").set_field("publisher", "Press")

    assert format_entry(entry) == "(n.d.). Anonymous Work. Press"


def test_bibliography_separates_entries(article):
    other = article.clone()
    other.title = "Second"

    assert format_bibliography([article, other]).count("\n\n") == 1
