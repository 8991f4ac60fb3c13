from bibkit.entry import BibEntry
from bibkit.keygen import (
    KeyFormat,
    abbreviate,
    base_key,
    clean_key,
    generate_key,
    generate_keys,
    regenerate_keys,
    resolve_collision,
)


def _entry(author="Smith, John", year=2020, title=None, entry_type="article", **fields) -> BibEntry:
    entry = BibEntry(entry_type)
    entry.set_field("author", author)
    entry.year = year
    entry.title = title
    for name, value in fields.items():
        entry.set_field(name, value)
    return entry


def test_author_year_keys_get_letter_suffixes():
    entries = [_entry(), _entry(), _entry()]

    assert generate_keys(entries) == ["smith2020", "smith2020a", "smith2020b"]


def test_title_formats_skip_stop_words():
    entry = _entry("Knuth, Donald", 1968, "The Art of Computer Programming")

    assert generate_key(entry, KeyFormat.AUTHOR_TITLE_YEAR) == "knuthart1968"
    assert generate_key(entry, KeyFormat.AUTHOR_TITLE_YEAR_SHORT) == "knuart1968"


def test_journal_format_abbreviates_venue():
    article = _entry(journal="Journal of Machine Learning Research")
    paper = _entry(entry_type="inproceedings", booktitle="Advances in Neural Information Processing Systems")
    report = _entry(entry_type="techreport")

    assert generate_key(article, KeyFormat.AUTHOR_JOURNAL_YEAR) == "smithjmlr2020"
    assert generate_key(paper, KeyFormat.AUTHOR_JOURNAL_YEAR) == "smithanips2020"
    assert generate_key(report, KeyFormat.AUTHOR_JOURNAL_YEAR) == "smithtechreport2020"


def test_placeholders_for_missing_parts():
    assert base_key(BibEntry()) == "noauthornodate"
    assert base_key(BibEntry(), KeyFormat.AUTHOR_TITLE_YEAR) == "noauthornotitlenodate"


def test_title_of_only_stop_words_uses_first_word():
    entry = _entry(title="Of the")

    assert generate_key(entry, KeyFormat.AUTHOR_TITLE_YEAR) == "smithof2020"


def test_keys_are_ascii_and_safe():
    assert generate_key(_entry("Müller, Jörg")) == "muller2020"
    assert generate_key(_entry("O'Brien, Pat")) == "o-brien2020"
    assert generate_key(_entry("{World Health Organization}")) == "world-health-organization2020"
    assert clean_key("!!!") == "unknownkey"


def test_existing_keys_are_avoided_case_insensitively():
    assert generate_key(_entry(), existing_keys=["Smith2020", "smith2020a"]) == "smith2020b"


def test_collisions_fall_back_to_numbers():
    used = {"k"} | {"k" + chr(ord("a") + offset) for offset in range(26)}

    assert resolve_collision("k", used) == "k1"
    assert resolve_collision("k", used | {"k1"}) == "k2"


def test_batch_preserves_existing_keys():
    keyed = _entry()
    keyed.key = "smith2020"
    entries = [_entry(), keyed, _entry()]

    assert generate_keys(entries) == ["smith2020a", "smith2020", "smith2020b"]
    assert generate_keys(entries, preserve_existing=False) == ["smith2020", "smith2020a", "smith2020b"]


def test_regenerate_keys_assigns_in_place():
    entries = regenerate_keys([_entry(), _entry("Doe, Jane", 1999)])

    assert [entry.key for entry in entries] == ["smith2020", "doe1999"]


def test_abbreviate_falls_back_to_prefix():
    assert abbreviate("The Of") == "the"
    assert abbreviate("Nature") == "n"
