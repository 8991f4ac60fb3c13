import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT / "src") not in sys.path:
    sys.path.insert(0, str(ROOT / "src"))

import pytest

from bibkit.entry import BibEntry


SAMPLE_BIB = r"""% Sample bibliography used across the test suite
@string{jts = "Journal of Testing Studies"}

@article{doe2021,
  author = {Jane Doe and Smith, John Robert},
  title = {Sample Article Title},
  journal = jts,
  year = 2021,
  volume = {10},
  number = {2},
  pages = {123-130},
  doi = {10.1234/jt.2021.456},
}

@inproceedings{smith2020,
  author = {Alex Smith and Lee, B.},
  title = {Another Study on {Testing}},
  booktitle = {Proceedings of the Reference Checking Conference},
  year = {2020},
  url = {https://example.com/testing},
}

@book{patel2019,
  author = {Patel, R.},
  title = {Data Validation Handbook},
  publisher = {Testing Press},
  year = 2019,
}
"""


@pytest.fixture()
def sample_bib() -> str:
    """Three entries, one macro and a leading comment."""

    return SAMPLE_BIB


@pytest.fixture()
def sample_bib_path(tmp_path: Path) -> Path:
    path = tmp_path / "sample.bib"
    path.write_text(SAMPLE_BIB, encoding="utf-8")
    return path


@pytest.fixture()
def article() -> BibEntry:
    entry = BibEntry("article", "smith2020")
    entry.set_authors(["Smith, John Robert", "Jane Doe"])
    entry.title = "A Study"
    entry.journal = "Journal of Tests"
    entry.year = 2020
    entry.volume = 5
    entry.number = "2"
    entry.pages = "10-20"
    entry.doi = "10.1234/abc"
    return entry
