from bibkit.entry import BibEntry
from bibkit.errors import ParseDiagnostic
from bibkit.report import render_report


def test_report_without_issues(article):
    report = render_report([article])

    assert report.splitlines() == ["Bibliography Report", "Entries parsed: 1", "No issues detected."]


def test_report_lists_every_issue(article):
    broken = BibEntry("article", "").set_field("title", "T")
    diagnostic = ParseDiagnostic("Unterminated entry", 3, 1, "@article{x")

    report = render_report([article, broken], [diagnostic], [[article, article.clone()]])

    assert "Issues:" in report
    assert "[PARSE] Unterminated entry at line 3, column 1: '@article{x'" in report
    assert "[ERROR] <no key>: Entry key is missing" in report
    assert "[DUPLICATE] smith2020, smith2020" in report
