from bibkit.cli import main
from bibkit.parser import parse_all


def test_cli_rewrites_file(sample_bib_path, tmp_path, capsys):
    output = tmp_path / "clean.bib"

    exit_code = main([str(sample_bib_path), "--output", str(output), "--field-order", "year,title"])

    assert exit_code == 0
    text = output.read_text(encoding="utf-8")
    assert text.startswith("@string{jts = {Journal of Testing Studies}}")
    assert "@article{doe2021,\n  year = {2021},\n  title = {Sample Article Title}," in text
    assert len(parse_all(text)) == 3
    assert "Entries parsed: 3" in capsys.readouterr().err


def test_cli_rekeys_and_reports_duplicates(sample_bib, tmp_path, capsys):
    path = tmp_path / "dupes.bib"
    path.write_text(sample_bib + "\n@book{copy, author = {R. Patel}, title = {Data validation handbook}, publisher = {Testing Press}, year = 2019}\n", encoding="utf-8")

    exit_code = main([str(path), "--rekey", "author_title_year", "--dedupe"])

    captured = capsys.readouterr()
    assert exit_code == 0
    assert "@book{pateldata2019," in captured.out
    assert "@book{pateldata2019a," in captured.out
    assert "[DUPLICATE] pateldata2019, pateldata2019a" in captured.err


def test_cli_formats_citations(sample_bib_path, capsys):
    exit_code = main([str(sample_bib_path), "--style", "apa"])

    out = capsys.readouterr().out
    assert exit_code == 0
    assert "Patel, R. (2019). Data Validation Handbook. Testing Press" in out


def test_cli_strict_mode_fails_on_malformed_input(tmp_path, capsys):
    path = tmp_path / "broken.bib"
    path.write_text("@article{key,\n  title = {Unclosed\n", encoding="utf-8")

    assert main([str(path), "--strict"]) == 1
    assert main([str(path)]) == 0
    assert "[PARSE] Unterminated brace-delimited value" in capsys.readouterr().err


def test_cli_refuses_invalid_entries(tmp_path):
    path = tmp_path / "invalid.bib"
    path.write_text("@article{key, title = {Missing everything else}}", encoding="utf-8")

    assert main([str(path)]) == 1
    assert main([str(path), "--no-validate"]) == 0


def test_cli_missing_file(tmp_path):
    assert main([str(tmp_path / "nope.bib")]) == 1
