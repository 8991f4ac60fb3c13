"""Command line interface for cleaning up BibTeX files."""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List

from .errors import BibKitError
from .formatter import SUPPORTED_STYLES, format_bibliography
from .keygen import KeyFormat, regenerate_keys
from .matcher import EntryMatcher
from .parser import BibParser
from .report import render_report
from .serializer import BibSerializer
from .settings import BibEncoding, ParserSettings, SerializerSettings

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Parse, check and rewrite BibTeX files")
    parser.add_argument("input", type=Path, help="Path to the .bib file")
    parser.add_argument("--output", type=Path, help="Write the canonical BibTeX here instead of stdout")
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Abort on the first parse error instead of skipping the malformed block",
    )
    parser.add_argument(
        "--rekey",
        choices=[fmt.value for fmt in KeyFormat],
        help="Regenerate citation keys using the given format",
    )
    parser.add_argument(
        "--keep-keys",
        action="store_true",
        help="With --rekey, only generate keys for entries that have none",
    )
    parser.add_argument("--dedupe", action="store_true", help="Report groups of duplicate entries")
    parser.add_argument("--latex", action="store_true", help="Escape special characters as LaTeX")
    parser.add_argument("--field-order", help="Comma separated list of fields to write first")
    parser.add_argument(
        "--style",
        choices=list(SUPPORTED_STYLES),
        help="Print formatted citations in this style instead of BibTeX",
    )
    parser.add_argument(
        "--no-validate",
        action="store_true",
        help="Write entries even if required fields are missing",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser


def main(argv: List[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s: %(message)s",
    )

    bib_parser = BibParser(ParserSettings(strict_mode=args.strict))
    try:
        entries = bib_parser.parse_file(args.input)
    except (BibKitError, OSError) as exc:
        logger.error("Could not read %s: %s", args.input, exc)
        return 1

    if args.rekey:
        regenerate_keys(entries, KeyFormat(args.rekey), preserve_existing=args.keep_keys)

    duplicates = EntryMatcher().find_duplicates(entries) if args.dedupe else []
    print(render_report(entries, bib_parser.diagnostics, duplicates), file=sys.stderr)

    if args.style:
        output = format_bibliography(entries, args.style) + "\n"
    else:
        settings = SerializerSettings(
            encoding=BibEncoding.LATEX if args.latex else BibEncoding.UNICODE,
            field_order=args.field_order.split(",") if args.field_order else None,
            validate_before_serialization=not args.no_validate,
        )
        serializer = BibSerializer(settings)
        for name, value in bib_parser.macros.items():
            serializer.add_string_macro(name, value)
        try:
            output = serializer.serialize(entries, preambles=bib_parser.preambles)
        except BibKitError as exc:
            logger.error("%s", exc)
            return 1

    if args.output:
        with open(args.output, "w", encoding="utf-8", newline="") as handle:
            handle.write(output)
    else:
        sys.stdout.write(output)
    return 0


if __name__ == "__main__":  # pragma: no cover - manual invocation helper
    raise SystemExit(main())
