"""Plain-text summaries of a parsed bibliography."""
from __future__ import annotations

from typing import List, Sequence

from .entry import BibEntry
from .errors import ParseDiagnostic


def render_report(
    entries: Sequence[BibEntry],
    diagnostics: Sequence[ParseDiagnostic] = (),
    duplicates: Sequence[Sequence[BibEntry]] = (),
) -> str:
    """Return a human-readable report of parse problems, validation and duplicates."""

    lines = ["Bibliography Report", f"Entries parsed: {len(entries)}"]
    issues: List[str] = []

    for diagnostic in diagnostics:
        issues.append(f"[PARSE] {diagnostic}")

    for entry in entries:
        result = entry.validate()
        label = entry.key or "<no key>"
        for message in result.errors:
            issues.append(f"[ERROR] {label}: {message}")
        for message in result.warnings:
            issues.append(f"[WARNING] {label}: {message}")

    for group in duplicates:
        keys = ", ".join(entry.key or "<no key>" for entry in group)
        issues.append(f"[DUPLICATE] {keys}")

    if not issues:
        lines.append("No issues detected.")
        return "\n".join(lines)

    lines.append("Issues:")
    lines.extend(issues)
    return "\n".join(lines)
