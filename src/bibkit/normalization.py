"""Normalization helpers for key generation and entry matching."""
from __future__ import annotations

import re
import unicodedata

from .models import normalize_doi


def fold_ascii(value: str | None) -> str:
    """Drop diacritics and anything else outside ASCII."""
    if not value:
        return ""
    text = unicodedata.normalize("NFKD", value)
    text = "".join(ch for ch in text if not unicodedata.combining(ch))
    return text.encode("ascii", "ignore").decode("ascii")


def normalize_text(value: str | None) -> str:
    """Lower-case, strip accents and punctuation, collapse whitespace."""
    if not value:
        return ""
    text = unicodedata.normalize("NFKD", value)
    text = "".join(ch for ch in text if not unicodedata.combining(ch))
    text = text.replace("&", " and ").lower()
    text = re.sub(r"[^\w\s]", " ", text)
    text = re.sub(r"\s+", " ", text).strip()
    return text


def normalize_title(value: str | None) -> str:
    return normalize_text(value)


def normalize_last_name(value: str | None) -> str:
    """Compare-ready surname: lower-cased with spaces, hyphens and braces removed."""
    if not value:
        return ""
    return re.sub(r"[\s\-{}]+", "", value).lower()


def normalize_url(value: str | None) -> str:
    if not value:
        return ""
    return value.strip().rstrip("/").lower()


def normalize_doi_key(value: str | None) -> str:
    if not value:
        return ""
    return normalize_doi(value).lower()
