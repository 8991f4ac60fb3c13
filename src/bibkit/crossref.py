"""Crossref-backed DOI resolver."""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

from .entry import BibEntry
from .keygen import generate_key
from .metadata import MetadataResolver
from .models import Author, Doi
from .registry import BibRegistry

logger = logging.getLogger(__name__)

API_BASE_URL = "https://api.crossref.org/works"

_TYPE_MAP = {
    "journal-article": "article",
    "proceedings-article": "inproceedings",
    "book": "book",
    "monograph": "book",
    "edited-book": "book",
    "reference-book": "book",
    "book-chapter": "incollection",
    "book-section": "incollection",
    "dissertation": "phdthesis",
    "report": "techreport",
    "proceedings": "proceedings",
}

_DATE_FIELDS = ("published-print", "published-online", "issued", "created")


def _first(value: Any) -> Optional[str]:
    if isinstance(value, list) and value:
        return str(value[0])
    if isinstance(value, str):
        return value
    return None


def _year(message: Dict[str, Any]) -> Optional[int]:
    for field in _DATE_FIELDS:
        parts = (message.get(field) or {}).get("date-parts") or []
        if parts and parts[0] and parts[0][0]:
            try:
                return int(parts[0][0])
            except (TypeError, ValueError):
                continue
    return None


def _authors(people: List[Dict[str, Any]]) -> List[Author]:
    authors: List[Author] = []
    for person in people:
        family = (person.get("family") or "").strip()
        given = (person.get("given") or "").strip()
        if family:
            given_parts = given.split()
            authors.append(
                Author(
                    family,
                    given_parts[0] if given_parts else None,
                    " ".join(given_parts[1:]) or None,
                    person.get("suffix"),
                )
            )
        elif person.get("name"):
            authors.append(Author("{" + person["name"].strip() + "}"))
    return authors


def entry_from_message(message: Dict[str, Any], registry: Optional[BibRegistry] = None) -> Optional[BibEntry]:
    """Map one Crossref ``works`` message onto an entry."""
    if not isinstance(message, dict) or not message.get("DOI"):
        return None
    entry_type = _TYPE_MAP.get(str(message.get("type", "")), "misc")
    entry = BibEntry(entry_type, registry=registry)

    entry.title = _first(message.get("title"))
    entry.set_authors(_authors(message.get("author") or []))
    entry.set_editors(_authors(message.get("editor") or []))
    entry.year = _year(message)

    container = _first(message.get("container-title"))
    if entry_type == "article":
        entry.journal = container
    elif entry_type in ("inproceedings", "incollection"):
        entry.booktitle = container

    entry.set_field("volume", message.get("volume"))
    entry.set_field("number", message.get("issue"))
    entry.set_field("pages", message.get("page"))
    entry.publisher = message.get("publisher")
    entry.url = message.get("URL")
    entry.doi = Doi.try_parse(message.get("DOI"))
    entry.key = generate_key(entry)
    return entry


class CrossrefResolver(MetadataResolver):
    """Look up DOIs through the Crossref REST API.

    A failed lookup is logged and reported as ``None``; no retries.
    """

    name = "crossref"

    def __init__(
        self,
        client: Optional[httpx.Client] = None,
        timeout: float = 6.0,
        transport: Optional[httpx.BaseTransport] = None,
        mailto: Optional[str] = None,
        registry: Optional[BibRegistry] = None,
    ) -> None:
        self.timeout = timeout
        self.registry = registry
        self._client = client or httpx.Client(
            timeout=timeout, headers=self._headers(mailto), transport=transport
        )

    @staticmethod
    def _headers(mailto: Optional[str]) -> Dict[str, str]:
        agent = "bibkit/0.1"
        if mailto:
            agent = f"{agent} (mailto:{mailto})"
        return {"Accept": "application/json", "User-Agent": agent}

    def resolve(self, doi: str) -> Optional[BibEntry]:
        parsed = Doi.try_parse(doi)
        if parsed is None:
            logger.warning("Not a valid DOI: %r", doi)
            return None
        url = f"{API_BASE_URL}/{parsed.identifier}"
        try:
            response = self._client.get(url)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as exc:
            logger.warning("Crossref returned %s for %s", exc.response.status_code, parsed)
            return None
        except httpx.RequestError as exc:
            logger.warning("Crossref request for %s failed: %s", parsed, exc)
            return None
        except ValueError:
            logger.warning("Crossref returned invalid JSON for %s", parsed)
            return None
        if not isinstance(payload, dict):
            return None
        return entry_from_message(payload.get("message") or {}, self.registry)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "CrossrefResolver":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


__all__ = ["API_BASE_URL", "CrossrefResolver", "entry_from_message"]
