"""Metadata resolvers that turn identifiers into entries."""
from __future__ import annotations

from typing import Dict, List, Optional

from .entry import BibEntry
from .models import Doi, normalize_doi


class MetadataResolver:
    """Base interface for DOI lookups.

    ``resolve`` returns a populated entry or ``None`` when nothing was found.
    Retries and rate limiting are the resolver's own business.
    """

    name: str = "base"

    def resolve(self, doi: str) -> Optional[BibEntry]:  # pragma: no cover - interface
        raise NotImplementedError


class CompositeMetadataResolver(MetadataResolver):
    """Ask each resolver in turn until one returns an entry."""

    def __init__(self, resolvers: List[MetadataResolver]):
        self.resolvers = resolvers
        self.name = "composite"

    def resolve(self, doi: str) -> Optional[BibEntry]:
        for resolver in self.resolvers:
            entry = resolver.resolve(doi)
            if entry is not None:
                return entry
        return None


class StaticMetadataResolver(MetadataResolver):
    """Resolver over an in-memory map, for tests and offline use."""

    def __init__(self, static_map: Dict[str, BibEntry]):
        self.static_map = {normalize_doi(doi).lower(): entry for doi, entry in static_map.items()}
        self.name = "static"

    def resolve(self, doi: str) -> Optional[BibEntry]:
        entry = self.static_map.get(normalize_doi(doi).lower())
        return entry.clone() if entry is not None else None


def fill_missing_fields(entry: BibEntry, resolved: BibEntry) -> BibEntry:
    """Copy fields from ``resolved`` that ``entry`` does not have yet."""
    for name, value in resolved.items():
        if not entry.has_field(name):
            entry.set_field(name, value)
    return entry


def enrich(entry: BibEntry, resolver: MetadataResolver) -> BibEntry:
    doi = Doi.try_parse(entry.get_field("doi"))
    if doi is None:
        return entry
    resolved = resolver.resolve(doi.identifier)
    if resolved is None:
        return entry
    return fill_missing_fields(entry, resolved)


__all__ = [
    "CompositeMetadataResolver",
    "MetadataResolver",
    "StaticMetadataResolver",
    "enrich",
    "fill_missing_fields",
]
