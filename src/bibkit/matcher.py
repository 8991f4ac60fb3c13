"""Logic for matching entries against each other and finding duplicates."""
from __future__ import annotations

from typing import Iterable, List, Optional, Sequence, Tuple

from .entry import BibEntry
from .models import Author
from .normalization import normalize_doi_key, normalize_last_name, normalize_title, normalize_url

TITLE_THRESHOLD = 0.6
AUTHOR_OVERLAP = 0.6
MIN_KEY_LENGTH = 4


class EntryMatcher:
    """Find the same work across collections using ranked heuristics.

    DOI, then URL, then author + title + year, then citation key. The first
    heuristic that produces a hit decides the match.
    """

    def find_match(self, entry: BibEntry, candidates: Iterable[BibEntry]) -> Optional[BibEntry]:
        candidates = list(candidates)

        doi = normalize_doi_key(entry.get_field("doi"))
        if doi:
            for candidate in candidates:
                if normalize_doi_key(candidate.get_field("doi")) == doi:
                    return candidate

        url = normalize_url(entry.url)
        if url:
            for candidate in candidates:
                if normalize_url(candidate.url) == url:
                    return candidate

        if entry.authors and entry.title and entry.year is not None:
            for candidate in candidates:
                if self._bibliographic_match(entry, candidate):
                    return candidate

        if len(entry.key) >= MIN_KEY_LENGTH:
            for candidate in candidates:
                if candidate.key == entry.key:
                    return candidate

        return None

    def find_matches(
        self, entries: Iterable[BibEntry], candidates: Iterable[BibEntry]
    ) -> List[Tuple[BibEntry, Optional[BibEntry]]]:
        candidates = list(candidates)
        return [(entry, self.find_match(entry, candidates)) for entry in entries]

    def find_duplicates(self, entries: Iterable[BibEntry]) -> List[List[BibEntry]]:
        """Group entries that match the first member of a group."""
        groups: List[List[BibEntry]] = []
        for entry in entries:
            for group in groups:
                if self.find_match(entry, [group[0]]) is not None:
                    group.append(entry)
                    break
            else:
                groups.append([entry])
        return [group for group in groups if len(group) > 1]

    def _bibliographic_match(self, entry: BibEntry, candidate: BibEntry) -> bool:
        if not candidate.authors or not candidate.title or candidate.year is None:
            return False
        if candidate.year != entry.year:
            return False
        if not self.authors_match(entry.authors, candidate.authors):
            return False
        return self.title_similarity(entry.title, candidate.title) > TITLE_THRESHOLD

    @staticmethod
    def authors_match(first: Sequence[Author], second: Sequence[Author]) -> bool:
        if not first or not second:
            return False
        if normalize_last_name(first[0].last) != normalize_last_name(second[0].last):
            return False
        if len(first) == 1 or len(second) == 1:
            return True
        other = {normalize_last_name(author.last) for author in second}
        shared = sum(1 for author in first if normalize_last_name(author.last) in other)
        return shared / min(len(first), len(second)) >= AUTHOR_OVERLAP

    @staticmethod
    def title_similarity(first: Optional[str], second: Optional[str]) -> float:
        """Word overlap of normalized titles, in the range 0..1."""
        left = normalize_title(first)
        right = normalize_title(second)
        if not left or not right:
            return 0.0
        if left in right or right in left:
            return 0.9
        left_words = set(left.split())
        right_words = set(right.split())
        similarity = len(left_words & right_words) / max(len(left_words), len(right_words))
        if len(left.split()) > 3 and len(right.split()) > 3 and similarity > 0.5:
            similarity = min(1.0, similarity + 0.1)
        return similarity


def find_duplicates(entries: Iterable[BibEntry]) -> List[List[BibEntry]]:
    return EntryMatcher().find_duplicates(entries)


__all__ = ["EntryMatcher", "find_duplicates"]
