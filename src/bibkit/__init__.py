"""BibTeX parsing, normalization, matching and serialization toolkit."""

from .author_names import parse_author_list, parse_author_name
from .encoder import to_latex, to_unicode
from .entry import BibEntry
from .errors import (
    BibKitError,
    BibParseError,
    BibValidationError,
    ConstructionError,
    ParseDiagnostic,
    RegistryError,
)
from .keygen import KeyFormat, generate_key, generate_keys, regenerate_keys
from .matcher import EntryMatcher, find_duplicates
from .models import Author, AuthorFormat, Doi, Month, PageRange, ValidationResult
from .parser import BibParser, iter_entries, parse_all, parse_one
from .registry import BibRegistry, EntryTypeDefinition, FieldName, default_registry
from .serializer import BibSerializer, serialize
from .settings import BibEncoding, LineEnding, ParserSettings, SerializerSettings

__all__ = [
    "Author",
    "AuthorFormat",
    "BibEncoding",
    "BibEntry",
    "BibKitError",
    "BibParseError",
    "BibParser",
    "BibRegistry",
    "BibSerializer",
    "BibValidationError",
    "ConstructionError",
    "Doi",
    "EntryMatcher",
    "EntryTypeDefinition",
    "FieldName",
    "KeyFormat",
    "LineEnding",
    "Month",
    "PageRange",
    "ParseDiagnostic",
    "ParserSettings",
    "RegistryError",
    "SerializerSettings",
    "ValidationResult",
    "default_registry",
    "find_duplicates",
    "generate_key",
    "generate_keys",
    "iter_entries",
    "parse_all",
    "parse_author_list",
    "parse_author_name",
    "parse_one",
    "regenerate_keys",
    "serialize",
    "to_latex",
    "to_unicode",
]
