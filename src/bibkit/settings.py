"""Parser and serializer configuration models."""
from __future__ import annotations

import os
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .models import AuthorFormat


class BibEncoding(str, Enum):
    UNICODE = "unicode"
    LATEX = "latex"


class LineEnding(str, Enum):
    LF = "lf"
    CRLF = "crlf"
    SYSTEM = "system"

    @property
    def text(self) -> str:
        if self is LineEnding.CRLF:
            return "\r\n"
        if self is LineEnding.SYSTEM:
            return os.linesep
        return "\n"


class ParserSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    preserve_comments: bool = True
    strict_mode: bool = False
    strict_macros: bool = False
    expand_macros: bool = True
    preserve_field_order: bool = True
    auto_correct_keys: bool = False
    convert_latex_to_unicode: bool = True
    normalize_author_names: bool = True
    normalize_months: bool = False
    require_numeric_year: bool = False
    normalize_whitespace: bool = False


class SerializerSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    indent: str = "  "
    field_order: Optional[List[str]] = None
    encoding: BibEncoding = BibEncoding.UNICODE
    line_ending: LineEnding = LineEnding.LF
    validate_before_serialization: bool = True
    use_braces: bool = Field(
        True,
        description=(
            "Wrap values in braces. Quote mode writes a bare \" as {\"}, which reads back"
            " with its braces, so only brace mode round-trips every value"
        ),
    )
    wrap_long_fields: bool = False
    max_line_length: int = Field(80, description="Column at which long values are wrapped")
    author_format: AuthorFormat = AuthorFormat.LAST_FIRST

    @field_validator("indent")
    @classmethod
    def indent_is_whitespace(cls, value: str) -> str:
        if value.strip():
            raise ValueError("indent must contain only whitespace")
        return value

    @field_validator("max_line_length")
    @classmethod
    def positive_line_length(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("max_line_length must be greater than zero")
        return value

    @field_validator("field_order")
    @classmethod
    def lowercase_field_order(cls, value: Optional[List[str]]) -> Optional[List[str]]:
        if value is None:
            return None
        cleaned = [name.strip().lower() for name in value if name and name.strip()]
        return cleaned or None


__all__ = ["BibEncoding", "LineEnding", "ParserSettings", "SerializerSettings"]
