"""
Naming engine.

Contains case conversion and identifier collision resolution.
"""

from __future__ import annotations

from .case_conversion import CaseConvention, convert_case, split_words, to_camel_case, to_pascal_case, to_snake_case
from .name_resolver import (
    DuplicateNameStrategy,
    NameBinding,
    NameScope,
    Resolution,
    escape_keyword,
    resolve,
    swift_member_name,
    swift_type_name,
)

__all__ = [
    "CaseConvention",
    "convert_case",
    "split_words",
    "to_camel_case",
    "to_pascal_case",
    "to_snake_case",
    "DuplicateNameStrategy",
    "NameBinding",
    "NameScope",
    "Resolution",
    "escape_keyword",
    "resolve",
    "swift_member_name",
    "swift_type_name",
]
