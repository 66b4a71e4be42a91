"""
Swift code generation backends.

Contains the type mapper, the special-type recognizer and the struct and
enum compilers.
"""

from __future__ import annotations

from .base import RenderedType, TemplateBackend
from .enum_compiler import EnumCompiler
from .special_types import SpecialType, recognize
from .struct_compiler import StructCompiler
from .type_mapper import SwiftTypeMapper
from .wire_forms import PayloadKind, WireForm, wire_form

__all__ = [
    "RenderedType",
    "TemplateBackend",
    "EnumCompiler",
    "StructCompiler",
    "SwiftTypeMapper",
    "SpecialType",
    "recognize",
    "PayloadKind",
    "WireForm",
    "wire_form",
]
