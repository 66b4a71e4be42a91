"""
Pipeline - type model to Swift generator.

1. Phase 1 (Loader): Parse the registry document into the type model
2. Phase 2 (Naming): Bind types and members to Swift identifiers
3. Phase 3 (Compilers): Emit struct and enum declarations with Codable bodies
4. Phase 4 (Formatter): Optional post-processing with swift-format
5. Phase 5 (Sink): Hand the fragments to a string buffer or an atomic file writer

The WireCodec executes the same wire contract in Python.
"""

from __future__ import annotations

from .codec import ArityMismatch, EnumValue, MissingField, UnknownVariant, WireCodec, WireDecodeError
from .config import CodeGeneratorConfig, FormatterConfig, OptionalStyle
from .naming.name_resolver import StructNaming
from .errors import GenerationError, NamingConflict, RegistryFormatError, StructuralError, UnresolvedReference
from .generator import PipelineGenerator
from .model import RegistryLoader, TypeRegistry, load_registry
from .sinks import FileSink, Sink, StringSink

__all__ = [
    "PipelineGenerator",
    "CodeGeneratorConfig",
    "FormatterConfig",
    "OptionalStyle",
    "StructNaming",
    "GenerationError",
    "NamingConflict",
    "RegistryFormatError",
    "StructuralError",
    "UnresolvedReference",
    "RegistryLoader",
    "TypeRegistry",
    "load_registry",
    "WireCodec",
    "EnumValue",
    "WireDecodeError",
    "UnknownVariant",
    "ArityMismatch",
    "MissingField",
    "Sink",
    "StringSink",
    "FileSink",
]
