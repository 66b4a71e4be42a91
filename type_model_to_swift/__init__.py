"""Type Model to Swift Generator

A Python package for generating Swift declarations and Codable
conformances from a language-neutral type model, compatible with the
origin program's JSON wire convention (externally, internally, adjacently
tagged and untagged enums).
"""

__version__ = "1.0.0"

from .pipeline import (
    CodeGeneratorConfig,
    EnumValue,
    FileSink,
    FormatterConfig,
    GenerationError,
    PipelineGenerator,
    RegistryLoader,
    StringSink,
    WireCodec,
)

__all__ = [
    "PipelineGenerator",
    "CodeGeneratorConfig",
    "FormatterConfig",
    "GenerationError",
    "RegistryLoader",
    "WireCodec",
    "EnumValue",
    "FileSink",
    "StringSink",
]
