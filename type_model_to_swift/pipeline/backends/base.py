"""
Base class for the Swift template backends.

Holds the Jinja2 environment and the declaration-level helpers shared by
the struct and enum compilers.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import jinja2

from ...utils import deprecation_attribute, doc_comment_lines, swift_string
from ..config import CodeGeneratorConfig
from ..naming.name_resolver import NameScope, escape_keyword, resolve, swift_member_name
from .type_mapper import SwiftTypeMapper


@dataclass(frozen=True)
class RenderedType:
    """Swift text for one output type."""

    name: str
    origin: str
    declaration: str
    conformance: str

    @property
    def text(self) -> str:
        return f"{self.declaration}\n\n{self.conformance}"


class TemplateBackend:
    """Shared template setup for Swift compilers."""

    # Template directory name
    TEMPLATE_LANG: str = "swift"

    # File extension
    FILE_EXTENSION: str = "swift"

    def __init__(self, config: CodeGeneratorConfig, mapper: SwiftTypeMapper | None = None):
        """
        Initialize the backend.

        Args:
            config: Code generation configuration
            mapper: Type mapper (one is created from the config when omitted)
        """
        self.config = config
        self.mapper = mapper or SwiftTypeMapper(config)
        self._setup_templates()

    def _setup_templates(self) -> None:
        """Set up Jinja2 templates."""
        template_dir = Path(__file__).parent.parent.parent / "templates" / self.TEMPLATE_LANG
        self.jinja_env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(str(template_dir)),
            lstrip_blocks=True,
            trim_blocks=True,
            keep_trailing_newline=False,
        )
        self.jinja_env.filters["swift_string"] = swift_string

    def get_template(self, kind: str) -> jinja2.Template:
        return self.jinja_env.get_template(f"{kind}.{self.FILE_EXTENSION}.jinja2")

    def declaration_context(self, doc: str, deprecated: str | None) -> dict[str, Any]:
        """Doc comment lines and deprecation attribute, filtered by the config."""
        return {
            "doc_lines": doc_comment_lines(doc) if self.config.emit_doc_comments else [],
            "deprecation": deprecation_attribute(deprecated) if self.config.emit_deprecated else None,
        }

    def generic_clause(self, generics: tuple[str, ...]) -> str:
        """Generic parameter clause for a declaration: <T: Codable & Hashable, ...>."""
        if not generics:
            return ""
        return "<" + ", ".join(f"{name}: Codable & Hashable" for name in generics) + ">"

    def member_name(self, logical_name: str, owner: str, scope: NameScope) -> str:
        """Resolve a property or case name within its type, escaping keywords."""
        binding = resolve(swift_member_name(logical_name), f"{owner}.{logical_name}", scope, self.config.duplicate_name_strategy)
        return escape_keyword(binding.identifier)
