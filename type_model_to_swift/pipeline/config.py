"""
Configuration for the Swift code generator pipeline.

Every option is explicit data: the generator hands this object to each
compiler instead of reading module-level settings.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from .naming.case_conversion import CaseConvention
from .naming.name_resolver import DuplicateNameStrategy, StructNaming


class OptionalStyle(str, Enum):
    """Spelling of optional types in the generated Swift."""

    QUESTION_MARK = "question_mark"  # Default: T?
    OPTIONAL = "optional"  # Optional<T>


@dataclass
class FormatterConfig:
    """Configuration for post-processing with swift-format."""

    # Whether formatting is enabled
    enabled: bool = False

    # swift-format executable (looked up on PATH)
    executable: str = "swift-format"

    # Seconds before the formatter is abandoned
    timeout: int = 30


@dataclass
class CodeGeneratorConfig:
    """Configuration options for code generation."""

    # Rename rule applied to field and variant names to produce wire keys
    rename_rule: CaseConvention = CaseConvention.IDENTITY

    # Tag / content keys used by enums that do not declare their own
    tag_key: str = "tag"
    content_key: str = "content"

    # What to do when two origins map to the same Swift identifier
    duplicate_name_strategy: DuplicateNameStrategy = DuplicateNameStrategy.FAIL

    # Emit /// doc comments from the model's documentation
    emit_doc_comments: bool = True

    # Emit @available(*, deprecated) attributes
    emit_deprecated: bool = True

    # Render opaque value types as JsonValue instead of rejecting them
    passthrough_opaque_json: bool = True

    # T? or Optional<T>
    optional_style: OptionalStyle = OptionalStyle.QUESTION_MARK

    # Companion struct naming for struct-payload variants
    struct_naming: StructNaming = StructNaming.AUTO_RENAME

    # Add generation comment at top of file
    add_generation_comment: bool = True

    # Optional swift-format post-processing
    formatter: FormatterConfig = field(default_factory=FormatterConfig)

    def __post_init__(self):
        # Accept raw strings (as loaded from JSON) for enum-valued options
        self.rename_rule = CaseConvention(self.rename_rule)
        self.duplicate_name_strategy = DuplicateNameStrategy(self.duplicate_name_strategy)
        self.optional_style = OptionalStyle(self.optional_style)
        self.struct_naming = StructNaming(self.struct_naming)

    @staticmethod
    def from_dict(d: dict) -> CodeGeneratorConfig:
        """Create a config from a dictionary."""
        values = {}
        for k, v in d.items():
            if k == "formatter" and isinstance(v, dict):
                values[k] = FormatterConfig(**v)
            elif k in CodeGeneratorConfig.__dataclass_fields__:
                values[k] = v
        return CodeGeneratorConfig(**values)

    def to_dict(self) -> dict:
        """Convert config to a dictionary."""
        return {
            "rename_rule": self.rename_rule.value,
            "tag_key": self.tag_key,
            "content_key": self.content_key,
            "duplicate_name_strategy": self.duplicate_name_strategy.value,
            "emit_doc_comments": self.emit_doc_comments,
            "emit_deprecated": self.emit_deprecated,
            "passthrough_opaque_json": self.passthrough_opaque_json,
            "optional_style": self.optional_style.value,
            "struct_naming": self.struct_naming.value,
            "add_generation_comment": self.add_generation_comment,
            "formatter": {
                "enabled": self.formatter.enabled,
                "executable": self.formatter.executable,
                "timeout": self.formatter.timeout,
            },
        }
