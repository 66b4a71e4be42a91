"""
Name resolver for handling naming collisions and Swift identifiers.

Converts logical names to Swift identifiers and resolves collisions
between distinct origins that land on the same identifier. The collision
strategy is always passed in by the caller; nothing here reads shared state.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum

from ...logging import get_logger
from ..errors import NamingConflict
from .case_conversion import CaseConvention, convert_case, split_words

logger = get_logger("naming")

# Swift reserved keywords that need escaping
SWIFT_RESERVED_KEYWORDS = {
    "Any",
    "Self",
    "Type",
    "as",
    "associatedtype",
    "break",
    "case",
    "catch",
    "class",
    "continue",
    "default",
    "defer",
    "deinit",
    "do",
    "else",
    "enum",
    "extension",
    "fallthrough",
    "false",
    "fileprivate",
    "for",
    "func",
    "guard",
    "if",
    "import",
    "in",
    "init",
    "inout",
    "internal",
    "is",
    "let",
    "nil",
    "open",
    "operator",
    "private",
    "protocol",
    "public",
    "repeat",
    "rethrows",
    "return",
    "self",
    "static",
    "struct",
    "subscript",
    "super",
    "switch",
    "throw",
    "throws",
    "true",
    "try",
    "typealias",
    "var",
    "where",
    "while",
}


class DuplicateNameStrategy(str, Enum):
    """What to do when two origins map to the same identifier."""

    FAIL = "fail"
    QUALIFY = "qualify"
    FIRST_WINS_WITH_WARNING = "first_wins_with_warning"


class StructNaming(str, Enum):
    """How companion structs of struct-payload variants are named."""

    AUTO_RENAME = "auto_rename"  # <Enum><Variant>Data
    KEEP_ORIGINAL = "keep_original"  # <Variant>Data


class Resolution(str, Enum):
    """How a binding got its identifier."""

    UNIQUE = "unique"
    QUALIFIED = "qualified"
    RENAMED = "renamed"


@dataclass(frozen=True)
class NameBinding:
    """A logical name bound to an output identifier."""

    logical_name: str
    origin: str
    identifier: str
    resolution: Resolution = Resolution.UNIQUE
    # Origin of the earlier binding this one collided with
    collided_with: str | None = None


@dataclass
class NameScope:
    """Identifiers already taken within one scope (types, or the members of one type)."""

    name: str = ""
    # identifier -> binding
    bindings: dict[str, NameBinding] = field(default_factory=dict)
    # origin -> binding
    by_origin: dict[str, NameBinding] = field(default_factory=dict)

    def lookup(self, origin: str) -> NameBinding | None:
        return self.by_origin.get(origin)

    def bind(self, binding: NameBinding) -> NameBinding:
        self.bindings[binding.identifier] = binding
        self.by_origin[binding.origin] = binding
        return binding


def escape_keyword(name: str) -> str:
    """Escape a Swift reserved keyword with backticks."""
    if name in SWIFT_RESERVED_KEYWORDS:
        return f"`{name}`"
    return name


def swift_type_name(logical_name: str) -> str:
    """PascalCase identifier for a type."""
    return convert_case(logical_name, CaseConvention.IDENTITY, CaseConvention.PASCAL)


def companion_struct_name(enum_name: str, variant_name: str, naming: StructNaming = StructNaming.AUTO_RENAME) -> str:
    """Identifier candidate for the struct carrying a struct-shaped variant payload."""
    if naming == StructNaming.KEEP_ORIGINAL:
        return f"{swift_type_name(variant_name)}Data"
    return f"{enum_name}{swift_type_name(variant_name)}Data"


def swift_member_name(logical_name: str) -> str:
    """camelCase identifier for a property or enum case (unescaped)."""
    return convert_case(logical_name, CaseConvention.IDENTITY, CaseConvention.CAMEL)


def scope_suffix(origin: str) -> str:
    """PascalCase suffix derived from the scope part of an origin.

    "core::status::LibraryInfo" -> "CoreStatus"
    """
    scope, _, _ = origin.rpartition("::")
    if not scope:
        return ""
    words = []
    for segment in scope.split("::"):
        words.extend(split_words(segment))
    return convert_case("_".join(words), CaseConvention.SNAKE, CaseConvention.PASCAL)


def resolve(
    candidate: str,
    origin: str,
    scope: NameScope,
    strategy: DuplicateNameStrategy,
) -> NameBinding:
    """
    Bind a candidate identifier for an origin within a scope.

    Args:
        candidate: The identifier the origin would naturally get
        origin: Fully qualified logical name of what is being named
        scope: Identifiers already taken
        strategy: Collision strategy active for this run

    Returns:
        The binding, which is also recorded in the scope

    Raises:
        NamingConflict: Under the FAIL strategy, when the candidate is taken
    """
    existing = scope.lookup(origin)
    if existing is not None:
        return existing

    logical_name = re.split(r"::|\.", origin)[-1]
    taken = scope.bindings.get(candidate)
    if taken is None:
        return scope.bind(NameBinding(logical_name, origin, candidate))

    if strategy == DuplicateNameStrategy.FAIL:
        raise NamingConflict(candidate, taken.origin, origin)

    if strategy == DuplicateNameStrategy.QUALIFY:
        base = candidate + scope_suffix(origin)
        identifier = _next_free(base, scope, start=2 if base == candidate else 1)
        return scope.bind(NameBinding(logical_name, origin, identifier, Resolution.QUALIFIED, taken.origin))

    if strategy == DuplicateNameStrategy.FIRST_WINS_WITH_WARNING:
        identifier = _next_free(candidate, scope, start=2)
        logger.warning(
            "'%s' and '%s' both map to '%s'; keeping the first and renaming the second to '%s'",
            taken.origin,
            origin,
            candidate,
            identifier,
        )
        return scope.bind(NameBinding(logical_name, origin, identifier, Resolution.RENAMED, taken.origin))

    raise ValueError(f"Unsupported duplicate name strategy: {strategy}")


def _next_free(base: str, scope: NameScope, start: int) -> str:
    """First identifier in base, base2, base3... (from `start`) not yet taken."""
    if start <= 1 and base not in scope.bindings:
        return base
    counter = max(start, 2)
    while f"{base}{counter}" in scope.bindings:
        counter += 1
    return f"{base}{counter}"
