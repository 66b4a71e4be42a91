"""
Generation-time error taxonomy.

Every error here aborts the whole run: sibling types may reference the
failing type, so partial output is never returned.
"""

from __future__ import annotations


class GenerationError(Exception):
    """Base class for errors raised while generating code from a registry."""

    pass


class RegistryFormatError(GenerationError):
    """Raised when the registry document cannot be read as a type model."""

    pass


class StructuralError(GenerationError):
    """Raised for shapes the wire convention cannot represent.

    This can happen when:
    - A tuple payload is used under internal tagging
    - A type references itself without crossing an indirection boundary
    - A tuple has arity 0
    - Two fields would serialize under the same wire key
    """

    pass


class NamingConflict(GenerationError):
    """Raised when two origins map to the same output identifier."""

    def __init__(self, identifier: str, first_origin: str, second_origin: str):
        self.identifier = identifier
        self.first_origin = first_origin
        self.second_origin = second_origin
        super().__init__(f"Duplicate output identifier '{identifier}': '{first_origin}' and '{second_origin}' both map to it")


class UnresolvedReference(GenerationError):
    """Raised when a type reference names nothing in the registry."""

    def __init__(self, name: str, referrer: str | None = None, detail: str = ""):
        self.name = name
        self.referrer = referrer
        message = f"Unresolved type reference '{name}'"
        if referrer:
            message += f" (referenced from '{referrer}')"
        if detail:
            message += f": {detail}"
        super().__init__(message)
