"""
Struct compiler.

Emits a Swift struct declaration (properties plus a public memberwise
init) and a Codable extension with the coding-key table and the
encode/decode bodies for a list of fields.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from ..model.nodes import Field, NullableType, TypeExpr
from ..naming.case_conversion import CaseConvention
from ..naming.name_resolver import NameScope
from .base import RenderedType, TemplateBackend
from .wire_forms import absent_tolerant, wire_fields


class StructCompiler(TemplateBackend):
    """Compiles named-field shapes into Swift structs."""

    def compile(
        self,
        name: str,
        fields: tuple[Field, ...],
        render: Callable[[TypeExpr], str],
        *,
        origin: str = "",
        generics: tuple[str, ...] = (),
        rename_rule: CaseConvention | None = None,
        doc: str = "",
        deprecated: str | None = None,
    ) -> RenderedType:
        """
        Compile one struct.

        Args:
            name: Swift identifier of the struct (already resolved)
            fields: Fields in declaration order
            render: Renders a field's type expression to Swift syntax
            origin: Qualified logical name, for diagnostics
            generics: Generic parameter names
            rename_rule: Overrides the configured rename rule for wire keys
            doc: Documentation for the struct
            deprecated: Deprecation message, or None

        Returns:
            The declaration and conformance text
        """
        rule = rename_rule or self.config.rename_rule
        scope = NameScope(name)
        properties = [
            self._field_context(field, wire_key, name, scope, render) for field, wire_key in wire_fields(fields, rule, origin or name)
        ]

        context = {
            "name": name,
            "generic_clause": self.generic_clause(generics),
            "properties": properties,
            **self.declaration_context(doc, deprecated),
        }
        declaration = self.get_template("struct").render(context)
        conformance = self.get_template("struct_codable").render(context)
        return RenderedType(name=name, origin=origin or name, declaration=declaration, conformance=conformance)

    def _field_context(
        self,
        field: Field,
        wire_key: str,
        owner: str,
        scope: NameScope,
        render: Callable[[TypeExpr], str],
    ) -> dict[str, Any]:
        tolerant = absent_tolerant(field)
        if tolerant:
            # decodeIfPresent takes the unwrapped type
            inner = field.type.inner if isinstance(field.type, NullableType) else field.type
            decode_type = render(inner)
            swift_type = self.mapper.optional(decode_type)
        else:
            decode_type = swift_type = render(field.type)

        return {
            "name": self.member_name(field.name, owner, scope),
            "wire_key": wire_key,
            "type": swift_type,
            "decode_type": decode_type,
            "required": not tolerant,
            # Defaulted fields are left out of the output when nil; optional ones encode null
            "omit_when_nil": field.has_default,
            **self.declaration_context(field.doc, field.deprecated),
        }
