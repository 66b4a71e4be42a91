"""
Enum compiler.

Emits a Swift enum declaration and a Codable extension whose bodies are
fully determined by the wire form of each variant, i.e. the pair
(tagging convention, payload shape). Named-field variants are delegated
to the StructCompiler as companion `<Enum><Variant>Data` (or `<Variant>Data`) structs.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field

from ...logging import get_logger
from ...utils import indent, swift_string
from ..config import CodeGeneratorConfig
from ..errors import StructuralError
from ..model.nodes import (
    AdjacentTagging,
    EnumShape,
    ExternalTagging,
    InternalTagging,
    StructPayload,
    TuplePayload,
    TypeExpr,
    UntaggedTagging,
    Variant,
)
from ..naming.name_resolver import NameScope, companion_struct_name
from .base import RenderedType, TemplateBackend
from .struct_compiler import StructCompiler
from .type_mapper import SwiftTypeMapper
from .wire_forms import PayloadKind, WireForm, content_key, payload_kind, tag_key, wire_fields, wire_form, wire_variants

logger = get_logger("enum_compiler")

CODING_ERROR = "TypeModelCodingError"


@dataclass
class VariantPlan:
    """Everything needed to emit one variant."""

    variant: Variant
    case_name: str
    wire_name: str
    form: WireForm
    kind: PayloadKind
    # Swift types of single-value and tuple payloads
    types: list[str] = field(default_factory=list)
    # Swift type of the companion struct of a named-field payload
    data_type: str | None = None

    @property
    def pattern(self) -> str:
        """Switch pattern binding the payload."""
        if self.kind == PayloadKind.UNIT:
            return f"case .{self.case_name}:"
        if self.kind == PayloadKind.TUPLE:
            values = ", ".join(f"v{i}" for i in range(len(self.types)))
            return f"case let .{self.case_name}({values}):"
        return f"case let .{self.case_name}(value):"

    @property
    def declaration(self) -> str:
        if self.kind == PayloadKind.UNIT:
            return self.case_name
        if self.kind == PayloadKind.STRUCT:
            return f"{self.case_name}({self.data_type})"
        return f"{self.case_name}({', '.join(self.types)})"


class EnumCompiler(TemplateBackend):
    """Compiles enum shapes into Swift enums with tagging-specific Codable bodies."""

    def __init__(
        self,
        config: CodeGeneratorConfig,
        mapper: SwiftTypeMapper | None = None,
        struct_compiler: StructCompiler | None = None,
    ):
        super().__init__(config, mapper)
        self.struct_compiler = struct_compiler or StructCompiler(config, self.mapper)

    def compile(
        self,
        name: str,
        shape: EnumShape,
        render: Callable[[TypeExpr], str],
        *,
        origin: str = "",
        generics: tuple[str, ...] = (),
        data_names: dict[str, str] | None = None,
        doc: str = "",
        deprecated: str | None = None,
    ) -> list[RenderedType]:
        """
        Compile one enum.

        Args:
            name: Swift identifier of the enum (already resolved)
            shape: The enum shape
            render: Renders a payload type expression to Swift syntax
            origin: Qualified logical name, for diagnostics
            generics: Generic parameter names
            data_names: Resolved identifiers of companion structs, by variant name
            doc: Documentation for the enum
            deprecated: Deprecation message, or None

        Returns:
            Companion structs first, then the enum itself

        Raises:
            StructuralError: For payloads the tagging convention cannot represent
        """
        origin = origin or name
        data_names = data_names or {}
        rule = shape.rename_all or self.config.rename_rule
        variants = wire_variants(shape.variants, rule, origin)
        if not variants:
            raise StructuralError(f"Enum '{origin}' has no variants to serialize")

        self._check_keys(shape, origin)

        generic_args = f"<{', '.join(generics)}>" if generics else ""
        scope = NameScope(name)
        plans = []
        companions = []
        for variant, wire_name in variants:
            form = wire_form(shape.tagging, variant, origin)
            plan = VariantPlan(
                variant=variant,
                case_name=self.member_name(variant.name, name, scope),
                wire_name=wire_name,
                form=form,
                kind=payload_kind(variant.payload),
            )
            if isinstance(variant.payload, TuplePayload):
                plan.types = [render(t) for t in variant.payload.types]
            elif isinstance(variant.payload, StructPayload):
                data_name = data_names.get(variant.name) or companion_struct_name(name, variant.name, self.config.struct_naming)
                if isinstance(shape.tagging, InternalTagging):
                    self._check_internal_fields(variant, shape, origin)
                companions.append(
                    self.struct_compiler.compile(
                        data_name,
                        variant.payload.fields,
                        render,
                        origin=f"{origin}::{variant.name}",
                        generics=generics,
                    )
                )
                plan.data_type = data_name + generic_args
            plans.append(plan)

        raw = self._is_raw(shape, plans, generics)
        context = {
            "name": name,
            "generic_clause": self.generic_clause(generics),
            "raw": raw,
            "cases": [
                {
                    "declaration": f"{p.case_name} = {swift_string(p.wire_name)}" if raw else p.declaration,
                    **self.declaration_context(p.variant.doc, p.variant.deprecated),
                }
                for p in plans
            ],
            **self.declaration_context(doc, deprecated),
        }
        if raw:
            decode_lines, encode_lines = self._raw_bodies(name)
        else:
            decode_lines, encode_lines = self._bodies(name, shape, plans)
        context["decode_lines"] = indent(decode_lines, 2)
        context["encode_lines"] = indent(encode_lines, 2)

        logger.debug("Compiled enum %s (%d variants, %s)", name, len(plans), type(shape.tagging).__name__)
        enum = RenderedType(
            name=name,
            origin=origin,
            declaration=self.get_template("enum").render(context),
            conformance=self.get_template("enum_codable").render(context),
        )
        return companions + [enum]

    # Checks

    def _check_keys(self, shape: EnumShape, origin: str) -> None:
        if isinstance(shape.tagging, AdjacentTagging):
            tag = tag_key(shape.tagging, self.config)
            if tag == content_key(shape.tagging, self.config):
                raise StructuralError(f"Enum '{origin}' uses '{tag}' as both its tag key and its content key")

    def _check_internal_fields(self, variant: Variant, shape: EnumShape, origin: str) -> None:
        tag = tag_key(shape.tagging, self.config)
        for _, key in wire_fields(variant.payload.fields, self.config.rename_rule, f"{origin}::{variant.name}"):
            if key == tag:
                raise StructuralError(f"Field '{key}' of variant '{origin}::{variant.name}' collides with the tag key '{tag}'")

    @staticmethod
    def _is_raw(shape: EnumShape, plans: list[VariantPlan], generics: tuple[str, ...]) -> bool:
        """All-unit externally tagged enums become String raw-value enums."""
        return isinstance(shape.tagging, ExternalTagging) and not generics and all(p.kind == PayloadKind.UNIT for p in plans)

    # Bodies

    def _bodies(self, name: str, shape: EnumShape, plans: list[VariantPlan]) -> tuple[list[str], list[str]]:
        match shape.tagging:
            case ExternalTagging():
                return self._external_decode(name, plans), self._external_encode(plans)
            case InternalTagging():
                tag = tag_key(shape.tagging, self.config)
                return self._internal_decode(name, plans, tag), self._internal_encode(plans, tag)
            case AdjacentTagging():
                tag = tag_key(shape.tagging, self.config)
                content = content_key(shape.tagging, self.config)
                return self._adjacent_decode(name, plans, tag, content), self._adjacent_encode(plans, tag, content)
            case UntaggedTagging():
                return self._untagged_decode(name, plans), self._untagged_encode(plans)
        raise TypeError(f"Unknown tagging convention: {shape.tagging!r}")

    def _raw_bodies(self, name: str) -> tuple[list[str], list[str]]:
        decode = [
            "let container = try decoder.singleValueContainer()",
            "let name = try container.decode(String.self)",
            f"guard let value = {name}(rawValue: name) else {{",
            f"    throw {CODING_ERROR}.unknownVariant(name, enumName: {swift_string(name)})",
            "}",
            "self = value",
        ]
        encode = [
            "var container = encoder.singleValueContainer()",
            "try container.encode(rawValue)",
        ]
        return decode, encode

    def _payload_decode(self, plan: VariantPlan, container: str, key: str) -> list[str]:
        """Decode a keyed payload (single, tuple or struct) stored under `key`."""
        match plan.kind:
            case PayloadKind.SINGLE:
                return [f"self = try .{plan.case_name}({container}.decode({plan.types[0]}.self, forKey: {key}))"]
            case PayloadKind.TUPLE:
                arity = len(plan.types)
                values = ", ".join(f"items.decode({t}.self)" for t in plan.types)
                return [
                    f"var items = try {container}.nestedUnkeyedContainer(forKey: {key})",
                    f"guard items.count == {arity} else {{",
                    f"    throw {CODING_ERROR}.arityMismatch(expected: {arity}, found: items.count ?? -1, variant: {swift_string(plan.wire_name)})",
                    "}",
                    f"self = try .{plan.case_name}({values})",
                ]
            case PayloadKind.STRUCT:
                return [f"self = try .{plan.case_name}({container}.decode({plan.data_type}.self, forKey: {key}))"]
        raise StructuralError(f"Variant '{plan.variant.name}' has no keyed payload")

    def _payload_encode(self, plan: VariantPlan, container: str, key: str) -> list[str]:
        if plan.kind == PayloadKind.TUPLE:
            return [f"var items = {container}.nestedUnkeyedContainer(forKey: {key})"] + [
                f"try items.encode(v{i})" for i in range(len(plan.types))
            ]
        return [f"try {container}.encode(value, forKey: {key})"]

    @staticmethod
    def _unknown(name: str, value: str) -> str:
        return f"throw {CODING_ERROR}.unknownVariant({value}, enumName: {swift_string(name)})"

    @staticmethod
    def _missing(name: str, key: str) -> list[str]:
        return [
            f"guard container.contains(TypeModelCodingKey({swift_string(key)})) else {{",
            f"    throw {CODING_ERROR}.missingField({swift_string(key)}, typeName: {swift_string(name)})",
            "}",
        ]

    # External: "Name" for unit variants, {"Name": payload} otherwise

    def _external_decode(self, name: str, plans: list[VariantPlan]) -> list[str]:
        units = [p for p in plans if p.form == WireForm.EXTERNAL_UNIT]
        keyed = [p for p in plans if p.form != WireForm.EXTERNAL_UNIT]

        lines = ["if let single = try? decoder.singleValueContainer(), let name = try? single.decode(String.self) {"]
        if units:
            lines.append("    switch name {")
            for plan in units:
                lines += [f"    case {swift_string(plan.wire_name)}:", f"        self = .{plan.case_name}"]
            lines += ["    default:", "        " + self._unknown(name, "name"), "    }", "    return"]
        else:
            lines.append("    " + self._unknown(name, "name"))
        lines.append("}")

        description = swift_string(f"Expected a variant name or a single-key object for {name}")
        lines += [
            "let container = try decoder.container(keyedBy: TypeModelCodingKey.self)",
            "guard container.allKeys.count == 1, let key = container.allKeys.first else {",
            f"    throw DecodingError.dataCorrupted(DecodingError.Context(codingPath: decoder.codingPath, debugDescription: {description}))",
            "}",
            "switch key.stringValue {",
        ]
        for plan in keyed:
            lines.append(f"case {swift_string(plan.wire_name)}:")
            lines += indent(self._payload_decode(plan, "container", "key"))
        lines += ["default:", "    " + self._unknown(name, "key.stringValue"), "}"]
        return lines

    def _external_encode(self, plans: list[VariantPlan]) -> list[str]:
        lines = ["switch self {"]
        for plan in plans:
            lines.append(plan.pattern)
            if plan.form == WireForm.EXTERNAL_UNIT:
                body = ["var single = encoder.singleValueContainer()", f"try single.encode({swift_string(plan.wire_name)})"]
            else:
                body = ["var container = encoder.container(keyedBy: TypeModelCodingKey.self)"]
                body += self._payload_encode(plan, "container", f"TypeModelCodingKey({swift_string(plan.wire_name)})")
            lines += indent(body)
        lines.append("}")
        return lines

    # Internal: {tag: "Name", field...} with fields merged at the top level

    def _internal_decode(self, name: str, plans: list[VariantPlan], tag: str) -> list[str]:
        lines = ["let container = try decoder.container(keyedBy: TypeModelCodingKey.self)"]
        lines += self._missing(name, tag)
        lines += [
            f"let tag = try container.decode(String.self, forKey: TypeModelCodingKey({swift_string(tag)}))",
            "switch tag {",
        ]
        for plan in plans:
            lines.append(f"case {swift_string(plan.wire_name)}:")
            if plan.form == WireForm.INTERNAL_UNIT:
                lines.append(f"    self = .{plan.case_name}")
            else:
                lines.append(f"    self = try .{plan.case_name}({plan.data_type}(from: decoder))")
        lines += ["default:", "    " + self._unknown(name, "tag"), "}"]
        return lines

    def _internal_encode(self, plans: list[VariantPlan], tag: str) -> list[str]:
        lines = ["switch self {"]
        for plan in plans:
            lines.append(plan.pattern)
            body = []
            if plan.form == WireForm.INTERNAL_STRUCT:
                # Fields first, then the tag joins the same object
                body.append("try value.encode(to: encoder)")
            body += [
                "var container = encoder.container(keyedBy: TypeModelCodingKey.self)",
                f"try container.encode({swift_string(plan.wire_name)}, forKey: TypeModelCodingKey({swift_string(tag)}))",
            ]
            lines += indent(body)
        lines.append("}")
        return lines

    # Adjacent: {tag: "Name", content: payload}, content omitted for unit variants

    def _adjacent_decode(self, name: str, plans: list[VariantPlan], tag: str, content: str) -> list[str]:
        lines = ["let container = try decoder.container(keyedBy: TypeModelCodingKey.self)"]
        lines += self._missing(name, tag)
        lines += [
            f"let tag = try container.decode(String.self, forKey: TypeModelCodingKey({swift_string(tag)}))",
            "switch tag {",
        ]
        content_ref = f"TypeModelCodingKey({swift_string(content)})"
        for plan in plans:
            lines.append(f"case {swift_string(plan.wire_name)}:")
            if plan.form == WireForm.ADJACENT_UNIT:
                lines.append(f"    self = .{plan.case_name}")
            else:
                lines += indent(self._missing(name, content) + self._payload_decode(plan, "container", content_ref))
        lines += ["default:", "    " + self._unknown(name, "tag"), "}"]
        return lines

    def _adjacent_encode(self, plans: list[VariantPlan], tag: str, content: str) -> list[str]:
        lines = [
            "var container = encoder.container(keyedBy: TypeModelCodingKey.self)",
            "switch self {",
        ]
        for plan in plans:
            lines.append(plan.pattern)
            body = [f"try container.encode({swift_string(plan.wire_name)}, forKey: TypeModelCodingKey({swift_string(tag)}))"]
            if plan.form != WireForm.ADJACENT_UNIT:
                body += self._payload_encode(plan, "container", f"TypeModelCodingKey({swift_string(content)})")
            lines += indent(body)
        lines.append("}")
        return lines

    # Untagged: bare payloads, decoded by trying variants in declaration order

    def _untagged_decode(self, name: str, plans: list[VariantPlan]) -> list[str]:
        lines = []
        for plan in plans:
            match plan.form:
                case WireForm.UNTAGGED_UNIT:
                    lines += [
                        "if let single = try? decoder.singleValueContainer(), single.decodeNil() {",
                        f"    self = .{plan.case_name}",
                        "    return",
                        "}",
                    ]
                case WireForm.UNTAGGED_SINGLE:
                    # A nullable payload still matches a decoded null
                    lines += [
                        "do {",
                        f"    let value = try decoder.singleValueContainer().decode({plan.types[0]}.self)",
                        f"    self = .{plan.case_name}(value)",
                        "    return",
                        "} catch {}",
                    ]
                case WireForm.UNTAGGED_TUPLE:
                    arity = len(plan.types)
                    values = ", ".join(f"items.decode({t}.self)" for t in plan.types)
                    lines += [
                        "do {",
                        "    var items = try decoder.unkeyedContainer()",
                        f"    if items.count == {arity} {{",
                        f"        self = try .{plan.case_name}({values})",
                        "        return",
                        "    }",
                        "} catch {}",
                    ]
                case WireForm.UNTAGGED_STRUCT:
                    lines += [
                        f"if let value = try? {plan.data_type}(from: decoder) {{",
                        f"    self = .{plan.case_name}(value)",
                        "    return",
                        "}",
                    ]
        description = swift_string(f"Data did not match any variant of untagged enum {name}")
        lines.append(
            f"throw DecodingError.dataCorrupted(DecodingError.Context(codingPath: decoder.codingPath, debugDescription: {description}))"
        )
        return lines

    def _untagged_encode(self, plans: list[VariantPlan]) -> list[str]:
        lines = ["switch self {"]
        for plan in plans:
            lines.append(plan.pattern)
            match plan.form:
                case WireForm.UNTAGGED_UNIT:
                    body = ["var single = encoder.singleValueContainer()", "try single.encodeNil()"]
                case WireForm.UNTAGGED_SINGLE:
                    body = ["var single = encoder.singleValueContainer()", "try single.encode(value)"]
                case WireForm.UNTAGGED_TUPLE:
                    body = ["var items = encoder.unkeyedContainer()"] + [f"try items.encode(v{i})" for i in range(len(plan.types))]
                case _:
                    body = ["try value.encode(to: encoder)"]
            lines += indent(body)
        lines.append("}")
        return lines
