"""
Wire forms: the closed (tagging convention x payload shape) table.

Both the Enum Compiler (which renders Swift for each form) and the
WireCodec (which executes each form in Python) dispatch on the same
WireForm values, so the two can never disagree about which combinations
exist.
"""

from __future__ import annotations

from enum import Enum

from ..config import CodeGeneratorConfig
from ..errors import StructuralError
from ..model.nodes import (
    AdjacentTagging,
    ExternalTagging,
    Field,
    InternalTagging,
    NullableType,
    Payload,
    StructPayload,
    Tagging,
    TuplePayload,
    UnitPayload,
    UntaggedTagging,
    Variant,
)
from ..naming.case_conversion import CaseConvention, convert_case


class PayloadKind(str, Enum):
    UNIT = "unit"
    SINGLE = "single"
    TUPLE = "tuple"
    STRUCT = "struct"


class WireForm(str, Enum):
    """One reachable (convention, payload) combination."""

    EXTERNAL_UNIT = "external_unit"
    EXTERNAL_SINGLE = "external_single"
    EXTERNAL_TUPLE = "external_tuple"
    EXTERNAL_STRUCT = "external_struct"
    INTERNAL_UNIT = "internal_unit"
    INTERNAL_STRUCT = "internal_struct"
    ADJACENT_UNIT = "adjacent_unit"
    ADJACENT_SINGLE = "adjacent_single"
    ADJACENT_TUPLE = "adjacent_tuple"
    ADJACENT_STRUCT = "adjacent_struct"
    UNTAGGED_UNIT = "untagged_unit"
    UNTAGGED_SINGLE = "untagged_single"
    UNTAGGED_TUPLE = "untagged_tuple"
    UNTAGGED_STRUCT = "untagged_struct"


_FORMS: dict[tuple[type[Tagging], PayloadKind], WireForm] = {
    (ExternalTagging, PayloadKind.UNIT): WireForm.EXTERNAL_UNIT,
    (ExternalTagging, PayloadKind.SINGLE): WireForm.EXTERNAL_SINGLE,
    (ExternalTagging, PayloadKind.TUPLE): WireForm.EXTERNAL_TUPLE,
    (ExternalTagging, PayloadKind.STRUCT): WireForm.EXTERNAL_STRUCT,
    (InternalTagging, PayloadKind.UNIT): WireForm.INTERNAL_UNIT,
    (InternalTagging, PayloadKind.STRUCT): WireForm.INTERNAL_STRUCT,
    (AdjacentTagging, PayloadKind.UNIT): WireForm.ADJACENT_UNIT,
    (AdjacentTagging, PayloadKind.SINGLE): WireForm.ADJACENT_SINGLE,
    (AdjacentTagging, PayloadKind.TUPLE): WireForm.ADJACENT_TUPLE,
    (AdjacentTagging, PayloadKind.STRUCT): WireForm.ADJACENT_STRUCT,
    (UntaggedTagging, PayloadKind.UNIT): WireForm.UNTAGGED_UNIT,
    (UntaggedTagging, PayloadKind.SINGLE): WireForm.UNTAGGED_SINGLE,
    (UntaggedTagging, PayloadKind.TUPLE): WireForm.UNTAGGED_TUPLE,
    (UntaggedTagging, PayloadKind.STRUCT): WireForm.UNTAGGED_STRUCT,
}


def payload_kind(payload: Payload) -> PayloadKind:
    """Classify a payload; a one-element tuple is a single value."""
    match payload:
        case UnitPayload():
            return PayloadKind.UNIT
        case TuplePayload(types=types) if len(types) == 0:
            raise StructuralError("Tuple payload of arity 0")
        case TuplePayload(types=types) if len(types) == 1:
            return PayloadKind.SINGLE
        case TuplePayload():
            return PayloadKind.TUPLE
        case StructPayload():
            return PayloadKind.STRUCT
    raise TypeError(f"Unknown payload: {payload!r}")


def wire_form(tagging: Tagging, variant: Variant, enum_name: str = "") -> WireForm:
    """
    Look up the wire form of a variant under a tagging convention.

    Raises:
        StructuralError: For combinations the convention cannot represent
            (single-value and tuple payloads under internal tagging)
    """
    kind = payload_kind(variant.payload)
    form = _FORMS.get((type(tagging), kind))
    if form is None:
        where = f"{enum_name}::{variant.name}" if enum_name else variant.name
        raise StructuralError(
            f"Variant '{where}' has a {kind.value} payload, which internal tagging cannot represent: "
            "a non-object value cannot host an embedded tag key"
        )
    return form


def tag_key(tagging: Tagging, config: CodeGeneratorConfig) -> str | None:
    match tagging:
        case InternalTagging(tag_key=key) | AdjacentTagging(tag_key=key):
            return key or config.tag_key
    return None


def content_key(tagging: Tagging, config: CodeGeneratorConfig) -> str | None:
    match tagging:
        case AdjacentTagging(content_key=key):
            return key or config.content_key
    return None


def field_wire_key(field: Field, rule: CaseConvention) -> str:
    """Wire key of a field: its explicit rename, else the rename rule applied to its name."""
    if field.rename is not None:
        return field.rename
    return convert_case(field.name, CaseConvention.IDENTITY, rule)


def variant_wire_name(variant: Variant, rule: CaseConvention) -> str:
    if variant.rename is not None:
        return variant.rename
    return convert_case(variant.name, CaseConvention.IDENTITY, rule)


def wire_fields(fields: tuple[Field, ...], rule: CaseConvention, owner: str) -> list[tuple[Field, str]]:
    """
    Non-skipped fields paired with their wire keys.

    Raises:
        StructuralError: If two fields serialize under the same wire key
    """
    result = []
    seen: dict[str, str] = {}
    for field in fields:
        if field.skip:
            continue
        key = field_wire_key(field, rule)
        if key in seen:
            raise StructuralError(f"Fields '{seen[key]}' and '{field.name}' of '{owner}' both serialize as '{key}'")
        seen[key] = field.name
        result.append((field, key))
    return result


def absent_tolerant(field: Field) -> bool:
    """Whether a missing wire key decodes to nil instead of failing."""
    return field.optional or field.has_default or isinstance(field.type, NullableType)


def wire_variants(variants: tuple[Variant, ...], rule: CaseConvention, owner: str) -> list[tuple[Variant, str]]:
    """Non-skipped variants paired with their wire names, in declaration order."""
    result = []
    seen: dict[str, str] = {}
    for variant in variants:
        if variant.skip:
            continue
        name = variant_wire_name(variant, rule)
        if name in seen:
            raise StructuralError(f"Variants '{seen[name]}' and '{variant.name}' of '{owner}' both serialize as '{name}'")
        seen[name] = variant.name
        result.append((variant, name))
    return result
