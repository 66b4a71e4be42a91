"""
Special-type recognizer.

Structural matching of well-known foreign types that render as a
hand-written Swift equivalent instead of a generated declaration.
Matching looks at shapes only, never at type names.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..config import CodeGeneratorConfig
from ..errors import StructuralError
from ..model.nodes import (
    EnumShape,
    NamedType,
    OpaqueShape,
    Primitive,
    PrimitiveKind,
    StructShape,
    TuplePayload,
    UntaggedTagging,
)


@dataclass(frozen=True)
class SpecialType:
    """A recognized type: the Swift spelling and the prelude helper providing it."""

    swift_name: str
    helper: str | None = None


DURATION = SpecialType("RustDuration", "RustDuration")
NUMBER = SpecialType("Double")
JSON_VALUE = SpecialType("JsonValue", "JsonValue")

_NUMBER_VARIANTS = {
    "f64": PrimitiveKind.F64,
    "i64": PrimitiveKind.I64,
    "u64": PrimitiveKind.U64,
}


def _is_duration(shape: StructShape) -> bool:
    fields = [f for f in shape.fields if not f.skip]
    if sorted(f.name for f in fields) != ["nanos", "secs"]:
        return False
    return all(isinstance(f.type, Primitive) and f.type.kind.is_integer and f.rename is None for f in fields)


def _is_number(shape: EnumShape) -> bool:
    if not isinstance(shape.tagging, UntaggedTagging) or len(shape.variants) != len(_NUMBER_VARIANTS):
        return False
    for variant in shape.variants:
        kind = _NUMBER_VARIANTS.get(variant.name)
        payload = variant.payload
        if kind is None or not isinstance(payload, TuplePayload) or payload.types != (Primitive(kind),):
            return False
    return True


def recognize(named_type: NamedType, config: CodeGeneratorConfig) -> SpecialType | None:
    """
    Match a named type against the known special signatures.

    Returns:
        The SpecialType to substitute, or None for ordinary types

    Raises:
        StructuralError: For an opaque type when passthrough is disabled
    """
    if named_type.generics:
        return None

    shape = named_type.shape
    if isinstance(shape, OpaqueShape):
        if not config.passthrough_opaque_json:
            raise StructuralError(f"Type '{named_type.qualified_name}' is an opaque value and passthrough_opaque_json is disabled")
        return JSON_VALUE
    if isinstance(shape, StructShape) and _is_duration(shape):
        return DURATION
    if isinstance(shape, EnumShape) and _is_number(shape):
        return NUMBER
    return None
