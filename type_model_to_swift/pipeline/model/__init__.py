"""
Type model.

Immutable description of the exported types, plus the loader that
builds it from the reflection collaborator's JSON document.
"""

from __future__ import annotations

from .loader import RegistryLoader, load_registry
from .nodes import (
    AdjacentTagging,
    EnumShape,
    ExternalTagging,
    Field,
    GenericParam,
    IndirectType,
    InternalTagging,
    ListType,
    MapType,
    NamedRef,
    NamedType,
    NullableType,
    OpaqueShape,
    Payload,
    Primitive,
    PrimitiveKind,
    SetType,
    StructPayload,
    StructShape,
    Tagging,
    TuplePayload,
    TupleType,
    TypeExpr,
    TypeRef,
    TypeRegistry,
    UnitPayload,
    UntaggedTagging,
    Variant,
)

__all__ = [
    "RegistryLoader",
    "load_registry",
    "AdjacentTagging",
    "EnumShape",
    "ExternalTagging",
    "Field",
    "GenericParam",
    "IndirectType",
    "InternalTagging",
    "ListType",
    "MapType",
    "NamedRef",
    "NamedType",
    "NullableType",
    "OpaqueShape",
    "Payload",
    "Primitive",
    "PrimitiveKind",
    "SetType",
    "StructPayload",
    "StructShape",
    "Tagging",
    "TuplePayload",
    "TupleType",
    "TypeExpr",
    "TypeRef",
    "TypeRegistry",
    "UnitPayload",
    "UntaggedTagging",
    "Variant",
]
