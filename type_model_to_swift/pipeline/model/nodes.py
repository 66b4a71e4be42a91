"""
Type model node definitions.

These nodes describe the exported types of the origin program, as produced
by the reflection collaborator. They are frozen: the model is built once per
run and never mutated afterwards.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum

from ..errors import StructuralError, UnresolvedReference
from ..naming.case_conversion import CaseConvention


class PrimitiveKind(str, Enum):
    """Closed set of scalar kinds."""

    I8 = "i8"
    I16 = "i16"
    I32 = "i32"
    I64 = "i64"
    ISIZE = "isize"
    U8 = "u8"
    U16 = "u16"
    U32 = "u32"
    U64 = "u64"
    USIZE = "usize"
    F32 = "f32"
    F64 = "f64"
    BOOL = "bool"
    CHAR = "char"
    STRING = "string"
    UNIT = "unit"

    @property
    def is_integer(self) -> bool:
        return self in INTEGER_RANGES

    @property
    def is_float(self) -> bool:
        return self in (PrimitiveKind.F32, PrimitiveKind.F64)


# Inclusive value range of each integer kind (pointer-sized kinds are 64-bit)
INTEGER_RANGES = {
    PrimitiveKind.I8: (-(2**7), 2**7 - 1),
    PrimitiveKind.I16: (-(2**15), 2**15 - 1),
    PrimitiveKind.I32: (-(2**31), 2**31 - 1),
    PrimitiveKind.I64: (-(2**63), 2**63 - 1),
    PrimitiveKind.ISIZE: (-(2**63), 2**63 - 1),
    PrimitiveKind.U8: (0, 2**8 - 1),
    PrimitiveKind.U16: (0, 2**16 - 1),
    PrimitiveKind.U32: (0, 2**32 - 1),
    PrimitiveKind.U64: (0, 2**64 - 1),
    PrimitiveKind.USIZE: (0, 2**64 - 1),
}

# Widths the target language cannot represent; rejected before mapping
UNSUPPORTED_PRIMITIVES = {"i128", "u128", "f16"}


@dataclass(frozen=True)
class TypeExpr:
    """Base class for all type expressions."""


@dataclass(frozen=True)
class Primitive(TypeExpr):
    kind: PrimitiveKind = PrimitiveKind.STRING


@dataclass(frozen=True)
class ListType(TypeExpr):
    element: TypeExpr = field(default_factory=Primitive)


@dataclass(frozen=True)
class SetType(TypeExpr):
    element: TypeExpr = field(default_factory=Primitive)


@dataclass(frozen=True)
class MapType(TypeExpr):
    key: TypeExpr = field(default_factory=Primitive)
    value: TypeExpr = field(default_factory=Primitive)


@dataclass(frozen=True)
class TupleType(TypeExpr):
    elements: tuple[TypeExpr, ...] = ()


@dataclass(frozen=True)
class NullableType(TypeExpr):
    inner: TypeExpr = field(default_factory=Primitive)


@dataclass(frozen=True)
class IndirectType(TypeExpr):
    """Owning-reference wrapper (an indirection boundary)."""

    inner: TypeExpr = field(default_factory=Primitive)


@dataclass(frozen=True)
class TypeRef:
    """A name plus ordered generic arguments, resolved against the registry."""

    name: str = ""
    args: tuple[TypeExpr, ...] = ()


@dataclass(frozen=True)
class NamedRef(TypeExpr):
    ref: TypeRef = field(default_factory=TypeRef)


@dataclass(frozen=True)
class GenericParam(TypeExpr):
    name: str = ""


@dataclass(frozen=True)
class Field:
    """A named field of a struct or of a struct-shaped variant."""

    name: str = ""
    type: TypeExpr = field(default_factory=Primitive)
    optional: bool = False
    has_default: bool = False
    doc: str = ""
    deprecated: str | None = None

    # Explicit wire key, bypassing the rename rule
    rename: str | None = None
    skip: bool = False


def _check_unique(names: list[str], what: str, owner: str) -> None:
    seen = set()
    for name in names:
        if name in seen:
            raise StructuralError(f"Duplicate {what} '{name}' in {owner}")
        seen.add(name)


@dataclass(frozen=True)
class StructShape:
    fields: tuple[Field, ...] = ()
    # Overrides the configured rename rule for this struct's wire keys
    rename_all: CaseConvention | None = None

    def __post_init__(self):
        _check_unique([f.name for f in self.fields], "field", "struct")


# Tagging conventions


@dataclass(frozen=True)
class Tagging:
    """Base class for enum tagging conventions."""


@dataclass(frozen=True)
class ExternalTagging(Tagging):
    pass


@dataclass(frozen=True)
class InternalTagging(Tagging):
    # None means "use the configured tag key"
    tag_key: str | None = None


@dataclass(frozen=True)
class AdjacentTagging(Tagging):
    tag_key: str | None = None
    content_key: str | None = None


@dataclass(frozen=True)
class UntaggedTagging(Tagging):
    pass


# Variant payloads


@dataclass(frozen=True)
class Payload:
    """Base class for variant payloads."""


@dataclass(frozen=True)
class UnitPayload(Payload):
    pass


@dataclass(frozen=True)
class TuplePayload(Payload):
    types: tuple[TypeExpr, ...] = ()


@dataclass(frozen=True)
class StructPayload(Payload):
    fields: tuple[Field, ...] = ()

    def __post_init__(self):
        _check_unique([f.name for f in self.fields], "field", "variant")


@dataclass(frozen=True)
class Variant:
    name: str = ""
    payload: Payload = field(default_factory=UnitPayload)
    doc: str = ""
    deprecated: str | None = None
    rename: str | None = None
    skip: bool = False


@dataclass(frozen=True)
class EnumShape:
    tagging: Tagging = field(default_factory=ExternalTagging)
    # Declaration order is significant for untagged decoding
    variants: tuple[Variant, ...] = ()
    # Applied to variant names to produce their wire names
    rename_all: CaseConvention | None = None

    def __post_init__(self):
        _check_unique([v.name for v in self.variants], "variant", "enum")


@dataclass(frozen=True)
class OpaqueShape:
    """Marker for a value with no fixed schema (passes arbitrary JSON through)."""


Shape = StructShape | EnumShape | OpaqueShape


@dataclass(frozen=True)
class NamedType:
    """An exported type: a name, its shape and its metadata."""

    name: str = ""
    shape: Shape = field(default_factory=StructShape)
    module_path: str = ""
    generics: tuple[str, ...] = ()
    doc: str = ""
    deprecated: str | None = None

    @property
    def qualified_name(self) -> str:
        if self.module_path:
            return f"{self.module_path}::{self.name}"
        return self.name


class TypeRegistry:
    """Read-only set of exported types for one generation run."""

    def __init__(self, types: list[NamedType] | tuple[NamedType, ...] = ()):
        self._types: dict[str, NamedType] = {}
        self._by_name: dict[str, list[NamedType]] = {}
        for named_type in types:
            key = named_type.qualified_name
            if key in self._types:
                raise StructuralError(f"Type '{key}' is registered twice")
            self._types[key] = named_type
            self._by_name.setdefault(named_type.name, []).append(named_type)

    def __iter__(self) -> Iterator[NamedType]:
        return iter(self._types.values())

    def __len__(self) -> int:
        return len(self._types)

    def __contains__(self, name: str) -> bool:
        return name in self._types or name in self._by_name

    def lookup(self, name: str, referrer: str | None = None) -> NamedType:
        """
        Find a type by qualified name, or by bare name when that is unambiguous.

        Raises:
            UnresolvedReference: If nothing (or more than one type) matches
        """
        if name in self._types:
            return self._types[name]
        candidates = self._by_name.get(name, [])
        if len(candidates) == 1:
            return candidates[0]
        if candidates:
            origins = ", ".join(c.qualified_name for c in candidates)
            raise UnresolvedReference(name, referrer, f"ambiguous between {origins}")
        raise UnresolvedReference(name, referrer)
