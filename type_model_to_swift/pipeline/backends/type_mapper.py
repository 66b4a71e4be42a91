"""
Primitive and collection mapping to Swift type syntax.

The mapper handles one node at a time and renders child expressions
through the `render` callable it is given, so the caller decides how
named references are resolved and where indirection boundaries begin.
"""

from __future__ import annotations

from collections.abc import Callable

from ..config import CodeGeneratorConfig, OptionalStyle
from ..errors import StructuralError
from ..model.nodes import (
    GenericParam,
    IndirectType,
    ListType,
    MapType,
    NamedRef,
    NullableType,
    Primitive,
    PrimitiveKind,
    SetType,
    TupleType,
    TypeExpr,
)

# Largest tuple arity with a TupleN helper in the prelude
MAX_TUPLE_ARITY = 6

# Integer kinds whose Swift type already conforms to CodingKeyRepresentable
NATIVE_KEY_KINDS = {PrimitiveKind.ISIZE}

Render = Callable[[TypeExpr], str]


class SwiftTypeMapper:
    """Maps type expressions to Swift type syntax."""

    PRIMITIVES: dict[PrimitiveKind, str] = {
        PrimitiveKind.I8: "Int8",
        PrimitiveKind.I16: "Int16",
        PrimitiveKind.I32: "Int32",
        PrimitiveKind.I64: "Int64",
        PrimitiveKind.ISIZE: "Int",
        PrimitiveKind.U8: "UInt8",
        PrimitiveKind.U16: "UInt16",
        PrimitiveKind.U32: "UInt32",
        PrimitiveKind.U64: "UInt64",
        PrimitiveKind.USIZE: "UInt",
        PrimitiveKind.F32: "Float",
        PrimitiveKind.F64: "Double",
        PrimitiveKind.BOOL: "Bool",
        PrimitiveKind.CHAR: "Character",
        PrimitiveKind.STRING: "String",
        PrimitiveKind.UNIT: "UnitValue",
    }

    def __init__(self, config: CodeGeneratorConfig):
        self.config = config

    def map(self, expr: TypeExpr, render: Render) -> str:
        """
        Map one type expression to Swift syntax.

        Args:
            expr: The expression to map
            render: Renders child expressions (named references included)

        Returns:
            Swift type syntax
        """
        match expr:
            case Primitive(kind=kind):
                return self.PRIMITIVES[kind]
            case GenericParam(name=name):
                return name
            case ListType(element=element):
                return f"[{render(element)}]"
            case SetType(element=element):
                return f"Set<{render(element)}>"
            case MapType(key=key, value=value):
                self.check_map_key(key)
                return f"[{render(key)}: {render(value)}]"
            case TupleType(elements=elements):
                arity = self.check_tuple_arity(elements)
                if arity == 1:
                    return render(elements[0])
                return f"Tuple{arity}<{', '.join(render(e) for e in elements)}>"
            case NullableType(inner=inner):
                return self.optional(render(inner))
            case IndirectType(inner=inner):
                return f"Indirect<{render(inner)}>"
            case NamedRef():
                raise TypeError("Named references are rendered by the generator, not the mapper")
        raise TypeError(f"Unknown type expression: {expr!r}")

    def optional(self, swift_type: str) -> str:
        """Wrap a Swift type in the configured optional spelling."""
        if self.config.optional_style == OptionalStyle.OPTIONAL:
            return f"Optional<{swift_type}>"
        return f"{swift_type}?"

    def helpers_for(self, expr: TypeExpr) -> set[str]:
        """Prelude helpers this node (not its children) needs."""
        match expr:
            case Primitive(kind=PrimitiveKind.UNIT):
                return {"UnitValue"}
            case TupleType(elements=elements) if len(elements) > 1:
                return {f"Tuple{len(elements)}"}
            case IndirectType():
                return {"Indirect"}
            case MapType(key=Primitive(kind=kind)) if kind.is_integer and kind not in NATIVE_KEY_KINDS:
                return {f"IntegerKey.{self.PRIMITIVES[kind]}"}
        return set()

    @staticmethod
    def is_boundary(expr: TypeExpr) -> bool:
        """Whether entering this node crosses an indirection boundary."""
        return isinstance(expr, (IndirectType, ListType, SetType, MapType))

    @staticmethod
    def check_map_key(key: TypeExpr) -> None:
        if isinstance(key, Primitive) and (key.kind == PrimitiveKind.STRING or key.kind.is_integer):
            return
        raise StructuralError(f"Map keys must be strings or integers, got {key!r}")

    @staticmethod
    def check_tuple_arity(elements: tuple[TypeExpr, ...]) -> int:
        arity = len(elements)
        if arity == 0:
            raise StructuralError("Tuple of arity 0")
        if arity > MAX_TUPLE_ARITY:
            raise StructuralError(f"Tuple of arity {arity} exceeds the supported maximum of {MAX_TUPLE_ARITY}")
        return arity
