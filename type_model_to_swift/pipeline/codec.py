"""
Reference wire codec.

Executes, in Python, the exact wire behavior the generated Swift follows.
It dispatches on the same WireForm table as the Enum Compiler, so it can
be used to check round trips and literal wire examples without a Swift
toolchain.

Values are represented as:
    primitives    Python scalars (unit is None)
    structs       dict keyed by logical field name
    enums         EnumValue(variant, value); value is None, the single
                  value, a tuple, or a field dict depending on the payload
    tuples        Python tuples (a one-element tuple type is its element)
    sets          set / frozenset (decoded as frozenset)
    opaque        any JSON-compatible value
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from .backends.special_types import DURATION, JSON_VALUE, NUMBER, recognize
from .backends.wire_forms import (
    WireForm,
    absent_tolerant,
    content_key,
    tag_key,
    wire_fields,
    wire_form,
    wire_variants,
)
from .config import CodeGeneratorConfig
from .errors import StructuralError, UnresolvedReference
from .model.nodes import (
    INTEGER_RANGES,
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
    Primitive,
    PrimitiveKind,
    SetType,
    StructPayload,
    StructShape,
    TuplePayload,
    TupleType,
    TypeExpr,
    TypeRef,
    TypeRegistry,
    UnitPayload,
    UntaggedTagging,
    Variant,
)
from .naming.case_conversion import CaseConvention


class WireDecodeError(ValueError):
    """Raised when wire data does not match the expected shape."""


class UnknownVariant(WireDecodeError):
    def __init__(self, variant: str, enum_name: str):
        self.variant = variant
        self.enum_name = enum_name
        super().__init__(f"unknown variant '{variant}' for enum {enum_name}")


class ArityMismatch(WireDecodeError):
    def __init__(self, expected: int, found: int, variant: str):
        self.expected = expected
        self.found = found
        self.variant = variant
        super().__init__(f"variant {variant} expects {expected} elements, found {found}")


class MissingField(WireDecodeError):
    def __init__(self, field: str, type_name: str):
        self.field = field
        self.type_name = type_name
        super().__init__(f"missing field '{field}' in {type_name}")


@dataclass(frozen=True)
class EnumValue:
    """A value of an enum: the logical variant name plus its payload."""

    variant: str
    value: Any = None


Env = dict[str, TypeExpr]


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _check_primitive(kind: PrimitiveKind, value: Any, error: type[ValueError]) -> Any:
    """Validate a scalar against its kind; returns the canonical Python value."""
    if kind.is_integer:
        if not isinstance(value, int) or isinstance(value, bool):
            raise error(f"Expected an integer for {kind.value}, got {value!r}")
        low, high = INTEGER_RANGES[kind]
        if not low <= value <= high:
            raise error(f"{value} is out of range for {kind.value}")
        return value
    if kind.is_float:
        if not _is_number(value):
            raise error(f"Expected a number for {kind.value}, got {value!r}")
        return float(value)
    if kind == PrimitiveKind.BOOL:
        if not isinstance(value, bool):
            raise error(f"Expected a boolean, got {value!r}")
        return value
    if kind == PrimitiveKind.CHAR:
        if not isinstance(value, str) or len(value) != 1:
            raise error(f"Expected a single character, got {value!r}")
        return value
    if kind == PrimitiveKind.STRING:
        if not isinstance(value, str):
            raise error(f"Expected a string, got {value!r}")
        return value
    if value is not None:
        raise error(f"Expected null for unit, got {value!r}")
    return None


class WireCodec:
    """Encodes and decodes values of registry types in the wire convention."""

    def __init__(self, registry: TypeRegistry, config: CodeGeneratorConfig | None = None):
        self.registry = registry
        self.config = config or CodeGeneratorConfig()
        self._variant_cache: dict[str, list[tuple[Variant, str, WireForm]]] = {}

    def encode(self, type_: TypeExpr | str, value: Any) -> Any:
        """
        Encode a value to JSON-compatible data.

        Args:
            type_: A type expression, or the name of a registry type
            value: The value to encode

        Raises:
            ValueError / TypeError: If the value does not fit the type
        """
        return self._encode(self._as_expr(type_), value, {})

    def decode(self, type_: TypeExpr | str, data: Any) -> Any:
        """
        Decode JSON-compatible data to a value.

        Raises:
            UnknownVariant: Discriminator not among the declared variants
            ArityMismatch: Tuple array length differs from the declared arity
            MissingField: Required field absent
            WireDecodeError: Any other shape mismatch
        """
        return self._decode(self._as_expr(type_), data, {})

    @staticmethod
    def _as_expr(type_: TypeExpr | str) -> TypeExpr:
        if isinstance(type_, str):
            return NamedRef(TypeRef(type_))
        return type_

    # Generic substitution

    def _substitute(self, expr: TypeExpr, env: Env) -> TypeExpr:
        match expr:
            case GenericParam(name=name):
                if name not in env:
                    raise UnresolvedReference(name, detail="unbound generic parameter")
                return env[name]
            case ListType(element=element):
                return ListType(self._substitute(element, env))
            case SetType(element=element):
                return SetType(self._substitute(element, env))
            case MapType(key=key, value=value):
                return MapType(self._substitute(key, env), self._substitute(value, env))
            case TupleType(elements=elements):
                return TupleType(tuple(self._substitute(e, env) for e in elements))
            case NullableType(inner=inner):
                return NullableType(self._substitute(inner, env))
            case IndirectType(inner=inner):
                return IndirectType(self._substitute(inner, env))
            case NamedRef(ref=ref):
                return NamedRef(TypeRef(ref.name, tuple(self._substitute(a, env) for a in ref.args)))
        return expr

    def _resolve(self, ref: TypeRef, env: Env) -> tuple[NamedType, Env]:
        named_type = self.registry.lookup(ref.name)
        if len(ref.args) != len(named_type.generics):
            raise StructuralError(f"'{named_type.qualified_name}' takes {len(named_type.generics)} generic argument(s), got {len(ref.args)}")
        args = (self._substitute(arg, env) for arg in ref.args)
        return named_type, dict(zip(named_type.generics, args))

    def _variants(self, named_type: NamedType, shape: EnumShape) -> list[tuple[Variant, str, WireForm]]:
        origin = named_type.qualified_name
        if origin not in self._variant_cache:
            rule = shape.rename_all or self.config.rename_rule
            self._variant_cache[origin] = [
                (variant, wire_name, wire_form(shape.tagging, variant, origin))
                for variant, wire_name in wire_variants(shape.variants, rule, origin)
            ]
        return self._variant_cache[origin]

    # Encoding

    def _encode(self, expr: TypeExpr, value: Any, env: Env) -> Any:
        match expr:
            case Primitive(kind=kind):
                return _check_primitive(kind, value, ValueError)
            case GenericParam():
                return self._encode(self._substitute(expr, env), value, env)
            case ListType(element=element) | SetType(element=element):
                if isinstance(value, (str, bytes, Mapping)):
                    raise TypeError(f"Expected a collection, got {value!r}")
                return [self._encode(element, item, env) for item in value]
            case MapType(key=key, value=value_type):
                if not isinstance(value, Mapping):
                    raise TypeError(f"Expected a mapping, got {value!r}")
                return {self._encode_key(key, k): self._encode(value_type, v, env) for k, v in value.items()}
            case TupleType(elements=elements):
                if len(elements) == 1:
                    return self._encode(elements[0], value, env)
                return self._encode_tuple(elements, value, env)
            case NullableType(inner=inner):
                return None if value is None else self._encode(inner, value, env)
            case IndirectType(inner=inner):
                return self._encode(inner, value, env)
            case NamedRef(ref=ref):
                named_type, inner_env = self._resolve(ref, env)
                return self._encode_named(named_type, value, inner_env)
        raise TypeError(f"Unknown type expression: {expr!r}")

    def _encode_key(self, key: TypeExpr, value: Any) -> str:
        if isinstance(key, Primitive) and key.kind.is_integer:
            return str(_check_primitive(key.kind, value, ValueError))
        if isinstance(key, Primitive) and key.kind == PrimitiveKind.STRING:
            return _check_primitive(key.kind, value, ValueError)
        raise StructuralError(f"Map keys must be strings or integers, got {key!r}")

    def _encode_tuple(self, elements: tuple[TypeExpr, ...], value: Any, env: Env) -> list:
        if not isinstance(value, (tuple, list)) or len(value) != len(elements):
            raise ValueError(f"Expected a tuple of {len(elements)} elements, got {value!r}")
        return [self._encode(t, v, env) for t, v in zip(elements, value)]

    def _encode_named(self, named_type: NamedType, value: Any, env: Env) -> Any:
        special = recognize(named_type, self.config)
        if special == NUMBER:
            if not _is_number(value):
                raise ValueError(f"Expected a number, got {value!r}")
            return value
        if special == JSON_VALUE:
            return value
        if special == DURATION:
            # The duration helper keeps its field names on the wire
            return self._encode_fields(named_type.shape.fields, value, CaseConvention.IDENTITY, named_type.name, env)

        shape = named_type.shape
        if isinstance(shape, StructShape):
            rule = shape.rename_all or self.config.rename_rule
            return self._encode_fields(shape.fields, value, rule, named_type.name, env)
        if isinstance(shape, EnumShape):
            return self._encode_enum(named_type, shape, value, env)
        raise StructuralError(f"Type '{named_type.qualified_name}' has no wire representation")

    def _encode_fields(self, fields: tuple[Field, ...], value: Any, rule: CaseConvention, owner: str, env: Env) -> dict:
        if not isinstance(value, Mapping):
            raise TypeError(f"Expected a mapping of fields for '{owner}', got {value!r}")
        result = {}
        for field, key in wire_fields(fields, rule, owner):
            item = value.get(field.name)
            if item is None and absent_tolerant(field):
                if not field.has_default:
                    result[key] = None
                continue
            if field.name not in value:
                raise ValueError(f"Missing value for field '{field.name}' of '{owner}'")
            result[key] = self._encode(field.type, item, env)
        return result

    def _encode_enum(self, named_type: NamedType, shape: EnumShape, value: Any, env: Env) -> Any:
        if not isinstance(value, EnumValue):
            raise TypeError(f"Expected an EnumValue for '{named_type.name}', got {value!r}")
        for variant, wire_name, form in self._variants(named_type, shape):
            if variant.name == value.variant:
                break
        else:
            raise ValueError(f"'{named_type.name}' has no variant '{value.variant}'")

        owner = f"{named_type.name}::{variant.name}"
        tag = tag_key(shape.tagging, self.config)
        match form:
            case WireForm.EXTERNAL_UNIT:
                return wire_name
            case WireForm.EXTERNAL_SINGLE | WireForm.EXTERNAL_TUPLE | WireForm.EXTERNAL_STRUCT:
                return {wire_name: self._encode_payload(variant, value.value, owner, env)}
            case WireForm.INTERNAL_UNIT | WireForm.ADJACENT_UNIT:
                return {tag: wire_name}
            case WireForm.INTERNAL_STRUCT:
                return {tag: wire_name, **self._encode_payload(variant, value.value, owner, env)}
            case WireForm.ADJACENT_SINGLE | WireForm.ADJACENT_TUPLE | WireForm.ADJACENT_STRUCT:
                content = content_key(shape.tagging, self.config)
                return {tag: wire_name, content: self._encode_payload(variant, value.value, owner, env)}
            case WireForm.UNTAGGED_UNIT:
                return None
            case WireForm.UNTAGGED_SINGLE | WireForm.UNTAGGED_TUPLE | WireForm.UNTAGGED_STRUCT:
                return self._encode_payload(variant, value.value, owner, env)
        raise TypeError(f"Unknown wire form: {form!r}")

    def _encode_payload(self, variant: Variant, value: Any, owner: str, env: Env) -> Any:
        match variant.payload:
            case UnitPayload():
                if value is not None:
                    raise ValueError(f"Unit variant '{owner}' carries no value")
                return None
            case TuplePayload(types=types) if len(types) == 1:
                return self._encode(types[0], value, env)
            case TuplePayload(types=types):
                return self._encode_tuple(types, value, env)
            case StructPayload(fields=fields):
                return self._encode_fields(fields, value, self.config.rename_rule, owner, env)
        raise TypeError(f"Unknown payload: {variant.payload!r}")

    # Decoding

    def _decode(self, expr: TypeExpr, data: Any, env: Env) -> Any:
        match expr:
            case Primitive(kind=kind):
                return _check_primitive(kind, data, WireDecodeError)
            case GenericParam():
                return self._decode(self._substitute(expr, env), data, env)
            case ListType(element=element):
                return [self._decode(element, item, env) for item in self._expect_list(data)]
            case SetType(element=element):
                return frozenset(self._decode(element, item, env) for item in self._expect_list(data))
            case MapType(key=key, value=value_type):
                if not isinstance(data, dict):
                    raise WireDecodeError(f"Expected an object, got {data!r}")
                return {self._decode_key(key, k): self._decode(value_type, v, env) for k, v in data.items()}
            case TupleType(elements=elements):
                if len(elements) == 1:
                    return self._decode(elements[0], data, env)
                return self._decode_tuple(elements, data, f"Tuple{len(elements)}", env)
            case NullableType(inner=inner):
                return None if data is None else self._decode(inner, data, env)
            case IndirectType(inner=inner):
                return self._decode(inner, data, env)
            case NamedRef(ref=ref):
                named_type, inner_env = self._resolve(ref, env)
                return self._decode_named(named_type, data, inner_env)
        raise TypeError(f"Unknown type expression: {expr!r}")

    @staticmethod
    def _expect_list(data: Any) -> list:
        if not isinstance(data, list):
            raise WireDecodeError(f"Expected an array, got {data!r}")
        return data

    def _decode_key(self, key: TypeExpr, data: str) -> Any:
        if isinstance(key, Primitive) and key.kind.is_integer:
            try:
                number = int(data)
            except ValueError as e:
                raise WireDecodeError(f"Expected an integer key, got {data!r}") from e
            return _check_primitive(key.kind, number, WireDecodeError)
        if isinstance(key, Primitive) and key.kind == PrimitiveKind.STRING:
            return data
        raise StructuralError(f"Map keys must be strings or integers, got {key!r}")

    def _decode_tuple(self, elements: tuple[TypeExpr, ...], data: Any, variant: str, env: Env) -> tuple:
        items = self._expect_list(data)
        if len(items) != len(elements):
            raise ArityMismatch(len(elements), len(items), variant)
        return tuple(self._decode(t, item, env) for t, item in zip(elements, items))

    def _decode_named(self, named_type: NamedType, data: Any, env: Env) -> Any:
        special = recognize(named_type, self.config)
        if special == NUMBER:
            if not _is_number(data):
                raise WireDecodeError(f"Expected a number, got {data!r}")
            return data
        if special == JSON_VALUE:
            return data
        if special == DURATION:
            return self._decode_fields(named_type.shape.fields, data, CaseConvention.IDENTITY, named_type.name, env)

        shape = named_type.shape
        if isinstance(shape, StructShape):
            rule = shape.rename_all or self.config.rename_rule
            return self._decode_fields(shape.fields, data, rule, named_type.name, env)
        if isinstance(shape, EnumShape):
            return self._decode_enum(named_type, shape, data, env)
        raise StructuralError(f"Type '{named_type.qualified_name}' has no wire representation")

    def _decode_fields(self, fields: tuple[Field, ...], data: Any, rule: CaseConvention, owner: str, env: Env) -> dict:
        if not isinstance(data, dict):
            raise WireDecodeError(f"Expected an object for '{owner}', got {data!r}")
        result = {}
        for field, key in wire_fields(fields, rule, owner):
            tolerant = absent_tolerant(field)
            if key not in data:
                if not tolerant:
                    raise MissingField(key, owner)
                result[field.name] = None
            elif tolerant:
                # Present-but-null decodes as nil
                inner = field.type.inner if isinstance(field.type, NullableType) else field.type
                result[field.name] = None if data[key] is None else self._decode(inner, data[key], env)
            else:
                result[field.name] = self._decode(field.type, data[key], env)
        return result

    def _decode_enum(self, named_type: NamedType, shape: EnumShape, data: Any, env: Env) -> EnumValue:
        name = named_type.name
        variants = self._variants(named_type, shape)
        by_wire = {wire_name: (variant, form) for variant, wire_name, form in variants}

        if isinstance(shape.tagging, UntaggedTagging):
            for variant, _, form in variants:
                try:
                    return EnumValue(variant.name, self._decode_untagged(variant, form, data, name, env))
                except WireDecodeError:
                    continue
            raise WireDecodeError(f"data did not match any variant of untagged enum {name}")

        if isinstance(shape.tagging, ExternalTagging):
            if isinstance(data, str):
                variant, form = by_wire.get(data, (None, None))
                if form != WireForm.EXTERNAL_UNIT:
                    raise UnknownVariant(data, name)
                return EnumValue(variant.name)
            if not isinstance(data, dict) or len(data) != 1:
                raise WireDecodeError(f"Expected a variant name or a single-key object for {name}, got {data!r}")
            ((wire_name, payload),) = data.items()
            variant, form = by_wire.get(wire_name, (None, None))
            if form is None or form == WireForm.EXTERNAL_UNIT:
                raise UnknownVariant(wire_name, name)
            return EnumValue(variant.name, self._decode_payload(variant, payload, wire_name, name, env))

        # Internal and adjacent: the tag is a key of the top-level object
        if not isinstance(data, dict):
            raise WireDecodeError(f"Expected an object for {name}, got {data!r}")
        tag = tag_key(shape.tagging, self.config)
        if tag not in data:
            raise MissingField(tag, name)
        if not isinstance(data[tag], str):
            raise WireDecodeError(f"Expected a string tag for {name}, got {data[tag]!r}")
        variant, form = by_wire.get(data[tag], (None, None))
        if variant is None:
            raise UnknownVariant(data[tag], name)
        if form in (WireForm.INTERNAL_UNIT, WireForm.ADJACENT_UNIT):
            return EnumValue(variant.name)

        if isinstance(shape.tagging, InternalTagging):
            return EnumValue(variant.name, self._decode_fields(variant.payload.fields, data, self.config.rename_rule, f"{name}::{variant.name}", env))

        content = content_key(shape.tagging, self.config)
        if content not in data:
            raise MissingField(content, name)
        return EnumValue(variant.name, self._decode_payload(variant, data[content], data[tag], name, env))

    def _decode_payload(self, variant: Variant, data: Any, wire_name: str, enum_name: str, env: Env) -> Any:
        match variant.payload:
            case TuplePayload(types=types) if len(types) == 1:
                return self._decode(types[0], data, env)
            case TuplePayload(types=types):
                return self._decode_tuple(types, data, wire_name, env)
            case StructPayload(fields=fields):
                return self._decode_fields(fields, data, self.config.rename_rule, f"{enum_name}::{variant.name}", env)
        raise WireDecodeError(f"Variant '{variant.name}' carries no payload")

    def _decode_untagged(self, variant: Variant, form: WireForm, data: Any, enum_name: str, env: Env) -> Any:
        if form == WireForm.UNTAGGED_UNIT:
            if data is not None:
                raise WireDecodeError(f"Expected null for unit variant '{variant.name}'")
            return None
        return self._decode_payload(variant, data, variant.name, enum_name, env)
