"""
Registry loader that builds the type model from a JSON document.

The reflection collaborator hands over a document of the form:

    {
      "types": [
        {
          "name": "Shape",
          "module_path": "geometry",          # optional, used to qualify duplicates
          "generics": ["T"],                  # optional
          "doc": "...", "deprecated": "...",  # optional
          "shape": {"kind": "struct" | "enum" | "opaque", ...}
        }
      ]
    }

Type expressions are either a primitive name ("u32") or a single-key object:
{"list": T}, {"set": T}, {"map": [K, V]}, {"tuple": [T, ...]},
{"nullable": T}, {"indirect": T}, {"ref": "Name", "args": [T, ...]},
{"generic": "T"}.
"""

from __future__ import annotations

from typing import Any

from ..errors import RegistryFormatError, StructuralError
from ..naming.case_conversion import CaseConvention
from .nodes import (
    UNSUPPORTED_PRIMITIVES,
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


class RegistryLoader:
    """Parses a registry document into a TypeRegistry."""

    # Single-element wrappers: key -> node class
    WRAPPERS = {
        "list": ListType,
        "set": SetType,
        "nullable": NullableType,
        "indirect": IndirectType,
    }

    def load(self, document: dict[str, Any]) -> TypeRegistry:
        """
        Parse a registry document.

        Args:
            document: The decoded JSON document

        Returns:
            TypeRegistry with every exported type, in document order
        """
        if not isinstance(document, dict) or not isinstance(document.get("types"), list):
            raise RegistryFormatError("Registry document must be an object with a 'types' list")

        types = []
        for index, entry in enumerate(document["types"]):
            types.append(self._parse_named_type(entry, f"types[{index}]"))
        return TypeRegistry(types)

    def _parse_named_type(self, entry: Any, path: str) -> NamedType:
        if not isinstance(entry, dict) or "name" not in entry or "shape" not in entry:
            raise RegistryFormatError(f"{path}: a type needs 'name' and 'shape'")

        name = entry["name"]
        if not isinstance(name, str) or not name:
            raise RegistryFormatError(f"{path}.name: type name must be a non-empty string, got {name!r}")

        generics = entry.get("generics", [])
        if not isinstance(generics, (list, tuple)) or not all(isinstance(g, str) and g for g in generics):
            raise RegistryFormatError(f"{path}.generics: generic parameters must be a list of names, got {generics!r}")

        return NamedType(
            name=name,
            shape=self._parse_shape(entry["shape"], f"{path}.shape", name),
            module_path=entry.get("module_path", ""),
            generics=tuple(generics),
            doc=entry.get("doc", ""),
            deprecated=entry.get("deprecated"),
        )

    def _parse_shape(self, shape: Any, path: str, owner: str) -> StructShape | EnumShape | OpaqueShape:
        if not isinstance(shape, dict):
            raise RegistryFormatError(f"{path}: shape must be an object")

        kind = shape.get("kind")
        try:
            if kind == "struct":
                return StructShape(
                    fields=self._parse_fields(shape.get("fields", []), f"{path}.fields"),
                    rename_all=self._parse_convention(shape.get("rename_all"), path),
                )
            if kind == "enum":
                return EnumShape(
                    tagging=self._parse_tagging(shape.get("tagging", "external"), f"{path}.tagging"),
                    variants=tuple(
                        self._parse_variant(variant, f"{path}.variants[{i}]") for i, variant in enumerate(shape.get("variants", []))
                    ),
                    rename_all=self._parse_convention(shape.get("rename_all"), path),
                )
        except StructuralError as e:
            raise StructuralError(f"{owner}: {e}") from e
        if kind == "opaque":
            return OpaqueShape()

        raise RegistryFormatError(f"{path}: unknown shape kind {kind!r}")

    def _parse_fields(self, fields: Any, path: str) -> tuple[Field, ...]:
        if not isinstance(fields, list):
            raise RegistryFormatError(f"{path}: fields must be a list")

        result = []
        for index, field_def in enumerate(fields):
            field_path = f"{path}[{index}]"
            if not isinstance(field_def, dict) or "name" not in field_def or "type" not in field_def:
                raise RegistryFormatError(f"{field_path}: a field needs 'name' and 'type'")
            result.append(
                Field(
                    name=field_def["name"],
                    type=self.parse_type(field_def["type"], f"{field_path}.type"),
                    optional=bool(field_def.get("optional", False)),
                    has_default=bool(field_def.get("has_default", False)),
                    doc=field_def.get("doc", ""),
                    deprecated=field_def.get("deprecated"),
                    rename=field_def.get("rename"),
                    skip=bool(field_def.get("skip", False)),
                )
            )
        return tuple(result)

    def _parse_tagging(self, tagging: Any, path: str) -> Tagging:
        # Shorthand: "external", "untagged"
        if isinstance(tagging, str):
            tagging = {"kind": tagging}
        if not isinstance(tagging, dict):
            raise RegistryFormatError(f"{path}: tagging must be a string or an object")

        kind = tagging.get("kind")
        if kind == "external":
            return ExternalTagging()
        if kind == "internal":
            return InternalTagging(tag_key=tagging.get("tag"))
        if kind == "adjacent":
            return AdjacentTagging(tag_key=tagging.get("tag"), content_key=tagging.get("content"))
        if kind == "untagged":
            return UntaggedTagging()
        raise RegistryFormatError(f"{path}: unknown tagging convention {kind!r}")

    def _parse_variant(self, variant: Any, path: str) -> Variant:
        if not isinstance(variant, dict) or "name" not in variant:
            raise RegistryFormatError(f"{path}: a variant needs a 'name'")

        return Variant(
            name=variant["name"],
            payload=self._parse_payload(variant.get("payload", {"kind": "unit"}), f"{path}.payload"),
            doc=variant.get("doc", ""),
            deprecated=variant.get("deprecated"),
            rename=variant.get("rename"),
            skip=bool(variant.get("skip", False)),
        )

    def _parse_payload(self, payload: Any, path: str) -> Payload:
        if not isinstance(payload, dict):
            raise RegistryFormatError(f"{path}: payload must be an object")

        kind = payload.get("kind")
        if kind == "unit":
            return UnitPayload()
        if kind == "tuple":
            types = payload.get("types", [])
            return TuplePayload(types=tuple(self.parse_type(t, f"{path}.types[{i}]") for i, t in enumerate(types)))
        if kind == "struct":
            return StructPayload(fields=self._parse_fields(payload.get("fields", []), f"{path}.fields"))
        raise RegistryFormatError(f"{path}: unknown payload kind {kind!r}")

    def _parse_convention(self, value: Any, path: str) -> CaseConvention | None:
        if value is None:
            return None
        try:
            return CaseConvention(value)
        except ValueError as e:
            raise RegistryFormatError(f"{path}: unknown rename rule {value!r}") from e

    def parse_type(self, node: Any, path: str = "") -> TypeExpr:
        """Parse one type expression."""
        if isinstance(node, str):
            return self._parse_primitive(node, path)

        if not isinstance(node, dict) or not node:
            raise RegistryFormatError(f"{path}: invalid type expression {node!r}")

        if "primitive" in node:
            return self._parse_primitive(node["primitive"], path)

        if "ref" in node:
            args = tuple(self.parse_type(arg, f"{path}.args[{i}]") for i, arg in enumerate(node.get("args", [])))
            return NamedRef(TypeRef(name=node["ref"], args=args))

        if "generic" in node:
            return GenericParam(name=node["generic"])

        if "map" in node:
            key_value = node["map"]
            if not isinstance(key_value, list) or len(key_value) != 2:
                raise RegistryFormatError(f"{path}: map needs [key, value]")
            return MapType(
                key=self.parse_type(key_value[0], f"{path}.map[0]"),
                value=self.parse_type(key_value[1], f"{path}.map[1]"),
            )

        if "tuple" in node:
            elements = node["tuple"]
            if not isinstance(elements, list):
                raise RegistryFormatError(f"{path}: tuple needs a list of types")
            return TupleType(elements=tuple(self.parse_type(t, f"{path}.tuple[{i}]") for i, t in enumerate(elements)))

        for key, node_class in self.WRAPPERS.items():
            if key in node:
                return node_class(self.parse_type(node[key], f"{path}.{key}"))

        raise RegistryFormatError(f"{path}: unknown type expression {node!r}")

    def _parse_primitive(self, name: str, path: str) -> Primitive:
        if name in UNSUPPORTED_PRIMITIVES:
            raise StructuralError(f"{path}: primitive '{name}' has no Swift equivalent")
        try:
            return Primitive(PrimitiveKind(name))
        except ValueError as e:
            raise RegistryFormatError(f"{path}: unknown primitive {name!r}") from e


def load_registry(document: dict[str, Any]) -> TypeRegistry:
    """Convenience wrapper around RegistryLoader().load()."""
    return RegistryLoader().load(document)
