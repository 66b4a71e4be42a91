#!/usr/bin/env python3

import json
import unittest
from pathlib import Path

import pytest

from type_model_to_swift import __version__
from type_model_to_swift.pipeline import (
    CodeGeneratorConfig,
    FileSink,
    FormatterConfig,
    NamingConflict,
    PipelineGenerator,
    StringSink,
    StructNaming,
    StructuralError,
    UnresolvedReference,
    load_registry,
)
from type_model_to_swift.pipeline.generator import CycleGuard
from type_model_to_swift.pipeline.naming.name_resolver import DuplicateNameStrategy

TEST_DATA = Path(__file__).parent / "test_data"


def struct(name, *fields, **extra):
    entry = {
        "name": name,
        "shape": {"kind": "struct", "fields": [{"name": field_name, "type": field_type} for field_name, field_type in fields]},
    }
    entry.update(extra)
    return entry


def generate_types(*types, config=None):
    return PipelineGenerator(load_registry({"types": list(types)}), config).generate_types()


def generate(*types, config=None):
    return PipelineGenerator(load_registry({"types": list(types)}), config).generate()


class TestShapesRegistry(unittest.TestCase):
    """End-to-end generation over a registry covering every convention"""

    @classmethod
    def setUpClass(cls):
        with open(TEST_DATA / "shapes_registry.json") as f:
            cls.registry = load_registry(json.load(f))
        cls.generator = PipelineGenerator(cls.registry, CodeGeneratorConfig(), "type_model_to_swift shapes_registry.json Models.swift")
        cls.output = cls.generator.generate()

    def test_generation_comment(self):
        self.assertTrue(
            self.output.startswith(f"// Generated by type_model_to_swift v{__version__} : type_model_to_swift shapes_registry.json Models.swift\n")
        )
        self.assertIn("import Foundation", self.output)

    def test_dependencies_come_first(self):
        names = list(self.generator.generate_types())
        self.assertEqual(
            names,
            ["ShapeSquareData", "Shape", "Color", "EventMovedData", "Event", "ValuePointData", "Value", "Node", "Page", "Settings"],
        )

    def test_special_types_are_substituted(self):
        self.assertIn("public var elapsed: RustDuration", self.output)
        self.assertIn("public struct RustDuration: Codable, Hashable {", self.output)
        self.assertNotIn("public struct Duration", self.output)
        self.assertIn("public var extra: JsonValue", self.output)
        self.assertIn("public enum JsonValue: Codable, Hashable {", self.output)
        self.assertNotIn("Extra", self.output)

    def test_recursive_type(self):
        self.assertIn("public var next: Indirect<Node>?", self.output)
        self.assertIn("public final class Indirect<T: Codable & Hashable>: Codable, Hashable {", self.output)

    def test_prelude_helpers(self):
        self.assertIn("public enum TypeModelCodingError: Error, CustomStringConvertible {", self.output)
        self.assertIn("public struct TypeModelCodingKey: CodingKey, Hashable {", self.output)
        self.assertIn("public struct Tuple2<T0: Codable & Hashable, T1: Codable & Hashable>: Codable, Hashable {", self.output)
        self.assertIn("extension UInt16: CodingKeyRepresentable {", self.output)
        self.assertNotIn("public struct UnitValue", self.output)
        self.assertNotIn("Tuple3", self.output)

    def test_settings(self):
        self.assertIn('@available(*, deprecated, message: "Use Preferences")\npublic struct Settings: Codable, Hashable {', self.output)
        self.assertIn("    /// Display name.\n    public var userName: String", self.output)
        self.assertIn("public var page: Page<UInt32>", self.output)
        self.assertIn("public var tags: Set<String>", self.output)
        self.assertIn("public var limits: [UInt16: Float]", self.output)
        self.assertIn("public var origin: Tuple2<Double, Double>", self.output)
        self.assertIn("public var retries: UInt8?", self.output)
        self.assertIn('case userName = "userName"', self.output)
        self.assertIn('case nextCursor = "next_cursor"', self.output)
        self.assertNotIn("cache", self.output)

    def test_enums(self):
        self.assertIn("/// A drawable shape.\npublic enum Shape: Codable, Hashable {", self.output)
        self.assertIn("public enum Color: String, Codable, Hashable, CaseIterable {", self.output)
        self.assertIn('case darkGreen = "DARK_GREEN"', self.output)
        self.assertIn("self = try .moved(EventMovedData(from: decoder))", self.output)
        self.assertIn("public struct Page<T: Codable & Hashable>: Codable, Hashable {", self.output)

    def test_generation_is_deterministic(self):
        self.assertEqual(self.generator.generate(), self.output)


class TestCycles:
    def test_direct_self_reference(self):
        with pytest.raises(StructuralError, match="Node -> Node"):
            generate_types(struct("Node", ("next", {"ref": "Node"})))

    def test_nullable_is_not_a_boundary(self):
        with pytest.raises(StructuralError, match="indirection boundary"):
            generate_types(struct("Node", ("next", {"nullable": {"ref": "Node"}})))

    def test_indirect_self_reference(self):
        types = generate_types(struct("Node", ("value", "i32"), ("next", {"nullable": {"indirect": {"ref": "Node"}}})))
        assert "public var next: Indirect<Node>?" in types["Node"].declaration

    def test_collection_is_a_boundary(self):
        types = generate_types(struct("Tree", ("children", {"list": {"ref": "Tree"}})))
        assert "public var children: [Tree]" in types["Tree"].declaration

    def test_mutual_recursion_names_the_path(self):
        with pytest.raises(StructuralError, match="A -> B -> A"):
            generate_types(struct("A", ("b", {"ref": "B"})), struct("B", ("a", {"ref": "A"})))

    def test_mutual_recursion_through_collection(self):
        types = generate_types(struct("A", ("bs", {"list": {"ref": "B"}})), struct("B", ("a", {"ref": "A"})))
        assert list(types) == ["B", "A"]
        assert "public var a: A" in types["B"].declaration

    def test_recursive_enum_through_indirect(self):
        expr = {
            "name": "Expr",
            "shape": {
                "kind": "enum",
                "variants": [
                    {"name": "Literal", "payload": {"kind": "tuple", "types": ["f64"]}},
                    {"name": "Negate", "payload": {"kind": "tuple", "types": [{"indirect": {"ref": "Expr"}}]}},
                ],
            },
        }
        types = generate_types(expr)
        assert "case negate(Indirect<Expr>)" in types["Expr"].declaration

    def test_guard_depths(self):
        guard = CycleGuard()
        with guard.visiting("A"):
            with pytest.raises(StructuralError):
                guard.on_path("A")
            with guard.boundary():
                assert guard.on_path("A")
            assert not guard.on_path("B")
        assert guard.current is None


class TestReferences:
    def test_unresolved_reference(self):
        with pytest.raises(UnresolvedReference) as exc_info:
            generate_types(struct("Holder", ("missing", {"ref": "Missing"})))
        assert exc_info.value.name == "Missing"
        assert "Holder" in str(exc_info.value)

    def test_generic_arity(self):
        page = struct("Page", ("items", {"list": {"generic": "T"}}), generics=["T"])
        with pytest.raises(StructuralError, match="takes 1 generic argument"):
            generate_types(page, struct("Holder", ("page", {"ref": "Page"})))

    def test_generic_arguments(self):
        page = struct("Page", ("items", {"list": {"generic": "T"}}), generics=["T"])
        holder = struct("Holder", ("page", {"ref": "Page", "args": [{"list": "string"}]}))
        types = generate_types(page, holder)
        assert "public var page: Page<[String]>" in types["Holder"].declaration

    def test_number_is_double(self):
        number = {
            "name": "Number",
            "module_path": "serde_json",
            "shape": {
                "kind": "enum",
                "tagging": "untagged",
                "variants": [{"name": kind, "payload": {"kind": "tuple", "types": [kind]}} for kind in ("f64", "i64", "u64")],
            },
        }
        output = generate(number, struct("Reading", ("value", {"ref": "Number"})))
        assert "public var value: Double" in output
        assert "enum Number" not in output

    def test_opaque_without_passthrough(self):
        config = CodeGeneratorConfig(passthrough_opaque_json=False)
        with pytest.raises(StructuralError, match="opaque"):
            generate_types({"name": "Blob", "shape": {"kind": "opaque"}}, config=config)

    def test_unit_fields_use_helper(self):
        output = generate(struct("Ping", ("nothing", "unit")))
        assert "public var nothing: UnitValue" in output
        assert "public struct UnitValue: Codable, Hashable {" in output


class TestDuplicateNames:
    def statuses(self):
        return (
            struct("Status", ("code", "u16"), module_path="core"),
            struct("Status", ("reason", "string"), module_path="net"),
        )

    def test_fail_names_both_origins(self):
        with pytest.raises(NamingConflict) as exc_info:
            generate_types(*self.statuses())
        message = str(exc_info.value)
        assert "core::Status" in message
        assert "net::Status" in message

    def test_qualify(self):
        config = CodeGeneratorConfig(duplicate_name_strategy=DuplicateNameStrategy.QUALIFY)
        types = generate_types(*self.statuses(), config=config)
        assert list(types) == ["Status", "StatusNet"]
        assert "public var reason: String" in types["StatusNet"].declaration

    def test_first_wins(self):
        config = CodeGeneratorConfig(duplicate_name_strategy=DuplicateNameStrategy.FIRST_WINS_WITH_WARNING)
        types = generate_types(*self.statuses(), config=config)
        assert list(types) == ["Status", "Status2"]

    def test_prelude_names_are_reserved(self):
        with pytest.raises(NamingConflict, match="prelude::JsonValue"):
            generate_types(struct("JsonValue", ("raw", "string")))

    def test_companion_struct_never_displaces_exported_type(self):
        shape = {
            "name": "Shape",
            "shape": {
                "kind": "enum",
                "variants": [{"name": "Square", "payload": {"kind": "struct", "fields": [{"name": "side", "type": "f64"}]}}],
            },
        }
        config = CodeGeneratorConfig(duplicate_name_strategy=DuplicateNameStrategy.QUALIFY)
        types = generate_types(shape, struct("ShapeSquareData", ("other", "string")), config=config)
        assert "public var other: String" in types["ShapeSquareData"].declaration
        assert "public var side: Double" in types["ShapeSquareData2"].declaration
        assert "case square(ShapeSquareData2)" in types["Shape"].declaration



def enum_with_struct_variant(name, variant):
    return {
        "name": name,
        "shape": {
            "kind": "enum",
            "variants": [{"name": variant, "payload": {"kind": "struct", "fields": [{"name": "side", "type": "f64"}]}}],
        },
    }


class TestCompanionNaming:
    def test_auto_rename_prefixes_enum_name(self):
        types = generate_types(enum_with_struct_variant("Shape", "Square"))
        assert list(types) == ["ShapeSquareData", "Shape"]

    def test_keep_original(self):
        config = CodeGeneratorConfig(struct_naming=StructNaming.KEEP_ORIGINAL)
        types = generate_types(enum_with_struct_variant("Shape", "Square"), config=config)
        assert list(types) == ["SquareData", "Shape"]
        assert "case square(SquareData)" in types["Shape"].declaration

    def test_keep_original_collision_fails(self):
        config = CodeGeneratorConfig(struct_naming=StructNaming.KEEP_ORIGINAL)
        with pytest.raises(NamingConflict) as exc_info:
            generate_types(enum_with_struct_variant("Shape", "Square"), enum_with_struct_variant("Tile", "Square"), config=config)
        message = str(exc_info.value)
        assert "Shape.Square" in message
        assert "Tile.Square" in message

    def test_keep_original_collision_first_wins(self):
        config = CodeGeneratorConfig(
            struct_naming=StructNaming.KEEP_ORIGINAL,
            duplicate_name_strategy=DuplicateNameStrategy.FIRST_WINS_WITH_WARNING,
        )
        types = generate_types(enum_with_struct_variant("Shape", "Square"), enum_with_struct_variant("Tile", "Square"), config=config)
        assert "case square(SquareData)" in types["Shape"].declaration
        assert "case square(SquareData2)" in types["Tile"].declaration

class TestOutput:
    def test_fragments_start_with_prelude(self):
        generator = PipelineGenerator(load_registry({"types": [struct("Point", ("x", "f64"))]}))
        sink = StringSink()
        generator.write(sink)
        assert list(sink.fragments) == ["Prelude", "Point"]
        assert sink.getvalue().endswith("}\n")

    def test_generation_comment_disabled(self):
        output = generate(struct("Point", ("x", "f64")), config=CodeGeneratorConfig(add_generation_comment=False))
        assert output.startswith("// Do not edit")

    def test_file_sink(self, tmp_path):
        target = tmp_path / "out" / "Models.swift"
        generator = PipelineGenerator(load_registry({"types": [struct("Point", ("x", "f64"))]}))
        generator.write(FileSink(target))
        assert target.read_text() == generator.generate()
        assert [p.name for p in target.parent.iterdir()] == ["Models.swift"]

    def test_missing_formatter_leaves_output_unchanged(self):
        registry = load_registry({"types": [struct("Point", ("x", "f64"))]})
        config = CodeGeneratorConfig(formatter=FormatterConfig(enabled=True, executable="no-such-swift-format"))
        assert PipelineGenerator(registry, config).generate() == PipelineGenerator(registry).generate()

    def test_error_aborts_the_run(self):
        sink = StringSink()
        generator = PipelineGenerator(load_registry({"types": [struct("Ok", ("x", "f64")), struct("Bad", ("m", {"ref": "Missing"}))]}))
        with pytest.raises(UnresolvedReference):
            generator.write(sink)
        assert sink.fragments == {}


if __name__ == "__main__":
    pytest.main([__file__])
