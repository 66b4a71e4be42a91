#!/usr/bin/env python3

import unittest

import pytest

from type_model_to_swift.pipeline.backends.struct_compiler import StructCompiler
from type_model_to_swift.pipeline.config import CodeGeneratorConfig
from type_model_to_swift.pipeline.errors import NamingConflict, StructuralError
from type_model_to_swift.pipeline.model import (
    Field,
    GenericParam,
    ListType,
    NamedRef,
    NullableType,
    Primitive,
    PrimitiveKind,
)
from type_model_to_swift.pipeline.naming.case_conversion import CaseConvention
from type_model_to_swift.pipeline.naming.name_resolver import DuplicateNameStrategy

STRING = Primitive(PrimitiveKind.STRING)
U64 = Primitive(PrimitiveKind.U64)


def compile_struct(name, fields, config=None, **kwargs):
    compiler = StructCompiler(config or CodeGeneratorConfig())

    def render(expr):
        if isinstance(expr, NamedRef):
            return expr.ref.name
        return compiler.mapper.map(expr, render)

    return compiler.compile(name, tuple(fields), render, **kwargs)


USER_FIELDS = [
    Field("id", U64, doc="Stable identifier."),
    Field("user_name", STRING),
    Field("email", NullableType(STRING)),
    Field("nickname", STRING, optional=True),
    Field("retries", Primitive(PrimitiveKind.U32), has_default=True),
    Field("session", STRING, skip=True),
]


class TestStructDeclaration(unittest.TestCase):
    def setUp(self):
        self.rendered = compile_struct("User", USER_FIELDS, CodeGeneratorConfig(rename_rule=CaseConvention.CAMEL))

    def test_declaration(self):
        declaration = self.rendered.declaration
        self.assertIn("public struct User: Codable, Hashable {", declaration)
        self.assertIn("    public var id: UInt64", declaration)
        self.assertIn("    public var userName: String", declaration)
        self.assertIn("    public var email: String?", declaration)
        self.assertIn("    public var nickname: String?", declaration)
        self.assertIn("    public var retries: UInt32?", declaration)
        self.assertIn("    /// Stable identifier.", declaration)

    def test_skipped_field_is_not_declared(self):
        self.assertNotIn("session", self.rendered.text)

    def test_memberwise_init(self):
        self.assertIn(
            "public init(id: UInt64, userName: String, email: String? = nil, nickname: String? = nil, retries: UInt32? = nil) {",
            self.rendered.declaration,
        )
        self.assertIn("        self.userName = userName", self.rendered.declaration)

    def test_coding_keys_use_rename_rule(self):
        conformance = self.rendered.conformance
        self.assertIn("extension User {", conformance)
        self.assertIn('case userName = "userName"', conformance)
        self.assertIn('case id = "id"', conformance)

    def test_required_fields_are_checked(self):
        conformance = self.rendered.conformance
        self.assertIn("guard container.contains(.userName) else {", conformance)
        self.assertIn('throw TypeModelCodingError.missingField("userName", typeName: "User")', conformance)
        self.assertIn("self.userName = try container.decode(String.self, forKey: .userName)", conformance)

    def test_absent_tolerant_fields(self):
        conformance = self.rendered.conformance
        self.assertIn("self.email = try container.decodeIfPresent(String.self, forKey: .email)", conformance)
        self.assertIn("self.retries = try container.decodeIfPresent(UInt32.self, forKey: .retries)", conformance)
        self.assertNotIn("guard container.contains(.nickname)", conformance)

    def test_nil_encoding(self):
        conformance = self.rendered.conformance
        # Defaulted fields are left out when nil, optional ones are written as null
        self.assertIn("try container.encodeIfPresent(retries, forKey: .retries)", conformance)
        self.assertIn("try container.encode(email, forKey: .email)", conformance)
        self.assertIn("try container.encode(nickname, forKey: .nickname)", conformance)


class TestStructVariants:
    def test_struct_rename_all_overrides_config(self):
        rendered = compile_struct(
            "Settings",
            [Field("user_name", STRING)],
            CodeGeneratorConfig(rename_rule=CaseConvention.CAMEL),
            rename_rule=CaseConvention.KEBAB,
        )
        assert 'case userName = "user-name"' in rendered.conformance

    def test_explicit_rename(self):
        rendered = compile_struct("Point", [Field("x", STRING, rename="X-Coord")])
        assert 'case x = "X-Coord"' in rendered.conformance

    def test_keyword_field(self):
        rendered = compile_struct("Option", [Field("default", Primitive(PrimitiveKind.BOOL))])
        assert "public var `default`: Bool" in rendered.declaration
        assert 'case `default` = "default"' in rendered.conformance

    def test_empty_struct(self):
        rendered = compile_struct("Marker", [])
        assert "public struct Marker: Codable, Hashable {" in rendered.declaration
        assert "public init() {" in rendered.declaration
        assert "_ = try decoder.container(keyedBy: TypeModelCodingKey.self)" in rendered.conformance
        assert "CodingKeys" not in rendered.conformance

    def test_generic_struct(self):
        rendered = compile_struct("Page", [Field("items", ListType(GenericParam("T")))], generics=("T",))
        assert "public struct Page<T: Codable & Hashable>: Codable, Hashable {" in rendered.declaration
        assert "public var items: [T]" in rendered.declaration

    def test_doc_and_deprecation(self):
        rendered = compile_struct(
            "Legacy",
            [Field("name", STRING, deprecated="use title")],
            doc="Old record.\n\nKept for compatibility.",
            deprecated="",
        )
        assert rendered.declaration.startswith("/// Old record.\n///\n/// Kept for compatibility.\n@available(*, deprecated)\n")
        assert '    @available(*, deprecated, message: "use title")' in rendered.declaration

    def test_doc_comments_disabled(self):
        rendered = compile_struct("Legacy", [Field("name", STRING, doc="Name.")], CodeGeneratorConfig(emit_doc_comments=False), doc="Old.")
        assert "///" not in rendered.declaration

    def test_deprecation_disabled(self):
        rendered = compile_struct(
            "Legacy",
            [Field("name", STRING, deprecated="use title")],
            CodeGeneratorConfig(emit_deprecated=False),
            deprecated="",
        )
        assert "@available" not in rendered.declaration
        assert "public var name: String" in rendered.declaration

    def test_duplicate_wire_keys(self):
        with pytest.raises(StructuralError, match="both serialize as 'x'"):
            compile_struct("Point", [Field("x", STRING), Field("y", STRING, rename="x")])

    def test_member_collision_fails_by_default(self):
        fields = [Field("user_id", STRING), Field("userId", STRING)]
        with pytest.raises(NamingConflict) as exc_info:
            compile_struct("Account", fields)
        assert "Account.user_id" in str(exc_info.value)
        assert "Account.userId" in str(exc_info.value)

    def test_member_collision_qualified(self):
        fields = [Field("user_id", STRING), Field("userId", STRING)]
        config = CodeGeneratorConfig(duplicate_name_strategy=DuplicateNameStrategy.QUALIFY)
        rendered = compile_struct("Account", fields, config)
        assert "public var userId: String" in rendered.declaration
        assert "public var userId2: String" in rendered.declaration
        assert 'case userId2 = "userId"' in rendered.conformance


if __name__ == "__main__":
    pytest.main([__file__])
