"""
Pipeline generator: drives one generation run over a type registry.

1. Bind every exported type (and companion struct) to a Swift identifier
2. Visit each exported type depth-first, compiling referenced types first
3. Assemble the prelude with the runtime helpers the run actually used
4. Hand the fragments to a sink, optionally through swift-format

All mutable state lives in a per-run object, so runs are independent and
a generator can be reused.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from .. import __version__
from ..logging import get_logger
from .backends.base import RenderedType, TemplateBackend
from .backends.enum_compiler import EnumCompiler
from .backends.special_types import SpecialType, recognize
from .backends.struct_compiler import StructCompiler
from .config import CodeGeneratorConfig
from .errors import StructuralError
from .formatters import SwiftFormatFormatter
from .model.nodes import EnumShape, NamedRef, NamedType, StructPayload, StructShape, TypeExpr, TypeRef, TypeRegistry
from .naming.name_resolver import NameScope, companion_struct_name, escape_keyword, resolve, swift_type_name
from .sinks import Sink, StringSink

logger = get_logger("generator")

# Identifiers declared by the prelude; exported types may not take them
PRELUDE_NAMES = (
    "TypeModelCodingError",
    "TypeModelCodingKey",
    "Indirect",
    "UnitValue",
    "RustDuration",
    "JsonValue",
    "Tuple2",
    "Tuple3",
    "Tuple4",
    "Tuple5",
    "Tuple6",
)

PRELUDE_FRAGMENT = "Prelude"


class CycleGuard:
    """Tracks the types on the current traversal path and the indirection depth.

    Each type remembers how many indirection boundaries had been crossed when
    it was entered. Meeting it again at the same depth means the type
    contains itself by value.
    """

    def __init__(self):
        self._path: list[str] = []
        self._entry_depth: dict[str, int] = {}
        self._depth = 0

    @property
    def current(self) -> str | None:
        return self._path[-1] if self._path else None

    @contextmanager
    def visiting(self, origin: str) -> Iterator[None]:
        self._path.append(origin)
        self._entry_depth[origin] = self._depth
        try:
            yield
        finally:
            self._path.pop()
            del self._entry_depth[origin]

    @contextmanager
    def boundary(self) -> Iterator[None]:
        self._depth += 1
        try:
            yield
        finally:
            self._depth -= 1

    def on_path(self, origin: str) -> bool:
        """
        Whether origin is already being compiled further up the path.

        Raises:
            StructuralError: If it is, and no indirection boundary was crossed since
        """
        if origin not in self._entry_depth:
            return False
        if self._depth == self._entry_depth[origin]:
            cycle = self._path[self._path.index(origin) :] + [origin]
            raise StructuralError(f"Type '{origin}' contains itself without an indirection boundary: {' -> '.join(cycle)}")
        return True


class _GenerationRun:
    """State of one run: name bindings, visited types, output and used helpers."""

    def __init__(self, generator: PipelineGenerator):
        self.registry = generator.registry
        self.config = generator.config
        self.mapper = generator.mapper
        self.struct_compiler = generator.struct_compiler
        self.enum_compiler = generator.enum_compiler

        self.type_scope = NameScope("types")
        self.guard = CycleGuard()
        self.rendered: dict[str, RenderedType] = {}
        self.compiled: set[str] = set()
        self.helpers: set[str] = set()
        self.data_names: dict[str, dict[str, str]] = {}
        self._specials: dict[str, SpecialType | None] = {}

    def run(self) -> _GenerationRun:
        self._bind_names()
        for named_type in self.registry:
            if self._special(named_type) is None:
                self._ensure_compiled(named_type)
        return self

    # Naming

    def _bind_names(self) -> None:
        """Bind identifiers in registry order, so results never depend on traversal order."""
        strategy = self.config.duplicate_name_strategy
        for name in PRELUDE_NAMES:
            resolve(name, f"prelude::{name}", self.type_scope, strategy)

        exported = [t for t in self.registry if self._special(t) is None]
        for named_type in exported:
            resolve(swift_type_name(named_type.name), named_type.qualified_name, self.type_scope, strategy)

        # Companion structs come second so they never displace an exported type
        for named_type in exported:
            if not isinstance(named_type.shape, EnumShape):
                continue
            enum_name = self._type_name(named_type)
            names = {}
            for variant in named_type.shape.variants:
                if variant.skip or not isinstance(variant.payload, StructPayload):
                    continue
                candidate = companion_struct_name(enum_name, variant.name, self.config.struct_naming)
                binding = resolve(candidate, f"{named_type.qualified_name}.{variant.name}", self.type_scope, strategy)
                names[variant.name] = binding.identifier
            self.data_names[named_type.qualified_name] = names

    def _type_name(self, named_type: NamedType) -> str:
        return escape_keyword(self.type_scope.lookup(named_type.qualified_name).identifier)

    def _special(self, named_type: NamedType) -> SpecialType | None:
        origin = named_type.qualified_name
        if origin not in self._specials:
            self._specials[origin] = recognize(named_type, self.config)
        return self._specials[origin]

    # Rendering

    def render_type(self, expr: TypeExpr) -> str:
        """Render any type expression; passed to the compilers as their render capability."""
        if isinstance(expr, NamedRef):
            return self.render(expr.ref)
        self.helpers.update(self.mapper.helpers_for(expr))
        if self.mapper.is_boundary(expr):
            with self.guard.boundary():
                return self.mapper.map(expr, self.render_type)
        return self.mapper.map(expr, self.render_type)

    def render(self, ref: TypeRef) -> str:
        """Render a named reference, compiling the referenced type first if needed."""
        named_type = self.registry.lookup(ref.name, self.guard.current)
        if len(ref.args) != len(named_type.generics):
            raise StructuralError(
                f"'{named_type.qualified_name}' takes {len(named_type.generics)} generic argument(s), "
                f"got {len(ref.args)} (referenced from '{self.guard.current}')"
            )

        special = self._special(named_type)
        if special is not None:
            if special.helper:
                self.helpers.add(special.helper)
            return special.swift_name

        if self.guard.on_path(named_type.qualified_name):
            logger.debug("Forward reference to %s from %s", named_type.qualified_name, self.guard.current)
        else:
            self._ensure_compiled(named_type)

        name = self._type_name(named_type)
        if ref.args:
            name += "<" + ", ".join(self.render_type(arg) for arg in ref.args) + ">"
        return name

    def _ensure_compiled(self, named_type: NamedType) -> None:
        origin = named_type.qualified_name
        if origin in self.compiled:
            return

        name = self._type_name(named_type)
        with self.guard.visiting(origin):
            logger.debug("Compiling %s as %s", origin, name)
            shape = named_type.shape
            if isinstance(shape, StructShape):
                results = [
                    self.struct_compiler.compile(
                        name,
                        shape.fields,
                        self.render_type,
                        origin=origin,
                        generics=named_type.generics,
                        rename_rule=shape.rename_all,
                        doc=named_type.doc,
                        deprecated=named_type.deprecated,
                    )
                ]
            elif isinstance(shape, EnumShape):
                results = self.enum_compiler.compile(
                    name,
                    shape,
                    self.render_type,
                    origin=origin,
                    generics=named_type.generics,
                    data_names=self.data_names.get(origin),
                    doc=named_type.doc,
                    deprecated=named_type.deprecated,
                )
            else:
                raise StructuralError(f"Type '{origin}' has no declaration to generate")

        self.compiled.add(origin)
        for result in results:
            self.rendered[result.name] = result


class PipelineGenerator(TemplateBackend):
    """Generates Swift declarations and Codable conformances from a type registry."""

    def __init__(
        self,
        registry: TypeRegistry,
        config: CodeGeneratorConfig | None = None,
        command_line: str = "type_model_to_swift",
    ):
        """
        Initialize the generator.

        Args:
            registry: The exported types
            config: Code generation configuration
            command_line: Invocation recorded in the generation comment
        """
        super().__init__(config or CodeGeneratorConfig())
        self.registry = registry
        self.command_line = command_line
        self.struct_compiler = StructCompiler(self.config, self.mapper)
        self.enum_compiler = EnumCompiler(self.config, self.mapper, self.struct_compiler)
        self.formatter = SwiftFormatFormatter()

    def generate_types(self) -> dict[str, RenderedType]:
        """
        Compile every exported type.

        Returns:
            Rendered types keyed by Swift identifier, dependencies first

        Raises:
            GenerationError: On any structural, naming or reference error;
                nothing is returned for the other types
        """
        return _GenerationRun(self).run().rendered

    def generate(self) -> str:
        """Generate the complete Swift source: prelude, then every type."""
        sink = StringSink()
        self.write(sink)
        return sink.getvalue()

    def write(self, sink: Sink) -> None:
        """Generate and hand every fragment to a sink, then close it."""
        run = _GenerationRun(self).run()
        fragments = {PRELUDE_FRAGMENT: self._prelude(run.helpers)}
        fragments.update((name, rendered.text) for name, rendered in run.rendered.items())

        for name, text in fragments.items():
            if self.config.formatter.enabled:
                text = self.formatter.format(text, self.config.formatter)
            sink.write(name, text.rstrip("\n"))
        sink.close()
        logger.info("Generated %d Swift types", len(run.rendered))

    def _prelude(self, helpers: set[str]) -> str:
        generation_comment = ""
        if self.config.add_generation_comment:
            generation_comment = f"// Generated by type_model_to_swift v{__version__} : {self.command_line}"

        tuple_arities = sorted(int(h.removeprefix("Tuple")) for h in helpers if h.startswith("Tuple"))
        integer_keys = sorted(h.removeprefix("IntegerKey.") for h in helpers if h.startswith("IntegerKey."))
        return self.get_template("prefix").render(
            generation_comment=generation_comment,
            helpers=helpers,
            tuple_arities=tuple_arities,
            integer_keys=integer_keys,
        )
