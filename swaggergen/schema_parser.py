"""Resolve Swagger schemas to type descriptors and emit model declarations.

Handles:
- primitive type/format mapping (int32/int64, number, string formats)
- $ref resolution through the model emitter, memoized per identifier
- reference cycles (a model in progress resolves to its own name)
- arrays, erased additionalProperties maps, optional (non-required) fields
- one level of synthetic naming for inline objects
- x-extensible-enum definitions
"""

from __future__ import annotations

import logging

from .artifacts import (
    EnumConstant,
    EnumDeclaration,
    FieldDeclaration,
    GeneratedArtifactSet,
    ModelDeclaration,
    enum_member_name,
)
from .descriptors import (
    ANY,
    BOOLEAN,
    DATE,
    DATETIME,
    FLOAT,
    INT32,
    INT64,
    STRING,
    UUID,
    VOID,
    ListOf,
    Named,
    OptionalOf,
    TypeDescriptor,
)
from .document import (
    ArrayProperty,
    ArraySchema,
    EnumSchema,
    MapProperty,
    ObjectProperty,
    ObjectSchema,
    OpaqueSchema,
    PrimitiveProperty,
    PropertyType,
    RefProperty,
    SchemaDefinition,
    SchemaDocument,
)
from .errors import UnresolvedReferenceError
from .naming import to_identifier

logger = logging.getLogger(__name__)

_FLOAT_FORMATS = {"float", "double"}

_STRING_FORMATS: dict[str, TypeDescriptor] = {
    "date-time": DATETIME,
    "date": DATE,
    "uuid": UUID,
}


def resolve_primitive(kind: str, fmt: str | None) -> TypeDescriptor | None:
    """Map a Swagger type/format pair, or None when the kind is unknown.

    "number" without a floating format maps to an integer on purpose.
    """
    if kind == "integer":
        return INT64 if fmt == "int64" else INT32
    if kind == "number":
        return FLOAT if fmt in _FLOAT_FORMATS else INT32
    if kind == "string":
        return _STRING_FORMATS.get(fmt or "", STRING)
    if kind == "boolean":
        return BOOLEAN
    return None


class TypeResolver:
    """Map property and definition nodes to TypeDescriptors."""

    def __init__(self, models: ModelEmitter) -> None:
        self.models = models

    @property
    def document(self) -> SchemaDocument:
        return self.models.document

    @property
    def artifacts(self) -> GeneratedArtifactSet:
        return self.models.artifacts

    def resolve(
        self,
        node: PropertyType | SchemaDefinition | None,
        fallback_name: str | None = None,
    ) -> TypeDescriptor:
        """Resolve a node; ``fallback_name`` names inline objects and definitions."""
        required = True
        match node:
            case None:
                return VOID
            case RefProperty(name=name, required=required):
                resolved = self.resolve_reference(name)
            case ArrayProperty(items=items, required=required):
                item_name = f"{fallback_name}Elem" if fallback_name else None
                resolved = ListOf(self.resolve(items, item_name))
            case ObjectProperty(fields=fields, required=required):
                if fields and fallback_name:
                    resolved = Named(self.models.emit_object(fallback_name, fields, synthetic=True))
                else:
                    resolved = ANY
            case PrimitiveProperty(kind=kind, format=fmt, required=required):
                resolved = resolve_primitive(kind, fmt)
                if resolved is None:
                    self.artifacts.report(f"Unsupported type {kind!r} (format {fmt!r}), using Any")
                    resolved = ANY
            case MapProperty(values=values, required=required):
                resolved = self.resolve(values, fallback_name)
            case ObjectSchema(fields=fields) if fields and fallback_name:
                resolved = Named(self.models.emit_object(fallback_name, fields))
            case ArraySchema(items=items):
                item_name = f"{fallback_name}Elem" if fallback_name else None
                resolved = ListOf(self.resolve(items, item_name))
            case EnumSchema(values=values) if fallback_name:
                resolved = Named(self.models.emit_enum(fallback_name, values))
            case ObjectSchema() | EnumSchema() | OpaqueSchema():
                self.artifacts.report(f"Definition {fallback_name!r} has no resolvable shape, using Any")
                resolved = ANY
            case _:
                raise TypeError(f"Cannot resolve {node!r}")

        if not required:
            return OptionalOf(resolved)
        return resolved

    def resolve_reference(self, name: str) -> TypeDescriptor:
        """Resolve ``#/definitions/<name>``; a missing target is fatal."""
        definition = self.document.definitions.get(name)
        if definition is None:
            raise UnresolvedReferenceError(name)
        return self.resolve(definition, name)


def _definition_owner(name: str) -> str:
    return f"#/definitions/{name}"


class ModelEmitter:
    """Emit model and enum declarations for named definitions, once each."""

    def __init__(self, document: SchemaDocument, artifacts: GeneratedArtifactSet) -> None:
        self.document = document
        self.artifacts = artifacts
        self.resolver = TypeResolver(self)
        self.identifiers = self._reserve_definitions()

    def _reserve_definitions(self) -> dict[str, str]:
        """Claim every definition's identifier before any inline schema can.

        Definitions that canonicalize to the same identifier keep document
        order: the first takes the plain name, later ones a numeric suffix.
        """
        claimed: dict[str, str] = {}
        clashing: list[str] = []
        for name in self.document.definitions:
            base = to_identifier(name)
            if base in claimed:
                clashing.append(name)
                continue
            claimed[base] = name
            self.artifacts.reserve(base, _definition_owner(name))

        identifiers = {name: to_identifier(name) for name in claimed.values()}
        for name in clashing:
            base = to_identifier(name)
            identifier = self.artifacts.reserve(base, _definition_owner(name))
            self.artifacts.report(
                f"Definitions {claimed[base]!r} and {name!r} both map to {base}, emitting {name!r} as {identifier}"
            )
            identifiers[name] = identifier
        return identifiers

    def _identifier(self, name: str, synthetic: bool) -> str:
        if not synthetic and name in self.identifiers:
            return self.identifiers[name]
        return self.artifacts.reserve(to_identifier(name), name)

    def emit_all(self) -> None:
        for name, definition in self.document.definitions.items():
            self.emit(name, definition)
        logger.info("Emitted %d model declarations", len(self.artifacts.models))

    def emit(self, name: str, definition: SchemaDefinition) -> None:
        match definition:
            case ObjectSchema(fields=fields) if fields:
                self.emit_object(name, fields)
            case ArraySchema(items=items):
                self._emit_element(f"{name}Elem", items)
            case EnumSchema(values=values):
                self.emit_enum(name, values)
            case _:
                # Opaque: nothing to declare and deliberately not memoized
                pass

    def _emit_element(self, name: str, items: PropertyType) -> None:
        match items:
            case RefProperty(name=ref):
                definition = self.document.definitions.get(ref)
                if definition is None:
                    raise UnresolvedReferenceError(ref)
                self.emit(ref, definition)
            case ObjectProperty(fields=fields) if fields:
                self.emit_object(name, fields, synthetic=True)

    def emit_object(
        self,
        name: str,
        fields: dict[str, PropertyType],
        synthetic: bool = False,
    ) -> str:
        """Emit a record declaration and return its identifier.

        Fields of a synthetic model get no fallback name, which caps
        inline object naming at one level.
        """
        identifier = self._identifier(name, synthetic)
        if self.artifacts.is_known(identifier):
            return identifier
        self.artifacts.in_progress.add(identifier)

        declared: list[FieldDeclaration] = []
        seen: set[str] = set()
        for wire_name, prop in fields.items():
            field_name = to_identifier(wire_name, leading_upper=False)
            if field_name in seen:
                self.artifacts.report(
                    f"Field {wire_name!r} of {identifier} collides with another field named {field_name!r}, skipped"
                )
                continue
            seen.add(field_name)
            fallback = None if synthetic else name + to_identifier(wire_name)
            declared.append(FieldDeclaration(field_name, self.resolver.resolve(prop, fallback), wire_name))

        self.artifacts.record(ModelDeclaration(identifier, tuple(declared)))
        return identifier

    def emit_enum(self, name: str, values: tuple[str, ...]) -> str:
        identifier = self._identifier(name, synthetic=False)
        if self.artifacts.is_known(identifier):
            return identifier
        constants: list[EnumConstant] = []
        seen: set[str] = set()
        for value in values:
            member = enum_member_name(value)
            suffix = 2
            while member in seen:
                member = f"{enum_member_name(value)}_{suffix}"
                suffix += 1
            seen.add(member)
            constants.append(EnumConstant(member, value))
        self.artifacts.record(EnumDeclaration(identifier, tuple(constants)))
        return identifier
