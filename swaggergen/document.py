"""In-memory Swagger 2.0 document graph.

``build_document`` turns a raw mapping (as produced by ``loader.load_spec``)
into frozen dataclasses:
- definitions   -> ObjectSchema / ArraySchema / EnumSchema / OpaqueSchema
- properties    -> RefProperty / ArrayProperty / ObjectProperty /
                   PrimitiveProperty / MapProperty
- paths         -> Operation with ordered Parameters and Responses

Path-level parameters are merged into each operation, ``#/parameters`` and
``#/responses`` references are resolved here, and document-level security
applies to operations that declare none.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator, Union

from .errors import UnresolvedReferenceError
from .loader import get_definitions, get_paths, resolve_ref
from .naming import extract_ref

HTTP_METHODS = ("get", "put", "post", "delete", "options", "head", "patch")

ENUM_EXTENSION = "x-extensible-enum"


# ---------------------------------------------------------------------------
# Property types
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class RefProperty:
    name: str
    required: bool = True


@dataclass(frozen=True)
class ArrayProperty:
    items: PropertyType
    required: bool = True


@dataclass(frozen=True)
class ObjectProperty:
    fields: dict[str, PropertyType] = field(default_factory=dict)
    required: bool = True


@dataclass(frozen=True)
class PrimitiveProperty:
    kind: str
    format: str | None = None
    required: bool = True


@dataclass(frozen=True)
class MapProperty:
    values: PropertyType
    required: bool = True


PropertyType = Union[RefProperty, ArrayProperty, ObjectProperty, PrimitiveProperty, MapProperty]


# ---------------------------------------------------------------------------
# Schema definitions
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ObjectSchema:
    fields: dict[str, PropertyType] = field(default_factory=dict)


@dataclass(frozen=True)
class ArraySchema:
    items: PropertyType


@dataclass(frozen=True)
class EnumSchema:
    values: tuple[str, ...]


@dataclass(frozen=True)
class OpaqueSchema:
    pass


SchemaDefinition = Union[ObjectSchema, ArraySchema, EnumSchema, OpaqueSchema]


# ---------------------------------------------------------------------------
# Operations
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Parameter:
    name: str
    location: str  # path / query / header / body
    schema: PropertyType
    required: bool = False


@dataclass(frozen=True)
class Response:
    status: str
    schema: PropertyType | None = None
    headers: tuple[str, ...] = ()


@dataclass(frozen=True)
class Operation:
    path: str
    method: str
    operation_id: str | None = None
    parameters: tuple[Parameter, ...] = ()
    responses: tuple[Response, ...] = ()
    security_scopes: tuple[str, ...] = ()


@dataclass(frozen=True)
class SchemaDocument:
    definitions: dict[str, SchemaDefinition] = field(default_factory=dict)
    paths: dict[str, dict[str, Operation]] = field(default_factory=dict)

    def operations(self) -> Iterator[Operation]:
        """Every operation in document order."""
        for path_item in self.paths.values():
            yield from path_item.values()


# ---------------------------------------------------------------------------
# Raw mapping -> graph
# ---------------------------------------------------------------------------

def parse_property(raw: dict[str, Any] | None, required: bool = True) -> PropertyType:
    """Convert a raw schema/property node into a PropertyType."""
    if not raw:
        return ObjectProperty(required=required)

    if "$ref" in raw:
        return RefProperty(extract_ref(raw["$ref"]), required=required)

    schema_type = raw.get("type")
    if schema_type == "array":
        return ArrayProperty(parse_property(raw.get("items")), required=required)

    additional = raw.get("additionalProperties")
    if isinstance(additional, dict) and not raw.get("properties"):
        return MapProperty(parse_property(additional), required=required)

    if schema_type == "object" or "properties" in raw:
        return ObjectProperty(_parse_fields(raw), required=required)

    if schema_type is None:
        return ObjectProperty(required=required)

    return PrimitiveProperty(str(schema_type), raw.get("format"), required=required)


def _parse_fields(raw: dict[str, Any]) -> dict[str, PropertyType]:
    required_fields = set(raw.get("required", []))
    return {
        name: parse_property(prop, name in required_fields)
        for name, prop in (raw.get("properties") or {}).items()
    }


def parse_definition(raw: dict[str, Any]) -> SchemaDefinition:
    """Classify a named definition by shape."""
    fields = _parse_fields(raw)
    if fields:
        return ObjectSchema(fields)
    if raw.get("type") == "array":
        return ArraySchema(parse_property(raw.get("items")))
    values = raw.get(ENUM_EXTENSION)
    if isinstance(values, list):
        return EnumSchema(tuple(str(v) for v in values))
    return OpaqueSchema()


def _resolve_local(spec: dict[str, Any], raw: dict[str, Any], kind: str) -> dict[str, Any]:
    """Follow a ``#/parameters`` or ``#/responses`` reference."""
    ref = raw.get("$ref")
    if not isinstance(ref, str):
        return raw
    try:
        return resolve_ref(spec, ref)
    except KeyError:
        raise UnresolvedReferenceError(ref.rsplit("/", 1)[-1], kind=kind) from None


def _parse_parameter(spec: dict[str, Any], raw: dict[str, Any]) -> Parameter:
    raw = _resolve_local(spec, raw, "parameters")
    location = raw.get("in", "query")
    required = bool(raw.get("required", location == "path"))
    if location == "body":
        schema = parse_property(raw.get("schema"))
    elif raw.get("type") == "array":
        schema = ArrayProperty(parse_property(raw.get("items")), required=required)
    else:
        schema = PrimitiveProperty(str(raw.get("type", "string")), raw.get("format"), required=required)
    return Parameter(name=str(raw["name"]), location=location, schema=schema, required=required)


def _merge_parameters(
    spec: dict[str, Any],
    inherited: list[dict[str, Any]],
    declared: list[dict[str, Any]],
) -> tuple[Parameter, ...]:
    """Path-level parameters first, overridden by operation parameters."""
    merged: dict[tuple[str, str], Parameter] = {}
    for raw in [*inherited, *declared]:
        param = _parse_parameter(spec, raw)
        merged[(param.name, param.location)] = param
    return tuple(merged.values())


def _parse_responses(spec: dict[str, Any], raw: dict[str, Any]) -> tuple[Response, ...]:
    responses = []
    for status, resp in raw.items():
        resp = _resolve_local(spec, resp or {}, "responses")
        schema = resp.get("schema")
        responses.append(
            Response(
                status=str(status),
                schema=parse_property(schema) if schema else None,
                headers=tuple((resp.get("headers") or {}).keys()),
            )
        )
    return tuple(responses)


def _oauth_schemes(spec: dict[str, Any]) -> set[str]:
    definitions = spec.get("securityDefinitions") or {}
    schemes = {name for name, sd in definitions.items() if (sd or {}).get("type") == "oauth2"}
    return schemes or {"oauth2"}


def _parse_scopes(spec: dict[str, Any], operation: dict[str, Any]) -> tuple[str, ...]:
    requirements = operation["security"] if "security" in operation else spec.get("security")
    schemes = _oauth_schemes(spec)
    scopes: list[str] = []
    for requirement in requirements or []:
        for scheme, scheme_scopes in (requirement or {}).items():
            if scheme not in schemes:
                continue
            for scope in scheme_scopes or []:
                if scope not in scopes:
                    scopes.append(scope)
    return tuple(scopes)


def build_document(spec: dict[str, Any]) -> SchemaDocument:
    """Build the typed graph from a raw Swagger 2.0 mapping."""
    definitions = {
        str(name): parse_definition(raw or {})
        for name, raw in get_definitions(spec).items()
    }

    paths: dict[str, dict[str, Operation]] = {}
    for path, path_item in get_paths(spec).items():
        if not isinstance(path_item, dict):
            continue
        inherited = path_item.get("parameters") or []
        operations: dict[str, Operation] = {}
        for method, op in path_item.items():
            if method.lower() not in HTTP_METHODS or not isinstance(op, dict):
                continue
            operations[method.lower()] = Operation(
                path=str(path),
                method=method.upper(),
                operation_id=op.get("operationId") or None,
                parameters=_merge_parameters(spec, inherited, op.get("parameters") or []),
                responses=_parse_responses(spec, op.get("responses") or {}),
                security_scopes=_parse_scopes(spec, op),
            )
        paths[str(path)] = operations

    return SchemaDocument(definitions=definitions, paths=paths)
