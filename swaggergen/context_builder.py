"""Plan each operation once for both the client and the server emitters.

A plan carries the function name, bound parameters, success type and
status, security scopes and both path rewrites.

Parameter binding rules, in declared order:
  - header "Authorization"  -> token: Token (never a generic header)
  - body                    -> resolved schema type ($ref -> named model)
  - integer query parameter -> int, coerced from the wire string
  - everything else         -> str
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .artifacts import GeneratedArtifactSet
from .descriptors import INT32, INT64, STRING, TOKEN, VOID, TypeDescriptor
from .document import Operation, Parameter, PrimitiveProperty, Response, SchemaDocument
from .naming import build_function_name, client_path, path_parameters, server_path, to_identifier
from .schema_parser import TypeResolver

logger = logging.getLogger(__name__)

AUTHORIZATION_HEADER = "Authorization"
TOKEN_NAME = "token"

# Local names used by the emitted method bodies
_RESERVED_NAMES = {"self", "req", "ctx", "response", TOKEN_NAME}


@dataclass(frozen=True)
class ParameterBinding:
    name: str
    wire_name: str
    location: str  # path / query / header / body / auth
    type: TypeDescriptor
    coerce_int: bool = False


@dataclass(frozen=True)
class OperationPlan:
    function_name: str
    method: str
    path: str
    client_path: str
    interpolated: bool
    server_path: str
    parameters: tuple[ParameterBinding, ...]
    success_status: str | None
    success_type: TypeDescriptor
    response_headers: tuple[str, ...]
    scopes: tuple[str, ...]

    def located(self, *locations: str) -> list[ParameterBinding]:
        return [p for p in self.parameters if p.location in locations]

    @property
    def body(self) -> ParameterBinding | None:
        bodies = self.located("body")
        return bodies[0] if bodies else None

    @property
    def token(self) -> ParameterBinding | None:
        tokens = self.located("auth")
        return tokens[0] if tokens else None

    @property
    def is_void(self) -> bool:
        return self.success_type == VOID

    @property
    def failure_message(self) -> str:
        return f"Failed {self.method} to {self.path}"


def pick_success_response(operation: Operation) -> Response | None:
    """First response whose status starts with "2", in document order."""
    for response in operation.responses:
        if response.status.startswith("2"):
            return response
    return None


def _bind(param: Parameter, resolver: TypeResolver, function_name: str) -> ParameterBinding:
    if param.location == "header" and param.name == AUTHORIZATION_HEADER:
        return ParameterBinding(TOKEN_NAME, param.name, "auth", TOKEN)

    name = to_identifier(param.name, leading_upper=False)
    if name in _RESERVED_NAMES:
        name += "_"

    if param.location == "body":
        body_type = resolver.resolve(param.schema, f"{to_identifier(function_name)}Body")
        return ParameterBinding(name, param.name, "body", body_type)

    match param.schema:
        case PrimitiveProperty(kind="integer", format=fmt) if param.location == "query":
            return ParameterBinding(name, param.name, "query", INT64 if fmt == "int64" else INT32, coerce_int=True)
    return ParameterBinding(name, param.name, param.location, STRING)


def _unique(bindings: list[ParameterBinding]) -> list[ParameterBinding]:
    """Suffix a binding's name with its location when the name is taken."""
    seen: set[str] = set()
    result = []
    for binding in bindings:
        if binding.name in seen:
            binding = ParameterBinding(
                binding.name + to_identifier(binding.location),
                binding.wire_name,
                binding.location,
                binding.type,
                binding.coerce_int,
            )
        seen.add(binding.name)
        result.append(binding)
    return result


def plan_operation(operation: Operation, resolver: TypeResolver) -> OperationPlan:
    function_name = build_function_name(operation.method, operation.path, operation.operation_id)

    bindings = [_bind(param, resolver, function_name) for param in operation.parameters]
    if operation.security_scopes and not any(b.location == "auth" for b in bindings):
        bindings.append(ParameterBinding(TOKEN_NAME, AUTHORIZATION_HEADER, "auth", TOKEN))
    bindings = _unique(bindings)

    path_names = {b.wire_name: b.name for b in bindings if b.location == "path"}
    for placeholder in path_parameters(operation.path):
        if placeholder not in path_names:
            resolver.artifacts.report(
                f"{operation.method} {operation.path}: path placeholder {{{placeholder}}} has no declared parameter"
            )
    rewritten, interpolated = client_path(operation.path, path_names)

    success = pick_success_response(operation)
    if success is None:
        success_type: TypeDescriptor = VOID
    else:
        success_type = resolver.resolve(success.schema, f"{to_identifier(function_name)}Response")

    plan = OperationPlan(
        function_name=function_name,
        method=operation.method,
        path=operation.path,
        client_path=rewritten,
        interpolated=interpolated,
        server_path=server_path(operation.path),
        parameters=tuple(bindings),
        success_status=success.status if success else None,
        success_type=success_type,
        response_headers=success.headers if success else (),
        scopes=operation.security_scopes,
    )
    logger.debug("Planned %s %s as %s", plan.method, plan.path, plan.function_name)
    return plan


def plan_operations(
    document: SchemaDocument,
    resolver: TypeResolver,
    artifacts: GeneratedArtifactSet,
) -> list[OperationPlan]:
    """Plan every operation in document order."""
    plans: list[OperationPlan] = []
    seen: dict[str, OperationPlan] = {}
    for operation in document.operations():
        plan = plan_operation(operation, resolver)
        if plan.function_name in seen:
            first = seen[plan.function_name]
            artifacts.report(
                f"{plan.method} {plan.path} and {first.method} {first.path} "
                f"both generate {plan.function_name}()"
            )
        else:
            seen[plan.function_name] = plan
        plans.append(plan)
    logger.info("Planned %d operations", len(plans))
    return plans
