"""Build the server routing scaffold from operation plans.

Handlers bind request parameters and the body but leave business logic as
placeholders.
"""

from __future__ import annotations

from dataclasses import dataclass

from .client import service_prefix
from .context_builder import OperationPlan
from .descriptors import VOID, TypeDescriptor

DEFAULT_STATUS = "200"


@dataclass(frozen=True)
class RequestBinding:
    name: str
    wire_name: str
    source: str  # param / header
    coerce_int: bool = False


@dataclass(frozen=True)
class BodyRead:
    name: str
    type: TypeDescriptor


@dataclass(frozen=True)
class RouteDeclaration:
    method: str
    path: str
    handler_name: str
    scopes: tuple[str, ...]
    bindings: tuple[RequestBinding, ...]
    body: BodyRead | None
    response_type: TypeDescriptor
    status_code: int | None
    response_headers: tuple[str, ...]

    @property
    def returns_json(self) -> bool:
        return self.response_type != VOID


@dataclass(frozen=True)
class ServerScaffold:
    name: str
    routes: tuple[RouteDeclaration, ...]


def _status_code(status: str | None) -> int | None:
    """Explicit status only when it differs from the router default."""
    if status is None or status == DEFAULT_STATUS or not status.isdigit():
        return None
    return int(status)


def build_route(plan: OperationPlan) -> RouteDeclaration:
    bindings = [
        RequestBinding(p.name, p.wire_name, "param", p.coerce_int)
        for p in plan.located("path", "query")
    ]
    bindings.extend(RequestBinding(p.name, p.wire_name, "header") for p in plan.located("header"))

    body = plan.body
    return RouteDeclaration(
        method=plan.method.lower(),
        path=plan.server_path,
        handler_name=plan.function_name,
        scopes=plan.scopes,
        bindings=tuple(bindings),
        body=BodyRead(body.name, body.type) if body else None,
        response_type=plan.success_type,
        status_code=_status_code(plan.success_status),
        response_headers=plan.response_headers,
    )


def build_server(service: str, plans: list[OperationPlan]) -> ServerScaffold:
    return ServerScaffold(
        name=f"{service_prefix(service)}Server",
        routes=tuple(build_route(plan) for plan in plans),
    )
