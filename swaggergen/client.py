"""Build the client interface and implementation declarations.

Each implementation method body is a fixed sequence of statement nodes:
  request -> query params -> headers -> oauth2 -> body -> timeout -> send
so equivalent operations always render identically.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Union

from .config import DEFAULT_CLIENT_TIMEOUT
from .context_builder import OperationPlan
from .descriptors import TypeDescriptor
from .naming import to_identifier


@dataclass(frozen=True)
class MapEntry:
    key: str
    value: str
    stringify: bool = False


@dataclass(frozen=True)
class NewRequest:
    kind: ClassVar[str] = "new_request"
    path: str
    interpolated: bool
    method: str


@dataclass(frozen=True)
class AddParams:
    kind: ClassVar[str] = "add_params"
    entries: tuple[MapEntry, ...]


@dataclass(frozen=True)
class AddHeaders:
    kind: ClassVar[str] = "add_headers"
    entries: tuple[MapEntry, ...]


@dataclass(frozen=True)
class WithOAuth2:
    kind: ClassVar[str] = "with_oauth2"
    token: str
    scopes: tuple[str, ...]


@dataclass(frozen=True)
class WithBody:
    kind: ClassVar[str] = "with_body"
    value: str


@dataclass(frozen=True)
class WithTimeout:
    kind: ClassVar[str] = "with_timeout"


@dataclass(frozen=True)
class Send:
    kind: ClassVar[str] = "send"
    expect_only: bool
    type: TypeDescriptor
    message: str


Statement = Union[NewRequest, AddParams, AddHeaders, WithOAuth2, WithBody, WithTimeout, Send]


@dataclass(frozen=True)
class MethodParameter:
    name: str
    type: TypeDescriptor


@dataclass(frozen=True)
class ClientMethod:
    name: str
    parameters: tuple[MethodParameter, ...]
    return_type: TypeDescriptor
    statements: tuple[Statement, ...] = ()


@dataclass(frozen=True)
class ClientInterface:
    name: str
    methods: tuple[ClientMethod, ...]


@dataclass(frozen=True)
class ClientImplementation:
    name: str
    interface_name: str
    config_name: str
    default_timeout: float
    methods: tuple[ClientMethod, ...]


def service_prefix(service: str) -> str:
    return to_identifier(service)


def _signature(plan: OperationPlan) -> tuple[MethodParameter, ...]:
    return tuple(MethodParameter(b.name, b.type) for b in plan.parameters)


def build_statements(plan: OperationPlan) -> tuple[Statement, ...]:
    statements: list[Statement] = [NewRequest(plan.client_path, plan.interpolated, plan.method)]

    query = plan.located("query")
    if query:
        statements.append(AddParams(tuple(MapEntry(p.wire_name, p.name, p.coerce_int) for p in query)))

    headers = plan.located("header")
    if headers:
        statements.append(AddHeaders(tuple(MapEntry(p.wire_name, p.name) for p in headers)))

    token = plan.token
    if plan.scopes and token is not None:
        statements.append(WithOAuth2(token.name, plan.scopes))

    body = plan.body
    if body is not None:
        statements.append(WithBody(body.name))

    statements.append(WithTimeout())
    statements.append(Send(plan.is_void, plan.success_type, plan.failure_message))
    return tuple(statements)


def build_client_interface(service: str, plans: list[OperationPlan]) -> ClientInterface:
    methods = tuple(
        ClientMethod(plan.function_name, _signature(plan), plan.success_type)
        for plan in plans
    )
    return ClientInterface(f"{service_prefix(service)}Client", methods)


def build_client_impl(
    service: str,
    plans: list[OperationPlan],
    default_timeout: float = DEFAULT_CLIENT_TIMEOUT,
) -> ClientImplementation:
    prefix = service_prefix(service)
    methods = tuple(
        ClientMethod(plan.function_name, _signature(plan), plan.success_type, build_statements(plan))
        for plan in plans
    )
    return ClientImplementation(
        name=f"{prefix}ClientImpl",
        interface_name=f"{prefix}Client",
        config_name=f"{prefix}Config",
        default_timeout=default_timeout,
        methods=methods,
    )
