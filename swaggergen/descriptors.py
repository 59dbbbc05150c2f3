"""Semantic type descriptors produced by the type resolver.

A descriptor is one of Primitive, Named, ListOf, OptionalOf or Void and
renders to a Python annotation with ``render_type``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Union


@dataclass(frozen=True)
class Primitive:
    kind: str


@dataclass(frozen=True)
class Named:
    identifier: str


@dataclass(frozen=True)
class ListOf:
    item: TypeDescriptor


@dataclass(frozen=True)
class OptionalOf:
    item: TypeDescriptor


@dataclass(frozen=True)
class Void:
    pass


TypeDescriptor = Union[Primitive, Named, ListOf, OptionalOf, Void]

INT32 = Primitive("int32")
INT64 = Primitive("int64")
FLOAT = Primitive("float")
STRING = Primitive("string")
BOOLEAN = Primitive("boolean")
DATETIME = Primitive("datetime")
DATE = Primitive("date")
UUID = Primitive("uuid")
ANY = Primitive("any")
# Bearer token input, provided by the runtime rather than the model set
TOKEN = Primitive("token")
VOID = Void()

_PRIMITIVE_ANNOTATIONS: dict[str, str] = {
    "int32": "int",
    "int64": "int",
    "float": "float",
    "string": "str",
    "boolean": "bool",
    "datetime": "datetime",
    "date": "date",
    "uuid": "UUID",
    "any": "Any",
    "token": "Token",
}

# Primitive kind -> (module, name) that has to be imported to use it
_PRIMITIVE_IMPORTS: dict[str, tuple[str, str]] = {
    "datetime": ("datetime", "datetime"),
    "date": ("datetime", "date"),
    "uuid": ("uuid", "UUID"),
    "any": ("typing", "Any"),
}


def render_type(descriptor: TypeDescriptor) -> str:
    """Render a descriptor as a Python type annotation."""
    match descriptor:
        case Primitive(kind=kind):
            return _PRIMITIVE_ANNOTATIONS[kind]
        case Named(identifier=identifier):
            return identifier
        case ListOf(item=item):
            return f"list[{render_type(item)}]"
        case OptionalOf(item=item):
            return f"{render_type(item)} | None"
        case Void():
            return "None"
    raise TypeError(f"Not a type descriptor: {descriptor!r}")


def walk(descriptor: TypeDescriptor) -> Iterator[TypeDescriptor]:
    """Yield the descriptor and every descriptor nested in it."""
    yield descriptor
    match descriptor:
        case ListOf(item=item) | OptionalOf(item=item):
            yield from walk(item)


def named_types(descriptors: list[TypeDescriptor]) -> set[str]:
    """Model identifiers referenced by the given descriptors."""
    return {d.identifier for root in descriptors for d in walk(root) if isinstance(d, Named)}


def stdlib_imports(descriptors: list[TypeDescriptor]) -> dict[str, set[str]]:
    """Group the standard library names the descriptors need by module."""
    imports: dict[str, set[str]] = {}
    for root in descriptors:
        for d in walk(root):
            if isinstance(d, Primitive) and d.kind in _PRIMITIVE_IMPORTS:
                module, name = _PRIMITIVE_IMPORTS[d.kind]
                imports.setdefault(module, set()).add(name)
    return imports


def uses_token(descriptors: list[TypeDescriptor]) -> bool:
    return any(d == TOKEN for root in descriptors for d in walk(root))
