"""Declaration tree and per-run artifact set.

Emitters append structured declarations here; ``codegen.render`` turns
them into text in a final pass.
"""

from __future__ import annotations

import keyword
import logging
import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, ClassVar, Union

from .descriptors import TypeDescriptor

if TYPE_CHECKING:
    from .client import ClientImplementation, ClientInterface
    from .server import ServerScaffold

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FieldDeclaration:
    name: str
    type: TypeDescriptor
    wire_name: str


@dataclass(frozen=True)
class ModelDeclaration:
    kind: ClassVar[str] = "model"
    name: str
    fields: tuple[FieldDeclaration, ...]


@dataclass(frozen=True)
class EnumConstant:
    name: str
    value: str


@dataclass(frozen=True)
class EnumDeclaration:
    kind: ClassVar[str] = "enum"
    name: str
    constants: tuple[EnumConstant, ...]


Declaration = Union[ModelDeclaration, EnumDeclaration]


_RESERVED_MEMBER_NAMES = {"mro"}


def _reserved_member(name: str) -> bool:
    """Names Enum refuses or skips: mro, _sunder_/__dunder__ and mangled __private."""
    return name in _RESERVED_MEMBER_NAMES or name.startswith("__") or name[0] == name[-1] == "_"


def enum_member_name(value: str) -> str:
    """Member name for an enum value; the value itself when Python allows it."""
    if value.isidentifier() and not keyword.iskeyword(value) and not _reserved_member(value):
        return value
    name = re.sub(r"[^0-9A-Za-z_]", "_", value) or "value"
    if name[0].isdigit():
        name = f"_{name}"
    if keyword.iskeyword(name) or name in _RESERVED_MEMBER_NAMES:
        name += "_"
    elif _reserved_member(name):
        name = f"value{name}"
    return name


@dataclass
class GeneratedArtifactSet:
    emitted: set[str] = field(default_factory=set)
    in_progress: set[str] = field(default_factory=set)
    models: list[Declaration] = field(default_factory=list)
    client_interface: ClientInterface | None = None
    client_impl: ClientImplementation | None = None
    server: ServerScaffold | None = None
    diagnostics: list[str] = field(default_factory=list)
    # identifier -> the definition or inline schema that claimed it
    owners: dict[str, str] = field(default_factory=dict)

    def is_known(self, identifier: str) -> bool:
        """True once a declaration is emitted or currently being emitted."""
        return identifier in self.emitted or identifier in self.in_progress

    def reserve(self, identifier: str, owner: str) -> str:
        """Claim an identifier for ``owner``; a taken one gets a numeric suffix.

        Reserving again for the same owner returns the identifier it already
        holds, so repeated resolution of one schema stays memoized.
        """
        candidate, suffix = identifier, 2
        while self.owners.setdefault(candidate, owner) != owner:
            candidate = f"{identifier}{suffix}"
            suffix += 1
        return candidate

    def record(self, declaration: Declaration) -> None:
        self.models.append(declaration)
        self.emitted.add(declaration.name)
        self.in_progress.discard(declaration.name)
        logger.debug("Emitted %s", declaration.name)

    def report(self, message: str) -> None:
        """Record a non-fatal diagnostic once."""
        if message in self.diagnostics:
            return
        self.diagnostics.append(message)
        logger.warning(message)

    def declaration(self, name: str) -> Declaration | None:
        for declaration in self.models:
            if declaration.name == name:
                return declaration
        return None
