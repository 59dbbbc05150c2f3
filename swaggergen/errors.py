from __future__ import annotations


class GenerationError(Exception):
    """Fatal error that aborts a generation run."""


class UnresolvedReferenceError(GenerationError):
    def __init__(self, name: str, *, kind: str = "definitions") -> None:
        self.name = name
        self.kind = kind
        super().__init__(str(self))

    def __str__(self) -> str:
        return f"Unresolved reference: #/{self.kind}/{self.name} is not declared in the document"


class DocumentError(GenerationError):
    """The source document could not be loaded as a Swagger 2.0 description."""

    def __init__(self, source: str, message: str) -> None:
        self.source = source
        self.message = message
        super().__init__(str(self))

    def __str__(self) -> str:
        return f"Cannot load {self.source}: {self.message}"
