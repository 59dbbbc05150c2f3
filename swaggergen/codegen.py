"""Drive a generation run and render the declaration tree.

``generate`` resolves models and plans operations into a fresh
GeneratedArtifactSet; ``render`` turns it into four Python modules:
models.py, client.py, client_impl.py and server.py.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import jinja2

from .artifacts import GeneratedArtifactSet, ModelDeclaration
from .client import ClientMethod, MapEntry, build_client_impl, build_client_interface
from .config import GeneratorConfig
from .context_builder import plan_operations
from .descriptors import TypeDescriptor, named_types, render_type, stdlib_imports, uses_token
from .document import SchemaDocument, build_document
from .loader import load_spec
from .schema_parser import ModelEmitter
from .server import build_server

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).parent / "templates"

ARTIFACT_TEMPLATES: dict[str, str] = {
    "models.py": "models.py.j2",
    "client.py": "client.py.j2",
    "client_impl.py": "client_impl.py.j2",
    "server.py": "server.py.j2",
}


def generate(
    document: SchemaDocument,
    service: str,
    config: GeneratorConfig | None = None,
) -> GeneratedArtifactSet:
    """Resolve every model and operation of ``document`` in one run.

    Raises GenerationError on a broken reference graph; nothing is
    returned in that case.
    """
    config = config or GeneratorConfig()
    artifacts = GeneratedArtifactSet()

    models = ModelEmitter(document, artifacts)
    models.emit_all()

    plans = plan_operations(document, models.resolver, artifacts)
    artifacts.client_interface = build_client_interface(service, plans)
    artifacts.client_impl = build_client_impl(service, plans, config.client_timeout)
    artifacts.server = build_server(service, plans)

    if artifacts.diagnostics:
        logger.info("Finished with %d diagnostics", len(artifacts.diagnostics))
    return artifacts


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------

def _literal(value: str) -> str:
    """Double-quoted Python string literal."""
    return json.dumps(value)


def _mapping(entries: tuple[MapEntry, ...]) -> str:
    items = []
    for entry in entries:
        value = f"str({entry.value})" if entry.stringify else entry.value
        items.append(f"{_literal(entry.key)}: {value}")
    return "{" + ", ".join(items) + "}"


def _environment() -> jinja2.Environment:
    env = jinja2.Environment(
        loader=jinja2.FileSystemLoader(str(TEMPLATE_DIR)),
        keep_trailing_newline=True,
        trim_blocks=True,
        lstrip_blocks=True,
        undefined=jinja2.StrictUndefined,
    )
    env.filters["pytype"] = render_type
    env.filters["literal"] = _literal
    env.filters["mapping"] = _mapping
    return env


def _import_lines(imports: dict[str, set[str]]) -> list[str]:
    return [f"from {module} import {', '.join(sorted(names))}" for module, names in sorted(imports.items()) if names]


def _import_groups(stdlib: dict[str, set[str]], local: list[tuple[str, set[str]]]) -> list[list[str]]:
    groups = [_import_lines(stdlib)]
    groups.append([f"from {module} import {', '.join(sorted(names))}" for module, names in local if names])
    return [group for group in groups if group]


def _method_types(methods: tuple[ClientMethod, ...]) -> list[TypeDescriptor]:
    types: list[TypeDescriptor] = []
    for method in methods:
        types.extend(p.type for p in method.parameters)
        types.append(method.return_type)
    return types


def _merge(*imports: dict[str, set[str]]) -> dict[str, set[str]]:
    merged: dict[str, set[str]] = {}
    for group in imports:
        for module, names in group.items():
            merged.setdefault(module, set()).update(names)
    return merged


def _models_context(artifacts: GeneratedArtifactSet) -> dict[str, Any]:
    records = [d for d in artifacts.models if isinstance(d, ModelDeclaration)]
    types = [f.type for record in records for f in record.fields]
    fixed: dict[str, set[str]] = {}
    if records:
        fixed["dataclasses"] = {"dataclass"}
        if any(f.name != f.wire_name for record in records for f in record.fields):
            fixed["dataclasses"].add("field")
    if len(records) != len(artifacts.models):
        fixed["enum"] = {"Enum"}
    return {
        "declarations": artifacts.models,
        "imports": _import_groups(_merge(fixed, stdlib_imports(types)), []),
    }


def _client_context(artifacts: GeneratedArtifactSet, package: str, runtime: str) -> dict[str, Any]:
    interface = artifacts.client_interface
    types = _method_types(interface.methods)
    runtime_names = {"Token"} if uses_token(types) else set()
    return {
        "interface": interface,
        "imports": _import_groups(
            _merge({"abc": {"ABC", "abstractmethod"}}, stdlib_imports(types)),
            [(runtime, runtime_names), (f"{package}.models", named_types(types))],
        ),
    }


def _client_impl_context(artifacts: GeneratedArtifactSet, package: str, runtime: str) -> dict[str, Any]:
    impl = artifacts.client_impl
    types = _method_types(impl.methods)
    runtime_names = {"HttpClient", "HttpRequest", "with_error_message"}
    if uses_token(types):
        runtime_names.add("Token")
    return {
        "impl": impl,
        "imports": _import_groups(
            _merge({"dataclasses": {"dataclass"}}, stdlib_imports(types)),
            [
                (runtime, runtime_names),
                (f"{package}.client", {impl.interface_name}),
                (f"{package}.models", named_types(types)),
            ],
        ),
    }


def _server_context(artifacts: GeneratedArtifactSet, package: str, runtime: str) -> dict[str, Any]:
    server = artifacts.server
    types: list[TypeDescriptor] = []
    for route in server.routes:
        if route.body is not None:
            types.append(route.body.type)
        types.append(route.response_type)
    return {
        "server": server,
        "imports": _import_groups(
            stdlib_imports(types),
            [
                (runtime, {"Authenticator", "HttpApi", "Router", "RoutingContext"}),
                (f"{package}.models", named_types(types)),
            ],
        ),
    }


def render(
    artifacts: GeneratedArtifactSet,
    package: str,
    config: GeneratorConfig | None = None,
) -> dict[str, str]:
    """Render the four artifacts; returns {filename: source}."""
    config = config or GeneratorConfig()
    runtime = config.runtime_for(package)
    env = _environment()
    contexts = {
        "models.py": _models_context(artifacts),
        "client.py": _client_context(artifacts, package, runtime),
        "client_impl.py": _client_impl_context(artifacts, package, runtime),
        "server.py": _server_context(artifacts, package, runtime),
    }
    return {
        filename: env.get_template(template).render(**contexts[filename])
        for filename, template in ARTIFACT_TEMPLATES.items()
    }


def generate_sources(
    source: str | Path,
    package: str,
    service: str,
    config: GeneratorConfig | None = None,
) -> dict[str, str]:
    """Load a document, generate and render it in one call."""
    config = config or GeneratorConfig()
    document = build_document(load_spec(source, timeout=config.load_timeout))
    artifacts = generate(document, service, config)
    return render(artifacts, package, config)
