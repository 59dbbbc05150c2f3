"""Load a Swagger 2.0 document from a file path or URL.

Reads YAML or JSON and exposes the raw paths and definitions.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import httpx
import yaml

from .config import DEFAULT_LOAD_TIMEOUT
from .errors import DocumentError

logger = logging.getLogger(__name__)


def _is_url(source: str) -> bool:
    return source.startswith(("http://", "https://"))


def _read_source(source: str, timeout: float) -> str:
    if _is_url(source):
        try:
            resp = httpx.get(source, timeout=timeout, follow_redirects=True)
            resp.raise_for_status()
        except httpx.HTTPError as exc:
            raise DocumentError(source, str(exc)) from exc
        return resp.text
    try:
        return Path(source).read_text(encoding="utf-8")
    except OSError as exc:
        raise DocumentError(source, exc.strerror or str(exc)) from exc


def load_spec(source: str | Path, timeout: float = DEFAULT_LOAD_TIMEOUT) -> dict[str, Any]:
    """Load the raw document; YAML is a superset of JSON so one parser serves both."""
    source = str(source)
    text = _read_source(source, timeout)
    try:
        doc = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise DocumentError(source, f"invalid YAML/JSON: {exc}") from exc

    if not isinstance(doc, dict):
        raise DocumentError(source, "document root is not a mapping")
    if "openapi" in doc and "swagger" not in doc:
        raise DocumentError(source, f"OpenAPI {doc['openapi']} is not supported, expected Swagger 2.0")

    logger.debug("Loaded %s (swagger %s)", source, doc.get("swagger", "?"))
    return doc


def get_paths(spec: dict[str, Any]) -> dict[str, Any]:
    """Extract paths from the spec."""
    return spec.get("paths") or {}


def get_definitions(spec: dict[str, Any]) -> dict[str, Any]:
    """Extract named schema definitions from the spec."""
    return spec.get("definitions") or {}


def resolve_ref(spec: dict[str, Any], ref: str) -> dict[str, Any]:
    """Resolve a local $ref pointer in the spec."""
    parts = ref.lstrip("#/").split("/")
    node = spec
    for part in parts:
        node = node[part.replace("~1", "/").replace("~0", "~")]
    return node
