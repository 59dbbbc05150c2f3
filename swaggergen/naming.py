"""Turn free-form Swagger strings into Python identifiers.

Pattern: split on separators, capitalize every segment, join.
  - model names        -> leading upper   (pet_owner   -> PetOwner)
  - fields, parameters -> leading lower   (X-Request-Id -> xRequestId)
  - function names     -> operationId, or method + path without braces

Examples:
  listPets                   -> listPets
  GET  /pets                 -> getPets
  GET  /pets/{id}            -> getPetsId
  POST /stores/{store-id}/pets -> postStoresStoreIdPets
"""

from __future__ import annotations

import keyword
import re

_SEPARATORS = re.compile(r"[^0-9A-Za-z]+")
_PATH_PARAM = re.compile(r"\{([^}]+)\}")

DEFINITIONS_PREFIX = "#/definitions/"


def _capitalize(segment: str) -> str:
    """Uppercase the first character only, leaving the rest untouched."""
    return segment[:1].upper() + segment[1:]


def to_identifier(raw: str, leading_upper: bool = True) -> str:
    """Build a camel-cased identifier from an arbitrary string.

    Empty segments are dropped; the result is always a valid, non-keyword
    Python identifier.
    """
    joined = "".join(_capitalize(part) for part in _SEPARATORS.split(raw) if part)
    if not joined:
        return "value"
    if leading_upper:
        name = joined[:1].upper() + joined[1:]
    else:
        name = joined[:1].lower() + joined[1:]
    if name[0].isdigit():
        name = f"_{name}"
    if keyword.iskeyword(name):
        name += "_"
    return name


def extract_ref(ref: str) -> str:
    """Strip the definitions prefix from a $ref pointer."""
    return ref.replace(DEFINITIONS_PREFIX, "")


def build_function_name(method: str, path: str, operation_id: str | None = None) -> str:
    """Return the generated function name for an operation.

    Uses operationId when present, otherwise the lowercased method joined
    with the path template stripped of its braces.
    """
    if operation_id:
        return to_identifier(operation_id, leading_upper=False)
    raw = method.lower() + path.replace("{", "").replace("}", "")
    return to_identifier(raw, leading_upper=False)


def path_parameters(path: str) -> list[str]:
    """Return the placeholder names of a path template in order."""
    return _PATH_PARAM.findall(path)


def client_path(path: str, bound: dict[str, str]) -> tuple[str, bool]:
    """Rewrite a path template for f-string interpolation.

    ``bound`` maps wire names of declared path parameters to the Python
    names they are bound to. Placeholders without a declared parameter are
    escaped so they survive as literal braces. Returns the template and
    whether it interpolates anything.
    """
    interpolated = False

    def _replace(match: re.Match[str]) -> str:
        nonlocal interpolated
        name = match.group(1)
        if name in bound:
            interpolated = True
            return "{" + bound[name] + "}"
        return "{{" + name + "}}"

    rewritten = _PATH_PARAM.sub(_replace, path)
    if not interpolated:
        return path, False
    return rewritten, True


def server_path(path: str) -> str:
    """Rewrite ``{name}`` placeholders to the router's ``:name`` syntax."""
    return _PATH_PARAM.sub(r":\1", path)
