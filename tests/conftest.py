"""Shared fixtures: a small petstore document in raw and parsed form.

The raw mapping mirrors tests/fixtures/petstore.yaml so loader tests can
compare against it.
"""

from __future__ import annotations

import copy
from pathlib import Path
from typing import Any

import pytest

from swaggergen.artifacts import GeneratedArtifactSet
from swaggergen.document import SchemaDocument, build_document
from swaggergen.schema_parser import ModelEmitter

FIXTURES = Path(__file__).parent / "fixtures"

PETSTORE: dict[str, Any] = {
    "swagger": "2.0",
    "info": {"title": "Petstore", "version": "1.0.0"},
    "securityDefinitions": {
        "petstore_auth": {
            "type": "oauth2",
            "flow": "implicit",
            "authorizationUrl": "https://petstore.example.com/oauth/authorize",
            "scopes": {"read": "read pets", "write": "modify pets"},
        },
    },
    "paths": {
        "/pets": {
            "get": {
                "parameters": [
                    {"name": "limit", "in": "query", "type": "integer"},
                ],
                "responses": {
                    "200": {
                        "description": "all pets",
                        "schema": {"type": "array", "items": {"$ref": "#/definitions/Pet"}},
                    },
                },
            },
            "post": {
                "operationId": "createPet",
                "security": [{"petstore_auth": ["write"]}],
                "parameters": [
                    {"name": "pet", "in": "body", "required": True, "schema": {"$ref": "#/definitions/Pet"}},
                ],
                "responses": {
                    "201": {
                        "description": "created",
                        "headers": {"Location": {"type": "string"}},
                    },
                },
            },
        },
        "/pets/{id}": {
            "parameters": [
                {"name": "id", "in": "path", "required": True, "type": "string"},
            ],
            "get": {
                "responses": {
                    "200": {"description": "one pet", "schema": {"$ref": "#/definitions/Pet"}},
                    "404": {"description": "not found"},
                },
            },
            "delete": {
                "security": [{"petstore_auth": ["write"]}],
                "parameters": [
                    {"name": "X-Request-Id", "in": "header", "type": "string"},
                ],
                "responses": {
                    "204": {"description": "deleted"},
                },
            },
        },
    },
    "definitions": {
        "Pet": {
            "type": "object",
            "required": ["id", "name"],
            "properties": {
                "id": {"type": "integer", "format": "int64"},
                "name": {"type": "string"},
                "age": {"type": "integer"},
                "status": {"$ref": "#/definitions/PetStatus"},
                "owner": {"$ref": "#/definitions/Owner"},
                "birth-date": {"type": "string", "format": "date"},
            },
        },
        "PetStatus": {
            "type": "string",
            "x-extensible-enum": ["available", "pending", "sold"],
        },
        "Owner": {
            "type": "object",
            "required": ["name"],
            "properties": {
                "name": {"type": "string"},
                "pets": {"type": "array", "items": {"$ref": "#/definitions/Pet"}},
            },
        },
    },
}


@pytest.fixture
def petstore() -> dict[str, Any]:
    """Fresh copy of the raw petstore mapping, safe to mutate."""
    return copy.deepcopy(PETSTORE)


@pytest.fixture
def petstore_document(petstore) -> SchemaDocument:
    return build_document(petstore)


@pytest.fixture
def petstore_path() -> Path:
    return FIXTURES / "petstore.yaml"


@pytest.fixture
def emitter(petstore_document) -> ModelEmitter:
    return ModelEmitter(petstore_document, GeneratedArtifactSet())


@pytest.fixture
def make_emitter():
    """Factory for a ModelEmitter over an ad-hoc raw document."""

    def _make(spec: dict[str, Any]) -> ModelEmitter:
        return ModelEmitter(build_document(spec), GeneratedArtifactSet())

    return _make
