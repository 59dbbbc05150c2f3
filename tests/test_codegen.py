"""End-to-end generation: document -> artifact set -> rendered modules."""

from __future__ import annotations

import ast
import dataclasses
import sys
import types

import pytest

from swaggergen.codegen import ARTIFACT_TEMPLATES, generate, generate_sources, render
from swaggergen.config import GeneratorConfig
from swaggergen.document import build_document
from swaggergen.errors import UnresolvedReferenceError


@pytest.fixture
def sources(petstore_document):
    return render(generate(petstore_document, "pets"), "pets")


class TestGenerate:
    def test_artifact_set_complete(self, petstore_document):
        artifacts = generate(petstore_document, "pets")
        assert [d.name for d in artifacts.models] == ["PetStatus", "Owner", "Pet"]
        assert artifacts.client_interface.name == "PetsClient"
        assert artifacts.client_impl.name == "PetsClientImpl"
        assert artifacts.server.name == "PetsServer"
        assert artifacts.diagnostics == []

    def test_fresh_memo_per_run(self, petstore_document):
        first = generate(petstore_document, "pets")
        second = generate(petstore_document, "pets")
        assert first.models == second.models
        assert first.emitted is not second.emitted

    def test_client_timeout_from_config(self, petstore_document):
        artifacts = generate(petstore_document, "pets", GeneratorConfig(client_timeout=2.5))
        assert artifacts.client_impl.default_timeout == 2.5

    def test_unresolved_reference_aborts(self, petstore):
        petstore["definitions"]["Owner"]["properties"]["home"] = {"$ref": "#/definitions/Missing"}
        with pytest.raises(UnresolvedReferenceError, match="Missing"):
            generate(build_document(petstore), "pets")

    def test_unresolved_reference_in_response(self, petstore):
        petstore["paths"]["/pets"]["get"]["responses"]["200"]["schema"] = {"$ref": "#/definitions/Missing"}
        with pytest.raises(UnresolvedReferenceError):
            generate(build_document(petstore), "pets")


class TestRender:
    def test_all_artifacts_parse(self, sources):
        assert list(sources) == list(ARTIFACT_TEMPLATES)
        for filename, text in sources.items():
            ast.parse(text, filename=filename)

    def test_models(self, sources):
        models = sources["models.py"]
        assert "from dataclasses import dataclass, field\n" in models
        assert "from datetime import date\n" in models
        assert "class PetStatus(str, Enum):\n    available = \"available\"\n" in models
        assert "@dataclass\nclass Pet:\n    id: int\n    name: str\n    age: int | None\n" in models
        assert '    birthDate: date | None = field(metadata={"json": "birth-date"})\n' in models
        assert "    pets: list[Pet] | None\n" in models

    def test_client_interface(self, sources):
        client = sources["client.py"]
        assert "from pets.runtime import Token\n" in client
        assert "from pets.models import Pet\n" in client
        assert "class PetsClient(ABC):\n" in client
        assert "    async def getPetsId(self, id: str) -> Pet:\n" in client
        assert "    async def createPet(self, pet: Pet, token: Token) -> None:\n" in client

    def test_client_impl_simple_get(self, sources):
        impl = sources["client_impl.py"]
        assert (
            "    async def getPetsId(self, id: str) -> Pet:\n"
            '        req = HttpRequest(self.config.host + f"/pets/{id}", "GET")\n'
            "        req = req.with_timeout(self.config.timeout)\n"
            '        return await with_error_message(self.http.json(req, Pet), "Failed GET to /pets/{id}")\n'
        ) in impl

    def test_client_impl_post_with_body_and_scope(self, sources):
        impl = sources["client_impl.py"]
        assert (
            '        req = HttpRequest(self.config.host + "/pets", "POST")\n'
            "        req = req.with_oauth2(token.value)  # write\n"
            "        req = req.with_json(pet)\n"
            "        req = req.with_timeout(self.config.timeout)\n"
            '        await with_error_message(self.http.expect(req), "Failed POST to /pets")\n'
        ) in impl

    def test_client_impl_query_and_config(self, sources):
        impl = sources["client_impl.py"]
        assert '        req = req.add_params({"limit": str(limit)})\n' in impl
        assert "class PetsConfig:\n    host: str\n    timeout: float = 10.0\n" in impl
        assert "class PetsClientImpl(PetsClient):\n" in impl
        assert "from pets.client import PetsClient\n" in impl

    def test_server_simple_get(self, sources):
        server = sources["server.py"]
        assert (
            '        @router.get("/pets/:id")\n'
            "        async def getPetsId(ctx: RoutingContext) -> None:\n"
            "            req = ctx.request\n"
            '            id = req.get_param("id")\n'
        ) in server
        assert "            ctx.response.end_with_json(response)\n" in server

    def test_server_post_with_body_and_scope(self, sources):
        server = sources["server.py"]
        assert '        @router.post("/pets", self.auth.protect("write"))\n' in server
        assert "            pet: Pet = await req.json(Pet)\n" in server
        assert '            ctx.response.put_header("Location", ...).set_status_code(201).end()\n' in server

    def test_server_query_and_header(self, sources):
        server = sources["server.py"]
        assert '            limit = int(req.get_param("limit"))\n' in server
        assert '            xRequestId = req.get_header("X-Request-Id")\n' in server
        assert "class PetsServer(HttpApi):\n" in server

    def test_runtime_module_override(self, petstore_document):
        sources = render(generate(petstore_document, "pets"), "pets", GeneratorConfig(runtime_module="acme.http"))
        assert "from acme.http import HttpClient, HttpRequest, Token, with_error_message\n" in sources["client_impl.py"]
        assert "from acme.http import Authenticator, HttpApi, Router, RoutingContext\n" in sources["server.py"]

    def test_empty_document_still_parses(self):
        sources = render(generate(build_document({"swagger": "2.0"}), "empty"), "empty")
        for filename, text in sources.items():
            ast.parse(text, filename=filename)

    def test_empty_enum_parses(self):
        doc = build_document({"swagger": "2.0", "definitions": {"Nothing": {"x-extensible-enum": []}}})
        models = render(generate(doc, "svc"), "svc")["models.py"]
        ast.parse(models)
        assert "class Nothing(str, Enum):\n    pass\n" in models


class TestModelsModule:
    """The rendered models module imports cleanly, not just parses."""

    @staticmethod
    def _load(source, monkeypatch):
        module = types.ModuleType("generated_models")
        monkeypatch.setitem(sys.modules, module.__name__, module)
        exec(compile(source, "models.py", "exec"), module.__dict__)
        return module

    def test_petstore_models_execute(self, sources, monkeypatch):
        models = self._load(sources["models.py"], monkeypatch)
        assert models.PetStatus("sold") is models.PetStatus.sold
        assert models.PetStatus.sold == "sold"
        birth_date = next(f for f in dataclasses.fields(models.Pet) if f.name == "birthDate")
        assert birth_date.metadata == {"json": "birth-date"}
        owner = models.Owner(name="Ada", pets=None)
        assert models.Pet(id=1, name="Rex", age=None, status=None, owner=owner, birthDate=None).owner is owner

    def test_enum_values_with_reserved_names_execute(self, monkeypatch):
        doc = build_document(
            {"swagger": "2.0", "definitions": {"Attr": {"x-extensible-enum": ["name", "value", "mro", "_sunder_", "__init__"]}}}
        )
        models = self._load(render(generate(doc, "svc"), "svc")["models.py"], monkeypatch)
        assert [member.value for member in models.Attr] == ["name", "value", "mro", "_sunder_", "__init__"]


class TestGenerateSources:
    def test_from_file(self, petstore_path):
        sources = generate_sources(petstore_path, "pets", "pets")
        assert set(sources) == {"models.py", "client.py", "client_impl.py", "server.py"}
