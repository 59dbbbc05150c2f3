"""Tests for the swaggergen command line."""

from __future__ import annotations

import logging

import pytest
import yaml
from click.testing import CliRunner

from swaggergen.__main__ import main

QUIET = {"SWAGGERGEN_LOG_LEVEL": "ERROR"}


@pytest.fixture(autouse=True)
def _reset_gen_logger():
    yield
    logger = logging.getLogger("swaggergen")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.propagate = True


@pytest.fixture
def runner():
    return CliRunner()


class TestMain:
    def test_prints_all_artifacts(self, runner, petstore_path):
        result = runner.invoke(main, ["pets", "pets", str(petstore_path)], env=QUIET)
        assert result.exit_code == 0, result.output
        for filename in ("models.py", "client.py", "client_impl.py", "server.py"):
            assert f"# ---- {filename} ----\n" in result.output
        assert "class PetsClientImpl(PetsClient):" in result.output

    def test_invalid_package(self, runner, petstore_path):
        result = runner.invoke(main, ["1pets", "pets", str(petstore_path)], env=QUIET)
        assert result.exit_code == 2
        assert "dotted Python package name" in result.output

    def test_missing_source(self, runner, tmp_path):
        result = runner.invoke(main, ["pets", "pets", str(tmp_path / "nope.yaml")], env=QUIET)
        assert result.exit_code == 1
        assert "Cannot load" in result.output

    def test_unresolved_reference(self, runner, tmp_path, petstore):
        petstore["definitions"]["Pet"]["properties"]["vet"] = {"$ref": "#/definitions/Vet"}
        path = tmp_path / "broken.yaml"
        path.write_text(yaml.safe_dump(petstore))
        result = runner.invoke(main, ["pets", "pets", str(path)], env=QUIET)
        assert result.exit_code == 1
        assert "Unresolved reference: #/definitions/Vet" in result.output
        assert "# ----" not in result.output

    def test_bad_timeout_env(self, runner, petstore_path):
        result = runner.invoke(main, ["pets", "pets", str(petstore_path)], env={"SWAGGERGEN_CLIENT_TIMEOUT": "soon"})
        assert result.exit_code == 1
        assert "SWAGGERGEN_CLIENT_TIMEOUT" in result.output

    def test_timeout_env_reaches_config(self, runner, petstore_path):
        env = dict(QUIET, SWAGGERGEN_CLIENT_TIMEOUT="4")
        result = runner.invoke(main, ["pets", "pets", str(petstore_path)], env=env)
        assert "    timeout: float = 4.0\n" in result.output

    def test_unknown_log_level(self, runner, petstore_path):
        result = runner.invoke(main, ["pets", "pets", str(petstore_path)], env={"SWAGGERGEN_LOG_LEVEL": "chatty"})
        assert result.exit_code == 1
        assert "Unknown log level 'chatty'" in result.output
