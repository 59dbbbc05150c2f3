"""Entry point: swaggergen PACKAGE SERVICE SOURCE (or python -m swaggergen).

Reads a Swagger 2.0 document from a file path or URL and prints the
generated models, client interface, client implementation and server
scaffold to stdout.
"""

from __future__ import annotations

import click

from .codegen import generate_sources
from .config import GeneratorConfig
from .errors import GenerationError
from .log import configure_logging


def _valid_package(package: str) -> bool:
    return all(part.isidentifier() for part in package.split("."))


@click.command()
@click.argument("package")
@click.argument("service")
@click.argument("source")
def main(package: str, service: str, source: str) -> None:
    """Generate Python client and server code from a Swagger 2.0 document."""
    try:
        config = GeneratorConfig.from_env()
        configure_logging(config.log_level)
    except ValueError as exc:
        raise click.ClickException(str(exc)) from exc

    if not _valid_package(package):
        raise click.BadParameter(f"{package!r} is not a dotted Python package name", param_hint="PACKAGE")

    try:
        sources = generate_sources(source, package, service, config)
    except GenerationError as exc:
        raise click.ClickException(str(exc)) from exc

    for filename, text in sources.items():
        click.echo(f"# ---- {filename} ----")
        click.echo(text, nl=False)


if __name__ == "__main__":
    main()
