"""CLI entry point for swaggerlite."""

from pathlib import Path

import click

from swaggerlite.config import OUTPUT_FORMATS, GeneratorConfig, build_config, load_config_file, parse_alias
from swaggerlite.errors import SwaggerLiteError
from swaggerlite.generator.aggregate import resource_of
from swaggerlite.generator.validator import validate_output
from swaggerlite.log import configure_logging
from swaggerlite.pipeline import build_document, render, walk


def _discovery_options(command):
    """Options shared by every command that walks the API packages."""
    options = [
        click.option("--api-package", "api_packages", default="", help="Comma separated packages implementing the API controllers, relative to a search root."),
        click.option("--search-root", "search_roots", multiple=True, type=click.Path(path_type=Path), help="Directory to look for packages in (repeatable). Defaults to $SWAGGERLITE_PATH or the working directory."),
        click.option("--package-exclusion-list", "exclusions", default="", help="Comma separated packages to report-and-continue on instead of failing when not found."),
        click.option("--alias", "aliases", multiple=True, help="NAME=primitive for wrapper types that serialize as a primitive (repeatable)."),
        click.option("--config", "config_path", default=None, type=click.Path(exists=True, dir_okay=False, path_type=Path), help="YAML configuration file."),
        click.option("-v", "--verbose", is_flag=True, help="Log debug output."),
    ]
    for option in reversed(options):
        command = option(command)
    return command


def _load_config(config_path: Path | None, **overrides) -> GeneratorConfig:
    file_values = load_config_file(config_path) if config_path else {}
    overrides["aliases"] = dict(parse_alias(alias) for alias in overrides.get("aliases") or ())
    overrides["search_roots"] = list(overrides.get("search_roots") or ())
    config = build_config(file_values, **overrides)
    if not config.api_packages:
        raise click.UsageError("--api-package is required (or api_packages in --config)")
    return config


def _report_warnings(warnings: list[str]) -> None:
    if warnings:
        click.echo(f"Finished with {len(warnings)} warning(s).")


@click.group()
@click.version_option(package_name="swaggerlite")
def main():
    """swaggerlite — generate Swagger documentation from annotated Python sources."""
    pass


@main.command()
@_discovery_options
@click.option("--main-api-file", default="", help="File with the general API annotations, relative to a search root. Defaults to <api-package>/main.py.")
@click.option("--base-path", default="", help="Web service base path.")
@click.option("--format", "output_format", default=None, type=click.Choice(OUTPUT_FORMATS), help="Output format. Defaults to json.")
@click.option("-o", "--output", default=None, type=click.Path(path_type=Path), help="Output file path.")
def generate(config_path, verbose, output: Path | None, **options):
    """Parse the API packages and write the generated documentation."""
    configure_logging(verbose=verbose)
    try:
        config = _load_config(config_path, output=output, **options)
        result = build_document(config)
        text = render(result.document, config.output_format)
    except SwaggerLiteError as exc:
        raise click.ClickException(str(exc)) from exc

    target = config.output_path()
    error = validate_output(text, config.output_format)
    if error:
        raise click.ClickException(f"Generated output is invalid: {error}")

    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(text, encoding="utf-8")
    click.echo(
        f"Documented {len(result.document.declarations)} resources "
        f"({config.output_format}) in {target}"
    )
    _report_warnings(result.warnings)


@main.command()
@_discovery_options
def routes(config_path, verbose, **options):
    """List the annotated routes without writing anything."""
    configure_logging(verbose=verbose)
    try:
        config = _load_config(config_path, **options)
        result, _ = walk(config)
    except SwaggerLiteError as exc:
        raise click.ClickException(str(exc)) from exc

    for operation in result.operations:
        click.echo(f"{operation.method:<7} {operation.path:<40} {resource_of(operation):<16} {operation.function}")
    click.echo(f"Found {len(result.operations)} routes.")
    _report_warnings(result.warnings)
