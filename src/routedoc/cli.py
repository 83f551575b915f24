"""CLI entry point for routedoc."""

import logging
from pathlib import Path

import click

from routedoc.config import DEFAULT_CONFIG_YAML, load_config
from routedoc.errors import ConfigError, GenerationError, OutputError, SourceUnavailableError
from routedoc.generator.pipeline import DocumentationGenerator


@click.group()
def main():
    """routedoc: build an OpenAPI document from annotated route handlers."""
    pass


@main.command()
@click.argument("config_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("-o", "--output", default=None, type=click.Path(file_okay=False, path_type=Path), help="Output directory for openapi.json (overrides the config).")
@click.option("--override", default=None, type=click.Path(exists=True, dir_okay=False, path_type=Path), help="Extra YAML config merged over CONFIG_PATH.")
@click.option("--keep-going", is_flag=True, help="Leave routes with documentation errors out instead of failing.")
@click.option("--seed", default=None, type=int, help="Seed for placeholder parameter values.")
@click.option("-v", "--verbose", is_flag=True, help="Show debug logging.")
def generate(config_path: Path, output: Path | None, override: Path | None, keep_going: bool, seed: int | None, verbose: bool):
    """Generate openapi.json from the routes listed in CONFIG_PATH."""
    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    try:
        config = load_config(config_path, override)
    except ConfigError as e:
        raise click.ClickException(str(e))
    if seed is not None:
        config.seed = seed

    records = list(config.iter_routes())
    click.echo(f"Documenting {len(records)} routes from {config_path}...")

    generator = DocumentationGenerator(config, strict=not keep_going)
    try:
        document = generator.generate(records)
        path = generator.write(document, output or Path(config.output))
    except (GenerationError, ConfigError, OutputError, SourceUnavailableError) as e:
        raise click.ClickException(str(e))

    if generator.skipped:
        click.echo(f"Skipped {len(generator.skipped)} routes.")
    if generator.failures:
        click.echo(f"Left out {len(generator.failures)} routes with documentation errors:")
        for failure in generator.failures:
            click.echo(f"  [{','.join(failure.methods)}] {failure.uri}: {failure.error}")
    click.echo(f"Documented {len(document['paths'])} paths in {path}")


@main.command()
@click.argument("path", type=click.Path(dir_okay=False, path_type=Path))
@click.option("--force", is_flag=True, help="Overwrite an existing file.")
def init_config(path: Path, force: bool):
    """Write a starter configuration file to PATH."""
    if path.exists() and not force:
        raise click.ClickException(f"{path} already exists, use --force to overwrite it")
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(DEFAULT_CONFIG_YAML, encoding="utf-8")
    click.echo(f"Configuration written to {path}")
