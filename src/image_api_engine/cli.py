"""CLI entry point for image-api-engine."""

import asyncio
import json
import logging
from pathlib import Path

import click

from image_api_engine.client import HttpClient
from image_api_engine.config import get_settings
from image_api_engine.engine.generator import ImageGenerator
from image_api_engine.engine.values import apply_overrides, seed_values
from image_api_engine.errors import ConfigValidationError, EngineError, ParameterValueError
from image_api_engine.market.source import ConfigSource
from image_api_engine.media import download_image
from image_api_engine.parser.base import ApiConfig, EnumParameter
from image_api_engine.parser.loader import load_config_file, read_config_document, validate_config
from image_api_engine.settings_store import SETTING_KEYS, SettingsStore, load_runtime_config

PREVIEW_LENGTH = 80


def _store() -> SettingsStore:
    return SettingsStore(get_settings().settings_file)


def _client() -> HttpClient:
    return HttpClient(timeout=get_settings().request_timeout)


def _source() -> ConfigSource:
    return ConfigSource(client=_client(), store=_store())


def _parse_overrides(pairs: tuple[str, ...]) -> list[tuple[str, str]]:
    overrides = []
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"expected KEY=VALUE, got {pair!r}", param_hint="-p")
        overrides.append((key.strip(), value))
    return overrides


def _preview(reference: str) -> str:
    if reference.startswith("data:") and len(reference) > PREVIEW_LENGTH:
        return reference[:PREVIEW_LENGTH] + "..."
    return reference


def _load_api(name: str, config_path: Path | None) -> ApiConfig:
    if config_path is not None:
        try:
            return load_config_file(config_path)
        except ConfigValidationError as exc:
            raise click.ClickException(str(exc))

    config = asyncio.run(_source().get_by_name(name))
    if config is None:
        raise click.ClickException(f"API not found: {name}")
    return config


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Show debug logging.")
def main(verbose: bool):
    """Image API engine: browse image API configs and fetch images from them."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@main.command()
def categories():
    """List the categories of the config index."""
    names = asyncio.run(_source().list_categories())
    for name in names:
        click.echo(name)
    if not names:
        click.echo("No categories found.", err=True)


@main.command(name="list")
@click.option("--category", default=None, help="Only list configs of this category.")
def list_apis(category: str | None):
    """List available image APIs."""
    source = _source()
    if category:
        configs = asyncio.run(source.list_by_category(category))
    else:
        configs = asyncio.run(source.get_all())

    for config in configs:
        click.echo(f"{config.name}\t{config.category}\t{config.content.friendly_name}")
    click.echo(f"Found {len(configs)} APIs.", err=True)


@main.command()
@click.argument("name")
@click.option("--config", "config_path", default=None, type=click.Path(exists=True, path_type=Path), help="Read the config from a local file.")
def show(name: str, config_path: Path | None):
    """Show an API and its parameters."""
    config = _load_api(name, config_path)
    content = config.content
    click.echo(f"{content.friendly_name} ({config.name}, {config.category})")
    if content.intro:
        click.echo(content.intro)
    click.echo(f"{content.method} {content.link}")
    click.echo(f"Response: {content.response.image.content_type}" + (f" at {content.response.image.path}" if content.response.image.path else ""))

    for idx, param in enumerate(content.parameters):
        if not param.enable:
            continue
        key = param.name or "(positional)"
        click.echo(f"  [{idx}] {key} <{param.type}> {param.friendly_name}")
        if isinstance(param, EnumParameter):
            for choice, label in zip(param.value, param.labels()):
                click.echo(f"        {choice}: {label}")
        else:
            click.echo(f"        default: {json.dumps(param.value, ensure_ascii=False)}")


@main.command()
@click.argument("name")
@click.option("-p", "--param", "pairs", multiple=True, help="Parameter value as KEY=VALUE; KEY is an index or a name.")
@click.option("--config", "config_path", default=None, type=click.Path(exists=True, path_type=Path), help="Read the config from a local file.")
@click.option("--save", is_flag=True, help="Download the images.")
@click.option("-o", "--output", default=None, type=click.Path(path_type=Path), help="Download directory (default: download_path setting).")
def generate(name: str, pairs: tuple[str, ...], config_path: Path | None, save: bool, output: Path | None):
    """Call an image API and print the image references it returns."""
    config = _load_api(name, config_path)
    try:
        values = apply_overrides(config.content, seed_values(config.content), _parse_overrides(pairs))
    except ParameterValueError as exc:
        raise click.BadParameter(str(exc), param_hint="-p")

    client = _client()
    result = asyncio.run(ImageGenerator(client).generate(config, values))
    for reference in result.images:
        click.echo(_preview(reference))
    if not result.images:
        click.echo("No images returned.", err=True)
        return

    if save:
        directory = output or load_runtime_config(_store()).download_path
        for reference in result.images:
            try:
                path = asyncio.run(download_image(client, reference, directory))
            except (EngineError, OSError) as exc:
                click.echo(f"  Failed to save {_preview(reference)}: {exc}", err=True)
                continue
            click.echo(f"  Saved {path}")


@main.command()
@click.argument("file_path", type=click.Path(exists=True, path_type=Path))
def validate(file_path: Path):
    """Validate a local API config file."""
    try:
        ok, errors = validate_config(read_config_document(file_path))
    except ConfigValidationError as exc:
        ok, errors = False, exc.errors
    if ok:
        click.echo(f"{file_path} is valid.")
        return
    for error in errors:
        click.echo(f"  {error}")
    raise click.ClickException(f"{file_path} is invalid ({len(errors)} errors).")


@main.group()
def settings():
    """Read and change saved settings."""


@settings.command(name="get")
@click.argument("key", type=click.Choice(SETTING_KEYS))
def settings_get(key: str):
    """Show the effective value of a setting."""
    runtime = load_runtime_config(_store())
    value = getattr(runtime, key)
    click.echo("" if value is None else str(value))


@settings.command(name="set")
@click.argument("key", type=click.Choice(SETTING_KEYS))
@click.argument("value")
def settings_set(key: str, value: str):
    """Save a setting. An empty VALUE clears it."""
    stored: object = value or None
    if key == "use_static_index" and value:
        stored = value.strip().lower() in ("1", "true", "yes", "on")
    _store().set(key, stored)
    click.echo(f"{key} saved.")
