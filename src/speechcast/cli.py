"""
Speechcast CLI

Command-line interface for running the broadcast server and managing content.
"""

import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

import click
import structlog

from speechcast import __version__
from speechcast.core.errors import ConfigurationError, ContentLoadError
from speechcast.core.models import SUPPORTED_LANGUAGES, resolve_language

logger = structlog.get_logger()


def configure_logging(level: str) -> None:
    """Route structlog through the standard library at ``level``."""
    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        numeric = logging.INFO

    logging.basicConfig(level=numeric, format="%(message)s")
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(numeric),
    )


# ══════════════════════════════════════════════════════════════
# CLI Group
# ══════════════════════════════════════════════════════════════


@click.group()
@click.version_option(version=__version__, prog_name="speechcast")
@click.option("--debug/--no-debug", default=False, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, debug: bool) -> None:
    """Speechcast - Live presentation broadcasting.

    The presenter advances, every viewer follows along.
    """
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug
    if debug:
        configure_logging("DEBUG")


# ══════════════════════════════════════════════════════════════
# Server Commands
# ══════════════════════════════════════════════════════════════


@cli.command()
@click.option("--host", default=None, help="Host to bind to (default: HOST setting)")
@click.option("--port", default=None, type=int, help="Port to bind to (default: PORT setting)")
@click.option("--reload/--no-reload", default=False, help="Enable auto-reload")
@click.pass_context
def serve(ctx: click.Context, host: Optional[str], port: Optional[int], reload: bool) -> None:
    """Start the Speechcast server.

    Presentation state lives in memory, so the server always runs a
    single worker process.
    """
    import uvicorn

    from speechcast.config import get_settings

    try:
        settings = get_settings()
    except ConfigurationError as e:
        click.echo(f"ERROR: {e}", err=True)
        click.echo("Set PRESENTER_PASSWORD before starting the server", err=True)
        sys.exit(1)

    if not ctx.obj.get("debug"):
        configure_logging(settings.log_level)

    host = host or settings.host
    port = port or settings.port

    click.echo(f"Starting Speechcast on http://{host}:{port}")
    click.echo("Endpoints:")
    click.echo(f"  - http://{host}:{port}{settings.api_prefix}/speech")
    click.echo(f"  - ws://{host}:{port}{settings.ws_prefix}")

    uvicorn.run(
        "speechcast.api.app:create_app",
        host=host,
        port=port,
        reload=reload,
        workers=1,
        factory=True,
    )


# ══════════════════════════════════════════════════════════════
# Content Commands
# ══════════════════════════════════════════════════════════════


@cli.group()
def content() -> None:
    """Presentation content commands."""
    pass


@content.command("init")
@click.option(
    "--file", "-f", "path",
    type=click.Path(dir_okay=False, path_type=Path),
    envvar="CONTENT_FILE",
    default="speech.json",
    show_default=True,
    help="Content file to create",
)
@click.option("--force/--no-force", default=False, help="Overwrite an existing file")
def content_init(path: Path, force: bool) -> None:
    """Write the default presentation to the content file."""
    from speechcast.content import ContentProvider

    if path.exists() and not force:
        click.echo(f"{path} already exists (use --force to overwrite)", err=True)
        sys.exit(1)

    provider = ContentProvider(path)
    try:
        catalog = asyncio.run(provider.reset_to_defaults())
    except ContentLoadError as e:
        click.echo(f"ERROR: {e}", err=True)
        sys.exit(1)

    click.echo(f"Wrote {catalog.section_count} sections ({', '.join(catalog.languages)}) to {provider.path}")


@content.command("show")
@click.option(
    "--file", "-f", "path",
    type=click.Path(dir_okay=False, path_type=Path),
    envvar="CONTENT_FILE",
    default="speech.json",
    show_default=True,
    help="Content file to read",
)
@click.option(
    "--lang", "-l",
    type=click.Choice(list(SUPPORTED_LANGUAGES)),
    default=None,
    help="Language to show (default language if not set)",
)
def content_show(path: Path, lang: Optional[str]) -> None:
    """Print the sections of one language."""
    from speechcast.content import ContentProvider

    provider = ContentProvider(path)
    try:
        catalog = asyncio.run(provider.load())
    except ContentLoadError as e:
        click.echo(f"ERROR: {e}", err=True)
        sys.exit(1)

    language = resolve_language(lang)
    click.echo(f"{provider.path} [{language.value}] available: {', '.join(catalog.available_languages())}\n")

    for index, text in enumerate(catalog.sections_for(language)):
        click.echo(f"  {index:>3}  {text}")


# ══════════════════════════════════════════════════════════════
# Config Commands
# ══════════════════════════════════════════════════════════════


@cli.command()
def config() -> None:
    """Show current configuration."""
    from speechcast.config import get_settings

    try:
        settings = get_settings()
    except ConfigurationError as e:
        click.echo(f"ERROR: {e}", err=True)
        sys.exit(1)

    click.echo("Speechcast Configuration\n")

    config_items = [
        ("Environment", settings.app_env),
        ("Debug", str(settings.debug)),
        ("Bind", f"{settings.host}:{settings.port}"),
        ("Base path", settings.base_path or "/"),
        ("Content file", str(settings.content_file)),
        ("CORS origins", ", ".join(settings.cors_origins)),
        ("Presenter secret", settings.presenter_password.get_secret_value()),
        ("Auth attempts", f"{settings.auth_max_attempts} per {settings.auth_window_seconds}s"),
    ]

    for key, value in config_items:
        # Mask sensitive values
        if "key" in key.lower() or "secret" in key.lower():
            value = "***" if value else "Not set"
        click.echo(f"  {key:20} {value}")


# ══════════════════════════════════════════════════════════════
# Entry Point
# ══════════════════════════════════════════════════════════════


def main() -> None:
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
