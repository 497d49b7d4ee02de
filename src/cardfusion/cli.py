"""Command-line interface for CardFusion."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any, Optional, Tuple

import click
import structlog
import yaml

from cardfusion import __version__
from cardfusion.config.config import Config, load_config
from cardfusion.exceptions import CardFusionError
from cardfusion.intake import BatchRequest, new_session_id, parse_batch_request
from cardfusion.observability import configure_logging
from cardfusion.pipeline import CardPipeline

logger = structlog.get_logger(__name__)


def _echo_json(payload: Any) -> None:
    click.echo(json.dumps(payload, indent=2, ensure_ascii=False))


def _config(ctx: click.Context) -> Config:
    return ctx.obj["config"]


@click.group()
@click.version_option(version=__version__)
@click.option("--config", "-c", type=click.Path(exists=True, dir_okay=False), help="Configuration file path")
@click.option(
    "--log-level",
    default=None,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"]),
    help="Logging level (overrides the configuration file)",
)
@click.pass_context
def cli(ctx: click.Context, config: Optional[str], log_level: Optional[str]) -> None:
    """CardFusion - turn web pages into gamified summary cards."""
    ctx.ensure_object(dict)
    try:
        loaded = load_config(Path(config) if config else None)
    except (FileNotFoundError, ValueError, yaml.YAMLError) as e:
        raise click.ClickException(f"Invalid configuration: {e}") from e

    if log_level:
        loaded.monitoring.log_level = log_level
    configure_logging(loaded.monitoring)
    ctx.obj["config"] = loaded


@cli.command()
@click.argument("urls", nargs=-1, required=True)
@click.pass_context
def crawl(ctx: click.Context, urls: Tuple[str, ...]) -> None:
    """Extract metadata from URLS and print the results as JSON."""
    pipeline = CardPipeline(_config(ctx))
    request = BatchRequest(session=new_session_id(), urls=list(urls))
    _echo_json(asyncio.run(pipeline.crawl_response(request)))


@cli.command()
@click.argument("source", type=click.File("r", encoding="utf-8"), default="-")
@click.pass_context
def fuse(ctx: click.Context, source: Any) -> None:
    """Fuse the request body in SOURCE (a JSON file, or - for stdin) into one card."""
    pipeline = CardPipeline(_config(ctx))
    try:
        request = parse_batch_request(source.read())
        payload = asyncio.run(pipeline.fuse_response(request))
    except CardFusionError as e:
        raise click.ClickException(str(e)) from e
    _echo_json(payload)


@cli.command()
@click.option("--host", default=None, help="Host to bind to (default: from configuration)")
@click.option("--port", default=None, type=int, help="Port to bind to (default: from configuration)")
@click.pass_context
def serve(ctx: click.Context, host: Optional[str], port: Optional[int]) -> None:
    """Start the HTTP API."""
    from cardfusion.web.main import run_web_server

    config = _config(ctx)
    host = host or config.web.host
    port = port or config.web.port
    click.echo(f"Starting CardFusion API at http://{host}:{port}", err=True)
    run_web_server(host=host, port=port, config=config)


def main() -> None:
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
