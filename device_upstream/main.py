"""
Command-line entry point for the device upstream service.
"""

import asyncio
import logging
import sys
from typing import Optional

import aiohttp
import typer
import uvicorn

from .application.container import Container
from .application.startup import ApplicationStartup
from .infrastructure.config.loader import ConfigLoader
from .infrastructure.config.models import BROKER_KINDS, ApplicationConfig
from .infrastructure.logging.setup import setup_logging
from .presentation.api.app import create_app

cli = typer.Typer(
    name="device-upstream",
    help="IoT device upstream dispatch-and-publish service"
)

logger = logging.getLogger(__name__)


def _load_or_exit(config_file: Optional[str]) -> ApplicationConfig:
    try:
        return ConfigLoader().load_config(config_file)
    except (FileNotFoundError, ValueError) as e:
        typer.echo(f"Cannot load configuration: {e}", err=True)
        sys.exit(1)


@cli.command()
def start(
    config_file: Optional[str] = typer.Option(
        None, "--config", "-c", help="YAML or JSON configuration file"
    ),
    host: Optional[str] = typer.Option(
        None, "--host", help="API bind address"
    ),
    port: Optional[int] = typer.Option(
        None, "--port", "-p", help="API port"
    ),
    broker: Optional[str] = typer.Option(
        None, "--broker", help=f"Downstream broker ({'/'.join(BROKER_KINDS)})"
    ),
    log_level: Optional[str] = typer.Option(
        None, "--log-level", help="Minimum log level"
    ),
    debug: bool = typer.Option(
        False, "--debug", help="Debug mode with DEBUG logging"
    )
) -> None:
    """Serve the upstream HTTP API."""
    config = _load_or_exit(config_file)

    if host:
        config.api.host = host
    if port:
        config.api.port = port
    if broker:
        if broker not in BROKER_KINDS:
            typer.echo(f"Unknown broker {broker!r}, expected one of {', '.join(BROKER_KINDS)}", err=True)
            sys.exit(1)
        config.broker.kind = broker
    if log_level:
        config.logging.level = log_level.upper()
    if debug:
        config.debug = True
        config.logging.level = "DEBUG"

    setup_logging(config.logging)
    logger.info(f"{config.name} v{config.version} starting "
                f"({config.environment}, broker={config.broker.kind})")

    try:
        asyncio.run(run_application(config))
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")
    except Exception as e:
        logger.error(f"Server terminated with error: {e}")
        sys.exit(1)


@cli.command()
def init_config(
    output: str = typer.Option(
        "config.yaml", "--output", "-o", help="Where to write the configuration"
    ),
    format: str = typer.Option(
        "yaml", "--format", "-f", help="yaml or json"
    )
) -> None:
    """Write a configuration file populated with defaults."""
    try:
        ConfigLoader().save_config(ApplicationConfig(), output, format)
    except (OSError, ValueError) as e:
        typer.echo(f"Cannot write configuration: {e}", err=True)
        sys.exit(1)

    typer.echo(f"Wrote default configuration to {output}")


@cli.command()
def validate_config(
    config_file: str = typer.Argument(..., help="Configuration file to check")
) -> None:
    """Load a configuration file and report what it configures."""
    config = _load_or_exit(config_file)

    typer.echo(f"{config_file}: OK")
    typer.echo(f"  {config.name} v{config.version} ({config.environment})")
    typer.echo(f"  broker: {config.broker.kind}, side-effect workers: {config.side_effects.workers}")
    typer.echo(f"  products: {len(config.products)}, seeded devices: {len(config.devices)}")


@cli.command()
def health_check(
    host: str = typer.Option("localhost", "--host", help="API host"),
    port: int = typer.Option(8000, "--port", help="API port"),
    timeout: float = typer.Option(10.0, "--timeout", help="Seconds to wait for a reply"),
    detailed: bool = typer.Option(False, "--detailed", help="Report per-component health")
) -> None:
    """Query the health endpoint of a running server."""

    async def probe() -> bool:
        path = "/health/detailed" if detailed else "/health/"
        client_timeout = aiohttp.ClientTimeout(total=timeout)

        try:
            async with aiohttp.ClientSession(timeout=client_timeout) as session:
                async with session.get(f"http://{host}:{port}{path}") as response:
                    if response.status != 200:
                        typer.echo(f"Unexpected HTTP status {response.status}")
                        return False
                    body = await response.json()
        except Exception as e:
            typer.echo(f"Health check failed: {e}")
            return False

        typer.echo(f"status: {body.get('status', 'unknown')}")
        for name, component in body.get("components", {}).items():
            typer.echo(f"  {name}: {component.get('status', 'unknown')}")
        return body.get("status") == "healthy"

    if not asyncio.run(probe()):
        sys.exit(1)


async def run_application(config: ApplicationConfig) -> None:
    """Wire services and serve until uvicorn exits; the app lifespan starts and stops components."""
    container = Container()
    startup = ApplicationStartup(container)
    await startup.configure_services(config)

    server = uvicorn.Server(uvicorn.Config(
        app=create_app(container, config, startup=startup),
        host=config.api.host,
        port=config.api.port,
        log_level=config.logging.level.lower(),
        access_log=config.debug
    ))
    await server.serve()


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
