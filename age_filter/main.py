#!/usr/bin/env python3
"""
Registry age filter - main entry point.

This module provides the ``age-filter`` command: ``serve`` runs the filtering
proxy, ``check`` evaluates a single package against the upstream registry.
"""

import asyncio
import json
import logging
import sys
from datetime import datetime, timezone

import click

from .clients.registry_client import RegistryClient
from .config import Config, load_config
from .exceptions import AgeFilterError
from .logging import configure_logging
from .middleware import rejection_body
from .selector import age_in_days, select_version
from .transport import create_transport_config
from .types import PackageRecord, Reject, Rewrite

logger = logging.getLogger(__name__)

LOG_LEVELS = click.Choice(
    ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False
)


def _load(max_age_days: float | None, registry_url: str | None, log_level: str | None) -> Config:
    try:
        return load_config(
            {
                "max_age_days": max_age_days,
                "registry_url": registry_url,
                "log_level": log_level.upper() if log_level else None,
            }
        )
    except AgeFilterError as e:
        raise click.BadParameter(e.message) from e


@click.group()
def cli() -> None:
    """
    Registry age filter: keep freshly published releases out of "latest".

    \b
    Examples:
      age-filter serve                          # 127.0.0.1:4873, 7 day floor
      age-filter serve --max-age-days 14        # two week floor
      age-filter check left-pad                 # show the decision for one package
    """


@cli.command()
@click.option("--host", default="127.0.0.1", help="Host to bind to (default: 127.0.0.1)")
@click.option(
    "--port",
    type=click.IntRange(1, 65535),
    default=4873,
    help="Port to listen on (default: 4873)",
)
@click.option("--max-age-days", type=float, default=None, help="Minimum age of latest, in days")
@click.option("--registry-url", default=None, help="Upstream registry URL")
@click.option("--log-level", type=LOG_LEVELS, default=None, help="Set logging level")
def serve(
    host: str,
    port: int,
    max_age_days: float | None,
    registry_url: str | None,
    log_level: str | None,
) -> None:
    """Run the filtering proxy in front of the upstream registry."""
    config = _load(max_age_days, registry_url, log_level)

    try:
        transport_config = create_transport_config(host=host, port=port)

        # Import here so uvicorn is only loaded when serving
        from .server import main as server_main

        server_main(transport_config, config)

    except KeyboardInterrupt:
        logger.info("Server interrupted by user")
        sys.exit(0)
    except Exception as e:
        logger.exception(f"Error starting registry age filter: {e}")
        sys.exit(1)


@cli.command()
@click.argument("package")
@click.option("--max-age-days", type=float, default=None, help="Minimum age of latest, in days")
@click.option("--registry-url", default=None, help="Upstream registry URL")
def check(package: str, max_age_days: float | None, registry_url: str | None) -> None:
    """Show what the filter would serve as latest for PACKAGE."""
    config = _load(max_age_days, registry_url, None)
    configure_logging(config)

    try:
        result = asyncio.run(_evaluate(package, config))
    except AgeFilterError as e:
        raise click.ClickException(e.message) from e

    click.echo(json.dumps(result, indent=2))
    if result["decision"] == "reject":
        sys.exit(2)


async def _evaluate(package: str, config: Config) -> dict:
    """Fetch ``package`` and describe the decision the filter would take."""
    async with RegistryClient(config) as registry:
        manifest = await registry.get_package(package)

    record = PackageRecord.from_manifest(manifest, package)
    decision = select_version(record, config.policy(), datetime.now(timezone.utc))
    latest = record.dist_tags.get("latest") if record else None

    if isinstance(decision, Rewrite):
        return {
            "package": package,
            "decision": "rewrite",
            "latest": decision.latest_version,
            "latest_age_days": age_in_days(decision.latest_age),
            "served": decision.chosen_version,
            "served_age_days": age_in_days(decision.chosen_age),
        }
    if isinstance(decision, Reject):
        return {
            "package": package,
            "decision": "reject",
            "latest": decision.latest_version,
            "latest_age_days": age_in_days(decision.latest_age),
            **rejection_body(package, decision.threshold_days),
        }
    return {"package": package, "decision": "pass", "latest": latest, "served": latest}


def main(args: list[str] | None = None) -> int:
    """
    Main entry point for testing and programmatic usage.

    Args:
        args: Command line arguments

    Returns:
        Exit code
    """
    try:
        if args is None:
            cli()
        else:
            cli(args=args, standalone_mode=False)
        return 0
    except SystemExit as e:
        return e.code if e.code is not None else 0
    except Exception:
        return 1


if __name__ == "__main__":
    sys.exit(main())
