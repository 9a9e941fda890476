"""CLI entrypoint for Azure Provisioner."""

import logging
import sys
from typing import Any, Optional

import structlog
import typer

from .azure_client import AzureCloudClient
from .config import Settings, get_settings
from .provisioner import ResourceProvisioner

app = typer.Typer(
    name="azure-provisioner",
    help="Provision an Azure VM and its dependencies, or delete them",
    add_completion=False,
)

logger = structlog.get_logger()


def configure_logging(settings: Settings) -> None:
    """Configure structlog for the provisioner and stdlib logging for the Azure SDK."""
    level = logging.getLevelName(settings.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    processors: list[Any] = [
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    if settings.log_format == "json":
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
    logging.basicConfig(
        level=logging.WARNING,
        format="%(asctime)s [%(levelname)8s] %(name)s: %(message)s",
    )


def run(mode: str, settings: Settings) -> None:
    """Execute one mode against a freshly authenticated Azure client."""
    logger.info("AZURE_AUTH_LOCATION", auth_location=settings.auth_location)
    client = AzureCloudClient.from_settings(settings)
    provisioner = ResourceProvisioner(client, settings)
    if mode == "create":
        provisioner.create_objects()
    else:
        provisioner.delete_resource_group()


@app.command(context_settings={"allow_extra_args": True, "ignore_unknown_options": True})
def main(
    mode: Optional[list[str]] = typer.Argument(None, help="create or delete"),
) -> None:
    """Run `create` to provision and stop the VM, or `delete` to remove the resource group."""
    # Only the first argument selects a mode; anything after it is ignored
    command = mode[0] if mode else None
    if command not in ("create", "delete"):
        return

    settings = get_settings()
    configure_logging(settings)

    try:
        run(command, settings)
    except Exception as e:
        logger.exception("Provisioning failed", mode=command, error=str(e))
        raise typer.Exit(1)
