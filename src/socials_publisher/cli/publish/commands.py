"""Publish CLI commands - thin wrappers orchestrating params, validation, display, and service."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Optional

import typer

from socials_publisher.config import PublisherSettings
from socials_publisher.instagram import get_registry

from ..core.console import console
from ..core.types import Failure
from .display import (
    show_preview,
    show_publish_config,
    show_publish_error,
    show_resources,
    show_results,
)
from .params import PublishParams
from .service import PublishService, load_batch_file
from .validators import validate_publish_params


def publish(
    batch_file: Path = typer.Argument(..., help="YAML or JSON file with the items to publish"),
    continue_on_fail: Optional[bool] = typer.Option(
        None,
        "--continue-on-fail/--fail-fast",
        help="Record failures and keep going, or stop at the first failure",
    ),
    concurrency: Optional[int] = typer.Option(None, "--concurrency", "-c", help="Items published at once"),
    api_version: Optional[str] = typer.Option(None, "--api-version", help="Default Graph API version"),
    node: Optional[str] = typer.Option(None, "--node", help="Default Instagram user ID for items"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Validate and show requests without sending"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write results JSON to this file"),
) -> None:
    """Publish a batch of images, reels, stories, and carousels to Instagram.

    Each item goes through container creation, readiness polling, and the
    publish call. Exits with status 1 if any item failed.
    """
    settings = PublisherSettings()

    # Build immutable params from CLI args
    params = PublishParams.from_cli(
        batch_file=batch_file,
        settings=settings,
        continue_on_fail=continue_on_fail,
        concurrency=concurrency,
        api_version=api_version,
        node=node,
        dry_run=dry_run,
        output=output,
    )

    # Validate params
    validation = validate_publish_params(params, settings)
    if isinstance(validation, Failure):
        show_publish_error(console, validation.error, validation.details)
        raise typer.Exit(1)

    loaded = load_batch_file(
        params.batch_file,
        default_node=params.node,
        default_api_version=params.api_version,
    )
    if isinstance(loaded, Failure):
        show_publish_error(console, loaded.error, loaded.details)
        raise typer.Exit(1)
    items = loaded.value

    # Display configuration
    show_publish_config(console, params, len(items))

    service = PublishService()

    if params.dry_run:
        previews = service.preview(items)
        show_preview(console, previews)
        if any("error" in p for p in previews):
            raise typer.Exit(1)
        return

    result = asyncio.run(service.publish(
        items,
        settings=settings,
        continue_on_fail=params.continue_on_fail,
        concurrency=params.concurrency,
    ))

    if isinstance(result, Failure):
        show_publish_error(console, result.error, result.details)
        raise typer.Exit(1)

    results = result.value
    show_results(console, results)

    if params.output is not None:
        service.write_results(results, params.output)
        console.print(f"[dim]Results written to {params.output}[/dim]")
    else:
        console.print_json(json.dumps([r.to_dict() for r in results], default=str))

    if any(not r.success for r in results):
        raise typer.Exit(1)


def resources() -> None:
    """List the publishable resources and their input fields."""
    registry = get_registry()
    publishable = set(registry.available_resources())
    show_resources(console, registry.options(), registry.resource_fields(), publishable)
