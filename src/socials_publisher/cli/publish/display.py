"""Display functions for publish commands - pure functions for Rich output."""

from __future__ import annotations

import json
from typing import Any, Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from socials_publisher.instagram import FieldSpec, ItemResult, ResourceOption, get_error_info

from .params import PublishParams


def show_publish_config(console: Console, params: PublishParams, item_count: int) -> None:
    """Display batch publish configuration panel."""
    mode = "Continue on fail" if params.continue_on_fail else "Fail fast"

    console.print(Panel(
        f"Publishing [cyan]{item_count}[/cyan] item(s) from [cyan]{params.batch_file}[/cyan]\n"
        f"Default node: [yellow]{params.node or 'per item'}[/yellow]\n"
        f"API version: [yellow]{params.api_version}[/yellow]\n"
        f"Mode: [yellow]{mode}[/yellow]\n"
        f"Concurrency: [yellow]{params.concurrency}[/yellow]\n"
        f"Dry Run: [{'yellow' if params.dry_run else 'dim'}]{params.dry_run}[/]",
        title="Instagram Publish",
    ))


def error_hint(data: dict[str, Any]) -> Optional[str]:
    """User-facing explanation for a failed item carrying a Graph error code."""
    code = data.get("code")
    subcode = data.get("error_subcode")
    if code is None and subcode is None:
        return None
    return get_error_info(code, subcode)["user_message"]


def show_results(console: Console, results: list[ItemResult]) -> None:
    """Display per-item results and a summary panel."""
    table = Table(title="Publish Results")
    table.add_column("#", style="dim")
    table.add_column("Status")
    table.add_column("Media ID / Error", style="white")
    table.add_column("Hint", style="yellow")

    for result in results:
        if result.success:
            status = "[green]published[/green]"
            detail = str(result.json.get("id", ""))
            hint = ""
        else:
            status = f"[red]{result.json.get('kind', 'failed')}[/red]"
            detail = str(result.json.get("message") or result.json.get("error", ""))[:80]
            hint = error_hint(result.json) or ""
        table.add_row(str(result.item_index), status, detail, hint)

    console.print(table)

    success_count = sum(1 for r in results if r.success)
    failed_count = len(results) - success_count

    if failed_count == 0:
        console.print(Panel(
            f"[bold green]Successfully published {success_count} item(s)![/bold green]",
            border_style="green",
        ))
    elif success_count > 0:
        console.print(Panel(
            f"[yellow]Published {success_count} item(s), {failed_count} failed[/yellow]",
            border_style="yellow",
        ))
    else:
        console.print(Panel(
            f"[red]All {failed_count} item(s) failed to publish[/red]",
            border_style="red",
        ))


def show_preview(console: Console, previews: list[dict[str, Any]]) -> None:
    """Display the requests a dry run would send."""
    for preview in previews:
        index = preview["item_index"]
        if "error" in preview:
            console.print(f"[red]Item {index}: {preview['kind']}: {preview['error']}[/red]")
            continue
        body = (
            f"[bold]Node:[/] {preview['node'] or '[red]missing[/red]'}\n"
            f"[bold]Query:[/]\n{json.dumps(preview['query'], indent=2, ensure_ascii=False)}"
        )
        for position, child in enumerate(preview.get("children", []), start=1):
            body += f"\n[bold]Child {position}:[/] {json.dumps(child, ensure_ascii=False)}"
        console.print(Panel(
            body,
            title=f"Item {index} ({preview['resource']})",
            border_style="dim",
        ))
    console.print("\n[yellow]Dry run - nothing was sent[/yellow]")


def show_publish_error(console: Console, error: str, details: Optional[dict] = None) -> None:
    """Display publish error."""
    console.print(f"\n[red]Error: {error}[/red]")
    if details:
        for key, value in details.items():
            if value is None:
                continue
            console.print(f"  [dim]{key}:[/dim] [yellow]{value}[/yellow]")


def show_resources(
    console: Console,
    options: list[ResourceOption],
    fields: list[FieldSpec],
    publishable: set[str],
) -> None:
    """Display the resource options and their merged input fields."""
    table = Table(title="Resources")
    table.add_column("Name", style="cyan")
    table.add_column("Value", style="yellow")
    table.add_column("Publishable")
    table.add_column("Description", style="white")
    for option in options:
        supported = "[green]yes[/green]" if option.value in publishable else "[red]no[/red]"
        table.add_row(option.name, option.value, supported, option.description)
    console.print(table)

    field_table = Table(title="Fields")
    field_table.add_column("Field", style="cyan")
    field_table.add_column("Required", style="yellow")
    field_table.add_column("Resources", style="dim")
    field_table.add_column("Description", style="white")
    for spec in fields:
        field_table.add_row(
            spec.name,
            "yes" if spec.required else "no",
            ", ".join(spec.resources),
            spec.description,
        )
    console.print(field_table)
