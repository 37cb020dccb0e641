"""CLI commands for inspecting stored resources.

Provides ``list`` and ``stats`` backed by the same ResourceService the API uses.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

import typer
from loguru import logger

from content_api.lib.resources.types import ResourceCategory, ResourceType
from content_api.schemas.resource import ResourceFilters

if TYPE_CHECKING:
    from content_api.services.resource_service import ResourceService

resources_app = typer.Typer()


@resources_app.command("list")
def list_resources(
    category: ResourceCategory | None = typer.Option(None, "--category", help="Filter by category"),
    resource_type: ResourceType | None = typer.Option(None, "--type", help="Filter by resource type"),
    visibility: str | None = typer.Option(None, "--visibility", help="Filter by visibility: public or private"),
    search: str | None = typer.Option(None, "--search", help="Substring match on title/description"),
    limit: int | None = typer.Option(None, "--limit", min=1, help="Maximum documents to fetch"),
) -> None:
    """List resources, newest first."""
    if visibility not in (None, "public", "private"):
        raise typer.BadParameter("must be 'public' or 'private'", param_hint="--visibility")
    is_public = None if visibility is None else visibility == "public"
    filters = ResourceFilters(category=category, type=resource_type, is_public=is_public, limit=limit, search=search)

    async def _impl(service: ResourceService) -> None:
        result = await service.list_resources(filters)
        if result.error is not None:
            logger.error(result.error.message)
            raise typer.Exit(code=1)
        assert result.value is not None  # Guaranteed by the error check
        for resource in result.value:
            visibility = "public" if resource.is_public else "private"
            typer.echo(
                f"{resource.id}  {resource.type:<10} {resource.category:<14} {visibility:<8} "
                f"{resource.download_count:>6}  {resource.title}"
            )
        typer.echo(f"\n{len(result.value)} resources")

    asyncio.run(_with_service(_impl))


@resources_app.command("stats")
def stats() -> None:
    """Show resource totals and per-category counts."""

    async def _impl(service: ResourceService) -> None:
        result = await service.get_stats()
        if result.error is not None:
            logger.error(result.error.message)
            raise typer.Exit(code=1)
        assert result.value is not None  # Guaranteed by the error check
        typer.echo(f"Total resources: {result.value.total}")
        typer.echo(f"Total downloads: {result.value.total_downloads}")
        for category, count in sorted(result.value.by_category.items()):
            typer.echo(f"  {category:<14} {count}")

    asyncio.run(_with_service(_impl))


async def _with_service(action: Callable[[ResourceService], Awaitable[None]]) -> None:
    """Initialize the engine, run ``action`` with a ResourceService, then dispose."""
    from content_api.core.config import get_settings
    from content_api.core.database import dispose_engine, init_engine
    from content_api.core.dependencies import build_resource_service

    settings = get_settings()
    init_engine(settings.database_url, echo=False, schema=settings.database_schema)
    try:
        await action(build_resource_service(settings))
    finally:
        await dispose_engine()
