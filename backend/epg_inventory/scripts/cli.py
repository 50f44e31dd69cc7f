"""Administrative CLI for SKU sequences.

Usage:
    epg-sku preview Lighting Chauvet
    epg-sku sequences
    epg-sku reset LGT CHV --to 40 --yes
    epg-sku auto-generation off
"""

import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeVar

import click
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from epg_inventory.logging import setup_logging
from epg_inventory.services.exceptions import ServiceError
from epg_inventory.services.sku.admin_service import SkuAdminService
from epg_inventory.services.sku.codec import normalize
from epg_inventory.services.sku.prefixes import get_prefix_resolver
from epg_inventory.services.sku.settings_service import AutoGenerationStatus

T = TypeVar("T")


def _run(ctx: click.Context, operation: Callable[[SkuAdminService], Awaitable[T]]) -> T:
    """Run one admin operation in a fresh session, turning service errors into CLI errors."""
    session_maker: async_sessionmaker[AsyncSession] = ctx.obj["session_maker"]

    async def runner() -> T:
        async with session_maker() as session:
            return await operation(SkuAdminService(session))

    try:
        return asyncio.run(runner())
    except ServiceError as e:
        raise click.ClickException(str(e)) from e


def _resolve_code(kind: str, value: str) -> str:
    """Accept either a registered code ("LGT") or a master-data name ("Lighting")."""
    resolver = get_prefix_resolver()
    code = normalize(value)
    if kind == "category":
        if resolver.category_name(code) is not None:
            return code
        return resolver.resolve_category_prefix(value)
    if resolver.brand_name(code) is not None:
        return code
    return resolver.resolve_brand_prefix(value)


def _echo_status(status: AutoGenerationStatus) -> None:
    state = "enabled" if status.enabled else "disabled"
    click.echo(f"Auto SKU generation: {state}")
    if status.forced_by_environment:
        click.echo("  (forced off by DISABLE_AUTO_SKU_GENERATION)")


@click.group()
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Inspect and adjust SKU sequences."""
    setup_logging()
    ctx.ensure_object(dict)
    if "session_maker" not in ctx.obj:
        from epg_inventory.db import async_session_maker

        ctx.obj["session_maker"] = async_session_maker


@cli.command()
@click.argument("category")
@click.argument("brand")
@click.pass_context
def preview(ctx: click.Context, category: str, brand: str) -> None:
    """Show the next SKU for CATEGORY and BRAND without consuming it."""
    try:
        category_prefix = _resolve_code("category", category)
        brand_prefix = _resolve_code("brand", brand)
    except ServiceError as e:
        raise click.ClickException(str(e)) from e

    click.echo(_run(ctx, lambda service: service.preview(category_prefix, brand_prefix)))


@cli.command()
@click.pass_context
def sequences(ctx: click.Context) -> None:
    """List all sequence counters."""
    summaries = _run(ctx, lambda service: service.list_sequences())
    if not summaries:
        click.echo("No sequences yet.")
        return

    for summary in summaries:
        next_sku = summary.next_sku or "(exhausted)"
        click.echo(
            f"{summary.category_prefix}-{summary.brand_prefix}  "
            f"{summary.category_name} / {summary.brand_name}  "
            f"last={summary.last_issued}  next={next_sku}  remaining={summary.remaining}"
        )


@cli.command()
@click.pass_context
def stats(ctx: click.Context) -> None:
    """Print SKU usage statistics."""
    statistics = _run(ctx, lambda service: service.get_statistics())

    click.echo(f"Instances:  {statistics.total_instances}")
    click.echo(f"Issued:     {statistics.total_issued}")
    click.echo(f"Sequences:  {statistics.total_sequences}")
    for category, brands in statistics.sequences_by_category.items():
        click.echo(f"{category}:")
        for brand in brands:
            click.echo(f"  {brand.brand_prefix}  last={brand.last_issued}  remaining={brand.remaining}")


@cli.command()
@click.argument("sku")
@click.pass_context
def validate(ctx: click.Context, sku: str) -> None:
    """Check whether SKU can be assigned manually."""
    result = _run(ctx, lambda service: service.validate(sku))
    click.echo(f"{result.sku}: {result.message}")
    if not result.is_available:
        ctx.exit(1)


@cli.command()
@click.argument("category")
@click.argument("brand")
@click.option("--to", "last_issued", type=click.IntRange(min=0), default=0, show_default=True, help="New last issued number")
@click.option("--yes", is_flag=True, help="Confirm the reset")
@click.pass_context
def reset(ctx: click.Context, category: str, brand: str, last_issued: int, yes: bool) -> None:
    """Reset the counter for CATEGORY and BRAND.

    Numbers below the old value can be issued again; generation will fail with
    a collision for any that are still held by an instance.
    """
    if not yes:
        raise click.UsageError("Resetting a sequence is destructive; pass --yes to confirm")

    try:
        category_prefix = _resolve_code("category", category)
        brand_prefix = _resolve_code("brand", brand)
    except ServiceError as e:
        raise click.ClickException(str(e)) from e

    result = _run(ctx, lambda service: service.reset_sequence(category_prefix, brand_prefix, last_issued))
    click.echo(
        f"Reset {result.category_prefix}-{result.brand_prefix}: "
        f"{result.old_sequence} -> {result.new_sequence} (next {result.next_sku or 'exhausted'})"
    )


@cli.command("auto-generation")
@click.argument("state", type=click.Choice(["on", "off", "status"]), default="status")
@click.pass_context
def auto_generation(ctx: click.Context, state: str) -> None:
    """Turn auto SKU generation on or off, or show its status."""
    if state == "status":
        status = _run(ctx, lambda service: service.auto_generation_status())
    else:
        enabled = state == "on"
        status = _run(ctx, lambda service: service.toggle_auto_generation(enabled))
    _echo_status(status)


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
