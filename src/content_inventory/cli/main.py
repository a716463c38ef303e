"""Click CLI group: publish-historic, build and clean commands."""

from __future__ import annotations

import asyncio
from datetime import UTC, date, datetime
from pathlib import Path

import click

from content_inventory.config import Settings, get_settings, validate_settings
from content_inventory.errors import InventoryError
from content_inventory.logging import configure_logging, level_for_verbosity
from content_inventory.models import PublishDecision
from content_inventory.release.historic import build_snapshot, publish_historic
from content_inventory.release.package import clean_package
from content_inventory.snapshot.materializer import materializer_from_settings


def _setup(verbose: int) -> Settings:
    settings = get_settings()
    configure_logging(level_for_verbosity(verbose, settings.log_level), settings.log_json)
    try:
        validate_settings(settings)
    except InventoryError as exc:
        raise click.ClickException(str(exc)) from exc
    return settings


def _fail(exc: InventoryError) -> click.ClickException:
    details = " ".join(f"{key}={value}" for key, value in exc.context.items())
    return click.ClickException(f"{exc} [{details}]" if details else str(exc))


@click.group()
def cli() -> None:
    """Build and publish historic content inventory snapshots."""


@cli.command("publish-historic")
@click.option(
    "--dry-run/--no-dry-run",
    "-n",
    "dry_run",
    default=True,
    show_default=True,
    help="Don't actually publish to the registry.",
)
@click.option(
    "--continue",
    "continue_on_duplicate",
    is_flag=True,
    help="Continue to the next release if a release already exists.",
)
@click.option(
    "--clean-up",
    "clean_up",
    is_flag=True,
    help="Remove the working copy once the run ends.",
)
@click.option(
    "-v",
    "--verbose",
    count=True,
    help="Show more information about calculating the status.",
)
def publish_historic_command(
    dry_run: bool,
    continue_on_duplicate: bool,
    clean_up: bool,
    verbose: int,
) -> None:
    """Publish one release per day from the start date through today."""
    settings = _setup(verbose)
    try:
        outcomes = asyncio.run(
            publish_historic(
                settings=settings,
                dry_run=dry_run,
                continue_on_duplicate=continue_on_duplicate,
                clean_up_after=clean_up,
            )
        )
    except InventoryError as exc:
        raise _fail(exc) from exc

    published = sum(1 for o in outcomes if o.decision is PublishDecision.PUBLISH)
    skipped = len(outcomes) - published
    mode = "dry-run" if dry_run else "published"
    click.echo(f"{len(outcomes)} day(s): {published} {mode}, {skipped} skipped")


@cli.command()
@click.option("--ref", type=str, default=None, help="Git reference (default: INVENTORY_REF).")
@click.option(
    "--date",
    "target_date",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    default=None,
    help="Snapshot date (default: today, UTC).",
)
@click.option("-v", "--verbose", count=True, help="Show debug output.")
def build(ref: str | None, target_date: datetime | None, verbose: int) -> None:
    """Build a single snapshot into the package directory."""
    settings = _setup(verbose)
    day: date = target_date.date() if target_date else datetime.now(UTC).date()
    package_dir = Path(settings.package_dir)
    clean_package(package_dir)
    try:
        identity = asyncio.run(
            build_snapshot(
                materializer_from_settings(settings),
                reference=ref or settings.inventory_ref,
                target_date=day,
                package_dir=package_dir,
                package_name=settings.package_name,
            )
        )
    except InventoryError as exc:
        exc.context.setdefault("day", day.isoformat())
        raise _fail(exc) from exc
    click.echo(f"built {settings.package_name}@{identity.version} in {package_dir}")


@cli.command()
@click.option("--all", "remove_all", is_flag=True, help="Also remove the working copy.")
def clean(remove_all: bool) -> None:
    """Remove the package directory."""
    settings = _setup(0)
    clean_package(Path(settings.package_dir))
    click.echo(f"removed {settings.package_dir}")
    if remove_all:
        materializer_from_settings(settings).clean_up()
        click.echo(f"removed {settings.inventory_dest_path}")


if __name__ == "__main__":
    cli()
