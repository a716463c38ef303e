"""Publish one inventory snapshot per calendar day, oldest first.

The run starts at a fixed date and walks forward one day at a time until it
has handled today. Each day is built, checked against the registry, then
published, skipped or aborted, and torn down before the next day starts.
Re-running after a failure is safe: days that already reached the registry
are detected by their date stamp or short commit hash.
"""

from __future__ import annotations

import logging
from datetime import UTC, date, datetime, time, timedelta
from pathlib import Path
from typing import Protocol

from content_inventory.config import Settings, get_settings
from content_inventory.errors import DuplicateDetectedError, InventoryError
from content_inventory.logging import bind_context, clear_context
from content_inventory.models import (
    DayOutcome,
    InventoryArtifact,
    PublishDecision,
    PublishedReleaseSet,
    date_stamp,
)
from content_inventory.release.ledger import LedgerFetch, fetch_publish_times, list_published
from content_inventory.release.package import (
    PackageIdentity,
    clean_package,
    publish_package,
    read_package_identity,
    write_package,
)
from content_inventory.snapshot.materializer import materializer_from_settings

logger = logging.getLogger(__name__)

ONE_DAY = timedelta(days=1)


class Materializer(Protocol):
    async def materialize(self, reference: str, target_date: date) -> InventoryArtifact: ...

    def clean_up(self) -> None: ...


class Publisher(Protocol):
    def __call__(self, package_dir: Path, *, dry_run: bool) -> None: ...


def find_duplicate(
    published: PublishedReleaseSet,
    stamp: str,
    short_hash: str,
) -> str | None:
    """Return the first published key containing *stamp* or *short_hash*."""
    for version in published:
        if stamp in version or short_hash in version:
            return version
    return None


def decide(match: str | None, *, continue_on_duplicate: bool) -> PublishDecision:
    if match is None:
        return PublishDecision.PUBLISH
    if continue_on_duplicate:
        return PublishDecision.SKIP_ALREADY_PUBLISHED
    return PublishDecision.ABORT_ALREADY_PUBLISHED


def start_of_day(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=UTC)


async def build_snapshot(
    materializer: Materializer,
    *,
    reference: str,
    target_date: date,
    package_dir: Path,
    package_name: str,
) -> PackageIdentity:
    """Materialize *target_date* and write it to *package_dir*."""
    artifact = await materializer.materialize(reference, target_date)
    write_package(artifact, package_dir, package_name)
    return read_package_identity(package_dir)


async def publish_historic(
    *,
    settings: Settings | None = None,
    dry_run: bool = True,
    continue_on_duplicate: bool = False,
    now: datetime | None = None,
    materializer: Materializer | None = None,
    fetch_published: LedgerFetch = fetch_publish_times,
    publish: Publisher = publish_package,
    clean_up_after: bool = False,
) -> list[DayOutcome]:
    """Walk from the start date to *now*, publishing each day's snapshot.

    Any build failure and any duplicate (unless *continue_on_duplicate*)
    stops the whole run by raising. In dry-run mode every step runs and only
    the final publish is rehearsed.
    """
    settings = settings or get_settings()
    now = now or datetime.now(UTC)
    materializer = materializer or materializer_from_settings(settings)
    package_dir = Path(settings.package_dir)
    current = start_of_day(settings.historic_start_date)

    outcomes: list[DayOutcome] = []
    try:
        while current <= now:
            outcome = await _process_day(
                current.date(),
                settings=settings,
                dry_run=dry_run,
                continue_on_duplicate=continue_on_duplicate,
                materializer=materializer,
                package_dir=package_dir,
                fetch_published=fetch_published,
                publish=publish,
            )
            outcomes.append(outcome)
            current = current + ONE_DAY
    finally:
        if clean_up_after:
            materializer.clean_up()

    logger.info("Processed %d day(s) up to %s", len(outcomes), now.isoformat())
    return outcomes


async def _process_day(
    day: date,
    *,
    settings: Settings,
    dry_run: bool,
    continue_on_duplicate: bool,
    materializer: Materializer,
    package_dir: Path,
    fetch_published: LedgerFetch,
    publish: Publisher,
) -> DayOutcome:
    stamp = date_stamp(day)
    identity: PackageIdentity | None = None
    bind_context(day=day.isoformat())
    clean_package(package_dir)
    try:
        identity = await build_snapshot(
            materializer,
            reference=settings.inventory_ref,
            target_date=day,
            package_dir=package_dir,
            package_name=settings.package_name,
        )
        logger.debug(
            "Attempting to publish for %s and %s as %s",
            stamp,
            identity.commit_short,
            identity.version,
        )
        published = list_published(settings.package_name, fetch=fetch_published)
        match = find_duplicate(published, stamp, identity.commit_short)
        decision = decide(match, continue_on_duplicate=continue_on_duplicate)

        if match is not None and decision is PublishDecision.ABORT_ALREADY_PUBLISHED:
            raise DuplicateDetectedError(
                date_stamp=stamp,
                short_hash=identity.commit_short,
                version=identity.version,
                published_key=match,
            )
        if decision is PublishDecision.SKIP_ALREADY_PUBLISHED:
            logger.warning(
                "%s or %s is already published as %s; skipping this release",
                stamp,
                identity.commit_short,
                match,
            )
        else:
            publish(package_dir, dry_run=dry_run)

        return DayOutcome(
            day=day,
            version=identity.version,
            short_hash=identity.commit_short,
            decision=decision,
            dry_run=dry_run,
        )
    except InventoryError as exc:
        exc.context.setdefault("day", day.isoformat())
        if identity is not None:
            exc.context.setdefault("commit", identity.commit_short)
            exc.context.setdefault("version", identity.version)
        logger.error("Historic publish stopped on %s: %s", day.isoformat(), exc)
        raise
    finally:
        clean_package(package_dir)
        clear_context()
