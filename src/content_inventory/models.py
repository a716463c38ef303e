"""Value types shared by the snapshot and release stages."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from enum import Enum
from typing import Any

RedirectTable = dict[str, str]
PublishedReleaseSet = dict[str, str]


@dataclass(frozen=True, slots=True)
class SnapshotRequest:
    reference: str
    target_date: date


@dataclass(frozen=True, slots=True)
class ResolvedCommit:
    full_hash: str
    short_hash: str
    author_instant: datetime

    def __post_init__(self) -> None:
        if self.author_instant.tzinfo is None:
            raise ValueError("author_instant must be timezone-aware")

    def to_metadata(self) -> dict[str, str]:
        return {
            "commit": self.full_hash,
            "commitShort": self.short_hash,
            "authorDate": self.author_instant.astimezone(UTC).isoformat().replace("+00:00", "Z"),
        }


@dataclass(slots=True)
class InventoryArtifact:
    """One day's extracted inventory, ready to be written as a package."""

    version: str
    commit: ResolvedCommit
    inventory: Any
    redirects: RedirectTable = field(default_factory=dict)

    def to_object(self) -> dict[str, Any]:
        return {
            "metadata": self.commit.to_metadata(),
            "inventory": self.inventory,
            "redirects": dict(self.redirects),
        }


class PublishDecision(str, Enum):
    PUBLISH = "publish"
    SKIP_ALREADY_PUBLISHED = "skip_already_published"
    ABORT_ALREADY_PUBLISHED = "abort_already_published"


@dataclass(frozen=True, slots=True)
class DayOutcome:
    day: date
    version: str
    short_hash: str
    decision: PublishDecision
    dry_run: bool


def date_stamp(day: date) -> str:
    """Calendar date with separators removed, e.g. ``20231005``."""
    return day.isoformat().replace("-", "")


def snapshot_version(base: str, day: date, short_hash: str) -> str:
    return f"{base}-{date_stamp(day)}-{short_hash}"
