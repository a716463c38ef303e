"""Map a calendar date onto the commit a reference pointed at on that day."""

from __future__ import annotations

import logging
from datetime import UTC, date, datetime, time, timedelta

from content_inventory.errors import NoCommitFoundError
from content_inventory.models import ResolvedCommit
from content_inventory.snapshot.working_copy import WorkingCopy

logger = logging.getLogger(__name__)

# A commit made exactly at midnight must still count as that day's commit.
CUTOFF_OFFSET = timedelta(seconds=1)


def cutoff_for(target_date: date) -> datetime:
    return datetime.combine(target_date, time.min, tzinfo=UTC) + CUTOFF_OFFSET


def git_date(instant: datetime) -> str:
    return instant.astimezone(UTC).strftime("%Y-%m-%d %H:%M:%S +0000")


def resolve(working_copy: WorkingCopy, reference: str, target_date: date) -> ResolvedCommit:
    """Return the last commit on *reference* at or before the cutoff for *target_date*.

    The working copy's remote refs must already be fetched.

    Raises
    ------
    NoCommitFoundError
        If *reference* has no commit at or before the cutoff.
    """
    cutoff = cutoff_for(target_date)
    logger.info("Looking for commit on %s at %s", reference, cutoff.isoformat())
    hashes = working_copy.rev_list_before(reference, git_date(cutoff))
    if not hashes:
        raise NoCommitFoundError(f"Could not find commit near to {cutoff.isoformat()}")
    full_hash = hashes[-1]

    commit = ResolvedCommit(
        full_hash=full_hash,
        short_hash=working_copy.rev_parse(full_hash, short=True),
        author_instant=working_copy.author_instant(full_hash),
    )
    # rev-list filters on committer date; rebased commits can carry a later author date.
    if commit.author_instant > cutoff:
        logger.warning(
            "Commit %s was authored at %s, after cutoff %s",
            commit.short_hash,
            commit.author_instant.isoformat(),
            cutoff.isoformat(),
        )
    logger.debug("Resolved %s on %s to %s", reference, target_date.isoformat(), full_hash)
    return commit
