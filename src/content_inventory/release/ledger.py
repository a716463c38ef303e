"""Query the registry for versions of the package that are already published."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable

from content_inventory.errors import LedgerQueryError
from content_inventory.models import PublishedReleaseSet
from content_inventory.process import run_command

logger = logging.getLogger(__name__)

LedgerFetch = Callable[[str], PublishedReleaseSet]


def fetch_publish_times(package_name: str) -> PublishedReleaseSet:
    """Return the registry's version -> publish time table for *package_name*.

    Raises
    ------
    LedgerQueryError
        If ``npm view`` fails or its output is not a JSON object.
    """
    result = run_command(
        ["npm", "view", package_name, "time", "--json"],
        error=LedgerQueryError,
    )
    try:
        decoded = json.loads(result.stdout)
    except json.JSONDecodeError as exc:
        raise LedgerQueryError(f"npm view returned invalid JSON: {exc}") from exc
    if not isinstance(decoded, dict):
        raise LedgerQueryError(f"npm view returned {type(decoded).__name__}, expected object")
    return {str(key): str(value) for key, value in decoded.items()}


def list_published(
    package_name: str,
    *,
    fetch: LedgerFetch = fetch_publish_times,
) -> PublishedReleaseSet:
    """Return published versions, or an empty set if the registry can't be queried.

    Fail-open: an unpublished package or an unreachable registry must not
    block the first publish. The registry itself rejects true duplicates.
    """
    try:
        return fetch(package_name)
    except Exception as exc:
        logger.warning("Could not query published versions of %s: %s", package_name, exc)
        return {}
