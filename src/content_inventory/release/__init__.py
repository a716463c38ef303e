"""Release stage: package building, registry ledger and the historic driver."""

from content_inventory.release.historic import decide, find_duplicate, publish_historic
from content_inventory.release.ledger import fetch_publish_times, list_published

__all__ = [
    "decide",
    "fetch_publish_times",
    "find_duplicate",
    "list_published",
    "publish_historic",
]
