"""Snapshot stage: working copy, commit resolution and inventory extraction."""

from content_inventory.snapshot.materializer import SnapshotMaterializer, materializer_from_settings
from content_inventory.snapshot.redirects import is_redirect_line, parse_redirects
from content_inventory.snapshot.resolver import cutoff_for, resolve
from content_inventory.snapshot.working_copy import WorkingCopy

__all__ = [
    "SnapshotMaterializer",
    "WorkingCopy",
    "cutoff_for",
    "is_redirect_line",
    "materializer_from_settings",
    "parse_redirects",
    "resolve",
]
