"""Parser for the content repository's tab-separated redirect file."""

from __future__ import annotations

from content_inventory.models import RedirectTable

PATH_ROOT = "/"
SEPARATOR = "\t"


def is_redirect_line(line: str) -> bool:
    return line.startswith(PATH_ROOT) and SEPARATOR in line


def parse_redirects(raw: str) -> RedirectTable:
    """Build a source -> target table from raw redirect file text.

    Lines that are not redirects (comments, blanks, rows without a tab or
    with an empty field) are dropped. A later row for the same source
    replaces the earlier one.
    """
    table: RedirectTable = {}
    for line in raw.split("\n"):
        line = line.removesuffix("\r")
        if not is_redirect_line(line):
            continue
        source, target = line.split(SEPARATOR, 2)[:2]
        if source and target:
            table[source] = target
    return table
