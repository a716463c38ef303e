"""Handle for the on-disk clone that every snapshot is checked out into.

The working copy is the only shared mutable resource of a run. All state
transitions on it (clone, fetch, switch, removal) go through this handle so
callers never touch the directory directly and tests can substitute a fake.
"""

from __future__ import annotations

import logging
import re
import shutil
from datetime import UTC, datetime
from pathlib import Path

from content_inventory.errors import (
    CheckoutError,
    CloneError,
    InventoryError,
    ResolutionError,
)
from content_inventory.process import non_empty_lines, run_command

logger = logging.getLogger(__name__)

# Hex SHAs and common ref shapes: branch names, tags, HEAD~2, origin/main.
_GIT_SHA_RE = re.compile(r"^[0-9a-fA-F]{4,40}$")
_GIT_REF_RE = re.compile(r"^[a-zA-Z0-9_./@~^{}\-]+$")


def validate_git_ref(ref: str) -> None:
    """Reject refs that are empty or could be read as options or shell syntax.

    Raises
    ------
    ResolutionError
        If *ref* does not look like a SHA or a plain ref name.
    """
    if not ref:
        raise ResolutionError("Git ref cannot be empty")
    if ref.startswith("-"):
        raise ResolutionError(f"Invalid git ref: {ref!r}")
    if not (_GIT_SHA_RE.match(ref) or _GIT_REF_RE.match(ref)):
        raise ResolutionError(f"Invalid git ref: {ref!r}")


def _last_line(text: str) -> str | None:
    lines = non_empty_lines(text)
    return lines[-1].strip() if lines else None


class WorkingCopy:
    """A git working copy at a fixed destination path."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def __repr__(self) -> str:
        return f"WorkingCopy({str(self.path)!r})"

    def is_repository(self) -> bool:
        return self.path.is_dir() and (self.path / ".git").exists()

    def clone(self, repo: str) -> None:
        run_command(
            [
                "gh",
                "repo",
                "clone",
                repo,
                str(self.path),
                "--",
                "--filter=blob:none",
                "--quiet",
            ],
            error=CloneError,
        )

    def fetch(self, remote: str = "origin") -> None:
        self._git(["fetch", remote], error=CheckoutError)

    def rev_list_before(self, reference: str, before: str) -> list[str]:
        """Return the newest commit hash on *reference* not after *before*.

        The result holds zero or one hashes; *before* is any date string git
        understands.
        """
        validate_git_ref(reference)
        result = self._git(
            ["rev-list", "-1", f"--before={before}", reference],
            error=ResolutionError,
        )
        return [line.strip() for line in non_empty_lines(result)]

    def switch_detached(self, ref: str) -> None:
        validate_git_ref(ref)
        self._git(
            ["switch", "--quiet", "--discard-changes", "--detach", ref],
            error=CheckoutError,
        )

    def rev_parse(self, ref: str = "HEAD", *, short: bool = False) -> str:
        validate_git_ref(ref)
        args = ["rev-parse", "--short", ref] if short else ["rev-parse", ref]
        value = _last_line(self._git(args, error=CheckoutError))
        if not value:
            raise CheckoutError(f"git rev-parse returned nothing for {ref}")
        return value

    def author_instant(self, ref: str = "HEAD") -> datetime:
        validate_git_ref(ref)
        raw = _last_line(
            self._git(["show", "--no-patch", "--format=%aI", ref], error=CheckoutError)
        )
        if not raw:
            raise CheckoutError(f"git show returned no author date for {ref}")
        try:
            return datetime.fromisoformat(raw).astimezone(UTC)
        except ValueError as exc:
            raise CheckoutError(f"Unparseable author date {raw!r} for {ref}") from exc

    def read_text(self, relative_path: str) -> str:
        path = self.path / relative_path
        try:
            return path.read_text(encoding="utf-8")
        except OSError as exc:
            raise CheckoutError(f"Could not read {path}: {exc}") from exc

    def remove(self) -> None:
        shutil.rmtree(self.path, ignore_errors=True)

    def _git(self, args: list[str], *, error: type[InventoryError]) -> str:
        return run_command(["git", *args], cwd=self.path, error=error).stdout
