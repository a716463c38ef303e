"""Turn one historic commit of the content repository into inventory data."""

from __future__ import annotations

import asyncio
import json
import logging
from datetime import date
from pathlib import Path
from typing import Any

from content_inventory.config import Settings
from content_inventory.errors import (
    DependencyInstallError,
    ExtractionError,
    MaterializationError,
)
from content_inventory.models import (
    InventoryArtifact,
    RedirectTable,
    ResolvedCommit,
    snapshot_version,
)
from content_inventory.process import run_command
from content_inventory.snapshot.redirects import parse_redirects
from content_inventory.snapshot.resolver import resolve
from content_inventory.snapshot.working_copy import WorkingCopy

logger = logging.getLogger(__name__)

DEFAULT_REPO = "mdn/content"
DEFAULT_REDIRECTS_PATH = "files/en-us/_redirects.txt"
INSTALL_COMMAND = ["npm", "ci"]
INVENTORY_COMMAND = ["npm", "--silent", "run", "content", "--", "inventory", "--quiet"]


class SnapshotMaterializer:
    """Clone, check out and extract inventory data from a content repository.

    The materializer owns a :class:`WorkingCopy`. Every stage mutates that
    working copy, so two materializers must never share a destination.
    """

    def __init__(
        self,
        working_copy: WorkingCopy,
        *,
        repo: str = DEFAULT_REPO,
        redirects_path: str = DEFAULT_REDIRECTS_PATH,
        version_base: str = "0.0.0",
    ) -> None:
        self.working_copy = working_copy
        self.repo = repo
        self.redirects_path = redirects_path
        self.version_base = version_base

        self.raw_inventory_stdout = ""
        self.raw_inventory_stderr = ""
        self.raw_redirects: str | None = None

    async def materialize(self, reference: str, target_date: date) -> InventoryArtifact:
        """Build the artifact for *reference* as of *target_date*.

        Any failing stage raises; no partial artifact is returned.
        """
        self._reset()
        self.clone()
        commit = self.checkout(reference, target_date)
        self.load_redirects()
        self.install_deps()
        code = await self.load_inventory()
        if code is None or code != 0:
            logger.error(self.raw_inventory_stderr)
            raise ExtractionError(
                f"Inventory extraction exited with {code} for {commit.short_hash}",
                stderr=self.raw_inventory_stderr,
            )
        return InventoryArtifact(
            version=snapshot_version(self.version_base, target_date, commit.short_hash),
            commit=commit,
            inventory=self.inventory(),
            redirects=self.redirects(),
        )

    def clone(self) -> None:
        if self.working_copy.is_repository():
            logger.info("Reusing existing clone at %s", self.working_copy.path)
            return
        logger.info("Cloning %s to %s", self.repo, self.working_copy.path)
        self.working_copy.clone(self.repo)

    def checkout(self, reference: str, target_date: date | None = None) -> ResolvedCommit:
        logger.debug("Fetching from origin")
        self.working_copy.fetch()
        ref = reference
        if target_date is not None:
            ref = resolve(self.working_copy, reference, target_date).full_hash
        logger.info("Checking out %s", ref)
        self.working_copy.switch_detached(ref)
        return self.metadata()

    def load_redirects(self) -> None:
        self.raw_redirects = self.working_copy.read_text(self.redirects_path)

    def install_deps(self) -> None:
        logger.info("Installing dependencies...")
        run_command(
            INSTALL_COMMAND,
            cwd=self.working_copy.path,
            env={"CI": "true"},
            capture=False,
            error=DependencyInstallError,
        )

    async def load_inventory(self) -> int | None:
        """Run the inventory command, buffering stdout and stderr separately.

        Returns the exit code, or None if the process could not be started.
        """
        try:
            proc = await asyncio.create_subprocess_exec(
                *INVENTORY_COMMAND,
                cwd=str(self.working_copy.path),
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            self.raw_inventory_stderr += f"could not start {' '.join(INVENTORY_COMMAND)}: {exc}"
            return None
        stdout, stderr = await proc.communicate()
        self.raw_inventory_stdout += stdout.decode("utf-8", errors="replace")
        self.raw_inventory_stderr += stderr.decode("utf-8", errors="replace")
        return proc.returncode

    def metadata(self) -> ResolvedCommit:
        return ResolvedCommit(
            full_hash=self.working_copy.rev_parse("HEAD"),
            short_hash=self.working_copy.rev_parse("HEAD", short=True),
            author_instant=self.working_copy.author_instant("HEAD"),
        )

    def inventory(self) -> Any:
        try:
            return json.loads(self.raw_inventory_stdout)
        except json.JSONDecodeError as exc:
            raise ExtractionError(
                f"Inventory output is not valid JSON: {exc}",
                stderr=self.raw_inventory_stderr,
            ) from exc

    def redirects(self) -> RedirectTable:
        if self.raw_redirects is None:
            raise MaterializationError(
                "Redirects haven't been loaded. Call materialize() or load_redirects() first."
            )
        return parse_redirects(self.raw_redirects)

    def to_object(self) -> dict[str, Any]:
        return {
            "metadata": self.metadata().to_metadata(),
            "inventory": self.inventory(),
            "redirects": self.redirects(),
        }

    def clean_up(self) -> None:
        logger.info("Cleaning up %s", self.working_copy.path)
        self.working_copy.remove()

    def _reset(self) -> None:
        self.raw_inventory_stdout = ""
        self.raw_inventory_stderr = ""
        self.raw_redirects = None


def materializer_from_settings(settings: Settings) -> SnapshotMaterializer:
    return SnapshotMaterializer(
        WorkingCopy(Path(settings.inventory_dest_path)),
        repo=settings.inventory_repo,
        redirects_path=settings.inventory_redirects_path,
        version_base=settings.package_version_base,
    )
