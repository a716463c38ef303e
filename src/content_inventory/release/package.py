"""Write, inspect, clean and publish the package directory for one snapshot."""

from __future__ import annotations

import json
import logging
import shutil
from dataclasses import dataclass
from pathlib import Path

from content_inventory.errors import PackageError, PublishError
from content_inventory.models import InventoryArtifact
from content_inventory.process import run_command

logger = logging.getLogger(__name__)

INDEX_FILE = "index.json"
DESCRIPTOR_FILE = "package.json"


@dataclass(frozen=True, slots=True)
class PackageIdentity:
    version: str
    commit_short: str


def package_descriptor(package_name: str, version: str) -> dict[str, object]:
    return {
        "name": package_name,
        "version": version,
        "description": "Inventory and redirects of a daily snapshot of the content repository",
        "license": "CC-BY-SA-2.5",
        "main": INDEX_FILE,
        "files": [INDEX_FILE],
    }


def write_package(artifact: InventoryArtifact, package_dir: Path, package_name: str) -> Path:
    package_dir.mkdir(parents=True, exist_ok=True)
    (package_dir / INDEX_FILE).write_text(json.dumps(artifact.to_object(), indent=2) + "\n")
    (package_dir / DESCRIPTOR_FILE).write_text(
        json.dumps(package_descriptor(package_name, artifact.version), indent=2) + "\n"
    )
    logger.info("Wrote %s %s to %s", package_name, artifact.version, package_dir)
    return package_dir


def _read_json(path: Path) -> dict[str, object]:
    try:
        decoded = json.loads(path.read_text())
    except OSError as exc:
        raise PackageError(f"Could not read {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise PackageError(f"{path} is not valid JSON: {exc}") from exc
    if not isinstance(decoded, dict):
        raise PackageError(f"{path} does not hold a JSON object")
    return decoded


def read_package_identity(package_dir: Path) -> PackageIdentity:
    """Read the version and short commit hash back from a built package."""
    version = _read_json(package_dir / DESCRIPTOR_FILE).get("version")
    metadata = _read_json(package_dir / INDEX_FILE).get("metadata")
    commit_short = metadata.get("commitShort") if isinstance(metadata, dict) else None
    if not isinstance(version, str) or not version:
        raise PackageError(f"{package_dir / DESCRIPTOR_FILE} has no version")
    if not isinstance(commit_short, str) or not commit_short:
        raise PackageError(f"{package_dir / INDEX_FILE} has no metadata.commitShort")
    return PackageIdentity(version=version, commit_short=commit_short)


def clean_package(package_dir: Path) -> None:
    shutil.rmtree(package_dir, ignore_errors=True)


def publish_package(package_dir: Path, *, dry_run: bool) -> None:
    cmd = ["npm", "publish", "--access", "public"]
    if dry_run:
        cmd.append("--dry-run")
    logger.info("Publishing %s%s", package_dir, " (dry run)" if dry_run else "")
    run_command(cmd, cwd=package_dir, capture=False, error=PublishError)
