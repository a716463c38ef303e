"""Synchronous subprocess helper shared by the git and npm stages.

Every external tool is invoked through :func:`run_command`, which turns the
usual failure modes (non-zero exit, missing executable) into the
stage-specific :class:`~content_inventory.errors.InventoryError` subclass the
caller names, so each stage fails with its own error type.
"""

from __future__ import annotations

import logging
import os
import subprocess
import time
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path

from content_inventory.errors import InventoryError

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class CommandResult:
    command: str
    exit_code: int
    stdout: str
    stderr: str
    duration_ms: int


def non_empty_lines(text: str) -> list[str]:
    return [line for line in text.split("\n") if line.strip()]


def run_command(
    cmd: Sequence[str],
    *,
    error: type[InventoryError],
    cwd: Path | None = None,
    env: Mapping[str, str] | None = None,
    capture: bool = True,
) -> CommandResult:
    """Run *cmd* to completion and return its captured output.

    Parameters
    ----------
    cmd:
        Command list (e.g. ``["git", "rev-parse", "HEAD"]``).
    error:
        Exception class raised when the command cannot start or exits non-zero.
    cwd:
        Working directory passed to the subprocess.
    env:
        Extra environment variables layered over the current environment.
    capture:
        When False, output is discarded instead of captured.
    """
    command = " ".join(cmd)
    merged_env = {**os.environ, **env} if env else None
    logger.debug("running %s (cwd=%s)", command, cwd or ".")
    t0 = time.monotonic()
    try:
        if capture:
            proc = subprocess.run(
                list(cmd),
                cwd=cwd,
                env=merged_env,
                capture_output=True,
                text=True,
                check=False,
            )
        else:
            proc = subprocess.run(
                list(cmd),
                cwd=cwd,
                env=merged_env,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.PIPE,
                text=True,
                check=False,
            )
    except FileNotFoundError as exc:
        raise error(f"{cmd[0]} executable not found. Ensure it is installed and on PATH.") from exc
    except OSError as exc:
        raise error(f"could not start {command}: {exc}") from exc
    duration_ms = int((time.monotonic() - t0) * 1000)

    if proc.returncode != 0:
        stderr = (proc.stderr or "").strip()
        raise error(f"command failed: {command}\nExit code {proc.returncode}: {stderr}")
    return CommandResult(
        command=command,
        exit_code=proc.returncode,
        stdout=proc.stdout or "",
        stderr=proc.stderr or "",
        duration_ms=duration_ms,
    )
