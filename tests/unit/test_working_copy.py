from __future__ import annotations

import subprocess
from pathlib import Path
from unittest.mock import patch

import pytest

from content_inventory.errors import CheckoutError, CloneError, ResolutionError
from content_inventory.snapshot.working_copy import WorkingCopy, validate_git_ref


def _make_repo(tmp_path: Path) -> Path:
    repo = tmp_path / "repo"
    repo.mkdir()
    subprocess.run(["git", "-C", str(repo), "init"], check=True, capture_output=True, text=True)
    subprocess.run(
        ["git", "-C", str(repo), "config", "user.email", "test@example.com"],
        check=True,
        capture_output=True,
        text=True,
    )
    subprocess.run(
        ["git", "-C", str(repo), "config", "user.name", "Test User"],
        check=True,
        capture_output=True,
        text=True,
    )
    for content in ("one\n", "two\n"):
        (repo / "hello.txt").write_text(content)
        subprocess.run(
            ["git", "-C", str(repo), "add", "."], check=True, capture_output=True, text=True
        )
        subprocess.run(
            ["git", "-C", str(repo), "commit", "-m", content.strip()],
            check=True,
            capture_output=True,
            text=True,
        )
    return repo


@pytest.mark.parametrize("ref", ["main", "origin/main", "HEAD~2", "v1.2.3", "deadbeef"])
def test_validate_git_ref_accepts_refs(ref: str) -> None:
    validate_git_ref(ref)


@pytest.mark.parametrize("ref", ["", "--output=/tmp/x", "main; rm -rf /", "a b"])
def test_validate_git_ref_rejects_unsafe(ref: str) -> None:
    with pytest.raises(ResolutionError):
        validate_git_ref(ref)


def test_is_repository(tmp_path: Path) -> None:
    assert WorkingCopy(tmp_path / "missing").is_repository() is False
    (tmp_path / "plain").mkdir()
    assert WorkingCopy(tmp_path / "plain").is_repository() is False
    assert WorkingCopy(_make_repo(tmp_path)).is_repository() is True


def test_switch_detached_discards_local_changes(tmp_path: Path) -> None:
    working_copy = WorkingCopy(_make_repo(tmp_path))
    first = working_copy.rev_parse("HEAD~1")
    (working_copy.path / "hello.txt").write_text("local edit\n")

    working_copy.switch_detached(first)

    assert working_copy.rev_parse("HEAD") == first
    assert working_copy.read_text("hello.txt") == "one\n"
    assert first.startswith(working_copy.rev_parse("HEAD", short=True))


def test_author_instant_is_utc(tmp_path: Path) -> None:
    working_copy = WorkingCopy(_make_repo(tmp_path))
    instant = working_copy.author_instant()
    assert instant.utcoffset() is not None
    assert instant.utcoffset().total_seconds() == 0


def test_read_text_missing_file(tmp_path: Path) -> None:
    working_copy = WorkingCopy(_make_repo(tmp_path))
    with pytest.raises(CheckoutError, match="nope.txt"):
        working_copy.read_text("nope.txt")


def test_fetch_without_remote_fails(tmp_path: Path) -> None:
    working_copy = WorkingCopy(_make_repo(tmp_path))
    with pytest.raises(CheckoutError, match="git fetch origin"):
        working_copy.fetch()


def test_remove_is_recursive_and_tolerant(tmp_path: Path) -> None:
    working_copy = WorkingCopy(_make_repo(tmp_path))
    working_copy.remove()
    assert not working_copy.path.exists()
    working_copy.remove()


def test_clone_uses_blobless_gh_clone(tmp_path: Path) -> None:
    working_copy = WorkingCopy(tmp_path / "dest")
    with patch("content_inventory.snapshot.working_copy.run_command") as mock_run:
        working_copy.clone("mdn/content")
    cmd = mock_run.call_args.args[0]
    assert cmd == [
        "gh",
        "repo",
        "clone",
        "mdn/content",
        str(tmp_path / "dest"),
        "--",
        "--filter=blob:none",
        "--quiet",
    ]
    assert mock_run.call_args.kwargs["error"] is CloneError


def test_clone_reports_missing_gh(tmp_path: Path) -> None:
    working_copy = WorkingCopy(tmp_path / "dest")
    with patch(
        "content_inventory.process.subprocess.run", side_effect=FileNotFoundError("gh")
    ):
        with pytest.raises(CloneError, match="gh executable not found"):
            working_copy.clone("mdn/content")
