from __future__ import annotations

from datetime import date
from pathlib import Path

from click.testing import CliRunner

from content_inventory.cli.main import cli
from content_inventory.config import get_settings
from content_inventory.errors import DuplicateDetectedError, NoCommitFoundError
from content_inventory.models import DayOutcome, PublishDecision
from content_inventory.release.package import PackageIdentity


def _capture_publish(monkeypatch, outcomes=None, error=None) -> list[dict[str, object]]:
    calls: list[dict[str, object]] = []

    async def _publish_historic(**kwargs):
        calls.append(kwargs)
        if error is not None:
            raise error
        return outcomes or []

    monkeypatch.setattr("content_inventory.cli.main.publish_historic", _publish_historic)
    return calls


def test_publish_historic_defaults_to_dry_run(monkeypatch) -> None:
    calls = _capture_publish(monkeypatch)
    result = CliRunner().invoke(cli, ["publish-historic"])
    assert result.exit_code == 0, result.output
    assert calls[0]["dry_run"] is True
    assert calls[0]["continue_on_duplicate"] is False
    assert calls[0]["clean_up_after"] is False


def test_publish_historic_flags(monkeypatch) -> None:
    calls = _capture_publish(monkeypatch)
    result = CliRunner().invoke(
        cli, ["publish-historic", "--no-dry-run", "--continue", "--clean-up", "-vv"]
    )
    assert result.exit_code == 0, result.output
    assert calls[0]["dry_run"] is False
    assert calls[0]["continue_on_duplicate"] is True
    assert calls[0]["clean_up_after"] is True


def test_publish_historic_short_dry_run_flag(monkeypatch) -> None:
    calls = _capture_publish(monkeypatch)
    result = CliRunner().invoke(cli, ["publish-historic", "-n"])
    assert result.exit_code == 0, result.output
    assert calls[0]["dry_run"] is True


def test_publish_historic_rejects_positional_arguments(monkeypatch) -> None:
    _capture_publish(monkeypatch)
    result = CliRunner().invoke(cli, ["publish-historic", "2023-10-01"])
    assert result.exit_code == 2


def test_publish_historic_summary(monkeypatch) -> None:
    outcomes = [
        DayOutcome(
            date(2023, 10, 1),
            "1.2.3-20231001-aaaaaaa",
            "aaaaaaa",
            PublishDecision.PUBLISH,
            True,
        ),
        DayOutcome(
            date(2023, 10, 2),
            "1.2.3-20231002-bbbbbbb",
            "bbbbbbb",
            PublishDecision.SKIP_ALREADY_PUBLISHED,
            True,
        ),
    ]
    _capture_publish(monkeypatch, outcomes=outcomes)
    result = CliRunner().invoke(cli, ["publish-historic", "--continue"])
    assert result.exit_code == 0, result.output
    assert "2 day(s): 1 dry-run, 1 skipped" in result.output


def test_publish_historic_reports_duplicate(monkeypatch) -> None:
    error = DuplicateDetectedError(
        date_stamp="20231002",
        short_hash="bbbbbbb",
        version="1.2.3-20231002-bbbbbbb",
        published_key="1.2.3-20231002-0000000",
    )
    error.context.update({"day": "2023-10-02", "commit": "bbbbbbb"})
    _capture_publish(monkeypatch, error=error)
    result = CliRunner().invoke(cli, ["publish-historic"])
    assert result.exit_code == 1
    assert "already published as 1.2.3-20231002-0000000" in result.output
    assert "day=2023-10-02 commit=bbbbbbb" in result.output


def test_publish_historic_rejects_bad_config(monkeypatch) -> None:
    calls = _capture_publish(monkeypatch)
    monkeypatch.setenv("PACKAGE_NAME", "")
    get_settings.cache_clear()
    result = CliRunner().invoke(cli, ["publish-historic"])
    assert result.exit_code == 1
    assert "PACKAGE_NAME" in result.output
    assert calls == []


def test_build_command(monkeypatch) -> None:
    calls: list[dict[str, object]] = []

    async def _build_snapshot(materializer, **kwargs):
        calls.append(kwargs)
        return PackageIdentity(version="1.2.3-20231005-abc1234", commit_short="abc1234")

    monkeypatch.setattr("content_inventory.cli.main.build_snapshot", _build_snapshot)
    result = CliRunner().invoke(cli, ["build", "--date", "2023-10-05", "--ref", "v1"])
    assert result.exit_code == 0, result.output
    assert calls[0]["target_date"] == date(2023, 10, 5)
    assert calls[0]["reference"] == "v1"
    assert "@mdn/content-inventory@1.2.3-20231005-abc1234" in result.output


def test_build_command_reports_day_on_failure(monkeypatch) -> None:
    async def _build_snapshot(materializer, **kwargs):
        raise NoCommitFoundError("Could not find commit near to 2015-01-01T00:00:01+00:00")

    monkeypatch.setattr("content_inventory.cli.main.build_snapshot", _build_snapshot)
    result = CliRunner().invoke(cli, ["build", "--date", "2015-01-01"])
    assert result.exit_code == 1
    assert "day=2015-01-01" in result.output


def test_clean_command(tmp_path: Path) -> None:
    settings = get_settings()
    package_dir = Path(settings.package_dir)
    working_copy = Path(settings.inventory_dest_path)
    package_dir.mkdir()
    working_copy.mkdir()

    result = CliRunner().invoke(cli, ["clean"])
    assert result.exit_code == 0, result.output
    assert not package_dir.exists()
    assert working_copy.exists()

    result = CliRunner().invoke(cli, ["clean", "--all"])
    assert result.exit_code == 0, result.output
    assert not working_copy.exists()
