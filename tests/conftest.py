import logging
from pathlib import Path

import pytest

from content_inventory.config import get_settings
from content_inventory.logging import clear_context


@pytest.fixture(autouse=True)
def test_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("INVENTORY_DEST_PATH", str(tmp_path / "content"))
    monkeypatch.setenv("PACKAGE_DIR", str(tmp_path / "package"))
    monkeypatch.setenv("INVENTORY_REF", "origin/main")
    monkeypatch.setenv("PACKAGE_NAME", "@mdn/content-inventory")
    monkeypatch.setenv("PACKAGE_VERSION_BASE", "1.2.3")
    monkeypatch.setenv("HISTORIC_START_DATE", "2023-10-01")
    monkeypatch.setenv("LOG_JSON", "false")
    get_settings.cache_clear()
    clear_context()
    root = logging.getLogger()
    saved_level, saved_handlers = root.level, list(root.handlers)
    yield
    root.setLevel(saved_level)
    root.handlers[:] = saved_handlers
    get_settings.cache_clear()
    clear_context()
