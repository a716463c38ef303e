"""Application configuration contract."""

from datetime import date
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from content_inventory.errors import ConfigError


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    inventory_repo: str = Field(alias="INVENTORY_REPO", default="mdn/content")
    inventory_dest_path: str = Field(alias="INVENTORY_DEST_PATH", default=".mdn-content")
    inventory_ref: str = Field(alias="INVENTORY_REF", default="origin/main")
    inventory_redirects_path: str = Field(
        alias="INVENTORY_REDIRECTS_PATH", default="files/en-us/_redirects.txt"
    )

    package_name: str = Field(alias="PACKAGE_NAME", default="@mdn/content-inventory")
    package_dir: str = Field(alias="PACKAGE_DIR", default="package")
    package_version_base: str = Field(alias="PACKAGE_VERSION_BASE", default="0.2.0")

    historic_start_date: date = Field(alias="HISTORIC_START_DATE", default=date(2023, 10, 1))

    log_level: str = Field(alias="LOG_LEVEL", default="WARNING")
    log_json: bool | None = Field(alias="LOG_JSON", default=None)


def validate_settings(settings: Settings) -> None:
    missing: list[str] = []
    required_non_empty = {
        "INVENTORY_REPO": settings.inventory_repo,
        "INVENTORY_DEST_PATH": settings.inventory_dest_path,
        "INVENTORY_REF": settings.inventory_ref,
        "INVENTORY_REDIRECTS_PATH": settings.inventory_redirects_path,
        "PACKAGE_NAME": settings.package_name,
        "PACKAGE_DIR": settings.package_dir,
        "PACKAGE_VERSION_BASE": settings.package_version_base,
    }
    for key, value in required_non_empty.items():
        if not str(value).strip():
            missing.append(key)
    if missing:
        raise ConfigError(f"Missing required settings: {', '.join(sorted(missing))}")

    # The working copy is removed recursively on clean-up.
    if settings.inventory_dest_path.strip() in {".", "/", "~"}:
        raise ConfigError(
            f"INVENTORY_DEST_PATH must not be {settings.inventory_dest_path!r}"
        )
    if "/" not in settings.inventory_repo:
        raise ConfigError("INVENTORY_REPO must be in the form 'owner/repo'")


@lru_cache
def get_settings() -> Settings:
    return Settings()
