"""Content inventory exception hierarchy.

All project-specific exceptions inherit from InventoryError, so the CLI can
report any fatal condition with a single catch clause.
"""


class InventoryError(Exception):
    """Base exception for all content inventory errors."""

    def __init__(self, message: str = "", *, retryable: bool = False) -> None:
        super().__init__(message)
        self.retryable = retryable
        self.context: dict[str, str] = {}


class ConfigError(InventoryError):
    """Invalid or missing configuration."""


class ResolutionError(InventoryError):
    """A calendar date could not be mapped onto a commit."""


class NoCommitFoundError(ResolutionError):
    """No commit exists on the reference at or before the cutoff instant."""


class MaterializationError(InventoryError):
    """A stage of building a snapshot from the working copy failed."""


class CloneError(MaterializationError):
    """The source repository could not be cloned."""


class CheckoutError(MaterializationError):
    """Fetching, resolving or switching the working copy failed."""


class DependencyInstallError(MaterializationError):
    """Installing the checked-out commit's dependencies failed."""


class ExtractionError(MaterializationError):
    """The inventory extraction process failed or produced unusable output."""

    def __init__(self, message: str = "", *, stderr: str = "") -> None:
        super().__init__(message)
        self.stderr = stderr


class DuplicateDetectedError(InventoryError):
    """A snapshot for this day or commit is already in the registry."""

    def __init__(
        self,
        *,
        date_stamp: str,
        short_hash: str,
        version: str,
        published_key: str,
    ) -> None:
        super().__init__(
            f"{date_stamp} or {short_hash} is already published as {published_key} "
            f"(candidate version {version})"
        )
        self.date_stamp = date_stamp
        self.short_hash = short_hash
        self.version = version
        self.published_key = published_key


class LedgerQueryError(InventoryError):
    """Querying the registry for published versions failed."""

    def __init__(self, message: str = "", *, retryable: bool = True) -> None:
        super().__init__(message, retryable=retryable)


class PackageError(InventoryError):
    """The built package directory is missing or malformed."""


class PublishError(InventoryError):
    """Publishing the package to the registry failed."""
